from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import httpx
import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from typeahead.api.completion import router as completion_router
from typeahead.core.completion import create_completion_service
from typeahead.core.config import configure_logging, settings


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    http_client = httpx.AsyncClient()
    app.state.http_client = http_client
    app.state.completion_service = create_completion_service(settings, http_client, allow_remote=False)
    try:
        yield
    finally:
        await app.state.completion_service.close()
        await http_client.aclose()


app = FastAPI(
    title=settings.app.name,
    version=settings.app.version,
    description="Inline writing-suggestion completion server",
    lifespan=lifespan,
)

# Configure CORS based on environment
if settings.app.environment == "production":
    cors_allow_credentials = False
    cors_allow_methods = ["GET", "POST", "PUT"]
    cors_allow_headers = ["Content-Type", "Authorization", "Accept"]
    cors_max_age = 86400  # 24 hours
else:
    cors_allow_credentials = False
    cors_allow_methods = ["GET", "POST", "PUT", "OPTIONS"]
    cors_allow_headers = ["*"]
    cors_max_age = 0  # No caching in development

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.server.cors_origins,
    allow_credentials=cors_allow_credentials,
    allow_methods=cors_allow_methods,
    allow_headers=cors_allow_headers,
    max_age=cors_max_age,
)

app.include_router(completion_router)


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy"}


def run(host: str | None = None, port: int | None = None, reload: bool | None = None) -> None:
    configure_logging(settings.logging)
    uvicorn.run(
        "typeahead.main:app",
        host=host or settings.server.host,
        port=port or settings.server.port,
        reload=settings.app.debug if reload is None else reload,
        log_level=settings.logging.level,
    )


if __name__ == "__main__":
    run()
