"""Error hierarchy shared by the suggestion pipeline and completion services."""

__all__ = [
    "DISABLED_MESSAGE",
    "CompletionDisabledError",
    "CompletionServiceError",
    "TypeaheadError",
    "is_disabled_error",
]

DISABLED_MESSAGE = "disabled"


class TypeaheadError(Exception):
    """Base error for all typeahead failures."""


class CompletionServiceError(TypeaheadError):
    """Raised when the completion service or its provider fails."""


class CompletionDisabledError(CompletionServiceError):
    """Raised when completions are switched off; an expected state, not a fault."""

    def __init__(self, message: str = DISABLED_MESSAGE) -> None:
        super().__init__(message)


def is_disabled_error(exc: BaseException) -> bool:
    """Return True when `exc` signals user-configured suppression."""
    return isinstance(exc, CompletionDisabledError) or str(exc) == DISABLED_MESSAGE
