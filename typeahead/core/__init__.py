# Core suggestion pipeline for Typeahead

from .context import ContextExtractor, WritingContext
from .debounce import Debouncer
from .errors import CompletionDisabledError, CompletionServiceError, TypeaheadError
from .overlay import OverlayRenderer, OverlayState, SuggestionOverlay
from .pipeline import PipelineState, SuggestionPipeline
from .prompts import PromptBuilder
from .quality import QualityFilter, QualityReason, QualityResult
from .surface import (
    FontMetrics,
    ParagraphBox,
    Rect,
    SurfaceLayout,
    TextInjector,
    TextLine,
    TextSpan,
    TextSurface,
)
from .tone import Tone, classify_tone

__all__ = [
    "CompletionDisabledError",
    "CompletionServiceError",
    "ContextExtractor",
    "Debouncer",
    "FontMetrics",
    "OverlayRenderer",
    "OverlayState",
    "ParagraphBox",
    "PipelineState",
    "PromptBuilder",
    "QualityFilter",
    "QualityReason",
    "QualityResult",
    "Rect",
    "SuggestionOverlay",
    "SuggestionPipeline",
    "SurfaceLayout",
    "TextInjector",
    "TextLine",
    "TextSpan",
    "TextSurface",
    "Tone",
    "TypeaheadError",
    "WritingContext",
    "classify_tone",
]
