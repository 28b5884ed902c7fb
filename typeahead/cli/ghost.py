"""Terminal rendering of the suggestion overlay as inline ghost text."""

from collections.abc import Callable

from prompt_toolkit.layout.processors import Processor, Transformation, TransformationInput
from prompt_toolkit.layout.utils import explode_text_fragments

from ..core.overlay import OverlayRenderer, OverlayState
from ..core.surface import FontMetrics, Rect

GHOST_STYLE = "class:ghost"


class TerminalOverlayRenderer(OverlayRenderer):
    """Keeps the overlay's content for the ghost-text processor and status bar.

    A terminal has no positioned nodes or fonts, so ``move_to`` and
    ``apply_font`` only record their input, and the fade completes at once.
    """

    def __init__(self, invalidate: Callable[[], None] | None = None) -> None:
        self._invalidate = invalidate
        self.state = OverlayState.HIDDEN
        self.text = ""
        self.anchor: Rect | None = None
        self.font: FontMetrics | None = None

    @property
    def ghost_text(self) -> str:
        """Text to draw after the cursor; only a visible suggestion is drawn."""
        return self.text if self.state is OverlayState.VISIBLE else ""

    def render(self, state: OverlayState, text: str) -> None:
        self.state = state
        self.text = text
        self._refresh()

    def move_to(self, anchor: Rect) -> None:
        self.anchor = anchor

    def apply_font(self, metrics: FontMetrics) -> None:
        self.font = metrics

    def fade_out(self, on_finished: Callable[[], None]) -> None:
        self.state = OverlayState.HIDDEN
        self._refresh()
        on_finished()

    def clear(self) -> None:
        self.state = OverlayState.HIDDEN
        self.text = ""
        self._refresh()

    def _refresh(self) -> None:
        if self._invalidate is not None:
            self._invalidate()


class GhostTextProcessor(Processor):
    """Inserts the suggestion, dimmed, at the cursor column of the cursor line."""

    def __init__(self, get_text: Callable[[], str]) -> None:
        self._get_text = get_text

    def apply_transformation(self, transformation_input: TransformationInput) -> Transformation:
        ti = transformation_input
        text = self._get_text()
        document = ti.document
        if not text or ti.lineno != document.cursor_position_row:
            return Transformation(ti.fragments)

        col = document.cursor_position_col
        width = len(text)
        fragments = explode_text_fragments(ti.fragments)
        fragments = [*fragments[:col], (GHOST_STYLE, text), *fragments[col:]]

        def source_to_display(i: int) -> int:
            return i if i <= col else i + width

        def display_to_source(i: int) -> int:
            if i <= col:
                return i
            return max(col, i - width)

        return Transformation(fragments, source_to_display=source_to_display, display_to_source=display_to_source)
