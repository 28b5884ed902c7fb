"""Monospace text surface with computed geometry.

Lays plain text out on a fixed character grid: paragraphs are separated by
``\\n``, word-wrapped to ``columns`` cells, and every word (with its trailing
whitespace) becomes one span. Paragraph boxes are separated by vertical
spacing wider than the extractor's paragraph tolerance, so a cursor on the
first line of a paragraph never resolves to the one above it.
"""

import logging
import re
from dataclasses import dataclass

from ..core.surface import (
    ChangeCallback,
    FontMetrics,
    ParagraphBox,
    Rect,
    SurfaceLayout,
    TextLine,
    TextSpan,
    TextSurface,
    Unsubscribe,
)

logger = logging.getLogger("typeahead.surfaces.grid")

DEFAULT_COLUMNS = 80
DEFAULT_CELL_WIDTH = 8.0
DEFAULT_LINE_HEIGHT = 18.0
DEFAULT_PARAGRAPH_SPACING = 10.0
CURSOR_WIDTH = 2.0
DEFAULT_FONT = FontMetrics(family="monospace", size=14.0, line_height=DEFAULT_LINE_HEIGHT)

_TOKEN = re.compile(r"\S+\s*|\s+")
_NO_SPACE_AFTER = "([{\"'/-"
_NO_SPACE_BEFORE = ",.;:!?)]}\"'-"


@dataclass(frozen=True)
class WrappedLine:
    """One visual line: its [start, end) offsets in the paragraph and its tokens."""

    start: int
    end: int
    tokens: tuple[tuple[int, str], ...]


def wrap_paragraph(text: str, columns: int) -> list[WrappedLine]:
    """Greedy word wrap. Whitespace may overhang; words longer than a line are split."""
    columns = max(1, columns)
    lines: list[WrappedLine] = []
    current: list[tuple[int, str]] = []
    line_start = 0
    width = 0

    def flush(end: int) -> None:
        nonlocal current, line_start, width
        lines.append(WrappedLine(line_start, end, tuple(current)))
        current = []
        line_start = end
        width = 0

    for match in _TOKEN.finditer(text):
        offset, token = match.start(), match.group()
        visible = len(token.rstrip())
        if current and width + visible > columns:
            flush(offset)
        while visible > columns:
            current.append((offset, token[:columns]))
            flush(offset + columns)
            offset += columns
            token = token[columns:]
            visible -= columns
        if token:
            current.append((offset, token))
            width += len(token)

    if current or not lines:
        lines.append(WrappedLine(line_start, len(text), tuple(current)))
    return lines


def join_suggestion(before: str, text: str) -> str:
    """Prefix `text` with a space unless it attaches to the preceding character.

    Suggestions arrive with leading whitespace stripped, so word boundaries
    are restored here.
    """
    if not text or not before or before[-1].isspace() or text[0].isspace():
        return text
    if before[-1] in _NO_SPACE_AFTER or text[0] in _NO_SPACE_BEFORE:
        return text
    return " " + text


class GridSurface(TextSurface):
    """In-memory editable text laid out on a monospace grid.

    Also acts as a TextInjector: ``insert()`` writes at the cursor and moves it.
    """

    def __init__(
        self,
        text: str = "",
        cursor: int | None = None,
        *,
        columns: int = DEFAULT_COLUMNS,
        cell_width: float = DEFAULT_CELL_WIDTH,
        line_height: float = DEFAULT_LINE_HEIGHT,
        paragraph_spacing: float = DEFAULT_PARAGRAPH_SPACING,
        font: FontMetrics | None = DEFAULT_FONT,
    ) -> None:
        self._text = text
        self._cursor = len(text) if cursor is None else self._clamp(cursor, text)
        self.columns = columns
        self.cell_width = cell_width
        self.line_height = line_height
        self.paragraph_spacing = paragraph_spacing
        self.font = font
        self._subscribers: list[ChangeCallback] = []

    # -- Content ---------------------------------------------------------

    @property
    def text(self) -> str:
        return self._text

    @property
    def cursor(self) -> int:
        return self._cursor

    def set_text(self, text: str, cursor: int | None = None) -> None:
        self._text = text
        self._cursor = len(text) if cursor is None else self._clamp(cursor, text)
        self.notify()

    def move_cursor(self, offset: int) -> None:
        """Move the caret without changing content. Subscribers are not notified."""
        self._cursor = self._clamp(offset, self.text)

    def insert(self, text: str) -> None:
        if not text:
            return
        before = self.text[: self.cursor]
        piece = join_suggestion(before, text)
        self.set_text(before + piece + self.text[self.cursor :], self.cursor + len(piece))

    # -- TextSurface -----------------------------------------------------

    def subscribe(self, callback: ChangeCallback) -> Unsubscribe:
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def notify(self) -> None:
        for callback in list(self._subscribers):
            try:
                callback()
            except Exception:
                logger.exception("Surface change subscriber failed")

    def font_metrics(self) -> FontMetrics | None:
        return self.font

    def cursor_rect(self) -> Rect | None:
        return self.layout().cursor

    def layout(self) -> SurfaceLayout:
        text, cursor = self.text, self.cursor
        para_idx = text.count("\n", 0, cursor)
        para_offset = cursor - (text.rfind("\n", 0, cursor) + 1)

        boxes: list[ParagraphBox] = []
        cursor_rect: Rect | None = None
        top = 0.0
        for idx, paragraph in enumerate(text.split("\n")):
            wrapped = wrap_paragraph(paragraph, self.columns)
            lines: list[TextLine] = []
            for row, line in enumerate(wrapped):
                y = top + row * self.line_height
                lines.append(self._build_line(line, y))
                if idx == para_idx and cursor_rect is None and self._holds_cursor(wrapped, row, para_offset):
                    x = (para_offset - line.start) * self.cell_width
                    cursor_rect = Rect(x, y, CURSOR_WIDTH, self.line_height)
            height = len(wrapped) * self.line_height
            boxes.append(ParagraphBox(Rect(0.0, top, self.columns * self.cell_width, height), tuple(lines)))
            top += height + self.paragraph_spacing

        return SurfaceLayout(paragraphs=tuple(boxes), cursor=cursor_rect)

    # -- Internals -------------------------------------------------------

    def _build_line(self, line: WrappedLine, y: float) -> TextLine:
        spans = tuple(
            TextSpan(
                token,
                Rect((offset - line.start) * self.cell_width, y, len(token) * self.cell_width, self.line_height),
            )
            for offset, token in line.tokens
        )
        width = (line.end - line.start) * self.cell_width
        return TextLine(Rect(0.0, y, width, self.line_height), spans)

    @staticmethod
    def _holds_cursor(wrapped: list[WrappedLine], row: int, offset: int) -> bool:
        # A caret on a wrap boundary belongs to the following line.
        line = wrapped[row]
        if row == len(wrapped) - 1:
            return offset >= line.start
        return line.start <= offset < line.end

    @staticmethod
    def _clamp(offset: int, text: str) -> int:
        return max(0, min(offset, len(text)))
