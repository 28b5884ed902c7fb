"""prompt_toolkit Buffer adapted as a grid TextSurface and TextInjector."""

from prompt_toolkit.buffer import Buffer
from prompt_toolkit.document import Document

from ..surfaces.grid import GridSurface, join_suggestion


class BufferSurface(GridSurface):
    """Reads text and caret from a live Buffer; content edits notify subscribers."""

    def __init__(self, buffer: Buffer, **kwargs: object) -> None:
        super().__init__(**kwargs)  # type: ignore[arg-type]
        self.buffer = buffer
        self.buffer.on_text_changed += self._on_text_changed

    @property
    def text(self) -> str:
        return self.buffer.text

    @property
    def cursor(self) -> int:
        return self.buffer.cursor_position

    def set_text(self, text: str, cursor: int | None = None) -> None:
        position = len(text) if cursor is None else self._clamp(cursor, text)
        # Buffer.on_text_changed triggers notify().
        self.buffer.set_document(Document(text, position), bypass_readonly=True)

    def move_cursor(self, offset: int) -> None:
        self.buffer.cursor_position = self._clamp(offset, self.buffer.text)

    def insert(self, text: str) -> None:
        if not text:
            return
        before = self.buffer.document.text_before_cursor
        self.buffer.insert_text(join_suggestion(before, text))

    def detach(self) -> None:
        self.buffer.on_text_changed -= self._on_text_changed

    def _on_text_changed(self, _buffer: Buffer) -> None:
        self.notify()
