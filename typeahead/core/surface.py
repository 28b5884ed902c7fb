"""Geometry types and the interfaces a host text surface exposes to the pipeline."""

from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass
from typing import Protocol

ChangeCallback = Callable[[], None]
Unsubscribe = Callable[[], None]

NBSP = "\u00a0"


@dataclass(frozen=True)
class Rect:
    """Axis-aligned bounding box in surface coordinates (y grows downwards)."""

    left: float
    top: float
    width: float
    height: float

    @property
    def right(self) -> float:
        return self.left + self.width

    @property
    def bottom(self) -> float:
        return self.top + self.height

    @property
    def center_y(self) -> float:
        return self.top + self.height / 2


@dataclass(frozen=True)
class TextSpan:
    """A run of rendered text with its bounding box."""

    text: str
    rect: Rect


@dataclass(frozen=True)
class TextLine:
    """One rendered line of a paragraph."""

    rect: Rect
    spans: tuple[TextSpan, ...] = ()

    @property
    def text(self) -> str:
        return "".join(span.text for span in self.spans)


@dataclass(frozen=True)
class ParagraphBox:
    """A paragraph container and its rendered lines."""

    rect: Rect
    lines: tuple[TextLine, ...] = ()

    @property
    def text(self) -> str:
        return "".join(line.text for line in self.lines)


@dataclass(frozen=True)
class SurfaceLayout:
    """Snapshot of the rendered paragraphs and the cursor indicator."""

    paragraphs: tuple[ParagraphBox, ...]
    cursor: Rect | None


@dataclass(frozen=True)
class FontMetrics:
    """Typography at the cursor, mirrored by the overlay so ghost text blends in."""

    family: str
    size: float
    weight: str = "normal"
    line_height: float | None = None
    letter_spacing: float = 0.0


class TextSurface(ABC):
    """A geometrically laid-out editing surface."""

    @abstractmethod
    def layout(self) -> SurfaceLayout:
        """Return the current paragraph geometry and cursor position."""
        pass

    @abstractmethod
    def cursor_rect(self) -> Rect | None:
        """Return the cursor indicator's bounding box, or None when not locatable."""
        pass

    @abstractmethod
    def font_metrics(self) -> FontMetrics | None:
        """Return the typography at the cursor, if known."""
        pass

    @abstractmethod
    def subscribe(self, callback: ChangeCallback) -> Unsubscribe:
        """Call `callback` whenever the rendered content changes.

        Returns a callable that removes the subscription.
        """
        pass


class TextInjector(Protocol):
    """Receives accepted suggestion text. Best effort; no success signal."""

    def insert(self, text: str) -> None: ...
