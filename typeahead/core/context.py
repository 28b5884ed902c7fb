"""Structured writing context extracted from a surface's rendered geometry.

The extractor works from bounding boxes only: it finds the paragraph holding the
cursor, walks that paragraph's lines and spans up to the cursor's x position,
and truncates the straddled span by pixel ratio. That mapping is approximate
(accurate to about one character per straddled span with proportional fonts)
and should be treated as a heuristic rather than an exact text offset.
"""

import logging
import math
import re
from dataclasses import dataclass

from .surface import NBSP, ParagraphBox, Rect, TextSurface
from .tone import Tone, classify_tone

logger = logging.getLogger("typeahead.context")

PARAGRAPH_TOLERANCE_PX = 4.0
PRECEDING_PARAGRAPHS = 4
RECENT_PARAGRAPHS = 3
MIN_RECENT_PARAGRAPH_CHARS = 10
MIN_CONTEXT_CHARS = 10
SUMMARY_PARAGRAPH_MIN_CHARS = 30
SUMMARY_MAX_CHARS = 200
ACTIVE_SENTENCE_FALLBACK_CHARS = 200
ELLIPSIS = "…"

_ACTIVE_SENTENCE = re.compile(r"(?:[.!?]\s+|\n)([^\n.!?]{0,300})$")


@dataclass(frozen=True)
class WritingContext:
    """Everything the prompt and quality filter need to know about one trigger."""

    active_sentence: str
    recent_paragraphs: tuple[str, ...] = ()
    document_summary: str = ""
    detected_tone: Tone = Tone.FORMAL
    full_context: str = ""


def normalize_text(text: str) -> str:
    return text.replace(NBSP, " ")


def round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


class ContextExtractor:
    """Builds a WritingContext from the text before the cursor."""

    def extract(self, surface: TextSurface) -> WritingContext | None:
        """Return the context at the cursor, or None when there is nothing to complete."""
        layout = surface.layout()
        cursor = layout.cursor
        if cursor is None:
            logger.debug("No cursor indicator on surface")
            return None

        boxes = layout.paragraphs
        texts = [normalize_text(box.text).strip() for box in boxes]
        if not any(texts):
            logger.debug("Surface has no paragraph text")
            return None

        cursor_idx = self.locate_paragraph(boxes, cursor)
        partial = normalize_text(self.text_before_cursor(boxes[cursor_idx], cursor))

        # Blank paragraphs do not take up window slots.
        prior = [t for t in texts[:cursor_idx] if t]
        before_cursor = " ".join([*prior[-PRECEDING_PARAGRAPHS:], partial]).strip()
        if len(before_cursor) < MIN_CONTEXT_CHARS:
            logger.debug("Context before cursor too short (%d chars)", len(before_cursor))
            return None

        active_sentence = self.active_sentence(before_cursor)
        if not active_sentence:
            return None

        return WritingContext(
            active_sentence=active_sentence,
            recent_paragraphs=self.recent_paragraphs(prior, partial.strip()),
            document_summary=self.document_summary(texts),
            detected_tone=classify_tone(" ".join(t for t in texts if t)),
            full_context=before_cursor,
        )

    @staticmethod
    def locate_paragraph(boxes: tuple[ParagraphBox, ...], cursor: Rect) -> int:
        """Index of the paragraph whose vertical span holds the cursor; last paragraph otherwise."""
        for idx, box in enumerate(boxes):
            r = box.rect
            if r.top - PARAGRAPH_TOLERANCE_PX <= cursor.top <= r.bottom + PARAGRAPH_TOLERANCE_PX:
                return idx
        return len(boxes) - 1

    @staticmethod
    def text_before_cursor(box: ParagraphBox, cursor: Rect) -> str:
        """Text of `box` up to the cursor's horizontal position on the cursor's line."""
        cursor_x = cursor.left
        parts: list[str] = []
        for line in box.lines:
            if line.rect.bottom <= cursor.center_y:
                parts.append(line.text)
                continue

            if not line.spans:
                parts.append(line.text)
                break

            for span in line.spans:
                r = span.rect
                if r.right <= cursor_x:
                    parts.append(span.text)
                elif r.left < cursor_x:
                    ratio = (cursor_x - r.left) / (r.width or 1)
                    parts.append(span.text[: round_half_up(len(span.text) * ratio)])
                    break
                else:
                    break
            break
        return "".join(parts)

    @staticmethod
    def active_sentence(text: str) -> str:
        """The trailing, not yet terminated sentence fragment of `text`."""
        match = _ACTIVE_SENTENCE.search(text)
        if match:
            return match.group(1).strip()
        return text[-ACTIVE_SENTENCE_FALLBACK_CHARS:].strip()

    @staticmethod
    def recent_paragraphs(prior: list[str], partial: str) -> tuple[str, ...]:
        """Trailing non-empty paragraphs before the cursor, then the partial cursor paragraph."""
        window = prior[-(RECENT_PARAGRAPHS - 1) :]
        history = [t for t in window if len(t) > MIN_RECENT_PARAGRAPH_CHARS]
        if partial:
            history.append(partial)
        return tuple(history)

    @staticmethod
    def document_summary(texts: list[str]) -> str:
        meaningful = [t for t in texts if len(t) > SUMMARY_PARAGRAPH_MIN_CHARS]
        sample = " ".join(meaningful[:2])
        if len(sample) > SUMMARY_MAX_CHARS:
            return sample[:SUMMARY_MAX_CHARS] + ELLIPSIS
        return sample
