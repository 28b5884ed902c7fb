"""Heuristic quality scoring for candidate completions.

Rejects candidates that are empty, too short, open with a banned transition,
mostly repeat the user's own text, or accumulate enough penalties (AI-ish
phrasing, sentence restarts, generic filler) to score below the threshold.
"""

import re
from dataclasses import dataclass
from enum import Enum

from .context import WritingContext

MIN_WORDS = 4
SHORT_WORDS = 8
LONG_WORDS = 50
REJECT_THRESHOLD = 40
NGRAM_SIZE = 4
REPETITION_RATIO = 0.4

AI_PHRASE_PENALTY = 15
RESTART_PENALTY = 20
CONTINUATION_BONUS = 10
SHORT_PENALTY = 10
LONG_PENALTY = 25
GENERIC_PENALTY = 25


class QualityReason(str, Enum):
    """Why a candidate was accepted or rejected."""

    OK = "ok"
    EMPTY = "empty"
    TOO_SHORT = "too_short"
    BANNED_PHRASE = "banned_phrase"
    REPETITION = "repetition"
    LOW_SCORE = "low_score"


@dataclass(frozen=True)
class QualityResult:
    """Outcome of validating one candidate."""

    valid: bool
    score: int
    reason: QualityReason
    detail: str | None = None

    @property
    def label(self) -> str:
        """Reason plus detail, e.g. ``banned_phrase:^in conclusion``."""
        if self.detail:
            return f"{self.reason.value}:{self.detail}"
        return self.reason.value


BANNED_OPENERS: tuple[re.Pattern[str], ...] = tuple(
    re.compile(p, re.IGNORECASE)
    for p in (
        r"^in conclusion",
        r"^in summary",
        r"^to summarize",
        r"^overall[,\s]",
        r"^it is worth noting",
        r"^it should be noted",
        r"^it is important to",
        r"^this is a complex",
        r"^there are many",
        r"^as (we|i) (can see|mentioned|discussed)",
        r"^needless to say",
        r"^at the end of the day",
        r"^when all is said and done",
        r"^last but not least",
    )
)

AI_PHRASES: tuple[re.Pattern[str], ...] = tuple(
    re.compile(p, re.IGNORECASE)
    for p in (
        r"\bcertainly\b",
        r"\babsolutely\b",
        r"\bof course\b",
        r"\bindeed\b",
        r"\bfascinating\b",
        r"\bsignificant(ly)?\b",
        r"\bcomplex issue\b",
    )
)

GENERIC_FILLER: tuple[re.Pattern[str], ...] = tuple(
    re.compile(p, re.IGNORECASE)
    for p in (
        r"this approach has proven",
        r"wide range of",
        r"real.world applications",
        r"merits (further|careful)",
        r"worth (considering|exploring)",
        r"further analysis (will|may)",
        r"extent(s)? (well )?beyond",
        r"making informed decisions",
        r"additional insights",
    )
)

_UPPERCASE_START = re.compile(r"^[A-Z]")
_CONTINUATION_START = re.compile(r"^[a-z,;—-]")


class QualityFilter:
    """Deterministic validator; holds no state between calls."""

    def validate(self, candidate: str, context: WritingContext | None = None) -> QualityResult:
        if not candidate or not candidate.strip():
            return QualityResult(valid=False, score=0, reason=QualityReason.EMPTY)

        text = candidate.strip()
        words = text.split()

        if len(words) < MIN_WORDS:
            return QualityResult(valid=False, score=10, reason=QualityReason.TOO_SHORT)

        banned = self.banned_opener(text)
        if banned is not None:
            return QualityResult(valid=False, score=15, reason=QualityReason.BANNED_PHRASE, detail=banned)

        if context is not None and self.is_repetition(text, context.full_context):
            return QualityResult(valid=False, score=20, reason=QualityReason.REPETITION)

        score = self.score(text, words, context)
        if score < REJECT_THRESHOLD:
            return QualityResult(valid=False, score=score, reason=QualityReason.LOW_SCORE)
        return QualityResult(valid=True, score=score, reason=QualityReason.OK)

    @staticmethod
    def banned_opener(text: str) -> str | None:
        """Source of the first banned opener matching `text`, if any."""
        for pattern in BANNED_OPENERS:
            if pattern.search(text):
                return pattern.pattern
        return None

    @staticmethod
    def is_repetition(text: str, full_context: str) -> bool:
        """True when more than 40% of the candidate's 4-grams already appear in the context."""
        if not full_context:
            return False
        context_lower = full_context.lower()
        words = text.lower().split()
        if len(words) < NGRAM_SIZE:
            return False

        windows = len(words) - NGRAM_SIZE + 1
        overlapping = sum(
            1 for i in range(windows) if " ".join(words[i : i + NGRAM_SIZE]) in context_lower
        )
        return overlapping / windows > REPETITION_RATIO

    @staticmethod
    def score(text: str, words: list[str], context: WritingContext | None) -> int:
        score = 100
        score -= sum(1 for p in AI_PHRASES if p.search(text)) * AI_PHRASE_PENALTY

        # Capitalised start after a mid-word fragment reads as a sentence restart.
        # Only a trailing plain space exempts it; the extractor strips active_sentence, so in
        # the pipeline the exemption never applies and every capitalised start is penalised.
        active = context.active_sentence if context is not None else ""
        if _UPPERCASE_START.match(text) and active and not active.endswith(" "):
            score -= RESTART_PENALTY

        if _CONTINUATION_START.match(text):
            score += CONTINUATION_BONUS
        if len(words) < SHORT_WORDS:
            score -= SHORT_PENALTY
        if len(words) > LONG_WORDS:
            score -= LONG_PENALTY

        score -= sum(1 for p in GENERIC_FILLER if p.search(text)) * GENERIC_PENALTY
        return max(0, min(100, score))
