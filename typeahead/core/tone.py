"""Keyword and sentence-length heuristics for classifying writing register."""

import re
from enum import Enum


class Tone(str, Enum):
    """Coarse stylistic register used to steer prompt construction."""

    ACADEMIC = "academic"
    FORMAL = "formal"
    PERSUASIVE = "persuasive"
    CASUAL = "casual"
    NARRATIVE = "narrative"


LONG_SENTENCE_WORDS = 20

# Dict order doubles as the tie-break order.
TONE_LEXICONS: dict[Tone, tuple[str, ...]] = {
    Tone.ACADEMIC: (
        "therefore", "thus", "furthermore", "however", "methodology", "analysis", "hypothesis",
        "whereas", "albeit", "indeed", "notably", "evidence", "demonstrates", "suggests",
        "research", "study", "findings",
    ),
    Tone.FORMAL: (
        "regarding", "pursuant", "hereby", "aforementioned", "notwithstanding", "henceforth",
        "accordingly", "consequently", "nevertheless",
    ),
    Tone.PERSUASIVE: (
        "must", "should", "crucial", "essential", "imperative", "undeniably", "clearly",
        "obviously", "argue", "believe", "position",
    ),
    Tone.CASUAL: (
        "i'm", "you're", "we're", "it's", "don't", "can't", "won't", "basically", "actually",
        "pretty much", "kind of", "sort of", "really",
    ),
    Tone.NARRATIVE: (
        "then", "suddenly", "walked", "said", "felt", "saw", "looked", "turned", "seemed",
        "realized", "knew", "thought",
    ),
}

TONE_WEIGHTS: dict[Tone, int] = {
    Tone.ACADEMIC: 2,
    Tone.FORMAL: 2,
    Tone.PERSUASIVE: 1,
    Tone.CASUAL: 1,
    Tone.NARRATIVE: 1,
}

_SENTENCE_TERMINAL = re.compile(r"[.!?]")


def score_tones(text: str) -> dict[Tone, int]:
    """Score every tone category for `text`."""
    lower = text.lower()
    scores = {
        tone: sum(1 for signal in signals if signal in lower) * TONE_WEIGHTS[tone]
        for tone, signals in TONE_LEXICONS.items()
    }

    word_count = len(text.split())
    avg_sentence_len = word_count / max(1, len(_SENTENCE_TERMINAL.findall(text)))
    if avg_sentence_len > LONG_SENTENCE_WORDS:
        scores[Tone.ACADEMIC] += 2
        scores[Tone.FORMAL] += 1
    return scores


def classify_tone(text: str) -> Tone:
    """Return the best-scoring tone for `text`, defaulting to formal."""
    scores = score_tones(text)
    best = max(scores, key=lambda tone: scores[tone])
    return best if scores[best] > 0 else Tone.FORMAL
