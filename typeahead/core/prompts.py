"""Tone-aware prompt construction for sentence continuation."""

from .context import WritingContext
from .tone import Tone

SECTION_SEPARATOR = "\n\n---\n\n"
MIN_SUMMARY_CHARS = 20
RETRY_NOTE = "\n\n(Previous attempt was rejected. Try a more specific, natural continuation.)"

TONE_GUIDANCE: dict[Tone, str] = {
    Tone.ACADEMIC: (
        "Academic/scholarly prose. Use precise terminology, measured hedging where appropriate "
        "(but not excessive), and complex but clear sentence structure. Avoid contractions."
    ),
    Tone.FORMAL: (
        "Formal professional prose. Clear, authoritative, no contractions, structured argumentation. "
        "Vocabulary should be elevated but not obscure."
    ),
    Tone.PERSUASIVE: (
        "Persuasive writing. Active voice, confident assertions, strong verbs. "
        "Drive toward the argument's conclusion naturally."
    ),
    Tone.CASUAL: (
        "Conversational, natural voice. Contractions are fine. Short-to-medium sentences. "
        "Sound like a thoughtful person talking, not a document."
    ),
    Tone.NARRATIVE: (
        "Narrative/storytelling prose. Vivid, sensory detail. Vary sentence rhythm. "
        "Move the story or description forward with momentum."
    ),
}

SYSTEM_TEMPLATE = """You are an expert writing assistant embedded in a text editor. \
Your only job is to complete the user's current sentence naturally and seamlessly.

WRITING STYLE TARGET: {guidance}

STRICT OUTPUT RULES:
- Return ONLY the completion text, nothing else
- Do NOT repeat any text that already exists
- Do NOT add a preamble, explanation, or quotation marks
- Continue EXACTLY where the sentence fragment ends
- Match the author's vocabulary, sentence rhythm, and complexity precisely
- Maximum 1-2 sentences. Stop at a natural pause point.
- End with a period, comma, or naturally; never mid-word

FORBIDDEN PATTERNS (never use these):
- "In conclusion", "Overall", "In summary", "To summarize"
- "It is worth noting", "It should be noted", "It is important to"
- "Furthermore", "Moreover", "Additionally" as sentence openers
- "This is a complex issue", "There are many factors"
- Passive voice constructions unless the existing text uses them
- Generic academic hedging: "may", "might", "could potentially"
- AI-sounding phrases: "certainly", "absolutely", "of course", "indeed"
- Restating what was just said in different words

IF YOU CANNOT GENERATE A NATURAL, HIGH-QUALITY CONTINUATION: return an empty string. \
Never produce filler."""


class PromptBuilder:
    """Turns a WritingContext into a system/user prompt pair."""

    def build_system(self, tone: Tone | str) -> str:
        try:
            guidance = TONE_GUIDANCE[Tone(tone)]
        except ValueError:
            guidance = TONE_GUIDANCE[Tone.FORMAL]
        return SYSTEM_TEMPLATE.format(guidance=guidance)

    def build_user(self, context: WritingContext) -> str:
        parts: list[str] = []

        if len(context.document_summary) > MIN_SUMMARY_CHARS:
            parts.append(f"DOCUMENT CONTEXT:\n{context.document_summary}")

        # The last recent paragraph is the one being written.
        if len(context.recent_paragraphs) > 1:
            history = "\n\n".join(context.recent_paragraphs[:-1])
            if history.strip():
                parts.append(f"RECENT PARAGRAPHS:\n{history}")

        parts.append(
            "COMPLETE THIS SENTENCE (do not repeat it, only add what comes next):\n" + context.active_sentence
        )
        return SECTION_SEPARATOR.join(parts)

    def build_retry(self, user_prompt: str) -> str:
        """User prompt for the second attempt after a quality rejection."""
        return user_prompt + RETRY_NOTE
