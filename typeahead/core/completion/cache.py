"""In-memory LRU cache of completions keyed by prompt."""

import hashlib
from collections import OrderedDict

DEFAULT_MAX_ENTRIES = 80
DEFAULT_KEY_CHARS = 180


class CompletionCache:
    """Least-recently-used map from prompt key to completion text.

    Keys hash the full system prompt together with only the tail of the user
    prompt, so edits far above the cursor still hit the cache.
    """

    def __init__(self, max_entries: int = DEFAULT_MAX_ENTRIES, key_chars: int = DEFAULT_KEY_CHARS) -> None:
        if max_entries < 1:
            raise ValueError("max_entries must be at least 1")
        self.max_entries = max_entries
        self.key_chars = key_chars
        self._entries: OrderedDict[str, str] = OrderedDict()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def key(self, system_prompt: str, user_prompt: str) -> str:
        tail = user_prompt[-self.key_chars :] if self.key_chars > 0 else ""
        return hashlib.sha256(f"{system_prompt}|{tail}".encode()).hexdigest()

    def get(self, key: str) -> str | None:
        if key not in self._entries:
            return None
        self._entries.move_to_end(key)
        return self._entries[key]

    def put(self, key: str, text: str) -> None:
        if not text:
            return
        if key in self._entries:
            self._entries.move_to_end(key)
        elif len(self._entries) >= self.max_entries:
            self._entries.popitem(last=False)
        self._entries[key] = text

    def clear(self) -> None:
        self._entries.clear()
