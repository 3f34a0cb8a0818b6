from __future__ import annotations

import threading

"""Content-addressed translation cache (process lifetime only).

Keys are the exact source cell text (case and whitespace sensitive), values
the translated text. One instance is created per run and passed explicitly to
the CellTranslator; nothing is persisted across runs.
"""

__all__ = [
    "TranslationCache",
]


class TranslationCache:
    """Memoization of backend results keyed by source text.

    - No eviction / no size bound (bounded by distinct strings in one file)
    - A key is stored at most once: the first put wins, later puts for the
      same key are ignored and return the stored value
    - All access is serialized by a lock so worker threads can share it
    """

    def __init__(self) -> None:
        self._entries: dict[str, str] = {}
        self._lock = threading.Lock()

    def get(self, text: str) -> str | None:
        with self._lock:
            return self._entries.get(text)

    def put(self, text: str, translated: str) -> str:
        """Store `text -> translated` unless already present.

        Returns:
            The value held by the cache after the call
        """
        with self._lock:
            existing = self._entries.get(text)
            if existing is not None:
                return existing
            self._entries[text] = translated
            return translated

    def __contains__(self, text: object) -> bool:
        with self._lock:
            return text in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
