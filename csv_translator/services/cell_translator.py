from __future__ import annotations

import logging
import threading
from typing import NamedTuple

from ..logging.error_log import ErrorLogBuffer
from ..models.cell_result import CellOutcome, CellResult
from ..models.error_record import BACKEND_ERROR, EMPTY_RESPONSE, ErrorRecord
from ..models.processing_result import TranslationStats
from .backend import BackendError, TranslationBackend
from .cache import TranslationCache
from .column_policy import ColumnPolicy

logger = logging.getLogger(__name__)

"""Cell translator: decides the output value of a single cell.

Rules, first match wins:
1. empty text            -> unchanged (no cache lookup, no backend call)
2. excluded column       -> unchanged
3. cache hit             -> cached translation
4. backend call          -> first result, stored in cache
   backend error / zero results -> original text (pass-through), logged and
   recorded in the error log; nothing is cached so a later cell may retry.

The decision is split into lookup() (rules 1-3), fetch() (the backend call,
safe to run on worker threads) and settle() (cache + bookkeeping) so the row
pipeline can fan out backend calls while keeping the same semantics as
resolve().
"""

__all__ = [
    "CellTranslator",
    "Fetched",
]


class Fetched(NamedTuple):
    """Raw outcome of one backend call."""
    text: str
    translated: str | None
    error: str | None
    error_type: str | None = None


class CellTranslator:

    def __init__(
        self,
        backend: TranslationBackend,
        cache: TranslationCache | None = None,
        policy: ColumnPolicy | None = None,
        error_log: ErrorLogBuffer | None = None,
        file_name: str = "",
    ) -> None:
        self.backend = backend
        self.cache = cache if cache is not None else TranslationCache()
        self.policy = policy if policy is not None else ColumnPolicy()
        self.error_log = error_log
        self.file_name = file_name
        self.stats = TranslationStats()
        self._stats_lock = threading.Lock()

    def translate(self, text: str, column_name: str) -> str:
        """Return the output text for one cell (never raises)."""
        return self.resolve(text, column_name).text

    def resolve(self, text: str, column_name: str, row_number: int = -1) -> CellResult:
        result = self.lookup(text, column_name)
        if result is not None:
            return result
        return self.settle(self.fetch(text), column_name, row_number)

    def lookup(self, text: str, column_name: str) -> CellResult | None:
        """Apply the rules that need no backend call.

        Returns:
            CellResult for empty / excluded / cached cells, None on a miss
        """
        if text == "":
            self._count("empty")
            return CellResult(text, CellOutcome.EMPTY)
        if self.policy.is_excluded(column_name):
            self._count("excluded")
            return CellResult(text, CellOutcome.EXCLUDED)
        cached = self.cache.get(text)
        if cached is not None:
            self._count("cache_hits")
            return CellResult(cached, CellOutcome.CACHED)
        return None

    def fetch(self, text: str) -> Fetched:
        """Call the backend once for `text`. Never raises."""
        self._count("backend_calls")
        try:
            results = self.backend.translate(text)
        except BackendError as e:
            return Fetched(text, None, str(e), BACKEND_ERROR)
        except Exception as e:  # 想定外のバックエンド例外もセル単位で回復
            return Fetched(text, None, f"{type(e).__name__}: {e}", BACKEND_ERROR)
        if not results:
            return Fetched(text, None, "backend returned no translations", EMPTY_RESPONSE)
        return Fetched(text, results[0], None)

    def settle(self, fetched: Fetched, column_name: str, row_number: int = -1) -> CellResult:
        """Turn a backend outcome into the cell's result (cache + logging)."""
        if fetched.translated is not None:
            # 同一行内で同じテキストが複数セルにある場合、2件目以降はキャッシュ扱い
            cached = self.cache.get(fetched.text)
            if cached is not None:
                self._count("cache_hits")
                return CellResult(cached, CellOutcome.CACHED)
            value = self.cache.put(fetched.text, fetched.translated)
            self._count("translated")
            return CellResult(value, CellOutcome.TRANSLATED)

        self._count("failed")
        if row_number > 0:
            logger.warning(
                "Translation error for column %s (row %d): %s", column_name, row_number, fetched.error
            )
        else:
            logger.warning("Translation error for column %s: %s", column_name, fetched.error)
        if self.error_log is not None:
            self.error_log.append(
                ErrorRecord.create(
                    file=self.file_name,
                    column=column_name,
                    row=row_number,
                    error_type=fetched.error_type or BACKEND_ERROR,
                    message=fetched.error or "",
                )
            )
        return CellResult(fetched.text, CellOutcome.PASSTHROUGH, error=fetched.error)

    def _count(self, name: str) -> None:
        with self._stats_lock:
            setattr(self.stats, name, getattr(self.stats, name) + 1)
