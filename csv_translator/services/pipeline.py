from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Iterable, Iterator, Sequence
from concurrent.futures import ThreadPoolExecutor

from ..models.cell_result import CellResult
from .cell_translator import CellTranslator

logger = logging.getLogger(__name__)

"""Row pipeline: streams header-labeled rows through the cell translator.

- One row in, one row out, same order, same width as the header
- Lazy: only the current row (plus the cache) is held in memory
- Fail-fast on structural corruption: a row whose field count differs from
  the header raises MalformedRowError (1-based data row number) and nothing
  is emitted for that row or any later row
- Optional worker pool (max_workers > 1): distinct cache misses of a row are
  fetched concurrently, at most max_workers calls in flight, results placed
  back by column position. Rows themselves stay strictly sequential.
"""

__all__ = [
    "MalformedRowError",
    "RowPipeline",
]


class MalformedRowError(Exception):
    """Raised when a data row does not have exactly one field per header column."""

    def __init__(self, row_number: int, expected: int, actual: int) -> None:
        self.row_number = row_number
        self.expected = expected
        self.actual = actual
        super().__init__(f"row {row_number}: expected {expected} fields, got {actual}")


class RowPipeline:
    """Sequential, non-reentrant row transformer (idle -> streaming -> done)."""

    def __init__(
        self,
        translator: CellTranslator,
        *,
        max_workers: int = 1,
        stop_event: threading.Event | None = None,
        on_row: Callable[[int], None] | None = None,
    ) -> None:
        if max_workers < 1:
            raise ValueError(f"max_workers must be >= 1 (got {max_workers})")
        self.translator = translator
        self.max_workers = max_workers
        self.stop_event = stop_event
        self.on_row = on_row  # called with the row number before a row is translated
        self.state = "idle"
        self.rows_emitted = 0
        self.cancelled = False

    def process(self, header: Sequence[str], rows: Iterable[Sequence[str]]) -> Iterator[list[str]]:
        """Return a lazy iterator of translated rows.

        Raises:
            RuntimeError: if this pipeline instance was already used
        """
        if self.state != "idle":
            raise RuntimeError(f"pipeline already used (state={self.state})")
        self.state = "streaming"
        return self._stream(list(header), rows)

    def _stream(self, header: list[str], rows: Iterable[Sequence[str]]) -> Iterator[list[str]]:
        width = len(header)
        executor = ThreadPoolExecutor(max_workers=self.max_workers) if self.max_workers > 1 else None
        try:
            for row_number, row in enumerate(rows, start=1):
                if self.stop_event is not None and self.stop_event.is_set():
                    logger.info("cancellation requested; stopping before row %d", row_number)
                    self.cancelled = True
                    break
                if len(row) != width:
                    raise MalformedRowError(row_number, width, len(row))
                if self.on_row is not None:
                    self.on_row(row_number)
                if executor is None:
                    out = [
                        self.translator.resolve(cell, column, row_number).text
                        for cell, column in zip(row, header)
                    ]
                else:
                    out = self._translate_row_parallel(executor, header, row, row_number)
                self.rows_emitted += 1
                yield out
        finally:
            if executor is not None:
                # 割り込み時は未着手の呼び出しを破棄
                executor.shutdown(wait=True, cancel_futures=True)
            self.state = "done"

    def _translate_row_parallel(
        self,
        executor: ThreadPoolExecutor,
        header: list[str],
        row: Sequence[str],
        row_number: int,
    ) -> list[str]:
        t = self.translator
        results: list[CellResult | None] = [t.lookup(cell, column) for cell, column in zip(row, header)]
        # distinct misses, first-seen order
        misses = list(dict.fromkeys(cell for cell, r in zip(row, results) if r is None))
        fetched = dict(zip(misses, executor.map(t.fetch, misses)))
        out: list[str] = []
        for i, r in enumerate(results):
            if r is None:
                r = t.settle(fetched[row[i]], header[i], row_number)
            out.append(r.text)
        return out
