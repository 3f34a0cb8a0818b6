from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

"""Processing result models for the CSV translator.

TranslationStats is the mutable counter set owned by one CellTranslator;
ProcessingResult is the frozen snapshot returned at the end of a run and fed
to the SUMMARY line.
"""

__all__ = [
    "TranslationStats",
    "ProcessingResult",
]


@dataclass
class TranslationStats:
    """Running per-cell counters (one instance per run)."""
    backend_calls: int = 0  # 実際にバックエンドへ送った回数
    translated: int = 0  # backend result stored in cache
    cache_hits: int = 0
    empty: int = 0
    excluded: int = 0
    failed: int = 0  # pass-through fallbacks (error or zero results)

    @property
    def total_cells(self) -> int:
        return self.translated + self.cache_hits + self.empty + self.excluded + self.failed

    def snapshot(self) -> TranslationStats:
        return TranslationStats(
            backend_calls=self.backend_calls,
            translated=self.translated,
            cache_hits=self.cache_hits,
            empty=self.empty,
            excluded=self.excluded,
            failed=self.failed,
        )


@dataclass(frozen=True)
class ProcessingResult:
    """Aggregated outcome of translating one CSV file."""
    input_path: Path
    output_path: Path
    total_rows: int  # data rows written (header excluded)
    stats: TranslationStats
    start_time: datetime
    end_time: datetime
    elapsed_seconds: float
    throughput_rows_per_sec: float
    cancelled: bool = False  # interrupted; rows written so far are kept
    error_log_path: Path | None = None

    @property
    def failed_cells(self) -> int:
        return self.stats.failed
