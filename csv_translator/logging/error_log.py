from __future__ import annotations

import threading
from datetime import UTC, datetime
from pathlib import Path

from csv_translator.models.error_record import ErrorRecord

"""Error log buffering for recovered per-cell translation failures.

- JSON Lines with a fixed schema (see ErrorRecord)
- One file per run: `logs/errors-YYYYMMDD-HHMMSS.log` (UTC), created lazily
- Records are buffered in memory and written on flush()
"""

__all__ = [
    "ErrorRecord",
    "ErrorLogBuffer",
]

LOGS_DIR = Path("./logs")
TIMESTAMP_FMT = "%Y%m%d-%H%M%S"


class ErrorLogBuffer:
    """In-memory buffer for error records. Flush writes JSON Lines.

    append() may be called from pipeline worker threads, so the record list
    is guarded by a lock.
    """
    def __init__(self, logs_dir: Path | None = None) -> None:
        self._records: list[ErrorRecord] = []
        self._file_path: Path | None = None
        self._logs_dir = logs_dir if logs_dir is not None else LOGS_DIR
        self._lock = threading.Lock()
        self.total_appended = 0

    @property
    def file_path(self) -> Path:
        if self._file_path is None:
            self._logs_dir.mkdir(parents=True, exist_ok=True)
            stamp = datetime.now(UTC).strftime(TIMESTAMP_FMT)
            self._file_path = self._logs_dir / f"errors-{stamp}.log"
        return self._file_path

    def append(self, record: ErrorRecord) -> None:
        with self._lock:
            self._records.append(record)
            self.total_appended += 1

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)

    def flush(self) -> Path | None:
        """Write buffered records and clear the buffer.

        Returns:
            Path of the log file, or None when nothing has ever been recorded
            (no empty log files are created for clean runs)
        """
        with self._lock:
            records = list(self._records)
            self._records.clear()
        if not records:
            return self._file_path
        fp = self.file_path
        with fp.open("a", encoding="utf-8") as f:
            for r in records:
                f.write(r.to_json_line() + "\n")
        return fp
