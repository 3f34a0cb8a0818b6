from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from datetime import UTC, datetime

"""Per-cell translation failure, one JSON Lines record each.

Produced whenever a cell falls back to pass-through (backend raised, or the
backend answered with zero translations).
"""

__all__ = [
    "BACKEND_ERROR",
    "EMPTY_RESPONSE",
    "ErrorRecord",
]

BACKEND_ERROR = "BACKEND_ERROR"
EMPTY_RESPONSE = "EMPTY_RESPONSE"

UNKNOWN_ROW = -1


@dataclass(frozen=True)
class ErrorRecord:
    """One failed cell.

    Attributes:
        timestamp: UTC time, ISO8601 with 'Z'
        file: input CSV name (basename)
        column: header of the failing cell
        row: 1-based data row, -1 outside the row pipeline
        error_type: BACKEND_ERROR | EMPTY_RESPONSE
        message: text of the backend failure
    """
    timestamp: str
    file: str
    column: str
    row: int  # 不明な場合 -1
    error_type: str
    message: str

    @classmethod
    def create(cls, file: str, column: str, row: int, error_type: str, message: str) -> ErrorRecord:
        stamp = datetime.now(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")
        return cls(stamp, file, column, row if row > 0 else UNKNOWN_ROW, error_type, message)

    @property
    def row_known(self) -> bool:
        return self.row != UNKNOWN_ROW

    def to_json_line(self) -> str:
        return json.dumps(asdict(self), ensure_ascii=False)
