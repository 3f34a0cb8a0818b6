from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

"""Per-cell translation decision model.

The cell translator never raises; instead every decision is reported as a
CellResult whose `outcome` tells which rule produced the output text. Tests
and the pipeline statistics read the outcome rather than scraping logs.
"""

__all__ = [
    "CellOutcome",
    "CellResult",
]


class CellOutcome(Enum):
    """Which translation rule produced a cell's output.

    Rules are evaluated in this order, first match wins:
    EMPTY -> EXCLUDED -> CACHED -> TRANSLATED | PASSTHROUGH
    """
    EMPTY = "empty"
    EXCLUDED = "excluded"
    CACHED = "cached"
    TRANSLATED = "translated"
    PASSTHROUGH = "passthrough"  # backend failure / empty response


@dataclass(frozen=True)
class CellResult:
    text: str  # output value for the cell
    outcome: CellOutcome
    error: str | None = None  # only set for PASSTHROUGH

    @property
    def is_fallback(self) -> bool:
        """True when the backend was asked but the original text was kept."""
        return self.outcome is CellOutcome.PASSTHROUGH
