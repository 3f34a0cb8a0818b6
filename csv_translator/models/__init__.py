"""Domain models for the CSV translator.

Cell-level decisions, run statistics and the structured error record.
"""

from .cell_result import CellOutcome, CellResult
from .error_record import ErrorRecord
from .processing_result import ProcessingResult, TranslationStats

__all__ = [
    # Cell decisions
    "CellOutcome",
    "CellResult",
    # Run results
    "ProcessingResult",
    "TranslationStats",
    # Error log
    "ErrorRecord",
]
