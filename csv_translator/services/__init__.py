"""Core services: cache, column policy, backend, cell translator, row pipeline."""

from .backend import BackendError, GoogleTranslateBackend, TranslationBackend
from .cache import TranslationCache
from .cell_translator import CellTranslator
from .column_policy import ColumnPolicy
from .pipeline import MalformedRowError, RowPipeline

__all__ = [
    "BackendError",
    "GoogleTranslateBackend",
    "TranslationBackend",
    "TranslationCache",
    "CellTranslator",
    "ColumnPolicy",
    "MalformedRowError",
    "RowPipeline",
]
