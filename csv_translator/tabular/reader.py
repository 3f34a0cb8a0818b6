from __future__ import annotations

import csv
import sys
from collections.abc import Iterator
from pathlib import Path
from typing import Any, TextIO

import pandas as pd

"""CSV reading / writing helpers.

1行目をヘッダ行、2行目以降をデータ行として扱う。
Streaming uses the csv module (one row at a time, comma delimiter, standard
quoting incl. embedded newlines). pandas is only used for the --inspect-data
preview, where loading a few rows into a DataFrame is convenient.
"""

__all__ = [
    "HeaderError",
    "RowReadError",
    "open_csv_reader",
    "read_header",
    "iter_rows",
    "open_csv_writer",
    "derive_output_path",
    "preview_csv",
    "OUTPUT_SUFFIX",
]

OUTPUT_SUFFIX = "_translated"
ENCODING = "utf-8"
# セル長の上限なし (csv モジュール既定は 131072 文字)
FIELD_SIZE_LIMIT = sys.maxsize


class HeaderError(Exception):
    """Raised when the header row is missing or cannot be parsed."""


class RowReadError(Exception):
    """Raised when a data row cannot be parsed (bad quoting etc.)."""

    def __init__(self, row_number: int, message: str) -> None:
        self.row_number = row_number
        super().__init__(f"read row {row_number}: {message}")


def open_csv_reader(fh: TextIO) -> Any:
    """Return a csv reader over an already opened text file (newline='')."""
    csv.field_size_limit(FIELD_SIZE_LIMIT)
    return csv.reader(fh, delimiter=",", quotechar='"', strict=True)


def read_header(reader: Any) -> list[str]:
    """Return the first non-blank record as the header."""
    header: list[str] = []
    while not header:
        try:
            header = next(reader)
        except StopIteration:
            raise HeaderError("input has no header row") from None
        except csv.Error as e:
            raise HeaderError(f"read header: {e}") from e
    return header


def iter_rows(reader: Any) -> Iterator[list[str]]:
    """Yield data rows, turning parser errors into RowReadError (1-based).

    Completely blank lines are skipped and do not count as rows.
    """
    row_number = 0
    while True:
        try:
            row = next(reader)
        except StopIteration:
            return
        except csv.Error as e:
            raise RowReadError(row_number + 1, str(e)) from e
        if not row:
            continue
        row_number += 1
        yield row


def open_csv_writer(fh: TextIO) -> Any:
    # "\n" 固定: 単純な入力はバイト単位で再現される
    return csv.writer(fh, delimiter=",", quotechar='"', quoting=csv.QUOTE_MINIMAL, lineterminator="\n")


def derive_output_path(path: Path, suffix: str = OUTPUT_SUFFIX) -> Path:
    """`name.csv` -> `name_translated.csv` (suffix inserted before the extension).

    Files without an extension simply get the suffix appended.
    """
    return path.with_name(f"{path.stem}{suffix}{path.suffix}")


def preview_csv(path: Path, rows: int = 3) -> pd.DataFrame:
    """Load the header and the first `rows` data rows as strings.

    keep_default_na=False so that values such as "NA" or "" are shown exactly
    as they will be seen by the translator.
    """
    return pd.read_csv(path, nrows=rows, dtype=str, keep_default_na=False, encoding=ENCODING)
