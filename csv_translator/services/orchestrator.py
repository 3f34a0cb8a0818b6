from __future__ import annotations

import logging
import threading
from datetime import UTC, datetime
from pathlib import Path

from ..models.processing_result import ProcessingResult
from ..tabular.reader import (
    ENCODING,
    OUTPUT_SUFFIX,
    HeaderError,
    RowReadError,
    derive_output_path,
    iter_rows,
    open_csv_reader,
    open_csv_writer,
    read_header,
)
from .cell_translator import CellTranslator
from .pipeline import MalformedRowError, RowPipeline
from .progress import RowProgressTracker

logger = logging.getLogger(__name__)

"""Service orchestration for the CSV translator.

translate_file() wires the pieces together for one input file:
1. open input, capture header
2. derive and create the output file (overwritten if present), write header
3. stream rows through RowPipeline, writing each output row immediately
4. flush the per-cell error log once and return a ProcessingResult

Structural problems (unreadable input, bad header, malformed row, output not
writable) abort the run with ProcessingError. The partially written output
file is left in place and is not guaranteed clean.
"""


class ProcessingError(Exception):
    """Fatal error that stops the run (startup or structural)."""
    pass


def translate_file(
    input_path: Path,
    translator: CellTranslator,
    *,
    output_suffix: str = OUTPUT_SUFFIX,
    max_workers: int = 1,
    stop_event: threading.Event | None = None,
) -> ProcessingResult:
    """Translate one CSV file.

    Args:
        input_path: CSV file with a header row
        translator: Cell translator (owns cache, policy, backend, error log)
        output_suffix: Marker inserted before the extension of the output name
        max_workers: Concurrent backend calls per row (1 = fully sequential)
        stop_event: Set from outside to stop before the next row

    Returns:
        ProcessingResult for the run (``cancelled=True`` on interrupt)

    Raises:
        ProcessingError: input/output cannot be opened, header missing,
            malformed or unparsable row
    """
    start_time = datetime.now(UTC)
    translator.file_name = input_path.name

    if not input_path.is_file():
        raise ProcessingError(f"open input: file not found: {input_path}")
    output_path = derive_output_path(input_path, output_suffix)

    cancelled = False
    rows_written = 0
    header: list[str] = []
    error_log_path: Path | None = None
    try:
        try:
            fin = input_path.open("r", encoding=ENCODING, newline="")
        except OSError as e:
            raise ProcessingError(f"open input: {e}") from e
        with fin:
            reader = open_csv_reader(fin)
            try:
                header = read_header(reader)
            except HeaderError as e:
                raise ProcessingError(f"{input_path.name}: {e}") from e
            except UnicodeDecodeError as e:
                raise ProcessingError(f"read header: {e}") from e

            if translator.policy:
                unknown = translator.policy.unknown_columns(header)
                if unknown:
                    logger.debug("excluded columns not present in header: %s", unknown)

            try:
                fout = output_path.open("w", encoding=ENCODING, newline="")
            except OSError as e:
                raise ProcessingError(f"create output: {e}") from e

            with fout, RowProgressTracker() as progress:
                writer = open_csv_writer(fout)
                writer.writerow(header)
                pipeline = RowPipeline(
                    translator,
                    max_workers=max_workers,
                    stop_event=stop_event,
                    on_row=progress.start_row,
                )
                try:
                    for out_row in pipeline.process(header, iter_rows(reader)):
                        try:
                            writer.writerow(out_row)
                        except OSError as e:
                            raise ProcessingError(f"write row {rows_written + 1}: {e}") from e
                        rows_written += 1
                        progress.finish_row()
                        progress.set_postfix(
                            cache=len(translator.cache), failed=translator.stats.failed
                        )
                except MalformedRowError as e:
                    raise ProcessingError(str(e)) from e
                except RowReadError as e:
                    raise ProcessingError(str(e)) from e
                except UnicodeDecodeError as e:
                    raise ProcessingError(f"read row {rows_written + 1}: {e}") from e
                except KeyboardInterrupt:
                    # 書き込み済み行は保持 (with ブロック終了時に flush/close)
                    cancelled = True
                    logger.warning("interrupted after %d rows: %s", pipeline.rows_emitted, output_path)
                cancelled = cancelled or pipeline.cancelled
    finally:
        if translator.error_log is not None:
            try:
                error_log_path = translator.error_log.flush()
            except OSError as e:
                # error log の書き込み失敗で処理全体は失敗させない
                logger.warning("failed to write error log: %s", e)

    end_time = datetime.now(UTC)
    elapsed_seconds = (end_time - start_time).total_seconds()
    throughput_rps = rows_written / elapsed_seconds if elapsed_seconds > 0 else 0.0

    logger.debug(
        "%d cells processed, %d backend calls", translator.stats.total_cells, translator.stats.backend_calls
    )
    if error_log_path is not None and translator.stats.failed:
        logger.info(
            "Per-cell failures recorded in %s (%d records)", error_log_path, translator.error_log.total_appended
        )
    if cancelled:
        logger.info("Partial translated CSV written to %s", output_path)
    else:
        logger.info("Translated CSV written to %s", output_path)

    return ProcessingResult(
        input_path=input_path,
        output_path=output_path,
        total_rows=rows_written,
        stats=translator.stats.snapshot(),
        start_time=start_time,
        end_time=end_time,
        elapsed_seconds=elapsed_seconds,
        throughput_rows_per_sec=throughput_rps,
        cancelled=cancelled,
        error_log_path=error_log_path,
    )
