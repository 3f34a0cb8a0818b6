from __future__ import annotations

from ..models.processing_result import ProcessingResult

"""SUMMARY line rendering for the CSV translator."""


def _format_number(value: float) -> str:
    if value == 0:
        return "0"
    if value == int(value):
        return str(int(value))
    if value < 0.01:
        # 指数表記を避ける
        return f"{value:.6f}".rstrip('0').rstrip('.')
    return f"{value:.3f}".rstrip('0').rstrip('.')


def render_summary_line(result: ProcessingResult) -> str:
    """Render the SUMMARY line for one translated file.

    Format:
    SUMMARY file={name} rows={rows} translated={n} cache_hits={n}
    backend_calls={n} failed={n} elapsed_sec={elapsed} throughput_rps={rps}
    (` cancelled=1` is appended for interrupted runs)

    Examples:
        >>> from datetime import datetime, timezone
        >>> from pathlib import Path
        >>> from csv_translator.models.processing_result import TranslationStats
        >>> start = datetime(2024, 1, 1, 10, 0, 0, tzinfo=timezone.utc)
        >>> end = datetime(2024, 1, 1, 10, 0, 2, tzinfo=timezone.utc)
        >>> result = ProcessingResult(
        ...     input_path=Path("cities.csv"), output_path=Path("cities_translated.csv"),
        ...     total_rows=3, stats=TranslationStats(backend_calls=1, translated=1, cache_hits=1),
        ...     start_time=start, end_time=end, elapsed_seconds=2.0, throughput_rows_per_sec=1.5,
        ... )
        >>> render_summary_line(result)
        'SUMMARY file=cities_translated.csv rows=3 translated=1 cache_hits=1 backend_calls=1 failed=0 elapsed_sec=2 throughput_rps=1.5'
    """
    s = result.stats
    line = (
        f"SUMMARY file={result.output_path.name} "
        f"rows={result.total_rows} "
        f"translated={s.translated} "
        f"cache_hits={s.cache_hits} "
        f"backend_calls={s.backend_calls} "
        f"failed={s.failed} "
        f"elapsed_sec={_format_number(result.elapsed_seconds)} "
        f"throughput_rps={_format_number(result.throughput_rows_per_sec)}"
    )
    if result.cancelled:
        line += " cancelled=1"
    return line
