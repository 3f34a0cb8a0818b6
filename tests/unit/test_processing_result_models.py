from __future__ import annotations

from datetime import UTC, datetime
from pathlib import Path

import pytest

from csv_translator.models import CellOutcome, CellResult, ProcessingResult, TranslationStats


class TestCellResult:

    @pytest.mark.parametrize(
        "outcome, fallback",
        [
            (CellOutcome.EMPTY, False),
            (CellOutcome.EXCLUDED, False),
            (CellOutcome.CACHED, False),
            (CellOutcome.TRANSLATED, False),
            (CellOutcome.PASSTHROUGH, True),
        ],
    )
    def test_flags(self, outcome, fallback):
        assert CellResult("x", outcome).is_fallback is fallback

    def test_outcome_values(self):
        assert {o.value for o in CellOutcome} == {"empty", "excluded", "cached", "translated", "passthrough"}


class TestTranslationStats:

    def test_total_cells(self):
        s = TranslationStats(backend_calls=3, translated=2, cache_hits=4, empty=1, excluded=5, failed=1)
        # backend_calls is not a cell count
        assert s.total_cells == 13

    def test_snapshot_is_independent_copy(self):
        s = TranslationStats(translated=1)
        snap = s.snapshot()
        s.translated += 1
        assert snap.translated == 1
        assert snap is not s


def test_processing_result_failed_cells():
    now = datetime.now(UTC)
    r = ProcessingResult(
        input_path=Path("a.csv"),
        output_path=Path("a_translated.csv"),
        total_rows=0,
        stats=TranslationStats(failed=2),
        start_time=now,
        end_time=now,
        elapsed_seconds=0.0,
        throughput_rows_per_sec=0.0,
    )
    assert r.failed_cells == 2
    assert r.cancelled is False
    assert r.error_log_path is None
