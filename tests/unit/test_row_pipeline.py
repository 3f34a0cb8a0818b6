from __future__ import annotations

import threading

import pytest

from csv_translator.services.cache import TranslationCache
from csv_translator.services.cell_translator import CellTranslator
from csv_translator.services.column_policy import ColumnPolicy
from csv_translator.services.pipeline import MalformedRowError, RowPipeline

HEADER = ["id", "city"]


def _pipeline(backend, exclude: str = "id", **kwargs) -> RowPipeline:
    translator = CellTranslator(backend, cache=TranslationCache(), policy=ColumnPolicy.from_arg(exclude))
    return RowPipeline(translator, **kwargs)


def test_rows_keep_order_and_width(fake_backend):
    rows = [["1", "Paris"], ["2", "Lyon"], ["3", ""]]
    out = list(_pipeline(fake_backend).process(HEADER, rows))
    assert out == [["1", "PARIS"], ["2", "LYON"], ["3", ""]]


def test_repeated_values_call_backend_once(fake_backend):
    rows = [["1", "Paris"], ["2", "Paris"], ["3", ""]]
    out = list(_pipeline(fake_backend).process(HEADER, rows))
    assert out == [["1", "PARIS"], ["2", "PARIS"], ["3", ""]]
    assert fake_backend.calls == ["Paris"]


def test_empty_input_yields_nothing(fake_backend):
    pipeline = _pipeline(fake_backend)
    assert list(pipeline.process(HEADER, [])) == []
    assert pipeline.state == "done"


def test_rows_are_consumed_lazily(fake_backend):
    consumed: list[int] = []

    def source():
        for i in range(3):
            consumed.append(i)
            yield [str(i), "x"]

    it = _pipeline(fake_backend).process(HEADER, source())
    assert consumed == []
    next(it)
    assert consumed == [0]


@pytest.mark.parametrize("bad_row", [["4"], ["4", "Nice", "extra"]])
def test_malformed_row_aborts_with_row_number(fake_backend, bad_row):
    rows = [["1", "Paris"], ["2", "Lyon"], bad_row, ["5", "Nantes"]]
    emitted = []
    with pytest.raises(MalformedRowError) as e:
        for r in _pipeline(fake_backend).process(HEADER, rows):
            emitted.append(r)
    assert e.value.row_number == 3
    assert e.value.expected == 2
    assert e.value.actual == len(bad_row)
    assert "row 3" in str(e.value)
    assert emitted == [["1", "PARIS"], ["2", "LYON"]]
    # later rows never reach the backend
    assert "Nantes" not in fake_backend.calls
    assert "Nice" not in fake_backend.calls


def test_pipeline_is_not_reentrant(fake_backend):
    pipeline = _pipeline(fake_backend)
    list(pipeline.process(HEADER, [["1", "a"]]))
    with pytest.raises(RuntimeError):
        pipeline.process(HEADER, [["1", "a"]])


def test_stop_event_stops_before_next_row(fake_backend):
    stop = threading.Event()
    pipeline = _pipeline(fake_backend, stop_event=stop)
    it = pipeline.process(HEADER, [["1", "Paris"], ["2", "Lyon"]])
    assert next(it) == ["1", "PARIS"]
    stop.set()
    assert list(it) == []
    assert pipeline.cancelled
    assert fake_backend.calls == ["Paris"]


def test_on_row_callback_receives_row_numbers(fake_backend):
    seen: list[int] = []
    pipeline = _pipeline(fake_backend, on_row=seen.append)
    list(pipeline.process(HEADER, [["1", "a"], ["2", "b"]]))
    assert seen == [1, 2]


def test_invalid_worker_count(fake_backend):
    with pytest.raises(ValueError):
        _pipeline(fake_backend, max_workers=0)


class TestParallelRows:

    def test_parallel_output_matches_sequential(self, make_backend):
        header = ["id", "a", "b", "c"]
        rows = [["1", "x", "y", "x"], ["2", "y", "", "z"], ["3", "w", "x", "w"]]
        seq = list(_pipeline(make_backend()).process(header, rows))
        par = list(_pipeline(make_backend(), max_workers=4).process(header, rows))
        assert par == seq
        assert par[0] == ["1", "X", "Y", "X"]

    def test_parallel_fetches_each_distinct_text_once(self, make_backend):
        backend = make_backend()
        header = ["id", "a", "b", "c"]
        rows = [["1", "x", "x", "x"], ["2", "x", "y", "y"]]
        pipeline = _pipeline(backend, max_workers=3)
        list(pipeline.process(header, rows))
        assert sorted(backend.calls) == ["x", "y"]
        stats = pipeline.translator.stats
        assert stats.backend_calls == 2
        assert stats.translated == 2
        assert stats.cache_hits == 4

    def test_parallel_failures_fall_back_per_cell(self, make_backend):
        backend = make_backend(fail_on={"bad"})
        header = ["id", "a", "b"]
        pipeline = _pipeline(backend, max_workers=2)
        out = list(pipeline.process(header, [["1", "bad", "bad"]]))
        assert out == [["1", "bad", "bad"]]
        # one diagnostic per failed cell
        assert pipeline.translator.stats.failed == 2
        assert len(pipeline.translator.cache) == 0
