from __future__ import annotations

import io
from pathlib import Path

import pytest

from csv_translator.services.cache import TranslationCache
from csv_translator.services.cell_translator import CellTranslator
from csv_translator.services.column_policy import ColumnPolicy
from csv_translator.services.orchestrator import translate_file
from csv_translator.tabular.reader import (
    HeaderError,
    RowReadError,
    derive_output_path,
    iter_rows,
    open_csv_reader,
    open_csv_writer,
    preview_csv,
    read_header,
)


@pytest.mark.parametrize(
    "src, expected",
    [
        ("name.csv", "name_translated.csv"),
        ("data/shop.items.csv", "data/shop.items_translated.csv"),
        ("noext", "noext_translated"),
    ],
)
def test_derive_output_path(src, expected):
    assert derive_output_path(Path(src)) == Path(expected)


def test_derive_output_path_custom_suffix():
    assert derive_output_path(Path("a.csv"), "_en") == Path("a_en.csv")


def test_header_and_rows_with_quoting():
    text = 'id,note\n1,"hello, world"\n2,"line1\nline2"\n3,"say ""hi"""\n'
    reader = open_csv_reader(io.StringIO(text, newline=""))
    assert read_header(reader) == ["id", "note"]
    rows = list(iter_rows(reader))
    assert rows == [["1", "hello, world"], ["2", "line1\nline2"], ["3", 'say "hi"']]


def test_empty_input_has_no_header():
    with pytest.raises(HeaderError):
        read_header(open_csv_reader(io.StringIO("")))


def test_leading_blank_lines_before_header_are_skipped():
    reader = open_csv_reader(io.StringIO("\n\nid,city\n1,Paris\n", newline=""))
    assert read_header(reader) == ["id", "city"]
    assert list(iter_rows(reader)) == [["1", "Paris"]]


def test_only_blank_lines_has_no_header():
    with pytest.raises(HeaderError):
        read_header(open_csv_reader(io.StringIO("\n\n", newline="")))


def test_parse_error_reports_row_number():
    text = 'id,note\n1,ok\n2,"bad"x\n'
    reader = open_csv_reader(io.StringIO(text, newline=""))
    read_header(reader)
    it = iter_rows(reader)
    assert next(it) == ["1", "ok"]
    with pytest.raises(RowReadError) as e:
        next(it)
    assert e.value.row_number == 2
    assert "read row 2" in str(e.value)


def test_writer_reproduces_simple_input():
    out = io.StringIO()
    w = open_csv_writer(out)
    w.writerow(["id", "city"])
    w.writerow(["1", "a, b"])
    w.writerow(["3", ""])
    assert out.getvalue() == 'id,city\n1,"a, b"\n3,\n'


def test_preview_keeps_strings(tmp_path: Path):
    p = tmp_path / "x.csv"
    p.write_text("id,code\n001,NA\n002,\n", encoding="utf-8")
    df = preview_csv(p)
    assert list(df.columns) == ["id", "code"]
    assert df["id"].tolist() == ["001", "002"]
    assert df["code"].tolist() == ["NA", ""]


def test_blank_lines_are_skipped_and_not_counted():
    text = 'id,note\n1,a\n\n2,"x\n'
    reader = open_csv_reader(io.StringIO(text, newline=""))
    read_header(reader)
    it = iter_rows(reader)
    assert next(it) == ["1", "a"]
    with pytest.raises(RowReadError) as e:
        next(it)
    # 空行は行番号に含めない
    assert e.value.row_number == 2


def _translator(backend) -> CellTranslator:
    return CellTranslator(backend, cache=TranslationCache(), policy=ColumnPolicy.from_arg("id"))


def test_cell_above_default_csv_field_limit_is_translated(write_csv, make_backend):
    long_text = "x" * 200_000
    src = write_csv(f"id,text\n1,{long_text}\n2,short\n")
    backend = make_backend(fail_on={long_text})
    result = translate_file(src, _translator(backend))
    # 長いセルもバックエンドへ送られ、失敗時は原文のまま
    assert backend.calls == [long_text, "short"]
    assert result.total_rows == 2
    assert result.output_path.read_text(encoding="utf-8") == f"id,text\n1,{long_text}\n2,SHORT\n"


def test_file_starting_with_blank_line_uses_next_line_as_header(write_csv, fake_backend):
    src = write_csv("\nid,city\n1,Paris\n")
    result = translate_file(src, _translator(fake_backend))
    assert result.output_path.read_text(encoding="utf-8") == "id,city\n1,PARIS\n"
