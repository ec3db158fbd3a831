"""
Tests for loaders, writers and atomic file output.
"""

import json

import pandas as pd
import pytest

from cellmatrix.core.content import DiscreteSchema, Type, content_parser
from cellmatrix.core.encoding import LongCodec, StringCodec
from cellmatrix.core.errors import ParseError, ValidationError
from cellmatrix.core.position import Position
from cellmatrix.core.slice import over
from cellmatrix.io import (
    cell_parser,
    cell_to_key_value,
    dictionary_parser,
    infer_content,
    load_table,
    load_text,
    parse_cell,
    position_to_string,
    save_as_csv,
    save_as_text,
    sniff_delimiter,
    to_dataframe,
)
from cellmatrix.matrix import Matrix
from cellmatrix.utils.fileio import atomic_write_json, atomic_write_lines

from conftest import values_by_position

TWO_STRINGS = [StringCodec(), StringCodec()]


class TestParseCell:
    def test_valid_line(self):
        c = parse_cell("iid:1|fid:A|continuous|double|3.14", TWO_STRINGS)
        assert c.position == Position("iid:1", "fid:A")
        assert c.content.type is Type.CONTINUOUS
        assert c.content.value.value == 3.14

    def test_value_may_contain_separator(self):
        c = parse_cell("iid:1|fid:A|nominal|string|a|b", TWO_STRINGS)
        assert c.content.value.value == "a|b"

    def test_coordinate_codecs(self):
        c = parse_cell("iid:1|7|discrete|long|2", [StringCodec(), LongCodec()])
        assert c.position == Position("iid:1", 7)

    @pytest.mark.parametrize("line", [
        "iid:1|fid:A|continuous",
        "iid:1|fid:A|unknown|double|1.0",
        "iid:1|fid:A|continuous|unknown|1.0",
        "iid:1|fid:A|continuous|double|abc",
    ])
    def test_parse_errors(self, line):
        with pytest.raises(ParseError):
            parse_cell(line, TWO_STRINGS)

    def test_bad_coordinate(self):
        with pytest.raises(ParseError):
            parse_cell("iid:1|x|discrete|long|2", [StringCodec(), LongCodec()])

    def test_schema_violation(self):
        with pytest.raises(ValidationError):
            parse_cell("iid:1|fid:A|continuous|string|abc", TWO_STRINGS)


class TestOtherParsers:
    def test_dictionary_parser(self):
        parse = dictionary_parser({"age": content_parser(LongCodec(), DiscreteSchema())})
        c = parse("u1|age|34")
        assert c.position == Position("u1", "age")
        assert c.content.value.value == 34

    def test_dictionary_parser_errors(self):
        parse = dictionary_parser({"age": content_parser(LongCodec(), DiscreteSchema())})
        with pytest.raises(ValidationError):
            parse("u1|age|old")
        with pytest.raises(ParseError):
            parse("u1|height|180")
        with pytest.raises(ParseError):
            parse("u1|age")

    @pytest.mark.parametrize("text,expected", [
        ("34", Type.DISCRETE),
        ("1.5", Type.CONTINUOUS),
        ("M", Type.NOMINAL),
    ])
    def test_infer_content(self, text, expected):
        assert infer_content(text).type is expected

    def test_infer_content_empty(self):
        assert infer_content("") is None


class TestLoadText:
    @pytest.fixture
    def cells_file(self, tmp_path):
        path = tmp_path / "cells.txt"
        path.write_text(
            "iid:1|fid:A|continuous|double|3.14\n"
            "iid:1|fid:B|discrete|long|7\n"
            "\n"
            "not a cell\n"
            "iid:2|fid:A|continuous|double|abc\n"
        )
        return path

    def test_cells_and_errors(self, cells_file):
        data, errors = load_text(cells_file, cell_parser(TWO_STRINGS))
        assert values_by_position(data) == {
            Position("iid:1", "fid:A"): 3.14,
            Position("iid:1", "fid:B"): 7,
        }
        messages = errors.materialise()
        assert len(messages) == 2
        assert any(m.endswith("not a cell") for m in messages)

    def test_duplicates_keep_first(self, tmp_path):
        path = tmp_path / "dup.txt"
        path.write_text(
            "iid:1|fid:A|continuous|double|1.0\n"
            "iid:1|fid:A|continuous|double|2.0\n"
        )
        with pytest.warns(UserWarning, match="duplicate"):
            data, _ = load_text(path, cell_parser(TWO_STRINGS))
        assert values_by_position(data) == {Position("iid:1", "fid:A"): 1.0}

    def test_undecodable_line_is_an_error(self, tmp_path):
        path = tmp_path / "bytes.txt"
        path.write_bytes(b"a|nominal|string|ok\nb|nominal|string|\xff\xfe\n")
        data, errors = load_text(path, cell_parser([StringCodec()]))
        assert values_by_position(data) == {Position("a"): "ok"}
        messages = errors.materialise()
        assert len(messages) == 1
        assert "Unable to decode line as utf-8" in messages[0]

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_text(tmp_path / "missing.txt", cell_parser(TWO_STRINGS))

    def test_directory(self, tmp_path):
        with pytest.raises(ValueError):
            load_text(tmp_path, cell_parser(TWO_STRINGS))


class TestLoadTable:
    @pytest.fixture
    def table_file(self, tmp_path):
        path = tmp_path / "table.csv"
        path.write_text("id,age,gender,score\nu1,34,M,1.5\nu2,,F,2\n")
        return path

    def test_sniff_delimiter(self, table_file, tmp_path):
        assert sniff_delimiter(table_file) == ","
        tsv = tmp_path / "table.tsv"
        tsv.write_text("id\tage\nu1\t3\n")
        assert sniff_delimiter(tsv) == "\t"

    def test_inferred(self, table_file):
        data, errors = load_table(table_file)
        values = values_by_position(data)
        assert errors.count() == 0
        assert len(values) == 5
        assert values[Position("u1", "age")] == 34
        assert values[Position("u1", "score")] == 1.5
        assert values[Position("u2", "gender")] == "F"
        assert Position("u2", "age") not in values

    def test_skipped_columns(self, table_file):
        data, _ = load_table(table_file, schema={"age": None})
        assert data.names(over(2)) == [Position("gender"), Position("score")]

    def test_schema_violations_are_errors(self, table_file):
        schema = {"score": content_parser(LongCodec(), DiscreteSchema())}
        data, errors = load_table(table_file, schema=schema)
        assert data.count() == 4
        assert errors.count() == 1

    def test_empty_table(self, tmp_path):
        path = tmp_path / "empty.csv"
        path.write_text("id,age\n")
        with pytest.raises(ValueError):
            load_table(path, separator=",")


class TestWriters:
    def test_save_as_text_round_trip(self, measurements, tmp_path, capsys):
        path = save_as_text(measurements, tmp_path / "out" / "cells.txt")
        assert "Wrote 7 cells" in capsys.readouterr().out
        data, errors = load_text(path, cell_parser(TWO_STRINGS))
        assert errors.count() == 0
        assert values_by_position(data) == values_by_position(measurements)

    def test_save_as_text_custom_writer(self, measurements, tmp_path):
        path = save_as_text(measurements, tmp_path / "positions.txt", position_to_string())
        lines = path.read_text().splitlines()
        assert "iid:0064402|fid:A" in lines

    def test_save_as_text_type_check(self, tmp_path):
        with pytest.raises(TypeError):
            save_as_text([1, 2], tmp_path / "x.txt")

    def test_cell_to_key_value(self, measurements):
        pairs = dict(measurements.to_sequence(cell_to_key_value(",")).materialise())
        assert pairs["iid:0064402,fid:A"] == "continuous,double,3.14"

    def test_to_dataframe(self, measurements):
        df = to_dataframe(measurements)
        assert list(df.columns) == ["dim_1", "dim_2", "type", "codec", "value"]
        assert len(df) == 7
        row = df[(df.dim_1 == "iid:0064402") & (df.dim_2 == "fid:C")].iloc[0]
        assert row["type"] == "nominal"
        assert row["value"] == "H"

    def test_to_dataframe_empty(self):
        assert list(to_dataframe(Matrix()).columns) == ["type", "codec", "value"]

    def test_save_as_csv(self, measurements, tmp_path):
        path = save_as_csv(measurements, over(1), tmp_path / "table.csv")
        df = pd.read_csv(path, index_col=0, dtype=str)
        assert df.shape == (3, 3)
        assert df.loc["iid:0064402", "fid:A"] == "3.14"
        assert pd.isna(df.loc["iid:0066848", "fid:C"])

    def test_save_as_csv_requires_2d(self, sparse_3d, tmp_path):
        with pytest.raises(ValueError):
            save_as_csv(sparse_3d, over(1), tmp_path / "table.csv")
        with pytest.raises(ValueError):
            save_as_csv(Matrix(), over(1), tmp_path / "table.csv")


class TestAtomicWrites:
    def test_lines(self, tmp_path):
        path = tmp_path / "lines.txt"
        assert atomic_write_lines(path, ["a", "b"]) == 2
        assert path.read_text() == "a\nb\n"
        assert list(tmp_path.glob("*.tmp")) == []

    def test_failure_leaves_no_file(self, tmp_path):
        path = tmp_path / "lines.txt"

        def broken():
            yield "a"
            raise RuntimeError("interrupted")

        with pytest.raises(RuntimeError):
            atomic_write_lines(path, broken())
        assert not path.exists()
        assert list(tmp_path.glob("*.tmp")) == []

    def test_json(self, tmp_path):
        path = tmp_path / "summary.json"
        atomic_write_json(path, {"cells": 3})
        assert json.loads(path.read_text()) == {"cells": 3}
