"""
Tests for typed values and codecs.
"""

from datetime import date, datetime

import numpy as np
import pytest

from cellmatrix.core.encoding import (
    DateCodec,
    DateValue,
    DoubleCodec,
    DoubleValue,
    LongCodec,
    LongValue,
    StringCodec,
    StringValue,
    codec_from_short_string,
    concatenate,
    to_value,
)
from cellmatrix.core.errors import IncomparableValuesError


class TestCodecs:
    """Decoding canonical text and naming codecs."""

    def test_long_decode(self):
        assert LongCodec().decode("42") == LongValue(42)
        assert LongCodec().decode(" -7 ") == LongValue(-7)
        assert LongCodec().decode("4.2") is None
        assert LongCodec().decode("abc") is None

    def test_double_decode(self):
        assert DoubleCodec().decode("3.14") == DoubleValue(3.14)
        assert DoubleCodec().decode("1e3") == DoubleValue(1000.0)
        assert DoubleCodec().decode("pi") is None

    def test_string_decode_always_succeeds(self):
        assert StringCodec().decode("") == StringValue("")
        assert StringCodec().decode("a|b") == StringValue("a|b")

    def test_date_decode_and_encode(self):
        codec = DateCodec()
        value = codec.decode("2024-02-29")
        assert value == DateValue(datetime(2024, 2, 29))
        assert value.to_short_string() == "2024-02-29"
        assert codec.decode("2024-02-30") is None

    def test_custom_date_format(self):
        codec = DateCodec("%d/%m/%Y")
        assert codec.to_short_string() == "date(%d/%m/%Y)"
        value = codec.decode("01/03/2020")
        assert value.as_date() == datetime(2020, 3, 1)
        assert value.to_short_string() == "01/03/2020"

    def test_short_strings_round_trip(self):
        for name in ("long", "double", "string", "date", "date.time", "date(%Y)"):
            codec = codec_from_short_string(name)
            assert codec is not None
            assert codec.to_short_string() == name

    def test_unknown_codec(self):
        assert codec_from_short_string("complex") is None

    def test_codec_equality(self):
        assert LongCodec() == LongCodec()
        assert DateCodec() != DateCodec("%Y")
        assert len({LongCodec(), LongCodec(), DoubleCodec()}) == 2


class TestValues:
    """Value variants, conversions and ordering."""

    def test_to_value_dispatch(self):
        assert to_value(3) == LongValue(3)
        assert to_value(3.5) == DoubleValue(3.5)
        assert to_value("x") == StringValue("x")
        assert to_value(date(2020, 1, 2)) == DateValue(datetime(2020, 1, 2))
        assert to_value(np.int64(5)) == LongValue(5)
        assert to_value(np.float32(0.5)) == DoubleValue(0.5)

    def test_to_value_passes_values_through(self):
        v = StringValue("a")
        assert to_value(v) is v

    def test_booleans_rejected(self):
        with pytest.raises(TypeError):
            to_value(True)
        with pytest.raises(TypeError):
            LongValue(False)

    def test_unsupported_type(self):
        with pytest.raises(TypeError):
            to_value([1, 2])

    def test_conversions(self):
        assert LongValue(2).as_double() == 2.0
        assert LongValue(2).as_long() == 2
        assert DoubleValue(2.5).as_long() is None
        assert StringValue("a").as_double() is None
        assert StringValue("a").as_string() == "a"
        assert DoubleValue(1.0).as_date() is None

    def test_compare_within_variant(self):
        assert LongValue(1).compare(LongValue(2)) < 0
        assert StringValue("b").compare(StringValue("a")) > 0
        assert DoubleValue(1.0).compare(DoubleValue(1.0)) == 0
        assert LongValue(1) < LongValue(2)
        assert sorted([StringValue("c"), StringValue("a"), StringValue("b")]) == [
            StringValue("a"), StringValue("b"), StringValue("c")
        ]

    def test_compare_across_variants_raises(self):
        with pytest.raises(IncomparableValuesError):
            LongValue(1).compare(DoubleValue(1.0))
        with pytest.raises(TypeError):
            StringValue("1") < LongValue(1)

    def test_query_helpers_never_raise(self):
        assert LongValue(3).gtr(2)
        assert LongValue(3).geq(3)
        assert LongValue(3).lss(4)
        assert LongValue(3).leq(3)
        assert LongValue(3).equ(3)
        assert not LongValue(3).equ("3")
        assert LongValue(3).neq("3")
        assert not LongValue(3).gtr("a")

    def test_values_are_hashable(self):
        assert len({LongValue(1), LongValue(1), DoubleValue(1.0), StringValue("1")}) == 3

    def test_date_values_ignore_codec_in_equality(self):
        a = DateValue(datetime(2020, 1, 1))
        b = DateValue(datetime(2020, 1, 1), DateCodec("%Y"))
        assert a == b
        assert b.to_short_string() == "2020"


class TestConcatenate:
    def test_merge_short_strings(self):
        merge = concatenate(":")
        assert merge(StringValue("a"), LongValue(1)) == StringValue("a:1")

    def test_default_separator(self):
        assert concatenate()(StringValue("x"), StringValue("y")) == StringValue("x.y")
