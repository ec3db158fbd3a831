"""
Typed scalar values and the codecs that encode, decode and order them.

A Value is one of a closed set of variants: integer (LongValue), real
(DoubleValue), text (StringValue), date (DateValue) and a user-defined
structured record (StructuredValue). Every Value carries a Codec that
round-trips it to canonical text and totally orders two values of the same
variant.

Engineering Design:
    Immutability:
        Values are frozen dataclasses and therefore hashable. They are used
        directly as coordinates and as grouping keys.

    Explicit conversion:
        ``to_value`` is the single entry point for turning a Python scalar
        into a Value. Nothing is converted implicitly.

    Ordering:
        ``Value.compare`` returns a negative, zero or positive int. Comparing
        values of different variants raises IncomparableValuesError. The
        query helpers (``equ``, ``gtr``, ...) never raise and answer False
        instead, so they can be used freely inside predicates.

Examples:
    >>> from cellmatrix.core.encoding import to_value, DateCodec
    >>> v = to_value(3.14)
    >>> v.to_short_string()
    '3.14'
    >>> v.codec.to_short_string()
    'double'
    >>> DateCodec().decode("2001-01-01").to_short_string()
    '2001-01-01'
    >>> to_value(995).gtr(990)
    True
"""

from __future__ import annotations

import numbers
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Callable

from cellmatrix.core.errors import IncomparableValuesError

__all__ = [
    'Codec',
    'LongCodec',
    'DoubleCodec',
    'StringCodec',
    'DateCodec',
    'StructuredCodec',
    'DATE_FORMAT',
    'DATE_TIME_FORMAT',
    'Value',
    'LongValue',
    'DoubleValue',
    'StringValue',
    'DateValue',
    'StructuredValue',
    'to_value',
    'concatenate',
    'codec_from_short_string',
]

DATE_FORMAT = "%Y-%m-%d"
DATE_TIME_FORMAT = "%Y-%m-%d %H:%M:%S"


def _sign(x: Any, y: Any) -> int:
    return (x > y) - (x < y)


# =============================================================================
# Codecs
# =============================================================================


class Codec(ABC):
    """
    Encode/decode/compare contract for one Value variant.

    Codecs are stateless apart from their configuration, compare equal when
    their short strings match, and are safe to share between threads.
    """

    @abstractmethod
    def to_short_string(self) -> str:
        """Name used in the text format, e.g. ``"double"``."""

    @abstractmethod
    def decode(self, text: str) -> Value | None:
        """Parse canonical text; returns None when the text is not valid."""

    def encode(self, value: Value) -> str:
        return str(value.value)

    def compare(self, x: Value, y: Value) -> int:
        return _sign(x.value, y.value)

    def __eq__(self, other: object) -> bool:
        return (
            isinstance(other, Codec)
            and type(self) is type(other)
            and self.to_short_string() == other.to_short_string()
        )

    def __hash__(self) -> int:
        return hash((type(self).__name__, self.to_short_string()))

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class LongCodec(Codec):
    """Integer codec."""

    def to_short_string(self) -> str:
        return "long"

    def decode(self, text: str) -> LongValue | None:
        try:
            return LongValue(int(text.strip()))
        except ValueError:
            return None


class DoubleCodec(Codec):
    """Real-number codec."""

    def to_short_string(self) -> str:
        return "double"

    def decode(self, text: str) -> DoubleValue | None:
        try:
            return DoubleValue(float(text.strip()))
        except ValueError:
            return None


class StringCodec(Codec):
    """Text codec; every string decodes."""

    def to_short_string(self) -> str:
        return "string"

    def decode(self, text: str) -> StringValue:
        return StringValue(text)


class DateCodec(Codec):
    """
    Date codec parameterised by a ``strftime`` format.

    The default format is ``%Y-%m-%d`` (short string ``date``); the
    date-time format ``%Y-%m-%d %H:%M:%S`` renders as ``date.time``; any
    other format renders as ``date(<format>)``.
    """

    def __init__(self, format: str = DATE_FORMAT) -> None:
        self.format = format

    def to_short_string(self) -> str:
        if self.format == DATE_FORMAT:
            return "date"
        if self.format == DATE_TIME_FORMAT:
            return "date.time"
        return f"date({self.format})"

    def decode(self, text: str) -> DateValue | None:
        try:
            return DateValue(datetime.strptime(text.strip(), self.format), self)
        except ValueError:
            return None

    def encode(self, value: Value) -> str:
        return value.value.strftime(self.format)

    def __repr__(self) -> str:
        return f"DateCodec({self.format!r})"


class StructuredCodec(Codec):
    """
    Base for user-defined structured record codecs.

    Subclasses provide ``to_short_string``, ``decode`` (returning a
    StructuredValue bound to ``self``), ``encode`` and ``compare``.
    """

    @abstractmethod
    def encode(self, value: Value) -> str:
        ...

    @abstractmethod
    def compare(self, x: Value, y: Value) -> int:
        ...


def codec_from_short_string(
    text: str,
    structured: tuple[StructuredCodec, ...] = (),
) -> Codec | None:
    """
    Resolve a codec from its short string.

    Args:
        text: Short string such as ``"long"``, ``"date"`` or
            ``"date(%d/%m/%Y)"``
        structured: Structured codecs to consider besides the built-ins

    Returns:
        The codec, or None when the name is unknown
    """
    text = text.strip()
    builtin = {
        "long": LongCodec(),
        "double": DoubleCodec(),
        "string": StringCodec(),
        "date": DateCodec(),
        "date.time": DateCodec(DATE_TIME_FORMAT),
    }
    if text in builtin:
        return builtin[text]
    if text.startswith("date(") and text.endswith(")"):
        return DateCodec(text[5:-1])
    for codec in structured:
        if codec.to_short_string() == text:
            return codec
    return None


# =============================================================================
# Values
# =============================================================================


class Value(ABC):
    """
    Typed scalar. Subclasses are frozen dataclasses with a ``value`` field.
    """

    value: Any

    @property
    @abstractmethod
    def codec(self) -> Codec:
        ...

    def compare(self, other: Value) -> int:
        """
        Total order within a variant.

        Raises:
            IncomparableValuesError: If ``other`` is a different variant
        """
        if type(self) is not type(other):
            raise IncomparableValuesError(
                f"Cannot compare {type(self).__name__} with {type(other).__name__}"
            )
        return self.codec.compare(self, other)

    def to_short_string(self) -> str:
        return self.codec.encode(self)

    # Conversions; None when the variant does not convert.

    def as_double(self) -> float | None:
        return None

    def as_long(self) -> int | None:
        return None

    def as_string(self) -> str | None:
        return None

    def as_date(self) -> datetime | None:
        return None

    def as_structured(self) -> Any | None:
        return None

    # Query helpers. Incomparable operands answer False.

    def _try_compare(self, other: Any) -> int | None:
        try:
            return self.compare(to_value(other))
        except (IncomparableValuesError, TypeError):
            return None

    def equ(self, other: Any) -> bool:
        return self._try_compare(other) == 0

    def neq(self, other: Any) -> bool:
        return not self.equ(other)

    def gtr(self, other: Any) -> bool:
        c = self._try_compare(other)
        return c is not None and c > 0

    def geq(self, other: Any) -> bool:
        c = self._try_compare(other)
        return c is not None and c >= 0

    def lss(self, other: Any) -> bool:
        c = self._try_compare(other)
        return c is not None and c < 0

    def leq(self, other: Any) -> bool:
        c = self._try_compare(other)
        return c is not None and c <= 0

    def __lt__(self, other: Value) -> bool:
        return self.compare(other) < 0

    def __le__(self, other: Value) -> bool:
        return self.compare(other) <= 0

    def __gt__(self, other: Value) -> bool:
        return self.compare(other) > 0

    def __ge__(self, other: Value) -> bool:
        return self.compare(other) >= 0


@dataclass(frozen=True)
class LongValue(Value):
    value: int

    def __post_init__(self) -> None:
        if isinstance(self.value, bool) or not isinstance(self.value, numbers.Integral):
            raise TypeError(f"LongValue requires an integer, got {type(self.value).__name__}")
        object.__setattr__(self, 'value', int(self.value))

    @property
    def codec(self) -> Codec:
        return LongCodec()

    def as_double(self) -> float:
        return float(self.value)

    def as_long(self) -> int:
        return self.value


@dataclass(frozen=True)
class DoubleValue(Value):
    value: float

    def __post_init__(self) -> None:
        if isinstance(self.value, bool) or not isinstance(self.value, numbers.Real):
            raise TypeError(f"DoubleValue requires a real number, got {type(self.value).__name__}")
        object.__setattr__(self, 'value', float(self.value))

    @property
    def codec(self) -> Codec:
        return DoubleCodec()

    def as_double(self) -> float:
        return self.value


@dataclass(frozen=True)
class StringValue(Value):
    value: str

    def __post_init__(self) -> None:
        if not isinstance(self.value, str):
            raise TypeError(f"StringValue requires a str, got {type(self.value).__name__}")

    @property
    def codec(self) -> Codec:
        return StringCodec()

    def as_string(self) -> str:
        return self.value


@dataclass(frozen=True)
class DateValue(Value):
    value: datetime
    date_codec: DateCodec = field(default_factory=DateCodec, compare=False)

    def __post_init__(self) -> None:
        if isinstance(self.value, date) and not isinstance(self.value, datetime):
            object.__setattr__(self, 'value', datetime(self.value.year, self.value.month, self.value.day))
        if not isinstance(self.value, datetime):
            raise TypeError(f"DateValue requires a date, got {type(self.value).__name__}")

    @property
    def codec(self) -> Codec:
        return self.date_codec

    def as_date(self) -> datetime:
        return self.value


@dataclass(frozen=True)
class StructuredValue(Value):
    value: Any
    structured_codec: StructuredCodec = field(compare=False, hash=False)

    @property
    def codec(self) -> Codec:
        return self.structured_codec

    def as_structured(self) -> Any:
        return self.value


def to_value(x: Any) -> Value:
    """
    Convert a Python scalar into a Value.

    ``int`` becomes LongValue, ``float`` DoubleValue, ``str`` StringValue and
    ``date``/``datetime`` DateValue. Values pass through unchanged. numpy
    scalars convert through the ``numbers`` ABCs.

    Raises:
        TypeError: For booleans and unsupported types
    """
    if isinstance(x, Value):
        return x
    if isinstance(x, bool):
        raise TypeError("Booleans are not a supported value variant")
    if isinstance(x, numbers.Integral):
        return LongValue(int(x))
    if isinstance(x, numbers.Real):
        return DoubleValue(float(x))
    if isinstance(x, str):
        return StringValue(x)
    if isinstance(x, (date, datetime)):
        return DateValue(x)
    raise TypeError(f"Cannot convert {type(x).__name__} to a Value")


def concatenate(separator: str = ".") -> Callable[[Value, Value], Value]:
    """Merge function for ``melt`` joining short strings with ``separator``."""

    def merge(left: Value, right: Value) -> Value:
        return StringValue(left.to_short_string() + separator + right.to_short_string())

    return merge
