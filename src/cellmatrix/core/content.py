"""
Schema-classified cell content.

Content pairs a Value with a Schema. The schema names the kind of variable
(continuous, discrete, nominal, ordinal, date, structured) and may carry
constraints used for validation and descriptive rendering: bounds for numeric
schemas, a step for discrete ones and a domain for categorical ones.

Type hierarchy:
    CONTINUOUS and DISCRETE generalise to NUMERICAL; NOMINAL and ORDINAL to
    CATEGORICAL. Types with nothing in common join to MIXED. ``Type.join`` is
    associative and commutative, which lets ``Matrix.types`` reduce in any
    order.

Examples:
    >>> from cellmatrix.core.content import Content, ContinuousSchema
    >>> from cellmatrix.core.encoding import DoubleValue
    >>> c = Content(ContinuousSchema(), DoubleValue(3.14))
    >>> c.to_short_string()
    'continuous|double|3.14'
    >>> ContinuousSchema(0.0, 10.0).validate(DoubleValue(11.0))
    False
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Callable, Sequence

from cellmatrix.core.encoding import (
    Codec,
    DateValue,
    DoubleValue,
    LongValue,
    StringValue,
    StructuredValue,
    Value,
    to_value,
)

__all__ = [
    'Type',
    'Schema',
    'ContinuousSchema',
    'DiscreteSchema',
    'NominalSchema',
    'OrdinalSchema',
    'DateSchema',
    'StructuredSchema',
    'Content',
    'to_content',
    'content_parser',
    'schema_from_short_string',
]


class Type(Enum):
    """Variable type of a content, with its generalisation."""

    MIXED = "mixed"
    NUMERICAL = "numerical"
    CONTINUOUS = "continuous"
    DISCRETE = "discrete"
    CATEGORICAL = "categorical"
    NOMINAL = "nominal"
    ORDINAL = "ordinal"
    DATE = "date"
    STRUCTURED = "structured"

    @property
    def general(self) -> Type:
        """One step up the hierarchy; general types map to themselves."""
        return _GENERAL.get(self, self)

    def is_specialisation_of(self, other: Type) -> bool:
        return self == other or self.general == other

    @staticmethod
    def join(a: Type, b: Type) -> Type:
        """Least common type of ``a`` and ``b``."""
        if a == b:
            return a
        if a.general == b.general and a.general in (Type.NUMERICAL, Type.CATEGORICAL):
            return a.general
        return Type.MIXED

    def __str__(self) -> str:
        return self.value


_GENERAL = {
    Type.CONTINUOUS: Type.NUMERICAL,
    Type.DISCRETE: Type.NUMERICAL,
    Type.NOMINAL: Type.CATEGORICAL,
    Type.ORDINAL: Type.CATEGORICAL,
}


# =============================================================================
# Schemas
# =============================================================================


class Schema(ABC):
    """
    Classification of a value plus optional constraints.

    Subclasses report their ``kind`` and decide which value variants they
    admit (``_admits``); ``validate`` then applies the constraints.
    """

    kind: Type

    @abstractmethod
    def _admits(self, value: Value) -> bool:
        ...

    def _within(self, value: Value) -> bool:
        return True

    def validate(self, value: Value) -> bool:
        """True when ``value`` has an admitted variant and meets the constraints."""
        return self._admits(value) and self._within(value)

    def to_short_string(self) -> str:
        return self.kind.value

    def _params(self) -> list[Any]:
        return []

    def __eq__(self, other: object) -> bool:
        return type(self) is type(other) and self._params() == other._params()

    def __hash__(self) -> int:
        return hash((type(self).__name__, repr(self._params())))

    def __repr__(self) -> str:
        params = ",".join(str(p) for p in self._params() if p is not None)
        return f"{type(self).__name__}({params})"


class _NumericSchema(Schema):
    def __init__(self, minimum: float | None = None, maximum: float | None = None) -> None:
        if minimum is not None and maximum is not None and minimum > maximum:
            raise ValueError(f"minimum ({minimum}) must not exceed maximum ({maximum})")
        self.minimum = minimum
        self.maximum = maximum

    def _within(self, value: Value) -> bool:
        x = value.as_double()
        if self.minimum is not None and x < self.minimum:
            return False
        if self.maximum is not None and x > self.maximum:
            return False
        return True

    def _params(self) -> list[Any]:
        return [self.minimum, self.maximum]


class ContinuousSchema(_NumericSchema):
    """Real-valued variable with optional inclusive bounds."""

    kind = Type.CONTINUOUS

    def _admits(self, value: Value) -> bool:
        return isinstance(value, (LongValue, DoubleValue))


class DiscreteSchema(_NumericSchema):
    """
    Integer-valued variable with optional bounds and step.

    With a step, valid values are ``minimum + k * step`` (or multiples of the
    step when there is no minimum).
    """

    kind = Type.DISCRETE

    def __init__(
        self,
        minimum: int | None = None,
        maximum: int | None = None,
        step: int | None = None,
    ) -> None:
        super().__init__(minimum, maximum)
        if step is not None and step <= 0:
            raise ValueError(f"step must be positive, got {step}")
        self.step = step

    def _admits(self, value: Value) -> bool:
        return isinstance(value, LongValue)

    def _within(self, value: Value) -> bool:
        if not super()._within(value):
            return False
        if self.step is not None:
            return (value.value - (self.minimum or 0)) % self.step == 0
        return True

    def _params(self) -> list[Any]:
        return [self.minimum, self.maximum, self.step]


class _CategoricalSchema(Schema):
    def __init__(self, domain: Sequence[Any] | None = None) -> None:
        self.domain = None if domain is None else tuple(to_value(d) for d in domain)

    def _admits(self, value: Value) -> bool:
        return isinstance(value, (LongValue, DoubleValue, StringValue))

    def _within(self, value: Value) -> bool:
        return self.domain is None or value in self.domain

    def _params(self) -> list[Any]:
        if self.domain is None:
            return []
        return [",".join(d.to_short_string() for d in self.domain)]


class NominalSchema(_CategoricalSchema):
    """Unordered categorical variable with an optional domain."""

    kind = Type.NOMINAL


class OrdinalSchema(_CategoricalSchema):
    """Ordered categorical variable with an optional domain."""

    kind = Type.ORDINAL


class DateSchema(Schema):
    """Date variable with optional inclusive bounds."""

    kind = Type.DATE

    def __init__(self, lower: datetime | None = None, upper: datetime | None = None) -> None:
        self.lower = lower
        self.upper = upper

    def _admits(self, value: Value) -> bool:
        return isinstance(value, DateValue)

    def _within(self, value: Value) -> bool:
        d = value.as_date()
        if self.lower is not None and d < self.lower:
            return False
        if self.upper is not None and d > self.upper:
            return False
        return True

    def _params(self) -> list[Any]:
        return [self.lower, self.upper]


class StructuredSchema(Schema):
    """Base for user-defined schemas over structured values."""

    kind = Type.STRUCTURED

    def _admits(self, value: Value) -> bool:
        return isinstance(value, StructuredValue)


def schema_from_short_string(text: str) -> Schema | None:
    """Unconstrained schema for a type name; None for unknown names."""
    factories: dict[str, Callable[[], Schema]] = {
        "continuous": ContinuousSchema,
        "discrete": DiscreteSchema,
        "nominal": NominalSchema,
        "ordinal": OrdinalSchema,
        "date": DateSchema,
    }
    factory = factories.get(text.strip())
    return factory() if factory is not None else None


# =============================================================================
# Content
# =============================================================================


@dataclass(frozen=True)
class Content:
    """A value classified by a schema."""

    schema: Schema
    value: Value

    @property
    def type(self) -> Type:
        return self.schema.kind

    def is_valid(self) -> bool:
        return self.schema.validate(self.value)

    def to_short_string(self, separator: str = "|") -> str:
        return separator.join([
            self.schema.to_short_string(),
            self.value.codec.to_short_string(),
            self.value.to_short_string(),
        ])

    def __str__(self) -> str:
        return f"Content({self.schema!r},{self.value!r})"


def to_content(x: Any) -> Content:
    """
    Content for a Python scalar with the default schema for its variant.

    Integers are discrete, reals continuous, strings nominal and dates date.
    Content passes through unchanged.
    """
    if isinstance(x, Content):
        return x
    value = to_value(x)
    if isinstance(value, LongValue):
        return Content(DiscreteSchema(), value)
    if isinstance(value, DoubleValue):
        return Content(ContinuousSchema(), value)
    if isinstance(value, DateValue):
        return Content(DateSchema(), value)
    return Content(NominalSchema(), value)


def content_parser(codec: Codec, schema: Schema) -> Callable[[str], Content | None]:
    """
    Build a text-to-content parser.

    The returned callable decodes with ``codec`` and validates with
    ``schema``; it answers None when either step fails.

    Examples:
        >>> parse = content_parser(LongCodec(), DiscreteSchema(0, 10))
        >>> parse("3").value
        LongValue(value=3)
        >>> parse("30") is None
        True
    """

    def parse(text: str) -> Content | None:
        value = codec.decode(text)
        if value is None or not schema.validate(value):
            return None
        return Content(schema, value)

    return parse
