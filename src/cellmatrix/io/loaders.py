"""
Parsers and loaders that turn text into cells.

Two layouts are supported:

    Cell text (one cell per line):
        ``<coord 1>|...|<coord K>|<type>|<codec>|<value>``, the same form
        ``Cell.to_short_string`` writes. Coordinates are decoded with one
        codec per dimension.

    Delimited table (header row, one row per entity):
        read with pandas. The id column becomes the first coordinate and
        every other column name the second; empty fields are absent cells.

Loading never raises for bad records. Lines that cannot be decoded
(ParseError) or that decode but fail their schema (ValidationError) are
collected in the ``errors`` collection next to the parsed matrix, so that a
pipeline can report or persist them separately:

    >>> data, errors = load_text(Path("cells.txt"), cell_parser([StringCodec(), StringCodec()]))
    >>> data.count(), errors.count()
    (3, 1)
"""

from __future__ import annotations

import csv
import logging
import warnings
from pathlib import Path
from typing import Callable, Iterable, Mapping, NamedTuple, Sequence

import pandas as pd

from cellmatrix.core.cell import Cell
from cellmatrix.core.content import (
    Content,
    ContinuousSchema,
    DiscreteSchema,
    NominalSchema,
    schema_from_short_string,
)
from cellmatrix.core.encoding import (
    Codec,
    DoubleCodec,
    LongCodec,
    StringCodec,
    StructuredCodec,
    codec_from_short_string,
)
from cellmatrix.core.errors import ParseError, ValidationError
from cellmatrix.core.position import Position
from cellmatrix.matrix import Matrix
from cellmatrix.runtime.collection import Collection, LocalCollection

logger = logging.getLogger(__name__)

__all__ = [
    'MatrixWithParseErrors',
    'parse_cell',
    'cell_parser',
    'dictionary_parser',
    'infer_content',
    'load_text',
    'load_table',
    'sniff_delimiter',
]

LineParser = Callable[[str], Cell]


class MatrixWithParseErrors(NamedTuple):
    """Parsed cells plus the messages of every rejected record."""

    data: Matrix
    errors: Collection[str]


# =============================================================================
# Line parsers
# =============================================================================


def parse_cell(
    line: str,
    codecs: Sequence[Codec],
    separator: str = "|",
    structured: tuple[StructuredCodec, ...] = (),
) -> Cell:
    """
    Parse one ``<coords>|<type>|<codec>|<value>`` line.

    The value is the remainder of the line, so it may itself contain the
    separator.

    Args:
        line: Text to parse
        codecs: One codec per coordinate; fixes the dimensionality
        separator: Field separator
        structured: Structured codecs the content codec may name

    Returns:
        The parsed cell

    Raises:
        ParseError: If a field is missing or cannot be decoded
        ValidationError: If the value does not satisfy its schema
    """
    k = len(codecs)
    parts = line.rstrip("\r\n").split(separator, k + 2)
    if len(parts) != k + 3:
        raise ParseError(f"Expected {k} coordinates plus type, codec and value", line)

    coordinates = []
    for codec, text in zip(codecs, parts[:k]):
        value = codec.decode(text)
        if value is None:
            raise ParseError(f"Unable to decode coordinate {text!r} with {codec!r}", line)
        coordinates.append(value)

    schema = schema_from_short_string(parts[k])
    if schema is None:
        raise ParseError(f"Unknown type {parts[k]!r}", line)
    codec = codec_from_short_string(parts[k + 1], structured)
    if codec is None:
        raise ParseError(f"Unknown codec {parts[k + 1]!r}", line)
    value = codec.decode(parts[k + 2])
    if value is None:
        raise ParseError(f"Unable to decode value {parts[k + 2]!r} with {codec!r}", line)
    if not schema.validate(value):
        raise ValidationError(f"Value {parts[k + 2]!r} is not valid for {schema!r}", line)
    return Cell(Position(*coordinates), Content(schema, value))


def cell_parser(codecs: Sequence[Codec], separator: str = "|") -> LineParser:
    """Line parser for ``parse_cell`` with fixed codecs."""
    codecs = list(codecs)
    return lambda line: parse_cell(line, codecs, separator)


def dictionary_parser(
    dictionary: Mapping[str, Callable[[str], Content | None]],
    separator: str = "|",
    first: Codec | None = None,
) -> LineParser:
    """
    Parser for ``<id>|<variable>|<value>`` lines.

    The variable name selects a content parser (see ``content_parser``)
    from ``dictionary``; the cell lands at ``Position(id, variable)``.
    """
    first = first or StringCodec()

    def parse(line: str) -> Cell:
        parts = line.rstrip("\r\n").split(separator, 2)
        if len(parts) != 3:
            raise ParseError("Expected id, variable and value", line)
        row, variable, text = parts
        row_value = first.decode(row)
        if row_value is None:
            raise ParseError(f"Unable to decode id {row!r}", line)
        parser = dictionary.get(variable)
        if parser is None:
            raise ParseError(f"Variable {variable!r} not in dictionary", line)
        content = parser(text)
        if content is None:
            raise ValidationError(f"Value {text!r} is not valid for {variable!r}", line)
        return Cell(Position(row_value, variable), content)

    return parse


def infer_content(text: str) -> Content | None:
    """Discrete if the text is an integer, continuous if real, nominal otherwise."""
    if text == "":
        return None
    long_value = LongCodec().decode(text)
    if long_value is not None:
        return Content(DiscreteSchema(), long_value)
    double_value = DoubleCodec().decode(text)
    if double_value is not None:
        return Content(ContinuousSchema(), double_value)
    return Content(NominalSchema(), StringCodec().decode(text))


# =============================================================================
# Loaders
# =============================================================================


def _validate_path(path: Path) -> Path:
    if not isinstance(path, Path):
        path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Data file not found: {path}")
    if not path.is_file():
        raise ValueError(f"Path is not a file: {path}")
    return path


def _collect(records: Iterable[tuple[str, Callable[[], Cell]]]) -> MatrixWithParseErrors:
    cells: list[Cell] = []
    errors: list[str] = []
    for line, parse in records:
        try:
            cells.append(parse())
        except ParseError as e:
            errors.append(f"{e}: {line}")

    positions = [c.position for c in cells]
    n_duplicates = len(positions) - len(set(positions))
    if n_duplicates:
        warnings.warn(
            f"Found {n_duplicates} duplicate positions. "
            "Keeping the first occurrence of each.",
            UserWarning
        )
        seen: set[Position] = set()
        unique = []
        for c in cells:
            if c.position not in seen:
                seen.add(c.position)
                unique.append(c)
        cells = unique

    if errors:
        logger.warning(f"Rejected {len(errors)} records while parsing")
    return MatrixWithParseErrors(Matrix(LocalCollection(cells)), LocalCollection(errors))


def load_text(path: Path, parser: LineParser, encoding: str = "utf-8") -> MatrixWithParseErrors:
    """
    Load a text file of one record per line.

    Blank lines are ignored. Lines that are not valid in ``encoding`` are
    rejected into the error stream like any other unparseable record.

    Args:
        path: Input file
        parser: Line parser, e.g. ``cell_parser([...])``
        encoding: File encoding

    Returns:
        ``(data, errors)``; unpackable as a tuple

    Raises:
        FileNotFoundError: If path does not exist
        ValueError: If path is not a file
    """
    path = _validate_path(path)
    with open(path, "rb") as f:
        raw_lines = [raw.rstrip(b"\r\n") for raw in f if raw.strip()]

    def parse(raw: bytes) -> Cell:
        try:
            line = raw.decode(encoding)
        except UnicodeDecodeError as e:
            raise ParseError(f"Unable to decode line as {encoding} ({e.reason} at byte {e.start})") from e
        return parser(line)

    result = _collect(
        (raw.decode(encoding, errors="replace"), lambda raw=raw: parse(raw))
        for raw in raw_lines
    )
    logger.info(f"Loaded {result.data.count()} cells from {path}")
    return result


def sniff_delimiter(path: Path, sample_size: int = 8192) -> str:
    """
    Auto-detect the delimiter of a table.

    Raises:
        ValueError: If no delimiter can be determined
    """
    with open(path, "r", encoding="utf-8", errors="ignore") as f:
        sample = f.read(sample_size)
    try:
        return csv.Sniffer().sniff(sample, delimiters="\t,;|").delimiter
    except csv.Error:
        pass

    first_line = sample.split("\n")[0]
    counts = {d: first_line.count(d) for d in ("\t", ",", ";", "|")}
    if max(counts.values()) == 0:
        raise ValueError(f"Could not detect delimiter in {path}. Please specify it explicitly")
    return max(counts, key=counts.get)


def load_table(
    path: Path,
    schema: Mapping[str, Callable[[str], Content | None] | None] | None = None,
    separator: str | None = None,
    id_column: int | str = 0,
) -> MatrixWithParseErrors:
    """
    Load a delimited table with a header row into a 2-D matrix.

    Cells are ``Position(row_id, column_name)``. Empty fields are absent.

    Args:
        path: Input file
        schema: Content parser per column. Columns not listed are inferred
            with ``infer_content``; columns mapped to None are skipped.
        separator: Field delimiter; sniffed when None
        id_column: Position or name of the id column

    Raises:
        FileNotFoundError: If path does not exist
        ValueError: If the table is empty or unreadable
    """
    path = _validate_path(path)
    separator = separator or sniff_delimiter(path)
    logger.debug(f"Reading table {path} with delimiter {separator!r}")

    try:
        df = pd.read_csv(path, sep=separator, dtype=str, keep_default_na=False)
    except pd.errors.EmptyDataError as e:
        raise ValueError(f"Table file is empty: {path}") from e
    except Exception as e:
        raise ValueError(f"Failed to read table file {path}: {e}") from e

    if df.empty:
        raise ValueError(f"Table contains no rows: {path}")

    id_name = df.columns[id_column] if isinstance(id_column, int) else id_column
    if id_name not in df.columns:
        raise ValueError(f"Id column {id_name!r} not found in {path}")
    columns = [c for c in df.columns if c != id_name]
    schema = schema or {}
    logger.info(f"Raw table: {df.shape[0]} rows x {len(columns)} columns")

    def parse_field(row_id: str, column: str, text: str) -> Cell:
        parser = schema.get(column) or infer_content
        content = parser(text)
        if content is None:
            raise ValidationError(f"Value {text!r} is not valid for column {column!r}")
        return Cell(Position(row_id, column), content)

    records = (
        (f"{row_id}{separator}{column}{separator}{text}",
         lambda r=row_id, c=column, t=text: parse_field(r, c, t))
        for row_id, row in zip(df[id_name], df[columns].itertuples(index=False, name=None))
        for column, text in zip(columns, row)
        if text != "" and (column not in schema or schema[column] is not None)
    )
    result = _collect(records)
    logger.info(f"Loaded {result.data.count()} cells from {path}")
    return result
