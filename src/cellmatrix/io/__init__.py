"""
I/O module for reading and writing cell matrices.

Key Functions:
    - load_text: Parse a file of one cell per line, with a parse-error stream
    - load_table: Read a delimited table with a header row
    - save_as_text: Write cells atomically, one per line
    - save_as_csv: Write a 2-D matrix as a dense table

Examples:
    >>> from cellmatrix.io import load_text, cell_parser, save_as_text
    >>> from cellmatrix.core import StringCodec
    >>> data, errors = load_text(Path("cells.txt"), cell_parser([StringCodec()] * 2))
    >>> save_as_text(data, Path("clean.txt"))
"""

from cellmatrix.io.loaders import (
    MatrixWithParseErrors,
    cell_parser,
    dictionary_parser,
    infer_content,
    load_table,
    load_text,
    parse_cell,
    sniff_delimiter,
)
from cellmatrix.io.writers import (
    cell_to_key_value,
    cell_to_string,
    position_to_string,
    save_as_csv,
    save_as_text,
    to_dataframe,
)

__all__ = [
    'MatrixWithParseErrors',
    'cell_parser',
    'dictionary_parser',
    'infer_content',
    'load_table',
    'load_text',
    'parse_cell',
    'sniff_delimiter',
    'cell_to_key_value',
    'cell_to_string',
    'position_to_string',
    'save_as_csv',
    'save_as_text',
    'to_dataframe',
]
