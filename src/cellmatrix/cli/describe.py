"""
Describe command: shape, names and variable types of a cell file.

Output directory layout:
    shape.txt           one cell per dimension with its distinct size
    names.<d>.txt       sorted distinct coordinates of dimension d
    types.<d>.txt       variable type of every coordinate of dimension d
    errors.txt          rejected input lines (only when there are any)
    summary.json        counts, dimensions and the files written
"""

from __future__ import annotations

import argparse
import logging
from pathlib import Path

from cellmatrix.cli._common import add_common_arguments, io_config, prepare_args, read_cells, runtime_config
from cellmatrix.core.slice import over
from cellmatrix.io.writers import cell_to_string, save_as_text
from cellmatrix.utils.fileio import atomic_write_json, atomic_write_lines


def register_parser(subparsers: argparse._SubParsersAction) -> None:
    """Register the describe subcommand."""
    parser = subparsers.add_parser(
        "describe",
        help="Report shape, names and types of a cell file",
        description=(
            "Parse a cell file and report its shape, the distinct coordinates "
            "of every dimension and the variable type of each coordinate. "
            "Unparseable lines are counted and written separately."
        )
    )
    add_common_arguments(parser)
    parser.add_argument("--output", "-o", type=Path, default=Path("results/describe"),
                        help="Output directory (default: results/describe)")
    parser.add_argument("--specific", action="store_true",
                        help="Report specific types (continuous, nominal) instead of general ones")
    parser.set_defaults(func=run_describe)


def run_describe(args: argparse.Namespace) -> int:
    """Execute the describe command."""
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )
    logger = logging.getLogger(__name__)

    args = prepare_args(args)
    if args is None:
        return 1

    try:
        data, errors = read_cells(args)
        tuner = runtime_config(args).to_tuner()
    except (FileNotFoundError, ValueError) as e:
        print(f"ERROR: {e}")
        return 1

    n_cells = data.count()
    error_lines = errors.materialise()
    print(f"Parsed {n_cells} cells ({len(error_lines)} rejected)")

    output = Path(args.output)
    output.mkdir(parents=True, exist_ok=True)
    writer = cell_to_string(io_config(args).descriptive, args.separator)
    files = []

    if n_cells:
        files.append(save_as_text(data.shape(), output / "shape.txt", writer))
        for dim in range(1, args.dimensions + 1):
            names = [p.to_short_string(args.separator) for p in data.names(over(dim))]
            names_path = output / f"names.{dim}.txt"
            atomic_write_lines(names_path, names)
            files.append(names_path)
            logger.info(f"Dimension {dim}: {len(names)} distinct coordinates")

            types = data.types(over(dim), specific=args.specific, tuner=tuner)
            files.append(save_as_text(types, output / f"types.{dim}.txt", writer))

    if error_lines:
        errors_path = output / "errors.txt"
        atomic_write_lines(errors_path, error_lines)
        files.append(errors_path)
        logger.warning(f"{len(error_lines)} lines could not be parsed, see {errors_path}")

    summary = {
        "input": str(args.input),
        "cells": n_cells,
        "rejected": len(error_lines),
        "dimensions": args.dimensions,
        "files": [str(f) for f in files],
    }
    atomic_write_json(output / "summary.json", summary)
    print(f"Wrote summary to {output / 'summary.json'}")
    return 0
