"""
Summarise command: aggregate a cell file over or along a dimension.

Each requested aggregator writes its result at
``selected.append(<aggregator name>)``, so several aggregators can share a
run without colliding:

    cellmatrix summarise -i cells.txt -d 2 --over 2 -a count,mean -o out.txt

    fid:A|count|discrete|long|2
    fid:A|mean|continuous|double|6.28
"""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Callable, Dict, List

from cellmatrix.algebra.aggregate import Aggregator, Count, Entropy, Max, MaxAbs, Mean, Min, Moments, Sum
from cellmatrix.cli._common import add_common_arguments, io_config, prepare_args, read_cells, runtime_config
from cellmatrix.cli._validators import _dimension
from cellmatrix.core.slice import along, over
from cellmatrix.io.writers import cell_to_string, save_as_text

AGGREGATORS: Dict[str, Callable[[], Aggregator]] = {
    "count": lambda: Count("count"),
    "sum": lambda: Sum("sum"),
    "min": lambda: Min("min"),
    "max": lambda: Max("max"),
    "max-abs": lambda: MaxAbs("max-abs"),
    "mean": lambda: Mean("mean"),
    "sd": lambda: Moments(sd="sd"),
    "skewness": lambda: Moments(skewness="skewness"),
    "kurtosis": lambda: Moments(kurtosis="kurtosis"),
    "entropy": lambda: Entropy("entropy"),
}


def parse_aggregators(text: str) -> List[Aggregator]:
    """
    Build aggregators from a comma-separated list of names.

    Raises:
        ValueError: If a name is unknown or the list is empty
    """
    names = [n.strip() for n in text.split(",") if n.strip()]
    if not names:
        raise ValueError("At least one aggregator is required")
    unknown = [n for n in names if n not in AGGREGATORS]
    if unknown:
        raise ValueError(
            f"Unknown aggregators {unknown}. Choose from: {', '.join(AGGREGATORS)}"
        )
    return [AGGREGATORS[n]() for n in dict.fromkeys(names)]


def register_parser(subparsers: argparse._SubParsersAction) -> None:
    """Register the summarise subcommand."""
    parser = subparsers.add_parser(
        "summarise",
        help="Aggregate cells over or along a dimension",
        description=(
            "Group the cells of a cell file by a slice and reduce every group "
            "with one or more aggregators."
        )
    )
    add_common_arguments(parser)
    parser.add_argument("--output", "-o", type=Path, default=Path("results/summary.txt"),
                        help="Output cell file (default: results/summary.txt)")

    slicing = parser.add_mutually_exclusive_group()
    slicing.add_argument("--over", type=_dimension, default=None,
                         help="Group by this dimension")
    slicing.add_argument("--along", type=_dimension, default=None,
                         help="Group by every dimension except this one")

    parser.add_argument("--aggregators", "-a", type=str, default="count",
                        help=f"Comma-separated aggregators: {', '.join(AGGREGATORS)} (default: count)")
    parser.set_defaults(func=run_summarise)


def run_summarise(args: argparse.Namespace) -> int:
    """Execute the summarise command."""
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )
    logger = logging.getLogger(__name__)

    args = prepare_args(args)
    if args is None:
        return 1

    if (args.over is None) == (args.along is None):
        print("ERROR: exactly one of --over or --along is required (via CLI or config file)")
        return 1
    slc = over(args.over) if args.over is not None else along(args.along)

    try:
        aggregators = parse_aggregators(args.aggregators)
        tuner = runtime_config(args).to_tuner()
        data, errors = read_cells(args)
    except (FileNotFoundError, ValueError) as e:
        print(f"ERROR: {e}")
        return 1

    n_errors = errors.count()
    if n_errors:
        logger.warning(f"Skipped {n_errors} unparseable lines")

    logger.info(f"Summarising {data.count()} cells {slc!r} with {[a.name for a in aggregators]}")
    result = data.summarise(slc, aggregators, tuner=tuner)

    io = io_config(args)
    try:
        save_as_text(result, args.output, cell_to_string(io.descriptive, io.separator))
    except OSError as e:
        print(f"ERROR: {e}")
        return 1
    return 0
