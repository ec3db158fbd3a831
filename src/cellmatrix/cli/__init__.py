"""
cellmatrix CLI - Command-line interface for sparse labeled matrices.

Commands:
    cellmatrix describe   - Report shape, names and types of a cell file
    cellmatrix summarise  - Aggregate cells over or along a dimension
"""

import argparse
import sys
from typing import Optional, List


def main(args: Optional[List[str]] = None) -> int:
    """Main CLI dispatcher for cellmatrix."""
    parser = argparse.ArgumentParser(
        prog="cellmatrix",
        description="Sparse labeled matrices and their algebra",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Commands:
  describe      Report shape, names and types of a cell file
  summarise     Aggregate cells over or along a dimension

Examples:
  cellmatrix describe --input cells.txt --dimensions 3 --output results/describe
  cellmatrix summarise --input cells.txt --dimensions 3 --over 2 --aggregators count,mean
  cellmatrix summarise --config pipeline.yaml --strategy parallel --n-jobs 4
        """
    )

    parser.add_argument(
        "--version", "-V",
        action="version",
        version="%(prog)s 0.1.0"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    from cellmatrix.cli import describe, summarise
    describe.register_parser(subparsers)
    summarise.register_parser(subparsers)

    raw_args = list(args) if args is not None else sys.argv[1:]
    parsed_args = parser.parse_args(raw_args)

    if parsed_args.command is None:
        parser.print_help()
        return 0

    # Kept so config merging can tell explicit flags from defaults
    parsed_args.cli_args = raw_args[1:]
    return parsed_args.func(parsed_args)


if __name__ == "__main__":
    sys.exit(main())
