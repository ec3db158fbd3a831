"""
Shared plumbing for the cellmatrix subcommands.

Every command reads a cell file, honours an optional config file and
builds a Tuner from the runtime flags.
"""

from __future__ import annotations

import argparse
import logging
from pathlib import Path

from cellmatrix.cli._validators import _arity, _n_jobs
from cellmatrix.cli.config import (
    IOConfig,
    RuntimeConfig,
    STRATEGIES,
    load_config,
    merge_config_with_args,
    validate_config,
)
from cellmatrix.core.encoding import StringCodec, codec_from_short_string
from cellmatrix.io.loaders import MatrixWithParseErrors, cell_parser, load_text

logger = logging.getLogger(__name__)


def add_common_arguments(parser: argparse.ArgumentParser) -> None:
    """Input, parsing, config and runtime flags shared by all commands."""
    parser.add_argument("--input", "-i", type=Path, default=None,
                        help="Cell file, one '<coords>|<type>|<codec>|<value>' per line")
    parser.add_argument("--dimensions", "-d", type=_arity, default=None,
                        help="Number of coordinates per cell (1-9)")
    parser.add_argument("--codecs", type=str, default=None,
                        help="Comma-separated coordinate codecs, e.g. 'string,long' "
                             "(default: string for every dimension)")
    parser.add_argument("--separator", type=str, default="|",
                        help="Field separator (default: '|')")
    parser.add_argument("--descriptive", action="store_true",
                        help="Write cells in descriptive form")
    parser.add_argument("--config", "-c", type=Path, default=None,
                        help="Path to YAML/JSON config file (optional, CLI args override config values)")

    runtime = parser.add_argument_group("runtime")
    runtime.add_argument("--strategy", choices=STRATEGIES, default="default",
                         help="Execution strategy (default: default)")
    runtime.add_argument("--n-jobs", type=_n_jobs, default=-1,
                         help="Workers for the parallel strategy (default: -1 = all cores)")


def prepare_args(args: argparse.Namespace) -> argparse.Namespace | None:
    """
    Merge the config file into ``args`` and check required arguments.

    Returns:
        The merged namespace, or None after printing an error
    """
    if args.config:
        print(f"Loading configuration from: {args.config}")
        try:
            config = load_config(args.config)
            validate_config(config)
            args = merge_config_with_args(config, args, getattr(args, "cli_args", None))
            print("  Configuration loaded successfully")
        except (FileNotFoundError, ValueError) as e:
            print(f"ERROR: Config file error: {e}")
            return None

    if not args.input:
        print("ERROR: --input is required (via CLI or config file)")
        return None
    if not args.dimensions:
        print("ERROR: --dimensions is required (via CLI or config file)")
        return None
    return args


def runtime_config(args: argparse.Namespace) -> RuntimeConfig:
    return RuntimeConfig(strategy=args.strategy, n_jobs=args.n_jobs)


def io_config(args: argparse.Namespace) -> IOConfig:
    return IOConfig(separator=args.separator, descriptive=args.descriptive)


def read_cells(args: argparse.Namespace) -> MatrixWithParseErrors:
    """
    Parse the input file.

    Raises:
        ValueError: If the codec list does not match the dimensions
        FileNotFoundError: If the input does not exist
    """
    if args.codecs:
        names = [n.strip() for n in args.codecs.split(",")]
        if len(names) != args.dimensions:
            raise ValueError(f"Expected {args.dimensions} codecs, got {len(names)}: {args.codecs}")
        codecs = []
        for name in names:
            codec = codec_from_short_string(name)
            if codec is None:
                raise ValueError(f"Unknown codec: {name}")
            codecs.append(codec)
    else:
        codecs = [StringCodec()] * args.dimensions

    logger.info(f"Loading: {args.input}")
    return load_text(args.input, cell_parser(codecs, args.separator))
