"""
Configuration file support for the cellmatrix CLI.

Supports YAML and JSON config files with CLI argument override:

    input: data/cells.txt
    output: results/summary.txt
    dimensions: 3
    io:
      separator: "|"
      descriptive: false
    runtime:
      strategy: parallel
      n_jobs: 4
    summarise:
      over: 2
      aggregators: [count, mean]
"""

import json
from argparse import Namespace
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from cellmatrix.runtime.tuner import Strategy, Tuner

STRATEGIES = [s.value for s in Strategy]


@dataclass
class RuntimeConfig:
    """Execution settings."""
    strategy: str = "default"
    n_jobs: int = -1

    def to_tuner(self) -> Tuner:
        """Tuner for these settings; raises ValueError for an unknown strategy."""
        return Tuner(Strategy(self.strategy), n_jobs=self.n_jobs)


@dataclass
class IOConfig:
    """Reader and writer settings."""
    separator: str = "|"
    descriptive: bool = False


def load_config(config_path: Path) -> Dict[str, Any]:
    """
    Load configuration from YAML or JSON file.

    Parameters:
        config_path: Path to config file (.yaml, .yml, or .json)

    Returns:
        Dictionary with configuration values

    Raises:
        FileNotFoundError: If config file doesn't exist
        ValueError: If file format is unsupported or invalid

    Examples:
        >>> config = load_config(Path("pipeline.yaml"))
        >>> print(config['runtime']['strategy'])
        parallel
    """
    config_path = Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    suffix = config_path.suffix.lower()

    try:
        with open(config_path, 'r') as f:
            if suffix in ('.yaml', '.yml'):
                config = yaml.safe_load(f)
            elif suffix == '.json':
                config = json.load(f)
            else:
                raise ValueError(
                    f"Unsupported config format: {suffix}. "
                    f"Use .yaml, .yml, or .json"
                )
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML in config file: {e}") from e
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON in config file: {e}") from e

    if config is None:
        return {}

    if not isinstance(config, dict):
        raise ValueError("Config file must contain a dictionary/mapping at top level")

    return config


def _merge_value(cli_value: Any, config_value: Any, arg_name: str, was_explicitly_set: bool) -> Any:
    """
    Merge a single config value with CLI argument.

    Rules:
    - CLI args ALWAYS override config if explicitly set
    - If CLI arg not set, use config value
    - If neither set, keep CLI default
    """
    if was_explicitly_set:
        return cli_value
    if config_value is not None:
        return config_value
    return cli_value


def _explicit_args(cli_args: Optional[List[str]]) -> set:
    short_to_long = {
        'i': 'input',
        'o': 'output',
        'd': 'dimensions',
        'a': 'aggregators',
    }
    explicit = set()
    for arg in cli_args or []:
        if arg.startswith('--'):
            explicit.add(arg[2:].split('=', 1)[0].replace('-', '_'))
        elif arg.startswith('-') and len(arg) == 2 and arg[1] in short_to_long:
            explicit.add(short_to_long[arg[1]])
    return explicit


def merge_config_with_args(config: Dict[str, Any], args: Namespace, cli_args: Optional[List[str]] = None) -> Namespace:
    """
    Merge config file values with CLI arguments.

    Priority (highest to lowest):
    1. Explicitly provided CLI arguments
    2. Config file values
    3. CLI argument defaults

    Only arguments the command defines are merged; a shared config file may
    carry settings for other commands.

    Parameters:
        config: Configuration dictionary from load_config()
        args: Parsed CLI arguments (argparse.Namespace)
        cli_args: Raw CLI arguments list (for detecting explicit values).
                  If None, assumes all args are defaults

    Returns:
        Updated Namespace with merged values
    """
    explicit_args = _explicit_args(cli_args)
    merged = Namespace(**vars(args))

    # (section, config key) -> argument name
    mappings = {
        (None, 'input'): 'input',
        (None, 'output'): 'output',
        (None, 'dimensions'): 'dimensions',
        ('io', 'separator'): 'separator',
        ('io', 'descriptive'): 'descriptive',
        ('runtime', 'strategy'): 'strategy',
        ('runtime', 'n_jobs'): 'n_jobs',
        ('summarise', 'over'): 'over',
        ('summarise', 'along'): 'along',
        ('summarise', 'aggregators'): 'aggregators',
    }

    for (section, key), arg_name in mappings.items():
        source = config if section is None else config.get(section) or {}
        if key not in source or not hasattr(merged, arg_name):
            continue
        config_value = source[key]
        if config_value is not None and arg_name in ('input', 'output'):
            config_value = Path(config_value)
        if arg_name == 'aggregators' and isinstance(config_value, list):
            config_value = ",".join(config_value)
        setattr(merged, arg_name, _merge_value(
            getattr(merged, arg_name),
            config_value,
            arg_name,
            arg_name in explicit_args
        ))

    # over/along are alternatives; an explicit CLI choice clears the config one
    if 'over' in explicit_args and hasattr(merged, 'along'):
        merged.along = args.along
    if 'along' in explicit_args and hasattr(merged, 'over'):
        merged.over = args.over

    return merged


def validate_config(config: Dict[str, Any]) -> None:
    """
    Validate configuration structure and values.

    Raises:
        ValueError: If configuration is invalid
    """
    runtime = config.get('runtime') or {}
    if 'strategy' in runtime and runtime['strategy'] not in STRATEGIES:
        raise ValueError(
            f"Invalid strategy '{runtime['strategy']}'. "
            f"Choose from: {', '.join(STRATEGIES)}"
        )
    if 'n_jobs' in runtime:
        n_jobs = runtime['n_jobs']
        if not isinstance(n_jobs, int) or isinstance(n_jobs, bool) or n_jobs == 0:
            raise ValueError(f"n_jobs must be a non-zero integer, got: {n_jobs}")

    if 'dimensions' in config:
        dimensions = config['dimensions']
        if not isinstance(dimensions, int) or isinstance(dimensions, bool) or not 1 <= dimensions <= 9:
            raise ValueError(f"dimensions must be an integer in [1, 9], got: {dimensions}")

    io = config.get('io') or {}
    if 'separator' in io and (not isinstance(io['separator'], str) or not io['separator']):
        raise ValueError(f"separator must be a non-empty string, got: {io['separator']!r}")

    summarise = config.get('summarise') or {}
    if summarise.get('over') is not None and summarise.get('along') is not None:
        raise ValueError("summarise accepts either 'over' or 'along', not both")
    if 'aggregators' in summarise:
        from cellmatrix.cli.summarise import AGGREGATORS
        names = summarise['aggregators']
        if isinstance(names, str):
            names = names.split(',')
        unknown = [n for n in names if n not in AGGREGATORS]
        if unknown:
            raise ValueError(
                f"Unknown aggregators {unknown}. "
                f"Choose from: {', '.join(AGGREGATORS)}"
            )
