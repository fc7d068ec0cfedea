"""Batch configuration loader.

A batch configuration is a YAML file listing the metadata files to convert
and where their tables go::

    output_dir: docs/arg_tables
    metadata_files:
      - physics/scheme_a.meta
      - physics/GFS_*.meta
      - path: physics/other.meta
        output_dir: docs/other

Relative paths are resolved against the directory of the configuration file.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from scripts.metadata2html.errors import ConfigError
from scripts.utils import expand_paths, resolve_path

logger = logging.getLogger(__name__)

METADATA_FILES_KEY = "metadata_files"
OUTPUT_DIR_KEY = "output_dir"
PATH_KEY = "path"


@dataclass(frozen=True)
class ConversionTarget:
    """One metadata file and the directory its tables are written to."""

    metadata_file: Path
    output_dir: Path


def _load_yaml(config_file: Path) -> Dict[str, Any]:
    try:
        with open(config_file, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except OSError as e:
        raise ConfigError(f"Could not read configuration: {e}", config_file) from e
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML: {e}", config_file) from e

    if not isinstance(data, dict):
        raise ConfigError("Configuration must be a mapping", config_file)
    return data


def _entry_fields(entry: Any, default_output_dir: Optional[str], config_file: Path, index: int):
    """Split a metadata_files entry into its path and output directory strings."""
    if isinstance(entry, str):
        raw_path, raw_output_dir = entry, default_output_dir
    elif isinstance(entry, dict):
        if not isinstance(entry.get(PATH_KEY), str) or not entry[PATH_KEY]:
            raise ConfigError(f"Entry {index} of '{METADATA_FILES_KEY}' is missing '{PATH_KEY}'", config_file)
        unknown = set(entry) - {PATH_KEY, OUTPUT_DIR_KEY}
        if unknown:
            raise ConfigError(
                f"Entry {index} of '{METADATA_FILES_KEY}' has unknown keys: {', '.join(sorted(unknown))}",
                config_file,
            )
        raw_path = entry[PATH_KEY]
        # An empty output_dir on the entry falls back to the top-level one
        raw_output_dir = entry.get(OUTPUT_DIR_KEY) or default_output_dir
    else:
        raise ConfigError(
            f"Entry {index} of '{METADATA_FILES_KEY}' must be a path or a mapping with '{PATH_KEY}'",
            config_file,
        )

    if not raw_output_dir:
        raise ConfigError(
            f"No '{OUTPUT_DIR_KEY}' for '{raw_path}': set it at the top level or on the entry",
            config_file,
        )
    return raw_path, str(raw_output_dir)


def load_batch_config(config_file: Path) -> List[ConversionTarget]:
    """Load a batch configuration into conversion targets.

    Args:
        config_file: Path to the YAML configuration file.

    Returns:
        Targets in configuration order, glob matches sorted, duplicates removed.

    Raises:
        ConfigError: If the configuration is unreadable or invalid, or lists a
            file that does not exist.
    """
    data = _load_yaml(config_file)
    base_dir = config_file.resolve().parent

    entries = data.get(METADATA_FILES_KEY)
    if not isinstance(entries, list) or not entries:
        raise ConfigError(f"'{METADATA_FILES_KEY}' must be a non-empty list", config_file)

    default_output_dir = data.get(OUTPUT_DIR_KEY)
    if default_output_dir is not None and not isinstance(default_output_dir, str):
        raise ConfigError(f"'{OUTPUT_DIR_KEY}' must be a string", config_file)

    targets: List[ConversionTarget] = []
    for index, entry in enumerate(entries, start=1):
        raw_path, raw_output_dir = _entry_fields(entry, default_output_dir, config_file, index)
        output_dir = resolve_path(raw_output_dir, base_dir)
        try:
            metadata_files = expand_paths(raw_path, base_dir)
        except FileNotFoundError as e:
            raise ConfigError(str(e), config_file) from e

        for metadata_file in metadata_files:
            target = ConversionTarget(metadata_file=metadata_file, output_dir=output_dir)
            if target in targets:
                logger.debug(f"Skipping duplicate entry {metadata_file} -> {output_dir}")
                continue
            targets.append(target)

    logger.debug(f"Loaded {len(targets)} metadata files from {config_file}")
    return targets
