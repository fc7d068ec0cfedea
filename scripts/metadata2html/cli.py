"""Command-line interface for the metadata2html package."""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional, Sequence

from scripts.metadata2html.config_loader import ConversionTarget, load_batch_config
from scripts.metadata2html.constants import EXIT_DIFF_DETECTED, EXIT_ERROR, EXIT_SUCCESS
from scripts.metadata2html.errors import ConversionError
from scripts.metadata2html.writer import BuildRunner

logger = logging.getLogger(__name__)


def validate_metadata_file(file_path: str) -> Path:
    """Validate that the metadata file exists.

    Args:
        file_path: String path to the metadata file.

    Returns:
        Path: Validated Path object to the metadata file.

    Raises:
        argparse.ArgumentTypeError: If validation fails.
    """
    path = Path(file_path)

    if not path.exists():
        raise argparse.ArgumentTypeError(f"Metadata file '{file_path}' does not exist")

    if not path.is_file():
        raise argparse.ArgumentTypeError(f"'{file_path}' is not a file")

    return path


def validate_config_file(file_path: str) -> Path:
    """Validate that the batch configuration file exists.

    Args:
        file_path: String path to the configuration file.

    Returns:
        Path: Validated Path object to the configuration file.

    Raises:
        argparse.ArgumentTypeError: If validation fails.
    """
    path = Path(file_path)

    if not path.exists():
        raise argparse.ArgumentTypeError(f"Configuration file '{file_path}' does not exist")

    if not path.is_file():
        raise argparse.ArgumentTypeError(f"'{file_path}' is not a file")

    return path


def parse_arguments(argv: Optional[Sequence[str]] = None):
    """Parse and validate command-line arguments.

    Args:
        argv: Arguments to parse, defaults to sys.argv[1:].

    Returns:
        argparse.Namespace: Parsed and validated arguments.
    """
    parser = argparse.ArgumentParser(
        description="Generate HTML argument tables from scheme metadata files",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Modes:
  Single file (--metafile): converts one metadata file into --outputdir.
  Batch (--config): converts every metadata file listed in a YAML
  configuration; destinations come from the configuration, --outputdir is ignored.

  One HTML table <entry_point>.html is generated per entry point that has
  arguments; include it in the Fortran source with
    !! \\htmlinclude <entry_point>.html

Examples:
  # Convert a single metadata file:
  python -m scripts.metadata2html --metafile physics/scheme.meta --outputdir docs/arg_tables

  # Convert all files of a batch configuration and write an index page:
  python -m scripts.metadata2html --config docs/metadata2html.yaml --index

  # Check that committed tables are up to date (exit 1 if not):
  python -m scripts.metadata2html --config docs/metadata2html.yaml --check
        """,
    )
    group = parser.add_mutually_exclusive_group(required=True)
    group.add_argument(
        "--metafile",
        "--meta",
        type=validate_metadata_file,
        help="Path to a single metadata file (requires --outputdir)",
    )

    group.add_argument(
        "--config",
        type=validate_config_file,
        help="Path to a YAML batch configuration listing metadata files and output directories",
    )

    parser.add_argument(
        "-o",
        "--outputdir",
        "--out",
        type=Path,
        help="Output directory for the generated tables (single file mode only)",
    )

    parser.add_argument(
        "--check",
        action="store_true",
        help="Only check that the tables are up to date, without writing (exits 1 if not)",
    )

    parser.add_argument("--index", action="store_true", help="Also generate index.html in each output directory")

    parser.add_argument("-v", "--verbose", action="store_true", help="Enable verbose output")

    args = parser.parse_args(argv)

    if args.metafile is not None and args.outputdir is None:
        parser.error("--metafile requires --outputdir")

    return args


def build_targets(args) -> List[ConversionTarget]:
    """Turn the parsed arguments into conversion targets.

    Raises:
        ConfigError: If the batch configuration is invalid.
    """
    if args.config is not None:
        if args.outputdir is not None:
            logger.warning(f"--outputdir is ignored in batch mode, output locations come from {args.config}")
        return load_batch_config(args.config)
    return [ConversionTarget(metadata_file=args.metafile, output_dir=args.outputdir)]


def main(argv: Optional[Sequence[str]] = None):
    """Main entry point for the CLI."""
    args = parse_arguments(argv)

    # Configure logging at application entry point
    log_level = logging.DEBUG if args.verbose else logging.INFO
    logging.basicConfig(level=log_level, format="%(levelname)s: %(message)s")

    try:
        targets = build_targets(args)
        result = BuildRunner(targets, check=args.check, index=args.index).run()
    except ConversionError as e:
        logger.error(e.message)
        sys.exit(EXIT_ERROR)

    if result.has_errors:
        logger.error(f"Failed to convert {len(result.failed)} of {len(targets)} metadata files.")
        sys.exit(EXIT_ERROR)
    elif args.check and result.has_diff:
        logger.error("HTML tables are out of sync. Run without --check to update them.")
        sys.exit(EXIT_DIFF_DETECTED)
    elif args.check:
        logger.info(f"All {result.fragments} HTML tables are in sync.")
    else:
        logger.info(f"Converted {len(result.converted)} metadata files, {result.written} files written.")
    sys.exit(EXIT_SUCCESS)
