"""Fragment writer for metadata files."""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple

from scripts.metadata2html.config_loader import ConversionTarget
from scripts.metadata2html.constants import FRAGMENT_SUFFIX, INDEX_FILENAME
from scripts.metadata2html.content_generator import FragmentContentGenerator
from scripts.metadata2html.errors import ConversionError, MetadataError
from scripts.metadata2html.index_generator import IndexGenerator
from scripts.metadata2html.metadata_parser import MetadataFile, MetadataParser

logger = logging.getLogger(__name__)


def read_file_content(file_path: Path) -> Optional[str]:
    """Read content from a file if it exists.

    Args:
        file_path: Path to the file to read.

    Returns:
        File content as string, or None if file doesn't exist or is not
        valid UTF-8 (either way it has to be regenerated).
    """
    if not file_path.exists():
        return None
    try:
        with open(file_path, "r", encoding="utf-8", newline="") as f:
            return f.read()
    except UnicodeDecodeError:
        logger.debug(f"Existing file {file_path} is not valid UTF-8")
        return None


def write_file_content(file_path: Path, content: str) -> None:
    """Write content with ``\\n`` line endings, creating parent directories."""
    file_path.parent.mkdir(parents=True, exist_ok=True)
    with open(file_path, "w", encoding="utf-8", newline="\n") as f:
        f.write(content)


def has_diff(expected: str, actual: Optional[str]) -> bool:
    """Check if expected content differs from actual content.

    Args:
        expected: The expected content.
        actual: The actual file content (None if file doesn't exist).

    Returns:
        True if there's a diff, False if content matches.
    """
    if actual is None:
        return True
    return expected != actual


class FragmentWriter:
    """Converts one metadata file into HTML fragments in an output directory."""

    def __init__(self, metadata_file: Path, output_dir: Path):
        """Initialize the fragment writer.

        Args:
            metadata_file: Path to the metadata file.
            output_dir: Directory the fragments are written to.
        """
        self.metadata_file = metadata_file
        self.output_dir = output_dir
        self.parser = MetadataParser(metadata_file)

    @property
    def metadata(self) -> MetadataFile:
        return self.parser.parse()

    def render(self) -> Dict[str, str]:
        """Parse the metadata file and render every non-empty entry point.

        Returns:
            Mapping of fragment file name to content, in declared order.

        Raises:
            MetadataError: If the metadata file is malformed.
        """
        fragments: Dict[str, str] = {}
        for arg_table in self.metadata.arg_tables:
            if arg_table.is_empty:
                logger.info(f"Entry point {arg_table.name} in {self.metadata_file} is empty, no table generated")
                continue
            generator = FragmentContentGenerator(arg_table, self.metadata_file)
            fragments[generator.filename] = generator.generate()
        return fragments

    def check(self, fragments: Dict[str, str]) -> List[Path]:
        """Compare rendered fragments with the files on disk.

        Returns:
            Paths of the fragments that are missing or out of date.
        """
        out_of_sync = []
        for filename, content in fragments.items():
            path = self.output_dir / filename
            if has_diff(content, read_file_content(path)):
                logger.warning(f"Out of sync: {path}")
                out_of_sync.append(path)
        return out_of_sync

    def write(self, fragments: Dict[str, str]) -> int:
        """Write rendered fragments, leaving identical files untouched.

        Returns:
            Number of files written.
        """
        written = 0
        for filename, content in fragments.items():
            path = self.output_dir / filename
            if not has_diff(content, read_file_content(path)):
                logger.debug(f"Unchanged: {path}")
                continue
            write_file_content(path, content)
            logger.info(f"Wrote {path}")
            written += 1
        return written

    def generate(self, check: bool = False) -> bool:
        """Render the fragments, then write them or check them.

        Args:
            check: If True, only check for diffs without writing files.

        Returns:
            True if any fragment was missing or differed, False otherwise.
        """
        fragments = self.render()
        if check:
            return bool(self.check(fragments))
        return self.write(fragments) > 0


@dataclass
class BuildResult:
    """Outcome of converting a set of metadata files."""

    converted: List[Path] = field(default_factory=list)
    failed: List[Path] = field(default_factory=list)
    out_of_sync: List[Path] = field(default_factory=list)
    written: int = 0
    fragments: int = 0

    @property
    def has_errors(self) -> bool:
        return bool(self.failed)

    @property
    def has_diff(self) -> bool:
        return bool(self.out_of_sync)


class BuildRunner:
    """Converts a list of targets, one file at a time.

    A file with a content error produces no output and is reported as
    failed; the remaining files are still converted.
    """

    def __init__(self, targets: Sequence[ConversionTarget], check: bool = False, index: bool = False):
        """Initialize the build runner.

        Args:
            targets: Metadata files and their output directories.
            check: If True, compare with existing files instead of writing.
            index: If True, also generate index.html in each output directory.
        """
        self.targets = list(targets)
        self.check = check
        self.index = index
        # (output dir, lowercased entry point name) -> metadata file that claimed it
        self._claimed: Dict[Tuple[Path, str], Path] = {}
        self._indexes: Dict[Path, IndexGenerator] = {}

    def _claim_names(self, writer: FragmentWriter) -> None:
        """Reserve the fragment names of a file in its output directory.

        Raises:
            MetadataError: If another file of this run already generated an
                entry point with the same name into the same directory.
        """
        output_dir = writer.output_dir.resolve()
        keys = {}
        for arg_table in writer.metadata.arg_tables:
            if arg_table.is_empty:
                continue
            key = (output_dir, arg_table.name.lower())
            owner = self._claimed.get(key)
            if owner is not None and owner != writer.metadata_file:
                raise MetadataError(
                    f"Entry point '{arg_table.name}' is also defined in {owner}",
                    writer.metadata_file,
                    arg_table.line,
                )
            if self.index and arg_table.name.lower() + FRAGMENT_SUFFIX == INDEX_FILENAME:
                raise MetadataError(
                    f"Entry point '{arg_table.name}' clashes with the generated {INDEX_FILENAME}",
                    writer.metadata_file,
                    arg_table.line,
                )
            keys[key] = writer.metadata_file
        self._claimed.update(keys)

    def _convert(self, target: ConversionTarget, result: BuildResult) -> None:
        writer = FragmentWriter(target.metadata_file, target.output_dir)
        fragments = writer.render()
        self._claim_names(writer)

        if self.check:
            result.out_of_sync.extend(writer.check(fragments))
        else:
            result.written += writer.write(fragments)
        result.fragments += len(fragments)
        result.converted.append(target.metadata_file)

        if self.index:
            output_dir = target.output_dir.resolve()
            if output_dir not in self._indexes:
                self._indexes[output_dir] = IndexGenerator(output_dir)
            self._indexes[output_dir].add(writer.metadata)

        logger.debug(f"Converted {target.metadata_file}: {len(fragments)} tables")

    def _generate_indexes(self, result: BuildResult) -> None:
        for output_dir in sorted(self._indexes):
            content = self._indexes[output_dir].generate()
            path = output_dir / INDEX_FILENAME
            if not has_diff(content, read_file_content(path)):
                continue
            if self.check:
                logger.warning(f"Out of sync: {path}")
                result.out_of_sync.append(path)
            else:
                write_file_content(path, content)
                logger.info(f"Wrote {path}")
                result.written += 1

    def run(self) -> BuildResult:
        """Convert every target.

        Returns:
            BuildResult summarizing converted, failed and out-of-sync files.

        Raises:
            ConversionError: If writing the index pages fails.
        """
        result = BuildResult()
        for target in self.targets:
            try:
                self._convert(target, result)
            except ConversionError as e:
                logger.error(e.message)
                result.failed.append(target.metadata_file)
            except OSError as e:
                logger.error(f"Could not write tables for {target.metadata_file}: {e}")
                result.failed.append(target.metadata_file)

        try:
            self._generate_indexes(result)
        except OSError as e:
            raise ConversionError(f"Could not write index: {e}") from e
        return result
