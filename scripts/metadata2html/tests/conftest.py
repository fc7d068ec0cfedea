"""Shared pytest fixtures for metadata2html tests."""

import re
import tempfile
import textwrap
from pathlib import Path

import pytest

RESOURCES_DIR = Path(__file__).parent / "resources"


def create_metadata_file(parent_dir: Path, name: str, content: str) -> Path:
    """Helper to create a metadata file.

    Args:
        parent_dir: Directory to create the file in.
        name: File name, e.g. ``scheme.meta``.
        content: Metadata text, dedented before writing.

    Returns:
        Path to the created file.
    """
    parent_dir.mkdir(parents=True, exist_ok=True)
    path = parent_dir / name
    path.write_text(textwrap.dedent(content).lstrip("\n"), encoding="utf-8")
    return path


def extract_rows(content: str):
    """Return the data rows of a generated table as lists of cell strings."""
    rows = re.findall(r"<tr>\n(.*?)</tr>", content, re.DOTALL)
    return [re.findall(r"<td>(.*?)</td>", row) for row in rows if "<td>" in row]


@pytest.fixture
def temp_dir():
    """Create a temporary directory for testing."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def write_metadata(temp_dir):
    """Factory writing metadata text into the temporary directory."""

    def _write(content: str, name: str = "scheme.meta", subdir: str = "physics") -> Path:
        return create_metadata_file(temp_dir / subdir, name, content)

    return _write


@pytest.fixture
def table_rows():
    """Parser for the data rows of a generated table."""
    return extract_rows


@pytest.fixture
def sample_scheme_metadata():
    """Sample scheme metadata content."""
    return (RESOURCES_DIR / "sample_scheme.meta").read_text(encoding="utf-8")


@pytest.fixture
def sample_ddt_metadata():
    """Sample ddt and host metadata content."""
    return (RESOURCES_DIR / "sample_ddt.meta").read_text(encoding="utf-8")


@pytest.fixture
def sample_scheme_file(temp_dir, sample_scheme_metadata):
    """Copy of the sample scheme metadata file in the temporary directory."""
    return create_metadata_file(temp_dir / "physics", "sample_scheme.meta", sample_scheme_metadata)


@pytest.fixture
def sample_ddt_file(temp_dir, sample_ddt_metadata):
    """Copy of the sample ddt metadata file in the temporary directory."""
    return create_metadata_file(temp_dir / "physics", "sample_ddt.meta", sample_ddt_metadata)


@pytest.fixture
def scheme_run_file(write_metadata):
    """Minimal scheme with a two-argument run entry point and an empty init."""
    return write_metadata(
        """
        [ccpp-table-properties]
          name = scheme
          type = scheme

        [ccpp-arg-table]
          name = scheme_init
          type = scheme

        [ccpp-arg-table]
          name = scheme_run
          type = scheme
        [ im ]
          standard_name = horizontal_loop_extent
          long_name = horizontal loop extent
          units = count
          dimensions = ()
          type = integer
          intent = in
        [ delt ]
          standard_name = timestep_for_physics
          long_name = physics timestep
          units = s
          dimensions = ()
          type = real
          kind = kind_phys
          intent = in
        """
    )


@pytest.fixture
def output_dir(temp_dir):
    """Output directory for generated tables (not created)."""
    return temp_dir / "docs" / "arg_tables"
