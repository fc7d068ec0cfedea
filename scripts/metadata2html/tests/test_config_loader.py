"""Tests for config_loader.py module."""

import textwrap

import pytest

from scripts.metadata2html.config_loader import ConversionTarget, load_batch_config
from scripts.metadata2html.errors import ConfigError


@pytest.fixture
def write_config(temp_dir):
    """Factory writing a batch configuration into the temporary directory."""

    def _write(content: str, name: str = "metadata2html.yaml"):
        path = temp_dir / name
        path.write_text(textwrap.dedent(content), encoding="utf-8")
        return path

    return _write


@pytest.fixture
def metadata_files(temp_dir, sample_scheme_metadata):
    """Three metadata files under physics/."""
    physics = temp_dir / "physics"
    physics.mkdir()
    paths = []
    for name in ("GFS_a.meta", "GFS_b.meta", "other.meta"):
        path = physics / name
        path.write_text(sample_scheme_metadata, encoding="utf-8")
        paths.append(path.resolve())
    return paths


class TestLoadBatchConfig:
    """Tests for load_batch_config function."""

    def test_plain_paths_with_default_output_dir(self, temp_dir, write_config, metadata_files):
        """Test string entries using the top-level output_dir."""
        config = write_config(
            """
            output_dir: docs/arg_tables
            metadata_files:
              - physics/GFS_a.meta
              - physics/other.meta
            """
        )

        targets = load_batch_config(config)

        output_dir = (temp_dir / "docs" / "arg_tables").resolve()
        assert targets == [
            ConversionTarget(metadata_file=metadata_files[0], output_dir=output_dir),
            ConversionTarget(metadata_file=metadata_files[2], output_dir=output_dir),
        ]

    def test_paths_relative_to_config_file(self, temp_dir, write_config, metadata_files, monkeypatch):
        """Test that relative paths do not depend on the working directory."""
        config = write_config(
            """
            output_dir: docs
            metadata_files:
              - physics/GFS_a.meta
            """
        )
        elsewhere = temp_dir / "elsewhere"
        elsewhere.mkdir()
        monkeypatch.chdir(elsewhere)

        targets = load_batch_config(config)

        assert targets[0].metadata_file == metadata_files[0]
        assert targets[0].output_dir == (temp_dir / "docs").resolve()

    def test_mapping_entry_overrides_output_dir(self, temp_dir, write_config, metadata_files):
        """Test that an entry can name its own output_dir."""
        config = write_config(
            """
            output_dir: docs/arg_tables
            metadata_files:
              - physics/GFS_a.meta
              - path: physics/other.meta
                output_dir: docs/other
            """
        )

        targets = load_batch_config(config)

        assert targets[0].output_dir == (temp_dir / "docs" / "arg_tables").resolve()
        assert targets[1].output_dir == (temp_dir / "docs" / "other").resolve()

    @pytest.mark.parametrize("value", ["", "''", "null"])
    def test_empty_entry_output_dir_uses_default(self, temp_dir, write_config, metadata_files, value):
        """Test that an entry with an empty output_dir falls back to the top-level one."""
        config = write_config(
            f"""
            output_dir: docs/arg_tables
            metadata_files:
              - path: physics/other.meta
                output_dir: {value}
            """
        )

        targets = load_batch_config(config)

        assert targets == [
            ConversionTarget(metadata_file=metadata_files[2], output_dir=(temp_dir / "docs" / "arg_tables").resolve())
        ]

    def test_mapping_entries_without_default(self, temp_dir, write_config, metadata_files):
        """Test that a top-level output_dir is optional when every entry has one."""
        config = write_config(
            """
            metadata_files:
              - path: physics/other.meta
                output_dir: docs/other
            """
        )

        targets = load_batch_config(config)

        assert targets == [
            ConversionTarget(metadata_file=metadata_files[2], output_dir=(temp_dir / "docs" / "other").resolve())
        ]

    def test_glob_pattern(self, write_config, metadata_files):
        """Test that glob patterns expand to sorted files."""
        config = write_config(
            """
            output_dir: docs
            metadata_files:
              - physics/GFS_*.meta
            """
        )

        targets = load_batch_config(config)

        assert [target.metadata_file for target in targets] == metadata_files[:2]

    def test_duplicates_removed(self, write_config, metadata_files):
        """Test that a file listed twice for the same directory is converted once."""
        config = write_config(
            """
            output_dir: docs
            metadata_files:
              - physics/GFS_a.meta
              - physics/*.meta
            """
        )

        targets = load_batch_config(config)

        assert [target.metadata_file for target in targets] == metadata_files

    @pytest.mark.parametrize(
        "content,message",
        [
            ("- a.meta\n", "must be a mapping"),
            ("output_dir: docs\n", "'metadata_files' must be a non-empty list"),
            ("output_dir: docs\nmetadata_files: []\n", "'metadata_files' must be a non-empty list"),
            ("output_dir: [docs]\nmetadata_files:\n  - physics/GFS_a.meta\n", "'output_dir' must be a string"),
            ("metadata_files:\n  - physics/GFS_a.meta\n", "No 'output_dir' for 'physics/GFS_a.meta'"),
            ("output_dir: docs\nmetadata_files:\n  - 42\n", "Entry 1 of 'metadata_files' must be a path"),
            ("output_dir: docs\nmetadata_files:\n  - output_dir: x\n", "Entry 1 of 'metadata_files' is missing 'path'"),
            (
                "output_dir: docs\nmetadata_files:\n  - path: physics/GFS_a.meta\n    colour: red\n",
                "unknown keys: colour",
            ),
            ("output_dir: docs\nmetadata_files:\n  - physics/missing.meta\n", "does not exist"),
            ("output_dir: docs\nmetadata_files:\n  - physics/*.nothing\n", "matched no files"),
            ("output_dir: docs\nmetadata_files: [unclosed\n", "Invalid YAML"),
        ],
    )
    def test_invalid_config(self, write_config, metadata_files, content, message):
        """Test that invalid configurations raise ConfigError."""
        config = write_config(content)

        with pytest.raises(ConfigError, match=message):
            load_batch_config(config)

    def test_error_names_config_file(self, write_config):
        """Test that the message starts with the configuration path."""
        config = write_config("output_dir: docs\n")

        with pytest.raises(ConfigError) as exc_info:
            load_batch_config(config)

        assert exc_info.value.path == config
        assert exc_info.value.message.startswith(str(config))

    def test_missing_config_file(self, temp_dir):
        """Test that an unreadable configuration raises ConfigError."""
        with pytest.raises(ConfigError, match="Could not read configuration"):
            load_batch_config(temp_dir / "missing.yaml")
