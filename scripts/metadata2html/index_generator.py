"""Index page generator listing every argument table of an output directory."""

import logging
from pathlib import Path
from typing import Dict, List

from scripts.metadata2html.constants import INDEX_TEMPLATE
from scripts.metadata2html.content_generator import create_environment, fragment_filename
from scripts.metadata2html.metadata_parser import MetadataFile

logger = logging.getLogger(__name__)


class IndexGenerator:
    """Generates ``index.html`` for one output directory.

    Metadata files are registered with add(); only their non-empty entry
    points are listed, since empty ones have no fragment to link to.
    """

    def __init__(self, output_dir: Path):
        """Initialize the index generator.

        Args:
            output_dir: Directory holding the fragments and the index.
        """
        self.output_dir = output_dir
        self._tables: Dict[str, List[Dict[str, str]]] = {}
        self._dependencies: Dict[str, List[str]] = {}
        self.env = create_environment()
        self.template = self.env.get_template(INDEX_TEMPLATE)

    def add(self, metadata: MetadataFile) -> None:
        """Register the entry points of a converted metadata file."""
        for table in metadata.tables:
            entries = self._tables.setdefault(table.name, [])
            dependencies = self._dependencies.setdefault(table.name, [])
            dependencies.extend(dep for dep in table.dependencies if dep not in dependencies)
            for arg_table in table.arg_tables:
                if arg_table.is_empty:
                    continue
                entries.append(
                    {
                        "name": arg_table.name,
                        "link": fragment_filename(arg_table.name),
                        "table_type": arg_table.table_type,
                        "num_arguments": str(len(arg_table.arguments)),
                        "source_name": metadata.path.name,
                    }
                )

    @property
    def num_entries(self) -> int:
        return sum(len(entries) for entries in self._tables.values())

    def generate(self) -> str:
        """Generate the index page content.

        Returns:
            Complete HTML content of the index page.
        """
        tables = []
        for table_name in sorted(self._tables, key=str.lower):
            entries = sorted(self._tables[table_name], key=lambda x: x["name"].lower())
            if entries:
                tables.append(
                    {
                        "name": table_name,
                        "entries": entries,
                        "dependencies": sorted(self._dependencies[table_name]),
                    }
                )

        logger.debug(f"Indexing {self.num_entries} argument tables in {self.output_dir}")
        return self.template.render(title=self.output_dir.name, tables=tables)
