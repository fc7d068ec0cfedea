"""HTML table generator for entry point argument tables."""

import logging
from pathlib import Path
from typing import Any, Dict, List

from jinja2 import Environment, FileSystemLoader

from scripts.metadata2html.constants import FRAGMENT_SUFFIX, FRAGMENT_TEMPLATE, TABLE_COLUMNS
from scripts.metadata2html.metadata_parser import ArgTable, Argument

logger = logging.getLogger(__name__)

TEMPLATE_DIR = Path(__file__).parent / "templates"


def create_environment() -> Environment:
    """Create the Jinja2 environment shared by the generators."""
    return Environment(
        loader=FileSystemLoader(TEMPLATE_DIR),
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
        autoescape=True,
    )


def fragment_filename(entry_point_name: str) -> str:
    """Name of the fragment generated for an entry point.

    The Fortran sources reference this name in their ``\\htmlinclude``
    directives, so it depends on nothing but the entry point name.
    """
    return f"{entry_point_name}{FRAGMENT_SUFFIX}"


class FragmentContentGenerator:
    """Generates the HTML argument table of one entry point."""

    def __init__(self, arg_table: ArgTable, source_file: Path):
        """Initialize the generator.

        Args:
            arg_table: Entry point parsed by MetadataParser.
            source_file: Metadata file the entry point was read from.
        """
        if arg_table.is_empty:
            raise ValueError(f"Entry point '{arg_table.name}' has no arguments, nothing to generate")
        self.arg_table = arg_table
        self.source_file = source_file
        self.env = create_environment()
        self.template = self.env.get_template(FRAGMENT_TEMPLATE)

    @property
    def filename(self) -> str:
        return fragment_filename(self.arg_table.name)

    def _format_cell(self, argument: Argument, attribute: str) -> str:
        """Format one argument attribute for display.

        Args:
            argument: The argument being rendered.
            attribute: Attribute name from TABLE_COLUMNS.

        Returns:
            Cell text, empty when the attribute is not set.
        """
        if attribute == "dimensions":
            return argument.dimensions_string
        value = getattr(argument, attribute)
        if isinstance(value, bool):
            return "Yes" if value else "No"
        return str(value)

    def _prepare_rows(self) -> List[List[str]]:
        return [
            [self._format_cell(argument, attribute) for attribute, _ in TABLE_COLUMNS]
            for argument in self.arg_table.arguments
        ]

    def _prepare_template_context(self) -> Dict[str, Any]:
        """Prepare the context data for the Jinja2 template.

        Returns:
            Dictionary containing all variables needed by the template.
        """
        return {
            "name": self.arg_table.name,
            "table_name": self.arg_table.table_name,
            "table_type": self.arg_table.table_type,
            "source_name": self.source_file.name,
            "headers": [label for _, label in TABLE_COLUMNS],
            "rows": self._prepare_rows(),
        }

    def generate(self) -> str:
        """Render the argument table.

        Returns:
            Complete HTML content as a string.
        """
        content = self.template.render(**self._prepare_template_context())
        logger.debug(f"Rendered {len(self.arg_table.arguments)} rows for {self.arg_table.name}")
        return content
