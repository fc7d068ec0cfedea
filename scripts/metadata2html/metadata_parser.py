"""Parser for scheme metadata files.

A metadata file describes the arguments of the entry points of one or more
Fortran schemes. The format is line oriented::

    [ccpp-table-properties]
      name = scheme
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

Each ``[ccpp-arg-table]`` block is one entry point, each ``[ <name> ]`` block
below it is one argument, in declared order. Problems are reported as
MetadataError with the offending line; nothing is silently skipped.
"""

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from scripts.metadata2html.constants import (
    ARG_TABLE_HEADER,
    ARG_TABLE_KEYS,
    ARGUMENT_KEYS,
    FALSE_VALUES,
    INTENTS,
    REQUIRED_ARGUMENT_KEYS,
    TABLE_PROPERTIES_HEADER,
    TABLE_PROPERTY_KEYS,
    TABLE_TYPES,
    TRUE_VALUES,
)
from scripts.metadata2html.errors import MetadataError

logger = logging.getLogger(__name__)

HEADER_PATTERN = re.compile(r"^\[\s*(.*?)\s*\](.*)$")
PROPERTY_PATTERN = re.compile(r"^([A-Za-z_][A-Za-z0-9_]*)\s*=(.*)$")
IDENTIFIER_PATTERN = re.compile(r"^[A-Za-z][A-Za-z0-9_]*$")
LOCAL_NAME_PATTERN = re.compile(r"^[A-Za-z][A-Za-z0-9_]*(%[A-Za-z][A-Za-z0-9_]*)*(\([^()\[\]]*\))?$")
DIMENSIONS_PATTERN = re.compile(r"^\((.*)\)$")


@dataclass
class Argument:
    """One argument of an entry point."""

    local_name: str
    standard_name: str
    units: str
    dimensions: Tuple[str, ...]
    type: str
    long_name: str = ""
    kind: str = ""
    intent: str = ""
    optional: bool = False
    line: int = 0

    @property
    def dimensions_string(self) -> str:
        """Dimensions as written in the table, e.g. ``(horizontal_loop_extent)``."""
        return "(" + ", ".join(self.dimensions) + ")"


@dataclass
class ArgTable:
    """An entry point: a named, ordered list of arguments."""

    name: str
    table_type: str
    arguments: List[Argument] = field(default_factory=list)
    table_name: str = ""
    line: int = 0

    @property
    def is_empty(self) -> bool:
        return not self.arguments


@dataclass
class MetadataTable:
    """A group of entry points sharing one ``[ccpp-table-properties]`` header."""

    name: str
    table_type: str
    dependencies: List[str] = field(default_factory=list)
    arg_tables: List[ArgTable] = field(default_factory=list)
    line: int = 0


@dataclass
class MetadataFile:
    """All tables found in one metadata file."""

    path: Path
    tables: List[MetadataTable] = field(default_factory=list)

    @property
    def arg_tables(self) -> List[ArgTable]:
        return [arg_table for table in self.tables for arg_table in table.arg_tables]


def _split_dependencies(value: str) -> List[str]:
    return [dep.strip() for dep in value.split(",") if dep.strip()]


class _Block:
    """Properties collected for one bracketed block before validation."""

    def __init__(self, kind: str, line: int, label: str = ""):
        self.kind = kind
        self.line = line
        self.label = label
        self.properties: Dict[str, Tuple[str, int]] = {}
        self.children: List["_Block"] = []

    def value(self, key: str, default: str = "") -> str:
        if key in self.properties:
            return self.properties[key][0]
        return default

    def line_of(self, key: str) -> int:
        if key in self.properties:
            return self.properties[key][1]
        return self.line


class MetadataParser:
    """Parses one metadata file into MetadataFile records.

    The result is cached, so calling parse() repeatedly reads the file once.
    """

    def __init__(self, file_path: Path):
        """Initialize the parser with a file path.

        Args:
            file_path: Path to the metadata file.
        """
        self.file_path = file_path
        self._metadata: Optional[MetadataFile] = None

    def _error(self, message: str, line: Optional[int] = None) -> MetadataError:
        return MetadataError(message, self.file_path, line)

    def _read_lines(self) -> List[str]:
        """Read the metadata file.

        Returns:
            The file content split into lines.

        Raises:
            MetadataError: If the file cannot be read or decoded.
        """
        try:
            with open(self.file_path, "r", encoding="utf-8-sig") as f:
                return f.read().splitlines()
        except (OSError, UnicodeDecodeError) as e:
            raise self._error(f"Could not read metadata file: {e}") from e

    def _parse_header(self, line: str, lineno: int) -> str:
        match = HEADER_PATTERN.match(line)
        if not match:
            raise self._error(f"Malformed section header '{line}'", lineno)
        label, trailing = match.group(1), match.group(2).strip()
        if trailing and not trailing.startswith("#"):
            raise self._error(f"Unexpected text after section header: '{trailing}'", lineno)
        if not label:
            raise self._error("Empty section header", lineno)
        return label

    def _parse_property(self, line: str, lineno: int) -> Tuple[str, str]:
        match = PROPERTY_PATTERN.match(line)
        if not match:
            raise self._error(f"Invalid line, expected 'key = value': '{line}'", lineno)
        return match.group(1).lower(), match.group(2).strip()

    def _set_property(self, block: _Block, key: str, value: str, lineno: int) -> None:
        """Store a property on a block, rejecting unknown and repeated keys."""
        if block.kind == "table":
            allowed = TABLE_PROPERTY_KEYS
        elif block.kind == "arg_table":
            allowed = ARG_TABLE_KEYS
        else:
            allowed = ARGUMENT_KEYS
        if key not in allowed:
            where = f"variable '{block.label}'" if block.kind == "argument" else f"[{block.label}] section"
            raise self._error(f"Unknown property '{key}' in {where}", lineno)
        if key in block.properties:
            raise self._error(f"Duplicate property '{key}' (first set on line {block.properties[key][1]})", lineno)
        block.properties[key] = (value, lineno)

    def _collect_blocks(self, lines: List[str]) -> List[_Block]:
        """Group the lines of the file into nested blocks.

        Returns:
            Table blocks, each holding its arg_table blocks, each holding its
            argument blocks. Arg tables that precede any table header are
            gathered under an implicit table block.
        """
        tables: List[_Block] = []
        table: Optional[_Block] = None
        arg_table: Optional[_Block] = None
        current: Optional[_Block] = None

        for lineno, raw in enumerate(lines, start=1):
            line = raw.strip()
            if not line or line.startswith("#"):
                continue

            if line.startswith("["):
                label = self._parse_header(line, lineno)
                if label.lower() == TABLE_PROPERTIES_HEADER:
                    table = _Block("table", lineno, label)
                    tables.append(table)
                    arg_table = None
                    current = table
                elif label.lower() == ARG_TABLE_HEADER:
                    if table is None:
                        table = _Block("implicit", lineno, self.file_path.stem)
                        tables.append(table)
                    arg_table = _Block("arg_table", lineno, label)
                    table.children.append(arg_table)
                    current = arg_table
                elif label.lower().startswith("ccpp-"):
                    raise self._error(f"Unknown section header '[{label}]'", lineno)
                else:
                    if arg_table is None:
                        raise self._error(f"Variable '{label}' found outside of a [{ARG_TABLE_HEADER}] section", lineno)
                    current = _Block("argument", lineno, label)
                    arg_table.children.append(current)
                continue

            key, value = self._parse_property(line, lineno)
            if current is None:
                raise self._error(f"Property '{key}' found outside of any section", lineno)
            self._set_property(current, key, value, lineno)

        return tables

    def _build_argument(self, block: _Block, arg_table: ArgTable) -> Argument:
        """Validate an argument block and convert it into an Argument."""
        local_name = block.label
        if not LOCAL_NAME_PATTERN.match(local_name):
            raise self._error(f"Invalid variable name '{local_name}'", block.line)

        for key in REQUIRED_ARGUMENT_KEYS:
            if not block.value(key):
                raise self._error(f"Variable '{local_name}' is missing required property '{key}'", block.line)

        dimensions = self._parse_dimensions(block.value("dimensions"), block.line_of("dimensions"))

        intent = block.value("intent").lower()
        if arg_table.table_type == "scheme":
            if not intent:
                raise self._error(
                    f"Variable '{local_name}' in scheme table '{arg_table.name}' is missing required property 'intent'",
                    block.line,
                )
            if intent not in INTENTS:
                raise self._error(
                    f"Invalid intent '{intent}' for variable '{local_name}', expected one of {', '.join(INTENTS)}",
                    block.line_of("intent"),
                )
        elif intent:
            raise self._error(
                f"Variable '{local_name}' in {arg_table.table_type} table '{arg_table.name}' may not have an intent",
                block.line_of("intent"),
            )

        optional = self._parse_bool(block.value("optional", "false"), "optional", block.line_of("optional"))

        return Argument(
            local_name=local_name,
            standard_name=block.value("standard_name"),
            units=block.value("units"),
            dimensions=dimensions,
            type=block.value("type"),
            long_name=block.value("long_name"),
            kind=block.value("kind"),
            intent=intent,
            optional=optional,
            line=block.line,
        )

    def _parse_dimensions(self, value: str, lineno: int) -> Tuple[str, ...]:
        """Split ``(a, b)`` into ``("a", "b")``; ``()`` is a scalar."""
        match = DIMENSIONS_PATTERN.match(value)
        if not match:
            raise self._error(f"Malformed dimensions '{value}', expected a parenthesised list such as '()'", lineno)
        inner = match.group(1).strip()
        if not inner:
            return ()
        dimensions = tuple(part.strip() for part in inner.split(","))
        if any(not dim for dim in dimensions):
            raise self._error(f"Empty entry in dimensions '{value}'", lineno)
        return dimensions

    def _parse_bool(self, value: str, key: str, lineno: int) -> bool:
        lowered = value.lower()
        if lowered in TRUE_VALUES:
            return True
        if lowered in FALSE_VALUES:
            return False
        raise self._error(f"Invalid value '{value}' for '{key}', expected true or false", lineno)

    def _build_arg_table(self, block: _Block, table_name: str) -> ArgTable:
        """Validate an arg table block and its arguments."""
        name = block.value("name")
        if not name:
            raise self._error(f"[{ARG_TABLE_HEADER}] section is missing required property 'name'", block.line)
        if not IDENTIFIER_PATTERN.match(name):
            raise self._error(f"Invalid entry point name '{name}'", block.line_of("name"))

        table_type = block.value("type").lower()
        if not table_type:
            raise self._error(f"[{ARG_TABLE_HEADER}] '{name}' is missing required property 'type'", block.line)
        if table_type not in TABLE_TYPES:
            raise self._error(
                f"Invalid type '{table_type}' for '{name}', expected one of {', '.join(TABLE_TYPES)}",
                block.line_of("type"),
            )

        arg_table = ArgTable(name=name, table_type=table_type, table_name=table_name, line=block.line)
        seen: Dict[str, int] = {}
        for child in block.children:
            argument = self._build_argument(child, arg_table)
            key = argument.local_name.lower()
            if key in seen:
                raise self._error(
                    f"Duplicate variable '{argument.local_name}' in '{name}' (first defined on line {seen[key]})",
                    child.line,
                )
            seen[key] = child.line
            arg_table.arguments.append(argument)
        return arg_table

    def _build_table(self, block: _Block) -> MetadataTable:
        if block.kind == "implicit":
            table = MetadataTable(name=block.label, table_type="", line=block.line)
        else:
            name = block.value("name")
            if not name:
                raise self._error(f"[{TABLE_PROPERTIES_HEADER}] is missing required property 'name'", block.line)
            table_type = block.value("type").lower()
            if not table_type:
                raise self._error(f"[{TABLE_PROPERTIES_HEADER}] '{name}' is missing required property 'type'", block.line)
            if table_type not in TABLE_TYPES:
                raise self._error(
                    f"Invalid type '{table_type}' for '{name}', expected one of {', '.join(TABLE_TYPES)}",
                    block.line_of("type"),
                )
            table = MetadataTable(
                name=name,
                table_type=table_type,
                dependencies=_split_dependencies(block.value("dependencies")),
                line=block.line,
            )

        # Dependencies may also be listed per entry point; the table keeps the union
        for child in block.children:
            table.arg_tables.append(self._build_arg_table(child, table.name))
            for dependency in _split_dependencies(child.value("dependencies")):
                if dependency not in table.dependencies:
                    table.dependencies.append(dependency)
        return table

    def parse(self) -> MetadataFile:
        """Parse and validate the metadata file.

        Returns:
            The parsed MetadataFile.

        Raises:
            MetadataError: If the file is unreadable, malformed or inconsistent.
        """
        if self._metadata is not None:
            return self._metadata

        logger.debug(f"Parsing metadata file: {self.file_path}")
        blocks = self._collect_blocks(self._read_lines())
        metadata = MetadataFile(path=self.file_path)
        for block in blocks:
            metadata.tables.append(self._build_table(block))

        # Entry point names become file names, so they must be unique in the file
        seen: Dict[str, ArgTable] = {}
        for arg_table in metadata.arg_tables:
            key = arg_table.name.lower()
            if key in seen:
                raise self._error(
                    f"Duplicate entry point '{arg_table.name}' (first defined on line {seen[key].line})",
                    arg_table.line,
                )
            seen[key] = arg_table

        logger.debug(f"Found {len(metadata.arg_tables)} entry points in {len(metadata.tables)} tables")
        self._metadata = metadata
        return metadata
