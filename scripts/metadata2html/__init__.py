"""Generate HTML argument tables for Fortran scheme entry points.

This package reads scheme metadata files, which describe the arguments of
each entry point, and renders one HTML table per entry point for inclusion
into the Doxygen documentation with ``\\htmlinclude``.
"""

from scripts.metadata2html.metadata_parser import MetadataParser
from scripts.metadata2html.writer import BuildRunner, FragmentWriter

__all__ = [
    "BuildRunner",
    "FragmentWriter",
    "MetadataParser",
]
