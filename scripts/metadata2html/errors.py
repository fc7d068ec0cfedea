"""Exceptions raised while converting metadata files."""

from pathlib import Path
from typing import Optional


class ConversionError(Exception):
    """Base class for errors that should be displayed without traceback.

    This exception can take a custom message.
    """

    def __init__(self, message: str = "A conversion error occurred."):
        """Initialize the ConversionError with a custom message.

        Args:
            message: The error message to display.
        """
        super().__init__(message)
        self.message = message


class MetadataError(ConversionError):
    """A metadata file is malformed or inconsistent."""

    def __init__(self, message: str, path: Optional[Path] = None, line: Optional[int] = None):
        """Initialize the MetadataError with the location of the problem.

        Args:
            message: Description of the problem.
            path: Metadata file the problem was found in.
            line: 1-based line number, if the problem is tied to one line.
        """
        self.path = path
        self.line = line
        location = ""
        if path is not None:
            location = f"{path}:{line}: " if line is not None else f"{path}: "
        super().__init__(f"{location}{message}")


class ConfigError(ConversionError):
    """The batch configuration file is unusable."""

    def __init__(self, message: str, path: Optional[Path] = None):
        """Initialize the ConfigError.

        Args:
            message: Description of the problem.
            path: Configuration file the problem was found in.
        """
        self.path = path
        super().__init__(f"{path}: {message}" if path is not None else message)
