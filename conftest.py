import sys
from pathlib import Path

import pytest


@pytest.hookimpl(tryfirst=True)
def pytest_sessionstart():
    """Pytest hook to add project root to the sys path for cleaner imports in the tests"""
    # Get the path of the current file
    this_file_path = Path(__file__).resolve()
    # Get the directory
    project_root = this_file_path.parent

    project_root_str = str(project_root)
    if project_root_str not in sys.path:
        sys.path.append(project_root_str)
