"""
Pytest configuration for the Packcheck test suite.
"""

import sys
from pathlib import Path

import pytest

# Add backend to Python path for test imports
backend_path = Path(__file__).parent.parent
if str(backend_path) not in sys.path:
    sys.path.insert(0, str(backend_path))

from hosts import healthy_windows_host, make_project


@pytest.fixture
def healthy_host():
    """Windows build host on which every required probe passes."""
    return healthy_windows_host()


@pytest.fixture
def project_file(tmp_path):
    """An existing MyGame.uproject inside tmp_path/MyGame."""
    return make_project(tmp_path)
