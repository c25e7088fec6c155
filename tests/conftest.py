"""Global pytest configuration and fixtures."""

import pytest
import sys
import tempfile
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from tests.utils import FakeConfigStore, FakeRegistry


@pytest.fixture
def temp_backup_dir():
    """Create temporary backup directory."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def registry():
    """Registry knowing the 'prod' and 'staging' clusters."""
    return FakeRegistry(clusters=["prod", "staging"])


@pytest.fixture
def config_store():
    return FakeConfigStore()
