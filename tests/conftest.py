"""Pytest configuration and shared fixtures."""

import sys
from pathlib import Path

import pytest

# Add the project root to the path so absolute imports work
# (tests/ is inside the project root, so parent is the root)
project_dir = Path(__file__).parent.parent
if str(project_dir) not in sys.path:
    sys.path.insert(0, str(project_dir))

from babybear.chip import Chip  # noqa: E402
from constraints.api import ConstraintSystem  # noqa: E402
from constraints.emulated import EmulatedField  # noqa: E402
from primitives.field import BABYBEAR_PARAMS  # noqa: E402


@pytest.fixture
def api() -> ConstraintSystem:
    return ConstraintSystem()


@pytest.fixture
def field(api: ConstraintSystem) -> EmulatedField:
    return EmulatedField(api, BABYBEAR_PARAMS)


@pytest.fixture
def chip(api: ConstraintSystem) -> Chip:
    return Chip(api)
