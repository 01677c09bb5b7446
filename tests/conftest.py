"""
Shared test fixtures for the grid placement engine tests.
"""
import sys
from pathlib import Path

import pytest

# Add src/ to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from grid_engine.contracts import GridConfig, make_widget
from layout_store import LayoutStore


@pytest.fixture
def grid_4x4():
    """4x4 grid with round pixel metrics (pitch = 50px)."""
    return GridConfig(columns=4, rows=4, cell_size=40.0, gap=10.0)


@pytest.fixture
def grid_2x2():
    return GridConfig(columns=2, rows=2, cell_size=40.0, gap=10.0)


@pytest.fixture
def two_unit_layout():
    """A at the top-left corner, B in the middle of a 4x4 grid."""
    return [
        make_widget("A", 0, 0),
        make_widget("B", 2, 2),
    ]


@pytest.fixture
def big_and_small_layout():
    """A 2x2 block at the origin with a 1x1 neighbour to its right."""
    return [
        make_widget("A", 0, 0, 2, 2),
        make_widget("B", 2, 0),
    ]


@pytest.fixture
def full_2x2_layout():
    """Two 1x2 columns filling a 2x2 grid."""
    return [
        make_widget("A", 0, 0, 1, 2),
        make_widget("B", 1, 0, 1, 2),
    ]


@pytest.fixture
def mixed_layout():
    """Busier 4x4 layout with a hidden widget parked on top of B."""
    return [
        make_widget("A", 0, 0, 2, 1),
        make_widget("B", 2, 0, 2, 2),
        make_widget("C", 0, 2),
        make_widget("D", 1, 3, 3, 1),
        make_widget("H", 2, 1, 1, 1, visible=False),
    ]


@pytest.fixture
def store(tmp_path):
    return LayoutStore(tmp_path / "layouts.json")
