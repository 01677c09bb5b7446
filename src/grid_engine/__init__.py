"""Public API for the bento grid placement engine."""

from grid_engine.contracts import (
    DropFeedback,
    GridConfig,
    GridPosition,
    GridSize,
    Layout,
    Widget,
    make_widget,
)
from grid_engine.editor import LayoutEditor
from grid_engine.placement import (
    compact,
    find_free_position,
    find_overlapping,
    is_valid_position,
    relocate,
)
from grid_engine.session import DragSession, SessionPhase

__all__ = [
    "DragSession",
    "DropFeedback",
    "GridConfig",
    "GridPosition",
    "GridSize",
    "Layout",
    "LayoutEditor",
    "SessionPhase",
    "Widget",
    "compact",
    "find_free_position",
    "find_overlapping",
    "is_valid_position",
    "make_widget",
    "relocate",
]
