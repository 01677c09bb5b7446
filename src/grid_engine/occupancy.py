"""Occupancy masks, preview cell states and invariant checks.

These feed the hosting surfaces (CLI text view, review app) and the
write-side guard in the layout store. Nothing here is needed by the
placement policy itself.
"""

from __future__ import annotations

from collections import Counter
from enum import IntEnum
from typing import List, Optional

import numpy as np

from grid_engine.contracts import (
    GridConfig,
    Layout,
    LayoutSummary,
    WidgetId,
    find_widget,
)
from grid_engine.placement import in_bounds, rects_overlap
from grid_engine.session import DragSession


class CellState(IntEnum):
    EMPTY = 0
    OCCUPIED = 1
    PREVIEW_VALID = 2
    PREVIEW_DISPLACE = 3
    PREVIEW_INVALID = 4


def occupancy_map(
    grid: GridConfig, layout: Layout, exclude_id: Optional[WidgetId] = None
) -> np.ndarray:
    """Boolean ``(rows, columns)`` mask of cells covered by visible widgets.

    Parts of a widget hanging off the grid are dropped.
    """
    mask = np.zeros((grid.rows, grid.columns), dtype=bool)
    for widget in layout:
        if not widget.visible or widget.id == exclude_id:
            continue
        x0 = max(0, widget.position.x)
        y0 = max(0, widget.position.y)
        x1 = min(grid.columns, widget.right)
        y1 = min(grid.rows, widget.bottom)
        if x1 > x0 and y1 > y0:
            mask[y0:y1, x0:x1] = True
    return mask


def preview_cells(
    grid: GridConfig, layout: Layout, session: DragSession
) -> np.ndarray:
    """Per-cell :class:`CellState` codes for rendering a move in progress.

    The active widget is left out of the occupancy so its old footprint reads
    as free; the preview footprint is painted on top.
    """
    exclude = session.active_widget_id if session.is_active else None
    states = np.where(
        occupancy_map(grid, layout, exclude), CellState.OCCUPIED, CellState.EMPTY
    ).astype(np.int8)

    if not session.is_active or session.preview_position is None:
        return states
    widget = find_widget(layout, session.active_widget_id)
    if widget is None:
        return states

    if not session.is_valid_drop:
        code = CellState.PREVIEW_INVALID
    elif session.will_displace:
        code = CellState.PREVIEW_DISPLACE
    else:
        code = CellState.PREVIEW_VALID
    px, py = session.preview_position.x, session.preview_position.y
    states[py:py + widget.size.height, px:px + widget.size.width] = code
    return states


def fill_ratio(grid: GridConfig, layout: Layout) -> float:
    return float(occupancy_map(grid, layout).mean())


def check_layout(grid: GridConfig, layout: Layout) -> List[str]:
    """Check the no-overlap / in-bounds invariant.

    Returns list of violation strings (empty = ok).
    """
    issues: List[str] = []

    counts = Counter(widget.id for widget in layout)
    for widget_id, count in counts.items():
        if count > 1:
            issues.append(f"Duplicate widget id {widget_id!r} ({count} entries)")

    visible = [widget for widget in layout if widget.visible]
    for widget in layout:
        if widget.size.width < 1 or widget.size.height < 1:
            issues.append(
                f"Widget {widget.id!r} has non-positive size "
                f"{widget.size.width}x{widget.size.height}"
            )
    for widget in visible:
        if not in_bounds(grid, widget.x, widget.y, widget.width, widget.height):
            issues.append(
                f"Widget {widget.id!r} at ({widget.x}, {widget.y}) size "
                f"{widget.width}x{widget.height} exceeds the "
                f"{grid.columns}x{grid.rows} grid"
            )

    for i, a in enumerate(visible):
        for b in visible[i + 1:]:
            if rects_overlap(
                a.x, a.y, a.width, a.height, b.x, b.y, b.width, b.height
            ):
                issues.append(f"Widgets {a.id!r} and {b.id!r} overlap")
    return issues


def summarize_layout(page_id: str, grid: GridConfig, layout: Layout) -> LayoutSummary:
    return LayoutSummary(
        page_id=page_id,
        grid=grid,
        widget_count=len(layout),
        hidden_count=sum(1 for widget in layout if not widget.visible),
        fill_ratio=fill_ratio(grid, layout),
        violations=check_layout(grid, layout),
    )


def _cell_label(widget_id: WidgetId) -> str:
    text = str(widget_id)
    return text[0] if text else "?"


def render_text(grid: GridConfig, layout: Layout) -> str:
    """ASCII picture of the grid, one character per cell.

    Each visible widget is drawn with the first character of its id; free
    cells are ``.`` and cells claimed by more than one widget are ``#``.
    """
    canvas = np.full((grid.rows, grid.columns), ".", dtype="<U1")
    claimed = np.zeros((grid.rows, grid.columns), dtype=np.int16)
    for widget in layout:
        if not widget.visible:
            continue
        for x, y in widget.cells():
            if 0 <= x < grid.columns and 0 <= y < grid.rows:
                claimed[y, x] += 1
                canvas[y, x] = _cell_label(widget.id)
    canvas[claimed > 1] = "#"
    return "\n".join("".join(row) for row in canvas)
