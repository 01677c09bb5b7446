"""Placement policy: validity, overlap discovery, first-fit, cascade, compaction.

Every function here is pure. Layouts are never mutated; operations that can
fail return ``None`` instead of raising so callers can surface an "invalid
drop" without unwinding anything.

Hidden widgets (``visible=False``) do not occupy cells. They are skipped by
the overlap tests, never displaced, and passed through unchanged.
"""

from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Optional

from grid_engine.contracts import (
    GridConfig,
    GridPosition,
    Layout,
    Widget,
    WidgetId,
    find_widget,
)

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Rectangle tests
# ---------------------------------------------------------------------------

def rects_overlap(
    ax: int, ay: int, aw: int, ah: int,
    bx: int, by: int, bw: int, bh: int,
) -> bool:
    """Strict two-axis overlap with exclusive upper bounds.

    Rectangles that only share an edge do not overlap.
    """
    return ax < bx + bw and ax + aw > bx and ay < by + bh and ay + ah > by


def _overlaps_widget(widget: Widget, x: int, y: int, width: int, height: int) -> bool:
    return rects_overlap(
        x, y, width, height,
        widget.position.x, widget.position.y, widget.size.width, widget.size.height,
    )


def in_bounds(grid: GridConfig, x: int, y: int, width: int, height: int) -> bool:
    return x >= 0 and y >= 0 and x + width <= grid.columns and y + height <= grid.rows


# ---------------------------------------------------------------------------
# Queries
# ---------------------------------------------------------------------------

def is_valid_position(
    grid: GridConfig,
    layout: Layout,
    x: int,
    y: int,
    width: int,
    height: int,
    exclude_id: Optional[WidgetId] = None,
) -> bool:
    """True if the rectangle fits inside the grid without hitting any widget.

    ``exclude_id`` lets a widget be checked against a layout that still holds
    its own pre-move entry.
    """
    exclude = () if exclude_id is None else (exclude_id,)
    return _fits(grid, layout, x, y, width, height, exclude)


def _fits(
    grid: GridConfig,
    layout: Layout,
    x: int,
    y: int,
    width: int,
    height: int,
    exclude_ids: Iterable[WidgetId],
) -> bool:
    if not in_bounds(grid, x, y, width, height):
        return False
    excluded = set(exclude_ids)
    for widget in layout:
        if not widget.visible or widget.id in excluded:
            continue
        if _overlaps_widget(widget, x, y, width, height):
            return False
    return True


def find_overlapping(
    layout: Layout,
    x: int,
    y: int,
    width: int,
    height: int,
    exclude_id: Optional[WidgetId] = None,
) -> List[Widget]:
    """Widgets hit by the rectangle, in layout insertion order."""
    return [
        widget
        for widget in layout
        if widget.visible
        and widget.id != exclude_id
        and _overlaps_widget(widget, x, y, width, height)
    ]


def find_free_position(
    grid: GridConfig,
    layout: Layout,
    width: int,
    height: int,
    exclude_ids: Iterable[WidgetId] = (),
) -> Optional[GridPosition]:
    """First free origin in row-major order, or ``None`` if the grid is full.

    Scans ``y`` from 0 to ``rows - height`` and, for each row, ``x`` from 0 to
    ``columns - width``. Top-left-most slot wins.
    """
    excluded = tuple(exclude_ids)
    for y in range(grid.rows - height + 1):
        for x in range(grid.columns - width + 1):
            if _fits(grid, layout, x, y, width, height, excluded):
                return GridPosition(x, y)
    return None


# ---------------------------------------------------------------------------
# Operations
# ---------------------------------------------------------------------------

def _replace_widget(layout: Layout, updated: Widget) -> Layout:
    return [updated if widget.id == updated.id else widget for widget in layout]


def relocate(
    grid: GridConfig,
    layout: Layout,
    active_id: WidgetId,
    new_x: int,
    new_y: int,
) -> Optional[Layout]:
    """Move ``active_id`` to ``(new_x, new_y)``, displacing whatever it covers.

    Displaced widgets are processed once each, in the order
    :func:`find_overlapping` returns them. Each one takes the first free slot
    in the layout built so far (the active widget already at its target,
    earlier displaced widgets at their new slots, later ones still at their
    old slots), ignoring only its own id. The footprint the active widget
    left behind counts as occupied, so nothing swaps into it. If any
    displaced widget has nowhere to go the whole move is rejected and
    ``None`` is returned.

    Raises:
        KeyError: ``active_id`` is not in the layout.
    """
    active = find_widget(layout, active_id)
    if active is None:
        raise KeyError(f"Unknown widget id: {active_id!r}")

    if not active.visible:
        return None

    width, height = active.size.width, active.size.height
    if not in_bounds(grid, new_x, new_y, width, height):
        logger.debug(
            "Target (%d, %d) for %r is outside the %dx%d grid",
            new_x, new_y, active_id, grid.columns, grid.rows,
        )
        return None

    displaced = find_overlapping(layout, new_x, new_y, width, height, active_id)
    result = _replace_widget(layout, active.moved_to(new_x, new_y))
    if not displaced:
        return result

    for widget in displaced:
        # The slot the active widget left stays reserved until the move lands.
        slot = find_free_position(
            grid, result + [active], widget.size.width, widget.size.height, [widget.id]
        )
        if slot is None:
            logger.debug(
                "No free slot for displaced widget %r (%dx%d); rejecting move of %r",
                widget.id, widget.size.width, widget.size.height, active_id,
            )
            return None
        result = _replace_widget(result, widget.moved_to(slot.x, slot.y))

    logger.debug(
        "Moved %r to (%d, %d), displacing %d widget(s)",
        active_id, new_x, new_y, len(displaced),
    )
    return result


MAX_COMPACT_PASSES = 16


def _positions(layout: Layout) -> Dict[WidgetId, GridPosition]:
    return {widget.id: widget.position for widget in layout}


def _compact_pass(grid: GridConfig, layout: Layout) -> Optional[Layout]:
    """One reading-order first-fit pass.

    A widget with no free slot keeps its position if nothing placed so far
    covers it; otherwise the pass fails and ``None`` is returned.
    """
    visible = [widget for widget in layout if widget.visible]
    hidden = [widget for widget in layout if not widget.visible]
    ordered = sorted(visible, key=lambda w: (w.position.y, w.position.x))

    placed: Layout = []
    for widget in ordered:
        slot = find_free_position(
            grid, placed, widget.size.width, widget.size.height, [widget.id]
        )
        if slot is not None:
            placed.append(widget.moved_to(slot.x, slot.y))
            continue
        if find_overlapping(placed, widget.x, widget.y, widget.width, widget.height):
            logger.debug("Widget %r has no slot and its position is taken", widget.id)
            return None
        placed.append(widget)
    return placed + hidden


def compact(grid: GridConfig, layout: Layout) -> Layout:
    """Pull every visible widget to the first free slot in reading order.

    Widgets are processed sorted by ``(y, x)`` and placed against the widgets
    already placed; hidden widgets follow, untouched. Passes repeat until one
    moves nothing, so compacting a compacted layout changes nothing.

    If a pass strands a widget on a spot an earlier widget now covers, the
    result of the last good pass is returned. If the passes never settle the
    input comes back unchanged.
    """
    current = layout
    for passes in range(1, MAX_COMPACT_PASSES + 1):
        result = _compact_pass(grid, current)
        if result is None:
            logger.warning(
                "Compaction stopped after %d pass(es): a widget has no free slot",
                passes - 1,
            )
            return list(current)
        if _positions(result) == _positions(current):
            return result
        current = result

    logger.warning(
        "Compaction did not settle after %d passes; layout left unchanged",
        MAX_COMPACT_PASSES,
    )
    return list(layout)
