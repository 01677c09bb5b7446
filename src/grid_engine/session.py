"""Interactive move session.

A :class:`DragSession` is an immutable value owned by the caller. Each
transition function takes the current session (plus the authoritative layout
where needed) and returns the next one; nothing here touches the layout the
caller holds. The only function that produces a new layout is
:func:`end_session`, and it is up to the caller to adopt it.

States::

    IDLE --start--> ACTIVE --update--> ACTIVE
    ACTIVE --end (valid drop)--> IDLE   (new layout returned)
    ACTIVE --end (invalid) / cancel--> IDLE   (layout unchanged)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional, Tuple

from grid_engine.contracts import (
    DropFeedback,
    GridConfig,
    GridPosition,
    Layout,
    WidgetId,
    find_widget,
)
from grid_engine.coordinates import cell_to_pixel, clamp_to_grid, pixel_to_cell
from grid_engine.placement import is_valid_position, relocate

logger = logging.getLogger(__name__)


class SessionPhase(Enum):
    IDLE = "idle"
    ACTIVE = "active"


@dataclass(frozen=True)
class DragSession:
    phase: SessionPhase = SessionPhase.IDLE
    active_widget_id: Optional[WidgetId] = None
    preview_position: Optional[GridPosition] = None
    is_valid_drop: bool = False
    will_displace: bool = False

    @property
    def is_active(self) -> bool:
        return self.phase is SessionPhase.ACTIVE


IDLE_SESSION = DragSession()


def start_session(session: DragSession, widget_id: WidgetId) -> DragSession:
    """Begin moving ``widget_id``.

    Raises:
        RuntimeError: a session is already active. Only one pointer may drive
            a move at a time.
    """
    if session.is_active:
        raise RuntimeError(
            f"Cannot start moving {widget_id!r}: "
            f"{session.active_widget_id!r} is already being moved"
        )
    return DragSession(phase=SessionPhase.ACTIVE, active_widget_id=widget_id)


def update_session(
    session: DragSession,
    grid: GridConfig,
    layout: Layout,
    delta_x: float,
    delta_y: float,
) -> DragSession:
    """Re-evaluate the session for a cumulative pointer delta in pixels.

    The candidate cell is the widget's original pixel origin plus the delta,
    snapped to the nearest cell and clamped so the whole widget stays on the
    grid. Validity is recomputed from scratch: a direct fit first, then a
    speculative cascade whose result is thrown away.
    """
    if not session.is_active:
        return session
    widget = find_widget(layout, session.active_widget_id)
    if widget is None or not widget.visible:
        return session

    origin_x, origin_y = cell_to_pixel(grid, widget.position.x, widget.position.y)
    snapped = pixel_to_cell(grid, origin_x + delta_x, origin_y + delta_y)
    preview = clamp_to_grid(
        grid, snapped.x, snapped.y, widget.size.width, widget.size.height
    )

    if is_valid_position(
        grid, layout, preview.x, preview.y,
        widget.size.width, widget.size.height, widget.id,
    ):
        valid, displace = True, False
    elif relocate(grid, layout, widget.id, preview.x, preview.y) is not None:
        valid, displace = True, True
    else:
        valid, displace = False, False

    return replace(
        session,
        preview_position=preview,
        is_valid_drop=valid,
        will_displace=displace,
    )


def end_session(
    session: DragSession, grid: GridConfig, layout: Layout
) -> Tuple[DragSession, Optional[Layout]]:
    """Finish the gesture.

    Returns the idle session and the committed layout, or ``None`` when the
    drop was invalid, never previewed, or the final relocation unexpectedly
    failed. In every ``None`` case the caller keeps its layout as is.
    """
    if not session.is_active:
        return IDLE_SESSION, None
    if not session.is_valid_drop or session.preview_position is None:
        logger.debug("Discarding move of %r: invalid drop", session.active_widget_id)
        return IDLE_SESSION, None

    widget = find_widget(layout, session.active_widget_id)
    if widget is None:
        logger.warning(
            "Widget %r vanished during the move; discarding", session.active_widget_id
        )
        return IDLE_SESSION, None

    target = session.preview_position
    result = relocate(grid, layout, widget.id, target.x, target.y)
    if result is None:
        logger.warning(
            "Commit of %r to (%d, %d) failed after a positive preview; layout unchanged",
            widget.id, target.x, target.y,
        )
        return IDLE_SESSION, None
    return IDLE_SESSION, result


def cancel_session(session: DragSession) -> DragSession:
    if session.is_active:
        logger.debug("Cancelled move of %r", session.active_widget_id)
    return IDLE_SESSION


def session_feedback(session: DragSession) -> DropFeedback:
    return DropFeedback(
        preview_position=session.preview_position,
        is_valid_drop=session.is_valid_drop,
        will_displace=session.will_displace,
    )
