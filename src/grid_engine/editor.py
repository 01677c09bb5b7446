"""Editing surface that owns one page's authoritative layout.

The editor adapts the four normalized gesture callbacks to the pure session
functions and is the only place a layout is replaced. While a move is in
progress ``editor.layout`` keeps returning the pre-move layout; the preview
lives in the session. Every accepted change is written back to the store.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, List, Optional

import numpy as np

from grid_engine.contracts import (
    DropFeedback,
    GridConfig,
    Layout,
    WidgetId,
    find_widget,
)
from grid_engine.occupancy import preview_cells
from grid_engine.placement import compact, find_free_position, is_valid_position, relocate
from grid_engine.session import (
    IDLE_SESSION,
    DragSession,
    cancel_session,
    end_session,
    session_feedback,
    start_session,
    update_session,
)

if TYPE_CHECKING:
    from layout_store import LayoutStore

logger = logging.getLogger(__name__)


class LayoutEditor:
    """Holds a page layout and applies moves, compaction and visibility changes."""

    def __init__(
        self,
        grid: GridConfig,
        layout: Layout,
        *,
        store: Optional["LayoutStore"] = None,
        page_id: Optional[str] = None,
        auto_compact: bool = False,
    ):
        if store is not None and page_id is None:
            raise ValueError("page_id is required when a store is attached")
        self.grid = grid
        self._layout: Layout = list(layout)
        self._session: DragSession = IDLE_SESSION
        self.store = store
        self.page_id = page_id
        self.auto_compact = auto_compact

    @classmethod
    def from_store(
        cls,
        store: "LayoutStore",
        page_id: str,
        grid: GridConfig,
        default_layout: Optional[Layout] = None,
        auto_compact: bool = False,
    ) -> "LayoutEditor":
        """Open ``page_id``, seeding it with ``default_layout`` if it is new.

        The stored column/row count wins over ``grid``; pixel metrics come
        from ``grid``.
        """
        layout = store.load_layout(page_id)
        if layout is None:
            editor = cls(
                grid, default_layout or [],
                store=store, page_id=page_id, auto_compact=auto_compact,
            )
            editor._persist()
            return editor
        stored_grid = store.load_grid(page_id, base=grid) or grid
        return cls(
            stored_grid, layout,
            store=store, page_id=page_id, auto_compact=auto_compact,
        )

    # ── State ──────────────────────────────────────────────────────────────

    @property
    def layout(self) -> Layout:
        return list(self._layout)

    @property
    def session(self) -> DragSession:
        return self._session

    @property
    def feedback(self) -> DropFeedback:
        return session_feedback(self._session)

    def visible_widget_ids(self) -> List[WidgetId]:
        return [widget.id for widget in self._layout if widget.visible]

    def cell_states(self) -> np.ndarray:
        return preview_cells(self.grid, self._layout, self._session)

    def _commit(self, layout: Layout, reason: str) -> None:
        """Write ``layout`` to the store, then adopt it.

        Raises:
            ValueError: the store refused the layout; the editor keeps the old one.
        """
        self._persist(layout)
        self._layout = list(layout)
        logger.info("Layout %s: %s", self.page_id or "<unsaved>", reason)

    def _persist(self, layout: Optional[Layout] = None) -> None:
        if self.store is not None:
            self.store.save_layout(
                self.page_id, self._layout if layout is None else layout, self.grid
            )

    def resume_session(self, session: DragSession) -> None:
        """Adopt a session carried over from an earlier request (web reruns)."""
        self._require_idle("resume a session")
        if session.is_active and find_widget(self._layout, session.active_widget_id) is None:
            session = cancel_session(session)
        self._session = session

    # ── Gesture callbacks ──────────────────────────────────────────────────

    def on_gesture_start(self, widget_id: WidgetId) -> None:
        self._session = start_session(self._session, widget_id)

    def on_gesture_update(self, delta_x: float, delta_y: float) -> DropFeedback:
        self._session = update_session(
            self._session, self.grid, self._layout, delta_x, delta_y
        )
        feedback = self.feedback
        logger.debug(
            "Preview %r at %s valid=%s displace=%s",
            self._session.active_widget_id,
            feedback.preview_position,
            feedback.is_valid_drop,
            feedback.will_displace,
        )
        return feedback

    def on_gesture_end(self) -> bool:
        """Commit the move if the last preview was a valid drop."""
        widget_id = self._session.active_widget_id
        target = self._session.preview_position
        self._session, result = end_session(self._session, self.grid, self._layout)
        if result is None:
            return False
        if self.auto_compact:
            result = compact(self.grid, result)
        self._commit(result, f"moved {widget_id!r} to ({target.x}, {target.y})")
        return True

    def on_gesture_cancel(self) -> None:
        self._session = cancel_session(self._session)

    # ── Direct operations ──────────────────────────────────────────────────

    def move_widget(self, widget_id: WidgetId, x: int, y: int) -> bool:
        """Move without a gesture, cascading displaced widgets.

        Raises:
            RuntimeError: a gesture is in progress.
            KeyError: ``widget_id`` is not on this page.
        """
        self._require_idle("move")
        result = relocate(self.grid, self._layout, widget_id, x, y)
        if result is None:
            logger.info("Move of %r to (%d, %d) rejected: no room", widget_id, x, y)
            return False
        if self.auto_compact:
            result = compact(self.grid, result)
        self._commit(result, f"moved {widget_id!r} to ({x}, {y})")
        return True

    def compact(self) -> Layout:
        self._require_idle("compact")
        self._commit(compact(self.grid, self._layout), "compacted")
        return self.layout

    def set_visibility(self, widget_id: WidgetId, visible: bool) -> bool:
        """Show or hide a widget.

        A widget being shown goes back to its stored position if that is still
        free, otherwise to the first free slot. If neither exists it stays
        hidden and ``False`` is returned.
        """
        self._require_idle("change visibility")
        widget = find_widget(self._layout, widget_id)
        if widget is None:
            raise KeyError(f"Unknown widget id: {widget_id!r}")
        if widget.visible == visible:
            return True

        if not visible:
            updated = widget.with_visibility(False)
        elif is_valid_position(
            self.grid, self._layout, widget.x, widget.y,
            widget.width, widget.height, widget.id,
        ):
            updated = widget.with_visibility(True)
        else:
            slot = find_free_position(
                self.grid, self._layout, widget.width, widget.height, [widget.id]
            )
            if slot is None:
                logger.info("No room to show %r", widget_id)
                return False
            updated = widget.moved_to(slot.x, slot.y).with_visibility(True)

        layout = [updated if w.id == widget_id else w for w in self._layout]
        self._commit(layout, f"{'showed' if visible else 'hid'} {widget_id!r}")
        return True

    def _require_idle(self, action: str) -> None:
        if self._session.is_active:
            raise RuntimeError(
                f"Cannot {action} while {self._session.active_widget_id!r} is being moved"
            )
