"""Tests for the move session state machine."""

from __future__ import annotations

import copy

import pytest

from grid_engine.contracts import GridPosition, make_widget
from grid_engine.session import (
    IDLE_SESSION,
    DragSession,
    SessionPhase,
    cancel_session,
    end_session,
    session_feedback,
    start_session,
    update_session,
)


def _positions(layout):
    return {widget.id: (widget.x, widget.y) for widget in layout}


class TestTransitions:

    def test_start_from_idle(self):
        session = start_session(IDLE_SESSION, "A")
        assert session.phase is SessionPhase.ACTIVE
        assert session.active_widget_id == "A"
        assert session.preview_position is None
        assert not session.is_valid_drop

    def test_start_while_active_raises(self):
        session = start_session(IDLE_SESSION, "A")
        with pytest.raises(RuntimeError):
            start_session(session, "B")

    def test_update_while_idle_is_ignored(self, grid_4x4, two_unit_layout):
        session = update_session(IDLE_SESSION, grid_4x4, two_unit_layout, 50, 0)
        assert session == IDLE_SESSION

    def test_update_for_unknown_widget_is_ignored(self, grid_4x4, two_unit_layout):
        session = start_session(IDLE_SESSION, "ghost")
        assert update_session(session, grid_4x4, two_unit_layout, 50, 0) == session

    def test_cancel_returns_idle(self, grid_4x4, two_unit_layout):
        session = start_session(IDLE_SESSION, "A")
        session = update_session(session, grid_4x4, two_unit_layout, 50, 0)
        assert cancel_session(session) == IDLE_SESSION

    def test_cancel_while_idle(self):
        assert cancel_session(IDLE_SESSION) == IDLE_SESSION


class TestPreview:

    def test_direct_move(self, grid_4x4, two_unit_layout):
        session = start_session(IDLE_SESSION, "A")
        session = update_session(session, grid_4x4, two_unit_layout, 50, 0)
        assert session.preview_position == GridPosition(1, 0)
        assert session.is_valid_drop
        assert not session.will_displace

    def test_move_with_displacement(self, grid_4x4, big_and_small_layout):
        session = start_session(IDLE_SESSION, "A")
        session = update_session(session, grid_4x4, big_and_small_layout, 50, 0)
        assert session.preview_position == GridPosition(1, 0)
        assert session.is_valid_drop
        assert session.will_displace

    def test_move_with_no_room(self, grid_2x2, full_2x2_layout):
        session = start_session(IDLE_SESSION, "A")
        session = update_session(session, grid_2x2, full_2x2_layout, 50, 0)
        assert session.preview_position == GridPosition(1, 0)
        assert not session.is_valid_drop
        assert not session.will_displace

    def test_boundary_clamp(self, grid_4x4):
        layout = [make_widget("A", 0, 0, 2, 2)]
        session = start_session(IDLE_SESSION, "A")
        session = update_session(session, grid_4x4, layout, 250, 250)
        assert session.preview_position == GridPosition(2, 2)
        assert session.is_valid_drop

    def test_negative_delta_clamps_to_origin(self, grid_4x4, two_unit_layout):
        session = start_session(IDLE_SESSION, "B")
        session = update_session(session, grid_4x4, two_unit_layout, -500, -500)
        assert session.preview_position == GridPosition(0, 0)
        assert session.will_displace

    @pytest.mark.parametrize(
        "delta, expected_x",
        [(0, 0), (24, 0), (25, 1), (74, 1), (75, 2)],
    )
    def test_rounds_half_cells_up(self, grid_4x4, two_unit_layout, delta, expected_x):
        session = start_session(IDLE_SESSION, "A")
        session = update_session(session, grid_4x4, two_unit_layout, delta, 0)
        assert session.preview_position == GridPosition(expected_x, 0)

    def test_delta_is_cumulative(self, grid_4x4, two_unit_layout):
        session = start_session(IDLE_SESSION, "A")
        session = update_session(session, grid_4x4, two_unit_layout, 100, 0)
        session = update_session(session, grid_4x4, two_unit_layout, 50, 0)
        assert session.preview_position == GridPosition(1, 0)

    def test_update_does_not_touch_layout(self, grid_4x4, big_and_small_layout):
        snapshot = copy.deepcopy(big_and_small_layout)
        session = start_session(IDLE_SESSION, "A")
        update_session(session, grid_4x4, big_and_small_layout, 50, 0)
        assert big_and_small_layout == snapshot

    def test_feedback_mirrors_session(self, grid_4x4, big_and_small_layout):
        session = start_session(IDLE_SESSION, "A")
        session = update_session(session, grid_4x4, big_and_small_layout, 50, 0)
        feedback = session_feedback(session)
        assert feedback.preview_position == GridPosition(1, 0)
        assert feedback.is_valid_drop
        assert feedback.will_displace

    def test_idle_feedback(self):
        feedback = session_feedback(IDLE_SESSION)
        assert feedback.preview_position is None
        assert not feedback.is_valid_drop
        assert not feedback.will_displace


class TestEndSession:

    def test_valid_drop_commits(self, grid_4x4, big_and_small_layout):
        session = start_session(IDLE_SESSION, "A")
        session = update_session(session, grid_4x4, big_and_small_layout, 50, 0)
        session, result = end_session(session, grid_4x4, big_and_small_layout)
        assert session == IDLE_SESSION
        assert result is not None
        assert _positions(result) == {"A": (1, 0), "B": (3, 0)}

    def test_invalid_drop_discards(self, grid_2x2, full_2x2_layout):
        session = start_session(IDLE_SESSION, "A")
        session = update_session(session, grid_2x2, full_2x2_layout, 50, 0)
        session, result = end_session(session, grid_2x2, full_2x2_layout)
        assert session == IDLE_SESSION
        assert result is None

    def test_end_without_preview(self, grid_4x4, two_unit_layout):
        session = start_session(IDLE_SESSION, "A")
        session, result = end_session(session, grid_4x4, two_unit_layout)
        assert session == IDLE_SESSION
        assert result is None

    def test_end_while_idle(self, grid_4x4, two_unit_layout):
        session, result = end_session(IDLE_SESSION, grid_4x4, two_unit_layout)
        assert session == IDLE_SESSION
        assert result is None

    def test_stale_positive_preview_is_rechecked(self, grid_2x2, full_2x2_layout):
        stale = DragSession(
            phase=SessionPhase.ACTIVE,
            active_widget_id="A",
            preview_position=GridPosition(1, 0),
            is_valid_drop=True,
            will_displace=True,
        )
        session, result = end_session(stale, grid_2x2, full_2x2_layout)
        assert session == IDLE_SESSION
        assert result is None

    def test_vanished_widget(self, grid_4x4, two_unit_layout):
        stale = DragSession(
            phase=SessionPhase.ACTIVE,
            active_widget_id="gone",
            preview_position=GridPosition(1, 0),
            is_valid_drop=True,
        )
        session, result = end_session(stale, grid_4x4, two_unit_layout)
        assert session == IDLE_SESSION
        assert result is None
