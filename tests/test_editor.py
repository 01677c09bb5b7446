"""Tests for the page editor: gesture callbacks, direct moves and persistence."""

import pytest

from grid_engine import GridConfig, LayoutEditor
from grid_engine.contracts import GridPosition, find_widget, make_widget
from grid_engine.occupancy import CellState, check_layout
from grid_engine.session import IDLE_SESSION, start_session
from grid_engine.templates import TEMPLATES
from layout_store import LayoutStore


def _positions(layout):
    return {widget.id: (widget.x, widget.y) for widget in layout}


class TestGestures:

    def test_commit_valid_drop(self, grid_4x4, big_and_small_layout):
        editor = LayoutEditor(grid_4x4, big_and_small_layout)
        editor.on_gesture_start("A")
        feedback = editor.on_gesture_update(50, 0)
        assert feedback.preview_position == GridPosition(1, 0)
        assert feedback.will_displace
        assert editor.on_gesture_end()
        assert _positions(editor.layout) == {"A": (1, 0), "B": (3, 0)}
        assert not editor.session.is_active

    def test_layout_unchanged_while_previewing(self, grid_4x4, big_and_small_layout):
        editor = LayoutEditor(grid_4x4, big_and_small_layout)
        editor.on_gesture_start("A")
        editor.on_gesture_update(50, 0)
        assert _positions(editor.layout) == {"A": (0, 0), "B": (2, 0)}

    def test_invalid_drop_is_discarded(self, grid_2x2, full_2x2_layout):
        editor = LayoutEditor(grid_2x2, full_2x2_layout)
        editor.on_gesture_start("A")
        feedback = editor.on_gesture_update(50, 0)
        assert not feedback.is_valid_drop
        assert not editor.on_gesture_end()
        assert editor.layout == full_2x2_layout

    def test_cancel(self, grid_4x4, two_unit_layout):
        editor = LayoutEditor(grid_4x4, two_unit_layout)
        editor.on_gesture_start("A")
        editor.on_gesture_update(50, 0)
        editor.on_gesture_cancel()
        assert editor.session == IDLE_SESSION
        assert editor.layout == two_unit_layout

    def test_second_start_raises(self, grid_4x4, two_unit_layout):
        editor = LayoutEditor(grid_4x4, two_unit_layout)
        editor.on_gesture_start("A")
        with pytest.raises(RuntimeError):
            editor.on_gesture_start("B")

    def test_cell_states_follow_preview(self, grid_4x4, two_unit_layout):
        editor = LayoutEditor(grid_4x4, two_unit_layout)
        editor.on_gesture_start("A")
        editor.on_gesture_update(50, 0)
        states = editor.cell_states()
        assert states[0, 1] == CellState.PREVIEW_VALID
        assert states[0, 0] == CellState.EMPTY

    def test_auto_compact_after_drop(self, grid_4x4, two_unit_layout):
        editor = LayoutEditor(grid_4x4, two_unit_layout, auto_compact=True)
        editor.on_gesture_start("B")
        editor.on_gesture_update(50, 50)
        assert editor.on_gesture_end()
        # B lands at (3, 3) and is then pulled up next to A.
        assert _positions(editor.layout) == {"A": (0, 0), "B": (1, 0)}


class TestDirectOperations:

    def test_move_widget(self, grid_4x4, big_and_small_layout):
        editor = LayoutEditor(grid_4x4, big_and_small_layout)
        assert editor.move_widget("A", 1, 0)
        assert _positions(editor.layout) == {"A": (1, 0), "B": (3, 0)}

    def test_move_rejected(self, grid_2x2, full_2x2_layout):
        editor = LayoutEditor(grid_2x2, full_2x2_layout)
        assert not editor.move_widget("A", 1, 0)
        assert editor.layout == full_2x2_layout

    def test_move_unknown_widget(self, grid_4x4, two_unit_layout):
        editor = LayoutEditor(grid_4x4, two_unit_layout)
        with pytest.raises(KeyError):
            editor.move_widget("Z", 0, 0)

    def test_operations_refused_during_gesture(self, grid_4x4, two_unit_layout):
        editor = LayoutEditor(grid_4x4, two_unit_layout)
        editor.on_gesture_start("A")
        with pytest.raises(RuntimeError):
            editor.move_widget("B", 0, 3)
        with pytest.raises(RuntimeError):
            editor.compact()
        with pytest.raises(RuntimeError):
            editor.set_visibility("B", False)

    def test_compact(self, grid_4x4, mixed_layout):
        editor = LayoutEditor(grid_4x4, mixed_layout)
        result = editor.compact()
        assert _positions(result)["D"] == (0, 2)
        assert editor.layout == result


class TestVisibility:

    def test_hide_frees_cells(self, grid_4x4, two_unit_layout):
        editor = LayoutEditor(grid_4x4, two_unit_layout)
        assert editor.set_visibility("B", False)
        assert editor.visible_widget_ids() == ["A"]
        assert editor.move_widget("A", 2, 2)

    def test_show_at_stored_position(self, grid_4x4):
        layout = [make_widget("A", 0, 0), make_widget("H", 3, 3, visible=False)]
        editor = LayoutEditor(grid_4x4, layout)
        assert editor.set_visibility("H", True)
        assert find_widget(editor.layout, "H").position == GridPosition(3, 3)

    def test_show_falls_back_to_first_fit(self, grid_4x4, mixed_layout):
        editor = LayoutEditor(grid_4x4, mixed_layout)
        assert editor.set_visibility("H", True)
        hidden = find_widget(editor.layout, "H")
        assert hidden.visible
        assert hidden.position == GridPosition(0, 1)

    def test_show_without_room(self, grid_2x2, full_2x2_layout):
        layout = full_2x2_layout + [make_widget("H", 0, 0, visible=False)]
        editor = LayoutEditor(grid_2x2, layout)
        assert not editor.set_visibility("H", True)
        assert not find_widget(editor.layout, "H").visible

    def test_unknown_widget(self, grid_4x4, two_unit_layout):
        editor = LayoutEditor(grid_4x4, two_unit_layout)
        with pytest.raises(KeyError):
            editor.set_visibility("Z", True)


class TestPersistence:

    def test_store_requires_page_id(self, grid_4x4, store):
        with pytest.raises(ValueError):
            LayoutEditor(grid_4x4, [], store=store)

    def test_from_store_seeds_new_page(self, grid_4x4, store, two_unit_layout):
        editor = LayoutEditor.from_store(store, "home", grid_4x4, two_unit_layout)
        assert editor.layout == two_unit_layout
        assert store.load_layout("home") == two_unit_layout

    def test_commit_writes_store(self, grid_4x4, store, big_and_small_layout):
        editor = LayoutEditor.from_store(store, "home", grid_4x4, big_and_small_layout)
        editor.on_gesture_start("A")
        editor.on_gesture_update(50, 0)
        editor.on_gesture_end()
        assert _positions(store.load_layout("home")) == {"A": (1, 0), "B": (3, 0)}

    def test_rejected_move_leaves_store(self, grid_2x2, store, full_2x2_layout):
        editor = LayoutEditor.from_store(store, "home", grid_2x2, full_2x2_layout)
        editor.move_widget("A", 1, 0)
        assert store.load_layout("home") == full_2x2_layout

    def test_reopen_uses_stored_extent(self, store):
        grid, layout = TEMPLATES["dashboard"]()
        store.save_layout("dash", layout, grid)
        editor = LayoutEditor.from_store(store, "dash", grid.with_cell_size(50.0))
        assert (editor.grid.columns, editor.grid.rows) == (4, 6)
        assert editor.grid.cell_size == 50.0
        assert editor.layout == layout

    def test_resume_session(self, grid_4x4, two_unit_layout):
        editor = LayoutEditor(grid_4x4, two_unit_layout)
        editor.resume_session(start_session(IDLE_SESSION, "A"))
        editor.on_gesture_update(50, 0)
        assert editor.on_gesture_end()
        assert _positions(editor.layout)["A"] == (1, 0)

    def test_resume_session_for_missing_widget(self, grid_4x4, two_unit_layout):
        editor = LayoutEditor(grid_4x4, two_unit_layout)
        editor.resume_session(start_session(IDLE_SESSION, "Z"))
        assert editor.session == IDLE_SESSION


class _RefusingStore(LayoutStore):
    """Store that accepts the seed write and refuses everything after it."""

    def __init__(self, path):
        super().__init__(path)
        self.writes = 0

    def save_layout(self, page_id, layout, grid):
        self.writes += 1
        if self.writes > 1:
            raise ValueError("store is read-only")
        super().save_layout(page_id, layout, grid)


class TestCommitOrdering:

    def test_refused_write_keeps_old_layout(self, tmp_path, grid_4x4, two_unit_layout):
        store = _RefusingStore(tmp_path / "layouts.json")
        editor = LayoutEditor.from_store(store, "home", grid_4x4, two_unit_layout)
        with pytest.raises(ValueError):
            editor.move_widget("A", 1, 0)
        assert editor.layout == two_unit_layout
        assert store.load_layout("home") == two_unit_layout

    def test_compact_with_stranded_widget(self, store):
        grid = GridConfig(columns=4, rows=4)
        layout = [
            make_widget("w0", 2, 0, 2, 3),
            make_widget("w1", 0, 1, 2, 3),
            make_widget("w2", 1, 0),
        ]
        editor = LayoutEditor.from_store(store, "p", grid, layout)
        editor.compact()
        assert check_layout(grid, editor.layout) == []
        assert check_layout(grid, store.load_layout("p")) == []
