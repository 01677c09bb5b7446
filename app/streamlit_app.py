"""Layout editor: preview, commit and compact widget moves on a stored page."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Any, List, Optional

import numpy as np
import plotly.graph_objects as go
import streamlit as st

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from data import (
    cell_colors,
    feedback_badge,
    list_pages,
    section_rows,
    widget_color,
)
from grid_engine import GridConfig, LayoutEditor
from grid_engine.contracts import Layout, WidgetId, find_widget
from grid_engine.occupancy import summarize_layout
from grid_engine.session import IDLE_SESSION, DragSession
from grid_engine.templates import TEMPLATES
from layout_store import LayoutStore

SESSION_KEY = "drag_session"


# ---------------------------------------------------------------------------
# Editor / session plumbing
# ---------------------------------------------------------------------------


def _open_editor(store: LayoutStore, page_id: str, auto_compact: bool) -> LayoutEditor:
    """Rebuild the editor for this rerun and carry the move session over."""
    editor = LayoutEditor.from_store(
        store, page_id, GridConfig(), auto_compact=auto_compact
    )
    editor.resume_session(st.session_state.get(SESSION_KEY, IDLE_SESSION))
    return editor


def _save_session(editor: LayoutEditor) -> None:
    st.session_state[SESSION_KEY] = editor.session


def _widget_options(layout: Layout) -> List[WidgetId]:
    return [widget.id for widget in layout if widget.visible]


# ---------------------------------------------------------------------------
# Grid rendering
# ---------------------------------------------------------------------------


def _grid_figure(grid: GridConfig, layout: Layout, states: np.ndarray) -> Any:
    fig = go.Figure()
    colors = cell_colors(states)
    for y in range(grid.rows):
        for x in range(grid.columns):
            fig.add_shape(
                type="rect",
                x0=x + 0.04, x1=x + 0.96,
                y0=y + 0.04, y1=y + 0.96,
                line={"color": "#BBBBBB", "width": 1, "dash": "dot"},
                fillcolor=colors[y][x],
                layer="below",
            )
    for idx, widget in enumerate(layout):
        if not widget.visible:
            continue
        color = widget_color(idx)
        fig.add_shape(
            type="rect",
            x0=widget.x + 0.1, x1=widget.right - 0.1,
            y0=widget.y + 0.1, y1=widget.bottom - 0.1,
            line={"color": color, "width": 3},
            fillcolor=color,
            opacity=0.35,
        )
        fig.add_trace(
            go.Scatter(
                x=[widget.x + widget.width / 2.0],
                y=[widget.y + widget.height / 2.0],
                mode="text",
                text=[str(widget.id)],
                hoverinfo="skip",
                showlegend=False,
            )
        )
    fig.update_xaxes(range=[0, grid.columns], showgrid=False, zeroline=False, dtick=1)
    fig.update_yaxes(
        range=[grid.rows, 0], showgrid=False, zeroline=False, dtick=1,
        scaleanchor="x", scaleratio=1,
    )
    fig.update_layout(
        margin={"l": 10, "r": 10, "t": 10, "b": 10},
        height=max(320, 60 * grid.rows),
        plot_bgcolor="white",
    )
    return fig


# ---------------------------------------------------------------------------
# Panels
# ---------------------------------------------------------------------------


def _render_page_list(store_path: str) -> None:
    pages = list_pages(store_path)
    if pages:
        st.dataframe(pages, use_container_width=True, hide_index=True)
    else:
        st.caption("Store is empty.")


def _render_create_panel(store: LayoutStore, page_id: str) -> None:
    st.info(f"No layout stored for '{page_id}' yet.")
    template = st.selectbox("Starter layout", sorted(TEMPLATES), key="template")
    if st.button("Create page", key="create-btn"):
        grid, layout = TEMPLATES[template]()
        store.save_layout(page_id, layout, grid)
        st.rerun()


def _render_move_panel(editor: LayoutEditor) -> None:
    layout = editor.layout
    options = _widget_options(layout)
    if not options:
        st.caption("No visible widgets to move.")
        return

    c1, c2, c3 = st.columns(3)
    widget_id = c1.selectbox("Widget", options, key="move-widget")
    widget = find_widget(layout, widget_id)
    target_x = c2.number_input(
        "Target column", min_value=0, max_value=editor.grid.columns - 1,
        value=widget.x, step=1, key="move-x",
    )
    target_y = c3.number_input(
        "Target row", min_value=0, max_value=editor.grid.rows - 1,
        value=widget.y, step=1, key="move-y",
    )

    active = editor.session.is_active
    b1, b2, b3 = st.columns(3)
    if b1.button("Preview", key="preview-btn"):
        editor.on_gesture_cancel()
        editor.on_gesture_start(widget_id)
        # Express the target as the pixel delta a pointer would have produced.
        editor.on_gesture_update(
            (int(target_x) - widget.x) * editor.grid.pitch,
            (int(target_y) - widget.y) * editor.grid.pitch,
        )
        _save_session(editor)
    if b2.button("Commit", key="commit-btn", disabled=not active):
        committed = editor.on_gesture_end()
        _save_session(editor)
        if committed:
            st.rerun()
        st.warning("Drop rejected: layout unchanged.")
    if b3.button("Cancel", key="cancel-btn", disabled=not active):
        editor.on_gesture_cancel()
        _save_session(editor)

    feedback = editor.feedback
    preview = feedback.preview_position
    st.metric(
        "Drop",
        feedback_badge(
            editor.session.is_active, feedback.is_valid_drop, feedback.will_displace
        ),
        delta=f"({preview.x}, {preview.y})" if preview is not None else None,
        delta_color="off",
    )


def _render_visibility_panel(editor: LayoutEditor) -> None:
    with st.expander("Visibility", expanded=False):
        for widget in editor.layout:
            shown = st.checkbox(
                str(widget.id),
                value=widget.visible,
                key=f"visible-{widget.id}",
                disabled=editor.session.is_active,
            )
            if shown != widget.visible:
                if not editor.set_visibility(widget.id, shown):
                    st.warning(f"No room to show {widget.id}.")
                else:
                    st.rerun()


def _render_summary(editor: LayoutEditor) -> None:
    summary = summarize_layout(editor.page_id, editor.grid, editor.layout)
    c1, c2, c3, c4 = st.columns(4)
    c1.metric("Grid", f"{summary.grid.columns} x {summary.grid.rows}")
    c2.metric("Widgets", str(summary.widget_count))
    c3.metric("Hidden", str(summary.hidden_count))
    c4.metric("Fill", f"{summary.fill_ratio:.0%}")
    for issue in summary.violations:
        st.error(issue)


def _render_editor(store: LayoutStore, page_id: str, auto_compact: bool) -> None:
    editor = _open_editor(store, page_id, auto_compact)
    _render_summary(editor)

    left, right = st.columns([3, 2])
    with right:
        _render_move_panel(editor)
        if st.button("Compact", key="compact-btn", disabled=editor.session.is_active):
            editor.compact()
            st.rerun()
        _render_visibility_panel(editor)
        payload: Optional[dict] = store.load_payload(page_id)
        if payload:
            st.dataframe(section_rows(payload), use_container_width=True, hide_index=True)
    with left:
        st.plotly_chart(
            _grid_figure(editor.grid, editor.layout, editor.cell_states()),
            use_container_width=True,
        )


def main() -> None:
    st.set_page_config(page_title="Layout Editor", layout="wide")
    st.title("Layout Editor")

    c1, c2, c3 = st.columns([2, 2, 1])
    store_path = c1.text_input("Layout store", value="layouts.json")
    page_id = c2.text_input("Page", value="dashboard")
    auto_compact = c3.checkbox("Auto-compact", value=False)

    store = LayoutStore(store_path)
    tab_edit, tab_pages = st.tabs(["Edit", "Pages"])
    with tab_edit:
        if store.has_layout(page_id):
            _render_editor(store, page_id, auto_compact)
        else:
            _render_create_panel(store, page_id)
    with tab_pages:
        _render_page_list(store_path)


if __name__ == "__main__":
    main()
