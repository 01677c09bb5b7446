"""Pure data helpers for the layout review UI. No Streamlit imports."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List, Optional

import numpy as np

from layout_store import read_json

# Indexed by grid_engine.occupancy.CellState
CELL_COLORS: Dict[int, str] = {
    0: "#F2F2F2",  # empty
    1: "#D0D0D0",  # occupied
    2: "#7FB3F5",  # preview, direct fit
    3: "#F5B971",  # preview, will displace
    4: "#F28B82",  # preview, rejected
}
WIDGET_PALETTE = [
    "#4E79A7", "#F28E2B", "#59A14F", "#B07AA1", "#76B7B2",
    "#EDC948", "#FF9DA7", "#9C755F", "#BAB0AC", "#E15759",
]


def list_pages(store_path: str) -> List[Dict[str, Any]]:
    """Summaries of every page in a layout store, sorted by page id."""
    data = read_json(Path(store_path))
    items: List[Dict[str, Any]] = []
    for page_id in sorted(data):
        payload = data[page_id] if isinstance(data[page_id], dict) else {}
        sections = payload.get("sections", [])
        sections = sections if isinstance(sections, list) else []
        items.append(
            {
                "page_id": page_id,
                "columns": safe_int(payload.get("gridColumns")),
                "rows": safe_int(payload.get("gridRows")),
                "widgets": len(sections),
                "hidden": sum(1 for s in sections if not s.get("visible", True)),
                "updated_at": payload.get("updatedAt"),
            }
        )
    return items


def section_rows(payload: Dict[str, Any]) -> List[Dict[str, Any]]:
    """Flatten a stored page payload into table rows."""
    rows: List[Dict[str, Any]] = []
    for section in payload.get("sections", []) or []:
        if not isinstance(section, dict):
            continue
        size = section.get("size", {}) or {}
        position = section.get("position", {}) or {}
        rows.append(
            {
                "id": str(section.get("id", "")),
                "x": safe_int(position.get("x")),
                "y": safe_int(position.get("y")),
                "width": safe_int(size.get("width")),
                "height": safe_int(size.get("height")),
                "visible": bool(section.get("visible", True)),
            }
        )
    return rows


def feedback_badge(active: bool, is_valid_drop: bool, will_displace: bool) -> str:
    """Format drop feedback as a badge label."""
    if not active:
        return "IDLE"
    if not is_valid_drop:
        return "INVALID"
    if will_displace:
        return "DISPLACE"
    return "VALID"


def cell_colors(states: np.ndarray) -> List[List[str]]:
    """Map a 2D array of cell-state codes to fill colours, row by row."""
    fallback = CELL_COLORS[0]
    return [[CELL_COLORS.get(int(code), fallback) for code in row] for row in states]


def widget_color(index: int) -> str:
    return WIDGET_PALETTE[index % len(WIDGET_PALETTE)]


def safe_int(value: Any) -> Optional[int]:
    """Convert to int or return None."""
    try:
        return int(value)
    except (TypeError, ValueError):
        return None
