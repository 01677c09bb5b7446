"""JSON key-value store for page layouts.

One file holds every page::

    {
      "<page_id>": {
        "sections": [
          {"id": "mood", "size": {"width": 2, "height": 2},
           "position": {"x": 0, "y": 0}, "visible": true}
        ],
        "gridColumns": 10,
        "gridRows": 8,
        "updatedAt": "2026-01-01T00:00:00+00:00"
      }
    }
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

from grid_engine.contracts import GridConfig, Layout, Widget, make_widget
from grid_engine.occupancy import check_layout

logger = logging.getLogger(__name__)


def _utc_now_iso() -> str:
    return datetime.now(timezone.utc).replace(microsecond=0).isoformat()


def read_json(path: Path) -> Dict[str, Any]:
    """Read a JSON file, returning {} if missing."""
    if not path.exists():
        return {}
    with path.open("r", encoding="utf-8") as f:
        return json.load(f)


def write_json(path: Path, payload: Dict[str, Any]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as f:
        json.dump(payload, f, indent=2)


# ---------------------------------------------------------------------------
# Payload conversion
# ---------------------------------------------------------------------------

def widget_to_payload(widget: Widget) -> Dict[str, Any]:
    return {
        "id": widget.id,
        "size": {"width": widget.size.width, "height": widget.size.height},
        "position": {"x": widget.position.x, "y": widget.position.y},
        "visible": widget.visible,
    }


def widget_from_payload(payload: Dict[str, Any]) -> Widget:
    try:
        size = payload["size"]
        position = payload["position"]
        widget = make_widget(
            payload["id"],
            int(position["x"]),
            int(position["y"]),
            int(size["width"]),
            int(size["height"]),
            visible=bool(payload.get("visible", True)),
        )
    except (KeyError, TypeError, ValueError) as exc:
        raise ValueError(f"Malformed layout section {payload!r}: {exc}") from exc
    if widget.size.width < 1 or widget.size.height < 1:
        raise ValueError(f"Section {widget.id!r} must be at least 1x1")
    if widget.position.x < 0 or widget.position.y < 0:
        raise ValueError(f"Section {widget.id!r} has a negative position")
    return widget


def layout_to_payload(layout: Layout, grid: GridConfig) -> Dict[str, Any]:
    return {
        "sections": [widget_to_payload(widget) for widget in layout],
        "gridColumns": grid.columns,
        "gridRows": grid.rows,
        "updatedAt": _utc_now_iso(),
    }


def layout_from_payload(payload: Dict[str, Any]) -> Layout:
    sections = payload.get("sections")
    if not isinstance(sections, list):
        raise ValueError("Layout payload has no 'sections' list")
    return [widget_from_payload(section) for section in sections]


def grid_from_payload(
    payload: Dict[str, Any], base: Optional[GridConfig] = None
) -> GridConfig:
    """Grid extent recorded with a stored layout, over ``base`` pixel metrics."""
    base = base or GridConfig()
    return GridConfig(
        columns=int(payload.get("gridColumns", base.columns)),
        rows=int(payload.get("gridRows", base.rows)),
        cell_size=base.cell_size,
        gap=base.gap,
        min_cell_size=base.min_cell_size,
        max_cell_size=base.max_cell_size,
        container_padding=base.container_padding,
    )


# ---------------------------------------------------------------------------
# Store
# ---------------------------------------------------------------------------

class LayoutStore:
    """Layouts keyed by page name, persisted to a single JSON file."""

    def __init__(self, path: Path | str):
        self.path = Path(path)

    def _read_all(self) -> Dict[str, Any]:
        data = read_json(self.path)
        if not isinstance(data, dict):
            raise ValueError(f"Layout store {self.path} does not hold a JSON object")
        return data

    def page_ids(self) -> List[str]:
        return sorted(self._read_all().keys())

    def has_layout(self, page_id: str) -> bool:
        return page_id in self._read_all()

    def load_payload(self, page_id: str) -> Optional[Dict[str, Any]]:
        return self._read_all().get(page_id)

    def load_layout(self, page_id: str) -> Optional[Layout]:
        payload = self.load_payload(page_id)
        if payload is None:
            return None
        return layout_from_payload(payload)

    def load_grid(
        self, page_id: str, base: Optional[GridConfig] = None
    ) -> Optional[GridConfig]:
        payload = self.load_payload(page_id)
        if payload is None:
            return None
        return grid_from_payload(payload, base)

    def save_layout(self, page_id: str, layout: Layout, grid: GridConfig) -> None:
        """Persist ``layout`` for ``page_id``.

        Raises:
            ValueError: the layout breaks the no-overlap / in-bounds invariant.
        """
        issues = check_layout(grid, layout)
        if issues:
            raise ValueError(
                f"Refusing to store invalid layout for {page_id!r}: " + "; ".join(issues)
            )
        data = self._read_all()
        data[page_id] = layout_to_payload(layout, grid)
        write_json(self.path, data)
        logger.info("Stored layout %r (%d widgets) in %s", page_id, len(layout), self.path)

    def delete_layout(self, page_id: str) -> bool:
        data = self._read_all()
        if page_id not in data:
            return False
        del data[page_id]
        write_json(self.path, data)
        logger.info("Deleted layout %r from %s", page_id, self.path)
        return True
