"""
Starter layouts.

These seed a page the first time it is opened, and give the CLI and the
review app something to show on an empty store.
"""
from typing import Callable, Dict, Tuple

from grid_engine.contracts import GridConfig, Layout, make_widget


def create_tracking_page_layout() -> Tuple[GridConfig, Layout]:
    """
    Six-panel tracking page on the 10 x 8 grid.

    Returns:
        (grid, layout) with the top two rows filled by summary tiles and two
        3 x 3 detail panels underneath.
    """
    grid = GridConfig(columns=10, rows=8, cell_size=60.0, gap=8.0)
    layout = [
        make_widget("current-mood", 0, 0, 2, 2),
        make_widget("daily-average", 2, 0, 2, 2),
        make_widget("mood-streak", 4, 0, 2, 2),
        make_widget("weekly-trend", 6, 0, 4, 3),
        make_widget("mood-factors", 0, 2, 3, 3),
        make_widget("mood-history", 3, 2, 3, 3),
    ]
    return grid, layout


def create_dashboard_layout() -> Tuple[GridConfig, Layout]:
    """
    Ten-tile home dashboard on the narrow 4-column grid.

    Returns:
        (grid, layout) with unit tiles except a double-width weight tile.
    """
    grid = GridConfig(columns=4, rows=6, cell_size=120.0, gap=4.0)
    layout = [
        make_widget("exercise", 0, 0),
        make_widget("diet", 1, 0),
        make_widget("weight", 2, 0, 2, 1),
        make_widget("tasks", 0, 1),
        make_widget("mood", 1, 1),
        make_widget("social", 2, 1),
        make_widget("media", 3, 1),
        make_widget("tv", 0, 2),
        make_widget("books", 1, 2),
        make_widget("gaming", 2, 2),
    ]
    return grid, layout


TEMPLATES: Dict[str, Callable[[], Tuple[GridConfig, Layout]]] = {
    "tracking": create_tracking_page_layout,
    "dashboard": create_dashboard_layout,
}
