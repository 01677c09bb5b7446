"""Contracts for the bento grid placement engine."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Dict, Iterator, List, Optional, Tuple, Union

WidgetId = Union[str, int]


@dataclass(frozen=True)
class GridConfig:
    """Logical grid extent plus the pixel metrics used to map pointer deltas."""

    columns: int = 10
    rows: int = 8
    cell_size: float = 60.0  # px
    gap: float = 8.0  # px between adjacent cells

    # Cell-size fitting bounds for resizable containers
    min_cell_size: int = 40
    max_cell_size: int = 80
    container_padding: int = 32

    def __post_init__(self) -> None:
        if self.columns < 1 or self.rows < 1:
            raise ValueError(
                f"Grid must have at least one cell, got {self.columns}x{self.rows}"
            )
        if self.cell_size <= 0:
            raise ValueError(f"cell_size must be positive, got {self.cell_size}")
        if self.gap < 0:
            raise ValueError(f"gap must be non-negative, got {self.gap}")
        if self.min_cell_size > self.max_cell_size:
            raise ValueError("min_cell_size exceeds max_cell_size")

    @property
    def pitch(self) -> float:
        """Pixel distance between the origins of two adjacent cells."""
        return self.cell_size + self.gap

    @property
    def cell_count(self) -> int:
        return self.columns * self.rows

    def with_cell_size(self, cell_size: float) -> "GridConfig":
        return replace(self, cell_size=cell_size)

    def to_dict(self) -> Dict[str, float]:
        return {
            "columns": self.columns,
            "rows": self.rows,
            "cellSize": self.cell_size,
            "gap": self.gap,
        }

    @classmethod
    def from_dict(cls, payload: Dict[str, object]) -> "GridConfig":
        defaults = cls()
        return cls(
            columns=int(payload.get("columns", defaults.columns)),
            rows=int(payload.get("rows", defaults.rows)),
            cell_size=float(payload.get("cellSize", defaults.cell_size)),
            gap=float(payload.get("gap", defaults.gap)),
        )


@dataclass(frozen=True)
class GridPosition:
    x: int
    y: int

    def as_tuple(self) -> Tuple[int, int]:
        return (self.x, self.y)


@dataclass(frozen=True)
class GridSize:
    width: int
    height: int

    def as_tuple(self) -> Tuple[int, int]:
        return (self.width, self.height)


@dataclass(frozen=True)
class Widget:
    """A placed rectangular occupant of the grid.

    Hidden widgets keep their stored position but do not occupy cells; the
    placement functions skip them and carry them through unchanged.
    """

    id: WidgetId
    position: GridPosition
    size: GridSize
    visible: bool = True

    @property
    def x(self) -> int:
        return self.position.x

    @property
    def y(self) -> int:
        return self.position.y

    @property
    def width(self) -> int:
        return self.size.width

    @property
    def height(self) -> int:
        return self.size.height

    @property
    def right(self) -> int:
        return self.position.x + self.size.width

    @property
    def bottom(self) -> int:
        return self.position.y + self.size.height

    def moved_to(self, x: int, y: int) -> "Widget":
        return replace(self, position=GridPosition(int(x), int(y)))

    def with_visibility(self, visible: bool) -> "Widget":
        return replace(self, visible=bool(visible))

    def cells(self) -> Iterator[Tuple[int, int]]:
        """Yield every (x, y) cell covered by the widget rectangle."""
        for dy in range(self.size.height):
            for dx in range(self.size.width):
                yield (self.position.x + dx, self.position.y + dy)


Layout = List[Widget]


@dataclass(frozen=True)
class DropFeedback:
    """Advisory per-update feedback for the hosting surface."""

    preview_position: Optional[GridPosition] = None
    is_valid_drop: bool = False
    will_displace: bool = False


@dataclass
class LayoutSummary:
    """Compact description of a layout used by the CLI and review app."""

    page_id: str
    grid: GridConfig
    widget_count: int
    hidden_count: int
    fill_ratio: float
    violations: List[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.violations


def make_widget(
    widget_id: WidgetId,
    x: int,
    y: int,
    width: int = 1,
    height: int = 1,
    visible: bool = True,
) -> Widget:
    return Widget(
        id=widget_id,
        position=GridPosition(int(x), int(y)),
        size=GridSize(int(width), int(height)),
        visible=visible,
    )


def find_widget(layout: Layout, widget_id: WidgetId) -> Optional[Widget]:
    for widget in layout:
        if widget.id == widget_id:
            return widget
    return None
