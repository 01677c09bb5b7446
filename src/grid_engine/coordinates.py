"""Pixel <-> cell conversion and cell-size fitting."""

from __future__ import annotations

import math
from typing import Tuple

from grid_engine.contracts import GridConfig, GridPosition


def round_half_up(value: float) -> int:
    """Round with halves going toward +inf (not banker's rounding)."""
    return int(math.floor(value + 0.5))


def pixel_to_cell(grid: GridConfig, pixel_x: float, pixel_y: float) -> GridPosition:
    """Nearest cell origin for a pixel offset, clamped to the grid's last cell."""
    x = round_half_up(pixel_x / grid.pitch)
    y = round_half_up(pixel_y / grid.pitch)
    return GridPosition(
        max(0, min(x, grid.columns - 1)),
        max(0, min(y, grid.rows - 1)),
    )


def clamp_to_grid(
    grid: GridConfig, x: int, y: int, width: int, height: int
) -> GridPosition:
    """Clamp an origin so a ``width`` x ``height`` rectangle stays on the grid."""
    return GridPosition(
        max(0, min(x, grid.columns - width)),
        max(0, min(y, grid.rows - height)),
    )


def cell_to_pixel(grid: GridConfig, x: int, y: int) -> Tuple[float, float]:
    """Top-left pixel of a cell, relative to the grid origin."""
    return (x * grid.pitch, y * grid.pitch)


def span_pixels(grid: GridConfig, cells: int) -> float:
    """Pixel length of ``cells`` adjacent cells, including the inner gaps."""
    if cells <= 0:
        return 0.0
    return cells * grid.pitch - grid.gap


def grid_pixel_size(grid: GridConfig) -> Tuple[float, float]:
    return (span_pixels(grid, grid.columns), span_pixels(grid, grid.rows))


def fit_cell_size(
    grid: GridConfig, container_width: float, container_height: float
) -> int:
    """Largest square cell that fits the container, within the configured bounds.

    The container loses ``container_padding`` on each axis before the gaps
    are subtracted.
    """
    available_w = container_width - grid.container_padding
    available_h = container_height - grid.container_padding
    by_width = (available_w - (grid.columns - 1) * grid.gap) / grid.columns
    by_height = (available_h - (grid.rows - 1) * grid.gap) / grid.rows
    size = int(math.floor(min(by_width, by_height)))
    return max(grid.min_cell_size, min(grid.max_cell_size, size))


def fit_grid(
    grid: GridConfig, container_width: float, container_height: float
) -> GridConfig:
    return grid.with_cell_size(fit_cell_size(grid, container_width, container_height))
