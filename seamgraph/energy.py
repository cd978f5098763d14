"""
Energy functions for seam carving.

The energy function determines which pixels are "important".
Low-energy seams are preferred for removal.

Energy is a Sobel-style brightness gradient (Avidan & Shamir 2007), read
through the neighbor links of the pixel graph instead of array offsets,
so it stays correct as seams are removed and re-inserted. Results are
memoized on the grid and cleared by `PixelGrid.link`.
"""

import math
from typing import List, Optional

import torch

from .grid import Axis, Direction, PixelGrid

UP, DOWN, LEFT, RIGHT = Direction.UP, Direction.DOWN, Direction.LEFT, Direction.RIGHT

# Each gradient lies in [-4, 4], so energy never exceeds sqrt(4^2 + 4^2)
ENERGY_DISPLAY_SCALE = math.sqrt(32)


def brightness(grid: PixelGrid, node: int) -> float:
    """Mean of the three color channels scaled to [0, 1]. Zero for the border."""
    return grid.brightness(node)


def horizontal_gradient(grid: PixelGrid, node: int) -> float:
    """Left column minus right column, centre row weighted twice."""
    b = grid.brightness
    n = grid.neighbor
    left = n(node, LEFT)
    right = n(node, RIGHT)
    return ((b(n(left, UP)) + 2 * b(left) + b(n(left, DOWN)))
            - (b(n(right, UP)) + 2 * b(right) + b(n(right, DOWN))))


def vertical_gradient(grid: PixelGrid, node: int) -> float:
    """Upper row minus lower row, centre column weighted twice."""
    b = grid.brightness
    n = grid.neighbor
    up = n(node, UP)
    down = n(node, DOWN)
    return ((b(n(up, LEFT)) + 2 * b(up) + b(n(up, RIGHT)))
            - (b(n(down, LEFT)) + 2 * b(down) + b(n(down, RIGHT))))


def energy(grid: PixelGrid, node: int) -> float:
    """
    Gradient magnitude of a pixel.

    E = sqrt(G_h^2 + G_v^2), always >= 0. Cached on the grid until one of
    the links it reads changes.
    """
    value = grid.cached_energy(node)
    if value is None:
        gx = horizontal_gradient(grid, node)
        gy = vertical_gradient(grid, node)
        value = math.sqrt(gx * gx + gy * gy)
        grid.store_energy(node, value)
    return value


def lane_energies(grid: PixelGrid, lanes: List[List[int]]) -> torch.Tensor:
    """Energy of every node in `lanes` as a (n_lanes, lane_length) tensor."""
    if not lanes:
        return torch.zeros(0, 0, dtype=torch.float64)
    return torch.tensor([[energy(grid, node) for node in lane] for lane in lanes],
                        dtype=torch.float64)


def energy_map(grid: PixelGrid, axis: Axis = Axis.VERTICAL,
               lanes: Optional[List[List[int]]] = None) -> torch.Tensor:
    """
    Energy map of the current grid.

    Args:
        grid: Pixel graph
        axis: VERTICAL gives (H, W), HORIZONTAL the transposed (W, H)
        lanes: Pre-computed `grid.lanes(axis)`, to avoid transposing twice

    Returns:
        Energy map (float64)
    """
    if lanes is None:
        lanes = grid.lanes(axis)
    return lane_energies(grid, lanes)


def energy_to_gray(energy_values: torch.Tensor) -> torch.Tensor:
    """Map energies to 0..255 gray levels for display."""
    gray = torch.floor(energy_values / ENERGY_DISPLAY_SCALE * 255)
    return gray.clamp(0, 255).to(torch.uint8)
