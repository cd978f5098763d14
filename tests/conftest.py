"""Shared test fixtures for the seam carving test suite."""

import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

import numpy as np
import torch
import pytest
from seamgraph.grid import Direction, PixelGrid


def make_rgba(colors):
    """RGBA bytes from a nested list of (r, g, b) rows."""
    height = len(colors)
    width = len(colors[0]) if height else 0
    array = np.zeros((height, width, 4), dtype=np.uint8)
    for y, row in enumerate(colors):
        for x, rgb in enumerate(row):
            array[y, x, :3] = rgb
            array[y, x, 3] = 255
    return width, height, array.tobytes()


def make_grid(colors):
    return PixelGrid.from_rgba(*make_rgba(colors))


def random_rgba(H, W, seed=0):
    """Seeded random RGBA image (width, height, bytes)."""
    gen = torch.Generator().manual_seed(seed)
    data = torch.randint(0, 256, (H, W, 4), dtype=torch.uint8, generator=gen)
    return W, H, data.numpy().tobytes()


def make_gradient_rgba(H, W):
    """Horizontal gradient: dark left, bright right."""
    levels = torch.linspace(0, 255, W).round().to(torch.uint8)
    data = torch.full((H, W, 4), 255, dtype=torch.uint8)
    data[..., :3] = levels.view(1, W, 1)
    return W, H, data.numpy().tobytes()


def grid_colors(grid):
    """Row-major nested list of (r, g, b) tuples currently in the grid."""
    return [[grid.color(node) for node in row] for row in grid.rows]


def snapshot(grid):
    """Rows plus every node's links, for exact before/after comparisons."""
    links = {node: grid.neighbors(node) for node in range(1, grid.node_count + 1)}
    return [list(row) for row in grid.rows], links


def assert_reciprocal(grid):
    for row in grid.rows:
        for node in row:
            for direction in Direction:
                other = grid.neighbor(node, direction)
                if other != 0:
                    assert grid.neighbor(other, direction.opposite) == node


def assert_rectangular(grid):
    assert len({len(row) for row in grid.rows}) <= 1


@pytest.fixture
def random_grid():
    """Seeded random 12x9 grid."""
    return PixelGrid.from_rgba(*random_rgba(9, 12, seed=42))
