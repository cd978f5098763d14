"""Tests for energy functions."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

import math
import torch
import pytest
from seamgraph.energy import (brightness, energy, energy_map, energy_to_gray,
                              horizontal_gradient, vertical_gradient,
                              ENERGY_DISPLAY_SCALE)
from seamgraph.grid import BORDER, Axis, Direction, PixelGrid

from conftest import make_grid, random_rgba, make_gradient_rgba

BLACK, WHITE, GRAY = (0, 0, 0), (255, 255, 255), (51, 102, 153)


class TestBrightness:
    def test_mean_of_channels(self):
        grid = make_grid([[GRAY]])
        assert brightness(grid, 1) == pytest.approx((51 + 102 + 153) / 765)

    def test_border_is_dark(self):
        grid = make_grid([[WHITE]])
        assert brightness(grid, BORDER) == 0.0


class TestEnergy:
    def test_uniform_interior_is_zero(self):
        """A solid-color image should have zero energy in the interior."""
        grid = make_grid([[GRAY] * 5 for _ in range(5)])
        e = energy_map(grid)
        assert e[1:-1, 1:-1].abs().max() < 1e-12

    def test_single_row_concrete_values(self):
        # Black, white, black: the border contributes zero to every term
        grid = make_grid([[BLACK, WHITE, BLACK]])
        assert energy(grid, 1) == pytest.approx(2.0)
        assert energy(grid, 2) == pytest.approx(0.0)
        assert energy(grid, 3) == pytest.approx(2.0)

    def test_gradients_are_signed(self):
        grid = make_grid([[BLACK, WHITE, BLACK]])
        assert horizontal_gradient(grid, 1) == pytest.approx(-2.0)
        assert horizontal_gradient(grid, 3) == pytest.approx(2.0)
        assert vertical_gradient(grid, 2) == pytest.approx(0.0)

    def test_corner_pixel_reads_only_real_neighbors(self):
        grid = make_grid([[BLACK, WHITE],
                          [WHITE, WHITE]])
        # left column is border; right column is (border, white, white)
        gx = 0 - (0 + 2 * 1 + 1)
        # upper row is border; lower row is (border, white, white)
        gy = 0 - (0 + 2 * 1 + 1)
        assert energy(grid, 1) == pytest.approx(math.sqrt(gx * gx + gy * gy))

    def test_vertical_edge_has_energy(self):
        """An image with a single vertical edge should have energy along that edge."""
        rows = [[BLACK] * 5 + [WHITE] * 5 for _ in range(8)]
        e = energy_map(make_grid(rows))
        edge_energy = e[2:-2, 4:6].mean()
        bg_energy = e[2:-2, 1:3].mean()
        assert edge_energy > 10 * bg_energy + 1e-9

    def test_energy_nonnegative(self):
        grid = PixelGrid.from_rgba(*random_rgba(15, 20, seed=3))
        assert (energy_map(grid) >= 0).all()

    def test_energy_bounded_by_display_scale(self):
        grid = PixelGrid.from_rgba(*random_rgba(15, 20, seed=4))
        assert energy_map(grid).max() <= ENERGY_DISPLAY_SCALE + 1e-9

    def test_cached_until_links_change(self):
        grid = make_grid([[BLACK, WHITE, BLACK]])
        assert energy(grid, 1) == pytest.approx(2.0)
        assert grid.cached_energy(1) == pytest.approx(2.0)

        # Drop the white pixel out of the row
        grid.link(1, Direction.RIGHT, 3)
        assert grid.cached_energy(1) is None
        assert energy(grid, 1) == pytest.approx(0.0)


class TestEnergyMap:
    def test_output_shape_matches_grid(self):
        grid = PixelGrid.from_rgba(*random_rgba(6, 9))
        assert energy_map(grid).shape == (6, 9)

    def test_horizontal_map_is_transposed(self):
        grid = PixelGrid.from_rgba(*make_gradient_rgba(6, 9))
        vertical = energy_map(grid, Axis.VERTICAL)
        horizontal = energy_map(grid, Axis.HORIZONTAL)
        assert torch.equal(horizontal, vertical.T)

    def test_empty_grid(self):
        grid = PixelGrid.from_rgba(0, 0, b'')
        assert energy_map(grid).numel() == 0


class TestEnergyToGray:
    def test_scale_and_clamp(self):
        values = torch.tensor([0.0, ENERGY_DISPLAY_SCALE / 2, ENERGY_DISPLAY_SCALE, 100.0],
                              dtype=torch.float64)
        gray = energy_to_gray(values)
        assert gray.dtype == torch.uint8
        assert gray.tolist() == [0, 127, 255, 255]
