"""
Seam computation.

A seam is found with the classic dynamic program of Avidan & Shamir
2007: every cell accumulates its own energy plus the cheapest of the
three cells above it, and the cheapest cell of the last row is traced
back to the first.

Only vertical seams are searched directly. Horizontal seams run the same
program over the transposed lanes of the grid.
"""

import logging
from dataclasses import dataclass
from typing import Iterator, Optional, Tuple

import torch

from .energy import energy_map
from .grid import Axis, PixelGrid

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SeamEntry:
    """One pixel of a seam.

    Attributes:
        pixel: Node index in the grid
        weight: Cumulative cost of the seam up to and including this pixel
        index: Position of the pixel within its lane when the seam was found
    """
    pixel: int
    weight: float
    index: int


@dataclass(frozen=True)
class SeamPath:
    """
    A connected path of pixels, one per lane.

    Entries run from the head (first lane, no predecessor) to the tail
    (last lane, where the search ended). Each entry's predecessor is the
    one before it.
    """
    axis: Axis
    entries: Tuple[SeamEntry, ...]

    def __len__(self) -> int:
        return len(self.entries)

    @property
    def head(self) -> SeamEntry:
        return self.entries[0]

    @property
    def tail(self) -> SeamEntry:
        return self.entries[-1]

    @property
    def total_weight(self) -> float:
        return self.tail.weight

    @property
    def pixels(self) -> Tuple[int, ...]:
        return tuple(entry.pixel for entry in self.entries)

    @property
    def indices(self) -> Tuple[int, ...]:
        return tuple(entry.index for entry in self.entries)

    def predecessor(self, position: int) -> Optional[SeamEntry]:
        return self.entries[position - 1] if position > 0 else None

    def from_tail(self) -> Iterator[Tuple[SeamEntry, Optional[SeamEntry]]]:
        """Yield (entry, predecessor) pairs from the tail toward the head."""
        for position in range(len(self.entries) - 1, -1, -1):
            yield self.entries[position], self.predecessor(position)


def cumulative_cost(energy: torch.Tensor) -> Tuple[torch.Tensor, torch.Tensor]:
    """
    Minimum cumulative cost of reaching every cell from the first row.

    For row i > 0 and column j the candidates are (i-1, j), (i-1, j-1) and
    (i-1, j+1), compared in that order. A later candidate replaces the
    current best only when strictly cheaper, so exact ties prefer the
    cell directly above, then the one to the left.

    Each row depends only on the previous one, so a row is computed in a
    single vectorized step.

    Args:
        energy: Energy map (H, W)

    Returns:
        cost: Cumulative cost (H, W)
        parents: Column of the chosen predecessor (H, W), -1 in row 0
    """
    H, W = energy.shape
    cost = torch.empty_like(energy)
    parents = torch.full((H, W), -1, dtype=torch.long, device=energy.device)
    if H == 0 or W == 0:
        return cost, parents

    cost[0] = energy[0]
    cols = torch.arange(W, device=energy.device)
    inf = float('inf')

    for i in range(1, H):
        prev = cost[i - 1]
        best = prev.clone()
        choice = cols.clone()

        top_left = torch.full_like(prev, inf)
        top_left[1:] = prev[:-1]
        take = top_left < best
        best = torch.where(take, top_left, best)
        choice = torch.where(take, cols - 1, choice)

        top_right = torch.full_like(prev, inf)
        top_right[:-1] = prev[1:]
        take = top_right < best
        best = torch.where(take, top_right, best)
        choice = torch.where(take, cols + 1, choice)

        cost[i] = energy[i] + best
        parents[i] = choice

    return cost, parents


def _trace(cost: torch.Tensor, parents: torch.Tensor) -> torch.Tensor:
    H = cost.shape[0]
    seam = torch.zeros(H, dtype=torch.long, device=cost.device)
    # argmin returns the first minimum, i.e. the leftmost on ties
    seam[-1] = torch.argmin(cost[-1])
    for i in range(H - 1, 0, -1):
        seam[i - 1] = parents[i, seam[i]]
    return seam


def dp_seam(energy: torch.Tensor) -> torch.Tensor:
    """
    Compute the optimal vertical seam of an energy map.

    Args:
        energy: Energy map (H, W) with H, W > 0

    Returns:
        Seam indices (H,) with the column index per row
    """
    H, W = energy.shape
    if H == 0 or W == 0:
        raise ValueError(f"Cannot find a seam in an empty energy map of shape {(H, W)}")
    cost, parents = cumulative_cost(energy)
    return _trace(cost, parents)


def find_seam(grid: PixelGrid, axis: Axis = Axis.VERTICAL) -> Optional[SeamPath]:
    """
    Find the single cheapest seam of the grid along `axis`.

    Args:
        grid: Pixel graph
        axis: VERTICAL (one pixel per row) or HORIZONTAL (one per column)

    Returns:
        The seam, or None if the grid has no lanes or the lanes are empty
    """
    lanes = grid.lanes(axis)
    energy = energy_map(grid, axis, lanes=lanes)
    if energy.numel() == 0:
        return None

    cost, parents = cumulative_cost(energy)
    columns = _trace(cost, parents).tolist()
    weights = cost[torch.arange(len(columns)), torch.tensor(columns)].tolist()

    entries = tuple(
        SeamEntry(pixel=lanes[i][col], weight=weight, index=col)
        for i, (col, weight) in enumerate(zip(columns, weights))
    )
    seam = SeamPath(axis=axis, entries=entries)
    logger.debug("Found %s seam ending at %d with cost %.4f",
                 axis.value, columns[-1], seam.total_weight)
    return seam
