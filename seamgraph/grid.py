"""
Pixel adjacency graph.

Every pixel of the image is a node in a four-way linked grid. Nodes live
in an arena and refer to each other by index:

- index 0 is the border sentinel. It has zero brightness and zero energy
  and answers every neighbor query with itself, so gradient formulas can
  run off the edge of the image without bounds checks.
- indices 1..N are color pixels, each with an RGB value and four
  neighbor slots (up, down, left, right).

Alongside the links the grid keeps the pixels in row order. Between
completed operations the rows are rectangular and agree with the links.
"""

import logging
from enum import Enum, IntEnum
from typing import List, Optional, Sequence, Tuple, Union

import numpy as np

from .errors import InvalidDimensionsError, MalformedGridError

logger = logging.getLogger(__name__)

BORDER = 0

PixelData = Union[bytes, bytearray, memoryview, np.ndarray, Sequence[int]]


class Direction(IntEnum):
    """Neighbor slot of a node. Values double as indices into the link table."""
    UP = 0
    DOWN = 1
    LEFT = 2
    RIGHT = 3

    @property
    def opposite(self) -> 'Direction':
        return _OPPOSITE[self]

    @property
    def is_horizontal(self) -> bool:
        return self is Direction.LEFT or self is Direction.RIGHT


_OPPOSITE = {
    Direction.UP: Direction.DOWN,
    Direction.DOWN: Direction.UP,
    Direction.LEFT: Direction.RIGHT,
    Direction.RIGHT: Direction.LEFT,
}


class NodeKind(Enum):
    BORDER = 'border'
    COLOR = 'color'


class Axis(Enum):
    """
    Orientation of a seam.

    A vertical seam takes one pixel from every row, a horizontal seam one
    pixel from every column. Seam algorithms are written once in terms of
    "lanes" (rows for vertical, columns for horizontal) and the three
    directions below:

    - back:   toward the previous lane (where a seam entry came from)
    - before: toward the start of the current lane
    - after:  toward the end of the current lane
    """
    VERTICAL = 'vertical'
    HORIZONTAL = 'horizontal'

    @property
    def back(self) -> Direction:
        return Direction.UP if self is Axis.VERTICAL else Direction.LEFT

    @property
    def before(self) -> Direction:
        return Direction.LEFT if self is Axis.VERTICAL else Direction.UP

    @property
    def after(self) -> Direction:
        return Direction.RIGHT if self is Axis.VERTICAL else Direction.DOWN


def transpose(lanes: List[List[int]]) -> List[List[int]]:
    """Swap rows and columns of a rectangular list of lists."""
    return [list(lane) for lane in zip(*lanes)]


class PixelGrid:
    """
    Rectangular pixel graph with reciprocal neighbor links.

    Use `PixelGrid.from_rgba` to build one from an RGBA buffer. All link
    changes go through `link`, which keeps both ends of a relation in sync
    and invalidates the cached energies that read the changed slot.
    """

    def __init__(self, colors: np.ndarray, links: List[List[int]],
                 rows: List[List[int]]):
        """
        Args:
            colors: RGB values (N + 1, 3) uint8, row 0 belongs to the border
            links: Neighbor table, one [up, down, left, right] list per node
            rows: Node indices in row-major order
        """
        self.colors = colors
        self._links = links
        self._rows = rows

        brightness = colors.astype(np.float64).sum(axis=1) / 765.0
        brightness[BORDER] = 0.0
        self._brightness: List[float] = brightness.tolist()

        self._energy: List[Optional[float]] = [None] * len(links)
        self._energy[BORDER] = 0.0
        self._marked: List[bool] = [False] * len(links)

    @classmethod
    def from_rgba(cls, width: int, height: int, pixels: PixelData) -> 'PixelGrid':
        """
        Build the graph from a row-major RGBA buffer (4 bytes per pixel).

        The alpha channel is accepted but ignored.

        Args:
            width: Image width in pixels
            height: Image height in pixels
            pixels: width * height * 4 bytes

        Returns:
            A grid whose rows hold nodes 1..width*height in reading order
        """
        if width < 0 or height < 0:
            raise InvalidDimensionsError(
                f"Image size must be non-negative, got {width}x{height}")

        if isinstance(pixels, (bytes, bytearray, memoryview)):
            data = np.frombuffer(pixels, dtype=np.uint8)
        else:
            data = np.asarray(pixels, dtype=np.uint8).reshape(-1)

        expected = width * height * 4
        if data.size != expected:
            raise InvalidDimensionsError(
                f"Expected {expected} bytes for a {width}x{height} RGBA image, "
                f"got {data.size}")

        n_pixels = width * height
        colors = np.zeros((n_pixels + 1, 3), dtype=np.uint8)
        colors[1:] = data.reshape(n_pixels, 4)[:, :3]

        ids = np.arange(1, n_pixels + 1, dtype=np.int64).reshape(height, width)

        # Pad with the border index so edge pixels link to the sentinel
        padded = np.full((height + 2, width + 2), BORDER, dtype=np.int64)
        padded[1:-1, 1:-1] = ids
        table = np.stack([
            padded[:-2, 1:-1],   # up
            padded[2:, 1:-1],    # down
            padded[1:-1, :-2],   # left
            padded[1:-1, 2:],    # right
        ], axis=-1).reshape(-1, 4)

        links = [[BORDER] * 4] + table.tolist()
        rows = ids.tolist()

        logger.debug("Built %dx%d pixel graph", width, height)
        return cls(colors, links, rows)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @staticmethod
    def kind(node: int) -> NodeKind:
        return NodeKind.BORDER if node == BORDER else NodeKind.COLOR

    def neighbor(self, node: int, direction: Direction) -> int:
        """Neighbor of `node` in `direction`. The border is its own neighbor."""
        return self._links[node][direction]

    def neighbors(self, node: int) -> Tuple[int, int, int, int]:
        """All four links of a node as (up, down, left, right)."""
        up, down, left, right = self._links[node]
        return up, down, left, right

    def color(self, node: int) -> Tuple[int, int, int]:
        r, g, b = self.colors[node]
        return int(r), int(g), int(b)

    def brightness(self, node: int) -> float:
        return self._brightness[node]

    @property
    def rows(self) -> List[List[int]]:
        """The live row lists. Treat as read-only."""
        return self._rows

    @property
    def width(self) -> int:
        return len(self._rows[0]) if self._rows else 0

    @property
    def height(self) -> int:
        return len(self._rows)

    def dimensions(self) -> Tuple[int, int]:
        return self.width, self.height

    @property
    def node_count(self) -> int:
        """Number of color pixels ever created, attached or not."""
        return len(self._links) - 1

    def lanes(self, axis: Axis) -> List[List[int]]:
        """
        Pixels grouped the way a seam of `axis` crosses them.

        Vertical lanes are the live rows. Horizontal lanes are a freshly
        transposed copy; hand them back with `set_lanes` after editing.
        """
        if axis is Axis.VERTICAL:
            return self._rows
        return transpose(self._rows)

    def set_lanes(self, axis: Axis, lanes: List[List[int]]) -> None:
        if axis is Axis.VERTICAL:
            self._rows = lanes
        else:
            self._rows = transpose(lanes)

    def node_array(self) -> np.ndarray:
        """Node indices as an (height, width) integer array."""
        return np.array(self._rows, dtype=np.int64).reshape(self.height, self.width)

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def link(self, a: int, direction: Direction, b: int) -> None:
        """
        Make `b` the neighbor of `a` in `direction` and `a` the neighbor of
        `b` in the opposite direction.

        Either end may be the border, in which case only the other end
        changes.
        """
        if a != BORDER:
            self._links[a][direction] = b
            self._invalidate_around(a, direction)
        if b != BORDER:
            back = direction.opposite
            self._links[b][back] = a
            self._invalidate_around(b, back)

    def reattach(self, node: int) -> None:
        """Point the four recorded neighbors of a detached node back at it."""
        up, down, left, right = self._links[node]
        self.link(node, Direction.UP, up)
        self.link(down, Direction.UP, node)
        self.link(node, Direction.RIGHT, right)
        self.link(left, Direction.RIGHT, node)

    def _invalidate_around(self, node: int, direction: Direction) -> None:
        # A horizontal link is read by the gradients of the pixels above and
        # below, a vertical one by the pixels to the left and right.
        self._energy[node] = None
        links = self._links[node]
        if direction.is_horizontal:
            others = (links[Direction.UP], links[Direction.DOWN])
        else:
            others = (links[Direction.LEFT], links[Direction.RIGHT])
        for other in others:
            if other != BORDER:
                self._energy[other] = None

    # ------------------------------------------------------------------
    # Caches and flags
    # ------------------------------------------------------------------

    def cached_energy(self, node: int) -> Optional[float]:
        return self._energy[node]

    def store_energy(self, node: int, value: float) -> None:
        if node != BORDER:
            self._energy[node] = value

    def is_marked(self, node: int) -> bool:
        return self._marked[node]

    def set_marked(self, nodes: Sequence[int], marked: bool = True) -> None:
        for node in nodes:
            if node != BORDER:
                self._marked[node] = marked

    def marked_array(self) -> np.ndarray:
        """Marked-for-removal flags as an (height, width) bool array."""
        return np.asarray(self._marked, dtype=bool)[self.node_array()]

    # ------------------------------------------------------------------
    # Consistency
    # ------------------------------------------------------------------

    def verify(self) -> None:
        """
        Check that the graph is rectangular, reciprocal and agrees with the
        row order.

        Raises:
            MalformedGridError: describing the first inconsistency found
        """
        lengths = {len(row) for row in self._rows}
        if len(lengths) > 1:
            raise MalformedGridError(f"Rows have unequal lengths: {sorted(lengths)}")

        height = len(self._rows)
        for y, row in enumerate(self._rows):
            width = len(row)
            for x, node in enumerate(row):
                links = self._links[node]
                for direction in Direction:
                    other = links[direction]
                    if other != BORDER and self._links[other][direction.opposite] != node:
                        raise MalformedGridError(
                            f"Pixel {node} at ({x}, {y}) links {direction.name} to "
                            f"{other}, which does not link back")

                expected = (
                    self._rows[y - 1][x] if y > 0 else BORDER,
                    self._rows[y + 1][x] if y + 1 < height else BORDER,
                    row[x - 1] if x > 0 else BORDER,
                    row[x + 1] if x + 1 < width else BORDER,
                )
                for direction, want in zip(Direction, expected):
                    if links[direction] != want:
                        raise MalformedGridError(
                            f"Pixel {node} at ({x}, {y}) has {direction.name} "
                            f"neighbor {links[direction]}, expected {want}")

    def __repr__(self) -> str:
        return f"PixelGrid(width={self.width}, height={self.height})"
