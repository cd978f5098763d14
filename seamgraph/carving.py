"""
High-level carving: the engine that drives seam search and graph surgery.

`CarvingEngine` owns a pixel grid and a history of removed seams. Each
`step()` either finds the next seam (and marks it), removes a marked
seam, or undoes the most recent removal, so a caller can animate the
process one discrete operation at a time. `resize_to_target` removes
seams in a batch until the grid fits a target size.
"""

import logging
from enum import Enum
from typing import List, Optional, Tuple, Union

import numpy as np
import torch

from .config import AxisMode, CarvingConfig, ColorMode
from .energy import energy_map, energy_to_gray
from .errors import InvalidDimensionsError
from .grid import Axis, PixelData, PixelGrid
from .seam import SeamPath, find_seam
from .surgery import insert_seam, remove_seam

logger = logging.getLogger(__name__)

_MODE_CYCLE = [AxisMode.VERTICAL, AxisMode.HORIZONTAL,
               AxisMode.ALTERNATING, AxisMode.WEIGHTED_RANDOM]


class EngineState(Enum):
    IDLE = 'idle'
    SEAM_PENDING = 'seam_pending'
    REVERSED = 'reversed'


class CarvingEngine:
    """
    Step-wise seam carving with exact undo.

    The engine is not thread-safe. Wrap it in a lock if more than one
    caller can reach it; independent engines share no state.
    """

    def __init__(self, config: Optional[CarvingConfig] = None,
                 generator: Optional[torch.Generator] = None):
        """
        Args:
            config: Engine settings (defaults to CarvingConfig())
            generator: Random source for weighted-random axis selection.
                       If None, one is created from `config.seed`.
        """
        self.config = config if config is not None else CarvingConfig()
        if generator is None:
            generator = torch.Generator()
            if self.config.seed is None:
                generator.seed()
            else:
                generator.manual_seed(self.config.seed)
        self.generator = generator

        self.grid = PixelGrid.from_rgba(0, 0, b'')
        self.history: List[SeamPath] = []
        self.pending: Optional[SeamPath] = None
        self.axis_mode = self.config.axis_mode
        self.reversed = False
        self.playing = self.config.start_playing
        self._vertical = True

    @classmethod
    def from_rgba(cls, width: int, height: int, pixels: PixelData,
                  config: Optional[CarvingConfig] = None,
                  generator: Optional[torch.Generator] = None) -> 'CarvingEngine':
        engine = cls(config, generator)
        engine.initialize(width, height, pixels)
        return engine

    def initialize(self, width: int, height: int, pixels: PixelData) -> PixelGrid:
        """Replace the grid with a new image and forget all history."""
        self.grid = PixelGrid.from_rgba(width, height, pixels)
        self.history = []
        self.pending = None
        self.reversed = False
        logger.debug("Initialized engine with a %dx%d image", width, height)
        return self.grid

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def state(self) -> EngineState:
        if self.pending is not None:
            return EngineState.SEAM_PENDING
        if self.reversed:
            return EngineState.REVERSED
        return EngineState.IDLE

    def dimensions(self) -> Tuple[int, int]:
        return self.grid.dimensions()

    def history_depth(self) -> int:
        return len(self.history)

    def set_axis_mode(self, mode: Union[AxisMode, str]) -> None:
        self.axis_mode = AxisMode(mode)

    def cycle_axis_mode(self) -> AxisMode:
        """Advance vertical -> horizontal -> alternating -> weighted random."""
        index = _MODE_CYCLE.index(self.axis_mode)
        self.axis_mode = _MODE_CYCLE[(index + 1) % len(_MODE_CYCLE)]
        return self.axis_mode

    def set_direction(self, reversed: bool) -> None:
        self.reversed = bool(reversed)

    def set_playing(self, playing: bool) -> None:
        self.playing = bool(playing)

    def toggle_playing(self) -> bool:
        self.playing = not self.playing
        return self.playing

    # ------------------------------------------------------------------
    # Stepping
    # ------------------------------------------------------------------

    def step(self) -> None:
        """
        Advance by one discrete operation.

        Going forward: find and mark a seam, or remove the marked one.
        Going in reverse: re-insert the most recent seam (it stays marked
        for one more step), or release the marked seam.
        When paused only a pending seam is resolved.
        """
        width, height = self.grid.dimensions()
        if width == 0 or height == 0:
            self.reversed = True
        elif not self.history and self.pending is None:
            self.reversed = False

        if self.playing:
            if self.reversed:
                self._insert_step()
            else:
                self._remove_step()
        elif self.pending is not None:
            if self.reversed:
                self._release_pending()
            else:
                self._remove_pending()

    def _choose_axis(self) -> Axis:
        mode = self.axis_mode
        if mode is AxisMode.VERTICAL:
            self._vertical = True
        elif mode is AxisMode.HORIZONTAL:
            self._vertical = False
        elif mode is AxisMode.ALTERNATING:
            self._vertical = not self._vertical
        else:
            # Bias toward shrinking whichever dimension is currently larger
            width, height = self.grid.dimensions()
            total = width + height
            r = torch.rand(1, generator=self.generator).item()
            self._vertical = total == 0 or r >= height / total
        return Axis.VERTICAL if self._vertical else Axis.HORIZONTAL

    def _remove_step(self) -> None:
        if self.pending is None:
            self._find_pending(self._choose_axis())
        else:
            self._remove_pending()

    def _insert_step(self) -> None:
        if self.pending is not None:
            self._release_pending()
        elif self.history:
            seam = self.history.pop()
            insert_seam(self.grid, seam)
            self.pending = seam
            self._check()

    def _find_pending(self, axis: Axis) -> None:
        seam = find_seam(self.grid, axis)
        if seam is not None:
            self.grid.set_marked(seam.pixels, True)
            self.pending = seam

    def _remove_pending(self) -> None:
        seam = self.pending
        remove_seam(self.grid, seam)
        self.history.append(seam)
        self.pending = None
        self._check()

    def _release_pending(self) -> None:
        self.grid.set_marked(self.pending.pixels, False)
        self.pending = None

    def _check(self) -> None:
        if self.config.verify_graph:
            self.grid.verify()

    # ------------------------------------------------------------------
    # Batch resizing
    # ------------------------------------------------------------------

    def resize_to_target(self, target_width: int, target_height: int) -> int:
        """
        Remove seams until the grid is at most target_width x target_height.

        Axes already within target are left alone. When both axes are too
        large, a vertical seam is chosen with probability
        diff_w / (diff_w + diff_h). Removed seams go onto the history.

        Args:
            target_width: Desired width, >= 1
            target_height: Desired height, >= 1

        Returns:
            Number of seams removed
        """
        for name, value in (('width', target_width), ('height', target_height)):
            if isinstance(value, bool) or not isinstance(value, (int, np.integer)):
                raise InvalidDimensionsError(f"Target {name} must be an integer, got {value!r}")
            if value < 1:
                raise InvalidDimensionsError(f"Target {name} must be at least 1, got {value}")

        if self.pending is not None:
            self._release_pending()

        removed = 0
        while True:
            width, height = self.grid.dimensions()
            diff_w = max(0, width - target_width)
            diff_h = max(0, height - target_height)
            if diff_w == 0 and diff_h == 0:
                break

            if diff_w == 0:
                axis = Axis.HORIZONTAL
            elif diff_h == 0:
                axis = Axis.VERTICAL
            else:
                r = torch.rand(1, generator=self.generator).item()
                axis = Axis.VERTICAL if r < diff_w / (diff_w + diff_h) else Axis.HORIZONTAL

            seam = find_seam(self.grid, axis)
            if seam is None:
                break
            self.grid.set_marked(seam.pixels, True)
            remove_seam(self.grid, seam)
            self.history.append(seam)
            self._check()
            removed += 1

        logger.info("Resized to %dx%d by removing %d seams",
                    self.grid.width, self.grid.height, removed)
        return removed

    # ------------------------------------------------------------------
    # Output
    # ------------------------------------------------------------------

    def to_array(self, color_mode: Optional[ColorMode] = None) -> np.ndarray:
        """Current grid as an (H, W, 4) uint8 RGBA array, alpha fully opaque."""
        mode = ColorMode(color_mode) if color_mode is not None else self.config.color_mode
        width, height = self.grid.dimensions()
        rgba = np.empty((height, width, 4), dtype=np.uint8)
        if mode is ColorMode.COLOR:
            rgba[..., :3] = self.grid.colors[self.grid.node_array()]
        else:
            gray = energy_to_gray(energy_map(self.grid)).numpy().reshape(height, width)
            rgba[..., :3] = gray[..., None]
        rgba[..., 3] = 255
        return rgba

    def current_buffer(self, color_mode: Optional[ColorMode] = None) -> Tuple[int, int, bytes]:
        """
        Current grid as (width, height, row-major RGBA bytes).

        Marked pixels keep their own color; use `marked_mask` to highlight
        them when rendering.
        """
        width, height = self.grid.dimensions()
        return width, height, self.to_array(color_mode).tobytes()

    def marked_mask(self) -> np.ndarray:
        """(H, W) bool array of pixels belonging to the pending seam."""
        return self.grid.marked_array()


# ----------------------------------------------------------------------
# Tensor convenience
# ----------------------------------------------------------------------

def image_to_rgba(image: torch.Tensor) -> Tuple[int, int, bytes]:
    """
    Convert an image tensor to an RGBA buffer.

    Args:
        image: RGB image tensor (C, H, W) or grayscale (H, W) in [0, 1]

    Returns:
        (width, height, row-major RGBA bytes)
    """
    if image.dim() == 2:
        image = image.unsqueeze(0)
    C, H, W = image.shape
    if C == 1:
        image = image.expand(3, H, W)

    rgb = (image[:3].detach().cpu().clamp(0, 1) * 255).round().to(torch.uint8)
    rgba = torch.full((H, W, 4), 255, dtype=torch.uint8)
    rgba[..., :3] = rgb.permute(1, 2, 0)
    return W, H, rgba.numpy().tobytes()


def rgba_to_image(width: int, height: int, data: bytes) -> torch.Tensor:
    """Convert an RGBA buffer to an RGB tensor (3, H, W) in [0, 1]."""
    array = np.frombuffer(data, dtype=np.uint8).reshape(height, width, 4)
    rgb = array[..., :3].astype(np.float32) / 255.0
    return torch.from_numpy(rgb).permute(2, 0, 1).contiguous()


def carve_image(image: torch.Tensor, target_width: int, target_height: int,
                seed: Optional[int] = None) -> torch.Tensor:
    """
    Content-aware resize of an image tensor.

    Args:
        image: Image tensor (C, H, W) or (H, W) in [0, 1]
        target_width: Largest width of the result
        target_height: Largest height of the result
        seed: Seed for the axis choice when both axes shrink

    Returns:
        Carved RGB image (3, min(H, target_height), min(W, target_width))
    """
    engine = CarvingEngine(CarvingConfig(seed=seed, start_playing=False))
    engine.initialize(*image_to_rgba(image))
    engine.resize_to_target(target_width, target_height)
    return rgba_to_image(*engine.current_buffer(ColorMode.COLOR))
