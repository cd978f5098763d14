"""Centralised configuration via a frozen dataclass."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple


class AxisMode(Enum):
    """How the engine picks the axis of the next seam to remove."""
    VERTICAL = 'vertical'
    HORIZONTAL = 'horizontal'
    ALTERNATING = 'alternating'
    WEIGHTED_RANDOM = 'weighted_random'


class ColorMode(Enum):
    """What `current_buffer` paints for each pixel."""
    COLOR = 'color'
    ENERGY = 'energy'


@dataclass(frozen=True)
class CarvingConfig:
    """Tuneable parameters for a carving engine.

    Attributes:
        axis_mode:       Initial axis selection policy.
        seed:            Seed for weighted-random axis selection (None = random).
        start_playing:   Whether `step()` advances on its own or only resolves
                         a pending seam.
        color_mode:      Default rendering for `current_buffer`.
        verify_graph:    Run a full graph consistency check after every surgery.
        highlight_color: RGB used by renderers for pixels marked for removal.
        max_side:        Longest side images are downscaled to on load.
    """

    axis_mode: AxisMode = AxisMode.WEIGHTED_RANDOM
    seed: Optional[int] = None
    start_playing: bool = True
    color_mode: ColorMode = ColorMode.COLOR
    verify_graph: bool = False
    highlight_color: Tuple[int, int, int] = (255, 0, 0)
    max_side: Optional[int] = 800
