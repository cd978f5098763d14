"""
Content-aware image resizing on a linked pixel graph.

Seams are removed by relinking neighbors around them, so every removal
can be undone exactly by re-inserting the seam.
"""

__version__ = "0.1.0"

from .config import AxisMode, CarvingConfig, ColorMode
from .errors import (SeamCarvingError, MalformedSeamError, MalformedGridError,
                     InvalidDimensionsError)
from .grid import BORDER, Axis, Direction, NodeKind, PixelGrid
from .energy import energy_map, energy_to_gray
from .seam import SeamEntry, SeamPath, cumulative_cost, dp_seam, find_seam
from .surgery import insert_seam, remove_seam
from .carving import (
    CarvingEngine,
    EngineState,
    carve_image,
    image_to_rgba,
    rgba_to_image,
)

__all__ = [
    'AxisMode',
    'CarvingConfig',
    'ColorMode',
    'SeamCarvingError',
    'MalformedSeamError',
    'MalformedGridError',
    'InvalidDimensionsError',
    'BORDER',
    'Axis',
    'Direction',
    'NodeKind',
    'PixelGrid',
    'energy_map',
    'energy_to_gray',
    'SeamEntry',
    'SeamPath',
    'cumulative_cost',
    'dp_seam',
    'find_seam',
    'insert_seam',
    'remove_seam',
    'CarvingEngine',
    'EngineState',
    'carve_image',
    'image_to_rgba',
    'rgba_to_image',
]
