"""Image file helpers for callers of the engine (Pillow + numpy)."""

from pathlib import Path
from typing import Optional, Sequence, Tuple, Union

import numpy as np
from PIL import Image

PathLike = Union[str, Path]


def load_rgba(path: PathLike, max_side: Optional[int] = None) -> Tuple[int, int, bytes]:
    """
    Load an image file as an RGBA buffer.

    Args:
        path: Image file readable by Pillow
        max_side: If given, downscale so the longest side is at most this

    Returns:
        (width, height, row-major RGBA bytes)
    """
    img = Image.open(path).convert('RGBA')
    w, h = img.size
    if max_side is not None and max(w, h) > max_side:
        ratio = min(max_side / w, max_side / h)
        w = max(1, int(w * ratio))
        h = max(1, int(h * ratio))
        img = img.resize((w, h), Image.Resampling.LANCZOS)
    return w, h, np.array(img, dtype=np.uint8).tobytes()


def to_pil(width: int, height: int, data: bytes) -> Image.Image:
    """Wrap an RGBA buffer in a Pillow image."""
    array = np.frombuffer(data, dtype=np.uint8).reshape(height, width, 4)
    return Image.fromarray(array.copy())


def save_rgba(path: PathLike, width: int, height: int, data: bytes) -> None:
    """Save an RGBA buffer. Formats without alpha get an RGB image."""
    img = to_pil(width, height, data)
    if Path(path).suffix.lower() in ('.jpg', '.jpeg', '.bmp'):
        img = img.convert('RGB')
    img.save(path)


def highlight(width: int, height: int, data: bytes, mask: np.ndarray,
              color: Sequence[int] = (255, 0, 0)) -> bytes:
    """Paint the pixels selected by an (H, W) bool mask with `color`."""
    array = np.frombuffer(data, dtype=np.uint8).reshape(height, width, 4).copy()
    array[mask, :3] = np.asarray(color, dtype=np.uint8)
    return array.tobytes()
