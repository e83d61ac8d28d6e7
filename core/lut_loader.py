"""
Welut - LUT Loader

Decodes a LUT PNG into a LutSpec and validates its cube geometry.
"""

import logging
import os

import numpy as np
from PIL import Image

from config import LutConfig
from core.errors import InvalidLut
from core.raster import LutSpec

logger = logging.getLogger(__name__)


def cube_level(pixel_count: int) -> int:
    """Side length N of the cube stored in `pixel_count` pixels (rounded cbrt)."""
    if pixel_count <= 0:
        raise InvalidLut(f"LUT has no pixels ({pixel_count})")
    return int(round(pixel_count ** (1.0 / 3.0)))


def load_lut(lut_path: str) -> LutSpec:
    """
    Load a LUT image.

    Args:
        lut_path: Path to a PNG holding a linearized RGB cube

    Returns:
        LutSpec with RGB or RGBA pixels

    Raises:
        InvalidLut: If the file cannot be decoded, N^3 differs from the
            pixel count by more than LutConfig.CUBE_TOLERANCE, or N < 2
    """
    if not lut_path or not os.path.exists(lut_path):
        raise InvalidLut(f"LUT file not found: {lut_path}")

    try:
        with Image.open(lut_path) as img:
            # Keep alpha only when the file actually carries it
            if img.mode in ('RGBA', 'LA') or (img.mode == 'P' and 'transparency' in img.info):
                img = img.convert('RGBA')
            else:
                img = img.convert('RGB')
            pixels = np.array(img, dtype=np.uint8)
    except (OSError, ValueError) as e:
        raise InvalidLut(f"Failed to load LUT image {lut_path}: {e}") from e

    height, width = pixels.shape[:2]
    pixel_count = width * height
    level = cube_level(pixel_count)

    if abs(level ** 3 - pixel_count) > LutConfig.CUBE_TOLERANCE:
        raise InvalidLut(
            f"Invalid LUT: {width}x{height} = {pixel_count} pixels is not a cube "
            f"(nearest level {level} needs {level ** 3})"
        )
    if level < LutConfig.MIN_LEVEL:
        raise InvalidLut(f"Invalid LUT: {width}x{height} is too small for a color cube (level {level})")

    logger.debug(f"[LUT_LOADER] {lut_path}: {width}x{height}, level {level}, {pixels.shape[2]} channels")
    return LutSpec(pixels=pixels, level=level)
