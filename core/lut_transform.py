"""
Welut - LUT Transform Engine

Nearest-neighbor application of a linearized 3D LUT to a raster.
"""

from typing import Optional

import numpy as np

from config import ChannelLayout
from core.raster import LutSpec, RasterBuffer


def grid_index(values: np.ndarray, level: int) -> np.ndarray:
    """
    Map 8-bit channel values to the lower cube grid index.

    Args:
        values: uint8 array of one channel
        level: Cube side length N

    Returns:
        intp array in [0, N-1]
    """
    if level <= 1:
        return np.zeros(values.shape, dtype=np.intp)
    scaled = (values.astype(np.float64) / 255.0) * (level - 1)
    # floor can land on N at 255 through rounding error
    return np.clip(np.floor(scaled).astype(np.intp), 0, level - 1)


def apply_lut(
    source: RasterBuffer,
    lut: LutSpec,
    output_layout: Optional[ChannelLayout] = None,
) -> RasterBuffer:
    """
    Apply a LUT to every pixel of a raster.

    The input is never modified. Alpha is copied through untouched and the
    LUT's own alpha channel is ignored.

    Args:
        source: Raster to transform
        lut: Loaded LUT
        output_layout: Channel order of the result, defaults to source.layout

    Returns:
        New RasterBuffer with the same width, height and channel count
    """
    if output_layout is None:
        output_layout = source.layout

    src = source.pixels
    if source.layout == ChannelLayout.BGR:
        r, g, b = src[..., 2], src[..., 1], src[..., 0]
    else:
        r, g, b = src[..., 0], src[..., 1], src[..., 2]

    n = lut.level
    flat_index = grid_index(r, n) + grid_index(g, n) * n + grid_index(b, n) * (n * n)
    # Cube geometry is validated with a tolerance, so the LUT may be a few pixels short
    flat_index = np.minimum(flat_index, lut.pixel_count - 1)

    lut_y, lut_x = np.divmod(flat_index, lut.width)
    mapped = lut.pixels[lut_y, lut_x, :3]
    if output_layout == ChannelLayout.BGR:
        mapped = mapped[..., ::-1]

    out = np.empty_like(src)
    out[..., :3] = mapped
    if source.has_alpha:
        out[..., 3] = src[..., 3]

    return RasterBuffer(out, output_layout)
