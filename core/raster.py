"""
Welut - Raster Data Models

In-memory image buffers shared by the loader, the transform engine and the
preview codec.
"""

from dataclasses import dataclass

import numpy as np

from config import ChannelLayout


@dataclass(frozen=True)
class RasterBuffer:
    """
    Decoded 8-bit image.

    Attributes:
        pixels: (H, W, C) uint8 array, C is 3 or 4 (alpha last)
        layout: Order of the three color channels
    """
    pixels: np.ndarray
    layout: ChannelLayout = ChannelLayout.RGB

    def __post_init__(self):
        if self.pixels.ndim != 3 or self.pixels.shape[2] not in (3, 4):
            raise ValueError(f"Raster must be (H, W, 3|4), got {self.pixels.shape}")
        if self.pixels.dtype != np.uint8:
            raise ValueError(f"Raster must be uint8, got {self.pixels.dtype}")

    @property
    def width(self) -> int:
        return int(self.pixels.shape[1])

    @property
    def height(self) -> int:
        return int(self.pixels.shape[0])

    @property
    def channels(self) -> int:
        return int(self.pixels.shape[2])

    @property
    def has_alpha(self) -> bool:
        return self.channels == 4

    def to_layout(self, layout: ChannelLayout) -> "RasterBuffer":
        """Return a copy with the color channels in the requested order."""
        if layout == self.layout:
            return self
        swapped = self.pixels.copy()
        swapped[..., :3] = self.pixels[..., 2::-1]
        return RasterBuffer(swapped, layout)


@dataclass(frozen=True)
class LutSpec:
    """
    3D LUT stored as a linearized cube inside a 2D image.

    Entry idx = r + g*N + b*N^2 lives at pixel (idx % width, idx // width).

    Attributes:
        pixels: (height, width, channels) uint8 array, RGB(A) order
        level: Cube side length N
    """
    pixels: np.ndarray
    level: int

    def __post_init__(self):
        if self.pixels.ndim != 3 or self.pixels.shape[2] not in (3, 4):
            raise ValueError(f"LUT must be (H, W, 3|4), got {self.pixels.shape}")
        if self.level < 1:
            raise ValueError(f"LUT level must be positive, got {self.level}")

    @property
    def width(self) -> int:
        return int(self.pixels.shape[1])

    @property
    def height(self) -> int:
        return int(self.pixels.shape[0])

    @property
    def channels(self) -> int:
        return int(self.pixels.shape[2])

    @property
    def pixel_count(self) -> int:
        return self.width * self.height
