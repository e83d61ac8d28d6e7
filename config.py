"""Welut configuration: paths, codec settings and external RAW tools."""

import os
from enum import Enum

BASE_DIR = os.path.dirname(os.path.abspath(__file__))
LUT_LIBRARY_DIR = os.path.join(os.path.expanduser("~"), ".welut")
BUNDLED_LUT_DIR = os.path.join(BASE_DIR, "resources", "luts")


class ChannelLayout(str, Enum):
    """Byte order of the color channels in a raster (alpha, if any, is last)."""
    RGB = "rgb"
    BGR = "bgr"

    def get_display_name(self) -> str:
        display_names = {
            ChannelLayout.RGB: "RGB(A)",
            ChannelLayout.BGR: "BGR(A)",
        }
        return display_names.get(self, self.value)


class LutConfig:
    """LUT image validation."""
    EXTENSIONS = (".png",)
    CUBE_TOLERANCE: int = 10  # max |N^3 - width*height| in pixels
    MIN_LEVEL: int = 2


class RawConfig:
    """External RAW converters and their temp files."""
    EXTENSIONS = (".orf", ".cr2", ".nef", ".arw", ".dng")

    SIPS_BINARY: str = os.environ.get("WELUT_SIPS", "sips")
    DCRAW_BINARY: str = os.environ.get("WELUT_DCRAW", "dcraw")
    TOOL_TIMEOUT_S: float = 120.0

    TEMP_PREFIX: str = "welut"

    # sys.platform -> converter name
    PLATFORM_CONVERTERS = {
        "darwin": "sips",
        "win32": "dcraw",
        "linux": "dcraw",
    }


class PreviewConfig:
    """Inline previews for the UI."""
    DEFAULT_WIDTH: int = 800
    THUMBNAIL_SIZE: int = 150
    JPEG_QUALITY: int = 80
    DATA_URI_PREFIX: str = "data:image/jpeg;base64,"


class OutputConfig:
    """Full-resolution output written next to the source image."""
    JPEG_QUALITY: int = 90
    SUFFIX: str = "_lut"
    EXTENSION: str = ".jpg"


class ProcessingConfig:
    # LUT decode runs beside image ingestion
    MAX_WORKERS: int = 2
