"""
Welut - Preview Codec

Resizing and JPEG encoding for previews and final output.
"""

import base64
import os
from typing import Tuple

import cv2

from config import ChannelLayout, OutputConfig, PreviewConfig
from core.errors import InvalidPreviewSize, WelutError
from core.raster import RasterBuffer


def fit_inside_size(width: int, height: int, max_size: int) -> Tuple[int, int]:
    """
    Size that caps the larger dimension at `max_size`, keeping aspect ratio.

    Images already within the bound keep their size (never upscaled).
    """
    if max_size <= 0:
        raise InvalidPreviewSize(max_size)
    long_side = max(width, height)
    if long_side <= max_size:
        return width, height
    scale = max_size / long_side
    # Keep at least one pixel after rounding
    return max(1, int(round(width * scale))), max(1, int(round(height * scale)))


def fit_inside(raster: RasterBuffer, max_size: int) -> RasterBuffer:
    new_w, new_h = fit_inside_size(raster.width, raster.height, max_size)
    if (new_w, new_h) == (raster.width, raster.height):
        return raster
    resized = cv2.resize(raster.pixels, (new_w, new_h), interpolation=cv2.INTER_AREA)
    return RasterBuffer(resized, raster.layout)


def encode_jpeg(raster: RasterBuffer, quality: int) -> bytes:
    """Encode as JPEG; alpha is dropped."""
    bgr = raster.to_layout(ChannelLayout.BGR).pixels[..., :3]
    ok, buf = cv2.imencode(".jpg", bgr, [int(cv2.IMWRITE_JPEG_QUALITY), int(quality)])
    if not ok:
        raise WelutError("JPEG encoding failed")
    return buf.tobytes()


def to_data_uri(jpeg_bytes: bytes) -> str:
    return PreviewConfig.DATA_URI_PREFIX + base64.b64encode(jpeg_bytes).decode("ascii")


def encode_preview(raster: RasterBuffer) -> str:
    """JPEG (preview quality) data URI for direct display."""
    return to_data_uri(encode_jpeg(raster, PreviewConfig.JPEG_QUALITY))


def write_jpeg(raster: RasterBuffer, output_path: str, quality: int = OutputConfig.JPEG_QUALITY) -> str:
    """Write a JPEG file and return its path."""
    # open() instead of cv2.imwrite, which fails on non-ASCII paths on Windows
    data = encode_jpeg(raster, quality)
    with open(output_path, "wb") as f:
        f.write(data)
    return output_path


def output_path_for(input_path: str) -> str:
    """<dir>/<stem>_lut.jpg next to the source image."""
    folder, name = os.path.split(input_path)
    stem = os.path.splitext(name)[0]
    return os.path.join(folder, f"{stem}{OutputConfig.SUFFIX}{OutputConfig.EXTENSION}")
