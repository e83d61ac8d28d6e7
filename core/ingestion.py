"""
Welut - Image Ingestion

Turns an arbitrary image path into a RasterBuffer:

1. decode_image() tries the codec directly and reports either a raster or an
   explicit "unsupported format" outcome.
2. Only that outcome sends the file through the RAW converter strategy, and
   the converted file is decoded again.

Temp files made by the converter belong to the caller's TempArtifacts guard.
"""

import logging
import os
from dataclasses import dataclass
from typing import Optional

import cv2
import numpy as np

from config import ChannelLayout, RawConfig
from core.artifacts import TempArtifacts
from core.errors import DecodeFailed
from core.raster import RasterBuffer
from core.raw_converters import RawConverter

logger = logging.getLogger(__name__)


@dataclass
class DecodeOutcome:
    """Result of a direct decode attempt."""
    raster: Optional[RasterBuffer] = None
    unsupported_reason: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.raster is not None


def is_raw_file(path: str) -> bool:
    return os.path.splitext(path)[1].lower() in RawConfig.EXTENSIONS


def _to_uint8_bgr(img: np.ndarray) -> np.ndarray:
    """Normalize whatever OpenCV decoded to uint8 BGR or BGRA."""
    if img.dtype == np.uint16:
        img = (img >> 8).astype(np.uint8)
    elif img.dtype != np.uint8:
        img = (np.clip(img.astype(np.float32), 0.0, 1.0) * 255.0 + 0.5).astype(np.uint8)

    if img.ndim == 2 or img.shape[2] == 1:
        return cv2.cvtColor(img, cv2.COLOR_GRAY2BGR)
    if img.shape[2] == 2:
        # gray + alpha
        gray, alpha = img[..., 0], img[..., 1]
        return np.dstack([gray, gray, gray, alpha])
    if img.shape[2] > 4:
        return img[..., :4].copy()
    return img


def decode_image(path: str) -> DecodeOutcome:
    """
    Decode an image file with OpenCV.

    Args:
        path: Image file path (non-ASCII paths are fine)

    Returns:
        DecodeOutcome holding a BGR(A) raster, or the reason the codec
        does not support the file

    Raises:
        DecodeFailed: If the file does not exist or cannot be read; those are
            not format problems and must not trigger a RAW conversion
    """
    if not path or not os.path.isfile(path):
        raise DecodeFailed(path, "file not found")

    if is_raw_file(path):
        return DecodeOutcome(unsupported_reason=f"camera RAW extension {os.path.splitext(path)[1]}")

    try:
        data = np.fromfile(path, dtype=np.uint8)
    except OSError as e:
        raise DecodeFailed(path, str(e)) from e

    try:
        img = cv2.imdecode(data, cv2.IMREAD_UNCHANGED)
    except cv2.error as e:
        return DecodeOutcome(unsupported_reason=f"codec error: {e}")

    # imdecode signals unknown formats with None instead of raising
    if img is None or img.size == 0:
        return DecodeOutcome(unsupported_reason="codec returned an empty image")

    return DecodeOutcome(raster=RasterBuffer(_to_uint8_bgr(img), ChannelLayout.BGR))


def ingest_image(
    path: str,
    artifacts: TempArtifacts,
    converter: RawConverter,
    max_dimension: Optional[int] = None,
) -> RasterBuffer:
    """
    Decode an image, converting it with the RAW converter if needed.

    Args:
        path: Source image path
        artifacts: Guard that receives any temp file created by the converter
        converter: Strategy used when the direct decode is unsupported
        max_dimension: Size hint forwarded to the converter

    Returns:
        BGR(A) RasterBuffer

    Raises:
        DecodeFailed: Direct decode impossible and the converted file is
            unreadable as well
        UnsupportedPlatform, RawConversionFailed, ConversionOutputMissing:
            Propagated from the converter
    """
    outcome = decode_image(path)
    if outcome.ok:
        return outcome.raster

    logger.info(f"[INGEST] Direct decode unsupported ({outcome.unsupported_reason}), "
                f"trying {converter.get_tool_name()}: {path}")
    converted_path = converter.convert(path, artifacts, max_dimension=max_dimension)

    outcome = decode_image(converted_path)
    if not outcome.ok:
        size = os.path.getsize(converted_path)
        raise DecodeFailed(
            path,
            f"unreadable after {converter.get_tool_name()} conversion "
            f"({outcome.unsupported_reason}, temp file size: {size} bytes)",
        )
    return outcome.raster
