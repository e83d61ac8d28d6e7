"""
Welut - Image Processor

Coordinates LUT loading, ingestion, transform and encoding into the three
public operations: full-resolution processing, original preview and LUT
preview.
"""

import asyncio
import logging
import sys
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence

import numpy as np

from config import ChannelLayout, OutputConfig, PreviewConfig, ProcessingConfig
from core.artifacts import TempArtifacts
from core.errors import WelutError
from core.ingestion import ingest_image
from core.lut_loader import load_lut
from core.lut_transform import apply_lut
from core.preview_codec import encode_preview, fit_inside, output_path_for, write_jpeg
from core.raster import LutSpec, RasterBuffer
from core.raw_converters import RawConverter, select_converter

logger = logging.getLogger(__name__)


@dataclass
class ProcessResult:
    """Outcome of process_image() as shown to the user."""
    success: bool
    output_path: Optional[str] = None
    error: Optional[str] = None


class WelutProcessor:
    """
    Image processor class.

    Holds the RAW converter chosen for the host platform; everything else is
    created per call, so one instance can serve concurrent operations.
    """

    def __init__(self, converter: Optional[RawConverter] = None, platform: Optional[str] = None):
        """
        Initialize image processor.

        Args:
            converter: RAW converter strategy, selected from the platform if None
            platform: sys.platform style identifier, defaults to the host
        """
        self.platform = platform or sys.platform
        self.converter = converter or select_converter(self.platform)

    def _ingest(self, input_path: str, artifacts: TempArtifacts, max_dimension: Optional[int] = None) -> RasterBuffer:
        return ingest_image(input_path, artifacts, self.converter, max_dimension=max_dimension)

    def _load_inputs(self, input_path: str, lut_path: str, artifacts: TempArtifacts):
        """Load the LUT on a worker while the image is ingested here."""
        with ThreadPoolExecutor(max_workers=ProcessingConfig.MAX_WORKERS) as pool:
            lut_future = pool.submit(load_lut, lut_path)
            raster = self._ingest(input_path, artifacts)
            lut: LutSpec = lut_future.result()
        return raster, lut

    def process(self, input_path: str, lut_path: str, output_path: Optional[str] = None) -> str:
        """
        Apply a LUT at full resolution and write a JPEG.

        Args:
            input_path: Source image (any codec-readable or camera RAW file)
            lut_path: LUT PNG
            output_path: Destination, defaults to <stem>_lut.jpg beside the source

        Returns:
            Path of the written JPEG

        Raises:
            WelutError: Any loading, conversion or decoding failure
        """
        output_path = output_path or output_path_for(input_path)

        with TempArtifacts() as artifacts:
            raster, lut = self._load_inputs(input_path, lut_path, artifacts)
            logger.info(f"[PROCESSOR] Applying level-{lut.level} LUT to {raster.width}x{raster.height} "
                        f"{raster.layout.get_display_name()} image")
            # Resize never precedes the transform for the delivered output
            result = apply_lut(raster, lut)
            write_jpeg(result, output_path, OutputConfig.JPEG_QUALITY)

        logger.info(f"[PROCESSOR] Saved: {output_path}")
        return output_path

    def preview(self, input_path: str, width: int = PreviewConfig.DEFAULT_WIDTH) -> str:
        """Downscaled original as a JPEG data URI."""
        with TempArtifacts() as artifacts:
            return encode_preview(self._preview_raster(input_path, width, artifacts))

    def thumbnail(self, input_path: str, size: int = PreviewConfig.THUMBNAIL_SIZE) -> np.ndarray:
        """Small RGB array of the original for the file strip."""
        with TempArtifacts() as artifacts:
            raster = self._preview_raster(input_path, size, artifacts)
            return raster.to_layout(ChannelLayout.RGB).pixels[..., :3].copy()

    def _preview_raster(self, input_path: str, width: int, artifacts: TempArtifacts) -> RasterBuffer:
        raster = self._ingest(input_path, artifacts, max_dimension=width)
        return fit_inside(raster, width)

    def lut_preview(self, input_path: str, lut_path: str, width: int = PreviewConfig.DEFAULT_WIDTH) -> str:
        """
        Downscaled image with the LUT applied, as a JPEG data URI.

        The image is shrunk before the transform; large RAW files would
        otherwise be transformed at full size only to be thrown away.
        """
        with TempArtifacts() as artifacts:
            raster, lut = self._load_inputs(input_path, lut_path, artifacts)
            small = fit_inside(raster, width)
            return encode_preview(apply_lut(small, lut))

    async def process_async(self, input_path: str, lut_path: str, output_path: Optional[str] = None) -> str:
        return await asyncio.to_thread(self.process, input_path, lut_path, output_path)

    async def preview_async(self, input_path: str, width: int = PreviewConfig.DEFAULT_WIDTH) -> str:
        return await asyncio.to_thread(self.preview, input_path, width)

    async def lut_preview_async(self, input_path: str, lut_path: str, width: int = PreviewConfig.DEFAULT_WIDTH) -> str:
        return await asyncio.to_thread(self.lut_preview, input_path, lut_path, width)


# ========== UI-facing wrappers ==========

def process_image(processor: WelutProcessor, input_path: str, lut_path: str,
                  output_path: Optional[str] = None) -> ProcessResult:
    """Run process() and report success or failure instead of raising."""
    try:
        saved = processor.process(input_path, lut_path, output_path)
        return ProcessResult(success=True, output_path=saved)
    except (WelutError, OSError) as e:
        logger.error(f"[PROCESSOR] Processing error for {input_path}: {e}")
        return ProcessResult(success=False, error=str(e))


def generate_preview(processor: WelutProcessor, input_path: str,
                     width: int = PreviewConfig.DEFAULT_WIDTH) -> Optional[str]:
    """Original preview, or None when no preview is available."""
    try:
        return processor.preview(input_path, width)
    except (WelutError, OSError) as e:
        logger.error(f"[PROCESSOR] Preview error for {input_path}: {e}")
        return None


def generate_lut_preview(processor: WelutProcessor, input_path: str, lut_path: str,
                         width: int = PreviewConfig.DEFAULT_WIDTH) -> Optional[str]:
    """LUT preview, or None when no preview is available."""
    try:
        return processor.lut_preview(input_path, lut_path, width)
    except (WelutError, OSError) as e:
        logger.error(f"[PROCESSOR] LUT preview error for {input_path}: {e}")
        return None


def generate_thumbnail(processor: WelutProcessor, input_path: str,
                       size: int = PreviewConfig.THUMBNAIL_SIZE) -> Optional[np.ndarray]:
    """Thumbnail array, or None when no preview is available."""
    try:
        return processor.thumbnail(input_path, size)
    except (WelutError, OSError) as e:
        logger.error(f"[PROCESSOR] Thumbnail error for {input_path}: {e}")
        return None


def process_batch(processor: WelutProcessor, input_paths: Sequence[str], lut_path: str,
                  progress: Optional[Callable[[int, int, str], None]] = None) -> List[ProcessResult]:
    """
    Run process_image() on each file in order.

    One failing file does not stop the rest.

    Args:
        processor: Shared image processor
        input_paths: Source images, each written to its own <stem>_lut.jpg
        lut_path: LUT PNG applied to every file
        progress: Called as progress(index, total, path) before each file

    Returns:
        One ProcessResult per input, in input order
    """
    total = len(input_paths)
    results = []
    for index, input_path in enumerate(input_paths):
        if progress is not None:
            progress(index, total, input_path)
        results.append(process_image(processor, input_path, lut_path))

    completed = sum(1 for r in results if r.success)
    logger.info(f"[PROCESSOR] Batch finished: {completed} / {total} completed")
    return results
