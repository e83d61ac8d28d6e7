"""
RAW Converter Strategies

Each strategy turns a file the codec cannot read into one it can:
- SipsConverter: macOS system image utility -> JPEG
- DcrawConverter: dcraw -> 16-bit TIFF
- UnsupportedPlatformConverter: placeholder for hosts without a converter

select_converter() picks the strategy for the host platform once, so the
processor never branches on sys.platform itself.
"""

import logging
import os
import shutil
import subprocess
import sys
from abc import ABC, abstractmethod
from typing import List, Optional

from config import RawConfig
from core.artifacts import TempArtifacts
from core.errors import ConversionOutputMissing, RawConversionFailed, UnsupportedPlatform

logger = logging.getLogger(__name__)


class RawConverter(ABC):
    """
    Abstract base class for RAW conversion strategies.

    Each strategy is responsible for:
    1. Choosing unique temp paths and registering them with the caller's guard
    2. Running its external tool exactly once
    3. Returning the path of a file the general-purpose codec can decode
    """

    def __init__(self, platform: str, binary: Optional[str] = None):
        self.platform = platform
        self.binary = binary or self.default_binary()

    @abstractmethod
    def default_binary(self) -> str:
        """Executable used when none is given."""
        pass

    @abstractmethod
    def convert(
        self,
        source_path: str,
        artifacts: TempArtifacts,
        max_dimension: Optional[int] = None,
    ) -> str:
        """
        Convert a source image.

        Args:
            source_path: Image the codec could not decode
            artifacts: Guard that takes ownership of every temp file created
            max_dimension: Optional cap on the larger side; strategies that
                cannot resize ignore it

        Returns:
            Path of the converted file (owned by `artifacts`)
        """
        pass

    def get_tool_name(self) -> str:
        return os.path.basename(self.binary)

    def _run_tool(self, args: List[str]) -> None:
        """Run the converter once; any failure becomes RawConversionFailed."""
        cmd = [self.binary] + args
        logger.info(f"[RAW_CONVERTER] Running: {' '.join(cmd)}")
        try:
            subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                check=True,
                timeout=RawConfig.TOOL_TIMEOUT_S,
            )
        except FileNotFoundError as e:
            raise RawConversionFailed(self.platform, self.get_tool_name(), f"{self.binary} not found in PATH") from e
        except subprocess.CalledProcessError as e:
            detail = (e.stderr or "").strip() or f"exit code {e.returncode}"
            raise RawConversionFailed(self.platform, self.get_tool_name(), detail) from e
        except subprocess.TimeoutExpired as e:
            raise RawConversionFailed(self.platform, self.get_tool_name(), f"timed out after {e.timeout}s") from e


class SipsConverter(RawConverter):
    """
    Strategy for macOS.

    Features:
    - Converts anything ImageIO reads (including camera RAW) to JPEG
    - Can downscale during conversion (-Z) for previews
    """

    def default_binary(self) -> str:
        return RawConfig.SIPS_BINARY

    def convert(self, source_path, artifacts, max_dimension=None):
        output_path = artifacts.new_path("temp", ".jpg")
        args = ["-s", "format", "jpeg"]
        if max_dimension:
            # -Z: larger dimension no larger than the given value
            args += ["-Z", str(int(max_dimension))]
        args += [source_path, "--out", output_path]

        self._run_tool(args)
        if not os.path.exists(output_path):
            raise ConversionOutputMissing(self.get_tool_name(), output_path)

        logger.info(f"[RAW_CONVERTER] sips conversion success: {output_path}")
        return output_path


class DcrawConverter(RawConverter):
    """
    Strategy for Windows and Linux.

    dcraw writes <input>.tiff next to its input, so the source is first copied
    to a temp path with its original extension; the user's directory is never
    touched.

    Flags:
    - -w: camera white balance
    - -T: TIFF instead of PPM
    - -6: 16-bit output
    """

    def default_binary(self) -> str:
        return RawConfig.DCRAW_BINARY

    def convert(self, source_path, artifacts, max_dimension=None):
        ext = os.path.splitext(source_path)[1]
        temp_input = artifacts.new_path("raw", ext)
        output_tiff = artifacts.register(os.path.splitext(temp_input)[0] + ".tiff")

        try:
            shutil.copyfile(source_path, temp_input)
        except OSError as e:
            raise RawConversionFailed(self.platform, self.get_tool_name(), f"cannot copy source: {e}") from e

        self._run_tool(["-w", "-T", "-6", temp_input])
        if not os.path.exists(output_tiff):
            raise ConversionOutputMissing(self.get_tool_name(), output_tiff)

        logger.info(f"[RAW_CONVERTER] dcraw conversion success: {output_tiff}")
        return output_tiff


class UnsupportedPlatformConverter(RawConverter):
    """Stand-in for platforms without a fallback; always fails, creates nothing."""

    def default_binary(self) -> str:
        return "none"

    def convert(self, source_path, artifacts, max_dimension=None):
        raise UnsupportedPlatform(self.platform)


def select_converter(platform: Optional[str] = None) -> RawConverter:
    """
    Create the converter strategy for a platform.

    Args:
        platform: sys.platform style identifier, defaults to the host

    Returns:
        RawConverter instance (UnsupportedPlatformConverter if none is defined)
    """
    platform = platform or sys.platform
    name = RawConfig.PLATFORM_CONVERTERS.get(platform)

    if name == "sips":
        converter = SipsConverter(platform)
    elif name == "dcraw":
        converter = DcrawConverter(platform)
    else:
        logger.warning(f"[RAW_CONVERTER] No RAW fallback for platform {platform}")
        return UnsupportedPlatformConverter(platform)

    logger.debug(f"[RAW_CONVERTER] Selected {converter.get_tool_name()} for {platform}")
    return converter
