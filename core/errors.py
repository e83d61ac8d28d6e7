"""
Welut - Error Types

Failures raised by the LUT loader, the RAW ingestion pipeline and the
processor. Everything derives from WelutError so callers that only need to
report "it failed" can catch a single type.
"""

from typing import Optional


class WelutError(Exception):
    """Base class for all processing failures."""


class InvalidLut(WelutError, ValueError):
    """LUT image is missing, undecodable or not a cube."""


class UnsupportedPlatform(WelutError):
    """No RAW conversion fallback exists for this host platform."""

    def __init__(self, platform: str):
        self.platform = platform
        super().__init__(f"Platform {platform} not supported for RAW conversion fallback.")


class RawConversionFailed(WelutError):
    """External converter is missing, timed out or exited non-zero."""

    def __init__(self, platform: str, tool: str, detail: Optional[str] = None):
        self.platform = platform
        self.tool = tool
        message = f"Failed to convert RAW image using {tool} ({platform})."
        if detail:
            message = f"{message} {detail}"
        super().__init__(message)


class ConversionOutputMissing(WelutError):
    """Converter exited cleanly but its output file does not exist."""

    def __init__(self, tool: str, expected_path: str):
        self.tool = tool
        self.expected_path = expected_path
        super().__init__(f"{tool} output file not found: {expected_path}")


class DecodeFailed(WelutError):
    """Neither the direct decode nor the converted file produced a raster."""

    def __init__(self, path: str, reason: str):
        self.path = path
        super().__init__(f"Failed to load image {path}: {reason}")


class InvalidPreviewSize(WelutError, ValueError):
    """Requested preview bound is not a positive pixel count."""

    def __init__(self, max_size):
        self.max_size = max_size
        super().__init__(f"Preview size must be positive, got {max_size}")
