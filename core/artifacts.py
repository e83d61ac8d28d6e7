"""
Welut - Temporary Artifacts

Scoped ownership of the temp files created while converting RAW images.
"""

import logging
import os
import secrets
import tempfile
import time
from typing import List

from config import RawConfig

logger = logging.getLogger(__name__)


def unique_temp_path(tag: str, suffix: str) -> str:
    """
    Build a temp file path that no concurrent invocation can reuse.

    Args:
        tag: Name part after the prefix (e.g. "temp", "raw")
        suffix: File extension including the dot

    Returns:
        <tmpdir>/<prefix>_<tag>_<ms timestamp>_<random token><suffix>
    """
    token = secrets.token_hex(6)
    name = f"{RawConfig.TEMP_PREFIX}_{tag}_{int(time.time() * 1000)}_{token}{suffix}"
    return os.path.join(tempfile.gettempdir(), name)


class TempArtifacts:
    """
    Guard that deletes every registered temp file when released.

    Use as a context manager; release runs on success and on exceptions,
    and each file is deleted at most once.
    """

    def __init__(self):
        self._paths: List[str] = []

    def __enter__(self) -> "TempArtifacts":
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        self.release()
        return False

    @property
    def paths(self) -> List[str]:
        return list(self._paths)

    def register(self, path: str) -> str:
        """Take ownership of `path` (it need not exist yet)."""
        self._paths.append(path)
        return path

    def new_path(self, tag: str, suffix: str) -> str:
        return self.register(unique_temp_path(tag, suffix))

    def release(self) -> None:
        """Delete all owned files. Failures are logged, never raised."""
        paths, self._paths = self._paths, []
        for path in paths:
            if not os.path.exists(path):
                continue
            try:
                os.remove(path)
                logger.debug(f"[ARTIFACTS] Removed {path}")
            except OSError as e:
                logger.warning(f"[ARTIFACTS] Failed to remove temp file {path}: {e}")
