"""
Welut - LUT Library Manager
Catalog of named LUT PNGs copied into the user's library directory
"""

import json
import logging
import os
import shutil
import uuid
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import List, Optional

from config import LUT_LIBRARY_DIR, LutConfig

logger = logging.getLogger(__name__)


@dataclass
class LutItem:
    """Library entry"""
    id: str
    name: str
    path: str  # absolute path of the library copy


class LUTManager:
    """LUT library manager"""

    INDEX_FILE = "luts.json"
    LUT_SUBDIR = "luts"

    def __init__(self, root_dir: str = LUT_LIBRARY_DIR):
        self.root_dir = os.path.abspath(root_dir)
        self.index_path = os.path.join(self.root_dir, self.INDEX_FILE)
        self.luts_dir = os.path.join(self.root_dir, self.LUT_SUBDIR)
        os.makedirs(self.luts_dir, exist_ok=True)
        self._luts: List[LutItem] = self._load_index()

    def _load_index(self) -> List[LutItem]:
        if not os.path.exists(self.index_path):
            return []
        try:
            with open(self.index_path, "r", encoding="utf-8") as f:
                data = json.load(f)
            return [LutItem(**entry) for entry in data.get("luts", [])]
        except (OSError, ValueError, TypeError) as e:
            # Start fresh rather than refusing to open the library
            logger.warning(f"[LUT_MANAGER] Unreadable index {self.index_path}, starting empty: {e}")
            return []

    def save(self) -> None:
        with open(self.index_path, "w", encoding="utf-8") as f:
            json.dump({"luts": [asdict(item) for item in self._luts]}, f, indent=2, ensure_ascii=False)

    def list_luts(self) -> List[LutItem]:
        """
        Return all library entries

        Returns:
            list: LutItem list in insertion order
        """
        return list(self._luts)

    def get_lut_choices(self) -> List[str]:
        """Display names (for Dropdown)"""
        return [item.name for item in self._luts]

    def get_lut_path(self, display_name: str) -> Optional[str]:
        """
        Get LUT file path by display name

        Args:
            display_name: Display name

        Returns:
            str: File path, returns None if not found
        """
        for item in self._luts:
            if item.name == display_name:
                return item.path
        return None

    def find(self, lut_id: str) -> Optional[LutItem]:
        return next((item for item in self._luts if item.id == lut_id), None)

    def import_lut(self, source_path: Optional[str]) -> Optional[LutItem]:
        """
        Copy a LUT PNG into the library

        Args:
            source_path: Selected file, None or empty when the picker was cancelled

        Returns:
            LutItem: New entry, None if nothing was selected

        Raises:
            ValueError: Unsupported file type or missing file
        """
        if not source_path:
            return None

        source = Path(source_path)
        if source.suffix.lower() not in LutConfig.EXTENSIONS:
            raise ValueError(f"Invalid file type: {source.suffix}. Only PNG LUTs are supported.")
        if not source.is_file():
            raise ValueError(f"LUT file not found: {source_path}")

        lut_id = str(uuid.uuid4())
        dest_path = os.path.join(self.luts_dir, f"{source.stem}_{lut_id}.png")
        shutil.copyfile(source, dest_path)

        item = LutItem(id=lut_id, name=source.stem, path=dest_path)
        self._luts.append(item)
        self.save()

        logger.info(f"[LUT_MANAGER] Imported LUT: {item.name} -> {dest_path}")
        return item

    def delete_lut(self, lut_id: str) -> bool:
        """
        Delete a library entry and its file

        Args:
            lut_id: Entry id

        Returns:
            bool: False if no entry has this id
        """
        item = self.find(lut_id)
        if item is None:
            return False

        try:
            os.remove(item.path)
        except OSError as e:
            # The entry is removed anyway
            logger.error(f"[LUT_MANAGER] Failed to delete file {item.path}: {e}")

        self._luts.remove(item)
        self.save()
        logger.info(f"[LUT_MANAGER] Deleted LUT: {item.name}")
        return True

    def sync_default_luts(self, bundled_dir: str) -> int:
        """
        Copy bundled LUTs that are not in the library yet

        Bundled files in subfolders get "<folder>/<name>" display names.

        Args:
            bundled_dir: Directory shipped with the application

        Returns:
            int: Number of LUTs added
        """
        if not os.path.isdir(bundled_dir):
            logger.debug(f"[LUT_MANAGER] No bundled LUT directory: {bundled_dir}")
            return 0

        known = {item.name for item in self._luts}
        added = 0
        for file_path in sorted(Path(bundled_dir).rglob("*")):
            if file_path.suffix.lower() not in LutConfig.EXTENSIONS or not file_path.is_file():
                continue

            rel = file_path.relative_to(bundled_dir)
            display_name = rel.with_suffix("").as_posix()
            if display_name in known:
                continue

            lut_id = str(uuid.uuid4())
            dest_path = os.path.join(self.luts_dir, f"{lut_id}.png")
            shutil.copyfile(file_path, dest_path)
            self._luts.append(LutItem(id=lut_id, name=display_name, path=dest_path))
            known.add(display_name)
            added += 1

        if added:
            self.save()
            logger.info(f"[LUT_MANAGER] Added {added} bundled LUTs")
        return added
