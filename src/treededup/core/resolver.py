"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/resolver.py
Relocates duplicate files into a destination tree, mirroring each file's
path relative to the root it was discovered under. Canonical files are never
moved. Every skip or failure is per-file: relocation carries on with the
next duplicate.
"""

from dataclasses import dataclass
from typing import Callable, Dict, Iterable, Optional
import os
import logging
from pathlib import Path

from treededup.core.interfaces import FileSystem
from treededup.core.models import DuplicatesGroup, FileNode, Origin
from treededup.core.path_tree import PathTree
from treededup.services.file_service import FileService

logger = logging.getLogger(__name__)


@dataclass
class ResolutionResult:
    moved: int = 0
    skipped: int = 0
    failed: int = 0
    cancelled: bool = False


class DuplicateResolver:
    """
    Moves non-canonical group members under `destination_root`.

    Attributes:
        destination_root: Root of the quarantine tree
        source_roots: Root directory per origin, used to locate each duplicate
        relocate_originals: Whether duplicates from the originals tree may move
    """

    def __init__(
        self,
        destination_root: str,
        source_roots: Dict[Origin, str],
        relocate_originals: bool = True,
        file_system: Optional[FileSystem] = None,
    ):
        self.destination_root = os.path.abspath(destination_root)
        self.source_roots = source_roots
        self.relocate_originals = relocate_originals
        self.file_system = file_system or FileService

    def resolve(
        self,
        groups: Iterable[DuplicatesGroup],
        stopped_flag: Optional[Callable[[], bool]] = None,
        progress_callback: Optional[Callable[[str, int, object], None]] = None,
    ) -> ResolutionResult:
        result = ResolutionResult()

        for group in groups:
            if not group.has_duplicates:
                continue

            for file in group.duplicates:
                if stopped_flag and stopped_flag():
                    logger.info("Relocation interrupted by user")
                    result.cancelled = True
                    return result

                outcome = self._relocate(file)
                if outcome is True:
                    result.moved += 1
                elif outcome is False:
                    result.skipped += 1
                else:
                    result.failed += 1

                if progress_callback:
                    progress_callback("moving", result.moved, None)

        return result

    def _relocate(self, file: FileNode) -> Optional[bool]:
        """
        Returns True when moved, False when deliberately skipped,
        None when the move was attempted and failed.
        """
        if file.origin is Origin.ORIGINALS and not self.relocate_originals:
            logger.debug(f"Leaving original in place: {file.full_path}")
            return False

        source_root = self.source_roots.get(file.origin)
        if source_root is None:
            logger.warning(f"No source directory configured for {file.origin.value} file: {file.name}")
            return False

        sub_dirs = PathTree.directory_parts(file.parent)
        source_path = Path(source_root, *sub_dirs, file.name)
        if not self.file_system.file_exists(str(source_path)):
            logger.warning(f"Skipping file, source no longer present: {source_path}")
            return False

        destination_dir = Path(self.destination_root, *sub_dirs)
        destination_path = destination_dir / file.name
        if self.file_system.file_exists(str(destination_path)):
            logger.warning(f"Skipping file, destination already exists: {destination_path}")
            return False

        try:
            self.file_system.make_dirs(str(destination_dir))
        except OSError as e:
            logger.error(f"Unable to create duplicate directory {destination_dir}: {e}")
            return None

        try:
            self.file_system.move_file(str(source_path), str(destination_path))
        except (OSError, RuntimeError) as e:
            logger.error(f"Failed to move {source_path}: {e}")
            return None

        logger.info(f"Moved to duplicate directory: {source_path}")
        return True
