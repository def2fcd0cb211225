"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/discoverer.py
Incremental file discovery against a PathTree.
Features:
- Breadth-first walk driven by an explicit queue (interruptible, no recursion)
- Skips excluded roots (relocation destination, the other scanned root)
- Drops unreadable or vanished subtrees without aborting the walk
- Yields only files the tree did not already know about
"""

import os
from collections import deque
from pathlib import Path
from typing import Callable, Deque, Iterator, List, Optional
import time
import logging

logger = logging.getLogger(__name__)

# Local imports
from treededup.core.models import FileNode, is_within
from treededup.core.path_tree import PathTree
from treededup.core.interfaces import FileSystem
from treededup.services.file_service import FileService

_ENUMERATION_ERRORS = (PermissionError, FileNotFoundError, NotADirectoryError)


class TreeDiscoverer:
    """
    Walks `tree.root_path` and inserts every file the tree does not contain yet.

    Attributes:
        tree: PathTree to reconcile against the live filesystem
        excluded_dirs: Directories (and everything beneath them) never walked
        file_system: Filesystem primitives (FileService by default)
        discovered_file_count: Files added by the last discover() call
    """

    def __init__(
        self,
        tree: PathTree,
        excluded_dirs: Optional[List[str]] = None,
        file_system: Optional[FileSystem] = None,
    ):
        self.tree = tree
        self.excluded_dirs = [os.path.normpath(os.path.abspath(d)) for d in excluded_dirs] if excluded_dirs else []
        self.file_system = file_system or FileService
        self.discovered_file_count = 0
        self.skipped_directory_count = 0

    def discover(self, stopped_flag: Optional[Callable[[], bool]] = None) -> Iterator[FileNode]:
        """
        Yields each newly inserted FileNode as soon as it is added to the tree.
        Stopping early keeps everything inserted so far.
        """
        self.discovered_file_count = 0
        self.skipped_directory_count = 0

        logger.debug(f"Starting discovery under {self.tree.root_path}")
        start_time = time.time()

        pending: Deque[str] = deque([self.tree.root_path])

        while pending:
            if stopped_flag and stopped_flag():
                logger.debug("Discovery interrupted by user")
                break

            directory = pending.popleft()

            if self._is_excluded_directory(directory):
                logger.debug(f"Skipping excluded directory: {directory}")
                continue

            try:
                child_dirs = self.file_system.list_subdirectories(directory)
            except _ENUMERATION_ERRORS as e:
                self.skipped_directory_count += 1
                logger.warning(f"Unable to enumerate folder '{directory}': {e}")
                continue

            pending.extend(str(Path(directory) / name) for name in child_dirs)

            try:
                child_files = self.file_system.list_files(directory)
            except _ENUMERATION_ERRORS as e:
                self.skipped_directory_count += 1
                logger.warning(f"Unable to list files in '{directory}': {e}")
                continue

            for file_name in child_files:
                if stopped_flag and stopped_flag():
                    break

                path = str(Path(directory) / file_name)
                if self.tree.contains(path):
                    continue

                node = self.tree.insert_file(self.tree.ensure_directory_path(directory), file_name)
                self.discovered_file_count += 1
                logger.debug(f"Discovered new file: {path}")
                yield node

        elapsed_time = time.time() - start_time
        logger.debug(f"Discovery of {self.tree.root_path} took {elapsed_time:.2f} seconds")
        logger.info(f"Discovered {self.discovered_file_count} new file(s) under {self.tree.root_path}")

    def _is_excluded_directory(self, path: str) -> bool:
        """Check if path is within an excluded directory."""
        normalized = os.path.normpath(path)
        for excluded_dir in self.excluded_dirs:
            if normalized == excluded_dir or is_within(normalized, excluded_dir):
                return True
        return False
