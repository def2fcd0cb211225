"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

services/file_service.py
Filesystem primitives used by the discovery engine.
Provides directory enumeration, file reading and relocation over the local disk.
"""
import os
import shutil
from typing import BinaryIO, List


class FileService:
    """
    Local-disk implementation of the FileSystem protocol.
    Enumeration errors are raised unchanged; callers decide how to recover.
    """

    @staticmethod
    def list_subdirectories(directory: str) -> List[str]:
        """Returns sorted names of child directories. Symbolic links are not followed."""
        with os.scandir(directory) as entries:
            return sorted(
                entry.name for entry in entries
                if entry.is_dir(follow_symlinks=False)
            )

    @staticmethod
    def list_files(directory: str) -> List[str]:
        """Returns sorted names of regular files. Symbolic links are skipped."""
        with os.scandir(directory) as entries:
            return sorted(
                entry.name for entry in entries
                if entry.is_file(follow_symlinks=False)
            )

    @staticmethod
    def open_for_read(path: str) -> BinaryIO:
        return open(path, "rb")

    @staticmethod
    def move_file(source: str, destination: str) -> None:
        """Moves a file. Works across filesystems (copy + delete)."""
        try:
            shutil.move(source, destination)
        except OSError as e:
            raise RuntimeError(f"Failed to move {source} to {destination}: {e}") from e

    @staticmethod
    def make_dirs(path: str) -> None:
        os.makedirs(path, exist_ok=True)

    @staticmethod
    def file_exists(path: str) -> bool:
        return os.path.isfile(path)
