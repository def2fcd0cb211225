"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/path_tree.py
In-memory mirror of a scanned directory tree.

A PathTree maps absolute paths under one configured root onto a forest of
DirectoryNode/FileNode objects. Discovery uses it to tell "already known"
files from new ones; the checkpointer serializes it; resolution uses the
parent links to rebuild relative paths.
"""

import os
from typing import Iterator, List, Optional

from treededup.core.models import DirectoryNode, FileNode, Origin


class PathTree:
    """
    Forest rooted at an unnamed DirectoryNode, mirroring `root_path`.

    Attributes:
        root_path: Absolute filesystem path the forest root stands for
        origin: Origin stamped on every file inserted into this tree
        root: The forest root node
    """

    def __init__(self, root_path: str, origin: Origin = Origin.ORIGINALS):
        self.root_path = os.path.normpath(os.path.abspath(root_path))
        self.origin = origin
        self.root = DirectoryNode()

    def _relative_parts(self, absolute_path: str) -> List[str]:
        """
        Strips the root prefix and splits the remainder into components.
        Empty components (doubled or trailing separators) are dropped.
        """
        path = os.path.normpath(absolute_path)
        if path == self.root_path:
            return []

        prefix = self.root_path if self.root_path.endswith(os.sep) else self.root_path + os.sep
        if not path.startswith(prefix):
            raise ValueError(f"Path {absolute_path} is not under root {self.root_path}")

        remainder = path[len(prefix):]
        if os.altsep:
            remainder = remainder.replace(os.altsep, os.sep)
        return [part for part in remainder.split(os.sep) if part]

    def ensure_directory_path(self, absolute_dir: str) -> DirectoryNode:
        """Walks from the forest root, creating any missing directory nodes."""
        current = self.root
        for component in self._relative_parts(absolute_dir):
            child = current.directories.get(component)
            if child is None:
                child = DirectoryNode(name=component, parent=current)
                current.directories[component] = child
            current = child
        return current

    def contains(self, absolute_file: str) -> bool:
        """
        True if the file is already known to the tree.
        Never creates nodes; the root path itself counts as contained.
        """
        if self.root.is_empty():
            return False

        parts = self._relative_parts(absolute_file)
        if not parts:
            return True

        current = self.root
        for component in parts[:-1]:
            current = current.directories.get(component)
            if current is None:
                return False

        return parts[-1] in current.files

    def insert_file(self, directory: DirectoryNode, name: str, hash: Optional[bytes] = None) -> FileNode:
        """Adds (or replaces) the file entry `name` under `directory`."""
        parts = self.directory_parts(directory)
        full_path = os.path.join(self.root_path, *parts, name)
        node = FileNode(name=name, full_path=full_path, parent=directory, origin=self.origin, hash=hash)
        directory.files[name] = node
        return node

    @staticmethod
    def directory_parts(directory: DirectoryNode) -> List[str]:
        """Directory names from the forest root down to `directory`."""
        parts = []
        node = directory
        while node is not None and node.name:
            parts.append(node.name)
            node = node.parent
        parts.reverse()
        return parts

    @classmethod
    def relative_path(cls, file: FileNode) -> str:
        """Path of `file` relative to its tree's root."""
        return os.path.join(*cls.directory_parts(file.parent), file.name)

    def iter_files(self) -> Iterator[FileNode]:
        """Depth-first walk over every file, in name order."""
        stack = [self.root]
        while stack:
            directory = stack.pop()
            for name in sorted(directory.files):
                yield directory.files[name]
            stack.extend(directory.directories[name] for name in sorted(directory.directories, reverse=True))

    def file_count(self) -> int:
        return sum(1 for _ in self.iter_files())

    def is_empty(self) -> bool:
        return self.root.is_empty()

    def __repr__(self):
        return f"<PathTree root={self.root_path}, origin={self.origin.value}>"
