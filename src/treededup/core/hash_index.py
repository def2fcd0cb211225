"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/hash_index.py
Content-hash index: classifies files into duplicate groups as their hashes
become known, and queues files whose hash is still unknown.

Canonical selection is independent of arrival order: originals beat
duplicate candidates, then the smallest full path wins. A newcomer that
outranks the current canonical takes its place and the previous canonical
becomes a duplicate.
"""

from collections import deque
from typing import Deque, Dict, List, Optional, Tuple
import logging

from treededup.core.models import DuplicatesGroup, FileNode, Origin

logger = logging.getLogger(__name__)


def canonical_rank(file: FileNode) -> Tuple[bool, str]:
    """Sort key for canonical selection; lower ranks win."""
    return file.origin is not Origin.ORIGINALS, file.full_path


class HashIndex:
    """
    Maps content hash (bytes, compared by value) to exactly one DuplicatesGroup.
    Files without a hash are held in a FIFO until the hashing loop handles them.
    """

    def __init__(self):
        self._groups: Dict[bytes, DuplicatesGroup] = {}
        self._pending: Deque[FileNode] = deque()

    def add(self, file: FileNode) -> Optional[DuplicatesGroup]:
        """
        Classifies one file.
        Returns the group the file joined, or None if it was queued for hashing.
        """
        if file.hash is None:
            self._pending.append(file)
            return None

        group = self._groups.get(file.hash)
        if group is None:
            group = DuplicatesGroup(canonical=file)
            self._groups[file.hash] = group
            return group

        if canonical_rank(file) < canonical_rank(group.canonical):
            group.duplicates.append(group.canonical)
            group.canonical = file
        else:
            group.duplicates.append(file)

        logger.debug(f"Duplicate of {group.canonical.full_path}: {file.full_path}")
        return group

    def next_pending(self) -> Optional[FileNode]:
        """Removes and returns the oldest file awaiting a hash."""
        if not self._pending:
            return None
        return self._pending.popleft()

    def group_for(self, content_hash: bytes) -> Optional[DuplicatesGroup]:
        return self._groups.get(bytes(content_hash))

    def groups_with_duplicates(self) -> List[DuplicatesGroup]:
        """Groups with at least one duplicate, ordered by canonical path."""
        groups = [group for group in self._groups.values() if group.has_duplicates]
        groups.sort(key=lambda g: g.canonical.full_path)
        for group in groups:
            group.duplicates.sort(key=canonical_rank)
        return groups

    @property
    def pending_files(self) -> List[FileNode]:
        return list(self._pending)

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    @property
    def group_count(self) -> int:
        return len(self._groups)

    @property
    def duplicate_file_count(self) -> int:
        return sum(len(group.duplicates) for group in self._groups.values())

    def __len__(self):
        return len(self._groups)

    def __repr__(self):
        return f"<HashIndex groups={len(self._groups)}, pending={len(self._pending)}>"
