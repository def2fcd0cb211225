"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/models.py
Data models for the resumable discovery engine: directory/file tree nodes,
duplicate groups, run configuration and run statistics.
"""

from dataclasses import dataclass, field
from typing import List, Dict, Optional
import os
from enum import Enum


# =============================
# Enums
# =============================

class Origin(Enum):
    """
    Which scanned root a file was discovered under.
    """
    ORIGINALS = "originals"
    DUPLICATE_CANDIDATES = "duplicate-candidates"

    @property
    def element_name(self) -> str:
        """Name of the snapshot group element holding this tree."""
        mapping = {
            Origin.ORIGINALS: "Originals",
            Origin.DUPLICATE_CANDIDATES: "DuplicateCandidates",
        }
        return mapping[self]

    def __repr__(self) -> str:
        return self.value


class HashAlgorithmKind(Enum):
    """
    Digest used to compute content hashes.
    """
    MD5 = "md5"
    SHA256 = "sha256"
    XXH128 = "xxh128"

    @property
    def display_name(self) -> str:
        """Human-readable name for console output."""
        mapping = {
            HashAlgorithmKind.MD5: "MD5",
            HashAlgorithmKind.SHA256: "SHA-256",
            HashAlgorithmKind.XXH128: "xxHash128",
        }
        return mapping.get(self, self.value)

    @property
    def description(self) -> str:
        """Detailed description for help text."""
        mapping = {
            HashAlgorithmKind.MD5:
                "MD5, 16-byte digest (default, compatible with older state files)",
            HashAlgorithmKind.SHA256:
                "SHA-256, 32-byte digest (slowest, strongest)",
            HashAlgorithmKind.XXH128:
                "xxHash128, 16-byte digest (fastest, non-cryptographic)",
        }
        return mapping.get(self, self.value)

    def __repr__(self) -> str:
        return self.value


class RunState(Enum):
    IDLE = "idle"
    LOADING_SNAPSHOT = "loading-snapshot"
    DISCOVERING = "discovering"
    HASHING = "hashing"
    RESOLVING_DUPLICATES = "resolving-duplicates"
    DONE = "done"
    CANCELLED = "cancelled"


# ======================
#  Core Data Models
# ======================

@dataclass(eq=False)
class DirectoryNode:
    """
    One directory relative to a scanned root.
    The parent link is only followed upwards to rebuild paths; children are
    owned through the two name-keyed mappings.
    """
    name: str = ""
    parent: Optional["DirectoryNode"] = field(default=None, repr=False)
    directories: Dict[str, "DirectoryNode"] = field(default_factory=dict, repr=False)
    files: Dict[str, "FileNode"] = field(default_factory=dict, repr=False)

    @property
    def is_root(self) -> bool:
        return not self.name and self.parent is None

    def is_empty(self) -> bool:
        return not self.directories and not self.files

    def __repr__(self):
        return f"<DirectoryNode name={self.name!r}, dirs={len(self.directories)}, files={len(self.files)}>"


@dataclass(eq=False)
class FileNode:
    """
    Represents a single discovered file.
    The content hash starts unset and is assigned exactly once.
    """
    name: str
    full_path: str
    parent: DirectoryNode = field(repr=False)
    origin: Origin = Origin.ORIGINALS
    hash: Optional[bytes] = None

    def __post_init__(self):
        if self.hash is not None:
            self.hash = self._validate_hash(self.hash)

    @staticmethod
    def _validate_hash(value) -> bytes:
        if isinstance(value, bytearray):
            value = bytes(value)
        if not isinstance(value, bytes) or not value:
            raise ValueError("Content hash must be non-empty bytes")
        return value

    @property
    def is_hashed(self) -> bool:
        return self.hash is not None

    @property
    def hash_hex(self) -> Optional[str]:
        """Uppercase hex rendering of the hash, two characters per byte."""
        if self.hash is None:
            return None
        return self.hash.hex().upper()

    def set_hash(self, digest: bytes) -> None:
        if self.hash is not None:
            raise RuntimeError(f"Hash already set for {self.full_path}")
        self.hash = self._validate_hash(digest)

    def __repr__(self):
        return f"<FileNode path={self.full_path}, origin={self.origin.value}, hash={self.hash_hex}>"


@dataclass
class DuplicatesGroup:
    """
    Files sharing one content hash.
    The canonical file is never relocated; the rest are duplicates of it.
    """
    canonical: FileNode
    duplicates: List[FileNode] = field(default_factory=list)

    @property
    def hash(self) -> bytes:
        return self.canonical.hash

    @property
    def has_duplicates(self) -> bool:
        return len(self.duplicates) > 0

    @property
    def files(self) -> List[FileNode]:
        """Canonical file first, then duplicates."""
        return [self.canonical] + self.duplicates

    def __len__(self):
        return 1 + len(self.duplicates)

    def __repr__(self):
        return f"<DuplicatesGroup canonical={self.canonical.full_path}, duplicates={len(self.duplicates)}>"


@dataclass
class RunReport:
    """
    Statistics collected during a single run.
    """
    state: RunState = RunState.IDLE
    loaded_files: int = 0
    discovered_files: int = 0
    hashed_files: int = 0
    failed_hashes: int = 0
    checkpoints_written: int = 0
    duplicate_groups: List[DuplicatesGroup] = field(default_factory=list)
    moved_files: int = 0
    skipped_moves: int = 0
    total_time: float = 0.0

    @property
    def cancelled(self) -> bool:
        return self.state is RunState.CANCELLED

    @property
    def duplicate_file_count(self) -> int:
        return sum(len(group.duplicates) for group in self.duplicate_groups)

    def print_summary(self) -> str:
        lines = [
            "📊 Run Statistics:",
            f"Final state: {self.state.value}",
            f"Total Execution Time: {self.total_time:.3f}s\n",
            f"Files loaded from state: {self.loaded_files}",
            f"New files discovered: {self.discovered_files}",
            f"Files hashed: {self.hashed_files}",
        ]
        if self.failed_hashes:
            lines.append(f"Files that could not be hashed: {self.failed_hashes}")
        lines.append(f"Checkpoints written: {self.checkpoints_written}")
        lines.append(f"Files with duplicates: {len(self.duplicate_groups)}")
        lines.append(f"Total duplicates: {self.duplicate_file_count}")
        if self.moved_files or self.skipped_moves:
            lines.append(f"Files moved: {self.moved_files}")
            lines.append(f"Files skipped: {self.skipped_moves}")

        return "\n".join(lines)


"""
DTO for run parameters with built-in validation.
Interface-agnostic: built by the CLI, consumed by DeduplicationCommand.
"""

DEFAULT_STATE_PATH = "state.xml"
DEFAULT_CHECKPOINT_INTERVAL = 50_000


def is_within(path: str, directory: str) -> bool:
    """True if `path` lies strictly beneath `directory`."""
    normalized_path = os.path.normpath(path)
    normalized_dir = os.path.normpath(directory)
    return normalized_path.startswith(normalized_dir.rstrip(os.sep) + os.sep)


@dataclass
class RunParams:
    """Parameters for a discovery/hash/relocate run with validation."""
    root_dir: str
    duplicate_candidates_dir: Optional[str] = None
    destination_dir: Optional[str] = None
    state_path: str = DEFAULT_STATE_PATH
    resume: bool = False
    skip_filesystem_scan: bool = False
    find_dupes_in_originals: bool = False
    checkpoint_interval: int = DEFAULT_CHECKPOINT_INTERVAL
    algorithm: HashAlgorithmKind = HashAlgorithmKind.MD5

    def __post_init__(self):
        """Validate parameters immediately after creation."""
        if not self.root_dir:
            raise ValueError("Root directory cannot be empty")

        if not self.state_path:
            raise ValueError("State path cannot be empty")

        if self.checkpoint_interval <= 0:
            raise ValueError("Checkpoint interval must be a positive number")

        # Normalize to absolute paths so prefix stripping is consistent
        self.root_dir = os.path.abspath(self.root_dir)
        if self.duplicate_candidates_dir:
            self.duplicate_candidates_dir = os.path.abspath(self.duplicate_candidates_dir)
        else:
            self.duplicate_candidates_dir = None
        if self.destination_dir:
            self.destination_dir = os.path.abspath(self.destination_dir)
        else:
            self.destination_dir = None

        if self.duplicate_candidates_dir == self.root_dir:
            raise ValueError("Duplicate candidates directory must differ from the root directory")

        if self.destination_dir is not None:
            for root in self.scanned_roots:
                if self.destination_dir == root or is_within(root, self.destination_dir):
                    raise ValueError("Destination directory cannot be or contain a scanned directory")

    @property
    def scanned_roots(self) -> List[str]:
        roots = [self.root_dir]
        if self.duplicate_candidates_dir:
            roots.append(self.duplicate_candidates_dir)
        return roots

    @property
    def relocate_originals(self) -> bool:
        """
        Whether duplicates found in the originals tree may be moved.
        With a single root every file is an original, so relocation is
        always allowed there.
        """
        return self.find_dupes_in_originals or self.duplicate_candidates_dir is None

    def root_for(self, origin: Origin) -> Optional[str]:
        if origin is Origin.ORIGINALS:
            return self.root_dir
        return self.duplicate_candidates_dir
