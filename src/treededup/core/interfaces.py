"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

interfaces.py

Defines core interfaces (Protocols) used throughout the discovery engine.
These protocols enforce structural typing using Python's `typing.Protocol` to ensure
consistency across modules while keeping the engine independent of the real filesystem.

Key Components:
---------------
- HashAlgorithm: Streaming digest factory (MD5, SHA-256, xxHash128).
- Hasher: Computes the whole-file content hash of a FileNode.
- FileSystem: Raw filesystem primitives consumed by discovery, hashing and relocation.
"""

from typing import Protocol, List, BinaryIO
from treededup.core.models import FileNode


# ===== Interfaces =====

class DigestState(Protocol):
    """Incremental digest object (hashlib / xxhash compatible)."""
    def update(self, data: bytes) -> None: ...
    def digest(self) -> bytes: ...


class HashAlgorithm(Protocol):
    """
    Interface for streaming hash algorithms.

    Allows plugging in different hashing functions like MD5, SHA-256 or xxHash
    without affecting the rest of the engine.
    """
    name: str
    digest_size: int

    def new(self) -> DigestState:
        """Returns a fresh incremental digest object."""
        ...


class Hasher(Protocol):
    """Interface for hashing the full content of a file."""
    def compute_full_hash(self, file: FileNode) -> bytes: ...


class FileSystem(Protocol):
    """
    Raw filesystem primitives.

    Enumeration methods may raise PermissionError / FileNotFoundError;
    callers decide whether that is fatal.
    """
    def list_subdirectories(self, directory: str) -> List[str]:
        """Names of the child directories of `directory` (symlinks excluded)."""
        ...

    def list_files(self, directory: str) -> List[str]:
        """Names of the regular files in `directory` (symlinks excluded)."""
        ...

    def open_for_read(self, path: str) -> BinaryIO: ...

    def move_file(self, source: str, destination: str) -> None: ...

    def make_dirs(self, path: str) -> None:
        """Create `path` and any missing parents; no-op if it exists."""
        ...

    def file_exists(self, path: str) -> bool: ...
