"""
Core discovery engine: path tree, discoverer, hash index, hashing loop, checkpoints and relocation.

This package contains the resumable foundation of treededup:
- PathTree: in-memory mirror of a scanned directory tree
- TreeDiscoverer: breadth-first walk yielding only files the tree did not know
- HasherImpl + MD5/SHA256/XXHash128 algorithms: whole-file content hashing
- HashIndex: content hash → duplicate group classification
- HashingLoop: sequential hashing with periodic checkpoints
- Checkpointer: XML snapshot save/load
- DuplicateResolver: moves duplicates into a destination tree
- Models: DirectoryNode, FileNode, DuplicatesGroup and configuration objects

All components are pure Python with no UI dependencies.
"""

from .path_tree import PathTree
from .discoverer import TreeDiscoverer
from .hasher import HasherImpl, MD5AlgorithmImpl, SHA256AlgorithmImpl, XXHash128AlgorithmImpl, get_algorithm
from .hash_index import HashIndex
from .hashing import HashingLoop, HashingResult
from .checkpoint import Checkpointer, LoadedSnapshot
from .resolver import DuplicateResolver, ResolutionResult
from .cancellation import CancellationToken
from .models import (
    DirectoryNode, FileNode, DuplicatesGroup, Origin, HashAlgorithmKind,
    RunParams, RunReport, RunState)

__all__ = [
    "PathTree",
    "TreeDiscoverer",
    "HasherImpl",
    "MD5AlgorithmImpl",
    "SHA256AlgorithmImpl",
    "XXHash128AlgorithmImpl",
    "get_algorithm",
    "HashIndex",
    "HashingLoop",
    "HashingResult",
    "Checkpointer",
    "LoadedSnapshot",
    "DuplicateResolver",
    "ResolutionResult",
    "CancellationToken",
    "DirectoryNode",
    "FileNode",
    "DuplicatesGroup",
    "Origin",
    "HashAlgorithmKind",
    "RunParams",
    "RunReport",
    "RunState",
]
