"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

hasher.py
Implements whole-file content hashing with pluggable hash algorithms.

HasherImpl streams a file's entire content through the configured digest in
fixed-size reads. Content hashes are never partial: two files share a hash
only if every byte matched.
"""

import hashlib
from typing import Dict, Optional

import xxhash

from treededup.core.models import FileNode, HashAlgorithmKind
from treededup.core.interfaces import Hasher, HashAlgorithm, DigestState, FileSystem
from treededup.services.file_service import FileService

READ_BLOCK_SIZE = 1024 * 1024


# Use the same way to implement and use any other hashing algorithm
class MD5AlgorithmImpl(HashAlgorithm):
    name = HashAlgorithmKind.MD5.value
    digest_size = 16

    def new(self) -> DigestState:
        return hashlib.md5()


class SHA256AlgorithmImpl(HashAlgorithm):
    name = HashAlgorithmKind.SHA256.value
    digest_size = 32

    def new(self) -> DigestState:
        return hashlib.sha256()


class XXHash128AlgorithmImpl(HashAlgorithm):
    name = HashAlgorithmKind.XXH128.value
    digest_size = 16

    def new(self) -> DigestState:
        return xxhash.xxh3_128()


_ALGORITHMS: Dict[HashAlgorithmKind, type] = {
    HashAlgorithmKind.MD5: MD5AlgorithmImpl,
    HashAlgorithmKind.SHA256: SHA256AlgorithmImpl,
    HashAlgorithmKind.XXH128: XXHash128AlgorithmImpl,
}


def get_algorithm(kind: HashAlgorithmKind) -> HashAlgorithm:
    """Returns the algorithm implementation for `kind`."""
    try:
        return _ALGORITHMS[kind]()
    except KeyError:
        raise ValueError(f"Unsupported hash algorithm: {kind}") from None


class HasherImpl(Hasher):
    """
    A hasher implementation that supports any algorithm via the HashAlgorithm interface.
    Does not store the result on the FileNode; the hashing loop owns that step.
    """

    def __init__(self, algorithm: Optional[HashAlgorithm] = None, file_system: Optional[FileSystem] = None):
        self.algorithm = algorithm or MD5AlgorithmImpl()
        self.file_system = file_system or FileService

    def compute_full_hash(self, file: FileNode) -> bytes:
        """
        Streams the whole file through the digest.
        I/O errors (PermissionError, FileNotFoundError, OSError) propagate to the caller.
        """
        digest = self.algorithm.new()
        with self.file_system.open_for_read(file.full_path) as f:
            while True:
                block = f.read(READ_BLOCK_SIZE)
                if not block:
                    break
                digest.update(block)
        return digest.digest()
