"""
Unit tests for HasherImpl and the pluggable hash algorithms.
Verifies whole-file hashing and digest sizes.
"""
import pytest
from treededup.core.hasher import (
    HasherImpl, MD5AlgorithmImpl, SHA256AlgorithmImpl, XXHash128AlgorithmImpl,
    READ_BLOCK_SIZE, get_algorithm)
from treededup.core.models import HashAlgorithmKind
from treededup.core.path_tree import PathTree


def node_for(tree_root, name):
    tree = PathTree(str(tree_root))
    return tree.insert_file(tree.root, name)


class TestHasherImpl:
    """Whole-file digests with chunked reading."""

    def test_md5_of_known_content(self, sample_root):
        digest = HasherImpl(MD5AlgorithmImpl()).compute_full_hash(node_for(sample_root, "A"))
        assert digest.hex() == "5d41402abc4b2a76b9719d911017c592"

    def test_default_algorithm_is_md5(self, sample_root):
        hasher = HasherImpl()
        assert hasher.algorithm.name == "md5"
        assert len(hasher.compute_full_hash(node_for(sample_root, "A"))) == 16

    def test_identical_files_share_hash(self, sample_root):
        tree = PathTree(str(sample_root))
        a = tree.insert_file(tree.root, "A")
        b = tree.insert_file(tree.ensure_directory_path(str(sample_root / "sub")), "B")
        c = tree.insert_file(tree.root, "C")

        hasher = HasherImpl()
        assert hasher.compute_full_hash(a) == hasher.compute_full_hash(b)
        assert hasher.compute_full_hash(a) != hasher.compute_full_hash(c)

    def test_hasher_does_not_store_hash(self, sample_root):
        node = node_for(sample_root, "A")
        HasherImpl().compute_full_hash(node)
        assert node.hash is None

    def test_difference_after_first_block_is_detected(self, temp_dir):
        """Content differing only past the first read block must not collide."""
        head = b"X" * READ_BLOCK_SIZE
        (temp_dir / "one").write_bytes(head + b"1")
        (temp_dir / "two").write_bytes(head + b"2")

        hasher = HasherImpl(XXHash128AlgorithmImpl())
        assert hasher.compute_full_hash(node_for(temp_dir, "one")) != \
            hasher.compute_full_hash(node_for(temp_dir, "two"))

    def test_empty_file_has_a_hash(self, temp_dir):
        (temp_dir / "empty").write_bytes(b"")
        digest = HasherImpl().compute_full_hash(node_for(temp_dir, "empty"))
        assert digest.hex() == "d41d8cd98f00b204e9800998ecf8427e"

    def test_missing_file_raises(self, temp_dir):
        with pytest.raises(FileNotFoundError):
            HasherImpl().compute_full_hash(node_for(temp_dir, "missing"))


class TestAlgorithms:
    """Algorithm registry and digest sizes."""

    @pytest.mark.parametrize("kind, impl, size", [
        (HashAlgorithmKind.MD5, MD5AlgorithmImpl, 16),
        (HashAlgorithmKind.SHA256, SHA256AlgorithmImpl, 32),
        (HashAlgorithmKind.XXH128, XXHash128AlgorithmImpl, 16),
    ])
    def test_get_algorithm(self, kind, impl, size, sample_root):
        algorithm = get_algorithm(kind)
        assert isinstance(algorithm, impl)
        assert algorithm.name == kind.value
        assert algorithm.digest_size == size

        digest = HasherImpl(algorithm).compute_full_hash(node_for(sample_root, "A"))
        assert len(digest) == size

    def test_unknown_algorithm_rejected(self):
        with pytest.raises(ValueError):
            get_algorithm("crc32")
