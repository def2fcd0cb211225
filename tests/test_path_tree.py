"""
Unit tests for PathTree: path mapping, membership checks and traversal order.
"""
import os
import pytest
from treededup.core.path_tree import PathTree
from treededup.core.models import Origin


@pytest.fixture
def tree(temp_dir):
    return PathTree(str(temp_dir / "root"))


class TestPathMapping:
    """Absolute paths are mapped onto the forest relative to the root."""

    def test_ensure_directory_path_creates_missing_nodes(self, tree):
        node = tree.ensure_directory_path(os.path.join(tree.root_path, "a", "b"))
        assert node.name == "b"
        assert node.parent.name == "a"
        assert node.parent.parent is tree.root
        assert tree.root.directories["a"].directories["b"] is node

    def test_ensure_directory_path_is_idempotent(self, tree):
        path = os.path.join(tree.root_path, "a", "b")
        assert tree.ensure_directory_path(path) is tree.ensure_directory_path(path)

    def test_root_path_maps_to_forest_root(self, tree):
        assert tree.ensure_directory_path(tree.root_path) is tree.root

    def test_doubled_and_trailing_separators_are_ignored(self, tree):
        messy = tree.root_path + os.sep + "a" + os.sep + os.sep + "b" + os.sep
        node = tree.ensure_directory_path(messy)
        assert PathTree.directory_parts(node) == ["a", "b"]

    def test_path_outside_root_is_rejected(self, tree, temp_dir):
        with pytest.raises(ValueError):
            tree.ensure_directory_path(str(temp_dir / "elsewhere"))

    def test_sibling_with_common_prefix_is_rejected(self, tree, temp_dir):
        """'/x/root2' must not be treated as living under '/x/root'."""
        tree.insert_file(tree.root, "top.txt")
        with pytest.raises(ValueError):
            tree.contains(str(temp_dir / "root2" / "file.txt"))


class TestMembership:
    """contains() answers without creating nodes."""

    def test_empty_tree_contains_nothing(self, tree):
        assert not tree.contains(os.path.join(tree.root_path, "file.txt"))

    def test_inserted_file_is_contained(self, tree):
        directory = tree.ensure_directory_path(os.path.join(tree.root_path, "sub"))
        tree.insert_file(directory, "file.txt")
        assert tree.contains(os.path.join(tree.root_path, "sub", "file.txt"))
        assert not tree.contains(os.path.join(tree.root_path, "sub", "other.txt"))
        assert not tree.contains(os.path.join(tree.root_path, "file.txt"))

    def test_contains_does_not_create_nodes(self, tree):
        tree.insert_file(tree.root, "top.txt")
        assert not tree.contains(os.path.join(tree.root_path, "missing", "deeper", "file.txt"))
        assert "missing" not in tree.root.directories

    def test_root_itself_counts_as_contained(self, tree):
        tree.insert_file(tree.root, "top.txt")
        assert tree.contains(tree.root_path)

    def test_directory_is_not_a_file(self, tree):
        tree.ensure_directory_path(os.path.join(tree.root_path, "sub"))
        tree.insert_file(tree.root, "top.txt")
        assert not tree.contains(os.path.join(tree.root_path, "sub"))


class TestInsertion:
    """Files carry their full path, origin and optional hash."""

    def test_insert_builds_full_path_and_origin(self, temp_dir):
        tree = PathTree(str(temp_dir / "cands"), Origin.DUPLICATE_CANDIDATES)
        directory = tree.ensure_directory_path(os.path.join(tree.root_path, "x"))
        node = tree.insert_file(directory, "f.bin", b"\x01\x02")

        assert node.full_path == os.path.join(tree.root_path, "x", "f.bin")
        assert node.origin is Origin.DUPLICATE_CANDIDATES
        assert node.parent is directory
        assert node.hash_hex == "0102"

    def test_insert_replaces_existing_entry(self, tree):
        first = tree.insert_file(tree.root, "f")
        second = tree.insert_file(tree.root, "f", b"\xff")
        assert tree.root.files["f"] is second
        assert first is not second
        assert tree.file_count() == 1

    def test_relative_path(self, tree):
        directory = tree.ensure_directory_path(os.path.join(tree.root_path, "a", "b"))
        node = tree.insert_file(directory, "c.txt")
        assert PathTree.relative_path(node) == os.path.join("a", "b", "c.txt")


class TestTraversal:
    """iter_files() is deterministic: files of a folder before its subfolders, names sorted."""

    def test_iter_files_order(self, tree):
        join = os.path.join
        tree.insert_file(tree.ensure_directory_path(join(tree.root_path, "b")), "z")
        tree.insert_file(tree.ensure_directory_path(join(tree.root_path, "a")), "y")
        tree.insert_file(tree.root, "2")
        tree.insert_file(tree.root, "1")

        names = [PathTree.relative_path(f) for f in tree.iter_files()]
        assert names == ["1", "2", join("a", "y"), join("b", "z")]

    def test_empty_tree(self, tree):
        assert tree.is_empty()
        assert tree.file_count() == 0
        assert list(tree.iter_files()) == []
