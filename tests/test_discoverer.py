"""
Unit tests for TreeDiscoverer: incremental discovery, exclusions,
unreadable folders and cancellation.
"""
import os
from treededup.core.discoverer import TreeDiscoverer
from treededup.core.path_tree import PathTree
from treededup.core.cancellation import CancellationToken
from treededup.services.file_service import FileService


class TestIncrementalDiscovery:
    """Only files unknown to the tree are yielded."""

    def test_first_pass_finds_every_file(self, sample_root):
        tree = PathTree(str(sample_root))
        discoverer = TreeDiscoverer(tree)

        found = sorted(PathTree.relative_path(f) for f in discoverer.discover())

        assert found == ["A", "C", os.path.join("sub", "B")]
        assert discoverer.discovered_file_count == 3
        assert tree.file_count() == 3

    def test_second_pass_finds_nothing(self, sample_root):
        tree = PathTree(str(sample_root))
        list(TreeDiscoverer(tree).discover())

        second = TreeDiscoverer(tree)
        assert list(second.discover()) == []
        assert second.discovered_file_count == 0
        assert tree.file_count() == 3

    def test_only_new_file_is_reported(self, sample_root):
        tree = PathTree(str(sample_root))
        list(TreeDiscoverer(tree).discover())
        (sample_root / "sub" / "D").write_bytes(b"new")

        found = [f.full_path for f in TreeDiscoverer(tree).discover()]
        assert found == [str(sample_root / "sub" / "D")]

    def test_file_system_receives_plain_string_paths(self, sample_root):
        listed = []

        class RecordingFileService(FileService):
            @staticmethod
            def list_files(directory):
                listed.append(directory)
                return FileService.list_files(directory)

        tree = PathTree(str(sample_root))
        found = [f.full_path for f in TreeDiscoverer(tree, file_system=RecordingFileService).discover()]

        assert all(type(d) is str for d in listed)
        assert sorted(listed) == sorted([str(sample_root), str(sample_root / "sub")])
        assert str(sample_root / "sub" / "B") in found

    def test_known_hash_is_preserved(self, sample_root):
        tree = PathTree(str(sample_root))
        tree.insert_file(tree.root, "A", b"\x01" * 16)

        found = [f.name for f in TreeDiscoverer(tree).discover()]

        assert "A" not in found
        assert tree.root.files["A"].hash == b"\x01" * 16

    def test_empty_directories_add_no_files(self, temp_dir):
        (temp_dir / "empty" / "deeper").mkdir(parents=True)
        tree = PathTree(str(temp_dir))
        assert list(TreeDiscoverer(tree).discover()) == []


class TestExclusions:
    """Excluded directories are never walked."""

    def test_destination_inside_root_is_skipped(self, sample_root):
        dest = sample_root / "dupes"
        dest.mkdir()
        (dest / "moved").write_bytes(b"hello")

        tree = PathTree(str(sample_root))
        found = [f.name for f in TreeDiscoverer(tree, excluded_dirs=[str(dest)]).discover()]

        assert "moved" not in found
        assert len(found) == 3

    def test_exclusion_does_not_match_prefix_sibling(self, sample_root):
        (sample_root / "subway").mkdir()
        (sample_root / "subway" / "train").write_bytes(b"x")

        tree = PathTree(str(sample_root))
        discoverer = TreeDiscoverer(tree, excluded_dirs=[str(sample_root / "sub")])
        found = [f.name for f in discoverer.discover()]

        assert "train" in found
        assert "B" not in found


class TestErrorHandling:
    """Unreadable folders are skipped with a warning; the walk carries on."""

    def test_permission_error_skips_folder(self, sample_root, caplog):
        locked = str(sample_root / "sub")

        class LockedFileService(FileService):
            @staticmethod
            def list_subdirectories(directory):
                if directory == locked:
                    raise PermissionError("denied")
                return FileService.list_subdirectories(directory)

        tree = PathTree(str(sample_root))
        discoverer = TreeDiscoverer(tree, file_system=LockedFileService)
        found = sorted(f.name for f in discoverer.discover())

        assert found == ["A", "C"]
        assert discoverer.skipped_directory_count == 1
        assert "Unable to enumerate folder" in caplog.text

    def test_vanished_folder_is_skipped(self, sample_root):
        class VanishingFileService(FileService):
            @staticmethod
            def list_files(directory):
                if directory.endswith("sub"):
                    raise FileNotFoundError(directory)
                return FileService.list_files(directory)

        tree = PathTree(str(sample_root))
        discoverer = TreeDiscoverer(tree, file_system=VanishingFileService)
        found = sorted(f.name for f in discoverer.discover())

        assert found == ["A", "C"]
        assert discoverer.skipped_directory_count == 1


class TestCancellation:
    """A stop request ends the walk but keeps what was already inserted."""

    def test_cancel_before_start_discovers_nothing(self, sample_root):
        token = CancellationToken()
        token.cancel()
        tree = PathTree(str(sample_root))

        assert list(TreeDiscoverer(tree).discover(stopped_flag=token)) == []
        assert tree.is_empty()

    def test_cancel_mid_walk_keeps_inserted_files(self, sample_root):
        token = CancellationToken()
        tree = PathTree(str(sample_root))

        found = []
        for node in TreeDiscoverer(tree).discover(stopped_flag=token.is_cancelled):
            found.append(node)
            token.cancel()

        assert len(found) == 1
        assert tree.file_count() == 1

        # Resuming picks up the remaining files only
        rest = list(TreeDiscoverer(tree).discover())
        assert len(rest) == 2
        assert tree.file_count() == 3
