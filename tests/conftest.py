"""
Shared fixtures for discovery engine tests.
Creates isolated temporary directories with controlled test files.
"""
import pytest
import tempfile
from pathlib import Path
from typing import Dict
import sys

# Add src/ to sys.path so the 'treededup' package is importable without installing
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root / "src"))


@pytest.fixture
def temp_dir():
    """Creates isolated temporary directory, auto-cleanup after test."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def sample_root(temp_dir) -> Path:
    """
    Root directory with three files:
    - root/A and root/sub/B hold "hello" (one duplicate pair)
    - root/C holds "world" (unique)
    """
    root = temp_dir / "root"
    (root / "sub").mkdir(parents=True)
    (root / "A").write_bytes(b"hello")
    (root / "sub" / "B").write_bytes(b"hello")
    (root / "C").write_bytes(b"world")
    return root


@pytest.fixture
def two_roots(temp_dir) -> Dict[str, Path]:
    """
    Originals and duplicate-candidate trees:
    - originals/photo.jpg and candidates/photo.jpg are identical
    - originals/copy.jpg duplicates originals/photo.jpg
    - candidates/new.jpg is unique
    """
    originals = temp_dir / "originals"
    candidates = temp_dir / "candidates"
    originals.mkdir()
    (candidates / "2024").mkdir(parents=True)
    (originals / "photo.jpg").write_bytes(b"P" * 2048)
    (originals / "copy.jpg").write_bytes(b"P" * 2048)
    (candidates / "2024" / "photo.jpg").write_bytes(b"P" * 2048)
    (candidates / "new.jpg").write_bytes(b"N" * 1024)
    return {"originals": originals, "candidates": candidates, "destination": temp_dir / "dupes"}


@pytest.fixture(autouse=True)
def _restore_root_log_level():
    """CLI runs adjust the root logger level; restore it so caplog works in later tests."""
    import logging
    root_logger = logging.getLogger()
    level = root_logger.level
    yield
    root_logger.setLevel(level)
