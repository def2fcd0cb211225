"""
treededup: resumable duplicate file finder.

Core features:
- Incremental discovery: only files missing from the saved state are processed
- Whole-file content hashing (MD5 by default, SHA-256 or xxHash128 on request)
- Periodic XML checkpoints so interrupted runs resume where they stopped
- Optional relocation of duplicates into a mirrored destination tree
- CLI interface for headless/server usage
"""

# Get version
try:
    from importlib.metadata import version as _version
    __version__ = _version("treededup")
except Exception:
    try:
        import tomllib  # Python 3.11+
    except ImportError:
        import tomli as tomllib  # Python < 3.11: pip install tomli
    from pathlib import Path as _Path

    with open(_Path(__file__).resolve().parents[2] / "pyproject.toml", "rb") as f:
        __version__ = tomllib.load(f)["project"]["version"]

# Public API: only what users should import directly
from treededup.commands import DeduplicationCommand
from treededup.core import (
    RunParams, RunReport, RunState, HashAlgorithmKind, Origin,
    DuplicatesGroup, FileNode, CancellationToken)
from treededup.services.file_service import FileService

__all__ = [
    "DeduplicationCommand",
    "RunParams",
    "RunReport",
    "RunState",
    "HashAlgorithmKind",
    "Origin",
    "DuplicatesGroup",
    "FileNode",
    "CancellationToken",
    "FileService",
    "__version__",
]
