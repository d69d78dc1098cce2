"""Shared test fixtures."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Callable
from unittest.mock import MagicMock

import pytest

from pathops.filesystem import AsyncRealFileSystem, RealFileSystem
from pathops.types import FileType, PathStat


@pytest.fixture
def fs() -> RealFileSystem:
    """Blocking host filesystem."""
    return RealFileSystem()


@pytest.fixture
def async_fs() -> AsyncRealFileSystem:
    """Suspending host filesystem."""
    return AsyncRealFileSystem()


# ============================================================================
# Mock FileSystem Fixture
# ============================================================================


@pytest.fixture
def mock_filesystem() -> MagicMock:
    """Create a mock FileSystem for testing.

    The mock records every call without touching real files.
    """
    filesystem = MagicMock()
    filesystem.exists.return_value = False
    filesystem.listdir.return_value = []
    return filesystem


def make_stat(
    ino: int = 1,
    dev: int = 1,
    file_type: FileType = FileType.REGULAR,
    mode: int = 0o644,
) -> PathStat:
    """Build a PathStat for mock filesystems."""
    return PathStat(
        dev=dev,
        ino=ino,
        file_type=file_type,
        mode=mode,
        size=0,
        atime_ns=0,
        mtime_ns=0,
        ctime_ns=0,
    )


# ============================================================================
# Tree Fixtures
# ============================================================================


TreeBuilder = Callable[[Path, dict], Path]


def _build(root: Path, layout: dict) -> Path:
    """Create files (str/bytes values) and directories (dict values) under root."""
    root.mkdir(parents=True, exist_ok=True)
    for name, value in layout.items():
        path = root / name
        if isinstance(value, dict):
            _build(path, value)
        elif isinstance(value, bytes):
            path.write_bytes(value)
        else:
            path.write_text(value)
    return root


@pytest.fixture
def build_tree() -> TreeBuilder:
    """Return a helper that materializes a nested dict as a directory tree."""
    return _build


@pytest.fixture
def sample_tree(tmp_path: Path) -> Path:
    """Directory tree with mixed permission bits."""
    root = _build(
        tmp_path / "src",
        {
            "a.txt": "alpha",
            "sub": {
                "b.txt": "beta",
                "deep": {"c.bin": b"\x00\x01\x02gamma"},
            },
            "empty": {},
        },
    )
    os.chmod(root / "a.txt", 0o644)
    os.chmod(root / "sub" / "b.txt", 0o600)
    os.chmod(root / "sub" / "deep" / "c.bin", 0o755)
    os.chmod(root / "sub", 0o750)
    return root


def snapshot_tree(root: Path) -> dict[str, tuple[str, bytes | None, int]]:
    """Map each relative path under root to (kind, content, permission bits)."""
    result: dict[str, tuple[str, bytes | None, int]] = {}
    for dirpath, dirnames, filenames in os.walk(root):
        for name in dirnames + filenames:
            path = Path(dirpath) / name
            rel = path.relative_to(root).as_posix()
            st = path.lstat()
            if path.is_symlink():
                result[rel] = ("link", os.readlink(path).encode(), 0)
            elif path.is_dir():
                result[rel] = ("dir", None, st.st_mode & 0o7777)
            else:
                result[rel] = ("file", path.read_bytes(), st.st_mode & 0o7777)
    return result
