"""Shared data types for pathops."""

from __future__ import annotations

import os
import stat
from dataclasses import dataclass
from enum import Enum
from typing import Union

__all__ = ["CheckResult", "FileType", "PathStat", "StrPath"]

# Path arguments accepted by the public API
StrPath = Union[str, "os.PathLike[str]"]


class FileType(str, Enum):
    """Classification of a filesystem entry."""

    REGULAR = "regular"
    DIRECTORY = "directory"
    SYMLINK = "symlink"
    CHAR_DEVICE = "char_device"
    BLOCK_DEVICE = "block_device"
    SOCKET = "socket"
    FIFO = "fifo"
    UNKNOWN = "unknown"

    @classmethod
    def from_mode(cls, mode: int) -> FileType:
        """Classify an ``st_mode`` value."""
        if stat.S_ISDIR(mode):
            return cls.DIRECTORY
        if stat.S_ISREG(mode):
            return cls.REGULAR
        if stat.S_ISLNK(mode):
            return cls.SYMLINK
        if stat.S_ISCHR(mode):
            return cls.CHAR_DEVICE
        if stat.S_ISBLK(mode):
            return cls.BLOCK_DEVICE
        if stat.S_ISSOCK(mode):
            return cls.SOCKET
        if stat.S_ISFIFO(mode):
            return cls.FIFO
        return cls.UNKNOWN


@dataclass(frozen=True)
class PathStat:
    """Snapshot of a filesystem entry.

    Snapshots are taken fresh for every logical step and never reused across
    steps: inode and timestamp values can change between two checks.

    Attributes:
        dev: Device id.
        ino: Inode number.
        file_type: Entry classification.
        mode: Permission bits only (``stat.S_IMODE``).
        size: Size in bytes.
        atime_ns: Access time in nanoseconds.
        mtime_ns: Modification time in nanoseconds.
        ctime_ns: Change time in nanoseconds.
    """

    dev: int
    ino: int
    file_type: FileType
    mode: int
    size: int
    atime_ns: int
    mtime_ns: int
    ctime_ns: int

    @classmethod
    def from_stat_result(cls, result: os.stat_result) -> PathStat:
        """Build a snapshot from ``os.stat``/``os.lstat`` output."""
        return cls(
            dev=result.st_dev,
            ino=result.st_ino,
            file_type=FileType.from_mode(result.st_mode),
            mode=stat.S_IMODE(result.st_mode),
            size=result.st_size,
            atime_ns=result.st_atime_ns,
            mtime_ns=result.st_mtime_ns,
            ctime_ns=result.st_ctime_ns,
        )

    @property
    def is_dir(self) -> bool:
        return self.file_type is FileType.DIRECTORY

    @property
    def is_symlink(self) -> bool:
        return self.file_type is FileType.SYMLINK


@dataclass(frozen=True)
class CheckResult:
    """Outcome of validating a source/destination pair.

    Attributes:
        src_stat: Source snapshot (None only when skipped).
        dest_stat: Destination snapshot, None when the destination is absent.
        skipped: True if the filter rejected the pair before any I/O.
        is_changing_case: True for a move that only changes letter case.
    """

    src_stat: PathStat | None = None
    dest_stat: PathStat | None = None
    skipped: bool = False
    is_changing_case: bool = False

    def __post_init__(self) -> None:
        """Validate invariants."""
        if not self.skipped and self.src_stat is None:
            raise ValueError("src_stat is required unless the pair was skipped")
