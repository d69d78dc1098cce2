"""Filesystem implementations backed by the host OS.

RealFileSystem wraps ``os``, ``shutil`` and ``glob`` calls one to one.
AsyncRealFileSystem runs the same calls in a worker thread so each one
becomes a suspension point for the caller's event loop.
Both satisfy the protocols in pathops.protocols structurally.
"""

from __future__ import annotations

import asyncio
import errno
import glob
import logging
import ntpath
import os
import re
import shutil
import stat
import sys

from pathops.options import COPYFILE_EXCL, DEFAULT_DIR_MODE, GlobOptions
from pathops.protocols import FileData
from pathops.types import PathStat

logger = logging.getLogger(__name__)

_INVALID_WIN_CHARS = re.compile(r'[<>:"|?*]')


def check_path(path: str) -> None:
    """Reject characters Windows does not allow in path names.

    The drive or UNC root is excluded from the check, so ``C:\\`` is fine.
    No-op on other platforms.

    Raises:
        OSError: EINVAL if the path contains invalid characters.
    """
    if sys.platform != "win32":
        return
    _, rest = ntpath.splitdrive(path)
    if _INVALID_WIN_CHARS.search(rest):
        raise OSError(errno.EINVAL, f"Path contains invalid characters: {path}")


def _ignore_missing(function, path, exc) -> None:
    """rmtree error handler that skips entries already gone."""
    if not isinstance(exc, FileNotFoundError):
        raise exc


class RealFileSystem:
    """Production filesystem implementation.

    Wraps standard library os, shutil and glob operations.
    Satisfies the FileSystem protocol structurally.
    """

    def stat(self, path: str, follow_symlinks: bool = True) -> PathStat:
        """Snapshot a path."""
        return PathStat.from_stat_result(os.stat(path, follow_symlinks=follow_symlinks))

    def readlink(self, path: str) -> str:
        """Return the target of a symbolic link."""
        return os.readlink(path)

    def symlink(self, target: str, path: str) -> None:
        """Create a symbolic link."""
        # only meaningful on Windows, where directory links differ from file links
        target_is_directory = os.path.isdir(os.path.join(os.path.dirname(path), target))
        os.symlink(target, path, target_is_directory=target_is_directory)

    def unlink(self, path: str) -> None:
        """Remove a file or link."""
        os.unlink(path)

    def copy_file(self, src: str, dest: str, flags: int = 0) -> None:
        """Copy file content byte for byte.

        COPYFILE_EXCL fails if dest exists. Copy-on-write is never forced, so
        COPYFILE_FICLONE behaves like a plain copy.
        """
        if flags & COPYFILE_EXCL and os.path.lexists(dest):
            raise FileExistsError(errno.EEXIST, os.strerror(errno.EEXIST), dest)
        shutil.copyfile(src, dest)

    def chmod(self, path: str, mode: int) -> None:
        """Set permission bits."""
        os.chmod(path, mode)

    def utime(self, path: str, atime_ns: int, mtime_ns: int) -> None:
        """Set access and modification times."""
        os.utime(path, ns=(atime_ns, mtime_ns))

    def listdir(self, path: str) -> list[str]:
        """List entry names in native enumeration order."""
        return os.listdir(path)

    def make_dir(self, path: str, mode: int = DEFAULT_DIR_MODE) -> None:
        """Create a directory and its parents; no-op if it exists."""
        check_path(path)
        os.makedirs(path, mode=mode, exist_ok=True)

    def rename(self, src: str, dest: str) -> None:
        """Rename src to dest."""
        os.rename(src, dest)

    def exists(self, path: str) -> bool:
        """Check whether a path resolves to anything (follows symlinks)."""
        try:
            os.stat(path)
        except FileNotFoundError:
            return False
        return True

    def remove(self, path: str, recursive: bool = True, force: bool = True) -> None:
        """Remove a file or directory tree."""
        try:
            mode = os.lstat(path).st_mode
        except FileNotFoundError:
            if force:
                return
            raise
        if stat.S_ISDIR(mode):
            if not recursive:
                raise IsADirectoryError(errno.EISDIR, os.strerror(errno.EISDIR), path)
            shutil.rmtree(path, onexc=_ignore_missing if force else None)
            return
        try:
            os.unlink(path)
        except FileNotFoundError:
            # removed by someone else since the lstat
            if not force:
                raise

    def write_file(self, path: str, data: FileData, encoding: str = "utf-8") -> None:
        """Write data to a file, replacing its content."""
        if isinstance(data, str):
            with open(path, "w", encoding=encoding, newline="") as f:
                f.write(data)
        else:
            with open(path, "wb") as f:
                f.write(data)

    def glob(self, pattern: str, options: GlobOptions) -> list[str]:
        """Expand a glob pattern into concrete paths."""
        matches = glob.glob(
            pattern,
            root_dir=options.cwd,
            recursive=True,
            include_hidden=options.dot,
        )
        if options.cwd is not None:
            matches = [os.path.join(options.cwd, match) for match in matches]
        if options.only_files:
            matches = [match for match in matches if os.path.isfile(match)]
        logger.debug("Pattern '%s' matched %d path(s)", pattern, len(matches))
        return matches


class AsyncRealFileSystem:
    """Production suspending filesystem implementation.

    Each call runs the matching RealFileSystem method in a worker thread.
    Satisfies the AsyncFileSystem protocol structurally.
    """

    def __init__(self, filesystem: RealFileSystem | None = None) -> None:
        """Initialize the async wrapper.

        Args:
            filesystem: Blocking implementation to delegate to.
        """
        self._fs = filesystem or RealFileSystem()

    async def stat(self, path: str, follow_symlinks: bool = True) -> PathStat:
        return await asyncio.to_thread(self._fs.stat, path, follow_symlinks)

    async def readlink(self, path: str) -> str:
        return await asyncio.to_thread(self._fs.readlink, path)

    async def symlink(self, target: str, path: str) -> None:
        await asyncio.to_thread(self._fs.symlink, target, path)

    async def unlink(self, path: str) -> None:
        await asyncio.to_thread(self._fs.unlink, path)

    async def copy_file(self, src: str, dest: str, flags: int = 0) -> None:
        await asyncio.to_thread(self._fs.copy_file, src, dest, flags)

    async def chmod(self, path: str, mode: int) -> None:
        await asyncio.to_thread(self._fs.chmod, path, mode)

    async def utime(self, path: str, atime_ns: int, mtime_ns: int) -> None:
        await asyncio.to_thread(self._fs.utime, path, atime_ns, mtime_ns)

    async def listdir(self, path: str) -> list[str]:
        return await asyncio.to_thread(self._fs.listdir, path)

    async def make_dir(self, path: str, mode: int = DEFAULT_DIR_MODE) -> None:
        await asyncio.to_thread(self._fs.make_dir, path, mode)

    async def rename(self, src: str, dest: str) -> None:
        await asyncio.to_thread(self._fs.rename, src, dest)

    async def exists(self, path: str) -> bool:
        return await asyncio.to_thread(self._fs.exists, path)

    async def remove(self, path: str, recursive: bool = True, force: bool = True) -> None:
        await asyncio.to_thread(self._fs.remove, path, recursive, force)

    async def write_file(self, path: str, data: FileData, encoding: str = "utf-8") -> None:
        await asyncio.to_thread(self._fs.write_file, path, data, encoding)

    async def glob(self, pattern: str, options: GlobOptions) -> list[str]:
        return await asyncio.to_thread(self._fs.glob, pattern, options)
