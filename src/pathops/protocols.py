"""Protocol definitions for the filesystem capability.

The copy/move policy never touches ``os`` directly. It talks to one of these
interfaces instead, which enables:
- One policy shared by the blocking and the suspending call conventions
- Easy substitution of test doubles
- Clear contracts for implementations

All concrete implementations satisfy these protocols structurally (duck typing).
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, Union, runtime_checkable

if TYPE_CHECKING:
    from pathops.options import GlobOptions
    from pathops.types import PathStat

# Data accepted by write_file
FileData = Union[str, bytes]


@runtime_checkable
class FileSystem(Protocol):
    """Protocol for blocking filesystem operations.

    Each method maps to one host filesystem call (or one primitive such as a
    recursive mkdir). Host errors propagate as OSError.
    """

    def stat(self, path: str, follow_symlinks: bool = True) -> PathStat:
        """Snapshot a path.

        Args:
            path: Path to inspect.
            follow_symlinks: Report the link target instead of the link.

        Returns:
            Fresh PathStat.

        Raises:
            FileNotFoundError: If the path does not exist.
        """
        ...

    def readlink(self, path: str) -> str:
        """Return the target of a symbolic link.

        Raises:
            OSError: EINVAL if the path is not a link.
        """
        ...

    def symlink(self, target: str, path: str) -> None:
        """Create a symbolic link at path pointing to target."""
        ...

    def unlink(self, path: str) -> None:
        """Remove a file or link."""
        ...

    def copy_file(self, src: str, dest: str, flags: int = 0) -> None:
        """Copy file content byte for byte.

        Args:
            src: Source file.
            dest: Destination file.
            flags: COPYFILE_* flags from pathops.options.
        """
        ...

    def chmod(self, path: str, mode: int) -> None:
        """Set permission bits."""
        ...

    def utime(self, path: str, atime_ns: int, mtime_ns: int) -> None:
        """Set access and modification times."""
        ...

    def listdir(self, path: str) -> list[str]:
        """List entry names in native enumeration order."""
        ...

    def make_dir(self, path: str, mode: int = ...) -> None:
        """Create a directory and its parents; no-op if it exists."""
        ...

    def rename(self, src: str, dest: str) -> None:
        """Atomically rename src to dest.

        Raises:
            OSError: EXDEV when src and dest are on different devices.
        """
        ...

    def exists(self, path: str) -> bool:
        """Check whether a path resolves to anything."""
        ...

    def remove(self, path: str, recursive: bool = True, force: bool = True) -> None:
        """Remove a file or directory tree.

        Args:
            path: Path to remove.
            recursive: Allow removing directories.
            force: Ignore a missing path.
        """
        ...

    def write_file(self, path: str, data: FileData, encoding: str = "utf-8") -> None:
        """Write data to a file, replacing its content."""
        ...

    def glob(self, pattern: str, options: GlobOptions) -> list[str]:
        """Expand a glob pattern into concrete paths."""
        ...


@runtime_checkable
class AsyncFileSystem(Protocol):
    """Protocol for suspending filesystem operations.

    Same contract as FileSystem, but every call is a coroutine.
    """

    async def stat(self, path: str, follow_symlinks: bool = True) -> PathStat:
        ...

    async def readlink(self, path: str) -> str:
        ...

    async def symlink(self, target: str, path: str) -> None:
        ...

    async def unlink(self, path: str) -> None:
        ...

    async def copy_file(self, src: str, dest: str, flags: int = 0) -> None:
        ...

    async def chmod(self, path: str, mode: int) -> None:
        ...

    async def utime(self, path: str, atime_ns: int, mtime_ns: int) -> None:
        ...

    async def listdir(self, path: str) -> list[str]:
        ...

    async def make_dir(self, path: str, mode: int = ...) -> None:
        ...

    async def rename(self, src: str, dest: str) -> None:
        ...

    async def exists(self, path: str) -> bool:
        ...

    async def remove(self, path: str, recursive: bool = True, force: bool = True) -> None:
        ...

    async def write_file(self, path: str, data: FileData, encoding: str = "utf-8") -> None:
        ...

    async def glob(self, pattern: str, options: GlobOptions) -> list[str]:
        ...
