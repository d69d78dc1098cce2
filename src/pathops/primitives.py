"""Directory creation, existence checks, removal and file output.

Async variants remove several paths concurrently; everything else runs one
call at a time in both modes.
"""

from __future__ import annotations

import asyncio
import logging
import os
from typing import TYPE_CHECKING, Any, Iterable, Union

from pathops.filesystem import AsyncRealFileSystem, RealFileSystem
from pathops.options import DEFAULT_DIR_MODE, GlobOptions, RemoveOptions, WriteOptions
from pathops.runner import Plan, Syscall, run_async, run_sync
from pathops.types import StrPath

if TYPE_CHECKING:
    from pathops.protocols import AsyncFileSystem, FileData, FileSystem

logger = logging.getLogger(__name__)

PathOrPaths = Union[StrPath, Iterable[StrPath]]


def _as_list(paths: PathOrPaths) -> list[str]:
    if isinstance(paths, (str, os.PathLike)):
        return [os.fspath(paths)]
    return [os.fspath(path) for path in paths]


# ============================================================================
# Plans
# ============================================================================


def plan_expand_globs(patterns: list[str], options: GlobOptions) -> Plan[list[str]]:
    """Plan: expand patterns, keeping first-seen order without duplicates."""
    matches: dict[str, None] = {}
    for pattern in patterns:
        for match in (yield Syscall("glob", pattern, options)):
            matches.setdefault(match, None)
    return list(matches)


def _removal_targets(paths: list[str], options: RemoveOptions) -> Plan[list[str]]:
    glob_options = options.glob_options
    if glob_options is None:
        return paths
    return (yield from plan_expand_globs(paths, glob_options))


def plan_remove(paths: list[str], options: RemoveOptions) -> Plan[None]:
    """Plan: remove every path (or glob match) in order."""
    targets = yield from _removal_targets(paths, options)
    for target in targets:
        yield Syscall("remove", target, options.recursive, options.force)


def _list_children(path: str) -> Plan[list[str]]:
    try:
        names = yield Syscall("listdir", path)
    except FileNotFoundError:
        logger.debug("Creating missing directory '%s'", path)
        yield Syscall("make_dir", path)
        return []
    return [os.path.join(path, name) for name in names]


def plan_empty_dir(path: str) -> Plan[None]:
    """Plan: create path if missing, otherwise remove its children."""
    children = yield from _list_children(path)
    for child in children:
        yield Syscall("remove", child, True, True)


def plan_output_file(path: str, data: FileData, options: WriteOptions) -> Plan[None]:
    """Plan: create the parent directory if needed, then write the file."""
    parent = os.path.dirname(os.path.abspath(path))
    if not (yield Syscall("exists", parent)):
        yield Syscall("make_dir", parent)
    yield Syscall("write_file", path, data, options.encoding)


# ============================================================================
# Blocking API
# ============================================================================


def make_dir(path: StrPath, mode: int = DEFAULT_DIR_MODE, *, fs: FileSystem | None = None) -> None:
    """Create a directory and any missing parents. No-op if it exists.

    Raises:
        OSError: EINVAL on Windows if the path holds invalid characters.
    """
    (fs or RealFileSystem()).make_dir(os.fspath(path), mode)


def exists(path: StrPath, *, fs: FileSystem | None = None) -> bool:
    """Return True if path resolves to anything (symlinks are followed)."""
    return (fs or RealFileSystem()).exists(os.fspath(path))


def expand_globs(
    patterns: PathOrPaths,
    options: GlobOptions | dict[str, Any] | None = None,
    *,
    fs: FileSystem | None = None,
) -> list[str]:
    """Expand glob patterns (``**`` recurses) into concrete paths."""
    opts = GlobOptions.coerce(options)
    return run_sync(plan_expand_globs(_as_list(patterns), opts), fs or RealFileSystem())


def remove(
    paths: PathOrPaths,
    options: RemoveOptions | dict[str, Any] | None = None,
    *,
    fs: FileSystem | None = None,
) -> None:
    """Remove files or directory trees.

    Args:
        paths: One path or several; glob patterns when options.glob is set.
        options: RemoveOptions, a dict of option values, or None for defaults.
        fs: Filesystem to operate on. Defaults to the host filesystem.

    Raises:
        FileNotFoundError: If a path is missing and force is off.
        IsADirectoryError: If a path is a directory and recursive is off.
    """
    opts = RemoveOptions.coerce(options)
    run_sync(plan_remove(_as_list(paths), opts), fs or RealFileSystem())


def empty_dir(path: StrPath, *, fs: FileSystem | None = None) -> None:
    """Make sure path is an empty directory.

    A missing directory is created. An existing one keeps its own attributes;
    only its children are removed.
    """
    run_sync(plan_empty_dir(os.fspath(path)), fs or RealFileSystem())


def output_file(
    path: StrPath,
    data: FileData,
    options: WriteOptions | dict[str, Any] | None = None,
    *,
    fs: FileSystem | None = None,
) -> None:
    """Write data to path, creating parent directories as needed."""
    opts = WriteOptions.coerce(options)
    run_sync(plan_output_file(os.fspath(path), data, opts), fs or RealFileSystem())


# ============================================================================
# Async API
# ============================================================================


async def make_dir_async(
    path: StrPath, mode: int = DEFAULT_DIR_MODE, *, fs: AsyncFileSystem | None = None
) -> None:
    """Async variant of make_dir."""
    await (fs or AsyncRealFileSystem()).make_dir(os.fspath(path), mode)


async def exists_async(path: StrPath, *, fs: AsyncFileSystem | None = None) -> bool:
    """Async variant of exists."""
    return await (fs or AsyncRealFileSystem()).exists(os.fspath(path))


async def remove_async(
    paths: PathOrPaths,
    options: RemoveOptions | dict[str, Any] | None = None,
    *,
    fs: AsyncFileSystem | None = None,
) -> None:
    """Async variant of remove. Paths are removed concurrently."""
    opts = RemoveOptions.coerce(options)
    afs = fs or AsyncRealFileSystem()
    targets = await run_async(_removal_targets(_as_list(paths), opts), afs)
    await asyncio.gather(*(afs.remove(target, opts.recursive, opts.force) for target in targets))


async def empty_dir_async(path: StrPath, *, fs: AsyncFileSystem | None = None) -> None:
    """Async variant of empty_dir. Children are removed concurrently."""
    afs = fs or AsyncRealFileSystem()
    children = await run_async(_list_children(os.fspath(path)), afs)
    await asyncio.gather(*(afs.remove(child, True, True) for child in children))


async def output_file_async(
    path: StrPath,
    data: FileData,
    options: WriteOptions | dict[str, Any] | None = None,
    *,
    fs: AsyncFileSystem | None = None,
) -> None:
    """Async variant of output_file."""
    opts = WriteOptions.coerce(options)
    await run_async(plan_output_file(os.fspath(path), data, opts), fs or AsyncRealFileSystem())
