"""Recursive copy engine.

Directories are copied with merge semantics: copying onto an existing
directory adds and overwrites entries according to the options but never
deletes unrelated entries already present in the destination.
"""

from __future__ import annotations

import errno
import logging
import os
import stat
from typing import TYPE_CHECKING, Any

from pathops.checks import check_parent_paths, check_paths, is_src_subdir
from pathops.errors import (
    AlreadyExistsError,
    SelfSubdirectoryError,
    SourceIsDirectoryError,
    UnsupportedFileTypeError,
    WouldBreakSourceError,
)
from pathops.filesystem import AsyncRealFileSystem, RealFileSystem
from pathops.options import CopyOptions
from pathops.runner import Plan, Syscall, run_async, run_sync
from pathops.types import FileType, PathStat, StrPath

if TYPE_CHECKING:
    from pathops.protocols import AsyncFileSystem, FileSystem

logger = logging.getLogger(__name__)

# Windows reports ERROR_NOT_A_REPARSE_POINT when reading a regular file as a link
_WIN_NOT_A_REPARSE_POINT = 4390

_FILE_LIKE = frozenset({FileType.REGULAR, FileType.CHAR_DEVICE, FileType.BLOCK_DEVICE})


def _is_not_a_link_error(error: OSError) -> bool:
    return error.errno == errno.EINVAL or getattr(error, "winerror", None) == _WIN_NOT_A_REPARSE_POINT


def _resolve_target(link: str, target: str) -> str:
    if os.path.isabs(target):
        return target
    return os.path.abspath(os.path.join(os.path.dirname(link), target))


def _copy_dir(src: str, dest: str, options: CopyOptions) -> Plan[None]:
    names = yield Syscall("listdir", src)
    for name in names:
        src_item = os.path.join(src, name)
        dest_item = os.path.join(dest, name)
        result = yield from check_paths(
            src_item, dest_item, "copy", options.filter, options.dereference
        )
        if not result.skipped:
            yield from _dispatch(result.dest_stat, src_item, dest_item, options)


def _on_dir(
    src_stat: PathStat,
    dest_stat: PathStat | None,
    src: str,
    dest: str,
    options: CopyOptions,
) -> Plan[None]:
    if dest_stat is not None:
        yield from _copy_dir(src, dest, options)
        return
    yield Syscall("make_dir", dest)
    yield from _copy_dir(src, dest, options)
    yield Syscall("chmod", dest, src_stat.mode)


def _copy_file(src_stat: PathStat, src: str, dest: str, options: CopyOptions) -> Plan[None]:
    yield Syscall("copy_file", src, dest, options.mode)
    if options.preserve_timestamps:
        # utime needs a writable destination
        if not src_stat.mode & stat.S_IWUSR:
            yield Syscall("chmod", dest, src_stat.mode | stat.S_IWUSR)
        # reading the source for the copy has just updated its atime
        updated = yield Syscall("stat", src, True)
        yield Syscall("utime", dest, updated.atime_ns, updated.mtime_ns)
    yield Syscall("chmod", dest, src_stat.mode)


def _on_file(
    src_stat: PathStat,
    dest_stat: PathStat | None,
    src: str,
    dest: str,
    options: CopyOptions,
) -> Plan[None]:
    if dest_stat is None:
        yield from _copy_file(src_stat, src, dest, options)
    elif options.force:
        yield Syscall("unlink", dest)
        yield from _copy_file(src_stat, src, dest, options)
    elif options.error_on_exist:
        raise AlreadyExistsError(dest)
    else:
        logger.debug("Skipping existing file '%s'", dest)


def _replace_link(target: str, dest: str) -> Plan[None]:
    yield Syscall("unlink", dest)
    yield Syscall("symlink", target, dest)


def _on_link(dest_stat: PathStat | None, src: str, dest: str, options: CopyOptions) -> Plan[None]:
    resolved_src = yield Syscall("readlink", src)
    if not options.verbatim_symlinks:
        resolved_src = _resolve_target(src, resolved_src)

    if dest_stat is None:
        yield Syscall("symlink", resolved_src, dest)
        return

    try:
        resolved_dest = yield Syscall("readlink", dest)
    except OSError as e:
        if not _is_not_a_link_error(e):
            raise
        logger.debug("Replacing non-link '%s' with a link to '%s'", dest, resolved_src)
        yield from _replace_link(resolved_src, dest)
        return
    resolved_dest = _resolve_target(dest, resolved_dest)

    # equal targets only refresh the link; a path is not its own ancestor
    if resolved_src != resolved_dest:
        if is_src_subdir(resolved_src, resolved_dest):
            raise SelfSubdirectoryError(resolved_src, resolved_dest, "copy")
        # unlinking dest would delete what the source link points into
        try:
            dest_target = yield Syscall("stat", dest, True)
        except FileNotFoundError:
            dest_target = None
        if dest_target is not None and dest_target.is_dir and is_src_subdir(resolved_dest, resolved_src):
            raise WouldBreakSourceError(resolved_src, resolved_dest)

    yield from _replace_link(resolved_src, dest)


def _dispatch(dest_stat: PathStat | None, src: str, dest: str, options: CopyOptions) -> Plan[None]:
    """Route src to the handler for its file type."""
    src_stat = yield Syscall("stat", src, options.dereference)
    file_type = src_stat.file_type

    if file_type is FileType.DIRECTORY:
        if not options.recursive:
            raise SourceIsDirectoryError(src)
        yield from _on_dir(src_stat, dest_stat, src, dest, options)
    elif file_type in _FILE_LIKE:
        yield from _on_file(src_stat, dest_stat, src, dest, options)
    elif file_type is FileType.SYMLINK:
        yield from _on_link(dest_stat, src, dest, options)
    elif file_type is FileType.SOCKET:
        raise UnsupportedFileTypeError("a socket file", dest)
    elif file_type is FileType.FIFO:
        raise UnsupportedFileTypeError("a FIFO pipe", dest)
    else:
        raise UnsupportedFileTypeError("an unknown file type", dest)


def plan_copy(src: str, dest: str, options: CopyOptions) -> Plan[None]:
    """Plan: copy src to dest.

    Validates the pair and dest's ancestors, creates dest's parent directory
    when needed, then dispatches on the source's file type.
    """
    result = yield from check_paths(src, dest, "copy", options.filter, options.dereference)
    if result.skipped:
        return
    yield from check_parent_paths(src, result.src_stat, dest, "copy")

    dest_parent = os.path.dirname(os.path.abspath(dest))
    if not (yield Syscall("exists", dest_parent)):
        logger.debug("Creating parent directory '%s'", dest_parent)
        yield Syscall("make_dir", dest_parent)

    yield from _dispatch(result.dest_stat, src, dest, options)


def copy(
    src: StrPath,
    dest: StrPath,
    options: CopyOptions | dict[str, Any] | None = None,
    *,
    fs: FileSystem | None = None,
) -> None:
    """Copy a file, link or directory tree.

    Args:
        src: Source path.
        dest: Destination path.
        options: CopyOptions, a dict of option values, or None for defaults.
        fs: Filesystem to operate on. Defaults to the host filesystem.

    Raises:
        PathOpsError: On a policy violation (see pathops.errors).
        OSError: On host filesystem errors.
    """
    opts = CopyOptions.coerce(options)
    run_sync(plan_copy(os.fspath(src), os.fspath(dest), opts), fs or RealFileSystem())


async def copy_async(
    src: StrPath,
    dest: StrPath,
    options: CopyOptions | dict[str, Any] | None = None,
    *,
    fs: AsyncFileSystem | None = None,
) -> None:
    """Async variant of copy. Filters may return awaitables."""
    opts = CopyOptions.coerce(options)
    await run_async(plan_copy(os.fspath(src), os.fspath(dest), opts), fs or AsyncRealFileSystem())
