"""Move engine: atomic rename with a copy+remove fallback across devices."""

from __future__ import annotations

import errno
import logging
import os
from typing import TYPE_CHECKING, Any

from pathops.checks import check_parent_paths, check_paths
from pathops.copy_engine import plan_copy
from pathops.errors import AlreadyExistsError
from pathops.filesystem import AsyncRealFileSystem, RealFileSystem
from pathops.options import CopyOptions, MoveOptions
from pathops.runner import Plan, Syscall, run_async, run_sync
from pathops.types import StrPath

if TYPE_CHECKING:
    from pathops.protocols import AsyncFileSystem, FileSystem

logger = logging.getLogger(__name__)


def _rename(src: str, dest: str, force: bool, is_changing_case: bool) -> Plan[None]:
    if not is_changing_case:
        if force:
            yield Syscall("remove", dest, True, True)
        elif (yield Syscall("exists", dest)):
            raise AlreadyExistsError(dest)

    try:
        yield Syscall("rename", src, dest)
        return
    except OSError as e:
        if e.errno != errno.EXDEV:
            raise
    logger.debug("Rename '%s' -> '%s' crossed devices, copying instead", src, dest)

    fallback = CopyOptions(force=force, error_on_exist=True, preserve_timestamps=True)
    yield from plan_copy(src, dest, fallback)
    yield Syscall("remove", src, True, True)


def plan_move(src: str, dest: str, options: MoveOptions) -> Plan[None]:
    """Plan: move src to dest.

    Validates the pair and dest's ancestors, creates dest's parent directory
    unless it is the filesystem root, then renames.
    """
    result = yield from check_paths(src, dest, "move", options.filter)
    if result.skipped:
        return
    yield from check_parent_paths(src, result.src_stat, dest, "move")

    dest_parent = os.path.dirname(os.path.abspath(dest))
    if os.path.dirname(dest_parent) != dest_parent:
        yield Syscall("make_dir", dest_parent)

    yield from _rename(src, dest, options.overwrite, result.is_changing_case)


def move(
    src: StrPath,
    dest: StrPath,
    options: MoveOptions | dict[str, Any] | None = None,
    *,
    fs: FileSystem | None = None,
) -> None:
    """Move a file, link or directory tree.

    Args:
        src: Source path.
        dest: Destination path.
        options: MoveOptions, a dict of option values, or None for defaults.
        fs: Filesystem to operate on. Defaults to the host filesystem.

    Raises:
        AlreadyExistsError: If dest exists and force is off.
        PathOpsError: On other policy violations (see pathops.errors).
        OSError: On host filesystem errors other than a cross-device rename.
    """
    opts = MoveOptions.coerce(options)
    run_sync(plan_move(os.fspath(src), os.fspath(dest), opts), fs or RealFileSystem())


async def move_async(
    src: StrPath,
    dest: StrPath,
    options: MoveOptions | dict[str, Any] | None = None,
    *,
    fs: AsyncFileSystem | None = None,
) -> None:
    """Async variant of move."""
    opts = MoveOptions.coerce(options)
    await run_async(plan_move(os.fspath(src), os.fspath(dest), opts), fs or AsyncRealFileSystem())
