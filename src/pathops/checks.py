"""Path identity and safety checks shared by copy and move.

"Same file" is decided by device and inode numbers only, never by comparing
path strings: symlinks, hard links and case-insensitive filesystems all make
string comparison unreliable.
"""

from __future__ import annotations

import logging
import os
from typing import TYPE_CHECKING

from pathops.errors import SameFileError, SelfSubdirectoryError, TypeMismatchError
from pathops.runner import Plan, Predicate, Syscall
from pathops.types import CheckResult, PathStat

if TYPE_CHECKING:
    from pathops.options import PathFilter

logger = logging.getLogger(__name__)


def are_identical(src_stat: PathStat, dest_stat: PathStat) -> bool:
    """Return True if both snapshots describe the same filesystem entry.

    Zero device or inode numbers never count as a match.
    """
    return bool(
        dest_stat.ino
        and dest_stat.dev
        and dest_stat.ino == src_stat.ino
        and dest_stat.dev == src_stat.dev
    )


def _segments(path: str) -> list[str]:
    return [part for part in os.path.abspath(path).split(os.sep) if part]


def is_src_subdir(src: str, dest: str) -> bool:
    """Return True if dest is src or lies below it.

    Only the absolute, normalized path strings are compared; symlinks are
    not resolved.
    """
    src_parts = _segments(src)
    dest_parts = _segments(dest)
    if len(dest_parts) < len(src_parts):
        return False
    return dest_parts[: len(src_parts)] == src_parts


def _is_case_change(src: str, dest: str) -> bool:
    src_name = os.path.basename(src)
    dest_name = os.path.basename(dest)
    return src_name != dest_name and src_name.lower() == dest_name.lower()


def _stat_pair(src: str, dest: str, dereference: bool) -> Plan[tuple[PathStat, PathStat | None]]:
    src_stat = yield Syscall("stat", src, dereference)
    try:
        dest_stat = yield Syscall("stat", dest, dereference)
    except FileNotFoundError:
        dest_stat = None
    return src_stat, dest_stat


def check_stat(
    src: str,
    src_stat: PathStat,
    dest: str,
    dest_stat: PathStat | None,
    operation: str,
) -> CheckResult:
    """Validate an already stat-ed pair.

    Args:
        src: Source path.
        src_stat: Source snapshot.
        dest: Destination path.
        dest_stat: Destination snapshot, None if absent.
        operation: "copy" or "move".

    Returns:
        CheckResult for the pair.

    Raises:
        SameFileError: If both snapshots are the same entry.
        TypeMismatchError: If only one side is a directory.
        SelfSubdirectoryError: If dest lies inside the src directory.
    """
    if dest_stat is not None:
        if are_identical(src_stat, dest_stat):
            if operation == "move" and _is_case_change(src, dest):
                return CheckResult(src_stat=src_stat, dest_stat=dest_stat, is_changing_case=True)
            raise SameFileError(src, dest)
        if src_stat.is_dir != dest_stat.is_dir:
            raise TypeMismatchError(src, dest, src_is_dir=src_stat.is_dir)

    if src_stat.is_dir and is_src_subdir(src, dest):
        raise SelfSubdirectoryError(src, dest, operation)

    return CheckResult(src_stat=src_stat, dest_stat=dest_stat)


def check_paths(
    src: str,
    dest: str,
    operation: str,
    path_filter: PathFilter | None = None,
    dereference: bool = False,
) -> Plan[CheckResult]:
    """Plan: filter, stat and validate a source/destination pair.

    A filter that rejects the pair short-circuits before any stat call.

    Args:
        src: Source path.
        dest: Destination path.
        operation: "copy" or "move".
        path_filter: Optional predicate called with (src, dest).
        dereference: Follow symlinks when stat-ing.

    Returns:
        CheckResult for the pair.
    """
    if path_filter is not None and not (yield Predicate(path_filter, src, dest)):
        logger.debug("Filter skipped '%s' -> '%s'", src, dest)
        return CheckResult(skipped=True)

    src_stat, dest_stat = yield from _stat_pair(src, dest, dereference)
    return check_stat(src, src_stat, dest, dest_stat, operation)


def check_parent_paths(src: str, src_stat: PathStat, dest: str, operation: str) -> Plan[None]:
    """Plan: make sure no ancestor of dest is the source itself.

    Walks upward from dest's parent, stat-ing each ancestor (following
    symlinks), and stops at src's parent, at the root, or at the first
    ancestor that does not exist. This catches nesting introduced through
    symlinked intermediate directories, which is_src_subdir cannot see.

    Raises:
        SelfSubdirectoryError: If an ancestor of dest is the source.
    """
    src_parent = os.path.dirname(os.path.abspath(src))
    current = os.path.abspath(dest)
    while True:
        dest_parent = os.path.dirname(current)
        if dest_parent == src_parent or os.path.dirname(dest_parent) == dest_parent:
            return
        try:
            parent_stat = yield Syscall("stat", dest_parent, True)
        except FileNotFoundError:
            return
        if are_identical(src_stat, parent_stat):
            raise SelfSubdirectoryError(src, dest, operation)
        current = dest_parent
