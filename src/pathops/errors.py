"""Exceptions raised by pathops operations.

Every error raised by the copy/move policy derives from PathOpsError. Where
a builtin category fits, the error also derives from it so callers can catch
either (e.g. ``except FileExistsError``).

Host errors (permission denied, not found, cross-device...) are never wrapped:
they propagate as the original OSError.
"""

from __future__ import annotations

__all__ = [
    "AlreadyExistsError",
    "PathOpsError",
    "SameFileError",
    "SelfSubdirectoryError",
    "SourceIsDirectoryError",
    "TypeMismatchError",
    "UnsupportedFileTypeError",
    "WouldBreakSourceError",
]


class PathOpsError(Exception):
    """Base class for pathops policy errors."""

    pass


class SameFileError(PathOpsError):
    """Source and destination are the same filesystem entry."""

    def __init__(self, src: str, dest: str) -> None:
        super().__init__("Source and destination must not be the same.")
        self.src = src
        self.dest = dest


class TypeMismatchError(PathOpsError):
    """A directory would overwrite a non-directory, or the reverse."""

    def __init__(self, src: str, dest: str, src_is_dir: bool) -> None:
        if src_is_dir:
            message = f"Cannot overwrite non-directory '{dest}' with directory '{src}'."
        else:
            message = f"Cannot overwrite directory '{dest}' with non-directory '{src}'."
        super().__init__(message)
        self.src = src
        self.dest = dest


class SelfSubdirectoryError(PathOpsError):
    """Destination is nested inside the source."""

    def __init__(self, src: str, dest: str, operation: str = "copy") -> None:
        super().__init__(f"Cannot {operation} '{src}' to a subdirectory of itself, '{dest}'.")
        self.src = src
        self.dest = dest
        self.operation = operation


class WouldBreakSourceError(PathOpsError):
    """Replacing a symlink would delete the data its source points at."""

    def __init__(self, resolved_src: str, resolved_dest: str) -> None:
        super().__init__(f"Cannot overwrite '{resolved_dest}' with '{resolved_src}'.")
        self.resolved_src = resolved_src
        self.resolved_dest = resolved_dest


class SourceIsDirectoryError(PathOpsError, IsADirectoryError):
    """Source is a directory but recursive copying was not requested."""

    def __init__(self, src: str) -> None:
        super().__init__(f"'{src}' is a directory (not copied)")
        self.src = src


class UnsupportedFileTypeError(PathOpsError):
    """Source is a socket, FIFO or a type the copy engine cannot handle."""

    def __init__(self, kind: str, dest: str) -> None:
        super().__init__(f"cannot copy {kind}: '{dest}'")
        self.kind = kind
        self.dest = dest


class AlreadyExistsError(PathOpsError, FileExistsError):
    """Destination exists and overwriting was not allowed."""

    def __init__(self, dest: str) -> None:
        super().__init__(f"'{dest}' already exists")
        self.dest = dest
