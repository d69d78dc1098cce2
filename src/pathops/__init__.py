"""Recursive copy, move and removal helpers with symlink-aware safety checks."""

__version__ = "0.1.0"

from pathops.copy_engine import copy, copy_async
from pathops.errors import (
    AlreadyExistsError,
    PathOpsError,
    SameFileError,
    SelfSubdirectoryError,
    SourceIsDirectoryError,
    TypeMismatchError,
    UnsupportedFileTypeError,
    WouldBreakSourceError,
)
from pathops.move_engine import move, move_async
from pathops.options import (
    COPYFILE_EXCL,
    COPYFILE_FICLONE,
    CopyOptions,
    GlobOptions,
    MoveOptions,
    RemoveOptions,
    WriteOptions,
)
from pathops.primitives import (
    empty_dir,
    empty_dir_async,
    exists,
    exists_async,
    expand_globs,
    make_dir,
    make_dir_async,
    output_file,
    output_file_async,
    remove,
    remove_async,
)

# Export protocol interfaces for type hints and dependency injection
from pathops.protocols import AsyncFileSystem, FileSystem

__all__ = [
    "__version__",
    "AlreadyExistsError",
    "AsyncFileSystem",
    "COPYFILE_EXCL",
    "COPYFILE_FICLONE",
    "CopyOptions",
    "FileSystem",
    "GlobOptions",
    "MoveOptions",
    "PathOpsError",
    "RemoveOptions",
    "SameFileError",
    "SelfSubdirectoryError",
    "SourceIsDirectoryError",
    "TypeMismatchError",
    "UnsupportedFileTypeError",
    "WouldBreakSourceError",
    "WriteOptions",
    "copy",
    "copy_async",
    "empty_dir",
    "empty_dir_async",
    "exists",
    "exists_async",
    "expand_globs",
    "make_dir",
    "make_dir_async",
    "move",
    "move_async",
    "output_file",
    "output_file_async",
    "remove",
    "remove_async",
]
