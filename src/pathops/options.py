"""Option models for pathops operations.

Every model accepts its snake_case field names as well as the camelCase
aliases (``errorOnExist``, ``preserveTimestamps``...), and every public
operation accepts either a model instance, a plain dict or None.
"""

from __future__ import annotations

from typing import Any, Callable, Optional, TypeVar, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

# Default permission bits for created directories (before umask)
DEFAULT_DIR_MODE = 0o777

# Copy flags for CopyOptions.mode
COPYFILE_EXCL = 1
COPYFILE_FICLONE = 2

_KNOWN_COPY_FLAGS = COPYFILE_EXCL | COPYFILE_FICLONE

# filter(src, dest) -> bool, or an awaitable bool in async mode
PathFilter = Callable[[str, str], Any]

_M = TypeVar("_M", bound="_Options")


class _Options(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    @classmethod
    def coerce(cls: type[_M], value: _M | dict[str, Any] | None) -> _M:
        """Normalize a model, a dict or None into a model instance."""
        if value is None:
            return cls()
        if isinstance(value, cls):
            return value
        return cls.model_validate(value)


class CopyOptions(_Options):
    """Options for copy.

    Attributes:
        recursive: Descend into directories. Required to copy a directory.
        force: Delete an existing destination file before writing.
        error_on_exist: Fail when the destination exists and force is off.
        dereference: Follow symlinks instead of copying the links.
        preserve_timestamps: Copy access/modification times.
        verbatim_symlinks: Keep relative link targets as they are.
        filter: Predicate called with (src, dest); False skips the pair.
        mode: Copy flags (COPYFILE_EXCL, COPYFILE_FICLONE).
    """

    recursive: bool = True
    force: bool = False
    error_on_exist: bool = Field(default=False, alias="errorOnExist")
    dereference: bool = False
    preserve_timestamps: bool = Field(default=False, alias="preserveTimestamps")
    verbatim_symlinks: bool = Field(default=False, alias="verbatimSymlinks")
    filter: Optional[PathFilter] = None
    mode: int = 0

    @field_validator("mode")
    @classmethod
    def _check_mode(cls, value: int) -> int:
        if value < 0 or value & ~_KNOWN_COPY_FLAGS:
            raise ValueError(f"unsupported copy flags: {value:#x}")
        return value


class MoveOptions(_Options):
    """Options for move.

    ``clobber`` is the older name for ``force``; either one enables
    overwriting an existing destination.
    """

    force: bool = False
    clobber: bool = False
    filter: Optional[PathFilter] = None

    @property
    def overwrite(self) -> bool:
        return self.force or self.clobber


class GlobOptions(_Options):
    """Options for glob expansion.

    Attributes:
        cwd: Directory that relative patterns are matched from.
        dot: Let wildcards match names starting with a dot.
        only_files: Drop matches that are directories.
    """

    cwd: Optional[str] = None
    dot: bool = False
    only_files: bool = Field(default=True, alias="onlyFiles")


class RemoveOptions(_Options):
    """Options for remove.

    Attributes:
        recursive: Allow removing directory trees.
        force: Ignore paths that do not exist.
        glob: Treat the paths as glob patterns (True or GlobOptions).
    """

    recursive: bool = True
    force: bool = True
    glob: Union[bool, GlobOptions] = False

    @property
    def glob_options(self) -> GlobOptions | None:
        if self.glob is False:
            return None
        if self.glob is True:
            return GlobOptions()
        return self.glob


class WriteOptions(_Options):
    """Options for output_file. ``encoding`` is ignored for bytes data."""

    encoding: str = "utf-8"
