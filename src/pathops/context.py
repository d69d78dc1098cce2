"""Application context for dependency injection.

This module separates object creation from object use, enabling testability
and reducing coupling in CLI commands.

Dependencies are typed using Protocols (abstract interfaces) rather than
concrete implementations, so test doubles can be injected without
inheritance.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from pathops.protocols import AsyncFileSystem, FileSystem


def _default_filesystem() -> FileSystem:
    """Create the default blocking filesystem implementation."""
    from pathops.filesystem import RealFileSystem
    return RealFileSystem()


def _default_async_filesystem() -> AsyncFileSystem:
    """Create the default suspending filesystem implementation."""
    from pathops.filesystem import AsyncRealFileSystem
    return AsyncRealFileSystem()


@dataclass
class OpsContext:
    """Container for the filesystem implementations used by CLI commands."""

    filesystem: FileSystem = field(default_factory=_default_filesystem)
    async_filesystem: AsyncFileSystem = field(default_factory=_default_async_filesystem)


def create_context() -> OpsContext:
    """Factory for production dependencies.

    For tests, construct OpsContext directly with test doubles.

    Returns:
        OpsContext wired to the host filesystem.
    """
    from pathops.filesystem import AsyncRealFileSystem, RealFileSystem

    filesystem = RealFileSystem()
    return OpsContext(
        filesystem=filesystem,
        async_filesystem=AsyncRealFileSystem(filesystem),
    )
