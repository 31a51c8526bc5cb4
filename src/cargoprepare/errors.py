"""Typed errors for cargo-prepare.

Every error carries a ``context`` mapping (operation, paths) so the CLI
can report what failed without re-running.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Mapping

__all__ = [
    "PrepareError",
    "ConfigError",
    "MetadataUnavailableError",
    "DestinationConflictError",
    "PathNotUnderBaseError",
    "FilesystemError",
    "LockfileCopyError",
    "ManifestCopyError",
    "SourceStubWriteError",
    "DirectoryCreationError",
    "ProcessLaunchError",
    "ProcessNonZeroExitError",
]


class PrepareError(Exception):
    """Base class for all cargo-prepare errors."""

    def __init__(
        self, message: str, *, context: Mapping[str, Any] | None = None
    ) -> None:
        super().__init__(message)
        self.context: dict[str, Any] = dict(context or {})


class ConfigError(PrepareError):
    """Invalid settings file or setting value."""


class MetadataUnavailableError(PrepareError):
    """`cargo metadata` could not be run or returned unusable output."""


class DestinationConflictError(PrepareError):
    """The destination directory already exists."""

    def __init__(self, destination: Path) -> None:
        super().__init__(
            f"destination already exists: `{destination}`",
            context={"operation": "create destination", "destination": destination},
        )
        self.destination = destination


class PathNotUnderBaseError(PrepareError):
    """A manifest or source path does not lie under its expected base."""

    def __init__(self, path: Path, base: Path) -> None:
        super().__init__(
            f"path `{path}` is not under `{base}`",
            context={"operation": "rebase", "path": path, "base": base},
        )
        self.path = path
        self.base = base


# Filesystem ------------------------------------------------------------------


class FilesystemError(PrepareError):
    """A filesystem operation on the skeleton failed."""

    operation = "filesystem operation"

    def __init__(self, source: Path | None, destination: Path, reason: str) -> None:
        if source is None:
            message = f"could not {self.operation}: `{destination}`: {reason}"
        else:
            message = (
                f"could not {self.operation}: `{source}` to `{destination}`: {reason}"
            )
        super().__init__(
            message,
            context={
                "operation": self.operation,
                "source": source,
                "destination": destination,
            },
        )
        self.source = source
        self.destination = destination


class LockfileCopyError(FilesystemError):
    operation = "copy lockfile"


class ManifestCopyError(FilesystemError):
    operation = "copy manifest file"


class SourceStubWriteError(FilesystemError):
    operation = "create source file"


class DirectoryCreationError(FilesystemError):
    operation = "create directory"


# Process ---------------------------------------------------------------------


class ProcessLaunchError(PrepareError):
    """The build tool could not be started."""


class ProcessNonZeroExitError(PrepareError):
    """The build tool exited with a non-zero status."""

    def __init__(self, command: list[str], returncode: int) -> None:
        super().__init__(
            f"`{' '.join(command)}` exited with status {returncode}",
            context={"operation": "run build tool", "command": command},
        )
        self.command = command
        self.returncode = returncode
