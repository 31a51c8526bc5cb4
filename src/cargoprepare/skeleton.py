"""Skeleton workspace materialization.

Reproduces a Cargo workspace inside an empty destination directory:
Cargo.lock and every member's Cargo.toml are copied byte for byte, and
each build target's source entry point becomes a zero-length file. Real
sources are never opened.

Layout produced:
  <destination>/Cargo.lock
  <destination>/<package dir relative to root>/Cargo.toml
  <destination>/<package dir relative to root>/<src path relative to package>

Key class: SkeletonMaterializer.
"""

import logging
import shutil
from pathlib import Path

from .errors import (
    DirectoryCreationError,
    LockfileCopyError,
    ManifestCopyError,
    SourceStubWriteError,
)
from .metadata import Package, WorkspaceMetadata
from .paths import rebase

logger = logging.getLogger(__name__)


class SkeletonMaterializer:
    """Writes the skeleton of one workspace into one destination.

    The destination must already exist (creating it is the caller's job)
    and should be empty. Work stops at the first failure; files written
    before it are left in place.
    """

    def __init__(self, metadata: WorkspaceMetadata, destination: Path) -> None:
        self.metadata = metadata
        self.destination = destination
        self.manifests_written = 0
        self.stubs_written = 0

    def materialize(self) -> None:
        self._copy_lockfile()
        for package in self.metadata.member_packages():
            self._materialize_package(package)
        logger.info(
            "Skeleton ready at %s (%d manifests, %d source stubs)",
            self.destination,
            self.manifests_written,
            self.stubs_written,
        )

    def _copy_lockfile(self) -> None:
        src = self.metadata.lockfile
        dest = self.destination / src.name
        try:
            shutil.copyfile(src, dest)
        except OSError as e:
            raise LockfileCopyError(src, dest, str(e)) from e
        logger.debug("Copied lockfile: %s -> %s", src, dest)

    def _materialize_package(self, package: Package) -> None:
        manifest = rebase(
            package.manifest_path, self.metadata.root, self.destination, strict=True
        )
        package_dir = manifest.parent
        # All target paths are mapped before the package's first write
        stubs = [
            rebase(target.src_path, package.directory, package_dir, strict=True)
            for target in package.targets
        ]

        _make_dirs(package_dir)
        try:
            shutil.copyfile(package.manifest_path, manifest)
        except OSError as e:
            raise ManifestCopyError(package.manifest_path, manifest, str(e)) from e
        self.manifests_written += 1
        logger.debug("Copied manifest: %s -> %s", package.manifest_path, manifest)

        for stub in stubs:
            _make_dirs(stub.parent)
            try:
                stub.write_bytes(b"")
            except OSError as e:
                raise SourceStubWriteError(None, stub, str(e)) from e
            self.stubs_written += 1
            logger.debug("Created source stub: %s", stub)


def _make_dirs(path: Path) -> None:
    """Create ``path`` and any missing ancestors."""
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise DirectoryCreationError(None, path, str(e)) from e


def materialize(metadata: WorkspaceMetadata, destination: Path) -> None:
    """Build the skeleton of ``metadata``'s workspace inside ``destination``.

    Raises:
        PathNotUnderBaseError: A member manifest lies outside the workspace
            root, or a target source outside its package directory.
        LockfileCopyError, ManifestCopyError, SourceStubWriteError,
        DirectoryCreationError: A filesystem operation failed.
    """
    SkeletonMaterializer(metadata, destination).materialize()
