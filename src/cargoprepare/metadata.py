"""Workspace metadata model and the `cargo metadata` query that feeds it.

Key entities:
  - Target / Package / WorkspaceMetadata: frozen snapshots of the parts of
    the cargo metadata graph the skeleton needs.
  - load_metadata(): run `cargo metadata` and parse its JSON output.
"""

from __future__ import annotations

import json
import logging
import subprocess
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from .errors import MetadataUnavailableError

logger = logging.getLogger(__name__)

LOCKFILE_NAME = "Cargo.lock"

# Format version understood by from_dict()
METADATA_FORMAT_VERSION = "1"


@dataclass(frozen=True)
class Target:
    """A build target, identified by its source entry point."""

    name: str
    src_path: Path
    kind: tuple[str, ...] = ()  # "lib" | "bin" | "custom-build" | ...

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Target:
        return cls(
            name=data.get("name", ""),
            src_path=Path(_require(data, "src_path", "target")),
            kind=tuple(data.get("kind", ())),
        )


@dataclass(frozen=True)
class Package:
    """A package in the metadata graph: its manifest and build targets."""

    id: str
    name: str
    manifest_path: Path
    targets: tuple[Target, ...] = ()

    @property
    def directory(self) -> Path:
        """Directory holding the manifest; every target lives under it."""
        return self.manifest_path.parent

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Package:
        return cls(
            id=_require(data, "id", "package"),
            name=data.get("name", ""),
            manifest_path=Path(_require(data, "manifest_path", "package")),
            targets=tuple(Target.from_dict(t) for t in data.get("targets", [])),
        )


@dataclass(frozen=True)
class WorkspaceMetadata:
    """Read-only description of the real workspace.

    ``packages`` is the whole resolved graph (dependencies included);
    only the ones listed in ``members`` are part of the workspace.
    """

    root: Path
    lockfile: Path
    output_dir: Path
    members: frozenset[str] = field(default_factory=frozenset)
    packages: tuple[Package, ...] = ()

    def member_packages(self) -> list[Package]:
        """Return workspace member packages, in graph order."""
        return [p for p in self.packages if p.id in self.members]

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> WorkspaceMetadata:
        """Build from the JSON document printed by `cargo metadata`."""
        if not isinstance(data, dict):
            raise MetadataUnavailableError("cargo metadata output is not an object")
        root = Path(_require(data, "workspace_root", "metadata"))
        return cls(
            root=root,
            lockfile=root / LOCKFILE_NAME,
            output_dir=Path(_require(data, "target_directory", "metadata")),
            members=frozenset(data.get("workspace_members", [])),
            packages=tuple(Package.from_dict(p) for p in data.get("packages", [])),
        )


def _require(data: dict[str, Any], key: str, where: str) -> Any:
    try:
        return data[key]
    except (KeyError, TypeError):
        raise MetadataUnavailableError(
            f"cargo metadata output is missing `{key}` in {where}",
            context={"operation": "parse metadata", "key": key},
        ) from None


def metadata_command(
    cargo: str, manifest_path: Path | None = None, all_features: bool = True
) -> list[str]:
    cmd = [cargo, "metadata", "--format-version", METADATA_FORMAT_VERSION]
    if all_features:
        cmd.append("--all-features")
    if manifest_path is not None:
        cmd.extend(["--manifest-path", str(manifest_path)])
    return cmd


def load_metadata(
    cargo: str = "cargo",
    manifest_path: Path | None = None,
    all_features: bool = True,
) -> WorkspaceMetadata:
    """Run `cargo metadata` and return the parsed workspace snapshot.

    Args:
        cargo: Cargo executable to invoke.
        manifest_path: Optional Cargo.toml selecting the workspace;
                       cargo searches upwards from the cwd otherwise.
        all_features: Activate all features while resolving.

    Raises:
        MetadataUnavailableError: If cargo cannot be run, fails, or prints
            output that does not decode.
    """
    cmd = metadata_command(cargo, manifest_path, all_features)
    logger.debug("Querying workspace metadata: %s", " ".join(cmd))
    try:
        result = subprocess.run(cmd, capture_output=True, text=True)
    except OSError as e:
        raise MetadataUnavailableError(
            f"could not read cargo metadata: failed to run `{cargo}`: {e}",
            context={"operation": "run cargo metadata", "command": cmd},
        ) from e

    if result.returncode != 0:
        stderr = result.stderr.strip()
        raise MetadataUnavailableError(
            f"could not read cargo metadata: `{' '.join(cmd)}` "
            f"exited with status {result.returncode}"
            + (f"\n{stderr}" if stderr else ""),
            context={"operation": "run cargo metadata", "command": cmd},
        )

    try:
        data = json.loads(result.stdout)
    except json.JSONDecodeError as e:
        raise MetadataUnavailableError(
            f"could not read cargo metadata: invalid JSON output: {e}",
            context={"operation": "parse metadata", "command": cmd},
        ) from e

    metadata = WorkspaceMetadata.from_dict(data)
    logger.debug(
        "Workspace %s: %d members, %d packages",
        metadata.root,
        len(metadata.members),
        len(metadata.packages),
    )
    return metadata
