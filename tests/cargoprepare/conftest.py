"""Shared fixtures: a small two-member workspace on disk plus its metadata."""

from pathlib import Path

import pytest

from cargoprepare.metadata import Package, Target, WorkspaceMetadata

MANIFEST_A = b'[package]\nname = "a"\nversion = "0.1.0"\n\n[dependencies]\nb = { path = "../b" }\n'
MANIFEST_B = b'[package]\nname = "b"\nversion = "0.1.0"\n'


def make_package(pkg_id: str, manifest: Path, *sources: Path) -> Package:
    return Package(
        id=pkg_id,
        name=pkg_id.split()[0],
        manifest_path=manifest,
        targets=tuple(Target(name=s.stem, src_path=s) for s in sources),
    )


@pytest.fixture
def workspace(tmp_path: Path) -> WorkspaceMetadata:
    """Workspace at tmp_path/ws with members a (bin + lib) and b (lib).

    The graph also lists a registry dependency living outside the root;
    it is not a member and must never be touched.
    """
    root = tmp_path / "ws"
    (root / "a" / "src").mkdir(parents=True)
    (root / "b" / "src").mkdir(parents=True)

    (root / "Cargo.lock").write_bytes(b"L")
    (root / "a" / "Cargo.toml").write_bytes(MANIFEST_A)
    (root / "b" / "Cargo.toml").write_bytes(MANIFEST_B)
    (root / "a" / "src" / "main.rs").write_text('fn main() { println!("hi"); }\n')
    (root / "a" / "src" / "lib.rs").write_text("pub fn a() {}\n" * 1000)
    (root / "b" / "src" / "lib.rs").write_text("pub fn b() {}\n")

    registry = tmp_path / "registry" / "serde-1.0.0"
    return WorkspaceMetadata(
        root=root,
        lockfile=root / "Cargo.lock",
        output_dir=root / "target",
        members=frozenset({"a 0.1.0", "b 0.1.0"}),
        packages=(
            make_package(
                "a 0.1.0",
                root / "a" / "Cargo.toml",
                root / "a" / "src" / "main.rs",
                root / "a" / "src" / "lib.rs",
            ),
            make_package(
                "serde 1.0.0",
                registry / "Cargo.toml",
                registry / "src" / "lib.rs",
            ),
            make_package("b 0.1.0", root / "b" / "Cargo.toml", root / "b" / "src" / "lib.rs"),
        ),
    )


def tree(root: Path) -> set[str]:
    """Relative POSIX paths of every file under root."""
    return {p.relative_to(root).as_posix() for p in root.rglob("*") if p.is_file()}


@pytest.fixture
def list_files():
    return tree
