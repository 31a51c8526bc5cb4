"""cargo-prepare - run metadata-only cargo commands against a skeleton workspace.

Builds a copy of a Cargo workspace holding only Cargo.lock, the member
manifests and empty placeholder sources, then (optionally) runs cargo
inside it so dependency resolution never touches real source files.

Package entry point. Exports the version string only; main.py imports
the functional modules.
"""

__version__ = "0.1.0"
