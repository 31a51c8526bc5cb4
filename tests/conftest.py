"""Root conftest — clears env vars BEFORE any cargoprepare module is imported.

Running the suite from `cargo test`-style wrappers or a cargo subcommand
leaks CARGO / CARGO_TARGET_DIR into the environment, which would change
which executable settings resolve to and what the launcher exports.
"""

import os

for _var in ("CARGO", "CARGO_TARGET_DIR", "CARGO_PREPARE_LOG"):
    os.environ.pop(_var, None)
