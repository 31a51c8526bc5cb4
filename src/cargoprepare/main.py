"""Application entry point — CLI parsing and command dispatch.

Handles two execution modes:
  1. `cargo prepare --dest DIR` — creates DIR, writes the skeleton workspace
     into it and exits.
  2. `cargo prepare [ARGS...]` — writes the skeleton into a private temporary
     directory, runs `cargo ARGS...` there with CARGO_TARGET_DIR pointing at
     the real target directory, removes the directory and exits with cargo's
     status.

Cargo invokes external subcommands as `cargo-prepare prepare ...`; the
leading `prepare` is dropped.
"""

import argparse
import logging
import sys
import tempfile
from pathlib import Path
from typing import TYPE_CHECKING

from . import __version__
from .errors import (
    DestinationConflictError,
    DirectoryCreationError,
    PrepareError,
    ProcessNonZeroExitError,
)

if TYPE_CHECKING:
    from .settings import PrepareSettings

logger = logging.getLogger(__name__)

SUBCOMMAND_NAME = "prepare"

# Our own options; everything from the first other token on goes to cargo
_VALUE_OPTIONS = ("-o", "--dest", "--manifest-path")
_FLAG_OPTIONS = ("-v", "--verbose", "-V", "--version", "-h", "--help")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=f"cargo {SUBCOMMAND_NAME}",
        description=(
            "Run cargo against a skeleton of the current workspace: "
            "Cargo.lock and manifests only, with empty source files."
        ),
        usage=f"cargo {SUBCOMMAND_NAME} [-o DEST] [-v] [--manifest-path PATH] [ARGS...]",
    )
    parser.add_argument(
        "-o",
        "--dest",
        type=Path,
        help="Destination of the skeleton workspace directory. "
        "The directory must not exist.",
    )
    parser.add_argument(
        "--manifest-path",
        type=Path,
        help="Path to Cargo.toml of the workspace to prepare.",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Enable debug logging."
    )
    parser.add_argument(
        "-V", "--version", action="version", version=f"%(prog)s {__version__}"
    )
    return parser


def _split_argv(argv: list[str]) -> tuple[list[str], list[str]]:
    """Split argv into (own options, arguments forwarded to cargo).

    Forwarded arguments may start with a hyphen; a bare ``--`` ends our
    options and is dropped.
    """
    own: list[str] = []
    i = 0
    while i < len(argv):
        arg = argv[i]
        if arg == "--":
            return own, argv[i + 1 :]
        if arg in _VALUE_OPTIONS:
            own.extend(argv[i : i + 2])
            i += 2
            continue
        # -oDEST, --dest=DEST, --manifest-path=PATH
        attached = arg.startswith("-o") and not arg.startswith("--")
        if (
            arg in _FLAG_OPTIONS
            or attached
            or any(
                arg.startswith(f"{opt}=")
                for opt in _VALUE_OPTIONS
                if opt.startswith("--")
            )
        ):
            own.append(arg)
            i += 1
            continue
        break
    return own, argv[i:]


def parse_args(argv: list[str]) -> argparse.Namespace:
    """Parse command-line arguments (without the program name).

    Exits with status 2 on usage errors, like argparse does.
    """
    if argv and argv[0] == SUBCOMMAND_NAME:
        argv = argv[1:]
    own, forwarded = _split_argv(argv)
    parser = _build_parser()
    args = parser.parse_args(own)
    if args.dest is not None and forwarded:
        parser.error("argument -o/--dest: not allowed with arguments for cargo")
    args.args = forwarded
    return args


def _create_destination(destination: Path) -> None:
    """Create the explicit destination; its parent must already exist."""
    try:
        destination.mkdir()
    except FileExistsError:
        raise DestinationConflictError(destination) from None
    except OSError as e:
        raise DirectoryCreationError(None, destination, str(e)) from e


def run(args: argparse.Namespace, settings: "PrepareSettings") -> int:
    """Execute the parsed command and return the process exit status."""
    from .launcher import run_build_tool
    from .metadata import load_metadata
    from .skeleton import materialize

    metadata = load_metadata(
        settings.cargo,
        manifest_path=args.manifest_path,
        all_features=settings.all_features,
    )

    if args.dest is not None:
        destination = args.dest.absolute()
        _create_destination(destination)
        materialize(metadata, destination)
        return 0

    with tempfile.TemporaryDirectory(prefix="cargo-prepare-") as tmp:
        destination = Path(tmp)
        materialize(metadata, destination)
        try:
            return run_build_tool(
                settings.cargo, args.args, destination, metadata.output_dir
            )
        except ProcessNonZeroExitError as e:
            logger.debug("%s", e)
            return e.returncode


def main(argv: list[str] | None = None) -> None:
    """Main entry point."""
    if argv is None:
        argv = sys.argv[1:]
    args = parse_args(argv)

    logging.basicConfig(
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        level=logging.WARNING,
    )

    from .settings import load_settings

    try:
        settings = load_settings()
        logging.getLogger("cargoprepare").setLevel(
            logging.DEBUG if args.verbose else settings.log_level_value
        )
        status = run(args, settings)
    except PrepareError as e:
        print(f"error: {e}", file=sys.stderr)
        sys.exit(1)

    sys.exit(status)
