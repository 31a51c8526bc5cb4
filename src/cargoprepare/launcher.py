"""Run the real build tool against a skeleton workspace.

The child runs with the skeleton as its working directory and
CARGO_TARGET_DIR pointing at the real workspace's target directory, so
build artifacts land in (and are reused from) the real cache.
"""

import logging
import os
import signal
import subprocess
from pathlib import Path

from .errors import ProcessLaunchError, ProcessNonZeroExitError

logger = logging.getLogger(__name__)

TARGET_DIR_ENV = "CARGO_TARGET_DIR"


def build_env(output_dir: Path, base: dict[str, str] | None = None) -> dict[str, str]:
    """Return a copy of ``base`` (default: os.environ) with the target dir set."""
    env = dict(os.environ if base is None else base)
    env[TARGET_DIR_ENV] = str(output_dir)
    return env


def exit_status(returncode: int) -> int:
    """Map a subprocess return code to a shell-style exit status.

    Negative codes (killed by signal N) become 128 + N.
    """
    if returncode < 0:
        return 128 + abs(returncode)
    return returncode


def run_build_tool(
    cargo: str,
    args: list[str],
    cwd: Path,
    output_dir: Path,
    check: bool = True,
) -> int:
    """Run ``cargo args...`` in ``cwd`` and wait for it.

    Args:
        cargo: Build tool executable.
        args: Arguments forwarded unchanged.
        cwd: Skeleton workspace directory.
        output_dir: Real target directory exported as CARGO_TARGET_DIR.
        check: Raise ProcessNonZeroExitError on a non-zero exit.

    Returns:
        The child's exit status (see exit_status()).

    Raises:
        ProcessLaunchError: If the executable cannot be started.
        ProcessNonZeroExitError: If ``check`` and the child failed.
    """
    cmd = [cargo, *args]
    logger.info("Running %s in %s", " ".join(cmd), cwd)
    try:
        result = subprocess.run(cmd, cwd=cwd, env=build_env(output_dir))
    except OSError as e:
        raise ProcessLaunchError(
            f"could not execute cargo command `{cargo}`: {e}",
            context={"operation": "run build tool", "command": cmd, "cwd": cwd},
        ) from e

    status = exit_status(result.returncode)
    if result.returncode < 0:
        try:
            name = signal.Signals(-result.returncode).name
        except ValueError:
            name = str(-result.returncode)
        logger.warning("%s terminated by signal %s", cargo, name)
    if check and status != 0:
        raise ProcessNonZeroExitError(cmd, status)
    return status
