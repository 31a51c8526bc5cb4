"""Re-rooting of workspace paths onto the skeleton destination."""

import os
from pathlib import Path

from .errors import PathNotUnderBaseError


def rebase(path: Path, from_base: Path, to_base: Path, strict: bool = False) -> Path:
    """Return ``to_base`` joined with ``path`` relative to ``from_base``.

    Both paths are normalized (``..`` and ``.`` collapsed) before the
    comparison; nothing is resolved or touched on disk.

    Args:
        strict: Also reject ``path`` equal to ``from_base``.

    Raises:
        PathNotUnderBaseError: If ``path`` is neither ``from_base`` nor one
            of its descendants (or is ``from_base`` itself when ``strict``).
    """
    normalized = Path(os.path.normpath(path))
    base = Path(os.path.normpath(from_base))
    try:
        relative = normalized.relative_to(base)
    except ValueError:
        raise PathNotUnderBaseError(path, from_base) from None
    if ".." in relative.parts or (strict and relative == Path(".")):
        raise PathNotUnderBaseError(path, from_base)
    return to_base / relative
