"""Output directory cleanup."""

import logging
import shutil
from pathlib import Path

from .errors import BuildError

logger = logging.getLogger(__name__)


def empty_dir(path: Path, root: Path) -> None:
    """Remove everything inside path, keeping path itself.

    Args:
        path: Directory to empty
        root: Directory that path must be inside of

    Raises:
        BuildError: If path is not inside root
    """
    path = Path(path).resolve()
    root = Path(root).resolve()

    if path == root or root not in path.parents:
        raise BuildError(f"Refusing to clear {path}: it is not inside {root}")

    if not path.exists():
        return

    for child in path.iterdir():
        if child.is_dir() and not child.is_symlink():
            shutil.rmtree(child)
        else:
            child.unlink()
    logger.debug(f"Emptied {path}")
