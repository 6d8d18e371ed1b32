"""
Project root discovery by upward marker search.
"""

from __future__ import annotations

from pathlib import Path
from typing import Iterable, Optional

from .config_loader import DEFAULT_ROOT_MARKERS
from .errors import RootNotFound


def is_project_root(directory: Path, markers: Iterable[str] = DEFAULT_ROOT_MARKERS) -> bool:
    return any((directory / marker).exists() for marker in markers)


def find_project_root(start: Path, markers: Optional[Iterable[str]] = None) -> Path:
    """Return the closest ancestor of ``start`` (inclusive) holding a root marker.

    ``start`` may be a file, in which case the search begins at its directory.
    Raises RootNotFound once the filesystem root has been checked.
    """
    marker_list = list(markers) if markers is not None else list(DEFAULT_ROOT_MARKERS)
    current = Path(start).resolve()
    if not current.is_dir():
        current = current.parent

    for directory in (current, *current.parents):
        if is_project_root(directory, marker_list):
            return directory

    raise RootNotFound(
        f"no project root found above {start} (looked for: {', '.join(marker_list)})",
        Path(start),
    )
