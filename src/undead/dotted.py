"""
Path <-> dotted module string translation, relative to a project root.

``to_dotted`` and ``to_path`` are exact inverses for paths strictly under the
root whose segment names carry no dots besides the source suffix. Import
resolution and dead-file filtering compare dotted strings literally, so both
must go through this module.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Optional, Union

from .config_loader import DEFAULT_SOURCE_SUFFIX

PathLike = Union[str, "os.PathLike[str]"]


def relative_parts(path: PathLike, root: PathLike) -> tuple:
    """Segments of ``path`` below ``root``; ValueError unless strictly under it."""
    abs_path = Path(os.path.abspath(path))
    abs_root = Path(os.path.abspath(root))
    rel = abs_path.relative_to(abs_root)
    if not rel.parts:
        raise ValueError(f"{path} is the project root itself, not a path under it")
    return rel.parts


def to_dotted(path: PathLike, root: PathLike, suffix: str = DEFAULT_SOURCE_SUFFIX) -> str:
    """``root/pkg/mod.py`` -> ``pkg.mod``"""
    parts = list(relative_parts(path, root))
    if suffix and parts[-1].endswith(suffix) and parts[-1] != suffix:
        parts[-1] = parts[-1][: -len(suffix)]
    return ".".join(parts)


def to_path(dotted: str, root: PathLike, suffix: Optional[str] = None) -> Path:
    """``pkg.mod`` -> ``root/pkg/mod`` (``root/pkg/mod.py`` when ``suffix`` is given)"""
    if not dotted or any(not part for part in dotted.split(".")):
        raise ValueError(f"malformed dotted path: {dotted!r}")
    parts = dotted.split(".")
    if suffix:
        parts[-1] = parts[-1] + suffix
    return Path(os.path.abspath(root)).joinpath(*parts)
