"""
Filesystem path-kind probe.

All module-vs-package decisions ask this one object, so the (racy) existence
checks are made once per path and per run.
"""

from __future__ import annotations

import threading
from enum import Enum
from pathlib import Path
from typing import Dict

from .config_loader import DEFAULT_SOURCE_SUFFIX


class PathKind(str, Enum):
    PACKAGE = "package"  # a directory
    MODULE = "module"    # <path><suffix> is a regular file
    MISSING = "missing"


class PathProbe:
    """Caching path-kind probe, safe to share between worker threads."""

    def __init__(self, suffix: str = DEFAULT_SOURCE_SUFFIX):
        self.suffix = suffix
        self._cache: Dict[Path, PathKind] = {}
        self._lock = threading.Lock()

    def kind(self, path: Path) -> PathKind:
        with self._lock:
            cached = self._cache.get(path)
        if cached is not None:
            return cached

        # a directory wins over a same-named module file, even without an initializer
        if path.is_dir():
            result = PathKind.PACKAGE
        elif path.with_name(path.name + self.suffix).is_file():
            result = PathKind.MODULE
        else:
            result = PathKind.MISSING

        with self._lock:
            # first writer wins so every caller sees one snapshot per path
            return self._cache.setdefault(path, result)

    def is_package(self, path: Path) -> bool:
        return self.kind(path) is PathKind.PACKAGE

    def is_module_file(self, path: Path) -> bool:
        return self.kind(path) is PathKind.MODULE
