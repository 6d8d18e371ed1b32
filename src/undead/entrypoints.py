"""
Entrypoint classification.

A file is live on its own when it is a package initializer or when it carries
the ``if __name__ == "__main__":`` idiom. The idiom is found with a plain
line search, not a parse.
"""

from __future__ import annotations

import logging
import re
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Iterable, List, Optional, Pattern, Tuple

from .config_loader import (
    DEFAULT_ENTRYPOINT_PATTERN,
    DEFAULT_INIT_NAME,
    DEFAULT_SOURCE_SUFFIX,
    UndeadConfig,
)
from .errors import FileVanished

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CandidateFile:
    path: Path
    is_entrypoint: bool


@lru_cache(maxsize=8)
def _compile(pattern: str) -> Pattern[str]:
    return re.compile(pattern)


def is_entrypoint(
    path: Path,
    init_name: str = DEFAULT_INIT_NAME,
    suffix: str = DEFAULT_SOURCE_SUFFIX,
    pattern: str = DEFAULT_ENTRYPOINT_PATTERN,
) -> bool:
    """True for package initializers and files that run when executed directly."""
    path = Path(path)
    if path.name == f"{init_name}{suffix}":
        return True

    matcher = _compile(pattern)
    try:
        with path.open("r", encoding="utf-8", errors="replace") as f:
            for line in f:
                if matcher.search(line):
                    return True
    except OSError as e:
        raise FileVanished(f"cannot read {path}: {e}", path) from e
    return False


def classify(
    paths: Iterable[Path],
    config: Optional[UndeadConfig] = None,
    workers: Optional[int] = None,
) -> Tuple[List[CandidateFile], List[FileVanished]]:
    """Classify ``paths`` on a thread pool.

    Returns the candidates sorted by path, and the files that vanished before
    they could be read (those are left out of the candidates).
    """
    config = config or UndeadConfig()
    max_workers = workers if workers is not None else config.workers

    def _one(path: Path):
        try:
            return CandidateFile(
                path=path,
                is_entrypoint=is_entrypoint(
                    path, config.init_name, config.source_suffix, config.entrypoint_pattern
                ),
            )
        except FileVanished as e:
            return e

    with ThreadPoolExecutor(max_workers=max_workers) as pool:
        outcomes = list(pool.map(_one, list(paths)))

    candidates: List[CandidateFile] = []
    vanished: List[FileVanished] = []
    for outcome in outcomes:
        if isinstance(outcome, FileVanished):
            logger.warning("%s", outcome)
            vanished.append(outcome)
        else:
            candidates.append(outcome)
    candidates.sort(key=lambda c: str(c.path))
    return candidates, vanished
