"""
Dead file resolution and the end-to-end scan pipeline.

    locate root -> enumerate targets / enumerate root
                -> classify candidates / resolve imports
                -> fold -> filter -> sort

Candidates come from the target paths only; the imported set is always built
over the whole project root.
"""

from __future__ import annotations

import logging
import os
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import AbstractSet, Dict, Iterable, List, Optional, Sequence, Union

from .config_loader import DEFAULT_SOURCE_SUFFIX, UndeadConfig
from .dotted import to_dotted
from .entrypoints import CandidateFile, classify
from .errors import TargetNotFound, UndeadError
from .file_walker import iter_source_files
from .project_root import find_project_root
from .reachability import build_imported_set

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DeadFile:
    rel_path: str
    full_path: Path


@dataclass
class ScanResult:
    root: Path
    dead_files: List[DeadFile] = field(default_factory=list)
    scanned_files: int = 0
    duration: float = 0.0
    failures: List[UndeadError] = field(default_factory=list)


def render_relative(path: Path, root: Path, relative_to: Optional[Path] = None) -> str:
    """``path`` relative to ``relative_to`` (with ``..`` when outside it), else to ``root``.

    Distinct paths always render to distinct strings.
    """
    if relative_to is not None:
        try:
            return Path(os.path.relpath(path, relative_to)).as_posix()
        except ValueError:
            # different drive on Windows
            pass
    try:
        return path.relative_to(root).as_posix()
    except ValueError:
        return path.as_posix()


def resolve_dead_files(
    candidates: Iterable[CandidateFile],
    imported: AbstractSet[str],
    root: Path,
    suffix: str = DEFAULT_SOURCE_SUFFIX,
    relative_to: Optional[Path] = None,
) -> List[DeadFile]:
    """
    Filter candidates whose dotted form nobody imports.

    Entrypoints and files outside ``root`` are never reported. The result is
    de-duplicated by absolute path and sorted by rendered path.
    """
    root = Path(os.path.abspath(root))
    dead: Dict[Path, DeadFile] = {}
    for candidate in candidates:
        if candidate.is_entrypoint:
            continue
        full_path = Path(os.path.abspath(candidate.path))
        try:
            dotted = to_dotted(full_path, root, suffix)
        except ValueError:
            logger.debug("skipping %s: outside project root %s", full_path, root)
            continue
        if dotted in imported:
            continue
        if full_path not in dead:
            rel = render_relative(full_path, root, relative_to)
            dead[full_path] = DeadFile(rel_path=rel, full_path=full_path)
    return sorted(dead.values(), key=lambda d: (d.rel_path, d.full_path.as_posix()))


def find_dead_files(
    paths: Sequence[Union[str, Path]],
    ignore: Iterable[str] = (),
    config: Optional[UndeadConfig] = None,
    cwd: Optional[Path] = None,
) -> ScanResult:
    """
    Run a full scan.

    Args:
        paths: target files or directories; the project root is located from the first one
        ignore: ignore patterns, added to ``config.ignore``
        config: scan settings
        cwd: directory dead paths are rendered relative to (process cwd by default)

    Returns:
        ScanResult: sorted dead files, scan statistics and absorbed failures

    Raises:
        TargetNotFound: a target path does not exist
        RootNotFound: no project root above the first target
    """
    started = time.perf_counter()
    config = config or UndeadConfig()
    if not paths:
        raise TargetNotFound("no target paths given")

    targets = [Path(p).resolve() for p in paths]
    for target in targets:
        if not target.exists():
            raise TargetNotFound(f"path does not exist: {target}", target)

    root = find_project_root(targets[0], config.root_markers)
    logger.debug("project root: %s", root)

    ignore_patterns = list(config.ignore) + list(ignore)
    candidate_paths = iter_source_files(
        targets, ignore_patterns, config.source_suffix, config.respect_gitignore, root=root
    )
    project_paths = iter_source_files(
        [root], ignore_patterns, config.source_suffix, config.respect_gitignore, root=root
    )

    candidates, vanished = classify(candidate_paths, config)
    reachability = build_imported_set(project_paths, root, config)

    relative_to = Path(cwd).resolve() if cwd is not None else Path.cwd().resolve()
    result = ScanResult(
        root=root,
        dead_files=resolve_dead_files(
            candidates, reachability.imported, root, config.source_suffix, relative_to
        ),
        scanned_files=len(candidate_paths),
        failures=[*vanished, *reachability.failures],
    )
    result.duration = time.perf_counter() - started
    return result
