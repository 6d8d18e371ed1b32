"""
Builds the project-wide imported set.

Every file under the project root is resolved on a thread pool. Workers only
return their own lists; the fold into a single set happens on the calling
thread once the pool has joined, so insertion order never matters.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from typing import FrozenSet, Iterable, List, Optional, Union

from .config_loader import UndeadConfig
from .errors import FileVanished, ParseError, UndeadError
from .import_resolver import FileImports, ResolvedImport, resolve_file
from .probe import PathProbe

logger = logging.getLogger(__name__)


@dataclass
class ReachabilityResult:
    imported: FrozenSet[str] = frozenset()
    files_resolved: int = 0
    failures: List[UndeadError] = field(default_factory=list)


def fold_imports(batches: Iterable[Iterable[ResolvedImport]], init_name: str = "__init__") -> FrozenSet[str]:
    """Merge resolved imports into one set of dotted keys (packages -> initializer)."""
    imported = set()
    for batch in batches:
        for resolved in batch:
            imported.add(resolved.key(init_name))
    return frozenset(imported)


def _resolve_one(path: Path, root: Path, probe: PathProbe, suffix: str) -> Union[FileImports, UndeadError]:
    try:
        return resolve_file(path, root, probe=probe, suffix=suffix)
    except (ParseError, FileVanished) as e:
        return e


def build_imported_set(
    files: Iterable[Path],
    root: Path,
    config: Optional[UndeadConfig] = None,
    workers: Optional[int] = None,
) -> ReachabilityResult:
    """
    Resolve the imports of ``files`` and fold them into one imported set.

    Args:
        files: every source file under the project root
        root: the project root
        config: scan settings (suffix, initializer name, default pool size)
        workers: overrides ``config.workers``

    Returns:
        ReachabilityResult: the imported set plus the files that could not be read or parsed
    """
    config = config or UndeadConfig()
    max_workers = workers if workers is not None else config.workers
    probe = PathProbe(config.source_suffix)
    paths = list(files)

    with ThreadPoolExecutor(max_workers=max_workers) as pool:
        outcomes = list(
            pool.map(lambda p: _resolve_one(p, root, probe, config.source_suffix), paths)
        )

    result = ReachabilityResult()
    batches: List[List[ResolvedImport]] = []
    for outcome in outcomes:
        if isinstance(outcome, UndeadError):
            logger.warning("%s", outcome)
            result.failures.append(outcome)
            continue
        batches.append(outcome.imports)
        result.failures.extend(outcome.skipped)
        result.files_resolved += 1

    result.imported = fold_imports(batches, config.init_name)
    logger.debug(
        "resolved %d/%d files into %d imported names",
        result.files_resolved, len(paths), len(result.imported),
    )
    return result
