"""
Source file enumeration with ignore patterns and nested .gitignore files.
"""

from __future__ import annotations

import fnmatch
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Iterator, List, Optional, Sequence, Set, Tuple

from .config_loader import DEFAULT_SOURCE_SUFFIX

logger = logging.getLogger(__name__)

ALWAYS_SKIPPED_DIRS = {
    ".git",
    "__pycache__",
    ".venv",
    "venv",
    ".tox",
    ".mypy_cache",
    ".pytest_cache",
}


@dataclass(frozen=True)
class _GitignoreRule:
    base: Path        # directory holding the .gitignore
    pattern: str
    dir_only: bool
    anchored: bool    # pattern contains a slash: match against the path from base

    def matches(self, path: Path, is_dir: bool) -> bool:
        if self.dir_only and not is_dir:
            return False
        try:
            rel = path.relative_to(self.base).as_posix()
        except ValueError:
            return False
        if self.anchored:
            return fnmatch.fnmatch(rel, self.pattern)
        return fnmatch.fnmatch(path.name, self.pattern)


def _read_gitignore(directory: Path) -> List[_GitignoreRule]:
    gitignore = directory / ".gitignore"
    if not gitignore.is_file():
        return []
    try:
        lines = gitignore.read_text(encoding="utf-8", errors="replace").splitlines()
    except OSError as e:
        logger.warning("cannot read %s: %s", gitignore, e)
        return []

    rules: List[_GitignoreRule] = []
    for raw in lines:
        line = raw.strip()
        if not line or line.startswith("#"):
            continue
        if line.startswith("!"):
            # TODO: support re-inclusion; negated patterns are ignored for now
            logger.debug("ignoring negated pattern %r in %s", line, gitignore)
            continue
        dir_only = line.endswith("/")
        line = line.rstrip("/")
        anchored = "/" in line
        rules.append(_GitignoreRule(directory, line.lstrip("/"), dir_only, anchored))
    return rules


def _matches_ignore(path: Path, rel: str, patterns: Sequence[str]) -> bool:
    for pat in patterns:
        if fnmatch.fnmatch(rel, pat) or fnmatch.fnmatch(path.as_posix(), pat):
            return True
        if any(fnmatch.fnmatch(part, pat) for part in Path(rel).parts):
            return True
        # a pattern naming an existing path ignores that path and everything below it
        pat_path = Path(os.path.abspath(pat))
        if path == pat_path or pat_path in path.parents:
            return True
    return False


def _ancestor_rules(base: Path, root: Optional[Path]) -> Tuple[_GitignoreRule, ...]:
    """Rules of every .gitignore from ``root`` down to (not including) ``base``."""
    if root is None or root not in base.parents:
        return ()
    chain: List[Path] = []
    for directory in base.parents:
        chain.append(directory)
        if directory == root:
            break
    rules: List[_GitignoreRule] = []
    for directory in reversed(chain):
        rules.extend(_read_gitignore(directory))
    return tuple(rules)


def _walk(
    base: Path,
    ignore: Sequence[str],
    suffix: str,
    respect_gitignore: bool,
    seed: Tuple[_GitignoreRule, ...] = (),
) -> Iterator[Path]:
    inherited: dict = {base: seed}
    for dirpath, dirnames, filenames in os.walk(base):
        current = Path(dirpath)
        rules: Tuple[_GitignoreRule, ...] = inherited.pop(current, ())
        if respect_gitignore:
            rules = rules + tuple(_read_gitignore(current))

        kept = []
        for d in sorted(dirnames):
            d_path = current / d
            rel = d_path.relative_to(base).as_posix()
            if d in ALWAYS_SKIPPED_DIRS:
                continue
            if _matches_ignore(d_path, rel, ignore):
                continue
            if any(rule.matches(d_path, True) for rule in rules):
                continue
            kept.append(d)
            inherited[d_path] = rules
        dirnames[:] = kept

        for fn in sorted(filenames):
            if not fn.endswith(suffix):
                continue
            f_path = current / fn
            rel = f_path.relative_to(base).as_posix()
            if _matches_ignore(f_path, rel, ignore):
                continue
            if any(rule.matches(f_path, False) for rule in rules):
                continue
            if not f_path.is_file():
                continue
            yield f_path


def iter_source_files(
    paths: Iterable[Path],
    ignore: Iterable[str] = (),
    suffix: str = DEFAULT_SOURCE_SUFFIX,
    respect_gitignore: bool = True,
    root: Optional[Path] = None,
) -> List[Path]:
    """
    Collect source files under ``paths``.

    Args:
        paths: target files or directories
        ignore: fnmatch patterns (relative path, path segment, absolute path) or paths to skip
        suffix: source file suffix
        respect_gitignore: honor .gitignore files found while walking
        root: project root; .gitignore files between it and each target also apply

    Returns:
        List[Path]: absolute paths, sorted, without duplicates
    """
    patterns = list(ignore)
    root_path = Path(os.path.abspath(root)) if root is not None else None
    seen: Set[Path] = set()
    for target in paths:
        base = Path(os.path.abspath(target))
        seed = _ancestor_rules(base, root_path) if respect_gitignore else ()
        if base.is_file():
            if (
                base.name.endswith(suffix)
                and not _matches_ignore(base, base.name, patterns)
                and not any(rule.matches(base, False) for rule in seed)
            ):
                seen.add(base)
            continue
        if not base.is_dir():
            logger.warning("skipping %s: not a file or directory", base)
            continue
        seen.update(_walk(base, patterns, suffix, respect_gitignore, seed))
    return sorted(seen, key=lambda p: p.as_posix())
