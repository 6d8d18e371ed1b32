"""
Import resolution: raw import statements -> project-relative dotted names.

A statement is resolved against the filesystem under the project root:

 - ``import a.b``            -> Package("a.b") if root/a/b is a directory, else Module("a.b")
 - ``from a.b import c``     -> Module("a.b") if root/a/b.py is a file (c is an attribute),
                                otherwise c is classified under root/a/b
 - ``from .. import c``      -> same, anchored at the importing file ascended twice

Paths that exist as neither a file nor a directory are assumed to be modules.
Packages only become reachable through their initializer, see reachability.py.
"""

from __future__ import annotations

import ast
import logging
import os
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import List, Optional, Tuple, Union

from .config_loader import DEFAULT_SOURCE_SUFFIX
from .dotted import to_dotted
from .errors import FileVanished, InvalidRelativeImport, ParseError
from .probe import PathKind, PathProbe

logger = logging.getLogger(__name__)


# ---- raw statements (what the extractor yields) ----

@dataclass(frozen=True)
class Import:
    """``import X[, Y...]``"""
    names: Tuple[str, ...]
    lineno: int = 0


@dataclass(frozen=True)
class ImportFrom:
    """``from [.]*[source] import names``"""
    source: Optional[str]
    names: Tuple[str, ...]
    level: Optional[int] = None
    lineno: int = 0


RawImportStatement = Union[Import, ImportFrom]


# ---- resolved imports ----

class ImportKind(str, Enum):
    MODULE = "module"
    PACKAGE = "package"


@dataclass(frozen=True)
class ResolvedImport:
    kind: ImportKind
    dotted: str

    @classmethod
    def module(cls, dotted: str) -> "ResolvedImport":
        return cls(ImportKind.MODULE, dotted)

    @classmethod
    def package(cls, dotted: str) -> "ResolvedImport":
        return cls(ImportKind.PACKAGE, dotted)

    def key(self, init_name: str = "__init__") -> str:
        """The imported-set entry; a package is reachable only via its initializer."""
        if self.kind is ImportKind.PACKAGE:
            return f"{self.dotted}.{init_name}"
        return self.dotted


@dataclass
class FileImports:
    """Everything one file contributed, plus the statements that were skipped."""
    path: Path
    imports: List[ResolvedImport] = field(default_factory=list)
    skipped: List[InvalidRelativeImport] = field(default_factory=list)


# ---- statement extraction ----

class _ImportCollector(ast.NodeVisitor):
    """Collects import statements at any depth, in source order."""

    def __init__(self) -> None:
        self.statements: List[RawImportStatement] = []

    def visit_Import(self, node: ast.Import) -> None:  # noqa: N802
        self.statements.append(
            Import(names=tuple(alias.name for alias in node.names), lineno=node.lineno)
        )

    def visit_ImportFrom(self, node: ast.ImportFrom) -> None:  # noqa: N802
        self.statements.append(
            ImportFrom(
                source=node.module,
                names=tuple(alias.name for alias in node.names),
                level=node.level,
                lineno=node.lineno,
            )
        )


def extract_statements(source: Union[str, bytes], filename: str = "<unknown>") -> List[RawImportStatement]:
    """Parse ``source`` and return its import statements in order.

    Raises ParseError when the text is not valid Python.
    """
    collector = _ImportCollector()
    try:
        tree = ast.parse(source, filename=filename)
        collector.visit(tree)
    except (SyntaxError, ValueError) as e:
        raise ParseError(f"cannot parse {filename}: {e}", Path(filename)) from e
    except (RecursionError, MemoryError) as e:
        # deeply nested expressions exhaust the parser or the visitor
        raise ParseError(f"cannot parse {filename}: nesting too deep ({type(e).__name__})", Path(filename)) from e
    return collector.statements


# ---- resolution ----

def _base_directory(level: Optional[int], current_file: Path, root: Path) -> Path:
    # absent level is treated like an absolute import
    if not level:
        return root

    base = current_file
    for _ in range(level):
        parent = base.parent
        if parent == base:
            raise InvalidRelativeImport(
                f"relative import of level {level} climbs above the filesystem root in {current_file}",
                current_file,
            )
        base = parent

    if base != root and root not in base.parents:
        raise InvalidRelativeImport(
            f"relative import of level {level} leaves the project root {root} in {current_file}",
            current_file,
        )
    return base


def _dotted(path: Path, root: Path) -> str:
    # joined import paths never carry the source suffix
    return to_dotted(path, root, suffix="")


def _classify(path: Path, dotted: str, probe: PathProbe) -> ResolvedImport:
    if probe.kind(path) is PathKind.PACKAGE:
        return ResolvedImport.package(dotted)
    return ResolvedImport.module(dotted)


def resolve(
    statement: RawImportStatement,
    current_file: Union[str, Path],
    root: Union[str, Path],
    probe: Optional[PathProbe] = None,
    suffix: str = DEFAULT_SOURCE_SUFFIX,
) -> List[ResolvedImport]:
    """
    Resolve one statement found in ``current_file``.

    Args:
        statement: an Import or ImportFrom
        current_file: the file containing the statement
        root: the project root
        probe: shared path-kind probe; a private one is created when omitted
        suffix: source file suffix

    Returns:
        List[ResolvedImport]: zero or more resolved imports

    Raises:
        InvalidRelativeImport: the relative level leaves the project root
    """
    root = Path(os.path.abspath(root))
    current_file = Path(os.path.abspath(current_file))
    if probe is None:
        probe = PathProbe(suffix)

    if isinstance(statement, Import):
        # plain imports are always absolute
        return [
            _classify(root.joinpath(*name.split(".")), name, probe)
            for name in statement.names
        ]

    base = _base_directory(statement.level, current_file, root)

    if statement.source:
        joined = base.joinpath(*statement.source.split("."))
        if probe.kind(joined) is PathKind.MODULE:
            # from <module> import <attributes>
            return [ResolvedImport.module(_dotted(joined, root))]
        anchor = joined
    else:
        anchor = base

    results: List[ResolvedImport] = []
    for name in statement.names:
        if name == "*":
            if anchor != root and probe.kind(anchor) is PathKind.PACKAGE:
                results.append(ResolvedImport.package(_dotted(anchor, root)))
            continue
        target = anchor / name
        results.append(_classify(target, _dotted(target, root), probe))
    return results


def resolve_file(
    path: Union[str, Path],
    root: Union[str, Path],
    probe: Optional[PathProbe] = None,
    suffix: str = DEFAULT_SOURCE_SUFFIX,
) -> FileImports:
    """Extract and resolve every import statement of one file.

    Raises FileVanished if the file cannot be read and ParseError if it is not
    valid Python. Statements with an invalid relative level are skipped and
    recorded on the result.
    """
    path = Path(os.path.abspath(path))
    if probe is None:
        probe = PathProbe(suffix)

    try:
        source = path.read_bytes()
    except OSError as e:
        raise FileVanished(f"cannot read {path}: {e}", path) from e

    result = FileImports(path=path)
    for statement in extract_statements(source, filename=str(path)):
        try:
            result.imports.extend(resolve(statement, path, root, probe=probe, suffix=suffix))
        except InvalidRelativeImport as e:
            logger.debug("skipping import on line %d: %s", statement.lineno, e)
            result.skipped.append(e)
    return result
