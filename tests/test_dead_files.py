from __future__ import annotations

from pathlib import Path

import pytest

from undead.config_loader import UndeadConfig
from undead.dead_files import DeadFile, find_dead_files, resolve_dead_files
from undead.entrypoints import CandidateFile
from undead.errors import ParseError, RootNotFound, TargetNotFound

from conftest import _w

MAIN = 'if __name__ == "__main__":\n    pass\n'


def _dead(project: Path, *paths, **kwargs):
    result = find_dead_files([project / p for p in paths] or [project], cwd=project, **kwargs)
    return [d.rel_path for d in result.dead_files]


def test_unimported_module_is_dead(project: Path) -> None:
    _w(project, "a.py", "x = 1\n")
    _w(project, "b.py", MAIN)
    assert _dead(project) == ["a.py"]


def test_imported_module_is_live(project: Path) -> None:
    _w(project, "a.py", "x = 1\n")
    _w(project, "b.py", "import a\n" + MAIN)
    assert _dead(project) == []


def test_initializer_is_never_dead(project: Path) -> None:
    _w(project, "pkg/__init__.py", "")
    _w(project, "pkg/orphan.py", "")
    assert _dead(project) == ["pkg/orphan.py"]


def test_package_import_keeps_only_initializer(project: Path) -> None:
    _w(project, "main.py", "import pkg\n" + MAIN)
    _w(project, "pkg/__init__.py", "from . import used\n")
    _w(project, "pkg/used.py", "")
    _w(project, "pkg/unused.py", "")
    assert _dead(project) == ["pkg/unused.py"]


def test_relative_and_absolute_imports(project: Path) -> None:
    _w(project, "app/__init__.py", "")
    _w(project, "app/main.py", "from app.services import billing\n" + MAIN)
    _w(project, "app/services/__init__.py", "")
    _w(project, "app/services/billing.py", "from ..models.invoice import Invoice\nfrom .tax import rate\n")
    _w(project, "app/services/tax.py", "rate = 0.2\n")
    _w(project, "app/models/__init__.py", "")
    _w(project, "app/models/invoice.py", "class Invoice: ...\n")
    _w(project, "app/models/legacy.py", "class Old: ...\n")
    assert _dead(project) == ["app/models/legacy.py"]


def test_target_scope_uses_whole_project_imports(project: Path) -> None:
    _w(project, "lib/used.py", "")
    _w(project, "lib/unused.py", "")
    _w(project, "tools/run.py", "from lib import used\n" + MAIN)
    _w(project, "tools/stale.py", "")
    # only lib/ is a candidate, but tools/run.py still counts as an importer
    assert _dead(project, "lib") == ["lib/unused.py"]


def test_parse_errors_do_not_abort(project: Path) -> None:
    _w(project, "broken.py", "def (:\n")
    _w(project, "a.py", "")
    result = find_dead_files([project], cwd=project)
    assert [d.rel_path for d in result.dead_files] == ["a.py", "broken.py"]
    assert any(isinstance(f, ParseError) for f in result.failures)
    assert result.scanned_files == 2


def test_output_is_deterministic(project: Path) -> None:
    for i in range(20):
        _w(project, f"pkg{i % 3}/mod{i}.py", f"import pkg{(i + 1) % 3}.mod{(i + 5) % 20}\n")
    first = find_dead_files([project], config=UndeadConfig(workers=1), cwd=project)
    second = find_dead_files([project], config=UndeadConfig(workers=16), cwd=project)
    assert first.dead_files == second.dead_files
    rels = [d.rel_path for d in first.dead_files]
    assert rels == sorted(set(rels))


def test_rendered_relative_to_cwd(project: Path) -> None:
    _w(project, "sub/a.py", "")
    result = find_dead_files([project / "sub"], cwd=project / "sub")
    assert result.dead_files == [DeadFile("a.py", project / "sub" / "a.py")]


def test_missing_target(project: Path) -> None:
    with pytest.raises(TargetNotFound):
        find_dead_files([project / "nope"])


def test_root_not_found(tmp_path: Path) -> None:
    _w(tmp_path, "a.py", "")
    with pytest.raises(RootNotFound):
        find_dead_files([tmp_path], config=UndeadConfig(root_markers=["no-such-marker.undead"]))


def test_resolve_dead_files_dedupes_and_sorts(tmp_path: Path) -> None:
    root = tmp_path
    candidates = [
        CandidateFile(root / "z.py", False),
        CandidateFile(root / "a.py", False),
        CandidateFile(root / "z.py", False),
        CandidateFile(root / "main.py", True),
        CandidateFile(root / "live.py", False),
        CandidateFile(tmp_path.parent / "outside.py", False),
    ]
    dead = resolve_dead_files(candidates, {"live"}, root)
    assert [d.rel_path for d in dead] == ["a.py", "z.py"]


def test_same_name_outside_cwd_is_kept(project: Path) -> None:
    _w(project, "a.py")
    _w(project, "sub/a.py")
    result = find_dead_files([project], cwd=project / "sub")
    assert [d.rel_path for d in result.dead_files] == ["../a.py", "a.py"]
    assert {d.full_path for d in result.dead_files} == {project / "a.py", project / "sub" / "a.py"}


def test_resolve_dead_files_keeps_distinct_files_with_equal_names(tmp_path: Path) -> None:
    root = tmp_path
    candidates = [CandidateFile(root / "a.py", False), CandidateFile(root / "pkg" / "a.py", False)]
    dead = resolve_dead_files(candidates, set(), root, relative_to=root / "pkg")
    assert [(d.rel_path, d.full_path) for d in dead] == [
        ("../a.py", root / "a.py"),
        ("a.py", root / "pkg" / "a.py"),
    ]


def test_deeply_nested_file_does_not_abort_scan(project: Path) -> None:
    _w(project, "deep.py", "x = " + "-" * 200000 + "1\n")
    _w(project, "a.py", "x = 1\n")
    result = find_dead_files([project], cwd=project)
    assert [d.rel_path for d in result.dead_files] == ["a.py", "deep.py"]
    assert any(isinstance(f, ParseError) for f in result.failures)


def test_root_gitignore_applies_to_subdirectory_target(project: Path) -> None:
    _w(project, ".gitignore", "gen_*.py\n")
    _w(project, "src/gen_x.py")
    _w(project, "src/real.py")
    assert _dead(project, "src") == ["src/real.py"]
