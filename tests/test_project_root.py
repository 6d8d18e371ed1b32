from __future__ import annotations

from pathlib import Path

import pytest

from undead.errors import RootNotFound
from undead.project_root import find_project_root

from conftest import _w


def test_finds_closest_marked_ancestor(tmp_path: Path) -> None:
    root = tmp_path.resolve()
    _w(root, "setup.py", "")
    _w(root, "pkg/sub/mod.py", "")
    assert find_project_root(root / "pkg" / "sub") == root
    # a file start path searches from its directory
    assert find_project_root(root / "pkg" / "sub" / "mod.py") == root


def test_start_directory_itself_counts(tmp_path: Path) -> None:
    root = tmp_path.resolve()
    (root / ".git").mkdir()
    assert find_project_root(root) == root


def test_nested_project_wins(tmp_path: Path) -> None:
    outer = tmp_path.resolve()
    _w(outer, "pyproject.toml", "")
    _w(outer, "inner/setup.py", "")
    _w(outer, "inner/pkg/mod.py", "")
    assert find_project_root(outer / "inner" / "pkg") == outer / "inner"


def test_custom_markers(tmp_path: Path) -> None:
    root = tmp_path.resolve()
    _w(root, "WORKSPACE", "")
    _w(root, "a/b.py", "")
    assert find_project_root(root / "a", markers=["WORKSPACE"]) == root


def test_root_not_found(tmp_path: Path) -> None:
    _w(tmp_path, "a/b.py", "")
    with pytest.raises(RootNotFound):
        find_project_root(tmp_path / "a", markers=["no-such-marker-file.undead"])
