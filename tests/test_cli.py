from __future__ import annotations

import io
from pathlib import Path

import pytest

from undead import cli
from undead.dead_files import DeadFile, ScanResult
from undead.printer import Printer

from conftest import _w


def test_help_exits_zero() -> None:
    with pytest.raises(SystemExit) as excinfo:
        cli.main(["--help"])
    assert excinfo.value.code == 0


def test_no_paths_prints_help(capsys: pytest.CaptureFixture[str]) -> None:
    assert cli.main([]) == 2
    assert "usage: undead" in capsys.readouterr().out


def test_piped_output_is_bare_paths(
    project: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    _w(project, "b.py", "x = 1\n")
    _w(project, "a.py", "x = 1\n")
    _w(project, "main.py", 'import b\nif __name__ == "__main__":\n    pass\n')
    monkeypatch.chdir(project)

    assert cli.main(["."]) == 0
    assert capsys.readouterr().out == "a.py\n"


def test_ignore_paths_option(
    project: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    _w(project, "a.py", "")
    _w(project, "generated/b.py", "")
    monkeypatch.chdir(project)

    assert cli.main([".", "-I", "generated", "--jobs", "2"]) == 0
    assert capsys.readouterr().out == "a.py\n"


def test_missing_target_fails(
    project: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    monkeypatch.chdir(project)
    assert cli.main(["does-not-exist"]) == 1
    captured = capsys.readouterr()
    assert captured.out == ""
    assert "does not exist" in captured.err


def test_invalid_config_fails(
    project: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    _w(project, "undead.yaml", "workers: lots\n")
    monkeypatch.chdir(project)
    assert cli.main(["."]) == 1
    assert "workers" in capsys.readouterr().err


def test_init_writes_example(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.chdir(tmp_path)
    assert cli.main(["--init"]) == 0
    assert (tmp_path / "undead.yaml").exists()
    # refuses to overwrite
    assert cli.main(["--init"]) == 1


def _result(tmp_path: Path) -> ScanResult:
    return ScanResult(
        root=tmp_path,
        dead_files=[DeadFile("pkg/a.py", tmp_path / "pkg" / "a.py")],
        scanned_files=7,
        duration=0.5,
    )


def test_printer_non_interactive(tmp_path: Path) -> None:
    out = io.StringIO()
    Printer(stream=out, interactive=False).report(_result(tmp_path))
    assert out.getvalue() == "pkg/a.py\n"


def test_printer_interactive(tmp_path: Path) -> None:
    out = io.StringIO()
    Printer(stream=out, interactive=True).report(_result(tmp_path))
    text = out.getvalue()
    assert "pkg/a.py" in text
    assert "-" * 20 in text
    assert "Found 1 dead files" in text
    assert "Scanned 7 files in 0.50s" in text


def test_project_config_used_from_subdirectory(
    project: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    _w(project, "undead.yaml", "ignore: ['gen_*.py']\n")
    _w(project, "sub/gen_a.py", "")
    _w(project, "sub/b.py", "")
    monkeypatch.chdir(project / "sub")

    assert cli.main(["."]) == 0
    assert capsys.readouterr().out == "b.py\n"
