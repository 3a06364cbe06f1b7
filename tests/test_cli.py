from __future__ import annotations

from pathlib import Path

import pytest

from filebundler import __version__, core
from filebundler.cli import main


@pytest.fixture
def project(tmp_path: Path, monkeypatch) -> Path:
    (tmp_path / "src").mkdir()
    (tmp_path / "src" / "a.cs").write_text("x\n\ny\n", encoding="utf-8")
    (tmp_path / "b.cs").write_text("z\n", encoding="utf-8")
    (tmp_path / "readme.md").write_text("# readme\n", encoding="utf-8")
    monkeypatch.chdir(tmp_path)
    return tmp_path


def test_bundle_command_writes_output(project: Path, capsys) -> None:
    main(["bundle", "-o", "out.txt", "-l", "cs", "-r", "-n"])

    assert (project / "out.txt").read_text(encoding="utf-8").splitlines() == [
        "// Source: src/a.cs",
        "x",
        "y",
        "",
        "// Source: b.cs",
        "z",
        "",
    ]
    assert "File was created" in capsys.readouterr().out


def test_bundle_requires_languages(project: Path) -> None:
    with pytest.raises(SystemExit) as exc:
        main(["bundle", "--output", "out.txt"])
    assert exc.value.code == 2
    assert not (project / "out.txt").exists()


def test_bundle_rejects_blank_language_list(project: Path, capsys) -> None:
    with pytest.raises(SystemExit) as exc:
        main(["bundle", "--output", "out.txt", "--languages", " , "])
    assert exc.value.code == 2
    assert "at least one language" in capsys.readouterr().err


def test_bundle_reports_invalid_root(project: Path, capsys) -> None:
    with pytest.raises(SystemExit) as exc:
        main(["bundle", "-o", "out.txt", "-l", "all", "--root", "missing"])
    assert exc.value.code == 1
    assert "File path is invalid" in capsys.readouterr().err


def test_bundle_reports_deleted_working_directory(
    tmp_path: Path, monkeypatch, capsys
) -> None:
    gone = tmp_path / "gone"
    gone.mkdir()
    monkeypatch.chdir(gone)
    gone.rmdir()

    with pytest.raises(SystemExit) as exc:
        main(["bundle", "-o", str(tmp_path / "out.txt"), "-l", "cs"])
    assert exc.value.code == 1
    assert "File path is invalid" in capsys.readouterr().err
    assert not (tmp_path / "out.txt").exists()


def test_bundle_reports_unwritable_output(project: Path, capsys) -> None:
    (project / "outdir").mkdir()

    with pytest.raises(SystemExit) as exc:
        main(["bundle", "-o", "outdir", "-l", "cs"])
    assert exc.value.code == 1
    err = capsys.readouterr().err
    assert "Error: Could not write to output file" in err
    assert "outdir" in err
    assert (project / "outdir").is_dir()


def test_bundle_removes_output_when_a_source_vanishes(
    project: Path, monkeypatch, capsys
) -> None:
    found = core.scan_files(project)
    monkeypatch.setattr(core, "scan_files", lambda root: found + [project / "vanished.cs"])

    with pytest.raises(SystemExit) as exc:
        main(["bundle", "-o", "out.txt", "-l", "cs", "-n"])
    assert exc.value.code == 1
    assert "Error: Could not read source file 'vanished.cs'" in capsys.readouterr().err
    assert not (project / "out.txt").exists()


def test_unknown_sort_order_falls_back_to_name(project: Path, capsys) -> None:
    main(["bundle", "-o", "out.txt", "-l", "cs,md", "-s", "size", "-v"])

    assert (project / "out.txt").read_text(encoding="utf-8") == (
        "x\n\ny\n\nz\n\n# readme\n\n"
    )
    assert "Unknown sort order 'size'" in capsys.readouterr().out


def test_sort_by_type_and_author(project: Path) -> None:
    main(["bundle", "-o", "out.txt", "-l", "md,cs", "--sort", "type", "-a", "Ada"])

    assert (project / "out.txt").read_text(encoding="utf-8") == (
        "// Author: Ada\nx\n\ny\n\nz\n\n# readme\n\n"
    )


def test_ignore_file_and_exclude(project: Path) -> None:
    (project / ".bundleignore").write_text("# skip sources\nsrc/\n", encoding="utf-8")

    main(
        [
            "bundle",
            "-o",
            "out.txt",
            "-l",
            "all",
            "--ignore-file",
            ".bundleignore",
            "-x",
            ".bundleignore",
            "-x",
            "*.md",
        ]
    )

    assert (project / "out.txt").read_text(encoding="utf-8") == "z\n\n"


def test_missing_ignore_file_exits_with_error(project: Path, capsys) -> None:
    with pytest.raises(SystemExit) as exc:
        main(["bundle", "-o", "out.txt", "-l", "cs", "--ignore-file", "nope"])
    assert exc.value.code == 1
    assert "does not exist" in capsys.readouterr().err


def test_create_rsp_then_replay_it(project: Path, monkeypatch) -> None:
    answers = iter(["bundle.txt", "cs", "yes", "type", "yes", "Ada"])
    monkeypatch.setattr("builtins.input", lambda prompt="": next(answers))

    main(["create-rsp", "--rsp-file", "bundle.rsp"])

    assert (project / "bundle.rsp").read_text(encoding="utf-8") == (
        'bundle --output "bundle.txt" --languages "cs" --note '
        '--sort type --remove-empty-lines --author "Ada"'
    )

    main(["@bundle.rsp"])

    assert (project / "bundle.txt").read_text(encoding="utf-8").splitlines() == [
        "// Author: Ada",
        "// Source: src/a.cs",
        "x",
        "y",
        "",
        "// Source: b.cs",
        "z",
        "",
    ]


def test_version(capsys) -> None:
    with pytest.raises(SystemExit) as exc:
        main(["--version"])
    assert exc.value.code == 0
    assert __version__ in capsys.readouterr().out
