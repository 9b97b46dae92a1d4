import os

import pytest

from copyrights import __version__
from copyrights.cli import main


@pytest.fixture
def src(tmp_path):
    src = tmp_path / "src"
    src.mkdir()
    (src / "Missing.java").write_text("class Missing {}\n")
    (src / "run.sh").write_text("#!/bin/sh\necho hi\n")
    return src


def test_version(capsys):
    with pytest.raises(SystemExit) as e:
        main(["--version"])
    assert e.value.code == 0
    assert f"copyrights {__version__}" in capsys.readouterr().out


def test_no_command(capsys):
    assert main([]) == 0
    assert "usage:" in capsys.readouterr().out


def test_check(src, capsys):
    assert main(["check", "-y", str(src)]) == 2
    out = capsys.readouterr().out
    assert "Missing.java: No copyright" in out
    assert "run.sh: No copyright" in out


def test_check_selected_groups(src):
    assert main(["check", "-y", "-j", str(src)]) == 1
    assert main(["check", "-y", "-p", str(src)]) == 1
    assert main(["check", "-y", "-x", str(src)]) == 0


def test_check_excludes(src, tmp_path):
    patterns = tmp_path / "excludes"
    patterns.write_text("run.sh\n")
    assert main(["check", "-y", "-X", "Missing", str(src)]) == 1
    assert main(["check", "-y", "-X", f"@{patterns}", "-X", "Missing", str(src)]) == 0


def test_count(src, capsys):
    main(["check", "-y", "-c", "-q", str(src)])
    out = capsys.readouterr().out
    assert f"{'No Copyright:':<24}2" in out
    assert "Missing.java" not in out


def test_repair(src):
    assert main(["repair", "-y", str(src)]) == 2
    assert main(["check", "-y", str(src)]) == 0
    assert (src / "run.sh").read_text().startswith("#!/bin/sh\n#\n# Copyright (c) ")


def test_repair_dont_update(src):
    assert main(["repair", "-y", "-n", str(src / "Missing.java")]) == 1
    assert (src / "Missing.java").read_text() == "class Missing {}\n"
    assert (src / "Missing.java.new").exists()


def test_alternate_templates(src, tmp_path):
    first = tmp_path / "first.txt"
    first.write_text("/*\n * Copyright YYYY First Corp.\n */\n")
    second = tmp_path / "second.txt"
    second.write_text("/*\n * Copyright YYYY Second Corp.\n *\n * Be nice.\n */\n")
    (src / "Second.java").write_text("/*\n * Copyright 2020 Second Corp.\n *\n * Be nice.\n */\nclass S {}\n")

    args = ["check", "-y", "-j", "-C", str(first), str(src / "Second.java")]
    assert main(args) == 1
    assert main(args + ["-A", os.pathsep.join([str(first), str(second)])]) == 0


def test_missing_template(src, capsys):
    assert main(["check", "-C", "no-such-template.txt", str(src)]) == 1
    assert "Copyright template not found" in capsys.readouterr().out


def test_repair_only_flags(src):
    with pytest.raises(SystemExit):
        main(["check", "-N", str(src)])
