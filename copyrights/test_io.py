import os

import pytest

from copyrights.base import Scope
from copyrights.io import (
    FileSet,
    canonicalize,
    guess_line_terminator,
    join_lines,
    read_ignore_file,
    replace_file,
    split_lines,
    starts_with,
    walk_files,
)


def test_split_lines():
    assert split_lines("a\r\nb\rc\n") == ["a", "b", "c"]
    assert split_lines("a\n\n") == ["a", ""]
    assert split_lines("a") == ["a"]
    assert split_lines("") == []


def test_guess_line_terminator():
    assert guess_line_terminator("x\r\ny\n") == "\r\n"
    assert guess_line_terminator("x\ry\n") == "\r"
    assert guess_line_terminator("x\ny\r\n") == "\n"
    assert guess_line_terminator("no terminator") == "\n"
    # only the start of the text is looked at
    assert guess_line_terminator("x" * 2000 + "\r\n") == "\n"


def test_canonicalize():
    assert canonicalize("a\nb\r\nc\r", "\r\n") == "a\r\nb\r\nc\r\n"
    assert join_lines(["a", "b"], "\r\n") == "a\r\nb\r\n"


def test_starts_with(tmp_path):
    path = tmp_path / "f"
    path.write_bytes(b"/*\r\n * text\r\n */\r\n")
    assert starts_with(path, "/*\n")
    assert not starts_with(path, "<?xml")
    assert not starts_with(tmp_path / "missing", "/*")


def test_replace_file(tmp_path):
    path = tmp_path / "Foo.java"
    path.write_text("old\n")
    assert replace_file(path, "new\n") == path
    assert path.read_text() == "new\n"
    assert not (tmp_path / "Foo.java.new").exists()


def test_replace_file_keeping_new(tmp_path):
    path = tmp_path / "Foo.java"
    path.write_text("old\n")
    assert replace_file(path, "new\n", keep_new=True) == tmp_path / "Foo.java.new"
    assert path.read_text() == "old\n"
    assert (tmp_path / "Foo.java.new").read_text() == "new\n"


def test_walk_files(tmp_path):
    (tmp_path / "b").mkdir()
    (tmp_path / "b" / "z.txt").write_text("z")
    (tmp_path / "a.txt").write_text("a")
    (tmp_path / "c.txt").write_text("c")
    found = [p.relative_to(tmp_path).as_posix() for p in walk_files(tmp_path)]
    assert found == ["a.txt", "b/z.txt", "c.txt"]

    found = [p.name for p in walk_files(tmp_path, lambda p: p.name != "b")]
    assert found == ["a.txt", "c.txt"]


def test_file_set(tmp_path):
    ignore = tmp_path / ".copyrightignore"
    ignore.write_text("# comment\n*.gen.java\nbuild/\n!keep.gen.java\n")
    file_set = read_ignore_file(ignore)
    (tmp_path / "build").mkdir()
    assert file_set(tmp_path / "Foo.gen.java")
    assert not file_set(tmp_path / "keep.gen.java")
    assert file_set(tmp_path / "build")
    assert not file_set(tmp_path / "Foo.java")
    # outside the base directory
    assert not file_set(tmp_path.parent / "Foo.gen.java")


def test_missing_ignore_file(tmp_path):
    file_set = read_ignore_file(tmp_path / "nothing")
    assert isinstance(file_set, FileSet)
    assert not file_set(tmp_path / "Foo.java")


def test_scope_runs_deferred_in_reverse():
    calls = []
    with Scope() as scope:
        scope.defer(lambda: calls.append("first"))
        scope.defer(lambda: calls.append("second"))
        scope.on_failure(lambda exc_type: calls.append("failed"))
    assert calls == ["second", "first"]


def test_scope_on_failure():
    calls = []
    with pytest.raises(OSError):
        with Scope() as scope:
            scope.defer(lambda: calls.append("always"))
            scope.on_failure(lambda exc_type: calls.append(exc_type.__name__))
            raise OSError("boom")
    assert calls == ["OSError", "always"]


@pytest.mark.skipif(not hasattr(os, "mkfifo"), reason="named pipes are not supported")
def test_walk_files_skips_named_pipe(tmp_path):
    (tmp_path / "a.txt").write_text("a")
    os.mkfifo(tmp_path / "pipe")
    assert [p.name for p in walk_files(tmp_path)] == ["a.txt"]
