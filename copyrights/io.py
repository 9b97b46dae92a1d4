from typing import List, Generator, Callable

import logging
import os
import re
import shutil
from pathlib import Path
import pathspec

from copyrights.base import Scope


logger = logging.getLogger(__name__)


##################################################################################################
# File Reading/Writing
##################################################################################################

# Files are read and written as latin-1 so that every byte survives a repair
# unchanged, whatever the real encoding is.
ENCODING = 'latin-1'

_LINE_BREAK = re.compile(r'\r\n|\r|\n')


def read_text_file(path: Path) -> str:
    assert isinstance(path, Path), f"Expected Path, got {type(path)}"
    with open(path, 'rt', encoding=ENCODING, newline='') as f:
        return f.read()


def split_lines(text: str) -> List[str]:
    """
    Split text into lines without their terminators. A terminator at the very
    end does not start another line.
    """
    if not text:
        return []
    lines = _LINE_BREAK.split(text)
    if lines[-1] == '':
        lines.pop()
    return lines


def guess_line_terminator(text: str) -> str:
    """
    The first line terminator seen near the start of the text, '\\n' if none.
    """
    m = _LINE_BREAK.search(text, 0, 1024)
    return m.group() if m else '\n'


def join_lines(lines: List[str], terminator: str = '\n') -> str:
    """Every line, including the last one, is followed by the terminator."""
    return ''.join(line + terminator for line in lines)


def canonicalize(text: str, terminator: str) -> str:
    return _LINE_BREAK.sub(terminator, text)


def starts_with(path: Path, prefix: str) -> bool:
    """
    Does the file start with `prefix`? Carriage returns in the file are
    ignored so that "/*\\n" also matches a file using CRLF.
    """
    try:
        with open(path, 'rt', encoding=ENCODING, newline='') as f:
            head = f.read(len(prefix) * 2 + 16)
    except OSError:
        return False
    return head.replace('\r', '').startswith(prefix)


def write_text_file(path: Path, content: str) -> None:
    assert isinstance(path, Path), f"Expected Path, got {type(path)}"
    with open(path, 'wt', encoding=ENCODING, newline='') as f:
        f.write(content)


def replace_file(path: Path, content: str, keep_new: bool = False) -> Path:
    """
    Write `content` to a `.new` sibling of `path` and copy it over the
    original. With `keep_new` the original is left alone and the sibling is
    kept for inspection; otherwise the sibling is always removed.
    """
    new_path = path.with_name(path.name + '.new')
    with Scope() as scope:
        if keep_new:
            scope.on_failure(lambda _: delete_if_exists(new_path))
        else:
            scope.defer(lambda: delete_if_exists(new_path))
        write_text_file(new_path, content)
        if not keep_new:
            shutil.copyfile(new_path, path)
    return new_path if keep_new else path


def delete_if_exists(path: Path) -> None:
    if path.exists():
        if path.is_dir():
            shutil.rmtree(path)
        else:
            path.unlink()


def walk_files(path: Path, predicate: Callable[[Path], bool] | None = None) -> Generator[Path, None, None]:
    assert isinstance(path, Path), f"Expected Path, got {type(path)}"
    if predicate is not None and not predicate(path):
        return

    if os.path.isfile(path):
        yield path

    elif os.path.isdir(path):
        subfiles = sorted(os.listdir(path))

        for subfile in subfiles:
            yield from walk_files(path / subfile, predicate=predicate)
    else:
        # pipes, sockets and devices
        logger.warning(f"Not a regular file, skipped: {path}")


class FileSet:
    """Paths below `base_path` matched by gitignore-style patterns."""
    def __init__(self, base_path: Path, positive: List[str], negative: List[str]):
        self.base_path = base_path
        self.path_spec = pathspec.PathSpec.from_lines(
            pathspec.patterns.GitWildMatchPattern, list(positive) + ['!' + n for n in negative])

    def __call__(self, path: Path) -> bool:
        try:
            rel_path = '/' + path.resolve().relative_to(self.base_path.resolve()).as_posix()
        except ValueError:
            return False
        if path.is_dir():
            rel_path += '/'
        return self.path_spec.match_file(rel_path)


def read_ignore_file(path: Path) -> FileSet:
    """An exclude file; a missing file excludes nothing."""
    assert isinstance(path, Path), f"Expected Path, got {type(path)}"

    if not path.exists():
        return FileSet(path.parent, [], [])

    with open(path, 'rt', encoding='utf-8') as f:
        patterns = [line.strip() for line in f]
    patterns = [p for p in patterns if p and not p.startswith("#")]

    positive = [p for p in patterns if not p.startswith("!")]
    negative = [p[1:] for p in patterns if p.startswith("!")]
    return FileSet(path.parent, positive, negative)
