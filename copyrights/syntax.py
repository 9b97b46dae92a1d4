"""
Comment syntaxes: reading the leading comment block of a file, rendering a
license text as a comment, and rewriting the header of a file.

All operations work on the lines of a file as returned by
`copyrights.io.split_lines`. Rewrites produce text joined with '\\n'; the
caller canonicalizes the line terminators.
"""
from __future__ import annotations
import abc
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Sequence, Tuple
import re

from copyrights.copyright_line import add_copyright_date, find_copyright


class RepairError(OSError):
    """The file cannot be repaired, e.g. because it has no content."""


@dataclass(frozen=True)
class ExtractedComment:
    """
    The leading comment of a file with delimiters and prefixes removed.

    `text` is None when the file has no leading comment. `end` is the index
    of the first line after the comment.
    """
    text: Optional[str]
    preamble: Tuple[str, ...] = ()
    trailer: str = ""
    line_terminator: str = "\n"
    end: int = 0


# renders the license text for a year expression
Renderer = Callable[[str], str]


def _never(line: str) -> bool:
    return False


def strip(line: str) -> str:
    """Strip trailing blanks and tabs."""
    return line.rstrip(" \t")


def find_prefix(line: str) -> str:
    """
    The decoration in front of the text of a comment line: everything before
    the first letter, digit, quote, bracket, parenthesis or percent sign.
    """
    for i, c in enumerate(line):
        if c.isalnum() or c in '"[(%':
            return line[:i]
    return ""


def _strip_prefix(line: str, prefix: str) -> str:
    if len(line) >= len(prefix):
        if line.startswith(prefix):
            return line[len(prefix):]
    elif prefix.startswith(line):
        return ""
    return line


def _trim_trailing_blank(parts: List[str]) -> str:
    text = "".join(parts)
    if text.endswith("\n\n"):
        text = text[:-1]
    return text


def _copy(lines: Sequence[str], start: int, skip_blanks: bool = False) -> List[str]:
    out = []
    for line in lines[start:]:
        if skip_blanks:
            if not line.strip():
                continue
            skip_blanks = False
        out.append(line + "\n")
    return out


def _text_lines(text: str) -> List[str]:
    lines = text.split("\n")
    if lines and lines[-1] == "":
        lines.pop()
    return lines


def _update_year(line: str, last_changed: str, use_dash: bool) -> Optional[str]:
    """Splice the new year expression into the first copyright statement."""
    if "Copyright" not in line:
        return None
    cl = find_copyright(line)
    if cl is None:
        return None
    years = add_copyright_date(cl.years, last_changed, use_dash)
    return line[:cl.offset] + cl.with_years(years)


class CommentSyntax(abc.ABC):
    """How one family of files writes its leading comment."""

    repairable: bool = True
    # the end of the comment is known, so templates must match all of it
    bounded: bool = True
    line_terminator: Optional[str] = None

    @abc.abstractmethod
    def read_comment(self, lines: Sequence[str]) -> ExtractedComment:
        raise NotImplementedError()

    @abc.abstractmethod
    def to_comment(self, text: str) -> str:
        raise NotImplementedError()

    @abc.abstractmethod
    def replace_copyright(self, lines: Sequence[str], comment: Optional[str],
                          last_changed: str, render: Renderer,
                          use_dash: bool = False) -> str:
        """
        Replace the leading comment with the rendered license. With
        `comment` None the existing comment, if any, is kept below the new
        header.
        """
        raise NotImplementedError()

    @abc.abstractmethod
    def header_span(self, lines: Sequence[str]) -> Optional[Tuple[int, int]]:
        """
        The range of lines holding the leading comment, None if the file
        does not start with one. Raises RepairError for a file without
        content.
        """
        raise NotImplementedError()

    def update_copyright(self, lines: Sequence[str], last_changed: str,
                         use_dash: bool = False) -> str:
        """
        Update the year of the first copyright statement in the leading
        comment. Every other line is kept as it is.
        """
        out = list(lines)
        span = self.header_span(lines)
        if span is not None:
            for i in range(*span):
                updated = _update_year(out[i], last_changed, use_dash)
                if updated is not None:
                    out[i] = updated
                    break
        return "".join(line + "\n" for line in out)


def _skip_leading(lines: Sequence[str], is_preamble: Callable[[str], bool],
                  skip: Callable[[str], bool] = _never) -> Tuple[Optional[str], int, List[str]]:
    """
    Skip blank lines, preamble lines and lines matching `skip`. Returns the
    first other line (right-stripped, None at end of file), the index of the
    line after it, and the preamble lines seen.
    """
    preamble: List[str] = []
    i = 0
    while i < len(lines):
        line = strip(lines[i])
        i += 1
        if is_preamble(line):
            preamble.append(line)
            continue
        if skip(line):
            continue
        if line:
            return line, i, preamble
    return None, i, preamble


##################################################################################################
# Block comments: /* ... */, <!-- ... -->, <%-- ... --%>, //// ... ////
##################################################################################################

@dataclass(frozen=True)
class BlockSyntax(CommentSyntax):
    start: str
    end: str
    prefix: str
    # blank comment lines after the start and before the end marker
    blank_lines: bool = True
    # write the preamble after the new header instead of before it
    move_preamble: bool = False
    is_preamble: Callable[[str], bool] = field(default=_never, compare=False)
    # a delimiter line matched by pattern; the comment ends at the same line
    delimiter: Optional[re.Pattern] = None

    def is_comment_start(self, line: Optional[str]) -> bool:
        if line is None:
            return False
        if self.delimiter is not None:
            return self.delimiter.fullmatch(line) is not None
        return self.start in line

    def is_comment_end(self, line: str, start_line: str) -> bool:
        if self.delimiter is not None:
            return strip(line) == start_line
        return self.end.strip() in line

    def _single_line(self, line: str) -> Optional[Tuple[str, str]]:
        """Body and trailer of a comment that ends on its start line."""
        if self.delimiter is not None:
            return None
        s = line.find(self.start)
        e = line.find(self.end.strip(), s + len(self.start))
        if s < 0 or e < 0:
            return None
        body = line[s + len(self.start):e].strip()
        return body, line[e + len(self.end.strip()):].strip()

    def trailer(self, line: str) -> str:
        if self.delimiter is not None:
            return ""
        end = self.end.strip()
        i = line.find(end)
        if i >= 0:
            return line[i + len(end):].strip()
        return ""

    def read_comment(self, lines: Sequence[str]) -> ExtractedComment:
        line, i, preamble = _skip_leading(lines, self.is_preamble)
        if line is None:
            return ExtractedComment(None, tuple(preamble), end=i)
        if not self.is_comment_start(line):
            return ExtractedComment(None, tuple(preamble), end=i - 1)

        single = self._single_line(line)
        if single is not None:
            body, trailer = single
            return ExtractedComment(body + "\n" if body else "", tuple(preamble), trailer, end=i)

        start_line = line
        parts: List[str] = []
        prefix: Optional[str] = None
        trailer = ""
        while i < len(lines):
            line = lines[i]
            i += 1
            if "/*" in line:
                continue
            # the first non-empty line sets the prefix for the block
            if prefix is None:
                if len(line) == 0:
                    continue
                prefix = find_prefix(line)
            if self.is_comment_end(line, start_line):
                trailer = self.trailer(line)
                break
            if "*/" in line:
                break
            parts.append(strip(_strip_prefix(line, prefix)) + "\n")
        return ExtractedComment(_trim_trailing_blank(parts), tuple(preamble), trailer, end=i)

    def to_comment(self, text: str) -> str:
        out = [self.start + "\n"]
        if self.blank_lines:
            out.append(strip(self.prefix) + "\n")
        for line in _text_lines(text):
            out.append(strip(self.prefix + line) + "\n")
        if self.blank_lines:
            out.append(strip(self.prefix) + "\n")
        out.append(self.end)
        return "".join(out)

    def replace_copyright(self, lines: Sequence[str], comment: Optional[str],
                          last_changed: str, render: Renderer,
                          use_dash: bool = False) -> str:
        line, i, preamble = _skip_leading(lines, self.is_preamble)
        header = "".join(p + "\n" for p in preamble)

        out: List[str] = []
        if header and not self.move_preamble:
            out.append(header)

        if comment is not None and line is not None and self.is_comment_start(line):
            start_line = line
            trailer = ""
            saw_copyright = False
            single = self._single_line(line)
            if single is not None:
                trailer = single[1]
                cl = find_copyright(line)
                if cl is not None:
                    last_changed = add_copyright_date(cl.years, last_changed, use_dash)
            else:
                while i < len(lines):
                    line = lines[i]
                    i += 1
                    if not saw_copyright and "Copyright" in line:
                        cl = find_copyright(line)
                        if cl is not None:
                            last_changed = add_copyright_date(cl.years, last_changed, use_dash)
                            saw_copyright = True
                    if self.is_comment_end(line, start_line):
                        trailer = self.trailer(line)
                        break
            out.append(self.to_comment(render(last_changed)))
            out.append(trailer)
            out.append("\n\n")
            if header and self.move_preamble:
                out.append(header)
                out.append("\n")
            out.extend(_copy(lines, i, skip_blanks=True))
        else:
            out.append(self.to_comment(render(last_changed)))
            out.append("\n\n")
            if header and self.move_preamble:
                out.append(header)
                out.append("\n")
            if line is not None:
                out.append(line + "\n")
            out.extend(_copy(lines, i))
        return "".join(out)

    def header_span(self, lines: Sequence[str]) -> Optional[Tuple[int, int]]:
        line, i, _ = _skip_leading(lines, self.is_preamble)
        if line is None:
            raise RepairError("NO CONTENT, repair failed")
        if not self.is_comment_start(line):
            return None
        first = i - 1
        if self._single_line(line) is not None:
            return first, i
        start_line = line
        while i < len(lines):
            line = lines[i]
            i += 1
            if self.is_comment_end(line, start_line):
                break
        return first, i


##################################################################################################
# Line comments: # ..., REM ..., [//]: # " ... "
##################################################################################################

@dataclass(frozen=True)
class LinePrefixSyntax(CommentSyntax):
    # a comment line starts with `marker`; `prefix` is removed from its text
    marker: str
    prefix: str
    suffix: str = ""
    # frame the comment with bare marker lines
    framed: bool = True
    # bare marker lines before the comment are skipped
    skip_bare: bool = True
    # double quotes are written as '' inside the comment
    escape_quotes: bool = False
    is_preamble: Callable[[str], bool] = field(default=_never, compare=False)
    line_terminator: Optional[str] = None

    def _is_bare(self, line: str) -> bool:
        return self.skip_bare and line == self.marker

    def _is_comment_line(self, line: str) -> bool:
        return len(line) != 0 and line.startswith(self.marker)

    def read_comment(self, lines: Sequence[str]) -> ExtractedComment:
        line, i, preamble = _skip_leading(lines, self.is_preamble, self._is_bare)
        if line is None or not line.startswith(self.marker):
            return ExtractedComment(None, tuple(preamble), end=i - 1 if line is not None else i)

        parts: List[str] = []
        while line is not None and self._is_comment_line(line):
            text = _strip_prefix(line, self.prefix)
            if self.suffix and text.endswith(self.suffix):
                text = text[:-len(self.suffix)]
            text = strip(text)
            if self.escape_quotes:
                text = text.replace("''", '"')
            parts.append(text + "\n")
            line = lines[i] if i < len(lines) else None
            i += 1
        return ExtractedComment(_trim_trailing_blank(parts), tuple(preamble), end=i - 1)

    def to_comment(self, text: str) -> str:
        out = []
        if self.framed:
            out.append(self.marker + "\n")
        for line in _text_lines(text):
            if self.escape_quotes:
                out.append(self.prefix + strip(line).replace('"', "''") + self.suffix + "\n")
            else:
                out.append(strip(self.prefix + line) + "\n")
        if self.framed:
            out.append(self.marker + "\n")
        # the new comment ends with a blank line
        out.append("\n")
        return "".join(out)

    def replace_copyright(self, lines: Sequence[str], comment: Optional[str],
                          last_changed: str, render: Renderer,
                          use_dash: bool = False) -> str:
        skip = self._is_bare if comment is not None else _never
        line, i, preamble = _skip_leading(lines, self.is_preamble, skip)

        out = [p + "\n" for p in preamble]
        if comment is not None and line is not None and line.startswith(self.marker):
            saw_copyright = False
            while line is not None and self._is_comment_line(line):
                if not saw_copyright and "Copyright" in line:
                    cl = find_copyright(line)
                    if cl is not None:
                        last_changed = add_copyright_date(cl.years, last_changed, use_dash)
                        saw_copyright = True
                line = lines[i] if i < len(lines) else None
                i += 1
        out.append(self.to_comment(render(last_changed)))
        if line is not None:
            # the new comment already ends with a blank line
            if len(line) > 0:
                out.append(line + "\n")
            out.extend(_copy(lines, i))
        return "".join(out)

    def header_span(self, lines: Sequence[str]) -> Optional[Tuple[int, int]]:
        line, i, _ = _skip_leading(lines, self.is_preamble, self._is_bare)
        if line is None:
            raise RepairError("NO CONTENT, repair failed")
        if not line.startswith(self.marker):
            return None
        first = i - 1
        while i < len(lines) and self._is_comment_line(lines[i]):
            i += 1
        return first, i


##################################################################################################
# Unstructured text
##################################################################################################

MAX_TEXT_LINES = 100


def canon(line: str) -> str:
    """Drop leading decoration, keeping text that starts with a quote or bracket."""
    for i, c in enumerate(line):
        if c.isalnum() or c in '"[(':
            return line[i:].strip()
    return ""


@dataclass(frozen=True)
class TextSyntax(CommentSyntax):
    """
    Files without a known comment syntax. The first lines of the file stand
    in for the comment; such files are never repaired.
    """
    max_lines: int = MAX_TEXT_LINES
    repairable: bool = False
    bounded: bool = False

    def read_comment(self, lines: Sequence[str]) -> ExtractedComment:
        parts: List[str] = []
        i = 0
        while i < len(lines):
            line = lines[i]
            i += 1
            cline = canon(line)
            if not parts:
                if line.startswith("#!"):
                    continue
                if len(cline) == 0:
                    continue
            parts.append(cline + "\n")
            if len(parts) >= self.max_lines:
                break
        return ExtractedComment("".join(parts), end=i)

    def to_comment(self, text: str) -> str:
        return text

    def replace_copyright(self, lines: Sequence[str], comment: Optional[str],
                          last_changed: str, render: Renderer,
                          use_dash: bool = False) -> str:
        raise RepairError("text files are not repaired")

    def header_span(self, lines: Sequence[str]) -> Optional[Tuple[int, int]]:
        raise RepairError("text files are not repaired")
