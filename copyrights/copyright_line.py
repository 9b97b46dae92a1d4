"""
Parsing and formatting of single copyright statements, e.g.

    Copyright (c) 2010, 2019 Oracle and/or its affiliates. All rights reserved.
    Portions Copyright 2004 by The Apache Software Foundation

The year expression is located through named groups so that callers can
splice a new year range into the statement without counting capture groups.
"""
from __future__ import annotations
from dataclasses import dataclass
from typing import List, Optional
import re


ALL_RIGHTS = "All rights reserved."

# Non-capturing forms, used when a copyright line is embedded in a larger
# template pattern that may repeat it several times.
COPYRIGHT_STRING = r"(?:Portions )?Copyright (?:\(c\) )?[-0-9, ]+ (?:by )?[A-Za-z].*"
COPYRIGHT_LINE = "^" + COPYRIGHT_STRING + r"(?:\nAll rights reserved.)?$"

_NAMED_STRING = (
    r"(?P<portions>Portions )?Copyright (?P<c>\(c\) )?"
    r"(?P<years>[-0-9, ]+) (?P<by>by )?(?P<licensor>[A-Za-z].*)"
)

# first copyright statement anywhere in a text
_STATEMENT_RE = re.compile(_NAMED_STRING)
# copyright statements that occupy whole lines
_LINE_RE = re.compile(
    "^" + _NAMED_STRING + r"(?P<rights>\nAll rights reserved.)?$", re.MULTILINE)
# the copyright line of a template, including its line terminator
TEMPLATE_LINE_RE = re.compile(
    r"^(Portions )?Copyright (\(c\) )?YYYY (by )?([A-Za-z].*)$\n", re.MULTILINE)

# the word "copyright" or "(c)"
_COPYRIGHT_WORD_RE = re.compile(r"(\b[Cc]opyright\b|\([Cc]\))", re.MULTILINE)


@dataclass(frozen=True)
class CopyrightLine:
    """
    One copyright statement found in a comment.

    `text` is the matched statement; `start`/`end` bound the year expression
    inside `text`, and `offset` is where `text` begins in the searched string.
    """
    text: str
    start: int
    end: int
    licensor: str
    offset: int = 0

    @property
    def years(self) -> str:
        return self.text[self.start:self.end]

    @property
    def last_year(self) -> str:
        years = self.years.rstrip()
        if years.endswith(","):
            years = years[:-1]
        return years[-4:]

    def names(self, licensor: str) -> bool:
        return licensor in self.text

    def with_years(self, years: str) -> str:
        """Return the statement with its year expression replaced."""
        return self.text[:self.start] + years + self.text[self.end:]

    @classmethod
    def _from_match(cls, m: re.Match) -> 'CopyrightLine':
        base = m.start()
        return cls(
            text=m.group(0),
            start=m.start("years") - base,
            end=m.end("years") - base,
            licensor=m.group("licensor"),
            offset=base,
        )

    @classmethod
    def parse(cls, line: str) -> Optional['CopyrightLine']:
        """Find the first copyright statement in `line`."""
        m = _STATEMENT_RE.search(line)
        return cls._from_match(m) if m else None


def find_copyright(text: str) -> Optional[CopyrightLine]:
    return CopyrightLine.parse(text)


def replace_years(text: str, years: str) -> str:
    """Replace the year expression of the first copyright statement in `text`."""
    cl = find_copyright(text)
    if cl is None:
        return text
    return text[:cl.offset + cl.start] + years + text[cl.offset + cl.end:]


def find_copyright_lines(text: str) -> List[CopyrightLine]:
    """
    All copyright statements that occupy whole lines of `text`, each optionally
    followed by an "All rights reserved." line.
    """
    return [CopyrightLine._from_match(m) for m in _LINE_RE.finditer(text)]


def has_copyright_word(text: str) -> bool:
    return _COPYRIGHT_WORD_RE.search(text) is not None


def licensor_line(years: str, licensor: str) -> str:
    return f"Copyright (c) {years} {licensor}. {ALL_RIGHTS}"


def add_copyright_date(date: str, last_changed: str, use_dash: bool = False) -> str:
    """
    Update the year expression `date` so that it ends with `last_changed`.

    A single year becomes a pair; a range or list is collapsed to its first
    year followed by `last_changed`, unless it already ends with
    `last_changed` using the configured separator.
    """
    sep = "-" if use_dash else ", "

    date = date.rstrip()
    if date.endswith(","):
        date = date[:-1]
    if len(date) < 4:
        return last_changed

    if len(date) == 4:
        if date == last_changed:
            return date
        return date + sep + last_changed

    # "2001-2007" or "2001, 2003, 2007"
    if date[-4:] == last_changed and date[4] == sep[0]:
        return date
    first = date[:4]
    if first == last_changed:
        return first
    return first + sep + last_changed
