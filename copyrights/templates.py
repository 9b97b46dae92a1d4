"""
License templates and the catalog of known headers.

A template is written as a Java-style comment:

    /*
     * Copyright (c) YYYY Oracle and/or its affiliates. All rights reserved.
     *
     * ...
     */

The body lines carry a fixed 3-character prefix which is stripped. `YYYY`
marks the copyright line; when matching, that line accepts any number of
copyright statements from anyone.
"""
from __future__ import annotations
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Sequence, Tuple
import enum
import logging
import re

from copyrights.copyright_line import COPYRIGHT_LINE, ALL_RIGHTS


logger = logging.getLogger(__name__)

RESOURCES = Path(__file__).parent / "resources"

YEAR_PLACEHOLDER = "YYYY"

DEFAULT_CORRECT = "epl-copyright.txt"
DEFAULT_ALTERNATES = (
    "apache-copyright.txt",
    "apacheold-copyright.txt",
    "mitsallings-copyright.txt",
    "w3c-copyright.txt",
)
DEFAULT_BSD = "edl-copyright.txt"
DEFAULT_LICENSOR = "Oracle and/or its affiliates"

# text that NetBeans puts at the top of new files
_NETBEANS_PREFIX = (
    "To change this template, choose Tools | Templates\n"
    "and open the template in the editor.\n"
    "\n"
)


class TemplateError(Exception):
    """A required license template could not be loaded."""


class LegacyKind(enum.Enum):
    """
    Known outdated license headers. Never accepted as correct; only used to
    say what is wrong with a header.
    """
    SUN = "Sun"
    SUN_APACHE = "Sun+Apache"
    SUN_BSD = "Sun BSD"
    OLD_BSD = "Old BSD"
    OLD_CDDL = "Old CDDL"
    CDDL_GPL_CE = "CDDL+GPL+CE"
    CDDL_GPL_NO_CE = "CDDL+GPL-CE"


# checked in this order
LEGACY_TEMPLATES: Tuple[Tuple[LegacyKind, Tuple[str, ...]], ...] = (
    (LegacyKind.SUN,            ("sun-cddl+gpl+ce-copyright.txt",)),
    (LegacyKind.SUN_APACHE,     ("sun-cddl+gpl+ce+apache-copyright.txt",
                                 "sun-cddl+gpl+ce+apachenew-copyright.txt")),
    (LegacyKind.SUN_BSD,        ("sun-bsd-copyright.txt",)),
    (LegacyKind.OLD_BSD,        ("bsd-copyright.txt",)),
    (LegacyKind.OLD_CDDL,       ("cddl-copyright.txt", "cddl2-copyright.txt")),
    (LegacyKind.CDDL_GPL_CE,    ("cddl+gpl+ce-copyright.txt",
                                 "cddl+gpl+ce-java.net-copyright.txt")),
    (LegacyKind.CDDL_GPL_NO_CE, ("cddl+gpl-copyright.txt",)),
)

APACHE_OLD = "apacheold-copyright.txt"
APACHE = "apache-copyright.txt"
ORACLE_APACHE = "oracle-apache-copyright.txt"


_PLACEHOLDER_LINE = re.compile(r"YYYY.*$", re.MULTILINE)


def fill_year(text: str, years: str, licensor: str) -> str:
    """Fill the year placeholder, replacing the rest of its line."""
    line = f"{years} {licensor}. {ALL_RIGHTS}"
    return _PLACEHOLDER_LINE.sub(lambda _: line, text, count=1)


@dataclass(frozen=True)
class Template:
    name: str
    text: str
    pattern: re.Pattern = field(compare=False)
    has_year_slot: bool = True

    def matches(self, comment: str, full: bool = True) -> bool:
        """
        Does the comment match this template? With `full` the whole comment
        must match, otherwise it only has to match from the beginning.
        """
        if full:
            return self.pattern.fullmatch(comment) is not None
        return self.pattern.match(comment) is not None

    def render(self, years: str, licensor: str) -> str:
        return fill_year(self.text, years, licensor)

    @property
    def licensor(self) -> Optional[str]:
        """
        The party named after the year placeholder, up to the next period
        or line end.
        """
        yyyy = self.text.find(YEAR_PLACEHOLDER)
        if yyyy < 0:
            return None
        end = self.text.find(".", yyyy)
        if end < 0:
            end = self.text.find("\n", yyyy)
        if end < 0:
            return None
        return self.text[yyyy + len(YEAR_PLACEHOLDER) + 1:end] or None


def _read_template_lines(lines: Sequence[str], as_pattern: bool) -> Tuple[str, bool]:
    out: List[str] = []
    saw_copyright = False
    for line in lines[1:]:  # skip the "/*" line
        if line == " */":
            break
        line = line[3:] if len(line) > 2 else ""
        if as_pattern:
            if YEAR_PLACEHOLDER in line:
                saw_copyright = True
                line = COPYRIGHT_LINE + "(?:\n" + COPYRIGHT_LINE + ")*"
            else:
                line = re.escape(line)
        out.append(line + "\n")

    text = "".join(out)
    if as_pattern and not saw_copyright:
        # older templates have no copyright slot, allow one at the top
        text = "(?:(?:" + COPYRIGHT_LINE + "\n)+\n)?" + text

    # one optional trailing blank line is dropped, as for extracted comments
    if text.endswith("\n\n"):
        text = text[:-1]
    return text, saw_copyright


def _read_source(name: str | Path) -> Tuple[str, List[str]]:
    """
    Look a template up as a bundled resource first, then as a file path.
    """
    candidates = []
    if isinstance(name, str) and "/" not in name and "\\" not in name:
        candidates.append(RESOURCES / name)
    candidates.append(Path(name))

    for path in candidates:
        if path.is_file():
            try:
                raw = path.read_text(encoding="utf-8")
            except (OSError, UnicodeDecodeError) as e:
                raise TemplateError(f"Can't read copyright template {path}: {e}") from e
            return str(path), re.split(r"\r\n|\r|\n", raw)
    raise TemplateError(f"Copyright template not found: {name}")


def compile_template(text_lines: Sequence[str], name: str = "<template>") -> Template:
    if not text_lines or not text_lines[0].strip():
        raise TemplateError(f"Copyright template {name} does not start with a comment")
    text, _ = _read_template_lines(text_lines, as_pattern=False)
    source, has_slot = _read_template_lines(text_lines, as_pattern=True)
    pattern = re.compile("(?:" + re.escape(_NETBEANS_PREFIX) + ")?" + source, re.MULTILINE)
    return Template(name=name, text=text, pattern=pattern, has_year_slot=has_slot)


def load_template(name: str | Path) -> Template:
    path, lines = _read_source(name)
    logger.debug(f"Loading copyright template {path}")
    return compile_template(lines, name=Path(path).name)


@dataclass(frozen=True)
class TemplateCatalog:
    """
    Every template used during a run, compiled once at startup.
    """
    primary: Template
    bsd: Template
    alternates: Tuple[Template, ...] = ()
    apache: Tuple[Template, ...] = ()
    legacy: Tuple[Tuple[LegacyKind, Tuple[Template, ...]], ...] = ()
    licensor: str = DEFAULT_LICENSOR

    @property
    def plain_apache(self) -> Optional[Template]:
        for t in self.apache:
            if t.name == APACHE:
                return t
        return None


def load_catalog(
    correct: str | Path | None = None,
    alternates: Sequence[str | Path] = (),
    bsd: str | Path | None = None,
) -> TemplateCatalog:
    """
    Build the catalog. Without a configured primary template the bundled
    EPL template is used together with the bundled alternates (unless
    alternates are given explicitly).
    """
    alternate_names: List[str | Path] = []
    if correct is not None:
        primary = load_template(correct)
    else:
        primary = load_template(DEFAULT_CORRECT)
        if not alternates:
            alternate_names.extend(DEFAULT_ALTERNATES)
    alternate_names.extend(alternates)

    bsd_template = load_template(bsd if bsd is not None else DEFAULT_BSD)

    legacy = tuple(
        (kind, tuple(load_template(n) for n in names))
        for kind, names in LEGACY_TEMPLATES
    )

    return TemplateCatalog(
        primary=primary,
        bsd=bsd_template,
        alternates=tuple(load_template(n) for n in alternate_names),
        apache=tuple(load_template(n) for n in (APACHE_OLD, APACHE, ORACLE_APACHE)),
        legacy=legacy,
        licensor=primary.licensor or DEFAULT_LICENSOR,
    )
