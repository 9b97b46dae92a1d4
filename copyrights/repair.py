"""
Repairing copyright headers.

Missing, empty and wrong headers are replaced by the rendered primary
template (or the BSD template for files that carry a BSD style license).
A good header with a stale year only gets its year expression updated.
"""
from __future__ import annotations
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence
import enum
import logging
import re

from copyrights.classify import Classification, ClassificationResult
from copyrights.config import Options
from copyrights.copyright_line import (
    TEMPLATE_LINE_RE,
    find_copyright,
    find_copyright_lines,
    licensor_line,
    replace_years,
)
from copyrights.dates import DateStatus, DateVerdict
from copyrights.formats import FormatAdapter
from copyrights.io import canonicalize, read_text_file, replace_file, split_lines
from copyrights.syntax import RepairError
from copyrights.templates import YEAR_PLACEHOLDER, TemplateCatalog, fill_year


logger = logging.getLogger(__name__)

# introduces the license of incorporated work below the primary license
SECONDARY_LICENSE_INTRO = (
    "\n"
    "\n"
    "This file incorporates work covered by the following copyright and\n"
    "permission notice:\n"
    "\n"
)

# an existing BSD or EDL license
_BSD_RE = re.compile(
    r"(THIS SOFTWARE IS PROVIDED BY THE COPYRIGHT HOLDERS AND CONTRIBUTORS)"
    r"|(SPDX-License-Identifier: BSD-3-Clause)", re.MULTILINE)

# superseded by the licensor
SUPERSEDED_LICENSOR = "Sun Microsystems"


class RepairKind(enum.Enum):
    REPLACE_FULL = "replace"
    UPDATE_DATE_ONLY = "update"


@dataclass(frozen=True)
class RepairPlan:
    kind: RepairKind
    year: str
    # the existing comment; None keeps any existing comment below the new header
    comment: Optional[str] = None
    preserve: bool = False


def plan_repair(result: ClassificationResult, comment: Optional[str], options: Options,
                verdict: Optional[DateVerdict] = None) -> Optional[RepairPlan]:
    """
    Decide how to repair a file, None if there is nothing to repair.
    """
    match result.kind:
        case Classification.MISSING | Classification.EMPTY:
            return RepairPlan(RepairKind.REPLACE_FULL, options.this_year,
                              preserve=options.preserve_copyrights)
        case Classification.WRONG_KNOWN | Classification.WRONG_UNKNOWN:
            return RepairPlan(RepairKind.REPLACE_FULL, options.this_year, comment,
                              preserve=options.preserve_copyrights)
        case Classification.GOOD if verdict is not None and verdict.status is DateStatus.MISMATCH:
            if options.normalize:
                return RepairPlan(RepairKind.REPLACE_FULL, verdict.expected, comment,
                                  preserve=options.preserve_copyrights)
            return RepairPlan(RepairKind.UPDATE_DATE_ONLY, verdict.expected)
    return None


def merge_copyrights(text: str, copyrights: Sequence[str], years: str, licensor: str) -> str:
    """
    Replace the copyright line of a license text with existing copyright
    lines. The line naming the licensor gets `years`; one is added at the
    top if no line names the licensor. Lines of the superseded licensor
    after it are dropped.
    """
    head = ""
    tail = text
    need_blank = True
    m = TEMPLATE_LINE_RE.search(text)
    if m:
        head = text[:m.start()]
        tail = text[m.end():]
        # the template already has a blank line after its copyright line
        need_blank = False

    lines = list(copyrights)
    if not any(licensor in s for s in lines):
        lines.insert(0, licensor_line(years, licensor))

    out: List[str] = []
    found = False
    for s in lines:
        if not found and licensor in s:
            found = True
            out.append(replace_years(s, years) + "\n")
        elif found and SUPERSEDED_LICENSOR in s:
            continue
        else:
            out.append(s + "\n")

    if need_blank:
        out.append("\n")
    return head + "".join(out) + tail


def write_copyright(catalog: TemplateCatalog, years: str, comment: Optional[str],
                    preserve: bool = False) -> str:
    """
    The license text for a repaired file. An existing BSD license is replaced
    by the BSD template. An existing Apache license is kept, together with
    its copyright lines.
    """
    copyright = catalog.primary.text
    if comment is not None:
        if _BSD_RE.search(comment):
            logger.debug("BSD license")
            copyright = catalog.bsd.text
        elif "Apache" in comment:
            logger.debug("Apache license")
            i = comment.find(SECONDARY_LICENSE_INTRO)
            if i >= 0:
                logger.debug("Found secondary license")
                copyright = comment[i + len(SECONDARY_LICENSE_INTRO):]
            else:
                copyright = comment
            # turn the first copyright line back into a template line
            cl = find_copyright(copyright)
            if cl is not None:
                start = cl.offset + cl.start
                copyright = copyright[:start] + YEAR_PLACEHOLDER + copyright[cl.offset + cl.end:]
            preserve = True
        if preserve:
            copyrights = [cl.text for cl in find_copyright_lines(comment)]
            return merge_copyrights(copyright, copyrights, years, catalog.licensor)
    return fill_year(copyright, years, catalog.licensor)


def repair_file(path: Path, adapter: FormatAdapter, plan: RepairPlan,
                catalog: TemplateCatalog, options: Options) -> Path:
    """
    Rewrite `path` according to `plan`. Returns the file holding the result,
    which is the `.new` sibling when the original is not to be updated.
    """
    syntax = adapter.syntax
    if not syntax.repairable:
        raise RepairError(f"{adapter.name} files are not repaired")

    content = read_text_file(path)
    lines = split_lines(content)

    match plan.kind:
        case RepairKind.REPLACE_FULL:
            logger.debug("Replace wrong copyright" if plan.comment is not None
                         else "Replace missing copyright")
            text = syntax.replace_copyright(
                lines, plan.comment, plan.year,
                lambda years: write_copyright(catalog, years, plan.comment, plan.preserve),
                use_dash=options.use_dash)
        case RepairKind.UPDATE_DATE_ONLY:
            logger.debug("Update date copyright")
            text = syntax.update_copyright(lines, plan.year, use_dash=options.use_dash)

    text = canonicalize(text, adapter.line_terminator(content))
    return replace_file(path, text, keep_new=options.dont_update)
