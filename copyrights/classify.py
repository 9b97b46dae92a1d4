from __future__ import annotations
from dataclasses import dataclass
from typing import Optional
import enum

from copyrights.copyright_line import CopyrightLine, find_copyright, has_copyright_word
from copyrights.templates import LegacyKind, TemplateCatalog


class Classification(enum.Enum):
    GOOD = "good"
    MISSING = "missing"
    EMPTY = "empty"
    WRONG_KNOWN = "wrong-known"
    WRONG_UNKNOWN = "wrong-unknown"
    GOOD_NO_YEAR = "good-no-year"


@dataclass(frozen=True)
class ClassificationResult:
    kind: Classification
    legacy: Optional[LegacyKind] = None
    # first copyright statement in the comment
    copyright: Optional[CopyrightLine] = None
    # False for headers that never carry a year, such as the plain Apache header
    needs_year: bool = True

    @property
    def is_good(self) -> bool:
        return self.kind in (Classification.GOOD, Classification.GOOD_NO_YEAR)

    @property
    def years(self) -> Optional[str]:
        return self.copyright.years if self.copyright else None


MISSING = ClassificationResult(Classification.MISSING)
EMPTY = ClassificationResult(Classification.EMPTY)


def classify(comment: Optional[str], catalog: TemplateCatalog,
             normalize: bool = False, full: bool = True) -> ClassificationResult:
    """
    Match a comment against the catalog. `full` requires templates to match
    the whole comment; otherwise a match at the start is enough, for comments
    whose real end is not known.
    """
    if comment is None:
        return MISSING
    if len(comment.strip()) == 0:
        return EMPTY
    if not has_copyright_word(comment):
        return MISSING

    def matches(template) -> bool:
        return template.matches(comment, full=full)

    good = (
        matches(catalog.primary)
        # when normalizing, alternates are not good enough
        or (not normalize and any(matches(t) for t in catalog.alternates))
        or matches(catalog.bsd)
        or any(matches(t) for t in catalog.apache)
    )
    if not good:
        for kind, templates in catalog.legacy:
            if any(matches(t) for t in templates):
                return ClassificationResult(Classification.WRONG_KNOWN, legacy=kind)
        return ClassificationResult(Classification.WRONG_UNKNOWN)

    plain_apache = catalog.plain_apache
    if plain_apache is not None and matches(plain_apache):
        return ClassificationResult(Classification.GOOD_NO_YEAR, needs_year=False)

    copyright = find_copyright(comment)
    if copyright is None:
        return ClassificationResult(Classification.GOOD_NO_YEAR)
    return ClassificationResult(Classification.GOOD, copyright=copyright)
