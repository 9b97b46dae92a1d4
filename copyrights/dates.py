"""
Checking the copyright year against the year the file last changed.
"""
from __future__ import annotations
from dataclasses import dataclass
from pathlib import Path
import enum
import logging

from copyrights.copyright_line import CopyrightLine
from copyrights.scm import ChangeStatus, LastChanged, ScmBackend


logger = logging.getLogger(__name__)


class DateStatus(enum.Enum):
    CURRENT = "current"
    MISMATCH = "mismatch"
    # no usable history, the check is skipped
    UNKNOWN = "unknown"
    # not under version control in scm-only mode, the file is skipped
    UNTRACKED = "untracked"


@dataclass(frozen=True)
class DateVerdict:
    status: DateStatus
    # last year of the copyright statement
    actual: str = ""
    # year the file last changed
    expected: str = ""


class DateValidator:
    def __init__(self, scm: ScmBackend, this_year: str, scm_only: bool = False) -> None:
        self.scm = scm
        self.this_year = this_year
        self.scm_only = scm_only

    def last_changed(self, path: Path) -> LastChanged:
        """
        The authoritative year for `path`. Files modified in the working copy
        changed this year. Untracked files changed this year too, unless only
        tracked files are checked.
        """
        if self.scm.is_modified(path):
            return LastChanged.known(self.this_year)
        lc = self.scm.last_changed(path)
        if lc.status is ChangeStatus.UNTRACKED and not self.scm_only:
            return LastChanged.known(self.this_year)
        return lc

    def validate(self, copyright: CopyrightLine, last_changed: LastChanged) -> DateVerdict:
        actual = copyright.last_year
        match last_changed.status:
            case ChangeStatus.UNKNOWN:
                return DateVerdict(DateStatus.UNKNOWN, actual)
            case ChangeStatus.UNTRACKED:
                return DateVerdict(DateStatus.UNTRACKED, actual)
        if actual != last_changed.year:
            return DateVerdict(DateStatus.MISMATCH, actual, last_changed.year)
        return DateVerdict(DateStatus.CURRENT, actual, last_changed.year)

    def check(self, path: Path, copyright: CopyrightLine) -> DateVerdict:
        return self.validate(copyright, self.last_changed(path))
