"""
The copyright check for a single file: read the leading comment, classify
it, compare its year with the version control history and offer a repair.
"""
from __future__ import annotations
from collections import Counter
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional
import logging
import threading

from copyrights.checks.base import FileCheck, Issue, IssueList, IssueType, Severity
from copyrights.classify import Classification, ClassificationResult, classify
from copyrights.config import Options
from copyrights.copyright_line import find_copyright
from copyrights.dates import DateStatus, DateValidator
from copyrights.formats import ADAPTERS, FormatAdapter, select_adapter
from copyrights.io import read_text_file
from copyrights.repair import RepairPlan, plan_repair, repair_file
from copyrights.scm import ChangeStatus, LastChanged, make_backend
from copyrights.templates import LegacyKind, TemplateCatalog


logger = logging.getLogger(__name__)

DO_NOT_ALTER = "DO NOT ALTER OR REMOVE COPYRIGHT NOTICES OR THIS HEADER."

# --- Issue Types ---

E_NO_COPYRIGHT = IssueType(
    "5b0e7f0c-3c1d-4c55-9a43-2f6f1d0b8e71",
    "No copyright")

E_EMPTY_COPYRIGHT = IssueType(
    "c2a8d3e4-6f0b-4b8e-8d1f-94e7a5c3b210",
    "Empty copyright")

E_LEGACY_COPYRIGHT: Dict[LegacyKind, IssueType] = {
    LegacyKind.SUN: IssueType(
        "0f6d3b52-8a2e-4d07-b1c4-7e95a3f06d18", "Sun copyright"),
    LegacyKind.SUN_APACHE: IssueType(
        "9e1c7a40-2b5d-4f3e-86a9-d04b7c2e1f53", "Sun+Apache copyright"),
    LegacyKind.SUN_BSD: IssueType(
        "4a7f2e91-c63b-45d8-9e20-1b8d6f3a7c04", "Sun BSD copyright"),
    LegacyKind.OLD_BSD: IssueType(
        "e83b5d17-04fa-4c2b-a7d6-5f9c1e8b3a62", "Old BSD copyright"),
    LegacyKind.OLD_CDDL: IssueType(
        "27c9f4a8-b1e3-4d6f-8052-c3a7e9d1b4f0", "Old CDDL copyright"),
    LegacyKind.CDDL_GPL_CE: IssueType(
        "b64d1e0a-7f28-4c93-b5e1-8a2f0d7c6e39", "CDDL+GPL+CE copyright"),
    LegacyKind.CDDL_GPL_NO_CE: IssueType(
        "71e5a2c3-9d4b-4a1f-b086-e2c4f7a9d315", "CDDL+GPL-CE copyright"),
}

E_WRONG_COPYRIGHT = IssueType(
    "d9f2c6b1-5e7a-4083-9c4d-a1b3e5f7c928",
    "Wrong copyright")

E_NO_COPYRIGHT_YEAR = IssueType(
    "3e8a0f5d-a2c6-4b19-8d7e-f04c6b2a9e57",
    "No copyright year")

E_WRONG_COPYRIGHT_DATE = IssueType(
    "86b3d9e2-1c4f-4e7a-a5b8-2d6f9c0e3a14",
    "Copyright year is wrong; is {actual}, should be {expected}")

E_REPAIR_FAILED = IssueType(
    "f1a4c7e0-3b6d-4f92-8e15-7c9a2d4b6f83",
    "repair failed: {reason}")

E_CHECK_FAILED = IssueType(
    "4b9e2d7a-c5f1-4e36-a8d0-71f3b6c9e2a5",
    "check failed: {reason}")

E_READ_FAILED = IssueType(
    "a0d7e3b9-6c2f-4a58-b9e4-3f1c8a5d7e26",
    "can't read: {reason}")

W_EXTRA_COPYRIGHT = IssueType(
    "6c2e9b4f-d7a1-4e3c-9f80-b5d2a7c1e964",
    "WARNING: extra copyright: {text}",
    Severity.WARNING, counted=False)

W_DO_NOT_ALTER = IssueType(
    "cf5b8a13-e9d2-47b6-a3c0-946e1f2d8b75",
    "WARNING: contains: {text}",
    Severity.WARNING, counted=False)

W_UNKNOWN_DATE = IssueType(
    "58a1f6d4-0e9b-4c27-b7f3-a6c8d2e4b019",
    "Some file(s) with unknown date (shallow clone?)",
    Severity.WARNING, counted=False)

I_EXCLUDED = IssueType(
    "12d4b7e8-f3a6-4c90-85b2-c7e1a9f3d640",
    "EXCLUDED FROM REPAIR: contains: " + DO_NOT_ALTER,
    Severity.INFO, counted=False)


# Summary labels, in the order they are printed
SUMMARY_LABELS: Dict[IssueType, str] = {
    E_NO_COPYRIGHT: "No Copyright",
    E_EMPTY_COPYRIGHT: "Empty Copyright",
    E_LEGACY_COPYRIGHT[LegacyKind.SUN]: "Sun Copyright",
    E_LEGACY_COPYRIGHT[LegacyKind.SUN_APACHE]: "Sun+Apache Copyright",
    E_LEGACY_COPYRIGHT[LegacyKind.SUN_BSD]: "Sun BSD Copyright",
    E_LEGACY_COPYRIGHT[LegacyKind.OLD_BSD]: "Old BSD Copyright",
    E_LEGACY_COPYRIGHT[LegacyKind.OLD_CDDL]: "Old CDDL Copyright",
    E_LEGACY_COPYRIGHT[LegacyKind.CDDL_GPL_CE]: "CDDL+GPL+CE Copyright",
    E_LEGACY_COPYRIGHT[LegacyKind.CDDL_GPL_NO_CE]: "Copyright without CE",
    E_WRONG_COPYRIGHT: "Wrong Copyright",
    E_NO_COPYRIGHT_YEAR: "No Copyright Year",
    E_WRONG_COPYRIGHT_DATE: "Wrong Copyright Date",
}


@dataclass
class RunState:
    """
    Counters shared by all files of a run. Safe to use from several worker
    threads.
    """
    counts: Counter = field(default_factory=Counter)
    errors: int = 0
    saw_unknown: bool = False
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    def record(self, issue: Issue) -> None:
        if not issue.issue_type.counted:
            return
        with self._lock:
            self.errors += 1
            self.counts[issue.issue_type] += 1

    def claim_unknown(self) -> bool:
        """True for the first caller only."""
        with self._lock:
            if self.saw_unknown:
                return False
            self.saw_unknown = True
            return True

    def count(self, issue_type: IssueType) -> int:
        with self._lock:
            return self.counts[issue_type]


def _finding(result: ClassificationResult) -> IssueType:
    match result.kind:
        case Classification.MISSING:
            return E_NO_COPYRIGHT
        case Classification.EMPTY:
            return E_EMPTY_COPYRIGHT
        case Classification.WRONG_KNOWN:
            assert result.legacy is not None
            return E_LEGACY_COPYRIGHT[result.legacy]
        case Classification.WRONG_UNKNOWN:
            return E_WRONG_COPYRIGHT
    raise ValueError(f"Not a finding: {result.kind}")


class CopyrightCheck(FileCheck):
    def __init__(self, catalog: TemplateCatalog, options: Options,
                 state: Optional[RunState] = None,
                 validator: Optional[DateValidator] = None) -> None:
        self.catalog = catalog
        self.options = options
        self.state = state if state is not None else RunState()
        if validator is None:
            backend = make_backend(options.scm, options.this_year, options.scm_timeout)
            validator = DateValidator(backend, options.this_year, options.scm_only)
        self.validator = validator

    def adapter_for(self, path: Path) -> Optional[FormatAdapter]:
        adapter = select_adapter(path, ADAPTERS)
        if adapter is None or not self.options.checks_group(adapter.group):
            return None
        return adapter

    def check(self, path: Path) -> IssueList:
        issues = IssueList()
        adapter = self.adapter_for(path)
        if adapter is None:
            return issues

        last_changed: Optional[LastChanged] = None
        if self.options.scm_only:
            last_changed = self.validator.last_changed(path)
            if last_changed.status is ChangeStatus.UNTRACKED:
                logger.info(f"Not under version control, skipped: {path}")
                return issues

        try:
            content = read_text_file(path)
        except OSError as e:
            issues.append(E_READ_FAILED.at(path, reason=e))
            return issues

        lines, comment = adapter.extract(content)
        logger.debug(f"Comment for: {path}\n---\n{comment.text}\n---")

        if self.options.warn and not self.options.quiet:
            issues.extend(self.warnings(path, lines[comment.end:]))

        if self.options.explicit_exclude and any(DO_NOT_ALTER in line for line in lines):
            issues.append(I_EXCLUDED.at(path))
            return issues

        result = classify(comment.text, self.catalog,
                          normalize=self.options.normalize, full=adapter.syntax.bounded)

        if not result.is_good:
            issue = _finding(result).at(path)
            self._attach(issue, path, adapter, plan_repair(result, comment.text, self.options))
            issues.append(issue)
            return issues

        if not result.needs_year:
            # the plain Apache header has no copyright line
            return issues

        if result.kind is Classification.GOOD_NO_YEAR:
            issues.append(E_NO_COPYRIGHT_YEAR.at(path))
            return issues

        if self.options.ignore_year:
            logger.info(f"Ignoring year check: {path}")
            return issues

        assert result.copyright is not None
        if last_changed is None:
            last_changed = self.validator.last_changed(path)
        verdict = self.validator.validate(result.copyright, last_changed)

        match verdict.status:
            case DateStatus.UNKNOWN:
                if self.state.claim_unknown():
                    issues.append(W_UNKNOWN_DATE.make())
                logger.info(f"Unknown date: {path}")
            case DateStatus.MISMATCH:
                issue = E_WRONG_COPYRIGHT_DATE.at(path, actual=verdict.actual, expected=verdict.expected)
                plan = plan_repair(result, comment.text, self.options, verdict)
                self._attach(issue, path, adapter, plan)
                issues.append(issue)
            case _:
                logger.info(f"No errors: {path}")
        return issues

    def warnings(self, path: Path, rest: List[str]) -> List[Issue]:
        """Copyright statements and do-not-alter markers below the header."""
        found = []
        for line in rest:
            cl = find_copyright(line)
            if cl is not None and self.catalog.licensor not in line:
                found.append(W_EXTRA_COPYRIGHT.at(path, text=line))
            if DO_NOT_ALTER in line:
                found.append(W_DO_NOT_ALTER.at(path, text=line))
        return found

    def _attach(self, issue: Issue, path: Path, adapter: FormatAdapter,
                plan: Optional[RepairPlan]) -> None:
        if plan is None or not adapter.syntax.repairable:
            return
        issue.fixable(lambda: self.repair(path, adapter, plan))

    def repair(self, path: Path, adapter: FormatAdapter, plan: RepairPlan) -> Path:
        result = repair_file(path, adapter, plan, self.catalog, self.options)
        logger.info(f"Repaired {path} ({plan.kind.value})")
        return result
