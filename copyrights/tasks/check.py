from __future__ import annotations
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Callable, Generator, Iterable, List, Optional
import logging

from copyrights.checks.base import Issue, IssueList, Severity
from copyrights.checks.copyright import (
    E_CHECK_FAILED,
    E_REPAIR_FAILED,
    E_WRONG_COPYRIGHT_DATE,
    SUMMARY_LABELS,
    CopyrightCheck,
    RunState,
)
from copyrights.config import IGNORED_DIRS, Options
from copyrights.io import FileSet, read_ignore_file, walk_files
from copyrights.messages import error, info, plain, success, warning
from copyrights.templates import TemplateCatalog, load_catalog


logger = logging.getLogger(__name__)


def file_filter(options: Options, exclude_sets: List[FileSet]) -> Callable[[Path], bool]:
    def accept(path: Path) -> bool:
        name = path.name
        if not path.exists():
            logger.info(f"Doesn't exist, skipped: {path}")
            return False
        if not options.hidden and name.startswith(".") and name not in (".", ".."):
            logger.info(f"Hidden file skipped: {path}")
            return False
        if path.is_dir() and name in IGNORED_DIRS:
            logger.info(f"Ignored directory skipped: {path}")
            return False
        for exclude_set in exclude_sets:
            if exclude_set(path):
                logger.info(f"Excluded by {exclude_set.base_path}: {path}")
                return False
        return True
    return accept


def candidate_files(roots: Iterable[Path], options: Options) -> Generator[Path, None, None]:
    """
    Files to check below `roots`, in a stable order. Empty files and files
    whose path contains an exclude pattern are skipped.
    """
    exclude_sets = [read_ignore_file(p) for p in options.exclude_from]
    accept = file_filter(options, exclude_sets)

    for root in roots:
        if not root.exists():
            error(f"{root}: doesn't exist")
            continue
        for path in walk_files(root, accept):
            if path.stat().st_size == 0:
                logger.info(f"Empty file, skipped: {path}")
                continue
            pname = str(path)
            excluded_by = next((ex for ex in options.excludes if ex in pname), None)
            if excluded_by is not None:
                logger.info(f"Excluded by pattern \"{excluded_by}\": {pname}")
                continue
            yield path


def run_check(check: CopyrightCheck, path: Path, fix: bool) -> IssueList:
    """Check one file and repair it if asked to. A failure is reported as an issue of that file."""
    try:
        issues = check.check(path)
    except Exception as e:
        logger.debug(f"Checking {path} failed", exc_info=True)
        return IssueList([E_CHECK_FAILED.at(path, reason=e)])
    if not fix:
        return issues

    result = IssueList()
    for issue in issues:
        result.append(issue)
        if issue.fix is None:
            continue
        try:
            issue.fix()
        except Exception as e:
            logger.debug(f"Repairing {path} failed", exc_info=True)
            result.append(E_REPAIR_FAILED.at(path, reason=e))
    return result


def report(issue: Issue | IssueList | List, state: RunState, quiet: bool = False) -> None:
    if isinstance(issue, IssueList) or isinstance(issue, list):
        for i in issue:
            report(i, state, quiet)
        return

    state.record(issue)
    if quiet:
        return

    msg = issue.message
    if issue.location is not None:
        msg = f"{issue.location.path}: {msg}"

    if issue.issue_type.counted:
        error(msg)
    elif issue.issue_type.severity is Severity.INFO:
        info(msg)
    else:
        warning(msg)


def summary(state: RunState, options: Options) -> None:
    if state.errors == 0:
        success("No errors")
        return

    if not options.quiet:
        plain("")

    for issue_type, label in SUMMARY_LABELS.items():
        if issue_type is E_WRONG_COPYRIGHT_DATE and options.ignore_year:
            continue
        n = state.count(issue_type)
        if n > 0:
            plain(f"{label + ':':<24}{n}")


def check_main(paths: List[str], options: Options, catalog: Optional[TemplateCatalog] = None) -> int:
    """
    Check (and with `options.repair`, repair) every file below `paths`.
    Returns the number of errors.
    """
    if catalog is None:
        catalog = load_catalog(options.correct_template, options.alternate_templates, options.bsd_template)

    state = RunState()
    check = CopyrightCheck(catalog, options, state)
    roots = [Path(p) for p in paths] or [Path(".")]
    files = candidate_files(roots, options)

    def go(path: Path) -> IssueList:
        return run_check(check, path, options.repair)

    if options.jobs > 1:
        with ThreadPoolExecutor(max_workers=options.jobs) as executor:
            for issues in executor.map(go, files):
                report(issues, state, options.quiet)
    else:
        for path in files:
            report(go(path), state, options.quiet)

    if options.count:
        summary(state, options)
    return state.errors
