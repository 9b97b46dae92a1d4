"""
Asking the version control system when a file last changed.
"""
from __future__ import annotations
import abc
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List
import enum
import logging
import re
import subprocess
import threading

from git import Repo
from git.exc import GitError, InvalidGitRepositoryError, NoSuchPathError


logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0


class ChangeStatus(enum.Enum):
    KNOWN = "known"
    # the file is not under version control
    UNTRACKED = "untracked"
    # history is not available, e.g. in a shallow clone, or the query failed
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class LastChanged:
    status: ChangeStatus
    year: str = ""

    @classmethod
    def known(cls, year: str) -> 'LastChanged':
        return cls(ChangeStatus.KNOWN, year)


UNTRACKED = LastChanged(ChangeStatus.UNTRACKED)
UNKNOWN = LastChanged(ChangeStatus.UNKNOWN)


class ScmBackend(abc.ABC):
    def __init__(self, timeout: float = DEFAULT_TIMEOUT) -> None:
        self.timeout = timeout

    @abc.abstractmethod
    def is_modified(self, path: Path) -> bool:
        """Is the file modified or added in the working copy?"""
        raise NotImplementedError()

    @abc.abstractmethod
    def last_changed(self, path: Path) -> LastChanged:
        raise NotImplementedError()


def _modified(lines: List[str]) -> bool:
    for line in lines:
        line = line.strip()
        if line.startswith("M") or line.startswith("A"):
            return True
    return False


##################################################################################################
# Git
##################################################################################################

# the ref names after a commit id, e.g. "(grafted, HEAD -> main)"
_DECORATION = re.compile(r"\(([^)]*)\)$")


def _is_grafted(line: str) -> bool:
    """A grafted commit ends the history of a shallow clone."""
    m = _DECORATION.search(line)
    return m is not None and "grafted" in (d.strip() for d in m.group(1).split(","))


class GitBackend(ScmBackend):
    def __init__(self, timeout: float = DEFAULT_TIMEOUT) -> None:
        super().__init__(timeout)
        self._repos: Dict[Path, Repo | None] = {}
        self._lock = threading.Lock()

    def _repo(self, path: Path) -> Repo | None:
        directory = path.resolve().parent
        with self._lock:
            if directory not in self._repos:
                try:
                    self._repos[directory] = Repo(directory, search_parent_directories=True)
                except (InvalidGitRepositoryError, NoSuchPathError):
                    logger.debug(f"Not in a git repository: {directory}")
                    self._repos[directory] = None
            return self._repos[directory]

    def is_modified(self, path: Path) -> bool:
        repo = self._repo(path)
        if repo is None:
            return False
        try:
            output = repo.git.status("-s", "--", str(path.resolve()),
                                     kill_after_timeout=self.timeout)
        except GitError as e:
            logger.debug(f"git status failed for {path}: {e}")
            return False
        return _modified(output.splitlines())

    def last_changed(self, path: Path) -> LastChanged:
        repo = self._repo(path)
        if repo is None:
            return UNTRACKED
        try:
            output = repo.git.log("-n", "1", "--decorate", "--date=local", "--",
                                  str(path.resolve()), kill_after_timeout=self.timeout)
        except GitError as e:
            logger.debug(f"git log failed for {path}: {e}")
            return UNKNOWN

        lines = output.splitlines()
        if lines and _is_grafted(lines[0]):
            return UNKNOWN
        year = ""
        for line in lines:
            if line.startswith("Date:"):
                year = line.split(" ")[-1]
        return LastChanged.known(year) if year else UNTRACKED


##################################################################################################
# Mercurial and Subversion
##################################################################################################

class CommandBackend(ScmBackend):
    """A backend that runs a command line client."""

    def _run(self, *args: str) -> List[str] | None:
        try:
            result = subprocess.run(
                list(args), capture_output=True, text=True, timeout=self.timeout)
        except subprocess.TimeoutExpired:
            logger.debug(f"Timed out: {' '.join(args)}")
            return None
        except FileNotFoundError:
            logger.debug(f"Command not found: {args[0]}")
            return None
        return result.stdout.splitlines()


class MercurialBackend(CommandBackend):
    def is_modified(self, path: Path) -> bool:
        lines = self._run("hg", "status", str(path))
        return lines is not None and _modified(lines)

    def last_changed(self, path: Path) -> LastChanged:
        lines = self._run("hg", "log", "--limit", "1", "--template", "{date|shortdate}", str(path))
        if lines is None:
            return UNKNOWN
        year = ""
        # dates look like 2006-09-04
        for line in lines:
            if len(line) == 10 and line[0].isdigit():
                year = line[:4]
        return LastChanged.known(year) if year else UNTRACKED


class SubversionBackend(CommandBackend):
    LAST_CHANGED_DATE = "Last Changed Date: "
    ADDED_FILE = "Schedule: add"

    def __init__(self, this_year: str, timeout: float = DEFAULT_TIMEOUT) -> None:
        super().__init__(timeout)
        self.this_year = this_year

    def is_modified(self, path: Path) -> bool:
        lines = self._run("svn", "status", str(path))
        return lines is not None and _modified(lines)

    def last_changed(self, path: Path) -> LastChanged:
        lines = self._run("svn", "info", str(path))
        if lines is None:
            return UNKNOWN
        year = ""
        for line in lines:
            if line == self.ADDED_FILE:
                year = self.this_year
            if line.startswith(self.LAST_CHANGED_DATE):
                start = len(self.LAST_CHANGED_DATE)
                year = line[start:start + 4]
        return LastChanged.known(year) if year else UNTRACKED


SCM_NAMES = ("git", "hg", "mercurial", "svn")


def make_backend(name: str, this_year: str, timeout: float = DEFAULT_TIMEOUT) -> ScmBackend:
    match name:
        case "git":
            return GitBackend(timeout)
        case "hg" | "mercurial":
            return MercurialBackend(timeout)
        case "svn":
            return SubversionBackend(this_year, timeout)
        case _:
            raise ValueError(f"Unknown version control system: {name}")
