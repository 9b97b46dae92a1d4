import abc
from typing import Any, Callable, Iterator, List, Mapping, Optional
from dataclasses import dataclass, field
from pathlib import Path
import enum
import uuid


@dataclass(frozen=True)
class FileLocation:
    path: Path
    line: Optional[int] = None

    def __str__(self) -> str:
        if self.line is None:
            return str(self.path)
        return f"{self.path}:{self.line}"


class Severity(enum.Enum):
    """
    Severity levels for checks.
    """
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


@dataclass(frozen=True)
class IssueType:
    """
    Represents a type of issue.
    """
    id: str
    message: str
    severity: Severity = Severity.ERROR
    # counted towards the exit status
    counted: bool = True

    def __post_init__(self):
        # Verify that the ID is a valid UUID
        if not isinstance(self.id, str):
            raise ValueError(f"Invalid ID: {self.id}")
        try:
            uuid.UUID(self.id)
        except ValueError:
            raise ValueError(f"Invalid UUID: {self.id}")

    def make(self, **kwargs) -> 'Issue':
        """
        Creates an Issue of this type.
        """
        return Issue(self, data=kwargs)

    def at(self, path: Path, line: int | None = None, **kwargs) -> 'Issue':
        """
        Returns an Issue with the specified path.
        """
        return Issue(self, data=kwargs or None).at(path, line=line)


@dataclass
class Issue:
    """
    Represents an issue found during a check.
    """
    issue_type: IssueType
    data: Mapping[str, Any] | None = None
    location: FileLocation | None = None
    fix: Callable[[], None] | None = None

    def fixable(self, fix: Callable[[], None]) -> 'Issue':
        """
        Marks the issue as fixable.
        """
        self.fix = fix
        return self

    def at(self, path: Path, line: int | None = None) -> 'Issue':
        """
        Returns an Issue with the specified path.
        """
        if self.location is not None and self.location.path != path:
            raise ValueError("Cannot change the path of an existing issue.")
        self.location = FileLocation(path, line)
        return self

    @property
    def message(self) -> str:
        return self.issue_type.message.format(**(self.data or {}))


@dataclass
class IssueList:
    """
    Represents a list of issues found during a check.
    """
    issues: List[Issue] = field(default_factory=list)

    def append(self, issue: Issue) -> None:
        if self.issues and self.issues[-1] == issue:
            return
        self.issues.append(issue)

    def __iter__(self) -> Iterator[Issue]:
        return iter(self.issues)

    def __len__(self) -> int:
        return len(self.issues)

    def extend(self, issues: List[Issue] | 'IssueList') -> None:
        for issue in issues:
            self.append(issue)


class FileCheck(abc.ABC):
    @abc.abstractmethod
    def check(self, path: Path) -> IssueList:
        raise NotImplementedError()
