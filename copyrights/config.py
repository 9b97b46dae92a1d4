from typing import List, Optional, Tuple
import dataclasses
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path

from copyrights.formats import FormatGroup
from copyrights.scm import DEFAULT_TIMEOUT, SCM_NAMES

################################################################################
# Options
################################################################################

# never descended into
IGNORED_DIRS = (".m2", ".svn", ".hg", ".git", "target")


def current_year() -> str:
    return str(date.today().year)


@dataclass(frozen=True)
class Options:
    # templates
    correct_template: Optional[str] = None
    alternate_templates: Tuple[str, ...] = ()
    bsd_template: Optional[str] = None

    # checks
    ignore_year: bool = False
    normalize: bool = False
    use_dash: bool = False
    preserve_copyrights: bool = False
    warn: bool = True
    explicit_exclude: bool = False

    # version control
    scm: str = "git"
    scm_only: bool = False
    scm_timeout: float = DEFAULT_TIMEOUT

    # repair
    repair: bool = False
    dont_update: bool = False

    # output
    quiet: bool = False
    verbose: bool = False
    debug: bool = False
    count: bool = False

    # file selection
    groups: Tuple[FormatGroup, ...] = ()
    hidden: bool = False
    excludes: Tuple[str, ...] = ()
    exclude_from: Tuple[Path, ...] = ()

    jobs: int = 1
    this_year: str = field(default_factory=current_year)

    def __post_init__(self):
        if self.scm not in SCM_NAMES:
            raise ValueError(f"Unknown version control system: {self.scm}")
        if self.jobs < 1:
            raise ValueError(f"Invalid number of jobs: {self.jobs}")

    def checks_group(self, group: FormatGroup) -> bool:
        """Without an explicit selection every group is checked."""
        return not self.groups or group in self.groups

    def replace(self, **changes) -> 'Options':
        return dataclasses.replace(self, **changes)


################################################################################
# Exclusions
################################################################################

def read_excludes(path: Path) -> List[str]:
    """One substring pattern per line; lines starting with '#' are comments."""
    with open(path, 'rt', encoding='utf-8') as f:
        return [
            line.rstrip('\r\n') for line in f
            if not line.strip().startswith('#') and line.rstrip('\r\n')
        ]


def load_excludes(args: List[str]) -> Tuple[str, ...]:
    """
    Expand exclude arguments. An argument starting with '@' names a file of
    patterns.
    """
    excludes: List[str] = []
    for arg in args:
        if not arg:
            continue
        if arg.startswith('@'):
            excludes.extend(read_excludes(Path(arg[1:])))
        else:
            excludes.append(arg)
    return tuple(excludes)
