from pathlib import Path
from typing import Dict, Set

import pytest

from copyrights.config import Options
from copyrights.scm import UNKNOWN, UNTRACKED, LastChanged, ScmBackend
from copyrights.templates import TemplateCatalog, load_catalog


THIS_YEAR = "2024"


class FakeScm(ScmBackend):
    """
    Version control history kept in memory. Files without a year are
    untracked; files listed in `unknown` have no usable history.
    """
    def __init__(self) -> None:
        super().__init__()
        self.years: Dict[Path, str] = {}
        self.modified: Set[Path] = set()
        self.unknown: Set[Path] = set()

    def is_modified(self, path: Path) -> bool:
        return path in self.modified

    def last_changed(self, path: Path) -> LastChanged:
        if path in self.unknown:
            return UNKNOWN
        if path in self.years:
            return LastChanged.known(self.years[path])
        return UNTRACKED


@pytest.fixture(scope="session")
def catalog() -> TemplateCatalog:
    return load_catalog()


@pytest.fixture
def options() -> Options:
    return Options(this_year=THIS_YEAR)


@pytest.fixture
def scm() -> FakeScm:
    return FakeScm()


@pytest.fixture
def licensor(catalog) -> str:
    return catalog.licensor
