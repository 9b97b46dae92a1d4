from pathlib import Path

from copyrights.copyright_line import find_copyright
from copyrights.dates import DateStatus, DateValidator
from copyrights.scm import UNKNOWN, UNTRACKED, ChangeStatus, LastChanged


COPYRIGHT = find_copyright("Copyright (c) 2010, 2018 Oracle and/or its affiliates. All rights reserved.")


def test_current():
    verdict = DateValidator(None, "2024").validate(COPYRIGHT, LastChanged.known("2018"))
    assert verdict.status is DateStatus.CURRENT
    assert verdict.actual == "2018"


def test_mismatch():
    verdict = DateValidator(None, "2024").validate(COPYRIGHT, LastChanged.known("2021"))
    assert verdict.status is DateStatus.MISMATCH
    assert verdict.actual == "2018"
    assert verdict.expected == "2021"


def test_unknown_and_untracked():
    validator = DateValidator(None, "2024")
    assert validator.validate(COPYRIGHT, UNKNOWN).status is DateStatus.UNKNOWN
    assert validator.validate(COPYRIGHT, UNTRACKED).status is DateStatus.UNTRACKED


def test_modified_file_changed_this_year(scm):
    path = Path("Foo.java")
    scm.years[path] = "2018"
    scm.modified.add(path)
    validator = DateValidator(scm, "2024")
    assert validator.last_changed(path) == LastChanged.known("2024")
    verdict = validator.check(path, COPYRIGHT)
    assert verdict.status is DateStatus.MISMATCH
    assert verdict.expected == "2024"


def test_untracked_file_changed_this_year(scm):
    path = Path("Foo.java")
    assert DateValidator(scm, "2024").last_changed(path) == LastChanged.known("2024")
    assert DateValidator(scm, "2024", scm_only=True).last_changed(path).status is ChangeStatus.UNTRACKED


def test_history_year(scm):
    path = Path("Foo.java")
    scm.years[path] = "2018"
    assert DateValidator(scm, "2024").check(path, COPYRIGHT).status is DateStatus.CURRENT


def test_unknown_history(scm):
    path = Path("Foo.java")
    scm.unknown.add(path)
    assert DateValidator(scm, "2024").check(path, COPYRIGHT).status is DateStatus.UNKNOWN
