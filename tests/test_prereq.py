"""Tests for precommit_go/prereq.py"""

import pytest

from precommit_go import process
from precommit_go.checks import CustomCheck, Errcheck, Gofmt, Golint, Prerequisite
from precommit_go.prereq import PrerequisiteError, install_prerequisites, missing_prerequisites
from precommit_go.process import Capture


class FakeTools:
    """Tools listed in *installed* answer their help command as expected."""

    def __init__(self, installed=(), go_get=Capture("", 0), go_get_u=Capture("", 0)):
        self.installed = set(installed)
        self.go_get = go_get
        self.go_get_u = go_get_u
        self.calls = []

    def __call__(self, args, cwd=None):
        self.calls.append(list(args))
        if args[:2] == ["go", "get"]:
            return self.go_get_u if "-u" in args else self.go_get
        if args[0] in self.installed:
            return Capture("usage: ...", 2)
        return Capture("", -1, FileNotFoundError(args[0]))


# ---------------------------------------------------------------------------
# missing_prerequisites()
# ---------------------------------------------------------------------------

def test_native_checks_need_nothing(monkeypatch):
    fake = FakeTools()
    monkeypatch.setattr(process, "capture", fake)
    assert missing_prerequisites([Gofmt()]) == []
    assert fake.calls == []


def test_missing_tools_are_sorted_and_deduplicated(monkeypatch):
    monkeypatch.setattr(process, "capture", FakeTools())
    urls = missing_prerequisites([Golint(), Errcheck(), Errcheck()])
    assert urls == ["github.com/golang/lint/golint", "github.com/kisielk/errcheck"]


def test_installed_tools_are_not_reported(monkeypatch):
    monkeypatch.setattr(process, "capture", FakeTools(installed={"errcheck"}))
    assert missing_prerequisites([Errcheck(), Golint()]) == ["github.com/golang/lint/golint"]


def test_custom_check_prerequisites_are_checked(monkeypatch):
    monkeypatch.setattr(process, "capture", FakeTools())
    custom = CustomCheck(
        name="sample",
        command=["sample"],
        prerequisites=[Prerequisite(["sample", "-help"], 2, "example.com/sample")],
    )
    assert missing_prerequisites([custom]) == ["example.com/sample"]


# ---------------------------------------------------------------------------
# install_prerequisites()
# ---------------------------------------------------------------------------

def test_nothing_missing_installs_nothing(monkeypatch):
    fake = FakeTools(installed={"errcheck"})
    monkeypatch.setattr(process, "capture", fake)
    echoed = []
    assert install_prerequisites([Errcheck()], echo=echoed.append) == []
    assert echoed == []
    assert all(call[:2] != ["go", "get"] for call in fake.calls)


def test_install_runs_go_get_once_on_success(monkeypatch):
    fake = FakeTools()
    monkeypatch.setattr(process, "capture", fake)
    echoed = []
    assert install_prerequisites([Errcheck()], echo=echoed.append) == ["github.com/kisielk/errcheck"]
    assert echoed == ["Installing:", "  github.com/kisielk/errcheck"]
    assert ["go", "get", "github.com/kisielk/errcheck"] in fake.calls
    assert ["go", "get", "-u", "github.com/kisielk/errcheck"] not in fake.calls


def test_install_retries_with_update(monkeypatch):
    fake = FakeTools(go_get=Capture("package is stale", 1))
    monkeypatch.setattr(process, "capture", fake)
    install_prerequisites([Errcheck()], echo=lambda _: None)
    assert ["go", "get", "-u", "github.com/kisielk/errcheck"] in fake.calls


def test_install_failure_raises(monkeypatch):
    fake = FakeTools(go_get=Capture("boom", 1), go_get_u=Capture("still boom", 1))
    monkeypatch.setattr(process, "capture", fake)
    with pytest.raises(PrerequisiteError, match="still boom"):
        install_prerequisites([Errcheck()], echo=lambda _: None)


def test_install_silent_failure_raises(monkeypatch):
    fake = FakeTools(go_get=Capture("", 1), go_get_u=Capture("", 1))
    monkeypatch.setattr(process, "capture", fake)
    with pytest.raises(PrerequisiteError, match="exit code 1"):
        install_prerequisites([Errcheck()], echo=lambda _: None)
