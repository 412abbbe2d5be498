"""Tests for precommit_go/hook.py"""

import stat

import pytest

from precommit_go import process
from precommit_go.hook import HOOK_SCRIPT, HookError, find_git_root, install_hook
from precommit_go.process import Capture


def fake_git(git_dir=".git", cdup=""):
    def _capture(args, cwd=None):
        if args == ["git", "rev-parse", "--git-dir"]:
            return Capture(git_dir + "\n", 0)
        if args == ["git", "rev-parse", "--show-cdup"]:
            return Capture(cdup + "\n", 0)
        return Capture("fatal: not a git repository", 128)
    return _capture


def no_git(args, cwd=None):
    return Capture("fatal: not a git repository", 128)


# ---------------------------------------------------------------------------
# install_hook()
# ---------------------------------------------------------------------------

def test_install_writes_executable_hook(monkeypatch, tmp_path):
    monkeypatch.setattr(process, "capture", fake_git())
    path = install_hook(tmp_path)
    assert path == tmp_path.resolve() / ".git" / "hooks" / "pre-commit"
    assert path.read_text(encoding="utf-8") == HOOK_SCRIPT
    assert path.stat().st_mode & stat.S_IXUSR


def test_install_replaces_existing_hook(monkeypatch, tmp_path):
    monkeypatch.setattr(process, "capture", fake_git())
    hooks = tmp_path / ".git" / "hooks"
    hooks.mkdir(parents=True)
    (hooks / "pre-commit").write_text("#!/bin/sh\nexit 1\n", encoding="utf-8")
    install_hook(tmp_path)
    assert (hooks / "pre-commit").read_text(encoding="utf-8") == HOOK_SCRIPT


def test_install_replaces_symlinked_hook(monkeypatch, tmp_path):
    monkeypatch.setattr(process, "capture", fake_git())
    hooks = tmp_path / ".git" / "hooks"
    hooks.mkdir(parents=True)
    target = tmp_path / "shared-hook"
    target.write_text("#!/bin/sh\n", encoding="utf-8")
    (hooks / "pre-commit").symlink_to(target)
    install_hook(tmp_path)
    assert not (hooks / "pre-commit").is_symlink()
    assert target.read_text(encoding="utf-8") == "#!/bin/sh\n"


def test_install_outside_git_raises(monkeypatch, tmp_path):
    monkeypatch.setattr(process, "capture", no_git)
    with pytest.raises(HookError, match=".git dir"):
        install_hook(tmp_path)


def test_hook_script_runs_checks_on_staged_tree():
    assert HOOK_SCRIPT.startswith("#!/bin/sh\n")
    assert "git stash save -q --keep-index" in HOOK_SCRIPT
    assert "pre-commit-go run" in HOOK_SCRIPT


# ---------------------------------------------------------------------------
# find_git_root()
# ---------------------------------------------------------------------------

def test_find_git_root_resolves_cdup(monkeypatch, tmp_path):
    (tmp_path / "sub").mkdir()
    monkeypatch.setattr(process, "capture", fake_git(cdup="../"))
    assert find_git_root(tmp_path / "sub") == tmp_path.resolve()


def test_find_git_root_outside_git_raises(monkeypatch, tmp_path):
    monkeypatch.setattr(process, "capture", no_git)
    with pytest.raises(HookError, match="checkout root"):
        find_git_root(tmp_path)
