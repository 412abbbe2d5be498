"""Git pre-commit hook installation."""

import logging
from pathlib import Path

from precommit_go import process
from precommit_go.process import CaptureError

logger = logging.getLogger(__name__)

HOOK_SCRIPT = """\
#!/bin/sh
# pre-commit git hook running pre-commit-go on the tree with unstaged changes
# removed.
#
# WARNING: This file was generated by tool "pre-commit-go"


# Redirect output to stderr.
exec 1>&2


run_checks() {
  # Ensure everything is either tracked or ignored. This is because git stash
  # doesn't stash untracked files.
  untracked="$(git ls-files --others --exclude-standard)"
  if [ "$untracked" != "" ]; then
    echo "This check refuses to run if there is an untracked file. Either track"
    echo "it or put it in the .gitignore or your global exclusion list:"
    echo "$untracked"
    return 1
  fi

  pre-commit-go run
  result=$?
  if [ $result != 0 ]; then
    return $result
  fi
}


# Stash index and work dir, keeping only the to-be-committed changes in the
# working directory.
old_stash=$(git rev-parse -q --verify refs/stash)
git stash save -q --keep-index
new_stash=$(git rev-parse -q --verify refs/stash)

# If there were no changes (e.g., '--amend' or '--allow-empty') then nothing was
# stashed, and we skip everything, including the checks themselves.
if [ "$old_stash" = "$new_stash" ]; then
  exit 0
fi

run_checks
result=$?

# Restore changes.
git reset --hard -q && git stash apply --index -q && git stash drop -q
exit $result
"""


class HookError(Exception):
    """Raised when the git directory or the hook file cannot be handled."""


def find_git_root(cwd: Path | None = None) -> Path:
    """Return the root of the git checkout containing *cwd*."""
    try:
        return process.capture_abs(["git", "rev-parse", "--show-cdup"], cwd=cwd)
    except CaptureError as exc:
        raise HookError("failed to find git checkout root") from exc


def install_hook(root: Path) -> Path:
    """Write ``.git/hooks/pre-commit`` for the checkout at *root*.

    Any existing hook is removed first, in case it is a symlink.

    Raises:
        HookError: if the git directory cannot be found or written to.
    """
    try:
        git_dir = process.capture_abs(["git", "rev-parse", "--git-dir"], cwd=root)
    except CaptureError as exc:
        raise HookError(f"failed to find .git dir: {exc}") from exc

    path = git_dir / "hooks" / "pre-commit"
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.unlink(missing_ok=True)
        path.write_text(HOOK_SCRIPT, encoding="utf-8")
        path.chmod(0o755)
    except OSError as exc:
        raise HookError(f"failed to write {path}: {exc}") from exc
    logger.info("installed %s", path)
    return path
