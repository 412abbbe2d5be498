"""Checks that only need the Go distribution."""

import logging
from dataclasses import dataclass, field
from pathlib import Path

from precommit_go import process
from precommit_go.checks.base import Check, fan_out, run_tool
from precommit_go.errors import CheckError, ExitCodeError, InvalidCheckError
from precommit_go.tree import SourceTree, TreeError

logger = logging.getLogger(__name__)


@dataclass
class BuildOnly(Check):
    """Builds everything inside the tree via ``go build ./...``.

    Mostly useful for ``package main`` directories; packages with tests are
    already built by the test checks. ``extra_args`` holds one argument list
    per build, e.g. ``[["-tags", "foo"], ["-tags", "bar"]]``.
    """

    name = "build"
    description = "builds all packages that do not contain tests, usually all directories with package 'main'"

    extra_args: list[list[str]] = field(default_factory=lambda: [[]])

    def run(self, tree: SourceTree) -> None:
        if not self.extra_args:
            raise InvalidCheckError("extra_args must be at least a list of one empty list")
        # Builds are sequential: 'go build ./...' leaves binaries in the tree.
        for extra in self.extra_args:
            args = ["go", "build", *extra, "./..."]
            run_tool(args, tree.root, fail_on_output=True)


@dataclass
class Gofmt(Check):
    """Runs gofmt in list mode with code simplification enabled."""

    name = "gofmt"
    description = "enforces all .go sources are formatted with 'gofmt -s'"

    def run(self, tree: SourceTree) -> None:
        # gofmt exits zero even when files need to be reformatted.
        run_tool(
            ["gofmt", "-l", "-s", "."],
            tree.root,
            fail_on_output=True,
            hint="these files are improperly formatted, please run: gofmt -w -s .",
        )


@dataclass
class Test(Check):
    """Runs all tests via ``go test``, one process per test directory.

    Each entry of ``extra_args`` runs the whole suite once more, e.g. with
    the race detector or different build tags. Variants run in order and the
    first failing one stops the check.
    """

    __test__ = False

    name = "test"
    description = "runs all tests, potentially multiple times (with race detector, with different tags, etc)"

    extra_args: list[list[str]] = field(default_factory=lambda: [["-v", "-race"]])

    def run(self, tree: SourceTree) -> None:
        if not self.extra_args:
            raise InvalidCheckError("extra_args must be at least a list of one empty list")
        for extra in self.extra_args:
            failures = fan_out(lambda d, extra=extra: _go_test(tree, d, extra), tree.test_dirs)
            if failures:
                raise failures[0]


def _go_test(tree: SourceTree, test_dir: Path, extra: list[str]) -> CheckError | None:
    try:
        package = tree.import_path(test_dir)
    except TreeError as exc:
        return CheckError(str(exc))
    args = ["go", "test", *extra, package]
    result = process.capture(args, cwd=tree.root)
    if result.exit_code != 0:
        details = result.output or str(result.error)
        return ExitCodeError(f"{' '.join(args)} failed:\n{details}")
    return None
