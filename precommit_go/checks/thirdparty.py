"""Checks wrapping third party tools.

Running these requires installing extra binaries (see ``prerequisites``), so
they default to a higher run level than the native checks.
"""

from dataclasses import dataclass, field

from precommit_go import process
from precommit_go.checks.base import Check, Prerequisite, filter_lines, run_tool
from precommit_go.errors import CheckError, LaunchError, OutputPolicyError
from precommit_go.tree import SourceTree, TreeError


@dataclass
class Errcheck(Check):
    """Runs errcheck on every directory containing .go files.

    ``ignores`` is passed to ``-ignore``, e.g. ``"Close|Write.*|Flush"``.
    """

    name = "errcheck"
    description = "enforces all calls returning an error are checked using tool 'errcheck'"
    prerequisites = (Prerequisite(["errcheck", "-h"], 2, "github.com/kisielk/errcheck"),)

    run_level: int = 2
    ignores: str = "Close"

    def run(self, tree: SourceTree) -> None:
        try:
            packages = [tree.import_path(d) for d in tree.source_dirs]
        except TreeError as exc:
            raise CheckError(str(exc)) from exc
        run_tool(["errcheck", "-ignore", self.ignores, *packages], tree.root, fail_on_output=True)


@dataclass
class Goimports(Check):
    """Runs goimports in list mode."""

    name = "goimports"
    description = "enforces all .go sources are formatted with 'goimports'"
    prerequisites = (Prerequisite(["goimports", "-h"], 2, "golang.org/x/tools/cmd/goimports"),)

    run_level: int = 2

    def run(self, tree: SourceTree) -> None:
        # goimports exits zero even when files need to be updated.
        run_tool(
            ["goimports", "-l", "."],
            tree.root,
            fail_on_output=True,
            hint="these files are improperly formatted, please run: goimports -w .",
        )


@dataclass
class _LinterCheck(Check):
    """A linter whose exit code is meaningless; only unfiltered output fails.

    Lines containing any ``blacklist`` entry are ignored wholesale.
    """

    command = ()

    blacklist: list[str] = field(default_factory=list)

    def run(self, tree: SourceTree) -> None:
        args = list(self.command)
        result = process.capture(args, cwd=tree.root)
        if result.error is not None:
            raise LaunchError(f"{' '.join(args)} failed: {result.error}")
        remaining = filter_lines(result.output, self.blacklist)
        if remaining:
            raise OutputPolicyError("\n".join(remaining))


@dataclass
class Golint(_LinterCheck):
    """Runs golint. It triggers false positives by design."""

    name = "golint"
    description = "enforces all .go sources passes golint"
    prerequisites = (Prerequisite(["golint", "-h"], 2, "github.com/golang/lint/golint"),)
    command = ("golint", "./...")

    run_level: int = 3


@dataclass
class Govet(_LinterCheck):
    """Runs ``go tool vet``. It triggers false positives by design."""

    name = "govet"
    description = "enforces all .go sources passes go tool vet"
    prerequisites = (Prerequisite(["go", "tool", "vet", "-h"], 1, "golang.org/x/tools/cmd/vet"),)
    command = ("go", "tool", "vet", "-all", ".")

    run_level: int = 3
    blacklist: list[str] = field(default_factory=lambda: [" composite literal uses unkeyed fields"])
