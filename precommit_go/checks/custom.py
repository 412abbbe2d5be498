"""User declared checks."""

from dataclasses import dataclass, field
from typing import Any

from precommit_go import process
from precommit_go.checks.base import Check, Prerequisite
from precommit_go.errors import ExitCodeError, InvalidCheckError, LaunchError
from precommit_go.tree import SourceTree


@dataclass
class CustomCheck(Check):
    """Runs an arbitrary command configured in the config file.

    The check fails when the command cannot be started, or when it exits
    non-zero and ``check_exit_code`` is set.
    """

    name: str = ""
    description: str = ""
    command: list[str] = field(default_factory=list)
    check_exit_code: bool = False
    prerequisites: list[Prerequisite] = field(default_factory=list)

    def run(self, tree: SourceTree) -> None:
        if not self.command:
            raise InvalidCheckError(f"custom check '{self.name}' has no command")
        result = process.capture(list(self.command), cwd=tree.root)
        cmd = " ".join(self.command)
        if result.error is not None:
            raise LaunchError(f"{cmd} failed: {result.error}")
        if result.exit_code != 0 and self.check_exit_code:
            raise ExitCodeError(f"{cmd} failed with exit code {result.exit_code}:\n{result.output}")

    def update(self, data: dict[str, Any]) -> None:
        data = dict(data)
        if data.get("prerequisites") is None:
            data.pop("prerequisites", None)
        elif isinstance(data["prerequisites"], list):
            data["prerequisites"] = [
                p if isinstance(p, Prerequisite) else Prerequisite.from_dict(p)
                for p in data["prerequisites"]
            ]
        super().update(data)
        if not self.name:
            raise ValueError("custom checks require a 'name'")
        if not self.command:
            raise ValueError(f"custom check '{self.name}' requires a 'command'")
