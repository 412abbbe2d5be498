"""Base class and helpers shared by every check.

A check is a dataclass: its fields are exactly what the configuration file
stores for it, and the field defaults are the check's defaults. Subclasses
set the class attributes ``name``, ``description`` and ``prerequisites`` and
implement :meth:`Check.run`.
"""

import abc
import dataclasses
import logging
import queue
import typing
from collections.abc import Callable, Iterable
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path
from typing import Any, TypeVar

from precommit_go import process
from precommit_go.errors import ExitCodeError, LaunchError, OutputPolicyError
from precommit_go.tree import SourceTree

logger = logging.getLogger(__name__)

T = TypeVar("T")
E = TypeVar("E", bound=Exception)


@dataclass(frozen=True)
class Prerequisite:
    """An external tool needed by a check.

    The tool is considered installed when running ``help_command`` exits
    with ``expected_exit_code``; otherwise ``go get <url>`` installs it.
    """

    help_command: list[str]
    expected_exit_code: int
    url: str

    @classmethod
    def from_dict(cls, data: Any) -> "Prerequisite":
        """Build a prerequisite from its configuration mapping.

        Raises:
            ValueError: unless *data* maps exactly the three fields to values
                of the right type.
        """
        fields = {f.name: f.type for f in dataclasses.fields(cls)}
        if not isinstance(data, dict) or set(data) != set(fields):
            raise ValueError(f"a prerequisite must be a mapping of {', '.join(fields)}, got {data!r}")
        for key, value in data.items():
            if not conforms(value, fields[key]):
                raise ValueError(f"prerequisite '{key}' must be {describe(fields[key])}, got {value!r}")
        return cls(**data)


@dataclass
class Check(abc.ABC):
    """A unit of pre-commit validation.

    ``run_level`` is in [0, 3]: 0 never runs, 1 covers checks needing only
    the Go distribution, 2 checks needing third party tools, 3 checks prone
    to false positives. ``max_duration`` is in seconds, 0 meaning the global
    default.
    """

    name = ""
    description = ""
    prerequisites = ()

    run_level: int = 1
    max_duration: float = 0

    @abc.abstractmethod
    def run(self, tree: SourceTree) -> None:
        """Run the check against *tree*; raise :class:`CheckError` on failure."""

    def enabled(self, run_level: int) -> bool:
        return 0 < self.run_level <= run_level

    # ------------------------------------------------------------------
    # (De)serialization
    # ------------------------------------------------------------------

    def to_dict(self) -> dict[str, Any]:
        return dataclasses.asdict(self)

    def update(self, data: dict[str, Any]) -> None:
        """Overwrite fields from a configuration mapping.

        Every value is checked against its field's type before any field is
        written, so a rejected mapping leaves the check untouched.

        Raises:
            ValueError: on unknown keys, wrongly typed values or an out of
                range ``run_level``.
        """
        fields = {f.name: f.type for f in dataclasses.fields(self)}
        unknown = sorted(set(data) - set(fields))
        if unknown:
            raise ValueError(f"unknown parameter(s) for check '{self.name}': {', '.join(unknown)}")
        # Custom checks are named by the mapping being applied.
        label = data["name"] if isinstance(data.get("name"), str) else self.name
        for key, value in data.items():
            if not conforms(value, fields[key]):
                raise ValueError(
                    f"parameter '{key}' of check '{label}' must be {describe(fields[key])}, "
                    f"got {value!r}"
                )
        if "run_level" in data and not 0 <= data["run_level"] <= 3:
            raise ValueError(f"run_level of check '{self.name}' must be between 0 and 3")
        for key, value in data.items():
            setattr(self, key, value)


# ---------------------------------------------------------------------------
# Parameter types
# ---------------------------------------------------------------------------

_TYPE_NAMES = {
    bool: "a boolean",
    int: "an integer",
    float: "a non-negative number",
    str: "a string",
}

_PLURALS = {
    bool: "booleans",
    int: "integers",
    float: "numbers",
    str: "strings",
}


def conforms(value: Any, hint: Any) -> bool:
    """Tell whether a value loaded from YAML matches a field annotation.

    ``bool`` is never accepted for numbers and ``float`` fields must not be
    negative.
    """
    if typing.get_origin(hint) is list:
        (item,) = typing.get_args(hint)
        return isinstance(value, list) and all(conforms(v, item) for v in value)
    if hint is bool:
        return isinstance(value, bool)
    if hint is int:
        return isinstance(value, int) and not isinstance(value, bool)
    if hint is float:
        return isinstance(value, (int, float)) and not isinstance(value, bool) and value >= 0
    return isinstance(value, hint)


def describe(hint: Any) -> str:
    """Describe a field annotation for error messages, e.g. "a list of strings"."""
    if typing.get_origin(hint) is list:
        return "a list of " + _plural(typing.get_args(hint)[0])
    return _TYPE_NAMES.get(hint, f"a {getattr(hint, '__name__', hint)}")


def _plural(hint: Any) -> str:
    if typing.get_origin(hint) is list:
        return "lists of " + _plural(typing.get_args(hint)[0])
    return _PLURALS.get(hint, f"{getattr(hint, '__name__', hint)} entries")


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def run_tool(args: list[str], cwd: Path, *, fail_on_output: bool = False, hint: str = "") -> str:
    """Run a wrapped tool with the uniform failure policy and return its output.

    With *fail_on_output*, any output is a failure: some tools (gofmt,
    goimports, errcheck) exit zero while listing offending files.
    """
    cmd = " ".join(args)
    result = process.capture(args, cwd=cwd)
    if result.error is not None:
        raise LaunchError(f"{cmd} failed: {result.error}")
    if fail_on_output and result.output:
        raise OutputPolicyError(f"{hint or cmd + ' failed:'}\n{result.output}")
    if result.exit_code != 0:
        raise ExitCodeError(f"{cmd} failed:\n{result.output}")
    return result.output


def filter_lines(output: str, blacklist: Iterable[str]) -> list[str]:
    """Return the non-blank lines of *output* containing no blacklisted text."""
    blacklist = [b for b in blacklist if b]
    return [
        line for line in output.splitlines()
        if line.strip() and not any(b in line for b in blacklist)
    ]


def fan_out(func: Callable[[T], E | None], items: Iterable[T]) -> list[E]:
    """Call *func* on every item concurrently and collect the reported errors.

    Each call gets its own thread. Errors go through a queue sized to the
    number of items so no thread blocks; the queue is drained only once
    every thread has finished. The returned list is in posting order.
    """
    items = list(items)
    if not items:
        return []
    errors: queue.Queue[E] = queue.Queue(maxsize=len(items))

    def _task(item: T) -> None:
        error = func(item)
        if error is not None:
            errors.put_nowait(error)

    with ThreadPoolExecutor(max_workers=len(items)) as pool:
        futures = [pool.submit(_task, item) for item in items]
    for future in futures:
        future.result()

    drained: list[E] = []
    while True:
        try:
            drained.append(errors.get_nowait())
        except queue.Empty:
            return drained
