"""Pre-made checks and user declared checks.

Each built-in check class is listed once in :data:`CHECK_TYPES`; the order is
the order checks are listed in help output and in the config file.
"""

from precommit_go.checks.base import Check, Prerequisite
from precommit_go.checks.coverage import TestCoverage
from precommit_go.checks.custom import CustomCheck
from precommit_go.checks.native import BuildOnly, Gofmt, Test
from precommit_go.checks.thirdparty import Errcheck, Goimports, Golint, Govet

CHECK_TYPES: tuple[type[Check], ...] = (
    BuildOnly,
    Gofmt,
    Test,
    Errcheck,
    Goimports,
    Golint,
    Govet,
    TestCoverage,
)


def default_checks() -> list[Check]:
    """Return a fresh instance of every built-in check with its defaults."""
    return [check_type() for check_type in CHECK_TYPES]


__all__ = [
    "CHECK_TYPES",
    "BuildOnly",
    "Check",
    "CustomCheck",
    "Errcheck",
    "Gofmt",
    "Goimports",
    "Golint",
    "Govet",
    "Prerequisite",
    "Test",
    "TestCoverage",
    "default_checks",
]
