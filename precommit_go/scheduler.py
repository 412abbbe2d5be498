"""Concurrent check scheduler.

Usage:
    outcomes = run_checks(config.enabled_checks(level), config.max_duration, tree)

Every check runs in its own thread. A check that takes longer than its
budget is a failed check, whatever its own result: the budget is verified
after the fact since the external tools cannot be interrupted cleanly.
"""

import logging
import queue
import time
from collections.abc import Callable, Iterable
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass

import click

from precommit_go.checks.base import Check
from precommit_go.errors import BudgetExceededError, CheckError, ChecksFailedError, InvalidCheckError
from precommit_go.tree import SourceTree

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RunOutcome:
    """Result of one check within one scheduler run."""

    check_name: str
    error: CheckError | None
    elapsed: float
    over_budget: bool = False

    @property
    def ok(self) -> bool:
        return self.error is None and not self.over_budget


def run_checks(
    checks: Iterable[Check],
    max_duration: float,
    tree: SourceTree,
    echo: Callable[[str], None] = click.echo,
) -> list[RunOutcome]:
    """Run *checks* concurrently and return their outcomes in input order.

    *max_duration* is the budget in seconds of checks whose own
    ``max_duration`` is 0. Failures are passed to *echo* as they are drained,
    after every check has finished.

    Raises:
        ChecksFailedError: if any check failed or exceeded its budget.
    """
    start = time.monotonic()
    checks = list(checks)
    # Two slots per check: its own failure plus a budget failure.
    errors: queue.Queue[CheckError] = queue.Queue(maxsize=2 * len(checks) or 1)

    def _run_one(check: Check) -> RunOutcome:
        logger.info("%s...", check.name)
        check_start = time.monotonic()
        error: CheckError | None = None
        try:
            check.run(tree)
        except CheckError as exc:
            error = exc
        except Exception as exc:
            logger.exception("check %s raised an unhandled exception", check.name)
            error = CheckError(f"check {check.name} crashed: {exc}")
        elapsed = time.monotonic() - check_start
        logger.info("... %s in %1.2fs", check.name, elapsed)
        if error is not None:
            errors.put_nowait(error)

        budget = check.max_duration or max_duration
        try:
            over_budget = elapsed > budget
        except TypeError:
            over_budget = True
            errors.put_nowait(InvalidCheckError(f"check {check.name} has an invalid max_duration {budget!r}"))
        else:
            if over_budget:
                errors.put_nowait(BudgetExceededError(f"check {check.name} took {elapsed:1.2f}s"))
        return RunOutcome(check.name, error, elapsed, over_budget)

    outcomes: list[RunOutcome] = []
    if checks:
        with ThreadPoolExecutor(max_workers=len(checks)) as pool:
            futures = [pool.submit(_run_one, check) for check in checks]
        outcomes = [future.result() for future in futures]

    failed = False
    while True:
        try:
            error = errors.get_nowait()
        except queue.Empty:
            break
        echo(str(error))
        failed = True

    if failed:
        raise ChecksFailedError(time.monotonic() - start)
    return outcomes
