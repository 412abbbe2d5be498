"""Installation of the third party tools needed by the enabled checks."""

import logging
from collections.abc import Callable, Iterable

import click

from precommit_go import process
from precommit_go.checks.base import Check, Prerequisite, fan_out

logger = logging.getLogger(__name__)


class PrerequisiteError(Exception):
    """Raised when missing prerequisites cannot be installed."""


def missing_prerequisites(checks: Iterable[Check]) -> list[str]:
    """Run the help command of every prerequisite of *checks* concurrently.

    Returns the sorted, de-duplicated URLs of the tools whose help command
    does not exit with the expected code.
    """
    prerequisites = [p for check in checks for p in check.prerequisites]

    def _missing(prereq: Prerequisite) -> Exception | None:
        result = process.capture(list(prereq.help_command))
        if result.exit_code != prereq.expected_exit_code:
            logger.debug("%s is missing (exit code %d)", prereq.url, result.exit_code)
            return PrerequisiteError(prereq.url)
        return None

    return sorted({str(error) for error in fan_out(_missing, prerequisites)})


def install_prerequisites(checks: Iterable[Check], echo: Callable[[str], None] = click.echo) -> list[str]:
    """Install the missing prerequisites of *checks* with ``go get``.

    ``go get`` is tried first without ``-u`` since upgrading packages behind
    the user's back is slow and unwelcome, then with ``-u``.

    Raises:
        PrerequisiteError: if installation printed errors or failed.
    """
    urls = missing_prerequisites(checks)
    if not urls:
        return []
    echo("Installing:")
    for url in urls:
        echo(f"  {url}")

    result = process.capture(["go", "get", *urls])
    if result.output or not result.ok:
        result = process.capture(["go", "get", "-u", *urls])
    if result.output:
        raise PrerequisiteError(f"prerequisites installation failed: {result.output}")
    if not result.ok:
        reason = result.error or f"exit code {result.exit_code}"
        raise PrerequisiteError(f"prerequisites installation failed: {reason}")
    return urls
