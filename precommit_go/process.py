"""External process runner.

Usage:
    result = capture(["gofmt", "-l", "-s", "."], cwd=root)
    if result.error:            # the binary could not be started
        ...
    if result.exit_code != 0:   # it ran and reported a failure
        ...
    path = capture_abs(["git", "rev-parse", "--git-dir"])

Every check goes through :func:`capture`; tests replace it to avoid needing
the Go toolchain.
"""

import logging
import subprocess
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------

class CaptureError(Exception):
    """Raised by :func:`capture_abs` when the command does not succeed."""


# ---------------------------------------------------------------------------
# Result
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Capture:
    """Combined stdout+stderr, exit code and launch error of one command.

    ``exit_code`` is -1 when the process never started; ``error`` is then the
    ``OSError`` raised while launching it. A process that started and exited
    non-zero has ``error`` set to ``None``.
    """

    output: str
    exit_code: int
    error: OSError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.exit_code == 0


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def capture(args: list[str], cwd: str | Path | None = None) -> Capture:
    """Run *args* (optionally from *cwd*) and return its :class:`Capture`."""
    logger.debug("capture(%s) in %s", args, cwd or ".")
    try:
        proc = subprocess.run(
            args,
            cwd=cwd,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            text=True,
            errors="replace",
            check=False,
        )
    except OSError as exc:
        logger.debug("capture(%s) failed to start: %s", args, exc)
        return Capture(output="", exit_code=-1, error=exc)
    return Capture(output=proc.stdout or "", exit_code=proc.returncode)


def capture_abs(args: list[str], cwd: str | Path | None = None) -> Path:
    """Run a command printing a path and return it as an absolute path.

    Relative output is resolved against *cwd* (or the current directory).

    Raises:
        CaptureError: if the command cannot be started or exits non-zero.
    """
    result = capture(args, cwd=cwd)
    if not result.ok:
        raise CaptureError(f'failed to run "{" ".join(args)}"')
    base = Path(cwd) if cwd is not None else Path.cwd()
    path = (base / result.output.strip()).resolve()
    logger.debug("capture_abs(%s) = %s", args, path)
    return path
