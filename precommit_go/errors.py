"""Check failure taxonomy.

Every failure a check reports is a :class:`CheckError`. The scheduler only
catches this family; anything else escaping a check is a bug and is reported
as such.

    CheckError
    ├── LaunchError          the external tool could not be started
    ├── ExitCodeError        the tool ran and exited non-zero
    ├── OutputPolicyError    the tool exited zero but printed offending files
    ├── InvalidCheckError    the check's parameters cannot be used
    ├── BudgetExceededError  the check ran longer than its allotted seconds
    └── CoverageError
        ├── CoverageParseError  malformed profile or summary text
        ├── NoCoverageError     tests ran but produced no profile
        ├── ThresholdError      total coverage below the minimum
        └── UploadError         the CI coverage upload failed

    ChecksFailedError        roll-up raised by the scheduler
"""


class CheckError(Exception):
    """Base exception for a failing check."""


class LaunchError(CheckError):
    """Raised when the wrapped tool is missing or cannot be started."""


class ExitCodeError(CheckError):
    """Raised when the wrapped tool exits with a non-zero status."""


class OutputPolicyError(CheckError):
    """Raised when a tool that always exits zero printed disallowed output."""


class InvalidCheckError(CheckError):
    """Raised when a check is configured with unusable parameters."""


class BudgetExceededError(CheckError):
    """Synthesized when a check took longer than its time budget."""


class CoverageError(CheckError):
    """Base exception for the coverage check."""


class CoverageParseError(CoverageError):
    """Raised on a malformed coverage profile or summary."""


class NoCoverageError(CoverageError):
    """Raised when test directories exist but no profile was produced."""


class ThresholdError(CoverageError):
    """Raised when total coverage is below the configured minimum."""


class UploadError(CoverageError):
    """Raised when the merged profile could not be uploaded in CI mode."""


class ChecksFailedError(Exception):
    """Raised by the scheduler when at least one check failed.

    The individual failures have already been echoed; this only carries the
    wall-clock duration of the whole run.
    """

    def __init__(self, duration: float) -> None:
        super().__init__(f"checks failed in {duration:1.2f}s")
        self.duration = duration
