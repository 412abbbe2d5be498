"""Per-function coverage summary from ``go tool cover -func``.

The tool prints one row per function followed by a total row::

    github.com/user/pkg/a.go:12:	Foo		100.0%
    github.com/user/pkg/a.go:20:	bar		0.0%
    total:				(statements)	66.7%

Fields are separated by runs of tabs.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path

from precommit_go import process
from precommit_go.errors import CoverageParseError, ThresholdError

logger = logging.getLogger(__name__)

TOTAL = "total:"


@dataclass
class CoverageSummary:
    total: float = 0.0
    per_function: dict[tuple[str, str], float] = field(default_factory=dict)

    @property
    def untested(self) -> int:
        """Number of functions that are not fully covered."""
        return sum(1 for percent in self.per_function.values() if percent < 100.0)


def parse_summary(text: str) -> CoverageSummary:
    """Parse the summarizer output.

    Blank lines are ignored, as is a leading line that is not a
    ``location/function/percent`` row (a header).

    Raises:
        CoverageParseError: on a malformed row or a missing total row.
    """
    summary = CoverageSummary()
    found_total = False
    for index, line in enumerate(text.splitlines()):
        if not line.strip():
            continue
        fields = [f.strip() for f in line.split("\t") if f.strip()]
        if len(fields) != 3 or not fields[2].endswith("%"):
            if index == 0:
                continue
            raise CoverageParseError(f"malformed coverage summary line {line!r}")
        location, function, raw = fields
        try:
            percent = float(raw[:-1])
        except ValueError:
            raise CoverageParseError(f"malformed coverage percentage {raw!r}") from None
        if location == TOTAL:
            summary.total = percent
            found_total = True
        else:
            summary.per_function[(location, function)] = percent
    if not found_total:
        raise CoverageParseError("coverage summary has no 'total:' row")
    return summary


def summarize(profile_path: Path, cwd: Path | None = None) -> CoverageSummary:
    """Run ``go tool cover -func`` on *profile_path* and parse its output.

    Raises:
        CoverageParseError: if the tool cannot run or its output is malformed.
    """
    args = ["go", "tool", "cover", "-func", str(profile_path)]
    result = process.capture(args, cwd=cwd)
    if not result.ok:
        details = result.output or str(result.error)
        raise CoverageParseError(f"{' '.join(args)} failed:\n{details}")
    return parse_summary(result.output)


def check_threshold(summary: CoverageSummary, minimum: float) -> None:
    """Fail when total coverage is strictly below *minimum*.

    Raises:
        ThresholdError: reporting the total and the number of functions not
            fully covered.
    """
    logger.debug("total coverage %.1f%% (minimum %.1f%%)", summary.total, minimum)
    if summary.total < minimum:
        raise ThresholdError(
            f"code coverage: {summary.total:3.1f}%; {summary.untested} untested functions"
        )
