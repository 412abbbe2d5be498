"""Coverage profile merging, summarizing and uploading."""

from precommit_go.coverage.profile import (
    HEADER,
    Block,
    format_profile,
    line_hits,
    merge_counts,
    merge_profiles,
    parse_profile,
    write_profile,
)
from precommit_go.coverage.summary import CoverageSummary, check_threshold, parse_summary, summarize

__all__ = [
    "HEADER",
    "Block",
    "CoverageSummary",
    "check_threshold",
    "format_profile",
    "line_hits",
    "merge_counts",
    "merge_profiles",
    "parse_profile",
    "parse_summary",
    "summarize",
    "write_profile",
]
