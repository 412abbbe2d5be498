"""Statement coverage profiles as written by ``go test -coverprofile``.

Format::

    mode: count
    github.com/user/pkg/file.go:10.2,12.3 3 7

Everything before the last field is the *statement key* (location range and
number of statements); the last field is the execution count.

Usage:
    counts = merge_profiles(sorted(tmp_dir.glob("test*.cov")))
    write_profile(counts, tmp_dir / "profile.cov")
"""

import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from pathlib import Path

from precommit_go.errors import CoverageParseError

HEADER = "mode: count"

_BLOCK_RE = re.compile(r"^(?P<file>.+):(?P<sl>\d+)\.(?P<sc>\d+),(?P<el>\d+)\.(?P<ec>\d+)\s+(?P<stmts>\d+)$")


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------

def parse_profile(lines: Iterable[str], source: str = "<profile>") -> dict[str, int]:
    """Parse one profile into ``{statement key: count}``.

    The first line is the ``mode:`` header and is skipped. Repeated keys
    within one profile are summed.

    Raises:
        CoverageParseError: if a line has no integer trailing field.
    """
    counts: dict[str, int] = {}
    for lineno, line in enumerate(lines, start=1):
        if lineno == 1:
            continue
        line = line.rstrip("\r\n")
        if not line.strip():
            continue
        key, count = _split_line(line, source, lineno)
        counts[key] = counts.get(key, 0) + count
    return counts


def _split_line(line: str, source: str, lineno: int) -> tuple[str, int]:
    # The count is the last field; the location before it is opaque.
    parts = line.rsplit(None, 1)
    if len(parts) != 2:
        raise CoverageParseError(f"{source}:{lineno}: malformed coverage line {line!r}")
    key, raw = parts
    try:
        count = int(raw)
    except ValueError:
        raise CoverageParseError(f"{source}:{lineno}: invalid count {raw!r}") from None
    if count < 0:
        raise CoverageParseError(f"{source}:{lineno}: negative count {count}")
    return key.rstrip(), count


# ---------------------------------------------------------------------------
# Merging
# ---------------------------------------------------------------------------

def merge_counts(profiles: Iterable[Mapping[str, int]]) -> dict[str, int]:
    """Sum counts per statement key across *profiles*.

    A key missing from a profile counts as zero there, so keys present in a
    single profile are carried through unchanged.
    """
    merged: dict[str, int] = {}
    for counts in profiles:
        for key, count in counts.items():
            merged[key] = merged.get(key, 0) + count
    return merged


def merge_profiles(paths: Iterable[Path]) -> dict[str, int]:
    """Read every profile in *paths* and merge them. No paths yields ``{}``."""
    profiles = []
    for path in paths:
        with open(path, encoding="utf-8") as f:
            profiles.append(parse_profile(f, source=str(path)))
    return merge_counts(profiles)


# ---------------------------------------------------------------------------
# Emitting
# ---------------------------------------------------------------------------

def format_profile(counts: Mapping[str, int]) -> str:
    """Render *counts* as a profile with keys in sorted order."""
    lines = [HEADER]
    lines.extend(f"{key} {counts[key]}" for key in sorted(counts))
    return "\n".join(lines) + "\n"


def write_profile(counts: Mapping[str, int], path: Path) -> Path:
    Path(path).write_text(format_profile(counts), encoding="utf-8")
    return Path(path)


# ---------------------------------------------------------------------------
# Statement blocks
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Block:
    file: str
    start_line: int
    start_col: int
    end_line: int
    end_col: int
    num_statements: int

    @classmethod
    def parse(cls, key: str) -> "Block":
        """Decode a statement key such as ``a.go:1.1,1.5 2``."""
        match = _BLOCK_RE.match(key.strip())
        if match is None:
            raise CoverageParseError(f"malformed statement key {key!r}")
        return cls(
            file=match["file"],
            start_line=int(match["sl"]),
            start_col=int(match["sc"]),
            end_line=int(match["el"]),
            end_col=int(match["ec"]),
            num_statements=int(match["stmts"]),
        )


def line_hits(counts: Mapping[str, int]) -> dict[str, dict[int, int]]:
    """Project statement counts onto source lines, per file.

    A line spanned by several blocks takes the highest count among them.
    """
    hits: dict[str, dict[int, int]] = {}
    for key in sorted(counts):
        block = Block.parse(key)
        if block.num_statements == 0:
            continue
        per_line = hits.setdefault(block.file, {})
        for line in range(block.start_line, block.end_line + 1):
            per_line[line] = max(per_line.get(line, 0), counts[key])
    return hits
