"""Test coverage check.

Every test directory is run with ``go test -coverprofile`` concurrently and
the resulting profiles are merged, so package X/Y may provide coverage for
package X/Z. On Travis CI the merged profile is uploaded to coveralls.io;
otherwise it is summarized locally and compared to ``minimum_coverage``.
"""

import logging
import os
import tempfile
from dataclasses import dataclass
from pathlib import Path

from precommit_go import process
from precommit_go.checks.base import Check, Prerequisite, fan_out
from precommit_go.coverage.profile import merge_profiles, write_profile
from precommit_go.coverage.summary import check_threshold, summarize
from precommit_go.coveralls import CoverallsClient, CoverallsClientError, source_files
from precommit_go.errors import (
    CheckError,
    CoverageError,
    ExitCodeError,
    NoCoverageError,
    UploadError,
)
from precommit_go.tree import SourceTree, TreeError

logger = logging.getLogger(__name__)

#: Set by Travis CI; its presence switches the check to upload mode.
CI_JOB_ENV = "TRAVIS_JOB_ID"
REPO_TOKEN_ENV = "COVERALLS_REPO_TOKEN"


@dataclass
class TestCoverage(Check):
    """Runs all tests with coverage and enforces a minimum total.

    Only one failure is reported, in this order: an infrastructure error
    (unreadable profile, summarizer or upload failure), then a threshold
    failure, then the first failing test directory.
    """

    __test__ = False

    name = "testcoverage"
    description = "enforces minimum test coverage on all packages that are not 'main'"
    prerequisites = (Prerequisite(["go", "tool", "cover", "-h"], 1, "golang.org/x/tools/cmd/cover"),)

    run_level: int = 2
    minimum_coverage: float = 20.0

    def run(self, tree: SourceTree) -> None:
        if not tree.test_dirs:
            return
        try:
            package = tree.package
        except TreeError as exc:
            raise CheckError(str(exc)) from exc

        with tempfile.TemporaryDirectory(prefix="pre-commit-go") as tmp:
            tmp_dir = Path(tmp)

            def _task(item: tuple[int, Path]) -> CheckError | None:
                index, test_dir = item
                return _go_test_cover(test_dir, package, tmp_dir / f"test{index}.cov")

            failures = fan_out(_task, enumerate(tree.test_dirs))

            profiles = sorted(tmp_dir.glob("test*.cov"))
            if not profiles:
                if failures:
                    raise failures[0]
                raise NoCoverageError("no coverage found")

            try:
                counts = merge_profiles(profiles)
                profile_path = write_profile(counts, tmp_dir / "profile.cov")
            except OSError as exc:
                raise CoverageError(f"failed to merge coverage profiles: {exc}") from exc
            logger.debug("merged %d profiles into %d statements", len(profiles), len(counts))

            job_id = os.environ.get(CI_JOB_ENV, "")
            if job_id:
                _upload(counts, tree, job_id)
            else:
                check_threshold(summarize(profile_path, cwd=tree.root), self.minimum_coverage)

            if failures:
                raise failures[0]


def _go_test_cover(test_dir: Path, package: str, profile: Path) -> CheckError | None:
    # Profiles are named by index: directory names could collide once flattened.
    args = [
        "go", "test", "-v", "-covermode=count", "-coverpkg", f"{package}/...",
        "-coverprofile", str(profile),
    ]
    result = process.capture(args, cwd=test_dir)
    if result.exit_code != 0:
        details = result.output or str(result.error)
        return ExitCodeError(f"{' '.join(args)} {test_dir} failed:\n{details}")
    return None


def _upload(counts: dict[str, int], tree: SourceTree, job_id: str) -> None:
    client = CoverallsClient(repo_token=os.environ.get(REPO_TOKEN_ENV) or None)
    try:
        client.upload_job(job_id, source_files(counts, tree))
    except (CoverallsClientError, OSError) as exc:
        raise UploadError(f"coverage upload failed: {exc}") from exc
    logger.info("uploaded coverage for job %s", job_id)
