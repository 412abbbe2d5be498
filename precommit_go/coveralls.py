"""coveralls.io API client.

Usage:
    client = CoverallsClient(repo_token=os.environ.get("COVERALLS_REPO_TOKEN"))
    client.upload_job(job_id="1234", source_files=source_files(counts, tree))

Only the Jobs API is used: the merged coverage profile of a CI build is
posted as a multipart ``json_file``.
"""

import hashlib
import json
import logging
from collections.abc import Mapping
from typing import Any

import requests

from precommit_go.coverage.profile import line_hits
from precommit_go.tree import SourceTree

logger = logging.getLogger(__name__)

DEFAULT_URL = "https://coveralls.io"
JOBS_ENDPOINT = "/api/v1/jobs"


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------

class CoverallsClientError(Exception):
    """Base exception for all client errors."""


class AuthenticationError(CoverallsClientError):
    """Raised on HTTP 401/403: missing or invalid repo token."""


class NetworkError(CoverallsClientError):
    """Raised on connection timeout or unreachable server."""


# ---------------------------------------------------------------------------
# Client
# ---------------------------------------------------------------------------

class CoverallsClient:
    """Thin wrapper around the coveralls.io Jobs API."""

    def __init__(
        self,
        url: str = DEFAULT_URL,
        repo_token: str | None = None,
        service_name: str = "travis-ci",
        timeout: int = 30,
    ) -> None:
        self.base_url = url.rstrip("/")
        self._repo_token = repo_token
        self._service_name = service_name
        self._timeout = timeout
        self._session = requests.Session()

    def upload_job(self, job_id: str, source_files: list[dict[str, Any]]) -> dict:
        """Post one CI job's coverage and return the parsed JSON response.

        Raises:
            AuthenticationError: HTTP 401 or 403
            CoverallsClientError: any other non-2xx response
            NetworkError:        timeout or connection failure
        """
        payload: dict[str, Any] = {
            "service_job_id": job_id,
            "service_name": self._service_name,
            "source_files": source_files,
        }
        if self._repo_token:
            payload["repo_token"] = self._repo_token

        url = f"{self.base_url}{JOBS_ENDPOINT}"
        logger.debug("uploading %d source files to %s", len(source_files), url)
        try:
            response = self._session.post(
                url,
                files={"json_file": ("json_file", json.dumps(payload), "application/json")},
                timeout=self._timeout,
            )
        except requests.exceptions.Timeout as exc:
            raise NetworkError(
                f"Request timed out after {self._timeout}s while contacting '{url}'"
            ) from exc
        except requests.exceptions.ConnectionError as exc:
            raise NetworkError(f"Unable to reach coveralls at '{self.base_url}'") from exc

        if response.status_code in (401, 403):
            raise AuthenticationError(
                "Authentication failed: check that COVERALLS_REPO_TOKEN is set and valid."
            )
        if not response.ok:
            raise CoverallsClientError(
                f"Unexpected response {response.status_code} from {url}: {response.text[:200]}"
            )
        try:
            return response.json()
        except ValueError:
            return {}


# ---------------------------------------------------------------------------
# Payload
# ---------------------------------------------------------------------------

def source_files(counts: Mapping[str, int], tree: SourceTree) -> list[dict[str, Any]]:
    """Convert merged statement counts into coveralls ``source_files``.

    Files are named relative to the tree root. Lines without statements are
    ``None``. Profile entries whose file cannot be found under the tree are
    skipped.
    """
    files: list[dict[str, Any]] = []
    for import_file, hits in sorted(line_hits(counts).items()):
        path = tree.source_file(import_file)
        if path is None:
            logger.warning("skipping coverage of %s: not found under %s", import_file, tree.root)
            continue
        content = path.read_bytes()
        num_lines = len(content.decode("utf-8", errors="replace").splitlines())
        coverage: list[int | None] = [None] * num_lines
        for line, count in hits.items():
            if 1 <= line <= num_lines:
                coverage[line - 1] = count
        files.append({
            "name": path.relative_to(tree.root).as_posix(),
            "source_digest": hashlib.md5(content).hexdigest(),
            "coverage": coverage,
        })
    return files
