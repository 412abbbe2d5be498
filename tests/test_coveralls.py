"""Tests for precommit_go/coveralls.py"""

import hashlib
import json

import pytest
import requests

from precommit_go.coveralls import (
    AuthenticationError,
    CoverallsClient,
    CoverallsClientError,
    NetworkError,
    source_files,
)
from precommit_go.tree import SourceTree

BASE = "https://coveralls.example.com"
JOBS = f"{BASE}/api/v1/jobs"


@pytest.fixture
def client() -> CoverallsClient:
    return CoverallsClient(url=BASE + "/", repo_token="tok123")


def sent_payload(adapter) -> dict:
    body = adapter.last_request.body
    return json.loads(body[body.index(b"{"):body.rindex(b"}") + 1])


# ---------------------------------------------------------------------------
# upload_job(): happy path
# ---------------------------------------------------------------------------

def test_upload_returns_parsed_json(client, requests_mock):
    requests_mock.post(JOBS, json={"message": "Job #7.1", "url": f"{BASE}/jobs/1"})
    assert client.upload_job("7", []) == {"message": "Job #7.1", "url": f"{BASE}/jobs/1"}


def test_upload_sends_multipart_json_file(client, requests_mock):
    adapter = requests_mock.post(JOBS, json={})
    client.upload_job("7", [{"name": "a.go", "source_digest": "x", "coverage": [1, None]}])
    assert "multipart/form-data" in adapter.last_request.headers["Content-Type"]
    assert b'name="json_file"' in adapter.last_request.body
    payload = sent_payload(adapter)
    assert payload["service_job_id"] == "7"
    assert payload["service_name"] == "travis-ci"
    assert payload["repo_token"] == "tok123"
    assert payload["source_files"][0]["coverage"] == [1, None]


def test_upload_without_token_omits_it(requests_mock):
    adapter = requests_mock.post(JOBS, json={})
    CoverallsClient(url=BASE).upload_job("7", [])
    assert "repo_token" not in sent_payload(adapter)


def test_upload_non_json_response_is_empty(client, requests_mock):
    requests_mock.post(JOBS, text="ok")
    assert client.upload_job("7", []) == {}


# ---------------------------------------------------------------------------
# upload_job(): HTTP error codes
# ---------------------------------------------------------------------------

@pytest.mark.parametrize("status", [401, 403])
def test_upload_auth_failure_raises_authentication_error(client, requests_mock, status):
    requests_mock.post(JOBS, status_code=status)
    with pytest.raises(AuthenticationError, match="COVERALLS_REPO_TOKEN"):
        client.upload_job("7", [])


def test_upload_500_raises_client_error(client, requests_mock):
    requests_mock.post(JOBS, status_code=500, text="Internal Server Error")
    with pytest.raises(CoverallsClientError, match="500"):
        client.upload_job("7", [])


# ---------------------------------------------------------------------------
# upload_job(): network errors
# ---------------------------------------------------------------------------

def test_upload_timeout_raises_network_error(client, requests_mock):
    requests_mock.post(JOBS, exc=requests.exceptions.Timeout)
    with pytest.raises(NetworkError, match="timed out"):
        client.upload_job("7", [])


def test_upload_connection_error_raises_network_error(client, requests_mock):
    requests_mock.post(JOBS, exc=requests.exceptions.ConnectionError)
    with pytest.raises(NetworkError, match="Unable to reach"):
        client.upload_job("7", [])


# ---------------------------------------------------------------------------
# source_files()
# ---------------------------------------------------------------------------

def test_source_files_maps_counts_to_lines(tmp_path):
    content = b"package a\n\nfunc A() {\n\treturn\n}\n"
    (tmp_path / "a").mkdir()
    (tmp_path / "a" / "a.go").write_bytes(content)
    tree = SourceTree(root=tmp_path, module="example.com/p")

    files = source_files({"example.com/p/a/a.go:3.12,5.2 1": 2}, tree)

    assert files == [{
        "name": "a/a.go",
        "source_digest": hashlib.md5(content).hexdigest(),
        "coverage": [None, None, 2, 2, 2],
    }]


def test_source_files_skips_unknown_files(tmp_path, caplog):
    tree = SourceTree(root=tmp_path, module="example.com/p")
    assert source_files({"example.com/other/x.go:1.1,1.2 1": 1}, tree) == []
    assert "example.com/other/x.go" in caplog.text
