"""Tests for precommit_go/process.py"""

import sys

import pytest

from precommit_go.process import Capture, CaptureError, capture, capture_abs


# ---------------------------------------------------------------------------
# capture()
# ---------------------------------------------------------------------------

def test_capture_returns_output_and_zero_exit_code():
    result = capture([sys.executable, "-c", "print('hello')"])
    assert result.output.strip() == "hello"
    assert result.exit_code == 0
    assert result.error is None
    assert result.ok


def test_capture_combines_stdout_and_stderr():
    script = "import sys; print('out'); sys.stdout.flush(); print('err', file=sys.stderr)"
    result = capture([sys.executable, "-c", script])
    assert "out" in result.output
    assert "err" in result.output


def test_capture_nonzero_exit_is_not_a_launch_error():
    result = capture([sys.executable, "-c", "import sys; print('boom'); sys.exit(3)"])
    assert result.exit_code == 3
    assert result.error is None
    assert "boom" in result.output
    assert not result.ok


def test_capture_missing_binary_is_a_launch_error():
    result = capture(["this-binary-does-not-exist-anywhere"])
    assert result.exit_code == -1
    assert isinstance(result.error, OSError)
    assert not result.ok


def test_capture_runs_in_working_directory(tmp_path):
    result = capture([sys.executable, "-c", "import os; print(os.getcwd())"], cwd=tmp_path)
    assert result.output.strip() == str(tmp_path.resolve()) or result.output.strip() == str(tmp_path)


# ---------------------------------------------------------------------------
# capture_abs()
# ---------------------------------------------------------------------------

def test_capture_abs_resolves_relative_output(tmp_path):
    (tmp_path / "sub").mkdir()
    path = capture_abs([sys.executable, "-c", "print('sub')"], cwd=tmp_path)
    assert path == (tmp_path / "sub").resolve()


def test_capture_abs_empty_output_is_the_working_directory(tmp_path):
    path = capture_abs([sys.executable, "-c", "print('')"], cwd=tmp_path)
    assert path == tmp_path.resolve()


def test_capture_abs_raises_on_failure(tmp_path):
    with pytest.raises(CaptureError, match="failed to run"):
        capture_abs([sys.executable, "-c", "import sys; sys.exit(1)"], cwd=tmp_path)


def test_capture_ok_property():
    assert Capture("", 0).ok
    assert not Capture("", 1).ok
    assert not Capture("", -1, OSError("nope")).ok
