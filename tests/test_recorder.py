"""Tests for the script(1) session recorder."""

import os
import shlex
import shutil
import subprocess
import sys
from pathlib import Path

import pytest

from llm_explain import recorder
from llm_explain.errors import RecorderError

PACKAGE_ROOT = Path(__file__).parent.parent


@pytest.fixture
def process_tree(monkeypatch):
    """Fake process table: our parent is pid 100 (an interactive shell).

    Tests edit tree[100] / tree[50] to place `script` in the ancestry.
    """
    tree = {
        100: (50, "bash"),
        50: (1, "sshd"),
    }
    monkeypatch.setattr(recorder.os, "getppid", lambda: 100)
    monkeypatch.setattr(recorder, "_process_info", lambda pid: tree.get(pid, (0, "")))
    return tree


def test_not_recording_in_plain_shell(process_tree):
    assert recorder.is_recording() is False


def test_recording_when_shell_parent_is_script(process_tree):
    """The recorded shell sits between llm-explain and script."""
    process_tree[50] = (1, "script")
    assert recorder.is_recording() is True


def test_recording_with_full_path_command(process_tree):
    process_tree[100] = (1, "/usr/bin/script")
    assert recorder.is_recording() is True


def test_recording_through_nested_shells(process_tree):
    process_tree[100] = (101, "bash")
    process_tree[101] = (102, "zsh")
    process_tree[102] = (1, "script")
    assert recorder.is_recording() is True


def test_ancestor_walk_is_bounded(process_tree):
    """A process table loop must not hang the walk."""
    process_tree[100] = (100, "bash")
    assert recorder.is_recording() is False


def test_process_info_uses_ps(monkeypatch):
    calls = []

    def fake_run(args, **kwargs):
        calls.append(args)
        return subprocess.CompletedProcess(args, 0, stdout="  4321 script\n", stderr="")

    monkeypatch.setattr(recorder.subprocess, "run", fake_run)
    assert recorder._process_info(1234) == (4321, "script")
    assert calls == [["ps", "-o", "ppid=,comm=", "-p", "1234"]]


def test_process_info_unknown_pid(monkeypatch):
    monkeypatch.setattr(
        recorder.subprocess, "run",
        lambda args, **kwargs: subprocess.CompletedProcess(args, 1, stdout="", stderr=""),
    )
    assert recorder._process_info(999999) == (0, "")


def test_process_info_without_ps(monkeypatch):
    def fake_run(args, **kwargs):
        raise FileNotFoundError("ps")

    monkeypatch.setattr(recorder.subprocess, "run", fake_run)
    assert recorder._process_info(1) == (0, "")


@pytest.mark.skipif(
    not sys.platform.startswith("linux") or shutil.which("script") is None or shutil.which("ps") is None,
    reason="needs util-linux script(1) and ps",
)
def test_is_recording_inside_real_script_session(tmp_path):
    """Run is_recording() from a shell started by script(1), with no fakes."""
    code = "from llm_explain import recorder; print('recording=%s' % recorder.is_recording())"
    # "; true" keeps the shell alive as an intermediate process
    command = f"{shlex.quote(sys.executable)} -c {shlex.quote(code)}; true"
    env = dict(os.environ, SHELL="/bin/sh", PYTHONPATH=str(PACKAGE_ROOT))
    result = subprocess.run(
        ["script", "-qec", command, str(tmp_path / "typescript")],
        capture_output=True,
        text=True,
        stdin=subprocess.DEVNULL,
        env=env,
        timeout=30,
    )
    assert "recording=True" in result.stdout, result.stdout + result.stderr


def test_is_recording_outside_script_session():
    """A direct child of the test runner is not recorded."""
    if recorder.is_recording(os.getpid()):
        pytest.skip("test runner itself runs under script(1)")
    code ="from llm_explain import recorder; print('recording=%s' % recorder.is_recording())"
    env = dict(os.environ, PYTHONPATH=str(PACKAGE_ROOT))
    result = subprocess.run(
        [sys.executable, "-c", code], capture_output=True, text=True, env=env, timeout=30,
    )
    assert "recording=False" in result.stdout, result.stdout + result.stderr


def test_start_runs_script(process_tree, monkeypatch, tmp_path):
    calls = []

    def fake_run(args, **kwargs):
        calls.append(args)
        return subprocess.CompletedProcess(args, 0)

    monkeypatch.setattr(recorder.subprocess, "run", fake_run)
    log_file = tmp_path / "logs" / "session.log"

    assert recorder.start(log_file) == 0
    assert calls == [["script", str(log_file)]]
    assert log_file.parent.is_dir()


def test_start_refuses_nested_session(process_tree, tmp_path):
    process_tree[50] = (1, "script")
    with pytest.raises(RecorderError, match="already active"):
        recorder.start(tmp_path / "session.log")


def test_start_without_script_binary(process_tree, monkeypatch, tmp_path):
    def fake_run(args, **kwargs):
        raise FileNotFoundError(args[0])

    monkeypatch.setattr(recorder.subprocess, "run", fake_run)
    with pytest.raises(RecorderError, match="not found"):
        recorder.start(tmp_path / "session.log")


def test_stop_requires_active_session(process_tree, tmp_path):
    with pytest.raises(RecorderError, match="not running"):
        recorder.stop(tmp_path / "session.log")


def test_stop_keeps_log_by_default(process_tree, tmp_path):
    process_tree[50] = (1, "script")
    log_file = tmp_path / "session.log"
    log_file.write_text("ls\n")
    assert recorder.stop(log_file) is False
    assert log_file.exists()


def test_stop_with_cleanup_deletes_log(process_tree, tmp_path):
    process_tree[50] = (1, "script")
    log_file = tmp_path / "session.log"
    log_file.write_text("ls\n")
    assert recorder.stop(log_file, cleanup=True) is True
    assert not log_file.exists()


def test_stop_with_cleanup_and_no_log(process_tree, tmp_path):
    process_tree[50] = (1, "script")
    assert recorder.stop(tmp_path / "missing.log", cleanup=True) is False
