"""Shared fixtures for ghost tests.

Tests that drive a real git binary build throwaway repositories under
``tmp_path`` with an isolated HOME so user configuration cannot leak in.
Unit tests substitute ``FakeRunner`` for the process runner.
"""

import shutil
import subprocess
from pathlib import Path
from typing import Callable, List, Optional, Tuple

import pytest

from ghost.debug_logger import DebugLogger
from ghost.tools.command_runner import CommandResult

GIT_AVAILABLE = shutil.which("git") is not None

requires_git = pytest.mark.skipif(not GIT_AVAILABLE, reason="git binary not available")

Response = Tuple[int, bytes, bytes]


class FakeRunner:
    """Scripted stand-in for ``CommandRunner``.

    Each call consumes one ``(returncode, stdout, stderr)`` response, or asks
    ``handler(args)`` for one. Stdout bytes are written to the destination
    when one is given, mirroring the real runner.
    """

    def __init__(
        self,
        responses: Optional[List[Response]] = None,
        handler: Optional[Callable[[List[str]], Response]] = None,
    ):
        self.responses = list(responses or [])
        self.handler = handler
        self.calls: List[Tuple[str, List[str]]] = []

    def run(self, cwd, args, stdout=None) -> CommandResult:
        args = [str(arg) for arg in args]
        self.calls.append((str(cwd), args))
        if self.handler is not None:
            returncode, out, err = self.handler(args)
        elif self.responses:
            returncode, out, err = self.responses.pop(0)
        else:
            returncode, out, err = 0, b"", b""

        result = CommandResult(args=args, cwd=str(cwd), returncode=returncode, stderr=err)
        if stdout is not None:
            stdout.write(out)
        else:
            result.stdout = out
        return result

    @property
    def argv(self) -> List[List[str]]:
        return [args for _, args in self.calls]


@pytest.fixture
def fake_runner():
    """Factory for scripted runners."""
    return FakeRunner


@pytest.fixture(autouse=True)
def reset_debug_logger():
    """Reset the singleton logger before and after each test."""
    DebugLogger._instance = None
    DebugLogger._loggers = {}
    yield
    instance = DebugLogger._instance
    if instance and instance.enabled:
        instance.close()
    DebugLogger._instance = None
    DebugLogger._loggers = {}


def git(cwd: Path, *args: str) -> str:
    """Run git in ``cwd`` and return its stdout, failing the test on error."""
    proc = subprocess.run(
        ["git", *args],
        cwd=str(cwd),
        capture_output=True,
        check=False,
    )
    assert proc.returncode == 0, proc.stderr.decode("utf-8", errors="replace")
    return proc.stdout.decode("utf-8", errors="replace")


@pytest.fixture
def git_env(tmp_path, monkeypatch):
    """Give git a deterministic identity and no user or system config."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("GIT_CONFIG_NOSYSTEM", "1")
    monkeypatch.delenv("GIT_CONFIG_GLOBAL", raising=False)
    monkeypatch.delenv("GIT_DIR", raising=False)
    monkeypatch.delenv("GIT_WORK_TREE", raising=False)
    for role in ("AUTHOR", "COMMITTER"):
        monkeypatch.setenv(f"GIT_{role}_NAME", "Ghost Tester")
        monkeypatch.setenv(f"GIT_{role}_EMAIL", "ghost@example.com")
    return home


@pytest.fixture
def git_repo(tmp_path, git_env):
    """Factory creating an initialised repository under ``tmp_path``."""
    if not GIT_AVAILABLE:
        pytest.skip("git binary not available")

    def _make(name: str = "repo") -> Path:
        repo = tmp_path / name
        repo.mkdir()
        git(repo, "init", "-q")
        git(repo, "config", "commit.gpgsign", "false")
        return repo

    return _make


def commit_all(repo: Path, message: str) -> str:
    """Stage everything, commit, and return the new HEAD hash."""
    git(repo, "add", "-A")
    git(repo, "commit", "-q", "-m", message)
    return git(repo, "rev-parse", "HEAD").strip()

