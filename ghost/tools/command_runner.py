"""
Subprocess execution for version-control invocations.

This module provides the single seam through which ghost runs external
programs:
- Commands are argument lists executed with shell=False
- Standard output is drained through a fixed-size buffer into a
  caller-supplied binary destination, so artifact size never affects memory
- Standard error is spooled to a temporary file and captured in full
- Spawn failures, non-zero exits and destination write failures are all
  reported on a structured ``CommandResult`` instead of being raised

The caller decides which outcomes are failures. ``CommandResult.to_error``
maps the default policy (any non-zero exit fails) onto ``GhostError``.
"""

import os
import subprocess
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import BinaryIO, List, Optional, Protocol, Union

from ghost import config
from ghost.debug_logger import get_logger
from ghost.tools.errors import (
    ArtifactIOError,
    CommandFailedError,
    CommandSpawnError,
    GhostError,
)

PathLike = Union[str, os.PathLike]


@dataclass
class CommandResult:
    """Outcome of one external command."""

    args: List[str]
    cwd: str
    returncode: Optional[int] = None
    stderr: bytes = b""
    stdout: bytes = b""
    spawn_error: Optional[OSError] = None
    io_error: Optional[OSError] = field(default=None, repr=False)

    @property
    def ok(self) -> bool:
        return (
            self.spawn_error is None
            and self.io_error is None
            and self.returncode == 0
        )

    @property
    def stderr_text(self) -> str:
        return self.stderr.decode("utf-8", errors="replace")

    def to_error(self, **context) -> Optional[GhostError]:
        """Return the error describing this outcome, or None on success."""
        context = {"cwd": self.cwd, **context}
        if self.spawn_error is not None:
            err = CommandSpawnError(
                f"failed to start '{self.args[0]}': {self.spawn_error}",
                context=context,
            )
            err.__cause__ = self.spawn_error
            return err
        if self.io_error is not None:
            err = ArtifactIOError(
                f"failed to write output of '{' '.join(self.args)}': {self.io_error}",
                context=context,
            )
            err.__cause__ = self.io_error
            return err
        if self.returncode != 0:
            return CommandFailedError(
                self.args, self.returncode, self.stderr, context=context
            )
        return None


class Runner(Protocol):
    """Anything able to run a command the way ``CommandRunner`` does."""

    def run(
        self,
        cwd: PathLike,
        args: List[str],
        stdout: Optional[BinaryIO] = None,
    ) -> CommandResult:
        ...


def _copy_stream(source: BinaryIO, destination: BinaryIO, buffer_size: int) -> None:
    while True:
        chunk = source.read(buffer_size)
        if not chunk:
            break
        destination.write(chunk)


class CommandRunner:
    """Run external commands and stream their output."""

    def __init__(self, buffer_size: Optional[int] = None):
        self.buffer_size = buffer_size or config.COPY_BUFFER_SIZE

    def run(
        self,
        cwd: PathLike,
        args: List[str],
        stdout: Optional[BinaryIO] = None,
    ) -> CommandResult:
        """Execute ``args`` inside ``cwd`` and wait for it to finish.

        Args:
            cwd: Working directory for the process
            args: Program name followed by its arguments
            stdout: Binary destination for standard output. When omitted the
                output is collected on ``CommandResult.stdout``.

        Returns:
            CommandResult describing the exit status, captured stderr and any
            spawn or destination write failure.
        """
        args = [str(arg) for arg in args]
        cwd_str = str(Path(cwd))
        result = CommandResult(args=args, cwd=cwd_str)

        if config.DEBUG_CMD:
            print(f"  [DEBUG_CMD] Executing: {args} (cwd={cwd_str})")

        with tempfile.TemporaryFile() as stderr_file:
            try:
                proc = subprocess.Popen(
                    args,
                    shell=False,
                    cwd=cwd_str,
                    stdin=subprocess.DEVNULL,
                    stdout=subprocess.PIPE,
                    stderr=stderr_file,
                )
            except OSError as exc:
                result.spawn_error = exc
                get_logger().log_command(args, cwd_str, None, error=str(exc))
                return result

            collected = None
            try:
                if stdout is None:
                    collected = proc.stdout.read()
                else:
                    _copy_stream(proc.stdout, stdout, self.buffer_size)
                    stdout.flush()
            except OSError as exc:
                # The destination failed; stop the producer so it cannot
                # block on a full pipe.
                result.io_error = exc
                proc.kill()
            finally:
                proc.stdout.close()
                result.returncode = proc.wait()

            stderr_file.seek(0)
            result.stderr = stderr_file.read()

        if collected is not None:
            result.stdout = collected

        error = result.to_error()
        get_logger().log_command(
            args, cwd_str, result.returncode, error=str(error) if error else None
        )
        return result


_default_runner: Runner = CommandRunner()


def get_runner() -> Runner:
    """Return the runner used when an operation is not given one explicitly."""
    return _default_runner


def set_runner(runner: Optional[Runner]) -> Runner:
    """Install ``runner`` as the default and return the previous one.

    Passing None restores a fresh ``CommandRunner``.
    """
    global _default_runner
    previous = _default_runner
    _default_runner = runner if runner is not None else CommandRunner()
    return previous


def run_git(
    cwd: PathLike,
    *args: str,
    stdout: Optional[BinaryIO] = None,
    runner: Optional[Runner] = None,
) -> CommandResult:
    """Run the configured git binary with ``args`` inside ``cwd``."""
    runner = runner or get_runner()
    return runner.run(cwd, [config.GIT_BINARY, *args], stdout=stdout)
