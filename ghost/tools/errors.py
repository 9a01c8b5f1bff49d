#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Error taxonomy for snapshot operations.

Every failure surfaced by ghost is a ``GhostError``. The type enum tells the
caller which of the four failure classes it is looking at:

- SPAWN: the version-control tool could not be started
- EXIT_STATUS: the tool ran but exited with a non-zero status
- IO: an artifact file could not be opened, written, read or inspected
- AGGREGATE: several independent causes from one logical operation

None of them are retried automatically.
"""

from enum import Enum
from typing import Any, Dict, Iterable, Iterator, List, Optional

from ghost import config


class GhostErrorType(Enum):
    """Standardized failure categories for snapshot operations."""

    SPAWN = "spawn"
    EXIT_STATUS = "exit_status"
    IO = "io"
    AGGREGATE = "aggregate"
    INVALID_REVISION = "invalid_revision"

    @property
    def is_retryable(self) -> bool:
        """Whether this error type should trigger automatic retry."""
        return False


class GhostError(Exception):
    """Base class for every error raised by ghost.

    ``context`` carries the diagnostic fields of the failing operation, such
    as the working tree directory and the artifact path.
    """

    error_type = GhostErrorType.EXIT_STATUS

    def __init__(
        self,
        message: str,
        *,
        error_type: Optional[GhostErrorType] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        if error_type is not None:
            self.error_type = error_type
        self.context: Dict[str, Any] = dict(context or {})

    def with_context(self, **context: Any) -> "GhostError":
        """Add operation context without overwriting fields already present."""
        for key, value in context.items():
            self.context.setdefault(key, value)
        return self

    def to_dict(self) -> Dict[str, Any]:
        """Convert to JSON-serializable dict."""
        return {
            "error": self.message,
            "error_type": self.error_type.value,
            "context": {k: str(v) for k, v in self.context.items()},
        }

    def __str__(self) -> str:
        if not self.context:
            return self.message
        fields = ", ".join(f"{k}={v}" for k, v in self.context.items())
        return f"{self.message} ({fields})"


class CommandSpawnError(GhostError):
    """The external program could not be started."""

    error_type = GhostErrorType.SPAWN


class CommandFailedError(GhostError):
    """The external program exited with a non-zero status."""

    error_type = GhostErrorType.EXIT_STATUS

    def __init__(
        self,
        args: List[str],
        returncode: int,
        stderr: bytes = b"",
        *,
        context: Optional[Dict[str, Any]] = None,
    ):
        self.args_list = list(args)
        self.returncode = returncode
        self.stderr = stderr or b""
        message = f"'{' '.join(self.args_list)}' exited with status {returncode}"
        tail = self.stderr_text.strip()
        if tail:
            limit = config.STDERR_TAIL_LIMIT
            if len(tail) > limit:
                tail = tail[-limit:]
            message += f": {tail}"
        super().__init__(message, context=context)

    @property
    def stderr_text(self) -> str:
        return self.stderr.decode("utf-8", errors="replace")

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data["returncode"] = self.returncode
        data["stderr"] = self.stderr_text
        return data


class ArtifactIOError(GhostError):
    """An artifact file could not be opened, written, read or inspected."""

    error_type = GhostErrorType.IO


class AggregatedError(GhostError):
    """Several independent failures from a single logical operation.

    Causes keep the order in which they occurred. Iterating the error yields
    each cause; nested aggregates are flattened on ``append``.
    """

    error_type = GhostErrorType.AGGREGATE

    def __init__(
        self,
        causes: Iterable[GhostError] = (),
        *,
        context: Optional[Dict[str, Any]] = None,
    ):
        self.causes: List[GhostError] = []
        for cause in causes:
            self.append(cause)
        super().__init__("", context=context)

    def append(self, cause: GhostError) -> None:
        if isinstance(cause, AggregatedError):
            self.causes.extend(cause.causes)
        else:
            self.causes.append(cause)

    @property
    def message(self) -> str:
        count = len(self.causes)
        lines = [f"{count} error{'s' if count != 1 else ''} occurred:"]
        lines.extend(f"\t* {cause}" for cause in self.causes)
        return "\n".join(lines)

    @message.setter
    def message(self, value: str) -> None:
        # Always derived from the causes
        pass

    def raise_if_any(self) -> None:
        """Raise this error when at least one cause has been collected."""
        if self.causes:
            raise self

    def __iter__(self) -> Iterator[GhostError]:
        return iter(self.causes)

    def __len__(self) -> int:
        return len(self.causes)

    def __bool__(self) -> bool:
        return True

    def __str__(self) -> str:
        return self.message

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data["causes"] = [cause.to_dict() for cause in self.causes]
        return data


def exit_code_of(error: Optional[BaseException]) -> Optional[int]:
    """Return the exit status carried by ``error``, if it is a command failure."""
    if isinstance(error, CommandFailedError):
        return error.returncode
    return None
