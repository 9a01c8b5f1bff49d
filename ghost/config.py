#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""Configuration constants and settings for ghost."""

import os
import pathlib

# Configuration
ROOT = pathlib.Path(os.getcwd()).resolve()
GHOST_DIR = ROOT / ".ghost"
LOGS_DIR = GHOST_DIR / "logs"


def set_workspace_root(path: pathlib.Path) -> None:
    """Re-point ROOT and the directories derived from it."""
    global ROOT, GHOST_DIR, LOGS_DIR

    ROOT = pathlib.Path(path).resolve()
    GHOST_DIR = ROOT / ".ghost"
    LOGS_DIR = GHOST_DIR / "logs"


def _int_env(name: str, default: int, minimum: int = 1) -> int:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        return default
    return value if value >= minimum else default


# Program used for every version-control invocation
GIT_BINARY = os.getenv("GHOST_GIT_BINARY", "git").strip() or "git"

# Output from git is copied into artifacts through a buffer of this size, so
# memory stays flat no matter how large the bundle or patch is.
COPY_BUFFER_SIZE_DEFAULT = 32 * 1024
COPY_BUFFER_SIZE = _int_env("GHOST_COPY_BUFFER_SIZE", COPY_BUFFER_SIZE_DEFAULT)

# Newly created artifacts are private to the current user
ARTIFACT_FILE_MODE = 0o600

# Maximum characters of captured stderr quoted in error messages
STDERR_TAIL_LIMIT = _int_env("GHOST_STDERR_TAIL_LIMIT", 4000)

# Debug logging
LOG_RETENTION_LIMIT_DEFAULT = _int_env("GHOST_LOG_RETENTION", 7)
LOG_RETENTION_LIMIT = LOG_RETENTION_LIMIT_DEFAULT

# Echo every command line before running it
DEBUG_CMD = bool(os.getenv("GHOST_DEBUG_CMD"))
