#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""Version helpers for ghost."""

from __future__ import annotations

import platform
import subprocess
from pathlib import Path
from typing import Optional

from ghost._version import GHOST_VERSION, GHOST_GIT_COMMIT


def get_version() -> str:
    """Return the package version using the single source of truth."""

    if GHOST_VERSION:
        return GHOST_VERSION

    try:
        from importlib.metadata import PackageNotFoundError, version

        return version("ghost-snapshot")
    except PackageNotFoundError:
        return "unknown"


def get_git_commit(short: bool = True) -> Optional[str]:
    """Return the git commit hash, preferring the build-time value if present."""
    if GHOST_GIT_COMMIT and GHOST_GIT_COMMIT != "unknown":
        return GHOST_GIT_COMMIT[:7] if short else GHOST_GIT_COMMIT

    try:
        repo_root = Path(__file__).resolve().parent.parent
        if short:
            cmd = ["git", "rev-parse", "--short", "HEAD"]
        else:
            cmd = ["git", "rev-parse", "HEAD"]
        commit = subprocess.check_output(cmd, cwd=repo_root, stderr=subprocess.DEVNULL)
        return commit.decode().strip()
    except (subprocess.CalledProcessError, OSError):
        return None


def build_version_output() -> str:
    """Format detailed version information for display."""

    version = get_version()
    commit = get_git_commit(short=True)

    output = ["ghost - working tree snapshots as portable artifacts"]
    output.append("=" * 60)
    if commit:
        output.append(f"  Version:          {version} (commit {commit})")
    else:
        output.append(f"  Version:          {version}")
    output.append(f"  Python:           {platform.python_version()}")
    output.append(f"  Platform:         {platform.system()} {platform.release()}")
    return "\n".join(output)
