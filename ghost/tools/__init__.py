#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""Tool functions for ghost - process execution and git snapshot operations."""

# Process execution
from ghost.tools.command_runner import (
    CommandResult,
    CommandRunner,
    get_runner,
    set_runner,
    run_git,
)

# Git snapshot operations
from ghost.tools.git_ops import (
    create_diff_bundle,
    apply_diff_bundle,
    create_diff_patch,
    append_non_indexed_diffs,
    apply_diff_patch,
    resolve_committish,
    list_untracked_files,
    create_working_snapshot,
)

# Errors
from ghost.tools.errors import (
    GhostErrorType,
    GhostError,
    CommandSpawnError,
    CommandFailedError,
    ArtifactIOError,
    AggregatedError,
    exit_code_of,
)

__all__ = [
    # Process execution
    "CommandResult",
    "CommandRunner",
    "get_runner",
    "set_runner",
    "run_git",
    # Git snapshot operations
    "create_diff_bundle",
    "apply_diff_bundle",
    "create_diff_patch",
    "append_non_indexed_diffs",
    "apply_diff_patch",
    "resolve_committish",
    "list_untracked_files",
    "create_working_snapshot",
    # Errors
    "GhostErrorType",
    "GhostError",
    "CommandSpawnError",
    "CommandFailedError",
    "ArtifactIOError",
    "AggregatedError",
    "exit_code_of",
]
