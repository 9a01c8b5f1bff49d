#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""ghost - capture and replay working tree state as portable artifacts."""

from ghost.versioning import get_version

__version__ = get_version()

# Tool functions
from ghost.tools import (
    # Git snapshot operations
    create_diff_bundle,
    apply_diff_bundle,
    create_diff_patch,
    append_non_indexed_diffs,
    apply_diff_patch,
    resolve_committish,
    list_untracked_files,
    create_working_snapshot,
    # Errors
    GhostError,
    AggregatedError,
)

__all__ = [
    # Version
    "__version__",
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
    "GhostError",
    "AggregatedError",
]
