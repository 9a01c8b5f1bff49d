"""Centralized version constant for ghost."""

# Note: GHOST_GIT_COMMIT is populated at build time so wheels/sdists carry
# the commit even when git metadata is unavailable at runtime.
GHOST_VERSION = "0.4.0"
GHOST_GIT_COMMIT = "unknown"

__all__ = ["GHOST_VERSION", "GHOST_GIT_COMMIT"]
