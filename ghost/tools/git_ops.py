#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""Git operations for capturing and replaying working tree state.

Two artifact kinds are produced and consumed here:

- a diff bundle: the commits ``from..to`` along first-parent history as a
  mailbox-style patch series, oldest first, replayed with ``git am``;
- a diff patch: uncommitted changes relative to a base revision as a single
  binary-capable unified diff, optionally followed by no-index diffs for
  untracked files, replayed with ``git apply``.

Every operation returns normally on success and raises a ``GhostError``
subclass on failure.
"""

import logging
import os
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, List, Optional, Sequence

from ghost import config
from ghost.tools.command_runner import PathLike, Runner, run_git
from ghost.tools.errors import (
    AggregatedError,
    ArtifactIOError,
    GhostError,
    GhostErrorType,
    exit_code_of,
)

logger = logging.getLogger(__name__)

# git diff --no-index exits with 1 when the inputs differ, which is always the
# case for a non-empty untracked file compared against /dev/null.
NO_INDEX_DIFFERENCES_FOUND = 1

_BUNDLE_LOG_ARGS = (
    "log", "-p", "--reverse", "--pretty=email", "--stat", "-m",
    "--first-parent", "--binary",
)
_PATCH_DIFF_ARGS = ("diff", "--patience", "--binary")


# ========== Artifact handles ==========

def _create_opener(path, flags):
    return os.open(path, flags, config.ARTIFACT_FILE_MODE)


def _append_existing_opener(path, flags):
    # Appending never creates the artifact; it must already exist.
    return os.open(path, flags & ~os.O_CREAT, config.ARTIFACT_FILE_MODE)


@contextmanager
def _open_artifact(path: str, mode: str, **context) -> Iterator:
    """Open an artifact and guarantee it is closed on every exit path.

    A close failure after an otherwise successful operation is an error in
    its own right; while another error is propagating it is only logged.
    """
    opener = _create_opener if "w" in mode else _append_existing_opener
    try:
        handle = open(path, mode, opener=opener)
    except OSError as exc:
        raise ArtifactIOError(
            f"cannot open artifact: {exc}", context=context
        ) from exc

    failed = False
    try:
        yield handle
    except BaseException:
        failed = True
        raise
    finally:
        try:
            handle.close()
        except OSError as exc:
            if failed:
                logger.warning("failed to close artifact %s: %s", path, exc)
            else:
                raise ArtifactIOError(
                    f"cannot close artifact: {exc}", context=context
                ) from exc


def _discard_partial(path: str) -> None:
    try:
        os.unlink(path)
    except FileNotFoundError:
        pass
    except OSError as exc:
        logger.warning("failed to remove partial artifact %s: %s", path, exc)


def _write_artifact(dir: PathLike, path: str, args: Sequence[str], runner: Optional[Runner]) -> None:
    """Stream the output of ``git <args>`` into a freshly truncated artifact."""
    context = {"dir": str(dir), "filepath": path}
    try:
        with _open_artifact(path, "wb", **context) as handle:
            result = run_git(dir, *args, stdout=handle, runner=runner)
            error = result.to_error(**context)
            if error is not None:
                raise error
    except GhostError:
        _discard_partial(path)
        raise


# ========== Bundles (committed history) ==========

def create_diff_bundle(
    dir: PathLike,
    output_path: PathLike,
    from_committish: str,
    to_committish: str,
    *,
    runner: Optional[Runner] = None,
) -> Path:
    """Write the commits ``from_committish..to_committish`` to ``output_path``.

    Each commit becomes one mailbox-style message with a stat summary and a
    binary-capable diff; messages are ordered oldest first and follow
    first-parent history only.

    Raises:
        ArtifactIOError: the artifact could not be created or written
        CommandSpawnError: git could not be started
        CommandFailedError: ``git log`` exited with a non-zero status
    """
    path = os.path.abspath(output_path)
    _write_artifact(
        dir,
        path,
        [*_BUNDLE_LOG_ARGS, f"{from_committish}..{to_committish}"],
        runner,
    )
    return Path(path)


def apply_diff_bundle(
    dir: PathLike,
    bundle_path: PathLike,
    *,
    runner: Optional[Runner] = None,
) -> None:
    """Replay a bundle created by ``create_diff_bundle`` onto ``dir``.

    The whole series applies or nothing does: when any patch fails, the
    in-progress ``git am`` is aborted so the tree returns to its previous
    state.

    Raises:
        AggregatedError: holding the apply failure, followed by the abort
            failure when the rollback did not succeed either
    """
    path = os.path.abspath(bundle_path)
    context = {"dir": str(dir), "filepath": path}

    apply_error = run_git(dir, "am", path, runner=runner).to_error(**context)
    if apply_error is None:
        return

    errors = AggregatedError(context=context)
    errors.append(apply_error)
    logger.info(
        "apply ('git am') failed, aborting: src_dir=%s filepath=%s error=%s",
        dir, path, apply_error,
    )

    abort_error = run_git(dir, "am", "--abort", runner=runner).to_error(**context)
    if abort_error is not None:
        errors.append(abort_error)
    raise errors


# ========== Patches (uncommitted changes) ==========

def create_diff_patch(
    dir: PathLike,
    output_path: PathLike,
    committish: str,
    *,
    runner: Optional[Runner] = None,
) -> Path:
    """Write the diff from ``committish`` to the working tree of ``dir``.

    An empty artifact is a valid result meaning "no changes".
    """
    path = os.path.abspath(output_path)
    _write_artifact(dir, path, [*_PATCH_DIFF_ARGS, committish], runner)
    return Path(path)


def append_non_indexed_diffs(
    dir: PathLike,
    patch_path: PathLike,
    paths: Sequence[str],
    *,
    runner: Optional[Runner] = None,
) -> None:
    """Append a creation diff for every file in ``paths`` to an existing patch.

    Each file is compared against an empty source with ``git diff
    --no-index``. Exit status 1 means differences were found and is expected.
    Any other failure is collected and the remaining paths are still
    processed.

    Raises:
        ArtifactIOError: the patch could not be opened for appending
        AggregatedError: one cause per path whose diff failed
    """
    if not paths:
        return

    path = os.path.abspath(patch_path)
    context = {"dir": str(dir), "filepath": path}
    errors = AggregatedError(context=context)

    with _open_artifact(path, "ab", **context) as handle:
        for untracked in paths:
            result = run_git(
                dir, *_PATCH_DIFF_ARGS, "--no-index", "--", os.devnull, untracked,
                stdout=handle, runner=runner,
            )
            error = result.to_error(path=untracked, **context)
            if error is None:
                continue
            if exit_code_of(error) == NO_INDEX_DIFFERENCES_FOUND:
                continue
            errors.append(error)

    errors.raise_if_any()


def apply_diff_patch(
    dir: PathLike,
    patch_path: PathLike,
    *,
    runner: Optional[Runner] = None,
) -> None:
    """Apply a patch created by ``create_diff_patch`` to ``dir``.

    An empty patch is accepted without running git. ``git apply`` is atomic,
    so a failed apply leaves the tree untouched and no rollback is needed.
    """
    path = os.path.abspath(patch_path)
    context = {"dir": str(dir), "filepath": path}
    try:
        size = os.stat(path).st_size
    except OSError as exc:
        raise ArtifactIOError(f"cannot stat patch: {exc}", context=context) from exc

    if size == 0:
        logger.info("ignore empty patch: src_dir=%s filepath=%s", dir, path)
        return

    error = run_git(dir, "apply", path, runner=runner).to_error(**context)
    if error is not None:
        raise error


# ========== Helpers ==========

def resolve_committish(
    dir: PathLike,
    committish: str,
    *,
    runner: Optional[Runner] = None,
) -> str:
    """Return the full commit hash ``committish`` refers to in ``dir``."""
    result = run_git(
        dir, "rev-parse", "--verify", "--quiet", f"{committish}^{{commit}}",
        runner=runner,
    )
    error = result.to_error(committish=committish)
    if error is not None:
        if exit_code_of(error) is None:
            raise error
        raise GhostError(
            f"not a valid commit: {committish}",
            error_type=GhostErrorType.INVALID_REVISION,
            context={"dir": str(dir), "committish": committish},
        ) from error
    return result.stdout.decode("utf-8", errors="replace").strip()


def list_untracked_files(
    dir: PathLike,
    *,
    runner: Optional[Runner] = None,
) -> List[str]:
    """List files in ``dir`` that are neither tracked nor ignored."""
    result = run_git(
        dir, "ls-files", "--others", "--exclude-standard", "-z", runner=runner,
    )
    error = result.to_error(dir=str(dir))
    if error is not None:
        raise error
    raw = result.stdout.decode("utf-8", errors="surrogateescape")
    return [entry for entry in raw.split("\0") if entry]


def create_working_snapshot(
    dir: PathLike,
    output_path: PathLike,
    committish: str,
    *,
    include_untracked: bool = True,
    runner: Optional[Runner] = None,
) -> List[str]:
    """Capture every local modification relative to ``committish``.

    Writes the working diff and, unless disabled, appends creation diffs for
    untracked files. Returns the untracked paths that were appended.
    """
    create_diff_patch(dir, output_path, committish, runner=runner)
    if not include_untracked:
        return []

    artifact = os.path.abspath(output_path)
    untracked = [
        entry for entry in list_untracked_files(dir, runner=runner)
        if os.path.abspath(os.path.join(dir, entry)) != artifact
    ]
    append_non_indexed_diffs(dir, output_path, untracked, runner=runner)
    return untracked
