#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Tests for the snapshot error taxonomy.
"""

import json
import unittest

from ghost.tools.errors import (
    AggregatedError,
    ArtifactIOError,
    CommandFailedError,
    CommandSpawnError,
    GhostError,
    GhostErrorType,
    exit_code_of,
)


class TestGhostErrorType(unittest.TestCase):
    """Test GhostErrorType enum properties."""

    def test_nothing_is_retryable(self):
        """The core never retries, whatever the failure class."""
        for error_type in GhostErrorType:
            self.assertFalse(error_type.is_retryable, f"{error_type} should not be retryable")

    def test_subclasses_carry_their_type(self):
        self.assertIs(CommandSpawnError("x").error_type, GhostErrorType.SPAWN)
        self.assertIs(CommandFailedError(["git"], 1).error_type, GhostErrorType.EXIT_STATUS)
        self.assertIs(ArtifactIOError("x").error_type, GhostErrorType.IO)
        self.assertIs(AggregatedError().error_type, GhostErrorType.AGGREGATE)


class TestGhostError(unittest.TestCase):
    """Test GhostError and its subclasses."""

    def test_context_is_rendered(self):
        error = GhostError("boom", context={"dir": "/src", "filepath": "/tmp/a.patch"})
        self.assertEqual(str(error), "boom (dir=/src, filepath=/tmp/a.patch)")

    def test_with_context_keeps_existing_fields(self):
        error = GhostError("boom", context={"dir": "/inner"})
        error.with_context(dir="/outer", filepath="/tmp/a.patch")
        self.assertEqual(error.context, {"dir": "/inner", "filepath": "/tmp/a.patch"})

    def test_command_failure_quotes_stderr(self):
        error = CommandFailedError(["git", "apply", "x.patch"], 1, b"error: patch failed\n")
        self.assertEqual(error.returncode, 1)
        self.assertEqual(error.stderr_text, "error: patch failed\n")
        self.assertIn("'git apply x.patch' exited with status 1: error: patch failed", str(error))

    def test_command_failure_without_stderr(self):
        error = CommandFailedError(["git", "am"], 128)
        self.assertEqual(error.message, "'git am' exited with status 128")

    def test_to_dict_is_json_serializable(self):
        error = CommandFailedError(["git", "am"], 128, b"fatal", context={"dir": "/src"})
        data = json.loads(json.dumps(error.to_dict()))
        self.assertEqual(data["error_type"], "exit_status")
        self.assertEqual(data["returncode"], 128)
        self.assertEqual(data["stderr"], "fatal")
        self.assertEqual(data["context"], {"dir": "/src"})

    def test_exit_code_of(self):
        self.assertEqual(exit_code_of(CommandFailedError(["git"], 1)), 1)
        self.assertIsNone(exit_code_of(ArtifactIOError("disk full")))
        self.assertIsNone(exit_code_of(None))


class TestAggregatedError(unittest.TestCase):
    """Test multi-cause accumulation."""

    def test_keeps_causes_in_order(self):
        first = CommandFailedError(["git", "am", "b"], 128)
        second = CommandFailedError(["git", "am", "--abort"], 128)
        errors = AggregatedError([first, second])

        self.assertEqual(list(errors), [first, second])
        self.assertEqual(len(errors), 2)
        self.assertIn("2 errors occurred", str(errors))
        self.assertIn("--abort", str(errors))

    def test_nested_aggregates_are_flattened(self):
        inner = AggregatedError([ArtifactIOError("a"), ArtifactIOError("b")])
        outer = AggregatedError()
        outer.append(inner)
        outer.append(GhostError("c"))
        self.assertEqual([cause.message for cause in outer], ["a", "b", "c"])

    def test_raise_if_any(self):
        errors = AggregatedError()
        errors.raise_if_any()

        errors.append(GhostError("late"))
        with self.assertRaises(AggregatedError):
            errors.raise_if_any()

    def test_empty_aggregate_is_still_truthy(self):
        self.assertTrue(AggregatedError())
        self.assertEqual(len(AggregatedError()), 0)

    def test_to_dict_lists_causes(self):
        errors = AggregatedError([GhostError("a")], context={"filepath": "/tmp/x"})
        data = errors.to_dict()
        self.assertEqual(data["error_type"], "aggregate")
        self.assertEqual([c["error"] for c in data["causes"]], ["a"])
        self.assertEqual(data["context"], {"filepath": "/tmp/x"})


if __name__ == "__main__":
    unittest.main()
