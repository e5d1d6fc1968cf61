#!/usr/bin/env python3
"""Tests for Status enum."""

from fleet import Status


class TestStatus:
    """Tests for Status enum ordering."""

    def test_urgency_ordering(self):
        """Lower value = more urgent."""
        assert Status.OVERDUE.value == 0
        assert Status.SOON.value == 1
        assert Status.UNKNOWN.value == 2
        assert Status.UNKNOWN.value < Status.OK.value

    def test_labels(self):
        assert Status.OVERDUE.label == "overdue"
        assert Status.SOON.label == "soon"
        assert Status.UNKNOWN.label == "unknown"
        assert Status.OK.label == "ok"
