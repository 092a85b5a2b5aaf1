"""Tests for body trimming markers."""

import pytest

from gemfreely.converters.markers import strip_after, strip_before, trim_body


class TestStripBefore:
    def test_drops_through_marker(self):
        assert strip_before("HEADER\n---\nBODY", "---") == "\nBODY"

    def test_first_occurrence(self):
        assert strip_before("a---b---c", "---") == "b---c"

    def test_missing_marker_unchanged(self):
        assert strip_before("BODY", "---") == "BODY"

    @pytest.mark.parametrize("marker", [None, ""])
    def test_no_marker_configured(self, marker):
        assert strip_before("a---b", marker) == "a---b"


class TestStripAfter:
    def test_drops_from_marker(self):
        assert strip_after("BODY\n===\nFOOTER", "===") == "BODY\n"

    def test_last_occurrence(self):
        assert strip_after("a===b===c", "===") == "a===b"

    def test_missing_marker_unchanged(self):
        assert strip_after("BODY", "===") == "BODY"

    @pytest.mark.parametrize("marker", [None, ""])
    def test_no_marker_configured(self, marker):
        assert strip_after("a===b", marker) == "a===b"


class TestTrimBody:
    def test_header_and_footer_removed(self):
        text = "HEADER\n---\nBODY\n===\nFOOTER"
        assert trim_body(text, before="---", after="===") == "\nBODY\n"

    def test_before_applied_first(self):
        # The after-marker only inside the header is gone before after runs
        text = "nav === links\n---\nBODY"
        assert trim_body(text, before="---", after="===") == "\nBODY"

    def test_both_missing(self):
        assert trim_body("BODY", before="---", after="===") == "BODY"

    def test_nothing_configured(self):
        assert trim_body("HEADER\n---\nBODY") == "HEADER\n---\nBODY"
