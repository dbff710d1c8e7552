# tests/test_template.py
"""
Tests for advice template expansion.
"""

from aspect_weaver.position import Position
from aspect_weaver.report import MatchRecord
from aspect_weaver.template import expand, expand_text


def _record(matched_text="CALL", **args):
    return MatchRecord(
        source_file="src/main.rs",
        matched_text=matched_text,
        start=Position(1, 1),
        end=Position(1, 5),
        captured_args=dict(args),
    )


class TestExpand:

    def test_argument_substitution(self):
        assert expand("log(ARG1)", _record(ARG1="x")) == "log(x)"

    def test_placeholder_substitution(self):
        assert expand("before $ after", _record()) == "before CALL after"

    def test_every_occurrence_is_replaced(self):
        assert expand("$ARG+ARG$", _record("m", ARG="a")) == "ma+am"

    def test_template_without_markers_is_unchanged(self):
        assert expand("plain text", _record(ARG="a")) == "plain text"

    def test_longer_key_wins_over_its_substring(self):
        rec = _record(ARG="short", ARG1="long")
        assert expand("ARG1 ARG", rec) == "long short"

    def test_key_order_does_not_matter(self):
        a = expand_text("AB A B", {"A": "1", "AB": "2", "B": "3"}, "")
        b = expand_text("AB A B", {"B": "3", "AB": "2", "A": "1"}, "")
        assert a == b == "2 1 3"

    def test_longer_overlapping_key_is_applied_first(self):
        assert expand_text("ABCD", {"AB": "1", "BCD": "3"}, "") == "A3"

    def test_equal_length_overlap_goes_alphabetically(self):
        assert expand_text("ABC", {"BC": "2", "AB": "1"}, "") == "1C"

    def test_keys_do_not_match_across_substituted_text(self):
        # the "XY" in the output straddles the frozen value of "XX"
        assert expand_text("XXY", {"XX": "-X", "XY": "!"}, "") == "-XY"

    def test_inserted_values_are_not_rescanned(self):
        rec = _record("SRC", A="B$", B="never")
        assert expand("A $", rec) == "B$ SRC"

    def test_matched_text_is_not_rescanned(self):
        assert expand("[$]", _record("$ARG", ARG="x")) == "[$ARG]"

    def test_custom_placeholder(self):
        assert expand("<@> $", _record("m"), placeholder="@") == "<m> $"

    def test_empty_key_is_ignored(self):
        assert expand_text("a$b", {"": "zzz"}, "M") == "aMb"

    def test_multiline_template(self):
        rec = _record("body()", NAME="f")
        assert expand("{\n  enter(NAME);\n  $\n}", rec) == "{\n  enter(f);\n  body()\n}"
