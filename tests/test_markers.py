"""Tests for reply marker extraction and stripping."""

from stark import markers
from stark.markers import MEMORY, TODO_ADD, TODO_DONE, escape, strip_markers


class TestExtract:
    def test_memory_marker(self):
        assert MEMORY.extract("Top! [ONTHOUD: budget approved]") == ["budget approved"]

    def test_multiple_in_order(self):
        text = "[ONTHOUD: a] tekst [ONTHOUD: b]"
        assert MEMORY.extract(text) == ["a", "b"]

    def test_no_space_after_colon(self):
        assert MEMORY.extract("[ONTHOUD:launch]") == ["launch"]

    def test_escaped_brackets(self):
        assert MEMORY.extract(r"[ONTHOUD: array\[0\] is leeg]") == ["array[0] is leeg"]

    def test_escape_roundtrip(self):
        payload = "zie [docs] \\ wiki"
        assert MEMORY.extract(f"[ONTHOUD: {escape(payload)}]") == [payload]

    def test_does_not_span_lines(self):
        assert MEMORY.extract("[ONTHOUD: a\nb]") == []

    def test_blank_payload_ignored(self):
        assert MEMORY.extract("[ONTHOUD:  ]") == []

    def test_todo_done_digits_only(self):
        assert TODO_DONE.extract("[TODO_DONE: 2] [TODO_DONE: twee]") == ["2"]

    def test_other_markers_not_matched(self):
        assert TODO_ADD.extract("[ONTHOUD: x]") == []


class TestStrip:
    def test_strip_memory(self):
        assert MEMORY.strip("Genoteerd! [ONTHOUD: budget approved]") == "Genoteerd!"

    def test_strip_keeps_other_markers(self):
        assert MEMORY.strip("Ok [TODO_ADD: x]") == "Ok [TODO_ADD: x]"

    def test_strip_several_kinds(self):
        text = "Klaar [TODO_ADD: deploy] [TODO_DONE: 1]"
        assert strip_markers(text, TODO_ADD, TODO_DONE) == "Klaar"

    def test_non_numeric_done_left_alone(self):
        assert TODO_DONE.strip("[TODO_DONE: x]") == "[TODO_DONE: x]"

    def test_idempotent(self):
        text = "  Hoi [ONTHOUD: a]  daar [ONTHOUD: b]  "
        once = MEMORY.strip(text)
        assert MEMORY.strip(once) == once

    def test_nested_leftover_is_removed(self):
        text = "x [ONT[ONTHOUD: a]HOUD: b] y"
        once = MEMORY.strip(text)
        assert "ONTHOUD" not in once
        assert MEMORY.strip(once) == once

    def test_plain_text_untouched(self):
        assert markers.strip_markers("[link](http://x) en [noot]", MEMORY) == "[link](http://x) en [noot]"
