"""Parser tests: tree shape, nesting, degradation, attributes, spans."""

from __future__ import annotations

import logging
import time

from storymark.errors import Severity
from storymark.parser import Parser, parse, parse_attributes, split_legacy_value
from storymark.tokens import Position, TagKind
from tests.conftest import assert_element, assert_text


class TestBasicShapes:
    def test_empty_input(self, parse_source) -> None:
        doc = parse_source("")
        assert len(doc.children) == 1
        assert_text(doc.children[0], "")

    def test_plain_text(self, parse_source) -> None:
        doc = parse_source("Once upon a time")
        assert len(doc.children) == 1
        assert_text(doc.children[0], "Once upon a time")

    def test_single_tag(self, parse_source) -> None:
        doc = parse_source("[b]bold[/b]")
        el = assert_element(doc.children[0], "b", TagKind.BOLD, 1)
        assert_text(el.children[0], "bold")

    def test_empty_content(self, parse_source) -> None:
        doc = parse_source("[b][/b]")
        assert_element(doc.children[0], "b", TagKind.BOLD, 0)

    def test_text_around_tag(self, parse_source) -> None:
        doc = parse_source("a [i]b[/i] c")
        assert len(doc.children) == 3
        assert_text(doc.children[0], "a ")
        assert_element(doc.children[1], "i", TagKind.ITALIC)
        assert_text(doc.children[2], " c")

    def test_raw_fields_recorded(self, parse_source) -> None:
        doc = parse_source('[style color="red" size="giant"]x[/style]')
        el = assert_element(doc.children[0], "style", TagKind.STYLE)
        assert el.attrs == 'color="red" size="giant"'
        assert el.value is None
        assert el.open_raw == '[style color="red" size="giant"]'
        assert el.close_raw == "[/style]"


class TestNesting:
    def test_same_tag_nesting_depth(self, parse_source) -> None:
        doc = parse_source('[style color="red"][style size="giant"]text[/style][/style]')
        assert len(doc.children) == 1
        outer = assert_element(doc.children[0], "style", TagKind.STYLE, 1)
        inner = assert_element(outer.children[0], "style", TagKind.STYLE, 1)
        assert inner.attrs == 'size="giant"'
        assert_text(inner.children[0], "text")

    def test_sibling_isolation(self, parse_source) -> None:
        doc = parse_source('[style color="red"]Red[/style] [style color="blue"]Blue[/style]')
        assert len(doc.children) == 3
        red = assert_element(doc.children[0], "style", num_children=1)
        assert_text(doc.children[1], " ")
        blue = assert_element(doc.children[2], "style", num_children=1)
        assert_text(red.children[0], "Red")
        assert_text(blue.children[0], "Blue")

    def test_inner_sibling_between_text(self, parse_source) -> None:
        doc = parse_source('[style color="red"]Red [style color="blue"]Blue[/style] Red[/style]')
        outer = assert_element(doc.children[0], "style", num_children=3)
        assert_text(outer.children[0], "Red ")
        assert_element(outer.children[1], "style", num_children=1)
        assert_text(outer.children[2], " Red")

    def test_legacy_inside_atomic(self, parse_source) -> None:
        doc = parse_source('[style color="red"][expressive:happy]Hi[/expressive][/style]')
        outer = assert_element(doc.children[0], "style", num_children=1)
        inner = assert_element(outer.children[0], "expressive", TagKind.EXPRESSIVE)
        assert inner.value == "happy"

    def test_atomic_inside_legacy(self, parse_source) -> None:
        doc = parse_source('[expressive:shout][style size="giant"]NO[/style][/expressive]')
        outer = assert_element(doc.children[0], "expressive", num_children=1)
        assert_element(outer.children[0], "style", TagKind.STYLE)

    def test_deep_nesting(self, parse_source) -> None:
        depth = 50
        doc = parse_source("[b]" * depth + "x" + "[/b]" * depth)
        node = doc.children[0]
        for _ in range(depth - 1):
            node = assert_element(node, "b", num_children=1).children[0]
        leaf = assert_element(node, "b", num_children=1)
        assert_text(leaf.children[0], "x")

    def test_mixed_emphasis(self, parse_source) -> None:
        doc = parse_source("[b][u]text[/u][/b]")
        outer = assert_element(doc.children[0], "b", num_children=1)
        assert_element(outer.children[0], "u", TagKind.UNDERLINE, 1)

    def test_nesting_beyond_recursion_limit(self, parse_source) -> None:
        depth = 1200
        doc = parse_source("[style]" * depth + "x" + "[/style]" * depth)
        node = doc.children[0]
        for _ in range(depth - 1):
            node = assert_element(node, "style", TagKind.STYLE, 1).children[0]
        leaf = assert_element(node, "style", num_children=1)
        assert_text(leaf.children[0], "x")
        assert leaf.span.start.offset == 7 * (depth - 1)


class TestDegradation:
    def test_unmatched_tag_is_text(self, parse_source) -> None:
        doc = parse_source('[style color="red"]text')
        assert len(doc.children) == 1
        assert_text(doc.children[0], '[style color="red"]text')

    def test_unmatched_does_not_swallow_later_tags(self, parse_source) -> None:
        doc = parse_source("a [b]c [i]d[/i]")
        assert len(doc.children) == 2
        assert_text(doc.children[0], "a [b]c ")
        assert_element(doc.children[1], "i", num_children=1)

    def test_unbalanced_inner_opener(self, parse_source) -> None:
        doc = parse_source("[b][b]x[/b]")
        assert_text(doc.children[0], "[b]")
        inner = assert_element(doc.children[1], "b", num_children=1)
        assert_text(inner.children[0], "x")

    def test_stray_close_is_text(self, parse_source) -> None:
        doc = parse_source("x[/b]y")
        assert_text(doc.children[0], "x[/b]y")

    def test_close_is_case_sensitive(self, parse_source) -> None:
        doc = parse_source("[B]x[/b]")
        assert_text(doc.children[0], "[B]x[/b]")

    def test_uppercase_pair(self, parse_source) -> None:
        doc = parse_source("[B]x[/B]")
        assert_element(doc.children[0], "B", TagKind.BOLD)

    def test_unknown_tag_still_parsed(self, parse_source) -> None:
        doc = parse_source("[note]hi [b]there[/b][/note]")
        el = assert_element(doc.children[0], "note", TagKind.UNKNOWN, 2)
        assert_element(el.children[1], "b")


class TestDiagnostics:
    def test_unmatched_reported(self) -> None:
        parser = Parser("ok [b]x", "page.story")
        parser.parse()
        assert len(parser.diagnostics) == 1
        diag = parser.diagnostics[0]
        assert diag.code == "unmatched-tag"
        assert diag.severity is Severity.WARNING
        assert diag.span.start == Position(1, 4, 3)
        assert diag.span.end == Position(1, 7, 6)

    def test_clean_document_has_no_diagnostics(self) -> None:
        parser = Parser("[b]x[/b]")
        parser.parse()
        assert parser.diagnostics == []

    def test_unmatched_logged(self, caplog) -> None:
        with caplog.at_level(logging.INFO, logger="storymark.parser"):
            parse("[i]never closed", "page.story")
        assert "no matching close tag" in caplog.text
        assert "page.story:1:1" in caplog.text


class TestSpans:
    def test_element_span(self, parse_source) -> None:
        doc = parse_source("ab\n[b]x[/b]")
        el = assert_element(doc.children[1], "b")
        assert el.span.start == Position(2, 1, 3)
        assert el.span.end == Position(2, 9, 11)

    def test_document_span(self, parse_source) -> None:
        doc = parse_source("abc")
        assert doc.span.start.offset == 0
        assert doc.span.end.offset == 3


class TestParseAttributes:
    def test_pairs_in_order(self) -> None:
        assert parse_attributes('color="red" size="giant"') == (
            ("color", "red"),
            ("size", "giant"),
        )

    def test_unquoted_is_ignored(self) -> None:
        assert parse_attributes("color=red") == ()

    def test_tolerant_scan(self) -> None:
        assert parse_attributes('color="red" junk size = "big"') == (
            ("color", "red"),
            ("size", "big"),
        )

    def test_unknown_keys_kept(self) -> None:
        assert parse_attributes('sparkle="yes"') == (("sparkle", "yes"),)

    def test_empty(self) -> None:
        assert parse_attributes("") == ()


class TestSplitLegacyValue:
    def test_emotion_and_size(self) -> None:
        assert split_legacy_value("joyful:giant") == ("joyful", "giant")

    def test_emotion_only(self) -> None:
        assert split_legacy_value("joyful") == ("joyful", None)

    def test_missing(self) -> None:
        assert split_legacy_value(None) == ("", None)

    def test_empty_suffix(self) -> None:
        assert split_legacy_value("joyful:") == ("joyful", None)


class TestLargeInput:
    def test_many_unmatched_openers(self) -> None:
        count = 5000
        started = time.perf_counter()
        parser = Parser("[b]" * count)
        doc = parser.parse()
        assert time.perf_counter() - started < 2.0
        assert len(doc.children) == 1
        assert_text(doc.children[0], "[b]" * count)
        assert len(parser.diagnostics) == count

    def test_many_unterminated_openers(self) -> None:
        source = "[b " * 5000
        started = time.perf_counter()
        parser = Parser(source)
        doc = parser.parse()
        assert time.perf_counter() - started < 2.0
        assert_text(doc.children[0], source)
        assert parser.diagnostics == []

    def test_many_stray_closes(self) -> None:
        source = "[/b]" * 5000
        started = time.perf_counter()
        doc = parse(source)
        assert time.perf_counter() - started < 2.0
        assert_text(doc.children[0], source)

    def test_pair_after_many_unmatched(self) -> None:
        doc = parse("[b]" * 3000 + "[i]x[/i]")
        assert_text(doc.children[0], "[b]" * 3000)
        el = assert_element(doc.children[1], "i", TagKind.ITALIC, 1)
        assert_text(el.children[0], "x")
