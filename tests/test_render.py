"""Presentation renderer tests: tag dispatch, styling, animation, HTML output."""

from __future__ import annotations

from storymark import render_html
from storymark.registry import DEFAULT_REGISTRY
from storymark.render import (
    ANIMATE_CLASS,
    EXPRESSIVE_CLASS,
    TOOLTIP_PLACEHOLDER,
    ElementNode,
    TextNode,
    render_presentation,
    render_preview,
    render_viewer,
    to_html,
)
from storymark.resolver import StyleResolver
from tests.conftest import all_keys, plain_text, style_of

# ---------------------------------------------------------------------------
# Tag dispatch
# ---------------------------------------------------------------------------


class TestDispatch:
    def test_plain_text(self) -> None:
        assert render_preview("hello") == [TextNode("0", "hello")]

    def test_bold(self) -> None:
        assert render_preview("[b]x[/b]") == [
            ElementNode("0", "strong", children=(TextNode("0.0", "x"),))
        ]

    def test_emphasis_tags(self) -> None:
        nodes = render_preview("[i]a[/i][u]b[/u][s]c[/s]")
        assert [n.tag for n in nodes if isinstance(n, ElementNode)] == ["em", "u", "s"]

    def test_code(self) -> None:
        (node,) = render_preview("[code]x = 1[/code]")
        assert isinstance(node, ElementNode)
        assert node.tag == "code"
        assert node.classes == ("sm-inline-code",)

    def test_style(self) -> None:
        (node,) = render_preview('[style color="red"]x[/style]')
        assert isinstance(node, ElementNode)
        assert node.tag == "span"
        assert node.classes == (EXPRESSIVE_CLASS,)
        assert node.style == (("display", "inline-block"), ("color", "var(--color-red)"))

    def test_empty_style_still_spans(self) -> None:
        (node,) = render_preview("[style]x[/style]")
        assert style_of(node) == {"display": "inline-block"}

    def test_expressive(self) -> None:
        (node,) = render_preview("[expressive:sad]x[/expressive]")
        style = style_of(node)
        assert style["font-family"] == "var(--font-body)"
        assert style["font-variation-settings"] == '"wght" 300'

    def test_expressive_unknown_is_normal(self) -> None:
        (node,) = render_preview("[expressive:bogus]x[/expressive]")
        assert style_of(node) == {"display": "inline-block", "font-family": "var(--font-body)"}

    def test_expressive_without_value(self) -> None:
        (node,) = render_preview("[expressive]x[/expressive]")
        assert style_of(node)["font-family"] == "var(--font-body)"

    def test_legacy_size(self) -> None:
        (node,) = render_preview("[size:giant]x[/size]")
        assert isinstance(node, ElementNode)
        assert node.classes == ("sm-size",)
        assert node.style == (("font-size", "1.8em"),)

    def test_default_size_unwraps(self) -> None:
        assert render_preview("[size:regular]x[/size]") == [TextNode("0.0", "x")]

    def test_unknown_size_unwraps(self) -> None:
        assert render_preview("[size:huge]x[/size]") == [TextNode("0.0", "x")]


class TestInteractive:
    def test_tooltip(self) -> None:
        (node,) = render_preview("[interactive:A dog]dog[/interactive]")
        assert isinstance(node, ElementNode)
        assert node.classes == ("sm-interactive",)
        assert node.attrs == (("data-tooltip", "A dog"), ("tabindex", "0"))

    def test_missing_tooltip_uses_placeholder(self) -> None:
        (node,) = render_preview("[interactive]dog[/interactive]")
        assert isinstance(node, ElementNode)
        assert dict(node.attrs)["data-tooltip"] == TOOLTIP_PLACEHOLDER

    def test_blank_tooltip_uses_placeholder(self) -> None:
        (node,) = render_preview("[interactive:  ]dog[/interactive]")
        assert isinstance(node, ElementNode)
        assert dict(node.attrs)["data-tooltip"] == TOOLTIP_PLACEHOLDER


class TestDegradation:
    def test_unmatched_is_text(self) -> None:
        assert render_preview('[style color="red"]text') == [
            TextNode("0", '[style color="red"]text')
        ]

    def test_unknown_tag_passthrough(self) -> None:
        assert render_preview("[note]hi[/note]") == [
            TextNode("0.open", "[note]"),
            TextNode("0.0", "hi"),
            TextNode("0.close", "[/note]"),
        ]

    def test_unknown_tag_keeps_inner_formatting(self) -> None:
        source = "[note]a [b]b[/b][/note]"
        nodes = render_preview(source)
        assert plain_text(nodes) == "[note]a b[/note]"
        assert any(isinstance(n, ElementNode) and n.tag == "strong" for n in nodes)


# ---------------------------------------------------------------------------
# Nesting and keys
# ---------------------------------------------------------------------------


class TestNesting:
    def test_nested_styles(self) -> None:
        (outer,) = render_preview('[style color="red"][style size="giant"]text[/style][/style]')
        assert isinstance(outer, ElementNode)
        assert style_of(outer)["color"] == "var(--color-red)"
        (inner,) = outer.children
        assert style_of(inner)["font-size"] == "1.8em"
        assert "color" not in style_of(inner)
        assert plain_text([outer]) == "text"

    def test_siblings(self) -> None:
        nodes = render_preview('[style color="red"]Red[/style] [style color="blue"]Blue[/style]')
        assert len(nodes) == 3
        assert nodes[1] == TextNode("1", " ")

    def test_keys_are_unique(self) -> None:
        source = (
            "a [b]b [i]c[/i][/b] [note]d [u]e[/u][/note] "
            "[size:regular]f [s]g[/s][/size] [expressive:happy]h[/expressive]"
        )
        keys = all_keys(render_preview(source))
        assert len(keys) == len(set(keys))

    def test_child_keys_extend_parent(self) -> None:
        (node,) = render_preview("[b]a[i]b[/i][/b]")
        assert isinstance(node, ElementNode)
        assert [c.key for c in node.children] == ["0.0", "0.1"]

    def test_nesting_beyond_recursion_limit(self) -> None:
        depth = 1000
        html = render_html("[b]" * depth + "x" + "[/b]" * depth)
        assert html == "<strong>" * depth + "x" + "</strong>" * depth

    def test_deep_keys(self) -> None:
        depth = 1000
        nodes = render_preview("[i]" * depth + "x" + "[/i]" * depth)
        node = nodes[0]
        for _ in range(depth):
            assert isinstance(node, ElementNode)
            node = node.children[0]
        assert node == TextNode(".".join(["0"] * (depth + 1)), "x")


# ---------------------------------------------------------------------------
# Animation gating
# ---------------------------------------------------------------------------


class TestAnimation:
    def test_preview_is_static(self) -> None:
        (node,) = render_preview("[expressive:happy]x[/expressive]")
        assert isinstance(node, ElementNode)
        assert ANIMATE_CLASS not in node.classes
        assert not any(prop.startswith("animation") for prop, _ in node.style)

    def test_viewer_animates(self) -> None:
        (node,) = render_viewer("[expressive:happy]x[/expressive]")
        assert isinstance(node, ElementNode)
        assert node.classes == (EXPRESSIVE_CLASS, ANIMATE_CLASS)
        style = style_of(node)
        assert style["animation-name"] == "bounce"
        assert style["animation-iteration-count"] == "infinite"

    def test_modes_differ_only_in_animation(self) -> None:
        (static,) = render_preview("[expressive:happy]x[/expressive]")
        (moving,) = render_viewer("[expressive:happy]x[/expressive]")
        assert isinstance(static, ElementNode) and isinstance(moving, ElementNode)
        moving_static = [(p, v) for p, v in moving.style if not p.startswith("animation")]
        assert tuple(moving_static) == static.style
        assert static.children == moving.children

    def test_viewer_without_motion_has_no_trigger(self) -> None:
        (node,) = render_viewer('[style color="red"]x[/style]')
        assert isinstance(node, ElementNode)
        assert node.classes == (EXPRESSIVE_CLASS,)

    def test_atomic_motion(self) -> None:
        (node,) = render_presentation('[style motion="shake"]x[/style]', True)
        assert style_of(node)["animation-duration"] == "var(--duration-fast)"


class TestCustomRegistry:
    def test_resolver_is_used(self) -> None:
        reg = DEFAULT_REGISTRY.with_overrides({"colors": {"teal": "#008080"}})
        (node,) = render_preview('[style color="teal"]x[/style]', resolver=StyleResolver(reg))
        assert style_of(node)["color"] == "#008080"


# ---------------------------------------------------------------------------
# HTML serialization
# ---------------------------------------------------------------------------


class TestHtml:
    def test_escapes_text(self) -> None:
        assert to_html(render_preview("[b]x < y & z[/b]")) == "<strong>x &lt; y &amp; z</strong>"

    def test_non_ascii_as_entities(self) -> None:
        assert to_html(render_preview("café")) == "caf&#xE9;"

    def test_styled_span(self) -> None:
        assert to_html(render_preview('[style color="red"]x[/style]')) == (
            '<span class="sm-expressive" style="display: inline-block; '
            'color: var(--color-red)">x</span>'
        )

    def test_interactive_span(self) -> None:
        assert to_html(render_preview("[interactive:A dog]dog[/interactive]")) == (
            '<span class="sm-interactive" data-tooltip="A dog" tabindex="0">dog</span>'
        )

    def test_quotes_in_style_escaped(self) -> None:
        html = to_html(render_preview("[expressive:happy]x[/expressive]"))
        assert "&quot;wght&quot; 600" in html

    def test_render_html_entry_point(self) -> None:
        assert render_html("[b]x[/b]") == "<strong>x</strong>"

    def test_render_html_animate(self) -> None:
        assert "sm-animate" in render_html("[expressive:happy]x[/expressive]", animate=True)
        assert "sm-animate" not in render_html("[expressive:happy]x[/expressive]")
