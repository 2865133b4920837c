"""Presentation renderer: DSL text to a read-only render tree (and HTML)."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from itertools import chain

from storymark.ast import Document, Element, Node, Text, children_of
from storymark.escape import escape_html, format_attrs
from storymark.parser import parse, parse_attributes, split_legacy_value
from storymark.registry import DEFAULT_EMOTION
from storymark.resolver import ResolvedStyle, StyleAttributes, StyleResolver, css_text
from storymark.tokens import TagKind
from storymark.walk import fold

TOOLTIP_PLACEHOLDER = "No definition available."

EXPRESSIVE_CLASS = "sm-expressive"
ANIMATE_CLASS = "sm-animate"
SIZE_CLASS = "sm-size"
CODE_CLASS = "sm-inline-code"
INTERACTIVE_CLASS = "sm-interactive"


@dataclass(frozen=True, slots=True)
class TextNode:
    key: str
    value: str


@dataclass(frozen=True, slots=True)
class ElementNode:
    key: str
    tag: str
    classes: tuple[str, ...] = ()
    style: tuple[tuple[str, str], ...] = ()
    attrs: tuple[tuple[str, str], ...] = ()
    children: tuple[RenderNode, ...] = ()


RenderNode = TextNode | ElementNode


class Renderer:
    """Render a parse tree into presentation nodes.

    Keys are dotted child-index paths ("0", "0.2", ...), unique within one
    render. With ``animate`` false, motion is resolved but not played.
    """

    def __init__(self, resolver: StyleResolver | None = None, *, animate: bool = False) -> None:
        self._resolver = resolver or StyleResolver()
        self._animate = animate

    def render(self, doc: Document) -> list[RenderNode]:
        rendered = fold(doc.children, children_of, self._render_node)
        return list(chain.from_iterable(rendered))

    def _render_node(
        self, node: Node, path: tuple[int, ...], results: list[list[RenderNode]]
    ) -> list[RenderNode]:
        key = ".".join(map(str, path))
        if isinstance(node, Text):
            return [TextNode(key, node.value)]
        return self._render_element(node, key, tuple(chain.from_iterable(results)))

    def _render_element(
        self, el: Element, key: str, children: tuple[RenderNode, ...]
    ) -> list[RenderNode]:
        match el.kind:
            case TagKind.BOLD:
                return [ElementNode(key, "strong", children=children)]
            case TagKind.ITALIC:
                return [ElementNode(key, "em", children=children)]
            case TagKind.UNDERLINE:
                return [ElementNode(key, "u", children=children)]
            case TagKind.STRIKE:
                return [ElementNode(key, "s", children=children)]
            case TagKind.CODE:
                return [ElementNode(key, "code", classes=(CODE_CLASS,), children=children)]
            case TagKind.STYLE:
                attrs = StyleAttributes.from_pairs(parse_attributes(el.attrs))
                resolved = self._resolver.resolve_attributes(attrs)
                return [self._styled(key, resolved, children)]
            case TagKind.EXPRESSIVE:
                emotion, size = split_legacy_value(el.value)
                resolved = self._resolver.resolve_emotion(emotion or DEFAULT_EMOTION, size)
                return [self._styled(key, resolved, children)]
            case TagKind.SIZE:
                size, _ = split_legacy_value(el.value)
                font_size = self._resolver.font_size(size)
                if font_size is None:
                    return list(children)
                return [
                    ElementNode(
                        key,
                        "span",
                        classes=(SIZE_CLASS,),
                        style=(("font-size", font_size),),
                        children=children,
                    )
                ]
            case TagKind.INTERACTIVE:
                tooltip = (el.value or "").strip() or TOOLTIP_PLACEHOLDER
                return [
                    ElementNode(
                        key,
                        "span",
                        classes=(INTERACTIVE_CLASS,),
                        attrs=(("data-tooltip", tooltip), ("tabindex", "0")),
                        children=children,
                    )
                ]
            case TagKind.UNKNOWN:
                return [
                    TextNode(f"{key}.open", el.open_raw),
                    *children,
                    TextNode(f"{key}.close", el.close_raw),
                ]

    def _styled(
        self, key: str, resolved: ResolvedStyle, children: tuple[RenderNode, ...]
    ) -> ElementNode:
        animated = self._animate and resolved.animation is not None
        classes = (EXPRESSIVE_CLASS, ANIMATE_CLASS) if animated else (EXPRESSIVE_CLASS,)
        style = (("display", "inline-block"), *resolved.declarations(animate=self._animate))
        return ElementNode(key, "span", classes=classes, style=style, children=children)


# ---------------------------------------------------------------------------
# Entry points
# ---------------------------------------------------------------------------


def render_presentation(
    text: str, animate: bool = False, *, resolver: StyleResolver | None = None
) -> list[RenderNode]:
    """Parse DSL text and render it to presentation nodes."""
    return Renderer(resolver, animate=animate).render(parse(text))


def render_preview(text: str, *, resolver: StyleResolver | None = None) -> list[RenderNode]:
    """Editor preview: styles shown statically."""
    return render_presentation(text, False, resolver=resolver)


def render_viewer(text: str, *, resolver: StyleResolver | None = None) -> list[RenderNode]:
    """Reading viewer: motion styles get the animation trigger."""
    return render_presentation(text, True, resolver=resolver)


# ---------------------------------------------------------------------------
# HTML serialization
# ---------------------------------------------------------------------------


def to_html(nodes: Sequence[RenderNode]) -> str:
    """Serialize presentation nodes to an HTML fragment."""
    return "".join(fold(nodes, _render_children, _node_html))


def _render_children(node: RenderNode) -> tuple[RenderNode, ...]:
    return node.children if isinstance(node, ElementNode) else ()


def _node_html(node: RenderNode, path: tuple[int, ...], inner_parts: list[str]) -> str:
    if isinstance(node, TextNode):
        return escape_html(node.value, ascii_only=True)

    attrs: list[tuple[str, str]] = []
    if node.classes:
        attrs.append(("class", " ".join(node.classes)))
    if node.style:
        attrs.append(("style", css_text(list(node.style))))
    attrs.extend(node.attrs)
    inner = "".join(inner_parts)
    return f"<{node.tag}{format_attrs(attrs, ascii_only=True)}>{inner}</{node.tag}>"
