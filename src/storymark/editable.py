"""Conversion between story markup and the editing surface's HTML.

The editing surface is only seen through its serialization: paragraphs as
``<p>``, line breaks as ``<br>``, emphasis as ``<strong>``/``<em>``/..., and
style marks as ``<span data-*>`` elements (see :mod:`storymark.marks`).
"""

from __future__ import annotations

import re
from collections.abc import Mapping, Sequence

from bs4 import BeautifulSoup
from bs4.element import (
    Comment,
    Declaration,
    Doctype,
    NavigableString,
    PageElement,
    ProcessingInstruction,
    Tag,
)

from storymark.ast import Element, Node, Text, children_of
from storymark.escape import escape_html, format_attrs
from storymark.marks import (
    EXPRESSIVE_MARK,
    INTERACTIVE_MARK,
    MARKS_BY_ATTR,
    MARKS_BY_KEY,
    SIZE_MARK,
)
from storymark.parser import parse, parse_attributes, split_legacy_value
from storymark.resolver import StyleResolver, css_text
from storymark.tokens import TagKind
from storymark.walk import fold

_PARAGRAPH_BREAK = re.compile(r"\n{2,}")
_EXCESS_NEWLINES = re.compile(r"\n{3,}")

_EMPHASIS_HTML: dict[TagKind, str] = {
    TagKind.BOLD: "strong",
    TagKind.ITALIC: "em",
    TagKind.UNDERLINE: "u",
    TagKind.STRIKE: "s",
    TagKind.CODE: "code",
}

_EMPHASIS_DSL: dict[str, str] = {
    "strong": "b",
    "b": "b",
    "em": "i",
    "i": "i",
    "u": "u",
    "s": "s",
    "strike": "s",
    "del": "s",
    "code": "code",
}

_BLOCKS = frozenset({"p", "div"})
_SKIPPED = frozenset({"script", "style", "template"})
_NON_TEXT = (Comment, Declaration, Doctype, ProcessingInstruction)

ParagraphItem = str | Element


# ---------------------------------------------------------------------------
# Paragraph grouping
# ---------------------------------------------------------------------------


def _paragraphs(nodes: Sequence[Node]) -> list[list[ParagraphItem]]:
    """Group top-level nodes into paragraphs split at blank lines.

    Only top-level text can start a new paragraph; a blank line inside an
    element stays inside it. Paragraphs holding only whitespace are dropped.
    """
    paragraphs: list[list[ParagraphItem]] = [[]]
    for node in nodes:
        if isinstance(node, Text):
            chunks = _PARAGRAPH_BREAK.split(node.value)
            paragraphs[-1].append(chunks[0])
            for chunk in chunks[1:]:
                paragraphs.append([chunk])
        else:
            paragraphs[-1].append(node)
    return [p for p in paragraphs if not _is_blank(p)]


def _is_blank(items: list[ParagraphItem]) -> bool:
    return all(isinstance(item, str) and not item.strip() for item in items)


# ---------------------------------------------------------------------------
# DSL -> editable markup
# ---------------------------------------------------------------------------


class _EditableWriter:
    def __init__(self, resolver: StyleResolver | None) -> None:
        self._resolver = resolver

    def paragraph(self, items: list[ParagraphItem]) -> str:
        parts = [self._text(i) if isinstance(i, str) else self._tree(i) for i in items]
        return f"<p>{''.join(parts)}</p>"

    def _tree(self, el: Element) -> str:
        return fold([el], children_of, self._node)[0]

    def _node(self, node: Node, path: tuple[int, ...], inner_parts: list[str]) -> str:
        if isinstance(node, Text):
            return self._text(node.value)
        return self._element(node, "".join(inner_parts))

    def _text(self, value: str) -> str:
        return escape_html(value).replace("\n", "<br>")

    def _element(self, el: Element, inner: str) -> str:
        resolver = self._resolver

        match el.kind:
            case TagKind.BOLD | TagKind.ITALIC | TagKind.UNDERLINE | TagKind.STRIKE | TagKind.CODE:
                tag = _EMPHASIS_HTML[el.kind]
                return f"<{tag}>{inner}</{tag}>"
            case TagKind.STYLE:
                attrs: dict[str, str] = {}
                css: list[tuple[str, str]] = []
                for key, value in parse_attributes(el.attrs):
                    mark = MARKS_BY_KEY.get(key)
                    if mark is None:
                        continue
                    rendered = mark.render_attrs(value)
                    attrs.update(rendered)
                    if rendered and resolver is not None:
                        css.extend(mark.render_css(value, resolver))
                return self._span(attrs, css, inner)
            case TagKind.EXPRESSIVE:
                emotion, size = split_legacy_value(el.value)
                if not emotion:
                    return inner
                css = EXPRESSIVE_MARK.render_css(emotion, size, resolver) if resolver else []
                return self._span(EXPRESSIVE_MARK.render_attrs(emotion, size), css, inner)
            case TagKind.SIZE:
                size, _ = split_legacy_value(el.value)
                attrs = SIZE_MARK.render_attrs(size)
                css = SIZE_MARK.render_css(size, resolver) if attrs and resolver else []
                return self._span(attrs, css, inner)
            case TagKind.INTERACTIVE:
                return self._span(INTERACTIVE_MARK.render_attrs(el.value), [], inner)
            case TagKind.UNKNOWN:
                return f"{self._text(el.open_raw)}{inner}{self._text(el.close_raw)}"

    def _span(self, attrs: dict[str, str], css: list[tuple[str, str]], inner: str) -> str:
        if not attrs:
            return inner
        if css:
            attrs = {**attrs, "style": css_text(css)}
        return f"<span{format_attrs(attrs)}>{inner}</span>"


def dsl_to_editable(text: str, *, resolver: StyleResolver | None = None) -> str:
    """Convert DSL text into the editing surface's HTML.

    With a resolver, style spans also carry the inline CSS the surface shows
    while editing; without one only the ``data-*`` markers are written.
    """
    writer = _EditableWriter(resolver)
    return "".join(writer.paragraph(items) for items in _paragraphs(parse(text).children))


# ---------------------------------------------------------------------------
# Editable markup -> DSL
# ---------------------------------------------------------------------------


def editable_to_dsl(markup: str) -> str:
    """Convert the editing surface's HTML back into canonical DSL text."""
    soup = BeautifulSoup(markup, "html.parser")
    dsl = "".join(fold(list(soup.children), _html_children, _convert))
    return _EXCESS_NEWLINES.sub("\n\n", dsl).strip()


def _html_children(node: PageElement) -> list[PageElement]:
    if not isinstance(node, Tag) or node.name in _SKIPPED or node.name == "br":
        return []
    return list(node.children)


def _convert(node: PageElement, path: tuple[int, ...], inner_parts: list[str]) -> str:
    # Children are converted before this element's own markers are applied
    if isinstance(node, _NON_TEXT):
        return ""
    if isinstance(node, NavigableString):
        return str(node)
    if not isinstance(node, Tag) or node.name in _SKIPPED:
        return ""
    if node.name == "br":
        return "\n"

    inner = "".join(inner_parts)
    if node.name in _BLOCKS:
        return inner + "\n\n"

    inner = _wrap_marks(node.attrs, inner)
    dsl_tag = _EMPHASIS_DSL.get(node.name)
    if dsl_tag is not None:
        return f"[{dsl_tag}]{inner}[/{dsl_tag}]"
    return inner


def _wrap_marks(attrs: Mapping[str, object], inner: str) -> str:
    """Wrap converted content in the tags for a span's markers.

    Style markers go innermost, then the tooltip, then the emotion. A
    ``data-size`` that belongs to an emotion is not repeated as a style.
    """
    expressive = EXPRESSIVE_MARK.parse_html(attrs) if EXPRESSIVE_MARK.matches(attrs) else None

    pairs: list[str] = []
    for name in attrs:
        mark = MARKS_BY_ATTR.get(name)
        if mark is None or (mark is SIZE_MARK and expressive is not None):
            continue
        value = mark.parse_html(attrs)
        if value is not None:
            pairs.append(f'{mark.key}="{_attr_value(value)}"')
    if pairs:
        inner = f"[style {' '.join(pairs)}]{inner}[/style]"

    if INTERACTIVE_MARK.matches(attrs):
        tooltip = _tag_value(INTERACTIVE_MARK.parse_html(attrs))
        opener = f"[interactive:{tooltip}]" if tooltip else "[interactive]"
        inner = f"{opener}{inner}[/interactive]"

    if expressive is not None:
        style, size = expressive
        value = f"{style}:{size}" if size else style
        inner = f"[expressive:{_tag_value(value)}]{inner}[/expressive]"

    return inner


def _tag_value(value: str) -> str:
    # A ']' would end the opening tag early
    return value.replace("]", "")


def _attr_value(value: str) -> str:
    return _tag_value(value).replace('"', "")


# ---------------------------------------------------------------------------
# Canonical DSL
# ---------------------------------------------------------------------------


def normalize(text: str) -> str:
    """Rewrite DSL text into the canonical form the serializer produces.

    Default sizes and unknown style keys are dropped, legacy ``[size:x]`` tags
    become ``[style size="x"]``, tag names are lower-cased, blank-line runs
    collapse to one, and surrounding whitespace is stripped.
    """
    paragraphs = [
        "".join(i if isinstance(i, str) else fold([i], children_of, _canonical)[0] for i in items)
        for items in _paragraphs(parse(text).children)
    ]
    return _EXCESS_NEWLINES.sub("\n\n", "\n\n".join(paragraphs)).strip()


def _canonical(node: Node, path: tuple[int, ...], inner_parts: list[str]) -> str:
    if isinstance(node, Text):
        return node.value
    el = node
    inner = "".join(inner_parts)

    match el.kind:
        case TagKind.BOLD | TagKind.ITALIC | TagKind.UNDERLINE | TagKind.STRIKE | TagKind.CODE:
            name = el.kind.value
            return f"[{name}]{inner}[/{name}]"
        case TagKind.STYLE:
            values: dict[str, str] = {}
            for key, value in parse_attributes(el.attrs):
                mark = MARKS_BY_KEY.get(key)
                if mark is not None and mark.render_attrs(value):
                    values[key] = value
            return _canonical_style(values, inner)
        case TagKind.EXPRESSIVE:
            emotion, size = split_legacy_value(el.value)
            if not emotion:
                return inner
            size = SIZE_MARK.render_attrs(size).get(SIZE_MARK.data_attr)
            value = f"{emotion}:{size}" if size else emotion
            return f"[expressive:{value}]{inner}[/expressive]"
        case TagKind.SIZE:
            size, _ = split_legacy_value(el.value)
            if not SIZE_MARK.render_attrs(size):
                return inner
            return _canonical_style({"size": size}, inner)
        case TagKind.INTERACTIVE:
            opener = f"[interactive:{el.value}]" if el.value else "[interactive]"
            return f"{opener}{inner}[/interactive]"
        case TagKind.UNKNOWN:
            return f"{el.open_raw}{inner}{el.close_raw}"


def _canonical_style(values: dict[str, str], inner: str) -> str:
    if not values:
        return inner
    attrs = " ".join(f'{key}="{value}"' for key, value in values.items())
    return f"[style {attrs}]{inner}[/style]"
