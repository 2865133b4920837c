"""Authoring diagnostics for story markup.

Nothing reported here changes how text renders; it explains why a tag came out
as literal text or why a style had no visible effect.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence

from storymark.ast import Document, Element, Node, children_of
from storymark.errors import Diagnostic, Severity
from storymark.parser import Parser, parse_attributes, split_legacy_value
from storymark.registry import DEFAULT_REGISTRY, StyleRegistry
from storymark.resolver import DIMENSIONS
from storymark.tokens import Position, Span, TagKind
from storymark.walk import preorder


def lint(
    source: str,
    filename: str = "input.story",
    registry: StyleRegistry = DEFAULT_REGISTRY,
) -> list[Diagnostic]:
    """Parse ``source`` and return its diagnostics in source order."""
    parser = Parser(source, filename)
    doc = parser.parse()
    return sorted(
        [*parser.diagnostics, *check_document(doc, registry)],
        key=lambda d: d.span.start.offset,
    )


def check_document(doc: Document, registry: StyleRegistry = DEFAULT_REGISTRY) -> list[Diagnostic]:
    """Diagnostics for tags that parsed but will not render as written."""
    diagnostics: list[Diagnostic] = []
    _Checker(registry, diagnostics).check(doc.children)
    return diagnostics


class _Checker:
    def __init__(self, registry: StyleRegistry, out: list[Diagnostic]) -> None:
        self._registry = registry
        self._out = out
        self._tables: dict[str, Mapping[str, object]] = {
            "font": registry.fonts,
            "color": registry.colors,
            "bgcolor": registry.bgcolors,
            "effect": registry.effects,
            "motion": registry.motions,
            "size": registry.sizes,
        }

    def check(self, nodes: Sequence[Node]) -> None:
        for node, _ in preorder(nodes, children_of):
            if isinstance(node, Element):
                self._check_element(node)

    def _check_element(self, el: Element) -> None:
        match el.kind:
            case TagKind.UNKNOWN:
                self._report(el, f"unknown tag '{el.name}' is shown as text", "unknown-tag")
            case TagKind.STYLE:
                self._check_style(el)
            case TagKind.EXPRESSIVE:
                self._check_expressive(el)
            case TagKind.SIZE:
                size, _ = split_legacy_value(el.value)
                if size and size not in self._registry.sizes:
                    self._report(el, f"unknown size '{size}'", "unknown-value")
            case TagKind.INTERACTIVE:
                if not (el.value or "").strip():
                    self._report(
                        el,
                        "interactive tag has no tooltip text; a placeholder is shown",
                        "empty-tooltip",
                        Severity.HINT,
                    )
            case _:
                pass

    def _check_style(self, el: Element) -> None:
        pairs = parse_attributes(el.attrs)
        if el.attrs.strip() and not pairs:
            self._report(el, "no key=\"value\" attributes could be read", "malformed-attributes")
        for key, value in pairs:
            if key not in DIMENSIONS:
                self._report(el, f"unknown style attribute '{key}' is ignored", "unknown-attribute")
            elif value not in self._tables[key]:
                self._report(el, f"unknown {key} '{value}' is ignored", "unknown-value")

    def _check_expressive(self, el: Element) -> None:
        emotion, size = split_legacy_value(el.value)
        registry = self._registry
        if not emotion:
            self._report(el, "expressive tag has no emotion; 'normal' is used", "unknown-value")
        elif registry.resolve_emotion_id(emotion) not in registry.emotions:
            self._report(el, f"unknown emotion '{emotion}'; 'normal' is used", "unknown-value")
        if size and size not in registry.sizes:
            self._report(el, f"unknown size '{size}'", "unknown-value")

    def _report(
        self, el: Element, message: str, code: str, severity: Severity = Severity.INFO
    ) -> None:
        self._out.append(Diagnostic(message, _open_tag_span(el), severity, code))


def _open_tag_span(el: Element) -> Span:
    start = el.span.start
    if "\n" in el.open_raw:
        return el.span
    length = len(el.open_raw)
    return Span(start, Position(start.line, start.column + length, start.offset + length))
