"""Editable-surface marks: how each style dimension appears in editor markup.

The editing surface stores inline formatting as marks on text. Each mark
serializes to ``data-*`` attributes on a ``<span>``; these definitions describe that
mapping in both directions plus the inline CSS the surface shows while editing.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass

from storymark.registry import DEFAULT_SIZE
from storymark.resolver import StyleAttributes, StyleResolver


@dataclass(frozen=True, slots=True)
class StyleMark:
    """A single atomic style dimension (font, color, ...)."""

    name: str  # mark name on the editing surface
    key: str  # attribute key on the [style] tag
    default: str | None = None  # value that is never written out

    @property
    def data_attr(self) -> str:
        return f"data-{self.key}"

    def parse_html(self, attrs: Mapping[str, object]) -> str | None:
        value = attrs.get(self.data_attr)
        if not isinstance(value, str) or not value or value == self.default:
            return None
        return value

    def render_attrs(self, value: str | None) -> dict[str, str]:
        if not value or value == self.default:
            return {}
        return {self.data_attr: value}

    def render_css(self, value: str, resolver: StyleResolver) -> list[tuple[str, str]]:
        resolved = resolver.resolve_attributes(StyleAttributes(**{self.key: value}))
        return resolved.declarations(animate=True)


FONT_MARK = StyleMark("fontMark", "font")
COLOR_MARK = StyleMark("textColor", "color")
BGCOLOR_MARK = StyleMark("textBgColor", "bgcolor")
EFFECT_MARK = StyleMark("effectMark", "effect")
MOTION_MARK = StyleMark("motionMark", "motion")
SIZE_MARK = StyleMark("textSize", "size", default=DEFAULT_SIZE)

STYLE_MARKS: tuple[StyleMark, ...] = (
    FONT_MARK,
    COLOR_MARK,
    BGCOLOR_MARK,
    EFFECT_MARK,
    MOTION_MARK,
    SIZE_MARK,
)
MARKS_BY_KEY: dict[str, StyleMark] = {m.key: m for m in STYLE_MARKS}
MARKS_BY_ATTR: dict[str, StyleMark] = {m.data_attr: m for m in STYLE_MARKS}


class ExpressiveMark:
    """Legacy emotion mark: ``data-expressive`` + ``data-style`` (+ ``data-size``)."""

    name = "expressive"
    flag = "data-expressive"

    def matches(self, attrs: Mapping[str, object]) -> bool:
        return self.flag in attrs

    def parse_html(self, attrs: Mapping[str, object]) -> tuple[str, str | None] | None:
        style = attrs.get("data-style")
        if not isinstance(style, str) or not style:
            return None
        return style, SIZE_MARK.parse_html(attrs)

    def render_attrs(self, style: str, size: str | None = None) -> dict[str, str]:
        return {self.flag: "true", "data-style": style, **SIZE_MARK.render_attrs(size)}

    def render_css(
        self, style: str, size: str | None, resolver: StyleResolver
    ) -> list[tuple[str, str]]:
        return resolver.resolve_emotion(style, size).declarations(animate=True)


class InteractiveMark:
    """Tooltip annotation: ``data-interactive`` + ``data-tooltip``."""

    name = "interactive"
    flag = "data-interactive"

    def matches(self, attrs: Mapping[str, object]) -> bool:
        return self.flag in attrs

    def parse_html(self, attrs: Mapping[str, object]) -> str:
        tooltip = attrs.get("data-tooltip")
        return tooltip if isinstance(tooltip, str) else ""

    def render_attrs(self, tooltip: str | None) -> dict[str, str]:
        return {self.flag: "true", "data-tooltip": tooltip or ""}


EXPRESSIVE_MARK = ExpressiveMark()
INTERACTIVE_MARK = InteractiveMark()
