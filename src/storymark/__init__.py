"""Story markup: parse, convert, and render rich page text."""

from __future__ import annotations

from typing import TYPE_CHECKING

from storymark.parser import parse

if TYPE_CHECKING:
    from storymark.registry import StyleRegistry

__version__ = "0.1.0"

__all__ = ["__version__", "parse", "render_html"]


def render_html(
    text: str,
    *,
    animate: bool = False,
    registry: StyleRegistry | None = None,
) -> str:
    """Parse DSL text and render it to an HTML fragment."""
    from storymark.render import render_presentation, to_html
    from storymark.resolver import StyleResolver

    resolver = StyleResolver(registry) if registry is not None else None
    return to_html(render_presentation(text, animate, resolver=resolver))
