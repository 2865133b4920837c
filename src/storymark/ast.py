"""Parse tree node types for story markup."""

from __future__ import annotations

from dataclasses import dataclass

from storymark.tokens import Span, TagKind


@dataclass(frozen=True, slots=True)
class Text:
    """Coalesced literal text, including the text of unmatched opening tags."""

    value: str
    span: Span


@dataclass(frozen=True, slots=True)
class Element:
    """A matched ``[name ...]...[/name]`` pair.

    Interpretation of ``attrs``/``value`` is left to the consumers; the tree
    only records what was written.
    """

    name: str
    kind: TagKind
    attrs: str
    value: str | None
    open_raw: str
    children: tuple[Text | Element, ...]
    span: Span

    @property
    def close_raw(self) -> str:
        return f"[/{self.name}]"


@dataclass(frozen=True, slots=True)
class Document:
    """Root node."""

    children: tuple[Text | Element, ...]
    span: Span


Node = Text | Element


def children_of(node: Node) -> tuple[Node, ...]:
    return node.children if isinstance(node, Element) else ()
