"""Shared test fixtures and helpers."""

from __future__ import annotations

import pytest

from storymark.ast import Document, Element, Node, Text
from storymark.parser import parse
from storymark.render import ElementNode, RenderNode, TextNode
from storymark.tokens import TagKind


@pytest.fixture
def parse_source():
    """Return a helper that parses source and returns a Document."""

    def _parse(source: str, filename: str = "test.story") -> Document:
        return parse(source, filename)

    return _parse


def assert_element(
    node: Node,
    name: str,
    kind: TagKind | None = None,
    num_children: int | None = None,
) -> Element:
    """Assert basic properties of an Element node and return it."""
    assert isinstance(node, Element), f"Expected Element, got {type(node).__name__}"
    assert node.name == name, f"Expected name '{name}', got '{node.name}'"
    if kind is not None:
        assert node.kind is kind, f"Expected kind {kind}, got {node.kind}"
    if num_children is not None:
        assert len(node.children) == num_children, (
            f"Expected {num_children} children, got {len(node.children)}"
        )
    return node


def assert_text(node: Node, value: str) -> None:
    assert isinstance(node, Text), f"Expected Text, got {type(node).__name__}"
    assert node.value == value, f"Expected {value!r}, got {node.value!r}"


def plain_text(nodes: list[RenderNode] | tuple[RenderNode, ...]) -> str:
    """Concatenate the text of a presentation tree in document order."""
    parts: list[str] = []
    for node in nodes:
        if isinstance(node, TextNode):
            parts.append(node.value)
        else:
            parts.append(plain_text(node.children))
    return "".join(parts)


def style_of(node: RenderNode) -> dict[str, str]:
    assert isinstance(node, ElementNode), f"Expected ElementNode, got {type(node).__name__}"
    return dict(node.style)


def all_keys(nodes: list[RenderNode] | tuple[RenderNode, ...]) -> list[str]:
    keys: list[str] = []
    for node in nodes:
        keys.append(node.key)
        if isinstance(node, ElementNode):
            keys.extend(all_keys(node.children))
    return keys
