"""--debug parse-tree dump to stderr."""

from __future__ import annotations

import sys
from typing import TextIO

from storymark.ast import Document, Element, Text, children_of
from storymark.walk import preorder


def dump_tree(doc: Document, *, file: TextIO | None = None) -> None:
    """Print a human-readable parse tree to *file* (stderr by default)."""
    file = file or sys.stderr
    file.write("Document\n")
    for node, depth in preorder(doc.children, children_of):
        indent = "  " * (depth + 1)
        if isinstance(node, Text):
            file.write(f"{indent}Text({node.value!r})\n")
        else:
            file.write(f"{indent}{_describe(node)}\n")


def _describe(el: Element) -> str:
    pos = el.span.start
    detail = ""
    if el.value is not None:
        detail = f" value={el.value!r}"
    elif el.attrs:
        detail = f" attrs={el.attrs.strip()!r}"
    kind = el.kind.name.lower()
    return f"Element [{el.name}] ({kind}){detail} @{pos.line}:{pos.column}"
