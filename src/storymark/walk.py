"""Tree walks with an explicit stack, so nesting depth is bounded only by memory."""

from __future__ import annotations

from collections.abc import Callable, Iterator, Sequence
from dataclasses import dataclass, field
from typing import Generic, TypeVar

T = TypeVar("T")
R = TypeVar("R")


@dataclass(slots=True)
class _Frame(Generic[T, R]):
    owner: T | None
    path: tuple[int, ...]
    items: Sequence[T]
    index: int = 0
    results: list[R] = field(default_factory=list)


def fold(
    roots: Sequence[T],
    children: Callable[[T], Sequence[T]],
    build: Callable[[T, tuple[int, ...], list[R]], R],
) -> list[R]:
    """Bottom-up fold over a forest.

    ``build(node, path, child_results)`` is called once per node after all of
    its children, with ``path`` the node's child-index path from the roots.
    Returns the results for ``roots`` in order.
    """
    top: _Frame[T, R] = _Frame(None, (), roots)
    stack = [top]
    while stack:
        frame = stack[-1]
        if frame.index == len(frame.items):
            stack.pop()
            if stack:
                stack[-1].results.append(build(frame.owner, frame.path, frame.results))  # type: ignore[arg-type]
            continue
        node = frame.items[frame.index]
        path = (*frame.path, frame.index)
        frame.index += 1
        kids = children(node)
        if kids:
            stack.append(_Frame(node, path, kids))
        else:
            frame.results.append(build(node, path, []))
    return top.results


def preorder(roots: Sequence[T], children: Callable[[T], Sequence[T]]) -> Iterator[tuple[T, int]]:
    """Yield ``(node, depth)`` in document order."""
    stack = [(node, 0) for node in reversed(roots)]
    while stack:
        node, depth = stack.pop()
        yield node, depth
        stack.extend((child, depth + 1) for child in reversed(children(node)))
