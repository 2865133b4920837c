"""Story markup parser: converts DSL text into a parse tree."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field

from storymark.ast import Document, Element, Node, Text
from storymark.errors import Diagnostic, Severity
from storymark.lexer import Lexer
from storymark.tokens import OpenTag

logger = logging.getLogger(__name__)

_ATTR_RE = re.compile(r'([A-Za-z_][\w-]*)\s*=\s*"([^"]*)"')


@dataclass(slots=True)
class _Level:
    """An element whose content is being scanned."""

    tag: OpenTag | None
    end: int  # offset of the closing tag, or end of input
    pos: int
    text_start: int
    nodes: list[Node] = field(default_factory=list)


class Parser:
    """Stack-based parser over DSL source text.

    Each tag level is a single forward scan: the lexer pairs every opening tag
    with its close up front, the enclosed range is scanned as a new level, and
    scanning resumes after the close. Nesting depth is not limited by the
    interpreter stack.
    """

    def __init__(self, source: str, filename: str = "input.story") -> None:
        self._source = source
        self._filename = filename
        self._lexer = Lexer(source)
        self.diagnostics: list[Diagnostic] = []

    def parse(self) -> Document:
        end = len(self._source)
        children = self._parse_range(0, end)
        if not children:
            children = [Text("", self._lexer.span(0, 0))]
        return Document(tuple(children), self._lexer.span(0, end))

    def _parse_range(self, start: int, end: int) -> list[Node]:
        root = _Level(None, end, start, start)
        stack = [root]

        while stack:
            level = stack[-1]
            tag = self._lexer.next_open_tag(level.pos, level.end)

            if tag is None:
                if level.text_start < level.end:
                    level.nodes.append(self._text(level.text_start, level.end))
                stack.pop()
                if level.tag is not None:
                    self._close_level(level, stack[-1])
                continue

            close_at = self._lexer.find_close(tag, level.end)
            if close_at is None:
                self._unmatched(tag.start, tag.end)
                # Opening tag stays part of the surrounding text run
                level.pos = tag.end
                continue

            if level.text_start < tag.start:
                level.nodes.append(self._text(level.text_start, tag.start))
            stack.append(_Level(tag, close_at, tag.end, tag.end))

        return root.nodes

    def _close_level(self, level: _Level, parent: _Level) -> None:
        tag = level.tag
        assert tag is not None
        close_end = level.end + len(tag.close)
        parent.nodes.append(
            Element(
                name=tag.name,
                kind=tag.kind,
                attrs=tag.attrs,
                value=tag.value,
                open_raw=self._source[tag.start : tag.end],
                children=tuple(level.nodes),
                span=self._lexer.span(tag.start, close_end),
            )
        )
        parent.pos = parent.text_start = close_end

    def _text(self, start: int, end: int) -> Text:
        return Text(self._source[start:end], self._lexer.span(start, end))

    def _unmatched(self, start: int, end: int) -> None:
        span = self._lexer.span(start, end)
        raw = self._source[start:end]
        logger.info(
            "%s:%d:%d: no matching close tag for %s",
            self._filename,
            span.start.line,
            span.start.column,
            raw,
        )
        self.diagnostics.append(
            Diagnostic(
                f"no matching close tag for '{raw}'; rendered as text",
                span,
                Severity.WARNING,
                "unmatched-tag",
            )
        )


def parse(source: str, filename: str = "input.story") -> Document:
    """Convenience function: parse DSL text and return the Document."""
    return Parser(source, filename).parse()


def parse_attributes(raw: str) -> tuple[tuple[str, str], ...]:
    """Extract ``key="value"`` pairs from a style tag's attribute string.

    The scan is tolerant: anything that is not a well-formed pair is skipped,
    so a malformed string simply yields fewer (or no) pairs.
    """
    return tuple((m.group(1), m.group(2)) for m in _ATTR_RE.finditer(raw))


def split_legacy_value(value: str | None) -> tuple[str, str | None]:
    """Split a legacy ``first[:second]`` tag value."""
    if not value:
        return "", None
    first, sep, second = value.partition(":")
    return first.strip(), (second.strip() or None) if sep else None
