"""Story markup lexer: locates opening tags and their matching close tags."""

from __future__ import annotations

from bisect import bisect_left, bisect_right

from storymark.tokens import OpenTag, Position, Span, is_name_char


class Lexer:
    """Scan DSL source for tag tokens.

    The lexer never fails: anything that does not form a complete opening tag
    is left for the caller to treat as text. All tags are read and paired in a
    single forward pass on construction; the text inside an opening tag is
    never scanned for further tags.
    """

    def __init__(self, source: str) -> None:
        self._source = source
        self._line_starts = [0]
        for idx, ch in enumerate(source):
            if ch == "\n":
                self._line_starts.append(idx + 1)

        # Cached result of the last search for "]"
        self._bracket_from = 0
        self._bracket_at = -1

        self._tags: list[OpenTag] = []
        self._tag_starts: list[int] = []
        self._closes: dict[int, int] = {}
        self._scan()

    # ------------------------------------------------------------------
    # Position helpers
    # ------------------------------------------------------------------

    def position(self, offset: int) -> Position:
        """Convert a character offset into a 1-based line/column position."""
        line_idx = bisect_right(self._line_starts, offset) - 1
        return Position(line_idx + 1, offset - self._line_starts[line_idx] + 1, offset)

    def span(self, start: int, end: int) -> Span:
        return Span(self.position(start), self.position(end))

    # ------------------------------------------------------------------
    # Opening tags
    # ------------------------------------------------------------------

    def read_open_tag(self, pos: int, end: int) -> OpenTag | None:
        """Read an opening tag starting exactly at ``pos`` (which must be '[')."""
        src = self._source
        if pos >= end or src[pos] != "[":
            return None

        cursor = pos + 1
        while cursor < end and is_name_char(src[cursor]):
            cursor += 1
        name = src[pos + 1 : cursor]
        if not name or cursor >= end:
            return None

        ch = src[cursor]
        if ch == "]":
            return OpenTag(name, "", None, pos, cursor + 1)

        if ch not in ": \t":
            return None

        close = self._find_bracket(cursor + 1)
        if close >= end:
            return None
        inner = src[cursor + 1 : close]
        if ch == ":":
            return OpenTag(name, "", inner, pos, close + 1)
        return OpenTag(name, inner, None, pos, close + 1)

    def next_open_tag(self, pos: int, end: int) -> OpenTag | None:
        """Find the first opening tag at or after ``pos`` and before ``end``."""
        idx = bisect_left(self._tag_starts, pos)
        if idx == len(self._tags):
            return None
        tag = self._tags[idx]
        if tag.end > end:
            return None
        return tag

    # ------------------------------------------------------------------
    # Matching close tags
    # ------------------------------------------------------------------

    def find_close(self, tag: OpenTag, end: int) -> int | None:
        """Return the offset of the ``[/name]`` that closes ``tag``, or None.

        Every further opening tag of the same name increments the depth and
        every ``[/name]`` decrements it; the close is where depth reaches zero.
        A close at or beyond ``end`` does not count.
        """
        close = self._closes.get(tag.start)
        if close is None or close + len(tag.close) > end:
            return None
        return close

    # ------------------------------------------------------------------
    # Scanning
    # ------------------------------------------------------------------

    def _scan(self) -> None:
        """Read every tag once, pairing closes with a stack per tag name."""
        src = self._source
        end = len(src)
        open_by_name: dict[str, list[int]] = {}
        pos = 0
        while (idx := src.find("[", pos)) != -1:
            if src.startswith("[/", idx):
                cursor = idx + 2
                while cursor < end and is_name_char(src[cursor]):
                    cursor += 1
                if cursor > idx + 2 and cursor < end and src[cursor] == "]":
                    pending = open_by_name.get(src[idx + 2 : cursor])
                    if pending:
                        self._closes[pending.pop()] = idx
                    pos = cursor + 1
                else:
                    pos = idx + 1
                continue

            tag = self.read_open_tag(idx, end)
            if tag is None:
                pos = idx + 1
                continue
            self._tags.append(tag)
            self._tag_starts.append(tag.start)
            open_by_name.setdefault(tag.name, []).append(tag.start)
            pos = tag.end

    def _find_bracket(self, start: int) -> int:
        """Offset of the first "]" at or after ``start``; len(source) if none."""
        if self._bracket_from <= start <= self._bracket_at:
            return self._bracket_at
        at = self._source.find("]", start)
        if at == -1:
            at = len(self._source)
        self._bracket_from, self._bracket_at = start, at
        return at
