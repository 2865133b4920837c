"""Tag kinds, source positions, and the opening-tag token."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class TagKind(Enum):
    # Emphasis
    BOLD = "b"
    ITALIC = "i"
    UNDERLINE = "u"
    STRIKE = "s"
    CODE = "code"

    # Styling
    STYLE = "style"  # [style font="..." color="..."]
    EXPRESSIVE = "expressive"  # [expressive:emotion:size] (legacy)
    SIZE = "size"  # [size:giant] (legacy)

    # Annotation
    INTERACTIVE = "interactive"  # [interactive:tooltip]

    UNKNOWN = ""  # anything else, rendered as literal passthrough


_KINDS_BY_NAME = {kind.value: kind for kind in TagKind if kind is not TagKind.UNKNOWN}


def resolve_tag(name: str) -> TagKind:
    """Map a tag name to its kind. Unrecognized names map to UNKNOWN."""
    return _KINDS_BY_NAME.get(name.lower(), TagKind.UNKNOWN)


@dataclass(frozen=True, slots=True)
class Position:
    """Source position, 1-based line and column, 0-based character offset."""

    line: int
    column: int
    offset: int


@dataclass(frozen=True, slots=True)
class Span:
    """Source range from start to end position."""

    start: Position
    end: Position


@dataclass(frozen=True, slots=True)
class OpenTag:
    """An opening-tag token such as ``[style color="red"]`` or ``[size:giant]``.

    ``attrs`` holds the raw text after the whitespace separator (style form),
    ``value`` the raw text after the colon (legacy form). At most one is set.
    """

    name: str
    attrs: str
    value: str | None
    start: int
    end: int

    @property
    def kind(self) -> TagKind:
        return resolve_tag(self.name)

    @property
    def close(self) -> str:
        return f"[/{self.name}]"


def is_name_char(ch: str) -> bool:
    """Return True if ch may appear in a tag name."""
    return ch.isascii() and ch.isalpha()
