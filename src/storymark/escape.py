"""HTML escaping for text content and attribute values."""

from __future__ import annotations


def escape_html(text: str, *, ascii_only: bool = False) -> str:
    """Escape text for HTML body content.

    With ``ascii_only`` non-ASCII characters are encoded as numeric entities.
    """
    result: list[str] = []
    for ch in text:
        if ch == "&":
            result.append("&amp;")
        elif ch == "<":
            result.append("&lt;")
        elif ch == ">":
            result.append("&gt;")
        elif ascii_only and ord(ch) > 0x7F:
            result.append(f"&#x{ord(ch):X};")
        else:
            result.append(ch)
    return "".join(result)


def escape_attr(text: str, *, ascii_only: bool = False) -> str:
    """Escape text for a double-quoted HTML attribute value."""
    return escape_html(text, ascii_only=ascii_only).replace('"', "&quot;")


def format_attrs(attrs: list[tuple[str, str]] | dict[str, str], *, ascii_only: bool = False) -> str:
    """Render attributes as `` name="value"`` pairs (leading space included)."""
    items = attrs.items() if isinstance(attrs, dict) else attrs
    return "".join(f' {name}="{escape_attr(value, ascii_only=ascii_only)}"' for name, value in items)
