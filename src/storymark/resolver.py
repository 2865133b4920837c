"""Style resolver: turns emotion ids or atomic attributes into CSS-level styles."""

from __future__ import annotations

from dataclasses import dataclass, fields

from storymark.registry import DEFAULT_REGISTRY, DEFAULT_SIZE, StyleRegistry

# Style dimensions in canonical order
DIMENSIONS: tuple[str, ...] = ("font", "color", "bgcolor", "effect", "motion", "size")

BG_PADDING = "0.1em 0.3em"
BG_RADIUS = "0.25em"


@dataclass(frozen=True, slots=True)
class StyleAttributes:
    """Atomic style attributes as written on a ``[style ...]`` tag.

    Keys outside the known dimensions are kept in ``extra`` but never resolved.
    """

    font: str | None = None
    color: str | None = None
    bgcolor: str | None = None
    effect: str | None = None
    motion: str | None = None
    size: str | None = None
    extra: tuple[tuple[str, str], ...] = ()

    @classmethod
    def from_pairs(cls, pairs: tuple[tuple[str, str], ...]) -> StyleAttributes:
        known: dict[str, str] = {}
        extra: list[tuple[str, str]] = []
        for key, value in pairs:
            if key in DIMENSIONS:
                known[key] = value
            else:
                extra.append((key, value))
        return cls(**known, extra=tuple(extra))

    def items(self) -> list[tuple[str, str]]:
        """Present dimensions as (key, value) pairs in canonical order."""
        return [(key, value) for key in DIMENSIONS if (value := getattr(self, key))]


@dataclass(frozen=True, slots=True)
class ResolvedStyle:
    """Flat record of CSS-level properties; None means "inherit"."""

    font_family: str | None = None
    font_variation_settings: str | None = None
    font_size: str | None = None
    color: str | None = None
    background_color: str | None = None
    padding: str | None = None
    border_radius: str | None = None
    text_shadow: str | None = None
    text_stroke: str | None = None
    filter: str | None = None
    transform: str | None = None
    animation: str | None = None
    animation_duration: str | None = None

    def is_empty(self) -> bool:
        return all(getattr(self, f.name) is None for f in fields(self))

    def declarations(self, *, animate: bool = False) -> list[tuple[str, str]]:
        """Project onto ordered CSS declarations.

        Animation properties are only emitted when ``animate`` is true; without
        it the style is shown statically.
        """
        decls: list[tuple[str, str]] = []
        for attr, prop in _CSS_PROPERTIES:
            value = getattr(self, attr)
            if value is not None:
                decls.append((prop, value))
        if animate and self.animation:
            decls.append(("animation-name", self.animation))
            if self.animation_duration:
                decls.append(("animation-duration", self.animation_duration))
            decls.append(("animation-iteration-count", "infinite"))
        return decls


_CSS_PROPERTIES: tuple[tuple[str, str], ...] = (
    ("font_family", "font-family"),
    ("font_variation_settings", "font-variation-settings"),
    ("font_size", "font-size"),
    ("color", "color"),
    ("background_color", "background-color"),
    ("padding", "padding"),
    ("border_radius", "border-radius"),
    ("text_shadow", "text-shadow"),
    ("text_stroke", "-webkit-text-stroke"),
    ("filter", "filter"),
    ("transform", "transform"),
)


def css_text(decls: list[tuple[str, str]]) -> str:
    """Join declarations into an inline ``style`` attribute value."""
    return "; ".join(f"{prop}: {value}" for prop, value in decls)


class StyleResolver:
    """Resolve styles against an injected registry. Never raises on unknown ids."""

    def __init__(self, registry: StyleRegistry = DEFAULT_REGISTRY) -> None:
        self.registry = registry

    def resolve(self, style: str | StyleAttributes) -> ResolvedStyle:
        """Resolve a legacy emotion id or an atomic attribute record."""
        if isinstance(style, str):
            return self.resolve_emotion(style)
        return self.resolve_attributes(style)

    def resolve_emotion(self, emotion_id: str, size: str | None = None) -> ResolvedStyle:
        """Expand a legacy emotion preset, with an optional size suffix."""
        preset = self.registry.emotion(emotion_id or "")
        motion = self.registry.motions.get(preset.motion) if preset.motion else None
        return ResolvedStyle(
            font_family=preset.font_family,
            font_variation_settings=preset.font_variation_settings,
            font_size=self.font_size(size),
            color=preset.color,
            text_shadow=preset.text_shadow,
            transform=preset.transform,
            animation=motion.animation if motion else None,
            animation_duration=motion.duration if motion else None,
        )

    def resolve_attributes(self, attrs: StyleAttributes) -> ResolvedStyle:
        """Resolve atomic attributes; absent or unknown dimensions add nothing."""
        reg = self.registry
        values: dict[str, str | None] = {}

        font = reg.fonts.get(attrs.font) if attrs.font else None
        if font is not None:
            values["font_family"] = font.family
            values["font_variation_settings"] = font.settings

        if attrs.color and attrs.color in reg.colors:
            values["color"] = reg.colors[attrs.color]

        if attrs.bgcolor and attrs.bgcolor in reg.bgcolors:
            values["background_color"] = reg.bgcolors[attrs.bgcolor]
            values["padding"] = BG_PADDING
            values["border_radius"] = BG_RADIUS

        effect = reg.effects.get(attrs.effect) if attrs.effect else None
        if effect is not None:
            values["text_shadow"] = effect.text_shadow
            values["text_stroke"] = effect.text_stroke
            values["filter"] = effect.filter

        motion = reg.motions.get(attrs.motion) if attrs.motion else None
        if motion is not None:
            values["animation"] = motion.animation
            values["animation_duration"] = motion.duration

        values["font_size"] = self.font_size(attrs.size)

        return ResolvedStyle(**values)

    def size_scale(self, size: str | None) -> str:
        """CSS font-size for a size id; the default scale for unknown ids."""
        sizes = self.registry.sizes
        return sizes.get(size or DEFAULT_SIZE) or sizes[DEFAULT_SIZE]

    def font_size(self, size: str | None) -> str | None:
        """Font-size override for a size id, or None when it would be the default."""
        if not size or size == DEFAULT_SIZE or size not in self.registry.sizes:
            return None
        return self.registry.sizes[size]


_DEFAULT_RESOLVER = StyleResolver()


def resolve_style(style: str | StyleAttributes) -> ResolvedStyle:
    """Resolve against the built-in registry."""
    return _DEFAULT_RESOLVER.resolve(style)


def size_scale(size: str | None) -> str:
    """Size scale from the built-in registry."""
    return _DEFAULT_RESOLVER.size_scale(size)
