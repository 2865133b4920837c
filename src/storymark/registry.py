"""Style registries: identifier tables shared by the editor and the viewer."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, replace
from types import MappingProxyType
from typing import Any

from storymark.errors import ConfigError

DEFAULT_SIZE = "regular"
DEFAULT_EMOTION = "normal"


@dataclass(frozen=True, slots=True)
class FontConfig:
    family: str
    settings: str | None = None  # font-variation-settings


@dataclass(frozen=True, slots=True)
class MotionConfig:
    animation: str  # animation-name
    duration: str = "var(--duration-normal)"


@dataclass(frozen=True, slots=True)
class EffectConfig:
    text_shadow: str | None = None
    text_stroke: str | None = None  # -webkit-text-stroke
    filter: str | None = None


@dataclass(frozen=True, slots=True)
class EmotionPreset:
    """A legacy emotion: a fixed bundle of presentational attributes."""

    id: str
    label: str
    font_family: str
    font_variation_settings: str | None = None
    color: str | None = None
    motion: str | None = None  # key into the motion registry
    text_shadow: str | None = None
    transform: str | None = None


@dataclass(frozen=True, slots=True)
class StyleRegistry:
    """Immutable identifier → presentation tables.

    Built once (defaults, optionally overlaid from storymark.toml) and passed
    to the resolver, so nothing reads these tables as ambient globals.
    """

    fonts: Mapping[str, FontConfig]
    colors: Mapping[str, str]
    bgcolors: Mapping[str, str]
    effects: Mapping[str, EffectConfig]
    motions: Mapping[str, MotionConfig]
    sizes: Mapping[str, str]
    emotions: Mapping[str, EmotionPreset]
    emotion_aliases: Mapping[str, str]

    def resolve_emotion_id(self, emotion_id: str) -> str:
        """Resolve an emotion alias to its canonical id."""
        return self.emotion_aliases.get(emotion_id, emotion_id)

    def emotion(self, emotion_id: str) -> EmotionPreset:
        """Look up an emotion preset, falling back to the "normal" preset."""
        preset = self.emotions.get(self.resolve_emotion_id(emotion_id))
        if preset is None:
            return self.emotions[DEFAULT_EMOTION]
        return preset

    def with_overrides(self, config: Mapping[str, Any]) -> StyleRegistry:
        """Return a new registry with entries from a parsed TOML mapping added."""
        fonts = dict(self.fonts)
        for key, entry in _table(config, "fonts").items():
            fields = _fields(entry, f"fonts.{key}", ("family", "settings"))
            if "family" not in fields:
                raise ConfigError(f"fonts.{key}: 'family' is required")
            fonts[key] = FontConfig(**fields)

        motions = dict(self.motions)
        for key, entry in _table(config, "motions").items():
            fields = _fields(entry, f"motions.{key}", ("animation", "duration"))
            if "animation" not in fields:
                raise ConfigError(f"motions.{key}: 'animation' is required")
            motions[key] = MotionConfig(**fields)

        effects = dict(self.effects)
        for key, entry in _table(config, "effects").items():
            fields = _fields(entry, f"effects.{key}", ("text_shadow", "text_stroke", "filter"))
            effects[key] = EffectConfig(**fields)

        emotions = dict(self.emotions)
        for key, entry in _table(config, "emotions").items():
            fields = _fields(
                entry,
                f"emotions.{key}",
                (
                    "label",
                    "font_family",
                    "font_variation_settings",
                    "color",
                    "motion",
                    "text_shadow",
                    "transform",
                ),
            )
            if key in emotions:
                emotions[key] = replace(emotions[key], **fields)
            elif "font_family" not in fields:
                raise ConfigError(f"emotions.{key}: 'font_family' is required")
            else:
                fields.setdefault("label", key.capitalize())
                emotions[key] = EmotionPreset(id=key, **fields)

        return StyleRegistry(
            fonts=MappingProxyType(fonts),
            colors=MappingProxyType({**self.colors, **_strings(config, "colors")}),
            bgcolors=MappingProxyType({**self.bgcolors, **_strings(config, "bgcolors")}),
            effects=MappingProxyType(effects),
            motions=MappingProxyType(motions),
            sizes=MappingProxyType({**self.sizes, **_strings(config, "sizes")}),
            emotions=MappingProxyType(emotions),
            emotion_aliases=MappingProxyType(
                {**self.emotion_aliases, **_strings(config, "emotion_aliases")}
            ),
        )


# ---------------------------------------------------------------------------
# Config shape helpers
# ---------------------------------------------------------------------------


def _table(config: Mapping[str, Any], name: str) -> dict[str, Any]:
    value = config.get(name, {})
    if not isinstance(value, dict):
        raise ConfigError(f"[{name}] must be a table")
    return value


def _strings(config: Mapping[str, Any], name: str) -> dict[str, str]:
    table = _table(config, name)
    for key, value in table.items():
        if not isinstance(value, str):
            raise ConfigError(f"{name}.{key} must be a string")
    return table


def _fields(entry: Any, where: str, allowed: tuple[str, ...]) -> dict[str, str]:
    if not isinstance(entry, dict):
        raise ConfigError(f"[{where}] must be a table")
    unknown = sorted(set(entry) - set(allowed))
    if unknown:
        raise ConfigError(f"[{where}] has unknown keys: {', '.join(unknown)}")
    for key, value in entry.items():
        if not isinstance(value, str):
            raise ConfigError(f"{where}.{key} must be a string")
    return dict(entry)


# ---------------------------------------------------------------------------
# Default tables
# ---------------------------------------------------------------------------


def _make_registry() -> StyleRegistry:
    fonts = {
        "body": FontConfig("var(--font-body)"),
        "display": FontConfig("var(--font-display)", '"wght" 600'),
        "handwritten": FontConfig("var(--font-handwritten)"),
        "fredoka": FontConfig("var(--font-fredoka)", '"wght" 600'),
        "playpen": FontConfig("var(--font-playpen)", '"wght" 600'),
        "roboto": FontConfig("var(--font-roboto-flex)", '"wght" 700'),
    }

    colors: dict[str, str] = {
        name: f"var(--color-{name})"
        for name in (
            "red",
            "orange",
            "amber",
            "yellow",
            "green",
            "cyan",
            "blue",
            "purple",
            "pink",
            "brown",
            "grey",
        )
    }
    colors["primary"] = "var(--fg-primary)"
    colors["brand"] = "var(--fg-brand)"
    for emotion in (
        "happy",
        "sad",
        "shout",
        "angry",
        "nervous",
        "spooky",
        "silly",
        "brave",
        "whisper",
        "magical",
        "grumpy",
        "dreamy",
    ):
        colors[f"emotion-{emotion}"] = f"var(--fg-expressive-{emotion})"

    bgcolors = {
        name: f"var(--color-bg-{name})"
        for name in ("grey", "brown", "orange", "yellow", "green", "blue", "purple", "pink", "red")
    }

    effects = {
        "shadow": EffectConfig(text_shadow="2px 2px 4px rgba(0, 0, 0, 0.3)"),
        "shadow-hard": EffectConfig(text_shadow="3px 3px 0px rgba(0, 0, 0, 0.8)"),
        "glow": EffectConfig(text_shadow="0 0 8px gold, 0 0 16px gold"),
        "glow-blue": EffectConfig(text_shadow="0 0 8px #4fc3f7, 0 0 16px #0288d1"),
        "glow-green": EffectConfig(text_shadow="0 0 8px rgba(100, 255, 100, 0.8)"),
        "outline": EffectConfig(text_stroke="1px currentColor"),
        "outline-thick": EffectConfig(text_stroke="2px black"),
    }

    motions = {
        "bounce": MotionConfig("bounce", "var(--duration-normal)"),
        "shake": MotionConfig("shake", "var(--duration-fast)"),
        "wiggle": MotionConfig("wiggle", "var(--duration-normal)"),
        "sway": MotionConfig("sway", "var(--duration-slow)"),
        "shimmer": MotionConfig("shimmer", "var(--duration-slow)"),
        "flicker": MotionConfig("flicker", "var(--duration-normal)"),
        "clench": MotionConfig("clench", "var(--duration-fast)"),
        "shout": MotionConfig("shout", "var(--duration-fast)"),
    }

    sizes = {
        "small": "0.85em",
        DEFAULT_SIZE: "1em",
        "large": "1.3em",
        "giant": "1.8em",
        "massive": "2.5em",
    }

    presets: list[EmotionPreset] = [
        EmotionPreset(DEFAULT_EMOTION, "Normal", "var(--font-body)"),
        EmotionPreset("happy", "Happy", "var(--font-fredoka)", '"wght" 600', motion="bounce"),
        EmotionPreset("sad", "Sad", "var(--font-body)", '"wght" 300'),
        EmotionPreset(
            "shout",
            "SHOUT",
            "var(--font-fredoka)",
            '"wght" 700',
            motion="shout",
            text_shadow="2px 2px 0px rgba(0,0,0,0.2)",
        ),
        EmotionPreset(
            "angry",
            "Angry",
            "var(--font-roboto-flex)",
            '"wght" 800, "wdth" 90',
            color="var(--fg-expressive-angry)",
            motion="clench",
        ),
        EmotionPreset("nervous", "Nervous", "var(--font-playpen)", motion="wiggle"),
        EmotionPreset("whisper", "whisper", "var(--font-body)", '"wght" 300'),
        EmotionPreset("silly", "Silly", "var(--font-playpen)", '"wght" 600', motion="bounce"),
        EmotionPreset(
            "spooky",
            "Spooky",
            "var(--font-fredoka)",
            color="var(--fg-expressive-spooky)",
            motion="flicker",
            text_shadow="0 0 8px rgba(100, 255, 100, 0.6)",
        ),
        EmotionPreset(
            "magical",
            "✨Magic✨",
            "var(--font-body)",
            color="var(--fg-expressive-magical)",
            motion="shimmer",
            text_shadow="0 0 10px gold, 0 0 20px purple",
        ),
        EmotionPreset("brave", "Brave", "var(--font-roboto-flex)", '"wght" 700'),
        EmotionPreset("grumpy", "Grumpy", "var(--font-roboto-flex)", '"wght" 600, "wdth" 90'),
        EmotionPreset(
            "dreamy",
            "Dreamy",
            "var(--font-body)",
            color="var(--fg-expressive-dreamy)",
            motion="sway",
            text_shadow="0 0 4px rgba(255, 255, 255, 0.8), 2px 2px 4px rgba(0, 0, 0, 0.1)",
        ),
        # Kept for pages written before the emotion set above existed
        EmotionPreset(
            "handwritten",
            "Handwritten",
            "var(--font-handwritten)",
            color="var(--color-interactive)",
        ),
        EmotionPreset(
            "bully",
            "Bully",
            "var(--font-display)",
            '"wght" 700',
            color="var(--fg-expressive-angry)",
            text_shadow="1px 1px 0px black",
            transform="skew(-5deg) scale(1.05)",
        ),
    ]

    # Alternate emotion name -> canonical preset id
    aliases = {
        "joyful": "happy",
        "excited": "happy",
        "scared": "spooky",
        "quiet": "whisper",
        "magic": "magical",
    }

    return StyleRegistry(
        fonts=MappingProxyType(fonts),
        colors=MappingProxyType(colors),
        bgcolors=MappingProxyType(bgcolors),
        effects=MappingProxyType(effects),
        motions=MappingProxyType(motions),
        sizes=MappingProxyType(sizes),
        emotions=MappingProxyType({p.id: p for p in presets}),
        emotion_aliases=MappingProxyType(aliases),
    )


DEFAULT_REGISTRY: StyleRegistry = _make_registry()
