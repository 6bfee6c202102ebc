"""Moral and art-style presets offered by the story form."""

MORAL_OPTIONS: list[str] = [
    "the importance of honesty",
    "the power of teamwork",
    "respecting what makes each person unique",
    "the courage to face failure",
    "caring for the environment and saving resources",
]

DEFAULT_MORAL = "the power of teamwork"

# Short preset name -> full style prompt sent to the models
STYLE_PRESETS: dict[str, str] = {
    "watercolor": "colorful watercolor picture-book style, gentle and cute characters",
    "crayon": "playful hand-drawn crayon style, bright and vivid colors",
    "pixel": "retro pixel-art style with a video-game adventure feel",
    "3d": "modern 3D animation style, bright and full of detail",
}

DEFAULT_STYLE = STYLE_PRESETS["watercolor"]


def resolve_style(value: str) -> str:
    """Map a preset name to its style prompt; free text passes through unchanged."""
    key = value.strip().lower()
    return STYLE_PRESETS.get(key, value.strip())


def style_preset_name(style: str) -> str | None:
    """Return the preset name for a style prompt, or None for a custom style."""
    for name, prompt in STYLE_PRESETS.items():
        if prompt == style:
            return name
    return None
