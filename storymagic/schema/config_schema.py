"""
StoryMagic configuration schema definition.
Centralizes all configuration options with their metadata.
"""

from ..presets import DEFAULT_MORAL, DEFAULT_STYLE, STYLE_PRESETS
from .core import ConfigField, ConfigSection, FieldType

SECTION_NAMES = ["story", "models", "output", "system"]

ASPECT_RATIOS = ["1:1", "3:4", "4:3", "9:16", "16:9"]


def _create_story_section() -> ConfigSection:
    """Create the story configuration section."""
    section = ConfigSection(name="story")

    section.add_field(
        ConfigField(
            name="moral",
            field_type=FieldType.STRING,
            default=DEFAULT_MORAL,
            section="story",
            cli_help="Moral or theme of the story (free text)",
            cli_short="-m",
            ini_comment="Default moral or theme (free text)",
        )
    )

    section.add_field(
        ConfigField(
            name="style",
            field_type=FieldType.STRING,
            default=DEFAULT_STYLE,
            section="story",
            cli_help=f"Art style: a preset ({', '.join(STYLE_PRESETS)}) or free text",
            cli_short="-s",
            ini_comment=f"Default art style: a preset name ({', '.join(STYLE_PRESETS)}) or a full style description",
        )
    )

    section.add_field(
        ConfigField(
            name="language",
            field_type=FieldType.STRING,
            default="Traditional Chinese",
            section="story",
            cli_help="Language of the story text",
            cli_short="-L",
            ini_comment="Language of the story text (illustration prompts are always written in English)",
        )
    )

    return section


def _create_models_section() -> ConfigSection:
    """Create the models configuration section."""
    section = ConfigSection(name="models")

    section.add_field(
        ConfigField(
            name="text_model",
            field_type=FieldType.STRING,
            default="gemini-3-flash-preview",
            section="models",
            cli_help="Gemini text model (overridden by GEMINI_TEXT_MODEL)",
            ini_comment="Gemini model for story structure (GEMINI_TEXT_MODEL env var takes precedence)",
        )
    )

    section.add_field(
        ConfigField(
            name="image_model",
            field_type=FieldType.STRING,
            default="gemini-2.5-flash-image",
            section="models",
            cli_help="Gemini image model (overridden by GEMINI_IMAGE_MODEL)",
            ini_comment="Gemini model for illustrations (GEMINI_IMAGE_MODEL env var takes precedence)",
        )
    )

    section.add_field(
        ConfigField(
            name="aspect_ratio",
            field_type=FieldType.STRING,
            default="4:3",
            section="models",
            cli_help="Illustration aspect ratio",
            valid_values=ASPECT_RATIOS,
            ini_comment=f"Illustration aspect ratio options: {', '.join(ASPECT_RATIOS)}",
        )
    )

    return section


def _create_output_section() -> ConfigSection:
    """Create the output configuration section."""
    section = ConfigSection(name="output")

    section.add_field(
        ConfigField(
            name="output_dir",
            field_type=FieldType.PATH,
            default="",
            section="output",
            cli_help="Directory to export the finished storybook to",
            cli_short="-o",
            ini_comment="Default export directory (leave empty to skip exporting)",
        )
    )

    return section


def _create_system_section() -> ConfigSection:
    """Create the system configuration section."""
    section = ConfigSection(name="system")

    section.add_field(
        ConfigField(
            name="verbose",
            field_type=FieldType.BOOLEAN,
            default=False,
            section="system",
            cli_help="Enable verbose output",
            cli_short="-v",
            ini_comment="Enable verbose output by default: true, false",
        )
    )

    section.add_field(
        ConfigField(
            name="debug",
            field_type=FieldType.BOOLEAN,
            default=False,
            section="system",
            cli_help="Enable debug logging",
            ini_comment="Enable debug logging by default: true, false",
        )
    )

    return section


# Global schema instance
STORYMAGIC_SCHEMA = type(
    "StoryMagicSchema",
    (),
    {
        "story": _create_story_section(),
        "models": _create_models_section(),
        "output": _create_output_section(),
        "system": _create_system_section(),
    },
)()
