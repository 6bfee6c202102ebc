"""
Configuration management for StoryMagic.

Handles loading and merging configuration from:
1. Configuration files (INI format)
2. Environment variables
3. Command line arguments (highest priority)

Configuration file priority:
1. STORYMAGIC_CONFIG environment variable path
2. XDG config directory: ~/.config/storymagic/storymagic.ini
3. Home directory: ~/.storymagic.ini
4. Current directory: ./storymagic.ini
"""

import os
from configparser import ConfigParser
from configparser import Error as ConfigParserError
from pathlib import Path
from typing import Any

from platformdirs import user_config_dir

from .console import console
from .errors import ConfigError
from .schema import SECTION_NAMES, STORYMAGIC_SCHEMA, SchemaValidator

_TRUE_STRINGS = ("true", "1", "yes", "on")


def _generate_config_template_from_schema() -> str:
    """Generate the configuration file template from the schema."""
    lines = [
        "# StoryMagic Configuration File",
        "# Default values for storybook generation",
        "# Command line arguments override these settings",
        "",
    ]

    for section_name in SECTION_NAMES:
        section = getattr(STORYMAGIC_SCHEMA, section_name)
        lines.append(f"[{section_name}]")

        for field_name, field in section.fields.items():
            if field.ini_comment:
                lines.append(f"# {field.ini_comment}")

            default_value = field.default
            if field.field_type.value == "boolean":
                default_value = "true" if default_value else "false"
            else:
                default_value = str(default_value) if default_value is not None else ""

            lines.append(f"{field_name} = {default_value}")
            lines.append("")

        lines.append("")

    return "\n".join(lines).rstrip() + "\n"


class Config:
    """Configuration manager for StoryMagic."""

    def __init__(self):
        self.config = ConfigParser(interpolation=None)
        self.config_path: Path | None = None
        self.validator = SchemaValidator(STORYMAGIC_SCHEMA)
        self._load_defaults()

    def _load_defaults(self):
        """Load default configuration values from the schema."""
        self.config.read_string(_generate_config_template_from_schema())

    def get_config_paths(self) -> list[Path]:
        """Return configuration file paths in priority order."""
        paths = []

        env_config = os.environ.get("STORYMAGIC_CONFIG")
        if env_config:
            paths.append(Path(env_config))

        paths.append(self.get_default_config_path())
        paths.append(Path.home() / ".storymagic.ini")
        paths.append(Path("./storymagic.ini"))

        return paths

    def find_config_file(self) -> Path | None:
        """Find the first existing configuration file."""
        for path in self.get_config_paths():
            if path.exists() and path.is_file():
                return path
        return None

    def load_config(self, verbose: bool = False) -> bool:
        """
        Load configuration from file.

        Returns:
            bool: True if a config file was found and loaded, False otherwise.
        """
        config_path = self.find_config_file()
        if not config_path:
            if verbose:
                console.print("[dim]No configuration file found, using defaults[/dim]")
            return False

        try:
            self.config.read(config_path, encoding="utf-8")
        except ConfigParserError as e:
            raise ConfigError(f"Error reading configuration file {config_path}: {e}") from e

        self.config_path = config_path
        if verbose:
            console.print(f"[dim]Loaded configuration from: {config_path}[/dim]")
        return True

    def validate_config(self) -> list[str]:
        """
        Validate configuration values using the schema.

        Returns:
            List of validation errors, empty if valid.
        """
        return [str(error) for error in self.validator.validate_config(self.to_dict())]

    def get_default_config_path(self) -> Path:
        """Get the default configuration file path (XDG config directory)."""
        return Path(user_config_dir("storymagic", "storymagic")) / "storymagic.ini"

    def create_default_config(self, path: Path | None = None) -> Path:
        """
        Create a default configuration file.

        Args:
            path: Path to create config file. If None, uses default location.

        Returns:
            Path: The path where the config file was created.
        """
        if path is None:
            path = self.get_default_config_path()

        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            f.write(_generate_config_template_from_schema())

        return path

    def get_field_value(self, section_name: str, field_name: str) -> Any:
        """Get a typed configuration value, falling back to the schema default."""
        section = getattr(STORYMAGIC_SCHEMA, section_name, None)
        field = section.fields.get(field_name) if section else None
        if not field:
            raise ValueError(f"Unknown field: {section_name}.{field_name}")

        raw_value = self.config.get(section_name, field_name, fallback="").strip()

        if field.field_type.value == "boolean":
            return raw_value.lower() in _TRUE_STRINGS if raw_value else field.default
        return raw_value if raw_value else field.default

    def to_dict(self) -> dict[str, dict[str, Any]]:
        """Convert configuration to dictionary format."""
        result: dict[str, dict[str, Any]] = {}
        for section_name in self.config.sections():
            result[section_name] = dict(self.config[section_name].items())
        return result


def load_config(verbose: bool = False) -> Config:
    """
    Load configuration from the file system.

    Raises:
        ConfigError: If the configuration file is malformed or invalid.
    """
    config = Config()
    config.load_config(verbose=verbose)

    errors = config.validate_config()
    if errors:
        raise ConfigError("validation failed:\n" + "\n".join(f"  - {error}" for error in errors))

    return config
