"""
Building blocks of the StoryMagic configuration schema.

Each ``ConfigField`` drives three things: validation of INI and CLI values,
the generated Typer option, and its line in the config file template.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class FieldType(Enum):
    """Supported configuration field types."""

    STRING = "string"
    BOOLEAN = "boolean"
    PATH = "path"


@dataclass
class ConfigField:
    """A single configuration option."""

    name: str
    field_type: FieldType
    default: Any
    section: str
    cli_help: str
    ini_comment: str

    # Closed set of accepted values, None for free text
    valid_values: list[str] | None = None
    cli_short: str | None = None

    @property
    def cli_long(self) -> str:
        return "--" + self.name.replace("_", "-")


@dataclass
class ConfigSection:
    """A named group of configuration fields, one INI section."""

    name: str
    fields: dict[str, ConfigField] = field(default_factory=dict)

    def get_field(self, name: str) -> ConfigField | None:
        return self.fields.get(name)

    def add_field(self, field_obj: ConfigField) -> None:
        field_obj.section = self.name
        self.fields[field_obj.name] = field_obj
