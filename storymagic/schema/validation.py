"""
Validation for configuration values against the schema.
"""

from typing import Any

from .config_schema import SECTION_NAMES
from .core import ConfigField, FieldType

_BOOLEAN_STRINGS = ["true", "false", "1", "0", "yes", "no", "on", "off"]


class ValidationError(Exception):
    """A value rejected for one schema field."""

    def __init__(self, field_name: str, value: Any, message: str, section: str = ""):
        self.field_name = field_name
        self.value = value
        self.message = message
        self.section = section
        super().__init__(f"[{section}.{field_name}] {message}")


def _type_error(field: ConfigField, value: Any) -> str | None:
    if field.field_type == FieldType.BOOLEAN:
        if isinstance(value, bool) or str(value).lower() in _BOOLEAN_STRINGS:
            return None
        return f"Expected boolean, got '{value}'"
    if not isinstance(value, str):
        return f"Expected string, got {type(value).__name__}"
    return None


class SchemaValidator:
    """Checks INI sections and CLI arguments against a schema."""

    def __init__(self, schema):
        self.schema = schema

    def validate_field(self, field: ConfigField, value: Any) -> list[ValidationError]:
        # An empty value means "use the default"
        if value is None or value == "":
            return []

        message = _type_error(field, value)
        if message is None and field.valid_values and str(value) not in field.valid_values:
            message = f"Invalid value '{value}'. Valid options: {', '.join(field.valid_values)}"

        if message:
            return [ValidationError(field.name, value, message, field.section)]
        return []

    def validate_config(self, config_dict: dict[str, dict[str, Any]]) -> list[ValidationError]:
        """Validate every known field of a section -> values mapping; unknown keys are ignored."""
        errors = []
        for section_name, values in config_dict.items():
            section = getattr(self.schema, section_name, None)
            if section is None:
                continue
            for field_name, value in values.items():
                field = section.get_field(field_name)
                if field:
                    errors.extend(self.validate_field(field, value))
        return errors

    def validate_cli_argument(self, field_name: str, value: Any) -> list[ValidationError]:
        for section_name in SECTION_NAMES:
            field = getattr(self.schema, section_name).get_field(field_name)
            if field:
                return self.validate_field(field, value)

        return [ValidationError(field_name, value, f"Unknown configuration field '{field_name}'", "")]
