"""
CLI integration utilities for generating options from the schema.
"""

import typer

from .config_schema import SECTION_NAMES, STORYMAGIC_SCHEMA
from .core import ConfigField
from .validation import SchemaValidator


def get_field_by_name(field_name: str) -> ConfigField | None:
    """Get a field by name from any section."""
    for section_name in SECTION_NAMES:
        section = getattr(STORYMAGIC_SCHEMA, section_name)
        if field_name in section.fields:
            return section.fields[field_name]  # type: ignore[no-any-return]
    return None


def generate_cli_option(field_name: str):
    """Generate a single CLI option from a schema field."""
    field = get_field_by_name(field_name)
    if not field:
        raise ValueError(f"Field '{field_name}' not found in schema")

    option_args = [field.cli_long]
    if field.cli_short:
        option_args.append(field.cli_short)

    return typer.Option(None, *option_args, help=field.cli_help)


def validate_cli_arguments(**kwargs) -> list[str]:
    """
    Validate CLI arguments using the schema.

    Args:
        **kwargs: CLI argument values

    Returns:
        List of validation error messages
    """
    validator = SchemaValidator(STORYMAGIC_SCHEMA)
    errors = []

    for field_name, value in kwargs.items():
        if value is not None:
            field_errors = validator.validate_cli_argument(field_name, value)
            errors.extend([str(error) for error in field_errors])

    return errors
