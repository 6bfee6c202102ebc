"""
StoryMagic configuration schema package.
Provides schema-driven validation and CLI integration.
"""

from .config_schema import SECTION_NAMES, STORYMAGIC_SCHEMA
from .core import ConfigField, ConfigSection, FieldType
from .validation import SchemaValidator, ValidationError

__all__ = [
    "SECTION_NAMES",
    "STORYMAGIC_SCHEMA",
    "SchemaValidator",
    "ValidationError",
    "ConfigField",
    "ConfigSection",
    "FieldType",
]
