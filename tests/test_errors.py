"""Tests for the StoryMagic error hierarchy."""

import pytest

from storymagic.errors import (
    ConfigError,
    FileIOError,
    GenerationError,
    IllustrationError,
    InvalidParameterError,
    StoryMagicError,
)


@pytest.mark.parametrize("error_cls", [GenerationError, IllustrationError])
def test_generator_errors_keep_message_verbatim(error_cls):
    error = error_cls("Network unreachable", details={"model": "gemini"})

    assert isinstance(error, StoryMagicError)
    assert error.message == "Network unreachable"
    assert str(error) == "Network unreachable"
    assert error.details == {"model": "gemini"}


def test_details_default_to_empty():
    assert GenerationError("boom").details == {}


def test_invalid_parameter_records_field():
    error = InvalidParameterError("keywords", "Please enter story keywords!")

    assert error.message == "Please enter story keywords!"
    assert error.details == {"field": "keywords"}


def test_config_error_prefix():
    assert ConfigError("bad value").message == "Configuration error: bad value"


def test_file_io_error_message():
    error = FileIOError("write", "/tmp/out", details={"error": "denied"})

    assert error.message == "File write failed: /tmp/out"
    assert error.details["error"] == "denied"
