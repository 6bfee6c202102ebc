"""StoryMagic error handling."""

from typing import Any


class StoryMagicError(Exception):
    """Base exception for StoryMagic errors.

    ``message`` is what the CLI and the studio show; ``details`` carries
    context for logs (model name, field, underlying error).
    """

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}


class GenerationError(StoryMagicError):
    """Story structure generation failed. Fatal to the current run.

    The message is shown to the user as is.
    """


class IllustrationError(StoryMagicError):
    """A single page illustration failed."""


class InvalidParameterError(StoryMagicError):
    """User input rejected before a run starts."""

    def __init__(self, field_name: str, message: str) -> None:
        super().__init__(message, details={"field": field_name})


class ConfigError(StoryMagicError):
    """Configuration error."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(f"Configuration error: {message}", details)


class FileIOError(StoryMagicError):
    """File I/O operation failed."""

    def __init__(self, operation: str, path: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(f"File {operation} failed: {path}", details)
