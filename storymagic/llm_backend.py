"""
Story backend interface and factory.

This module provides:
1. StoryBackend abstract base class defining the two generator calls
2. get_backend() factory building the configured backend

Supported backends:
- Gemini (Google AI): requires GEMINI_API_KEY (or API_KEY)
"""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .config import Config
    from .types import Story


class StoryBackend(ABC):
    """
    Abstract base class for storybook generation backends.

    Implementations are stateless between calls: they never touch the run
    state, the caller owns publication of results.
    """

    name: str

    @abstractmethod
    async def generate_structure(self, keywords: str, moral: str, style: str) -> "Story":
        """
        Generate the story structure: a title and 4-5 pages.

        Args:
            keywords (str): Story keywords, already validated as non-blank.
            moral (str): Moral or educational theme.
            style (str): Illustration style description.

        Returns:
            Story: The parsed story, every page without an image.

        Raises:
            GenerationError: If the service fails or returns non-conforming data.
        """
        raise NotImplementedError("Subclass must implement generate_structure method")

    @abstractmethod
    async def generate_illustration(self, visual_prompt: str) -> str:
        """
        Generate one illustration for a page.

        Args:
            visual_prompt (str): English visual description of the page.

        Returns:
            str: The image as a ``data:image/png;base64,...`` URL.

        Raises:
            IllustrationError: If the call fails or no image payload is returned.
        """
        raise NotImplementedError("Subclass must implement generate_illustration method")


def get_backend(config: "Config | None" = None, backend_name: str = "gemini") -> StoryBackend:
    """
    Factory function returning a backend instance.

    Args:
        config: Loaded configuration; model names and story language are read
            from it. Schema defaults are used when omitted.
        backend_name: Backend to use. Only "gemini" is available.

    Raises:
        RuntimeError: If the backend name is unknown.
    """
    if backend_name == "gemini":
        from .gemini_backend import GeminiBackend

        return GeminiBackend.from_config(config)

    raise RuntimeError(f"Unknown backend '{backend_name}'. Supported backends: gemini")
