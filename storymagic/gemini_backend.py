"""Gemini backend for StoryMagic.

The API key is read from the environment on every call and a fresh client is
built for it, so a key configured after start-up is picked up by the next
request. Model names can be overridden with ``GEMINI_TEXT_MODEL`` and
``GEMINI_IMAGE_MODEL``; otherwise the configured models are used.
"""

import base64
import json
import logging
import os
from typing import TYPE_CHECKING, Any

from google import genai
from google.genai import types

from .errors import GenerationError, IllustrationError
from .llm_backend import StoryBackend
from .prompt import STORY_RESPONSE_SCHEMA, StoryPrompt
from .types import Story

if TYPE_CHECKING:
    from .config import Config

logger = logging.getLogger(__name__)

DEFAULT_TEXT_MODEL = "gemini-3-flash-preview"
DEFAULT_IMAGE_MODEL = "gemini-2.5-flash-image"
DEFAULT_ASPECT_RATIO = "4:3"

NO_IMAGE_MESSAGE = "Unable to generate the image. Please check the API key or network connection."


def get_api_key() -> str | None:
    """Return the Gemini API key currently set in the environment."""
    return os.environ.get("GEMINI_API_KEY") or os.environ.get("API_KEY")


def extract_image_data_url(response: Any) -> str | None:
    """Return the first inline image in a response as a PNG data URL, or None."""
    candidates = getattr(response, "candidates", None)
    if not candidates:
        return None
    content = getattr(candidates[0], "content", None)
    parts = getattr(content, "parts", None) or []
    for part in parts:
        inline = getattr(part, "inline_data", None)
        data = getattr(inline, "data", None) if inline else None
        if not data:
            continue
        if isinstance(data, bytes | bytearray):
            encoded = base64.b64encode(data).decode("ascii")
        else:
            # already base64 text
            encoded = str(data)
        return f"data:image/png;base64,{encoded}"
    return None


class GeminiBackend(StoryBackend):
    name = "gemini"

    def __init__(
        self,
        text_model: str = DEFAULT_TEXT_MODEL,
        image_model: str = DEFAULT_IMAGE_MODEL,
        aspect_ratio: str = DEFAULT_ASPECT_RATIO,
        language: str = "Traditional Chinese",
    ) -> None:
        self.text_model = text_model
        self.image_model = image_model
        self.aspect_ratio = aspect_ratio
        self.language = language

    @classmethod
    def from_config(cls, config: "Config | None") -> "GeminiBackend":
        if config is None:
            return cls()
        return cls(
            text_model=config.get_field_value("models", "text_model"),
            image_model=config.get_field_value("models", "image_model"),
            aspect_ratio=config.get_field_value("models", "aspect_ratio"),
            language=config.get_field_value("story", "language"),
        )

    def _client(self) -> genai.Client:
        api_key = get_api_key()
        if not api_key:
            raise RuntimeError("GEMINI_API_KEY environment variable not set.")
        return genai.Client(api_key=api_key)

    def _text_model(self) -> str:
        return os.environ.get("GEMINI_TEXT_MODEL") or self.text_model

    def _image_model(self) -> str:
        return os.environ.get("GEMINI_IMAGE_MODEL") or self.image_model

    async def generate_structure(self, keywords: str, moral: str, style: str) -> Story:
        prompt = StoryPrompt(keywords=keywords, moral=moral, style=style, language=self.language)
        model = self._text_model()
        logger.debug("Requesting story structure from %s", model)

        try:
            client = self._client()
            response = await client.aio.models.generate_content(
                model=model,
                contents=prompt.structure,
                config=types.GenerateContentConfig(
                    response_mime_type="application/json",
                    response_schema=STORY_RESPONSE_SCHEMA,
                ),
            )
        except Exception as e:
            raise GenerationError(str(e), details={"model": model}) from e

        raw_text = getattr(response, "text", None) or "{}"
        try:
            payload = json.loads(raw_text)
        except json.JSONDecodeError as e:
            raise GenerationError(f"The story response was not valid JSON: {e}", details={"model": model}) from e

        try:
            story = Story.from_dict(payload)
        except ValueError as e:
            raise GenerationError(f"The story response did not match the expected layout: {e}") from e

        logger.info("Story '%s' written with %d pages", story.title, len(story.pages))
        return story

    async def generate_illustration(self, visual_prompt: str) -> str:
        model = self._image_model()
        logger.debug("Requesting illustration from %s", model)

        try:
            client = self._client()
            response = await client.aio.models.generate_content(
                model=model,
                contents=types.Content(role="user", parts=[types.Part(text=visual_prompt)]),
                config=types.GenerateContentConfig(
                    image_config=types.ImageConfig(aspect_ratio=self.aspect_ratio),
                ),
            )
        except Exception as e:
            raise IllustrationError(str(e) or NO_IMAGE_MESSAGE, details={"model": model}) from e

        data_url = extract_image_data_url(response)
        if data_url is None:
            raise IllustrationError(NO_IMAGE_MESSAGE, details={"model": model})
        return data_url
