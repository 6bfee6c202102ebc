"""
Prompt builder for the storybook structure request.

The structure prompt asks for a short picture book of 4 to 5 pages. Each page
carries narrative text for reading aloud and an English visual description
that the image model turns into an illustration.
"""

from dataclasses import dataclass

from google.genai import types

MIN_PAGES = 4
MAX_PAGES = 5

# Structured response layout: {title, pages: [{text, visualPrompt}]}
STORY_RESPONSE_SCHEMA = types.Schema(
    type=types.Type.OBJECT,
    properties={
        "title": types.Schema(type=types.Type.STRING),
        "pages": types.Schema(
            type=types.Type.ARRAY,
            items=types.Schema(
                type=types.Type.OBJECT,
                properties={
                    "text": types.Schema(type=types.Type.STRING),
                    "visualPrompt": types.Schema(type=types.Type.STRING),
                },
                required=["text", "visualPrompt"],
            ),
        ),
    },
    required=["title", "pages"],
)


@dataclass
class StoryPrompt:
    """
    Parameters for one storybook structure request.

    Attributes:
        keywords (str): Classroom ideas or story seeds supplied by the user
        moral (str): Educational purpose or moral of the story
        style (str): Illustration style the visual prompts must follow
        language (str): Language of the page text read to the children

    Usage:
        prompt = StoryPrompt("a friendly robot", "honesty", "watercolor")
        instruction = prompt.structure
    """

    keywords: str
    moral: str
    style: str
    language: str = "Traditional Chinese"

    @property
    def structure(self) -> str:
        """The full instruction sent to the text model."""
        return (
            "You are a world-class children's picture-book author and an elementary school teacher.\n"
            "Write a vivid, fun short story based on the following:\n"
            f"Keywords: {self.keywords}\n"
            f"Educational purpose or moral: {self.moral}\n"
            f"Suggested illustration style: {self.style}\n\n"
            f"Create a picture book of {MIN_PAGES} to {MAX_PAGES} pages.\n"
            "Each page must contain:\n"
            f"1. text: the story text in {self.language}, suitable for elementary "
            "school children to read aloud.\n"
            "2. visualPrompt: an English visual description used to generate the "
            "illustration with AI. Keep the characters consistent across pages and "
            f'follow the "{self.style}" style.\n\n'
            "Respond in JSON with a title and a pages array."
        )
