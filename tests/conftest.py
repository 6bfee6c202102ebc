"""Pytest configuration for StoryMagic tests."""

import pytest

from storymagic.errors import GenerationError, IllustrationError
from storymagic.llm_backend import StoryBackend
from storymagic.types import Story, StoryPage, StoryParams


def make_story(page_count: int = 4, title: str = "Robo and the Missing Cookie") -> Story:
    return Story(
        title=title,
        pages=tuple(
            StoryPage(text=f"Page {i} text", visual_prompt=f"A friendly robot, scene {i}, watercolor")
            for i in range(1, page_count + 1)
        ),
    )


class FakeBackend(StoryBackend):
    """In-memory backend recording every call.

    ``fail_pages`` holds 0-based page indexes whose illustration fails.
    """

    name = "fake"

    def __init__(self, story=None, structure_error=None, fail_pages=()):
        self.story = story if story is not None else make_story()
        self.structure_error = structure_error
        self.fail_pages = set(fail_pages)
        self.structure_calls: list[tuple[str, str, str]] = []
        self.illustration_calls: list[str] = []

    async def generate_structure(self, keywords, moral, style):
        self.structure_calls.append((keywords, moral, style))
        if self.structure_error is not None:
            raise self.structure_error
        return self.story

    async def generate_illustration(self, visual_prompt):
        index = len(self.illustration_calls)
        self.illustration_calls.append(visual_prompt)
        if index in self.fail_pages:
            raise IllustrationError("No image in response")
        return f"data:image/png;base64,page{index}"


@pytest.fixture
def backend():
    return FakeBackend()


@pytest.fixture
def params():
    return StoryParams(keywords="a friendly robot", moral="honesty", style="watercolor")


@pytest.fixture
def generation_error():
    return GenerationError("Network unreachable")
