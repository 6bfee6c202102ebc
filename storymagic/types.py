"""Data model shared by the generators, the pipeline and the views."""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any


class RunStatus(Enum):
    """Pipeline run status. Drives which view is shown."""

    IDLE = "idle"
    WRITING = "writing"
    ILLUSTRATING = "illustrating"
    FINISHED = "finished"
    ERROR = "error"

    @property
    def is_busy(self) -> bool:
        return self in (RunStatus.WRITING, RunStatus.ILLUSTRATING)


@dataclass(frozen=True)
class StoryParams:
    """User input for one run."""

    keywords: str
    moral: str
    style: str

    def with_keywords(self, keywords: str) -> "StoryParams":
        return replace(self, keywords=keywords)


@dataclass(frozen=True)
class StoryPage:
    """A single page: narrative text plus the prompt used to illustrate it."""

    text: str
    visual_prompt: str
    image_url: str | None = None

    def with_image(self, image_url: str) -> "StoryPage":
        return replace(self, image_url=image_url)

    @property
    def has_image(self) -> bool:
        return bool(self.image_url)


@dataclass(frozen=True)
class Story:
    """A titled, ordered sequence of pages.

    Page identity is the positional index. Updating a page returns a new
    Story with a new page tuple of the same length and order.
    """

    title: str
    pages: tuple[StoryPage, ...] = ()

    @classmethod
    def from_dict(cls, payload: Any) -> "Story":
        """Build a Story from the structured model response.

        Raises:
            ValueError: If the payload does not match
                ``{title: str, pages: [{text: str, visualPrompt: str}, ...]}``.
        """
        if not isinstance(payload, dict):
            raise ValueError("Story payload must be a JSON object.")

        title = payload.get("title")
        if not isinstance(title, str):
            raise ValueError("Story payload must include a string 'title'.")

        raw_pages = payload.get("pages")
        if not isinstance(raw_pages, list) or not raw_pages:
            raise ValueError("Story payload must include a non-empty 'pages' array.")

        pages: list[StoryPage] = []
        for index, entry in enumerate(raw_pages, 1):
            if not isinstance(entry, dict):
                raise ValueError(f"Page {index} must be an object.")
            text = entry.get("text")
            visual_prompt = entry.get("visualPrompt")
            if not isinstance(text, str) or not isinstance(visual_prompt, str):
                raise ValueError(f"Page {index} must include string 'text' and 'visualPrompt' fields.")
            if not visual_prompt.strip():
                raise ValueError(f"Page {index} has an empty 'visualPrompt'.")
            pages.append(StoryPage(text=text.strip(), visual_prompt=visual_prompt.strip()))

        return cls(title=title.strip(), pages=tuple(pages))

    def with_page_image(self, index: int, image_url: str) -> "Story":
        if not 0 <= index < len(self.pages):
            raise IndexError(f"Page index {index} out of range for {len(self.pages)} pages")
        pages = list(self.pages)
        pages[index] = pages[index].with_image(image_url)
        return replace(self, pages=tuple(pages))

    @property
    def illustrated_count(self) -> int:
        return sum(1 for page in self.pages if page.has_image)

    @property
    def progress(self) -> float:
        """Fraction of pages that have an illustration (0.0 - 1.0)."""
        if not self.pages:
            return 0.0
        return self.illustrated_count / len(self.pages)


@dataclass(frozen=True)
class RunState:
    """Snapshot of the current run, published to the presentation layer."""

    status: RunStatus = RunStatus.IDLE
    story: Story | None = None
    error_message: str | None = None
    failed_pages: tuple[int, ...] = field(default=())

    @property
    def progress(self) -> float:
        return self.story.progress if self.story else 0.0
