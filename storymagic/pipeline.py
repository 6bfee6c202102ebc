"""
Staged storybook generation pipeline.

``StoryController`` owns the state of the current run and publishes a new
``RunState`` snapshot to its subscribers after every step:

    IDLE -> WRITING -> ILLUSTRATING -> ILLUSTRATING (one per finished page) -> FINISHED

A failed structure request moves the run to ERROR. A failed illustration only
leaves that page without an image. ERROR and FINISHED stay put until
``reset()`` returns the controller to IDLE.

Pages are illustrated strictly in order, one request at a time, so the story
published after page k has pages 0..k-1 in their final state and the rest
untouched.

Resetting during a run does not cancel the request in flight. The run is
marked stale: the pending result is discarded, nothing more is published and
no further requests are issued for it.
"""

import logging
from collections.abc import Callable
from dataclasses import replace

from .errors import InvalidParameterError
from .llm_backend import StoryBackend
from .presets import DEFAULT_MORAL, DEFAULT_STYLE
from .types import RunState, RunStatus, StoryParams

logger = logging.getLogger(__name__)

KEYWORDS_REQUIRED_MESSAGE = "Please enter story keywords!"
DEFAULT_ERROR_MESSAGE = "The story connection was interrupted. Please check that the API key is set correctly."

StateListener = Callable[[RunState], None]


def validate_params(params: StoryParams) -> None:
    """Reject blank keywords before any state changes.

    Raises:
        InvalidParameterError: If the keywords are empty or whitespace.
    """
    if not params.keywords.strip():
        raise InvalidParameterError("keywords", KEYWORDS_REQUIRED_MESSAGE)


class StoryController:
    """View-model for the storybook form: owns params and run state."""

    def __init__(self, backend: StoryBackend, params: StoryParams | None = None) -> None:
        self.backend = backend
        self.params = params or StoryParams(keywords="", moral=DEFAULT_MORAL, style=DEFAULT_STYLE)
        self._state = RunState()
        self._listeners: list[StateListener] = []
        self._run_id = 0

    @property
    def state(self) -> RunState:
        return self._state

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """Register a listener for state snapshots. Returns an unsubscribe callable."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _publish(self, **changes) -> None:
        self._state = replace(self._state, **changes)
        for listener in list(self._listeners):
            listener(self._state)

    def _is_current(self, run_id: int) -> bool:
        return run_id == self._run_id

    async def run(self, params: StoryParams) -> bool:
        """
        Run the full pipeline for ``params``.

        Returns:
            bool: False if the run was rejected (blank keywords or a run
            already in progress), True once it has been carried out, whatever
            its outcome. The outcome is observed through the published state.
        """
        if self._state.status.is_busy:
            logger.warning("A story is already being generated; ignoring new request")
            return False

        self.params = params

        try:
            validate_params(params)
        except InvalidParameterError as e:
            logger.debug("Rejected run: %s", e.message)
            self._publish(error_message=e.message)
            return False

        self._run_id += 1
        run_id = self._run_id

        self._publish(status=RunStatus.WRITING, story=None, error_message=None, failed_pages=())
        logger.info("Writing story for keywords: %s", params.keywords)

        try:
            story = await self.backend.generate_structure(params.keywords, params.moral, params.style)
        except Exception as e:
            if not self._is_current(run_id):
                logger.info("Discarding structure failure from a reset run")
                return True
            logger.error("Story structure generation failed: %s", e)
            self._publish(status=RunStatus.ERROR, error_message=str(e) or DEFAULT_ERROR_MESSAGE)
            return True

        if not self._is_current(run_id):
            logger.info("Discarding story from a reset run")
            return True

        self._publish(status=RunStatus.ILLUSTRATING, story=story)

        failed: list[int] = []
        for index, page in enumerate(story.pages):
            try:
                image_url = await self.backend.generate_illustration(page.visual_prompt)
            except Exception as e:
                if not self._is_current(run_id):
                    return True
                logger.warning("Page %d image error: %s", index + 1, e)
                failed.append(index)
                continue

            if not self._is_current(run_id):
                logger.info("Discarding page %d image from a reset run", index + 1)
                return True

            story = story.with_page_image(index, image_url)
            self._publish(story=story, failed_pages=tuple(failed))

        self._publish(status=RunStatus.FINISHED, failed_pages=tuple(failed))
        logger.info(
            "Story finished: %d of %d pages illustrated", story.illustrated_count, len(story.pages)
        )
        return True

    def reset(self) -> None:
        """Return to IDLE, keeping moral and style but clearing keywords."""
        self._run_id += 1
        self.params = self.params.with_keywords("")
        self._publish(status=RunStatus.IDLE, story=None, error_message=None, failed_pages=())
