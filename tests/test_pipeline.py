"""Tests for the staged storybook pipeline."""

import asyncio

import pytest

from storymagic.errors import InvalidParameterError
from storymagic.pipeline import (
    DEFAULT_ERROR_MESSAGE,
    KEYWORDS_REQUIRED_MESSAGE,
    StoryController,
    validate_params,
)
from storymagic.types import RunStatus, StoryParams

from conftest import FakeBackend, make_story


def record(controller):
    states = []
    controller.subscribe(states.append)
    return states


class TestSuccessfulRun:
    """Runs where the structure request succeeds."""

    @pytest.mark.asyncio
    async def test_status_sequence(self, backend, params):
        """Idle -> Writing -> Illustrating -> 4 page updates -> Finished."""
        controller = StoryController(backend)
        assert controller.state.status == RunStatus.IDLE
        states = record(controller)

        assert await controller.run(params) is True

        assert [s.status for s in states] == [
            RunStatus.WRITING,
            RunStatus.ILLUSTRATING,
            RunStatus.ILLUSTRATING,
            RunStatus.ILLUSTRATING,
            RunStatus.ILLUSTRATING,
            RunStatus.ILLUSTRATING,
            RunStatus.FINISHED,
        ]

    @pytest.mark.asyncio
    async def test_writing_clears_previous_story_and_error(self, backend, params):
        controller = StoryController(backend)
        states = record(controller)
        await controller.run(params)

        writing = states[0]
        assert writing.story is None
        assert writing.error_message is None

    @pytest.mark.asyncio
    async def test_story_published_without_images(self, backend, params):
        controller = StoryController(backend)
        states = record(controller)
        await controller.run(params)

        first_illustrating = states[1]
        assert len(first_illustrating.story.pages) == 4
        assert all(page.image_url is None for page in first_illustrating.story.pages)

    @pytest.mark.asyncio
    async def test_pages_fill_in_order(self, backend, params):
        """After step k, pages 0..k-1 have images and the rest are untouched."""
        controller = StoryController(backend)
        states = record(controller)
        await controller.run(params)

        page_updates = states[2:6]
        for k, state in enumerate(page_updates, 1):
            pages = state.story.pages
            assert [page.has_image for page in pages] == [True] * k + [False] * (4 - k)
            assert state.progress == k / 4

    @pytest.mark.asyncio
    async def test_order_and_count_preserved(self, backend, params):
        controller = StoryController(backend)
        await controller.run(params)

        final = controller.state.story
        assert [page.text for page in final.pages] == [page.text for page in backend.story.pages]
        assert [page.image_url for page in final.pages] == [f"data:image/png;base64,page{i}" for i in range(4)]

    @pytest.mark.asyncio
    async def test_illustrations_requested_sequentially_in_order(self, backend, params):
        controller = StoryController(backend)
        await controller.run(params)

        assert backend.structure_calls == [("a friendly robot", "honesty", "watercolor")]
        assert backend.illustration_calls == [page.visual_prompt for page in backend.story.pages]

    @pytest.mark.asyncio
    async def test_each_update_is_a_new_page_tuple(self, backend, params):
        controller = StoryController(backend)
        states = record(controller)
        await controller.run(params)

        page_tuples = [state.story.pages for state in states[1:6]]
        assert len({id(pages) for pages in page_tuples}) == len(page_tuples)


class TestIllustrationFailures:
    """A failed illustration only affects its own page."""

    @pytest.mark.asyncio
    async def test_failure_is_isolated(self, params):
        backend = FakeBackend(story=make_story(3), fail_pages={1})
        controller = StoryController(backend)
        await controller.run(params)

        state = controller.state
        assert state.status == RunStatus.FINISHED
        assert state.error_message is None
        pages = state.story.pages
        assert pages[0].image_url is not None
        assert pages[1].image_url is None
        assert pages[2].image_url is not None
        assert state.failed_pages == (1,)

    @pytest.mark.asyncio
    async def test_failed_page_publishes_nothing(self, params):
        backend = FakeBackend(story=make_story(3), fail_pages={1})
        controller = StoryController(backend)
        states = record(controller)
        await controller.run(params)

        # writing, illustrating, page 0, page 2, finished
        assert len(states) == 5

    @pytest.mark.asyncio
    async def test_all_illustrations_fail(self, params):
        backend = FakeBackend(fail_pages={0, 1, 2, 3})
        controller = StoryController(backend)
        await controller.run(params)

        assert controller.state.status == RunStatus.FINISHED
        assert controller.state.story.illustrated_count == 0
        assert len(backend.illustration_calls) == 4

    @pytest.mark.asyncio
    async def test_unexpected_exception_is_treated_as_failure(self, params):
        class FlakyBackend(FakeBackend):
            async def generate_illustration(self, visual_prompt):
                self.illustration_calls.append(visual_prompt)
                raise ConnectionError("socket closed")

        controller = StoryController(FlakyBackend(story=make_story(2)))
        await controller.run(params)

        assert controller.state.status == RunStatus.FINISHED
        assert controller.state.failed_pages == (0, 1)


class TestStructureFailure:
    """A failed structure request ends the run in ERROR."""

    @pytest.mark.asyncio
    async def test_status_sequence_and_message(self, params, generation_error):
        backend = FakeBackend(structure_error=generation_error)
        controller = StoryController(backend)
        states = record(controller)

        await controller.run(params)

        assert [s.status for s in states] == [RunStatus.WRITING, RunStatus.ERROR]
        assert controller.state.error_message == "Network unreachable"
        assert controller.state.story is None
        assert backend.illustration_calls == []

    @pytest.mark.asyncio
    async def test_any_exception_message_is_surfaced(self, params):
        controller = StoryController(FakeBackend(structure_error=ConnectionError("connection reset")))
        await controller.run(params)

        assert controller.state.status == RunStatus.ERROR
        assert controller.state.error_message == "connection reset"

    @pytest.mark.asyncio
    async def test_empty_message_uses_fallback(self, params):
        controller = StoryController(FakeBackend(structure_error=RuntimeError()))
        await controller.run(params)

        assert controller.state.error_message == DEFAULT_ERROR_MESSAGE


class TestValidation:
    """Blank keywords never start a run."""

    @pytest.mark.parametrize("keywords", ["", "   ", "\n\t"])
    @pytest.mark.asyncio
    async def test_blank_keywords_rejected(self, backend, keywords):
        controller = StoryController(backend)
        states = record(controller)

        started = await controller.run(StoryParams(keywords=keywords, moral="honesty", style="watercolor"))

        assert started is False
        assert controller.state.status == RunStatus.IDLE
        assert controller.state.error_message == KEYWORDS_REQUIRED_MESSAGE
        assert [s.status for s in states] == [RunStatus.IDLE]
        assert backend.structure_calls == []

    def test_validate_params_raises(self):
        with pytest.raises(InvalidParameterError) as exc_info:
            validate_params(StoryParams(keywords=" ", moral="", style=""))
        assert exc_info.value.message == KEYWORDS_REQUIRED_MESSAGE
        assert exc_info.value.details == {"field": "keywords"}

    def test_validate_params_accepts_keywords(self, params):
        validate_params(params)


class TestReset:
    """Reset returns to IDLE from any terminal state."""

    @pytest.mark.asyncio
    async def test_reset_after_finished(self, backend, params):
        controller = StoryController(backend)
        await controller.run(params)
        assert controller.state.status == RunStatus.FINISHED

        controller.reset()

        assert controller.state.status == RunStatus.IDLE
        assert controller.state.story is None
        assert controller.state.error_message is None
        assert controller.params == StoryParams(keywords="", moral="honesty", style="watercolor")

    @pytest.mark.asyncio
    async def test_reset_after_error(self, params, generation_error):
        controller = StoryController(FakeBackend(structure_error=generation_error))
        await controller.run(params)
        assert controller.state.status == RunStatus.ERROR

        controller.reset()

        assert controller.state.status == RunStatus.IDLE
        assert controller.state.error_message is None
        assert controller.params.keywords == ""
        assert controller.params.moral == "honesty"
        assert controller.params.style == "watercolor"

    @pytest.mark.asyncio
    async def test_new_run_after_reset(self, backend, params):
        controller = StoryController(backend)
        await controller.run(params)
        controller.reset()

        await controller.run(params.with_keywords("a brave turtle"))

        assert controller.state.status == RunStatus.FINISHED
        assert backend.structure_calls[-1][0] == "a brave turtle"

    @pytest.mark.asyncio
    async def test_reset_mid_run_discards_results(self, params):
        gate = asyncio.Event()

        class SlowBackend(FakeBackend):
            async def generate_illustration(self, visual_prompt):
                await gate.wait()
                return await super().generate_illustration(visual_prompt)

        backend = SlowBackend()
        controller = StoryController(backend)
        states = record(controller)

        task = asyncio.create_task(controller.run(params))
        while controller.state.status != RunStatus.ILLUSTRATING:
            await asyncio.sleep(0)

        controller.reset()
        gate.set()
        await task

        assert controller.state.status == RunStatus.IDLE
        assert controller.state.story is None
        # the in-flight request completed, but no further pages were requested
        assert len(backend.illustration_calls) == 1
        assert states[-1].status == RunStatus.IDLE

    @pytest.mark.asyncio
    async def test_reset_while_writing_drops_story(self, params):
        gate = asyncio.Event()

        class SlowBackend(FakeBackend):
            async def generate_structure(self, keywords, moral, style):
                await gate.wait()
                return await super().generate_structure(keywords, moral, style)

        backend = SlowBackend()
        controller = StoryController(backend)
        states = record(controller)

        task = asyncio.create_task(controller.run(params))
        while controller.state.status != RunStatus.WRITING:
            await asyncio.sleep(0)

        controller.reset()
        gate.set()
        assert await task is True

        assert [s.status for s in states] == [RunStatus.WRITING, RunStatus.IDLE]
        assert backend.illustration_calls == []
        assert controller.state.story is None

    @pytest.mark.asyncio
    async def test_reset_while_writing_drops_failure(self, params, generation_error):
        gate = asyncio.Event()

        class SlowBackend(FakeBackend):
            async def generate_structure(self, keywords, moral, style):
                await gate.wait()
                return await super().generate_structure(keywords, moral, style)

        backend = SlowBackend(structure_error=generation_error)
        controller = StoryController(backend)
        states = record(controller)

        task = asyncio.create_task(controller.run(params))
        while controller.state.status != RunStatus.WRITING:
            await asyncio.sleep(0)

        controller.reset()
        gate.set()
        await task

        assert RunStatus.ERROR not in [s.status for s in states]
        assert controller.state.status == RunStatus.IDLE
        assert controller.state.error_message is None
        assert backend.illustration_calls == []

    @pytest.mark.asyncio
    async def test_run_refused_while_busy(self, params):
        gate = asyncio.Event()

        class SlowBackend(FakeBackend):
            async def generate_structure(self, keywords, moral, style):
                await gate.wait()
                return await super().generate_structure(keywords, moral, style)

        backend = SlowBackend()
        controller = StoryController(backend)
        task = asyncio.create_task(controller.run(params))
        while controller.state.status != RunStatus.WRITING:
            await asyncio.sleep(0)

        assert await controller.run(params.with_keywords("another idea")) is False
        gate.set()
        await task

        assert controller.state.status == RunStatus.FINISHED
        assert len(backend.structure_calls) == 1


def test_unsubscribe_stops_updates(backend, params):
    controller = StoryController(backend)
    states = []
    unsubscribe = controller.subscribe(states.append)
    unsubscribe()

    controller.reset()

    assert states == []
