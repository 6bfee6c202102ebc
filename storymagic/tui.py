"""Interactive storybook studio using Textual.

Views follow the run status published by ``StoryController``:

- **Form** (IDLE): keywords, moral and style, plus the generate button.
  Blank keywords show an inline message and nothing else happens.
- **Progress** (WRITING / ILLUSTRATING): what the pipeline is doing and the
  fraction of pages illustrated so far.
- **Story** (ILLUSTRATING with a story / FINISHED): the title and pages as
  they fill in. Once finished the story can be exported for printing.
- **Error** (ERROR): the error message and a retry button that resets.
"""

from __future__ import annotations

from pathlib import Path

from rich.markup import escape
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical, VerticalScroll
from textual.widgets import Button, Footer, Header, Input, Label, ProgressBar, Select, Static

from .errors import FileIOError
from .export import export_story, generate_default_output_dir
from .pipeline import StoryController
from .presets import MORAL_OPTIONS, STYLE_PRESETS
from .types import RunState, RunStatus, StoryParams


def _page_markup(number: int, text: str, has_image: bool, failed: bool) -> str:
    if has_image:
        marker = "[green]🖼  illustrated[/green]"
    elif failed:
        marker = "[red]no illustration[/red]"
    else:
        marker = "[yellow]drawing the illustration...[/yellow]"
    return f"[bold]Page {number}[/bold]  {marker}\n\n{escape(text)}"


class StoryMagicApp(App[None]):
    """Full-screen storybook studio."""

    TITLE = "StoryMagic: Classroom Picture Book Studio"

    CSS = """
    .view {
        display: none;
        height: 1fr;
        padding: 1 2;
    }

    .view.visible {
        display: block;
    }

    #form-view Input, #form-view Select {
        margin-bottom: 1;
    }

    #form-error {
        color: $error;
        margin-top: 1;
    }

    #progress-view {
        height: auto;
        align: center middle;
    }

    #story-title {
        text-style: bold;
        color: $accent;
        margin-bottom: 1;
    }

    .story-page {
        border: round $primary;
        padding: 1 2;
        margin-bottom: 1;
    }

    #story-actions, #error-actions {
        height: auto;
        margin-top: 1;
    }

    #error-message {
        color: $error;
        margin-bottom: 1;
    }
    """

    BINDINGS = [
        Binding("ctrl+r", "reset", "Start over", show=True),
        Binding("ctrl+p", "export", "Print / export", show=True),
        Binding("ctrl+q", "quit", "Quit", show=True, priority=True),
    ]

    def __init__(self, controller: StoryController, output_dir: str | None = None) -> None:
        super().__init__()
        self.controller = controller
        self.output_dir = output_dir
        self.exported_files: list[Path] = []
        self._unsubscribe = None
        self._page_widgets: list[Static] = []

    def compose(self) -> ComposeResult:
        params = self.controller.params
        style_options = [(name, prompt) for name, prompt in STYLE_PRESETS.items()]
        if params.style not in STYLE_PRESETS.values():
            style_options.append(("custom", params.style))
        moral_options = [(moral, moral) for moral in MORAL_OPTIONS]
        if params.moral not in MORAL_OPTIONS:
            moral_options.append((params.moral, params.moral))

        yield Header()
        with Vertical(id="form-view", classes="view"):
            yield Label("Story keywords")
            yield Input(
                value=params.keywords,
                placeholder="A classroom moment, e.g. Tom brought a rainbow frog, aliens visit the cafeteria...",
                id="keywords",
            )
            yield Label("Moral")
            yield Select(moral_options, value=params.moral, allow_blank=False, id="moral")
            yield Label("Art style")
            yield Select(style_options, value=params.style, allow_blank=False, id="style")
            yield Button("Cast the story spell", id="generate", variant="primary")
            yield Static("", id="form-error")
        with Vertical(id="progress-view", classes="view"):
            yield Static("", id="progress-label")
            yield ProgressBar(total=100, show_eta=False, id="progress-bar")
        with VerticalScroll(id="story-view", classes="view"):
            yield Static("", id="story-title")
            yield Vertical(id="story-pages")
            with Horizontal(id="story-actions"):
                yield Button("Start over", id="reset")
                yield Button("Print / export", id="export", variant="success")
        with Vertical(id="error-view", classes="view"):
            yield Static("", id="error-message")
            with Horizontal(id="error-actions"):
                yield Button("Try again", id="retry", variant="warning")
        yield Footer()

    def on_mount(self) -> None:
        self._unsubscribe = self.controller.subscribe(self.render_state)
        self.render_state(self.controller.state)
        self.query_one("#keywords", Input).focus()

    def on_unmount(self) -> None:
        if self._unsubscribe:
            self._unsubscribe()

    # -- state rendering -------------------------------------------------------

    def _show(self, view_id: str, visible: bool) -> None:
        self.query_one(f"#{view_id}").set_class(visible, "visible")

    def render_state(self, state: RunState) -> None:
        """Show the views matching ``state`` and fill them in."""
        status = state.status
        self._show("form-view", status == RunStatus.IDLE)
        self._show("progress-view", status.is_busy)
        self._show(
            "story-view", status == RunStatus.FINISHED or (status == RunStatus.ILLUSTRATING and state.story is not None)
        )
        self._show("error-view", status == RunStatus.ERROR)

        if status == RunStatus.IDLE:
            self.query_one("#form-error", Static).update(state.error_message or "")
            self.query_one("#keywords", Input).value = self.controller.params.keywords
        elif status == RunStatus.ERROR:
            self.query_one("#error-message", Static).update(f"⚠ {escape(state.error_message or '')}")

        if status.is_busy:
            label = "Dreaming up the plot..." if status == RunStatus.WRITING else "The magic brush is painting..."
            self.query_one("#progress-label", Static).update(f"[bold]{label}[/bold]")
            self.query_one("#progress-bar", ProgressBar).update(progress=state.progress * 100)

        self.query_one("#export", Button).display = status == RunStatus.FINISHED
        if state.story and status in (RunStatus.ILLUSTRATING, RunStatus.FINISHED):
            self._render_story(state)

    def _render_story(self, state: RunState) -> None:
        story = state.story
        assert story is not None
        self.query_one("#story-title", Static).update(f"📖 {escape(story.title)}")
        container = self.query_one("#story-pages", Vertical)
        for index, page in enumerate(story.pages):
            markup = _page_markup(index + 1, page.text, page.has_image, index in state.failed_pages)
            if index < len(self._page_widgets):
                self._page_widgets[index].update(markup)
            else:
                widget = Static(markup, classes="story-page")
                self._page_widgets.append(widget)
                container.mount(widget)

    # -- actions ---------------------------------------------------------------

    def on_button_pressed(self, event: Button.Pressed) -> None:
        button_id = event.button.id
        if button_id == "generate":
            self.action_generate()
        elif button_id in ("reset", "retry"):
            self.action_reset()
        elif button_id == "export":
            self.action_export()

    def on_input_submitted(self, event: Input.Submitted) -> None:
        if event.input.id == "keywords":
            self.action_generate()

    def action_generate(self) -> None:
        """Start a run with the current form values."""
        if self.controller.state.status != RunStatus.IDLE:
            return
        params = StoryParams(
            keywords=self.query_one("#keywords", Input).value,
            moral=str(self.query_one("#moral", Select).value),
            style=str(self.query_one("#style", Select).value),
        )
        self.run_worker(self.controller.run(params), name="story-run")

    def action_reset(self) -> None:
        """Go back to the form, keeping moral and style."""
        if self.controller.state.status == RunStatus.IDLE:
            return
        self.query_one("#story-pages", Vertical).remove_children()
        self._page_widgets = []
        self.controller.reset()

    def action_export(self) -> None:
        """Write the printable storybook to the output directory."""
        state = self.controller.state
        if state.status != RunStatus.FINISHED or state.story is None:
            return
        output_dir = self.output_dir or generate_default_output_dir()
        try:
            self.exported_files = export_story(state.story, output_dir, self.controller.params)
        except FileIOError as e:
            self.notify(e.message, severity="error")
            return
        self.notify(f"Storybook saved to {self.exported_files[0]}")


def run_studio(controller: StoryController, output_dir: str | None = None) -> None:
    """Run the interactive studio until the user quits."""
    StoryMagicApp(controller, output_dir=output_dir).run()
