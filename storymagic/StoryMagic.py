"""
StoryMagic: turn classroom ideas into illustrated picture books with Gemini.
"""

import asyncio
from pathlib import Path

import typer
from rich.markup import escape
from rich.panel import Panel
from rich.progress import BarColumn, Progress, SpinnerColumn, TaskProgressColumn, TextColumn
from rich.table import Table

from .config import Config, load_config
from .console import console, setup_logging
from .errors import ConfigError, FileIOError, InvalidParameterError
from .export import export_story
from .llm_backend import get_backend
from .pipeline import StoryController, validate_params
from .presets import MORAL_OPTIONS, STYLE_PRESETS, resolve_style, style_preset_name
from .schema.cli_integration import generate_cli_option, validate_cli_arguments
from .types import RunState, RunStatus, Story, StoryParams

app = typer.Typer(
    help="StoryMagic: turn classroom ideas into illustrated picture books.\n\n"
    "Set GEMINI_API_KEY before generating.\n"
    "Configuration: use 'storymagic config init' to create a config file with default values.\n"
    "Environment: set STORYMAGIC_CONFIG to use a custom config file location.",
    epilog="Examples:\n\n"
    "  # Generate a storybook from a classroom moment\n"
    "  storymagic generate 'Tom brought a rainbow frog to school'\n\n"
    "  # Pick the moral and a style preset, then export for printing\n"
    "  storymagic generate 'a friendly robot' --moral honesty --style crayon -o ./books\n\n"
    "  # Open the interactive studio\n"
    "  storymagic ui",
    no_args_is_help=True,
)
config_app = typer.Typer(help="Configuration management commands")
app.add_typer(config_app, name="config")

_STATUS_LABELS = {
    RunStatus.WRITING: "✍️  Dreaming up the plot...",
    RunStatus.ILLUSTRATING: "🎨 The magic brush is painting...",
    RunStatus.FINISHED: "[bold green]✨ Storybook complete!",
    RunStatus.ERROR: "[bold red]❌ The magic was interrupted",
}


def _load_settings(verbose: bool | None, debug: bool | None) -> tuple[Config, bool, bool]:
    try:
        config = load_config(verbose=bool(verbose))
    except ConfigError as e:
        console.print(f"[red]Configuration Error:[/red] {e.message}", style="bold")
        raise typer.Exit(1) from None

    verbose = verbose if verbose is not None else config.get_field_value("system", "verbose")
    debug = debug if debug is not None else config.get_field_value("system", "debug")
    setup_logging(verbose=bool(verbose), debug=bool(debug))
    return config, bool(verbose), bool(debug)


def render_story(story: Story, failed_pages: tuple[int, ...] = ()) -> None:
    """Print the storybook page by page."""
    console.print()
    console.print(f"[bold magenta]📖 {escape(story.title)}[/bold magenta]")
    console.print()
    for number, page in enumerate(story.pages, 1):
        if page.has_image:
            subtitle = "[green]illustrated[/green]"
        elif number - 1 in failed_pages:
            subtitle = "[red]no illustration[/red]"
        else:
            subtitle = "[yellow]pending[/yellow]"
        console.print(
            Panel(escape(page.text), title=f"Page {number}", subtitle=subtitle, border_style="yellow", padding=(1, 2))
        )


def run_with_progress(controller: StoryController, params: StoryParams) -> RunState:
    """Run one pipeline pass, showing progress until it finishes or fails."""
    with Progress(
        SpinnerColumn(),
        TextColumn("[bold blue]{task.description}"),
        BarColumn(),
        TaskProgressColumn(),
        console=console,
        transient=False,
    ) as progress:
        task = progress.add_task("Getting ready...", total=100)

        def on_state(state: RunState) -> None:
            label = _STATUS_LABELS.get(state.status)
            if label:
                progress.update(task, description=label, completed=state.progress * 100)

        unsubscribe = controller.subscribe(on_state)
        try:
            asyncio.run(controller.run(params))
        finally:
            unsubscribe()

    return controller.state


@config_app.command(name="init", help="Create a default configuration file in the XDG config directory.")
def init_config(
    force: bool = typer.Option(False, "--force", "-f", help="Overwrite existing config file"),
    config_path: str | None = typer.Option(None, "--path", "-p", help="Custom config file path"),
) -> None:
    """Create a default configuration file."""
    config = Config()
    target_path = config.get_default_config_path() if config_path is None else Path(config_path)

    if target_path.exists() and not force:
        console.print(f"[yellow]Configuration file already exists:[/yellow] {target_path}")
        console.print("[dim]Use --force to overwrite the existing configuration file[/dim]")
        raise typer.Exit(0)

    try:
        created_path = config.create_default_config(target_path)
    except OSError as e:
        console.print(f"[red]Error creating configuration file:[/red] {e}", style="bold")
        raise typer.Exit(1) from None

    console.print(f"[bold green]✅ Configuration file created:[/bold green] {created_path}")
    console.print()
    console.print("[bold]Configuration file locations (in priority order):[/bold]")
    for i, search_path in enumerate(config.get_config_paths(), 1):
        if search_path == created_path:
            console.print(f"  {i}. {search_path} [bold green](created here)[/bold green]")
        else:
            console.print(f"  {i}. {search_path}")


@app.command("presets", help="List the moral and art-style presets.")
def show_presets() -> None:
    table = Table(title="Art styles", show_header=True, header_style="bold magenta")
    table.add_column("Preset", style="cyan", no_wrap=True)
    table.add_column("Style prompt", style="white")
    for name, prompt in STYLE_PRESETS.items():
        table.add_row(name, prompt)
    console.print(table)

    console.print("\n[bold]Suggested morals:[/bold]")
    for moral in MORAL_OPTIONS:
        console.print(f"  • {moral}")


@app.command(
    "generate",
    context_settings={"help_option_names": ["-h", "--help"]},
    help="Write and illustrate a storybook from keywords",
)
def generate(
    keywords: str = typer.Argument(..., help="Story keywords, e.g. a classroom moment"),
    moral: str | None = generate_cli_option("moral"),
    style: str | None = generate_cli_option("style"),
    language: str | None = generate_cli_option("language"),
    output_dir: str | None = generate_cli_option("output_dir"),
    verbose: bool | None = typer.Option(None, "--verbose", "-v", help="Enable verbose output"),
    debug: bool | None = typer.Option(None, "--debug", help="Enable debug logging"),
) -> None:
    validation_errors = validate_cli_arguments(moral=moral, style=style, language=language, output_dir=output_dir)
    if validation_errors:
        console.print("[red]CLI Argument Validation Errors:[/red]", style="bold")
        for error in validation_errors:
            console.print(f"  - {error}", style="red")
        raise typer.Exit(1)

    config, verbose, _ = _load_settings(verbose, debug)
    moral = moral if moral is not None else config.get_field_value("story", "moral")
    style = resolve_style(style if style is not None else config.get_field_value("story", "style"))
    output_dir = output_dir if output_dir is not None else (config.get_field_value("output", "output_dir") or None)
    if language is not None:
        config.config.set("story", "language", language)

    params = StoryParams(keywords=keywords, moral=moral, style=style)
    try:
        validate_params(params)
    except InvalidParameterError as e:
        console.print(f"[red]Error:[/red] {e.message}", style="bold")
        raise typer.Exit(1) from None

    if verbose:
        console.print(f"[bold]Keywords:[/bold] {escape(params.keywords)}")
        console.print(f"[bold]Moral:[/bold] {escape(params.moral)}")
        preset = style_preset_name(params.style)
        console.print(f"[bold]Style:[/bold] {escape(preset or params.style)}")

    controller = StoryController(get_backend(config), params)
    state = run_with_progress(controller, params)

    if state.status == RunStatus.ERROR:
        console.print(f"[red]Error:[/red] {escape(state.error_message or '')}", style="bold")
        raise typer.Exit(1)

    assert state.story is not None
    render_story(state.story, state.failed_pages)
    if state.failed_pages:
        pages = ", ".join(str(index + 1) for index in state.failed_pages)
        console.print(f"[yellow]Illustrations could not be drawn for page(s): {pages}[/yellow]")

    if output_dir:
        try:
            written = export_story(state.story, output_dir, params)
        except FileIOError as e:
            console.print(f"[red]Error:[/red] {e.message}", style="bold")
            raise typer.Exit(1) from None
        console.print(f"\n[bold cyan]Printable storybook saved to:[/bold cyan] {written[0]}")


@app.command("ui", help="Open the interactive storybook studio")
def ui(
    output_dir: str | None = generate_cli_option("output_dir"),
    verbose: bool | None = typer.Option(None, "--verbose", "-v", help="Enable verbose output"),
    debug: bool | None = typer.Option(None, "--debug", help="Enable debug logging"),
) -> None:
    from .tui import run_studio

    config, _, _ = _load_settings(verbose, debug)
    params = StoryParams(
        keywords="",
        moral=config.get_field_value("story", "moral"),
        style=resolve_style(config.get_field_value("story", "style")),
    )
    output_dir = output_dir if output_dir is not None else (config.get_field_value("output", "output_dir") or None)
    run_studio(StoryController(get_backend(config), params), output_dir=output_dir)
