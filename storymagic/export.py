"""Printable export of a finished storybook.

Writes ``story.html`` (illustrations embedded as data URLs, laid out one page
per printed sheet) and ``page_<n>.png`` for every illustrated page.
"""

import base64
import binascii
import logging
from datetime import datetime
from io import BytesIO
from pathlib import Path

from jinja2 import Environment, PackageLoader, select_autoescape
from PIL import Image, UnidentifiedImageError

from .errors import FileIOError
from .types import Story, StoryParams

logger = logging.getLogger(__name__)

_env: Environment | None = None


def _environment() -> Environment:
    global _env
    if _env is None:
        _env = Environment(
            loader=PackageLoader("storymagic", "templates"),
            autoescape=select_autoescape(["html", "j2"]),
        )
    return _env


def generate_default_output_dir() -> str:
    """Generate a timestamped output directory name."""
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    return f"storymagic_output_{timestamp}"


def decode_data_url(data_url: str) -> bytes:
    """Return the binary payload of a base64 data URL.

    Raises:
        ValueError: If the string is not a base64 data URL.
    """
    header, sep, payload = data_url.partition(",")
    if not sep or not header.startswith("data:") or not header.endswith(";base64"):
        raise ValueError("Not a base64 data URL")
    try:
        return base64.b64decode(payload, validate=True)
    except binascii.Error as e:
        raise ValueError(f"Invalid base64 payload: {e}") from e


def render_html(story: Story, params: StoryParams | None = None) -> str:
    """Render the printable HTML storybook."""
    template = _environment().get_template("storybook.html.j2")
    return template.render(story=story, params=params)


def export_story(story: Story, output_dir: str | Path, params: StoryParams | None = None) -> list[Path]:
    """
    Write the storybook to ``output_dir``.

    Returns:
        list[Path]: The files written, HTML first.

    Raises:
        FileIOError: If the directory or a file cannot be written.
    """
    out = Path(output_dir)
    written: list[Path] = []

    try:
        out.mkdir(parents=True, exist_ok=True)
        html_path = out / "story.html"
        html_path.write_text(render_html(story, params), encoding="utf-8")
        written.append(html_path)
    except OSError as e:
        raise FileIOError("write", str(out), details={"error": str(e)}) from e

    for number, page in enumerate(story.pages, 1):
        if not page.image_url:
            continue
        image_path = out / f"page_{number}.png"
        try:
            image = Image.open(BytesIO(decode_data_url(page.image_url)))
            image.save(image_path, format="PNG")
        except (ValueError, UnidentifiedImageError) as e:
            logger.warning("Skipping page %d image: %s", number, e)
            continue
        except OSError as e:
            raise FileIOError("write", str(image_path), details={"error": str(e)}) from e
        written.append(image_path)

    logger.info("Exported storybook to %s", out)
    return written
