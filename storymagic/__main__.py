"""Entry point for ``python -m storymagic``."""

from .StoryMagic import app

if __name__ == "__main__":
    app()
