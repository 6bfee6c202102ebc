"""
StoryMagic: classroom picture-book generator.

Writes a 4-5 page children's story from a few keywords, a moral and an art
style with Gemini, then illustrates every page, showing the book as it fills
in.

CLI Usage:
    $ storymagic generate "Tom brought a rainbow frog to school"
    $ storymagic ui
    $ python -m storymagic generate "a friendly robot" --moral honesty
"""

from .StoryMagic import app

__version__ = "0.1.0"

__all__ = [
    "app",
]
