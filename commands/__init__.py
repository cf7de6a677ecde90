"""Command handlers invoked by the CLI entry point.

- anime: interactive search, chapter selection and playback session
"""

from commands import anime

__all__ = ["anime"]
