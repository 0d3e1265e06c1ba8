"""Command line and rich rendering for Johnson."""

from .playback import play_resolution
from .cli import build_parser, main

__all__ = [
    "play_resolution",
    "build_parser",
    "main",
]
