"""Voice input parsing: segmentation, date/time resolution, classification."""

from tasktracker.voice.parser.voice_parser import (
    VoiceParser,
    get_default_parser,
    get_parsing_stats,
    parse,
)

__all__ = [
    "VoiceParser",
    "get_default_parser",
    "get_parsing_stats",
    "parse",
]
