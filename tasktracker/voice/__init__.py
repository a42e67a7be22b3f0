"""Voice Input - hands-free task capture

Philosophy:
    The thought "I need to call the dentist" lasts about four seconds.
    Voice capture gets it into the task list before it evaporates, and the
    parser does the tedious part: pulling out when, what kind, and how
    urgent, so the user only has to say "yes, that's right".

Components:
    models.py: ParsedVoiceInput, Priority, ParsingStats and match types
    config.py: Keyword tables and parser settings (args/voice.yaml)
    parser/: Title segmentation, date/time resolution, classifiers, public API
    recognition/: Speech capture service contract
    controller.py: Voice input state machine (listen -> parse -> confirm -> create)

Design Rules:
    - The parser is a pure function of (text, reference instant)
    - It never raises; bad input degrades confidence instead
    - It never asserts "medium" priority or a default category; callers do

Usage:
    from datetime import datetime
    from tasktracker.voice.parser import parse

    result = parse("Remind me to buy groceries tomorrow", datetime(2024, 3, 15, 10))
    result.task_title       # "Buy groceries"
    result.parsed_date      # date(2024, 3, 16)
"""

from pathlib import Path

# Path constants
PROJECT_ROOT = Path(__file__).parent.parent.parent
CONFIG_PATH = PROJECT_ROOT / "args" / "voice.yaml"

__all__ = [
    "CONFIG_PATH",
    "PROJECT_ROOT",
]
