"""Task Tracker - voice-first task capture for forgetful people.

Subpackages:
    voice/: Utterance parsing, speech capture contract, voice input state machine
    tasks/: Task store and category catalog (sqlite)
"""

__version__ = "0.4.0"
