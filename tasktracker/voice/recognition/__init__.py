"""Speech capture providers."""

from tasktracker.voice.recognition.base import (
    ResultCallback,
    SpeechCaptureError,
    SpeechCaptureService,
)

__all__ = [
    "ResultCallback",
    "SpeechCaptureError",
    "SpeechCaptureService",
]
