"""Abstract base class for speech capture services.

The capture service owns the microphone, permission prompts and the
listening timeout. It hands transcripts back through callbacks; the
controller decides what to do with them.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Callable, Optional

from tasktracker.voice.models import TranscriptionResult

ResultCallback = Callable[[TranscriptionResult], None]
ErrorCallback = Callable[[str], None]

DEFAULT_LISTEN_TIMEOUT = 30.0


class SpeechCaptureError(Exception):
    """Raised by a capture service that cannot start listening."""


class SpeechCaptureService(ABC):
    """Abstract base for all speech capture providers."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Provider identifier (e.g. 'web_speech', 'android')."""

    @abstractmethod
    async def is_available(self) -> bool:
        """Whether speech recognition exists on this device at all."""

    @abstractmethod
    async def has_permission(self) -> bool:
        """Whether microphone access has already been granted."""

    async def request_permission(self) -> bool:
        """Prompt for microphone access. Override where a prompt exists."""
        return await self.has_permission()

    @abstractmethod
    async def start_listening(
        self,
        on_result: ResultCallback,
        on_partial: Optional[ResultCallback] = None,
        on_error: Optional[ErrorCallback] = None,
        timeout: float = DEFAULT_LISTEN_TIMEOUT,
        language: str = "en-US",
    ) -> None:
        """Begin capture.

        on_partial receives interim transcripts, on_result the final one.
        on_error receives a message on recognition failure or timeout.
        """

    @abstractmethod
    async def stop_listening(self) -> None:
        """Stop capture, delivering a final result if one is pending."""

    async def cancel(self) -> None:
        """Stop capture and discard anything pending."""
        await self.stop_listening()
