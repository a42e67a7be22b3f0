"""Voice input state machine.

Serializes one capture at a time:

    idle -> initializing -> listening -> processing -> confirmation
         -> creating -> success | error

Every failure lands in the error state with a message for the user;
nothing here raises for a recognition or persistence problem. Each
start() opens a new session, and callbacks from an older session
(arriving after cancel()) are ignored, so a cancelled capture never
produces a task.
"""

from __future__ import annotations

import inspect
import sqlite3
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Callable, Optional

from tasktracker.logging_config import get_logger
from tasktracker.voice.models import ParsedVoiceInput, TranscriptionResult
from tasktracker.voice.parser import VoiceParser, get_default_parser
from tasktracker.voice.recognition.base import (
    DEFAULT_LISTEN_TIMEOUT,
    SpeechCaptureError,
    SpeechCaptureService,
)

logger = get_logger(__name__)

TaskCreator = Callable[[ParsedVoiceInput, str], Any]

NOT_AVAILABLE_MESSAGE = "Speech recognition is not available on this device"
PERMISSION_DENIED_MESSAGE = "Microphone permission is required for voice input"
NO_SPEECH_MESSAGE = "No speech detected. Please try again."
LOW_CONFIDENCE_MESSAGE = "Sorry, I didn't catch that clearly. Please try again or type the task."
INVALID_EDIT_MESSAGE = "That change could not be applied"


class VoiceInputPhase(str, Enum):
    IDLE = "idle"
    INITIALIZING = "initializing"
    LISTENING = "listening"
    PROCESSING = "processing"
    CONFIRMATION = "confirmation"
    CREATING = "creating"
    SUCCESS = "success"
    ERROR = "error"


# Phases in which the capture service may still be running
CAPTURING = (VoiceInputPhase.INITIALIZING, VoiceInputPhase.LISTENING, VoiceInputPhase.PROCESSING)


@dataclass(frozen=True)
class VoiceInputState:
    """One state of the capture flow: a phase tag plus its payload.

    Payload by phase:
        processing:    partial_text
        confirmation:  parsed (message when an edit was rejected)
        creating:      parsed
        success:       parsed, task_id
        error:         message (parsed when a low-confidence parse was rejected)
    """

    phase: VoiceInputPhase
    partial_text: str = ""
    parsed: Optional[ParsedVoiceInput] = None
    task_id: Optional[str] = None
    message: Optional[str] = None

    @classmethod
    def idle(cls) -> VoiceInputState:
        return cls(VoiceInputPhase.IDLE)

    @classmethod
    def initializing(cls) -> VoiceInputState:
        return cls(VoiceInputPhase.INITIALIZING)

    @classmethod
    def listening(cls) -> VoiceInputState:
        return cls(VoiceInputPhase.LISTENING)

    @classmethod
    def processing(cls, partial_text: str) -> VoiceInputState:
        return cls(VoiceInputPhase.PROCESSING, partial_text=partial_text)

    @classmethod
    def confirmation(cls, parsed: ParsedVoiceInput, message: Optional[str] = None) -> VoiceInputState:
        return cls(VoiceInputPhase.CONFIRMATION, parsed=parsed, message=message)

    @classmethod
    def creating(cls, parsed: ParsedVoiceInput) -> VoiceInputState:
        return cls(VoiceInputPhase.CREATING, parsed=parsed)

    @classmethod
    def success(cls, parsed: ParsedVoiceInput, task_id: str) -> VoiceInputState:
        return cls(VoiceInputPhase.SUCCESS, parsed=parsed, task_id=task_id)

    @classmethod
    def error(cls, message: str, parsed: Optional[ParsedVoiceInput] = None) -> VoiceInputState:
        return cls(VoiceInputPhase.ERROR, parsed=parsed, message=message)

    def to_dict(self) -> dict[str, Any]:
        return {
            "phase": self.phase.value,
            "partial_text": self.partial_text,
            "parsed": self.parsed.to_dict() if self.parsed else None,
            "task_id": self.task_id,
            "message": self.message,
        }


def persist_voice_task(parsed: ParsedVoiceInput, user_id: str) -> dict[str, Any]:
    """Default task creator: resolve the category in the catalog and store."""
    from tasktracker.tasks.categories import get_category_by_name
    from tasktracker.tasks.manager import create_task_from_voice

    category_id = None
    if parsed.suggested_category:
        category = get_category_by_name(parsed.suggested_category)
        if category["success"]:
            category_id = category["data"]["id"]

    return create_task_from_voice(parsed, user_id, category_id)


class VoiceInputController:
    """Drives one voice capture from microphone to stored task."""

    def __init__(
        self,
        speech: SpeechCaptureService,
        parser: Optional[VoiceParser] = None,
        clock: Callable[[], datetime] = datetime.now,
        confidence_threshold: Optional[float] = None,
        create_task: Optional[TaskCreator] = None,
        listen_timeout: float = DEFAULT_LISTEN_TIMEOUT,
        on_state_change: Optional[Callable[[VoiceInputState], None]] = None,
    ):
        self._speech = speech
        self._parser = parser or get_default_parser()
        self._clock = clock
        if confidence_threshold is None:
            confidence_threshold = self._parser.config.parser.low_confidence_threshold
        self._threshold = confidence_threshold
        self._create_task = create_task or persist_voice_task
        self._listen_timeout = listen_timeout
        self._on_state_change = on_state_change

        self._session = 0
        self._state = VoiceInputState.idle()

    @property
    def state(self) -> VoiceInputState:
        return self._state

    def _transition(self, state: VoiceInputState) -> VoiceInputState:
        logger.debug(
            "voice_state_changed",
            session=self._session,
            from_phase=self._state.phase.value,
            to_phase=state.phase.value,
            message=state.message,
        )
        self._state = state
        if self._on_state_change is not None:
            self._on_state_change(state)
        return state

    def _is_current(self, session: int) -> bool:
        return session == self._session

    # -------------------------------------------------------------------------
    # Capture
    # -------------------------------------------------------------------------

    async def start(self) -> VoiceInputState:
        """Check availability and permission, then begin listening."""
        if self._state.phase in CAPTURING or self._state.phase == VoiceInputPhase.CREATING:
            return self._state

        self._session += 1
        session = self._session
        self._transition(VoiceInputState.initializing())

        try:
            if not await self._speech.is_available():
                if self._is_current(session):
                    self._transition(VoiceInputState.error(NOT_AVAILABLE_MESSAGE))
                return self._state

            granted = await self._speech.has_permission() or await self._speech.request_permission()
            if not self._is_current(session):
                return self._state
            if not granted:
                return self._transition(VoiceInputState.error(PERMISSION_DENIED_MESSAGE))

            self._transition(VoiceInputState.listening())
            await self._speech.start_listening(
                on_result=lambda result: self._on_result(session, result),
                on_partial=lambda result: self._on_partial(session, result),
                on_error=lambda message: self._on_error(session, message),
                timeout=self._listen_timeout,
            )
        except SpeechCaptureError as e:
            logger.warning("speech_capture_failed", provider=self._speech.name, error=str(e))
            if self._is_current(session):
                self._transition(VoiceInputState.error(str(e) or NOT_AVAILABLE_MESSAGE))

        return self._state

    async def stop(self) -> VoiceInputState:
        """Stop listening; the service delivers its final result."""
        if self._state.phase in (VoiceInputPhase.LISTENING, VoiceInputPhase.PROCESSING):
            await self._speech.stop_listening()
        return self._state

    def _on_partial(self, session: int, result: TranscriptionResult) -> None:
        if not self._is_current(session) or self._state.phase not in (
            VoiceInputPhase.LISTENING,
            VoiceInputPhase.PROCESSING,
        ):
            return
        self._transition(VoiceInputState.processing(result.transcript))

    def _on_result(self, session: int, result: TranscriptionResult) -> None:
        if not self._is_current(session) or self._state.phase not in (
            VoiceInputPhase.LISTENING,
            VoiceInputPhase.PROCESSING,
        ):
            return

        transcript = result.transcript.strip()
        if not transcript:
            self._transition(VoiceInputState.error(NO_SPEECH_MESSAGE))
            return

        parsed = self._parser.parse(transcript, self._clock())
        if parsed.confidence < self._threshold:
            logger.info(
                "voice_parse_rejected",
                confidence=parsed.confidence,
                threshold=self._threshold,
            )
            self._transition(VoiceInputState.error(LOW_CONFIDENCE_MESSAGE, parsed=parsed))
            return

        self._transition(VoiceInputState.confirmation(parsed))

    def _on_error(self, session: int, message: str) -> None:
        if not self._is_current(session) or self._state.phase not in CAPTURING:
            return
        self._transition(VoiceInputState.error(message or NO_SPEECH_MESSAGE))

    # -------------------------------------------------------------------------
    # Confirmation
    # -------------------------------------------------------------------------

    def edit(self, **changes: Any) -> VoiceInputState:
        """Apply user corrections on the confirmation screen.

        A rejected correction (blank title, unknown priority) keeps the
        current parse on screen with a message.
        """
        if self._state.phase != VoiceInputPhase.CONFIRMATION:
            return self._state
        try:
            parsed = self._state.parsed.copy_with(
                weights=self._parser.config.confidence_weights,
                **changes,
            )
        except ValueError as e:
            logger.warning("voice_edit_rejected", fields=sorted(changes), error=str(e))
            return self._transition(
                VoiceInputState.confirmation(self._state.parsed, message=f"{INVALID_EDIT_MESSAGE}: {e}")
            )
        return self._transition(VoiceInputState.confirmation(parsed))

    async def confirm(self, user_id: str) -> VoiceInputState:
        """Persist the confirmed parse as a task."""
        if self._state.phase != VoiceInputPhase.CONFIRMATION:
            return self._state

        session = self._session
        parsed = self._state.parsed
        self._transition(VoiceInputState.creating(parsed))

        try:
            result = self._create_task(parsed, user_id)
            if inspect.isawaitable(result):
                result = await result
        except sqlite3.Error as e:
            logger.exception("voice_task_create_failed", user_id=user_id)
            result = {"success": False, "error": f"Could not save task: {e}"}

        if not self._is_current(session):
            return self._state

        if result.get("success"):
            task_id = result["data"]["task_id"]
            return self._transition(VoiceInputState.success(parsed, task_id))

        return self._transition(
            VoiceInputState.error(result.get("error") or "Could not save task", parsed=parsed)
        )

    async def cancel(self) -> VoiceInputState:
        """Abandon the current capture. Nothing is persisted."""
        capturing = self._state.phase in CAPTURING
        self._session += 1
        if capturing:
            await self._speech.cancel()
        return self._transition(VoiceInputState.idle())

    async def reset(self) -> VoiceInputState:
        """Return to idle after success or error."""
        return await self.cancel()
