"""
Capture subsystem: voice transcription and screen capture.

Both capabilities are permission-gated and independently toggleable. Each
is an explicit two-state machine; transitions only happen through the
named methods below, so combinations such as "still frame while idle"
fail with ``NotReady`` instead of reaching platform code.

The platform side (speech engine, display media) is injected through the
small protocols in this module.
"""
from __future__ import annotations

import base64
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional, Protocol, Sequence

from interviewai.app.core.logging_config import get_logger
from interviewai.client.errors import NotReady, PermissionDenied, UnsupportedFeature

logger = get_logger("client.capture")

Notify = Callable[[str], None]

# Engine error codes that mean the user (or OS) refused the microphone
PERMISSION_ERROR_CODES = frozenset({"not-allowed", "service-not-allowed"})


def _log_notice(message: str) -> None:
    logger.info("notice: %s", message)


# --- Voice transcription ---


@dataclass(frozen=True)
class SpeechResult:
    transcript: str
    is_final: bool


class SpeechEngine(Protocol):
    """Continuous recognizer. Reports back through the listener it was built with."""

    def start(self) -> None: ...

    def stop(self) -> None: ...


class SpeechListener(Protocol):
    def on_result(self, results: Sequence[SpeechResult], result_index: int = 0) -> None: ...

    def on_error(self, code: str) -> None: ...

    def on_end(self) -> None: ...


# (language, listener) -> engine, or None when the platform has no recognizer
SpeechEngineFactory = Callable[[str, SpeechListener], Optional[SpeechEngine]]


class TranscriptionState(str, Enum):
    IDLE = "idle"
    LISTENING = "listening"


class TranscriptionMachine:
    def __init__(self, engine_factory: SpeechEngineFactory, language: str = "en-US", notify: Notify | None = None):
        self.engine_factory = engine_factory
        self.language = language
        self.notify = notify or _log_notice
        self.state = TranscriptionState.IDLE
        self.interim_text = ""
        self.pending_text = ""
        self.restarts = 0
        self._engine: SpeechEngine | None = None

    @property
    def listening(self) -> bool:
        return self.state is TranscriptionState.LISTENING

    def start(self) -> None:
        """idle -> listening. Raises UnsupportedFeature / PermissionDenied and stays idle."""
        if self.listening:
            return
        engine = self.engine_factory(self.language, self)
        if engine is None:
            raise UnsupportedFeature("Speech recognition is not supported on this platform.")
        self._engine = engine
        self.state = TranscriptionState.LISTENING
        try:
            engine.start()
        except PermissionDenied:
            self._release()
            raise
        logger.info("Speech recognition started language=%s", self.language)

    def stop(self) -> None:
        """listening -> idle. Drops the engine handle so the next start gets a fresh one."""
        if not self.listening:
            return
        engine = self._engine
        self._release()
        if engine is not None:
            try:
                engine.stop()
            except Exception as e:
                logger.warning("Error stopping speech recognition: %s", e)
        logger.info("Speech recognition stopped")

    def _release(self) -> None:
        self.state = TranscriptionState.IDLE
        self._engine = None
        self.interim_text = ""

    # Engine callbacks

    def on_result(self, results: Sequence[SpeechResult], result_index: int = 0) -> None:
        interim = ""
        for result in results[result_index:]:
            if result.is_final:
                self.pending_text = f"{self.pending_text} {result.transcript}".strip()
            else:
                interim += result.transcript
        self.interim_text = interim

    def on_error(self, code: str) -> None:
        if code in PERMISSION_ERROR_CODES:
            self.stop()
            self.notify("Microphone access was denied. You can still type your questions.")
            return
        # Transient (no-speech, network, aborted): the engine ends and on_end restarts it
        logger.warning("Speech recognition error: %s", code)

    def on_end(self) -> None:
        if not self.listening or self._engine is None:
            return
        self.restarts += 1
        logger.debug("Speech recognition ended unexpectedly, restarting (%d)", self.restarts)
        try:
            self._engine.start()
        except PermissionDenied:
            self.stop()
            self.notify("Microphone access was denied. You can still type your questions.")

    # Pending input buffer

    def take_pending(self) -> str:
        text = self.pending_text.strip()
        self.pending_text = ""
        return text

    def clear_pending(self) -> None:
        self.pending_text = ""
        self.interim_text = ""


# --- Screen capture ---


class ScreenStream(Protocol):
    """A granted display-media stream plus its preview surface."""

    @property
    def width(self) -> int: ...

    @property
    def height(self) -> int: ...

    @property
    def preview_live(self) -> bool: ...

    def on_ended(self, callback: Callable[[], None]) -> None: ...

    def grab_frame(self) -> bytes: ...

    def refresh_preview(self) -> None: ...

    def stop(self) -> None: ...


class DisplayMediaSource(Protocol):
    async def request_stream(self) -> ScreenStream:
        """Prompt the user. Raises PermissionDenied when they decline."""
        ...


class CaptureState(str, Enum):
    IDLE = "idle"
    SHARING = "sharing"


class ScreenCaptureMachine:
    def __init__(self, source: DisplayMediaSource, notify: Notify | None = None):
        self.source = source
        self.notify = notify or _log_notice
        self.state = CaptureState.IDLE
        self.last_still: str | None = None
        self._stream: ScreenStream | None = None

    @property
    def sharing(self) -> bool:
        return self.state is CaptureState.SHARING

    async def start(self) -> bool:
        """idle -> sharing. Returns False (and stays idle) when permission is denied."""
        if self.sharing:
            return True
        try:
            stream = await self.source.request_stream()
        except PermissionDenied as e:
            logger.info("Screen sharing declined: %s", e)
            self.notify("Screen sharing was cancelled or not available. You can still use voice features.")
            return False
        self._enter_sharing(stream)
        logger.info("Screen sharing started %sx%s", stream.width, stream.height)
        return True

    def stop(self) -> None:
        """sharing -> idle, stopping the underlying tracks."""
        if not self.sharing:
            return
        stream = self._stream
        self._enter_idle()
        if stream is not None:
            stream.stop()
        logger.info("Screen sharing stopped")

    def _enter_sharing(self, stream: ScreenStream) -> None:
        self._stream = stream
        self.state = CaptureState.SHARING
        stream.on_ended(lambda: self._handle_track_ended(stream))

    def _enter_idle(self) -> None:
        self._stream = None
        self.state = CaptureState.IDLE
        self.last_still = None

    def _handle_track_ended(self, stream: ScreenStream) -> None:
        if stream is not self._stream:
            return
        self._enter_idle()
        self.notify('Screen sharing stopped. Click "Connect" again to restart screen sharing.')

    def capture_still(self) -> str:
        """Snapshot of the current frame as a PNG data URL."""
        if not self.sharing or self._stream is None:
            raise NotReady("No screen sharing active. Please start screen sharing first.")
        if self._stream.width == 0 or self._stream.height == 0:
            raise NotReady("Video not ready yet. Please wait a moment and try again.")
        png = self._stream.grab_frame()
        self.last_still = "data:image/png;base64," + base64.b64encode(png).decode("ascii")
        return self.last_still

    def on_visibility_regained(self) -> bool:
        """Re-attach the preview after the page regains focus. Best effort."""
        if not self.sharing or self._stream is None or self._stream.preview_live:
            return False
        try:
            self._stream.refresh_preview()
        except Exception as e:
            logger.warning("Failed to refresh screen preview: %s", e)
            self.notify("Screen sharing is active, but preview needs refresh. Capture still works.")
            return False
        self.notify("Screen preview refreshed!")
        return True


class CaptureSubsystem:
    """Both machines plus the page's "Connect" behaviour: screen first, then voice."""

    def __init__(self, transcription: TranscriptionMachine, screen: ScreenCaptureMachine, notify: Notify | None = None):
        self.transcription = transcription
        self.screen = screen
        self.notify = notify or _log_notice

    async def connect(self) -> None:
        if not self.screen.sharing:
            await self.screen.start()
        self.start_listening()

    def start_listening(self) -> bool:
        try:
            self.transcription.start()
        except UnsupportedFeature as e:
            self.notify(str(e))
            return False
        except PermissionDenied:
            self.notify("Microphone access was denied. You can still type your questions.")
            return False
        return True

    async def toggle_listening(self) -> None:
        if self.transcription.listening:
            self.transcription.stop()
        else:
            await self.connect()

    def disconnect(self) -> None:
        self.transcription.stop()
        self.screen.stop()
