"""
Session lifecycle controller: the orchestration behind the live session page.

Owns the authoritative ``SessionView``, mirrors it to a ``SessionCache``
after every meaningful mutation, and talks to the API, the AI gateway and
the capture subsystem. Failures from any of those are turned into notices
here; nothing recoverable escapes to the caller.
"""
from __future__ import annotations

import asyncio
from datetime import datetime
from typing import Any, Awaitable, Callable, Optional

from interviewai.app.core.config import (
    PREVIEW_DEFAULT_HEIGHT,
    PREVIEW_DEFAULT_WIDTH,
    PREVIEW_HEIGHT_RANGE,
    PREVIEW_WIDTH_RANGE,
    TRIAL_TIME_BUDGET,
)
from interviewai.app.core.logging_config import get_logger
from interviewai.client.ai_gateway import AIResponseGateway, fallback_answer, normalize_model
from interviewai.client.api import InterviewAPI
from interviewai.client.capture import CaptureSubsystem
from interviewai.client.errors import ApiError, NotReady, UpstreamError
from interviewai.client.models import (
    AIAnswer,
    ConversationEntry,
    SessionConfig,
    SessionView,
    WizardParams,
)
from interviewai.client.persistence import MemorySessionCache, SessionCache
from interviewai.client.prompts import build_screen_analysis_prompt, build_system_prompt

logger = get_logger("client.controller")

SESSIONS_ROUTE = "/interview-sessions"
SCREEN_ANALYSIS_QUESTION = "Screen Capture Analysis"
SCREEN_ANALYSIS_USER_ANSWER = "Analyzed shared screen content"
SCREEN_ANALYSIS_REQUEST = "Analyze this coding problem and provide solution guidance"
SCREEN_ANALYSIS_PREFIX = "📸 Screen Analysis: "


def _clamp(value: int, bounds: tuple[int, int]) -> int:
    low, high = bounds
    return max(low, min(high, value))


def _config_from_session(session: dict[str, Any], resume: Optional[dict[str, Any]]) -> SessionConfig:
    metadata = session.get("metadata") or {}
    return SessionConfig(
        sessionId=session["id"],
        sessionType=session.get("sessionType", "trial"),
        company=session.get("company", ""),
        position=session.get("position", ""),
        resumeId=metadata.get("resumeId"),
        resumeData=resume,
        language=metadata.get("language") or "English",
        simpleEnglish=bool(metadata.get("simpleEnglish")),
        extraInstructions=metadata.get("extraInstructions") or "",
        aiModel=normalize_model(metadata.get("aiModel")),
    )


def _entry_from_question(q: dict[str, Any]) -> ConversationEntry:
    return ConversationEntry(
        question=q["question"],
        userAnswer=q["question"],
        aiResponse=AIAnswer(answer=q["answer"], confidence=q["confidence"]),
        timestamp=q["timestamp"],
        processed=True,
    )


class SessionLifecycleController:
    def __init__(
        self,
        api: InterviewAPI,
        gateway: AIResponseGateway,
        cache: SessionCache | None = None,
        capture: CaptureSubsystem | None = None,
        notify: Callable[[str], None] | None = None,
        navigate: Callable[[str], None] | None = None,
        now: Callable[[], datetime] = datetime.utcnow,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ):
        self.api = api
        self.gateway = gateway
        self.cache = cache if cache is not None else MemorySessionCache()
        self.capture = capture
        self.notify = notify or (lambda message: logger.info("notice: %s", message))
        self.navigate = navigate or (lambda route: logger.info("navigate: %s", route))
        self.now = now
        self.sleep = sleep
        self.view = SessionView()
        self.processing = False
        self.ended = False

    # --- state helpers ---

    @property
    def session(self) -> Optional[SessionConfig]:
        return self.view.session

    def _persist(self) -> None:
        self.cache.save(self.view)

    def _status(self, message: str) -> None:
        self.view.statusMessage = message

    def _fail(self, message: str) -> SessionView:
        logger.error("Session initialization failed: %s", message)
        self.view.error = message
        self._status("Failed to load session. Please go back and try again.")
        return self.view

    # --- lifecycle ---

    async def _load_resume(self, resume_id: Optional[int]) -> Optional[dict[str, Any]]:
        if not resume_id:
            return None
        try:
            return await self.api.get_resume(resume_id)
        except ApiError as e:
            logger.warning("Resume %s unavailable, continuing without it: %s", resume_id, e.message)
            return None

    async def initialize(
        self, existing_id: Optional[int] = None, wizard: Optional[WizardParams] = None
    ) -> SessionView:
        """Load an existing session, or create one from wizard input. Never raises for API failures."""
        self.ended = False
        self.processing = False
        cached = self.cache.load()

        if existing_id is not None:
            try:
                session = await self.api.get_session(existing_id)
                questions = await self.api.get_questions(existing_id)
            except ApiError as e:
                return self._fail(e.message)
            resume = await self._load_resume((session.get("metadata") or {}).get("resumeId"))
            config = _config_from_session(session, resume)
            conversation = [_entry_from_question(q) for q in questions]
        elif wizard is not None:
            payload = wizard.model_dump()
            payload["createdFromFlow"] = True
            try:
                session = await self.api.create_session(payload)
            except ApiError as e:
                return self._fail(e.message)
            resume = await self._load_resume(wizard.resumeId)
            config = _config_from_session(session, resume)
            conversation = []
        elif self.restore():
            return self.view
        else:
            return self._fail("No session parameters provided")

        same_session = cached is not None and cached.session is not None and cached.session.sessionId == config.sessionId
        self.view = SessionView(
            session=config,
            selectedModel=cached.selectedModel if same_session else config.aiModel,
            conversation=conversation,
            timeRemaining=cached.timeRemaining if same_session else TRIAL_TIME_BUDGET,
            sessionStartTime=cached.sessionStartTime if same_session else self.now(),
            previewWidth=cached.previewWidth if same_session else PREVIEW_DEFAULT_WIDTH,
            previewHeight=cached.previewHeight if same_session else PREVIEW_DEFAULT_HEIGHT,
        )
        self._status("Session ready. Click Connect to share your screen and start listening.")
        self._persist()
        logger.info(
            "Session initialized id=%s type=%s questions=%d", config.sessionId, config.sessionType, len(conversation)
        )
        return self.view

    def restore(self) -> bool:
        """Adopt the cached view when it holds an in-progress trial."""
        cached = self.cache.load()
        if cached is None or not cached.is_trial or cached.timeRemaining <= 0:
            return False
        self.view = cached
        self.ended = False
        logger.info("Restored trial session id=%s remaining=%ss", cached.session.sessionId, cached.timeRemaining)
        return True

    def start_new(self) -> None:
        self.cache.clear()
        self.view = SessionView()
        self.ended = False
        self.processing = False

    # --- trial countdown ---

    def tick(self) -> bool:
        """One second of trial time. Returns True when the budget has run out."""
        if self.ended or not self.view.is_trial:
            return False
        if self.view.timeRemaining > 0:
            self.view.timeRemaining -= 1
            self._persist()
        return self.view.timeRemaining <= 0

    async def run_countdown(self) -> None:
        if not self.view.is_trial:
            return
        while not self.ended:
            await self.sleep(1)
            if self.tick():
                logger.info("Trial time budget exhausted")
                self.notify("Trial session time is up.")
                await self.end_session()

    # --- questions ---

    async def submit_question(self, text: str) -> Optional[ConversationEntry]:
        question = (text or "").strip()
        if not question or self.session is None or self.processing or self.ended:
            return None

        self.processing = True
        try:
            history = list(self.view.conversation)
            entry = ConversationEntry(question=question, userAnswer=question, timestamp=self.now())
            self.view.conversation.append(entry)
            self._status("Processing your answer...")
            self._persist()

            prompt = build_system_prompt(self.session, question, history)
            try:
                answer = await self.gateway.generate_response(
                    question, prompt=prompt, model=self.view.selectedModel or self.session.aiModel
                )
                self.view.error = None
                generated = True
            except UpstreamError as e:
                logger.warning("AI generation failed kind=%s: %s", e.kind, e.message)
                self.notify(e.message)
                self.view.error = e.message
                answer = fallback_answer(question)
                generated = False

            entry.aiResponse = answer
            entry.processed = True
            self._status("AI candidate response is ready. You can continue or ask another question.")
            self._persist()

            # Canned fallbacks stay local; only real answers go to the question log
            if generated and self.session.sessionId:
                try:
                    await self.api.add_question(self.session.sessionId, question, answer.answer, answer.confidence)
                except ApiError as e:
                    logger.error("Failed to save question to session %s: %s", self.session.sessionId, e.message)
            return entry
        finally:
            self.processing = False

    async def submit_pending_transcript(self) -> Optional[ConversationEntry]:
        if self.capture is None:
            return None
        text = self.capture.transcription.take_pending()
        if not text:
            return None
        return await self.submit_question(text)

    def clear_transcript(self) -> None:
        if self.capture is not None:
            self.capture.transcription.clear_pending()
        self._status("Cleared. Start speaking...")

    async def capture_and_analyze(self) -> Optional[ConversationEntry]:
        if self.session is None or self.processing or self.ended:
            return None
        if self.capture is None:
            self.notify("Screen capture is not available.")
            return None
        try:
            still = self.capture.screen.capture_still()
        except NotReady as e:
            self.notify(str(e))
            self._status("Error capturing screen. Please try again.")
            return None

        self.processing = True
        try:
            answer = await self.gateway.generate_response(
                SCREEN_ANALYSIS_REQUEST,
                prompt=build_screen_analysis_prompt(self.session),
                model=self.view.selectedModel or self.session.aiModel,
                image=still,
            )
        except UpstreamError as e:
            logger.warning("Screen analysis failed kind=%s: %s", e.kind, e.message)
            self.notify(e.message)
            self._status("Error analyzing screen content. Please try again.")
            return None
        finally:
            self.processing = False

        entry = ConversationEntry(
            question=SCREEN_ANALYSIS_QUESTION,
            userAnswer=SCREEN_ANALYSIS_USER_ANSWER,
            aiResponse=AIAnswer(answer=SCREEN_ANALYSIS_PREFIX + answer.answer, confidence=answer.confidence),
            timestamp=self.now(),
            processed=True,
        )
        self.view.conversation.append(entry)
        self._status("Screen analysis complete. Check the AI response for coding guidance.")
        self._persist()
        return entry

    # --- preferences ---

    def switch_model(self, model: str) -> str:
        self.view.selectedModel = normalize_model(model)
        self._persist()
        return self.view.selectedModel

    def resize_preview(self, width: int, height: int) -> tuple[int, int]:
        self.view.previewWidth = _clamp(width, PREVIEW_WIDTH_RANGE)
        self.view.previewHeight = _clamp(height, PREVIEW_HEIGHT_RANGE)
        self._persist()
        return self.view.previewWidth, self.view.previewHeight

    def reset_preview_size(self) -> tuple[int, int]:
        return self.resize_preview(PREVIEW_DEFAULT_WIDTH, PREVIEW_DEFAULT_HEIGHT)

    # --- teardown ---

    def elapsed_minutes(self) -> int:
        if self.view.is_trial:
            return (TRIAL_TIME_BUDGET - self.view.timeRemaining) // 60
        if self.view.sessionStartTime is None:
            return 0
        return max(0, int((self.now() - self.view.sessionStartTime).total_seconds() // 60))

    async def end_session(self) -> None:
        """Stop capture, complete the session in the store, drop the cache and leave. Idempotent."""
        if self.ended:
            return
        self.ended = True
        if self.capture is not None:
            self.capture.disconnect()

        session_id = self.session.sessionId if self.session else None
        if session_id:
            try:
                await self.api.complete_session(
                    session_id, status="completed", end_time=self.now(), duration=self.elapsed_minutes()
                )
                logger.info("Session %s completed", session_id)
            except ApiError as e:
                logger.error("Failed to save session completion for %s: %s", session_id, e.message)

        self.cache.clear()
        self.navigate(SESSIONS_ROUTE)
