"""
Tests for the session lifecycle controller, driven against the real API
through httpx.ASGITransport with the AI gateway replaced by a fake.
"""
import asyncio

import httpx
from openai import AsyncOpenAI

from interviewai.client.ai_gateway import AIResponseGateway
from interviewai.client.capture import CaptureSubsystem, ScreenCaptureMachine, SpeechResult, TranscriptionMachine
from interviewai.client.controller import SessionLifecycleController
from interviewai.client.errors import PermissionDenied, UpstreamError
from interviewai.client.models import AIAnswer, WizardParams
from interviewai.client.persistence import JsonFileSessionCache, MemorySessionCache

WIZARD = WizardParams(sessionType="trial", company="Acme", position="Engineer", aiModel="gpt-4")


class FakeGateway:
    def __init__(self, error=None):
        self.error = error
        self.calls = []

    async def generate_response(self, question, prompt=None, model=None, image=None, **kwargs):
        self.calls.append({"question": question, "prompt": prompt, "model": model, "image": image})
        if self.error is not None:
            raise self.error
        return AIAnswer(answer=f"Answer to {question}", confidence=0.9)


class Engine:
    def start(self):
        pass

    def stop(self):
        pass


class Stream:
    width = 800
    height = 600
    preview_live = True

    def on_ended(self, callback):
        pass

    def grab_frame(self):
        return b"png"

    def refresh_preview(self):
        pass

    def stop(self):
        pass


class Source:
    def __init__(self, deny=False):
        self.deny = deny

    async def request_stream(self):
        if self.deny:
            raise PermissionDenied("cancelled")
        return Stream()


def _capture(deny_screen=False):
    return CaptureSubsystem(
        TranscriptionMachine(lambda language, listener: Engine()),
        ScreenCaptureMachine(Source(deny=deny_screen)),
    )


def _controller(api, gateway=None, cache=None, capture=None, notices=None, routes=None):
    return SessionLifecycleController(
        api,
        gateway or FakeGateway(),
        cache=cache if cache is not None else MemorySessionCache(),
        capture=capture,
        notify=(notices.append if notices is not None else None),
        navigate=(routes.append if routes is not None else None),
    )


def test_initialize_from_wizard_creates_session(make_api):
    async def scenario():
        api = make_api()
        cache = MemorySessionCache()
        controller = _controller(api, cache=cache)
        view = await controller.initialize(wizard=WIZARD)
        stored = await api.get_session(view.session.sessionId)
        await api.aclose()
        return view, stored, cache.load()

    view, stored, cached = asyncio.run(scenario())
    assert view.error is None
    assert view.session.company == "Acme"
    assert view.selectedModel == "gpt-4"
    assert view.timeRemaining == 540
    assert stored["metadata"]["createdFromFlow"] is True
    assert cached.session.sessionId == view.session.sessionId


def test_initialize_failure_sets_error(make_api):
    async def scenario():
        api = make_api()
        view = await _controller(api).initialize(existing_id=9999)
        await api.aclose()
        return view

    view = asyncio.run(scenario())
    assert view.error == "Interview session not found"
    assert view.session is None


def test_initialize_without_parameters_sets_error(make_api):
    async def scenario():
        api = make_api()
        view = await _controller(api).initialize()
        await api.aclose()
        return view

    assert asyncio.run(scenario()).error == "No session parameters provided"


def test_initialize_existing_rebuilds_conversation_and_resume(make_api, resume_payload):
    async def scenario():
        api = make_api()
        resume = await api.create_resume(resume_payload)
        wizard = WIZARD.model_copy(update={"resumeId": resume["id"]})
        first = _controller(api)
        view = await first.initialize(wizard=wizard)
        session_id = view.session.sessionId
        await api.add_question(session_id, "Q1", "A1", 0.7)
        await api.add_question(session_id, "Q2", "A2")

        reloaded = await _controller(api).initialize(existing_id=session_id)

        await api.delete_resume(resume["id"])
        without_resume = await _controller(api).initialize(existing_id=session_id)
        await api.aclose()
        return reloaded, without_resume

    reloaded, without_resume = asyncio.run(scenario())
    assert [e.question for e in reloaded.conversation] == ["Q1", "Q2"]
    assert all(e.completed for e in reloaded.conversation)
    assert reloaded.conversation[0].aiResponse.confidence == 0.7
    assert reloaded.conversation[1].aiResponse.confidence == 0.8
    assert reloaded.session.resumeData["title"] == "Backend Resume"
    assert without_resume.error is None
    assert without_resume.session.resumeData is None


def test_submit_question_appends_and_persists(make_api):
    gateway = FakeGateway()

    async def scenario():
        api = make_api()
        cache = MemorySessionCache()
        controller = _controller(api, gateway=gateway, cache=cache)
        await controller.initialize(wizard=WIZARD)
        first = await controller.submit_question("  Tell me about yourself  ")
        second = await controller.submit_question("What are your strengths?")
        blank = await controller.submit_question("   ")
        stored = await api.get_questions(controller.session.sessionId)
        await api.aclose()
        return controller, first, second, blank, stored, cache.load()

    controller, first, second, blank, stored, cached = asyncio.run(scenario())
    assert first.question == "Tell me about yourself"
    assert first.completed and second.completed
    assert blank is None
    assert len(controller.view.conversation) == 2
    assert controller.processing is False
    assert [q["question"] for q in stored] == ["Tell me about yourself", "What are your strengths?"]
    assert stored[0]["confidence"] == 0.9
    assert len(cached.conversation) == 2
    assert "No previous questions have been asked" in gateway.calls[0]["prompt"]
    assert "### Exchange 1:" in gateway.calls[1]["prompt"]
    assert gateway.calls[0]["model"] == "gpt-4"


def test_submit_question_is_single_flight(make_api):
    gateway = FakeGateway()

    async def scenario():
        api = make_api()
        controller = _controller(api, gateway=gateway)
        await controller.initialize(wizard=WIZARD)
        controller.processing = True
        result = await controller.submit_question("Ignored?")
        await api.aclose()
        return controller, result

    controller, result = asyncio.run(scenario())
    assert result is None
    assert controller.view.conversation == []
    assert gateway.calls == []


def test_gateway_failure_yields_fallback(make_api):
    gateway = FakeGateway(error=UpstreamError("rate_limit", "OpenRouter API: Rate limit exceeded.", 429))
    notices = []

    async def scenario():
        api = make_api()
        controller = _controller(api, gateway=gateway, notices=notices)
        await controller.initialize(wizard=WIZARD)
        entry = await controller.submit_question("Why us?")
        stored = await api.get_questions(controller.session.sessionId)
        await api.aclose()
        return controller, entry, stored

    controller, entry, stored = asyncio.run(scenario())
    assert entry.aiResponse.confidence == 0.5
    assert entry.aiResponse.answer.startswith('I understand you\'re asking about "Why us?"')
    assert notices == ["OpenRouter API: Rate limit exceeded."]
    assert controller.view.error == "OpenRouter API: Rate limit exceeded."
    assert stored == []
    assert controller.processing is False


def test_provider_error_body_without_choices_falls_back(make_api):
    def handler(request):
        return httpx.Response(200, json={"error": {"message": "Provider returned error", "code": 502}})

    openrouter = AsyncOpenAI(
        api_key="sk-test",
        base_url="https://openrouter.ai/api/v1",
        max_retries=0,
        http_client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
    )
    notices = []

    async def scenario():
        api = make_api()
        controller = _controller(api, gateway=AIResponseGateway(client=openrouter), notices=notices)
        await controller.initialize(wizard=WIZARD)
        entry = await controller.submit_question("Tell me about yourself")
        stored = await api.get_questions(controller.session.sessionId)
        await api.aclose()
        return controller, entry, stored

    controller, entry, stored = asyncio.run(scenario())
    assert entry.processed is True
    assert entry.aiResponse.confidence == 0.5
    assert [(e.question, e.processed) for e in controller.view.conversation] == [("Tell me about yourself", True)]
    assert controller.view.error == "OpenRouter API error: response contained no choices"
    assert len(notices) == 1
    assert stored == []


def test_submit_pending_transcript(make_api):
    gateway = FakeGateway()
    capture = _capture()

    async def scenario():
        api = make_api()
        controller = _controller(api, gateway=gateway, capture=capture)
        await controller.initialize(wizard=WIZARD)
        await capture.connect()
        capture.transcription.on_result([SpeechResult("Describe a project", True)])
        entry = await controller.submit_pending_transcript()
        again = await controller.submit_pending_transcript()
        await api.aclose()
        return entry, again

    entry, again = asyncio.run(scenario())
    assert entry.question == "Describe a project"
    assert again is None


def test_capture_and_analyze(make_api):
    gateway = FakeGateway()
    capture = _capture()

    async def scenario():
        api = make_api()
        controller = _controller(api, gateway=gateway, capture=capture)
        await controller.initialize(wizard=WIZARD)
        await capture.connect()
        entry = await controller.capture_and_analyze()
        await api.aclose()
        return entry

    entry = asyncio.run(scenario())
    assert entry.question == "Screen Capture Analysis"
    assert entry.userAnswer == "Analyzed shared screen content"
    assert entry.aiResponse.answer.startswith("📸 Screen Analysis: ")
    assert gateway.calls[0]["image"].startswith("data:image/png;base64,")
    assert gateway.calls[0]["prompt"].startswith("# CODING INTERVIEW SCREEN ANALYSIS")


def test_capture_and_analyze_without_sharing(make_api):
    gateway = FakeGateway()
    notices = []

    async def scenario():
        api = make_api()
        controller = _controller(api, gateway=gateway, capture=_capture(deny_screen=True), notices=notices)
        await controller.initialize(wizard=WIZARD)
        entry = await controller.capture_and_analyze()
        await api.aclose()
        return controller, entry

    controller, entry = asyncio.run(scenario())
    assert entry is None
    assert gateway.calls == []
    assert controller.view.conversation == []
    assert notices == ["No screen sharing active. Please start screen sharing first."]


def test_model_switch_and_preview_size_are_persisted(make_api):
    async def scenario():
        api = make_api()
        cache = MemorySessionCache()
        controller = _controller(api, cache=cache)
        await controller.initialize(wizard=WIZARD)
        results = [
            controller.switch_model("gpt-4.1"),
            controller.switch_model("claude-3.5"),
            controller.resize_preview(100, 5000),
        ]
        cached = cache.load()
        results.append(controller.reset_preview_size())
        await api.aclose()
        return results, cached

    (alias, claude, clamped, reset), cached = asyncio.run(scenario())
    assert alias == "gpt-4"
    assert claude == "claude-3.5"
    assert clamped == (600, 800)
    assert reset == (800, 576)
    assert cached.selectedModel == "claude-3.5"
    assert (cached.previewWidth, cached.previewHeight) == (600, 800)


def test_tick_only_counts_down_trials(make_api):
    async def scenario():
        api = make_api()
        trial = _controller(api)
        await trial.initialize(wizard=WIZARD)
        premium = _controller(api)
        await premium.initialize(wizard=WIZARD.model_copy(update={"sessionType": "premium"}))
        trial.tick()
        premium.tick()
        await api.aclose()
        return trial, premium

    trial, premium = asyncio.run(scenario())
    assert trial.view.timeRemaining == 539
    assert trial.cache.load().timeRemaining == 539
    assert premium.view.timeRemaining == 540


def test_countdown_expiry_ends_session(make_api):
    routes = []

    async def no_sleep(_seconds):
        return None

    async def scenario():
        api = make_api()
        cache = MemorySessionCache()
        controller = _controller(api, cache=cache, routes=routes)
        controller.sleep = no_sleep
        await controller.initialize(wizard=WIZARD)
        controller.view.timeRemaining = 3
        await controller.run_countdown()
        stored = await api.get_session(controller.session.sessionId)
        await api.aclose()
        return controller, stored, cache.load()

    controller, stored, cached = asyncio.run(scenario())
    assert controller.ended is True
    assert controller.view.timeRemaining == 0
    assert stored["status"] == "completed"
    assert stored["endTime"] is not None
    assert cached is None
    assert routes == ["/interview-sessions"]


def test_end_session_is_idempotent(make_api):
    routes = []
    capture = _capture()

    async def scenario():
        api = make_api()
        controller = _controller(api, capture=capture, routes=routes)
        await controller.initialize(wizard=WIZARD)
        await capture.connect()
        await controller.end_session()
        await controller.end_session()
        late = await controller.submit_question("Still there?")
        stored = await api.get_session(controller.session.sessionId)
        await api.aclose()
        return late, stored

    late, stored = asyncio.run(scenario())
    assert routes == ["/interview-sessions"]
    assert late is None
    assert stored["status"] == "completed"
    assert not capture.screen.sharing
    assert not capture.transcription.listening


def test_restore_and_start_new(make_api):
    cache = MemorySessionCache()

    async def scenario():
        api = make_api()
        controller = _controller(api, cache=cache)
        await controller.initialize(wizard=WIZARD)
        await controller.submit_question("Tell me about yourself")
        controller.tick()
        await api.aclose()
        return controller.view.session.sessionId

    session_id = asyncio.run(scenario())

    revived = SessionLifecycleController(None, FakeGateway(), cache=cache)
    assert revived.restore() is True
    assert revived.view.session.sessionId == session_id
    assert revived.view.timeRemaining == 539
    assert len(revived.view.conversation) == 1

    revived.start_new()
    assert cache.load() is None
    assert revived.view.session is None
    assert SessionLifecycleController(None, FakeGateway(), cache=cache).restore() is False


def test_initialize_ignores_undecodable_cache_file(make_api, tmp_path):
    cache = JsonFileSessionCache(tmp_path)
    cache.path.write_bytes(b"\xff\xfe{\"bad")

    async def scenario():
        api = make_api()
        view = await _controller(api, cache=cache).initialize(wizard=WIZARD)
        await api.aclose()
        return view

    view = asyncio.run(scenario())
    assert view.error is None
    assert view.session.company == "Acme"
    assert cache.load().session.sessionId == view.session.sessionId
