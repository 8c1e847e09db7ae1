"""Tests for the AI response gateway (OpenAI SDK client replaced by a fake)"""
import asyncio
from types import SimpleNamespace
from unittest.mock import patch

import httpx
import openai
import pytest

from interviewai.client.ai_gateway import (
    DEFAULT_INSTRUCTIONS,
    DEFAULT_SYSTEM_PROMPT,
    AIResponseGateway,
    calculate_confidence,
    contextual_suggestions,
    fallback_answer,
    get_model_name,
    normalize_model,
)
from interviewai.client.errors import UpstreamError

COMPLETIONS_URL = "https://openrouter.ai/api/v1/chat/completions"


class FakeCompletions:
    def __init__(self, content="A solid answer.", error=None):
        self.content = content
        self.error = error
        self.calls = []

    async def create(self, **kwargs):
        self.calls.append(kwargs)
        if self.error is not None:
            raise self.error
        message = SimpleNamespace(content=self.content)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])


class FakeModels:
    def __init__(self, error=None):
        self.error = error

    async def list(self):
        if self.error is not None:
            raise self.error
        return []


class FakeOpenAI:
    def __init__(self, content="A solid answer.", error=None, models_error=None):
        self.completions = FakeCompletions(content, error)
        self.chat = SimpleNamespace(completions=self.completions)
        self.models = FakeModels(models_error)


def _status_error(status, body=None):
    request = httpx.Request("POST", COMPLETIONS_URL)
    return openai.APIStatusError("upstream failure", response=httpx.Response(status, request=request), body=body)


def test_normalize_model():
    assert normalize_model("gpt-4.1") == "gpt-4"
    assert normalize_model("claude-3.5") == "claude-3.5"
    assert normalize_model("gpt-3.5-turbo") == "gpt-3.5-turbo"
    assert normalize_model("llama-70b") == "gpt-4"
    assert normalize_model(None) == "gpt-4"


def test_get_model_name():
    assert get_model_name("gpt-4") == "openai/gpt-4-turbo-preview"
    assert get_model_name("claude-3.5") == "anthropic/claude-3.5-sonnet"
    assert get_model_name("gpt-3.5-turbo") == "openai/gpt-3.5-turbo"
    assert get_model_name("gpt-3.5-turbo", has_image=True) == "openai/gpt-4-vision-preview"
    assert get_model_name("claude-3.5", has_image=True) == "anthropic/claude-3.5-sonnet"
    assert get_model_name("unknown") == "openai/gpt-4-turbo-preview"


def test_confidence_base_and_bonuses():
    assert calculate_confidence("") == pytest.approx(0.7)
    assert calculate_confidence("I worked on it.") == pytest.approx(0.78)
    assert calculate_confidence("I worked on it.", resume="resume text") == pytest.approx(0.83)
    assert calculate_confidence("Engineer here", job_role="engineer") == pytest.approx(0.73)


def test_confidence_is_capped():
    answer = (
        "In my role at Acme I led a team of 8 people. We improved throughput by 40%. "
        "For example, I developed a new pipeline. It reduced costs. "
    ) * 4
    assert calculate_confidence(answer, resume="r", job_role="engineer") == 0.95


def test_fallback_answer():
    answer = fallback_answer("Why us?")
    assert answer.confidence == 0.5
    assert answer.answer.startswith('I understand you\'re asking about "Why us?".')


def test_contextual_suggestions():
    assert contextual_suggestions("Tell me about yourself")[0] == "Use the Present-Past-Future framework"
    assert contextual_suggestions("Why this company?")[0] == "Research the company's mission and values"
    assert contextual_suggestions("Hello")[0] == "Be specific with examples and details"


def test_generate_response_request_shape():
    fake = FakeOpenAI(content="  I led the migration at Acme.  ")
    gateway = AIResponseGateway(client=fake)

    answer = asyncio.run(gateway.generate_response("Tell me about yourself", prompt="SYSTEM", model="gpt-4.1"))

    assert answer.answer == "I led the migration at Acme."
    assert 0.7 < answer.confidence <= 0.95
    call = fake.completions.calls[0]
    assert call["model"] == "openai/gpt-4-turbo-preview"
    assert call["messages"][0] == {"role": "system", "content": "SYSTEM"}
    assert call["messages"][1]["role"] == "user"
    assert call["messages"][1]["content"] == 'INTERVIEW QUESTION: "Tell me about yourself"\n\n'
    assert call["max_tokens"] == 800
    assert call["temperature"] == 0.7
    assert call["top_p"] == 0.9
    assert call["frequency_penalty"] == 0.1
    assert call["presence_penalty"] == 0.1


def test_generate_response_without_prompt_uses_default_instructions():
    fake = FakeOpenAI()
    gateway = AIResponseGateway(client=fake)
    asyncio.run(gateway.generate_response("Q?", resume="Python dev", job_role="Engineer"))

    messages = fake.completions.calls[0]["messages"]
    assert messages[0]["content"].startswith(DEFAULT_SYSTEM_PROMPT)
    assert "ROLE CONTEXT: The candidate is interviewing for a Engineer position" in messages[0]["content"]
    user = messages[1]["content"]
    assert "CANDIDATE'S BACKGROUND:\nPython dev" in user
    assert "TARGET ROLE: Engineer" in user
    assert user.endswith(DEFAULT_INSTRUCTIONS)


def test_generate_response_with_image_uses_vision_model():
    fake = FakeOpenAI()
    gateway = AIResponseGateway(client=fake)
    image = "data:image/png;base64,AAAA"
    asyncio.run(gateway.generate_response("Analyze", prompt="P", model="gpt-3.5-turbo", image=image))

    call = fake.completions.calls[0]
    assert call["model"] == "openai/gpt-4-vision-preview"
    assert call["messages"][1]["content"] == [
        {"type": "text", "text": "Analyze"},
        {"type": "image_url", "image_url": {"url": image}},
    ]


@pytest.mark.parametrize(
    "status,kind,message",
    [
        (401, "auth", "OpenRouter API: Invalid API key. Please check your API key configuration."),
        (
            402,
            "payment",
            "OpenRouter API: Insufficient credits or payment required. Please check your OpenRouter account balance.",
        ),
        (429, "rate_limit", "OpenRouter API: Rate limit exceeded. Please try again in a few moments."),
        (503, "server", "OpenRouter API: Server error. Please try again later."),
    ],
)
def test_status_errors_are_mapped(status, kind, message):
    gateway = AIResponseGateway(client=FakeOpenAI(error=_status_error(status)))
    with pytest.raises(UpstreamError) as exc_info:
        asyncio.run(gateway.generate_response("Q", prompt="P"))
    assert exc_info.value.kind == kind
    assert exc_info.value.message == message
    assert exc_info.value.status_code == status


def test_other_status_includes_provider_message():
    error = _status_error(400, body={"message": "model not found"})
    gateway = AIResponseGateway(client=FakeOpenAI(error=error))
    with pytest.raises(UpstreamError) as exc_info:
        asyncio.run(gateway.generate_response("Q", prompt="P"))
    assert exc_info.value.kind == "http"
    assert exc_info.value.message == "OpenRouter API error: 400 - model not found"


def test_connection_error_is_network_kind():
    error = openai.APIConnectionError(request=httpx.Request("POST", COMPLETIONS_URL))
    gateway = AIResponseGateway(client=FakeOpenAI(error=error))
    with pytest.raises(UpstreamError) as exc_info:
        asyncio.run(gateway.generate_response("Q", prompt="P"))
    assert exc_info.value.kind == "network"
    assert exc_info.value.message == (
        "Failed to connect to OpenRouter API. Please check your internet connection."
    )


def test_missing_api_key_is_config_error():
    gateway = AIResponseGateway(api_key="")
    with pytest.raises(UpstreamError) as exc_info:
        asyncio.run(gateway.generate_response("Q", prompt="P"))
    assert exc_info.value.kind == "config"


def test_check_connection():
    assert asyncio.run(AIResponseGateway(client=FakeOpenAI()).check_connection()) is True
    failing = FakeOpenAI(models_error=_status_error(401))
    assert asyncio.run(AIResponseGateway(client=failing).check_connection()) is False
    assert asyncio.run(AIResponseGateway(api_key="").check_connection()) is False


def test_client_points_at_openrouter_without_retries():
    with patch("interviewai.client.ai_gateway.AsyncOpenAI") as mock_cls:
        mock_cls.return_value = FakeOpenAI()
        gateway = AIResponseGateway(api_key="sk-test")
        asyncio.run(gateway.generate_response("Q", prompt="P"))
        asyncio.run(gateway.generate_response("Q2", prompt="P"))

    mock_cls.assert_called_once()
    kwargs = mock_cls.call_args.kwargs
    assert kwargs["api_key"] == "sk-test"
    assert kwargs["base_url"] == "https://openrouter.ai/api/v1"
    assert kwargs["max_retries"] == 0
    assert set(kwargs["default_headers"]) == {"HTTP-Referer", "X-Title"}


def test_response_without_choices_is_upstream_error():
    fake = FakeOpenAI()

    async def empty(**kwargs):
        return SimpleNamespace(choices=None)

    fake.completions.create = empty
    gateway = AIResponseGateway(client=fake)
    with pytest.raises(UpstreamError) as exc_info:
        asyncio.run(gateway.generate_response("Q", prompt="P"))
    assert exc_info.value.kind == "http"


def test_response_validation_error_is_upstream_error():
    request = httpx.Request("POST", COMPLETIONS_URL)
    error = openai.APIResponseValidationError(response=httpx.Response(200, request=request), body=None)
    gateway = AIResponseGateway(client=FakeOpenAI(error=error))
    with pytest.raises(UpstreamError) as exc_info:
        asyncio.run(gateway.generate_response("Q", prompt="P"))
    assert exc_info.value.kind == "network"
