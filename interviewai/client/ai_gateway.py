"""
AI response gateway: one chat completion per question via OpenRouter's
OpenAI-compatible API, plus a local confidence heuristic.
"""
from __future__ import annotations

import re
from typing import Any, Optional

import openai
from openai import AsyncOpenAI

from interviewai.app.core.config import (
    AI_FREQUENCY_PENALTY,
    AI_MAX_TOKENS,
    AI_MODEL_ALIASES,
    AI_PRESENCE_PENALTY,
    AI_TEMPERATURE,
    AI_TOP_P,
    ALLOWED_AI_MODELS,
    DEFAULT_AI_MODEL,
    FALLBACK_CONFIDENCE,
    TEXT_MODEL_MAP,
    VISION_MODEL_MAP,
    settings,
)
from interviewai.app.core.logging_config import get_logger
from interviewai.client.errors import UpstreamError
from interviewai.client.models import AIAnswer

logger = get_logger("client.ai_gateway")

DEFAULT_SYSTEM_PROMPT = """You are an expert interview coach and AI assistant helping a candidate during a live job interview. Your role is to provide professional, authentic, and contextually relevant responses that showcase the candidate's strengths and experience.

CORE PRINCIPLES:
1. Generate responses that sound natural and conversational
2. Use specific examples from the candidate's background when relevant
3. Maintain a confident but humble tone
4. Structure answers clearly and concisely
5. Focus on demonstrating relevant skills and experience

RESPONSE FORMAT:
Provide a clear, well-structured answer that directly addresses the interview question. The response should be professional yet personable, demonstrating the candidate's qualifications for the role."""

DEFAULT_INSTRUCTIONS = """INSTRUCTIONS:
Generate a professional interview response that:
1. Directly answers the question asked
2. Uses specific examples from the candidate's background
3. Demonstrates relevant skills and experience
4. Maintains appropriate length (2-4 sentences for behavioral questions)
5. Shows enthusiasm and cultural fit
6. Sounds natural and conversational

Please provide only the response text without any meta-commentary or labels."""

_EXAMPLES_RE = re.compile(r"example|experience|when I|in my role|at \w+|worked on", re.IGNORECASE)
_QUANTIFIED_RE = re.compile(r"\d+(%|percent|times|years|months|people|team)", re.IGNORECASE)
_ACTION_RE = re.compile(r"led|managed|developed|created|improved|increased|reduced|implemented", re.IGNORECASE)

# (matches(question), tips); first match wins
SUGGESTION_RULES: tuple = (
    (lambda q: "tell me about yourself" in q, [
        "Use the Present-Past-Future framework",
        "Keep response to 2-3 minutes",
        "Connect your background to the role",
        "End with enthusiasm for the position",
    ]),
    (lambda q: "weakness" in q or "areas for improvement" in q, [
        "Choose a real but not critical weakness",
        "Explain steps you're taking to improve",
        "Show self-awareness and growth mindset",
        'Don\'t use cliché weaknesses like "perfectionist"',
    ]),
    (lambda q: any(t in q for t in ("experience", "example", "time when")), [
        "Use the STAR method (Situation, Task, Action, Result)",
        "Quantify your impact with specific numbers",
        "Choose examples relevant to the role",
        "Focus on your specific contributions",
    ]),
    (lambda q: "why" in q and ("company" in q or "role" in q), [
        "Research the company's mission and values",
        "Connect your goals to their objectives",
        "Mention specific company achievements or projects",
        "Show genuine enthusiasm and interest",
    ]),
    (lambda q: any(t in q for t in ("challenge", "difficult", "problem")), [
        "Focus on your problem-solving approach",
        "Highlight lessons learned from the experience",
        "Show how you handled pressure or uncertainty",
        "Demonstrate resilience and adaptability",
    ]),
    (lambda q: any(t in q for t in ("goals", "future", "see yourself")), [
        "Align your goals with the company's growth",
        "Show ambition but also commitment",
        "Mention skills you want to develop",
        "Connect to the role's career progression",
    ]),
    (lambda q: any(t in q for t in ("technical", "code", "algorithm")), [
        "Explain your thought process clearly",
        "Discuss trade-offs and alternatives",
        "Mention relevant technologies or frameworks",
        "Ask clarifying questions if needed",
    ]),
)
DEFAULT_SUGGESTIONS = [
    "Be specific with examples and details",
    "Show enthusiasm and genuine interest",
    "Connect your answer to the role requirements",
    "Use confident but humble language",
]


def normalize_model(model: Optional[str]) -> str:
    """Collapse aliases and unknown ids onto an allowed model id."""
    model = AI_MODEL_ALIASES.get(model or "", model or "")
    return model if model in ALLOWED_AI_MODELS else DEFAULT_AI_MODEL


def get_model_name(model: str, has_image: bool = False) -> str:
    model_map = VISION_MODEL_MAP if has_image else TEXT_MODEL_MAP
    return model_map.get(model) or model_map[DEFAULT_AI_MODEL]


def calculate_confidence(answer: str, resume: Optional[str] = None, job_role: Optional[str] = None) -> float:
    has_examples = bool(_EXAMPLES_RE.search(answer))
    has_structure = "." in answer and len(answer.split(".")) > 2

    confidence = 0.7
    for threshold in (100, 200, 300):
        if len(answer) > threshold:
            confidence += 0.05
    if has_examples:
        confidence += 0.08
    if has_structure:
        confidence += 0.05
    if _QUANTIFIED_RE.search(answer):
        confidence += 0.07
    if _ACTION_RE.search(answer):
        confidence += 0.06
    if resume and has_examples:
        confidence += 0.05
    if job_role and job_role.lower() in answer.lower():
        confidence += 0.03
    return min(confidence, 0.95)


def contextual_suggestions(question: str) -> list[str]:
    q = question.lower()
    for matches, tips in SUGGESTION_RULES:
        if matches(q):
            return list(tips)
    return list(DEFAULT_SUGGESTIONS)


def build_default_system_prompt(job_role: Optional[str] = None) -> str:
    if job_role:
        return (
            f"{DEFAULT_SYSTEM_PROMPT}\n\nROLE CONTEXT: The candidate is interviewing for a {job_role} position "
            "and should tailor responses to demonstrate relevant skills and experience for this role."
        )
    return DEFAULT_SYSTEM_PROMPT


def build_user_content(
    question: str,
    image: Optional[str] = None,
    resume: Optional[str] = None,
    job_role: Optional[str] = None,
    context: Optional[str] = None,
    custom_prompt: bool = True,
) -> Any:
    """Multimodal parts when an image is attached, otherwise a labelled text block."""
    if image:
        return [
            {"type": "text", "text": question},
            {"type": "image_url", "image_url": {"url": image}},
        ]
    content = f'INTERVIEW QUESTION: "{question}"\n\n'
    if resume:
        content += f"CANDIDATE'S BACKGROUND:\n{resume}\n\n"
    if job_role:
        content += f"TARGET ROLE: {job_role}\n\n"
    if context:
        content += f"INTERVIEW CONTEXT: {context}\n\n"
    if not custom_prompt:
        content += DEFAULT_INSTRUCTIONS
    return content


def fallback_answer(question: str) -> AIAnswer:
    """Canned answer used when the provider call fails."""
    return AIAnswer(
        answer=(
            f'I understand you\'re asking about "{question}". Let me provide a thoughtful response '
            "based on my experience and qualifications for this role."
        ),
        confidence=FALLBACK_CONFIDENCE,
    )


def _error_detail(exc: openai.APIStatusError) -> str:
    body = exc.body
    if isinstance(body, dict):
        nested = body.get("error")
        if isinstance(nested, dict) and nested.get("message"):
            return str(nested["message"])
        if body.get("message"):
            return str(body["message"])
    return "Unknown error"


def map_status_error(exc: openai.APIStatusError) -> UpstreamError:
    status = exc.status_code
    if status == 402:
        return UpstreamError(
            "payment",
            "OpenRouter API: Insufficient credits or payment required. Please check your OpenRouter account balance.",
            status,
        )
    if status == 401:
        return UpstreamError("auth", "OpenRouter API: Invalid API key. Please check your API key configuration.", status)
    if status == 429:
        return UpstreamError("rate_limit", "OpenRouter API: Rate limit exceeded. Please try again in a few moments.", status)
    if status >= 500:
        return UpstreamError("server", "OpenRouter API: Server error. Please try again later.", status)
    return UpstreamError("http", f"OpenRouter API error: {status} - {_error_detail(exc)}", status)


class AIResponseGateway:
    """
    Wraps ``AsyncOpenAI`` pointed at OpenRouter.

    No retries (``max_retries=0``): a failed call surfaces immediately as
    ``UpstreamError`` and the caller decides what to show.
    """

    def __init__(self, client: AsyncOpenAI | None = None, api_key: str | None = None):
        self.api_key = api_key if api_key is not None else settings.openrouter_api_key
        self._client = client

    def _get_client(self) -> AsyncOpenAI:
        if self._client is None:
            if not self.api_key:
                raise UpstreamError("config", "OpenRouter API key not configured")
            self._client = AsyncOpenAI(
                api_key=self.api_key,
                base_url=settings.openrouter_base_url,
                timeout=settings.http_request_timeout,
                max_retries=0,
                default_headers={
                    "HTTP-Referer": settings.openrouter_app_url,
                    "X-Title": settings.openrouter_app_title,
                },
            )
        return self._client

    async def generate_response(
        self,
        question: str,
        prompt: Optional[str] = None,
        model: Optional[str] = None,
        image: Optional[str] = None,
        resume: Optional[str] = None,
        job_role: Optional[str] = None,
        context: Optional[str] = None,
    ) -> AIAnswer:
        client = self._get_client()
        model_name = get_model_name(normalize_model(model), has_image=bool(image))
        messages = [
            {"role": "system", "content": prompt or build_default_system_prompt(job_role)},
            {
                "role": "user",
                "content": build_user_content(question, image, resume, job_role, context, custom_prompt=bool(prompt)),
            },
        ]
        try:
            resp = await client.chat.completions.create(
                model=model_name,
                messages=messages,
                max_tokens=AI_MAX_TOKENS,
                temperature=AI_TEMPERATURE,
                top_p=AI_TOP_P,
                frequency_penalty=AI_FREQUENCY_PENALTY,
                presence_penalty=AI_PRESENCE_PENALTY,
                stream=False,
            )
            choices = resp.choices or []
            if not choices:
                logger.error("OpenRouter returned no choices model=%s", model_name)
                raise UpstreamError("http", "OpenRouter API error: response contained no choices")
            answer = (choices[0].message.content or "").strip()
        except openai.APIStatusError as e:
            logger.error("OpenRouter API error status=%s model=%s: %s", e.status_code, model_name, e)
            raise map_status_error(e) from e
        except openai.APIConnectionError as e:
            logger.error("OpenRouter connection failed model=%s: %s", model_name, e)
            raise UpstreamError(
                "network", "Failed to connect to OpenRouter API. Please check your internet connection."
            ) from e
        except openai.OpenAIError as e:
            logger.error("OpenRouter request failed model=%s: %s", model_name, e)
            raise UpstreamError(
                "network", "Failed to connect to OpenRouter API. Please check your internet connection."
            ) from e

        logger.info("AI answer model=%s chars=%d", model_name, len(answer))
        return AIAnswer(
            answer=answer,
            confidence=calculate_confidence(answer, resume, job_role),
            suggestions=contextual_suggestions(question),
            reasoning=(
                f"Response generated based on {job_role or 'general'} interview context with "
                f"{'personalized' if resume else 'generic'} background information."
            ),
        )

    async def check_connection(self) -> bool:
        """True when the model list endpoint answers with the configured key."""
        try:
            await self._get_client().models.list()
        except (openai.OpenAIError, UpstreamError) as e:
            logger.warning("OpenRouter connection test failed: %s", e)
            return False
        return True
