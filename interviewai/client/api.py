"""
Async REST client for the InterviewAI API (the session page's `sessionAPI` / `resumeAPI`).
"""
from __future__ import annotations

from datetime import datetime
from typing import Any

import httpx

from interviewai.app.core.config import settings
from interviewai.app.core.logging_config import get_logger
from interviewai.client.errors import ApiError

logger = get_logger("client.api")


class InterviewAPI:
    """
    Thin wrapper over ``httpx.AsyncClient``. Every method returns the
    ``data`` member of the success envelope and raises ``ApiError`` otherwise.

    Pass ``client`` to reuse a configured client (tests bind one to the ASGI app).
    """

    def __init__(
        self,
        base_url: str | None = None,
        token: str | None = None,
        client: httpx.AsyncClient | None = None,
        timeout: float | None = None,
    ):
        self.token = token
        self._client = client or httpx.AsyncClient(
            base_url=base_url or settings.api_base_url,
            timeout=timeout or settings.http_request_timeout,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    def _headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.token}"} if self.token else {}

    async def _request(self, method: str, path: str, json: dict | None = None) -> dict[str, Any]:
        try:
            response = await self._client.request(method, path, json=json, headers=self._headers())
        except httpx.HTTPError as exc:
            logger.error("API transport failure %s %s: %s", method, path, exc)
            raise ApiError(f"Could not reach the server: {exc}") from exc
        try:
            body = response.json()
        except ValueError:
            body = {}
        if response.status_code >= 400 or not body.get("success", False):
            message = body.get("message") or f"Request failed with status {response.status_code}"
            raise ApiError(message, status_code=response.status_code)
        return body

    # --- auth ---
    async def login(self, email: str, password: str) -> dict[str, Any]:
        body = await self._request("POST", "/auth/login", {"email": email, "password": password})
        self.token = body["token"]
        return body["user"]

    async def register(self, name: str, email: str, password: str) -> dict[str, Any]:
        body = await self._request(
            "POST", "/auth/register", {"name": name, "email": email, "password": password}
        )
        self.token = body["token"]
        return body["user"]

    # --- resumes ---
    async def list_resumes(self) -> list[dict[str, Any]]:
        return (await self._request("GET", "/resumes"))["data"]

    async def get_resume(self, resume_id: int) -> dict[str, Any]:
        return (await self._request("GET", f"/resumes/{resume_id}"))["data"]

    async def create_resume(self, payload: dict[str, Any]) -> dict[str, Any]:
        return (await self._request("POST", "/resumes", payload))["data"]

    async def delete_resume(self, resume_id: int) -> None:
        await self._request("DELETE", f"/resumes/{resume_id}")

    # --- sessions ---
    async def create_session(self, payload: dict[str, Any]) -> dict[str, Any]:
        return (await self._request("POST", "/sessions", payload))["data"]

    async def get_session(self, session_id: int) -> dict[str, Any]:
        return (await self._request("GET", f"/sessions/{session_id}"))["data"]

    async def get_questions(self, session_id: int) -> list[dict[str, Any]]:
        return (await self._request("GET", f"/sessions/{session_id}/questions"))["data"]

    async def add_question(
        self, session_id: int, question: str, answer: str, confidence: float | None = None
    ) -> dict[str, Any]:
        payload: dict[str, Any] = {"question": question, "answer": answer}
        if confidence is not None:
            payload["confidence"] = confidence
        return (await self._request("POST", f"/sessions/{session_id}/questions", payload))["data"]

    async def complete_session(
        self,
        session_id: int,
        status: str = "completed",
        end_time: datetime | None = None,
        duration: int | None = None,
    ) -> dict[str, Any]:
        payload: dict[str, Any] = {"status": status}
        if end_time is not None:
            payload["endTime"] = end_time.isoformat()
        if duration is not None:
            payload["duration"] = duration
        return (await self._request("PUT", f"/sessions/{session_id}/complete", payload))["data"]
