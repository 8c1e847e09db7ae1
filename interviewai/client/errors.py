"""
Errors raised by the rehearsal client. The controller catches all of them
at the call site and turns them into notices or fallback answers.
"""


class ClientError(Exception):
    """Base class for recoverable client-side failures."""


class ApiError(ClientError):
    """Non-2xx response (or transport failure) from the InterviewAI API."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class UpstreamError(ClientError):
    """The AI provider call failed. `kind` is one of auth, payment, rate_limit, server, http, network, config."""

    def __init__(self, kind: str, message: str, status_code: int | None = None):
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.status_code = status_code


class UnsupportedFeature(ClientError):
    """The platform has no speech recognition engine."""


class PermissionDenied(ClientError):
    """The user declined the microphone or screen-share prompt."""


class NotReady(ClientError):
    """A still frame was requested while not sharing or before the video has a size."""
