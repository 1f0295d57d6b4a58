"""Typed failures raised by the Slack client."""

from __future__ import annotations


class SlackClientError(Exception):
    """Base class for every error raised by the Slack client."""


class TransportError(SlackClientError):
    """The HTTP request failed or returned a non-2xx status."""

    def __init__(self, message: str, status: int | None = None) -> None:
        super().__init__(message)
        self.status = status


class ApiError(SlackClientError):
    """Slack answered with an ``ok: false`` envelope."""

    def __init__(self, error: str, method: str | None = None) -> None:
        super().__init__(f"Slack API error: {error}")
        self.error = error
        self.method = method


class DecodeError(SlackClientError):
    """An ``ok: true`` payload did not match the expected shape."""

    def __init__(self, method: str, detail: str) -> None:
        super().__init__(f"Malformed response from {method}: {detail}")
        self.method = method


class LookupMiss(SlackClientError):
    """A user lookup found nothing. Recovered locally, never surfaced."""
