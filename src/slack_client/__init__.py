"""Slack Web API access for threadsync."""

from slack_client.async_client import AsyncSlackClient
from slack_client.errors import (
    ApiError,
    DecodeError,
    LookupMiss,
    SlackClientError,
    TransportError,
)

__all__ = [
    "ApiError",
    "AsyncSlackClient",
    "DecodeError",
    "LookupMiss",
    "SlackClientError",
    "TransportError",
]
