"""Asynchronous Slack client wrapper used by the sync layer."""

from __future__ import annotations

import asyncio
import logging
from http import HTTPStatus
from typing import Any

import aiohttp
from pydantic import ValidationError
from slack_sdk.errors import SlackApiError
from slack_sdk.http_retry.builtin_async_handlers import AsyncRateLimitErrorRetryHandler
from slack_sdk.web.async_client import AsyncWebClient
from slack_sdk.web.slack_response import SlackResponse

from models import HistoryPage, SlackChannel, SlackMessage, SlackUser
from slack_client.errors import (
    ApiError,
    DecodeError,
    LookupMiss,
    SlackClientError,
    TransportError,
)

logger = logging.getLogger(__name__)

SLACK_API_URL = "https://slack.com/api/"
CHANNEL_TYPES = ("public_channel", "private_channel")
CHANNEL_PAGE_LIMIT = 200
HISTORY_PAGE_LIMIT = 100


def _status_text(status: int | None) -> str:
    try:
        return HTTPStatus(status).phrase
    except ValueError:
        return ""


class AsyncSlackClient:
    """Thin async wrapper around slack_sdk.AsyncWebClient.

    ``call`` is the only method that talks to Slack; it maps failures onto the
    typed errors in ``slack_client.errors``. The derived helpers decode the
    envelope into models and raise ``DecodeError`` when the shape is wrong.
    No retries happen here unless ``rate_limit_retries`` is set.
    """

    def __init__(
        self,
        token: str | None = None,
        *,
        base_url: str = SLACK_API_URL,
        rate_limit_retries: int = 0,
        web_client: AsyncWebClient | None = None,
    ) -> None:
        if web_client is None:
            if not token:
                raise RuntimeError("A Slack token is required")
            web_client = AsyncWebClient(token=token, base_url=base_url)
        self._client = web_client
        if rate_limit_retries > 0:
            self._client.retry_handlers.append(
                AsyncRateLimitErrorRetryHandler(max_retry_count=rate_limit_retries)
            )

    # ------------------------------------------------------------------
    async def call(
        self, method: str, params: dict[str, Any] | None = None
    ) -> dict[str, Any]:
        """POST ``params`` as JSON to ``method`` and return the decoded envelope."""
        try:
            response: Any = await self._client.api_call(method, json=params or {})
        except SlackApiError as exc:
            if isinstance(exc.response, SlackResponse):
                status = exc.response.status_code
            else:
                # raw aiohttp response: the body was not valid JSON
                status = getattr(exc.response, "status", None)
            if status is None or not 200 <= status < 300:
                raise TransportError(
                    f"Slack API error: {status} {_status_text(status)}".rstrip(),
                    status=status,
                ) from exc
            if not isinstance(exc.response, SlackResponse):
                raise DecodeError(method, str(exc)) from exc
            raise ApiError(str(exc.response.get("error")), method=method) from exc
        except aiohttp.ClientError as exc:
            raise TransportError(f"Slack API error: {exc}") from exc
        except asyncio.TimeoutError as exc:
            raise TransportError(f"Slack API error: {method} timed out") from exc

        data = response.data
        if not isinstance(data, dict):
            raise DecodeError(method, "envelope is not a JSON object")
        if not data.get("ok"):
            raise ApiError(str(data.get("error")), method=method)
        return data

    # ------------------------------------------------------------------
    async def test_auth(self) -> bool:
        try:
            resp = await self.call("auth.test")
            logger.info(
                "Slack auth OK async: user=%s team=%s",
                resp.get("user"),
                resp.get("team"),
            )
            return True
        except SlackClientError as exc:
            logger.error("Slack auth failed async: %s", exc)
            return False

    # ------------------------------------------------------------------
    async def list_channels(self) -> list[SlackChannel]:
        """Return public then private channels, first page of each only."""
        channels: list[SlackChannel] = []
        for conv_type in CHANNEL_TYPES:
            data = await self.call(
                "conversations.list",
                {
                    "types": conv_type,
                    "exclude_archived": True,
                    "limit": CHANNEL_PAGE_LIMIT,
                },
            )
            try:
                channels.extend(
                    SlackChannel(**c) for c in data.get("channels") or []
                )
            except (TypeError, ValidationError) as exc:
                raise DecodeError("conversations.list", str(exc)) from exc
        logger.debug("Listed %s channels", len(channels))
        return channels

    async def _lookup_user(self, user_id: str) -> SlackUser:
        try:
            data = await self.call("users.info", {"user": user_id})
        except ApiError as exc:
            raise LookupMiss(user_id) from exc
        user = data.get("user")
        if not user:
            raise LookupMiss(user_id)
        try:
            return SlackUser(**user)
        except (TypeError, ValidationError) as exc:
            raise DecodeError("users.info", str(exc)) from exc

    async def get_user(self, user_id: str) -> SlackUser | None:
        """Fetch a user profile, or None when it cannot be looked up."""
        try:
            return await self._lookup_user(user_id)
        except SlackClientError as exc:
            logger.debug("User lookup failed for %s: %s", user_id, exc)
            return None

    async def get_conversation_history(
        self,
        channel_id: str,
        cursor: str | None = None,
        oldest: str | None = None,
        latest: str | None = None,
    ) -> HistoryPage:
        """Fetch a single page of channel history."""
        params: dict[str, Any] = {"channel": channel_id, "limit": HISTORY_PAGE_LIMIT}
        if cursor:
            params["cursor"] = cursor
        if oldest:
            params["oldest"] = oldest
        if latest:
            params["latest"] = latest

        data = await self.call("conversations.history", params)
        metadata = data.get("response_metadata") or {}
        try:
            return HistoryPage(
                messages=data.get("messages") or [],
                has_more=bool(data.get("has_more")),
                next_cursor=metadata.get("next_cursor") or None,
            )
        except (AttributeError, ValidationError) as exc:
            raise DecodeError("conversations.history", str(exc)) from exc

    async def get_thread_replies(
        self, channel_id: str, thread_ts: str
    ) -> list[SlackMessage]:
        """Fetch the replies of one thread, without the parent message."""
        data = await self.call(
            "conversations.replies", {"channel": channel_id, "ts": thread_ts}
        )
        try:
            messages = [SlackMessage(**m) for m in data.get("messages") or []]
        except (TypeError, ValidationError) as exc:
            raise DecodeError("conversations.replies", str(exc)) from exc
        # Slack always returns the parent as the first element
        replies = messages[1:]
        logger.debug("Fetched %s replies for thread %s", len(replies), thread_ts)
        return replies
