"""Materialization of assembled threads into link/notes records."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime, timezone
from urllib.parse import urlencode

from ingest.formatting import format_slack_text, parse_user_mentions
from models import Actor, NormalizedNote, NormalizedThread, SlackMessage, ThreadMeta

ACTOR_PREFIX = "slack:"
TITLE_LENGTH = 50
EMPTY_THREAD_TITLE = "Empty thread"
FALLBACK_TITLE = "Slack message"


def slack_actor(user_id: str) -> Actor:
    return Actor(id=f"{ACTOR_PREFIX}{user_id}")


def canonical_url(channel_id: str, thread_ts: str) -> str:
    """app_redirect link, valid across workspaces."""
    query = urlencode({"channel": channel_id, "message_ts": thread_ts})
    return f"https://slack.com/app_redirect?{query}"


def ts_to_datetime(ts: str) -> datetime:
    return datetime.fromtimestamp(float(ts), tz=timezone.utc)


def transform_slack_thread(
    messages: Sequence[SlackMessage], channel_id: str
) -> NormalizedThread:
    """Turn a thread (parent first) into a NormalizedThread.

    Each message with a user or bot author becomes a note keyed by its own ts,
    so materializing the same messages again yields the same keys. Messages
    without an author are skipped.
    """
    if not messages:
        return NormalizedThread(type="message", title=EMPTY_THREAD_TITLE, notes=[])

    parent = messages[0]
    thread_ts = parent.thread_ts or parent.ts
    first_text = format_slack_text(parent.text)

    thread = NormalizedThread(
        source=canonical_url(channel_id, thread_ts),
        type="message",
        title=first_text[:TITLE_LENGTH] or FALLBACK_TITLE,
        created=ts_to_datetime(parent.ts),
        meta=ThreadMeta(channel_id=channel_id, thread_ts=thread_ts),
        notes=[],
        preview=first_text or None,
    )

    for message in messages:
        author_id = message.author_id
        if not author_id:
            continue
        mentions = [slack_actor(uid) for uid in parse_user_mentions(message.text)]
        thread.notes.append(
            NormalizedNote(
                key=message.ts,
                author=slack_actor(author_id),
                content=format_slack_text(message.text),
                mentions=mentions or None,
            )
        )

    return thread
