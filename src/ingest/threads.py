"""Grouping of a history page into conversation threads."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence
from typing import Protocol

from models import SlackMessage

logger = logging.getLogger(__name__)

NOISE_SUBTYPES = frozenset({"channel_join", "channel_leave"})

Thread = list[SlackMessage]


class ReplySource(Protocol):
    async def get_thread_replies(
        self, channel_id: str, thread_ts: str
    ) -> list[SlackMessage]: ...


def thread_identity(message: SlackMessage) -> str:
    return message.thread_ts or message.ts


def group_by_thread(messages: Sequence[SlackMessage]) -> dict[str, Thread]:
    """Group messages by thread identity, keeping first-seen order.

    Join/leave events are dropped.
    """
    groups: dict[str, Thread] = {}
    for message in messages:
        if message.subtype in NOISE_SUBTYPES:
            continue
        groups.setdefault(thread_identity(message), []).append(message)
    return groups


def find_parent(thread_ts: str, group: Sequence[SlackMessage]) -> SlackMessage | None:
    return next((m for m in group if m.ts == thread_ts), None)


async def assemble_threads(
    client: ReplySource,
    channel_id: str,
    messages: Sequence[SlackMessage],
    concurrency: int = 1,
) -> list[Thread]:
    """Group a page into threads and fill in full reply sets.

    A group whose parent reports ``reply_count > 0`` is replaced by the parent
    followed by every reply from conversations.replies; the page-local replies
    are discarded. Other groups are returned as collected, even when the page
    split left them without their parent. Output follows first-seen order
    regardless of ``concurrency``.
    """
    groups = group_by_thread(messages)
    sem = asyncio.Semaphore(max(1, concurrency))

    async def _finalize(thread_ts: str, group: Thread) -> Thread:
        parent = find_parent(thread_ts, group)
        if parent is None or not parent.reply_count:
            return list(group)
        async with sem:
            replies = await client.get_thread_replies(channel_id, thread_ts)
        logger.debug(
            "Thread %s in %s: %s replies (reply_count=%s)",
            thread_ts,
            channel_id,
            len(replies),
            parent.reply_count,
        )
        return [parent, *replies]

    if concurrency <= 1:
        return [await _finalize(ts, group) for ts, group in groups.items()]
    return list(
        await asyncio.gather(*[_finalize(ts, group) for ts, group in groups.items()])
    )
