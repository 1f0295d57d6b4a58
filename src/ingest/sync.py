"""Cursor-paginated channel sync, one page per call."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Protocol

from pydantic import BaseModel

from ingest.threads import ReplySource, Thread, assemble_threads
from models import HistoryPage, SyncState

logger = logging.getLogger(__name__)

INCREMENTAL_WINDOW = timedelta(hours=1)


class HistorySource(ReplySource, Protocol):
    async def get_conversation_history(
        self,
        channel_id: str,
        cursor: str | None = None,
        oldest: str | None = None,
        latest: str | None = None,
    ) -> HistoryPage: ...


class SyncResult(BaseModel):
    threads: list[Thread]
    state: SyncState


def _epoch(value: datetime) -> str:
    return str(value.timestamp())


def initial_sync_state(channel_id: str, time_min: datetime | None = None) -> SyncState:
    """State for a full sync, optionally bounded to messages after ``time_min``."""
    return SyncState(
        channel_id=channel_id,
        oldest=_epoch(time_min) if time_min is not None else None,
    )


def incremental_sync_state(
    channel_id: str,
    now: datetime | None = None,
    window: timedelta = INCREMENTAL_WINDOW,
) -> SyncState:
    """State covering only the last ``window`` of history."""
    now = now or datetime.now()
    return SyncState(
        channel_id=channel_id,
        oldest=_epoch(now - window),
        latest=_epoch(now),
    )


async def sync_slack_channel(
    client: HistorySource, state: SyncState, concurrency: int = 1
) -> SyncResult:
    """Fetch one history page for ``state`` and return its threads and next state.

    Threads are returned raw; materializing them is up to the caller. The
    incoming state is never modified, and errors from the page fetch propagate
    so the caller can retry with the same state.
    """
    page = await client.get_conversation_history(
        state.channel_id, state.cursor, state.oldest, state.latest
    )
    threads = await assemble_threads(
        client, state.channel_id, page.messages, concurrency=concurrency
    )
    logger.debug(
        "Channel %s page: %s messages, %s threads, has_more=%s",
        state.channel_id,
        len(page.messages),
        len(threads),
        page.has_more,
    )
    return SyncResult(
        threads=threads,
        state=SyncState(
            channel_id=state.channel_id,
            cursor=page.next_cursor,
            more=page.has_more,
            oldest=state.oldest,
            latest=state.latest,
        ),
    )
