"""
Batch runner driving a channel sync to completion.

Calls the one-page sync driver repeatedly, materializes every thread, resolves
contacts and hands each record to a sink. State is persisted after every page
so an interrupted run resumes from the last completed page.
"""

import logging
from collections.abc import Awaitable, Callable
from typing import Literal, Protocol

from pydantic import BaseModel

from ingest.sync import HistorySource, sync_slack_channel
from ingest.transform import ACTOR_PREFIX, transform_slack_thread
from models import (
    Contact,
    MessageChannel,
    NormalizedThread,
    SlackChannel,
    SlackUser,
    SyncState,
)
from repository import SyncStateRepository

logger = logging.getLogger(__name__)

ThreadSink = Callable[[NormalizedThread, list[Contact]], Awaitable[None]]
SyncMode = Literal["full", "incremental"]


class SlackSource(HistorySource, Protocol):
    async def get_user(self, user_id: str) -> SlackUser | None: ...

    async def list_channels(self) -> list[SlackChannel]: ...


class SyncSummary(BaseModel):
    channel_id: str
    batches: int = 0
    threads: int = 0
    notes: int = 0


def to_message_channel(channel: SlackChannel) -> MessageChannel:
    topic = channel.topic.value if channel.topic else ""
    purpose = channel.purpose.value if channel.purpose else ""
    return MessageChannel(
        id=channel.id,
        name=channel.name,
        description=topic or purpose or None,
        primary=channel.name == "general",  # Slack convention
    )


async def list_sync_channels(client: SlackSource) -> list[MessageChannel]:
    """Channels the token's user or bot can sync: joined and not archived."""
    channels = await client.list_channels()
    return [
        to_message_channel(c) for c in channels if c.is_member and not c.is_archived
    ]


def _strip_prefix(actor_id: str) -> str | None:
    if actor_id.startswith(ACTOR_PREFIX):
        return actor_id[len(ACTOR_PREFIX) :]
    return None


async def collect_contacts(
    client: SlackSource, thread: NormalizedThread
) -> list[Contact]:
    """Resolve note authors and mentioned users to contacts with an email."""
    user_ids: dict[str, None] = {}
    for note in thread.notes:
        for actor in [note.author, *(note.mentions or [])]:
            user_id = _strip_prefix(actor.id)
            if user_id:
                user_ids[user_id] = None

    contacts: list[Contact] = []
    for user_id in user_ids:
        user = await client.get_user(user_id)
        if not user or not user.profile or not user.profile.email:
            continue
        contacts.append(
            Contact(
                email=user.profile.email,
                name=user.profile.display_name
                or user.profile.real_name
                or user.name
                or None,
            )
        )
    return contacts


async def run_channel_sync(
    client: SlackSource,
    state: SyncState,
    sink: ThreadSink,
    repository: SyncStateRepository | None = None,
    mode: SyncMode = "full",
    concurrency: int = 1,
) -> SyncSummary:
    """Sync pages until Slack reports no more history for ``state``."""
    summary = SyncSummary(channel_id=state.channel_id)
    if repository is not None:
        repository.save_state(state)

    while True:
        summary.batches += 1
        logger.info(
            "Starting Slack sync batch %s (%s) for channel %s",
            summary.batches,
            mode,
            state.channel_id,
        )
        try:
            result = await sync_slack_channel(client, state, concurrency=concurrency)
        except Exception as e:
            logger.error(
                f"Error in sync batch {summary.batches} for channel "
                f"{state.channel_id}: {e}"
            )
            raise

        for raw_thread in result.threads:
            try:
                thread = transform_slack_thread(raw_thread, state.channel_id)
                if not thread.notes:
                    continue
                contacts = await collect_contacts(client, thread)
                await sink(thread, contacts)
                summary.threads += 1
                summary.notes += len(thread.notes)
            except Exception as e:
                logger.error(f"Failed to process thread in {state.channel_id}: {e}")

        state = result.state
        if repository is not None:
            repository.save_state(state)

        if not state.more:
            break
        if not state.cursor:
            logger.warning(
                f"Slack reported more history for {state.channel_id} "
                f"without a cursor; stopping after batch {summary.batches}"
            )
            break

    logger.info(
        "Slack %s sync completed after %s batches for channel %s "
        "(%s threads, %s notes)",
        mode,
        summary.batches,
        state.channel_id,
        summary.threads,
        summary.notes,
    )
    if repository is not None and mode == "full":
        repository.clear_state(state.channel_id)
    return summary
