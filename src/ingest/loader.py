"""Config-driven loader syncing several channels at once.

Resolves channel names to IDs, resumes each channel from its stored SyncState
(or starts a new one bounded by ``sync_days``) and runs the channel syncs
concurrently. Channels share no state, so one failing channel does not stop
the others.
"""

from __future__ import annotations

import asyncio
import json
import logging
import sys
from collections.abc import Awaitable
from datetime import datetime, timedelta
from pathlib import Path
from typing import TextIO

from config import SyncConfig, get_slack_token, load_sync_config
from ingest.runner import SyncSummary, ThreadSink, list_sync_channels, run_channel_sync
from ingest.sync import incremental_sync_state, initial_sync_state
from models import Contact, NormalizedThread
from repository import SyncStateRepository
from slack_client.async_client import AsyncSlackClient
from slack_client.errors import SlackClientError

log = logging.getLogger(__name__)


def json_lines_sink(stream: TextIO | None = None) -> ThreadSink:
    """Sink writing each thread, with its contacts, as one JSON line."""
    out = stream or sys.stdout

    async def _write(thread: NormalizedThread, contacts: list[Contact]) -> None:
        record = thread.to_record()
        record["contacts"] = [c.model_dump(exclude_none=True) for c in contacts]
        out.write(json.dumps(record) + "\n")
        out.flush()

    return _write


async def resolve_channel_ids(
    client: AsyncSlackClient, names: list[str]
) -> dict[str, str]:
    """Map configured channel names (or raw IDs) to channel IDs."""
    channels = await list_sync_channels(client)
    by_name = {c.name: c.id for c in channels}
    known_ids = {c.id for c in channels}

    resolved: dict[str, str] = {}
    for name in names:
        key = name.lstrip("#")
        if key in by_name:
            resolved[key] = by_name[key]
        elif key in known_ids:
            resolved[key] = key
        else:
            log.warning(
                "Channel '%s' not found in Slack workspace or bot lacks access", name
            )
    return resolved


async def _sync_one(
    client: AsyncSlackClient,
    repo: SyncStateRepository,
    channel_name: str,
    channel_id: str,
    cfg: SyncConfig,
    sink: ThreadSink,
    incremental: bool = False,
) -> SyncSummary | None:
    # an incremental run covers the recent window and leaves stored state alone
    state = None if incremental else repo.get_state(channel_id)
    if incremental:
        state = incremental_sync_state(channel_id)
    elif state is not None:
        log.info("Resuming %s from stored cursor", channel_name)
    else:
        time_min = None
        if cfg.sync_days:
            time_min = datetime.now() - timedelta(days=cfg.sync_days)
        state = initial_sync_state(channel_id, time_min)

    try:
        return await run_channel_sync(
            client,
            state,
            sink,
            repository=None if incremental else repo,
            mode="incremental" if incremental else "full",
            concurrency=cfg.thread_concurrency,
        )
    except SlackClientError as e:
        error_msg = str(e)
        if "channel_not_found" in error_msg or "not_in_channel" in error_msg:
            log.warning(
                "Skipping channel '%s' (%s): channel not found or no access",
                channel_name,
                channel_id,
            )
        else:
            log.error(
                "Failed to sync channel '%s' (%s): %s",
                channel_name,
                channel_id,
                error_msg,
            )
        return None
    except Exception as e:
        log.error(
            "Unexpected error syncing channel '%s' (%s): %s",
            channel_name,
            channel_id,
            e,
            exc_info=True,
        )
        return None


async def async_run_loader(
    config_path: str | Path | None = None,
    channels: list[str] | None = None,
    sync_days: int | None = None,
    reset_sync_state: bool = False,
    incremental: bool = False,
    sink: ThreadSink | None = None,
    client: AsyncSlackClient | None = None,
    repo: SyncStateRepository | None = None,
) -> list[SyncSummary]:
    """Asynchronous entry point for the loader."""
    cfg = load_sync_config(config_path)
    if channels:
        cfg.channels = channels
    if sync_days is not None:
        cfg.sync_days = sync_days

    repo = repo or SyncStateRepository(cfg.database_path)
    if reset_sync_state:
        repo.reset_sync_state()

    if client is None:
        client = AsyncSlackClient(
            get_slack_token(), rate_limit_retries=cfg.rate_limit_retries
        )
        await client.test_auth()

    channel_ids = await resolve_channel_ids(client, cfg.channels)
    sink = sink or json_lines_sink()

    tasks: list[Awaitable[SyncSummary | None]] = [
        _sync_one(client, repo, name, ch_id, cfg, sink, incremental)
        for name, ch_id in channel_ids.items()
    ]
    results = await asyncio.gather(*tasks)

    summaries = [s for s in results if s is not None]
    log.info("Loader finished: %s/%s channels synced", len(summaries), len(tasks))
    return summaries


def run_loader(
    config_path: str | Path | None = None,
    channels: list[str] | None = None,
    sync_days: int | None = None,
    reset_sync_state: bool = False,
    incremental: bool = False,
) -> list[SyncSummary]:
    """Synchronous wrapper to call from CLI."""
    return asyncio.run(
        async_run_loader(
            config_path,
            channels=channels,
            sync_days=sync_days,
            reset_sync_state=reset_sync_state,
            incremental=incremental,
        )
    )
