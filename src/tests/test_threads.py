from __future__ import annotations

import pytest

from fakes import FakeSlack, msg
from ingest.threads import assemble_threads, group_by_thread, thread_identity


def test_messages_without_thread_ts_are_singleton_threads() -> None:
    messages = [msg("3.0"), msg("2.0"), msg("1.0")]

    groups = group_by_thread(messages)

    assert list(groups) == ["3.0", "2.0", "1.0"]
    assert all(len(g) == 1 for g in groups.values())
    assert [thread_identity(m) for m in messages] == ["3.0", "2.0", "1.0"]


def test_join_and_leave_events_are_dropped() -> None:
    messages = [
        msg("1.0", subtype="channel_join"),
        msg("2.0", "hello"),
        msg("3.0", subtype="channel_leave"),
        msg("4.0", subtype="bot_message", user=None, bot_id="B1"),
    ]

    groups = group_by_thread(messages)

    assert list(groups) == ["2.0", "4.0"]


def test_grouping_preserves_first_seen_order() -> None:
    messages = [
        msg("5.0", thread_ts="1.0"),
        msg("4.0"),
        msg("1.0", thread_ts="1.0"),
    ]

    groups = group_by_thread(messages)

    assert list(groups) == ["1.0", "4.0"]
    assert [m.ts for m in groups["1.0"]] == ["5.0", "1.0"]


@pytest.mark.asyncio
async def test_parent_with_replies_is_replaced_by_full_reply_set() -> None:
    parent = msg("1.0", "question", thread_ts="1.0", reply_count=2)
    page_local_reply = msg("1.1", "partial", thread_ts="1.0")
    slack = FakeSlack(
        replies={
            "1.0": [
                msg("1.1", "partial", thread_ts="1.0", user="U2"),
                msg("1.2", "answer", thread_ts="1.0", user="U3"),
            ]
        }
    )

    threads = await assemble_threads(slack, "C1", [page_local_reply, parent])

    assert slack.reply_calls == [("C1", "1.0")]
    assert len(threads) == 1
    assert len(threads[0]) == 1 + 2
    assert threads[0][0] is parent
    assert [m.ts for m in threads[0]] == ["1.0", "1.1", "1.2"]


@pytest.mark.asyncio
async def test_no_reply_fetch_without_reply_count(fake_slack: FakeSlack) -> None:
    messages = [msg("2.0"), msg("1.0", thread_ts="1.0", reply_count=0)]

    threads = await assemble_threads(fake_slack, "C1", messages)

    assert fake_slack.reply_calls == []
    assert [[m.ts for m in t] for t in threads] == [["2.0"], ["1.0"]]


@pytest.mark.asyncio
async def test_orphan_replies_stay_as_page_local_group(fake_slack: FakeSlack) -> None:
    messages = [msg("9.2", thread_ts="9.0"), msg("9.1", thread_ts="9.0")]

    threads = await assemble_threads(fake_slack, "C1", messages)

    assert fake_slack.reply_calls == []
    assert [m.ts for m in threads[0]] == ["9.2", "9.1"]


@pytest.mark.asyncio
async def test_concurrent_fetch_keeps_first_seen_order() -> None:
    messages = [
        msg(f"{i}.0", thread_ts=f"{i}.0", reply_count=1) for i in range(1, 6)
    ]
    slack = FakeSlack(
        replies={f"{i}.0": [msg(f"{i}.5", thread_ts=f"{i}.0")] for i in range(1, 6)}
    )

    sequential = await assemble_threads(slack, "C1", messages)
    concurrent = await assemble_threads(slack, "C1", messages, concurrency=3)

    assert concurrent == sequential
    assert [t[0].ts for t in concurrent] == ["1.0", "2.0", "3.0", "4.0", "5.0"]
