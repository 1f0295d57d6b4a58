"""Domain models used across threadsync.

Raw Slack payloads are decoded into these models at the client boundary, and the
normalized link/notes records handed to the activity store are built from them.
"""

from __future__ import annotations

import re
from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

TS_RE = re.compile(r"^\d+(\.\d+)?$")


class SlackRecord(BaseModel):
    """Provider-native record: immutable, keeps any keys Slack adds."""

    model_config = ConfigDict(frozen=True, extra="allow")


class Reaction(SlackRecord):
    name: str
    users: list[str] = Field(default_factory=list)
    count: int = 0


class SlackFile(SlackRecord):
    id: str
    name: str | None = None
    mimetype: str | None = None
    url_private: str | None = None


class SlackMessage(SlackRecord):
    """Represents a single raw Slack message as returned by the history APIs."""

    type: str = Field("message", description="Slack event type")
    subtype: str | None = Field(None, description="e.g. channel_join, bot_message")
    ts: str = Field(..., description="Message timestamp token, unique per channel")
    thread_ts: str | None = Field(None, description="Thread parent ts if applicable")
    user: str | None = Field(None, description="User ID of the sender")
    bot_id: str | None = Field(None, description="Bot ID when posted by an app")
    text: str = Field("", description="Raw mrkdwn text")
    reactions: list[Reaction] | None = None
    files: list[SlackFile] | None = None
    reply_count: int | None = Field(None, description="Only set on thread parents")
    reply_users_count: int | None = None

    @field_validator("ts", "thread_ts")
    @classmethod
    def _check_ts(cls, v: str | None) -> str | None:
        """Timestamp tokens are fixed-point seconds, e.g. 1700000000.000100."""
        if v is not None and not TS_RE.match(v):
            raise ValueError(f"not a Slack timestamp: {v!r}")
        return v

    @property
    def author_id(self) -> str | None:
        return self.user or self.bot_id

    @property
    def timestamp(self) -> float:
        return float(self.ts)


class TextValue(SlackRecord):
    value: str = ""


class SlackChannel(SlackRecord):
    """Represents a Slack public or private channel."""

    id: str
    name: str = ""
    is_channel: bool = False
    is_group: bool = False
    is_private: bool = False
    is_archived: bool = False
    is_member: bool = False
    topic: TextValue | None = None
    purpose: TextValue | None = None


class SlackUserProfile(SlackRecord):
    email: str | None = None
    display_name: str | None = None
    real_name: str | None = None
    image_72: str | None = None


class SlackUser(SlackRecord):
    """Represents a Slack user profile."""

    id: str = Field(..., description="Slack user ID, e.g., U123456")
    name: str = Field("", description="Handle of the user")
    real_name: str | None = None
    profile: SlackUserProfile | None = None


class HistoryPage(BaseModel):
    """One page of conversations.history."""

    messages: list[SlackMessage]
    has_more: bool = False
    next_cursor: str | None = None


class SyncState(BaseModel):
    """Resumption point for one channel. Owned and persisted by the caller."""

    model_config = ConfigDict(frozen=True)

    channel_id: str
    cursor: str | None = None
    more: bool | None = None
    oldest: str | None = None
    latest: str | None = None


class OutputRecord(BaseModel):
    """Output record: snake_case attributes, camelCase on the wire."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Actor(OutputRecord):
    id: str = Field(..., description="Namespaced actor id, e.g. slack:U123")


class NormalizedNote(OutputRecord):
    key: str = Field(..., description="Source message ts, the upsert key")
    author: Actor
    content: str
    mentions: list[Actor] | None = None


class ThreadMeta(OutputRecord):
    channel_id: str
    thread_ts: str


class NormalizedThread(OutputRecord):
    """A link with notes, ready for upsert by the activity store."""

    source: str | None = None
    type: str = "message"
    title: str
    created: datetime | None = None
    meta: ThreadMeta | None = None
    notes: list[NormalizedNote] = Field(default_factory=list)
    preview: str | None = None

    def to_record(self) -> dict[str, Any]:
        """Return a JSON-ready dict without unset optional fields."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class MessageChannel(BaseModel):
    """A channel offered to the user for sync selection."""

    id: str
    name: str
    description: str | None = None
    primary: bool = False


class Contact(BaseModel):
    email: str
    name: str | None = None
