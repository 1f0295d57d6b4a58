"""Conversion of Slack mrkdwn into plain markdown."""

from __future__ import annotations

import re

USER_MENTION_RE = re.compile(r"<@([A-Z0-9]+)>")

# Applied in order: bold must run before italic so `**x**` is not re-matched.
_SUBSTITUTIONS: list[tuple[re.Pattern[str], str]] = [
    (USER_MENTION_RE, r"@\1"),
    (re.compile(r"<#([A-Z0-9]+)\|([^>]+)>"), r"#\2"),
    (re.compile(r"<(https?://[^|>]+)\|([^>]+)>"), r"\2 (\1)"),
    (re.compile(r"<(https?://[^>]+)>"), r"\1"),
    (re.compile(r"\*([^*]+)\*"), r"**\1**"),
    (re.compile(r"_([^_]+)_"), r"*\1*"),
    (re.compile(r"~([^~]+)~"), r"~~\1~~"),
    (re.compile(r"`([^`]+)`"), r"`\1`"),
]


def format_slack_text(text: str | None) -> str:
    """Replace mentions, channel links, hyperlinks and emphasis with markdown.

    Examples:
        "<@U123> said *hi* to <#C1|general>" -> "@U123 said **hi** to #general"
        "<https://x.io|docs>" -> "docs (https://x.io)"
    """
    if not text:
        return ""
    for pattern, replacement in _SUBSTITUTIONS:
        text = pattern.sub(replacement, text)
    return text


def parse_user_mentions(text: str | None) -> list[str]:
    """Return mentioned user IDs in order of appearance."""
    if not text:
        return []
    return USER_MENTION_RE.findall(text)
