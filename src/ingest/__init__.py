"""threadsync ingestion package.

This package turns Slack channel history into link/notes records. It keeps API
interactions (`slack_client`) apart from the thread logic here: grouping
(`threads`), text conversion (`formatting`), materialization (`transform`),
one-page sync (`sync`) and the batch drivers (`runner`, `loader`).
"""

from __future__ import annotations

__all__: list[str] = [
    "formatting",
    "loader",
    "runner",
    "sync",
    "threads",
    "transform",
]
