"""Configuration management for threadsync."""

import logging
import os
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, ValidationError

logger = logging.getLogger(__name__)

TOKEN_ENV_VARS = ("SLACK_BOT_TOKEN", "SLACK_USER_KEY")


class SyncConfig(BaseModel):
    channels: list[str] = []  # noqa: RUF012 (pydantic handles default)
    sync_days: int = 7
    thread_concurrency: int = 1
    rate_limit_retries: int = 0
    database_path: str | None = None


def get_project_root() -> Path:
    """Get the project root directory."""
    return Path(__file__).parent.parent


def load_config(config_path: str | Path | None = None) -> dict[str, Any]:
    """Load configuration from YAML file."""
    if config_path is None:
        config_path = get_project_root() / "config" / "config.yaml"

    try:
        with open(config_path) as f:
            config_data = yaml.safe_load(f)
            return config_data if isinstance(config_data, dict) else {}
    except FileNotFoundError:
        logger.warning(f"Config file not found at {config_path}")
        return {}
    except yaml.YAMLError as e:
        logger.error(f"Error parsing YAML config: {e}")
        return {}


def load_sync_config(config_path: str | Path | None = None) -> SyncConfig:
    """Build a SyncConfig from the ``slack:`` section of the YAML config."""
    slack_cfg = load_config(config_path).get("slack") or {}
    if not isinstance(slack_cfg, dict):
        logger.error("'slack' section of config must be a mapping, using defaults")
        return SyncConfig()
    try:
        return SyncConfig(**slack_cfg)
    except ValidationError as e:
        logger.error(f"Invalid slack config, using defaults: {e}")
        return SyncConfig()


def get_slack_token() -> str | None:
    """Return the Slack token from the environment (or a .env file)."""
    load_dotenv()
    for name in TOKEN_ENV_VARS:
        token = os.environ.get(name)
        if token:
            logger.debug(f"Loaded {name}: {token[:6]}...{token[-4:]}")
            return token
    logger.warning("No Slack token found in environment!")
    return None


def get_data_paths() -> dict[str, Path]:
    """Get standardized data directory paths."""
    root = get_project_root()
    return {
        "data": root / "data",
        "config": root / "config",
    }
