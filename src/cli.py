import argparse
import asyncio
import logging
from pathlib import Path

from dotenv import load_dotenv

from config import get_slack_token, load_sync_config
from ingest.loader import run_loader
from ingest.runner import list_sync_channels
from repository import SyncStateRepository
from slack_client.async_client import AsyncSlackClient

# Setup logging
logging.basicConfig(
    level=logging.INFO, format="%(asctime)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

load_dotenv()

# Constants - use absolute paths relative to project root
PROJECT_ROOT = Path(__file__).parent.parent
CONFIG_PATH = PROJECT_ROOT / "config" / "config.yaml"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Sync Slack channel threads into link/notes records"
    )
    parser.add_argument(
        "--config",
        default=str(CONFIG_PATH),
        help="Path to the YAML config file",
    )
    parser.add_argument(
        "--list-channels",
        action="store_true",
        help="List channels available for sync",
    )
    parser.add_argument(
        "--sync",
        nargs="*",
        metavar="CHANNEL",
        help=(
            "Sync the given channels (names or IDs) and write threads as JSON "
            "lines to stdout; with no names, sync the channels from the config"
        ),
    )
    parser.add_argument(
        "--days",
        type=int,
        default=None,
        help="Only fetch history from the last N days on a fresh sync",
    )
    parser.add_argument(
        "--reset-sync-state",
        action="store_true",
        help="Delete stored sync state to force a full refresh",
    )
    parser.add_argument(
        "--recent",
        action="store_true",
        help=(
            "With --sync, fetch only the last hour of history and leave any "
            "stored sync state untouched"
        ),
    )
    return parser


def main(argv: list[str] | None = None) -> None:
    """Main entry point of the threadsync CLI."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.list_channels and args.sync is None and not args.reset_sync_state:
        parser.print_help()
        return

    try:
        if args.list_channels:
            show_channels(args.config)

        if args.sync is not None:
            logger.info("Starting channel sync...")
            summaries = run_loader(
                args.config,
                channels=args.sync or None,
                sync_days=args.days,
                reset_sync_state=args.reset_sync_state,
                incremental=args.recent,
            )
            for s in summaries:
                logger.info(
                    f"{s.channel_id}: {s.threads} threads, {s.notes} notes "
                    f"in {s.batches} batches"
                )
        elif args.reset_sync_state:
            cfg = load_sync_config(args.config)
            SyncStateRepository(cfg.database_path).reset_sync_state()
            logger.info("Sync state reset")

    except Exception as e:
        logger.error(f"Sync failed: {e}")
        raise


def show_channels(config_path: str) -> None:
    """Print the channels the token can sync."""
    cfg = load_sync_config(config_path)
    client = AsyncSlackClient(
        get_slack_token(), rate_limit_retries=cfg.rate_limit_retries
    )
    channels = asyncio.run(list_sync_channels(client))

    print("\n" + "=" * 50)  # noqa: T201
    print("CHANNELS AVAILABLE FOR SYNC")  # noqa: T201
    print("=" * 50)  # noqa: T201
    for channel in channels:
        marker = "*" if channel.primary else " "
        description = f" - {channel.description}" if channel.description else ""
        print(f" {marker} #{channel.name} ({channel.id}){description}")  # noqa: T201
    print("\n" + "=" * 50)  # noqa: T201


if __name__ == "__main__":
    main()
