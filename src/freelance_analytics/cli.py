"""Command-line interface for the analytics jobs.

Provides subcommands: `ingest`, `snapshot`, `report` and `conversations`.
Each command is implemented as a `cmd_*` function that accepts an argparse
namespace.
"""
from __future__ import annotations

import argparse
import json
import logging
from datetime import datetime, timezone
from pathlib import Path

from dotenv import load_dotenv

from freelance_analytics.config import get_settings
from freelance_analytics.logging_config import configure_logging
from freelance_analytics.db import get_client, get_db

# INGEST
from freelance_analytics.ingest.read_export import read_export
from freelance_analytics.ingest.load_raw import RAW_TABLES, load_raw_to_mongo

# RECORDS
from freelance_analytics.records import fetch_earnings, fetch_messages, fetch_proposals
from freelance_analytics.conversations import conversation_partners

# ANALYTICS
from freelance_analytics.aggregate.snapshots import (
    build_user_snapshot,
    build_user_snapshots,
    compute_platform_totals,
)
from freelance_analytics.aggregate.load_snapshots import (
    PLATFORM_COLLECTION,
    SNAPSHOT_COLLECTION,
    load_snapshots,
)

log = logging.getLogger(__name__)


def _open_db():
    s = get_settings()
    client = get_client(s.mongo_uri)
    return s, client, get_db(client, s.mongo_db)


def _print_json(payload: object) -> None:
    print(json.dumps(payload, indent=2, default=str))


# --------------------------------------------------
# INGEST
# --------------------------------------------------
def cmd_ingest(args: argparse.Namespace) -> None:
    """Load a table export into its raw collection.

    Args:
        args: argparse namespace with `table` and `path`.
    """
    path = Path(args.path)
    if not path.exists():
        raise FileNotFoundError(f"Export file not found: {path}")

    ddf = read_export(path)
    total = load_raw_to_mongo(ddf, args.table)
    log.info("Ingest completed: %s <- %s (%d documents)", args.table, path, total)


# --------------------------------------------------
# SNAPSHOT
# --------------------------------------------------
def cmd_snapshot(args: argparse.Namespace) -> None:
    """Build every user's analytics snapshot and the platform totals.

    Raises:
        RuntimeError: when the store holds neither proposals nor earnings.
    """
    s, client, db = _open_db()
    try:
        proposals = fetch_proposals(db)
        earnings = fetch_earnings(db)
        if not proposals and not earnings:
            raise RuntimeError("proposals and earnings are empty. Run ingest first.")

        now = datetime.now(timezone.utc)
        window = args.window or s.window
        snapshots = build_user_snapshots(
            proposals, earnings, window=window, tz=s.bucket_tz, now=now
        )
        load_snapshots(db, snapshots, SNAPSHOT_COLLECTION)
        load_snapshots(
            db,
            [compute_platform_totals(proposals, earnings, now=now)],
            PLATFORM_COLLECTION,
            key_fields=(),
        )
    finally:
        client.close()

    log.info("Snapshots generated for %d users.", len(snapshots))


# --------------------------------------------------
# REPORT
# --------------------------------------------------
def cmd_report(args: argparse.Namespace) -> None:
    """Compute one user's analytics from the store and print them as JSON."""
    s, client, db = _open_db()
    try:
        proposals = fetch_proposals(db, args.user_id)
        earnings = fetch_earnings(db, args.user_id)
    finally:
        client.close()

    snapshot = build_user_snapshot(
        args.user_id,
        proposals,
        earnings,
        window=args.window or s.window,
        tz=s.bucket_tz,
    )
    _print_json(snapshot.model_dump(mode="json"))


# --------------------------------------------------
# CONVERSATIONS
# --------------------------------------------------
def cmd_conversations(args: argparse.Namespace) -> None:
    """Print the users `--user-id` has exchanged messages with."""
    _, client, db = _open_db()
    try:
        messages = fetch_messages(db, args.user_id)
    finally:
        client.close()

    partners = conversation_partners(messages, args.user_id)
    _print_json([p.model_dump(mode="json") for p in partners])


# --------------------------------------------------
# CLI
# --------------------------------------------------
def build_parser() -> argparse.ArgumentParser:
    """Build and return the top-level argument parser for the CLI.

    Returns:
        Configured argparse.ArgumentParser instance.
    """
    p = argparse.ArgumentParser(prog="freelance_analytics")
    p.add_argument("--log-level", default="INFO")
    sub = p.add_subparsers(dest="cmd", required=True)

    p_ingest = sub.add_parser("ingest")
    p_ingest.add_argument("--table", choices=RAW_TABLES, required=True)
    p_ingest.add_argument("--path", required=True)

    p_snapshot = sub.add_parser("snapshot")
    p_snapshot.add_argument("--window", type=int, default=None)

    p_report = sub.add_parser("report")
    p_report.add_argument("--user-id", required=True)
    p_report.add_argument("--window", type=int, default=None)

    p_conv = sub.add_parser("conversations")
    p_conv.add_argument("--user-id", required=True)

    return p


COMMANDS = {
    "ingest": cmd_ingest,
    "snapshot": cmd_snapshot,
    "report": cmd_report,
    "conversations": cmd_conversations,
}


def main(argv: list[str] | None = None) -> None:
    """CLI entry point: parse args, configure logging and dispatch commands."""
    load_dotenv()
    args = build_parser().parse_args(argv)
    configure_logging(get_settings().log_path, level=args.log_level)

    window = getattr(args, "window", None)
    if window is not None and window < 1:
        raise SystemExit("--window must be >= 1")

    handler = COMMANDS.get(args.cmd)
    if handler is None:
        raise SystemExit(2)
    handler(args)


if __name__ == "__main__":
    main()
