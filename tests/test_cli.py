from __future__ import annotations

import pytest

from freelance_analytics.cli import COMMANDS, build_parser


def test_parser_subcommands() -> None:
    parser = build_parser()

    args = parser.parse_args(["ingest", "--table", "earnings", "--path", "e.csv"])
    assert (args.cmd, args.table, args.path) == ("ingest", "earnings", "e.csv")

    args = parser.parse_args(["report", "--user-id", "u1", "--window", "3"])
    assert (args.cmd, args.user_id, args.window) == ("report", "u1", 3)

    args = parser.parse_args(["snapshot"])
    assert args.window is None

    assert set(COMMANDS) == {"ingest", "snapshot", "report", "conversations"}


def test_parser_rejects_unknown_table() -> None:
    with pytest.raises(SystemExit):
        build_parser().parse_args(["ingest", "--table", "jobs", "--path", "x.csv"])
