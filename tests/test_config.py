from __future__ import annotations

import pytest

from freelance_analytics.config import get_settings, parse_window


def test_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("MONGO_DB", "ANALYTICS_TZ", "ANALYTICS_WINDOW"):
        monkeypatch.delenv(name, raising=False)
    s = get_settings()
    assert s.mongo_db == "freelance"
    assert s.bucket_tz == "UTC"
    assert s.window == 6


def test_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ANALYTICS_TZ", "Europe/Madrid")
    monkeypatch.setenv("ANALYTICS_WINDOW", "12")
    monkeypatch.setenv("ANALYTICS_LOG", "")
    s = get_settings()
    assert s.bucket_tz == "Europe/Madrid"
    assert s.window == 12
    assert s.log_path is None


@pytest.mark.parametrize("value", ["0", "-3", "six"])
def test_invalid_window(monkeypatch: pytest.MonkeyPatch, value: str) -> None:
    monkeypatch.setenv("ANALYTICS_WINDOW", value)
    with pytest.raises(RuntimeError):
        get_settings()


@pytest.mark.parametrize("raw, expected", [(None, 6), ("", 6), (" 9 ", 9), ("1", 1)])
def test_parse_window_values(raw: str | None, expected: int) -> None:
    assert parse_window(raw) == expected


def test_parse_window_rejects_non_positive() -> None:
    with pytest.raises(RuntimeError):
        parse_window("0")
