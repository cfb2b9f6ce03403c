"""実行結果サマリとDiscord通知のテスト。"""

from __future__ import annotations

import pytest
import requests

from karaoke_scraper.discord_notify import (
    build_failure_message,
    build_success_message,
    send_discord_message,
)
from karaoke_scraper.models import ScoreRecord
from karaoke_scraper.report import compute_stats, format_summary


def _records():
    return [
        ScoreRecord("A", "X", 95.0, "d1", "T"),
        ScoreRecord("B", "Y", 90.0, None, "T"),
        ScoreRecord("C", "Z", 70.0, "d3", "T"),
    ]


@pytest.mark.light
def test_compute_stats():
    stats = compute_stats(_records())

    assert stats.total == 3
    assert stats.average == pytest.approx(85.0)
    assert stats.highest == 95.0
    assert stats.lowest == 70.0
    assert compute_stats([]) is None


@pytest.mark.light
def test_format_summary_limits_top_n():
    lines = format_summary(_records(), top_n=2)

    assert "1. A - X: 95.0 (d1)" in lines
    assert "2. B - Y: 90.0 (-)" in lines
    assert not any(line.startswith("3. ") for line in lines)
    assert "Average score: 85.00" in lines
    assert "Lowest score: 70.0" in lines


@pytest.mark.light
def test_format_summary_without_records():
    assert format_summary([]) == ["No scores found."]


@pytest.mark.light
def test_messages():
    assert "- new scores: 2" in build_success_message(2, 10, "2026-01-01T00:00:00+00:00")
    assert len(build_failure_message("x" * 5000)) < 2000


@pytest.mark.light
def test_webhook_failure_is_only_logged(monkeypatch: pytest.MonkeyPatch, caplog):
    def _raise_post(*_args, **_kwargs):
        raise requests.ConnectionError("network down")

    monkeypatch.setattr("karaoke_scraper.discord_notify.requests.post", _raise_post)
    caplog.set_level("WARNING")

    send_discord_message("https://discord.invalid/webhook", "hello")

    assert "Failed to send Discord notification" in caplog.text


@pytest.mark.light
def test_empty_webhook_does_nothing(monkeypatch: pytest.MonkeyPatch):
    def _fail(*_args, **_kwargs):
        raise AssertionError("should not post")

    monkeypatch.setattr("karaoke_scraper.discord_notify.requests.post", _fail)

    send_discord_message("", "hello")
