"""実行全体（設定読み込み〜保存〜終了コード）のテスト。"""

from __future__ import annotations

import json
from pathlib import Path

import pytest

import main
from karaoke_scraper.errors import AuthenticationError
from karaoke_scraper.models import ScoreRecord
from karaoke_scraper.store import save_snapshot

FRESH = [
    ScoreRecord("A", "X", 85.0, "2024-01-01", "T"),
    ScoreRecord("B", "Y", 92.5, "2024-01-02", "T"),
]


@pytest.fixture
def workdir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("CLUB_DAM_ID", "user")
    monkeypatch.setenv("CLUB_DAM_PASS", "pass")
    monkeypatch.delenv("DISCORD_WEBHOOK_URL", raising=False)
    return tmp_path


def _fake_scrape(records):
    async def _scrape(_settings, _credentials):
        return list(records)

    return _scrape


@pytest.mark.light
def test_missing_credentials_exit_non_zero_before_scraping(
    workdir: Path, monkeypatch: pytest.MonkeyPatch, capsys
):
    monkeypatch.delenv("CLUB_DAM_ID")
    monkeypatch.delenv("CLUB_DAM_PASS")

    def _must_not_run(*_args, **_kwargs):
        raise AssertionError("scrape must not start")

    monkeypatch.setattr(main, "scrape", _must_not_run)

    assert main.main([]) == 1
    assert "CLUB_DAM_ID" in capsys.readouterr().err


@pytest.mark.light
def test_successful_run_writes_both_destinations(workdir: Path, monkeypatch: pytest.MonkeyPatch, capsys):
    monkeypatch.setattr(main, "scrape", _fake_scrape(FRESH))

    assert main.main([]) == 0

    primary = workdir / "scores.json"
    public = workdir / "public" / "scores.json"
    assert primary.read_bytes() == public.read_bytes()
    saved = json.loads(primary.read_text(encoding="utf-8"))
    assert [s["songName"] for s in saved] == ["B", "A"]

    out = capsys.readouterr().out
    assert "Total songs: 2" in out
    assert "Total scores: 2" in out


@pytest.mark.light
def test_rerun_with_same_scores_adds_nothing(workdir: Path, monkeypatch: pytest.MonkeyPatch):
    save_snapshot(["scores.json"], [FRESH[0]])
    monkeypatch.setattr(main, "scrape", _fake_scrape(FRESH))

    assert main.main([]) == 0
    assert main.main([]) == 0

    saved = json.loads((workdir / "scores.json").read_text(encoding="utf-8"))
    assert len(saved) == 2


@pytest.mark.light
def test_zero_scores_exits_zero_without_writing(workdir: Path, monkeypatch: pytest.MonkeyPatch, capsys):
    monkeypatch.setattr(main, "scrape", _fake_scrape([]))

    assert main.main([]) == 0
    assert not (workdir / "scores.json").exists()
    assert "No scores found." in capsys.readouterr().out


@pytest.mark.light
def test_authentication_failure_exits_non_zero(workdir: Path, monkeypatch: pytest.MonkeyPatch, capsys):
    async def _failing_scrape(_settings, _credentials):
        raise AuthenticationError("Login timed out after 60000 ms")

    monkeypatch.setattr(main, "scrape", _failing_scrape)

    assert main.main([]) == 1
    assert not (workdir / "scores.json").exists()
    assert "AuthenticationError" in capsys.readouterr().err


@pytest.mark.light
def test_failure_is_notified_to_discord(workdir: Path, monkeypatch: pytest.MonkeyPatch):
    async def _failing_scrape(_settings, _credentials):
        raise AuthenticationError("bad password")

    sent = []
    monkeypatch.setenv("DISCORD_WEBHOOK_URL", "https://discord.invalid/webhook")
    monkeypatch.setattr(main, "scrape", _failing_scrape)
    monkeypatch.setattr(main, "send_discord_message", lambda url, msg: sent.append((url, msg)))

    assert main.main([]) == 1
    assert len(sent) == 1
    assert "bad password" in sent[0][1]


@pytest.mark.light
def test_settings_file_controls_output_paths(workdir: Path, monkeypatch: pytest.MonkeyPatch):
    (workdir / "custom.yaml").write_text(
        "snapshot_path: data/scores.json\ndashboard_path: web/scores.json\n",
        encoding="utf-8",
    )
    monkeypatch.setattr(main, "scrape", _fake_scrape(FRESH))

    assert main.main(["--settings", "custom.yaml"]) == 0
    assert (workdir / "data" / "scores.json").exists()
    assert (workdir / "web" / "scores.json").exists()
