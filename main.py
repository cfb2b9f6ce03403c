import argparse
import asyncio
import logging
import os
import sys
import traceback
from dataclasses import replace
from datetime import datetime, timezone
from typing import List, Optional

from karaoke_scraper.config import (
    ENV_DISCORD_WEBHOOK,
    Credentials,
    Settings,
    load_credentials,
    load_settings,
)
from karaoke_scraper.discord_notify import (
    build_failure_message,
    build_success_message,
    send_discord_message,
)
from karaoke_scraper.errors import ConfigurationError
from karaoke_scraper.merger import MergeResult, merge_records
from karaoke_scraper.models import ScoreRecord
from karaoke_scraper.report import print_summary
from karaoke_scraper.session import login, open_page
from karaoke_scraper.store import load_snapshot, save_snapshot
from karaoke_scraper.walker import walk_categories

logger = logging.getLogger(__name__)


def now_iso() -> str:
    """
    現在のUTC時刻をISO 8601形式の文字列で取得する。

    Returns:
        str: ISO 8601形式でフォーマットされた現在のUTC時刻文字列。
    """
    return datetime.now(timezone.utc).isoformat()


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="DAM★とも 採点履歴スクレイパー")
    parser.add_argument("--settings", default="settings.yaml", help="設定ファイルのパス")
    parser.add_argument("--headed", action="store_true", help="ブラウザを表示して実行する")
    return parser.parse_args(argv)


async def scrape(settings: Settings, credentials: Credentials) -> List[ScoreRecord]:
    """ログインして全カテゴリの採点結果を取得する。"""
    async with open_page(headless=settings.headless) as page:
        await login(
            page,
            credentials,
            login_url=settings.login_url,
            timeout_ms=settings.timeouts.login_ms,
        )
        return await walk_categories(
            page, settings.categories, **settings.timeouts.walker_options()
        )


def persist(settings: Settings, fresh: List[ScoreRecord]) -> MergeResult:
    """前回のスナップショットへ差分マージし、全保存先へ書き込む。"""
    existing = load_snapshot(settings.snapshot_path)
    result = merge_records(existing, fresh)
    logger.info("Found %d new scores to add", len(result.new))

    save_snapshot(settings.output_paths, result.combined)
    return result


def run(settings: Settings, credentials: Credentials) -> Optional[MergeResult]:
    """
    スクレイピングから保存までを実行する。

    取得件数が0件の場合はスナップショットを更新せず None を返す。
    """
    fresh = asyncio.run(scrape(settings, credentials))
    if not fresh:
        print("No scores found.")
        return None

    result = persist(settings, fresh)
    print_summary(result.combined, top_n=settings.top_n)
    return result


def main(argv: Optional[List[str]] = None) -> int:
    """
    DAM★とも採点履歴の取得とスナップショット更新を行うメイン処理。
    以下の処理を順序実行する:
    1. 設定ファイルと認証情報の読み込み
    2. ログインして各採点カテゴリの全ページを取得
    3. 既存の scores.json へ差分マージし、データ用・公開用の両パスへ保存
    4. Discord Webhookで処理結果を通知（成功/失敗）
    環境変数の要件:
    - CLUB_DAM_ID: DAM★とものログインID
    - CLUB_DAM_PASS: DAM★とものパスワード
    - DISCORD_WEBHOOK_URL: Discord通知先(オプション)
    Returns:
        int: 終了コード。成功（0件の場合を含む）は0、失敗は1。
    """
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    args = parse_args(argv)

    try:
        settings = load_settings(args.settings)
        credentials = load_credentials()
    except ConfigurationError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if args.headed:
        settings = replace(settings, headless=False)

    discord_webhook = os.environ.get(ENV_DISCORD_WEBHOOK)

    try:
        result = run(settings, credentials)
    except Exception:
        err = traceback.format_exc()
        print(err, file=sys.stderr)

        if discord_webhook:
            send_discord_message(discord_webhook, build_failure_message(err))
        return 1

    total = len(result.combined) if result else 0
    if discord_webhook:
        new_count = len(result.new) if result else 0
        send_discord_message(discord_webhook, build_success_message(new_count, total, now_iso()))

    print(f"Scraping completed successfully! Total scores: {total}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
