"""
採点カテゴリの巡回処理。

カテゴリごとにリンクの有無を確認して展開し、結果コンテナの表示を待って
paginator.py に処理を委譲する。

例外方針:
- カテゴリ単位の失敗（リンク無し、コンテナ表示タイムアウト、DOM不一致、想定外の例外など）は
  ログ出力のみ行い、そのカテゴリは0件として次のカテゴリへ進む。
- カテゴリが存在しない場合と処理中に失敗した場合は区別しない。
"""

from __future__ import annotations

import logging
from typing import List, Sequence

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import Page
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from karaoke_scraper.errors import CategoryUnavailable, ScrapeError
from karaoke_scraper.models import ScoreRecord, ScoringCategory
from karaoke_scraper.paginator import (
    PAGE_SETTLE_MS,
    STABLE_POLL_MS,
    STABLE_TIMEOUT_MS,
    scrape_pages,
)

logger = logging.getLogger(__name__)

CATEGORY_TIMEOUT_MS = 5000
ACTIVATION_SETTLE_MS = 2000


def no_result_selector(category: ScoringCategory) -> str:
    return f"{category.result_selector} .no_result"


async def scrape_category(
    page: Page,
    category: ScoringCategory,
    container_timeout_ms: int = CATEGORY_TIMEOUT_MS,
    activation_settle_ms: int = ACTIVATION_SETTLE_MS,
    page_settle_ms: int = PAGE_SETTLE_MS,
    stable_poll_ms: int = STABLE_POLL_MS,
    stable_timeout_ms: int = STABLE_TIMEOUT_MS,
) -> List[ScoreRecord]:
    """
    1カテゴリ分の採点結果を取得する。

    Args:
        page: ログイン済みの Page。
        category: 対象カテゴリ。
        container_timeout_ms: 結果コンテナ表示待ちの上限（ミリ秒）。
        activation_settle_ms: カテゴリ展開後の固定待機時間（ミリ秒）。
        page_settle_ms: ページ切り替え後の固定待機時間（ミリ秒）。
        stable_poll_ms: 内容安定判定のポーリング間隔（ミリ秒）。
        stable_timeout_ms: 内容安定判定の上限（ミリ秒）。

    Returns:
        ScoreRecord のリスト。「データなし」表示の場合は空リスト。

    Raises:
        CategoryUnavailable: リンクが無い、または結果コンテナが表示されない場合。
    """
    if await page.locator(category.link_selector).count() == 0:
        raise CategoryUnavailable(f"Link not found for {category.display_name}")

    await page.click(category.link_selector)
    await page.wait_for_timeout(activation_settle_ms)

    try:
        await page.wait_for_selector(category.result_selector, timeout=container_timeout_ms)
    except PlaywrightTimeoutError as e:
        raise CategoryUnavailable(
            f"Result container did not appear for {category.display_name}"
        ) from e

    if await page.locator(no_result_selector(category)).count() > 0:
        logger.info("No data found for %s", category.display_name)
        return []

    return await scrape_pages(
        page,
        category,
        settle_ms=page_settle_ms,
        stable_poll_ms=stable_poll_ms,
        stable_timeout_ms=stable_timeout_ms,
    )


async def walk_categories(
    page: Page,
    categories: Sequence[ScoringCategory],
    **options: int,
) -> List[ScoreRecord]:
    """
    カテゴリを定義順に巡回し、全カテゴリの採点結果を連結して返す。

    1カテゴリの失敗は他のカテゴリに影響させない。

    Args:
        page: ログイン済みの Page。
        categories: 巡回対象カテゴリ（この順序で処理する）。
        **options: scrape_category に渡すタイムアウト・待機時間。

    Returns:
        ScoreRecord のリスト（カテゴリ順、ページ順）。
    """
    records: List[ScoreRecord] = []
    for category in categories:
        logger.info("=== Checking %s ===", category.display_name)
        try:
            category_records = await scrape_category(page, category, **options)
        except CategoryUnavailable as e:
            logger.warning("%s", e)
            continue
        except (PlaywrightError, ScrapeError) as e:
            logger.warning("Error processing %s: %s", category.display_name, e)
            continue
        except Exception:  # pylint: disable=broad-except
            logger.exception("Unexpected error processing %s", category.display_name)
            continue

        logger.info(
            "Total scores for %s: %d", category.display_name, len(category_records)
        )
        records = records + category_records

    logger.info("Total scores found: %d", len(records))
    return records
