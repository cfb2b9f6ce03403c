"""
結果テーブルのページ送り処理。

カテゴリの結果コンテナに表示されるページ番号リンク(.ppage)を順にクリックし、
各ページの描画後HTMLを parser.py へ渡して採点結果を集める。

ページ番号リンクは直前のページが描画されて初めて現れるため、
ページは必ず 1 から昇順に、1ページずつ処理する。
"""

from __future__ import annotations

import hashlib
import logging
import time
from typing import List

from playwright.async_api import Page

from karaoke_scraper.models import ScoreRecord, ScoringCategory
from karaoke_scraper.parser import parse_result_page

logger = logging.getLogger(__name__)

PAGE_SETTLE_MS = 1500
STABLE_POLL_MS = 250
STABLE_TIMEOUT_MS = 3000


def _sha1_hex(s: str) -> str:
    return hashlib.sha1(s.encode("utf-8")).hexdigest()


def pager_selector(category: ScoringCategory) -> str:
    return f"{category.result_selector} .ppage li a"


def page_link_selector(category: ScoringCategory, page_num: int) -> str:
    """ページ番号 page_num のリンクのセレクタ（"1" が "10" に一致しないよう完全一致）。"""
    return f'{pager_selector(category)}:text-is("{page_num}")'


async def count_pages(page: Page, category: ScoringCategory) -> int:
    """
    結果コンテナ内のページ番号リンク数を返す。

    ページャが無い（1ページのみの）場合は 1 を返す。
    """
    n = await page.locator(pager_selector(category)).count()
    return n if n > 0 else 1


async def wait_for_stable_content(
    page: Page,
    selector: str,
    poll_ms: int = STABLE_POLL_MS,
    timeout_ms: int = STABLE_TIMEOUT_MS,
) -> str:
    """
    selector の inner HTML が2回連続で同じになるまでポーリングする。

    timeout_ms を超えた場合もエラーにはせず、その時点のHTMLを返す。

    Args:
        page: Playwright の Page。
        selector: 監視対象のセレクタ。
        poll_ms: ポーリング間隔（ミリ秒）。
        timeout_ms: 待機の上限（ミリ秒）。

    Returns:
        最後に取得した inner HTML。
    """
    deadline = time.monotonic() + timeout_ms / 1000
    html = await page.inner_html(selector)
    digest = _sha1_hex(html)

    while time.monotonic() < deadline:
        await page.wait_for_timeout(poll_ms)
        current = await page.inner_html(selector)
        current_digest = _sha1_hex(current)
        if current_digest == digest:
            return current
        html, digest = current, current_digest

    logger.debug("Content of %s did not settle within %d ms", selector, timeout_ms)
    return html


async def scrape_pages(
    page: Page,
    category: ScoringCategory,
    settle_ms: int = PAGE_SETTLE_MS,
    stable_poll_ms: int = STABLE_POLL_MS,
    stable_timeout_ms: int = STABLE_TIMEOUT_MS,
) -> List[ScoreRecord]:
    """
    カテゴリの全ページを順に読み取り、採点結果を返す。

    1ページ目は描画済みのコンテナをそのまま読む。
    2ページ目以降はページ番号リンクをクリックし、settle_ms 待機したのち
    コンテナの内容が安定するまで待ってから読む。

    Args:
        page: ログイン済みの Page。
        category: 対象カテゴリ。
        settle_ms: ページ切り替え後の固定待機時間（ミリ秒）。
        stable_poll_ms: 内容安定判定のポーリング間隔（ミリ秒）。
        stable_timeout_ms: 内容安定判定の上限（ミリ秒）。

    Returns:
        ScoreRecord のリスト（ページ昇順、ページ内は出現順）。

    Raises:
        playwright.async_api.Error: ページ番号リンクのクリック等に失敗した場合。
    """
    total_pages = await count_pages(page, category)
    logger.info("%s: %d page(s)", category.display_name, total_pages)

    records: List[ScoreRecord] = []
    for page_num in range(1, total_pages + 1):
        if page_num == 1:
            html = await page.inner_html(category.result_selector)
        else:
            await page.click(page_link_selector(category, page_num))
            await page.wait_for_timeout(settle_ms)
            html = await wait_for_stable_content(
                page,
                category.result_selector,
                poll_ms=stable_poll_ms,
                timeout_ms=stable_timeout_ms,
            )

        page_records = parse_result_page(html, category.display_name)
        logger.info(
            "%s: page %d/%d -> %d score(s)",
            category.display_name,
            page_num,
            total_pages,
            len(page_records),
        )
        records = records + page_records

    return records
