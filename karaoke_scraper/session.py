"""
ブラウザセッションとログイン処理。

ヘッドレスChromiumを起動して1つの Page を用意し、DAM★とものログインフォームへ
認証情報を入力してログイン済みの状態にする。

ログインは失敗しても自動で再試行しない（アカウントロックを避けるため）。
失敗は AuthenticationError として上位へ伝播し、実行全体を中断する。
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import Page, async_playwright
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from karaoke_scraper.config import Credentials
from karaoke_scraper.errors import AuthenticationError

logger = logging.getLogger(__name__)

LOGIN_URL = "https://www.clubdam.com/app/damtomo/auth/member/Login.do"
LOGIN_TIMEOUT_MS = 60000

ID_INPUT = 'input[name="id"]'
PASSWORD_INPUT = 'input[name="password"]'
SUBMIT_BUTTON = 'input[type="submit"][value="ログイン"]'


@asynccontextmanager
async def open_page(headless: bool = True) -> AsyncIterator[Page]:
    """
    Chromium を起動し、新しいコンテキストの Page を返す。

    with ブロックを抜けると、例外の有無に関わらずブラウザを閉じる。
    """
    async with async_playwright() as p:
        browser = await p.chromium.launch(headless=headless)
        try:
            context = await browser.new_context()
            page = await context.new_page()
            yield page
        finally:
            await browser.close()


async def login(
    page: Page,
    credentials: Credentials,
    login_url: str = LOGIN_URL,
    timeout_ms: int = LOGIN_TIMEOUT_MS,
) -> Page:
    """
    ログインページを開いて認証情報を送信し、ログイン後の遷移完了を待つ。

    Args:
        page: 未ログインの Page。
        credentials: DAM★とものIDとパスワード。
        login_url: ログインページURL。
        timeout_ms: ページ遷移待ちの上限（ミリ秒）。

    Returns:
        ログイン済みの Page（引数と同じオブジェクト）。

    Raises:
        AuthenticationError: ログインフォームが見つからない、または
            送信後の遷移がタイムアウト・失敗した場合。
    """
    try:
        logger.info("Navigating to login page: %s", login_url)
        await page.goto(login_url, wait_until="networkidle", timeout=timeout_ms)

        for selector in (ID_INPUT, PASSWORD_INPUT, SUBMIT_BUTTON):
            if await page.locator(selector).count() == 0:
                raise AuthenticationError(f"Login form element not found: {selector}")

        await page.fill(ID_INPUT, credentials.user_id)
        await page.fill(PASSWORD_INPUT, credentials.password)

        logger.info("Submitting login form")
        async with page.expect_navigation(wait_until="networkidle", timeout=timeout_ms):
            await page.click(SUBMIT_BUTTON)
    except PlaywrightTimeoutError as e:
        raise AuthenticationError(f"Login timed out after {timeout_ms} ms") from e
    except PlaywrightError as e:
        raise AuthenticationError(f"Login failed: {e}") from e

    logger.info("Login successful")
    return page
