"""ログイン処理のテスト。"""

from __future__ import annotations

import asyncio

import pytest
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from karaoke_scraper.config import Credentials
from karaoke_scraper.errors import AuthenticationError
from karaoke_scraper.session import (
    ID_INPUT,
    LOGIN_URL,
    PASSWORD_INPUT,
    SUBMIT_BUTTON,
    login,
)
from tests.fakes import FakePage

CREDS = Credentials(user_id="dam-user", password="dam-pass")


def _login_form(page: FakePage) -> FakePage:
    for selector in (ID_INPUT, PASSWORD_INPUT, SUBMIT_BUTTON):
        page.counts[selector] = 1
    return page


@pytest.mark.light
def test_login_fills_form_and_submits(fake_page: FakePage):
    _login_form(fake_page)

    result = asyncio.run(login(fake_page, CREDS))

    assert result is fake_page
    assert fake_page.visited == [LOGIN_URL]
    assert fake_page.filled == {ID_INPUT: "dam-user", PASSWORD_INPUT: "dam-pass"}
    assert fake_page.clicks == [SUBMIT_BUTTON]


@pytest.mark.light
def test_missing_login_form_raises(fake_page: FakePage):
    fake_page.counts[ID_INPUT] = 1

    with pytest.raises(AuthenticationError, match="not found"):
        asyncio.run(login(fake_page, CREDS))

    assert fake_page.filled == {}


@pytest.mark.light
def test_navigation_timeout_raises_without_retry(fake_page: FakePage):
    _login_form(fake_page)
    fake_page.navigation_error = PlaywrightTimeoutError("Timeout 60000ms exceeded.")

    with pytest.raises(AuthenticationError, match="timed out"):
        asyncio.run(login(fake_page, CREDS))

    assert fake_page.clicks == [SUBMIT_BUTTON]


@pytest.mark.light
def test_login_page_navigation_error_raises(fake_page: FakePage):
    fake_page.goto_error = PlaywrightError("net::ERR_NAME_NOT_RESOLVED")

    with pytest.raises(AuthenticationError):
        asyncio.run(login(fake_page, CREDS, login_url="https://example.invalid/login"))


@pytest.mark.light
def test_login_waits_are_bounded_by_timeout(fake_page: FakePage):
    _login_form(fake_page)

    asyncio.run(login(fake_page, CREDS))
    asyncio.run(login(fake_page, CREDS, timeout_ms=1234))

    assert fake_page.goto_timeouts == [60000, 1234]
    assert fake_page.navigation_timeouts == [60000, 1234]
