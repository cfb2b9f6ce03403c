"""
設定の読み込み処理を提供するモジュール。

settings.yaml からスクレイピングに必要な各種設定を読み込み、
アプリ内で扱いやすい dataclass に変換する。
ログイン用の認証情報は設定ファイルには置かず、環境変数（または .env）から読み込む。
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple

import yaml
from dotenv import load_dotenv

from karaoke_scraper.errors import ConfigurationError
from karaoke_scraper.models import DEFAULT_CATEGORIES, ScoringCategory

ENV_USER_ID = "CLUB_DAM_ID"
ENV_PASSWORD = "CLUB_DAM_PASS"
ENV_DISCORD_WEBHOOK = "DISCORD_WEBHOOK_URL"


@dataclass(frozen=True)
class Credentials:
    """
    DAM★とものログイン情報。

    Attributes:
        user_id: ログインID。
        password: パスワード。repr には出力しない。
    """

    user_id: str
    password: str = field(repr=False)


@dataclass(frozen=True)
class TimeoutSettings:
    """
    タイムアウト・待機時間の設定（すべてミリ秒）。

    Attributes:
        login_ms: ログインページ表示・ログイン後遷移待ちの上限。
        category_ms: カテゴリ結果コンテナ表示待ちの上限。
        activation_settle_ms: カテゴリ展開後の固定待機時間。
        page_settle_ms: ページ切り替え後の固定待機時間。
        stable_poll_ms: 内容安定判定のポーリング間隔。
        stable_timeout_ms: 内容安定判定の上限。
    """

    login_ms: int = 60000
    category_ms: int = 5000
    activation_settle_ms: int = 2000
    page_settle_ms: int = 1500
    stable_poll_ms: int = 250
    stable_timeout_ms: int = 3000

    def walker_options(self) -> Dict[str, int]:
        """walk_categories に渡すキーワード引数を返す。"""
        return {
            "container_timeout_ms": self.category_ms,
            "activation_settle_ms": self.activation_settle_ms,
            "page_settle_ms": self.page_settle_ms,
            "stable_poll_ms": self.stable_poll_ms,
            "stable_timeout_ms": self.stable_timeout_ms,
        }


@dataclass(frozen=True)
class Settings:
    """
    アプリケーション全体設定。

    Attributes:
        login_url: ログインページURL。
        snapshot_path: スナップショットの保存先（前回分の読み込み元）。
        dashboard_path: ダッシュボードが読む公開用スナップショットの保存先。
        headless: ヘッドレスでブラウザを起動するかどうか。
        categories: 巡回する採点カテゴリ（この順序で処理する）。
        timeouts: タイムアウト・待機時間。
        top_n: 実行結果サマリに表示する上位件数。
    """

    login_url: str = "https://www.clubdam.com/app/damtomo/auth/member/Login.do"
    snapshot_path: str = "scores.json"
    dashboard_path: str = os.path.join("public", "scores.json")
    headless: bool = True
    categories: Tuple[ScoringCategory, ...] = DEFAULT_CATEGORIES
    timeouts: TimeoutSettings = field(default_factory=TimeoutSettings)
    top_n: int = 10

    @property
    def output_paths(self) -> Tuple[str, ...]:
        return (self.snapshot_path, self.dashboard_path)


def _parse_categories(items: Any) -> Tuple[ScoringCategory, ...]:
    if not isinstance(items, list) or not items:
        raise ConfigurationError("categories must be a non-empty list")

    categories = []
    for item in items:
        if not isinstance(item, dict) or not item.get("id") or not item.get("name"):
            raise ConfigurationError(f"Invalid category entry: {item!r}")
        categories.append(ScoringCategory(str(item["id"]).strip(), str(item["name"]).strip()))
    return tuple(categories)


def _parse_timeouts(data: Any) -> TimeoutSettings:
    if not isinstance(data, dict):
        raise ConfigurationError("timeouts must be a mapping")

    defaults = TimeoutSettings()
    values = {}
    for name in TimeoutSettings.__dataclass_fields__:
        raw = data.get(name, getattr(defaults, name))
        try:
            values[name] = int(raw)
        except (TypeError, ValueError) as e:
            raise ConfigurationError(f"timeouts.{name} must be an integer: {raw!r}") from e
    return TimeoutSettings(**values)


def load_settings(path: str) -> Settings:
    """
    settings.yaml を読み込み Settings に変換する。

    ファイルが存在しない場合は既定値の Settings を返す。

    Args:
        path: settings.yaml のファイルパス。

    Returns:
        Settingsオブジェクト。

    Raises:
        ConfigurationError: YAMLのパースに失敗した場合、または値の型が不正な場合。
    """
    if not os.path.exists(path):
        return Settings()

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        raise ConfigurationError(f"Failed to load settings: {path} ({e})") from e

    data = data or {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"Settings must be a mapping: {path}")

    defaults = Settings()
    try:
        top_n = int(data.get("top_n", defaults.top_n))
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"top_n must be an integer: {data.get('top_n')!r}") from e

    return Settings(
        login_url=str(data.get("login_url", defaults.login_url)).strip(),
        snapshot_path=str(data.get("snapshot_path", defaults.snapshot_path)),
        dashboard_path=str(data.get("dashboard_path", defaults.dashboard_path)),
        headless=bool(data.get("headless", defaults.headless)),
        categories=(
            _parse_categories(data["categories"]) if "categories" in data else defaults.categories
        ),
        timeouts=_parse_timeouts(data.get("timeouts") or {}),
        top_n=top_n,
    )


def load_credentials(environ: Optional[Dict[str, str]] = None) -> Credentials:
    """
    環境変数からログイン情報を読み込む。

    environ が指定されない場合は .env を読み込んだうえで os.environ を参照する。

    Args:
        environ: 参照する環境変数の辞書（テスト用）。

    Returns:
        Credentials。

    Raises:
        ConfigurationError: CLUB_DAM_ID / CLUB_DAM_PASS のいずれかが未設定の場合。
    """
    if environ is None:
        load_dotenv()
        environ = dict(os.environ)

    user_id = (environ.get(ENV_USER_ID) or "").strip()
    password = environ.get(ENV_PASSWORD) or ""

    missing = [name for name, value in ((ENV_USER_ID, user_id), (ENV_PASSWORD, password)) if not value]
    if missing:
        raise ConfigurationError(
            f"{' and '.join(missing)} environment variable(s) are required"
        )

    return Credentials(user_id=user_id, password=password)
