"""
Discord Webhook通知を行うユーティリティ。

このモジュールはスクレイピングの実行結果(成功/失敗/件数)をDiscordへ送信する用途で使用する。
通知失敗は処理全体の失敗とはみなさず、警告ログのみ出力する。
"""

from __future__ import annotations

import logging

import requests
from requests import RequestException

logger = logging.getLogger(__name__)

MESSAGE_LIMIT = 1900


def build_success_message(new_count: int, total_count: int, updated_at: str) -> str:
    """成功時の通知本文を返す。"""
    return (
        f"✅ scores.json 更新成功\n"
        f"- new scores: {new_count}\n"
        f"- total scores: {total_count}\n"
        f"- updated_at: {updated_at}\n"
    )


def build_failure_message(error_text: str, limit: int = MESSAGE_LIMIT) -> str:
    """失敗時の通知本文を返す。エラー本文は limit 文字までに切り詰める。"""
    return f"❌ scores.json 更新失敗\n```{error_text[:limit]}```"


def send_discord_message(webhook_url: str, message: str) -> None:
    """
    Discord Webhookへメッセージを送信する。

    webhook_urlが空の場合は何もせず終了する。
    通知失敗は致命的なエラーとせず、警告ログを出力して戻る。

    Args:
        webhook_url: Discord Webhook URL。
        message: 送信する本文。
    """
    if not webhook_url:
        return

    payload = {"content": message}

    try:
        response = requests.post(webhook_url, json=payload, timeout=15)
        response.raise_for_status()
    except RequestException as e:
        # 通知失敗は致命にしない
        logger.warning("Failed to send Discord notification: %s", e)
