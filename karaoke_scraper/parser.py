"""
HTMLパーサ。

採点履歴ページの結果コンテナHTMLから、曲ごとの table.ai を走査し、
採点結果（ScoreRecord）へ変換する責務を持つ。

想定仕様:
- 1曲につき1つの table.ai が描画される
- 先頭 tr の td を3列構成として解釈する（日付 / 曲名+歌手名 / 点数）
- 曲名は2列目の a 要素、歌手名は br の直後のテキスト
- 点数は3列目テキスト中の最初の数値

ページ内の一部テーブルが壊れていても、残りのテーブルの解析は継続する。
"""

from __future__ import annotations

import logging
import re
from typing import Any, List, Optional

from bs4 import BeautifulSoup, NavigableString

from karaoke_scraper.errors import RowParseError
from karaoke_scraper.models import UNKNOWN_ARTIST, ScoreRecord

logger = logging.getLogger(__name__)

_SCORE_RE = re.compile(r"\d+(?:\.\d+)?")


def parse_score(text: str) -> float:
    """
    点数セル文字列から最初の数値を取り出して返す。

    数値が見つからない場合（"N/A" など）は 0.0 を返す。

    Args:
        text: tdセルの文字列。

    Returns:
        点数。
    """
    m = _SCORE_RE.search(text or "")
    if not m:
        return 0.0
    return float(m.group(0))


def _artist_text(song_cell: Any) -> str:
    """br 直後のテキストノードを歌手名として返す。無ければ空文字。"""
    br = song_cell.find("br")
    if br is None:
        return ""

    sibling = br.next_sibling
    if sibling is None:
        return ""
    if isinstance(sibling, NavigableString):
        return str(sibling).strip()
    return sibling.get_text(strip=True)


def _parse_table(table: Any, scoring_type: str) -> Optional[ScoreRecord]:
    """
    table.ai 1件を ScoreRecord に変換する。

    Args:
        table: BeautifulSoup の table タグ。
        scoring_type: 採点カテゴリ表示名。

    Returns:
        ScoreRecord。行やセルが不足している場合は None。

    Raises:
        RowParseError: セルの内容を解釈できない場合。
    """
    row = table.find("tr")
    if row is None:
        return None

    cells = row.find_all("td")
    if len(cells) < 3:
        return None

    try:
        date = cells[0].get_text(strip=True)

        song_cell = cells[1]
        link = song_cell.find("a")
        song_name = link.get_text(strip=True) if link is not None else ""
        artist = _artist_text(song_cell)

        score = parse_score(cells[2].get_text(strip=True))
    except (AttributeError, TypeError, ValueError) as e:
        raise RowParseError(f"Malformed result table: {e}") from e

    return ScoreRecord(
        song_name=song_name,
        artist=artist or UNKNOWN_ARTIST,
        score=score,
        date=date,
        scoring_type=scoring_type,
    )


def parse_result_page(html: str, scoring_type: str) -> List[ScoreRecord]:
    """
    結果コンテナ1ページ分のHTMLから有効な採点結果を抽出する。

    曲名が空、または点数が 0 以下のものは破棄する。
    個別テーブルの解析失敗はログに記録してスキップする。

    Args:
        html: 結果コンテナのHTML文字列。
        scoring_type: 各レコードに付与する採点カテゴリ表示名。

    Returns:
        ScoreRecord のリスト（ページ内の出現順）。
    """
    soup = BeautifulSoup(html or "", "html.parser")

    records: List[ScoreRecord] = []
    for idx, table in enumerate(soup.select("table.ai")):
        try:
            record = _parse_table(table, scoring_type)
        except RowParseError as e:
            logger.warning("Skipping table #%d (%s): %s", idx, scoring_type, e)
            continue
        except Exception:  # pylint: disable=broad-except
            logger.exception("Skipping table #%d (%s): unexpected error", idx, scoring_type)
            continue

        if record is None:
            logger.debug("Skipping table #%d (%s): not enough cells", idx, scoring_type)
            continue

        if not record.is_valid:
            logger.debug("Discarding invalid record: %r", record)
            continue

        records.append(record)

    return records
