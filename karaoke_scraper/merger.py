"""
既存スナップショットと今回取得分の差分マージ処理。

重複判定キー（曲名・歌手名・日付・採点カテゴリ）で既存データに無いものだけを
追加し、点数の降順に並べ替える。同一キーは先に見つかった方を残す。
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Sequence

from karaoke_scraper.models import ScoreRecord


@dataclass(frozen=True)
class MergeResult:
    """
    マージ結果。

    Attributes:
        combined: 既存分 + 新規分を点数降順に並べたもの。
        new: 今回新たに追加された分（取得順）。
    """

    combined: List[ScoreRecord]
    new: List[ScoreRecord]


def merge_records(
    existing: Sequence[ScoreRecord],
    fresh: Sequence[ScoreRecord],
) -> MergeResult:
    """
    fresh のうち existing に無いレコードを追加し、点数降順に並べて返す。

    - fresh 内の重複も先勝ちで除外する
    - 同点の場合は並べ替え前の順序（既存分が先、新規分は取得順）を保つ

    Args:
        existing: 前回保存したスナップショット。
        fresh: 今回スクレイピングしたレコード（カテゴリ順・ページ順）。

    Returns:
        MergeResult。
    """
    seen = {r.identity_key() for r in existing}

    new: List[ScoreRecord] = []
    for r in fresh:
        key = r.identity_key()
        if key in seen:
            continue
        seen.add(key)
        new.append(r)

    combined = sorted([*existing, *new], key=lambda r: r.score, reverse=True)
    return MergeResult(combined=combined, new=new)
