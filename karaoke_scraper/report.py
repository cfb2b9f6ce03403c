"""実行結果のサマリ（上位N件と統計）を標準出力へ表示する。"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Sequence

from karaoke_scraper.models import ScoreRecord


@dataclass(frozen=True)
class ScoreStats:
    total: int
    average: float
    highest: float
    lowest: float


def compute_stats(records: Sequence[ScoreRecord]) -> Optional[ScoreStats]:
    """件数・平均・最高・最低点を返す。レコードが無い場合は None。"""
    if not records:
        return None

    scores = [r.score for r in records]
    return ScoreStats(
        total=len(scores),
        average=sum(scores) / len(scores),
        highest=max(scores),
        lowest=min(scores),
    )


def format_summary(records: Sequence[ScoreRecord], top_n: int = 10) -> List[str]:
    """
    サマリ表示用の行リストを返す。

    records は点数降順に並んでいることを前提とする。

    Args:
        records: マージ後のスナップショット。
        top_n: 表示する上位件数。

    Returns:
        表示行のリスト。
    """
    stats = compute_stats(records)
    if stats is None:
        return ["No scores found."]

    lines = [f"=== Top {top_n} scores ==="]
    for i, r in enumerate(records[:top_n], start=1):
        lines.append(f"{i}. {r.song_name} - {r.artist}: {r.score} ({r.date or '-'})")

    lines.append("")
    lines.append("=== Statistics ===")
    lines.append(f"Total songs: {stats.total}")
    lines.append(f"Average score: {stats.average:.2f}")
    lines.append(f"Highest score: {stats.highest}")
    lines.append(f"Lowest score: {stats.lowest}")
    return lines


def print_summary(records: Sequence[ScoreRecord], top_n: int = 10) -> None:
    for line in format_summary(records, top_n=top_n):
        print(line)
