"""
データモデル定義モジュール。

採点履歴ページから抽出した1件分の採点結果(ScoreRecord)と、
巡回対象の採点カテゴリ(ScoringCategory)を定義する。
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional

UNKNOWN_ARTIST = "Unknown"

_KEY_SEPARATOR = "||"


@dataclass(frozen=True)
class ScoringCategory:
    """
    採点カテゴリ（精密採点Ai など）の識別情報。

    Attributes:
        id: ページ上の要素IDの接頭辞（例: DamHistoryMarkingAi）。
        display_name: 画面表示名。ScoreRecord.scoring_type に記録される。
    """

    id: str
    display_name: str

    @property
    def link_selector(self) -> str:
        """カテゴリを展開するリンクのセレクタ。"""
        return f"#{self.id}ListLink a"

    @property
    def result_selector(self) -> str:
        """カテゴリの結果コンテナのセレクタ。"""
        return f"#{self.id}ListResult"


DEFAULT_CATEGORIES = (
    ScoringCategory("DamHistoryMarkingAi", "精密採点Ai"),
    ScoringCategory("DamHistoryMarkingHearts", "精密採点Ai Heart"),
    ScoringCategory("DamHistoryMarkingCollabo", "精密採点 × ONE PIECE"),
)


@dataclass(frozen=True)
class ScoreRecord:
    """
    1曲1回分の採点結果。

    - song_name が空、または score が 0 以下のものは無効とし、保存しない
    - artist が取得できない場合は UNKNOWN_ARTIST を入れる
    - date はサイト表示の文字列をそのまま保持する（日付型には変換しない）
    """

    song_name: str
    artist: str
    score: float
    date: Optional[str]
    scoring_type: str

    @property
    def is_valid(self) -> bool:
        return bool(self.song_name) and self.score > 0

    def identity_key(self) -> str:
        """
        重複判定用のキーを返す。

        (song_name, artist, date, scoring_type) を区切り文字で連結したもの。
        date が None の場合は空文字として扱う。

        Returns:
            重複判定キー文字列。
        """
        date = "" if self.date is None else self.date
        return _KEY_SEPARATOR.join([self.song_name, self.artist, date, self.scoring_type])

    def to_dict(self) -> Dict[str, Any]:
        """ダッシュボードが読むJSON形式(camelCase)へ変換する。"""
        data: Dict[str, Any] = {
            "songName": self.song_name,
            "artist": self.artist,
            "score": self.score,
        }
        if self.date is not None:
            data["date"] = self.date
        data["scoringType"] = self.scoring_type
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ScoreRecord":
        """
        JSONオブジェクトから ScoreRecord を生成する。

        Args:
            data: スナップショット1件分の dict。

        Returns:
            ScoreRecord。

        Raises:
            KeyError: songName / score / scoringType が存在しない場合。
            ValueError: score を数値に変換できない場合。
            TypeError: 値の型が想定外の場合（songName / scoringType が文字列でない等）。
        """
        if not isinstance(data, dict):
            raise TypeError(f"Record must be an object: {data!r}")

        for name in ("songName", "scoringType"):
            if not isinstance(data[name], str):
                raise TypeError(f"{name} must be a string: {data[name]!r}")

        date = data.get("date")
        return cls(
            song_name=data["songName"],
            artist=str(data.get("artist") or UNKNOWN_ARTIST),
            score=float(data["score"]),
            date=None if date is None else str(date),
            scoring_type=data["scoringType"],
        )
