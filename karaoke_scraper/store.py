"""
スナップショット(scores.json)の読み書き。

スナップショットは ScoreRecord の配列をJSONで保存したもの。
保存時は差分追記ではなく、毎回全件を書き直す。

例外方針:
- 読み込み失敗（ファイル無し、JSON不正）は空のスナップショットとして扱う。
- 書き込み失敗は PersistenceError として上位へ伝播する。
"""

from __future__ import annotations

import json
import logging
import os
from typing import List, Sequence

from karaoke_scraper.errors import PersistenceError
from karaoke_scraper.models import ScoreRecord

logger = logging.getLogger(__name__)


def load_snapshot(path: str) -> List[ScoreRecord]:
    """
    スナップショットを読み込む。

    ファイルが存在しない、またはJSONとして解釈できない場合は空リストを返す。
    レコードとして解釈できない要素、曲名が空・点数が0以下の要素はスキップする。

    Args:
        path: スナップショットのファイルパス。

    Returns:
        ScoreRecord のリスト（ファイル内の順序）。
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError:
        logger.info("No existing scores found at %s, creating new file", path)
        return []
    except (OSError, ValueError) as e:
        logger.warning("Failed to read snapshot %s, starting empty: %s", path, e)
        return []

    if not isinstance(data, list):
        logger.warning("Snapshot %s is not a JSON array, starting empty", path)
        return []

    records: List[ScoreRecord] = []
    for idx, item in enumerate(data):
        try:
            record = ScoreRecord.from_dict(item)
        except (KeyError, TypeError, ValueError) as e:
            logger.warning("Skipping snapshot entry #%d in %s: %s", idx, path, e)
            continue

        if not record.is_valid:
            logger.warning("Skipping invalid snapshot entry #%d in %s", idx, path)
            continue
        records.append(record)

    logger.info("Loaded %d existing scores from %s", len(records), path)
    return records


def dump_snapshot(records: Sequence[ScoreRecord]) -> str:
    """スナップショットのJSON文字列を返す。"""
    return json.dumps([r.to_dict() for r in records], ensure_ascii=False, indent=2) + "\n"


def save_snapshot(paths: Sequence[str], records: Sequence[ScoreRecord]) -> None:
    """
    同一内容のスナップショットを全ての保存先へ書き込む。

    1か所の失敗で残りの保存先への書き込みを止めることはしないが、
    失敗が1つでもあれば最後に PersistenceError を送出する。

    Args:
        paths: 保存先ファイルパスのリスト。
        records: 保存するレコード。

    Raises:
        PersistenceError: いずれかの保存先への書き込みに失敗した場合。
    """
    content = dump_snapshot(records)

    failed: List[str] = []
    for path in paths:
        try:
            os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
            with open(path, "w", encoding="utf-8") as f:
                f.write(content)
        except OSError as e:
            logger.error("Failed to write snapshot %s: %s", path, e)
            failed.append(path)
            continue
        logger.info("Scores saved to %s (total: %d)", path, len(records))

    if failed:
        raise PersistenceError(
            f"Failed to write snapshot: {', '.join(failed)}", paths=failed
        )
