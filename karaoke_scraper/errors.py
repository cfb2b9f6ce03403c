"""
アプリケーション固有の例外定義モジュール。

ログイン、カテゴリ巡回、結果テーブル解析、スナップショット保存などの処理で
発生する例外を分類して扱うために、基底例外および派生例外を定義する。

伝播方針:
- ConfigurationError / AuthenticationError / PersistenceError(書き込み) は致命的で、
  プロセスの終了コードに反映される。
- CategoryUnavailable / RowParseError はカテゴリ・テーブル単位で握りつぶされ、
  ログ出力のみ行う。
"""


class KaraokeScraperError(Exception):
    """採点履歴スクレイパー全体の基底例外。"""


class ConfigurationError(KaraokeScraperError):
    """必須の認証情報や設定ファイルの内容が不正な場合の例外。"""


class AuthenticationError(KaraokeScraperError):
    """ログインフォームが見つからない、またはログイン後の遷移が完了しない場合の例外。"""


class ScrapeError(KaraokeScraperError):
    """スクレイピング処理に起因する例外。"""


class CategoryUnavailable(ScrapeError):
    """採点カテゴリのリンクや結果コンテナが存在しない、または表示されない場合の例外。"""


class RowParseError(ScrapeError):
    """結果テーブル1件の構造が想定と異なる場合の例外。"""


class PersistenceError(KaraokeScraperError):
    """スナップショットファイルの書き込みに失敗した場合の例外。"""

    def __init__(self, message: str, paths=None):
        super().__init__(message)
        self.paths = list(paths or [])
