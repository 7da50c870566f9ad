# errors.py
"""
poimap の例外体系。

どれも「1件だけの失敗」を表す。呼び出し側はその項目だけをスキップして
処理を続ける（リコンサイルループを止めない）。
"""
from __future__ import annotations


class PoimapError(Exception):
    """poimap 共通の基底例外"""


class DataParseError(PoimapError):
    """座標・ストレージ内容・カタログ定義などが解釈できない"""


class MissingIconCategory(PoimapError):
    """カテゴリ id に対応するアイコン付きノードが無い"""

    def __init__(self, category_id: str):
        super().__init__(f"No icon category for id '{category_id}'")
        self.category_id = category_id


class OverlayOperationError(PoimapError):
    """外部オーバーレイが create/update/remove を拒否した"""


class PersistenceWriteError(PoimapError):
    """永続ストレージへの書き込みに失敗した"""


__all__ = [
    "PoimapError",
    "DataParseError",
    "MissingIconCategory",
    "OverlayOperationError",
    "PersistenceWriteError",
]
