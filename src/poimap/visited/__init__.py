# visited/__init__.py
"""
訪問済み状態の保持と永続化。

- VisitedStore: 訪問済み id 集合（toggle / load / save）
- JsonSlotStorage: 名前付きスロットを持つ JSON ファイル
- MemoryStorage: メモリ上のスロット
"""
from .store import VisitedStore, DEFAULT_STORAGE_KEY
from .storage import JsonSlotStorage, MemoryStorage, SlotStorage

__all__ = ["VisitedStore", "DEFAULT_STORAGE_KEY", "JsonSlotStorage", "MemoryStorage", "SlotStorage"]
