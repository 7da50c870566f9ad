# visited/store.py
from __future__ import annotations
import json
import logging
from typing import Any, Callable, Iterable, Iterator, Optional

from poimap.errors import DataParseError, PersistenceWriteError
from .storage import SlotStorage

logger = logging.getLogger(__name__)

DEFAULT_STORAGE_KEY = "poimap_visited_locations"

# schedule(delay_seconds, callback)
Scheduler = Callable[[float, Callable[[], None]], Any]


class VisitedStore:
    """
    訪問済みロケーション id の集合を所有し、永続スロットと同期する。
    - 変更は toggle / clear_all のみ。変更ごとに version を +1 して保存を予約
    - scheduler があれば save_delay 秒だけまとめて書く（最後の状態が勝つ）
    - 保存に失敗してもメモリ上の状態は正しいまま
    """

    def __init__(
        self,
        storage: SlotStorage,
        key: str = DEFAULT_STORAGE_KEY,
        *,
        save_delay: float = 0.0,
        scheduler: Optional[Scheduler] = None,
    ):
        self.storage = storage
        self.key = key
        self.save_delay = save_delay
        self.scheduler = scheduler
        self._visited: set[str] = set()
        self._version = 0
        self._save_pending = False

    # --- 読み込み -----------------------------------------------------

    def load(self) -> frozenset[str]:
        """起動時に1回。欠損・破損は空集合にして警告だけ出す"""
        try:
            self._visited = self._parse(self.storage.get_item(self.key))
        except DataParseError as exc:
            logger.warning("Visited state unreadable, starting empty: %s", exc)
            self._visited = set()
        self._version += 1
        return frozenset(self._visited)

    @staticmethod
    def _parse(raw: Optional[str]) -> set[str]:
        if raw is None:
            return set()
        try:
            data = json.loads(raw)
        except (json.JSONDecodeError, TypeError) as exc:
            raise DataParseError(f"invalid JSON: {exc}") from exc
        if not isinstance(data, list):
            raise DataParseError("visited payload must be a JSON array")
        ids = set()
        for item in data:
            if isinstance(item, bool) or not isinstance(item, (str, int)):
                raise DataParseError(f"unexpected visited id {item!r}")
            ids.add(str(item))
        return ids

    # --- 参照 ---------------------------------------------------------

    @property
    def version(self) -> int:
        return self._version

    @property
    def ids(self) -> frozenset[str]:
        return frozenset(self._visited)

    def is_visited(self, location_id: str) -> bool:
        return location_id in self._visited

    def __contains__(self, location_id: object) -> bool:
        return location_id in self._visited

    def __iter__(self) -> Iterator[str]:
        return iter(self._visited)

    def __len__(self) -> int:
        return len(self._visited)

    # --- 変更 ---------------------------------------------------------

    def toggle(self, location_id: str) -> bool:
        """所属を反転し、新しい状態（訪問済みなら True）を返す"""
        if location_id in self._visited:
            self._visited.discard(location_id)
            state = False
        else:
            self._visited.add(location_id)
            state = True
        self._version += 1
        logger.debug("Visited %s -> %s (v%d)", location_id, state, self._version)
        self._schedule_save()
        return state

    def clear_all(self) -> None:
        if not self._visited:
            return
        self._visited = set()
        self._version += 1
        self._schedule_save()

    # --- 保存 ---------------------------------------------------------

    def save(self, visited: Optional[Iterable[str]] = None) -> bool:
        """集合全体を JSON 配列にしてスロットを丸ごと上書きする"""
        payload = json.dumps(sorted(self._visited if visited is None else visited))
        try:
            self.storage.set_item(self.key, payload)
        except (PersistenceWriteError, OSError) as exc:
            logger.warning("Failed to save visited locations: %s", exc)
            return False
        return True

    def flush(self) -> bool:
        """予約中の保存があれば今すぐ書く"""
        if not self._save_pending:
            return True
        self._save_pending = False
        return self.save()

    def _schedule_save(self) -> None:
        if self.scheduler is None or self.save_delay <= 0:
            self._save_pending = False
            self.save()
            return
        if self._save_pending:
            return  # 予約済みの保存が最新の集合を書く
        self._save_pending = True
        self.scheduler(self.save_delay, self.flush)


__all__ = ["VisitedStore", "Scheduler", "DEFAULT_STORAGE_KEY"]
