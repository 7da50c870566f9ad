# visited/storage.py
from __future__ import annotations
import json
import logging
import os
import pathlib
import tempfile
from typing import Dict, Optional, Protocol

from poimap.errors import DataParseError, PersistenceWriteError

logger = logging.getLogger(__name__)


class SlotStorage(Protocol):
    def get_item(self, key: str) -> Optional[str]: ...
    def set_item(self, key: str, value: str) -> None: ...


class MemoryStorage:
    """テスト・一時利用向けのメモリ上スロット"""

    def __init__(self, initial: Dict[str, str] | None = None):
        self.slots: Dict[str, str] = dict(initial or {})

    def get_item(self, key: str) -> Optional[str]:
        return self.slots.get(key)

    def set_item(self, key: str, value: str) -> None:
        self.slots[key] = value


class JsonSlotStorage:
    """
    名前付き文字列スロットを1つの JSON ファイルに保持する（localStorage 相当）。
    - get_item: 無ければ None、ファイルが壊れていれば DataParseError
    - set_item: 一時ファイルに書いてから os.replace で差し替える
    """

    def __init__(self, path: str | pathlib.Path):
        self.path = pathlib.Path(path)

    def _read_all(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            with self.path.open("r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as exc:
            raise DataParseError(f"{self.path}: unreadable storage ({exc})") from exc
        if not isinstance(data, dict):
            raise DataParseError(f"{self.path}: storage root must be an object")
        return data

    def _move_aside(self) -> pathlib.Path:
        """壊れたファイルを <name>.bak に退避する"""
        backup = self.path.with_name(self.path.name + ".bak")
        try:
            os.replace(self.path, backup)
        except OSError as exc:
            raise PersistenceWriteError(f"{self.path}: cannot back up corrupt storage ({exc})") from exc
        return backup

    def get_item(self, key: str) -> Optional[str]:
        value = self._read_all().get(key)
        return value if isinstance(value, str) else None

    def set_item(self, key: str, value: str) -> None:
        try:
            slots = self._read_all()
        except DataParseError:
            backup = self._move_aside()
            logger.warning("Storage %s is corrupt; moved to %s, other slots are lost", self.path, backup)
            slots = {}
        slots[key] = value
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp = tempfile.mkstemp(prefix=f".{self.path.name}.", dir=self.path.parent)
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump(slots, f, ensure_ascii=False, indent=2)
                os.replace(tmp, self.path)
            except BaseException:
                if os.path.exists(tmp):
                    os.unlink(tmp)
                raise
        except OSError as exc:
            raise PersistenceWriteError(f"{self.path}: {exc}") from exc


__all__ = ["SlotStorage", "MemoryStorage", "JsonSlotStorage"]
