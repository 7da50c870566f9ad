from __future__ import annotations
import json
import logging
import pathlib
from typing import Any, Dict, List, Tuple

from jsonschema import ValidationError
from jsonschema.validators import validator_for

from poimap.errors import DataParseError
from .models import Catalog, CategoryNode, LocationRecord

logger = logging.getLogger(__name__)


class ModelLoader:
    """catalog.json / location.json を読み込んでモデル化する共通ローダ"""

    def __init__(self, validate_schema: bool = True, schema_dir: str | pathlib.Path | None = None):
        self.validate_schema = validate_schema
        # デフォルト: このパッケージの schemas ディレクトリ
        if schema_dir is None:
            self.schema_dir = pathlib.Path(__file__).parent.parent / "schemas"
        else:
            self.schema_dir = pathlib.Path(schema_dir)
        self._validators: Dict[str, Any] = {}

    def _load_json(self, path: str | pathlib.Path) -> Any:
        try:
            with open(path, "r", encoding="utf-8") as f:
                return json.load(f)
        except json.JSONDecodeError as exc:
            raise DataParseError(f"{path}: invalid JSON ({exc})") from exc

    def _validator(self, schema_name: str) -> Any:
        # スキーマは1回だけ読み込んで検証器を使い回す
        if schema_name not in self._validators:
            schema = self._load_json(self.schema_dir / schema_name)
            cls = validator_for(schema)
            cls.check_schema(schema)
            self._validators[schema_name] = cls(schema)
        return self._validators[schema_name]

    def _validate(self, instance: Any, schema_name: str) -> None:
        if self.validate_schema:
            self._validator(schema_name).validate(instance)

    # --- 公開API ------------------------------------------------------

    def load_catalog(self, path: str | pathlib.Path) -> Catalog:
        """catalog.json → Catalog（起動時の静的設定なので不正なら例外）"""
        data = self._load_json(path)
        return self.build_catalog(data, source=str(path))

    def build_catalog(self, data: Any, source: str = "<catalog>") -> Catalog:
        try:
            self._validate(data, "catalog.schema.json")
        except ValidationError as exc:
            raise DataParseError(f"{source}: {exc.message}") from exc
        if not isinstance(data, list):
            raise DataParseError(f"{source}: catalog must be a JSON array")

        seen: set[str] = set()

        def build(item: Any, trail: str) -> CategoryNode:
            if not isinstance(item, dict) or "id" not in item or "name" not in item:
                raise DataParseError(f"{source}: node at {trail} needs 'id' and 'name'")
            nid = str(item["id"])
            if nid in seen:
                raise DataParseError(f"{source}: duplicate category id '{nid}'")
            seen.add(nid)
            children = tuple(
                build(c, f"{trail}/{nid}") for c in item.get("children") or []
            )
            # 元データは "img"、"icon" も受け付ける
            icon = item.get("img", item.get("icon"))
            return CategoryNode(
                id=nid,
                name=str(item["name"]),
                children=children,
                checked=bool(item.get("checked", False)),
                icon=icon or None,
                color=item.get("color"),
            )

        return Catalog(roots=tuple(build(item, "") for item in data))

    def load_locations(self, path: str | pathlib.Path) -> Tuple[LocationRecord, ...]:
        """location.json → LocationRecord のタプル（不正なレコードはスキップ）"""
        data = self._load_json(path)
        return self.build_locations(data, source=str(path))

    def build_locations(self, data: Any, source: str = "<locations>") -> Tuple[LocationRecord, ...]:
        if not isinstance(data, list):
            raise DataParseError(f"{source}: locations must be a JSON array")

        records: List[LocationRecord] = []
        for index, item in enumerate(data):
            try:
                self._validate(item, "location.schema.json")
                records.append(
                    LocationRecord(
                        id=str(item["id"]),
                        name=str(item.get("name", "")),
                        marker_category_id=str(item["markerCategoryId"]),
                        x=item["x"],
                        y=item["y"],
                        visible=item.get("visible"),
                    )
                )
            except (ValidationError, KeyError, TypeError, AttributeError) as exc:
                reason = exc.message if isinstance(exc, ValidationError) else repr(exc)
                logger.warning("%s: skipping location #%d (%s)", source, index, reason)
        return tuple(records)


__all__ = ["ModelLoader"]
