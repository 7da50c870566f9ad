# icons/resolver.py
from __future__ import annotations
from typing import Dict, Optional

from poimap.errors import MissingIconCategory
from poimap.model.models import Catalog, IconDescriptor, IconEntry, IconVariant


def build_icon_index(catalog: Catalog) -> Dict[str, IconEntry]:
    """id → {img, color}。icon を持つノードだけを登録する"""
    return {
        n.id: IconEntry(img=n.icon, color=n.color)
        for n in catalog.iter_nodes()
        if n.icon
    }


class IconResolver:
    """カテゴリ id からアイコン記述子を引く。索引は Catalog ごとに1回だけ作る"""

    def __init__(self):
        self._catalog: Optional[Catalog] = None
        self._index: Dict[str, IconEntry] = {}

    def index_for(self, catalog: Catalog) -> Dict[str, IconEntry]:
        if catalog is not self._catalog:
            self._index = build_icon_index(catalog)
            self._catalog = catalog
        return self._index

    def resolve_icon(self, category_id: str, catalog: Catalog, visited: bool) -> IconDescriptor:
        entry = self.index_for(catalog).get(category_id)
        if entry is None:
            raise MissingIconCategory(category_id)
        # 訪問済みでも画像は同じ。描き方（variant）だけ変える
        variant = IconVariant.VISITED if visited else IconVariant.NORMAL
        return IconDescriptor(asset_path=entry.img, variant=variant, color=entry.color)


def resolve_icon(category_id: str, catalog: Catalog, visited: bool) -> IconDescriptor:
    return IconResolver().resolve_icon(category_id, catalog, visited)


__all__ = ["IconResolver", "build_icon_index", "resolve_icon"]
