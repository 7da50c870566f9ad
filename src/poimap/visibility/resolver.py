# visibility/resolver.py
from __future__ import annotations
from typing import Optional, Sequence, Tuple

from poimap.catalog.tree import collect_checked
from poimap.model.models import Catalog, LocationRecord

VISIBLE_FLAG = "1"


def resolve_visible(catalog: Catalog, locations: Sequence[LocationRecord]) -> Tuple[LocationRecord, ...]:
    """
    表示すべきロケーションを入力順のまま返す。
    条件: カテゴリが checked かつ visible が文字列 "1" そのもの
    """
    checked = collect_checked(catalog)
    return tuple(
        loc for loc in locations
        if loc.visible == VISIBLE_FLAG and loc.marker_category_id in checked
    )


class VisibilityResolver:
    """resolve_visible を (catalog, locations) でメモ化する。同一性 → 等価性の順に比較"""

    def __init__(self):
        self._catalog: Optional[Catalog] = None
        self._locations: Optional[Sequence[LocationRecord]] = None
        self._result: Tuple[LocationRecord, ...] = ()
        self.computations = 0

    def _is_cached(self, catalog: Catalog, locations: Sequence[LocationRecord]) -> bool:
        if self._catalog is None or self._locations is None:
            return False
        same_catalog = catalog is self._catalog or catalog == self._catalog
        same_locations = locations is self._locations or tuple(locations) == tuple(self._locations)
        return same_catalog and same_locations

    def resolve(self, catalog: Catalog, locations: Sequence[LocationRecord]) -> Tuple[LocationRecord, ...]:
        if not self._is_cached(catalog, locations):
            self._result = resolve_visible(catalog, locations)
            self._catalog, self._locations = catalog, locations
            self.computations += 1
        return self._result

    def invalidate(self) -> None:
        self._catalog = self._locations = None


__all__ = ["resolve_visible", "VisibilityResolver", "VISIBLE_FLAG"]
