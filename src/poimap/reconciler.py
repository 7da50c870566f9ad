# reconciler.py
"""
描画済みマーカーと「今見えるべきロケーション」の差分を取り、
オーバーレイに最小限の add / remove / update だけを発行する。

1件の失敗（座標不正・アイコン無し・オーバーレイのエラー）はその場で
ログに残してスキップし、残りの処理は止めない。
"""
from __future__ import annotations
import logging
import math
from typing import Any, Callable, Container, Dict, Optional, Protocol, Sequence, Tuple

from poimap.errors import DataParseError, OverlayOperationError, PoimapError
from poimap.icons.resolver import IconResolver
from poimap.model.models import (
    Catalog,
    IconDescriptor,
    IconVariant,
    LocationRecord,
    ReconcileStats,
    RenderedMarker,
)

logger = logging.getLogger(__name__)


class Overlay(Protocol):
    """外部のマップビューポート。リコンサイラだけが触る"""
    def create_overlay_marker(self, x: float, y: float, icon: IconDescriptor, label: str | None = None) -> Any: ...
    def remove_overlay_marker(self, handle: Any) -> None: ...
    def set_marker_icon(self, handle: Any, icon: IconDescriptor) -> None: ...
    def on_double_interact(self, handle: Any, callback: Callable[[], None]) -> None: ...


def parse_coordinates(record: LocationRecord) -> Tuple[float, float]:
    """元データの文字列座標を float に。NaN / inf / 解釈不能は DataParseError"""
    try:
        x, y = float(record.x), float(record.y)
    except (TypeError, ValueError) as exc:
        raise DataParseError(
            f"location {record.id}: bad coordinates ({record.x!r}, {record.y!r})"
        ) from exc
    if not (math.isfinite(x) and math.isfinite(y)):
        raise DataParseError(f"location {record.id}: non-finite coordinates ({x}, {y})")
    return x, y


class MarkerReconciler:
    def __init__(
        self,
        overlay: Overlay,
        *,
        icon_resolver: Optional[IconResolver] = None,
        on_toggle: Optional[Callable[[str], Any]] = None,
    ):
        self.overlay = overlay
        self.icons = icon_resolver or IconResolver()
        self.on_toggle = on_toggle
        self._markers: Dict[str, RenderedMarker] = {}
        self._reported: set[str] = set()

    def rendered_ids(self) -> set[str]:
        return set(self._markers)

    def marker(self, location_id: str) -> Optional[RenderedMarker]:
        return self._markers.get(location_id)

    # --- メイン -------------------------------------------------------

    def reconcile(
        self,
        visible: Sequence[LocationRecord],
        catalog: Catalog,
        visited: Container[str],
    ) -> ReconcileStats:
        stats = ReconcileStats()
        wanted = {loc.id for loc in visible}

        # 1) 削除を先に（同じ id の削除と追加が同一パスで重ならないように）
        for location_id in [lid for lid in self._markers if lid not in wanted]:
            self._remove(location_id)
            stats.removed.append(location_id)

        existing = set(self._markers)

        # 2) 追加
        for loc in visible:
            if loc.id in self._markers:
                continue
            if self._add(loc, catalog, loc.id in visited):
                stats.added.append(loc.id)
            else:
                stats.skipped.append(loc.id)

        # 3) 既存マーカーの見た目（訪問済み variant）だけ更新
        for loc in visible:
            if loc.id not in existing:
                continue
            marker = self._markers[loc.id]
            want = IconVariant.VISITED if loc.id in visited else IconVariant.NORMAL
            if want == marker.last_icon_variant:
                continue
            if self._update(marker, catalog, want is IconVariant.VISITED):
                stats.updated.append(loc.id)
            elif loc.id not in self._markers and self._add(loc, catalog, loc.id in visited):
                # ハンドルが死んでいたので作り直した
                stats.added.append(loc.id)
            else:
                stats.skipped.append(loc.id)

        if stats.mutations:
            logger.debug(
                "Reconciled: +%d -%d ~%d (skipped %d, rendered %d)",
                len(stats.added), len(stats.removed), len(stats.updated),
                len(stats.skipped), len(self._markers),
            )
        return stats

    def clear(self) -> int:
        """描画済みマーカーを全部外す（ビュー破棄時）"""
        ids = list(self._markers)
        for location_id in ids:
            self._remove(location_id)
        return len(ids)

    # --- 各操作 -------------------------------------------------------

    def _remove(self, location_id: str) -> None:
        marker = self._markers.pop(location_id)
        try:
            self.overlay.remove_overlay_marker(marker.handle)
        except OverlayOperationError as exc:
            # 既に外れているものとして扱う
            logger.warning("Marker %s already detached: %s", location_id, exc)

    def _add(self, loc: LocationRecord, catalog: Catalog, visited: bool) -> bool:
        try:
            x, y = parse_coordinates(loc)
            icon = self.icons.resolve_icon(loc.marker_category_id, catalog, visited)
            handle = self.overlay.create_overlay_marker(x, y, icon, label=loc.name)
        except PoimapError as exc:
            self._report_skip(loc.id, exc)
            return False

        self._markers[loc.id] = RenderedMarker(
            location_id=loc.id,
            category_id=loc.marker_category_id,
            handle=handle,
            last_icon_variant=icon.variant,
        )
        self._reported.discard(loc.id)

        if self.on_toggle is not None:
            try:
                self.overlay.on_double_interact(handle, self._toggle_callback(loc.id))
            except OverlayOperationError as exc:
                logger.warning("Could not bind double-click on %s: %s", loc.id, exc)
        return True

    def _update(self, marker: RenderedMarker, catalog: Catalog, visited: bool) -> bool:
        try:
            icon = self.icons.resolve_icon(marker.category_id, catalog, visited)
            self.overlay.set_marker_icon(marker.handle, icon)
        except OverlayOperationError as exc:
            # 既に外れているものとして扱い、管理対象から外す
            logger.warning("Marker %s already detached: %s", marker.location_id, exc)
            self._markers.pop(marker.location_id, None)
            return False
        except PoimapError as exc:
            self._report_skip(marker.location_id, exc)
            return False
        marker.last_icon_variant = icon.variant
        return True

    def _toggle_callback(self, location_id: str) -> Callable[[], None]:
        def callback() -> None:
            if self.on_toggle is not None:
                self.on_toggle(location_id)
        return callback

    def _report_skip(self, location_id: str, exc: Exception) -> None:
        if location_id in self._reported:
            logger.debug("Skipping location %s again: %s", location_id, exc)
            return
        self._reported.add(location_id)
        logger.warning("Skipping location %s: %s", location_id, exc)


__all__ = ["Overlay", "MarkerReconciler", "parse_coordinates"]
