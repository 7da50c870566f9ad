# session.py
from __future__ import annotations
import logging
from typing import Callable, Iterable, List, Optional, Sequence

from poimap.catalog.tree import apply_selection, clear_selection, propagate_selection, select_all
from poimap.model.models import Catalog, LocationRecord, ReconcileStats
from poimap.reconciler import MarkerReconciler, Overlay
from poimap.visibility.resolver import VisibilityResolver
from poimap.visited.store import Scheduler, VisitedStore

logger = logging.getLogger(__name__)


class MapSession:
    """
    カタログ・ロケーション・訪問済みストア・リコンサイラの束ね。
    - 変更（選択編集 / 訪問トグル）はまず状態を確定させ、その後で再描画を予約する
    - 再描画は1回にまとめる（scheduler が無ければ確定直後に同期実行）
    """

    def __init__(
        self,
        catalog: Catalog,
        locations: Sequence[LocationRecord],
        store: VisitedStore,
        overlay: Overlay,
        *,
        scheduler: Optional[Scheduler] = None,
        propagate: bool = False,
    ):
        self.catalog = catalog
        self.locations = tuple(locations)
        self.store = store
        self.scheduler = scheduler
        self.propagate = propagate
        self.resolver = VisibilityResolver()
        self.reconciler = MarkerReconciler(overlay, on_toggle=self.toggle_visited)
        self.last_stats: Optional[ReconcileStats] = None
        self._listeners: List[Callable[[Catalog], None]] = []
        self._refresh_pending = False

    # --- ライフサイクル -----------------------------------------------

    def start(self) -> ReconcileStats:
        visited = self.store.load()
        logger.info(
            "Session started: %d categories, %d locations, %d visited",
            len(self.catalog), len(self.locations), len(visited),
        )
        return self.refresh()

    def close(self) -> None:
        self.store.flush()
        self.reconciler.clear()

    def add_listener(self, listener: Callable[[Catalog], None]) -> None:
        self._listeners.append(listener)

    # --- カタログ編集 -------------------------------------------------

    def update_selection(self, selected_ids: Iterable[str]) -> None:
        ids = set(selected_ids)
        if self.propagate:
            ids = propagate_selection(self.catalog, ids)
        self._commit_catalog(apply_selection(self.catalog, ids))

    def select_all(self) -> None:
        self._commit_catalog(select_all(self.catalog))

    def clear_selection(self) -> None:
        self._commit_catalog(clear_selection(self.catalog))

    def _commit_catalog(self, catalog: Catalog) -> None:
        if catalog is self.catalog:
            return
        self.catalog = catalog
        for listener in self._listeners:
            listener(catalog)
        self._schedule_refresh()

    # --- 訪問済み -----------------------------------------------------

    def toggle_visited(self, location_id: str) -> bool:
        state = self.store.toggle(location_id)
        logger.info("Location %s marked %s", location_id, "visited" if state else "unvisited")
        self._schedule_refresh()
        return state

    def clear_visited(self) -> None:
        self.store.clear_all()
        self._schedule_refresh()

    # --- 再計算 -------------------------------------------------------

    def _schedule_refresh(self) -> None:
        if self.scheduler is None:
            self.refresh()
            return
        if self._refresh_pending:
            return
        self._refresh_pending = True
        self.scheduler(0.0, self._run_scheduled_refresh)

    def _run_scheduled_refresh(self) -> None:
        if not self._refresh_pending:
            return
        self.refresh()

    def refresh(self) -> ReconcileStats:
        self._refresh_pending = False
        visible = self.resolver.resolve(self.catalog, self.locations)
        self.last_stats = self.reconciler.reconcile(visible, self.catalog, self.store)
        return self.last_stats


__all__ = ["MapSession"]
