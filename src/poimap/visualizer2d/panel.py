# panel.py
"""
カテゴリツリーのチェックボックスパネル（matplotlib CheckButtons 版）。
親をチェックすると子孫もまとめてチェックし、伝播済みの id 列をセッションへ渡す。
"""
from __future__ import annotations
import logging
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Tuple

from matplotlib.offsetbox import AnnotationBbox, OffsetImage
from matplotlib.widgets import Button, CheckButtons

from poimap.catalog.tree import descendant_ids
from poimap.errors import OverlayOperationError
from poimap.model.models import Catalog, CategoryNode
from .markers import load_icon

logger = logging.getLogger(__name__)


def flatten(catalog: Catalog) -> List[Tuple[int, CategoryNode]]:
    """(depth, node) を前順で"""
    out: List[Tuple[int, CategoryNode]] = []

    def walk(nodes: Iterable[CategoryNode], depth: int) -> None:
        for n in nodes:
            out.append((depth, n))
            walk(n.children, depth + 1)

    walk(catalog.roots, 0)
    return out


def toggled_selection(catalog: Catalog, node_id: str, checked: bool) -> List[str]:
    """node_id を checked にしたときの、子孫まで伝播済みの選択 id 列"""
    selected = {n.id for n in catalog.iter_nodes() if n.checked}
    node = catalog.find(node_id)
    affected = {node_id} | (descendant_ids(node) if node is not None else set())
    if checked:
        selected |= affected
    else:
        selected -= affected
    return [n.id for n in catalog.iter_nodes() if n.id in selected]


class CategoryPanel:
    def __init__(self, fig, rect, catalog: Catalog,
                 on_selection: Callable[[List[str]], None],
                 on_all: Callable[[], None] | None = None,
                 on_clear: Callable[[], None] | None = None,
                 *,
                 icons_dir: str | Path | None = None,
                 icon_size: int = 20):
        x, y, w, h = rect
        self.catalog = catalog
        self.on_selection = on_selection
        self.rows = flatten(catalog)

        self.ax_check = ax_check = fig.add_axes((x, y, w, h - 0.05))
        ax_check.set_axis_off()
        labels = ["    " * depth + node.name for depth, node in self.rows]
        actives = [node.checked for _, node in self.rows]
        self.check = CheckButtons(ax_check, labels, actives)
        self.check.on_clicked(self._on_clicked)
        # 親は見出しとして太字
        for text, (_, node) in zip(self.check.labels, self.rows):
            if not node.is_leaf:
                text.set_fontweight("bold")
        self.icons: Dict[str, AnnotationBbox] = {}
        if icons_dir is not None:
            self._draw_icons(Path(icons_dir), icon_size)

        ax_all = fig.add_axes((x, y + h - 0.045, w / 2 - 0.005, 0.04))
        ax_clear = fig.add_axes((x + w / 2 + 0.005, y + h - 0.045, w / 2 - 0.005, 0.04))
        self.btn_all = Button(ax_all, "All")
        self.btn_clear = Button(ax_clear, "Clear")
        if on_all is not None:
            self.btn_all.on_clicked(lambda _e: on_all())
        if on_clear is not None:
            self.btn_clear.on_clicked(lambda _e: on_clear())
        self._status = list(self.check.get_status())

    def _draw_icons(self, icons_dir: Path, icon_size: int) -> None:
        """葉カテゴリのアイコンを行の右端に"""
        for text, (_, node) in zip(self.check.labels, self.rows):
            if not node.is_leaf or not node.icon:
                continue
            try:
                img = load_icon(icons_dir, node.icon)
            except OverlayOperationError as exc:
                logger.warning("No panel icon for category %s: %s", node.id, exc)
                continue
            box = OffsetImage(img, zoom=icon_size / max(img.shape[0], img.shape[1], 1))
            _, ty = text.get_position()
            handle = AnnotationBbox(box, (0.92, ty), xycoords=self.ax_check.transAxes,
                                    frameon=False, box_alignment=(0.5, 0.5))
            self.ax_check.add_artist(handle)
            self.icons[node.id] = handle

    def _on_clicked(self, _label) -> None:
        status = list(self.check.get_status())
        changed = [i for i, (a, b) in enumerate(zip(status, self._status)) if a != b]
        self._status = status
        if not changed:
            return
        i = changed[0]
        node = self.rows[i][1]
        self.on_selection(toggled_selection(self.catalog, node.id, status[i]))

    def sync(self, catalog: Catalog) -> None:
        """セッションで確定したカタログにチェック状態を揃える（イベントは出さない）"""
        self.catalog = catalog
        by_id = {n.id: n.checked for n in catalog.iter_nodes()}
        self.check.eventson = False
        try:
            for i, (_, node) in enumerate(self.rows):
                want = by_id.get(node.id, False)
                if self.check.get_status()[i] != want:
                    self.check.set_active(i)
        finally:
            self.check.eventson = True
        self._status = list(self.check.get_status())
