# markers.py
"""
matplotlib の Axes をマップビューポートとして使うマーカーレイヤ。
リコンサイラからの create / remove / set_icon / double-click 登録を受ける。
"""
from __future__ import annotations
import logging
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Tuple

import numpy as np
import matplotlib.image as mpimg
from matplotlib.offsetbox import AnnotationBbox, OffsetImage

from poimap.errors import OverlayOperationError
from poimap.model.models import IconDescriptor, IconVariant
from .overlay import to_rgba
from .projection import PixelProjection

logger = logging.getLogger(__name__)

GRAY_WEIGHTS = np.array([0.299, 0.587, 0.114], dtype=np.float32)


def faded(img: np.ndarray, alpha: float) -> np.ndarray:
    """同じ画像をグレースケール + 半透明に"""
    gray = img[..., :3] @ GRAY_WEIGHTS
    out = np.empty_like(img)
    out[..., 0] = out[..., 1] = out[..., 2] = gray
    out[..., 3] = img[..., 3] * alpha
    return out


def load_icon(icons_dir: str | Path, asset_path: str) -> np.ndarray:
    """icons_dir 配下のアイコン画像を RGBA float で"""
    try:
        return to_rgba(mpimg.imread(Path(icons_dir) / asset_path))
    except (OSError, ValueError) as exc:
        raise OverlayOperationError(f"cannot load icon {asset_path}: {exc}") from exc


class MarkerLayer:
    def __init__(
        self,
        ax,
        projection: PixelProjection | None = None,
        *,
        icons_dir: str | Path = ".",
        icon_size: int = 20,
        visited_alpha: float = 0.45,
    ):
        self.ax = ax
        self.p = projection or PixelProjection()
        self.icons_dir = Path(icons_dir)
        self.icon_size = icon_size
        self.visited_alpha = visited_alpha
        self._images: Dict[Tuple[str, IconVariant], np.ndarray] = {}
        self._handles: Dict[int, AnnotationBbox] = {}
        self._labels: Dict[int, str] = {}
        self._callbacks: Dict[int, Callable[[], None]] = {}
        self._popup = None
        self._popup_owner: Optional[int] = None
        self._cid = ax.figure.canvas.mpl_connect("button_press_event", self._on_press)

    # --- 画像 ---------------------------------------------------------

    def _image(self, icon: IconDescriptor) -> np.ndarray:
        key = (icon.asset_path, icon.variant)
        if key not in self._images:
            base = load_icon(self.icons_dir, icon.asset_path)
            if icon.variant is IconVariant.VISITED:
                base = faded(base, self.visited_alpha)
            self._images[key] = base
        return self._images[key]

    def _zoom_for(self, img: np.ndarray) -> float:
        return self.icon_size / max(img.shape[0], img.shape[1], 1)

    # --- ビューポート操作 -----------------------------------------------

    def create_overlay_marker(self, x: float, y: float, icon: IconDescriptor, label: str | None = None) -> AnnotationBbox:
        img = self._image(icon)
        mx, my = self.p.to_map(x, y)
        box = OffsetImage(img, zoom=self._zoom_for(img))
        handle = AnnotationBbox(box, (mx, my), xycoords="data", frameon=False,
                                box_alignment=(0.5, 0.5), zorder=6)
        self.ax.add_artist(handle)
        self._handles[id(handle)] = handle
        if label:
            self._labels[id(handle)] = label
        self._draw_idle()
        return handle

    def remove_overlay_marker(self, handle: Any) -> None:
        key = id(handle)
        self._handles.pop(key, None)
        self._labels.pop(key, None)
        self._callbacks.pop(key, None)
        if self._popup_owner == key:
            self._hide_popup()
        try:
            handle.remove()
        except (ValueError, NotImplementedError, AttributeError) as exc:
            raise OverlayOperationError(f"cannot remove marker: {exc!r}") from exc
        self._draw_idle()

    def set_marker_icon(self, handle: Any, icon: IconDescriptor) -> None:
        if id(handle) not in self._handles or getattr(handle, "axes", None) is None:
            raise OverlayOperationError("stale marker handle")
        img = self._image(icon)
        handle.offsetbox.set_data(img)
        handle.offsetbox.set_zoom(self._zoom_for(img))
        self._draw_idle()

    def on_double_interact(self, handle: Any, callback: Callable[[], None]) -> None:
        if id(handle) not in self._handles:
            raise OverlayOperationError("stale marker handle")
        self._callbacks[id(handle)] = callback

    def __len__(self) -> int:
        return len(self._handles)

    # --- イベント -----------------------------------------------------

    def hit_test(self, px: float, py: float) -> Optional[AnnotationBbox]:
        """表示座標 (px, py) に一番近いマーカー（アイコン半径内のみ）"""
        radius = self.icon_size * 0.5 * self.ax.figure.dpi / 72.0
        best, best_d2 = None, radius * radius
        for handle in self._handles.values():
            hx, hy = self.ax.transData.transform(handle.xy)
            d2 = (hx - px) ** 2 + (hy - py) ** 2
            if d2 <= best_d2:
                best, best_d2 = handle, d2
        return best

    def _on_press(self, event) -> None:
        if event.inaxes is not self.ax or event.x is None or event.y is None:
            return
        handle = self.hit_test(event.x, event.y)
        if event.dblclick:
            cb = self._callbacks.get(id(handle)) if handle is not None else None
            if cb is not None:
                cb()
            return
        self._show_popup(handle)

    def _hide_popup(self) -> None:
        if self._popup is not None:
            self._popup.remove()
        self._popup = None
        self._popup_owner = None

    def _show_popup(self, handle: Optional[AnnotationBbox]) -> None:
        self._hide_popup()
        label = self._labels.get(id(handle)) if handle is not None else None
        if label:
            self._popup = self.ax.annotate(
                label, handle.xy, xytext=(8, 10), textcoords="offset points", fontsize=10,
                bbox=dict(boxstyle="round,pad=0.25", fc="white", ec="gray", alpha=0.85),
                zorder=7,
            )
            self._popup_owner = id(handle)
        self._draw_idle()

    def _draw_idle(self) -> None:
        self.ax.figure.canvas.draw_idle()
