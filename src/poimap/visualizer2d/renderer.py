# renderer.py
from __future__ import annotations
import logging
from typing import Any, Callable, List

import matplotlib.pyplot as plt

from .overlay import TileOverlay
from .projection import PixelProjection

logger = logging.getLogger(__name__)


def canvas_scheduler(canvas) -> Callable[[float, Callable[[], None]], Any]:
    """figure canvas のタイマーで schedule(delay_seconds, callback) を実装する"""
    live: List[Any] = []

    def schedule(delay: float, callback: Callable[[], None]):
        timer = canvas.new_timer(interval=max(1, int(delay * 1000)))
        timer.single_shot = True

        def fire():
            if timer in live:
                live.remove(timer)
            callback()

        timer.add_callback(fire)
        live.append(timer)  # GC されないように保持
        timer.start()
        return timer

    return schedule


class MapRenderer:
    """タイル背景 + 軸範囲（ズーム・パン制限）を持つ Figure を用意する"""

    def __init__(self, projection: PixelProjection, overlay: TileOverlay | None,
                 *, min_zoom: int = 0, max_zoom: int = 7):
        self.p = projection
        self.ov = overlay
        self.min_zoom = min_zoom
        self.max_zoom = max_zoom

    def setup(self, zoom: int, panel_width: float = 0.25):
        fig = plt.figure(figsize=(12, 8), dpi=100)
        ax = fig.add_axes((0.02, 0.03, 0.96 - panel_width, 0.94))
        ax.set_facecolor("black")

        # 背景タイル
        if self.ov:
            img, z = self.ov.fetch(zoom)
            ax.imshow(img, extent=self.p.extent(), origin="upper",
                      interpolation="bilinear", zorder=0)
            logger.info("Tiles composed at zoom %d (%dx%d px)", z, img.shape[1], img.shape[0])

        ax.set_aspect("equal", adjustable="box")
        ax.set_xticks([]); ax.set_yticks([])
        self._set_view(ax, self.p.map_size / 2, self.p.map_size / 2, self.width_for(zoom))
        fig.canvas.mpl_connect("scroll_event", lambda e: self._on_scroll(ax, e))
        return fig, ax

    # --- ズーム -------------------------------------------------------

    def width_for(self, zoom: int) -> float:
        z = min(max(zoom, self.min_zoom), self.max_zoom)
        return self.p.map_size / (2 ** (z - self.min_zoom))

    def _set_view(self, ax, cx: float, cy: float, width: float) -> None:
        size = self.p.map_size
        width = min(max(width, self.width_for(self.max_zoom)), size)
        half = width / 2
        # 地図外へは出さない（折り返しなし）
        cx = min(max(cx, half), size - half)
        cy = min(max(cy, half), size - half)
        ax.set_xlim(cx - half, cx + half)
        ax.set_ylim(cy + half, cy - half)   # y 下向き

    def _on_scroll(self, ax, event) -> None:
        if event.inaxes is not ax:
            return
        scale = 1 / 1.2 if event.button == "up" else 1.2
        x0, x1 = ax.get_xlim()
        cx = event.xdata if event.xdata is not None else (x0 + x1) / 2
        y1, y0 = ax.get_ylim()
        cy = event.ydata if event.ydata is not None else (y0 + y1) / 2
        self._set_view(ax, cx, cy, (x1 - x0) * scale)
        ax.figure.canvas.draw_idle()
