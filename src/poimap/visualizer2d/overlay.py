# overlay.py
from dataclasses import dataclass
from pathlib import Path
import logging
import numpy as np
import matplotlib.image as mpimg

logger = logging.getLogger(__name__)

TILE_PX = 256  # 1タイルの一辺 [px]

def to_rgba(img: np.ndarray) -> np.ndarray:
    """imread の結果を float32 RGBA [0,1] に揃える"""
    arr = np.asarray(img)
    if arr.dtype == np.uint8:
        arr = arr.astype(np.float32) / 255.0
    else:
        arr = arr.astype(np.float32)
    if arr.ndim == 2:
        arr = np.stack([arr, arr, arr], axis=-1)
    if arr.shape[-1] == 3:
        alpha = np.ones(arr.shape[:2] + (1,), dtype=np.float32)
        arr = np.concatenate([arr, alpha], axis=-1)
    return arr

@dataclass(frozen=True)
class TileOverlay:
    """
    固定サイズのタイルマップ（{z}_{x}_{y}.png）を1枚の画像に貼り合わせる。
    - 折り返しなし（x, y は 0..2^z-1 のみ）
    - 無いタイルは透明
    """
    tiles_dir: str
    pattern: str = "{z}_{x}_{y}.png"
    min_zoom: int = 0
    max_zoom: int = 7
    max_px: int = 8192

    def clamp_zoom(self, zoom: int) -> int:
        return int(np.clip(zoom, self.min_zoom, self.max_zoom))

    def cap_zoom(self, zoom: int) -> int:
        w_px = (2 ** zoom) * TILE_PX
        while w_px > self.max_px and zoom > self.min_zoom:
            zoom -= 1; w_px //= 2
        return zoom

    def tile_path(self, z: int, x: int, y: int) -> Path:
        return Path(self.tiles_dir) / self.pattern.format(z=z, x=x, y=y)

    def fetch(self, zoom: int):
        z = self.cap_zoom(self.clamp_zoom(zoom))
        n = 2 ** z
        mosaic = np.zeros((n * TILE_PX, n * TILE_PX, 4), dtype=np.float32)
        missing = 0
        for ty in range(n):
            for tx in range(n):
                p = self.tile_path(z, tx, ty)
                if not p.exists():
                    missing += 1
                    continue
                try:
                    tile = to_rgba(mpimg.imread(p))
                except (OSError, ValueError) as exc:
                    logger.warning("Unreadable tile %s: %s", p, exc)
                    missing += 1
                    continue
                h, w = min(tile.shape[0], TILE_PX), min(tile.shape[1], TILE_PX)
                y0, x0 = ty * TILE_PX, tx * TILE_PX
                mosaic[y0:y0 + h, x0:x0 + w] = tile[:h, :w]
        if missing:
            logger.debug("Zoom %d: %d/%d tiles missing", z, missing, n * n)
        return mosaic, z
