# projection.py
from dataclasses import dataclass
from typing import Tuple

@dataclass(frozen=True)
class PixelProjection:
    """
    平面ピクセル座標系（地理投影なし）。
    マップ座標は z=0 のタイル1枚ぶん [0, map_size]、x=右+, y=下+。
    """
    map_size: float = 256.0
    pixel_scale: float = 1.0   # データセット座標 × scale = マップ座標

    # データセット座標 -> マップ座標
    def to_map(self, x: float, y: float) -> Tuple[float, float]:
        return x * self.pixel_scale, y * self.pixel_scale

    # マップ座標 -> データセット座標
    def to_dataset(self, mx: float, my: float) -> Tuple[float, float]:
        return mx / self.pixel_scale, my / self.pixel_scale

    def contains(self, mx: float, my: float) -> bool:
        return 0.0 <= mx <= self.map_size and 0.0 <= my <= self.map_size

    # zoom z での1マップ単位あたりのピクセル数
    def px_per_unit(self, zoom: int) -> float:
        return float(2 ** zoom)

    def extent(self) -> Tuple[float, float, float, float]:
        """imshow 用 (left, right, bottom, top)。y 下向き"""
        return (0.0, self.map_size, self.map_size, 0.0)
