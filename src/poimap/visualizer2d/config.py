# config.py
from dataclasses import dataclass
from pathlib import Path
import json

@dataclass
class MapConfig:
    catalog: str
    locations: str
    tiles_dir: str | None = None
    icons_dir: str = "."
    tile_pattern: str = "{z}_{x}_{y}.png"
    storage_path: str = "poimap_storage.json"
    storage_key: str = "poimap_visited_locations"
    map_size: int = 256          # z=0 のマップ一辺 [px]
    min_zoom: int = 0
    max_zoom: int = 7
    zoom: int = 2
    pixel_scale: float = 1.0     # データセット座標 → マップ座標
    icon_size: int = 20
    save_delay_ms: int = 500
    propagate_selection: bool = False
    selected: list[str] | None = None
    log_level: str = "INFO"
    log_file: str | None = None

    def __post_init__(self):
        if not (0 <= self.min_zoom <= self.max_zoom):
            raise ValueError(f"invalid zoom range [{self.min_zoom}, {self.max_zoom}]")
        if not (self.min_zoom <= self.zoom <= self.max_zoom):
            raise ValueError(f"zoom {self.zoom} outside [{self.min_zoom}, {self.max_zoom}]")
        if self.map_size <= 0 or self.icon_size <= 0 or self.pixel_scale <= 0:
            raise ValueError("map_size, icon_size and pixel_scale must be positive")
        if self.save_delay_ms < 0:
            raise ValueError("save_delay_ms must be >= 0")

    def resolve_paths(self, base: str | Path) -> "MapConfig":
        """設定ファイル基準の相対パスを解決する"""
        base = Path(base)
        for name in ("catalog", "locations", "tiles_dir", "icons_dir", "storage_path", "log_file"):
            v = getattr(self, name)
            if v is not None and not Path(v).is_absolute():
                setattr(self, name, str(base / v))
        return self

def load_json(path: str | None) -> dict:
    if not path: return {}
    p = Path(path)
    if not p.exists(): raise FileNotFoundError(path)
    with p.open("r", encoding="utf-8") as f: return json.load(f)
