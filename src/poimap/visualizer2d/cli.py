# cli.py
import argparse
import logging
from pathlib import Path

import matplotlib.pyplot as plt

from .config import MapConfig, load_json
from .markers import MarkerLayer
from .overlay import TileOverlay
from .panel import CategoryPanel
from .projection import PixelProjection
from .renderer import MapRenderer, canvas_scheduler
from poimap.logging_config import setup_logging
from poimap.model.loader import ModelLoader
from poimap.session import MapSession
from poimap.visited.storage import JsonSlotStorage
from poimap.visited.store import VisitedStore

logger = logging.getLogger(__name__)

def parse_args(argv=None):
    p = argparse.ArgumentParser(description="Interactive POI map with visited tracking")
    p.add_argument("--config")
    p.add_argument("--catalog")
    p.add_argument("--locations")
    p.add_argument("--tiles-dir", dest="tiles_dir")
    p.add_argument("--icons-dir", dest="icons_dir")
    p.add_argument("--storage-path", dest="storage_path")
    p.add_argument("--zoom", type=int)
    p.add_argument("--select", dest="selected", nargs="*", metavar="CATEGORY_ID")
    p.add_argument("--log-level", dest="log_level")
    p.add_argument("--log-file", dest="log_file")
    return p.parse_args(argv)

def build_config(args) -> MapConfig:
    cfg_dict = load_json(args.config)
    # JSONをデフォルトに、CLIで上書き
    for k, v in vars(args).items():
        if k == "config": continue
        if v is not None: cfg_dict[k] = v
    cfg = MapConfig(**cfg_dict)
    if args.config:
        cfg.resolve_paths(Path(args.config).parent)
    return cfg

def main(argv=None):
    args = parse_args(argv)
    cfg = build_config(args)
    setup_logging(cfg.log_level, cfg.log_file)

    # モデルロード
    loader = ModelLoader(validate_schema=True)
    catalog = loader.load_catalog(cfg.catalog)
    locations = loader.load_locations(cfg.locations)

    # 描画先
    projection = PixelProjection(map_size=cfg.map_size, pixel_scale=cfg.pixel_scale)
    tiles = TileOverlay(cfg.tiles_dir, cfg.tile_pattern, cfg.min_zoom, cfg.max_zoom) if cfg.tiles_dir else None
    renderer = MapRenderer(projection, tiles, min_zoom=cfg.min_zoom, max_zoom=cfg.max_zoom)
    fig, ax = renderer.setup(cfg.zoom)
    schedule = canvas_scheduler(fig.canvas)
    layer = MarkerLayer(ax, projection, icons_dir=cfg.icons_dir, icon_size=cfg.icon_size)

    store = VisitedStore(
        JsonSlotStorage(cfg.storage_path), cfg.storage_key,
        save_delay=cfg.save_delay_ms / 1000.0, scheduler=schedule,
    )
    session = MapSession(catalog, locations, store, layer,
                         scheduler=schedule, propagate=cfg.propagate_selection)
    if cfg.selected is not None:
        session.update_selection(cfg.selected)

    panel = CategoryPanel(fig, (0.76, 0.03, 0.22, 0.94), session.catalog,
                          on_selection=session.update_selection,
                          on_all=session.select_all, on_clear=session.clear_selection,
                          icons_dir=cfg.icons_dir, icon_size=cfg.icon_size)
    session.add_listener(panel.sync)
    # 閉じるときに保存を確定させる
    fig.canvas.mpl_connect("close_event", lambda _e: session.close())

    stats = session.start()
    logger.info("Rendered %d markers (%d skipped)", len(stats.added), len(stats.skipped))
    plt.show()

if __name__ == "__main__":
    main()
