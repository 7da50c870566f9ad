from __future__ import annotations

"""ログ設定。アプリ起動時に :func:`setup_logging` を1回呼ぶ。"""

import logging
import logging.config
import os

__all__ = ["setup_logging"]

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(level: str | None = None, log_file: str | None = None) -> None:
    """コンソール（+任意でファイル）にログを出す。POIMAP_LOG_LEVEL が最優先"""
    level = (os.environ.get("POIMAP_LOG_LEVEL") or level or "INFO").upper()
    if not isinstance(logging.getLevelName(level), int):
        level = "INFO"

    handlers = {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "simple",
            "level": level,
        },
    }
    if log_file:
        log_dir = os.path.dirname(log_file)
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)
        handlers["file"] = {
            "class": "logging.FileHandler",
            "formatter": "simple",
            "filename": log_file,
            "encoding": "utf-8",
            "level": "DEBUG",
        }

    logging.config.dictConfig({
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {"simple": {"format": LOG_FORMAT}},
        "handlers": handlers,
        "loggers": {
            # matplotlib のフォント探索などは静かに
            "matplotlib": {"level": "WARNING"},
            "PIL": {"level": "WARNING"},
        },
        "root": {"level": "DEBUG" if log_file else level, "handlers": list(handlers)},
    })
    logging.getLogger(__name__).debug("Logging initialised (level=%s, file=%s)", level, log_file)
