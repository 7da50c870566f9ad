# tools/assign_icons.py
"""
location.json の各レコードに icon を付け直す。
name の最後の単語をカテゴリとみなし、対応表から icon を決める。
"""
from __future__ import annotations
import argparse
import json
import logging
from pathlib import Path
from typing import Any, Dict, List

from poimap.logging_config import setup_logging

logger = logging.getLogger(__name__)

DEFAULT_ICON = "objective.png"

CATEGORY_TO_ICON: Dict[str, str] = {
    "Shrine": "shrine.png",
    "Tower": "tower.png",
    "Stable": "stable.png",
    "Village": "village.png",
    "Settlement": "settlement.png",
    "Castle": "castle.png",
    "Fountain": "fountain.png",
    "Statue": "statue.png",
    "Pot": "pot.png",
    "Treasure": "treasure.png",
    "Seed": "seed.png",
    "Guardian": "guardian.png",
    "Hinox": "hinox.png",
    "Lynel": "lynel.png",
    "Talus": "talus.png",
    "Molduga": "molduga.png",
    "Armor": "armor.png",
    "Dye": "dye.png",
    "Jewelry": "jewelry.png",
    "Lab": "lab.png",
    "Inn": "inn.png",
    "Store": "store.png",
    "Raft": "raft.png",
    "Mainquest": "mainquest.png",
    "Sidequest": "sidequest.png",
    "Shrinequest": "shrinequest.png",
    "Memory": "memory.png",
    "Objective": "objective.png",
}


def icon_for_name(name: str) -> str:
    # 末尾の語で引く（末尾が空白なら空文字扱いでデフォルト）
    icon = CATEGORY_TO_ICON.get(name.split(" ")[-1], DEFAULT_ICON)
    lower = name.lower()
    # 特定キーワードは対応表より優先
    if "resurrection" in lower:
        icon = "shrine_resurrection.png"
    elif "dlc" in lower or "champion" in lower:
        icon = "shrine_dlc.png"
    return icon


def with_icon(record: Dict[str, Any]) -> Dict[str, Any]:
    """icon を name の直後に差し込んだ新しい dict（キー順を保つ）"""
    icon = icon_for_name(str(record.get("name", "")))
    out: Dict[str, Any] = {}
    for k, v in record.items():
        if k == "icon":
            continue
        out[k] = v
        if k == "name":
            out["icon"] = icon
    if "icon" not in out:
        out["icon"] = icon
    return out


def assign_icons(records: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    return [with_icon(r) for r in records]


def main(argv=None):
    p = argparse.ArgumentParser(description="Assign icons to location records by name")
    p.add_argument("locations", help="location.json (rewritten in place unless --output)")
    p.add_argument("--output")
    args = p.parse_args(argv)
    setup_logging()

    src = Path(args.locations)
    with src.open("r", encoding="utf-8") as f:
        records = json.load(f)
    updated = assign_icons(records)

    dst = Path(args.output) if args.output else src
    with dst.open("w", encoding="utf-8") as f:
        json.dump(updated, f, ensure_ascii=False, indent=4)
    logger.info("Updated %d locations -> %s", len(updated), dst)


if __name__ == "__main__":
    main()
