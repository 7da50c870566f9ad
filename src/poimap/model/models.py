from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterator, Optional, Tuple


# --- カタログ（カテゴリツリー） ----------------------------------------

@dataclass(frozen=True)
class CategoryNode:
    """カタログの1ノード。icon はマーカーカテゴリ（葉）にだけ付く"""
    id: str
    name: str
    children: Tuple["CategoryNode", ...] = ()
    checked: bool = False
    icon: Optional[str] = None
    color: Optional[str] = None

    @property
    def is_leaf(self) -> bool:
        return not self.children


@dataclass(frozen=True)
class Catalog:
    """ルートノード列。編集は常に新しい Catalog を返す（置き換えのみ）"""
    roots: Tuple[CategoryNode, ...] = ()

    def iter_nodes(self) -> Iterator[CategoryNode]:
        """深さ優先（前順）で全ノードを列挙"""
        stack = list(reversed(self.roots))
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children))

    def find(self, node_id: str) -> Optional[CategoryNode]:
        for node in self.iter_nodes():
            if node.id == node_id:
                return node
        return None

    def all_ids(self) -> set[str]:
        return {n.id for n in self.iter_nodes()}

    def __len__(self) -> int:
        return sum(1 for _ in self.iter_nodes())


# --- ロケーション -----------------------------------------------------

@dataclass(frozen=True)
class LocationRecord:
    """
    外部データセットの1地点。
    x, y は元データの文字列のまま保持し、描画時に解釈する。
    visible も "1" / "0" の生値のまま。
    """
    id: str
    name: str
    marker_category_id: str
    x: Any
    y: Any
    visible: Any = None


# --- アイコン ---------------------------------------------------------

class IconVariant(str, Enum):
    NORMAL = "normal"
    VISITED = "visited"   # 同じ画像をグレースケール + 半透明で描く


@dataclass(frozen=True)
class IconEntry:
    img: str
    color: Optional[str] = None


@dataclass(frozen=True)
class IconDescriptor:
    asset_path: str
    variant: IconVariant = IconVariant.NORMAL
    color: Optional[str] = None


# --- 描画済みマーカー（リコンサイラ専有） -------------------------------

@dataclass
class RenderedMarker:
    location_id: str
    category_id: str
    handle: Any
    last_icon_variant: IconVariant = IconVariant.NORMAL


@dataclass
class ReconcileStats:
    added: list[str] = field(default_factory=list)
    removed: list[str] = field(default_factory=list)
    updated: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)

    @property
    def mutations(self) -> int:
        return len(self.added) + len(self.removed) + len(self.updated)


__all__ = [
    "CategoryNode",
    "Catalog",
    "LocationRecord",
    "IconVariant",
    "IconEntry",
    "IconDescriptor",
    "RenderedMarker",
    "ReconcileStats",
]
