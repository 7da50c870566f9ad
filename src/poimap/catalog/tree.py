# catalog/tree.py
"""
カタログツリーの選択操作。

どの関数もツリーをその場で書き換えない。変更のあった経路だけ作り直し、
変わらない部分木は同じオブジェクトを共有する。
"""
from __future__ import annotations
from dataclasses import replace
from typing import AbstractSet, Iterable

from poimap.model.models import Catalog, CategoryNode


def _apply_node(node: CategoryNode, selected: AbstractSet[str]) -> CategoryNode:
    children = tuple(_apply_node(c, selected) for c in node.children)
    checked = node.id in selected
    unchanged = checked == node.checked and all(
        new is old for new, old in zip(children, node.children)
    )
    if unchanged:
        return node
    return replace(node, checked=checked, children=children)


def apply_selection(catalog: Catalog, selected_ids: Iterable[str]) -> Catalog:
    """
    全ノードの checked を「id が selected_ids に含まれるか」に揃えた新しい Catalog を返す。
    子孫への伝播はツリーウィジェット側の責務で、ここでは与えられた集合をそのまま写す。
    何も変わらなければ同じ Catalog を返す。
    """
    selected = frozenset(selected_ids)
    roots = tuple(_apply_node(r, selected) for r in catalog.roots)
    if all(new is old for new, old in zip(roots, catalog.roots)):
        return catalog
    return Catalog(roots=roots)


def collect_checked(catalog: Catalog) -> set[str]:
    """checked なノード（葉・内部ノードとも）の id 集合"""
    return {n.id for n in catalog.iter_nodes() if n.checked}


def select_all(catalog: Catalog) -> Catalog:
    return apply_selection(catalog, catalog.all_ids())


def clear_selection(catalog: Catalog) -> Catalog:
    return apply_selection(catalog, ())


def descendant_ids(node: CategoryNode) -> set[str]:
    out: set[str] = set()
    stack = list(node.children)
    while stack:
        n = stack.pop()
        out.add(n.id)
        stack.extend(n.children)
    return out


def propagate_selection(catalog: Catalog, selected_ids: Iterable[str]) -> set[str]:
    """選択された各ノードの子孫をすべて加えた集合（伝播しないウィジェット向け）"""
    selected = set(selected_ids)
    expanded = set(selected)
    for node in catalog.iter_nodes():
        if node.id in selected:
            expanded |= descendant_ids(node)
    return expanded


__all__ = [
    "apply_selection",
    "collect_checked",
    "select_all",
    "clear_selection",
    "descendant_ids",
    "propagate_selection",
]
