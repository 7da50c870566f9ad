"""Tests for category → icon resolution."""

import pytest

from poimap.catalog.tree import apply_selection
from poimap.errors import MissingIconCategory
from poimap.icons.resolver import IconResolver, build_icon_index, resolve_icon
from poimap.model.models import IconVariant


def test_index_only_contains_nodes_with_icons(catalog):
    assert set(build_icon_index(catalog)) == {"shrine", "tower", "hinox"}


def test_resolves_asset_and_color(catalog):
    icon = resolve_icon("shrine", catalog, visited=False)
    assert icon.asset_path == "shrine.png"
    assert icon.variant is IconVariant.NORMAL
    assert icon.color == "#2196f3"


def test_visited_reuses_the_same_asset(catalog):
    normal = resolve_icon("tower", catalog, visited=False)
    visited = resolve_icon("tower", catalog, visited=True)
    assert visited.asset_path == normal.asset_path
    assert visited.variant is IconVariant.VISITED


@pytest.mark.parametrize("category_id", ["empty", "locations", "nope"])
def test_missing_icon_category(catalog, category_id):
    with pytest.raises(MissingIconCategory) as err:
        resolve_icon(category_id, catalog, visited=False)
    assert err.value.category_id == category_id


def test_index_is_rebuilt_only_for_a_new_catalog(catalog):
    r = IconResolver()
    idx = r.index_for(catalog)
    assert r.index_for(catalog) is idx
    assert r.index_for(apply_selection(catalog, {"shrine"})) is not idx
