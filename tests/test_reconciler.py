"""Tests for the marker reconciler."""

import pytest

from conftest import loc

from poimap.catalog.tree import apply_selection
from poimap.errors import DataParseError
from poimap.model.models import IconVariant
from poimap.reconciler import MarkerReconciler, parse_coordinates


@pytest.fixture
def tree(catalog):
    return apply_selection(catalog, catalog.all_ids())


@pytest.fixture
def reconciler(overlay):
    return MarkerReconciler(overlay)


L1, L3 = loc("L1"), loc("L3", "tower", x="5.5", y="7")


class TestReconcile:

    def test_initial_render_creates_all(self, reconciler, overlay, tree):
        stats = reconciler.reconcile([L1, L3], tree, set())
        assert stats.added == ["L1", "L3"]
        assert len(overlay.ops("create")) == 2
        assert reconciler.rendered_ids() == {"L1", "L3"}

    def test_idempotent(self, reconciler, overlay, tree):
        reconciler.reconcile([L1, L3], tree, {"L3"})
        overlay.reset()
        stats = reconciler.reconcile([L1, L3], tree, {"L3"})
        assert overlay.calls == []
        assert stats.mutations == 0

    def test_addition_only(self, reconciler, overlay, tree):
        reconciler.reconcile([L1], tree, set())
        overlay.reset()
        stats = reconciler.reconcile([L1, L3], tree, set())
        assert stats.added == ["L3"] and stats.removed == [] and stats.updated == []
        assert [c[0] for c in overlay.calls] == ["create"]

    def test_removal_only(self, reconciler, overlay, tree):
        reconciler.reconcile([L1, L3], tree, set())
        handle = reconciler.marker("L1").handle
        overlay.reset()
        stats = reconciler.reconcile([L3], tree, set())
        assert stats.removed == ["L1"] and stats.added == []
        assert overlay.calls == [("remove", handle)]

    def test_visited_change_updates_in_place(self, reconciler, overlay, tree):
        reconciler.reconcile([L1, L3], tree, set())
        handle = reconciler.marker("L3").handle
        overlay.reset()
        stats = reconciler.reconcile([L1, L3], tree, {"L3"})
        assert stats.updated == ["L3"]
        assert len(overlay.calls) == 1
        kind, h, icon = overlay.calls[0]
        assert (kind, h) == ("set_icon", handle)
        assert icon.variant is IconVariant.VISITED
        assert reconciler.marker("L3").last_icon_variant is IconVariant.VISITED

    def test_removals_run_before_additions(self, reconciler, overlay, tree):
        reconciler.reconcile([L1], tree, set())
        overlay.reset()
        reconciler.reconcile([L3], tree, set())
        assert [c[0] for c in overlay.calls] == ["remove", "create"]

    def test_new_marker_uses_visited_variant(self, reconciler, overlay, tree):
        reconciler.reconcile([L1], tree, {"L1"})
        _, _, icon = overlay.ops("create")[0]
        assert icon.variant is IconVariant.VISITED

    def test_passes_parsed_coordinates_and_label(self, reconciler, overlay, tree):
        reconciler.reconcile([L3], tree, set())
        x, y, icon, label = overlay.live[reconciler.marker("L3").handle]
        assert (x, y) == (5.5, 7.0)
        assert icon.asset_path == "tower.png"
        assert label == "L3"

    def test_duplicate_ids_render_once(self, reconciler, overlay, tree):
        stats = reconciler.reconcile([L1, L1], tree, set())
        assert stats.added == ["L1"]
        assert len(overlay.ops("create")) == 1

    def test_clear(self, reconciler, overlay, tree):
        reconciler.reconcile([L1, L3], tree, set())
        assert reconciler.clear() == 2
        assert overlay.live == {}


class TestFailureIsolation:

    def test_bad_coordinates_skipped(self, reconciler, overlay, tree, caplog):
        bad = loc("bad", x="north", y="1")
        stats = reconciler.reconcile([bad, L1], tree, set())
        assert stats.skipped == ["bad"]
        assert stats.added == ["L1"]
        assert "Skipping location bad" in caplog.text

    def test_missing_icon_skipped(self, reconciler, overlay, tree):
        stats = reconciler.reconcile([loc("E", "empty"), L1], tree, set())
        assert stats.skipped == ["E"]
        assert reconciler.rendered_ids() == {"L1"}

    def test_overlay_create_error_skipped(self, reconciler, overlay, tree):
        overlay.fail_create.add("L1")
        stats = reconciler.reconcile([L1, L3], tree, set())
        assert stats.skipped == ["L1"]
        assert stats.added == ["L3"]

    def test_skipped_item_retried_without_extra_mutations(self, reconciler, overlay, tree):
        bad = loc("bad", x="", y="1")
        reconciler.reconcile([bad], tree, set())
        stats = reconciler.reconcile([bad], tree, set())
        assert stats.mutations == 0
        assert overlay.calls == []

    def test_stale_handle_on_remove_is_treated_as_removed(self, reconciler, overlay, tree):
        reconciler.reconcile([L1], tree, set())
        overlay.live.clear()
        stats = reconciler.reconcile([], tree, set())
        assert stats.removed == ["L1"]
        assert reconciler.rendered_ids() == set()

    def test_stale_handle_on_update_recreates_marker(self, reconciler, overlay, tree):
        reconciler.reconcile([L1, L3], tree, set())
        dead = reconciler.marker("L1").handle
        overlay.live.pop(dead)
        stats = reconciler.reconcile([L1, L3], tree, {"L1", "L3"})
        assert stats.added == ["L1"]
        assert stats.updated == ["L3"]
        assert stats.skipped == []
        marker = reconciler.marker("L1")
        assert marker.handle != dead
        assert marker.handle in overlay.live
        assert marker.last_icon_variant is IconVariant.VISITED

        overlay.reset()
        again = reconciler.reconcile([L1, L3], tree, {"L1", "L3"})
        assert again.mutations == 0
        assert overlay.calls == []


class TestDoubleInteract:

    def test_double_click_calls_toggle(self, overlay, tree):
        toggled = []
        reconciler = MarkerReconciler(overlay, on_toggle=toggled.append)
        reconciler.reconcile([L1], tree, set())
        overlay.double_click(reconciler.marker("L1").handle)
        assert toggled == ["L1"]

    def test_no_handler_without_toggle(self, reconciler, overlay, tree):
        reconciler.reconcile([L1], tree, set())
        assert overlay.callbacks == {}


@pytest.mark.parametrize("x, y", [("12", "3.5"), (12, 3.5), (" 12 ", "3.5")])
def test_parse_coordinates(x, y):
    assert parse_coordinates(loc("a", x=x, y=y)) == (12.0, 3.5)


@pytest.mark.parametrize("x, y", [("abc", "1"), (None, "1"), ("nan", "1"), ("1", "inf")])
def test_parse_coordinates_rejects(x, y):
    with pytest.raises(DataParseError):
        parse_coordinates(loc("a", x=x, y=y))
