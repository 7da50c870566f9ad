"""Tests for the icon assignment tool."""

import json

from poimap.tools.assign_icons import assign_icons, icon_for_name, main, with_icon


class TestIconForName:

    def test_last_word_selects_icon(self):
        assert icon_for_name("Oman Au Shrine") == "shrine.png"
        assert icon_for_name("Great Plateau Tower") == "tower.png"

    def test_unknown_falls_back_to_objective(self):
        assert icon_for_name("Mysterious thing") == "objective.png"
        assert icon_for_name("") == "objective.png"

    def test_trailing_space_falls_back_to_objective(self):
        assert icon_for_name("Oman Au Shrine ") == "objective.png"
        assert icon_for_name("Oman Au  Shrine") == "shrine.png"

    def test_keyword_overrides(self):
        assert icon_for_name("Shrine of Resurrection") == "shrine_resurrection.png"
        assert icon_for_name("Champion Shrine") == "shrine_dlc.png"
        assert icon_for_name("DLC Shrine") == "shrine_dlc.png"


class TestWithIcon:

    def test_icon_inserted_after_name(self):
        out = with_icon({"id": 1, "name": "Kakariko Village", "x": "1", "y": "2"})
        assert list(out) == ["id", "name", "icon", "x", "y"]
        assert out["icon"] == "village.png"

    def test_existing_icon_is_replaced(self):
        out = with_icon({"icon": "old.png", "id": 1, "name": "Lynel"})
        assert list(out) == ["id", "name", "icon"]
        assert out["icon"] == "lynel.png"

    def test_record_without_name_still_gets_icon(self):
        assert with_icon({"id": 1})["icon"] == "objective.png"

    def test_assign_icons_keeps_order(self):
        records = [{"id": 1, "name": "A Stable"}, {"id": 2, "name": "B Inn"}]
        assert [r["icon"] for r in assign_icons(records)] == ["stable.png", "inn.png"]


def test_main_rewrites_file(tmp_path):
    src = tmp_path / "location.json"
    src.write_text(json.dumps([{"id": 1, "name": "Hateno Village"}]), encoding="utf-8")
    main([str(src)])
    assert json.loads(src.read_text(encoding="utf-8")) == [
        {"id": 1, "name": "Hateno Village", "icon": "village.png"}
    ]
