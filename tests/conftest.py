"""Shared fixtures: a small catalog, a location dataset and a recording overlay."""

import pytest

from poimap.errors import OverlayOperationError
from poimap.model.loader import ModelLoader
from poimap.model.models import LocationRecord
from poimap.visited.storage import MemoryStorage
from poimap.visited.store import VisitedStore


CATALOG_DATA = [
    {
        "id": "locations",
        "name": "Locations",
        "children": [
            {"id": "shrine", "name": "Shrine", "img": "shrine.png", "color": "#2196f3"},
            {"id": "tower", "name": "Tower", "img": "tower.png"},
        ],
    },
    {
        "id": "enemies",
        "name": "Enemies",
        "children": [
            {"id": "hinox", "name": "Hinox", "img": "hinox.png"},
            {"id": "empty", "name": "Nothing here"},
        ],
    },
]


class RecordingOverlay:
    """Overlay fake that logs every call; handles are plain ints."""

    def __init__(self):
        self.calls = []
        self.live = {}
        self.callbacks = {}
        self._next = 0
        self.fail_create = set()

    def create_overlay_marker(self, x, y, icon, label=None):
        if label in self.fail_create:
            raise OverlayOperationError(f"refused {label}")
        self._next += 1
        handle = self._next
        self.live[handle] = (x, y, icon, label)
        self.calls.append(("create", handle, icon))
        return handle

    def remove_overlay_marker(self, handle):
        self.calls.append(("remove", handle))
        if handle not in self.live:
            raise OverlayOperationError("stale handle")
        del self.live[handle]
        self.callbacks.pop(handle, None)

    def set_marker_icon(self, handle, icon):
        self.calls.append(("set_icon", handle, icon))
        if handle not in self.live:
            raise OverlayOperationError("stale handle")
        x, y, _, label = self.live[handle]
        self.live[handle] = (x, y, icon, label)

    def on_double_interact(self, handle, callback):
        self.callbacks[handle] = callback

    def double_click(self, handle):
        self.callbacks[handle]()

    def ops(self, kind=None):
        return [c for c in self.calls if kind is None or c[0] == kind]

    def reset(self):
        self.calls = []


def loc(lid, category="shrine", visible="1", x="10", y="20", name=None):
    return LocationRecord(id=lid, name=name or lid, marker_category_id=category,
                          x=x, y=y, visible=visible)


@pytest.fixture
def catalog():
    return ModelLoader().build_catalog(CATALOG_DATA)


@pytest.fixture
def overlay():
    return RecordingOverlay()


@pytest.fixture
def storage():
    return MemoryStorage()


@pytest.fixture
def store(storage):
    s = VisitedStore(storage)
    s.load()
    return s
