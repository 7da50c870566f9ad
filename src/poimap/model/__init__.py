from .models import (
    CategoryNode,
    Catalog,
    LocationRecord,
    IconVariant,
    IconEntry,
    IconDescriptor,
    RenderedMarker,
    ReconcileStats,
)

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
