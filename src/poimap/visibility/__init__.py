from .resolver import resolve_visible, VisibilityResolver, VISIBLE_FLAG

__all__ = ["resolve_visible", "VisibilityResolver", "VISIBLE_FLAG"]
