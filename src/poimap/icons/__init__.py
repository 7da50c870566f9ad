from .resolver import IconResolver, build_icon_index, resolve_icon

__all__ = ["IconResolver", "build_icon_index", "resolve_icon"]
