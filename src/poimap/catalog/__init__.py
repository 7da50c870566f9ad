from .tree import (
    apply_selection,
    collect_checked,
    select_all,
    clear_selection,
    descendant_ids,
    propagate_selection,
)

__all__ = [
    "apply_selection",
    "collect_checked",
    "select_all",
    "clear_selection",
    "descendant_ids",
    "propagate_selection",
]
