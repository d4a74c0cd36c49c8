"""Request planning helpers."""

from rasterpages.processing.layout import ensure_directory, plan_layout
from rasterpages.processing.page_ranges import needs_page_count, resolve_pages

__all__ = [
    "ensure_directory",
    "needs_page_count",
    "plan_layout",
    "resolve_pages",
]
