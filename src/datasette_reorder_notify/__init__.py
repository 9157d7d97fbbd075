"""Datasette plugin that triggers restocking quote requests to suppliers."""

from datasette_reorder_notify.plugin import (
    register_routes,
    skip_csrf,
    startup,
)

__all__ = [
    "register_routes",
    "skip_csrf",
    "startup",
]
