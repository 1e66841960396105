"""
Utility functions for relgraph.

Low-level helpers for JSON-shaped input. No graph logic lives here.
"""

from relgraph.utils.helpers import ensure_list, split_fields

__all__ = [
    "ensure_list",
    "split_fields",
]
