"""
Configuration layer for relgraph.

Configuration is explicit: build a RelgraphConfig (or one of its parts)
and pass it to the pipeline that needs it. Nothing is read from global
state.
"""

from relgraph.config.settings import (
    CreateConfig,
    QueryConfig,
    RelgraphConfig,
)

__all__ = [
    "CreateConfig",
    "QueryConfig",
    "RelgraphConfig",
]
