"""
relgraph
========

An in-memory, schema-described property graph.

A graph value holds typed nodes, typed directed edges, and a relation
schema naming the keys (e.g. "owns", "friends") that stand for edges.
Nested, JSON-shaped input is flattened into nodes and edges on create,
queries match fields and relations together, and updates apply scalar
overrides plus relation add/remove directives.

Every operation returns a new graph value; nothing is changed in place.

Public API:
- GraphStore
- create / update / find_nodes
- GraphBuilder / GraphMutator / GraphQueryEngine
- to_model
"""

from relgraph.errors import (
    GraphError,
    NotFoundError,
    AlreadyExistsError,
    ValidationError,
    UnsupportedOperatorError,
)
from relgraph.graph.graph_schema import Node, Edge, Relation, RelationSchema, is_node_ref
from relgraph.graph.graph_store import GraphStore
from relgraph.graph.graph_builder import GraphBuilder, create
from relgraph.graph.graph_query import (
    GraphQueryEngine,
    find_nodes,
    matches_node_query,
    get_related_nodes,
)
from relgraph.graph.graph_mutator import GraphMutator, update
from relgraph.model.node_model import NodeModel, to_model
from relgraph.query.operators import matches_operator, matches_entity_query

__all__ = [
    "GraphError",
    "NotFoundError",
    "AlreadyExistsError",
    "ValidationError",
    "UnsupportedOperatorError",
    "Node",
    "Edge",
    "Relation",
    "RelationSchema",
    "is_node_ref",
    "GraphStore",
    "GraphBuilder",
    "create",
    "GraphQueryEngine",
    "find_nodes",
    "matches_node_query",
    "get_related_nodes",
    "GraphMutator",
    "update",
    "NodeModel",
    "to_model",
    "matches_operator",
    "matches_entity_query",
]

__version__ = "0.1.0"
