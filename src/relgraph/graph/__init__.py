"""
Graph subsystem for relgraph.

Defines the graph value and the pipelines that act on it:
- schema: nodes, edges and relation descriptors
- store: immutable node/edge primitives
- query: relation-aware matching
- builder / mutator: create and update from nested input
"""

from relgraph.graph.graph_schema import Node, Edge, Relation, RelationSchema
from relgraph.graph.graph_store import GraphStore
from relgraph.graph.graph_builder import GraphBuilder, CreatePlan
from relgraph.graph.graph_query import GraphQueryEngine
from relgraph.graph.graph_mutator import GraphMutator

__all__ = [
    "Node",
    "Edge",
    "Relation",
    "RelationSchema",
    "GraphStore",
    "GraphBuilder",
    "CreatePlan",
    "GraphQueryEngine",
    "GraphMutator",
]
