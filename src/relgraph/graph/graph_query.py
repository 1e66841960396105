from __future__ import annotations

import logging
from typing import Any, List, Set

from relgraph.config.settings import QueryConfig
from relgraph.graph.graph_schema import Node, Relation
from relgraph.graph.graph_store import GraphStore
from relgraph.query.operators import matches_field, matches_operator
from relgraph.query.parser import (
    NodeQuery,
    QueryPlan,
    RelationCardinality,
    RelationPredicate,
)

logger = logging.getLogger("relgraph.query")


class GraphQueryEngine:
    """
    Relation-aware query matching over a single graph value.

    A query is a mapping of entity fields and relation predicates, or a
    list of such mappings (any may match). Relation keys are taken from
    the schema for the node being tested.
    """

    def __init__(self, store: GraphStore, config: QueryConfig | None = None) -> None:
        self.store = store
        self.config = config or QueryConfig()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def find_nodes(self, query: Any) -> List[Node]:
        """
        Return every node matching the query, in graph order.
        """
        plan = QueryPlan(self.store.schema, query)
        result = [
            node
            for node in self.store.nodes
            if any(self._matches(node, q) for q in plan.for_type(node.type))
        ]
        logger.debug("find_nodes matched=%s", len(result))
        return result

    def matches_node_query(self, node: Node, query: Any) -> bool:
        plan = QueryPlan(self.store.schema, query)
        return any(self._matches(node, q) for q in plan.for_type(node.type))

    def get_related_nodes(self, node: Node, key: str) -> List[Node]:
        relation = self.store.schema.get(node.type, key)
        return self._related(node, relation)

    # ------------------------------------------------------------------
    # Matching
    # ------------------------------------------------------------------

    def _matches(self, node: Node, query: NodeQuery) -> bool:
        for key, predicate in query.fields.items():
            if not matches_field(node.get(key), predicate):
                return False

        for predicate in query.relations.values():
            if not self._matches_relation(node, predicate):
                return False

        return True

    def _matches_relation(self, node: Node, predicate: RelationPredicate) -> bool:
        related = self._related(node, predicate.relation)

        if isinstance(predicate, RelationCardinality):
            return matches_operator(related, predicate.operator)

        return any(
            self._matches(other, q)
            for other in related
            for q in predicate.alternatives
        )

    def _related(self, node: Node, relation: Relation) -> List[Node]:
        if relation.direction == "outgoing":
            edges = self.store.out_edges(node.id)
            far_end = [edge.target for edge in edges if relation.matches_edge(edge)]
        else:
            edges = self.store.in_edges(node.id)
            far_end = [edge.source for edge in edges if relation.matches_edge(edge)]

        related: List[Node] = []
        seen: Set[str] = set()
        for node_id in far_end:
            if self.config.unique_related_nodes and node_id in seen:
                continue
            other = self.store.get_node(node_id)
            if other.type != relation.related_type:
                continue
            seen.add(node_id)
            related.append(other)
        return related


# ---------------------------------------------------------------------
# Functional entry points
# ---------------------------------------------------------------------


def find_nodes(graph: GraphStore, query: Any) -> List[Node]:
    return GraphQueryEngine(graph).find_nodes(query)


def matches_node_query(graph: GraphStore, node: Node, query: Any) -> bool:
    return GraphQueryEngine(graph).matches_node_query(node, query)


def get_related_nodes(graph: GraphStore, node: Node, key: str) -> List[Node]:
    return GraphQueryEngine(graph).get_related_nodes(node, key)
