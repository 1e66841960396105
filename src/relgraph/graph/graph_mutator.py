from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, Dict, List, Tuple

from relgraph.config.settings import QueryConfig
from relgraph.errors import ValidationError
from relgraph.graph.graph_query import GraphQueryEngine
from relgraph.graph.graph_schema import Node, Relation, RelationSchema
from relgraph.graph.graph_store import GraphStore
from relgraph.utils.helpers import ensure_list

logger = logging.getLogger("relgraph.update")

RELATION_DIRECTIVES = ("add", "remove")


class GraphMutator:
    """
    Applies scalar overrides and relation add/remove directives to every
    node matching a query.

    Relation directives are sub-queries for the related type. `add` links
    each matching node unless the edge already exists; `remove` unlinks
    each matching node if the edge exists. Neither fails on a no-op.
    """

    def __init__(self, config: QueryConfig | None = None) -> None:
        self.config = config or QueryConfig()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def update(self, graph: GraphStore, query: Any, updates: Mapping[str, Any]) -> GraphStore:
        if not isinstance(updates, Mapping):
            raise ValidationError(
                "updates must be a mapping", expected="mapping", received=updates
            )

        # Malformed updates fail even when nothing matches.
        declared = _declared_types(query)
        for node_type in declared:
            self._validate(graph.schema, node_type, updates, len(declared) == 1)

        # Targets and candidates are resolved against the input graph.
        snapshot = GraphQueryEngine(graph, self.config)
        targets = snapshot.find_nodes(query)

        result = graph
        added = removed = 0
        for node in targets:
            values, relation_fields = self._split(graph, node, updates)
            result = result.replace_node(node.merge(values))

            for key, directive in relation_fields.items():
                relation = graph.schema.get(node.type, key)
                add, remove = self._directives(relation, directive)

                for other in self._candidates(snapshot, add):
                    edge = relation.make_edge(node.id, other.id)
                    if not result.has_edge(edge):
                        result = result.add_edge(edge)
                        added += 1

                for other in self._candidates(snapshot, remove):
                    edge = relation.make_edge(node.id, other.id)
                    if result.has_edge(edge):
                        result = result.remove_edge(edge)
                        removed += 1

        logger.info(
            "update targets=%s edges_added=%s edges_removed=%s",
            len(targets),
            added,
            removed,
        )
        return result

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _validate(
        self,
        schema: RelationSchema,
        node_type: str,
        updates: Mapping[str, Any],
        pinned: bool,
    ) -> None:
        values, relation_fields = schema.split_fields(node_type, updates)
        if pinned and "type" in values and values["type"] != node_type:
            raise ValidationError(
                "'type' cannot be changed by update",
                path=["type"],
                expected=node_type,
                received=values["type"],
            )
        for key, directive in relation_fields.items():
            self._directives(schema.get(node_type, key), directive)

    @staticmethod
    def _split(
        graph: GraphStore,
        node: Node,
        updates: Mapping[str, Any],
    ) -> Tuple[Dict[str, Any], Dict[str, Any]]:
        values, relation_fields = graph.schema.split_fields(node.type, updates)
        for key in ("id", "type"):
            if key in values and values[key] != node.get(key):
                raise ValidationError(
                    f"'{key}' cannot be changed by update",
                    path=[key],
                    expected=node.get(key),
                    received=values[key],
                )
        return values, relation_fields

    @staticmethod
    def _directives(
        relation: Relation, directive: Any
    ) -> Tuple[List[Mapping[str, Any]], List[Mapping[str, Any]]]:
        if not isinstance(directive, Mapping) or set(directive) - set(RELATION_DIRECTIVES):
            raise ValidationError(
                "relation update must be a mapping of 'add' and/or 'remove'",
                path=[relation.key],
                expected=list(RELATION_DIRECTIVES),
                received=directive,
            )
        return (
            _typed_subqueries(relation, directive.get("add"), "add"),
            _typed_subqueries(relation, directive.get("remove"), "remove"),
        )

    @staticmethod
    def _candidates(engine: GraphQueryEngine, subqueries: List[Mapping[str, Any]]) -> List[Node]:
        if not subqueries:
            return []
        return engine.find_nodes(subqueries)


def _typed_subqueries(relation: Relation, subquery: Any, directive: str) -> List[Mapping[str, Any]]:
    if subquery is None:
        return []
    typed = []
    for sub in ensure_list(subquery):
        if not isinstance(sub, Mapping):
            raise ValidationError(
                "relation directive must be a sub-query mapping",
                path=[relation.key, directive],
                expected="mapping",
                received=sub,
            )
        typed.append({**sub, "type": relation.related_type})
    return typed


def _declared_types(query: Any) -> List[str]:
    """
    Node types a query pins through its `type` field, in order.
    """
    declared: List[str] = []
    for alt in ensure_list(query):
        if not isinstance(alt, Mapping):
            continue
        value = alt.get("type")
        names = value if isinstance(value, (list, tuple)) else [value]
        for name in names:
            if isinstance(name, str) and name not in declared:
                declared.append(name)
    return declared


def update(graph: GraphStore, query: Any, updates: Mapping[str, Any]) -> GraphStore:
    return GraphMutator().update(graph, query, updates)
