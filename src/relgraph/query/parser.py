from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Dict, List, Sequence, Tuple

from relgraph.errors import ValidationError
from relgraph.graph.graph_schema import Relation, RelationSchema
from relgraph.query.operators import (
    FieldPredicate,
    Operator,
    parse_field,
    parse_operator,
)


# ---------------------------------------------------------------------
# Compiled query
# ---------------------------------------------------------------------


@dataclass(frozen=True)
class RelationSubquery:
    """
    Holds when any related node matches any of the alternatives.
    """

    relation: Relation
    alternatives: Tuple["NodeQuery", ...]


@dataclass(frozen=True)
class RelationCardinality:
    """
    Operator evaluated against the related-node collection as a whole.
    """

    relation: Relation
    operator: Operator


RelationPredicate = RelationSubquery | RelationCardinality


@dataclass(frozen=True)
class NodeQuery:
    """
    One query alternative compiled for a single node type.

    Entity fields and relation predicates must all hold.
    """

    node_type: str
    fields: Dict[str, FieldPredicate]
    relations: Dict[str, RelationPredicate]


def _alternatives(query: Any, path: Sequence[str]) -> List[Mapping[str, Any]]:
    items = list(query) if isinstance(query, (list, tuple)) else [query]
    for index, item in enumerate(items):
        if not isinstance(item, Mapping):
            raise ValidationError(
                "query must be a mapping or a list of mappings",
                path=[*path, str(index)] if isinstance(query, (list, tuple)) else path,
                expected="mapping",
                received=item,
            )
    return items


def _compile_relation(
    schema: RelationSchema,
    relation: Relation,
    value: Any,
    path: Sequence[str],
) -> RelationPredicate:
    if isinstance(value, (list, tuple)):
        subqueries = _alternatives(value, path)
        return RelationSubquery(
            relation=relation,
            alternatives=tuple(
                _compile_one(schema, relation.related_type, sub, [*path, str(i)])
                for i, sub in enumerate(subqueries)
            ),
        )
    if isinstance(value, Mapping):
        return RelationCardinality(
            relation=relation,
            operator=parse_operator(value, path),
        )
    raise ValidationError(
        "relation predicate must be a list of sub-queries or an operator",
        path=path,
        expected="list | operator",
        received=value,
    )


def _compile_one(
    schema: RelationSchema,
    node_type: str,
    query: Mapping[str, Any],
    path: Sequence[str],
) -> NodeQuery:
    values, relation_fields = schema.split_fields(node_type, query)
    return NodeQuery(
        node_type=node_type,
        fields={
            key: parse_field(value, [*path, key]) for key, value in values.items()
        },
        relations={
            key: _compile_relation(
                schema, schema.get(node_type, key), value, [*path, key]
            )
            for key, value in relation_fields.items()
        },
    )


def compile_query(
    schema: RelationSchema,
    node_type: str,
    query: Any,
) -> Tuple[NodeQuery, ...]:
    """
    Compiles a query (or list of alternative queries) for nodes of
    `node_type`.
    """
    return tuple(
        _compile_one(schema, node_type, alt, [])
        for alt in _alternatives(query, [])
    )


def _admits_type(query: Mapping[str, Any], node_type: str) -> bool:
    declared = query.get("type")
    if isinstance(declared, str):
        return declared == node_type
    if isinstance(declared, (list, tuple)):
        return node_type in declared
    return True


class QueryPlan:
    """
    Compiles a query lazily, once per node type it is evaluated against.

    Which keys count as relations depends on the node type, so a query
    that does not pin `type` may compile differently per type.
    """

    def __init__(self, schema: RelationSchema, query: Any) -> None:
        self.schema = schema
        self.query = _alternatives(query, [])
        self._compiled: Dict[str, Tuple[NodeQuery, ...]] = {}

    def for_type(self, node_type: str) -> Tuple[NodeQuery, ...]:
        compiled = self._compiled.get(node_type)
        if compiled is None:
            candidates = [alt for alt in self.query if _admits_type(alt, node_type)]
            compiled = compile_query(self.schema, node_type, candidates)
            self._compiled[node_type] = compiled
        return compiled
