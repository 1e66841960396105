"""
Query primitives: field operators and query compilation.
"""

from relgraph.query.operators import (
    Literal,
    OneOf,
    Operator,
    OPERATOR_KEYS,
    parse_field,
    parse_operator,
    matches_operator,
    matches_field,
    matches_entity_query,
)
from relgraph.query.parser import (
    NodeQuery,
    RelationSubquery,
    RelationCardinality,
    QueryPlan,
    compile_query,
)

__all__ = [
    "Literal",
    "OneOf",
    "Operator",
    "OPERATOR_KEYS",
    "parse_field",
    "parse_operator",
    "matches_operator",
    "matches_field",
    "matches_entity_query",
    "NodeQuery",
    "RelationSubquery",
    "RelationCardinality",
    "QueryPlan",
    "compile_query",
]
