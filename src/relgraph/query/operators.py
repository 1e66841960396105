from __future__ import annotations

import re
from collections.abc import Mapping, Sized
from dataclasses import dataclass
from typing import Any, Callable, Dict, Sequence, Tuple

from relgraph.errors import UnsupportedOperatorError, ValidationError

OPERATOR_KEYS = (
    "eq",
    "ne",
    "lt",
    "lte",
    "gt",
    "gte",
    "re",
    "empty",
    "length",
    "includes",
)


# ---------------------------------------------------------------------
# Parsed field predicates
# ---------------------------------------------------------------------


@dataclass(frozen=True)
class Literal:
    """
    Field equals `value`.
    """

    value: Any


@dataclass(frozen=True)
class OneOf:
    """
    Field equals any of `values`.
    """

    values: Tuple[Any, ...]


@dataclass(frozen=True)
class Operator:
    """
    Single-key operator such as `{"gte": 5}`.

    For `length`, `rvalue` is either an int or a nested Operator.
    """

    key: str
    rvalue: Any


FieldPredicate = Literal | OneOf | Operator


def parse_operator(value: Mapping[str, Any], path: Sequence[str] = ()) -> Operator:
    if len(value) != 1:
        raise ValidationError(
            "operator must have exactly one key",
            path=path,
            expected=list(OPERATOR_KEYS),
            received=dict(value),
        )

    ((key, rvalue),) = value.items()
    if key not in OPERATOR_KEYS:
        raise UnsupportedOperatorError(key, path)

    if key == "length":
        if isinstance(rvalue, Mapping):
            rvalue = parse_operator(rvalue, [*path, "length"])
        elif isinstance(rvalue, bool) or not isinstance(rvalue, int):
            raise ValidationError(
                "length expects an integer or an operator",
                path=[*path, "length"],
                expected="int | operator",
                received=rvalue,
            )
    elif key == "re":
        if isinstance(rvalue, str):
            rvalue = re.compile(rvalue)
        elif not isinstance(rvalue, re.Pattern):
            raise ValidationError(
                "re expects a pattern",
                path=[*path, "re"],
                expected="str | re.Pattern",
                received=rvalue,
            )
    elif key == "includes" and isinstance(rvalue, (list, tuple, set, frozenset)):
        rvalue = tuple(rvalue)

    return Operator(key=key, rvalue=rvalue)


def parse_field(value: Any, path: Sequence[str] = ()) -> FieldPredicate:
    """
    Decides once how a query field value is matched.

    Lists mean "one of", mappings are operators, anything else is a
    literal.
    """
    if isinstance(value, Operator | Literal | OneOf):
        return value
    if isinstance(value, (list, tuple)):
        return OneOf(values=tuple(value))
    if isinstance(value, Mapping):
        return parse_operator(value, path)
    return Literal(value=value)


# ---------------------------------------------------------------------
# Evaluation
# ---------------------------------------------------------------------


def strict_equals(left: Any, right: Any) -> bool:
    if isinstance(left, bool) != isinstance(right, bool):
        return False
    return left == right


def _compare(op: Callable[[Any, Any], bool]) -> Callable[[Any, Any], bool]:
    def compare(value: Any, rvalue: Any) -> bool:
        if value is None or isinstance(value, bool) != isinstance(rvalue, bool):
            return False
        try:
            return bool(op(value, rvalue))
        except TypeError:
            return False

    return compare


def _collection(value: Any, key: str) -> Sized:
    if value is None:
        return ()
    if isinstance(value, Sized) and not isinstance(value, Mapping):
        return value
    raise ValidationError(
        f"'{key}' expects a collection",
        path=[key],
        expected="collection",
        received=value,
    )


def _match_re(value: Any, pattern: re.Pattern) -> bool:
    return isinstance(value, str) and pattern.search(value) is not None


def _match_empty(value: Any, rvalue: Any) -> bool:
    is_empty = len(_collection(value, "empty")) == 0
    return is_empty if rvalue else not is_empty


def _match_length(value: Any, rvalue: Any) -> bool:
    size = len(_collection(value, "length"))
    if isinstance(rvalue, Operator):
        return matches_operator(size, rvalue)
    return size == rvalue


def _contains(collection: Any, item: Any) -> bool:
    if isinstance(collection, str):
        return isinstance(item, str) and item in collection
    return any(strict_equals(element, item) for element in collection)


def _match_includes(value: Any, rvalue: Any) -> bool:
    collection = _collection(value, "includes")
    if isinstance(rvalue, tuple):
        return any(_contains(collection, item) for item in rvalue)
    return _contains(collection, rvalue)


_EVALUATORS: Dict[str, Callable[[Any, Any], bool]] = {
    "eq": strict_equals,
    "ne": lambda value, rvalue: not strict_equals(value, rvalue),
    "lt": _compare(lambda a, b: a < b),
    "lte": _compare(lambda a, b: a <= b),
    "gt": _compare(lambda a, b: a > b),
    "gte": _compare(lambda a, b: a >= b),
    "re": _match_re,
    "empty": _match_empty,
    "length": _match_length,
    "includes": _match_includes,
}


def matches_operator(value: Any, operator: Operator | Mapping[str, Any]) -> bool:
    """
    Evaluates a single operator against a value.

        matches_operator(5, {"gte": 5})            # True
        matches_operator([3, 4, 5], {"includes": 6})  # False
    """
    if not isinstance(operator, Operator):
        operator = parse_operator(operator)
    return _EVALUATORS[operator.key](value, operator.rvalue)


def matches_field(value: Any, predicate: FieldPredicate) -> bool:
    if isinstance(predicate, OneOf):
        return any(strict_equals(value, v) for v in predicate.values)
    if isinstance(predicate, Operator):
        return matches_operator(value, predicate)
    return strict_equals(value, predicate.value)


def matches_entity_query(entity: Any, query: Any) -> bool:
    """
    Matches a plain record (a mapping or a Node) against a field query.

    A list of queries matches when any alternative matches; inside one
    alternative every field must match.
    """
    if isinstance(query, (list, tuple)):
        return any(matches_entity_query(entity, alt) for alt in query)
    if not isinstance(query, Mapping):
        raise ValidationError(
            "query must be a mapping or a list of mappings",
            expected="mapping | list",
            received=query,
        )
    return all(
        matches_field(entity.get(key), parse_field(value, [key]))
        for key, value in query.items()
    )
