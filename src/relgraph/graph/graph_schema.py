from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, List, Literal, Optional, Tuple

from relgraph.errors import NotFoundError, ValidationError
from relgraph.utils.helpers import split_fields

Direction = Literal["outgoing", "incoming"]

RESERVED_FIELDS = ("id", "type")


def is_node_ref(value: Any) -> bool:
    """
    True for the `{"id": ...}` shorthand that links to a node instead of
    defining one.
    """
    return isinstance(value, Mapping) and len(value) == 1 and "id" in value


def _check_id(value: Any, path: List[str]) -> str:
    if not isinstance(value, str) or not value:
        raise ValidationError(
            "node id must be a non-empty string",
            path=path,
            expected="str",
            received=value,
        )
    return value


# ---------------------------------------------------------------------
# Nodes and edges
# ---------------------------------------------------------------------


@dataclass(frozen=True)
class Node:
    """
    Typed, identified record in the graph.
    """

    id: str
    type: str
    attributes: Dict[str, Any] = field(default_factory=dict)

    @staticmethod
    def from_dict(data: Mapping[str, Any]) -> "Node":
        if not isinstance(data, Mapping):
            raise ValidationError(
                "node must be a mapping", expected="mapping", received=data
            )
        node_id = _check_id(data.get("id"), ["id"])
        node_type = data.get("type")
        if not isinstance(node_type, str) or not node_type:
            raise ValidationError(
                "node type must be a non-empty string",
                path=["type"],
                expected="str",
                received=node_type,
            )
        attributes = {k: v for k, v in data.items() if k not in RESERVED_FIELDS}
        return Node(id=node_id, type=node_type, attributes=attributes)

    def get(self, key: str, default: Any = None) -> Any:
        if key == "id":
            return self.id
        if key == "type":
            return self.type
        return self.attributes.get(key, default)

    def merge(self, values: Mapping[str, Any]) -> "Node":
        """
        Returns a copy with `values` shallow-merged over the attributes.
        `id` and `type` are never reassigned.
        """
        attributes = dict(self.attributes)
        attributes.update(
            (k, v) for k, v in values.items() if k not in RESERVED_FIELDS
        )
        return Node(id=self.id, type=self.type, attributes=attributes)

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "type": self.type, **self.attributes}


@dataclass(frozen=True)
class Edge:
    """
    Directed, typed link from `source` to `target`.

    The (source, target, type) triple is the edge's identity.
    """

    source: str
    target: str
    type: Optional[str] = None

    @staticmethod
    def from_dict(data: Mapping[str, Any]) -> "Edge":
        if not isinstance(data, Mapping):
            raise ValidationError(
                "edge must be a mapping", expected="mapping", received=data
            )
        return Edge(
            source=_check_id(data.get("from"), ["from"]),
            target=_check_id(data.get("to"), ["to"]),
            type=data.get("type"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {"from": self.source, "to": self.target, "type": self.type}


# ---------------------------------------------------------------------
# Relations
# ---------------------------------------------------------------------


@dataclass(frozen=True)
class Relation:
    """
    Parsed relation descriptor.

    `outgoing` edges point from the owning node to the related node,
    `incoming` edges point from the related node to the owner. When
    `edge_type` is None, any edge between the two nodes in that direction
    counts.
    """

    key: str
    direction: Direction
    related_type: str
    edge_type: Optional[str] = None

    @staticmethod
    def parse(key: str, descriptor: Mapping[str, Any]) -> "Relation":
        path = [key]
        if not isinstance(descriptor, Mapping):
            raise ValidationError(
                "relation descriptor must be a mapping",
                path=path,
                expected="{'to': type} | {'from': type}",
                received=descriptor,
            )

        unknown = set(descriptor) - {"to", "from", "type"}
        if unknown or ("to" in descriptor) == ("from" in descriptor):
            raise ValidationError(
                "relation descriptor needs exactly one of 'to' or 'from'",
                path=path,
                expected="{'to': type} | {'from': type}",
                received=dict(descriptor),
            )

        direction: Direction = "outgoing" if "to" in descriptor else "incoming"
        related_type = descriptor["to" if direction == "outgoing" else "from"]
        edge_type = descriptor.get("type")

        if not isinstance(related_type, str) or not related_type:
            raise ValidationError(
                "related node type must be a non-empty string",
                path=path,
                expected="str",
                received=related_type,
            )
        if edge_type is not None and not isinstance(edge_type, str):
            raise ValidationError(
                "edge type must be a string",
                path=path + ["type"],
                expected="str",
                received=edge_type,
            )

        return Relation(
            key=key,
            direction=direction,
            related_type=related_type,
            edge_type=edge_type,
        )

    def make_edge(self, owner_id: str, related_id: str) -> Edge:
        if self.direction == "outgoing":
            return Edge(source=owner_id, target=related_id, type=self.edge_type)
        return Edge(source=related_id, target=owner_id, type=self.edge_type)

    def matches_edge(self, edge: Edge) -> bool:
        return self.edge_type is None or edge.type == self.edge_type

    def to_dict(self) -> Dict[str, Any]:
        side = "to" if self.direction == "outgoing" else "from"
        descriptor: Dict[str, Any] = {side: self.related_type}
        if self.edge_type is not None:
            descriptor["type"] = self.edge_type
        return descriptor


_NO_RELATIONS: Mapping[str, Relation] = MappingProxyType({})


class RelationSchema:
    """
    Declares, per node type, which keys are relations and what edges
    back them.

    Built once from a `{node_type: {key: descriptor}}` mapping and never
    changed afterwards.
    """

    def __init__(
        self,
        relations: Mapping[str, Mapping[str, Any]] | None = None,
    ) -> None:
        parsed: Dict[str, Mapping[str, Relation]] = {}
        for node_type, entries in (relations or {}).items():
            if not isinstance(entries, Mapping):
                raise ValidationError(
                    "relations for a node type must be a mapping",
                    path=[node_type],
                    expected="mapping",
                    received=entries,
                )
            by_key: Dict[str, Relation] = {}
            for key, descriptor in entries.items():
                if isinstance(descriptor, Relation):
                    by_key[key] = descriptor
                else:
                    by_key[key] = Relation.parse(key, descriptor)
            parsed[node_type] = MappingProxyType(by_key)
        self._relations: Mapping[str, Mapping[str, Relation]] = MappingProxyType(parsed)

    def node_types(self) -> List[str]:
        return list(self._relations)

    def relations_for(self, node_type: str) -> Mapping[str, Relation]:
        return self._relations.get(node_type, _NO_RELATIONS)

    def relation_keys(self, node_type: str) -> Tuple[str, ...]:
        return tuple(self.relations_for(node_type))

    def has_relation(self, node_type: str, key: str) -> bool:
        return key in self.relations_for(node_type)

    def get(self, node_type: str, key: str) -> Relation:
        try:
            return self.relations_for(node_type)[key]
        except KeyError:
            raise NotFoundError("Relation", f"{node_type}.{key}") from None

    def split_fields(
        self,
        node_type: str,
        data: Mapping[str, Any],
    ) -> Tuple[Dict[str, Any], Dict[str, Any]]:
        """
        Splits input into (value fields, relation fields) for a node type.
        """
        return split_fields(data, self.relations_for(node_type))

    def to_dict(self) -> Dict[str, Dict[str, Any]]:
        return {
            node_type: {key: rel.to_dict() for key, rel in entries.items()}
            for node_type, entries in self._relations.items()
        }

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, RelationSchema):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def __repr__(self) -> str:
        return f"RelationSchema({self.to_dict()!r})"

    @staticmethod
    def coerce(value: "RelationSchema | Mapping[str, Any] | None") -> "RelationSchema":
        if isinstance(value, RelationSchema):
            return value
        return RelationSchema(value)

