from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Iterator, List

from relgraph.errors import NotFoundError
from relgraph.graph.graph_query import GraphQueryEngine
from relgraph.graph.graph_schema import Node
from relgraph.graph.graph_store import GraphStore


class NodeModel(Mapping):
    """
    Read-only view of a node with its relations as nested models.

    Node fields read straight through. Relation keys are resolved on each
    access, so the view never holds more than the node and the graph
    value it was made from:

        chewie = to_model(graph, "chewie")
        [friend["name"] for friend in chewie.friends]

    Attribute access falls back to fields only when no real attribute
    exists, so fields named like Mapping methods (`get`, `keys`, `items`,
    `values`) or like `node` and `related` must be read as items.
    """

    __slots__ = ("_graph", "_node")

    def __init__(self, graph: GraphStore, node: Node) -> None:
        object.__setattr__(self, "_graph", graph)
        object.__setattr__(self, "_node", node)

    @property
    def node(self) -> Node:
        return self._node

    def _relation_keys(self) -> tuple:
        return self._graph.schema.relation_keys(self._node.type)

    def related(self, key: str) -> List["NodeModel"]:
        engine = GraphQueryEngine(self._graph)
        return [
            NodeModel(self._graph, other)
            for other in engine.get_related_nodes(self._node, key)
        ]

    # -------------------- Mapping --------------------

    def __getitem__(self, key: str) -> Any:
        if key in ("id", "type") or key in self._node.attributes:
            return self._node.get(key)
        if key in self._relation_keys():
            return self.related(key)
        raise KeyError(key)

    def __iter__(self) -> Iterator[str]:
        yield "id"
        yield "type"
        yield from self._node.attributes
        for key in self._relation_keys():
            if key not in self._node.attributes:
                yield key

    def __len__(self) -> int:
        return sum(1 for _ in self)

    # -------------------- Attribute access --------------------

    def __getattr__(self, key: str) -> Any:
        if key.startswith("_"):
            raise AttributeError(key)
        try:
            return self[key]
        except KeyError:
            raise AttributeError(key) from None

    def __setattr__(self, key: str, value: Any) -> None:
        raise AttributeError(f"NodeModel is read-only: cannot set '{key}'")

    def __delattr__(self, key: str) -> None:
        raise AttributeError(f"NodeModel is read-only: cannot delete '{key}'")

    def __repr__(self) -> str:
        return f"NodeModel<{self._node.type}>(id={self._node.id!r})"


def to_model(graph: GraphStore, node: Node | str) -> NodeModel:
    if isinstance(node, str):
        node = graph.get_node(node)
    elif not graph.has_node(node):
        raise NotFoundError("Node", node.id)
    return NodeModel(graph, node)
