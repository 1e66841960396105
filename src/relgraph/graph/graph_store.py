from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, Dict, Iterable, List

import networkx as nx

from relgraph.errors import AlreadyExistsError, NotFoundError, ValidationError
from relgraph.graph.graph_schema import Edge, Node, RelationSchema

logger = logging.getLogger("relgraph.store")

NodeOrId = Node | str


def _node_id(node: NodeOrId) -> str:
    return node if isinstance(node, str) else node.id


def _insert_node(g: nx.MultiDiGraph, node: Node) -> None:
    if node.id in g:
        raise AlreadyExistsError("Node", node.id)
    g.add_node(node.id, data=node)


def _insert_edge(g: nx.MultiDiGraph, edge: Edge) -> None:
    for endpoint in (edge.target, edge.source):
        if endpoint not in g:
            raise NotFoundError("Node", endpoint)
    if g.has_edge(edge.source, edge.target, key=edge):
        raise AlreadyExistsError("Edge", edge.to_dict())
    g.add_edge(edge.source, edge.target, key=edge)


class GraphStore:
    """
    Immutable in-memory property graph.

    Holds nodes, edges and the relation schema. Every mutator copies the
    underlying graph and returns a new store; the receiver is never
    changed. Edges are keyed by the Edge value itself, so differently
    typed edges may join the same ordered pair but an identical
    (source, target, type) triple is stored at most once.
    """

    def __init__(
        self,
        schema: RelationSchema | Mapping[str, Any] | None = None,
    ) -> None:
        self._graph = nx.MultiDiGraph()
        self.schema = RelationSchema.coerce(schema)

    # -------------------- Construction --------------------

    @staticmethod
    def from_dict(data: Mapping[str, Any]) -> "GraphStore":
        """
        Seeds a store from `{"nodes": [...], "edges": [...], "relations": {...}}`.

        Edges are checked the same way add_edge checks them.
        """
        if not isinstance(data, Mapping):
            raise ValidationError("graph must be a mapping", expected="mapping", received=data)

        store = GraphStore(data.get("relations"))
        nodes = [n if isinstance(n, Node) else Node.from_dict(n) for n in data.get("nodes", ())]
        edges = [e if isinstance(e, Edge) else Edge.from_dict(e) for e in data.get("edges", ())]
        return store.add_nodes(nodes).add_edges(edges)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "nodes": [node.to_dict() for node in self.nodes],
            "edges": [edge.to_dict() for edge in self.edges],
            "relations": self.schema.to_dict(),
        }

    def with_schema(
        self,
        schema: RelationSchema | Mapping[str, Any] | None,
    ) -> "GraphStore":
        return self._derive(self._graph, schema=RelationSchema.coerce(schema))

    def _derive(
        self,
        graph: nx.MultiDiGraph,
        *,
        schema: RelationSchema | None = None,
    ) -> "GraphStore":
        g = GraphStore.__new__(GraphStore)
        g._graph = graph
        g.schema = self.schema if schema is None else schema
        return g

    def _copy(self) -> nx.MultiDiGraph:
        return self._graph.copy()

    # -------------------- Nodes --------------------

    @property
    def nodes(self) -> List[Node]:
        return [data["data"] for _, data in self._graph.nodes(data=True)]

    def node_ids(self) -> List[str]:
        return list(self._graph.nodes)

    def has_node(self, node: Node) -> bool:
        return node.id in self._graph

    def has_node_id(self, node_id: str) -> bool:
        return node_id in self._graph

    def get_node(self, node_id: str) -> Node:
        if node_id not in self._graph:
            raise NotFoundError("Node", node_id)
        return self._graph.nodes[node_id]["data"]

    def add_node(self, node: Node) -> "GraphStore":
        g = self._copy()
        _insert_node(g, node)
        logger.debug("add_node id=%s type=%s", node.id, node.type)
        return self._derive(g)

    def remove_node(self, node: NodeOrId) -> "GraphStore":
        """
        Removes a node together with every edge that touches it.
        """
        node_id = _node_id(node)
        if node_id not in self._graph:
            raise NotFoundError("Node", node_id)
        g = self._copy()
        dropped = g.degree(node_id)
        g.remove_node(node_id)
        logger.debug("remove_node id=%s edges_dropped=%s", node_id, dropped)
        return self._derive(g)

    def replace_node(self, node: Node) -> "GraphStore":
        """
        Swaps the stored node with the same id, keeping its position.
        """
        if node.id not in self._graph:
            raise NotFoundError("Node", node.id)
        g = self._copy()
        g.nodes[node.id]["data"] = node
        return self._derive(g)

    # -------------------- Edges --------------------

    @property
    def edges(self) -> List[Edge]:
        return [edge for _, _, edge in self._graph.edges(keys=True)]

    def has_edge(self, edge: Edge) -> bool:
        return self._graph.has_edge(edge.source, edge.target, key=edge)

    def add_edge(self, edge: Edge) -> "GraphStore":
        g = self._copy()
        _insert_edge(g, edge)
        logger.debug(
            "add_edge from=%s to=%s type=%s", edge.source, edge.target, edge.type
        )
        return self._derive(g)

    def remove_edge(self, edge: Edge) -> "GraphStore":
        if not self.has_edge(edge):
            raise NotFoundError("Edge", edge.to_dict())
        g = self._copy()
        g.remove_edge(edge.source, edge.target, key=edge)
        logger.debug(
            "remove_edge from=%s to=%s type=%s", edge.source, edge.target, edge.type
        )
        return self._derive(g)

    def out_edges(self, node_id: str) -> List[Edge]:
        if node_id not in self._graph:
            return []
        return [edge for _, _, edge in self._graph.out_edges(node_id, keys=True)]

    def in_edges(self, node_id: str) -> List[Edge]:
        if node_id not in self._graph:
            return []
        return [edge for _, _, edge in self._graph.in_edges(node_id, keys=True)]

    # -------------------- Bulk --------------------

    def add_nodes(self, nodes: Iterable[Node]) -> "GraphStore":
        """
        Adds nodes in order with a single copy. Fails like add_node on the
        first duplicate.
        """
        g = self._copy()
        for node in nodes:
            _insert_node(g, node)
        return self._derive(g)

    def add_edges(self, edges: Iterable[Edge]) -> "GraphStore":
        g = self._copy()
        for edge in edges:
            _insert_edge(g, edge)
        return self._derive(g)

    # -------------------- Analytics --------------------

    def node_count(self) -> int:
        return self._graph.number_of_nodes()

    def edge_count(self) -> int:
        return self._graph.number_of_edges()

    def __repr__(self) -> str:
        return f"GraphStore(nodes={self.node_count()}, edges={self.edge_count()})"
