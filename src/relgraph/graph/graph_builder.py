from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Set

from relgraph.config.settings import CreateConfig
from relgraph.errors import ValidationError
from relgraph.graph.graph_schema import Edge, Node, is_node_ref
from relgraph.graph.graph_store import GraphStore
from relgraph.utils.helpers import ensure_list

logger = logging.getLogger("relgraph.create")


@dataclass(frozen=True)
class CreatePlan:
    """
    Flat nodes and edges produced from nested create input.
    """

    nodes: List[Node]
    edges: List[Edge]


@dataclass
class _PlanState:
    reserved: Set[str]
    next_id: int
    nodes: List[Node] = field(default_factory=list)
    edges: List[Edge] = field(default_factory=list)
    # Ids and input objects on the current recursion path.
    ancestor_ids: Set[str] = field(default_factory=set)
    ancestors: Dict[int, str] = field(default_factory=dict)


class GraphBuilder:
    """
    Turns denormalized create input into node and edge additions.

    Input is a node mapping (or list of them). Keys declared as relations
    for the node's type hold inline node definitions, `{"id": ...}`
    references, or a list mixing both.
    """

    def __init__(self, config: CreateConfig | None = None) -> None:
        self.config = config or CreateConfig()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def plan(self, graph: GraphStore, data: Any) -> CreatePlan:
        """
        Flatten input without touching the graph.
        """
        state = _PlanState(
            reserved=set(graph.node_ids()) | _explicit_ids(data),
            next_id=self.config.first_generated_id,
        )
        for index, item in enumerate(ensure_list(data)):
            self._plan_node(graph, item, None, state, [str(index)])
        return CreatePlan(nodes=state.nodes, edges=state.edges)

    def create(self, graph: GraphStore, data: Any) -> GraphStore:
        """
        Add every node in the input, then every edge.

        Nodes go in first so references may point at nodes defined
        anywhere in the same input.
        """
        plan = self.plan(graph, data)
        graph = graph.add_nodes(plan.nodes).add_edges(plan.edges)
        logger.info(
            "create nodes=%s edges=%s", len(plan.nodes), len(plan.edges)
        )
        return graph

    # ------------------------------------------------------------------
    # Flattening
    # ------------------------------------------------------------------

    def _plan_node(
        self,
        graph: GraphStore,
        item: Any,
        related_type: Optional[str],
        state: _PlanState,
        path: List[str],
    ) -> str:
        if not isinstance(item, Mapping):
            raise ValidationError(
                "create input must be a mapping",
                path=path,
                expected="mapping",
                received=item,
            )

        if self.config.break_cycles and id(item) in state.ancestors:
            return state.ancestors[id(item)]

        node_type = item.get("type", related_type)
        if not isinstance(node_type, str) or not node_type:
            raise ValidationError(
                "node type is required",
                path=[*path, "type"],
                expected="str",
                received=node_type,
            )

        values, relation_fields = graph.schema.split_fields(node_type, item)
        node_id = values.get("id")
        if node_id is None:
            node_id = self._generate_id(state)
            values["id"] = node_id

        if self.config.break_cycles and node_id in state.ancestor_ids:
            logger.debug("create id=%s closes a cycle; linking instead", node_id)
            return node_id

        values["type"] = node_type
        node = Node.from_dict(values)
        state.nodes.append(node)

        state.ancestor_ids.add(node.id)
        state.ancestors[id(item)] = node.id
        try:
            self._plan_relations(graph, node, relation_fields, state, path)
        finally:
            state.ancestor_ids.discard(node.id)
            state.ancestors.pop(id(item), None)

        return node.id

    def _plan_relations(
        self,
        graph: GraphStore,
        node: Node,
        relation_fields: Dict[str, Any],
        state: _PlanState,
        path: List[str],
    ) -> None:
        for key, value in relation_fields.items():
            if value is None:
                continue
            relation = graph.schema.get(node.type, key)
            for index, entry in enumerate(ensure_list(value)):
                if is_node_ref(entry):
                    other_id = entry["id"]
                else:
                    other_id = self._plan_node(
                        graph,
                        entry,
                        relation.related_type,
                        state,
                        [*path, key, str(index)],
                    )
                state.edges.append(relation.make_edge(node.id, other_id))

    def _generate_id(self, state: _PlanState) -> str:
        while str(state.next_id) in state.reserved:
            state.next_id += 1
        node_id = str(state.next_id)
        state.reserved.add(node_id)
        return node_id


def _explicit_ids(data: Any) -> Set[str]:
    """
    Every `id` written anywhere in the input, so generated ids avoid them.
    """
    found: Set[str] = set()
    seen: Set[int] = set()
    stack = [data]
    while stack:
        current = stack.pop()
        if isinstance(current, (list, tuple)):
            stack.extend(current)
        elif isinstance(current, Mapping) and id(current) not in seen:
            seen.add(id(current))
            node_id = current.get("id")
            if isinstance(node_id, str):
                found.add(node_id)
            stack.extend(v for v in current.values() if isinstance(v, (Mapping, list, tuple)))
    return found


def create(graph: GraphStore, data: Any) -> GraphStore:
    return GraphBuilder().create(graph, data)
