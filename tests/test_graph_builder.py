import pytest

from relgraph.config.settings import CreateConfig, RelgraphConfig
from relgraph.errors import AlreadyExistsError, NotFoundError, ValidationError
from relgraph.graph.graph_builder import GraphBuilder, create
from relgraph.graph.graph_schema import Edge
from relgraph.graph.graph_store import GraphStore


TEST_RELATIONS = {
    "node": {
        "tests": {"to": "node", "type": "tests"},
        "testers": {"from": "node", "type": "tests"},
    }
}


def _graph() -> GraphStore:
    return GraphStore(TEST_RELATIONS)


def test_create_single_node():
    result = create(_graph(), {"id": "one", "type": "node", "value": 5})

    assert result.get_node("one").get("value") == 5


def test_create_list_of_nodes():
    result = create(_graph(), [{"id": "one", "type": "node"}, {"id": "two", "type": "node"}])

    assert result.node_ids() == ["one", "two"]


def test_create_nested_node_and_edge():
    result = create(
        _graph(),
        {"id": "one", "type": "node", "value": 1, "tests": {"id": "two", "value": 2}},
    )

    assert result.get_node("two").type == "node"
    assert result.get_node("two").get("value") == 2
    assert result.has_edge(Edge("one", "two", "tests"))


def test_incoming_relation_points_at_owner():
    result = create(_graph(), {"id": "one", "type": "node", "testers": [{"id": "two", "value": 2}]})

    assert result.has_edge(Edge("two", "one", "tests"))
    assert not result.has_edge(Edge("one", "two", "tests"))


def test_ref_to_node_defined_later_in_same_call():
    result = create(
        _graph(),
        [{"id": "one", "type": "node", "tests": [{"id": "two"}]}, {"id": "two", "type": "node"}],
    )

    assert result.has_edge(Edge("one", "two", "tests"))
    assert result.node_count() == 2


def test_ref_to_existing_node():
    graph = create(_graph(), {"id": "two", "type": "node"})

    result = create(graph, {"id": "one", "type": "node", "tests": {"id": "two"}})

    assert result.has_edge(Edge("one", "two", "tests"))


def test_ref_to_unknown_node_fails():
    with pytest.raises(NotFoundError):
        create(_graph(), {"id": "one", "type": "node", "tests": [{"id": "nowhere"}]})


def test_missing_relation_value_is_noop():
    result = create(_graph(), {"id": "one", "type": "node", "tests": None})

    assert result.edge_count() == 0


def test_duplicate_id_fails_and_leaves_input_graph_alone():
    graph = create(_graph(), {"id": "one", "type": "node"})

    with pytest.raises(AlreadyExistsError):
        create(graph, {"id": "one", "type": "node"})
    assert graph.node_count() == 1


def test_generated_ids_fill_lowest_unused():
    graph = create(GraphStore(), {"type": "t"})
    graph = create(graph, {"type": "t"})

    assert graph.node_ids() == ["1", "2"]


def test_generated_ids_skip_explicit_ids_in_input():
    result = create(GraphStore(), [{"type": "t"}, {"id": "1", "type": "t"}])

    assert result.node_ids() == ["2", "1"]


def test_first_generated_id_is_configurable():
    config = RelgraphConfig(create=CreateConfig(first_generated_id=100))
    builder = GraphBuilder(config.create)

    result = builder.create(GraphStore(), [{"type": "t"}, {"type": "t"}])

    assert result.node_ids() == ["100", "101"]


def test_create_config_rejects_non_positive_start():
    with pytest.raises(ValidationError):
        CreateConfig(first_generated_id=0)


def test_missing_type_fails():
    with pytest.raises(ValidationError):
        create(_graph(), {"id": "one"})


def test_mutual_friends_produce_two_edges(empty_graph):
    result = create(
        empty_graph,
        [
            {"id": "chewie", "type": "dog", "friends": [{"id": "river"}]},
            {"id": "river", "type": "dog", "friends": [{"id": "chewie"}]},
        ],
    )

    playing = [e for e in result.edges if e.type == "playsWith"]
    assert sorted((e.source, e.target) for e in playing) == [("chewie", "river"), ("river", "chewie")]


def test_nested_owner_with_dogs(empty_graph):
    result = create(
        empty_graph,
        {
            "id": "abbey",
            "type": "person",
            "pets": [{"id": "river", "name": "River"}, {"name": "Lake"}],
        },
    )

    assert result.get_node("river").type == "dog"
    assert result.has_edge(Edge("abbey", "river", "keeps"))
    assert result.has_edge(Edge("abbey", "1", "keeps"))
    assert result.get_node("1").get("name") == "Lake"


def test_repeated_inline_id_becomes_reference(empty_graph):
    result = create(
        empty_graph,
        {
            "id": "chewie",
            "type": "dog",
            "friends": [{"id": "river", "friends": [{"id": "chewie", "type": "dog", "name": "again"}]}],
        },
    )

    assert result.node_count() == 2
    assert result.get_node("chewie").get("name") is None
    assert result.has_edge(Edge("river", "chewie", "playsWith"))


def test_self_referencing_input_terminates(empty_graph):
    chewie = {"id": "chewie", "type": "dog"}
    chewie["friends"] = [chewie]

    result = create(empty_graph, chewie)

    assert result.node_count() == 1
    assert result.has_edge(Edge("chewie", "chewie", "playsWith"))


def test_repeated_sibling_id_fails(empty_graph):
    with pytest.raises(AlreadyExistsError):
        create(
            empty_graph,
            [
                {"id": "chewie", "type": "dog", "name": "Chewie"},
                {"id": "chewie", "type": "dog", "name": "Chewbacca"},
            ],
        )


def test_repeated_id_in_other_branch_fails(empty_graph):
    with pytest.raises(AlreadyExistsError):
        create(
            empty_graph,
            [
                {"id": "chewie", "type": "dog"},
                {"id": "chewie", "type": "dog", "friends": [{"id": "river", "name": "River"}]},
            ],
        )


def test_reused_definition_in_two_branches_fails(empty_graph):
    river = {"id": "river", "name": "River"}

    with pytest.raises(AlreadyExistsError):
        create(
            empty_graph,
            [
                {"id": "chewie", "type": "dog", "friends": [river]},
                {"id": "rex", "type": "dog", "friends": [river]},
            ],
        )


def test_repeated_inline_id_fails_without_cycle_guard(empty_graph):
    builder = GraphBuilder(CreateConfig(break_cycles=False))

    with pytest.raises(AlreadyExistsError):
        builder.create(
            empty_graph,
            {
                "id": "chewie",
                "type": "dog",
                "friends": [{"id": "river", "friends": [{"id": "chewie", "type": "dog"}]}],
            },
        )


def test_plan_does_not_touch_graph(empty_graph):
    plan = GraphBuilder().plan(empty_graph, {"type": "person", "pets": [{"name": "Rex"}]})

    assert [n.id for n in plan.nodes] == ["1", "2"]
    assert plan.edges == [Edge("1", "2", "keeps")]
    assert empty_graph.node_count() == 0
