import pytest

from relgraph.errors import NotFoundError
from relgraph.graph.graph_schema import Node
from relgraph.model.node_model import NodeModel, to_model


def test_fields_and_relations(pets_graph):
    sneezy = to_model(pets_graph, "1")

    assert sneezy["name"] == "Sneezy"
    assert sneezy.age == 20
    assert [dog.name for dog in sneezy.pets] == ["Rambo"]
    assert [park.id for park in sneezy.pets[0].parks] == ["6"]


def test_keys_include_relations(pets_graph):
    rambo = to_model(pets_graph, "4")

    assert list(rambo) == ["id", "type", "name", "age", "tricks", "people", "parks", "friends"]
    assert len(rambo) == 8
    assert "parks" in rambo
    assert "missing" not in rambo


def test_model_is_read_only(pets_graph):
    sneezy = to_model(pets_graph, "1")

    with pytest.raises(AttributeError):
        sneezy.name = "Sleepy"
    with pytest.raises(TypeError):
        sneezy["name"] = "Sleepy"


def test_unknown_attribute(pets_graph):
    with pytest.raises(AttributeError):
        to_model(pets_graph, "1").nickname


def test_unknown_node(pets_graph):
    with pytest.raises(NotFoundError):
        to_model(pets_graph, "99")


def test_model_from_node(pets_graph):
    model = to_model(pets_graph, pets_graph.get_node("6"))

    assert isinstance(model, NodeModel)
    assert repr(model) == "NodeModel<park>(id='6')"


def test_fields_shadowed_by_methods_are_read_as_items(empty_graph):
    graph = empty_graph.add_node(Node(id="7", type="park", attributes={"items": ["bench"], "keys": 2}))
    park = to_model(graph, "7")

    assert park["items"] == ["bench"]
    assert park["keys"] == 2
    assert callable(park.items)
