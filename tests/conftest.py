from __future__ import annotations

import pytest

from relgraph.graph.graph_builder import create
from relgraph.graph.graph_store import GraphStore


PET_RELATIONS = {
    "person": {
        "pets": {"to": "dog", "type": "keeps"},
    },
    "dog": {
        "people": {"from": "person", "type": "keeps"},
        "parks": {"to": "park", "type": "playsAt"},
        "friends": {"to": "dog", "type": "playsWith"},
    },
    "park": {},
}


@pytest.fixture()
def empty_graph() -> GraphStore:
    return GraphStore(PET_RELATIONS)


@pytest.fixture()
def pets_graph(empty_graph: GraphStore) -> GraphStore:
    """
    Sneezy keeps Rambo, Smiley keeps Fluffy, Bob keeps nobody.
    Both dogs play at park '6'.
    """
    return create(
        empty_graph,
        [
            {"id": "1", "type": "person", "name": "Sneezy", "age": 20, "pets": [{"id": "4"}]},
            {"id": "2", "type": "person", "name": "Smiley", "age": 30, "pets": [{"id": "5"}]},
            {"id": "3", "type": "person", "name": "Bob", "age": 40},
            {
                "id": "4",
                "type": "dog",
                "name": "Rambo",
                "age": 2,
                "tricks": [],
                "parks": [{"id": "6"}],
            },
            {
                "id": "5",
                "type": "dog",
                "name": "Fluffy",
                "age": 5,
                "tricks": ["fly"],
                "parks": [{"id": "6"}],
            },
            {"id": "6", "type": "park", "name": "Park One"},
        ],
    )
