from __future__ import annotations

from dataclasses import dataclass, field

from relgraph.errors import ValidationError

# ---------------------------------------------------------------------
# Create pipeline
# ---------------------------------------------------------------------


@dataclass(frozen=True)
class CreateConfig:
    """
    Controls how nested create input is flattened into nodes and edges.
    """

    first_generated_id: int = 1
    break_cycles: bool = True

    def __post_init__(self) -> None:
        if self.first_generated_id < 1:
            raise ValidationError(
                "generated ids must be positive",
                path=["first_generated_id"],
                expected="integer >= 1",
                received=self.first_generated_id,
            )


# ---------------------------------------------------------------------
# Query matching
# ---------------------------------------------------------------------


@dataclass(frozen=True)
class QueryConfig:
    """
    Controls relation traversal during query matching.
    """

    unique_related_nodes: bool = False


# ---------------------------------------------------------------------
# Root configuration object
# ---------------------------------------------------------------------


@dataclass(frozen=True)
class RelgraphConfig:
    """
    Root configuration object for relgraph.

    Pass it (or its parts) to GraphBuilder, GraphMutator and
    GraphQueryEngine.
    """

    create: CreateConfig = field(default_factory=CreateConfig)
    query: QueryConfig = field(default_factory=QueryConfig)
