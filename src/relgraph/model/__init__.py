from relgraph.model.node_model import NodeModel, to_model

__all__ = [
    "NodeModel",
    "to_model",
]
