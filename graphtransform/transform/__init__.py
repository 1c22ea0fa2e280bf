"""
Transform engines for graph-transform.

- to_graph: copy a graph into another graph with new identities
- to_index: extract raw and rule-derived documents into a document store
"""

from .to_graph import (
    IdentityRemapTransformer,
    MissingEndpointPolicy,
    TransformResult,
    transform_graph,
)
from .sink import BulkDocumentSink, BulkSubmitter
from .to_index import (
    PipelineCoordinator,
    PipelineResult,
    SharedVertexCursor,
    transform_graph_to_index,
)

__all__ = [
    "IdentityRemapTransformer",
    "MissingEndpointPolicy",
    "TransformResult",
    "transform_graph",
    "BulkDocumentSink",
    "BulkSubmitter",
    "PipelineCoordinator",
    "PipelineResult",
    "SharedVertexCursor",
    "transform_graph_to_index",
]
