"""
Exceptions raised by graph-transform.
"""

from typing import Any, Optional


class GraphTransformError(Exception):
    """Base class for graph-transform errors."""

    pass


class ConnectivityFailure(GraphTransformError):
    """Raised when the document store cannot be reached before a pipeline run."""

    pass


class ReferentialIntegrityGap(GraphTransformError):
    """Raised when an edge endpoint has no entry in the identity map."""

    def __init__(
        self,
        edge_id: Any,
        out_id: Any,
        in_id: Any,
        missing: Optional[list] = None,
    ):
        self.edge_id = edge_id
        self.out_id = out_id
        self.in_id = in_id
        self.missing = missing or []
        super().__init__(
            f"Couldn't find ID in map for edge {edge_id} "
            f"({out_id} -> {in_id}), missing: {self.missing}"
        )


class SubmissionFailure(GraphTransformError):
    """Raised when a bulk write to the document store fails."""

    pass


class UninstantiableRule(GraphTransformError):
    """Raised when a transform rule cannot be constructed."""

    pass
