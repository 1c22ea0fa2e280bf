"""
Transform rule interface.

A rule describes how to turn a graph into flat documents for storing in a
document index such as Elasticsearch.
"""

from abc import ABC, abstractmethod
from typing import Any, Iterable

from graphtransform.graph.base import PropertyGraph


class TransformRule(ABC):
    """Produces flat documents from a graph for a single index."""

    @abstractmethod
    def transform(self, graph: PropertyGraph) -> Iterable[dict[str, Any]]:
        """
        Return the documents this rule derives from the graph.

        The sequence must be finite. Rules are run concurrently with each
        other, so they must not rely on shared mutable state.
        """
        pass

    @abstractmethod
    def index(self) -> str:
        """The name of the index into which this rule's output goes."""
        pass

    @abstractmethod
    def doc_type(self) -> str:
        """The document type associated with this rule's output."""
        pass

    @property
    def name(self) -> str:
        return type(self).__name__
