"""
In-memory property graph.

Thread-safe for concurrent readers and writers. Intended for tests, small
jobs, and as a staging area between backends.
"""

import itertools
import logging
import threading
from typing import Any, Iterator, Optional

from .base import Edge, PropertyGraph, PropertyValue, Vertex, clean_properties

logger = logging.getLogger(__name__)


class InMemoryGraph(PropertyGraph):
    """
    Property graph held in dictionaries.

    Usage:
        graph = InMemoryGraph()
        alice = graph.add_vertex("Person", {"name": "Alice"})
        bob = graph.add_vertex("Person", {"name": "Bob"})
        graph.add_edge("knows", alice, bob, {"since": 2019})
    """

    def __init__(self):
        self._vertices: dict[Any, Vertex] = {}
        self._edges: dict[Any, Edge] = {}
        self._ids = itertools.count(1)
        self._lock = threading.RLock()
        self.closed = False

    def vertices(self) -> Iterator[Vertex]:
        with self._lock:
            snapshot = list(self._vertices.values())
        return iter(snapshot)

    def edges(self) -> Iterator[Edge]:
        with self._lock:
            snapshot = list(self._edges.values())
        return iter(snapshot)

    def get_vertex(self, vertex_id: Any) -> Optional[Vertex]:
        with self._lock:
            return self._vertices.get(vertex_id)

    def get_edge(self, edge_id: Any) -> Optional[Edge]:
        with self._lock:
            return self._edges.get(edge_id)

    def add_vertex(self, label: str, properties: Optional[dict[str, PropertyValue]] = None) -> Any:
        with self._lock:
            vertex_id = next(self._ids)
            self._vertices[vertex_id] = Vertex(
                id=vertex_id,
                label=label,
                properties=clean_properties(properties),
            )
        return vertex_id

    def add_edge(
        self,
        label: str,
        out_id: Any,
        in_id: Any,
        properties: Optional[dict[str, PropertyValue]] = None,
    ) -> Any:
        with self._lock:
            for endpoint in (out_id, in_id):
                if endpoint not in self._vertices:
                    raise KeyError(f"Vertex {endpoint} does not exist")

            edge_id = next(self._ids)
            self._edges[edge_id] = Edge(
                id=edge_id,
                label=label,
                out_id=out_id,
                in_id=in_id,
                properties=clean_properties(properties),
            )
        return edge_id

    def vertex_count(self) -> int:
        with self._lock:
            return len(self._vertices)

    def edge_count(self) -> int:
        with self._lock:
            return len(self._edges)

    def close(self) -> None:
        self.closed = True
