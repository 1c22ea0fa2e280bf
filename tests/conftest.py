"""
Pytest configuration and fixtures for graph-transform tests.
"""

import pytest
import sys
import threading
from pathlib import Path

# Add package to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from graphtransform.documents import Document, DocumentStore
from graphtransform.errors import SubmissionFailure
from graphtransform.graph.memory import InMemoryGraph


# =============================================================================
# Fake document stores
# =============================================================================


class RecordingStore(DocumentStore):
    """Document store that keeps every submitted batch in memory."""

    def __init__(self, reachable: bool = True):
        self.reachable = reachable
        self.batches: list[list[Document]] = []
        self.closed = False
        self.ping_count = 0
        self._lock = threading.Lock()

    def ping(self) -> bool:
        self.ping_count += 1
        return self.reachable

    def submit(self, documents: list[Document]) -> int:
        with self._lock:
            self.batches.append(list(documents))
        return len(documents)

    def close(self) -> None:
        self.closed = True

    @property
    def documents(self) -> list[Document]:
        return [doc for batch in self.batches for doc in batch]


class FailingStore(RecordingStore):
    """Document store whose submissions always fail."""

    def submit(self, documents: list[Document]) -> int:
        raise SubmissionFailure("store rejected batch")


@pytest.fixture
def store():
    """Reachable recording store."""
    return RecordingStore()


@pytest.fixture
def failing_store():
    """Reachable store that rejects every batch."""
    return FailingStore()


# =============================================================================
# Sample graphs
# =============================================================================


@pytest.fixture
def people_graph():
    """
    Three people, each using an IP address.

    James and Jim share an email; James's and Jim's IPs share an identifier.
    """
    graph = InMemoryGraph()
    p1 = graph.add_vertex("Person", {"name": "James", "email": "james@example.com"})
    p2 = graph.add_vertex(
        "Person",
        {"name": "Simon", "email": "simon@example.com", "sameAs": "http://www.example.com/simon"},
    )
    p3 = graph.add_vertex("Person", {"name": "Jim", "email": "james@example.com"})

    i1 = graph.add_vertex("IPAddress", {"identifier": "127.0.0.1"})
    i2 = graph.add_vertex("IPAddress", {"identifier": "127.0.0.2"})
    i3 = graph.add_vertex("IPAddress", {"identifier": "127.0.0.1"})

    graph.add_edge("uses", p1, i1)
    graph.add_edge("uses", p2, i2)
    graph.add_edge("uses", p3, i3)
    return graph


@pytest.fixture
def large_graph():
    """A graph with enough vertices to spread across several workers."""
    graph = InMemoryGraph()
    previous = None
    for i in range(500):
        vertex_id = graph.add_vertex("Item", {"n": i, "name": f"item-{i}"})
        if previous is not None:
            graph.add_edge("next", previous, vertex_id, {"step": i})
        previous = vertex_id
    return graph


# =============================================================================
# Pytest markers
# =============================================================================


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests (require Neo4j/Elasticsearch)"
    )
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with -m 'not slow')"
    )
