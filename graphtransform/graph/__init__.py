"""
Property graph capability for graph-transform.

Provides the PropertyGraph interface, the Vertex/Edge model, and an
in-memory backend.
"""

from .base import (
    Edge,
    PropertyGraph,
    PropertyValue,
    Vertex,
    clean_properties,
    normalize_value,
)
from .memory import InMemoryGraph

__all__ = [
    "Edge",
    "PropertyGraph",
    "PropertyValue",
    "Vertex",
    "clean_properties",
    "normalize_value",
    "InMemoryGraph",
]
