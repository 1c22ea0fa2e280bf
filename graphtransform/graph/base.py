"""
Property graph abstractions for graph-transform.

A property graph holds vertices and edges, each carrying a label and a map of
property values. Backends implement PropertyGraph; the transform engines only
talk to this interface.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import date, datetime, time
from typing import Any, Iterator, Optional, Union

logger = logging.getLogger(__name__)

Scalar = Union[str, int, float, bool]
PropertyValue = Union[Scalar, list]

SCALAR_TYPES = (str, int, float, bool)


@dataclass
class Vertex:
    """A vertex in a property graph."""

    id: Any
    label: str
    properties: dict[str, PropertyValue] = field(default_factory=dict)

    @property
    def has_properties(self) -> bool:
        return bool(self.properties)


@dataclass
class Edge:
    """An edge from out_id to in_id."""

    id: Any
    label: str
    out_id: Any
    in_id: Any
    properties: dict[str, PropertyValue] = field(default_factory=dict)


def _normalize_scalar(value: Any) -> Scalar:
    if isinstance(value, SCALAR_TYPES):
        return value
    if isinstance(value, (datetime, date, time)):
        return value.isoformat()
    if hasattr(value, "iso_format"):
        # neo4j.time types
        return value.iso_format()
    return str(value)


def normalize_value(value: Any) -> Optional[PropertyValue]:
    """
    Normalize a property value to a supported kind.

    Supported kinds are str, int, float, bool and homogeneous lists of those.
    Dates and times become ISO-8601 strings, anything else becomes str(value).
    Lists that are still mixed after normalization are stringified element-wise.

    Args:
        value: Raw property value from a backend

    Returns:
        Normalized value, or None if the value should not be copied
    """
    if value is None:
        return None

    if isinstance(value, (list, tuple, set, frozenset)):
        items = [_normalize_scalar(v) for v in value if v is not None]
        kinds = {type(v) for v in items}
        if len(kinds) > 1:
            items = [str(v) for v in items]
        return items

    return _normalize_scalar(value)


def clean_properties(properties: Optional[dict]) -> dict[str, PropertyValue]:
    """Drop null values and normalize the rest."""
    cleaned = {}
    for key, value in (properties or {}).items():
        normalized = normalize_value(value)
        if normalized is not None:
            cleaned[str(key)] = normalized
    return cleaned


class PropertyGraph(ABC):
    """Abstract base class for property graph backends."""

    @abstractmethod
    def vertices(self) -> Iterator[Vertex]:
        """Iterate over all vertices."""
        pass

    @abstractmethod
    def edges(self) -> Iterator[Edge]:
        """Iterate over all edges."""
        pass

    @abstractmethod
    def get_vertex(self, vertex_id: Any) -> Optional[Vertex]:
        """Retrieve a vertex by ID, or None if it does not exist."""
        pass

    @abstractmethod
    def add_vertex(self, label: str, properties: dict[str, PropertyValue]) -> Any:
        """Create a vertex and return its store-assigned ID."""
        pass

    @abstractmethod
    def add_edge(
        self,
        label: str,
        out_id: Any,
        in_id: Any,
        properties: dict[str, PropertyValue],
    ) -> Any:
        """Create an edge between two existing vertices and return its ID."""
        pass

    def commit(self) -> None:
        """Flush pending writes. Backends that auto-commit may leave this as is."""
        pass

    def close(self) -> None:
        """Release any resources held by the graph."""
        pass

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
