"""
Reusable transform rules.

These cover the common cases of indexing one vertex label or one edge label
as flat documents. Register configured instances with a RuleRegistry.
"""

import logging
from typing import Any, Iterable, Optional

from graphtransform.graph.base import PropertyGraph
from .base import TransformRule

logger = logging.getLogger(__name__)


class LabelDocumentRule(TransformRule):
    """
    One document per vertex with the given label.

    Usage:
        rule = LabelDocumentRule("Person", index="people", fields=["name", "email"])
    """

    def __init__(
        self,
        label: str,
        index: str,
        doc_type: Optional[str] = None,
        fields: Optional[list[str]] = None,
    ):
        self.label = label
        self._index = index
        self._doc_type = doc_type or label
        self.fields = fields

    def transform(self, graph: PropertyGraph) -> Iterable[dict[str, Any]]:
        for vertex in graph.vertices():
            if vertex.label != self.label:
                continue

            doc = {"id": vertex.id}
            if self.fields is None:
                doc.update(vertex.properties)
            else:
                doc.update({k: vertex.properties[k] for k in self.fields if k in vertex.properties})
            yield doc

    def index(self) -> str:
        return self._index

    def doc_type(self) -> str:
        return self._doc_type

    @property
    def name(self) -> str:
        return f"LabelDocumentRule({self.label})"


class EdgeDocumentRule(TransformRule):
    """
    One document per edge with the given label.

    Endpoint properties are flattened into the document with out_ and in_
    prefixes, so a "uses" edge from a Person to an IPAddress yields fields
    like out_name and in_identifier.
    """

    def __init__(self, label: str, index: str, doc_type: Optional[str] = None):
        self.label = label
        self._index = index
        self._doc_type = doc_type or label

    def transform(self, graph: PropertyGraph) -> Iterable[dict[str, Any]]:
        for edge in graph.edges():
            if edge.label != self.label:
                continue

            doc = {
                "id": edge.id,
                "label": edge.label,
                "out_id": edge.out_id,
                "in_id": edge.in_id,
            }
            doc.update(edge.properties)

            for prefix, vertex_id in (("out_", edge.out_id), ("in_", edge.in_id)):
                vertex = graph.get_vertex(vertex_id)
                if vertex is None:
                    logger.debug(f"Endpoint {vertex_id} of edge {edge.id} not found")
                    continue
                doc[f"{prefix}label"] = vertex.label
                for key, value in vertex.properties.items():
                    doc[f"{prefix}{key}"] = value

            yield doc

    def index(self) -> str:
        return self._index

    def doc_type(self) -> str:
        return self._doc_type

    @property
    def name(self) -> str:
        return f"EdgeDocumentRule({self.label})"
