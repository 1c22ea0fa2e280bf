"""
Documents and the document store capability.

A Document is a flat field map bound for a named index with a type name.
DocumentStore backends accept batches of documents for bulk indexing.
"""

import json
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any

# Fixed per-document cost on top of the serialized source, mirroring the
# overhead a bulk request adds for each action line.
REQUEST_OVERHEAD = 50


@dataclass
class Document:
    """A flat document destined for the document store."""

    fields: dict[str, Any] = field(default_factory=dict)
    index: str = ""
    doc_type: str = ""


def estimate_size(document: Document) -> int:
    """
    Estimate the serialized size of a document in bytes.

    Used purely as a batching heuristic, not the exact transport size.
    """
    source = json.dumps(document.fields, default=str, ensure_ascii=False)
    return (
        len(source.encode("utf-8"))
        + len(document.index)
        + len(document.doc_type)
        + REQUEST_OVERHEAD
    )


class DocumentStore(ABC):
    """Abstract base class for bulk document stores."""

    @abstractmethod
    def ping(self) -> bool:
        """Return True if the store is reachable."""
        pass

    @abstractmethod
    def submit(self, documents: list[Document]) -> int:
        """
        Bulk index a batch of documents.

        Returns:
            Number of documents the store accepted

        Raises:
            SubmissionFailure: If the batch could not be written
        """
        pass

    def close(self) -> None:
        """Close the connection to the store."""
        pass
