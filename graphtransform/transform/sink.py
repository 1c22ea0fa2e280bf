"""
Size-bounded batching of documents into a document store.

Each worker owns a BulkDocumentSink and its batch; batches are never shared.
All sinks submit through one BulkSubmitter, which serializes calls into the
store client because the client is not assumed to be safe for concurrent
bulk requests.

Delivery is at-most-once: a failed batch is logged and dropped.
"""

import logging
import threading
from typing import Callable, Optional

from graphtransform.config import config
from graphtransform.documents import Document, DocumentStore, estimate_size

logger = logging.getLogger(__name__)


class BulkSubmitter:
    """Single, mutually exclusive submission point into a DocumentStore."""

    def __init__(self, store: DocumentStore):
        self.store = store
        self._lock = threading.Lock()
        self.batches_submitted = 0
        self.batches_failed = 0
        self.documents_submitted = 0
        self.documents_dropped = 0

    def submit(self, batch: list[Document]) -> bool:
        """
        Submit a batch to the store.

        Returns:
            True if the store accepted the batch, False if it was dropped
        """
        with self._lock:
            try:
                self.store.submit(batch)
            except Exception as e:
                self.batches_failed += 1
                self.documents_dropped += len(batch)
                logger.error(f"Unable to write {len(batch)} documents to document store: {e}")
                return False

            self.batches_submitted += 1
            self.documents_submitted += len(batch)
            return True


class BulkDocumentSink:
    """
    Accumulates documents and flushes them once the batch is big enough.

    Usage:
        sink = BulkDocumentSink(submitter)
        for doc in documents:
            sink.add(doc)
        sink.close()
    """

    def __init__(
        self,
        submitter: BulkSubmitter,
        threshold: Optional[int] = None,
        estimator: Callable[[Document], int] = estimate_size,
        on_flush: Optional[Callable[["BulkDocumentSink"], None]] = None,
    ):
        """
        Initialize the sink.

        Args:
            submitter: Shared submission point
            threshold: Flush once the estimated batch size reaches this many bytes
            estimator: Document size estimator
            on_flush: Called after each flush triggered by the threshold
        """
        self.submitter = submitter
        self.threshold = config.BULK_SIZE_BYTES if threshold is None else threshold
        self.estimator = estimator
        self.on_flush = on_flush

        self.batch: list[Document] = []
        self.estimated_size = 0
        self.count = 0

    def add(self, document: Document) -> None:
        self.batch.append(document)
        self.estimated_size += self.estimator(document)
        self.count += 1

        if self.estimated_size >= self.threshold:
            self.flush()
            if self.on_flush:
                self.on_flush(self)

    def flush(self) -> bool:
        """Submit the current batch, if any, and start a new one."""
        if not self.batch:
            return True

        batch = self.batch
        self.batch = []
        self.estimated_size = 0
        return self.submitter.submit(batch)

    def close(self) -> None:
        """Flush whatever remains."""
        self.flush()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        # A faulted worker abandons its unflushed batch
        if exc_type is None:
            self.close()
        return False
