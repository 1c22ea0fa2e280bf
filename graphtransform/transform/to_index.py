"""
Transform a graph into a document store.

Runs in two waves over a shared set of sinks:
1. Raw: every vertex with properties becomes a document in an index named
   after its label. Workers share a single vertex cursor.
2. Rules: one worker per TransformRule drains the rule's documents into the
   rule's index.

Wave 2 starts only after every wave 1 worker has finished. A failing worker
is logged and loses its remaining input; its siblings carry on.
"""

import logging
import threading
import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, Optional

from graphtransform.config import config
from graphtransform.documents import Document, DocumentStore
from graphtransform.errors import ConnectivityFailure
from graphtransform.graph.base import PropertyGraph, Vertex
from graphtransform.rules.base import TransformRule
from .sink import BulkDocumentSink, BulkSubmitter

logger = logging.getLogger(__name__)

ORIGINAL_ID_FIELD = "originalId"
RAW_TYPE_PREFIX = "raw_"


@dataclass
class PipelineResult:
    """Result of transforming a graph into a document store."""

    raw_documents: int = 0
    rule_documents: dict[str, int] = field(default_factory=dict)
    batches_submitted: int = 0
    batches_failed: int = 0
    documents_dropped: int = 0
    worker_faults: list[str] = field(default_factory=list)
    elapsed_seconds: float = 0.0

    @property
    def success(self) -> bool:
        return not self.worker_faults and self.batches_failed == 0


class SharedVertexCursor:
    """Hands out each vertex of a materialized sequence to exactly one caller."""

    def __init__(self, vertices: Iterable[Vertex]):
        self._iterator = iter(list(vertices))
        self._lock = threading.Lock()

    def claim(self) -> Optional[Vertex]:
        """Return the next vertex, or None once the cursor is exhausted."""
        with self._lock:
            return next(self._iterator, None)

    def __iter__(self):
        while True:
            vertex = self.claim()
            if vertex is None:
                return
            yield vertex


def include_raw_vertex(vertex: Vertex) -> bool:
    """Only keep vertices with properties."""
    return vertex.has_properties


def raw_document(vertex: Vertex, index_prefix: str = "") -> Document:
    """Build the raw document for a vertex."""
    fields = {ORIGINAL_ID_FIELD: vertex.id}
    fields.update(vertex.properties)
    return Document(
        fields=fields,
        index=(index_prefix + vertex.label).lower(),
        doc_type=RAW_TYPE_PREFIX + vertex.label,
    )


def rule_key(rule: TransformRule, position: int) -> str:
    """Name a rule worker; the position keeps same-named rules apart."""
    return f"{rule.name}[{position}]"


class PipelineCoordinator:
    """
    Orchestrates raw and rule-based extraction into a document store.

    Usage:
        coordinator = PipelineCoordinator(
            store=ElasticsearchStore(),
            rules=registry.rules(),
            raw_index_prefix="raw_",
            object_index_prefix="obj_",
            thread_count=8,
        )
        result = coordinator.run(graph)
    """

    def __init__(
        self,
        store: DocumentStore,
        rules: Optional[list[TransformRule]] = None,
        raw_index_prefix: Optional[str] = None,
        object_index_prefix: Optional[str] = None,
        thread_count: Optional[int] = None,
        bulk_size: Optional[int] = None,
        estimator: Optional[Callable[[Document], int]] = None,
    ):
        """
        Initialize the coordinator.

        Args:
            store: Document store to write to (closed at the end of run)
            rules: Rule instances for wave 2
            raw_index_prefix: Prefix for raw vertex indices
            object_index_prefix: Prefix for rule indices
            thread_count: Worker count for raw extraction
            bulk_size: Batch size threshold in bytes
            estimator: Document size estimator for the sinks
        """
        self.store = store
        self.rules = list(rules or [])
        self.raw_index_prefix = raw_index_prefix or ""
        self.object_index_prefix = object_index_prefix or ""
        self.thread_count = config.RAW_THREAD_COUNT if thread_count is None else thread_count
        if self.thread_count < 1:
            raise ValueError(f"thread_count must be at least 1: {self.thread_count}")
        self.bulk_size = config.BULK_SIZE_BYTES if bulk_size is None else bulk_size
        self.estimator = estimator

        self.submitter = BulkSubmitter(store)

    def _new_sink(self, on_flush=None) -> BulkDocumentSink:
        kwargs: dict[str, Any] = {"threshold": self.bulk_size, "on_flush": on_flush}
        if self.estimator is not None:
            kwargs["estimator"] = self.estimator
        return BulkDocumentSink(self.submitter, **kwargs)

    def check_connectivity(self) -> None:
        """
        Health-check the document store.

        Raises:
            ConnectivityFailure: If the store cannot be reached
        """
        logger.info("Checking connection to document store")
        try:
            reachable = self.store.ping()
        except Exception as e:
            raise ConnectivityFailure(f"Unable to connect to document store: {e}") from e

        if not reachable:
            raise ConnectivityFailure("Unable to connect to document store: ping failed")

    def run(self, graph: PropertyGraph) -> PipelineResult:
        """
        Run both waves against the graph.

        Raises:
            ConnectivityFailure: If the store is unreachable; no work is started
        """
        start_time = time.time()
        self.check_connectivity()

        result = PipelineResult()

        try:
            self._run_raw_wave(graph, result)
            self._run_rule_wave(graph, result)
        finally:
            try:
                self.store.close()
            except Exception as e:
                logger.debug(f"Error closing document store: {e}")

        result.batches_submitted = self.submitter.batches_submitted
        result.batches_failed = self.submitter.batches_failed
        result.documents_dropped = self.submitter.documents_dropped
        result.elapsed_seconds = time.time() - start_time

        logger.info(
            f"Finished transforming to document store: {result.raw_documents} raw, "
            f"{sum(result.rule_documents.values())} processed documents "
            f"in {result.elapsed_seconds:.1f}s"
        )
        return result

    # ------------------------------------------------------------------
    # Wave 1: raw vertices
    # ------------------------------------------------------------------

    def _run_raw_wave(self, graph: PropertyGraph, result: PipelineResult) -> None:
        logger.info(
            f"Transforming content from Graph to document store (raw) using {self.thread_count} threads"
        )
        cursor = SharedVertexCursor(graph.vertices())

        with ThreadPoolExecutor(
            max_workers=self.thread_count,
            thread_name_prefix="raw-transformer",
        ) as executor:
            futures = [executor.submit(self._raw_worker, cursor) for _ in range(self.thread_count)]

            for future in as_completed(futures):
                try:
                    result.raw_documents += future.result()
                except Exception as e:
                    message = f"Uncaught exception thrown by raw transformer: {e}"
                    logger.error(message)
                    result.worker_faults.append(message)

    def _raw_worker(self, cursor: SharedVertexCursor) -> int:
        thread_name = threading.current_thread().name

        def log_progress(sink: BulkDocumentSink):
            logger.info(f"{thread_name} has ingested {sink.count} raw vertices")

        with self._new_sink(on_flush=log_progress) as sink:
            for vertex in cursor:
                if not include_raw_vertex(vertex):
                    continue
                sink.add(raw_document(vertex, self.raw_index_prefix))

        logger.info(f"{thread_name} has finished ingesting {sink.count} raw vertices")
        return sink.count

    # ------------------------------------------------------------------
    # Wave 2: rules
    # ------------------------------------------------------------------

    def _run_rule_wave(self, graph: PropertyGraph, result: PipelineResult) -> None:
        if not self.rules:
            logger.info("No transform rules available, skipping processed documents")
            return

        logger.info("Transforming content from Graph to document store (processed), 1 thread per rule")

        with ThreadPoolExecutor(
            max_workers=len(self.rules),
            thread_name_prefix="rule-transformer",
        ) as executor:
            future_to_key = {}
            for position, rule in enumerate(self.rules):
                key = rule_key(rule, position)
                logger.info(f"Creating new thread for TransformRule {key}")
                future_to_key[executor.submit(self._rule_worker, rule, graph)] = key

            for future in as_completed(future_to_key):
                key = future_to_key[future]
                try:
                    result.rule_documents[key] = future.result()
                except Exception as e:
                    message = f"Uncaught exception thrown by rule transformer ({key}): {e}"
                    logger.error(message)
                    result.worker_faults.append(message)

    def _rule_worker(self, rule: TransformRule, graph: PropertyGraph) -> int:
        thread_name = threading.current_thread().name
        index = (self.object_index_prefix + rule.index()).lower()
        doc_type = rule.doc_type()

        def log_progress(sink: BulkDocumentSink):
            logger.info(f"{thread_name} has ingested {sink.count} objects produced by rule {rule.name}")

        with self._new_sink(on_flush=log_progress) as sink:
            for fields in rule.transform(graph):
                sink.add(Document(fields=dict(fields), index=index, doc_type=doc_type))

        logger.info(f"{thread_name} has finished ingesting {sink.count} objects produced by rule {rule.name}")
        return sink.count


def transform_graph_to_index(
    graph: PropertyGraph,
    store: DocumentStore,
    rules: Optional[list[TransformRule]] = None,
    **kwargs,
) -> PipelineResult:
    """
    Convenience function to transform a graph into a document store.

    Args:
        graph: Graph to read from
        store: Document store to write to
        rules: Rule instances for processed documents
        **kwargs: Arguments passed to PipelineCoordinator

    Returns:
        PipelineResult
    """
    coordinator = PipelineCoordinator(store, rules=rules, **kwargs)
    return coordinator.run(graph)
