"""
Elasticsearch document store for graph-transform.

Each Document batch is written with a single bulk request.
"""

import logging
from typing import Optional, Any

from elasticsearch import Elasticsearch

from graphtransform.config import config
from graphtransform.documents import Document, DocumentStore
from graphtransform.errors import SubmissionFailure

logger = logging.getLogger(__name__)

# Elasticsearch no longer has mapping types, so the type name is stored here
TYPE_FIELD = "doc_type"


def get_es_client(
    url: Optional[str] = None,
    user: Optional[str] = None,
    password: Optional[str] = None,
) -> Elasticsearch:
    """
    Create an Elasticsearch client.

    Args:
        url: Elasticsearch URL (from config if not provided)
        user: Basic auth username
        password: Basic auth password

    Returns:
        Elasticsearch client
    """
    url = url or config.ELASTICSEARCH_URL
    user = user or config.ELASTICSEARCH_USER
    password = password or config.ELASTICSEARCH_PASSWORD

    logger.info(f"Creating Elasticsearch client for {url}")
    if user and password:
        return Elasticsearch([url], basic_auth=(user, password), request_timeout=120)
    return Elasticsearch([url], request_timeout=120)


def to_operations(document: Document) -> list[dict[str, Any]]:
    """Convert a Document into the action and source lines of a bulk request."""
    source = dict(document.fields)
    if document.doc_type:
        source.setdefault(TYPE_FIELD, document.doc_type)
    return [{"index": {"_index": document.index}}, source]


def item_error(item: dict[str, Any]) -> Optional[Any]:
    """Return the error of one bulk response item, or None if it succeeded."""
    for result in item.values():
        if isinstance(result, dict) and result.get("error"):
            return result["error"]
    return None


class ElasticsearchStore(DocumentStore):
    """
    DocumentStore backed by Elasticsearch.

    The client is assumed not to be safe for concurrent bulk calls; callers
    serialize submissions through BulkSubmitter.

    Usage:
        store = ElasticsearchStore(get_es_client())
        if store.ping():
            store.submit(documents)
    """

    def __init__(self, client: Optional[Elasticsearch] = None):
        self.client = client or get_es_client()

    def ping(self) -> bool:
        try:
            return bool(self.client.ping())
        except Exception as e:
            logger.error(f"Unable to ping Elasticsearch: {e}")
            return False

    def submit(self, documents: list[Document]) -> int:
        """
        Index a batch of documents as one bulk request.

        Returns:
            Number of documents the store accepted

        Raises:
            SubmissionFailure: If the bulk request itself fails
        """
        if not documents:
            return 0

        operations = []
        for doc in documents:
            operations.extend(to_operations(doc))

        try:
            response = self.client.bulk(operations=operations)
        except Exception as e:
            raise SubmissionFailure(f"Bulk request of {len(documents)} documents failed: {e}") from e

        items = response["items"]
        errors = [error for error in (item_error(item) for item in items) if error is not None]

        if errors:
            logger.warning(f"Indexing errors: {len(errors)} of {len(documents)} documents rejected")
            logger.debug(f"First indexing error: {errors[0]}")

        return len(items) - len(errors)

    def close(self) -> None:
        self.client.close()
