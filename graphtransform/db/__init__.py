"""
Store backends for graph-transform.

Sync clients:
    from graphtransform.db import get_neo4j_driver, Neo4jGraph
    from graphtransform.db import get_es_client, ElasticsearchStore
"""

from .neo4j import Neo4jGraph, get_neo4j_driver, create_driver
from .elasticsearch import ElasticsearchStore, get_es_client

__all__ = [
    "Neo4jGraph",
    "get_neo4j_driver",
    "create_driver",
    "ElasticsearchStore",
    "get_es_client",
]
