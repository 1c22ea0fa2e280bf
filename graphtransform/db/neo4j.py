"""
Neo4j connection management and graph backend for graph-transform.

Provides driver management, health checks, and a PropertyGraph
implementation backed by Neo4j.
"""

import logging
from typing import Optional, Any, Iterator

from neo4j import GraphDatabase, Driver
from neo4j.exceptions import ServiceUnavailable, AuthError

from graphtransform.config import config
from graphtransform.graph.base import (
    Edge,
    PropertyGraph,
    PropertyValue,
    Vertex,
    clean_properties,
)

logger = logging.getLogger(__name__)

# Global driver instance
_driver: Optional[Driver] = None


def create_driver(uri: str, user: str, password: str) -> Driver:
    """Create a new Neo4j driver."""
    logger.info(f"Creating Neo4j driver for {uri}")
    return GraphDatabase.driver(
        uri,
        auth=(user, password),
        max_connection_lifetime=3600,
        max_connection_pool_size=50,
    )


def get_neo4j_driver() -> Driver:
    """
    Get or create the global Neo4j driver for the source graph.

    Returns:
        Neo4j Driver instance
    """
    global _driver

    if _driver is None:
        _driver = create_driver(config.NEO4J_URI, config.NEO4J_USER, config.NEO4J_PASSWORD)

    return _driver


def quote_name(name: str) -> str:
    """Quote a label or relationship type for use in Cypher."""
    return "`" + name.replace("`", "``") + "`"


def get_counts(driver: Driver, database: str = "neo4j") -> dict[str, int]:
    """Get vertex and edge counts."""
    with driver.session(database=database) as session:
        nodes = session.run("MATCH (n) RETURN count(n) AS count").single()["count"]
        rels = session.run("MATCH ()-[r]->() RETURN count(r) AS count").single()["count"]
    return {"vertices": nodes, "edges": rels}


def check_health(driver: Optional[Driver] = None, database: str = "neo4j") -> dict[str, Any]:
    """Check Neo4j health and return status."""
    result = {
        "status": "unknown",
        "connection": False,
        "counts": {},
    }

    try:
        driver = driver or get_neo4j_driver()
        driver.verify_connectivity()
        result["connection"] = True

        result["counts"] = get_counts(driver, database)
        result["status"] = "healthy"

    except AuthError as e:
        result["status"] = "auth_error"
        result["error"] = str(e)
    except ServiceUnavailable as e:
        result["status"] = "unavailable"
        result["error"] = str(e)
    except Exception as e:
        result["status"] = "unhealthy"
        result["error"] = str(e)

    return result


def close_driver() -> None:
    """Close the Neo4j driver."""
    global _driver
    if _driver is not None:
        _driver.close()
        _driver = None
        logger.info("Neo4j driver closed")


class Neo4jGraph(PropertyGraph):
    """
    PropertyGraph backed by a Neo4j database.

    Vertex and edge IDs are Neo4j element IDs. A node's first label is used
    as the vertex label. Reads stream through a session; each write is its
    own auto-committed query.

    Usage:
        graph = Neo4jGraph(get_neo4j_driver())
        for vertex in graph.vertices():
            print(vertex.label, vertex.properties)
    """

    VERTICES_QUERY = """
    MATCH (n)
    RETURN elementId(n) AS id, labels(n) AS labels, properties(n) AS props
    """

    EDGES_QUERY = """
    MATCH (a)-[r]->(b)
    RETURN elementId(r) AS id, type(r) AS label,
           elementId(a) AS out_id, elementId(b) AS in_id,
           properties(r) AS props
    """

    GET_VERTEX_QUERY = """
    MATCH (n) WHERE elementId(n) = $id
    RETURN elementId(n) AS id, labels(n) AS labels, properties(n) AS props
    """

    def __init__(self, driver: Driver, database: str = "neo4j", owns_driver: bool = False):
        """
        Initialize the graph.

        Args:
            driver: Neo4j driver to use
            database: Database name
            owns_driver: If True, close() also closes the driver
        """
        self.driver = driver
        self.database = database
        self.owns_driver = owns_driver

    def _stream(self, query: str) -> Iterator[Any]:
        with self.driver.session(database=self.database) as session:
            for record in session.run(query):
                yield record

    @staticmethod
    def _to_vertex(record) -> Vertex:
        labels = record["labels"] or []
        return Vertex(
            id=record["id"],
            label=labels[0] if labels else "",
            properties=clean_properties(record["props"]),
        )

    def vertices(self) -> Iterator[Vertex]:
        for record in self._stream(self.VERTICES_QUERY):
            yield self._to_vertex(record)

    def edges(self) -> Iterator[Edge]:
        for record in self._stream(self.EDGES_QUERY):
            yield Edge(
                id=record["id"],
                label=record["label"],
                out_id=record["out_id"],
                in_id=record["in_id"],
                properties=clean_properties(record["props"]),
            )

    def get_vertex(self, vertex_id: Any) -> Optional[Vertex]:
        records, _, _ = self.driver.execute_query(
            self.GET_VERTEX_QUERY,
            id=vertex_id,
            database_=self.database,
        )
        if not records:
            return None
        return self._to_vertex(records[0])

    def add_vertex(self, label: str, properties: dict[str, PropertyValue]) -> Any:
        label_clause = f":{quote_name(label)}" if label else ""
        query = f"CREATE (n{label_clause}) SET n = $props RETURN elementId(n) AS id"

        records, _, _ = self.driver.execute_query(
            query,
            props=clean_properties(properties),
            database_=self.database,
        )
        return records[0]["id"]

    def add_edge(
        self,
        label: str,
        out_id: Any,
        in_id: Any,
        properties: dict[str, PropertyValue],
    ) -> Any:
        query = f"""
        MATCH (a) WHERE elementId(a) = $out_id
        MATCH (b) WHERE elementId(b) = $in_id
        CREATE (a)-[r:{quote_name(label)}]->(b)
        SET r = $props
        RETURN elementId(r) AS id
        """

        records, _, _ = self.driver.execute_query(
            query,
            out_id=out_id,
            in_id=in_id,
            props=clean_properties(properties),
            database_=self.database,
        )
        if not records:
            raise KeyError(f"Vertex {out_id} or {in_id} does not exist")
        return records[0]["id"]

    def commit(self) -> None:
        # Writes are auto-committed per query
        logger.debug(f"Neo4j graph {self.database} committed")

    def close(self) -> None:
        if self.owns_driver:
            self.driver.close()
            logger.info("Neo4j driver closed")
