"""
Transform a source graph into another property graph.

This is different to copying, as copying may require vertices in the source
graph and existing vertices in the target graph to have unique IDs; whereas
transforming creates new IDs (optionally the original ID is kept as a
property).

Vertices are copied first, building a map from source ID to target ID. Edges
are only processed once every vertex has been copied, so the map is complete
when endpoints are looked up.
"""

import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Optional

from graphtransform.config import config
from graphtransform.errors import ReferentialIntegrityGap
from graphtransform.graph.base import Edge, PropertyGraph, Vertex, clean_properties

logger = logging.getLogger(__name__)

ORIGINAL_ID_PROPERTY = "originalId"


class MissingEndpointPolicy(Enum):
    """What to do with an edge whose endpoint was not copied."""

    SKIP = "skip"
    ABORT = "abort"


@dataclass
class TransformResult:
    """Result of transforming one graph into another."""

    success: bool = True
    vertices_copied: int = 0
    edges_copied: int = 0
    edges_skipped: int = 0
    aborted: bool = False
    error: Optional[str] = None
    elapsed_seconds: float = 0.0
    id_map: dict[Any, Any] = field(default_factory=dict, repr=False)


def include_all(element) -> bool:
    return element is not None


class IdentityRemapTransformer:
    """
    Copies a graph into a target graph, issuing new identities.

    Usage:
        transformer = IdentityRemapTransformer(preserve_original_id=True)
        result = transformer.transform(source, target)
        if not result.success:
            print(result.error)
    """

    def __init__(
        self,
        preserve_original_id: bool = False,
        include_vertex: Optional[Callable[[Vertex], bool]] = None,
        include_edge: Optional[Callable[[Edge], bool]] = None,
        missing_endpoint_policy: Optional[MissingEndpointPolicy] = None,
        progress_interval: Optional[int] = None,
    ):
        """
        Initialize the transformer.

        Args:
            preserve_original_id: Store the source ID in an originalId property
            include_vertex: Vertex inclusion policy (default: accept all)
            include_edge: Edge inclusion policy (default: accept all)
            missing_endpoint_policy: SKIP the edge and continue (default), or
                ABORT the remaining edge phase
            progress_interval: Log progress every N vertices/edges (0 disables)
        """
        self.preserve_original_id = preserve_original_id
        self.include_vertex = include_vertex or include_all
        self.include_edge = include_edge or include_all
        self.missing_endpoint_policy = missing_endpoint_policy or MissingEndpointPolicy(
            config.MISSING_ENDPOINT_POLICY
        )
        self.progress_interval = config.PROGRESS_INTERVAL if progress_interval is None else progress_interval

    def transform(self, source: PropertyGraph, target: PropertyGraph) -> TransformResult:
        """
        Transform the source graph into the target graph.

        Failures to read or write are logged and reported on the result.

        Returns:
            TransformResult with counts and the identity map
        """
        start_time = time.time()
        result = TransformResult()

        try:
            self._copy_vertices(source, target, result)
            self._copy_edges(source, target, result)
        except (SystemExit, KeyboardInterrupt):
            raise
        except Exception as e:
            logger.error(f"Error thrown whilst transforming graph: {e}")
            result.success = False
            result.error = str(e)
            result.elapsed_seconds = time.time() - start_time
            return result

        try:
            logger.info("Committing graph")
            target.commit()
        except Exception as e:
            logger.error(f"Unable to commit target graph: {e}")
            result.success = False
            result.error = str(e)

        result.elapsed_seconds = time.time() - start_time
        return result

    def _copy_vertices(self, source: PropertyGraph, target: PropertyGraph, result: TransformResult):
        logger.info("Transforming vertices from Graph to Graph")
        ids = result.id_map

        for vertex in source.vertices():
            if not self.include_vertex(vertex):
                continue

            if vertex.id in ids:
                logger.warning(f"Vertex {vertex.id} seen twice, keeping first copy")
                continue

            properties = {}
            if self.preserve_original_id:
                properties[ORIGINAL_ID_PROPERTY] = vertex.id
            properties.update(clean_properties(vertex.properties))

            ids[vertex.id] = target.add_vertex(vertex.label, properties)
            result.vertices_copied += 1

            if self.progress_interval and result.vertices_copied % self.progress_interval == 0:
                logger.info(f"{result.vertices_copied} vertices processed")

        logger.info(f"Finished processing {result.vertices_copied} vertices")

    def _copy_edges(self, source: PropertyGraph, target: PropertyGraph, result: TransformResult):
        logger.info("Transforming edges from Graph to Graph")
        ids = result.id_map
        edge_count = 0

        for edge in source.edges():
            edge_count += 1

            if self.include_edge(edge):
                try:
                    out_id, in_id = self._resolve(edge, ids)
                except ReferentialIntegrityGap as gap:
                    if self.missing_endpoint_policy is MissingEndpointPolicy.ABORT:
                        logger.warning(f"{gap}; aborting remaining edges")
                        result.edges_skipped += 1
                        result.aborted = True
                        result.success = False
                        result.error = str(gap)
                        break

                    logger.warning(f"{gap}; skipping edge")
                    result.edges_skipped += 1
                else:
                    if target.get_vertex(out_id) is not None and target.get_vertex(in_id) is not None:
                        target.add_edge(edge.label, out_id, in_id, clean_properties(edge.properties))
                        result.edges_copied += 1
                    else:
                        logger.warning(f"Target vertices for edge {edge.id} not found; skipping edge")
                        result.edges_skipped += 1

            if self.progress_interval and edge_count % self.progress_interval == 0:
                logger.info(f"{edge_count} edges processed")

        logger.info(f"Finished processing {edge_count} edges")

    @staticmethod
    def _resolve(edge: Edge, ids: dict[Any, Any]) -> tuple[Any, Any]:
        missing = [v for v in (edge.out_id, edge.in_id) if v not in ids]
        if missing:
            raise ReferentialIntegrityGap(edge.id, edge.out_id, edge.in_id, missing)
        return ids[edge.out_id], ids[edge.in_id]


def transform_graph(
    source: PropertyGraph,
    target: PropertyGraph,
    preserve_original_id: bool = False,
    **kwargs,
) -> TransformResult:
    """
    Convenience function to transform a source graph into a target graph.

    Args:
        source: Graph to read from
        target: Graph to write to
        preserve_original_id: Store the source ID in an originalId property
        **kwargs: Arguments passed to IdentityRemapTransformer

    Returns:
        TransformResult
    """
    transformer = IdentityRemapTransformer(preserve_original_id=preserve_original_id, **kwargs)
    return transformer.transform(source, target)
