#!/usr/bin/env python3
"""
graph-transform CLI.

Usage:
    graph-transform to-graph --preserve-id
    graph-transform to-index --raw-index raw_ --object-index obj_ -j 8
    graph-transform health
"""

import json
import logging
import sys
from pathlib import Path

import click

# Add package to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from graphtransform import __version__
from graphtransform.config import config


@click.group()
@click.version_option(version=__version__)
@click.option("--log-level", default=None, help="Logging level (default: LOG_LEVEL or INFO)")
def cli(log_level: str):
    """graph-transform - move property graphs into graphs and document indices."""
    logging.basicConfig(
        level=(log_level or config.LOG_LEVEL).upper(),
        format="%(asctime)s - %(levelname)s - %(message)s",
    )


# ============================================================================
# Graph to Graph
# ============================================================================

@cli.command("to-graph")
@click.option("--preserve-id/--no-preserve-id", default=None, help="Preserve the original ID (as a new property)")
@click.option("--abort-on-missing-endpoint", is_flag=True, help="Stop copying edges at the first missing endpoint")
def to_graph(preserve_id: bool, abort_on_missing_endpoint: bool):
    """Transform the source Neo4j graph into the target Neo4j graph."""
    from graphtransform.db.neo4j import Neo4jGraph, create_driver
    from graphtransform.transform.to_graph import MissingEndpointPolicy, transform_graph

    if preserve_id is None:
        preserve_id = config.PRESERVE_ORIGINAL_ID

    policy = MissingEndpointPolicy.ABORT if abort_on_missing_endpoint else None

    click.echo(f"\nConnecting to source graph at {config.NEO4J_URI}")
    source = Neo4jGraph(
        create_driver(config.NEO4J_URI, config.NEO4J_USER, config.NEO4J_PASSWORD),
        database=config.NEO4J_DATABASE,
        owns_driver=True,
    )

    click.echo(f"Connecting to target graph at {config.TARGET_NEO4J_URI}")
    target = Neo4jGraph(
        create_driver(config.TARGET_NEO4J_URI, config.TARGET_NEO4J_USER, config.TARGET_NEO4J_PASSWORD),
        database=config.TARGET_NEO4J_DATABASE,
        owns_driver=True,
    )

    with source, target:
        result = transform_graph(
            source,
            target,
            preserve_original_id=preserve_id,
            missing_endpoint_policy=policy,
        )

    if result.success:
        click.echo(click.style("✓ Transform successful!", fg="green"))
    else:
        click.echo(click.style("✗ Transform failed!", fg="red"))
        click.echo(f"  Error: {result.error}")

    click.echo(f"  Vertices: {result.vertices_copied}")
    click.echo(f"  Edges: {result.edges_copied}")
    click.echo(f"  Skipped edges: {result.edges_skipped}")
    click.echo(f"  Time: {result.elapsed_seconds:.1f}s")

    if not result.success:
        sys.exit(1)


# ============================================================================
# Graph to Document Store
# ============================================================================

@cli.command("to-index")
@click.option("-r", "--raw-index", default=None, help="Prefix for indices holding raw vertices")
@click.option("-o", "--object-index", default=None, help="Prefix for indices holding rule output")
@click.option("-j", "--threads", type=int, default=None, help="Thread count for ingesting raw data")
@click.option("--rule", "rule_paths", multiple=True, help="Rule class as package.module:ClassName")
def to_index(raw_index: str, object_index: str, threads: int, rule_paths: tuple):
    """Transform the source Neo4j graph into Elasticsearch."""
    from graphtransform.db.elasticsearch import ElasticsearchStore, get_es_client
    from graphtransform.db.neo4j import Neo4jGraph, create_driver
    from graphtransform.errors import ConnectivityFailure
    from graphtransform.rules.registry import default_registry
    from graphtransform.transform.to_index import transform_graph_to_index

    for path in list(config.RULES) + list(rule_paths):
        default_registry.register_path(path)
    rules = default_registry.rules()
    click.echo(f"\nLoaded {len(rules)} transform rules")

    graph = Neo4jGraph(
        create_driver(config.NEO4J_URI, config.NEO4J_USER, config.NEO4J_PASSWORD),
        database=config.NEO4J_DATABASE,
        owns_driver=True,
    )
    store = ElasticsearchStore(get_es_client())

    with graph:
        try:
            result = transform_graph_to_index(
                graph,
                store,
                rules=rules,
                raw_index_prefix=raw_index if raw_index is not None else config.RAW_INDEX_PREFIX,
                object_index_prefix=object_index if object_index is not None else config.OBJECT_INDEX_PREFIX,
                thread_count=threads,
            )
        except ConnectivityFailure as e:
            click.echo(click.style(f"✗ {e}", fg="red"))
            sys.exit(1)

    click.echo(f"\n{'='*50}")
    click.echo(f"Raw documents: {result.raw_documents}")
    for name, count in sorted(result.rule_documents.items()):
        click.echo(f"  {name}: {count}")
    click.echo(f"Batches submitted: {result.batches_submitted}")
    click.echo(f"Batches failed: {result.batches_failed}")
    click.echo(f"Worker faults: {len(result.worker_faults)}")
    click.echo(f"Time: {result.elapsed_seconds:.1f}s")

    if not result.success:
        sys.exit(1)


# ============================================================================
# Admin Commands
# ============================================================================

@cli.command()
@click.option("--json", "output_json", is_flag=True, help="Output as JSON")
def health(output_json: bool):
    """Check connectivity to Neo4j and Elasticsearch."""
    from graphtransform.db.elasticsearch import ElasticsearchStore
    from graphtransform.db.neo4j import check_health, close_driver

    report = {"neo4j": check_health(database=config.NEO4J_DATABASE)}
    close_driver()

    store = ElasticsearchStore()
    report["elasticsearch"] = {"connection": store.ping()}
    store.close()

    problems = config.validate()
    report["config_errors"] = problems

    if output_json:
        click.echo(json.dumps(report, indent=2, default=str))
        return

    neo4j_ok = report["neo4j"]["status"] == "healthy"
    es_ok = report["elasticsearch"]["connection"]

    click.echo("\ngraph-transform health")
    click.echo("=" * 40)
    click.echo(click.style(f"Neo4j:          {report['neo4j']['status']}", fg="green" if neo4j_ok else "red"))
    click.echo(click.style(f"Elasticsearch:  {'reachable' if es_ok else 'unreachable'}", fg="green" if es_ok else "red"))
    for problem in problems:
        click.echo(click.style(f"Config: {problem}", fg="yellow"))


# ============================================================================
# Main Entry Point
# ============================================================================

def main():
    cli()


if __name__ == "__main__":
    main()
