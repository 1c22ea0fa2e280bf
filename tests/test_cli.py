"""
Tests for the command line interface.
"""

from unittest.mock import MagicMock, patch

from click.testing import CliRunner

from cli.main import cli
from graphtransform.errors import ConnectivityFailure
from graphtransform.transform.to_graph import TransformResult
from graphtransform.transform.to_index import PipelineResult


class TestToGraphCommand:
    """Tests for to-graph."""

    def test_success(self):
        with patch("graphtransform.db.neo4j.create_driver", return_value=MagicMock()), \
             patch("graphtransform.transform.to_graph.transform_graph",
                   return_value=TransformResult(vertices_copied=3, edges_copied=2)) as run:
            result = CliRunner().invoke(cli, ["to-graph", "--preserve-id"])

        assert result.exit_code == 0, result.output
        assert "Vertices: 3" in result.output
        assert run.call_args.kwargs["preserve_original_id"] is True

    def test_failure_exit_code(self):
        with patch("graphtransform.db.neo4j.create_driver", return_value=MagicMock()), \
             patch("graphtransform.transform.to_graph.transform_graph",
                   return_value=TransformResult(success=False, error="boom")):
            result = CliRunner().invoke(cli, ["to-graph"])

        assert result.exit_code == 1
        assert "boom" in result.output


class TestToIndexCommand:
    """Tests for to-index."""

    def test_success(self):
        with patch("graphtransform.db.neo4j.create_driver", return_value=MagicMock()), \
             patch("graphtransform.db.elasticsearch.get_es_client", return_value=MagicMock()), \
             patch("graphtransform.transform.to_index.transform_graph_to_index",
                   return_value=PipelineResult(raw_documents=10)) as run:
            result = CliRunner().invoke(cli, ["to-index", "-r", "raw_", "-o", "obj_", "-j", "2"])

        assert result.exit_code == 0, result.output
        assert "Raw documents: 10" in result.output
        kwargs = run.call_args.kwargs
        assert kwargs["raw_index_prefix"] == "raw_"
        assert kwargs["object_index_prefix"] == "obj_"
        assert kwargs["thread_count"] == 2

    def test_connectivity_failure(self):
        with patch("graphtransform.db.neo4j.create_driver", return_value=MagicMock()), \
             patch("graphtransform.db.elasticsearch.get_es_client", return_value=MagicMock()), \
             patch("graphtransform.transform.to_index.transform_graph_to_index",
                   side_effect=ConnectivityFailure("Unable to connect to document store")):
            result = CliRunner().invoke(cli, ["to-index"])

        assert result.exit_code == 1
        assert "Unable to connect" in result.output


def test_version():
    result = CliRunner().invoke(cli, ["--version"])
    assert result.exit_code == 0
    assert "1.0.0" in result.output
