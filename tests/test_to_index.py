"""
Tests for the graph to document store pipeline.
"""

import threading
from collections import Counter

import pytest

from graphtransform.documents import Document
from graphtransform.errors import ConnectivityFailure
from graphtransform.graph.memory import InMemoryGraph
from graphtransform.rules.base import TransformRule
from graphtransform.rules.builtin import LabelDocumentRule
from graphtransform.transform.to_index import (
    PipelineCoordinator,
    SharedVertexCursor,
    raw_document,
    transform_graph_to_index,
)


class StaticRule(TransformRule):
    """Rule that returns a fixed list of documents."""

    def __init__(self, docs, index="static", doc_type="static_doc"):
        self.docs = docs
        self._index = index
        self._doc_type = doc_type

    def transform(self, graph):
        return list(self.docs)

    def index(self):
        return self._index

    def doc_type(self):
        return self._doc_type


class ExplodingRule(TransformRule):
    """Rule that fails part way through its output."""

    def transform(self, graph):
        yield {"n": 1}
        raise RuntimeError("rule blew up")

    def index(self):
        return "exploding"

    def doc_type(self):
        return "boom"


class TestSharedVertexCursor:
    """Tests for the shared vertex cursor."""

    def test_each_vertex_claimed_once(self, large_graph):
        cursor = SharedVertexCursor(large_graph.vertices())
        claimed = []
        lock = threading.Lock()

        def worker():
            for vertex in cursor:
                with lock:
                    claimed.append(vertex.id)

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert sorted(claimed) == sorted(v.id for v in large_graph.vertices())

    def test_exhausted_cursor_returns_none(self):
        cursor = SharedVertexCursor([])
        assert cursor.claim() is None
        assert cursor.claim() is None


class TestRawDocument:
    """Tests for raw document construction."""

    def test_raw_document_shape(self):
        graph = InMemoryGraph()
        vid = graph.add_vertex("Person", {"name": "A"})

        doc = raw_document(graph.get_vertex(vid), "Raw_")

        assert doc.fields == {"originalId": vid, "name": "A"}
        assert doc.index == "raw_person"
        assert doc.doc_type == "raw_Person"


class TestPreflight:
    """Tests for the connectivity check."""

    def test_unreachable_store_aborts(self, people_graph, store):
        store.reachable = False
        coordinator = PipelineCoordinator(store, rules=[StaticRule([{"a": 1}])])

        with pytest.raises(ConnectivityFailure):
            coordinator.run(people_graph)

        assert store.batches == []

    def test_ping_exception_aborts(self, people_graph, store):
        def broken_ping():
            raise ConnectionError("refused")

        store.ping = broken_ping

        with pytest.raises(ConnectivityFailure):
            transform_graph_to_index(people_graph, store)

        assert store.batches == []


class TestCoordinatorSettings:
    """Tests for explicit coordinator settings."""

    def test_explicit_zero_bulk_size_kept(self, store):
        coordinator = PipelineCoordinator(store, bulk_size=0, thread_count=1)
        assert coordinator.bulk_size == 0

    def test_zero_threads_rejected(self, store):
        with pytest.raises(ValueError):
            PipelineCoordinator(store, thread_count=0)


class TestRawWave:
    """Tests for raw vertex extraction."""

    def test_raw_documents(self, people_graph, store):
        result = transform_graph_to_index(people_graph, store, raw_index_prefix="raw_", thread_count=3)

        assert result.success
        assert result.raw_documents == 6
        by_index = Counter(d.index for d in store.documents)
        assert by_index == {"raw_person": 3, "raw_ipaddress": 3}
        assert {d.doc_type for d in store.documents} == {"raw_Person", "raw_IPAddress"}

    def test_propertyless_vertices_excluded(self, store):
        graph = InMemoryGraph()
        graph.add_vertex("Empty", {})
        graph.add_vertex("Full", {"x": 1})

        result = transform_graph_to_index(graph, store)

        assert result.raw_documents == 1
        assert [d.doc_type for d in store.documents] == ["raw_Full"]

    def test_each_vertex_ingested_once_across_threads(self, large_graph, store):
        result = transform_graph_to_index(large_graph, store, thread_count=8, bulk_size=500)

        ids = [d.fields["originalId"] for d in store.documents]
        assert len(ids) == 500
        assert len(set(ids)) == 500
        assert result.raw_documents == 500
        assert result.batches_submitted == len(store.batches)

    def test_none_prefixes_treated_as_empty(self, people_graph, store):
        transform_graph_to_index(people_graph, store, raw_index_prefix=None)
        assert {d.index for d in store.documents} == {"person", "ipaddress"}


class TestRuleWave:
    """Tests for rule-based extraction."""

    def test_rule_documents(self, people_graph, store):
        rule = LabelDocumentRule("Person", index="People", fields=["name"])
        result = transform_graph_to_index(
            people_graph, store, rules=[rule], object_index_prefix="Obj_"
        )

        rule_docs = [d for d in store.documents if d.index == "obj_people"]
        assert sorted(d.fields["name"] for d in rule_docs) == ["James", "Jim", "Simon"]
        assert {d.doc_type for d in rule_docs} == {"Person"}
        assert result.rule_documents == {"LabelDocumentRule(Person)[0]": 3}

    def test_rules_run_after_raw_wave(self, people_graph, store):
        rule = StaticRule([{"a": i} for i in range(3)])
        transform_graph_to_index(people_graph, store, rules=[rule], thread_count=4)

        kinds = [d.doc_type.startswith("raw_") for d in store.documents]
        first_rule = kinds.index(False)
        assert all(kinds[:first_rule])
        assert not any(kinds[first_rule:])

    def test_empty_rule_completes(self, people_graph, store):
        result = transform_graph_to_index(
            people_graph, store, rules=[StaticRule([]), StaticRule([{"a": 1}], index="other")]
        )

        assert result.success
        assert result.rule_documents == {"StaticRule[0]": 0, "StaticRule[1]": 1}
        assert result.raw_documents == 6

    def test_same_named_rules_counted_separately(self, people_graph, store):
        rules = [
            LabelDocumentRule("Person", index="people"),
            LabelDocumentRule("Person", index="nobody", fields=["missing"]),
        ]
        result = transform_graph_to_index(people_graph, store, rules=rules)

        assert result.rule_documents == {
            "LabelDocumentRule(Person)[0]": 3,
            "LabelDocumentRule(Person)[1]": 3,
        }
        assert sum(1 for d in store.documents if d.index == "nobody") == 3

    def test_no_rules(self, people_graph, store):
        result = transform_graph_to_index(people_graph, store, rules=[])
        assert result.rule_documents == {}
        assert result.success

    def test_faulty_rule_does_not_stop_siblings(self, people_graph, store):
        good = StaticRule([{"a": i} for i in range(4)], index="good")
        result = transform_graph_to_index(people_graph, store, rules=[ExplodingRule(), good])

        assert not result.success
        assert len(result.worker_faults) == 1
        assert "ExplodingRule" in result.worker_faults[0]
        assert result.rule_documents == {"StaticRule[1]": 4}
        # The faulted worker's unflushed batch is abandoned
        assert not any(d.index == "exploding" for d in store.documents)
        assert store.closed


class TestShutdownAndFailures:
    """Tests for store shutdown and submission failures."""

    def test_store_closed_after_run(self, people_graph, store):
        transform_graph_to_index(people_graph, store)
        assert store.closed

    def test_failed_submissions_counted(self, people_graph, failing_store):
        result = transform_graph_to_index(
            people_graph, failing_store, rules=[StaticRule([{"a": 1}])], thread_count=2
        )

        assert not result.success
        assert result.batches_failed >= 2
        assert result.documents_dropped == 7
        assert result.raw_documents == 6
        assert failing_store.closed

    def test_custom_estimator(self, people_graph, store):
        transform_graph_to_index(
            people_graph, store, thread_count=1, bulk_size=2, estimator=lambda d: 1
        )
        assert [len(b) for b in store.batches] == [2, 2, 2]
