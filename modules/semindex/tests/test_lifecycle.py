#!/usr/bin/env python3
"""Tests for index lifecycle management."""

import pytest

from elasticsearch import ConnectionError as ESConnectionError

from semindex.errors import DocumentDeletionError, IndexLifecycleError
from semindex.lifecycle import IndexLifecycleManager

SETTINGS = {"settings": {"number_of_shards": 1}, "mappings": {"properties": {"id": {"type": "keyword"}}}}


@pytest.fixture
def manager(es):
    return IndexLifecycleManager(es)


class TestCreateDelete:
    """Tests for create/delete acknowledgement."""

    def test_create_passes_settings(self, manager, es):
        manager.create("persons", SETTINGS)
        es.indices.create.assert_called_once_with(
            index="persons", settings=SETTINGS["settings"], mappings=SETTINGS["mappings"]
        )

    def test_create_without_settings(self, manager, es):
        manager.create("persons")
        es.indices.create.assert_called_once_with(index="persons")

    def test_create_not_acknowledged(self, manager, es):
        es.indices.create.return_value = {"acknowledged": False}
        with pytest.raises(IndexLifecycleError):
            manager.create("persons", SETTINGS)

    def test_create_transport_error(self, manager, es):
        es.indices.create.side_effect = ESConnectionError("down")
        with pytest.raises(IndexLifecycleError):
            manager.create("persons", SETTINGS)

    def test_delete_not_acknowledged(self, manager, es):
        es.indices.delete.return_value = {"acknowledged": False}
        with pytest.raises(IndexLifecycleError):
            manager.delete("persons")

    def test_exists(self, manager, es):
        es.indices.exists.return_value = True
        assert manager.exists("persons") is True


class TestEnsureAndClear:
    """Tests for ensure_exists and clear."""

    def test_ensure_creates_when_absent(self, manager, es):
        es.indices.exists.return_value = False
        manager.ensure_exists("persons", SETTINGS)
        es.indices.create.assert_called_once()

    def test_ensure_noop_when_present(self, manager, es):
        es.indices.exists.return_value = True
        manager.ensure_exists("persons", SETTINGS)
        es.indices.create.assert_not_called()

    def test_clear_existing_deletes_then_creates(self, manager, es):
        es.indices.exists.return_value = True
        manager.clear("persons", SETTINGS)
        es.indices.delete.assert_called_once_with(index="persons")
        es.indices.create.assert_called_once()

    def test_clear_absent_only_creates(self, manager, es):
        es.indices.exists.return_value = False
        manager.clear("persons", SETTINGS)
        es.indices.delete.assert_not_called()
        es.indices.create.assert_called_once()


class TestDeleteDocuments:
    """Tests for document deletion."""

    def test_empty_ids_noop(self, manager, es):
        manager.delete_documents("persons", [])
        es.bulk.assert_not_called()

    def test_single_refreshed_batch(self, manager, es):
        es.bulk.side_effect = None
        es.bulk.return_value = {"errors": False, "items": []}
        manager.delete_documents("persons", ["a", "b"])
        es.bulk.assert_called_once_with(
            operations=[
                {"delete": {"_index": "persons", "_id": "a"}},
                {"delete": {"_index": "persons", "_id": "b"}},
            ],
            refresh=True,
        )

    def test_item_errors_aggregated(self, manager, es):
        es.bulk.side_effect = None
        es.bulk.return_value = {"errors": True, "items": [
            {"delete": {"_index": "persons", "_id": "a", "status": 200}},
            {"delete": {"_index": "persons", "_id": "b", "status": 500, "error": "shard failure"}},
            {"delete": {"_index": "persons", "_id": "c", "status": 503, "error": "unavailable"}},
        ]}
        with pytest.raises(DocumentDeletionError) as exc:
            manager.delete_documents("persons", ["a", "b", "c"])
        message = str(exc.value)
        assert "id=b" in message and "id=c" in message and "id=a," not in message

    def test_delete_document_refreshes(self, manager, es):
        manager.delete_document("persons", "a")
        es.delete.assert_called_once_with(index="persons", id="a", refresh=True)

    def test_delete_document_transport_error(self, manager, es):
        es.delete.side_effect = ESConnectionError("down")
        with pytest.raises(DocumentDeletionError):
            manager.delete_document("persons", "a")
