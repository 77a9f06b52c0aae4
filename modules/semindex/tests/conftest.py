"""Shared fixtures for semindex tests."""

import pytest
from unittest.mock import MagicMock

from semindex.models import EntityConfig, FacetConfig, IndexingConfig, TabularResult


def bulk_ok(index, doc_id):
    return {"errors": False, "items": [{"index": {"_index": index, "_id": doc_id, "status": 201}}]}


def bulk_failed(index, doc_id, status=400):
    return {
        "errors": True,
        "items": [{"index": {
            "_index": index,
            "_id": doc_id,
            "status": status,
            "error": {"type": "mapper_parsing_exception", "reason": "failed to parse"},
        }}],
    }


@pytest.fixture
def person_config():
    return EntityConfig.from_dict({
        "name": "person",
        "index": "persons",
        "shacl": "person.shape.json",
        "construct": "construct.sparql.j2",
        "constructQueryParam": "uri",
        "select": "select.sparql.j2",
        "selectQueryParam": "uri",
        "settings": "settings.json",
        "facets": [
            {"name": "works", "body": "works.sparql.j2"},
            {"name": "label", "body": "label.txt.j2"},
            {"name": "related", "body": "related.json.j2", "path": "/persons/_search",
             "method": "POST", "accept": "application/json", "contentType": "application/json"},
            {"name": "source", "path": "/persons/_doc/<DOCUMENT_ID>/_source"},
        ],
    })


@pytest.fixture
def renderer():
    """Renderer double: echoes the template path, loads nothing."""
    mock = MagicMock()
    mock.render.side_effect = lambda path, params=None: f"rendered:{path}" if path else None
    mock.load_json.return_value = None
    return mock


@pytest.fixture
def sparql():
    mock = MagicMock()
    mock.execute_select.return_value = TabularResult(vars=[], rows=[])
    mock.execute_construct.return_value = []
    return mock


@pytest.fixture
def web_proxy():
    return MagicMock()


@pytest.fixture
def es():
    mock = MagicMock()
    mock.bulk.side_effect = lambda operations, refresh: bulk_ok(
        operations[0]["index"]["_index"], operations[0]["index"]["_id"]
    )
    mock.indices.exists.return_value = False
    mock.indices.create.return_value = {"acknowledged": True, "index": "persons"}
    mock.indices.delete.return_value = {"acknowledged": True}
    return mock


@pytest.fixture
def indexing_config(person_config):
    return IndexingConfig(entities=(person_config,))


@pytest.fixture
def literal_facet():
    return FacetConfig.from_dict({"name": "label", "body": "label.txt.j2"})
