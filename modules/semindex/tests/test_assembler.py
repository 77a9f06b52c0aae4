#!/usr/bin/env python3
"""Tests for document assembly."""

import pytest
from unittest.mock import MagicMock

from semindex.assembler import DocumentAssembler
from semindex.errors import QueryExecutionError
from semindex.facets import FacetResolver
from semindex.models import TabularResult
from semindex.shaping import JsonLdShaper
from semindex.webproxy import ProxyResponse

URI = "http://example.org/person/1"
FOAF = "http://xmlns.com/foaf/0.1/"


@pytest.fixture
def assembler(person_config, renderer, sparql, web_proxy):
    resolver = FacetResolver(renderer, sparql, web_proxy)
    shaper = JsonLdShaper({"@context": {"name": FOAF + "name"}})
    return DocumentAssembler(person_config, renderer, sparql, resolver, shaper)


class TestAssemble:
    """Tests for DocumentAssembler.assemble."""

    def test_full_document(self, assembler, sparql, web_proxy, renderer):
        sparql.execute_construct.return_value = [
            {"@id": URI, FOAF + "name": [{"@value": "Ada"}]},
        ]
        sparql.execute_select.return_value = TabularResult(
            vars=["works_titles"], rows=[{"works_titles": "Notes"}]
        )
        web_proxy.proxy_response.side_effect = [
            ProxyResponse(200, '{"hits": []}'),
            ProxyResponse(200, '{"name": "Ada"}'),
        ]

        document = assembler.assemble(URI)

        assert document["id"] == URI
        assert document["name"] == "Ada"
        assert document["facets"] == {
            "works": {"titles": ["Notes"]},
            "label": "rendered:label.txt.j2",
            "related": {"hits": []},
            "source": {"name": "Ada"},
        }
        renderer.render.assert_any_call("construct.sparql.j2", {"uri": URI})

    def test_facets_present_when_every_facet_fails(self, assembler, sparql, web_proxy, renderer):
        sparql.execute_construct.return_value = [{"@id": URI}]
        sparql.execute_select.side_effect = RuntimeError("boom")
        web_proxy.proxy_response.return_value = ProxyResponse(500, "error")
        def render(path, params=None):
            if path == "construct.sparql.j2":
                return "construct"
            raise ValueError("bad template")

        renderer.render.side_effect = render

        document = assembler.assemble(URI)

        assert document["facets"] == {}

    def test_failed_facet_is_omitted_others_kept(self, assembler, sparql, web_proxy):
        sparql.execute_construct.return_value = [{"@id": URI}]
        sparql.execute_select.return_value = TabularResult(vars=["title"], rows=[{"title": "T"}])
        web_proxy.proxy_response.side_effect = [
            ProxyResponse(503, "unavailable"),
            ProxyResponse(200, '{"ok": true}'),
        ]

        facets = assembler.assemble(URI)["facets"]

        assert "related" not in facets
        assert facets["source"] == {"ok": True}
        assert facets["title"] == "T"
        assert facets["label"] == "rendered:label.txt.j2"

    def test_construct_failure_propagates(self, assembler, sparql):
        sparql.execute_construct.side_effect = QueryExecutionError("endpoint down")
        with pytest.raises(QueryExecutionError):
            assembler.assemble(URI)

    def test_shaping_failure_propagates(self, person_config, renderer, sparql, web_proxy):
        shaper = MagicMock()
        shaper.shape.side_effect = TypeError("unsupported graph")
        assembler = DocumentAssembler(person_config, renderer, sparql,
                                      FacetResolver(renderer, sparql, web_proxy), shaper)
        with pytest.raises(TypeError):
            assembler.assemble(URI)

    def test_conflicting_select_facet_is_omitted(self, person_config, renderer, sparql, web_proxy):
        from semindex.models import EntityConfig
        config = EntityConfig.from_dict({
            "name": "person",
            "index": "persons",
            "construct": "construct.sparql.j2",
            "facets": [
                {"name": "first", "body": "first.sparql.j2"},
                {"name": "second", "body": "second.sparql.j2"},
            ],
        })
        sparql.execute_construct.return_value = [{"@id": URI}]
        sparql.execute_select.side_effect = [
            TabularResult(vars=["author"], rows=[{"author": "x"}]),
            TabularResult(vars=["author_name", "year"], rows=[{"author_name": "Ada", "year": "1843"}]),
        ]
        assembler = DocumentAssembler(config, renderer, sparql,
                                      FacetResolver(renderer, sparql, web_proxy), JsonLdShaper())

        assert assembler.assemble(URI)["facets"] == {"author": "x"}

    def test_select_facets_share_nested_objects(self, renderer, sparql, web_proxy):
        from semindex.models import EntityConfig
        config = EntityConfig.from_dict({
            "name": "person",
            "index": "persons",
            "construct": "construct.sparql.j2",
            "facets": [
                {"name": "a", "body": "a.sparql.j2"},
                {"name": "b", "body": "b.sparql.j2"},
            ],
        })
        sparql.execute_construct.return_value = [{"@id": URI}]
        sparql.execute_select.side_effect = [
            TabularResult(vars=["employer_name"], rows=[{"employer_name": "ACME"}]),
            TabularResult(vars=["employer_city"], rows=[{"employer_city": "Ghent"}]),
        ]
        assembler = DocumentAssembler(config, renderer, sparql,
                                      FacetResolver(renderer, sparql, web_proxy), JsonLdShaper())

        assert assembler.assemble(URI)["facets"] == {"employer": {"name": "ACME", "city": "Ghent"}}

    def test_shaper_built_from_definition(self, person_config, renderer, sparql, web_proxy):
        renderer.load_json.return_value = {"@context": {"name": FOAF + "name"}, "strict": True}
        assembler = DocumentAssembler(person_config, renderer, sparql,
                                      FacetResolver(renderer, sparql, web_proxy))
        renderer.load_json.assert_called_once_with("person.shape.json")
        assert assembler.shaper.strict is True
