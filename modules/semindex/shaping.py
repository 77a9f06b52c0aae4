"""
JSON-LD shaping - CONSTRUCT graph to base document payload.

The shaping definition is a small JSON file:

    {
        "@context": {
            "title": "http://purl.org/dc/terms/title",
            "authors": {"@id": "http://schema.org/author", "@container": "@set"}
        },
        "strict": false
    }

Properties mapped in the context are renamed to their term. With "strict",
unmapped properties are dropped. Referenced nodes present in the graph are
embedded under the referencing property (each node at most once per path).
"""

import logging
from typing import Any, Dict, List, Optional, Set, Tuple

logger = logging.getLogger(__name__)

ID = "@id"
TYPE = "@type"
VALUE = "@value"
GRAPH = "@graph"


def _graph_nodes(graph: Any) -> List[Dict[str, Any]]:
    if graph is None:
        return []
    if isinstance(graph, list):
        return [n for n in graph if isinstance(n, dict)]
    if isinstance(graph, dict):
        if GRAPH in graph:
            return _graph_nodes(graph[GRAPH])
        return [graph]
    raise TypeError(f"Unsupported JSON-LD graph: {type(graph).__name__}")


class JsonLdShaper:
    """Shapes JSON-LD graphs into plain nested JSON."""

    def __init__(self, definition: Optional[Dict[str, Any]] = None):
        definition = definition or {}
        self.strict = bool(definition.get("strict", False))
        self._terms: Dict[str, Tuple[str, bool]] = {}
        for term, mapping in (definition.get("@context") or {}).items():
            if isinstance(mapping, str):
                self._terms[mapping] = (term, False)
            elif isinstance(mapping, dict) and ID in mapping:
                self._terms[mapping[ID]] = (term, mapping.get("@container") == "@set")

    def shape(self, graph: Any, root_id: Optional[str] = None) -> Dict[str, Any]:
        """Shape graph around root_id (or the first node nothing else references)."""
        nodes = _graph_nodes(graph)
        if not nodes:
            return {"id": root_id} if root_id else {}

        by_id = {n[ID]: n for n in nodes if ID in n}
        root = by_id.get(root_id) if root_id else None
        if root is None:
            referenced = {ref for n in nodes for ref in self._references(n)}
            candidates = [n for n in nodes if n.get(ID) not in referenced]
            root = (candidates or nodes)[0]
            if root_id:
                logger.warning(f"Root {root_id} not in constructed graph, using {root.get(ID)}")

        return self._shape_node(root, by_id, set())

    def _references(self, node: Dict[str, Any]) -> Set[str]:
        refs = set()
        for key, values in node.items():
            if key in (ID, TYPE):
                continue
            for value in values if isinstance(values, list) else [values]:
                if isinstance(value, dict) and set(value) == {ID}:
                    refs.add(value[ID])
        return refs

    def _compact_iri(self, iri: str) -> str:
        term = self._terms.get(iri)
        return term[0] if term else iri

    def _shape_node(self, node: Dict[str, Any], by_id: Dict[str, Dict], path: Set[str]) -> Dict[str, Any]:
        node_id = node.get(ID)
        path = path | {node_id} if node_id else path
        out: Dict[str, Any] = {}
        if node_id:
            out["id"] = node_id
        if TYPE in node:
            types = node[TYPE] if isinstance(node[TYPE], list) else [node[TYPE]]
            out["type"] = [self._compact_iri(t) for t in types]

        for key, values in node.items():
            if key.startswith("@"):
                continue
            term, as_set = self._terms.get(key, (None, False))
            if term is None:
                if self.strict:
                    continue
                term = key
            shaped = [self._shape_value(v, by_id, path) for v in (values if isinstance(values, list) else [values])]
            out[term] = shaped if as_set or len(shaped) != 1 else shaped[0]
        return out

    def _shape_value(self, value: Any, by_id: Dict[str, Dict], path: Set[str]) -> Any:
        if not isinstance(value, dict):
            return value
        if VALUE in value:
            return value[VALUE]
        ref = value.get(ID)
        if set(value) == {ID}:
            target = by_id.get(ref)
            if target is None or ref in path:
                return ref
            return self._shape_node(target, by_id, path)
        return self._shape_node(value, by_id, path)
