"""
Facet resolution.

Each facet yields a FacetResult; nothing here raises for a facet-level problem.
The caller decides what to do with failures (the assembler logs and omits them).

    SELECT_QUERY  render body -> SELECT -> flatten -> merged into facets
    REMOTE_CALL   render body (if any) -> REST call -> JSON under facets[name]
    LITERAL_TEXT  render body -> string under facets[name]
"""

import json
import logging
from typing import Any, Dict, Optional

from .errors import FacetError
from .flatten import FacetFlattener
from .models import EntityConfig, FacetConfig, FacetKind, FacetResult

logger = logging.getLogger(__name__)


class FacetResolver:
    """Computes facet fragments for one entity identifier."""

    def __init__(self, renderer, sparql, web_proxy, flattener: Optional[FacetFlattener] = None):
        self.renderer = renderer
        self.sparql = sparql
        self.web_proxy = web_proxy
        self.flattener = flattener or FacetFlattener()

    def resolve(self, facet: FacetConfig, entity_id: str, entity_config: EntityConfig) -> FacetResult:
        try:
            body = None
            if facet.body is not None:
                body = self.renderer.render(facet.body, self._template_params(entity_id, entity_config))

            if facet.kind is FacetKind.SELECT_QUERY:
                result = self.sparql.execute_select(body)
                return FacetResult.success(facet, self.flattener.flatten(result), merge=True)

            if facet.kind is FacetKind.REMOTE_CALL:
                return self._remote_call(facet, entity_id, body)

            return FacetResult.success(facet, body)
        except Exception as e:
            return FacetResult.failure(facet, FacetError(facet.name, str(e), e))

    def _remote_call(self, facet: FacetConfig, entity_id: str, body: Optional[str]) -> FacetResult:
        path = facet.resolve_path(entity_id)
        response = self.web_proxy.proxy_response(path, facet.method, facet.accept, facet.content_type, body)
        if not response.ok:
            return FacetResult.failure(
                facet, FacetError(facet.name, f"status {response.status_code} from {path}")
            )
        try:
            return FacetResult.success(facet, json.loads(response.body))
        except ValueError as e:
            return FacetResult.failure(facet, FacetError(facet.name, f"unreadable JSON from {path}: {e}", e))

    @staticmethod
    def _template_params(entity_id: str, entity_config: EntityConfig) -> Dict[str, Any]:
        return {"uri": entity_id, "entity_config": entity_config}
