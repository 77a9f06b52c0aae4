"""
Document assembly - one search document per entity identifier.

CONSTRUCT query -> shaped base payload -> facets attached under "facets".
Construct and shaping failures propagate; facet failures are logged and the
facet is left out.
"""

import json
import logging
from typing import Any, Dict, Optional

from .errors import FlattenConflictError
from .facets import FacetResolver
from .flatten import merge_fragment
from .models import EntityConfig, FacetResult
from .shaping import JsonLdShaper

logger = logging.getLogger(__name__)

FACETS_KEY = "facets"


class DocumentAssembler:
    """Builds documents for one EntityConfig."""

    def __init__(
        self,
        entity_config: EntityConfig,
        renderer,
        sparql,
        facet_resolver: FacetResolver,
        shaper: Optional[JsonLdShaper] = None,
    ):
        self.entity_config = entity_config
        self.renderer = renderer
        self.sparql = sparql
        self.facet_resolver = facet_resolver
        self.shaper = shaper or JsonLdShaper(renderer.load_json(entity_config.shacl))

    def assemble(self, entity_id: str) -> Dict[str, Any]:
        config = self.entity_config
        query = self.renderer.render(config.construct, {config.construct_query_param: entity_id})
        graph = self.sparql.execute_construct(query)
        document = self.shaper.shape(graph, entity_id)

        document[FACETS_KEY] = self.build_facets(entity_id)
        logger.info(
            f"Document with uri: {entity_id}, Index: {config.index}, "
            f"Document size: {len(json.dumps(document))} bytes"
        )
        return document

    def build_facets(self, entity_id: str) -> Dict[str, Any]:
        """Resolve every facet in order and fold the fragments together."""
        facets: Dict[str, Any] = {}
        for facet in self.entity_config.facets:
            result = self.facet_resolver.resolve(facet, entity_id, self.entity_config)
            facets = self._apply(facets, result, entity_id)
        return facets

    def _apply(self, facets: Dict[str, Any], result: FacetResult, entity_id: str) -> Dict[str, Any]:
        if not result.ok:
            error = result.error
            if error.cause is None:
                logger.warning(f"Facet {result.facet.name} skipped for {entity_id}: {error}")
            else:
                logger.error(f"Error processing facet {result.facet} for {entity_id}: {error}", exc_info=error.cause)
            return facets

        if not result.merge:
            facets[result.facet.name] = result.value
            return facets

        try:
            return merge_fragment(facets, result.value)
        except FlattenConflictError as e:
            logger.error(f"Facet {result.facet.name} conflicts with earlier facets for {entity_id}: {e}")
            return facets
