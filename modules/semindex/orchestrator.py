"""
IndexOrchestrator - drives indexing of every configured entity type.

    index_all(reset)           all entities, optionally clearing their indices first
    index_one(id, entity_name) a single entity document

Runs sequentially: one document is assembled and written before the next.
Each index_all run tracks the indices it has already reset so an index shared
by several entity configurations is cleared at most once per run.
"""

import logging
from typing import Dict, FrozenSet, List, Optional

from elasticsearch import Elasticsearch

from .assembler import DocumentAssembler
from .bulk import BulkIndexer
from .facets import FacetResolver
from .flatten import FacetFlattener
from .lifecycle import IndexLifecycleManager
from .models import BulkOutcome, EntityConfig, IndexingConfig, unique

logger = logging.getLogger(__name__)


class IndexOrchestrator:
    """Indexes graph entities into the search backend according to an IndexingConfig."""

    def __init__(
        self,
        config: IndexingConfig,
        es: Elasticsearch,
        sparql,
        renderer,
        web_proxy,
        lifecycle: Optional[IndexLifecycleManager] = None,
        bulk_indexer: Optional[BulkIndexer] = None,
    ):
        self.config = config
        self.sparql = sparql
        self.renderer = renderer
        self.lifecycle = lifecycle or IndexLifecycleManager(es)
        self.bulk_indexer = bulk_indexer or BulkIndexer(es)
        self.facet_resolver = FacetResolver(renderer, sparql, web_proxy, FacetFlattener())

    def assembler_for(self, entity: EntityConfig) -> DocumentAssembler:
        return DocumentAssembler(entity, self.renderer, self.sparql, self.facet_resolver)

    def reset_index(self, entity: EntityConfig, already_reset: FrozenSet[str]) -> FrozenSet[str]:
        """Clear entity.index unless this run already did; returns the updated set."""
        if entity.index in already_reset:
            logger.info(f"Index {entity.index} already reset in this run, skipping for {entity.name}")
            return already_reset
        settings = self.renderer.load_json(entity.settings)
        self.lifecycle.clear(entity.index, settings)
        return already_reset | {entity.index}

    def select_ids(self, entity: EntityConfig) -> List[str]:
        """Distinct identifiers of the entity type, in first-seen order."""
        query = self.renderer.render(entity.select, {})
        result = self.sparql.execute_select(query)
        ids = unique(result.collect_values(entity.select_query_param))
        logger.info(f"Selected {len(ids)} {entity.name} identifier(s) for {entity.index}")
        return ids

    def index_all(self, reset: bool = False) -> Dict[str, int]:
        """
        Index every configured entity type in declaration order.

        Returns:
            Number of documents written per entity configuration name.

        Raises:
            BulkIndexingError: after an entity's documents were all attempted and some failed
            IndexLifecycleError: an index could not be reset
        """
        already_reset: FrozenSet[str] = frozenset()
        written: Dict[str, int] = {}
        for entity in self.config:
            if reset:
                already_reset = self.reset_index(entity, already_reset)
            ids = self.select_ids(entity)
            outcome = self.bulk_indexer.index_all(entity.index, ids, self.assembler_for(entity).assemble)
            written[entity.name] = outcome.attempted
        return written

    def index_one(self, entity_id: str, entity_name: str) -> Optional[BulkOutcome]:
        """Index one document; an unknown entity_name is logged and ignored."""
        entity = self.config.find_by_name(entity_name)
        if entity is None:
            logger.warning(f"Indexing configuration with name {entity_name} not found.")
            return None
        document = self.assembler_for(entity).assemble(entity_id)
        return self.bulk_indexer.index_one(entity.index, entity_id, document)
