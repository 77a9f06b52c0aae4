"""Graph-to-search indexing: facet flattening, document assembly and bulk indexing."""

__version__ = "0.1.0"

from .assembler import DocumentAssembler
from .bulk import BulkIndexer
from .errors import (
    BulkIndexingError,
    ConfigurationError,
    DocumentDeletionError,
    FacetError,
    FlattenConflictError,
    IndexLifecycleError,
    QueryExecutionError,
    SemIndexError,
    TemplateNotFoundError,
)
from .facets import FacetResolver
from .flatten import FacetFlattener
from .lifecycle import IndexLifecycleManager
from .models import (
    BulkItemFailure,
    BulkOutcome,
    EntityConfig,
    FacetConfig,
    FacetKind,
    FacetResult,
    IndexingConfig,
    TabularResult,
)
from .orchestrator import IndexOrchestrator

__all__ = [
    "DocumentAssembler",
    "BulkIndexer",
    "FacetResolver",
    "FacetFlattener",
    "IndexLifecycleManager",
    "IndexOrchestrator",
    "BulkItemFailure",
    "BulkOutcome",
    "EntityConfig",
    "FacetConfig",
    "FacetKind",
    "FacetResult",
    "IndexingConfig",
    "TabularResult",
    "SemIndexError",
    "ConfigurationError",
    "TemplateNotFoundError",
    "FlattenConflictError",
    "QueryExecutionError",
    "FacetError",
    "IndexLifecycleError",
    "DocumentDeletionError",
    "BulkIndexingError",
]
