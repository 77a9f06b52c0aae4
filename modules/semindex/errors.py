"""
Exception hierarchy for semindex.

Facet-level failures are recoverable (the facet is omitted from the document).
Everything else propagates to the caller.
"""

from typing import List, Optional


class SemIndexError(Exception):
    """Base class for all indexer errors."""


class ConfigurationError(SemIndexError):
    """Indexing configuration is missing, malformed or inconsistent."""


class TemplateNotFoundError(SemIndexError):
    """A template or resource path could not be resolved."""


class FlattenConflictError(SemIndexError):
    """A column prefix points at a key that already holds a non-object value."""

    def __init__(self, column: str, segment: str):
        self.column = column
        self.segment = segment
        super().__init__(
            f"Column '{column}' needs '{segment}' to be an object but it already holds a value"
        )


class QueryExecutionError(SemIndexError):
    """SPARQL endpoint call failed."""


class FacetError(SemIndexError):
    """A single facet could not be computed."""

    def __init__(self, facet_name: str, message: str, cause: Optional[BaseException] = None):
        self.facet_name = facet_name
        self.cause = cause
        super().__init__(f"Facet '{facet_name}': {message}")


class IndexLifecycleError(SemIndexError):
    """Index creation, deletion or existence check failed."""


class DocumentDeletionError(SemIndexError):
    """One or more document deletions were rejected by the backend."""


class BulkIndexingError(SemIndexError):
    """Aggregated verdict of a bulk run: at least one item was rejected by the backend."""

    def __init__(self, failures: List = None, exceptions: List[Exception] = None):
        self.failures = list(failures or [])
        self.exceptions = list(exceptions or [])
        parts = [str(f) for f in self.failures]
        parts.extend(f"{type(e).__name__}: {e}" for e in self.exceptions)
        super().__init__(
            f"Bulk indexing returned {len(self.failures)} failed item(s) and "
            f"{len(self.exceptions)} transport error(s): [{', '.join(parts)}]"
        )
