"""
Index lifecycle - exists / create / delete / ensure / clear, plus document deletes.

Create and delete must be acknowledged by the cluster, otherwise
IndexLifecycleError is raised straight away. Nothing is retried.
"""

import logging
from typing import Any, Dict, List, Optional

from elasticsearch import ApiError, Elasticsearch, NotFoundError, TransportError

from .errors import DocumentDeletionError, IndexLifecycleError
from .models import BulkItemFailure

logger = logging.getLogger(__name__)

INDEX_BODY_KEYS = ("settings", "mappings", "aliases")


def response_body(response: Any) -> Dict[str, Any]:
    """Plain dict out of an elasticsearch response object."""
    return getattr(response, "body", response) or {}


class IndexLifecycleManager:
    """Manages indices and document deletions on one cluster."""

    def __init__(self, es: Elasticsearch):
        self.es = es

    def exists(self, index: str) -> bool:
        try:
            return bool(self.es.indices.exists(index=index))
        except (ApiError, TransportError) as e:
            raise IndexLifecycleError(f"Error while checking for existence of index '{index}'.") from e

    def create(self, index: str, settings: Optional[Dict[str, Any]] = None):
        body = {k: v for k, v in (settings or {}).items() if k in INDEX_BODY_KEYS}
        unknown = set(settings or {}) - set(INDEX_BODY_KEYS)
        if unknown:
            logger.warning(f"Ignoring unknown index settings keys for {index}: {sorted(unknown)}")
        try:
            response = self.es.indices.create(index=index, **body)
        except (ApiError, TransportError) as e:
            raise IndexLifecycleError(f"Error while creating elastic index '{index}'.") from e
        if not response_body(response).get("acknowledged"):
            raise IndexLifecycleError(f"Error while creating elastic index '{index}'.")
        logger.info(f"Created index: {index}")

    def delete(self, index: str):
        try:
            response = self.es.indices.delete(index=index)
        except (ApiError, TransportError) as e:
            raise IndexLifecycleError(f"Error while deleting index '{index}'.") from e
        if not response_body(response).get("acknowledged"):
            raise IndexLifecycleError(f"Error while deleting index '{index}'.")
        logger.info(f"Deleted index: {index}")

    def ensure_exists(self, index: str, settings: Optional[Dict[str, Any]] = None):
        if self.exists(index):
            return
        self.create(index, settings)

    def clear(self, index: str, settings: Optional[Dict[str, Any]] = None):
        """Leave index existing and empty."""
        if self.exists(index):
            self.delete(index)
        self.create(index, settings)

    def delete_documents(self, index: str, ids: List[str]):
        """One bulk delete for all ids, refreshed so reads see it immediately."""
        if not ids:
            return
        operations = [{"delete": {"_index": index, "_id": doc_id}} for doc_id in ids]
        try:
            response = response_body(self.es.bulk(operations=operations, refresh=True))
        except (ApiError, TransportError) as e:
            raise DocumentDeletionError(f"Couldn't send delete bulk request for {index}") from e

        if not response.get("errors"):
            return
        failures = []
        for item in response.get("items", []):
            result = item.get("delete", {})
            status = result.get("status", 0)
            if status < 200 or status >= 300:
                failures.append(BulkItemFailure(result.get("_index"), result.get("_id"), status, result.get("error")))
        raise DocumentDeletionError(
            f"Elastic delete bulk request returned errors: [{', '.join(str(f) for f in failures)}]"
        )

    def delete_document(self, index: str, doc_id: str):
        try:
            self.es.delete(index=index, id=doc_id, refresh=True)
        except NotFoundError:
            logger.info(f"Document {doc_id} already absent from {index}")
        except (ApiError, TransportError) as e:
            raise DocumentDeletionError(f"Couldn't delete {doc_id} from {index}") from e
