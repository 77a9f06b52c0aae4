"""
Bulk indexing with one aggregated verdict.

Every identifier is written in its own refreshed bulk request. Transport errors
are captured on the outcome and logged, and the loop moves on. Once all
identifiers have been attempted, item-level errors reported by the captured
responses are raised together as a single BulkIndexingError.
"""

import logging
from typing import Any, Callable, Dict, Iterable, List

from elasticsearch import ApiError, Elasticsearch, TransportError

from .lifecycle import response_body
from .models import BulkOutcome

logger = logging.getLogger(__name__)

DocumentSupplier = Callable[[str], Dict[str, Any]]


def index_operation(index: str, doc_id: str, document: Dict[str, Any]) -> List[Dict[str, Any]]:
    """Bulk action + source lines for one document."""
    return [{"index": {"_index": index, "_id": doc_id}}, document]


class BulkIndexer:
    """Writes documents to an index, one bulk call per document."""

    def __init__(self, es: Elasticsearch, refresh: bool = True):
        self.es = es
        self.refresh = refresh

    def write(self, index: str, doc_id: str, document: Dict[str, Any], outcome: BulkOutcome):
        """Issue one write, recording its response or transport error on outcome."""
        outcome.attempted += 1
        try:
            response = self.es.bulk(operations=index_operation(index, doc_id, document), refresh=self.refresh)
        except (ApiError, TransportError) as e:
            logger.error(f"Something went wrong while sending bulk request with id {doc_id} to {index}: {e}")
            outcome.record_exception(e)
            return
        outcome.record_response(response_body(response))

    def index_one(self, index: str, doc_id: str, document: Dict[str, Any]) -> BulkOutcome:
        outcome = BulkOutcome()
        self.write(index, doc_id, document, outcome)
        self._check(outcome, index)
        return outcome

    def index_all(self, index: str, ids: Iterable[str], document_supplier: DocumentSupplier) -> BulkOutcome:
        """
        Write the document of every id, then raise once if anything failed.

        Errors raised by document_supplier are not captured and abort the run.
        """
        outcome = BulkOutcome()
        for doc_id in ids:
            self.write(index, doc_id, document_supplier(doc_id), outcome)
        self._check(outcome, index)
        logger.info(f"Indexed {outcome.attempted} document(s) into {index}")
        return outcome

    @staticmethod
    def _check(outcome: BulkOutcome, index: str):
        if outcome.exceptions:
            logger.error(f"{len(outcome.exceptions)} bulk request(s) to {index} failed in transport")
        if outcome.has_errors:
            failed = ", ".join(str(f) for f in outcome.failures)
            logger.error(
                f"Elastic bulk response for {index} contained errors.\n\t [{failed}]"
            )
        outcome.raise_for_errors()
