"""
SPARQL protocol client.

SELECT results come back as TabularResult (every value stringified, unbound
variables as None). CONSTRUCT results come back as parsed JSON-LD.
"""

import logging
from typing import Any, Dict, Optional, Tuple, Union

import requests

from .errors import QueryExecutionError
from .models import TabularResult

logger = logging.getLogger(__name__)

SELECT_ACCEPT = "application/sparql-results+json"
CONSTRUCT_ACCEPT = "application/ld+json"

XSD_BOOLEAN = "http://www.w3.org/2001/XMLSchema#boolean"


def binding_to_string(binding: Optional[Dict[str, Any]]) -> Optional[str]:
    """Lexical form of one SPARQL JSON binding."""
    if binding is None:
        return None
    kind = binding.get("type")
    value = binding.get("value")
    if kind == "bnode":
        return f"_:{value}"
    if binding.get("datatype") == XSD_BOOLEAN:
        return "true" if str(value).strip().lower() in ("true", "1") else "false"
    return value


def parse_select_results(payload: Dict[str, Any]) -> TabularResult:
    """application/sparql-results+json -> TabularResult."""
    variables = list(payload.get("head", {}).get("vars", []))
    rows = []
    for solution in payload.get("results", {}).get("bindings", []):
        rows.append({var: binding_to_string(solution.get(var)) for var in variables})
    return TabularResult(vars=variables, rows=rows)


class SparqlClient:
    """Runs SELECT and CONSTRUCT queries against one SPARQL endpoint."""

    def __init__(
        self,
        endpoint: str,
        username: Optional[str] = None,
        password: Optional[str] = None,
        timeout: Union[float, Tuple[float, float]] = 30,
        session: Optional[requests.Session] = None,
    ):
        if not endpoint:
            raise ValueError("SPARQL endpoint URL is required")
        self.endpoint = endpoint
        self.timeout = timeout
        self.session = session or requests.Session()
        if username and password:
            self.session.auth = (username, password)

    def _post(self, query: str, accept: str) -> requests.Response:
        logger.debug(f"SPARQL query against {self.endpoint}:\n{query}")
        try:
            response = self.session.post(
                self.endpoint,
                data={"query": query},
                headers={"Accept": accept},
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise QueryExecutionError(f"SPARQL endpoint {self.endpoint} unreachable: {e}") from e
        if not response.ok:
            raise QueryExecutionError(
                f"SPARQL endpoint {self.endpoint} returned {response.status_code}: {response.text[:500]}"
            )
        return response

    def execute_select(self, query: str) -> TabularResult:
        response = self._post(query, SELECT_ACCEPT)
        try:
            return parse_select_results(response.json())
        except ValueError as e:
            raise QueryExecutionError(f"Unreadable SELECT response from {self.endpoint}: {e}") from e

    def execute_construct(self, query: str) -> Any:
        response = self._post(query, CONSTRUCT_ACCEPT)
        try:
            return response.json()
        except ValueError as e:
            raise QueryExecutionError(f"Unreadable CONSTRUCT response from {self.endpoint}: {e}") from e
