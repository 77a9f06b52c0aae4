"""
Core models for the graph-to-search indexer.

Configuration records are frozen and shared read-only across one run.
Result records (TabularResult, BulkOutcome, FacetResult) live for a single call.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Tuple
from urllib.parse import quote

from .errors import BulkIndexingError, ConfigurationError, FacetError

HTTP_METHODS = ("GET", "POST", "PUT", "DELETE", "HEAD", "PATCH")

DOCUMENT_ID_PLACEHOLDER = "<DOCUMENT_ID>"

# Body template suffixes that decide the facet kind
SELECT_SUFFIXES = (".sparql.j2", ".select.template")
REMOTE_SUFFIXES = (".json.j2", ".remote.template")


class FacetKind(Enum):
    """How a facet computes its fragment."""
    SELECT_QUERY = "select_query"     # tabular query, flattened into facets
    REMOTE_CALL = "remote_call"       # REST call against the search backend
    LITERAL_TEXT = "literal_text"     # rendered text stored verbatim

    @classmethod
    def from_body(cls, body: Optional[str]) -> "FacetKind":
        """Resolve the kind from the body template name. No body means a bare remote call."""
        if body is None:
            return cls.REMOTE_CALL
        if body.endswith(SELECT_SUFFIXES):
            return cls.SELECT_QUERY
        if body.endswith(REMOTE_SUFFIXES):
            return cls.REMOTE_CALL
        return cls.LITERAL_TEXT


@dataclass(frozen=True)
class FacetConfig:
    """One named facet of an entity document."""
    name: str
    kind: FacetKind
    body: Optional[str] = None
    path: Optional[str] = None
    method: str = "GET"
    accept: Optional[str] = None
    content_type: Optional[str] = None

    def resolve_path(self, entity_id: str) -> str:
        return (self.path or "").replace(DOCUMENT_ID_PLACEHOLDER, quote(entity_id, safe=""))

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "FacetConfig":
        name = data.get("name")
        if not name:
            raise ConfigurationError(f"Facet without a name: {data}")

        body = data.get("body")
        path = data.get("path")
        if body is None and path is None:
            raise ConfigurationError(f"Facet '{name}' needs either a body or a path")

        kind = FacetKind.from_body(body)
        if kind is FacetKind.REMOTE_CALL and not path:
            raise ConfigurationError(f"Facet '{name}' calls the search backend but has no path")

        method = str(data.get("method") or "GET").upper()
        if method not in HTTP_METHODS:
            raise ConfigurationError(f"Facet '{name}' uses unsupported HTTP method '{method}'")

        return cls(
            name=name,
            kind=kind,
            body=body,
            path=path,
            method=method,
            accept=data.get("accept"),
            content_type=data.get("contentType", data.get("content_type")),
        )


@dataclass(frozen=True)
class EntityConfig:
    """How to select, build and index one entity type."""
    name: str
    index: str
    shacl: Optional[str] = None
    construct: Optional[str] = None
    construct_query_param: str = "uri"
    select: Optional[str] = None
    select_query_param: str = "uri"
    settings: Optional[str] = None
    facets: Tuple[FacetConfig, ...] = ()

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "EntityConfig":
        name = data.get("name")
        index = data.get("index")
        if not name:
            raise ConfigurationError(f"Entity configuration without a name: {data}")
        if not index:
            raise ConfigurationError(f"Entity configuration '{name}' has no target index")

        return cls(
            name=name,
            index=index,
            shacl=data.get("shacl"),
            construct=data.get("construct"),
            construct_query_param=data.get("constructQueryParam", "uri"),
            select=data.get("select"),
            select_query_param=data.get("selectQueryParam", "uri"),
            settings=data.get("settings"),
            facets=tuple(FacetConfig.from_dict(f) for f in data.get("facets") or []),
        )


@dataclass(frozen=True)
class IndexingConfig:
    """The full set of entity configurations, in declaration order."""
    entities: Tuple[EntityConfig, ...] = ()

    def __post_init__(self):
        seen = set()
        for entity in self.entities:
            key = entity.name.lower()
            if key in seen:
                raise ConfigurationError(f"Duplicate entity configuration name '{entity.name}'")
            seen.add(key)

    def __iter__(self):
        return iter(self.entities)

    def __len__(self):
        return len(self.entities)

    def find_by_name(self, name: str) -> Optional[EntityConfig]:
        """Case-insensitive lookup; None when absent."""
        if name is None:
            return None
        for entity in self.entities:
            if entity.name.lower() == name.lower():
                return entity
        return None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "IndexingConfig":
        data = data or {}
        entries = data.get("indexing", data.get("list"))
        if entries is None:
            raise ConfigurationError("Indexing configuration needs an 'indexing' list")
        return cls(entities=tuple(EntityConfig.from_dict(e) for e in entries))


@dataclass
class TabularResult:
    """Column names plus rows of pre-stringified, nullable values."""
    vars: List[str] = field(default_factory=list)
    rows: List[Dict[str, Optional[str]]] = field(default_factory=list)

    def __len__(self):
        return len(self.rows)

    def collect_values(self, var: str) -> List[Optional[str]]:
        """Every row's value for var, in row order, None included."""
        return [row.get(var) for row in self.rows]

    def collect_value(self, var: str) -> Optional[str]:
        """The value for var when there is exactly one row, otherwise None."""
        if len(self.rows) == 1:
            return self.rows[0].get(var)
        return None


@dataclass(frozen=True)
class BulkItemFailure:
    """One rejected item of a bulk response."""
    index: str
    id: str
    status: int
    error: Any = None

    def __str__(self):
        return f"{{index={self.index}, id={self.id}, status={self.status}, error={self.error}}}"


@dataclass
class BulkOutcome:
    """Per-item bulk responses and transport errors gathered over one call."""
    responses: List[Dict[str, Any]] = field(default_factory=list)
    exceptions: List[Exception] = field(default_factory=list)
    attempted: int = 0

    def record_response(self, response: Dict[str, Any]):
        self.responses.append(response)

    def record_exception(self, exc: Exception):
        self.exceptions.append(exc)

    @property
    def failures(self) -> List[BulkItemFailure]:
        failed = []
        for response in self.responses:
            if not response.get("errors"):
                continue
            for item in response.get("items", []):
                for result in item.values():
                    status = result.get("status", 0)
                    if status < 200 or status >= 300:
                        failed.append(BulkItemFailure(
                            index=result.get("_index"),
                            id=result.get("_id"),
                            status=status,
                            error=result.get("error"),
                        ))
        return failed

    @property
    def has_errors(self) -> bool:
        return any(r.get("errors") for r in self.responses)

    def raise_for_errors(self):
        """Raise one aggregated BulkIndexingError if any response reported item errors."""
        if self.has_errors:
            raise BulkIndexingError(self.failures, self.exceptions)


@dataclass
class FacetResult:
    """Outcome of one facet: a fragment or a FacetError, never both."""
    facet: FacetConfig
    value: Any = None
    error: Optional[FacetError] = None
    merge: bool = False  # flattened objects merge into facets, others go under facet.name

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, facet: FacetConfig, value: Any, merge: bool = False) -> "FacetResult":
        return cls(facet=facet, value=value, merge=merge)

    @classmethod
    def failure(cls, facet: FacetConfig, error: FacetError) -> "FacetResult":
        return cls(facet=facet, error=error)


def unique(values: Iterable[Optional[str]]) -> List[str]:
    """Drop None and duplicates, keeping first-seen order."""
    seen = set()
    out = []
    for value in values:
        if value is None or value in seen:
            continue
        seen.add(value)
        out.append(value)
    return out
