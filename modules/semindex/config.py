"""
semindex configuration.

Environment settings are loaded from the project root .env file.
The indexing configuration (entities, facets) is a YAML file.
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import yaml
from dotenv import load_dotenv

from .errors import ConfigurationError
from .models import IndexingConfig

PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent
load_dotenv(PROJECT_ROOT / ".env")


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def _env_float(name: str, default: float) -> float:
    value = os.getenv(name)
    if not value:
        return default
    try:
        return float(value)
    except ValueError as e:
        raise ConfigurationError(f"{name} must be a number, got '{value}'") from e


@dataclass(frozen=True)
class Settings:
    """Snapshot of the environment used to wire clients."""
    es_host: str = "http://localhost:9200"
    es_username: Optional[str] = None
    es_password: Optional[str] = None
    es_verify_certs: bool = True
    sparql_endpoint: Optional[str] = None
    sparql_username: Optional[str] = None
    sparql_password: Optional[str] = None
    config_path: Optional[str] = None
    ext_folder: Optional[str] = None
    read_timeout: float = 30
    connect_timeout: float = 10
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            es_host=os.getenv("ES_HOST", "http://localhost:9200"),
            es_username=os.getenv("ES_USERNAME"),
            es_password=os.getenv("ES_PASSWORD"),
            es_verify_certs=_env_bool("ES_VERIFY_CERTS", True),
            sparql_endpoint=os.getenv("SPARQL_ENDPOINT"),
            sparql_username=os.getenv("SPARQL_USERNAME"),
            sparql_password=os.getenv("SPARQL_PASSWORD"),
            config_path=os.getenv("SEMINDEX_CONFIG"),
            ext_folder=os.getenv("SEMINDEX_EXT_FOLDER"),
            read_timeout=_env_float("SEMINDEX_READ_TIMEOUT", 30),
            connect_timeout=_env_float("SEMINDEX_CONNECT_TIMEOUT", 10),
            log_level=os.getenv("SEMINDEX_LOG_LEVEL", "INFO").upper(),
        )


def parse_indexing_config(text: str) -> IndexingConfig:
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid indexing configuration YAML: {e}") from e
    if not isinstance(data, dict):
        raise ConfigurationError("Indexing configuration must be a mapping with an 'indexing' list")
    return IndexingConfig.from_dict(data)


def load_indexing_config(path: str) -> IndexingConfig:
    config_file = Path(path)
    if not config_file.is_file():
        raise ConfigurationError(f"Indexing configuration not found: {path}")
    return parse_indexing_config(config_file.read_text(encoding="utf-8"))
