#!/usr/bin/env python3
"""
semindex CLI - index graph entities into Elasticsearch.

Usage:
    semindex index-all                      # (re)index every configured entity type
    semindex index-all --reset              # clear each index once, then index
    semindex index-one <uri> <entity>       # index a single entity document
    semindex index-one <uri> <entity> --config conf/indexing.yaml --ext-folder conf/

Environment (see .env):
    ES_HOST, ES_USERNAME, ES_PASSWORD, ES_VERIFY_CERTS
    SPARQL_ENDPOINT, SPARQL_USERNAME, SPARQL_PASSWORD
    SEMINDEX_CONFIG, SEMINDEX_EXT_FOLDER, SEMINDEX_LOG_LEVEL

Exit codes:
    0: done
    1: indexing or configuration error
"""

import argparse
import json
import logging
import sys
from dataclasses import replace
from typing import List, Optional

from elasticsearch import Elasticsearch

from .config import Settings, load_indexing_config
from .errors import ConfigurationError, SemIndexError
from .orchestrator import IndexOrchestrator
from .sparql import SparqlClient
from .templates import TemplateRenderer
from .webproxy import WebProxy

logger = logging.getLogger("semindex")


def build_elasticsearch(settings: Settings) -> Elasticsearch:
    kwargs = {"verify_certs": settings.es_verify_certs, "request_timeout": settings.read_timeout}
    if settings.es_username and settings.es_password:
        kwargs["basic_auth"] = (settings.es_username, settings.es_password)
    return Elasticsearch([settings.es_host], **kwargs)


def build_orchestrator(settings: Settings) -> IndexOrchestrator:
    if not settings.config_path:
        raise ConfigurationError("No indexing configuration given (--config or SEMINDEX_CONFIG)")
    if not settings.sparql_endpoint:
        raise ConfigurationError("No SPARQL endpoint given (--sparql or SPARQL_ENDPOINT)")

    timeout = (settings.connect_timeout, settings.read_timeout)
    return IndexOrchestrator(
        config=load_indexing_config(settings.config_path),
        es=build_elasticsearch(settings),
        sparql=SparqlClient(settings.sparql_endpoint, settings.sparql_username,
                            settings.sparql_password, timeout=timeout),
        renderer=TemplateRenderer(settings.ext_folder),
        web_proxy=WebProxy(settings.es_host, settings.es_username, settings.es_password,
                           read_timeout=settings.read_timeout, connect_timeout=settings.connect_timeout,
                           verify=settings.es_verify_certs),
    )


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="semindex",
        description="Index graph entities into Elasticsearch",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument("--config", "-c", help="Indexing configuration YAML (default: SEMINDEX_CONFIG)")
    parser.add_argument("--ext-folder", "-e", help="External template folder (default: SEMINDEX_EXT_FOLDER)")
    parser.add_argument("--sparql", help="SPARQL endpoint URL (default: SPARQL_ENDPOINT)")
    parser.add_argument("--es-host", help="Elasticsearch URL (default: ES_HOST)")
    parser.add_argument("--log-level", help="Logging level (default: SEMINDEX_LOG_LEVEL or INFO)")
    parser.add_argument("--json", "-j", action="store_true", help="JSON output")

    subparsers = parser.add_subparsers(dest="command", help="Command")
    subparsers.required = True

    p_all = subparsers.add_parser("index-all", help="Index every configured entity type")
    p_all.add_argument("--reset", "-r", action="store_true", help="Clear each index once before indexing")

    p_one = subparsers.add_parser("index-one", help="Index a single entity")
    p_one.add_argument("id", help="Entity identifier (URI)")
    p_one.add_argument("entity", help="Entity configuration name (case-insensitive)")

    return parser.parse_args(argv)


def settings_from_args(args: argparse.Namespace) -> Settings:
    settings = Settings.from_env()
    overrides = {
        "config_path": args.config,
        "ext_folder": args.ext_folder,
        "sparql_endpoint": args.sparql,
        "es_host": args.es_host,
        "log_level": args.log_level.upper() if args.log_level else None,
    }
    return replace(settings, **{k: v for k, v in overrides.items() if v})


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    settings = settings_from_args(args)
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        orchestrator = build_orchestrator(settings)
        if args.command == "index-all":
            result = {"written": orchestrator.index_all(reset=args.reset)}
        else:
            outcome = orchestrator.index_one(args.id, args.entity)
            result = {"written": outcome.attempted if outcome else 0}
    except SemIndexError as e:
        logger.error(str(e))
        if args.json:
            print(json.dumps({"error": str(e)}))
        return 1

    if args.json:
        print(json.dumps(result, indent=2))
    else:
        logger.info(f"Done: {result['written']}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
