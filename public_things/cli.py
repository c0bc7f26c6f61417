#!/usr/bin/env python3
"""CLI interface for the Public Things API"""
import argparse
import json
import logging
import sys

from .config import ServiceConfig, SUPPORTED_BACKENDS
from .errors import ThingsError
from .logging_setup import configure_logging, new_transaction_id, set_transaction_id
from .relationships import SUPPORTED_RELATIONSHIPS
from .resolver import ThingResolver, validate_uuids
from .store import create_concept_store
from .utils.env_loader import load_dotenv

logger = logging.getLogger(__name__)


def add_store_arguments(parser: argparse.ArgumentParser) -> None:
    """Flags shared by every subcommand that talks to a concept store."""
    parser.add_argument(
        "--backend",
        type=str,
        choices=SUPPORTED_BACKENDS,
        help="Concept store backend (env: THINGS_BACKEND, default: neo4j)"
    )
    parser.add_argument("--neo-url", type=str, help="Neo4j bolt URL (env: NEO_URL)")
    parser.add_argument("--neo-user", type=str, help="Neo4j user (env: NEO_USER)")
    parser.add_argument("--neo-password", type=str, help="Neo4j password (env: NEO_PASSWORD)")
    parser.add_argument("--neo-database", type=str, help="Neo4j database (env: NEO_DATABASE)")
    parser.add_argument("--concepts-api-url", type=str, help="Public concepts API base URL (env: CONCEPTS_API_URL)")
    parser.add_argument("--env", type=str, help="Environment; 'test' switches apiUrl hosts (env: APP_ENV)")
    parser.add_argument("--http-timeout", type=float, help="Upstream HTTP timeout in seconds (env: HTTP_TIMEOUT)")
    parser.add_argument("--log-level", type=str, help="Logging level (env: LOG_LEVEL, default: info)")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="public-things",
        description="Public Things API - concepts and their relationships",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  public-things serve --backend neo4j --neo-url bolt://localhost:7687
  public-things serve --backend concepts-api --concepts-api-url http://localhost:8081
  public-things lookup 2cca9e2a-2248-3e48-abc1-93d718b91bbe --relationship broader
        """
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    serve = subparsers.add_parser("serve", help="Run the HTTP API")
    add_store_arguments(serve)
    serve.add_argument("--host", type=str, help="Bind host (default: 0.0.0.0)")
    serve.add_argument("--port", type=int, help="Port to listen on (env: APP_PORT, default: 8080)")
    serve.add_argument(
        "--cache-duration",
        type=str,
        help="Cache-Control max-age for successful responses, e.g. 30s or 1h (env: CACHE_DURATION)"
    )

    lookup = subparsers.add_parser("lookup", help="Resolve things and print them as JSON")
    add_store_arguments(lookup)
    lookup.add_argument("uuids", nargs="+", help="Thing uuids")
    lookup.add_argument(
        "--relationship",
        action="append",
        default=[],
        choices=list(SUPPORTED_RELATIONSHIPS),
        help="Relationship to include (repeatable)"
    )
    lookup.add_argument("-o", "--output", type=str, default="-", help="Output JSON file (default: stdout)")

    return parser


def config_from_args(args: argparse.Namespace) -> ServiceConfig:
    """Environment settings overridden by any flags given on the command line."""
    return ServiceConfig.from_env().override(
        backend=args.backend,
        neo_url=args.neo_url,
        neo_user=args.neo_user,
        neo_password=args.neo_password,
        neo_database=args.neo_database,
        concepts_api_url=args.concepts_api_url,
        env=args.env,
        http_timeout=args.http_timeout,
        log_level=args.log_level,
        host=getattr(args, "host", None),
        port=getattr(args, "port", None),
        cache_duration=getattr(args, "cache_duration", None),
    )


def serve(config: ServiceConfig) -> int:
    from .api import ThingsAPIServer

    server = ThingsAPIServer(config)
    server.run()
    return 0


def lookup(config: ServiceConfig, args: argparse.Namespace) -> int:
    """Resolve uuids the way the batch endpoint does and print the result."""
    validate_uuids(*args.uuids)

    transaction_id = new_transaction_id()
    set_transaction_id(transaction_id)

    store = create_concept_store(
        config.backend,
        env=config.env,
        uri=config.neo_url,
        user=config.neo_user,
        password=config.neo_password,
        database=config.neo_database,
        base_url=config.concepts_api_url,
        timeout=config.http_timeout,
    )
    with store:
        things = ThingResolver(store).resolve_many(args.uuids, args.relationship, transaction_id)

    missing = [uuid for uuid in args.uuids if uuid not in things]
    if missing:
        logger.warning(f"No thing found for: {', '.join(missing)}")

    payload = json.dumps(
        {"things": {uuid: concept.to_dict() for uuid, concept in things.items()}},
        indent=2,
        ensure_ascii=False,
    )
    if args.output == "-":
        print(payload)
    else:
        with open(args.output, "w", encoding="utf-8") as f:
            f.write(payload + "\n")
        print(f"Wrote {len(things)} thing(s) to {args.output}", file=sys.stderr)
    return 0


def main(argv=None) -> int:
    # Load local .env if present (keeps credentials out of code)
    load_dotenv(".env", override=False)

    args = build_parser().parse_args(argv)
    try:
        config = config_from_args(args)
        config.validate()
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    configure_logging(config.level)

    try:
        if args.command == "serve":
            return serve(config)
        return lookup(config, args)
    except ThingsError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
