from __future__ import annotations

import argparse
import asyncio
import json
import sys
from collections.abc import Iterable
from pathlib import Path
from typing import Any, TextIO

import structlog
from pydantic import ValidationError

from torrentscout.application.use_cases import TorrentSearchEngine
from torrentscout.domain.entities import (
    ApplicationError,
    Category,
    ConnectionCheckResult,
    ConnectionEstablished,
    ConnectionFailed,
    Err,
    InvalidApiKey,
    SourceOutcome,
    TorrentRecord,
    UnexpectedError,
    UnexpectedResponse,
    Unsafe,
)
from torrentscout.domain.sources import SourceError
from torrentscout.infrastructure.config import AppConfig, load_config
from torrentscout.infrastructure.http import HttpxFetcher
from torrentscout.infrastructure.logging.setup import configure_logging, stop_logging
from torrentscout.infrastructure.sources import SourceRegistry
from torrentscout.infrastructure.torznab import TorznabSource, check_connection
from torrentscout.sources import builtin_sources

log = structlog.get_logger(__name__)

EXIT_OK = 0
EXIT_ERROR = 1


def _parse_args(argv: Iterable[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="torrentscout")

    # Config wiring flags (no business logic)
    parser.add_argument(
        "--config",
        default=None,
        help="Path to YAML config file.",
    )
    parser.add_argument(
        "--dotenv",
        default=None,
        help="Path to .env file.",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Override log level.",
    )
    parser.add_argument(
        "--log-format",
        default=None,
        choices=["json", "console"],
        help="Override log format.",
    )

    commands = parser.add_subparsers(dest="command", required=True)

    search = commands.add_parser("search", help="Search all enabled sources.")
    search.add_argument("query", help="Search terms.")
    search.add_argument(
        "--category",
        default=Category.ALL.value,
        choices=[c.value for c in Category],
        help="Restrict the search to sources serving this category.",
    )
    search.add_argument(
        "--source",
        dest="sources",
        action="append",
        default=None,
        metavar="ID",
        help="Source id to search (repeatable). Overrides enabled_sources.",
    )
    search.add_argument(
        "--max-results",
        type=int,
        default=None,
        help="Stop once this many results were collected.",
    )
    search.add_argument(
        "--json",
        action="store_true",
        help="Print results as a JSON array.",
    )

    commands.add_parser("sources", help="List known sources.")

    check = commands.add_parser(
        "check-indexer", help="Check the connection to a Torznab indexer."
    )
    check.add_argument(
        "indexer_id",
        nargs="?",
        default=None,
        help="Id of a configured Torznab indexer.",
    )
    check.add_argument("--url", default=None, help="Indexer URL (ad-hoc check).")
    check.add_argument("--api-key", default="", help="Indexer API key.")

    return parser.parse_args(argv)


# ----------------------------------------------------------------------
# Rendering
# ----------------------------------------------------------------------


def record_to_dict(record: TorrentRecord) -> dict[str, Any]:
    return {
        "name": record.name,
        "size": record.size,
        "seeders": record.seeders,
        "peers": record.peers,
        "upload_date": record.upload_date,
        "source_id": record.source_id,
        "source_name": record.source_name,
        "category": record.category.value if record.category else None,
        "info_hash": record.info_hash(),
        "magnet_uri": record.magnet_uri(),
        "description_page_url": record.description_page_url or None,
    }


def describe_outcome(outcome: SourceOutcome) -> str:
    if isinstance(outcome, Err):
        return f"[failed] {outcome.source.name}: {outcome.error}"
    return f"[ok] {outcome.source.name}: {len(outcome.records)} results"


def describe_connection(result: ConnectionCheckResult) -> str:
    if isinstance(result, ConnectionEstablished):
        return "Connection established"
    if isinstance(result, ConnectionFailed):
        return "Could not connect to the indexer"
    if isinstance(result, InvalidApiKey):
        return "Invalid API key"
    if isinstance(result, ApplicationError):
        return f"Indexer reported application error {result.code}"
    if isinstance(result, UnexpectedResponse):
        if result.code is None:
            return "Unexpected response from the indexer"
        return f"Unexpected response from the indexer (code {result.code})"
    if isinstance(result, UnexpectedError):
        return f"Unexpected error: {result.detail}" if result.detail else "Unexpected error"
    return type(result).__name__


def _print_records(records: list[TorrentRecord], out: TextIO) -> None:
    ordered = sorted(records, key=lambda r: (r.seeders, r.peers), reverse=True)
    for record in ordered:
        category = record.category.value if record.category else "?"
        out.write(
            f"{record.seeders:>6} {record.peers:>6}  {record.size:>10}  "
            f"{category:<7} {record.name}  [{record.source_name}]\n"
        )


# ----------------------------------------------------------------------
# Commands
# ----------------------------------------------------------------------


def build_registry(config: AppConfig) -> SourceRegistry:
    return SourceRegistry(
        builtins=builtin_sources(),
        torznab_configs=config.torznab_configs(),
    )


def build_fetcher(config: AppConfig) -> HttpxFetcher:
    return HttpxFetcher(
        timeout=config.http_timeout_seconds,
        connect_timeout=config.http_connect_timeout_seconds,
        user_agent=config.http_user_agent,
        follow_redirects=config.http_follow_redirects,
    )


async def run_search(
    args: argparse.Namespace,
    config: AppConfig,
    registry: SourceRegistry,
    fetch: HttpxFetcher,
    out: TextIO,
) -> int:
    enabled_ids = args.sources or config.enabled_sources
    if enabled_ids:
        unknown = [sid for sid in enabled_ids if sid not in registry]
        if unknown:
            log.warning("unknown_source_ids", ids=unknown)

    engine = TorrentSearchEngine(
        registry,
        fetch,
        max_results=args.max_results or config.max_results,
    )
    try:
        async for outcome in engine.search(
            args.query, Category.from_name(args.category), enabled_ids
        ):
            if not args.json:
                out.write(describe_outcome(outcome) + "\n")
        records = engine.results
    finally:
        await engine.aclose()

    if args.json:
        json.dump([record_to_dict(r) for r in records], out, indent=2)
        out.write("\n")
    else:
        out.write(f"\n{len(records)} results for {args.query!r}\n")
        _print_records(records, out)
    return EXIT_OK


def run_sources(registry: SourceRegistry, out: TextIO) -> int:
    for info in registry.descriptors():
        flags = []
        if info.enabled_by_default:
            flags.append("default")
        if isinstance(info.safety, Unsafe):
            flags.append(f"unsafe: {info.safety.reason}")
        suffix = f"  ({'; '.join(flags)})" if flags else ""
        out.write(
            f"{info.id:<22} {info.name:<20} {info.specialized_category.value:<7} "
            f"{info.kind.value:<8} {info.url}{suffix}\n"
        )
    return EXIT_OK


async def run_check_indexer(
    args: argparse.Namespace,
    registry: SourceRegistry,
    fetch: HttpxFetcher,
    out: TextIO,
) -> int:
    if args.url:
        result = await check_connection(fetch, url=args.url, api_key=args.api_key)
    elif args.indexer_id:
        source = registry.get(args.indexer_id)
        if not isinstance(source, TorznabSource):
            raise SourceError(f"{args.indexer_id!r} is not a Torznab indexer")
        result = await source.check_connection(fetch)
    else:
        raise SourceError("check-indexer needs an indexer id or --url")

    out.write(describe_connection(result) + "\n")
    return EXIT_OK if isinstance(result, ConnectionEstablished) else EXIT_ERROR


async def run(args: argparse.Namespace, config: AppConfig, out: TextIO) -> int:
    registry = build_registry(config)
    if args.command == "sources":
        return run_sources(registry, out)

    async with build_fetcher(config) as fetch:
        if args.command == "search":
            return await run_search(args, config, registry, fetch, out)
        return await run_check_indexer(args, registry, fetch, out)


def start(argv: Iterable[str] | None = None) -> int:
    """
    Process entrypoint.

    Loads config exactly once, configures logging, then dispatches the command.
    """
    if argv is None:
        argv = sys.argv[1:]

    args = _parse_args(argv)

    config_path = Path(args.config) if args.config else None
    dotenv_path = Path(args.dotenv) if args.dotenv else None

    cli_overrides: dict[str, Any] = {}
    if args.log_level:
        cli_overrides["log_level"] = args.log_level
    if args.log_format:
        cli_overrides["log_format"] = args.log_format

    try:
        config = load_config(
            config_path=config_path,
            dotenv_path=dotenv_path,
            cli_overrides=cli_overrides,
        )
    except (FileNotFoundError, ValidationError, ValueError) as exc:
        sys.stderr.write(f"torrentscout: invalid configuration: {exc}\n")
        return EXIT_ERROR

    configure_logging(config)
    try:
        return asyncio.run(run(args, config, sys.stdout))
    except (SourceError, ValueError) as exc:
        sys.stderr.write(f"torrentscout: {exc}\n")
        return EXIT_ERROR
    finally:
        stop_logging()


if __name__ == "__main__":
    raise SystemExit(start())
