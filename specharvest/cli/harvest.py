"""CLI for running and maintaining the incremental catalog harvest.

Usage::

    # Harvest every category in config/categories.yaml
    python -m specharvest.cli.harvest run

    # Harvest two brands only, with JSON logs for the scheduler
    python -m specharvest.cli.harvest run --category apple --category google --json-logs

    # Show ledger size per category and the budget settings
    python -m specharvest.cli.harvest status

    # Rebuild seen_products.json from the scraped_products/ output
    python -m specharvest.cli.harvest rebuild-ledger

    # Bulk-load the JSON output into SQLite
    python -m specharvest.cli.harvest load-sql

Exit codes: ``0`` for a clean run, ``1`` for any fatal stop (block page,
budget exhausted, configuration error) or a failed maintenance command.
"""

from __future__ import annotations

import argparse
import asyncio
import sys

import httpx
from pydantic import ValidationError

from specharvest.config.settings import Settings
from specharvest.interfaces.sink import IItemSink
from specharvest.interfaces.transport import ITransport
from specharvest.models.run import RunSummary
from specharvest.utils.errors import ConfigurationError, HarvestError
from specharvest.utils.logging import configure_logging, run_context


# ---------------------------------------------------------------------------
# Builders
# ---------------------------------------------------------------------------


def _build_transport(settings: Settings, http_client: httpx.AsyncClient | None = None) -> ITransport:
    """Return the transport selected by ``settings.transport_backend``."""
    from specharvest.providers.transport import DirectHttpTransport, ScraperAPITransport

    if settings.transport_backend == "direct":
        return DirectHttpTransport(
            http_client=http_client,
            timeout=settings.request_timeout_seconds,
        )
    return ScraperAPITransport(
        api_key=settings.scraperapi_key,
        endpoint=settings.scraperapi_endpoint,
        http_client=http_client,
        timeout=settings.request_timeout_seconds,
    )


def _build_sink(settings: Settings) -> IItemSink:
    from specharvest.providers.sink import JsonFileSink, SQLiteItemSink

    if settings.sink_backend == "sqlite":
        return SQLiteItemSink(db_path=settings.sqlite_db_path)
    return JsonFileSink(output_dir=settings.output_dir)


def build_orchestrator(settings: Settings, transport: ITransport, sink: IItemSink):
    """Wire every engine component from *settings* around *transport* and *sink*."""
    from specharvest.pipeline.orchestrator import RunOrchestrator
    from specharvest.providers.extractor import GSMArenaExtractor
    from specharvest.providers.ledger import JsonLedgerStore
    from specharvest.services import (
        BudgetGovernor,
        GovernedFetcher,
        ItemPipeline,
        Ledger,
        Paginator,
    )
    from specharvest.utils.pacing import RequestPacer
    from specharvest.utils.snapshots import HtmlSnapshotWriter

    ledger = Ledger(JsonLedgerStore(settings.ledger_path))
    governor = BudgetGovernor(max_credits=settings.max_credits)
    pacer = RequestPacer(settings.min_delay_seconds, settings.max_delay_seconds)
    snapshots = HtmlSnapshotWriter(settings.snapshot_dir) if settings.save_html else None
    fetcher = GovernedFetcher(transport=transport, governor=governor, pacer=pacer, snapshots=snapshots)
    extractor = GSMArenaExtractor()

    paginator = Paginator(
        fetcher=fetcher,
        extractor=extractor,
        ledger=ledger,
        saturation_page_limit=settings.saturation_page_limit,
    )
    pipeline = ItemPipeline(
        fetcher=fetcher,
        extractor=extractor,
        ledger=ledger,
        sink=sink,
        min_launch_year=settings.min_launch_year,
    )
    return RunOrchestrator(
        ledger=ledger,
        governor=governor,
        paginator=paginator,
        pipeline=pipeline,
        out_of_scope_streak_limit=settings.out_of_scope_streak_limit,
    )


# ---------------------------------------------------------------------------
# Subcommand handlers
# ---------------------------------------------------------------------------


async def _handle_run(args: argparse.Namespace, settings: Settings) -> int:
    """Harvest the configured categories once."""
    from specharvest.config.loader import load_categories

    try:
        categories = load_categories(args.categories_file or settings.categories_path, only=args.category)
        transport = _build_transport(settings)
    except ConfigurationError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    sink = _build_sink(settings)
    try:
        orchestrator = build_orchestrator(settings, transport, sink)
        with run_context():
            summary = await orchestrator.run(categories)
    except ConfigurationError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    finally:
        await transport.aclose()
        await sink.close()

    _print_summary(summary)
    return summary.exit_code


def _handle_status(settings: Settings) -> int:
    """Show ledger size per category and the budget settings."""
    from specharvest.providers.ledger import JsonLedgerStore
    from specharvest.services import Ledger

    ledger = Ledger(JsonLedgerStore(settings.ledger_path))
    ledger.load()
    counts = ledger.count_by_category()

    print(f"Ledger: {settings.ledger_path}")
    print("=" * 40)
    print(f"{'Category':<24} {'Items':>10}")
    print("-" * 40)
    for category, count in sorted(counts.items()):
        print(f"{category:<24} {count:>10,}")
    print("-" * 40)
    print(f"{'TOTAL':<24} {len(ledger):>10,}")
    print()
    print(f"Transport:       {settings.transport_backend}")
    print(f"Credit ceiling:  {settings.max_credits}")
    print(f"Delay:           {settings.min_delay_seconds}-{settings.max_delay_seconds}s")
    print(f"Min launch year: {settings.min_launch_year}")
    return 0


def _handle_rebuild_ledger(args: argparse.Namespace, settings: Settings) -> int:
    """Rebuild the ledger file from the JSON output directory."""
    from specharvest.providers.ledger import JsonLedgerStore
    from specharvest.services import rebuild_ledger

    output_dir = args.output_dir or settings.output_dir
    try:
        report = rebuild_ledger(output_dir, JsonLedgerStore(settings.ledger_path))
    except HarvestError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    print(f"Read {report.files_read} file(s) from {output_dir}")
    print(f"Ledger now holds {report.entries:,} item(s)")
    if report.skipped_documents:
        print(f"Skipped {report.skipped_documents} document(s) without an id")
    for name in report.unreadable_files:
        print(f"  unreadable: {name}")
    return 0


async def _handle_load_sql(args: argparse.Namespace, settings: Settings) -> int:
    """Bulk-load every JSON output file into the SQLite item table."""
    from specharvest.providers.sink import SQLiteItemSink
    from specharvest.services import load_output_dir

    output_dir = args.output_dir or settings.output_dir
    sink = SQLiteItemSink(db_path=args.db_path or settings.sqlite_db_path)
    try:
        results = await load_output_dir(output_dir, sink)
    except HarvestError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    finally:
        await sink.close()

    print(f"{'File':<28} {'Loaded':>8} {'Failed':>8}")
    print("-" * 46)
    for r in results:
        note = f"  ({r.error})" if r.error else ""
        print(f"{r.file_name:<28} {r.loaded:>8,} {r.failed:>8,}{note}")
    print("-" * 46)
    print(f"{'TOTAL':<28} {sum(r.loaded for r in results):>8,} {sum(r.failed for r in results):>8,}")
    return 1 if any(r.error for r in results) else 0


def _print_summary(summary: RunSummary) -> None:
    print()
    print(f"Run {summary.status.value}: {summary.accepted} new item(s)")
    print("=" * 72)
    print(f"{'Category':<16} {'Pages':>6} {'New':>6} {'Saved':>6} {'Seen':>6} {'Old':>6} {'Failed':>7}  Stop")
    print("-" * 72)
    for c in summary.categories:
        stop = c.stop_reason or ("error" if c.error else "-")
        print(
            f"{c.category:<16} {c.pages_fetched:>6} {c.new_references:>6} {c.accepted:>6} "
            f"{c.already_seen:>6} {c.out_of_scope:>6} {c.failed:>7}  {stop}"
        )
    print("-" * 72)
    print(f"Credits used: {summary.credits_used}/{summary.max_credits}")
    print(f"Ledger size:  {summary.ledger_size:,}")
    if summary.fatal_error:
        print(f"Stopped:      {summary.fatal_error}")


# ---------------------------------------------------------------------------
# Argument parser
# ---------------------------------------------------------------------------


def _build_parser() -> argparse.ArgumentParser:
    """Build the argparse parser for the harvest CLI."""
    parser = argparse.ArgumentParser(
        prog="specharvest",
        description="Incremental, budget-governed catalog harvester.",
    )
    subparsers = parser.add_subparsers(dest="command", help="harvest commands")

    # -- run --
    run_parser = subparsers.add_parser("run", help="Harvest new items from every category")
    run_parser.add_argument(
        "--category",
        action="append",
        default=None,
        help="Only harvest this category (repeatable)",
    )
    run_parser.add_argument(
        "--categories-file",
        default=None,
        help="Category YAML file (default: CATEGORIES_PATH setting)",
    )
    run_parser.add_argument(
        "--json-logs",
        action="store_true",
        help="Emit structured JSON logs",
    )

    # -- status --
    subparsers.add_parser("status", help="Show ledger size per category")

    # -- rebuild-ledger --
    rebuild_parser = subparsers.add_parser(
        "rebuild-ledger", help="Rebuild the ledger from the JSON output directory"
    )
    rebuild_parser.add_argument("--output-dir", default=None, help="JSON output directory")

    # -- load-sql --
    load_parser = subparsers.add_parser("load-sql", help="Load the JSON output into SQLite")
    load_parser.add_argument("--output-dir", default=None, help="JSON output directory")
    load_parser.add_argument("--db-path", default=None, help="SQLite database file")

    return parser


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def main(argv: list[str] | None = None) -> int:
    """CLI entry point.  Returns the process exit code."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 1

    try:
        settings = Settings()
    except ValidationError as exc:
        print(f"Error: invalid settings: {exc}", file=sys.stderr)
        return 1
    configure_logging(settings.log_level, json_output=getattr(args, "json_logs", False))

    if args.command == "run":
        return asyncio.run(_handle_run(args, settings))
    if args.command == "status":
        return _handle_status(settings)
    if args.command == "rebuild-ledger":
        return _handle_rebuild_ledger(args, settings)
    if args.command == "load-sql":
        return asyncio.run(_handle_load_sql(args, settings))

    parser.print_help()
    return 1


if __name__ == "__main__":
    sys.exit(main())
