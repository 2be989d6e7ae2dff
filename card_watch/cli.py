"""Command-line interface for card-watch.

Examples
--------
    card-watch sync
    card-watch report --view action-required --sort urgency --format csv
    card-watch summary --input sample.json --now 2026-11-15
    card-watch client-status --requiring-action
    card-watch sample --count 50 --seed 42 --output sample.json
"""

import argparse
import json
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from card_watch.analysis import (
    ActionRequiredPolicy,
    ClientStatusPolicy,
    analyze_customers,
    filter_by_client_status,
    requiring_action,
    summarize_client_status,
)
from card_watch.clover.client import MultiMerchantClient
from card_watch.clover.schemas import parse_customer, unwrap_elements
from card_watch.config import CardWatchConfig, CloverMerchantConfig, missing_merchant_variables
from card_watch.exceptions import CardWatchError, ConfigurationError, RecordValidationError
from card_watch.generators import CloverCustomerGenerator
from card_watch.logging import setup_logging
from card_watch.models import ClientStatusTag, Customer, MerchantCurrency
from card_watch.monitor import ExpirationMonitor
from card_watch.reports import (
    EXPORT_COLUMNS,
    CustomerView,
    SortOrder,
    build_worklist,
    export_row,
    follow_up_rows,
    view_counts,
)
from card_watch.sinks import ConsoleSink, CsvFileSink, JsonFileSink
from card_watch.sinks.serialization import dataclass_to_dict
from card_watch.store import CustomerStore, PostgresCustomerRepository
from card_watch.sync import SyncService

logger = logging.getLogger(__name__)

REPORT_TABLE_FIELDS = ["display_name", "currency", "phone", "card_status", "card_number", "customer_age"]


def parse_now(value: str | None) -> datetime:
    """Reference instant from ``--now``; naive values are taken as UTC."""
    if not value:
        return datetime.now(timezone.utc)
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError as e:
        raise ConfigurationError(f"Invalid --now value: {value!r}") from e
    return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)


def customers_from_payload(payload: Any) -> list[Customer]:
    """Domain customers from a ``{"USD": page, "CAD": page}`` sample document.

    Invalid records are logged and skipped.

    Raises
    ------
    ConfigurationError
        If the document is not keyed by known merchant currencies or a
        page is not a list of customers.
    """
    if not isinstance(payload, dict):
        raise ConfigurationError("Input must be a JSON object keyed by merchant currency")

    customers = []
    for currency_code, page in payload.items():
        try:
            currency = MerchantCurrency(currency_code)
        except ValueError as e:
            raise ConfigurationError(f"Unknown merchant currency in input: {currency_code!r}") from e
        records = unwrap_elements(page)
        if not isinstance(records, list):
            raise ConfigurationError(f"Input page for {currency.value} is not a list of customers")
        for raw in records:
            try:
                customers.append(parse_customer(raw).to_domain(currency))
            except RecordValidationError as e:
                logger.warning("Skipping invalid %s customer %s: %s", currency.value, e.customer_id, e)
    return customers


def read_input_file(path: str) -> CustomerStore:
    """Load a sample document into an in-memory store, one merchant at a time."""
    try:
        payload = json.loads(Path(path).read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        raise ConfigurationError(f"Cannot read input file {path}: {e}") from e

    by_currency: dict[MerchantCurrency, list[Customer]] = {}
    for customer in customers_from_payload(payload):
        by_currency.setdefault(customer.merchant_currency, []).append(customer)

    store = CustomerStore()
    for currency, customers in by_currency.items():
        store.replace_merchant_customers(currency, customers)
    return store


def load_customers(args: argparse.Namespace, config: CardWatchConfig) -> list[Customer]:
    """Customers from ``--input`` when given, else from PostgreSQL."""
    if args.input:
        return read_input_file(args.input).load_customers()

    repository = PostgresCustomerRepository(config.postgres.connection_string)
    try:
        return repository.load_customers()
    finally:
        repository.close()


def enabled_merchants(config: CardWatchConfig) -> list[CloverMerchantConfig]:
    """Configured merchants, naming the unset variables when there are none."""
    try:
        return config.enabled_merchants()
    except ConfigurationError:
        missing = missing_merchant_variables()
        if missing:
            logger.error("Unset merchant variables: %s", ", ".join(missing))
        raise


def cmd_sync(args: argparse.Namespace, config: CardWatchConfig) -> int:
    """Pull customers from every enabled merchant into PostgreSQL."""
    client = MultiMerchantClient.from_configs(enabled_merchants(config), config.sync)
    repository = PostgresCustomerRepository(config.postgres.connection_string)
    try:
        repository.initialize_schema()
        result = SyncService(client, repository).sync_all()
        stats = repository.stats()
    finally:
        client.close()
        repository.close()

    for currency, merchant in result.merchants.items():
        logger.info(
            "%s: fetched=%d synced=%d errors=%d", currency, merchant.fetched, merchant.synced, merchant.errors
        )
    logger.info(
        "Stored %d customers (%d with cards, %d with business name)",
        stats.total_customers,
        stats.customers_with_cards,
        stats.customers_with_business_name,
    )
    for issue in result.errors:
        logger.warning("%s %s: %s", issue.currency, issue.customer_id or "-", issue.error)
    return 0 if result.success else 1


def cmd_report(args: argparse.Namespace, config: CardWatchConfig) -> int:
    """Filtered, sorted worklist as a console table, JSON or CSV."""
    now = parse_now(args.now)
    policy = ActionRequiredPolicy(new_customer_cutoff=config.policy.new_customer_cutoff)
    analyzed = analyze_customers(load_customers(args, config), now)
    worklist = build_worklist(
        analyzed,
        now,
        view=CustomerView(args.view),
        search=args.search or "",
        sort=SortOrder(args.sort),
        policy=policy,
    )
    output_dir = Path(args.output_dir) if args.output_dir else config.output.report_output_dir

    if args.format == "json":
        sink = JsonFileSink(output_dir, pretty=config.output.pretty_json)
        sink.write_batch(f"customers-{args.view}-{now.date().isoformat()}", worklist)
    elif args.format == "csv":
        sink = CsvFileSink(output_dir, columns=EXPORT_COLUMNS)
        sink.write_batch(f"customers-{now.date().isoformat()}", [export_row(c) for c in worklist])
    else:
        sink = ConsoleSink(table=True)
        rows = [dataclass_to_dict(row) for row in follow_up_rows(worklist, now, policy)]
        sink.write_batch(args.view, [{k: row[k] for k in REPORT_TABLE_FIELDS} for row in rows])
    sink.close()
    return 0


def cmd_summary(args: argparse.Namespace, config: CardWatchConfig) -> int:
    """Dashboard counts per expiration bucket and per view."""
    now = parse_now(args.now)
    policy = ActionRequiredPolicy(new_customer_cutoff=config.policy.new_customer_cutoff)
    if args.live:
        client = MultiMerchantClient.from_configs(enabled_merchants(config), config.sync)
        try:
            result = ExpirationMonitor.from_client(client).run_analysis(now)
        finally:
            client.close()
    elif args.input:
        result = ExpirationMonitor.from_store(read_input_file(args.input)).run_analysis(now)
    else:
        repository = PostgresCustomerRepository(config.postgres.connection_string)
        try:
            result = ExpirationMonitor.from_store(repository).run_analysis(now)
        finally:
            repository.close()

    counts = view_counts(result.customers, now, policy)
    sink = ConsoleSink(pretty=True)
    sink.write_batch("summary", [result.summary])
    sink.write_batch("views", [{view.value: count for view, count in counts.items()}])
    print(f"\nUrgent customers: {len(result.urgent_customers())}")
    for failure in result.merchant_errors:
        logger.error(
            "%s merchant unavailable (status %s): %s", failure.currency.value, failure.status, failure.error
        )
    return 1 if result.merchant_errors else 0


def cmd_client_status(args: argparse.Namespace, config: CardWatchConfig) -> int:
    """Client status and priority for each customer."""
    now = parse_now(args.now)
    evaluated = ClientStatusPolicy().evaluate_all(analyze_customers(load_customers(args, config), now), now)
    summary = summarize_client_status(evaluated)

    if args.requiring_action:
        evaluated = requiring_action(evaluated)
    if args.status:
        evaluated = filter_by_client_status(evaluated, [ClientStatusTag(s) for s in args.status])

    sink = ConsoleSink(table=True)
    sink.write_batch(
        "client-status",
        [
            {
                "name": item.customer.display_name,
                "currency": item.customer.merchant_currency.value,
                "status": item.client_status.status.value,
                "priority": item.client_status.priority.value,
                "days_old": item.client_status.days_old,
                "action_message": item.client_status.action_message,
            }
            for item in evaluated
        ],
    )
    print(f"\nTotal: {summary.total}  Requiring action: {summary.requires_action}")
    for tag, count in summary.counts.items():
        print(f"  {tag.value}: {count}")
    return 0


def cmd_sample(args: argparse.Namespace, config: CardWatchConfig) -> int:
    """Write a synthetic Clover sample document usable with ``--input``."""
    now = parse_now(args.now)
    seed = args.seed if args.seed is not None else config.seed
    payload = {}
    for offset, currency in enumerate(args.currency):
        locale = "en_CA" if currency == MerchantCurrency.CAD.value else "en_US"
        generator = CloverCustomerGenerator(seed=None if seed is None else seed + offset, locale=locale)
        payload[currency] = generator.generate_page(args.count, now)

    text = json.dumps(payload, indent=2, ensure_ascii=False)
    if args.output:
        Path(args.output).write_text(text, encoding="utf-8")
        logger.info("Wrote %d sample customers per merchant to %s", args.count, args.output)
    else:
        print(text)
    return 0


def _add_source_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--input", type=str, default=None, help="Sample JSON file instead of PostgreSQL")
    parser.add_argument("--now", type=str, default=None, help="Reference instant (ISO-8601, default: now)")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="card-watch",
        description="Track customer card expirations across Clover merchant accounts",
    )
    parser.add_argument("--log-level", type=str, default=None, help="Override LOG_LEVEL")
    parser.add_argument("--log-format", type=str, choices=["standard", "json"], default=None)
    subparsers = parser.add_subparsers(dest="command", required=True)

    sync_parser = subparsers.add_parser("sync", help="Sync customers from Clover into PostgreSQL")
    sync_parser.set_defaults(handler=cmd_sync)

    report_parser = subparsers.add_parser("report", help="Follow-up worklist report")
    _add_source_arguments(report_parser)
    report_parser.add_argument(
        "--view",
        choices=[v.value for v in CustomerView],
        default=CustomerView.ACTION_REQUIRED.value,
        help="Customer category (default: action-required)",
    )
    report_parser.add_argument(
        "--sort",
        choices=[s.value for s in SortOrder],
        default=SortOrder.URGENCY.value,
        help="Sort order (default: urgency)",
    )
    report_parser.add_argument("--search", type=str, default=None, help="Filter by name, business, email or phone")
    report_parser.add_argument("--format", choices=["console", "json", "csv"], default="console")
    report_parser.add_argument("--output-dir", type=str, default=None, help="Override OUTPUT_DIR")
    report_parser.set_defaults(handler=cmd_report)

    summary_parser = subparsers.add_parser("summary", help="Expiration summary statistics")
    _add_source_arguments(summary_parser)
    summary_parser.add_argument("--live", action="store_true", help="Fetch from Clover instead of PostgreSQL")
    summary_parser.set_defaults(handler=cmd_summary)

    status_parser = subparsers.add_parser("client-status", help="Client status per customer")
    _add_source_arguments(status_parser)
    status_parser.add_argument(
        "--status",
        action="append",
        choices=[t.value for t in ClientStatusTag],
        help="Only show these statuses (repeatable)",
    )
    status_parser.add_argument("--requiring-action", action="store_true", help="Only customers requiring action")
    status_parser.set_defaults(handler=cmd_client_status)

    sample_parser = subparsers.add_parser("sample", help="Generate a synthetic Clover sample file")
    sample_parser.add_argument("--count", type=int, default=25, help="Customers per merchant (default: 25)")
    sample_parser.add_argument("--seed", type=int, default=None, help="Random seed (default: SEED)")
    sample_parser.add_argument(
        "--currency",
        action="append",
        choices=[c.value for c in MerchantCurrency],
        default=None,
        help="Merchant currency to generate (repeatable, default: USD and CAD)",
    )
    sample_parser.add_argument("--now", type=str, default=None, help="Reference instant for expiration codes")
    sample_parser.add_argument("--output", type=str, default=None, help="Output file (default: stdout)")
    sample_parser.set_defaults(handler=cmd_sample)

    return parser


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)
    if getattr(args, "currency", "unset") is None:
        args.currency = [c.value for c in MerchantCurrency]

    try:
        config = CardWatchConfig.from_env()
    except ConfigurationError as e:
        setup_logging(args.log_level or "INFO", args.log_format or "standard")
        logger.error("%s", e)
        return 1
    setup_logging(args.log_level or config.log_level, args.log_format or config.log_format)

    try:
        return args.handler(args, config)
    except CardWatchError as e:
        logger.error("%s", e)
        return 1


if __name__ == "__main__":
    sys.exit(main())
