# ruff: noqa: T201

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from signal import SIGINT, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from syncstore.app import (
    batch_status,
    build_pricing_engine,
    export_pricing_configuration,
    import_batch_report,
    import_pricing_configuration,
    populate_master_catalog,
    queue_statistics,
    validate_catalog,
)
from syncstore.config import configure_logging
from syncstore.config.sync import DEFAULT_POPULATION_PLATFORMS
from syncstore.domain.catalog_population import SuccessPolicy
from syncstore.domain.data_quality import render_markdown
from syncstore.domain.pricing import format_idr

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

    from syncstore.domain.catalog_population import PopulationResult
    from syncstore.domain.job_status import BatchJobStatus, QueueStatistics
    from syncstore.domain.pricing import ConfigurationCheck, PricingComparison, PricingResult

log = logging.getLogger(__name__)


def _positive_int(value: str) -> int:
    number = int(value)
    if number <= 0:
        raise argparse.ArgumentTypeError(f"must be greater than zero, got {value}")
    return number


def _positive_float(value: str) -> float:
    number = float(value)
    if number <= 0:
        raise argparse.ArgumentTypeError(f"must be greater than zero, got {value}")
    return number


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Reconcile marketplace imports into a catalog")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    populate = subparsers.add_parser("populate", help="Populate the master catalog from imports")
    populate.add_argument(
        "--organization-id",
        type=str,
        help="Organization owning the imported products (defaults to config)",
    )
    populate.add_argument(
        "--platform",
        dest="platforms",
        action="append",
        choices=DEFAULT_POPULATION_PLATFORMS,
        help="Source platform to read; repeat for several (defaults to all)",
    )
    populate.add_argument(
        "--batch-size",
        type=_positive_int,
        help="Number of records per transaction (defaults to config)",
    )
    populate.add_argument(
        "--skip-existing",
        action="store_true",
        help="Skip records whose listing is already mapped",
    )
    populate.add_argument(
        "--dry-run",
        action="store_true",
        help="Transform and validate without writing anything",
    )
    populate.add_argument(
        "--success-policy",
        choices=[policy.value for policy in SuccessPolicy],
        default=SuccessPolicy.READ_SUCCEEDED.value,
        help="How the run decides success (default: %(default)s)",
    )
    populate.add_argument(
        "--workers",
        type=_positive_int,
        default=1,
        help="Platforms processed in parallel (default: %(default)s)",
    )

    report = subparsers.add_parser("report", help="Show the report of an import batch")
    report.add_argument("batch_id", type=str, help="Import batch id")

    validate = subparsers.add_parser("validate", help="Run the data quality validation")
    validate.add_argument(
        "--output",
        type=Path,
        help="Write the Markdown report to this file instead of stdout",
    )

    price = subparsers.add_parser("price", help="Calculate platform prices for a base price")
    price.add_argument("base_price", type=_positive_float, help="Base price in IDR")
    price.add_argument("--platform", type=str, help="Only this platform (defaults to all active)")
    price.add_argument("--cost", type=_positive_float, help="Cost price for margin calculation")

    optimal = subparsers.add_parser(
        "optimal-price",
        help="Base price reaching a target margin on one platform",
    )
    optimal.add_argument("--cost", type=_positive_float, required=True, help="Cost price in IDR")
    optimal.add_argument(
        "--margin",
        type=float,
        required=True,
        help="Target profit margin in percent",
    )
    optimal.add_argument("--platform", type=str, required=True, help="Target platform")

    compare = subparsers.add_parser("compare-prices", help="Compare final prices across platforms")
    compare.add_argument("base_price", type=_positive_float, help="Base price in IDR")
    compare.add_argument("--cost", type=_positive_float, help="Cost price for margin calculation")

    pricing = subparsers.add_parser("pricing", help="Platform fee configuration")
    pricing_sub = pricing.add_subparsers(dest="pricing_command", required=True)
    pricing_export = pricing_sub.add_parser("export", help="Print or write the fee table")
    pricing_export.add_argument("--output", type=Path, help="Write the JSON to this file")
    pricing_import = pricing_sub.add_parser("import", help="Validate and install a fee table")
    pricing_import.add_argument("source", type=Path, help="JSON fee table to import")
    pricing_import.add_argument(
        "--destination",
        type=Path,
        help="Where to install it (defaults to SYNCSTORE_PRICING_CONFIG)",
    )
    pricing_sub.add_parser("check", help="Validate the active fee table")

    status = subparsers.add_parser("batch-status", help="Show progress of an import batch")
    status.add_argument("batch_id", type=str, help="Import batch id")

    subparsers.add_parser("queue-stats", help="Show job queue counters")

    return parser.parse_args(list(argv))


def _print_population(result: PopulationResult) -> None:
    mode = "dry run" if result.dry_run else "import"
    print(f"Batch {result.import_batch_id} ({mode}): {'success' if result.success else 'failed'}")
    print(
        f"  processed={result.total_processed} succeeded={result.success_count} "
        f"failed={result.error_count} skipped={result.skipped_products}"
    )
    for platform, summary in result.summary.items():
        print(
            f"  {platform}: {summary.succeeded}/{summary.processed} products, "
            f"avg base {format_idr(summary.average_base_price)}, "
            f"avg SEO quality {summary.average_seo_quality:.1f}"
        )
    for error in result.errors[:10]:
        print(f"  error [{error.platform}] {error.product_id or '-'}: {error.message}")


def _print_price(result: PricingResult) -> None:
    margin = f", margin {result.profit_margin:.1f}%" if result.profit_margin is not None else ""
    print(
        f"{result.platform}: {format_idr(result.final_price)} "
        f"(platform fee {format_idr(result.platform_fee)}, "
        f"payment fee {format_idr(result.payment_fee)}, "
        f"fixed fee {format_idr(result.fixed_fee)}{margin})"
    )


def _print_comparison(comparison: PricingComparison) -> None:
    for entry in comparison.platforms:
        print(
            f"{entry.platform}: {format_idr(entry.final_price)} "
            f"(fees {format_idr(entry.total_fees)}, "
            f"advantage {entry.competitive_advantage:.1f}%)"
        )
    print(f"Lowest: {comparison.lowest_price[0]} {format_idr(comparison.lowest_price[1])}")
    print(f"Highest: {comparison.highest_price[0]} {format_idr(comparison.highest_price[1])}")
    print(f"Average: {format_idr(comparison.average_price)}")


def _print_check(check: ConfigurationCheck) -> None:
    print("Configuration valid" if check.is_valid else "Configuration invalid")
    for error in check.errors:
        print(f"  error: {error}")
    for warning in check.warnings:
        print(f"  warning: {warning}")


def _print_status(status: BatchJobStatus) -> None:
    print(
        f"Batch {status.batch_id}: {status.status} {status.progress_percentage}% "
        f"(source: {status.source})"
    )
    print(
        f"  total={status.total_jobs} completed={status.completed} failed={status.failed} "
        f"in_progress={status.in_progress} queued={status.queued}"
    )
    if status.estimated_completion_time:
        print(f"  estimated completion: {status.estimated_completion_time}")
    if status.duration:
        print(f"  duration: {status.duration}")
    if status.error_summary is not None:
        for code, count in sorted(status.error_summary.error_types.items()):
            print(f"  {code}: {count}")


def _print_queue(stats: QueueStatistics) -> None:
    print(
        f"waiting={stats.waiting} active={stats.active} completed={stats.completed} "
        f"failed={stats.failed} delayed={stats.delayed} total={stats.total}"
    )


def _run(args: argparse.Namespace) -> int:  # noqa: C901, PLR0912
    if args.command == "populate":
        result = populate_master_catalog(
            organization_id=args.organization_id,
            platforms=tuple(args.platforms) if args.platforms else None,
            batch_size=args.batch_size,
            skip_existing=args.skip_existing,
            dry_run=args.dry_run,
            success_policy=SuccessPolicy(args.success_policy),
            max_platform_workers=args.workers,
        )
        _print_population(result)
        return 0 if result.success else 1
    if args.command == "report":
        print(import_batch_report(args.batch_id))
    elif args.command == "validate":
        markdown = render_markdown(validate_catalog())
        if args.output is not None:
            args.output.write_text(markdown, encoding="utf-8")
            log.info("Validation report written to %s", args.output)
        else:
            print(markdown, end="")
    elif args.command == "price":
        engine = build_pricing_engine()
        if args.platform:
            _print_price(engine.calculate_platform_price(args.base_price, args.platform, args.cost))
        else:
            bulk = engine.calculate_all_platform_prices(args.base_price, args.cost)
            for price_result in bulk.platform_results:
                _print_price(price_result)
    elif args.command == "optimal-price":
        engine = build_pricing_engine()
        base = engine.calculate_optimal_base_price(args.cost, args.margin, args.platform)
        print(f"{args.platform}: base price {format_idr(base)} for {args.margin:g}% margin")
    elif args.command == "compare-prices":
        comparison = build_pricing_engine().compare_platform_pricing(args.base_price, args.cost)
        _print_comparison(comparison)
    elif args.command == "pricing":
        if args.pricing_command == "export":
            payload = export_pricing_configuration(args.output)
            if args.output is None:
                print(payload)
        elif args.pricing_command == "import":
            engine = import_pricing_configuration(args.source, args.destination)
            _print_check(engine.validate_configuration())
        else:
            check = build_pricing_engine().validate_configuration()
            _print_check(check)
            return 0 if check.is_valid else 1
    elif args.command == "batch-status":
        status = batch_status(args.batch_id)
        if status is None:
            print(f"Batch not found: {args.batch_id}")
            return 1
        _print_status(status)
    elif args.command == "queue-stats":
        _print_queue(queue_statistics())
    else:
        raise ValueError(f"Unsupported command: {args.command}")
    return 0


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    configure_logging()
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    try:
        parsed_args = _parse_args(args_list)
    except ValueError:
        log.exception("CLI validation error")
        sys.exit(2)

    if parsed_args.verbose:
        configure_logging(level=logging.DEBUG, force=True)

    try:
        exit_code = _run(parsed_args)
    except Exception:
        log.exception("Fatal error during %s", parsed_args.command)
        sys.exit(1)
    if exit_code:
        sys.exit(exit_code)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


def run() -> None:
    load_dotenv()
    signal(SIGINT, sigint_handler)
    main()


if __name__ == "__main__":
    run()
