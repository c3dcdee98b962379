"""Main application entry point.

Usage:
    autofee serve --port 8000
    autofee sample
    autofee calculate 2024 2 --electricity 47440 --water 17440 --total-fee 288510
    autofee statement 2024 2

Exit Codes:
    0 - Success
    1 - Failure: error message printed, stored data unchanged
"""

import argparse
import logging
import sys

import uvicorn

from autofee.services import BillingContext, LocalStorage, create_context, open_store
from autofee.services.bills_service import derive_management_cost
from autofee.services.config import load_config
from autofee.services.errors import AutofeeError, ValidationError
from autofee.services.locale_service import format_amount, format_number
from autofee.services.logging import configure_logging
from autofee.services.parsers import parse_period, parse_year_month
from autofee.services.sample_data import get_sample_bill_data, insert_sample_data
from autofee.services.statement_service import (
    render_period_text,
    render_summary_text,
    render_text,
)

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="autofee", description="Condo utility-fee billing")
    sub = parser.add_subparsers(dest="command", required=True)

    serve = sub.add_parser("serve", help="Run the HTTP API")
    serve.add_argument("--host", default=None, help="Host to bind to")
    serve.add_argument("--port", type=int, default=None, help="Port to bind to")

    sub.add_parser("units", help="List units")

    add_unit = sub.add_parser("add-unit", help="Register a unit")
    add_unit.add_argument("unit_id")
    add_unit.add_argument("name")
    add_unit.add_argument("area")

    update_unit = sub.add_parser("update-unit", help="Change a unit's name and area")
    update_unit.add_argument("unit_id")
    update_unit.add_argument("name")
    update_unit.add_argument("area")

    delete_unit = sub.add_parser("delete-unit", help="Delete a unit with its readings and bills")
    delete_unit.add_argument("unit_id")

    reading = sub.add_parser("reading", help="Save a unit's meter reading")
    reading.add_argument("year")
    reading.add_argument("month")
    reading.add_argument("unit_id")
    reading.add_argument("electricity")
    reading.add_argument("water")

    calculate = sub.add_parser("calculate", help="Calculate and store bills for a month")
    calculate.add_argument("year")
    calculate.add_argument("month")
    calculate.add_argument("--electricity", required=True, help="Total electricity cost")
    calculate.add_argument("--water", required=True, help="Total water cost")
    fee = calculate.add_mutually_exclusive_group(required=True)
    fee.add_argument("--management", help="Shared management cost")
    fee.add_argument("--total-fee", help="Total fee; management = fee - electricity - water")

    statement = sub.add_parser("statement", help="Print statements for a month")
    statement.add_argument("year")
    statement.add_argument("month")
    statement.add_argument("--unit", default=None, help="Only this unit")

    summary = sub.add_parser("summary", help="Print month-by-unit totals for a range")
    summary.add_argument("start", help="YYYY-MM")
    summary.add_argument("end", help="YYYY-MM")
    summary.add_argument("--unit", default=None, help="Only this unit")

    sub.add_parser("sample", help="Load sample readings for January and February 2024")

    export = sub.add_parser("export", help="Write a binary backup file")
    export.add_argument("path")

    import_ = sub.add_parser("import", help="Replace all data with a backup file")
    import_.add_argument("path")

    sub.add_parser("clear", help="Delete all data and start over")

    return parser


def run_command(args: argparse.Namespace, ctx: BillingContext) -> None:
    """Execute one parsed command against the context."""
    if args.command == "units":
        units = ctx.units.list_units()
        total_area = sum(unit.area for unit in units)
        for unit in units:
            ratio = ctx.units.area_ratio(unit, total_area)
            print(f"{unit.id:<10}{unit.name:<16}{format_number(unit.area):>10} m²{ratio:>8.1f}%")
        print(f"{len(units)} units, {format_number(total_area)} m² total")

    elif args.command == "add-unit":
        unit = ctx.units.add_unit(args.unit_id, args.name, args.area)
        print(f"Added unit {unit.id}")

    elif args.command == "update-unit":
        unit = ctx.units.update_unit(args.unit_id, args.name, args.area)
        print(f"Updated unit {unit.id}")

    elif args.command == "delete-unit":
        ctx.units.delete_unit(args.unit_id)
        print(f"Deleted unit {args.unit_id}")

    elif args.command == "reading":
        ctx.readings.save_reading(args.unit_id, args.year, args.month, args.electricity, args.water)
        print(f"Saved reading for {args.unit_id}")

    elif args.command == "calculate":
        management = args.management
        if management is None:
            management = derive_management_cost(args.total_fee, args.electricity, args.water)
        bills = ctx.bills.calculate_and_save_bills(
            args.year, args.month, args.electricity, args.water, management
        )
        for bill in bills:
            print(f"{bill.unit_id:<10}{format_amount(bill.total_cost):>16}")
        print(f"Calculated {len(bills)} bills")

    elif args.command == "statement":
        year, month = parse_period(args.year, args.month)
        if args.unit:
            print(render_text(ctx.statements.build_statement(args.unit, year, month)))
        else:
            print(render_period_text(ctx.statements.build_period_statements(year, month)))

    elif args.command == "summary":
        summary = ctx.statements.build_range_summary(
            parse_year_month(args.start), parse_year_month(args.end), args.unit
        )
        print(render_summary_text(summary))

    elif args.command == "sample":
        saved = insert_sample_data(ctx.store)
        data = get_sample_bill_data()
        print(
            f"Saved {saved} sample readings. Try: autofee calculate {data['year']} {data['month']} "
            f"--electricity {data['total_electricity_cost']} --water {data['total_water_cost']} "
            f"--total-fee {data['total_management_fee']}"
        )

    elif args.command == "export":
        path = ctx.store.export_to_file(args.path)
        print(f"Backup written to {path}")

    elif args.command == "import":
        ctx.store.import_from_file(args.path)
        print(f"Imported {args.path}")

    elif args.command == "clear":
        ctx.store.reset()
        print("All data cleared")

    else:
        raise ValidationError(f"Unknown command: {args.command}")


def serve(ctx: BillingContext, host: str, port: int) -> None:
    """Run the HTTP API until interrupted."""
    from autofee.api.app import create_app

    logger.info(f"Starting API server on {host}:{port}")
    uvicorn.run(create_app(ctx), host=host, port=port, log_level="info")


def main(argv: list[str] | None = None) -> int:
    """Main entry point.

    Returns:
        Exit code: 0 for success, 1 for failure
    """
    args = build_parser().parse_args(argv)

    try:
        config = load_config()
    except ValueError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 1

    configure_logging(config)

    try:
        store = open_store(LocalStorage(config.storage_dir), config.storage_key)
        ctx = create_context(store)
        if args.command == "serve":
            serve(ctx, args.host or config.host, args.port or config.port)
        else:
            run_command(args, ctx)
        return 0
    except AutofeeError as e:
        logger.error(f"{args.command} failed: {e}")
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        logger.warning("Interrupted by user")
        return 1


def run() -> None:
    sys.exit(main())


if __name__ == "__main__":
    run()
