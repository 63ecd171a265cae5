import argparse
import json
import logging
import os
from typing import Literal

from rich.console import Console
from rich.table import Table

from congestion_tax.config import get_settings
from congestion_tax.core.models import TaxCalculationResponse
from congestion_tax.core.validate.request import (
    parse_passage_time,
    raise_for_issues,
    validate_calculation_request,
)
from congestion_tax.errors import CongestionTaxError
from congestion_tax.tax.results import TaxCalculationResult
from congestion_tax.tax.rules import get_tax_rules
from congestion_tax.tax.service import CongestionTaxService

ColorPreference = Literal["auto", "always", "never"]


def _get_console(pref: ColorPreference) -> Console:
    if pref == "auto" and os.getenv("NO_COLOR"):
        pref = "never"
    if pref == "never":
        return Console(no_color=True, highlight=False)
    return Console(force_terminal=pref == "always" or None, highlight=False)


def _print_result(result: TaxCalculationResult, console: Console, currency: str) -> None:
    days = Table(title=f"Congestion tax for {result.vehicle_type}", expand=False)
    for column in ("Date", "Passages", "Tax", "Reason"):
        days.add_column(column)
    for summary in result.daily_summaries:
        days.add_row(summary.date.isoformat(), str(summary.passage_count), str(summary.daily_tax), summary.reason)
    console.print(days)

    passages = Table(title="Passages", expand=False)
    for column in ("Time", "Fee", "Reason"):
        passages.add_column(column)
    for item in result.passage_calculations:
        passages.add_row(item.passage_time.isoformat(sep=" "), str(item.individual_fee), item.reason)
    console.print(passages)
    console.print(f"Total tax: {result.total_tax} {currency}")


def _print_schedule(schedule: dict, console: Console) -> None:
    table = Table(title="Toll schedule", expand=False)
    table.add_column("Time")
    table.add_column(f"Amount ({schedule['currency']})")
    for slot in schedule["timeSlots"]:
        table.add_row(slot["timeRange"], str(slot["amount"]))
    console.print(table)
    console.print(f"Daily maximum: {schedule['maxDailyAmount']} {schedule['currency']}")
    console.print(f"Toll-free vehicles: {', '.join(schedule['tollFreeVehicles'])}")


def _run_calculate(args: argparse.Namespace, service: CongestionTaxService, console: Console) -> None:
    passage_times = [parse_passage_time(value) for value in args.passages]
    issues = validate_calculation_request(args.vehicle, passage_times, rules=service.rules, settings=get_settings())
    raise_for_issues(issues)
    result = service.calculate_tax(args.vehicle, passage_times)
    if args.json:
        payload = TaxCalculationResponse.from_result(result).model_dump(mode="json", by_alias=True)
        print(json.dumps(payload, indent=2))
        return
    _print_result(result, console, service.rules.currency)


def _run_serve(args: argparse.Namespace) -> None:
    import uvicorn

    uvicorn.run("congestion_tax.api.http:app", host=args.host, port=args.port)


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="congestion-tax",
        description="Calculate Gothenburg congestion tax for vehicle passages.",
    )
    parser.add_argument(
        "--color",
        choices=["auto", "always", "never"],
        default="auto",
        help="Color output preference (default: auto).",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Log rule decisions to stderr.")
    commands = parser.add_subparsers(dest="command", required=True)

    calculate = commands.add_parser("calculate", help="Calculate tax for a list of passages.")
    calculate.add_argument("--vehicle", required=True, help="Vehicle type, e.g. Car or Motorcycle.")
    calculate.add_argument("passages", nargs="+", help="Passage times, e.g. 2013-02-07T06:23:27.")
    calculate.add_argument("--json", action="store_true", help="Print the JSON response instead of tables.")

    schedule = commands.add_parser("schedule", help="Show the toll schedule.")
    schedule.add_argument("--json", action="store_true", help="Print the schedule as JSON.")

    commands.add_parser("vehicles", help="List supported vehicle types.")

    serve = commands.add_parser("serve", help="Run the HTTP API.")
    serve.add_argument("--host", default="127.0.0.1")
    serve.add_argument("--port", type=int, default=8000)
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> None:
    args = _parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)
    console = _get_console(args.color)
    service = CongestionTaxService(get_tax_rules())

    if args.command == "serve":
        _run_serve(args)
        return
    if args.command == "vehicles":
        for name in service.supported_vehicle_types():
            suffix = " (toll-free)" if service.rules.is_toll_free_vehicle(name) else ""
            console.print(f"{name}{suffix}")
        return
    if args.command == "schedule":
        schedule = service.toll_schedule()
        if args.json:
            print(json.dumps(schedule, indent=2))
        else:
            _print_schedule(schedule, console)
        return
    try:
        _run_calculate(args, service, console)
    except CongestionTaxError as exc:
        raise SystemExit(f"error: {exc}") from exc


if __name__ == "__main__":
    main()
