"""
Trip Splitter
- Split shared trip costs between families and work out who owes whom.
- Read and write the trip spreadsheet CSV, export Excel reports.

Run:
  trip-splitter summary trip.csv
  trip-splitter export-excel trip.csv report.xlsx

Dependencies:
  pip install click openpyxl
"""
from __future__ import annotations
import logging
from typing import Optional

import click

from computations import compute_transfers, filter_activities_by_date, reconcile
from config import default_trip_path, load_trip, save_trip
from csv_handler import UnknownFamilyPolicy, export_trip_to_csv, import_trip_from_csv
from currency import format_signed_amount
from errors import TripSplitterError
from excel_export import export_excel
from models import Trip
from utils import parse_date


def _import_csv(path: str, strict: bool = False):
    policy = UnknownFamilyPolicy.REJECT if strict else UnknownFamilyPolicy.CREATE
    try:
        result = import_trip_from_csv(path, on_unknown_family=policy)
    except TripSplitterError as ex:
        raise click.ClickException(ex.message)
    for s in result.skipped:
        click.echo(f"Skipped line {s.line_number}: {s.reason}", err=True)
    return result


def _date_option(value: Optional[str]):
    if not value:
        return None
    try:
        return parse_date(value)
    except ValueError:
        raise click.BadParameter(f"{value!r} is not a YYYY-MM-DD date")


@click.group()
@click.option("--debug", is_flag=True, help="Enable debug logging")
def main(debug: bool) -> None:
    """Split shared trip expenses between families."""
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


@main.command()
@click.argument("csv_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--start", help="First date to include (YYYY-MM-DD)")
@click.option("--end", help="Last date to include (YYYY-MM-DD)")
@click.option("--strict", is_flag=True, help="Skip rows whose payer is not a column family")
def summary(csv_file: str, start: Optional[str], end: Optional[str], strict: bool) -> None:
    """Show balances and suggested transfers for a trip CSV."""
    result = _import_csv(csv_file, strict)
    activities = filter_activities_by_date(result.activities, _date_option(start), _date_option(end))
    results = reconcile(result.families, activities)

    click.echo(f"{len(activities)} activities, {len(result.families)} families")
    for r in results:
        click.echo(
            f"  {r.family_name}: paid ${r.total_paid:.2f}, owed ${r.total_owed:.2f}, "
            f"net {format_signed_amount(r.net_amount)}"
        )
    transfers = compute_transfers(results)
    if transfers:
        click.echo("Transfers:")
        for debtor, creditor, amount in transfers:
            click.echo(f"  {debtor} -> {creditor}: ${amount:.2f}")


@main.command("export-excel")
@click.argument("csv_file", type=click.Path(exists=True, dir_okay=False))
@click.argument("out_file", type=click.Path(dir_okay=False))
def export_excel_command(csv_file: str, out_file: str) -> None:
    """Convert a trip CSV into an Excel report."""
    result = _import_csv(csv_file)
    try:
        export_excel(result.families, result.activities, out_file)
    except TripSplitterError as ex:
        raise click.ClickException(ex.message)
    click.echo(f"Exported: {out_file}")


@main.command("to-json")
@click.argument("csv_file", type=click.Path(exists=True, dir_okay=False))
@click.argument("out_file", type=click.Path(dir_okay=False), required=False)
def to_json(csv_file: str, out_file: Optional[str]) -> None:
    """Convert a trip CSV into a trip data file (default: the app data file)."""
    result = _import_csv(csv_file)
    out_file = out_file or default_trip_path()
    save_trip(Trip(families=result.families, activities=result.activities), out_file)
    click.echo(f"Saved {len(result.activities)} activities to {out_file}")


@main.command("to-csv")
@click.argument("json_file", type=click.Path(exists=True, dir_okay=False))
@click.argument("out_file", type=click.Path(dir_okay=False))
@click.option("--legacy", is_flag=True, help="Write fields without quoting, like older versions")
def to_csv(json_file: str, out_file: str, legacy: bool) -> None:
    """Convert a trip data file into the spreadsheet CSV."""
    try:
        trip = load_trip(json_file)
        export_trip_to_csv(trip.families, trip.activities, out_file, legacy_unquoted=legacy)
    except TripSplitterError as ex:
        raise click.ClickException(ex.message)
    click.echo(f"Exported {len(trip.activities)} activities to {out_file}")


if __name__ == "__main__":
    main()
