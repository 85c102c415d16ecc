"""LES CLI commands for milpay.

Manages LES entries in the ledger (data_dir/milpay-les.json): add from
YAML/JSON, list, show, compare two entries, trend and reconcile.
"""

import json
from pathlib import Path

import click
import yaml
from pydantic import ValidationError
from rich.console import Console

from milpay.sdk import CompensationLedger, RecordNotFoundError, TrendMetric
from .renderers.les_renderer import (
    render_comparison,
    render_entry,
    render_entry_list,
    render_trend,
    render_validation,
)


def _ledger() -> CompensationLedger:
    return CompensationLedger()


def _load_entry_file(path: Path) -> dict:
    """Read an LES entry from a YAML or JSON file."""
    try:
        with open(path, "r") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise click.ClickException(f"Invalid YAML/JSON in {path}: {e}")

    if not isinstance(data, dict):
        raise click.ClickException(f"LES file must contain a mapping, got {type(data).__name__}")
    return data


_format_option = click.option(
    "--format", "output_format", type=click.Choice(["text", "json"]), default="text",
    help="Output format (default: text)",
)


@click.group("les")
def les():
    """Record and analyze Leave and Earnings Statements (LES).

    Entries are entered by hand (YAML or JSON) and stored locally.
    Totals are always computed from the line items.
    """
    pass


@les.command("add")
@click.argument("file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
def les_add(file):
    """Add an LES entry from FILE (YAML or JSON).

    FILE must contain pay_period, service_member and line items:

    \b
        pay_period: {type: end_month, start_date: 2025-01-16,
                     end_date: 2025-01-31, pay_date: 2025-02-01,
                     month: 1, year: 2025}
        service_member: {pay_grade: E-4, years_of_service: 3, branch: army}
        entitlements:
          - {type: base_pay, description: BASE PAY, amount: 1400.00}
        deductions:
          - {type: federal_tax, description: FEDERAL TAXES, amount: 150.00}
    """
    data = _load_entry_file(file)
    ledger = _ledger()
    try:
        entry_id = ledger.add_entry(data)
    except ValidationError as e:
        raise click.ClickException(f"Invalid LES entry in {file}:\n{e}")

    entry = ledger.get_entry(entry_id)
    click.echo(f"Added LES entry {entry_id} (pay date {entry.pay_period.pay_date})")
    click.echo(f"  Gross ${entry.totals.gross_pay:,.2f}  Net ${entry.totals.net_pay:,.2f}")

    report = ledger.validate_entry(entry_id)
    for error in report.errors:
        click.echo(f"  ! {error}")
    for warning in report.warnings:
        click.echo(f"  - {warning}")


@les.command("list")
@click.argument("year", type=int, required=False)
@_format_option
def les_list(year, output_format):
    """List LES entries, most recent first (optionally for one YEAR)."""
    ledger = _ledger()
    entries = ledger.get_entries_by_year(year) if year else ledger.list_entries()

    if output_format == "json":
        click.echo(json.dumps([e.model_dump(mode="json") for e in entries], indent=2))
        return

    if not entries:
        click.echo("No LES entries found." if not year else f"No LES entries for {year}.")
        return
    render_entry_list(Console(), entries)


@les.command("show")
@click.argument("entry_id")
@_format_option
def les_show(entry_id, output_format):
    """Show one LES entry with its line items."""
    entry = _ledger().get_entry(entry_id)
    if entry is None:
        raise click.ClickException(f"LES entry not found: {entry_id}")

    if output_format == "json":
        click.echo(entry.model_dump_json(indent=2))
        return
    render_entry(Console(), entry)


@les.command("delete")
@click.argument("entry_id")
def les_delete(entry_id):
    """Delete an LES entry (and any comparisons that use it)."""
    if not _ledger().delete_entry(entry_id):
        raise click.ClickException(f"LES entry not found: {entry_id}")
    click.echo(f"Deleted LES entry {entry_id}")


@les.command("compare")
@click.argument("previous_id")
@click.argument("current_id", required=False)
@_format_option
def les_compare(previous_id, current_id, output_format):
    """Compare two entries line by line.

    With one ID, compares that entry against the entry paid just before it.

    Examples:
        mil-pay les compare 1a2b3c4d 5e6f7a8b
        mil-pay les compare 5e6f7a8b
    """
    ledger = _ledger()
    if current_id is None:
        current_id = previous_id
        previous = ledger.get_previous_entry(current_id)
        if previous is None:
            raise click.ClickException(f"No earlier entry to compare with {current_id}")
        previous_id = previous.id

    try:
        comparison = ledger.compare_entries(previous_id, current_id)
    except RecordNotFoundError as e:
        raise click.ClickException(str(e))

    if output_format == "json":
        click.echo(comparison.model_dump_json(indent=2))
        return
    render_comparison(Console(), comparison)


@les.command("trend")
@click.argument("metric", type=click.Choice([m.value for m in TrendMetric]), default="net_pay")
@click.option("--months", type=int, default=6, show_default=True, help="Months to include")
@_format_option
def les_trend(metric, months, output_format):
    """Show the monthly trend of a pay METRIC (default net_pay)."""
    trend = _ledger().calculate_trend(metric, months)
    if trend is None:
        raise click.ClickException("Need at least two LES entries to compute a trend.")

    if output_format == "json":
        click.echo(trend.model_dump_json(indent=2))
        return
    render_trend(Console(), trend)


@les.command("validate")
@click.argument("entry_id")
@_format_option
def les_validate(entry_id, output_format):
    """Reconcile an entry's totals against its line items."""
    report = _ledger().validate_entry(entry_id)
    if report is None:
        raise click.ClickException(f"LES entry not found: {entry_id}")

    if output_format == "json":
        click.echo(report.model_dump_json(indent=2))
    else:
        render_validation(Console(), entry_id, report)

    if not report.is_valid:
        raise SystemExit(1)
