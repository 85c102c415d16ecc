"""Rich renderer for LES entries, comparisons, trends and validation reports."""

from typing import List

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from milpay.sdk import (
    CompensationRecord,
    StatementComparison,
    TrendSeries,
    ValidationReport,
    round2,
)


def _money(amount: float) -> str:
    return f"${round2(amount):,.2f}"


def _signed(amount: float) -> str:
    sign = "+" if amount >= 0 else "-"
    return f"{sign}{_money(abs(amount))}"


def render_entry_list(console: Console, entries: List[CompensationRecord]) -> None:
    table = Table(box=box.SIMPLE_HEAVY)
    table.add_column("ID", style="cyan")
    table.add_column("Pay Date")
    table.add_column("Period")
    table.add_column("Grade")
    table.add_column("Gross", justify="right")
    table.add_column("Deductions", justify="right")
    table.add_column("Allotments", justify="right")
    table.add_column("Net", justify="right")

    for entry in entries:
        period = entry.pay_period
        table.add_row(
            entry.id,
            period.pay_date,
            f"{period.year}-{period.month:02d} {period.type.value}",
            entry.service_member.pay_grade.value,
            _money(entry.totals.gross_pay),
            _money(entry.totals.total_deductions),
            _money(entry.totals.total_allotments),
            _money(entry.totals.net_pay),
        )
    console.print(table)


def _items_table(title: str, items, flag_column: str, flag_attr: str) -> Table:
    table = Table(title=title, box=box.SIMPLE)
    table.add_column("Type")
    table.add_column("Description")
    table.add_column("Amount", justify="right")
    table.add_column("YTD", justify="right", style="dim")
    if flag_column:
        table.add_column(flag_column, justify="center")

    for item in items:
        row = [
            item.type.value,
            item.description,
            _money(item.amount),
            _money(item.ytd_amount) if item.ytd_amount is not None else "",
        ]
        if flag_column:
            row.append("yes" if getattr(item, flag_attr) else "")
        table.add_row(*row)
    return table


def render_entry(console: Console, entry: CompensationRecord) -> None:
    """Render one LES entry with its line items and totals."""
    period = entry.pay_period
    member = entry.service_member
    header = (
        f"{member.name or ''} {member.pay_grade.value} {member.branch.value} "
        f"({member.years_of_service} YOS)\n"
        f"Period {period.start_date} to {period.end_date}, paid {period.pay_date} "
        f"[{period.type.value}]"
    )
    console.print(Panel(header.strip(), title=f"LES {entry.id}", border_style="cyan"))

    console.print(_items_table("Entitlements", entry.entitlements, "Taxable", "is_taxable"))
    if entry.deductions:
        console.print(_items_table("Deductions", entry.deductions, "Mandatory", "is_mandatory"))
    if entry.allotments:
        console.print(_items_table("Allotments", entry.allotments, "", ""))

    totals = Table(show_header=False, box=None, padding=(0, 2))
    totals.add_column("key", style="dim")
    totals.add_column("value", justify="right")
    totals.add_row("Gross", _money(entry.totals.gross_pay))
    totals.add_row("Deductions", _money(entry.totals.total_deductions))
    totals.add_row("Allotments", _money(entry.totals.total_allotments))
    totals.add_row("Net", f"[bold]{_money(entry.totals.net_pay)}[/bold]")
    if entry.totals.ytd_gross is not None:
        totals.add_row("YTD gross", _money(entry.totals.ytd_gross))
    console.print(Panel(totals, title="Totals", border_style="dim"))

    if entry.notes:
        console.print(f"[dim]Notes: {entry.notes}[/dim]")


_CHANGE_STYLE = {
    "added": "green",
    "removed": "red",
    "increased": "cyan",
    "decreased": "yellow",
}


def render_comparison(console: Console, comparison: StatementComparison) -> None:
    """Render line-item changes between two entries."""
    prev = comparison.previous_entry.pay_period.pay_date
    curr = comparison.current_entry.pay_period.pay_date
    summary = comparison.summary

    if not comparison.changes:
        console.print(f"No line-item changes between {prev} and {curr}.")
    else:
        table = Table(title=f"{prev} -> {curr}", box=box.SIMPLE_HEAVY)
        table.add_column("Category", style="dim")
        table.add_column("Type")
        table.add_column("Change")
        table.add_column("Previous", justify="right")
        table.add_column("Current", justify="right")
        table.add_column("Diff", justify="right")
        table.add_column("Possible reason")

        significant = {(c.category, c.type) for c in summary.significant_changes}
        for change in comparison.changes:
            style = _CHANGE_STYLE[change.change_type.value]
            marker = "*" if (change.category, change.type) in significant else ""
            table.add_row(
                change.category.value,
                f"{change.type}{marker}",
                f"[{style}]{change.change_type.value}[/{style}]",
                _money(change.previous_amount),
                _money(change.current_amount),
                _signed(change.difference),
                change.possible_reason,
            )
        console.print(table)
        console.print("[dim]* significant ($50+ or 5%+)[/dim]")

    console.print(
        f"Net pay: {_signed(summary.net_pay_difference)} "
        f"({summary.net_pay_percent_change:+.2f}%), "
        f"{summary.total_changes} change(s), {len(summary.significant_changes)} significant"
    )


def render_trend(console: Console, trend: TrendSeries) -> None:
    table = Table(title=f"{trend.metric.value} trend: {trend.trend.value}", box=box.SIMPLE)
    table.add_column("Period")
    table.add_column("Average", justify="right")
    for point in trend.data_points:
        table.add_row(point.period, _money(point.value))
    console.print(table)
    console.print(
        f"Average {_money(trend.average_value)}, "
        f"min {_money(trend.min_value)}, max {_money(trend.max_value)}"
    )


def render_validation(console: Console, entry_id: str, report: ValidationReport) -> None:
    """Render a reconciliation report; errors in red, warnings in yellow."""
    status = "[green]VALID[/green]" if report.is_valid else "[red]INVALID[/red]"
    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_column("key", style="dim")
    table.add_column("value", justify="right")
    table.add_row("Gross (line items)", _money(report.calculated_gross))
    table.add_row("Deductions (line items)", _money(report.calculated_deductions))
    table.add_row("Allotments (line items)", _money(report.calculated_allotments))
    table.add_row("Net (line items)", _money(report.calculated_net))
    table.add_row("Net (stored)", _money(report.actual_net))
    table.add_row("Variance", f"{_signed(report.variance)} ({report.variance_percent:+.2f}%)")
    console.print(Panel(table, title=f"LES {entry_id} {status}", border_style="dim"))

    for error in report.errors:
        console.print(f"  [red]! {error}[/red]")
    for warning in report.warnings:
        console.print(f"  [yellow]- {warning}[/yellow]")
