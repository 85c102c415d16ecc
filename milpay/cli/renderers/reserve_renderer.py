"""Rich renderer for drill schedules and year summaries."""

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from milpay.sdk import DrillSchedule, YearSummary, round2

_STATUS_STYLE = {
    "scheduled": "dim",
    "completed": "green",
    "excused": "yellow",
    "unexcused": "red",
    "rescheduled": "cyan",
    "cancelled": "dim",
}


def render_schedule(console: Console, schedule: DrillSchedule) -> None:
    """Render every weekend of a schedule with its drill periods."""
    title = f"FY{schedule.fiscal_year} {schedule.branch.value}"
    if schedule.unit_name:
        title += f" - {schedule.unit_name}"

    table = Table(title=title, box=box.SIMPLE_HEAVY)
    table.add_column("Weekend", style="cyan")
    table.add_column("Dates")
    table.add_column("Event")
    table.add_column("Periods")
    table.add_column("Paid", justify="right")

    for weekend in sorted(schedule.drill_weekends, key=lambda w: w.start_date):
        periods = " ".join(
            f"[{_STATUS_STYLE[p.status.value]}]{p.period_number}:{p.id}[/{_STATUS_STYLE[p.status.value]}]"
            for p in weekend.periods
        )
        if weekend.is_paid:
            paid = f"${round2(weekend.actual_pay):,.2f}" if weekend.actual_pay is not None else "yes"
        else:
            paid = ""
        table.add_row(
            weekend.id,
            f"{weekend.start_date} - {weekend.end_date}",
            weekend.title or weekend.event_type.value,
            periods,
            paid,
        )
    console.print(table)
    console.print(
        f"MUTAs: {schedule.total_completed_mutas}/{schedule.total_scheduled_mutas} completed, "
        f"{schedule.total_excused} excused, {schedule.total_unexcused} unexcused"
    )


def render_year_summary(console: Console, schedule: DrillSchedule, summary: YearSummary) -> None:
    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_column("key", style="dim")
    table.add_column("value", justify="right")
    table.add_row("Scheduled MUTAs", str(summary.total_mutas))
    table.add_row("Completed", str(summary.completed_mutas))
    table.add_row("Missed (unexcused)", str(summary.missed_mutas))
    table.add_row("Remaining", str(summary.remaining_mutas))
    table.add_row("AT days completed", str(summary.at_days_completed))
    table.add_row("AT days remaining", str(summary.at_days_remaining))
    table.add_row("Est. drill pay (year)", f"${round2(summary.estimated_annual_pay):,.2f}")
    console.print(Panel(table, title=f"FY{schedule.fiscal_year} Summary", border_style="dim"))
