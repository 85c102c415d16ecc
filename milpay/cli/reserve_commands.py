"""Drill schedule CLI commands for milpay.

SCHEDULE arguments accept a schedule id or a fiscal year (e.g. 2025).
"""

from datetime import date, timedelta

import click
from pydantic import ValidationError
from rich.console import Console

from milpay.sdk import (
    Branch,
    DrillScheduleBook,
    DrillStatus,
    PayContext,
    RecordNotFoundError,
    TrainingEventType,
    get_profile_value,
    load_reference_data,
)
from .renderers.reserve_renderer import render_schedule, render_year_summary


def _book() -> DrillScheduleBook:
    return DrillScheduleBook()


def _schedule(book: DrillScheduleBook, ref: str):
    """Resolve a schedule id or fiscal year to a schedule."""
    schedule = book.get_schedule(ref)
    if schedule is None and ref.isdigit():
        schedule = book.get_schedule_by_fy(int(ref))
    if schedule is None:
        raise click.ClickException(f"Drill schedule not found: {ref}")
    return schedule


def _profile_context():
    """PayContext from the profile, or None if the profile lacks grade info."""
    member = get_profile_value("service_member") or {}
    if not member.get("pay_grade"):
        return None
    try:
        return PayContext(
            pay_grade=member["pay_grade"],
            years_of_service=member.get("years_of_service", 0),
            branch=member.get("branch"),
        )
    except ValidationError:
        return None


@click.group("drill")
def drill():
    """Track reserve drill weekends, MUTAs and annual training."""
    pass


@drill.command("schedule-create")
@click.argument("fiscal_year", type=int)
@click.argument("branch", type=click.Choice([b.value for b in Branch]))
@click.option("--unit", "unit_name", help="Unit name")
@click.option("--at-days", type=int, default=15, show_default=True, help="Annual training days")
def schedule_create(fiscal_year, branch, unit_name, at_days):
    """Create a drill schedule for FISCAL_YEAR (Oct 1 - Sep 30).

    Examples:
        mil-pay drill schedule-create 2025 army --unit "HHC 1-110 IN"
    """
    book = _book()
    if book.get_schedule_by_fy(fiscal_year) is not None:
        raise click.ClickException(f"FY{fiscal_year} schedule already exists")

    schedule_id = book.create_schedule(fiscal_year, branch, unit_name=unit_name, at_days=at_days)
    click.echo(f"Created FY{fiscal_year} schedule {schedule_id}")


@drill.command("list")
def schedule_list():
    """List drill schedules."""
    schedules = _book().list_schedules()
    if not schedules:
        click.echo("No drill schedules. Create one with: mil-pay drill schedule-create")
        return
    for s in schedules:
        click.echo(
            f"{s.id}  FY{s.fiscal_year}  {s.branch.value:<13} "
            f"{len(s.drill_weekends)} weekend(s), {s.total_scheduled_mutas} MUTAs"
            + (f"  {s.unit_name}" if s.unit_name else "")
        )


@drill.command("show")
@click.argument("schedule")
def schedule_show(schedule):
    """Show a schedule's weekends and drill periods."""
    render_schedule(Console(), _schedule(_book(), schedule))


@drill.command("add-weekend")
@click.argument("schedule")
@click.argument("start_date")
@click.option("--mutas", type=click.IntRange(1, 8), default=4, show_default=True, help="Drill periods")
@click.option("--end-date", help="Last day (default: start date + 1)")
@click.option("--type", "event_type", type=click.Choice([t.value for t in TrainingEventType]),
              default=TrainingEventType.REGULAR_DRILL.value, show_default=True)
@click.option("--title", default="", help="Short title")
@click.option("--location", help="Drill location")
def add_weekend(schedule, start_date, mutas, end_date, event_type, title, location):
    """Add a drill weekend starting START_DATE (YYYY-MM-DD).

    Periods 1-2 fall on the start date, later periods on the next day.
    """
    try:
        start = date.fromisoformat(start_date)
    except ValueError:
        raise click.ClickException(f"Invalid date (expected YYYY-MM-DD): {start_date}")

    book = _book()
    target = _schedule(book, schedule)
    weekend_id = book.add_drill_weekend(target.id, {
        "start_date": start.isoformat(),
        "end_date": end_date or (start + timedelta(days=1)).isoformat(),
        "muta_count": mutas,
        "event_type": event_type,
        "title": title,
        "location": location,
    })
    weekend = book.get_drill_weekend(target.id, weekend_id)
    click.echo(f"Added weekend {weekend_id} ({mutas} MUTAs)")
    for period in weekend.periods:
        click.echo(f"  period {period.period_number} {period.date}  id={period.id}")


@drill.command("period")
@click.argument("schedule")
@click.argument("weekend_id")
@click.argument("period_id")
@click.argument("status", type=click.Choice([s.value for s in DrillStatus]))
@click.option("--note", help="Note (e.g. reason for excusal)")
def period_status(schedule, weekend_id, period_id, status, note):
    """Set the STATUS of one drill period."""
    book = _book()
    target = _schedule(book, schedule)
    try:
        book.update_drill_period(target.id, weekend_id, period_id, status, note=note)
    except RecordNotFoundError as e:
        raise click.ClickException(str(e))
    click.echo(f"Period {period_id}: {status}")


@drill.command("complete")
@click.argument("schedule")
@click.argument("weekend_id")
def weekend_complete(schedule, weekend_id):
    """Mark every period of a weekend completed."""
    book = _book()
    target = _schedule(book, schedule)
    try:
        weekend = book.mark_weekend_complete(target.id, weekend_id)
    except RecordNotFoundError as e:
        raise click.ClickException(str(e))
    click.echo(f"Weekend {weekend_id}: {len(weekend.periods)} period(s) completed")


@drill.command("paid")
@click.argument("schedule")
@click.argument("weekend_id")
@click.option("--amount", type=float, help="Amount received")
@click.option("--date", "paid_date", help="Date paid (default: today)")
def weekend_paid(schedule, weekend_id, amount, paid_date):
    """Record that a weekend's drill pay was received."""
    book = _book()
    target = _schedule(book, schedule)
    try:
        book.mark_weekend_paid(target.id, weekend_id, amount=amount, paid_date=paid_date)
    except RecordNotFoundError as e:
        raise click.ClickException(str(e))
    click.echo(f"Weekend {weekend_id} marked paid")


@drill.command("summary")
@click.argument("schedule")
@click.option("--format", "output_format", type=click.Choice(["text", "json"]), default="text",
              help="Output format (default: text)")
def year_summary(schedule, output_format):
    """Summarize MUTA and AT progress for a schedule.

    Estimated pay uses the profile's pay grade and the configured pay tables.
    """
    book = _book()
    target = _schedule(book, schedule)
    context = _profile_context()
    reference = load_reference_data() if context is not None else None
    summary = book.calculate_year_summary(target.id, profile=context, reference=reference)

    if output_format == "json":
        click.echo(summary.model_dump_json(indent=2))
        return
    render_year_summary(Console(), target, summary)
