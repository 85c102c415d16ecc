"""Pay calculator CLI commands: drill-pay, at-pay, orders-compare.

Grade, years of service, BAH and civilian income default to profile.yaml;
options override the profile for a single run.
"""

import click
from pydantic import ValidationError
from rich.console import Console

from milpay.sdk import (
    PayContext,
    civilian_daily_rate,
    compare_orders,
    compute_at_pay,
    compute_drill_pay,
    get_pay_tables_path,
    get_profile_value,
    load_reference_data,
    STANDARD_AT_DAYS,
)
from .renderers.pay_renderer import render_at_pay, render_drill_pay, render_orders_comparison


def _pay_context(grade, yos) -> PayContext:
    """Build the calculator context from options, falling back to the profile."""
    member = get_profile_value("service_member") or {}
    grade = grade or member.get("pay_grade")
    if yos is None:
        yos = member.get("years_of_service", 0)

    if not grade:
        raise click.ClickException(
            "Pay grade required. Pass --grade or run:\n"
            "  mil-pay profile set service_member.pay_grade E-4"
        )
    try:
        return PayContext(pay_grade=grade, years_of_service=yos, branch=member.get("branch"))
    except ValidationError as e:
        raise click.ClickException(f"Invalid service member data: {e}")


def _bah_amount(include_bah, bah_amount):
    if not include_bah:
        return 0
    if bah_amount is None:
        bah_amount = get_profile_value("housing.bah_amount")
    if not bah_amount:
        raise click.ClickException(
            "--bah needs a monthly amount. Pass --bah-amount or run:\n"
            "  mil-pay profile set housing.bah_amount 1500"
        )
    return bah_amount


def _reference(year, context):
    reference = load_reference_data(year)
    if reference.base_pay_rate(context.pay_grade, context.years_of_service) == 0:
        table_year = year or get_profile_value("reference_data.year", "2024")
        click.echo(
            f"Warning: no base pay for {context.pay_grade.value} in "
            f"{get_pay_tables_path(str(table_year))}; base pay is $0.",
            err=True,
        )
    return reference


_format_option = click.option(
    "--format", "output_format", type=click.Choice(["text", "json"]), default="text",
    help="Output format (default: text)",
)
_grade_option = click.option("--grade", help="Pay grade, e.g. E-4 (default: profile)")
_yos_option = click.option("--yos", type=int, help="Years of service (default: profile)")
_year_option = click.option("--year", help="Pay table year (default: profile reference_data.year)")
_tax_rate_option = click.option("--tax-rate", type=float, help="Flat withholding rate, e.g. 0.22")
_bah_options = [
    click.option("--bah", "include_bah", is_flag=True, help="Include BAH"),
    click.option("--bah-amount", type=float, help="Monthly BAH (default: profile housing.bah_amount)"),
]


def _with_options(options):
    def decorator(f):
        for option in reversed(options):
            f = option(f)
        return f
    return decorator


@click.command("drill-pay")
@click.argument("mutas", type=int, default=4)
@_with_options(_bah_options)
@_grade_option
@_yos_option
@_year_option
@_tax_rate_option
@_format_option
def drill_pay(mutas, include_bah, bah_amount, grade, yos, year, tax_rate, output_format):
    """Estimate pay for a drill weekend of MUTAS periods (default 4).

    Examples:
        mil-pay drill-pay
        mil-pay drill-pay 4 --grade E-5 --yos 6 --bah --bah-amount 1500
    """
    context = _pay_context(grade, yos)
    reference = _reference(year, context)
    result = compute_drill_pay(
        context,
        mutas,
        include_bah=include_bah,
        bah_amount=_bah_amount(include_bah, bah_amount),
        reference=reference,
        tax_rate=tax_rate,
    )

    if output_format == "json":
        click.echo(result.model_dump_json(indent=2))
        return
    render_drill_pay(Console(), result)


def _at_options(f):
    f = click.option("--per-diem", "per_diem_rate", type=float, help="Daily per diem rate")(f)
    f = click.option("--bas", "include_bas", is_flag=True, help="Include BAS")(f)
    return _with_options(_bah_options)(f)


@click.command("at-pay")
@click.argument("days", type=int, default=STANDARD_AT_DAYS)
@_at_options
@_grade_option
@_yos_option
@_year_option
@_tax_rate_option
@_format_option
def at_pay(days, include_bah, bah_amount, include_bas, per_diem_rate, grade, yos, year, tax_rate, output_format):
    """Estimate pay for DAYS of annual training (default 15).

    Only base pay is taxable; BAH, BAS and per diem are tax-free.

    Examples:
        mil-pay at-pay
        mil-pay at-pay 15 --bah --bas --per-diem 59
    """
    context = _pay_context(grade, yos)
    result = compute_at_pay(
        context,
        days,
        include_bah=include_bah,
        bah_amount=_bah_amount(include_bah, bah_amount),
        include_bas=include_bas,
        include_per_diem=per_diem_rate is not None,
        per_diem_rate=per_diem_rate or 0,
        reference=_reference(year, context),
        tax_rate=tax_rate,
    )

    if output_format == "json":
        click.echo(result.model_dump_json(indent=2))
        return
    render_at_pay(Console(), result)


@click.command("orders-compare")
@click.argument("days", type=int)
@click.option("--civilian-daily-rate", "daily_rate", type=float,
              help="Civilian pay per working day (default: from profile civilian_job)")
@click.option("--differential/--no-differential", default=None,
              help="Employer pays USERRA differential (default: profile civilian_job.differential_pay_policy)")
@_at_options
@_grade_option
@_yos_option
@_year_option
@_tax_rate_option
@_format_option
def orders_compare(days, daily_rate, differential, include_bah, bah_amount, include_bas, per_diem_rate,
                   grade, yos, year, tax_rate, output_format):
    """Compare DAYS of orders pay against civilian pay for the same days.

    Examples:
        mil-pay orders-compare 30 --bah --bas
        mil-pay orders-compare 15 --civilian-daily-rate 400 --differential
    """
    job = get_profile_value("civilian_job") or {}
    if daily_rate is None:
        daily_rate = civilian_daily_rate(
            annual_salary=job.get("annual_salary"),
            hourly_rate=job.get("hourly_rate"),
            hours_per_week=job.get("hours_per_week"),
        )
    if not daily_rate:
        raise click.ClickException(
            "Civilian income required. Pass --civilian-daily-rate or run:\n"
            "  mil-pay profile set civilian_job.annual_salary 85000"
        )
    if differential is None:
        differential = bool(job.get("differential_pay_policy", False))

    context = _pay_context(grade, yos)
    military = compute_at_pay(
        context,
        days,
        include_bah=include_bah,
        bah_amount=_bah_amount(include_bah, bah_amount),
        include_bas=include_bas,
        include_per_diem=per_diem_rate is not None,
        per_diem_rate=per_diem_rate or 0,
        reference=_reference(year, context),
        tax_rate=tax_rate,
    )
    result = compare_orders(military, daily_rate, days, employer_differential_policy=differential)

    if output_format == "json":
        click.echo(result.model_dump_json(indent=2))
        return
    render_orders_comparison(Console(), result)
