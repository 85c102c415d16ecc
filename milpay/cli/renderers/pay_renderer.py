"""Rich renderer for drill, AT and orders calculator results.

Transforms SDK result models into formatted Rich tables.
"""

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from milpay.sdk import ATPayResult, DrillPayResult, OrdersComparison, round2


def _money(amount: float) -> str:
    return f"${round2(amount):,.2f}"


def _breakdown_table(title: str, breakdown, show_taxable: bool = False) -> Table:
    table = Table(title=title, box=box.SIMPLE_HEAVY)
    table.add_column("Item")
    table.add_column("Amount", justify="right")
    if show_taxable:
        table.add_column("Taxable", justify="center")
    else:
        table.add_column("Note", style="dim")

    for line in breakdown:
        if show_taxable:
            table.add_row(line.item, _money(line.amount), "yes" if line.taxable else "no")
        else:
            table.add_row(line.item, _money(line.amount), line.note or "")
    return table


def render_drill_pay(console: Console, result: DrillPayResult) -> None:
    """Render a drill weekend estimate with annual projection."""
    console.print(_breakdown_table("Drill Weekend", result.breakdown))

    summary = Table(show_header=False, box=None, padding=(0, 2))
    summary.add_column("key", style="dim")
    summary.add_column("value", justify="right")
    summary.add_row("Gross", _money(result.gross_pay))
    summary.add_row("Est. withholding", _money(result.estimated_taxes))
    summary.add_row("Est. net", f"[bold]{_money(result.estimated_net_pay)}[/bold]")
    summary.add_row("Annual gross (48 MUTAs)", _money(result.annual_projected_gross))
    summary.add_row("Annual net (48 MUTAs)", _money(result.annual_projected_net))
    console.print(Panel(summary, title="Summary", border_style="dim"))


def render_at_pay(console: Console, result: ATPayResult) -> None:
    """Render an annual-training estimate split into taxable and tax-free pay."""
    console.print(_breakdown_table(f"Annual Training ({result.total_days} days)", result.breakdown, show_taxable=True))

    summary = Table(show_header=False, box=None, padding=(0, 2))
    summary.add_column("key", style="dim")
    summary.add_column("value", justify="right")
    summary.add_row("Gross", _money(result.gross_pay))
    summary.add_row("Taxable", _money(result.taxable_amount))
    summary.add_row("Tax-free", _money(result.tax_free_amount))
    summary.add_row("Est. withholding", _money(result.estimated_taxes))
    summary.add_row("Est. net", f"[bold]{_money(result.estimated_net_pay)}[/bold]")
    console.print(Panel(summary, title="Summary", border_style="dim"))


_RECOMMENDATION_STYLE = {
    "take_orders": "green",
    "decline_orders": "red",
    "negotiate": "yellow",
    "neutral": "cyan",
}


def render_orders_comparison(console: Console, result: OrdersComparison) -> None:
    """Render a military-vs-civilian comparison with its recommendation."""
    table = Table(box=box.SIMPLE_HEAVY)
    table.add_column("")
    table.add_column("Military", justify="right")
    table.add_column("Civilian", justify="right")
    table.add_row("Total pay", _money(result.military_total_pay), _money(result.civilian_total_pay))
    table.add_row("Base pay", _money(result.military_base_pay), "")
    table.add_row("Allowances", _money(result.military_allowances), "")
    table.add_row("Tax-free", _money(result.military_tax_free_amount), "")
    table.add_row("Daily rate", "", _money(result.civilian_daily_rate))
    console.print(table)

    sign = "+" if result.pay_difference >= 0 else "-"
    console.print(
        f"Difference: {sign}{_money(abs(result.pay_difference))} "
        f"({result.percent_difference:+.1f}%)"
    )
    if result.employer_differential_amount is not None:
        console.print(f"Employer differential owed: {_money(result.employer_differential_amount)}")

    style = _RECOMMENDATION_STYLE.get(result.recommendation.value, "white")
    label = result.recommendation.value.replace("_", " ").upper()
    notes = "\n".join(f"- {note}" for note in result.notes)
    console.print(Panel(notes, title=f"[{style}]{label}[/{style}]", border_style=style))
