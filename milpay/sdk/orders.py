"""Compare military orders pay against civilian income for the same period."""

from typing import Optional, Protocol

from .line_items import Recommendation
from .schemas import OrdersComparison
from .withholding import coerce_amount

WORKING_DAYS_PER_YEAR = 260
WORKING_DAYS_PER_WEEK = 5

# Differences within this band are "neutral"
RECOMMENDATION_THRESHOLD = 500


class MilitaryPay(Protocol):
    """Anything exposing the totals of a military pay estimate (e.g. ATPayResult)."""

    gross_pay: float
    total_base_pay: float
    tax_free_amount: float


def civilian_daily_rate(
    annual_salary: Optional[float] = None,
    hourly_rate: Optional[float] = None,
    hours_per_week: Optional[float] = None,
) -> float:
    """Civilian pay per working day.

    Salary is spread over 260 working days; hourly pay is a five-day week.
    Returns 0 when neither is available.
    """
    salary = coerce_amount(annual_salary)
    if salary:
        return salary / WORKING_DAYS_PER_YEAR
    hourly = coerce_amount(hourly_rate)
    hours = coerce_amount(hours_per_week)
    if hourly and hours:
        return hourly * hours / WORKING_DAYS_PER_WEEK
    return 0.0


def compare_orders(
    military_pay: MilitaryPay,
    civilian_daily_rate: float,
    total_days: int,
    employer_differential_policy: bool = False,
) -> OrdersComparison:
    """Recommend whether orders pay out better than staying at the civilian job.

    Recommendation thresholds (military minus civilian):
        > +$500               take_orders
        < -$500, no policy    decline_orders
        < -$500, policy       negotiate (employer owes the USERRA differential)
        otherwise             neutral
    """
    civilian_total = coerce_amount(civilian_daily_rate) * coerce_amount(total_days)

    military_total = coerce_amount(military_pay.gross_pay)
    military_base = coerce_amount(military_pay.total_base_pay)
    military_tax_free = coerce_amount(military_pay.tax_free_amount)

    pay_difference = military_total - civilian_total
    percent_difference = pay_difference / civilian_total * 100 if civilian_total > 0 else 0.0

    differential_eligible = bool(employer_differential_policy) and civilian_total > military_total
    differential_amount = civilian_total - military_total if differential_eligible else None

    notes = []
    if pay_difference > RECOMMENDATION_THRESHOLD:
        recommendation = Recommendation.TAKE_ORDERS
        notes.append("Military pay significantly exceeds civilian income for this period.")
    elif pay_difference < -RECOMMENDATION_THRESHOLD:
        if differential_eligible:
            recommendation = Recommendation.NEGOTIATE
            notes.append("Civilian pay exceeds military, but employer differential may help.")
        else:
            recommendation = Recommendation.DECLINE_ORDERS
            notes.append("Consider financial impact - civilian income significantly higher.")
    else:
        recommendation = Recommendation.NEUTRAL
        notes.append("Pay difference is minimal. Consider career benefits.")

    notes.append(f"Tax-free allowances of ${military_tax_free:.2f} provide additional value.")

    return OrdersComparison(
        civilian_daily_rate=coerce_amount(civilian_daily_rate),
        civilian_total_pay=civilian_total,
        military_base_pay=military_base,
        military_allowances=military_total - military_base,
        military_tax_free_amount=military_tax_free,
        military_total_pay=military_total,
        pay_difference=pay_difference,
        percent_difference=percent_difference,
        employer_differential_eligible=differential_eligible,
        employer_differential_amount=differential_amount,
        recommendation=recommendation,
        notes=notes,
    )
