"""Reserve drill and annual-training (AT) pay calculators.

Simplifications:
- One drill period (MUTA) is 1/30 of monthly base pay.
- Drill-weekend BAH is always two days (bah / 30 * 2) regardless of MUTA count.
- Drill pay withholding is a flat rate on the whole gross, allowances included.
- AT withholding applies only to base pay; BAH, BAS and per diem are tax-free.

Results are unrounded; renderers round for display.
"""

import logging
from typing import List, Optional

from .reference import ReferenceDataProvider, bas_component_for, load_reference_data
from .schemas import ATPayResult, BreakdownItem, DrillPayResult, PayContext
from .withholding import coerce_amount, estimate_withholding

logger = logging.getLogger(__name__)

STANDARD_ANNUAL_MUTAS = 48
STANDARD_AT_DAYS = 15
DAYS_PER_MONTH = 30
DRILL_BAH_DAYS = 2


def _reference(reference: Optional[ReferenceDataProvider]) -> ReferenceDataProvider:
    return reference if reference is not None else load_reference_data()


def drill_pay_per_period(profile: PayContext, reference: Optional[ReferenceDataProvider] = None) -> float:
    """Pay for one drill period (1/30 of monthly base pay)."""
    monthly = _reference(reference).base_pay_rate(profile.pay_grade, profile.years_of_service)
    return monthly / DAYS_PER_MONTH


def compute_drill_pay(
    profile: PayContext,
    muta_count: int,
    include_bah: bool = False,
    bah_amount: float = 0,
    reference: Optional[ReferenceDataProvider] = None,
    tax_rate: Optional[float] = None,
) -> DrillPayResult:
    """Estimate pay for one drill weekend and project it over a standard year.

    Args:
        profile: Member grade and years of service
        muta_count: Drill periods in the weekend (4 for a standard weekend)
        include_bah: Add two days of prorated BAH
        bah_amount: Monthly BAH for the member's location
        reference: Pay tables (default: loaded from config)
        tax_rate: Flat withholding rate override

    Returns:
        DrillPayResult with per-weekend figures, annual projection and breakdown

    Example:
        E-4 at $2,800/month, 4 MUTAs -> $93.33/period, $373.33 gross,
        $4,480.00 projected over 48 MUTAs.
    """
    muta_count = int(coerce_amount(muta_count))
    bah_amount = coerce_amount(bah_amount)

    per_period = drill_pay_per_period(profile, reference)
    total_base_pay = per_period * muta_count

    bah = (bah_amount / DAYS_PER_MONTH) * DRILL_BAH_DAYS if include_bah and bah_amount else 0.0
    # Ordinary drill never earns BAS
    bas = 0.0

    gross = total_base_pay + bah + bas
    taxes = estimate_withholding(gross, tax_rate)
    net = gross - taxes

    if muta_count > 0:
        annual_multiplier = STANDARD_ANNUAL_MUTAS / muta_count
    else:
        annual_multiplier = 0.0

    breakdown = [
        BreakdownItem(
            item=f"Base Drill Pay ({muta_count} periods)",
            amount=total_base_pay,
            note=f"${per_period:.2f} per period",
        )
    ]
    if bah > 0:
        breakdown.append(BreakdownItem(item="BAH (prorated)", amount=bah))

    logger.debug(f"Drill pay {profile.pay_grade.value}/{profile.years_of_service} YOS x{muta_count}: gross={gross:.2f}")

    return DrillPayResult(
        base_drill_pay=per_period,
        total_periods=muta_count,
        total_base_pay=total_base_pay,
        bah_if_applicable=bah,
        bas_if_applicable=bas,
        gross_pay=gross,
        estimated_taxes=taxes,
        estimated_net_pay=net,
        annual_projected_gross=gross * annual_multiplier,
        annual_projected_net=net * annual_multiplier,
        breakdown=breakdown,
    )


def compute_at_pay(
    profile: PayContext,
    days: int = STANDARD_AT_DAYS,
    include_bah: bool = False,
    bah_amount: float = 0,
    include_bas: bool = False,
    include_per_diem: bool = False,
    per_diem_rate: float = 0,
    reference: Optional[ReferenceDataProvider] = None,
    tax_rate: Optional[float] = None,
) -> ATPayResult:
    """Estimate pay for a period of annual training or short orders.

    Every component is a daily rate times ``days``. Only base pay is taxable.
    """
    days = int(coerce_amount(days))
    bah_amount = coerce_amount(bah_amount)
    per_diem_rate = coerce_amount(per_diem_rate)
    tables = _reference(reference)

    daily_base = tables.base_pay_rate(profile.pay_grade, profile.years_of_service) / DAYS_PER_MONTH
    daily_bah = bah_amount / DAYS_PER_MONTH if include_bah and bah_amount else 0.0
    if include_bas:
        daily_bas = tables.bas_allowance_rate(bas_component_for(profile.pay_grade)) / DAYS_PER_MONTH
    else:
        daily_bas = 0.0
    daily_per_diem = per_diem_rate if include_per_diem else 0.0

    total_base = daily_base * days
    total_bah = daily_bah * days
    total_bas = daily_bas * days
    total_per_diem = daily_per_diem * days
    gross = total_base + total_bah + total_bas + total_per_diem

    taxable = total_base
    tax_free = total_bah + total_bas + total_per_diem
    taxes = estimate_withholding(taxable, tax_rate)

    components: List[BreakdownItem] = [
        BreakdownItem(item="Base Pay", amount=total_base, taxable=True),
        BreakdownItem(item="BAH", amount=total_bah, taxable=False),
        BreakdownItem(item="BAS", amount=total_bas, taxable=False),
        BreakdownItem(item="Per Diem", amount=total_per_diem, taxable=False),
    ]

    return ATPayResult(
        daily_base_pay=daily_base,
        daily_bah=daily_bah,
        daily_bas=daily_bas,
        daily_per_diem=daily_per_diem,
        total_days=days,
        total_base_pay=total_base,
        total_bah=total_bah,
        total_bas=total_bas,
        total_per_diem=total_per_diem,
        gross_pay=gross,
        taxable_amount=taxable,
        tax_free_amount=tax_free,
        estimated_taxes=taxes,
        estimated_net_pay=gross - taxes,
        breakdown=[item for item in components if item.amount > 0],
    )
