"""Flat-rate withholding estimate and money helpers.

Every calculator estimates taxes through ``estimate_withholding`` so the
flat-rate assumption lives in exactly one place. The rate can be tuned per
machine with ``mil-pay settings`` (settings.json ``flat_tax_rate``).
"""

import math
from typing import Any, Optional

from .config import get_setting


FLAT_TAX_RATE = 0.22


def coerce_amount(value: Any) -> float:
    """Coerce a form value to a float amount.

    Draft entries may leave amounts blank, so None, NaN, infinities and
    anything non-numeric become 0.0 instead of raising.
    """
    if value is None or isinstance(value, bool):
        return 0.0
    try:
        amount = float(value)
    except (TypeError, ValueError):
        return 0.0
    if math.isnan(amount) or math.isinf(amount):
        return 0.0
    return amount


def round2(amount: float) -> float:
    """Round to cents with halves rounded up.

    Example: 373.335 -> 373.34, 93.3333 -> 93.33
    """
    return math.floor(amount * 100 + 0.5) / 100


def resolve_tax_rate(rate: Optional[float] = None) -> float:
    """Return ``rate`` if given, else settings.json ``flat_tax_rate``, else 22%."""
    if rate is not None:
        return coerce_amount(rate)
    configured = get_setting("flat_tax_rate")
    if configured is None:
        return FLAT_TAX_RATE
    return coerce_amount(configured)


def estimate_withholding(taxable_amount: float, rate: Optional[float] = None) -> float:
    """Estimate income tax withheld on a taxable amount at a flat rate.

    Args:
        taxable_amount: Portion of pay subject to income tax
        rate: Flat rate override (0-1); defaults to the configured rate

    Returns:
        Unrounded withholding estimate
    """
    return coerce_amount(taxable_amount) * resolve_tax_rate(rate)
