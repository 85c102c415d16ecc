"""Reconcile an LES entry's stored totals against its line items.

SDK layer - pure logic, returns a ValidationReport. No CLI or presentation.

The stored ``totals`` are not trusted: gross, deductions, allotments and net
are recomputed from the line items and the stored net is compared against
the recomputed net. Findings are split in two:

- errors: the entry cannot be used (no entitlements at all)
- warnings: the entry is usable but worth a second look (missing base pay,
  missing tax deductions, net pay off by more than $1)
"""

import logging

from .line_items import FICA_TYPES, DeductionType, EntitlementType
from .schemas import CompensationRecord, ValidationReport
from .withholding import round2

logger = logging.getLogger(__name__)

# Manual entry rounding is absorbed up to a dollar
NET_PAY_TOLERANCE = 1.00


def validate(record: CompensationRecord) -> ValidationReport:
    """Cross-check a record. Never mutates it; same input gives same report."""
    gross = sum(e.amount for e in record.entitlements)
    deductions = sum(d.amount for d in record.deductions)
    allotments = sum(a.amount for a in record.allotments)
    net = gross - deductions - allotments

    actual_net = record.totals.net_pay
    variance = actual_net - net
    variance_percent = variance / net * 100 if net != 0 else 0.0

    errors = []
    warnings = []

    if abs(variance) > NET_PAY_TOLERANCE:
        warnings.append(f"Net pay calculation has variance of ${variance:.2f}")

    if not record.entitlements:
        errors.append("No entitlements entered")

    entitlement_types = {e.type for e in record.entitlements}
    deduction_types = {d.type for d in record.deductions}

    if EntitlementType.BASE_PAY not in entitlement_types:
        warnings.append("No base pay found - is this intentional?")

    if DeductionType.FEDERAL_TAX not in deduction_types:
        warnings.append("No federal tax withholding - check if in combat zone or W-4")

    if not any(t in deduction_types for t in FICA_TYPES):
        warnings.append("No FICA taxes - this is unusual for military pay")

    if errors or warnings:
        logger.debug(f"Entry {record.id}: {len(errors)} error(s), {len(warnings)} warning(s)")

    return ValidationReport(
        is_valid=not errors,
        calculated_gross=round2(gross),
        calculated_deductions=round2(deductions),
        calculated_allotments=round2(allotments),
        calculated_net=round2(net),
        actual_net=actual_net,
        variance=round2(variance),
        variance_percent=round2(variance_percent),
        warnings=warnings,
        errors=errors,
    )
