"""Line-item diff between two LES entries.

Items are matched by type, never by id (ids are per-record). When a record
carries several lines of the same type their amounts are summed, so each
type yields at most one change.
"""

from typing import Dict, List, Sequence, Tuple

from .explanations import get_change_explanation
from .line_items import ChangeType, LineItemCategory
from .schemas import (
    CompensationRecord,
    ComparisonSummary,
    LineItemChange,
    StatementComparison,
    new_id,
    now_iso,
)
from .withholding import round2

# A change is significant at $50 or 5%
SIGNIFICANT_DIFFERENCE = 50
SIGNIFICANT_PERCENT = 5


def _amounts_by_type(items: Sequence) -> Dict:
    """Ordered type -> (summed amount rounded to cents, first description)."""
    grouped: Dict = {}
    for item in items:
        if item.type in grouped:
            amount, description = grouped[item.type]
            grouped[item.type] = (amount + item.amount, description)
        else:
            grouped[item.type] = (item.amount, item.description)
    return {
        item_type: (round2(amount), description)
        for item_type, (amount, description) in grouped.items()
    }


def _category_changes(
    category: LineItemCategory, previous_items: Sequence, current_items: Sequence
) -> List[LineItemChange]:
    previous: Dict = _amounts_by_type(previous_items)
    current: Dict = _amounts_by_type(current_items)
    changes = []

    def change(item_type, description, change_type, prev_amount, curr_amount, pct) -> LineItemChange:
        return LineItemChange(
            category=category,
            type=item_type.value,
            description=description,
            change_type=change_type,
            previous_amount=prev_amount,
            current_amount=curr_amount,
            difference=round2(curr_amount - prev_amount),
            percent_change=pct,
            possible_reason=get_change_explanation(item_type, change_type),
        )

    # Removed or changed
    for item_type, (prev_amount, description) in previous.items():
        if item_type not in current:
            changes.append(change(item_type, description, ChangeType.REMOVED, prev_amount, 0.0, -100.0))
            continue

        curr_amount = current[item_type][0]
        if curr_amount == prev_amount:
            continue
        difference = round2(curr_amount - prev_amount)
        pct = difference / prev_amount * 100 if prev_amount != 0 else 100.0
        change_type = ChangeType.INCREASED if difference > 0 else ChangeType.DECREASED
        changes.append(change(item_type, description, change_type, prev_amount, curr_amount, round2(pct)))

    # Added
    for item_type, (curr_amount, description) in current.items():
        if item_type not in previous:
            changes.append(change(item_type, description, ChangeType.ADDED, 0.0, curr_amount, 100.0))

    return changes


def detect_changes(previous: CompensationRecord, current: CompensationRecord) -> List[LineItemChange]:
    """Classify every line-item difference between two entries.

    Categories are processed entitlements, deductions, allotments; within each,
    removed/changed items come first (in ``previous`` order), then added items.
    """
    pairs: Tuple = (
        (LineItemCategory.ENTITLEMENT, previous.entitlements, current.entitlements),
        (LineItemCategory.DEDUCTION, previous.deductions, current.deductions),
        (LineItemCategory.ALLOTMENT, previous.allotments, current.allotments),
    )
    changes = []
    for category, prev_items, curr_items in pairs:
        changes.extend(_category_changes(category, prev_items, curr_items))
    return changes


def is_significant(change: LineItemChange) -> bool:
    return abs(change.difference) >= SIGNIFICANT_DIFFERENCE or abs(change.percent_change) >= SIGNIFICANT_PERCENT


def compare(previous: CompensationRecord, current: CompensationRecord) -> StatementComparison:
    """Build a StatementComparison with summary for two entries."""
    changes = detect_changes(previous, current)

    net_difference = current.totals.net_pay - previous.totals.net_pay
    if previous.totals.net_pay != 0:
        net_percent = net_difference / previous.totals.net_pay * 100
    else:
        net_percent = 0.0

    return StatementComparison(
        id=new_id(),
        previous_entry=previous,
        current_entry=current,
        changes=changes,
        summary=ComparisonSummary(
            total_changes=len(changes),
            net_pay_difference=round2(net_difference),
            net_pay_percent_change=round2(net_percent),
            significant_changes=[c for c in changes if is_significant(c)],
        ),
        created_at=now_iso(),
    )
