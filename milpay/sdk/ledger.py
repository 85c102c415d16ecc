"""LES entry ledger: entries, line items and saved comparisons.

This module contains all business logic for storing LES entries.
CLI and MCP tools should be thin wrappers that call these methods.

Totals invariant
----------------

``totals`` is cached on every entry but is always a pure function of the
three line-item lists (see ``compute_totals``). Every write path that
touches entitlements, deductions or allotments goes through
``CompensationLedger.update_entry``, which recomputes totals, so the cache
can never drift from the line items. Line-item helpers (``add_entitlement``
etc.) read the entry, build a new list and hand the full list to
``update_entry``; callers of ``update_entry`` must likewise pass complete
lists, never deltas.

Persistence
-----------

The whole ledger is one JSON document stored under the key ``milpay-les``:

    {"entries": [...], "comparisons": [...]}

Entries are kept sorted by pay date, most recent first. Comparisons are
kept most recent first and embed snapshots of both entries; deleting an
entry deletes every comparison that references it.
"""

import json
import logging
import os
from typing import Any, Dict, List, Optional, Union

from pydantic import ValidationError

from .diff import compare
from .line_items import LineItemCategory, PayPeriodType, TrendMetric
from .reconcile import validate
from .schemas import (
    LINE_ITEM_MODELS,
    Allotment,
    CompensationRecord,
    Deduction,
    Entitlement,
    StatementComparison,
    Totals,
    TrendSeries,
    ValidationReport,
    new_id,
    now_iso,
)
from .storage import JsonFileStore, KeyValueStore
from .trends import build_trend
from .withholding import round2

# Configure logging based on LOG_LEVEL environment variable
_log_level = os.environ.get("LOG_LEVEL", "INFO").upper()
logging.basicConfig(
    level=getattr(logging, _log_level, logging.INFO),
    format="%(asctime)s.%(msecs)03d %(levelname)s: %(message)s",
    datefmt="%H:%M:%S"
)
logger = logging.getLogger(__name__)

LEDGER_KEY = "milpay-les"

LINE_ITEM_FIELDS = {
    LineItemCategory.ENTITLEMENT: "entitlements",
    LineItemCategory.DEDUCTION: "deductions",
    LineItemCategory.ALLOTMENT: "allotments",
}


class RecordNotFoundError(ValueError):
    """Raised when a mutator is given an id that does not exist."""
    pass


def compute_totals(
    entitlements: List[Entitlement],
    deductions: List[Deduction],
    allotments: List[Allotment],
) -> Totals:
    """Derive totals from line items, rounded to cents.

    YTD figures are only reported when some line item carries a YTD amount;
    ytd_net needs both YTD gross and YTD deductions.
    """
    gross = sum(e.amount for e in entitlements)
    deductions_total = sum(d.amount for d in deductions)
    allotments_total = sum(a.amount for a in allotments)

    ytd_gross = sum(e.ytd_amount or 0 for e in entitlements) or None
    ytd_deductions = sum(d.ytd_amount or 0 for d in deductions) or None
    ytd_net = ytd_gross - ytd_deductions if ytd_gross and ytd_deductions else None

    return Totals(
        gross_pay=round2(gross),
        total_deductions=round2(deductions_total),
        total_allotments=round2(allotments_total),
        net_pay=round2(gross - deductions_total - allotments_total),
        ytd_gross=ytd_gross,
        ytd_deductions=ytd_deductions,
        ytd_net=ytd_net,
    )


def _with_item_ids(items: List) -> List:
    """Give every line item an id unique within its list."""
    seen = set()
    result = []
    for item in items:
        if not item.id or item.id in seen:
            item_id = new_id()
            while item_id in seen:
                item_id = new_id()
            item = item.model_copy(update={"id": item_id})
        seen.add(item.id)
        result.append(item)
    return result


class CompensationLedger:
    """Repository of LES entries and the comparisons made between them.

    Args:
        store: Key-value persistence (default: JSON files in the data dir)
    """

    def __init__(self, store: Optional[KeyValueStore] = None):
        self._store = store if store is not None else JsonFileStore()
        self._entries: List[CompensationRecord] = []
        self._comparisons: List[StatementComparison] = []
        self._load()

    # =========================================================================
    # Persistence
    # =========================================================================

    def _load(self) -> None:
        raw = self._store.get(LEDGER_KEY)
        if not raw:
            return
        try:
            data = json.loads(raw)
            self._entries = [CompensationRecord.model_validate(e) for e in data.get("entries", [])]
            self._comparisons = [StatementComparison.model_validate(c) for c in data.get("comparisons", [])]
        except (json.JSONDecodeError, ValidationError, AttributeError) as e:
            logger.warning(f"Ignoring unreadable ledger data ({LEDGER_KEY}): {e}")
            self._entries = []
            self._comparisons = []
            return
        self._sort()
        logger.debug(f"Loaded {len(self._entries)} entries, {len(self._comparisons)} comparisons")

    def _save(self) -> None:
        payload = {
            "entries": [e.model_dump(mode="json") for e in self._entries],
            "comparisons": [c.model_dump(mode="json") for c in self._comparisons],
        }
        self._store.set(LEDGER_KEY, json.dumps(payload, indent=2))

    def _sort(self) -> None:
        self._entries.sort(key=lambda e: e.pay_period.pay_date, reverse=True)

    def _index_of(self, entry_id: str) -> int:
        for i, entry in enumerate(self._entries):
            if entry.id == entry_id:
                return i
        raise RecordNotFoundError(f"LES entry not found: {entry_id}")

    # =========================================================================
    # Entries
    # =========================================================================

    def add_entry(self, entry: Union[CompensationRecord, Dict[str, Any]]) -> str:
        """Add an entry; assigns id, timestamps, line-item ids and totals.

        Any id, timestamps or totals on the input are replaced.

        Returns:
            The new entry id
        """
        data = entry.model_dump() if isinstance(entry, CompensationRecord) else dict(entry)
        now = now_iso()
        data.update(id=new_id(), created_at=now, updated_at=now)
        data.pop("totals", None)

        record = CompensationRecord.model_validate(data)
        record = self._with_totals(record)

        self._entries.append(record)
        self._sort()
        self._save()
        logger.debug(f"Added entry {record.id} (pay date {record.pay_period.pay_date})")
        return record.id

    def _with_totals(self, record: CompensationRecord) -> CompensationRecord:
        entitlements = _with_item_ids(record.entitlements)
        deductions = _with_item_ids(record.deductions)
        allotments = _with_item_ids(record.allotments)
        return record.model_copy(update={
            "entitlements": entitlements,
            "deductions": deductions,
            "allotments": allotments,
            "totals": compute_totals(entitlements, deductions, allotments),
        })

    def update_entry(self, entry_id: str, updates: Dict[str, Any]) -> CompensationRecord:
        """Merge a partial update into an entry.

        Totals are derived data: a ``totals`` key in ``updates`` is ignored, and
        totals are recomputed when the update touches any line-item list.

        Raises:
            RecordNotFoundError: If the entry does not exist
            pydantic.ValidationError: If the merged entry is invalid
        """
        index = self._index_of(entry_id)
        current = self._entries[index]

        updates = {k: v for k, v in updates.items() if k not in ("id", "created_at", "totals")}
        merged = current.model_dump()
        merged.update(updates)
        merged["updated_at"] = now_iso()

        record = CompensationRecord.model_validate(merged)
        if any(field in updates for field in LINE_ITEM_FIELDS.values()):
            record = self._with_totals(record)

        self._entries[index] = record
        self._sort()
        self._save()
        logger.debug(f"Updated entry {entry_id}: {', '.join(sorted(updates)) or 'no fields'}")
        return record

    def delete_entry(self, entry_id: str) -> bool:
        """Delete an entry and every comparison that references it.

        Returns:
            True if deleted, False if not found
        """
        before = len(self._entries)
        self._entries = [e for e in self._entries if e.id != entry_id]
        if len(self._entries) == before:
            return False

        kept = [
            c for c in self._comparisons
            if c.previous_entry.id != entry_id and c.current_entry.id != entry_id
        ]
        dropped = len(self._comparisons) - len(kept)
        self._comparisons = kept
        self._save()
        logger.debug(f"Deleted entry {entry_id} and {dropped} comparison(s)")
        return True

    def get_entry(self, entry_id: str) -> Optional[CompensationRecord]:
        for entry in self._entries:
            if entry.id == entry_id:
                return entry
        return None

    def list_entries(self) -> List[CompensationRecord]:
        """All entries, most recent pay date first."""
        return list(self._entries)

    def recalculate_totals(self, entry_id: str) -> CompensationRecord:
        entry = self.get_entry(entry_id)
        if entry is None:
            raise RecordNotFoundError(f"LES entry not found: {entry_id}")
        record = self._with_totals(entry)
        self._entries[self._index_of(entry_id)] = record
        self._save()
        logger.debug(f"Recalculated totals for {entry_id}: net={record.totals.net_pay:.2f}")
        return record

    # =========================================================================
    # Line items
    # =========================================================================

    def _items(self, entry_id: str, category: LineItemCategory) -> List:
        entry = self.get_entry(entry_id)
        if entry is None:
            raise RecordNotFoundError(f"LES entry not found: {entry_id}")
        return list(getattr(entry, LINE_ITEM_FIELDS[category]))

    def _add_item(self, entry_id: str, category: LineItemCategory, item: Any) -> str:
        items = self._items(entry_id, category)
        model = LINE_ITEM_MODELS[category]
        data = item.model_dump() if isinstance(item, model) else dict(item)
        taken = {i.id for i in items}
        item_id = new_id()
        while item_id in taken:
            item_id = new_id()
        data["id"] = item_id
        items.append(model.model_validate(data))
        self.update_entry(entry_id, {LINE_ITEM_FIELDS[category]: items})
        return item_id

    def _update_item(self, entry_id: str, category: LineItemCategory, item_id: str, updates: Dict[str, Any]) -> None:
        items = self._items(entry_id, category)
        model = LINE_ITEM_MODELS[category]
        for i, item in enumerate(items):
            if item.id == item_id:
                items[i] = model.model_validate({**item.model_dump(), **updates, "id": item_id})
                break
        else:
            raise RecordNotFoundError(f"{category.value} not found: {item_id}")
        self.update_entry(entry_id, {LINE_ITEM_FIELDS[category]: items})

    def _remove_item(self, entry_id: str, category: LineItemCategory, item_id: str) -> bool:
        items = self._items(entry_id, category)
        remaining = [i for i in items if i.id != item_id]
        if len(remaining) == len(items):
            return False
        self.update_entry(entry_id, {LINE_ITEM_FIELDS[category]: remaining})
        return True

    def add_entitlement(self, entry_id: str, entitlement: Union[Entitlement, Dict[str, Any]]) -> str:
        return self._add_item(entry_id, LineItemCategory.ENTITLEMENT, entitlement)

    def update_entitlement(self, entry_id: str, entitlement_id: str, updates: Dict[str, Any]) -> None:
        self._update_item(entry_id, LineItemCategory.ENTITLEMENT, entitlement_id, updates)

    def remove_entitlement(self, entry_id: str, entitlement_id: str) -> bool:
        return self._remove_item(entry_id, LineItemCategory.ENTITLEMENT, entitlement_id)

    def add_deduction(self, entry_id: str, deduction: Union[Deduction, Dict[str, Any]]) -> str:
        return self._add_item(entry_id, LineItemCategory.DEDUCTION, deduction)

    def update_deduction(self, entry_id: str, deduction_id: str, updates: Dict[str, Any]) -> None:
        self._update_item(entry_id, LineItemCategory.DEDUCTION, deduction_id, updates)

    def remove_deduction(self, entry_id: str, deduction_id: str) -> bool:
        return self._remove_item(entry_id, LineItemCategory.DEDUCTION, deduction_id)

    def add_allotment(self, entry_id: str, allotment: Union[Allotment, Dict[str, Any]]) -> str:
        return self._add_item(entry_id, LineItemCategory.ALLOTMENT, allotment)

    def update_allotment(self, entry_id: str, allotment_id: str, updates: Dict[str, Any]) -> None:
        self._update_item(entry_id, LineItemCategory.ALLOTMENT, allotment_id, updates)

    def remove_allotment(self, entry_id: str, allotment_id: str) -> bool:
        return self._remove_item(entry_id, LineItemCategory.ALLOTMENT, allotment_id)

    # =========================================================================
    # Comparisons
    # =========================================================================

    def compare_entries(self, previous_id: str, current_id: str) -> StatementComparison:
        """Compare two entries and save the comparison (most recent first).

        Raises:
            RecordNotFoundError: If either entry does not exist
        """
        previous = self.get_entry(previous_id)
        current = self.get_entry(current_id)
        missing = [i for i, e in ((previous_id, previous), (current_id, current)) if e is None]
        if missing:
            raise RecordNotFoundError(f"LES entry not found: {', '.join(missing)}")

        comparison = compare(previous, current)
        self._comparisons.insert(0, comparison)
        self._save()
        logger.debug(
            f"Compared {previous_id} -> {current_id}: {comparison.summary.total_changes} change(s)"
        )
        return comparison

    def get_latest_comparison(self) -> Optional[StatementComparison]:
        return self._comparisons[0] if self._comparisons else None

    def get_comparison(self, comparison_id: str) -> Optional[StatementComparison]:
        for comparison in self._comparisons:
            if comparison.id == comparison_id:
                return comparison
        return None

    def delete_comparison(self, comparison_id: str) -> bool:
        before = len(self._comparisons)
        self._comparisons = [c for c in self._comparisons if c.id != comparison_id]
        if len(self._comparisons) == before:
            return False
        self._save()
        return True

    def list_comparisons(self) -> List[StatementComparison]:
        return list(self._comparisons)

    # =========================================================================
    # Queries
    # =========================================================================

    def get_entries_by_year(self, year: int) -> List[CompensationRecord]:
        return [e for e in self._entries if e.pay_period.year == year]

    def get_entries_by_month(self, year: int, month: int) -> List[CompensationRecord]:
        return [
            e for e in self._entries
            if e.pay_period.year == year and e.pay_period.month == month
        ]

    def get_latest_entry(self) -> Optional[CompensationRecord]:
        return self._entries[0] if self._entries else None

    def get_entry_by_period(
        self, year: int, month: int, period_type: Union[PayPeriodType, str]
    ) -> Optional[CompensationRecord]:
        period_type = PayPeriodType(period_type)
        for entry in self._entries:
            period = entry.pay_period
            if period.year == year and period.month == month and period.type == period_type:
                return entry
        return None

    def get_previous_entry(self, entry_id: str) -> Optional[CompensationRecord]:
        """The entry paid just before this one, or None for the oldest/unknown."""
        for i, entry in enumerate(self._entries):
            if entry.id == entry_id:
                return self._entries[i + 1] if i + 1 < len(self._entries) else None
        return None

    def years(self) -> List[int]:
        """Pay years present in the ledger, most recent first."""
        return sorted({e.pay_period.year for e in self._entries}, reverse=True)

    # =========================================================================
    # Analysis
    # =========================================================================

    def calculate_trend(self, metric: Union[TrendMetric, str], months: int = 6) -> Optional[TrendSeries]:
        return build_trend(self._entries, TrendMetric(metric), months)

    def validate_entry(self, entry_id: str) -> Optional[ValidationReport]:
        """Reconcile one entry; None when the entry does not exist."""
        entry = self.get_entry(entry_id)
        if entry is None:
            return None
        report = validate(entry)
        for error in report.errors:
            logger.warning(f"Entry {entry_id}: {error}")
        return report

    def reset(self) -> None:
        """Delete every entry and comparison, including the stored document."""
        self._entries = []
        self._comparisons = []
        self._store.remove(LEDGER_KEY)
        logger.info("Ledger reset")
