"""Reserve drill schedules: weekends, drill periods (MUTAs) and AT status.

One schedule per fiscal year (Oct 1 - Sep 30). Each drill weekend owns its
drill periods; the schedule's counters are recomputed from the periods on
every write, so ``total_scheduled_mutas`` always equals the sum of the
weekends' ``muta_count``.

Stored as one JSON document under the key ``milpay-reserve``:

    {"schedules": [...]}
"""

import json
import logging
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Any, Dict, List, Optional, Union

from pydantic import ValidationError

from .drill_pay import drill_pay_per_period
from .ledger import RecordNotFoundError
from .line_items import Branch, DrillStatus
from .reference import ReferenceDataProvider
from .schemas import (
    DrillPeriod,
    DrillSchedule,
    DrillWeekend,
    PayContext,
    YearSummary,
    new_id,
    now_iso,
)
from .storage import JsonFileStore, KeyValueStore

logger = logging.getLogger(__name__)

RESERVE_KEY = "milpay-reserve"

# Periods 1-2 fall on the first day of the weekend, the rest on the second
PERIODS_PER_DAY = 2
PERIODS_PER_CYCLE = 4


@dataclass(frozen=True)
class FiscalYear:
    """Federal fiscal year: FY2025 runs 2024-10-01 through 2025-09-30."""
    fiscal_year: int
    start_date: date
    end_date: date


def _to_date(value: Union[str, date]) -> date:
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


def fiscal_year_for(value: Union[str, date]) -> FiscalYear:
    """Fiscal year containing a date (October starts the next FY)."""
    day = _to_date(value)
    fy = day.year + 1 if day.month >= 10 else day.year
    return FiscalYear(fiscal_year=fy, start_date=date(fy - 1, 10, 1), end_date=date(fy, 9, 30))


def build_drill_periods(start_date: Union[str, date], muta_count: int) -> List[DrillPeriod]:
    """Create scheduled drill periods for a weekend.

    Example (4 MUTAs starting Sat 2025-03-08):
        #1 2025-03-08, #2 2025-03-08, #3 2025-03-09, #4 2025-03-09
    """
    start = _to_date(start_date)
    periods = []
    for i in range(int(muta_count)):
        day = start if i < PERIODS_PER_DAY else start + timedelta(days=1)
        periods.append(DrillPeriod(
            id=new_id(),
            date=day.isoformat(),
            period_number=(i % PERIODS_PER_CYCLE) + 1,
            status=DrillStatus.SCHEDULED,
        ))
    return periods


def _is_complete(weekend: DrillWeekend) -> bool:
    return bool(weekend.periods) and all(p.status == DrillStatus.COMPLETED for p in weekend.periods)


def _recount(schedule: DrillSchedule) -> DrillSchedule:
    """Recompute schedule counters from weekends and period statuses."""
    statuses = [p.status for w in schedule.drill_weekends for p in w.periods]
    return schedule.model_copy(update={
        "total_scheduled_mutas": sum(w.muta_count for w in schedule.drill_weekends),
        "total_completed_mutas": statuses.count(DrillStatus.COMPLETED),
        "total_excused": statuses.count(DrillStatus.EXCUSED),
        "total_unexcused": statuses.count(DrillStatus.UNEXCUSED),
        "updated_at": now_iso(),
    })


class DrillScheduleBook:
    """Repository of drill schedules.

    Args:
        store: Key-value persistence (default: JSON files in the data dir)
    """

    def __init__(self, store: Optional[KeyValueStore] = None):
        self._store = store if store is not None else JsonFileStore()
        self._schedules: List[DrillSchedule] = []
        self._load()

    def _load(self) -> None:
        raw = self._store.get(RESERVE_KEY)
        if not raw:
            return
        try:
            data = json.loads(raw)
            self._schedules = [DrillSchedule.model_validate(s) for s in data.get("schedules", [])]
        except (json.JSONDecodeError, ValidationError, AttributeError) as e:
            logger.warning(f"Ignoring unreadable drill schedule data ({RESERVE_KEY}): {e}")
            self._schedules = []

    def _save(self) -> None:
        payload = {"schedules": [s.model_dump(mode="json") for s in self._schedules]}
        self._store.set(RESERVE_KEY, json.dumps(payload, indent=2))

    def _replace(self, schedule: DrillSchedule) -> DrillSchedule:
        schedule = _recount(schedule)
        self._schedules = [schedule if s.id == schedule.id else s for s in self._schedules]
        self._save()
        return schedule

    def _require(self, schedule_id: str) -> DrillSchedule:
        schedule = self.get_schedule(schedule_id)
        if schedule is None:
            raise RecordNotFoundError(f"Drill schedule not found: {schedule_id}")
        return schedule

    def _require_weekend(self, schedule: DrillSchedule, weekend_id: str) -> DrillWeekend:
        for weekend in schedule.drill_weekends:
            if weekend.id == weekend_id:
                return weekend
        raise RecordNotFoundError(f"Drill weekend not found: {weekend_id}")

    def _replace_weekend(self, schedule: DrillSchedule, weekend: DrillWeekend) -> DrillSchedule:
        weekends = [weekend if w.id == weekend.id else w for w in schedule.drill_weekends]
        return self._replace(schedule.model_copy(update={"drill_weekends": weekends}))

    # =========================================================================
    # Schedules
    # =========================================================================

    def create_schedule(
        self,
        fiscal_year: int,
        branch: Union[Branch, str],
        unit_name: Optional[str] = None,
        at_days: int = 15,
    ) -> str:
        """Create an empty schedule for a fiscal year. Returns its id."""
        now = now_iso()
        schedule = DrillSchedule(
            id=new_id(),
            fiscal_year=int(fiscal_year),
            branch=Branch(branch),
            unit_name=unit_name,
            at_days=at_days,
            created_at=now,
            updated_at=now,
        )
        self._schedules.append(schedule)
        self._save()
        logger.debug(f"Created FY{schedule.fiscal_year} schedule {schedule.id}")
        return schedule.id

    def get_schedule(self, schedule_id: str) -> Optional[DrillSchedule]:
        for schedule in self._schedules:
            if schedule.id == schedule_id:
                return schedule
        return None

    def get_schedule_by_fy(self, fiscal_year: int) -> Optional[DrillSchedule]:
        for schedule in self._schedules:
            if schedule.fiscal_year == fiscal_year:
                return schedule
        return None

    def list_schedules(self) -> List[DrillSchedule]:
        return sorted(self._schedules, key=lambda s: s.fiscal_year, reverse=True)

    def update_schedule(self, schedule_id: str, updates: Dict[str, Any]) -> DrillSchedule:
        """Merge updates into a schedule. Counters are always recomputed."""
        schedule = self._require(schedule_id)
        merged = schedule.model_dump()
        merged.update({k: v for k, v in updates.items() if k not in ("id", "created_at")})
        return self._replace(DrillSchedule.model_validate(merged))

    def delete_schedule(self, schedule_id: str) -> bool:
        before = len(self._schedules)
        self._schedules = [s for s in self._schedules if s.id != schedule_id]
        if len(self._schedules) == before:
            return False
        self._save()
        return True

    # =========================================================================
    # Drill weekends
    # =========================================================================

    def add_drill_weekend(self, schedule_id: str, weekend: Union[DrillWeekend, Dict[str, Any]]) -> str:
        """Add a weekend and generate its drill periods. Returns the weekend id."""
        schedule = self._require(schedule_id)
        data = weekend.model_dump() if isinstance(weekend, DrillWeekend) else dict(weekend)
        data["id"] = new_id()
        data["is_paid"] = False
        data["periods"] = []
        new_weekend = DrillWeekend.model_validate(data)
        new_weekend = new_weekend.model_copy(update={
            "periods": build_drill_periods(new_weekend.start_date, new_weekend.muta_count),
        })

        self._replace(schedule.model_copy(update={
            "drill_weekends": schedule.drill_weekends + [new_weekend],
        }))
        logger.debug(f"Added weekend {new_weekend.id} ({new_weekend.muta_count} MUTAs) to {schedule_id}")
        return new_weekend.id

    def update_drill_weekend(self, schedule_id: str, weekend_id: str, updates: Dict[str, Any]) -> DrillWeekend:
        """Merge updates into a weekend.

        Changing start_date or muta_count regenerates the periods unless the
        update supplies its own.
        """
        schedule = self._require(schedule_id)
        current = self._require_weekend(schedule, weekend_id)

        merged = current.model_dump()
        merged.update({k: v for k, v in updates.items() if k != "id"})
        updated = DrillWeekend.model_validate(merged)
        if ("start_date" in updates or "muta_count" in updates) and "periods" not in updates:
            updated = updated.model_copy(update={
                "periods": build_drill_periods(updated.start_date, updated.muta_count),
            })

        self._replace_weekend(schedule, updated)
        return updated

    def remove_drill_weekend(self, schedule_id: str, weekend_id: str) -> bool:
        schedule = self._require(schedule_id)
        remaining = [w for w in schedule.drill_weekends if w.id != weekend_id]
        if len(remaining) == len(schedule.drill_weekends):
            return False
        self._replace(schedule.model_copy(update={"drill_weekends": remaining}))
        return True

    def get_drill_weekend(self, schedule_id: str, weekend_id: str) -> Optional[DrillWeekend]:
        schedule = self.get_schedule(schedule_id)
        if schedule is None:
            return None
        for weekend in schedule.drill_weekends:
            if weekend.id == weekend_id:
                return weekend
        return None

    # =========================================================================
    # Drill periods
    # =========================================================================

    def update_drill_period(
        self,
        schedule_id: str,
        weekend_id: str,
        period_id: str,
        status: Union[DrillStatus, str],
        note: Optional[str] = None,
    ) -> DrillPeriod:
        """Set a drill period's status (and note)."""
        schedule = self._require(schedule_id)
        weekend = self._require_weekend(schedule, weekend_id)

        periods = list(weekend.periods)
        for i, period in enumerate(periods):
            if period.id == period_id:
                periods[i] = period.model_copy(update={"status": DrillStatus(status), "note": note})
                break
        else:
            raise RecordNotFoundError(f"Drill period not found: {period_id}")

        self._replace_weekend(schedule, weekend.model_copy(update={"periods": periods}))
        return periods[i]

    def mark_weekend_complete(self, schedule_id: str, weekend_id: str) -> DrillWeekend:
        """Mark every period of a weekend completed."""
        schedule = self._require(schedule_id)
        weekend = self._require_weekend(schedule, weekend_id)
        periods = [p.model_copy(update={"status": DrillStatus.COMPLETED}) for p in weekend.periods]
        weekend = weekend.model_copy(update={"periods": periods})
        self._replace_weekend(schedule, weekend)
        return weekend

    def mark_weekend_paid(
        self,
        schedule_id: str,
        weekend_id: str,
        amount: Optional[float] = None,
        paid_date: Optional[str] = None,
    ) -> DrillWeekend:
        """Record that a weekend's drill pay arrived."""
        schedule = self._require(schedule_id)
        weekend = self._require_weekend(schedule, weekend_id)
        weekend = weekend.model_copy(update={
            "is_paid": True,
            "paid_date": paid_date or date.today().isoformat(),
            "actual_pay": amount,
        })
        self._replace_weekend(schedule, weekend)
        return weekend

    # =========================================================================
    # Queries
    # =========================================================================

    def _weekends(self, schedule_id: str) -> List[DrillWeekend]:
        schedule = self.get_schedule(schedule_id)
        return list(schedule.drill_weekends) if schedule else []

    def get_upcoming_drills(
        self, schedule_id: str, count: int = 5, today: Optional[Union[str, date]] = None
    ) -> List[DrillWeekend]:
        """Weekends starting today or later, soonest first."""
        cutoff = _to_date(today).isoformat() if today else date.today().isoformat()
        upcoming = [w for w in self._weekends(schedule_id) if w.start_date >= cutoff]
        return sorted(upcoming, key=lambda w: w.start_date)[:count]

    def get_completed_drills(self, schedule_id: str) -> List[DrillWeekend]:
        return [w for w in self._weekends(schedule_id) if _is_complete(w)]

    def get_unpaid_drills(self, schedule_id: str) -> List[DrillWeekend]:
        return [w for w in self._weekends(schedule_id) if _is_complete(w) and not w.is_paid]

    def get_missed_drills(self, schedule_id: str) -> List[DrillWeekend]:
        """Weekends with at least one unexcused absence."""
        return [
            w for w in self._weekends(schedule_id)
            if any(p.status == DrillStatus.UNEXCUSED for p in w.periods)
        ]

    def calculate_year_summary(
        self,
        schedule_id: str,
        profile: Optional[PayContext] = None,
        reference: Optional[ReferenceDataProvider] = None,
    ) -> YearSummary:
        """MUTA and AT progress for a schedule.

        Estimated annual pay (per-period drill pay x scheduled MUTAs) needs
        a profile; without one it is 0. Unknown schedules give an empty summary.
        """
        schedule = self.get_schedule(schedule_id)
        if schedule is None:
            return YearSummary()

        statuses = [p.status for w in schedule.drill_weekends for p in w.periods]
        completed = statuses.count(DrillStatus.COMPLETED)
        missed = statuses.count(DrillStatus.UNEXCUSED)

        estimated = 0.0
        if profile is not None:
            estimated = drill_pay_per_period(profile, reference) * schedule.total_scheduled_mutas

        return YearSummary(
            total_mutas=schedule.total_scheduled_mutas,
            completed_mutas=completed,
            remaining_mutas=schedule.total_scheduled_mutas - completed - missed,
            missed_mutas=missed,
            estimated_annual_pay=estimated,
            at_days_completed=schedule.at_days if schedule.at_completed else 0,
            at_days_remaining=0 if schedule.at_completed else schedule.at_days,
        )
