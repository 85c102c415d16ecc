"""Tests for reserve drill schedules (DrillScheduleBook)."""

from datetime import date

import pytest

from milpay.sdk import (
    DrillScheduleBook,
    DrillStatus,
    JsonFileStore,
    MemoryStore,
    RecordNotFoundError,
    build_drill_periods,
    fiscal_year_for,
)


@pytest.fixture
def book():
    return DrillScheduleBook(store=MemoryStore())


@pytest.fixture
def schedule_id(book):
    return book.create_schedule(2025, "army", unit_name="HHC 1-110 IN")


def add_weekend(book, schedule_id, start_date, muta_count=4):
    return book.add_drill_weekend(schedule_id, {
        "start_date": start_date,
        "end_date": start_date,
        "muta_count": muta_count,
    })


class TestFiscalYear:
    """Tests for fiscal_year_for."""

    @pytest.mark.parametrize("day,expected", [
        ("2024-10-01", 2025),
        ("2024-09-30", 2024),
        ("2025-09-30", 2025),
        ("2025-01-15", 2025),
        (date(2024, 12, 31), 2025),
    ])
    def test_october_starts_next_fy(self, day, expected):
        assert fiscal_year_for(day).fiscal_year == expected

    def test_bounds(self):
        fy = fiscal_year_for("2025-03-08")
        assert fy.start_date == date(2024, 10, 1)
        assert fy.end_date == date(2025, 9, 30)


class TestBuildDrillPeriods:
    """Tests for build_drill_periods."""

    def test_standard_weekend(self):
        periods = build_drill_periods("2025-03-08", 4)

        assert [(p.period_number, p.date) for p in periods] == [
            (1, "2025-03-08"),
            (2, "2025-03-08"),
            (3, "2025-03-09"),
            (4, "2025-03-09"),
        ]
        assert all(p.status == DrillStatus.SCHEDULED for p in periods)
        assert len({p.id for p in periods}) == 4

    def test_period_numbers_cycle_past_four(self):
        periods = build_drill_periods("2025-03-08", 6)
        assert [p.period_number for p in periods] == [1, 2, 3, 4, 1, 2]

    def test_month_boundary(self):
        periods = build_drill_periods("2025-05-31", 4)
        assert periods[-1].date == "2025-06-01"


class TestSchedules:
    """Tests for schedule CRUD."""

    def test_create_and_lookup(self, book, schedule_id):
        schedule = book.get_schedule(schedule_id)

        assert schedule.fiscal_year == 2025
        assert schedule.branch.value == "army"
        assert schedule.at_days == 15
        assert book.get_schedule_by_fy(2025).id == schedule_id
        assert book.get_schedule_by_fy(2026) is None

    def test_list_newest_fy_first(self, book, schedule_id):
        book.create_schedule(2026, "army")
        assert [s.fiscal_year for s in book.list_schedules()] == [2026, 2025]

    def test_update_schedule(self, book, schedule_id):
        updated = book.update_schedule(schedule_id, {"unit_name": "A Co", "id": "ignored"})

        assert updated.id == schedule_id
        assert updated.unit_name == "A Co"

    def test_delete_schedule(self, book, schedule_id):
        assert book.delete_schedule(schedule_id) is True
        assert book.delete_schedule(schedule_id) is False
        assert book.get_schedule(schedule_id) is None

    def test_unknown_schedule_raises(self, book):
        with pytest.raises(RecordNotFoundError):
            add_weekend(book, "missing", "2025-03-08")

    def test_persisted_under_reserve_key(self, tmp_path):
        book = DrillScheduleBook(store=JsonFileStore(tmp_path))
        schedule_id = book.create_schedule(2025, "navy")
        add_weekend(book, schedule_id, "2025-03-08")

        reloaded = DrillScheduleBook(store=JsonFileStore(tmp_path))
        assert (tmp_path / "milpay-reserve.json").exists()
        assert reloaded.get_schedule(schedule_id) == book.get_schedule(schedule_id)


class TestWeekends:
    """MUTA counters always match the weekends."""

    def test_scheduled_mutas_track_add_and_remove(self, book, schedule_id):
        first = add_weekend(book, schedule_id, "2024-11-02", 4)
        add_weekend(book, schedule_id, "2024-12-07", 2)
        assert book.get_schedule(schedule_id).total_scheduled_mutas == 6

        assert book.remove_drill_weekend(schedule_id, first) is True
        assert book.get_schedule(schedule_id).total_scheduled_mutas == 2
        assert book.remove_drill_weekend(schedule_id, first) is False

    def test_weekend_gets_periods(self, book, schedule_id):
        weekend_id = add_weekend(book, schedule_id, "2025-03-08")
        weekend = book.get_drill_weekend(schedule_id, weekend_id)

        assert len(weekend.periods) == 4
        assert weekend.is_paid is False

    def test_changing_muta_count_regenerates_periods(self, book, schedule_id):
        weekend_id = add_weekend(book, schedule_id, "2025-03-08")

        updated = book.update_drill_weekend(schedule_id, weekend_id, {"muta_count": 2})

        assert [p.period_number for p in updated.periods] == [1, 2]
        assert book.get_schedule(schedule_id).total_scheduled_mutas == 2

    def test_title_update_keeps_periods(self, book, schedule_id):
        weekend_id = add_weekend(book, schedule_id, "2025-03-08")
        before = book.get_drill_weekend(schedule_id, weekend_id).periods

        updated = book.update_drill_weekend(schedule_id, weekend_id, {"title": "Range"})
        assert updated.periods == before

    def test_period_status_updates_counters(self, book, schedule_id):
        weekend_id = add_weekend(book, schedule_id, "2025-03-08")
        p1, p2, p3, p4 = book.get_drill_weekend(schedule_id, weekend_id).periods

        book.update_drill_period(schedule_id, weekend_id, p1.id, DrillStatus.COMPLETED)
        book.update_drill_period(schedule_id, weekend_id, p2.id, "excused", note="medical")
        book.update_drill_period(schedule_id, weekend_id, p3.id, DrillStatus.UNEXCUSED)
        schedule = book.get_schedule(schedule_id)

        assert schedule.total_completed_mutas == 1
        assert schedule.total_excused == 1
        assert schedule.total_unexcused == 1
        assert book.get_drill_weekend(schedule_id, weekend_id).periods[1].note == "medical"

        book.update_drill_period(schedule_id, weekend_id, p3.id, DrillStatus.COMPLETED)
        assert book.get_schedule(schedule_id).total_unexcused == 0

    def test_unknown_period_raises(self, book, schedule_id):
        weekend_id = add_weekend(book, schedule_id, "2025-03-08")
        with pytest.raises(RecordNotFoundError):
            book.update_drill_period(schedule_id, weekend_id, "nope", DrillStatus.COMPLETED)

    def test_complete_and_paid(self, book, schedule_id):
        weekend_id = add_weekend(book, schedule_id, "2025-03-08")

        book.mark_weekend_complete(schedule_id, weekend_id)
        assert [w.id for w in book.get_unpaid_drills(schedule_id)] == [weekend_id]

        paid = book.mark_weekend_paid(schedule_id, weekend_id, amount=291.20, paid_date="2025-04-01")
        assert paid.is_paid is True
        assert paid.actual_pay == 291.20
        assert book.get_unpaid_drills(schedule_id) == []
        assert [w.id for w in book.get_completed_drills(schedule_id)] == [weekend_id]


class TestQueries:
    """Tests for upcoming/missed queries and the year summary."""

    def test_upcoming_soonest_first(self, book, schedule_id):
        later = add_weekend(book, schedule_id, "2025-05-03")
        past = add_weekend(book, schedule_id, "2024-11-02")
        sooner = add_weekend(book, schedule_id, "2025-03-08")

        upcoming = book.get_upcoming_drills(schedule_id, today="2025-01-01")
        assert [w.id for w in upcoming] == [sooner, later]
        assert past not in [w.id for w in upcoming]
        assert len(book.get_upcoming_drills(schedule_id, count=1, today="2025-01-01")) == 1

    def test_missed_drills(self, book, schedule_id):
        missed = add_weekend(book, schedule_id, "2024-11-02")
        add_weekend(book, schedule_id, "2024-12-07")
        period = book.get_drill_weekend(schedule_id, missed).periods[0]
        book.update_drill_period(schedule_id, missed, period.id, DrillStatus.UNEXCUSED)

        assert [w.id for w in book.get_missed_drills(schedule_id)] == [missed]

    def test_unknown_schedule_queries_are_empty(self, book):
        assert book.get_upcoming_drills("missing") == []
        assert book.get_missed_drills("missing") == []

    def test_year_summary(self, book, schedule_id, e4, e4_tables):
        done = add_weekend(book, schedule_id, "2024-11-02")
        other = add_weekend(book, schedule_id, "2024-12-07")
        book.mark_weekend_complete(schedule_id, done)
        period = book.get_drill_weekend(schedule_id, other).periods[0]
        book.update_drill_period(schedule_id, other, period.id, DrillStatus.UNEXCUSED)

        summary = book.calculate_year_summary(schedule_id, profile=e4, reference=e4_tables)

        assert summary.total_mutas == 8
        assert summary.completed_mutas == 4
        assert summary.missed_mutas == 1
        assert summary.remaining_mutas == 3
        assert summary.estimated_annual_pay == pytest.approx(2800 / 30 * 8)
        assert summary.at_days_completed == 0
        assert summary.at_days_remaining == 15

    def test_year_summary_after_at(self, book, schedule_id):
        book.update_schedule(schedule_id, {"at_completed": True})
        summary = book.calculate_year_summary(schedule_id)

        assert summary.at_days_completed == 15
        assert summary.at_days_remaining == 0
        assert summary.estimated_annual_pay == 0

    def test_year_summary_unknown_schedule(self, book):
        summary = book.calculate_year_summary("missing")
        assert summary.total_mutas == 0
