"""Tests for drill weekend and annual training pay calculators.

Uses an in-memory pay table (E-4 at $2,800/month) so results do not
depend on published rates.
"""

import json

import pytest

from milpay.sdk import (
    PayContext,
    TableReferenceData,
    compute_at_pay,
    compute_drill_pay,
    round2,
)


class TestDrillPay:
    """Tests for compute_drill_pay."""

    def test_standard_weekend(self, e4, e4_tables):
        """4 MUTAs at $2,800/month: $93.33/period, $373.33 gross, 22% withheld."""
        result = compute_drill_pay(e4, 4, reference=e4_tables)

        assert round2(result.base_drill_pay) == 93.33
        assert result.total_periods == 4
        assert round2(result.total_base_pay) == 373.33
        assert round2(result.gross_pay) == 373.33
        assert round2(result.estimated_taxes) == 82.13
        assert round2(result.estimated_net_pay) == 291.2
        assert result.bah_if_applicable == 0
        assert result.bas_if_applicable == 0

    def test_annual_projection_uses_48_mutas(self, e4, e4_tables):
        result = compute_drill_pay(e4, 4, reference=e4_tables)

        assert result.annual_projected_gross == pytest.approx(373.3333 * 12, abs=0.01)
        assert result.annual_projected_net == pytest.approx(result.estimated_net_pay * 12)

    def test_bah_is_two_days_regardless_of_mutas(self, e4, e4_tables):
        """Drill BAH is bah/30*2 whether the weekend has 2 or 4 MUTAs."""
        four = compute_drill_pay(e4, 4, include_bah=True, bah_amount=1500, reference=e4_tables)
        two = compute_drill_pay(e4, 2, include_bah=True, bah_amount=1500, reference=e4_tables)

        assert four.bah_if_applicable == pytest.approx(100.0)
        assert two.bah_if_applicable == pytest.approx(100.0)
        assert round2(four.gross_pay) == 473.33

    def test_bah_ignored_without_flag(self, e4, e4_tables):
        result = compute_drill_pay(e4, 4, include_bah=False, bah_amount=1500, reference=e4_tables)
        assert result.bah_if_applicable == 0

    def test_withholding_applies_to_whole_gross(self, e4, e4_tables):
        result = compute_drill_pay(e4, 4, include_bah=True, bah_amount=1500, reference=e4_tables)
        assert result.estimated_taxes == pytest.approx(result.gross_pay * 0.22)

    def test_breakdown_lists_base_and_bah(self, e4, e4_tables):
        result = compute_drill_pay(e4, 4, include_bah=True, bah_amount=1500, reference=e4_tables)

        items = [b.item for b in result.breakdown]
        assert items == ["Base Drill Pay (4 periods)", "BAH (prorated)"]
        assert result.breakdown[0].note == "$93.33 per period"

    def test_zero_mutas_projects_zero(self, e4, e4_tables):
        result = compute_drill_pay(e4, 0, reference=e4_tables)

        assert result.gross_pay == 0
        assert result.annual_projected_gross == 0
        assert result.annual_projected_net == 0

    def test_unknown_grade_row_gives_zero_pay(self, e4_tables):
        """Missing table row degrades to $0 rather than raising."""
        officer = PayContext(pay_grade="O-3", years_of_service=4)
        result = compute_drill_pay(officer, 4, reference=e4_tables)

        assert result.base_drill_pay == 0
        assert result.gross_pay == 0

    def test_tax_rate_override(self, e4, e4_tables):
        result = compute_drill_pay(e4, 4, reference=e4_tables, tax_rate=0.10)
        assert round2(result.estimated_taxes) == 37.33

    def test_tax_rate_from_settings(self, e4, e4_tables, isolated_env):
        settings_path = isolated_env["config_dir"] / "settings.json"
        settings = json.loads(settings_path.read_text())
        settings["flat_tax_rate"] = 0.12
        settings_path.write_text(json.dumps(settings))

        result = compute_drill_pay(e4, 4, reference=e4_tables)
        assert result.estimated_taxes == pytest.approx(result.gross_pay * 0.12)

    def test_reference_loaded_from_config_when_omitted(self, e4, isolated_env):
        tables_dir = isolated_env["config_dir"] / "pay-tables"
        tables_dir.mkdir()
        (tables_dir / "2024.yaml").write_text("base_pay:\n  E-4:\n    0: 3000.00\n")

        result = compute_drill_pay(e4, 4)
        assert result.base_drill_pay == pytest.approx(100.0)


class TestATPay:
    """Tests for compute_at_pay."""

    def test_fifteen_days_with_allowances(self, e4, e4_tables):
        """15 days: base $1,400 taxable; BAH $750 and BAS $230 tax-free."""
        result = compute_at_pay(
            e4, 15, include_bah=True, bah_amount=1500, include_bas=True, reference=e4_tables,
        )

        assert result.total_base_pay == pytest.approx(1400.0)
        assert result.total_bah == pytest.approx(750.0)
        assert result.total_bas == pytest.approx(230.0)
        assert result.gross_pay == pytest.approx(2380.0)
        assert result.taxable_amount == pytest.approx(1400.0)
        assert result.tax_free_amount == pytest.approx(980.0)
        assert result.estimated_taxes == pytest.approx(308.0)
        assert result.estimated_net_pay == pytest.approx(2072.0)

    def test_daily_rates(self, e4, e4_tables):
        result = compute_at_pay(e4, 15, include_bah=True, bah_amount=1500, reference=e4_tables)

        assert result.daily_base_pay == pytest.approx(2800 / 30)
        assert result.daily_bah == pytest.approx(50.0)
        assert result.daily_bas == 0
        assert result.total_days == 15

    def test_per_diem_is_tax_free(self, e4, e4_tables):
        result = compute_at_pay(e4, 10, include_per_diem=True, per_diem_rate=59, reference=e4_tables)

        assert result.total_per_diem == pytest.approx(590.0)
        assert result.tax_free_amount == pytest.approx(590.0)
        assert result.estimated_taxes == pytest.approx(result.total_base_pay * 0.22)

    def test_breakdown_omits_zero_components(self, e4, e4_tables):
        result = compute_at_pay(e4, 15, include_bas=True, reference=e4_tables)

        assert [(b.item, b.taxable) for b in result.breakdown] == [("Base Pay", True), ("BAS", False)]

    def test_officer_bas_rate(self):
        tables = TableReferenceData(
            base_pay={"O-1": {0: 3800.00}},
            bas_rates={"enlisted": 460.00, "officer": 300.00},
        )
        officer = PayContext(pay_grade="O-1", years_of_service=0)

        result = compute_at_pay(officer, 30, include_bas=True, reference=tables)
        assert result.total_bas == pytest.approx(300.0)

    def test_blank_inputs_coerced_to_zero(self, e4, e4_tables):
        result = compute_at_pay(
            e4, 15, include_bah=True, bah_amount=None, include_per_diem=True,
            per_diem_rate=float("nan"), reference=e4_tables,
        )

        assert result.total_bah == 0
        assert result.total_per_diem == 0
        assert result.gross_pay == pytest.approx(1400.0)
