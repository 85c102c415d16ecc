"""Tests for pay-table reference data."""

import pytest

from milpay.sdk import (
    PayGrade,
    TableReferenceData,
    bas_component_for,
    load_reference_data,
    pay_grade_type,
)


@pytest.fixture
def tables():
    return TableReferenceData(
        base_pay={
            "E-4": {0: 2800.00, 2: 2900.00, 3: 3000.00},
            "O-3": {2: 5000.00, 20: 9000.00},
        },
    )


class TestBasePayRate:
    """Tests for base_pay_rate column lookup."""

    @pytest.mark.parametrize("yos,expected", [
        (0, 2800.00),
        (1, 2800.00),
        (2, 2900.00),
        (3, 3000.00),
        (25, 3000.00),
    ])
    def test_highest_column_not_above_yos(self, tables, yos, expected):
        assert tables.base_pay_rate(PayGrade.E4, yos) == expected

    def test_yos_capped_at_40(self, tables):
        assert tables.base_pay_rate("O-3", 60) == 9000.00

    def test_yos_below_first_column_is_zero(self, tables):
        assert tables.base_pay_rate("O-3", 1) == 0

    def test_grade_without_row_is_zero(self, tables):
        assert tables.base_pay_rate("E-9", 20) == 0

    def test_unknown_grade_is_zero(self, tables):
        assert tables.base_pay_rate("X-1", 2) == 0


class TestBASRates:
    """Tests for BAS lookup."""

    def test_default_rates(self, tables):
        assert tables.bas_allowance_rate("enlisted") == 460.25
        assert tables.bas_allowance_rate("officer") == 316.98

    def test_unknown_component_is_zero(self, tables):
        assert tables.bas_allowance_rate("warrant") == 0

    @pytest.mark.parametrize("grade,kind,component", [
        ("E-1", "enlisted", "enlisted"),
        ("W-2", "warrant", "officer"),
        ("O-10", "officer", "officer"),
    ])
    def test_grade_type_and_bas_component(self, grade, kind, component):
        assert pay_grade_type(grade) == kind
        assert bas_component_for(grade) == component


class TestLoadReferenceData:
    """Tests for loading pay tables from the config directory."""

    def test_missing_file_has_no_base_pay(self):
        reference = load_reference_data(2030)

        assert reference.base_pay_rate("E-4", 3) == 0
        assert reference.bas_allowance_rate("enlisted") == 460.25

    def test_reads_year_file(self, isolated_env):
        tables_dir = isolated_env["config_dir"] / "pay-tables"
        tables_dir.mkdir()
        (tables_dir / "2025.yaml").write_text(
            "base_pay:\n"
            "  E-5:\n"
            "    0: 3000.00\n"
            "    4: 3500.00\n"
            "bas:\n"
            "  enlisted: 465.77\n"
            "  officer: 320.78\n"
        )

        reference = load_reference_data("2025")

        assert reference.base_pay_rate("E-5", 6) == 3500.00
        assert reference.bas_allowance_rate("enlisted") == 465.77

    def test_unknown_grade_row_is_skipped(self, isolated_env):
        tables_dir = isolated_env["config_dir"] / "pay-tables"
        tables_dir.mkdir()
        (tables_dir / "2024.yaml").write_text(
            "base_pay:\n"
            "  E-4:\n"
            "    0: 2800.00\n"
            "  E-10:\n"
            "    0: 9999.00\n"
        )

        reference = load_reference_data(2024)

        assert reference.base_pay_rate("E-4", 3) == 2800.00
        assert reference.base_pay_rate("E-10", 3) == 0

    def test_year_from_profile(self, isolated_env):
        tables_dir = isolated_env["config_dir"] / "pay-tables"
        tables_dir.mkdir()
        (tables_dir / "2026.yaml").write_text("base_pay:\n  E-1:\n    0: 2100.00\n")
        (isolated_env["config_dir"] / "profile.yaml").write_text("reference_data:\n  year: 2026\n")

        assert load_reference_data().base_pay_rate("E-1", 0) == 2100.00
