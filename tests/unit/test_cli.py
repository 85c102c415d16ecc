"""Tests for the mil-pay CLI.

Uses CliRunner with isolated config/data directories (see conftest.py)
and a pay table written to <config>/pay-tables/2024.yaml.
"""

import json

import pytest
import yaml
from click.testing import CliRunner

from milpay.cli.__main__ import cli


@pytest.fixture
def pay_tables(isolated_env):
    """E-4 at $2,800/month in the default 2024 table."""
    tables_dir = isolated_env["config_dir"] / "pay-tables"
    tables_dir.mkdir()
    (tables_dir / "2024.yaml").write_text(
        "base_pay:\n"
        "  E-4:\n"
        "    0: 2800.00\n"
        "bas:\n"
        "  enlisted: 460.00\n"
        "  officer: 316.98\n"
    )
    return tables_dir


@pytest.fixture
def runner():
    return CliRunner()


def write_entry_file(path, make_entry, **kwargs):
    path.write_text(yaml.dump(make_entry(**kwargs)))
    return path


def added_id(output):
    """Entry id from 'Added LES entry <id> (...)'."""
    line = next(l for l in output.splitlines() if l.startswith("Added LES entry"))
    return line.split()[3]


class TestCalculatorCommands:
    """Tests for drill-pay, at-pay and orders-compare."""

    def test_drill_pay_json(self, runner, pay_tables):
        result = runner.invoke(cli, ["drill-pay", "4", "--grade", "E-4", "--yos", "3", "--format", "json"])

        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert data["total_periods"] == 4
        assert data["gross_pay"] == pytest.approx(373.333, abs=0.001)
        assert data["estimated_net_pay"] == pytest.approx(291.2, abs=0.01)

    def test_drill_pay_text(self, runner, pay_tables):
        result = runner.invoke(cli, ["drill-pay", "--grade", "E-4"])

        assert result.exit_code == 0, result.output
        assert "373.33" in result.output

    def test_drill_pay_uses_profile(self, runner, pay_tables, isolated_env):
        (isolated_env["config_dir"] / "profile.yaml").write_text(
            "service_member:\n  pay_grade: E-4\n  years_of_service: 3\n"
            "housing:\n  bah_amount: 1500\n"
        )

        result = runner.invoke(cli, ["drill-pay", "--bah", "--format", "json"])

        assert result.exit_code == 0, result.output
        assert json.loads(result.output)["bah_if_applicable"] == pytest.approx(100.0)

    def test_drill_pay_requires_grade(self, runner, pay_tables):
        result = runner.invoke(cli, ["drill-pay"])

        assert result.exit_code != 0
        assert "Pay grade required" in result.output

    def test_bah_flag_requires_amount(self, runner, pay_tables):
        result = runner.invoke(cli, ["drill-pay", "--grade", "E-4", "--bah"])

        assert result.exit_code != 0
        assert "--bah needs a monthly amount" in result.output

    def test_missing_table_warns(self, runner):
        result = runner.invoke(cli, ["drill-pay", "--grade", "E-4", "--format", "json"])

        assert result.exit_code == 0
        assert "no base pay for E-4" in result.output

    def test_tax_rate_setting_applies(self, runner, pay_tables):
        assert runner.invoke(cli, ["settings", "tax-rate", "0.10"]).exit_code == 0

        result = runner.invoke(cli, ["drill-pay", "--grade", "E-4", "--format", "json"])
        data = json.loads(result.output)
        assert data["estimated_taxes"] == pytest.approx(data["gross_pay"] * 0.10)

    def test_at_pay_json(self, runner, pay_tables):
        result = runner.invoke(cli, [
            "at-pay", "15", "--grade", "E-4", "--bah", "--bah-amount", "1500", "--bas", "--format", "json",
        ])

        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert data["gross_pay"] == pytest.approx(2380.0)
        assert data["tax_free_amount"] == pytest.approx(980.0)
        assert data["estimated_taxes"] == pytest.approx(308.0)

    def test_orders_compare_with_rate(self, runner, pay_tables):
        result = runner.invoke(cli, [
            "orders-compare", "15", "--grade", "E-4", "--bah", "--bah-amount", "1500", "--bas",
            "--civilian-daily-rate", "400", "--differential", "--format", "json",
        ])

        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert data["recommendation"] == "negotiate"
        assert data["employer_differential_amount"] == pytest.approx(3620.0)

    def test_orders_compare_rate_from_profile(self, runner, pay_tables, isolated_env):
        (isolated_env["config_dir"] / "profile.yaml").write_text(
            "service_member:\n  pay_grade: E-4\n  years_of_service: 3\n"
            "civilian_job:\n  annual_salary: 26000\n"
        )

        result = runner.invoke(cli, ["orders-compare", "15", "--format", "json"])

        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert data["civilian_daily_rate"] == pytest.approx(100.0)
        assert data["recommendation"] == "neutral"

    def test_orders_compare_needs_civilian_income(self, runner, pay_tables):
        result = runner.invoke(cli, ["orders-compare", "15", "--grade", "E-4"])

        assert result.exit_code != 0
        assert "Civilian income required" in result.output


class TestLesCommands:
    """Tests for the les command group."""

    def test_add_list_show(self, runner, tmp_path, make_entry):
        entry_file = write_entry_file(tmp_path / "jan.yaml", make_entry)

        result = runner.invoke(cli, ["les", "add", str(entry_file)])
        assert result.exit_code == 0, result.output
        assert "Net $1,142.90" in result.output
        entry_id = added_id(result.output)

        result = runner.invoke(cli, ["les", "list", "--format", "json"])
        entries = json.loads(result.output)
        assert [e["id"] for e in entries] == [entry_id]

        result = runner.invoke(cli, ["les", "show", entry_id, "--format", "json"])
        assert json.loads(result.output)["totals"]["gross_pay"] == 1400.0

    def test_add_json_file(self, runner, tmp_path, make_entry):
        entry_file = tmp_path / "jan.json"
        entry_file.write_text(json.dumps(make_entry()))

        result = runner.invoke(cli, ["les", "add", str(entry_file)])
        assert result.exit_code == 0, result.output

    def test_add_reports_warnings(self, runner, tmp_path, make_entry):
        entry_file = write_entry_file(tmp_path / "jan.yaml", make_entry, deductions=[])

        result = runner.invoke(cli, ["les", "add", str(entry_file)])

        assert result.exit_code == 0
        assert "No federal tax withholding" in result.output

    def test_add_invalid_entry(self, runner, tmp_path, make_entry):
        entry_file = write_entry_file(tmp_path / "bad.yaml", make_entry, typo_field=1)

        result = runner.invoke(cli, ["les", "add", str(entry_file)])

        assert result.exit_code != 0
        assert "Invalid LES entry" in result.output

    def test_list_by_year(self, runner, tmp_path, make_entry):
        runner.invoke(cli, ["les", "add", str(write_entry_file(
            tmp_path / "a.yaml", make_entry, pay_date="2024-12-01", month=11, year=2024))])
        runner.invoke(cli, ["les", "add", str(write_entry_file(tmp_path / "b.yaml", make_entry))])

        result = runner.invoke(cli, ["les", "list", "2024", "--format", "json"])
        assert [e["pay_period"]["year"] for e in json.loads(result.output)] == [2024]

    def test_compare_with_previous(self, runner, tmp_path, make_entry):
        runner.invoke(cli, ["les", "add", str(write_entry_file(
            tmp_path / "a.yaml", make_entry, pay_date="2025-01-15", period_type="mid_month"))])
        result = runner.invoke(cli, ["les", "add", str(write_entry_file(
            tmp_path / "b.yaml", make_entry, entitlements=[{"type": "base_pay", "amount": 1500}]))])
        current_id = added_id(result.output)

        result = runner.invoke(cli, ["les", "compare", current_id, "--format", "json"])

        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert [c["type"] for c in data["changes"]] == ["base_pay"]
        assert data["summary"]["net_pay_difference"] == 100.0

    def test_compare_text(self, runner, tmp_path, make_entry):
        first = added_id(runner.invoke(cli, ["les", "add", str(write_entry_file(
            tmp_path / "a.yaml", make_entry, pay_date="2025-01-15", period_type="mid_month"))]).output)
        second = added_id(runner.invoke(cli, ["les", "add", str(write_entry_file(
            tmp_path / "b.yaml", make_entry, entitlements=[{"type": "base_pay", "amount": 1500}]))]).output)

        result = runner.invoke(cli, ["les", "compare", first, second])

        assert result.exit_code == 0, result.output
        assert "Net pay: +$100.00" in result.output

    def test_compare_oldest_entry_fails(self, runner, tmp_path, make_entry):
        entry_id = added_id(runner.invoke(cli, ["les", "add", str(write_entry_file(
            tmp_path / "a.yaml", make_entry))]).output)

        result = runner.invoke(cli, ["les", "compare", entry_id])
        assert result.exit_code != 0
        assert "No earlier entry" in result.output

    def test_trend(self, runner, tmp_path, make_entry):
        for month, amount in ((1, 1000), (2, 1000), (3, 1500), (4, 2000)):
            runner.invoke(cli, ["les", "add", str(write_entry_file(
                tmp_path / f"{month}.yaml", make_entry,
                pay_date=f"2025-{month:02d}-28", month=month,
                entitlements=[{"type": "base_pay", "amount": amount}], deductions=[],
            ))])

        result = runner.invoke(cli, ["les", "trend", "net_pay", "--format", "json"])

        assert result.exit_code == 0, result.output
        assert json.loads(result.output)["trend"] == "volatile"

    def test_trend_needs_two_entries(self, runner):
        result = runner.invoke(cli, ["les", "trend"])
        assert result.exit_code != 0

    def test_validate_exit_codes(self, runner, tmp_path, make_entry):
        good = added_id(runner.invoke(cli, ["les", "add", str(write_entry_file(
            tmp_path / "a.yaml", make_entry))]).output)
        bad = added_id(runner.invoke(cli, ["les", "add", str(write_entry_file(
            tmp_path / "b.yaml", make_entry, pay_date="2025-03-01", month=2, entitlements=[]))]).output)

        assert runner.invoke(cli, ["les", "validate", good]).exit_code == 0

        result = runner.invoke(cli, ["les", "validate", bad, "--format", "json"])
        assert result.exit_code == 1
        assert json.loads(result.output)["errors"] == ["No entitlements entered"]

    def test_delete(self, runner, tmp_path, make_entry):
        entry_id = added_id(runner.invoke(cli, ["les", "add", str(write_entry_file(
            tmp_path / "a.yaml", make_entry))]).output)

        assert runner.invoke(cli, ["les", "delete", entry_id]).exit_code == 0
        assert runner.invoke(cli, ["les", "delete", entry_id]).exit_code != 0
        assert runner.invoke(cli, ["les", "show", entry_id]).exit_code != 0


class TestDrillCommands:
    """Tests for the drill command group."""

    def test_schedule_lifecycle(self, runner, pay_tables, isolated_env):
        result = runner.invoke(cli, ["drill", "schedule-create", "2025", "army", "--unit", "A Co"])
        assert result.exit_code == 0, result.output

        result = runner.invoke(cli, ["drill", "add-weekend", "2025", "2024-11-02"])
        assert result.exit_code == 0, result.output
        weekend_id = result.output.split()[2]
        assert "period 3 2024-11-03" in result.output

        assert runner.invoke(cli, ["drill", "complete", "2025", weekend_id]).exit_code == 0

        (isolated_env["config_dir"] / "profile.yaml").write_text(
            "service_member:\n  pay_grade: E-4\n  years_of_service: 3\n"
        )
        result = runner.invoke(cli, ["drill", "summary", "2025", "--format", "json"])

        assert result.exit_code == 0, result.output
        summary = json.loads(result.output)
        assert summary["total_mutas"] == 4
        assert summary["completed_mutas"] == 4
        assert summary["estimated_annual_pay"] == pytest.approx(2800 / 30 * 4)

    def test_duplicate_fiscal_year(self, runner):
        runner.invoke(cli, ["drill", "schedule-create", "2025", "navy"])
        result = runner.invoke(cli, ["drill", "schedule-create", "2025", "navy"])

        assert result.exit_code != 0
        assert "already exists" in result.output

    def test_unknown_schedule(self, runner):
        result = runner.invoke(cli, ["drill", "show", "2031"])

        assert result.exit_code != 0
        assert "Drill schedule not found" in result.output

    def test_list_and_show(self, runner):
        runner.invoke(cli, ["drill", "schedule-create", "2025", "army"])
        runner.invoke(cli, ["drill", "add-weekend", "2025", "2025-03-08", "--mutas", "2"])

        result = runner.invoke(cli, ["drill", "list"])
        assert "FY2025" in result.output
        assert "2 MUTAs" in result.output

        assert runner.invoke(cli, ["drill", "show", "2025"]).exit_code == 0

    def test_period_status_and_paid(self, runner):
        runner.invoke(cli, ["drill", "schedule-create", "2025", "army"])
        result = runner.invoke(cli, ["drill", "add-weekend", "2025", "2025-03-08"])
        weekend_id = result.output.split()[2]
        period_id = result.output.splitlines()[1].split("id=")[1]

        result = runner.invoke(cli, ["drill", "period", "2025", weekend_id, period_id, "excused", "--note", "sick"])
        assert result.exit_code == 0, result.output

        result = runner.invoke(cli, ["drill", "paid", "2025", weekend_id, "--amount", "291.20"])
        assert result.exit_code == 0, result.output

        result = runner.invoke(cli, ["drill", "period", "2025", weekend_id, "nope", "completed"])
        assert result.exit_code != 0


class TestProfileAndSettingsCommands:
    """Tests for profile and settings groups."""

    def test_profile_set_and_get(self, runner):
        result = runner.invoke(cli, ["profile", "set", "service_member.pay_grade", "E-5"])
        assert result.exit_code == 0, result.output

        result = runner.invoke(cli, ["profile", "get", "service_member.pay_grade"])
        assert result.output.strip() == "E-5"

    def test_profile_set_parses_numbers_and_booleans(self, runner, isolated_env):
        runner.invoke(cli, ["profile", "set", "housing.bah_amount", "1500.50"])
        runner.invoke(cli, ["profile", "set", "service_member.years_of_service", "6"])
        runner.invoke(cli, ["profile", "set", "civilian_job.differential_pay_policy", "yes"])

        profile = yaml.safe_load((isolated_env["config_dir"] / "profile.yaml").read_text())
        assert profile["housing"]["bah_amount"] == 1500.50
        assert profile["service_member"]["years_of_service"] == 6
        assert profile["civilian_job"]["differential_pay_policy"] is True

    def test_profile_set_rejects_unknown_key(self, runner):
        result = runner.invoke(cli, ["profile", "set", "drive.folder_id", "abc"])

        assert result.exit_code != 0
        assert "Unknown section" in result.output

    def test_profile_show(self, runner):
        result = runner.invoke(cli, ["profile", "show"])
        assert "Profile does not exist yet" in result.output

        runner.invoke(cli, ["profile", "set", "service_member.pay_grade", "E-4"])
        result = runner.invoke(cli, ["profile", "show"])
        assert "Feature Readiness:" in result.output
        assert "service_member.years_of_service" in result.output

    def test_profile_use(self, runner, tmp_path, isolated_env):
        external = tmp_path / "repo" / "profile.yaml"
        external.parent.mkdir()
        external.write_text("service_member:\n  pay_grade: O-3\n  years_of_service: 8\n")

        result = runner.invoke(cli, ["profile", "use", str(external)])
        assert result.exit_code == 0, result.output

        settings = json.loads((isolated_env["config_dir"] / "settings.json").read_text())
        assert settings["profile"] == str(external.resolve())
        assert runner.invoke(cli, ["profile", "get", "service_member.pay_grade"]).output.strip() == "O-3"

    def test_profile_use_rejects_invalid(self, runner, tmp_path):
        external = tmp_path / "profile.yaml"
        external.write_text("service_member:\n  years_of_service: many\n")

        result = runner.invoke(cli, ["profile", "use", str(external)])
        assert result.exit_code != 0

    def test_settings_data_dir(self, runner, tmp_path):
        target = tmp_path / "new-data"

        result = runner.invoke(cli, ["settings", "data-dir", str(target)])
        assert result.exit_code == 0, result.output
        assert target.is_dir()

        result = runner.invoke(cli, ["settings", "show"])
        assert str(target) in result.output

    def test_settings_tax_rate_bounds(self, runner):
        result = runner.invoke(cli, ["settings", "tax-rate", "1.5"])
        assert result.exit_code != 0

    def test_version(self, runner):
        result = runner.invoke(cli, ["--version"])
        assert "mil-pay" in result.output
