"""Shared fixtures for milpay unit tests.

Every test runs against an isolated config directory (MILPAY_CONFIG_PATH)
and data directory (settings.json data_dir) under tmp_path so no test
reads or writes the real ~/.config/milpay.
"""

import json

import pytest

from milpay.sdk import PayContext, TableReferenceData


@pytest.fixture(autouse=True)
def isolated_env(tmp_path, monkeypatch):
    """Point the SDK at empty config and data directories."""
    config_dir = tmp_path / "config"
    data_dir = tmp_path / "data"

    config_dir.mkdir()
    data_dir.mkdir()

    monkeypatch.setenv("MILPAY_CONFIG_PATH", str(config_dir))

    settings = {"data_dir": str(data_dir)}
    (config_dir / "settings.json").write_text(json.dumps(settings))

    return {
        "config_dir": config_dir,
        "data_dir": data_dir,
    }


@pytest.fixture
def e4_tables():
    """E-4 at $2,800/month regardless of YOS, enlisted BAS at $460/month."""
    return TableReferenceData(
        base_pay={"E-4": {0: 2800.00}},
        bas_rates={"enlisted": 460.00, "officer": 316.98},
    )


@pytest.fixture
def e4():
    return PayContext(pay_grade="E-4", years_of_service=3, branch="army")


@pytest.fixture
def make_entry():
    """Factory for LES entry dicts as a user would write them in YAML."""

    def _make(
        pay_date="2025-02-01",
        month=1,
        year=2025,
        period_type="end_month",
        entitlements=None,
        deductions=None,
        allotments=None,
        **extra,
    ):
        if entitlements is None:
            entitlements = [{"type": "base_pay", "description": "BASE PAY", "amount": 1400.00}]
        if deductions is None:
            deductions = [
                {"type": "federal_tax", "description": "FEDERAL TAXES", "amount": 150.00},
                {"type": "fica_social_security", "description": "FICA-SOC SECURITY", "amount": 86.80},
                {"type": "fica_medicare", "description": "FICA-MEDICARE", "amount": 20.30},
            ]
        entry = {
            "pay_period": {
                "type": period_type,
                "start_date": f"{year}-{month:02d}-16",
                "end_date": f"{year}-{month:02d}-28",
                "pay_date": pay_date,
                "month": month,
                "year": year,
            },
            "service_member": {"pay_grade": "E-4", "years_of_service": 3, "branch": "army"},
            "entitlements": entitlements,
            "deductions": deductions,
            "allotments": allotments or [],
        }
        entry.update(extra)
        return entry

    return _make
