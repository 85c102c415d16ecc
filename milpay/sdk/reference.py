"""Pay-table reference data (monthly base pay and BAS rates).

Published pay tables change every January, so they are data, not code.
Tables live in YAML under the config directory, one file per year:

    ~/.config/milpay/pay-tables/2024.yaml

    base_pay:
      E-4:             # copy rows from the DFAS table for the year
        0: 2800.00     # keys are minimum years of service
        2: 2900.00
    bas:
      enlisted: 460.25
      officer: 316.98

Lookups never raise. An unknown grade, an unknown BAS component or a
years-of-service value below every column resolves to 0.0 so draft
calculations degrade to zero instead of failing.
"""

import logging
from typing import Dict, Mapping, Optional, Protocol, Union

import yaml

from .config import get_pay_tables_path, get_profile_value
from .line_items import PayGrade
from .withholding import coerce_amount

logger = logging.getLogger(__name__)

MAX_YEARS_OF_SERVICE = 40

# 2024 monthly BAS
DEFAULT_BAS_RATES = {
    "enlisted": 460.25,
    "officer": 316.98,
}

DEFAULT_TABLE_YEAR = "2024"


class ReferenceDataProvider(Protocol):
    """Source of published pay rates used by the calculators."""

    def base_pay_rate(self, pay_grade: PayGrade, years_of_service: int) -> float:
        ...

    def bas_allowance_rate(self, component: str) -> float:
        ...


def pay_grade_type(grade: Union[PayGrade, str]) -> str:
    """Return 'enlisted', 'warrant' or 'officer' for a grade like 'E-4'."""
    prefix = PayGrade(grade).value[0]
    return {"E": "enlisted", "W": "warrant", "O": "officer"}[prefix]


def bas_component_for(grade: Union[PayGrade, str]) -> str:
    """BAS is published for enlisted and officer; warrants draw the officer rate."""
    return "enlisted" if pay_grade_type(grade) == "enlisted" else "officer"


class TableReferenceData:
    """In-memory pay tables.

    Args:
        base_pay: grade -> {minimum years of service: monthly base pay}
        bas_rates: component ('enlisted'/'officer') -> monthly BAS
    """

    def __init__(
        self,
        base_pay: Optional[Mapping[str, Mapping[int, float]]] = None,
        bas_rates: Optional[Mapping[str, float]] = None,
    ):
        self._base_pay: Dict[str, Dict[int, float]] = {}
        for grade, columns in (base_pay or {}).items():
            try:
                key = PayGrade(grade).value
            except ValueError:
                logger.warning(f"Skipping base pay row for unknown pay grade {grade!r}")
                continue
            self._base_pay[key] = {
                int(yos): coerce_amount(amount) for yos, amount in (columns or {}).items()
            }
        self._bas_rates = {
            str(component): coerce_amount(rate)
            for component, rate in (DEFAULT_BAS_RATES if bas_rates is None else bas_rates).items()
        }

    def base_pay_rate(self, pay_grade: Union[PayGrade, str], years_of_service: int) -> float:
        """Monthly base pay from the highest YOS column not above the member's YOS."""
        try:
            grade = PayGrade(pay_grade).value
        except ValueError:
            logger.warning(f"Unknown pay grade {pay_grade!r}, base pay resolves to 0")
            return 0.0

        columns = self._base_pay.get(grade)
        if not columns:
            logger.debug(f"No base pay row for {grade}")
            return 0.0

        yos = min(max(int(coerce_amount(years_of_service)), 0), MAX_YEARS_OF_SERVICE)
        eligible = [column for column in columns if column <= yos]
        if not eligible:
            return 0.0
        return columns[max(eligible)]

    def bas_allowance_rate(self, component: str) -> float:
        return self._bas_rates.get(component, 0.0)


def load_reference_data(year: Optional[Union[int, str]] = None) -> TableReferenceData:
    """Load pay tables for a year from the config directory.

    Year resolution: argument, then profile ``reference_data.year``, then 2024.
    A missing file yields no base pay rows and the built-in BAS rates.
    """
    if year is None:
        year = get_profile_value("reference_data.year", DEFAULT_TABLE_YEAR)

    path = get_pay_tables_path(str(year))
    if not path.exists():
        logger.debug(f"No pay tables at {path}, using built-in BAS rates only")
        return TableReferenceData()

    with open(path, "r") as f:
        tables = yaml.safe_load(f) or {}

    return TableReferenceData(
        base_pay=tables.get("base_pay"),
        bas_rates=tables.get("bas"),
    )
