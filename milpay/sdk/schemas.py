"""Pydantic schemas for milpay data validation.

All schemas use extra='forbid' to reject unknown fields, so typos in
YAML/JSON inputs cause clear errors rather than silent ignoring.
Amounts are coerced (blank/NaN -> 0) rather than rejected because pay
entry forms save partially-filled drafts.
"""

import uuid
from datetime import datetime
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .line_items import (
    AllotmentType,
    Branch,
    ChangeType,
    DeductionType,
    DrillStatus,
    EntitlementType,
    EntryMethod,
    LeaveType,
    LineItemCategory,
    PayGrade,
    PayPeriodType,
    Recommendation,
    TAX_FREE_ENTITLEMENTS,
    TrainingEventType,
    TrendDirection,
    TrendMetric,
)
from .withholding import coerce_amount


def now_iso() -> str:
    """Timestamp used for created_at/updated_at fields."""
    return datetime.now().isoformat()


def new_id() -> str:
    """Short random id (8 hex chars) for records, line items and schedules."""
    return uuid.uuid4().hex[:8]


def _optional_amount(value: Any) -> Optional[float]:
    return None if value is None else coerce_amount(value)


# =============================================================================
# Calculator input
# =============================================================================


class PayContext(BaseModel):
    """Immutable snapshot of the member's grade and service used by calculators."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    pay_grade: PayGrade = Field(..., description="Pay grade, e.g. 'E-4'")
    years_of_service: int = Field(default=0, ge=0, description="Completed years of service")
    branch: Optional[Branch] = Field(default=None, description="Service branch")

    @field_validator("years_of_service", mode="before")
    @classmethod
    def _coerce_yos(cls, value: Any) -> int:
        return max(int(coerce_amount(value)), 0)


# =============================================================================
# LES line items
# =============================================================================


class _LineItem(BaseModel):
    """Fields shared by every LES line item."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    id: str = Field(default="", description="Unique within the owning record")
    description: str = Field(default="", description="Text as shown on the LES")
    amount: float = Field(default=0, description="Current period amount")
    ytd_amount: Optional[float] = Field(default=None, description="Year-to-date amount")
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    note: Optional[str] = None

    @field_validator("amount", mode="before")
    @classmethod
    def _coerce_amount(cls, value: Any) -> float:
        return coerce_amount(value)

    @field_validator("ytd_amount", mode="before")
    @classmethod
    def _coerce_ytd(cls, value: Any) -> Optional[float]:
        return _optional_amount(value)


class Entitlement(_LineItem):
    """Pay item (money coming in)."""

    type: EntitlementType
    is_taxable: bool = True
    is_tax_free: Optional[bool] = Field(default=None, description="Combat zone exclusion applies")

    @model_validator(mode="before")
    @classmethod
    def _default_taxability(cls, data: Any) -> Any:
        """Allowances default to tax-free when is_taxable is not given."""
        if isinstance(data, dict) and data.get("is_taxable") is None:
            try:
                kind = EntitlementType(data.get("type"))
            except ValueError:
                return data
            data = {**data, "is_taxable": kind not in TAX_FREE_ENTITLEMENTS}
        return data


class Deduction(_LineItem):
    """Amount taken from pay."""

    type: DeductionType
    is_mandatory: bool = False
    is_pre_tax: Optional[bool] = None


class Allotment(_LineItem):
    """Voluntary recurring payment."""

    type: AllotmentType
    recipient_name: Optional[str] = None
    account_last4: Optional[str] = None


LINE_ITEM_MODELS = {
    LineItemCategory.ENTITLEMENT: Entitlement,
    LineItemCategory.DEDUCTION: Deduction,
    LineItemCategory.ALLOTMENT: Allotment,
}


# =============================================================================
# Compensation record (LES entry)
# =============================================================================


class PayPeriod(BaseModel):
    """Pay period covered by one LES."""

    model_config = ConfigDict(extra="forbid")

    type: PayPeriodType = PayPeriodType.END_MONTH
    start_date: str = Field(..., description="Period start (YYYY-MM-DD)")
    end_date: str = Field(..., description="Period end (YYYY-MM-DD)")
    pay_date: str = Field(..., description="Actual pay date (YYYY-MM-DD)")
    month: int = Field(..., ge=1, le=12)
    year: int


class ServiceMemberSnapshot(BaseModel):
    """Service member details as printed on the LES."""

    model_config = ConfigDict(extra="forbid")

    name: Optional[str] = None
    pay_grade: PayGrade
    years_of_service: int = Field(default=0, ge=0)
    branch: Branch
    duty_station: Optional[str] = None
    basd: Optional[str] = Field(default=None, description="Basic Active Service Date")


class LeaveBalance(BaseModel):
    """Leave balance block from the LES (days)."""

    model_config = ConfigDict(extra="forbid")

    type: LeaveType = LeaveType.ANNUAL
    earned: float = 0
    used: float = 0
    balance: float = 0
    lost_if_not_used: float = 0
    eos_balance: Optional[float] = None
    sell_back_eligible: Optional[float] = None


class Totals(BaseModel):
    """Derived totals. Always a pure function of the line-item lists."""

    model_config = ConfigDict(extra="forbid")

    gross_pay: float = 0
    total_deductions: float = 0
    total_allotments: float = 0
    net_pay: float = 0
    ytd_gross: Optional[float] = None
    ytd_deductions: Optional[float] = None
    ytd_net: Optional[float] = None


class CompensationRecord(BaseModel):
    """One LES entry (mid-month or end-of-month)."""

    model_config = ConfigDict(extra="forbid")

    id: str = ""
    pay_period: PayPeriod
    service_member: ServiceMemberSnapshot
    entitlements: List[Entitlement] = Field(default_factory=list)
    deductions: List[Deduction] = Field(default_factory=list)
    allotments: List[Allotment] = Field(default_factory=list)
    leave: List[LeaveBalance] = Field(default_factory=list)
    totals: Totals = Field(default_factory=Totals)
    entry_method: EntryMethod = EntryMethod.MANUAL
    source: Optional[str] = Field(default=None, description="'myPay', 'paper', etc.")
    is_verified: bool = False
    notes: Optional[str] = None
    created_at: str = ""
    updated_at: str = ""


# =============================================================================
# Derived analysis results
# =============================================================================


class LineItemChange(BaseModel):
    """One classified difference between two statements."""

    model_config = ConfigDict(extra="forbid")

    category: LineItemCategory
    type: str
    description: str
    change_type: ChangeType
    previous_amount: float
    current_amount: float
    difference: float
    percent_change: float
    possible_reason: str


class ComparisonSummary(BaseModel):
    model_config = ConfigDict(extra="forbid")

    total_changes: int
    net_pay_difference: float
    net_pay_percent_change: float
    significant_changes: List[LineItemChange] = Field(default_factory=list)


class StatementComparison(BaseModel):
    """Comparison of two LES entries. Never mutated after creation."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    id: str
    previous_entry: CompensationRecord
    current_entry: CompensationRecord
    changes: List[LineItemChange]
    summary: ComparisonSummary
    created_at: str


class TrendPoint(BaseModel):
    model_config = ConfigDict(extra="forbid")

    period: str = Field(..., description="YYYY-MM")
    value: float


class TrendSeries(BaseModel):
    model_config = ConfigDict(extra="forbid")

    metric: TrendMetric
    data_points: List[TrendPoint]
    trend: TrendDirection
    average_value: float
    min_value: float
    max_value: float


class ValidationReport(BaseModel):
    """Reconciliation result for one record. errors block validity; warnings don't."""

    model_config = ConfigDict(extra="forbid")

    is_valid: bool
    calculated_gross: float
    calculated_deductions: float
    calculated_allotments: float
    calculated_net: float
    actual_net: float
    variance: float
    variance_percent: float
    warnings: List[str] = Field(default_factory=list)
    errors: List[str] = Field(default_factory=list)


# =============================================================================
# Drill schedules
# =============================================================================


class DrillPeriod(BaseModel):
    """One drill period (MUTA) within a drill weekend."""

    model_config = ConfigDict(extra="forbid")

    id: str
    date: str
    period_number: int = Field(..., ge=1, le=4)
    status: DrillStatus = DrillStatus.SCHEDULED
    note: Optional[str] = None


class DrillWeekend(BaseModel):
    """A drill weekend or other training event owned by a schedule."""

    model_config = ConfigDict(extra="forbid")

    id: str = ""
    event_type: TrainingEventType = TrainingEventType.REGULAR_DRILL
    title: str = ""
    start_date: str
    end_date: str
    muta_count: int = Field(default=4, ge=1, le=8)
    periods: List[DrillPeriod] = Field(default_factory=list)
    location: Optional[str] = None
    notes: Optional[str] = None
    estimated_pay: Optional[float] = None
    actual_pay: Optional[float] = None
    is_paid: bool = False
    paid_date: Optional[str] = None


class DrillSchedule(BaseModel):
    """Drill schedule for one fiscal year (Oct 1 - Sep 30)."""

    model_config = ConfigDict(extra="forbid")

    id: str
    fiscal_year: int
    branch: Branch
    unit_name: Optional[str] = None
    drill_weekends: List[DrillWeekend] = Field(default_factory=list)
    total_scheduled_mutas: int = 0
    total_completed_mutas: int = 0
    total_excused: int = 0
    total_unexcused: int = 0
    at_days: int = 15
    at_completed: bool = False
    at_start_date: Optional[str] = None
    at_end_date: Optional[str] = None
    created_at: str = ""
    updated_at: str = ""


class YearSummary(BaseModel):
    model_config = ConfigDict(extra="forbid")

    total_mutas: int = 0
    completed_mutas: int = 0
    remaining_mutas: int = 0
    missed_mutas: int = 0
    estimated_annual_pay: float = 0
    at_days_completed: int = 0
    at_days_remaining: int = 15


# =============================================================================
# Calculator results
# =============================================================================


class BreakdownItem(BaseModel):
    """Display line for a calculator result."""

    model_config = ConfigDict(extra="forbid")

    item: str
    amount: float
    note: Optional[str] = None
    taxable: Optional[bool] = None


class DrillPayResult(BaseModel):
    model_config = ConfigDict(extra="forbid")

    base_drill_pay: float = Field(..., description="Per-period pay (1/30 of monthly base)")
    total_periods: int
    total_base_pay: float
    bah_if_applicable: float
    bas_if_applicable: float
    gross_pay: float
    estimated_taxes: float
    estimated_net_pay: float
    annual_projected_gross: float
    annual_projected_net: float
    breakdown: List[BreakdownItem]


class ATPayResult(BaseModel):
    model_config = ConfigDict(extra="forbid")

    daily_base_pay: float
    daily_bah: float
    daily_bas: float
    daily_per_diem: float
    total_days: int
    total_base_pay: float
    total_bah: float
    total_bas: float
    total_per_diem: float
    gross_pay: float
    taxable_amount: float
    tax_free_amount: float
    estimated_taxes: float
    estimated_net_pay: float
    breakdown: List[BreakdownItem]


class OrdersComparison(BaseModel):
    model_config = ConfigDict(extra="forbid")

    civilian_daily_rate: float
    civilian_total_pay: float
    military_base_pay: float
    military_allowances: float
    military_tax_free_amount: float
    military_total_pay: float
    pay_difference: float = Field(..., description="Positive = military pays more")
    percent_difference: float
    employer_differential_eligible: bool
    employer_differential_amount: Optional[float] = None
    recommendation: Recommendation
    notes: List[str] = Field(default_factory=list)
