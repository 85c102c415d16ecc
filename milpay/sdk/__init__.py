"""milpay SDK - Core functionality for military pay calculators and LES analysis."""

from .config import (
    get_config_dir,
    get_settings_path,
    load_settings,
    save_settings,
    get_setting,
    set_setting,
    get_profile_path,
    load_profile,
    save_profile,
    get_profile_value,
    set_profile_value,
    get_data_path,
    get_pay_tables_path,
    ConfigNotFoundError,
    ProfileNotFoundError,
    # Profile validation
    validate_profile,
    ProfileValidationResult,
    validate_profile_key,
)

from .line_items import (
    PayGrade,
    Branch,
    LineItemCategory,
    ChangeType,
    EntitlementType,
    DeductionType,
    AllotmentType,
    PayPeriodType,
    EntryMethod,
    LeaveType,
    DrillStatus,
    TrainingEventType,
    TrendMetric,
    TrendDirection,
    Recommendation,
)

from .schemas import (
    PayContext,
    Entitlement,
    Deduction,
    Allotment,
    PayPeriod,
    ServiceMemberSnapshot,
    LeaveBalance,
    Totals,
    CompensationRecord,
    LineItemChange,
    ComparisonSummary,
    StatementComparison,
    TrendPoint,
    TrendSeries,
    ValidationReport,
    DrillPeriod,
    DrillWeekend,
    DrillSchedule,
    YearSummary,
    BreakdownItem,
    DrillPayResult,
    ATPayResult,
    OrdersComparison,
)

from .withholding import (
    FLAT_TAX_RATE,
    estimate_withholding,
    coerce_amount,
    round2,
)

from .reference import (
    ReferenceDataProvider,
    TableReferenceData,
    load_reference_data,
    pay_grade_type,
    bas_component_for,
)

from .drill_pay import (
    compute_drill_pay,
    compute_at_pay,
    STANDARD_ANNUAL_MUTAS,
    STANDARD_AT_DAYS,
)

from .orders import (
    civilian_daily_rate,
    compare_orders,
)

from .explanations import (
    CHANGE_EXPLANATIONS,
    LINE_ITEM_NAMES,
    get_change_explanation,
    line_item_name,
)

from .diff import (
    detect_changes,
    compare,
)

from .trends import (
    build_trend,
    classify_trend,
)

from .reconcile import validate

from .storage import (
    KeyValueStore,
    MemoryStore,
    JsonFileStore,
)

from .ledger import (
    CompensationLedger,
    RecordNotFoundError,
    compute_totals,
)

from .reserve import (
    DrillScheduleBook,
    FiscalYear,
    fiscal_year_for,
    build_drill_periods,
)

from .retirement import (
    RetirementOffsetRequest,
    RetirementOffsetResult,
    RetirementOffsetProvider,
)

__all__ = [
    # Config
    "get_config_dir",
    "get_settings_path",
    "load_settings",
    "save_settings",
    "get_setting",
    "set_setting",
    "get_profile_path",
    "load_profile",
    "save_profile",
    "get_profile_value",
    "set_profile_value",
    "get_data_path",
    "get_pay_tables_path",
    "ConfigNotFoundError",
    "ProfileNotFoundError",
    "validate_profile",
    "ProfileValidationResult",
    "validate_profile_key",
    # Vocabularies
    "PayGrade",
    "Branch",
    "LineItemCategory",
    "ChangeType",
    "EntitlementType",
    "DeductionType",
    "AllotmentType",
    "PayPeriodType",
    "EntryMethod",
    "LeaveType",
    "DrillStatus",
    "TrainingEventType",
    "TrendMetric",
    "TrendDirection",
    "Recommendation",
    # Schemas
    "PayContext",
    "Entitlement",
    "Deduction",
    "Allotment",
    "PayPeriod",
    "ServiceMemberSnapshot",
    "LeaveBalance",
    "Totals",
    "CompensationRecord",
    "LineItemChange",
    "ComparisonSummary",
    "StatementComparison",
    "TrendPoint",
    "TrendSeries",
    "ValidationReport",
    "DrillPeriod",
    "DrillWeekend",
    "DrillSchedule",
    "YearSummary",
    "BreakdownItem",
    "DrillPayResult",
    "ATPayResult",
    "OrdersComparison",
    # Calculators
    "FLAT_TAX_RATE",
    "estimate_withholding",
    "coerce_amount",
    "round2",
    "ReferenceDataProvider",
    "TableReferenceData",
    "load_reference_data",
    "pay_grade_type",
    "bas_component_for",
    "compute_drill_pay",
    "compute_at_pay",
    "STANDARD_ANNUAL_MUTAS",
    "STANDARD_AT_DAYS",
    "civilian_daily_rate",
    "compare_orders",
    # LES analysis
    "CHANGE_EXPLANATIONS",
    "LINE_ITEM_NAMES",
    "get_change_explanation",
    "line_item_name",
    "detect_changes",
    "compare",
    "build_trend",
    "classify_trend",
    "validate",
    # Repositories
    "KeyValueStore",
    "MemoryStore",
    "JsonFileStore",
    "CompensationLedger",
    "RecordNotFoundError",
    "compute_totals",
    "DrillScheduleBook",
    "FiscalYear",
    "fiscal_year_for",
    "build_drill_periods",
    # Retirement contract
    "RetirementOffsetRequest",
    "RetirementOffsetResult",
    "RetirementOffsetProvider",
]
