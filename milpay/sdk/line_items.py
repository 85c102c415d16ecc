"""Closed vocabularies for LES line items, grades and statuses.

Every enumeration subclasses ``str`` so values serialize as plain strings
in JSON/YAML and compare equal to their string form.
"""

from enum import Enum


class PayGrade(str, Enum):
    E1 = "E-1"
    E2 = "E-2"
    E3 = "E-3"
    E4 = "E-4"
    E5 = "E-5"
    E6 = "E-6"
    E7 = "E-7"
    E8 = "E-8"
    E9 = "E-9"
    W1 = "W-1"
    W2 = "W-2"
    W3 = "W-3"
    W4 = "W-4"
    W5 = "W-5"
    O1 = "O-1"
    O2 = "O-2"
    O3 = "O-3"
    O4 = "O-4"
    O5 = "O-5"
    O6 = "O-6"
    O7 = "O-7"
    O8 = "O-8"
    O9 = "O-9"
    O10 = "O-10"


class Branch(str, Enum):
    ARMY = "army"
    NAVY = "navy"
    AIR_FORCE = "air_force"
    MARINE_CORPS = "marine_corps"
    COAST_GUARD = "coast_guard"
    SPACE_FORCE = "space_force"


class LineItemCategory(str, Enum):
    ENTITLEMENT = "entitlement"
    DEDUCTION = "deduction"
    ALLOTMENT = "allotment"


class ChangeType(str, Enum):
    ADDED = "added"
    REMOVED = "removed"
    INCREASED = "increased"
    DECREASED = "decreased"

    @property
    def inverse(self) -> "ChangeType":
        """The change type seen when the two statements swap places."""
        return _INVERSE_CHANGE[self]


_INVERSE_CHANGE = {
    ChangeType.ADDED: ChangeType.REMOVED,
    ChangeType.REMOVED: ChangeType.ADDED,
    ChangeType.INCREASED: ChangeType.DECREASED,
    ChangeType.DECREASED: ChangeType.INCREASED,
}


class EntitlementType(str, Enum):
    """Pay items - money coming in."""

    # Base pay
    BASE_PAY = "base_pay"
    BASE_PAY_ACCRUED = "base_pay_accrued"

    # Allowances
    BAH = "bah"
    BAH_DIFF = "bah_diff"
    BAH_PARTIAL = "bah_partial"
    BAS = "bas"
    OHA = "oha"
    COLA = "cola"
    FSA = "fsa"
    CLOTHING_ALLOWANCE = "clothing_allowance"
    DISLOCATION_ALLOWANCE = "dislocation_allowance"
    TEMPORARY_LODGING_EXPENSE = "temporary_lodging_expense"
    MOVE_IN_HOUSING_ALLOWANCE = "move_in_housing_allowance"

    # Special / incentive pay
    HOSTILE_FIRE_PAY = "hostile_fire_pay"
    IMMINENT_DANGER_PAY = "imminent_danger_pay"
    HARDSHIP_DUTY_PAY_LOCATION = "hardship_duty_pay_location"
    HARDSHIP_DUTY_PAY_MISSION = "hardship_duty_pay_mission"
    ASSIGNMENT_INCENTIVE_PAY = "assignment_incentive_pay"
    SPECIAL_DUTY_ASSIGNMENT_PAY = "special_duty_assignment_pay"
    CAREER_SEA_PAY = "career_sea_pay"
    CAREER_SEA_PAY_PREMIUM = "career_sea_pay_premium"
    SUBMARINE_DUTY_PAY = "submarine_duty_pay"
    FLIGHT_PAY = "flight_pay"
    FLIGHT_DECK_PAY = "flight_deck_pay"
    DEMOLITION_PAY = "demolition_pay"
    PARACHUTE_DUTY_PAY = "parachute_duty_pay"
    DIVING_DUTY_PAY = "diving_duty_pay"
    FOREIGN_LANGUAGE_PROFICIENCY_PAY = "foreign_language_proficiency_pay"
    HAZARDOUS_DUTY_INCENTIVE_PAY = "hazardous_duty_incentive_pay"

    # Bonuses
    ENLISTMENT_BONUS = "enlistment_bonus"
    REENLISTMENT_BONUS = "reenlistment_bonus"
    SELECTIVE_REENLISTMENT_BONUS = "selective_reenlistment_bonus"
    RETENTION_BONUS = "retention_bonus"
    CRITICAL_SKILLS_RETENTION_BONUS = "critical_skills_retention_bonus"
    SPECIAL_PAY_BONUS = "special_pay_bonus"

    COMBAT_ZONE_TAX_EXCLUSION = "combat_zone_tax_exclusion"

    # Miscellaneous
    PER_DIEM = "per_diem"
    TRAVEL_PAY = "travel_pay"
    ADVANCE_PAY = "advance_pay"
    LEAVE_SOLD = "leave_sold"
    BACK_PAY = "back_pay"
    OTHER_ENTITLEMENT = "other_entitlement"


class DeductionType(str, Enum):
    """Amounts taken from pay."""

    # Taxes
    FEDERAL_TAX = "federal_tax"
    STATE_TAX = "state_tax"
    LOCAL_TAX = "local_tax"
    FICA_SOCIAL_SECURITY = "fica_social_security"
    FICA_MEDICARE = "fica_medicare"

    # Insurance
    SGLI = "sgli"
    SGLI_FAMILY = "sgli_family"
    TRICARE_DENTAL = "tricare_dental"
    TRICARE_VISION = "tricare_vision"
    FSGLI = "fsgli"

    # Retirement
    TSP_TRADITIONAL = "tsp_traditional"
    TSP_ROTH = "tsp_roth"
    TSP_LOAN_REPAYMENT = "tsp_loan_repayment"
    SBP = "sbp"

    # Debt / recovery
    ADVANCE_PAY_DEBT = "advance_pay_debt"
    DPP = "dpp"
    OVERPAYMENT_RECOVERY = "overpayment_recovery"
    GOVERNMENT_DEBT = "government_debt"
    UNIFORM_INITIAL_ISSUE = "uniform_initial_issue"

    # Voluntary
    AER_DONATION = "aer_donation"
    AFAF_DONATION = "afaf_donation"
    NAVY_RELIEF_DONATION = "navy_relief_donation"
    CFC_DONATION = "cfc_donation"
    SAVINGS_BOND = "savings_bond"

    # Miscellaneous
    MEAL_DEDUCTION = "meal_deduction"
    GARNISHMENT = "garnishment"
    CHILD_SUPPORT = "child_support"
    ALIMONY = "alimony"
    CAR_PAYMENT = "car_payment"
    OTHER_DEDUCTION = "other_deduction"


class AllotmentType(str, Enum):
    """Voluntary recurring payments routed out of net pay."""

    SAVINGS = "savings"
    CAR_PAYMENT = "car_payment"
    INSURANCE_PREMIUM = "insurance_premium"
    LOAN_PAYMENT = "loan_payment"
    CHILD_SUPPORT_VOLUNTARY = "child_support_voluntary"
    SPOUSAL_SUPPORT = "spousal_support"
    RENT_PAYMENT = "rent_payment"
    CHARITY = "charity"
    OTHER_ALLOTMENT = "other_allotment"


# FICA deduction types; a record with neither is flagged by reconciliation
FICA_TYPES = (DeductionType.FICA_SOCIAL_SECURITY, DeductionType.FICA_MEDICARE)

# Entitlements that are never subject to income tax
TAX_FREE_ENTITLEMENTS = frozenset({
    EntitlementType.BAH,
    EntitlementType.BAH_DIFF,
    EntitlementType.BAH_PARTIAL,
    EntitlementType.BAS,
    EntitlementType.OHA,
    EntitlementType.COLA,
    EntitlementType.FSA,
    EntitlementType.PER_DIEM,
    EntitlementType.DISLOCATION_ALLOWANCE,
    EntitlementType.TEMPORARY_LODGING_EXPENSE,
    EntitlementType.MOVE_IN_HOUSING_ALLOWANCE,
})


class PayPeriodType(str, Enum):
    MID_MONTH = "mid_month"
    END_MONTH = "end_month"


class EntryMethod(str, Enum):
    MANUAL = "manual"
    OCR = "ocr"
    IMPORT = "import"


class LeaveType(str, Enum):
    ANNUAL = "annual"
    SICK = "sick"
    EMERGENCY = "emergency"
    CONVALESCENT = "convalescent"
    TERMINAL = "terminal"
    PTDY = "ptdy"
    SPECIAL = "special"
    HOUSE_HUNTING = "house_hunting"


class DrillStatus(str, Enum):
    SCHEDULED = "scheduled"
    COMPLETED = "completed"
    EXCUSED = "excused"
    UNEXCUSED = "unexcused"
    RESCHEDULED = "rescheduled"
    CANCELLED = "cancelled"


class TrainingEventType(str, Enum):
    REGULAR_DRILL = "regular_drill"
    ADDITIONAL_DRILL = "additional_drill"
    ANNUAL_TRAINING = "annual_training"
    ACTIVE_DUTY = "active_duty"
    SCHOOL = "school"
    MOBILIZATION = "mobilization"
    FUNERAL_HONORS = "funeral_honors"
    OTHER = "other"


class TrendMetric(str, Enum):
    GROSS_PAY = "gross_pay"
    NET_PAY = "net_pay"
    TOTAL_DEDUCTIONS = "total_deductions"


class TrendDirection(str, Enum):
    INCREASING = "increasing"
    DECREASING = "decreasing"
    STABLE = "stable"
    VOLATILE = "volatile"


class Recommendation(str, Enum):
    TAKE_ORDERS = "take_orders"
    DECLINE_ORDERS = "decline_orders"
    NEGOTIATE = "negotiate"
    NEUTRAL = "neutral"
