"""Display names and change explanations for LES line items.

Both tables cover every entitlement, deduction and allotment variant, so a
lookup can only fail on a value that is not a line-item enum at all.
Tables are keyed by category first because some codes (car_payment) exist
as both a deduction and an allotment.
"""

from typing import Dict, Union

from .line_items import (
    AllotmentType,
    ChangeType,
    DeductionType,
    EntitlementType,
    LineItemCategory,
)

LineItemType = Union[EntitlementType, DeductionType, AllotmentType]

CATEGORY_ENUMS = {
    LineItemCategory.ENTITLEMENT: EntitlementType,
    LineItemCategory.DEDUCTION: DeductionType,
    LineItemCategory.ALLOTMENT: AllotmentType,
}

_ENTITLEMENT_NAMES = {
    EntitlementType.BASE_PAY: "Basic Pay",
    EntitlementType.BASE_PAY_ACCRUED: "Base Pay Accrued",
    EntitlementType.BAH: "Basic Allowance for Housing",
    EntitlementType.BAH_DIFF: "BAH Differential",
    EntitlementType.BAH_PARTIAL: "Partial BAH",
    EntitlementType.BAS: "Basic Allowance for Subsistence",
    EntitlementType.OHA: "Overseas Housing Allowance",
    EntitlementType.COLA: "Cost of Living Allowance",
    EntitlementType.FSA: "Family Separation Allowance",
    EntitlementType.CLOTHING_ALLOWANCE: "Clothing Maintenance Allowance",
    EntitlementType.DISLOCATION_ALLOWANCE: "Dislocation Allowance",
    EntitlementType.TEMPORARY_LODGING_EXPENSE: "Temporary Lodging Expense",
    EntitlementType.MOVE_IN_HOUSING_ALLOWANCE: "Move-In Housing Allowance",
    EntitlementType.HOSTILE_FIRE_PAY: "Hostile Fire Pay",
    EntitlementType.IMMINENT_DANGER_PAY: "Imminent Danger Pay",
    EntitlementType.HARDSHIP_DUTY_PAY_LOCATION: "Hardship Duty Pay - Location",
    EntitlementType.HARDSHIP_DUTY_PAY_MISSION: "Hardship Duty Pay - Mission",
    EntitlementType.ASSIGNMENT_INCENTIVE_PAY: "Assignment Incentive Pay",
    EntitlementType.SPECIAL_DUTY_ASSIGNMENT_PAY: "Special Duty Assignment Pay",
    EntitlementType.CAREER_SEA_PAY: "Career Sea Pay",
    EntitlementType.CAREER_SEA_PAY_PREMIUM: "Career Sea Pay Premium",
    EntitlementType.SUBMARINE_DUTY_PAY: "Submarine Duty Pay",
    EntitlementType.FLIGHT_PAY: "Aviation Career Incentive Pay",
    EntitlementType.FLIGHT_DECK_PAY: "Flight Deck Duty Pay",
    EntitlementType.DEMOLITION_PAY: "Demolition Duty Pay",
    EntitlementType.PARACHUTE_DUTY_PAY: "Parachute Duty Pay",
    EntitlementType.DIVING_DUTY_PAY: "Diving Duty Pay",
    EntitlementType.FOREIGN_LANGUAGE_PROFICIENCY_PAY: "Foreign Language Proficiency Pay",
    EntitlementType.HAZARDOUS_DUTY_INCENTIVE_PAY: "Hazardous Duty Incentive Pay",
    EntitlementType.ENLISTMENT_BONUS: "Enlistment Bonus",
    EntitlementType.REENLISTMENT_BONUS: "Reenlistment Bonus",
    EntitlementType.SELECTIVE_REENLISTMENT_BONUS: "Selective Reenlistment Bonus",
    EntitlementType.RETENTION_BONUS: "Retention Bonus",
    EntitlementType.CRITICAL_SKILLS_RETENTION_BONUS: "Critical Skills Retention Bonus",
    EntitlementType.SPECIAL_PAY_BONUS: "Special Pay/Bonus",
    EntitlementType.COMBAT_ZONE_TAX_EXCLUSION: "Combat Zone Tax Exclusion",
    EntitlementType.PER_DIEM: "Per Diem",
    EntitlementType.TRAVEL_PAY: "Travel Pay",
    EntitlementType.ADVANCE_PAY: "Advance Pay",
    EntitlementType.LEAVE_SOLD: "Leave Sold",
    EntitlementType.BACK_PAY: "Back Pay",
    EntitlementType.OTHER_ENTITLEMENT: "Other Entitlement",
}

_DEDUCTION_NAMES = {
    DeductionType.FEDERAL_TAX: "Federal Income Tax Withholding",
    DeductionType.STATE_TAX: "State Income Tax Withholding",
    DeductionType.LOCAL_TAX: "Local Tax",
    DeductionType.FICA_SOCIAL_SECURITY: "Social Security Tax (FICA)",
    DeductionType.FICA_MEDICARE: "Medicare Tax (FICA)",
    DeductionType.SGLI: "Servicemembers' Group Life Insurance",
    DeductionType.SGLI_FAMILY: "Family SGLI",
    DeductionType.TRICARE_DENTAL: "TRICARE Dental Program",
    DeductionType.TRICARE_VISION: "TRICARE Vision Coverage",
    DeductionType.FSGLI: "Family SGLI (Spouse)",
    DeductionType.TSP_TRADITIONAL: "Thrift Savings Plan (Traditional)",
    DeductionType.TSP_ROTH: "Thrift Savings Plan (Roth)",
    DeductionType.TSP_LOAN_REPAYMENT: "TSP Loan Repayment",
    DeductionType.SBP: "Survivor Benefit Plan",
    DeductionType.ADVANCE_PAY_DEBT: "Advance Pay Debt",
    DeductionType.DPP: "Debt to Government (DPP)",
    DeductionType.OVERPAYMENT_RECOVERY: "Overpayment Recovery",
    DeductionType.GOVERNMENT_DEBT: "Government Debt Collection",
    DeductionType.UNIFORM_INITIAL_ISSUE: "Uniform Initial Issue Debt",
    DeductionType.AER_DONATION: "Army Emergency Relief",
    DeductionType.AFAF_DONATION: "Air Force Assistance Fund",
    DeductionType.NAVY_RELIEF_DONATION: "Navy-Marine Corps Relief Society",
    DeductionType.CFC_DONATION: "Combined Federal Campaign",
    DeductionType.SAVINGS_BOND: "Savings Bond Purchase",
    DeductionType.MEAL_DEDUCTION: "Meal Deduction",
    DeductionType.GARNISHMENT: "Court-Ordered Garnishment",
    DeductionType.CHILD_SUPPORT: "Child Support",
    DeductionType.ALIMONY: "Alimony/Spousal Support",
    DeductionType.CAR_PAYMENT: "Vehicle Allotment",
    DeductionType.OTHER_DEDUCTION: "Other Deduction",
}

_ALLOTMENT_NAMES = {
    AllotmentType.SAVINGS: "Savings Allotment",
    AllotmentType.CAR_PAYMENT: "Vehicle Payment Allotment",
    AllotmentType.INSURANCE_PREMIUM: "Insurance Allotment",
    AllotmentType.LOAN_PAYMENT: "Loan Payment Allotment",
    AllotmentType.CHILD_SUPPORT_VOLUNTARY: "Voluntary Child Support",
    AllotmentType.SPOUSAL_SUPPORT: "Spousal Support Allotment",
    AllotmentType.RENT_PAYMENT: "Rent Payment Allotment",
    AllotmentType.CHARITY: "Charitable Allotment",
    AllotmentType.OTHER_ALLOTMENT: "Other Allotment",
}

LINE_ITEM_NAMES: Dict[LineItemCategory, Dict[LineItemType, str]] = {
    LineItemCategory.ENTITLEMENT: _ENTITLEMENT_NAMES,
    LineItemCategory.DEDUCTION: _DEDUCTION_NAMES,
    LineItemCategory.ALLOTMENT: _ALLOTMENT_NAMES,
}

# Hand-written explanations; everything else gets the templated defaults
_SPECIFIC_EXPLANATIONS = {
    (LineItemCategory.ENTITLEMENT, EntitlementType.BAH): {
        ChangeType.ADDED: "BAH started - you may have moved off-base or gained dependents",
        ChangeType.REMOVED: "BAH stopped - you may have moved to government quarters",
        ChangeType.INCREASED: "BAH increased - could be pay raise, location change, or gaining dependents",
        ChangeType.DECREASED: "BAH decreased - could be rate update, losing dependent status, or location change",
    },
    (LineItemCategory.ENTITLEMENT, EntitlementType.BAS): {
        ChangeType.ADDED: "BAS started - you may have been authorized separate rations",
        ChangeType.REMOVED: "BAS stopped - you may have been placed on meal card",
        ChangeType.INCREASED: "BAS increased - annual rate increase",
        ChangeType.DECREASED: "BAS decreased - unusual, check with finance",
    },
    (LineItemCategory.ENTITLEMENT, EntitlementType.FSA): {
        ChangeType.ADDED: "FSA started - you have been separated from dependents 30+ days",
        ChangeType.REMOVED: "FSA stopped - separation ended or did not exceed 30 days",
        ChangeType.INCREASED: "FSA does not vary in amount",
        ChangeType.DECREASED: "FSA does not vary in amount",
    },
    (LineItemCategory.ENTITLEMENT, EntitlementType.HOSTILE_FIRE_PAY): {
        ChangeType.ADDED: "HFP started - you entered a hostile fire area",
        ChangeType.REMOVED: "HFP stopped - you left the hostile fire area",
        ChangeType.INCREASED: "HFP is a flat rate and should not vary",
        ChangeType.DECREASED: "HFP is a flat rate and should not vary",
    },
    (LineItemCategory.DEDUCTION, DeductionType.FEDERAL_TAX): {
        ChangeType.ADDED: "Federal tax withholding started",
        ChangeType.REMOVED: "Federal tax withholding stopped - unusual, verify W-4",
        ChangeType.INCREASED: "Tax increased - could be higher pay, fewer allowances, or rate change",
        ChangeType.DECREASED: "Tax decreased - could be more allowances, tax-free pay, or CZTE",
    },
    (LineItemCategory.DEDUCTION, DeductionType.TSP_TRADITIONAL): {
        ChangeType.ADDED: "TSP contributions started",
        ChangeType.REMOVED: "TSP contributions stopped",
        ChangeType.INCREASED: "TSP contribution percentage increased",
        ChangeType.DECREASED: "TSP contribution percentage decreased",
    },
}

_TEMPLATES = {
    ChangeType.ADDED: "{name} started",
    ChangeType.REMOVED: "{name} stopped",
    ChangeType.INCREASED: "{name} increased",
    ChangeType.DECREASED: "{name} decreased",
}


def _build_explanations() -> Dict[LineItemCategory, Dict[LineItemType, Dict[ChangeType, str]]]:
    table = {}
    for category, names in LINE_ITEM_NAMES.items():
        table[category] = {}
        for item_type, name in names.items():
            specific = _SPECIFIC_EXPLANATIONS.get((category, item_type))
            if specific is not None:
                table[category][item_type] = dict(specific)
            else:
                table[category][item_type] = {
                    change: template.format(name=name) for change, template in _TEMPLATES.items()
                }
    return table


CHANGE_EXPLANATIONS = _build_explanations()


def category_of(item_type: LineItemType) -> LineItemCategory:
    """Return the category a line-item enum member belongs to."""
    for category, enum_cls in CATEGORY_ENUMS.items():
        if isinstance(item_type, enum_cls):
            return category
    raise TypeError(f"Not a line-item type: {item_type!r}")


def line_item_name(item_type: LineItemType) -> str:
    """Display name for a line-item type, e.g. BAS -> 'Basic Allowance for Subsistence'."""
    return LINE_ITEM_NAMES[category_of(item_type)][item_type]


def get_change_explanation(item_type: LineItemType, change_type: ChangeType) -> str:
    """Explain why a line item was added, removed, increased or decreased."""
    return CHANGE_EXPLANATIONS[category_of(item_type)][item_type][ChangeType(change_type)]
