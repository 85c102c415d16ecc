"""milpay MCP Server - FastMCP implementation for pay calculator and LES tools."""

import json
import logging
from typing import Any

from mcp.server.fastmcp import FastMCP
from pydantic import Field, ValidationError

from milpay.sdk import (
    CompensationLedger,
    PayContext,
    RecordNotFoundError,
    compare_orders,
    compute_at_pay,
    compute_drill_pay,
    load_reference_data,
)

logger = logging.getLogger(__name__)

# Initialize FastMCP server
mcp = FastMCP("milpay")


def _ledger() -> CompensationLedger:
    return CompensationLedger()


def _summary(entry) -> dict[str, Any]:
    return {
        "id": entry.id,
        "pay_date": entry.pay_period.pay_date,
        "period": f"{entry.pay_period.year}-{entry.pay_period.month:02d}",
        "period_type": entry.pay_period.type.value,
        "pay_grade": entry.service_member.pay_grade.value,
        "gross_pay": entry.totals.gross_pay,
        "net_pay": entry.totals.net_pay,
    }


# --- Tools ---

@mcp.tool()
async def list_entries(
    year: int | None = Field(default=None, description="Filter by pay period year (e.g., 2025)"),
    limit: int = Field(default=24, description="Maximum number of entries to return (default 24)"),
) -> dict[str, Any]:
    """List LES entries, most recent first. Returns entry IDs, pay dates and gross/net totals."""
    try:
        ledger = _ledger()
        entries = ledger.get_entries_by_year(year) if year else ledger.list_entries()
        return {
            "entries": [_summary(e) for e in entries[:limit]],
            "count": min(len(entries), limit),
            "total_available": len(entries),
        }
    except Exception as e:
        logger.error(f"Error listing LES entries: {e}")
        return {"error": str(e), "entries": [], "count": 0}


@mcp.tool()
async def get_entry(
    entry_id: str = Field(description="The 8-character LES entry ID (from list_entries)"),
) -> dict[str, Any]:
    """Get one LES entry with all entitlements, deductions, allotments and totals."""
    try:
        entry = _ledger().get_entry(entry_id)
        if entry is None:
            return {"error": f"LES entry not found: {entry_id}", "entry": None}
        return {"entry": entry.model_dump(mode="json")}
    except Exception as e:
        logger.error(f"Error getting LES entry {entry_id}: {e}")
        return {"error": str(e), "entry": None}


@mcp.tool()
async def compare_entries(
    current_id: str = Field(description="The later LES entry ID"),
    previous_id: str | None = Field(
        default=None,
        description="The earlier LES entry ID (default: the entry paid just before current_id)",
    ),
) -> dict[str, Any]:
    """Compare two LES entries line by line and explain each change.

    Returns added/removed/increased/decreased line items with possible reasons,
    the net pay difference, and the changes that are significant ($50+ or 5%+).
    """
    try:
        ledger = _ledger()
        if previous_id is None:
            previous = ledger.get_previous_entry(current_id)
            if previous is None:
                return {"error": f"No earlier entry to compare with {current_id}", "comparison": None}
            previous_id = previous.id

        comparison = ledger.compare_entries(previous_id, current_id)
        return {
            "comparison_id": comparison.id,
            "previous_id": previous_id,
            "current_id": current_id,
            "changes": [c.model_dump(mode="json") for c in comparison.changes],
            "summary": comparison.summary.model_dump(mode="json"),
        }
    except RecordNotFoundError as e:
        return {"error": str(e), "comparison": None}
    except Exception as e:
        logger.error(f"Error comparing LES entries: {e}")
        return {"error": str(e), "comparison": None}


@mcp.tool()
async def validate_entry(
    entry_id: str = Field(description="The LES entry ID to reconcile"),
) -> dict[str, Any]:
    """Reconcile an LES entry's totals against its line items and flag anomalies."""
    try:
        report = _ledger().validate_entry(entry_id)
        if report is None:
            return {"error": f"LES entry not found: {entry_id}", "report": None}
        return {"report": report.model_dump(mode="json")}
    except Exception as e:
        logger.error(f"Error validating LES entry {entry_id}: {e}")
        return {"error": str(e), "report": None}


@mcp.tool()
async def calculate_trend(
    metric: str = Field(
        default="net_pay",
        description="One of gross_pay, net_pay, total_deductions",
    ),
    months: int = Field(default=6, description="Months of history to include (default 6)"),
) -> dict[str, Any]:
    """Monthly trend for a pay metric: per-month averages, min/max, and direction."""
    try:
        trend = _ledger().calculate_trend(metric, months)
        if trend is None:
            return {"error": "Need at least two LES entries to compute a trend.", "trend": None}
        return {"trend": trend.model_dump(mode="json")}
    except ValueError as e:
        return {"error": str(e), "trend": None}
    except Exception as e:
        logger.error(f"Error calculating {metric} trend: {e}")
        return {"error": str(e), "trend": None}


@mcp.tool()
async def calculate_drill_pay(
    pay_grade: str = Field(description="Pay grade, e.g. 'E-4' or 'O-3'"),
    years_of_service: int = Field(default=0, description="Completed years of service"),
    muta_count: int = Field(default=4, description="Drill periods (MUTAs); a standard weekend is 4"),
    bah_amount: float | None = Field(default=None, description="Monthly BAH; prorated for 2 days when set"),
    year: str | None = Field(default=None, description="Pay table year (default: profile reference_data.year)"),
) -> dict[str, Any]:
    """Estimate gross, withholding and net pay for a drill weekend."""
    try:
        context = PayContext(pay_grade=pay_grade, years_of_service=years_of_service)
        result = compute_drill_pay(
            context,
            muta_count,
            include_bah=bah_amount is not None,
            bah_amount=bah_amount or 0,
            reference=load_reference_data(year),
        )
        return result.model_dump(mode="json")
    except ValidationError as e:
        return {"error": f"Invalid input: {e}"}
    except Exception as e:
        logger.error(f"Error calculating drill pay: {e}")
        return {"error": str(e)}


@mcp.tool()
async def calculate_at_pay(
    pay_grade: str = Field(description="Pay grade, e.g. 'E-4' or 'O-3'"),
    years_of_service: int = Field(default=0, description="Completed years of service"),
    days: int = Field(default=15, description="Annual training days (default 15)"),
    bah_amount: float | None = Field(default=None, description="Monthly BAH; prorated by days/30 when set"),
    include_bas: bool = Field(default=False, description="Include prorated BAS"),
    per_diem_rate: float | None = Field(default=None, description="Daily per diem rate, if any"),
    year: str | None = Field(default=None, description="Pay table year (default: profile reference_data.year)"),
) -> dict[str, Any]:
    """Estimate pay for annual training. Only base pay is taxable."""
    try:
        context = PayContext(pay_grade=pay_grade, years_of_service=years_of_service)
        result = compute_at_pay(
            context,
            days,
            include_bah=bah_amount is not None,
            bah_amount=bah_amount or 0,
            include_bas=include_bas,
            include_per_diem=per_diem_rate is not None,
            per_diem_rate=per_diem_rate or 0,
            reference=load_reference_data(year),
        )
        return result.model_dump(mode="json")
    except ValidationError as e:
        return {"error": f"Invalid input: {e}"}
    except Exception as e:
        logger.error(f"Error calculating AT pay: {e}")
        return {"error": str(e)}


@mcp.tool()
async def compare_orders_pay(
    pay_grade: str = Field(description="Pay grade, e.g. 'E-4' or 'O-3'"),
    total_days: int = Field(description="Days on orders"),
    civilian_daily_rate: float = Field(description="Civilian pay per working day"),
    years_of_service: int = Field(default=0, description="Completed years of service"),
    bah_amount: float | None = Field(default=None, description="Monthly BAH while on orders"),
    include_bas: bool = Field(default=False, description="Include prorated BAS"),
    employer_differential_policy: bool = Field(
        default=False, description="Employer pays the difference when military pay is lower",
    ),
) -> dict[str, Any]:
    """Compare military pay for a set of orders against lost civilian pay."""
    try:
        context = PayContext(pay_grade=pay_grade, years_of_service=years_of_service)
        military = compute_at_pay(
            context,
            total_days,
            include_bah=bah_amount is not None,
            bah_amount=bah_amount or 0,
            include_bas=include_bas,
            reference=load_reference_data(),
        )
        result = compare_orders(
            military, civilian_daily_rate, total_days,
            employer_differential_policy=employer_differential_policy,
        )
        return result.model_dump(mode="json")
    except ValidationError as e:
        return {"error": f"Invalid input: {e}"}
    except Exception as e:
        logger.error(f"Error comparing orders pay: {e}")
        return {"error": str(e)}


# --- Resources (optional, for browsing) ---

@mcp.resource("milpay://les/years")
async def list_years_resource() -> str:
    """List years that have LES entries, with entry counts."""
    try:
        ledger = _ledger()
        years = {str(y): len(ledger.get_entries_by_year(y)) for y in ledger.years()}
        return json.dumps({"years": years}, indent=2)
    except Exception as e:
        return json.dumps({"error": str(e)})


# --- Server Entry Point ---

def run_server():
    """Run the MCP server in stdio mode."""
    mcp.run(transport="stdio")


if __name__ == "__main__":
    run_server()
