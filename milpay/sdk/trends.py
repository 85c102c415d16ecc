"""Month-over-month trend of a pay metric across LES entries.

Entries arrive two per month (mid-month and end-of-month), so a window of N
months reads the 2N most recent entries and averages within each month.
"""

import math
from collections import OrderedDict
from typing import List, Optional, Sequence

from .line_items import TrendDirection, TrendMetric
from .schemas import CompensationRecord, TrendPoint, TrendSeries
from .withholding import round2

VOLATILITY_THRESHOLD = 0.10
DIRECTION_THRESHOLD = 0.02


def metric_value(record: CompensationRecord, metric: TrendMetric) -> float:
    totals = record.totals
    return {
        TrendMetric.GROSS_PAY: totals.gross_pay,
        TrendMetric.NET_PAY: totals.net_pay,
        TrendMetric.TOTAL_DEDUCTIONS: totals.total_deductions,
    }[TrendMetric(metric)]


def period_key(record: CompensationRecord) -> str:
    """'YYYY-MM' for the record's pay period."""
    return f"{record.pay_period.year}-{record.pay_period.month:02d}"


def classify_trend(values: Sequence[float]) -> TrendDirection:
    """Classify an ordered series of period averages.

    Population coefficient of variation above 10% is volatile regardless of
    direction. Otherwise the second-half average is compared to the
    first-half average (shorter half first) with a 2% band.

    Examples:
        [1000, 1000, 1500, 2000] -> volatile (CoV ~0.30)
        [1000, 1005, 1010, 1015] -> stable (1012.5 is within 2% of 1002.5)
    """
    values = list(values)
    if len(values) < 2:
        return TrendDirection.STABLE

    mean = sum(values) / len(values)
    std_dev = math.sqrt(sum((v - mean) ** 2 for v in values) / len(values))

    if mean > 0:
        if std_dev / mean > VOLATILITY_THRESHOLD:
            return TrendDirection.VOLATILE
    elif std_dev > 0:
        # CoV is undefined around a zero or negative mean; any spread counts
        return TrendDirection.VOLATILE
    else:
        return TrendDirection.STABLE

    half = len(values) // 2
    first_avg = sum(values[:half]) / half
    second_avg = sum(values[half:]) / (len(values) - half)

    if second_avg > first_avg * (1 + DIRECTION_THRESHOLD):
        return TrendDirection.INCREASING
    if second_avg < first_avg * (1 - DIRECTION_THRESHOLD):
        return TrendDirection.DECREASING
    return TrendDirection.STABLE


def build_trend(
    records: Sequence[CompensationRecord],
    metric: TrendMetric,
    months_window: int,
) -> Optional[TrendSeries]:
    """Trend of ``metric`` over the most recent ``months_window`` months.

    Args:
        records: Entries sorted by pay date, most recent first
        metric: gross_pay, net_pay or total_deductions
        months_window: Number of months to cover

    Returns:
        TrendSeries, or None when fewer than two entries are in the window
    """
    metric = TrendMetric(metric)
    window = list(records)[: max(int(months_window), 0) * 2]
    if len(window) < 2:
        return None

    grouped: "OrderedDict[str, List[float]]" = OrderedDict()
    for record in window:
        grouped.setdefault(period_key(record), []).append(metric_value(record, metric))

    points = sorted(
        (TrendPoint(period=period, value=round2(sum(vals) / len(vals))) for period, vals in grouped.items()),
        key=lambda p: p.period,
    )
    values = [p.value for p in points]

    return TrendSeries(
        metric=metric,
        data_points=points,
        trend=classify_trend(values),
        average_value=round2(sum(values) / len(values)),
        min_value=min(values),
        max_value=max(values),
    )
