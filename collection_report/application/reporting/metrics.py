"""Derived percentages and totals for the collection table.

Every value here is recomputed from the stored row figures on each call;
nothing is cached. Missing or non-numeric input degrades to 0 for sums and to
a blank percentage, so a partially filled table always renders.
"""

from __future__ import annotations

import math
from typing import Any, Iterable

from collection_report.domain.models import AMOUNT_FIELDS, ReportRow, ReportTotals, TotalsPercentage

PERCENT_PRECISION = 6


def optional_amount(value: Any) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(number) or math.isinf(number):
        return None
    return number


def parse_amount(value: Any, default: float = 0.0) -> float:
    number = optional_amount(value)
    if number is None:
        return default
    return number


def safe_percent(num: float | None, den: float | None) -> float | None:
    if num is None or den is None or den == 0:
        return None
    return (num / den) * 100


def fmt_percent(value: float | None, precision: int = PERCENT_PRECISION) -> str:
    if value is None:
        return ""
    return f"{value:.{precision}f}"


def fmt_amount(value: Any) -> str:
    """Grouped amount with up to three decimals; blank when unset."""
    number = optional_amount(value)
    if number is None:
        return ""
    text = f"{number:,.3f}".rstrip("0").rstrip(".")
    return "0" if text in ("-0", "") else text


def compute_row_percentage(total: Any, collection: Any) -> str:
    """collection / total * 100 at fixed precision, or "" until both are present and total is non-zero."""
    return fmt_percent(safe_percent(optional_amount(collection), optional_amount(total)))


def row_percentages(row: ReportRow) -> TotalsPercentage:
    return TotalsPercentage(
        rb_percent=compute_row_percentage(row.total_rb, row.rb_colln),
        arr_percent=compute_row_percentage(row.total_arr, row.arr_colln),
    )


def compute_totals(rows: Iterable[ReportRow]) -> ReportTotals:
    sums = dict.fromkeys(AMOUNT_FIELDS, 0.0)
    for row in rows:
        for name in AMOUNT_FIELDS:
            sums[name] += parse_amount(getattr(row, name))
    return ReportTotals(**sums)


def compute_totals_percentage(totals: ReportTotals) -> TotalsPercentage:
    return TotalsPercentage(
        rb_percent=compute_row_percentage(totals.total_rb, totals.rb_colln),
        arr_percent=compute_row_percentage(totals.total_arr, totals.arr_colln),
    )
