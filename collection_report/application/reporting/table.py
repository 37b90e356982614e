"""Tabular views of the collection report (display records and polars frames)."""

from __future__ import annotations

from typing import Any, Dict, List, Sequence

import polars as pl

from collection_report.application.reporting.metrics import (
    PERCENT_PRECISION,
    compute_totals,
    compute_totals_percentage,
    fmt_amount,
    optional_amount,
    row_percentages,
)
from collection_report.domain.models import AMOUNT_FIELDS, ReportRow, ReportTotals

TOTAL_LABEL = "TOTAL"
COLUMN_LABELS: Dict[str, str] = {
    "branch": "BRANCH",
    "total_rb": "TOTAL RB",
    "rb_colln": "RB COLLN",
    "rb_percent": "RB %",
    "total_arr": "TOTAL ARR",
    "arr_colln": "ARR COLLN",
    "arr_percent": "ARR %",
    "total_colln": "TOTAL COLLN",
    "bill": "BILL",
}
COLUMN_ORDER: List[str] = list(COLUMN_LABELS.keys())


def _display_record(branch: str, amounts: Dict[str, Any], rb_percent: str, arr_percent: str) -> Dict[str, str]:
    record = {"branch": branch, "rb_percent": rb_percent, "arr_percent": arr_percent}
    for name in AMOUNT_FIELDS:
        record[name] = fmt_amount(amounts.get(name))
    return {key: record[key] for key in COLUMN_ORDER}


def display_records(rows: Sequence[ReportRow]) -> List[Dict[str, str]]:
    """Formatted cells for every row followed by the totals record."""
    records: List[Dict[str, str]] = []
    for row in rows:
        percents = row_percentages(row)
        records.append(_display_record(row.branch, row.amounts(), percents.rb_percent, percents.arr_percent))

    totals = compute_totals(rows)
    totals_percents = compute_totals_percentage(totals)
    totals_amounts = {name: getattr(totals, name) for name in AMOUNT_FIELDS}
    records.append(_display_record(TOTAL_LABEL, totals_amounts, totals_percents.rb_percent, totals_percents.arr_percent))
    return records


def build_report_frame(rows: Sequence[ReportRow]) -> pl.DataFrame:
    """Display frame: one string column per report column, totals row last."""
    records = display_records(rows)
    return pl.DataFrame(
        {COLUMN_LABELS[key]: [record[key] for record in records] for key in COLUMN_ORDER},
        schema={COLUMN_LABELS[key]: pl.Utf8 for key in COLUMN_ORDER},
    )


def safe_percent_expr(num: pl.Expr, den: pl.Expr) -> pl.Expr:
    safe_den = pl.when(den != 0).then(den).otherwise(None)
    return ((num / safe_den) * 100).round(PERCENT_PRECISION)


def _values_rows(rows: Sequence[ReportRow], totals: ReportTotals) -> List[Dict[str, Any]]:
    data: List[Dict[str, Any]] = []
    for row in rows:
        item: Dict[str, Any] = {"branch": row.branch}
        for name in AMOUNT_FIELDS:
            item[name] = optional_amount(getattr(row, name))
        data.append(item)
    total_item: Dict[str, Any] = {"branch": TOTAL_LABEL}
    for name in AMOUNT_FIELDS:
        total_item[name] = getattr(totals, name)
    data.append(total_item)
    return data


def build_values_frame(rows: Sequence[ReportRow]) -> pl.DataFrame:
    """Numeric frame (unset amounts as null) with percentage columns, totals row last."""
    schema: Dict[str, Any] = {"branch": pl.Utf8, **{name: pl.Float64 for name in AMOUNT_FIELDS}}
    frame = pl.DataFrame(_values_rows(rows, compute_totals(rows)), schema=schema)
    frame = frame.with_columns(
        safe_percent_expr(pl.col("rb_colln"), pl.col("total_rb")).alias("rb_percent"),
        safe_percent_expr(pl.col("arr_colln"), pl.col("total_arr")).alias("arr_percent"),
    )
    return frame.select(COLUMN_ORDER).rename(COLUMN_LABELS)
