"""Environment-driven settings for the collection report."""

from __future__ import annotations

import os
from datetime import date, datetime

DEFAULT_REGION = "CALICUT REGION"
DEFAULT_TITLE = "ARREARS, RUNNING BALANCE & COLLECTION DETAILS"
DEFAULT_DATE_FORMAT = "%d/%m/%Y"


def _read_text(name: str, default: str) -> str:
    raw = os.getenv(name, "")
    value = raw.strip()
    return value or default


def _parse_branches() -> tuple[str, ...]:
    raw = os.getenv("COLLECTION_REPORT_BRANCHES", "")
    if not raw.strip():
        return ()
    names = tuple(part.strip() for part in raw.split(",") if part.strip())
    if not names:
        raise ValueError(f"Invalid COLLECTION_REPORT_BRANCHES: {raw!r}")
    return names


def _parse_date_format() -> str:
    fmt = _read_text("COLLECTION_REPORT_DATE_FORMAT", DEFAULT_DATE_FORMAT)
    try:
        rendered = date(2000, 1, 2).strftime(fmt)
    except ValueError as exc:
        raise ValueError(f"Invalid COLLECTION_REPORT_DATE_FORMAT: {fmt}") from exc
    if rendered == fmt:
        raise ValueError(f"COLLECTION_REPORT_DATE_FORMAT has no date directives: {fmt}")
    return fmt


REPORT_REGION = _read_text("COLLECTION_REPORT_REGION", DEFAULT_REGION)
REPORT_TITLE = _read_text("COLLECTION_REPORT_TITLE", DEFAULT_TITLE)
BRANCH_OVERRIDE = _parse_branches()
DATE_FORMAT = _parse_date_format()


def format_report_date(value: date | datetime | None = None, fmt: str = DATE_FORMAT) -> str:
    return (value or date.today()).strftime(fmt)
