"""Domain models for the branch collection table."""

from __future__ import annotations

import math
from dataclasses import dataclass, field, replace
from typing import Any, Iterable, Mapping

AMOUNT_FIELDS: tuple[str, ...] = (
    "total_rb",
    "rb_colln",
    "total_arr",
    "arr_colln",
    "total_colln",
    "bill",
)
RECORD_KEYS: dict[str, str] = {
    "total_rb": "totalRB",
    "rb_colln": "rbColln",
    "total_arr": "totalARR",
    "arr_colln": "arrColln",
    "total_colln": "totalColln",
    "bill": "bill",
}
FIELD_BY_RECORD_KEY: dict[str, str] = {key.lower(): name for name, key in RECORD_KEYS.items()}


def resolve_field(name: str) -> str:
    """Map either naming style (``rbColln`` or ``rb_colln``) onto the attribute name."""
    key = str(name or "").strip().lower()
    if key in AMOUNT_FIELDS:
        return key
    resolved = FIELD_BY_RECORD_KEY.get(key)
    if resolved is None:
        raise KeyError(f"Unknown amount field: {name!r}")
    return resolved


def _to_optional_float(value: Any) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        value = value.replace(",", "").strip()
        if not value:
            return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(number) or math.isinf(number):
        return None
    return number


def amount_text(value: Any) -> str:
    """Normalize a loosely typed amount into the stored text form ("" when unset)."""
    number = _to_optional_float(value)
    if number is None:
        return ""
    if number.is_integer():
        return str(int(number))
    return repr(number)


@dataclass(frozen=True)
class ReportRow:
    """One branch's figures for the reporting period; amounts are text, "" meaning unset."""

    branch: str
    total_rb: str = ""
    rb_colln: str = ""
    total_arr: str = ""
    arr_colln: str = ""
    total_colln: str = ""
    bill: str = ""

    @classmethod
    def blank(cls, branch: str) -> "ReportRow":
        return cls(branch=branch)

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "ReportRow":
        values: dict[str, str] = {}
        branch = ""
        for key, value in record.items():
            name = str(key).strip()
            if name.lower() == "branch":
                branch = str(value or "").strip()
                continue
            try:
                attr = resolve_field(name)
            except KeyError:
                continue
            values[attr] = amount_text(value)
        return cls(branch=branch, **values)

    def to_record(self) -> dict[str, str]:
        record = {"branch": self.branch}
        for name in AMOUNT_FIELDS:
            record[RECORD_KEYS[name]] = getattr(self, name)
        return record

    def amounts(self) -> dict[str, str]:
        return {name: getattr(self, name) for name in AMOUNT_FIELDS}

    def with_amount(self, name: str, value: str) -> "ReportRow":
        return replace(self, **{resolve_field(name): value})

    def with_amounts(self, other: "ReportRow", fields: Iterable[str] | None = None) -> "ReportRow":
        """Take ``other``'s figures; with ``fields`` only the named ones are taken."""
        if fields is None:
            return replace(self, **other.amounts())
        names = {resolve_field(name) for name in fields}
        return replace(self, **{name: getattr(other, name) for name in names})


@dataclass(frozen=True)
class ReportTotals:
    total_rb: float = 0.0
    rb_colln: float = 0.0
    total_arr: float = 0.0
    arr_colln: float = 0.0
    total_colln: float = 0.0
    bill: float = 0.0

    def to_record(self) -> dict[str, float]:
        return {RECORD_KEYS[name]: getattr(self, name) for name in AMOUNT_FIELDS}


@dataclass(frozen=True)
class TotalsPercentage:
    rb_percent: str = ""
    arr_percent: str = ""


@dataclass(frozen=True)
class ExtractionResult:
    """Vision payload after boundary normalization: strict optional amounts."""

    branch: str = ""
    total_rb: float | None = None
    rb_colln: float | None = None
    total_arr: float | None = None
    arr_colln: float | None = None
    total_colln: float | None = None
    bill: float | None = None
    raw: Mapping[str, Any] = field(default_factory=dict, compare=False, repr=False)

    @classmethod
    def from_values(cls, branch: Any, values: Mapping[str, Any], raw: Mapping[str, Any] | None = None) -> "ExtractionResult":
        amounts = {name: _to_optional_float(values.get(name)) for name in AMOUNT_FIELDS}
        return cls(branch=str(branch or "").strip(), raw=dict(raw or {}), **amounts)

    def to_row(self, branch: str) -> ReportRow:
        return ReportRow(branch=branch, **{name: amount_text(getattr(self, name)) for name in AMOUNT_FIELDS})
