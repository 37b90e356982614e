"""Owned row state for one collection report."""

from __future__ import annotations

import logging
import re
from typing import Dict, Iterable, List, Sequence

from collection_report.application.reporting.metrics import compute_totals, compute_totals_percentage
from collection_report.application.reporting.table import display_records
from collection_report.domain.models import ReportRow, ReportTotals, TotalsPercentage, resolve_field
from collection_report.domain.vocabulary import branch_key
from collection_report.errors import BranchRequiredError, InvalidAmountError, UnknownBranchError

logger = logging.getLogger(__name__)

AMOUNT_RE = re.compile(r"^\d+(?:\.\d+)?$")


def _require_branch(row: ReportRow) -> ReportRow:
    if not row.branch.strip():
        raise BranchRequiredError("Row has no branch name")
    return row


def validate_amount(value: str | None) -> str:
    """Accept blank or a non-negative decimal; thousands separators are dropped."""
    text = str(value or "").replace(",", "").strip()
    if text and not AMOUNT_RE.match(text):
        raise InvalidAmountError(f"Invalid amount: {value!r}")
    return text


class ReportTable:
    """Ordered branch rows; totals and percentages are derived on every read."""

    def __init__(self, rows: Iterable[ReportRow] = ()) -> None:
        self._rows: List[ReportRow] = [_require_branch(row) for row in rows]

    @classmethod
    def from_vocabulary(cls, vocabulary: Sequence[str]) -> "ReportTable":
        return cls(ReportRow.blank(branch) for branch in vocabulary)

    @property
    def rows(self) -> List[ReportRow]:
        return list(self._rows)

    def __len__(self) -> int:
        return len(self._rows)

    def index_of(self, branch: str) -> int:
        key = branch_key(branch)
        for idx, row in enumerate(self._rows):
            if branch_key(row.branch) == key:
                return idx
        raise UnknownBranchError(branch)

    def find(self, branch: str) -> ReportRow | None:
        try:
            return self._rows[self.index_of(branch)]
        except UnknownBranchError:
            return None

    def add_row(self, row: ReportRow) -> int:
        self._rows.append(_require_branch(row))
        return len(self._rows) - 1

    def _check_index(self, index: int) -> int:
        if index < 0 or index >= len(self._rows):
            raise IndexError(f"Row index out of range: {index}")
        return index

    def update_cell(self, index: int, field: str, value: str | None) -> ReportRow:
        row = self._rows[self._check_index(index)]
        updated = row.with_amount(resolve_field(field), validate_amount(value))
        self._rows[index] = updated
        return updated

    def remove_row(self, index: int) -> ReportRow:
        return self._rows.pop(self._check_index(index))

    def apply_row(self, row: ReportRow, fields: Iterable[str] | None = None) -> int:
        """Replace the figures of the row with the same branch, or append a new row.

        With ``fields`` only those figures of an existing row are replaced; the
        others keep their current values.
        """
        _require_branch(row)
        try:
            idx = self.index_of(row.branch)
        except UnknownBranchError:
            logger.info("Adding row for new branch %s", row.branch)
            return self.add_row(row)
        self._rows[idx] = self._rows[idx].with_amounts(row, fields)
        logger.info("Replaced figures for branch %s", self._rows[idx].branch)
        return idx

    def totals(self) -> ReportTotals:
        return compute_totals(self._rows)

    def totals_percentage(self) -> TotalsPercentage:
        return compute_totals_percentage(self.totals())

    def view(self) -> List[Dict[str, str]]:
        return display_records(self._rows)
