"""Free-text message adapter: ``"Branch: Farook, Total RB: 1200, RB Colln: 300"`` -> row."""

from __future__ import annotations

import logging
import re
from typing import Dict, Mapping, Sequence

from collection_report.domain.branch_matcher import match_branch
from collection_report.domain.models import ReportRow, amount_text
from collection_report.errors import BranchRequiredError

logger = logging.getLogger(__name__)

# Checked in order; the first alias contained in the key wins.
KEY_ALIASES: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("branch", ("branch",)),
    ("total_rb", ("total rb", "total running balance")),
    ("rb_colln", ("rb coll", "running balance coll")),
    ("total_arr", ("total arr",)),
    ("arr_colln", ("arr coll", "arrears coll")),
    ("total_colln", ("total coll",)),
    ("bill", ("bill",)),
)

_WHITESPACE_RE = re.compile(r"\s+")
# A comma only starts a new part when a `key:` follows, so "1,200" stays whole.
_PART_SPLIT_RE = re.compile(r",(?=[^,:]*:)")


def _normalize_key(key: str) -> str:
    return _WHITESPACE_RE.sub(" ", key).strip().lower()


def field_for_key(key: str) -> str | None:
    normalized = _normalize_key(key)
    if not normalized:
        return None
    for name, aliases in KEY_ALIASES:
        if any(alias in normalized for alias in aliases):
            return name
    return None


def parse_message(text: str | None) -> Dict[str, str]:
    """Split comma-separated ``key : value`` parts into known fields; other keys are ignored."""
    parsed: Dict[str, str] = {}
    for part in _PART_SPLIT_RE.split(str(text or "")):
        if ":" not in part:
            continue
        key, value = part.split(":", 1)
        name = field_for_key(key)
        if name is None:
            logger.debug("Ignoring unrecognized message key %r", key.strip())
            continue
        if name == "branch":
            parsed[name] = value.strip()
        else:
            parsed[name] = amount_text(value)
    return parsed


def message_row(parsed: Mapping[str, str], vocabulary: Sequence[str] | None = None) -> ReportRow:
    """Build a row from already parsed fields, reconciling the branch when a vocabulary is given."""
    amounts = dict(parsed)
    branch = amounts.pop("branch", "")
    if not branch:
        raise BranchRequiredError("Message has no branch")
    if vocabulary is not None:
        matched = match_branch(branch, vocabulary)
        branch = matched if matched is not None else branch.upper()
    return ReportRow(branch=branch, **amounts)


def parse_message_row(text: str | None, vocabulary: Sequence[str] | None = None) -> ReportRow:
    return message_row(parse_message(text), vocabulary)
