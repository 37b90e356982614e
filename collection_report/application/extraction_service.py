"""Consume a vision-model response and turn it into a reviewable row."""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Sequence

from collection_report.domain.branch_matcher import match_branch
from collection_report.domain.models import AMOUNT_FIELDS, ExtractionResult, ReportRow, amount_text
from collection_report.errors import BranchRequiredError, ExtractionPayloadError

logger = logging.getLogger(__name__)

BRANCH_KEY = "BRANCH"
PAYLOAD_KEYS: Dict[str, str] = {
    "TOTAL RUNNING BALANCE": "total_rb",
    "RUNNING BALANCE COLLN": "rb_colln",
    "TOTAL ARRS": "total_arr",
    "ARREARS COLL": "arr_colln",
    "TOTAL COLL": "total_colln",
    "BILL": "bill",
}

VISION_PROMPT = """Extract financial data from this image and return only a JSON object with these exact keys:
{
"BRANCH": "branch name",
"TOTAL RUNNING BALANCE": "number or null",
"RUNNING BALANCE COLLN": "number or null",
"TOTAL ARRS": "number or null",
"ARREARS COLL": "number or null",
"TOTAL COLL": "number or null",
"BILL": "number or null"
}
Return only the JSON, no other text."""

_FENCE_RE = re.compile(r"^```[a-zA-Z]*\s*|\s*```$")
_OBJECT_RE = re.compile(r"\{[\s\S]*\}")
_WHITESPACE_RE = re.compile(r"\s+")


def _payload_key(key: Any) -> str:
    return _WHITESPACE_RE.sub(" ", str(key)).strip().upper()


def parse_vision_response(response: str | Mapping[str, Any]) -> Dict[str, Any]:
    """Decode the JSON object carried by a vision response.

    Accepts an already decoded mapping or the raw response text, which may be
    wrapped in markdown fences or surrounded by prose.
    """
    if isinstance(response, Mapping):
        return dict(response)

    text = _FENCE_RE.sub("", str(response or "").strip())
    match = _OBJECT_RE.search(text)
    if match is None:
        raise ExtractionPayloadError("Vision response does not contain a JSON object")
    try:
        payload = json.loads(match.group(0))
    except json.JSONDecodeError as exc:
        raise ExtractionPayloadError(f"Vision response JSON is malformed: {exc}") from exc
    if not isinstance(payload, dict):
        raise ExtractionPayloadError("Vision response JSON is not an object")
    return payload


def normalize_extraction(payload: Mapping[str, Any]) -> ExtractionResult:
    keyed = {_payload_key(key): value for key, value in payload.items()}
    values = {field: keyed.get(key) for key, field in PAYLOAD_KEYS.items()}
    branch = keyed.get(BRANCH_KEY)
    return ExtractionResult.from_values(branch=branch if isinstance(branch, str) else "", values=values, raw=payload)


@dataclass(frozen=True)
class ExtractionReview:
    """Extracted figures awaiting a branch decision from the user."""

    result: ExtractionResult
    suggested_branch: str | None

    @property
    def needs_branch(self) -> bool:
        return self.suggested_branch is None

    def draft(self) -> Dict[str, str]:
        row = self.result.to_row(self.suggested_branch or "")
        return {"extracted_branch": self.result.branch, **row.amounts(), "branch": row.branch}

    def commit(self, branch: str | None = None, overrides: Mapping[str, Any] | None = None) -> ReportRow:
        chosen = str(branch or "").strip() or self.suggested_branch
        if not chosen:
            raise BranchRequiredError("Select a branch before applying extracted data")
        row = self.result.to_row(chosen)
        for name, value in (overrides or {}).items():
            row = row.with_amount(name, amount_text(value))
        return row


def review_extraction(response: str | Mapping[str, Any], vocabulary: Sequence[str]) -> ExtractionReview:
    result = normalize_extraction(parse_vision_response(response))
    suggested = match_branch(result.branch, vocabulary)
    filled = sum(1 for name in AMOUNT_FIELDS if getattr(result, name) is not None)
    if suggested is None:
        logger.warning("Extracted branch %r matched no known branch; manual selection required", result.branch)
    else:
        logger.info("Extracted branch %r suggested as %s (%d amounts)", result.branch, suggested, filled)
    return ExtractionReview(result=result, suggested_branch=suggested)
