"""Application service that assembles one collection report run."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path
from time import perf_counter
from typing import Any, Dict, List, Sequence

from collection_report.application.extraction_service import ExtractionReview, review_extraction
from collection_report.application.message_parser import message_row, parse_message
from collection_report.application.reporting.table import build_report_frame, build_values_frame
from collection_report.application.table_state import ReportTable
from collection_report.config import BRANCH_OVERRIDE, REPORT_REGION, REPORT_TITLE, format_report_date
from collection_report.domain.models import ReportRow
from collection_report.domain.vocabulary import DEFAULT_BRANCHES, BranchVocabulary
from collection_report.errors import BranchRequiredError, ExtractionPayloadError
from collection_report.infrastructure.excel_repository import (
    load_messages,
    load_response_texts,
    load_rows,
    save_report_workbook,
)
from collection_report.infrastructure.report_exporter import save_report_json

logger = logging.getLogger(__name__)

PROJECT_ROOT = Path(__file__).resolve().parents[2]


@dataclass(frozen=True)
class ReportPaths:
    rows_path: Path
    messages_path: Path
    responses_dir: Path
    output_json_path: Path
    output_excel_path: Path

    @classmethod
    def under(cls, root: Path) -> "ReportPaths":
        return cls(
            rows_path=root / "data" / "raw" / "rows.json",
            messages_path=root / "data" / "raw" / "messages.txt",
            responses_dir=root / "data" / "extractions",
            output_json_path=root / "output" / "collection_report.json",
            output_excel_path=root / "output" / "collection_report.xlsx",
        )


@dataclass
class ReportRunResult:
    table: ReportTable
    summary: Dict[str, Any]
    excel_saved: bool = True
    excel_error_message: str = ""
    pending_extractions: List[Dict[str, Any]] = field(default_factory=list)
    rejected_inputs: List[Dict[str, str]] = field(default_factory=list)


def default_vocabulary() -> BranchVocabulary:
    return BranchVocabulary(BRANCH_OVERRIDE or DEFAULT_BRANCHES)


def _canonical_row(row: ReportRow, vocabulary: BranchVocabulary) -> ReportRow:
    canonical = vocabulary.canonical(row.branch)
    if canonical is None or canonical == row.branch:
        return row
    return ReportRow(branch=canonical, **row.amounts())


def apply_messages(table: ReportTable, messages: Sequence[str], vocabulary: BranchVocabulary) -> List[Dict[str, str]]:
    rejected: List[Dict[str, str]] = []
    for message in messages:
        parsed = parse_message(message)
        try:
            row = message_row(parsed, vocabulary)
        except BranchRequiredError as exc:
            logger.warning("Skipping message without branch: %r", message)
            rejected.append({"source": "message", "input": message, "error": str(exc)})
            continue
        # A message only updates the figures it names.
        table.apply_row(row, fields=[name for name in parsed if name != "branch"])
    return rejected


def apply_extractions(
    table: ReportTable,
    responses: Sequence[tuple[str, str]],
    vocabulary: BranchVocabulary,
) -> tuple[List[Dict[str, Any]], List[Dict[str, str]]]:
    """Apply responses with a confident branch; the rest wait for a manual branch choice."""
    pending: List[Dict[str, Any]] = []
    rejected: List[Dict[str, str]] = []
    for source, text in responses:
        try:
            review: ExtractionReview = review_extraction(text, vocabulary)
        except ExtractionPayloadError as exc:
            logger.warning("Unreadable vision response %s: %s", source, exc)
            rejected.append({"source": source, "input": text, "error": str(exc)})
            continue
        if review.needs_branch:
            pending.append({"source": source, **review.draft()})
            continue
        table.apply_row(review.commit())
    return pending, rejected


def build_report_summary(
    table: ReportTable,
    report_date: str,
    region: str = REPORT_REGION,
    title: str = REPORT_TITLE,
) -> Dict[str, Any]:
    totals_percentage = table.totals_percentage()
    return {
        "title": title,
        "region": region,
        "date": report_date,
        "rows": [row.to_record() for row in table.rows],
        "totals": table.totals().to_record(),
        "totals_percentage": {
            "rb": totals_percentage.rb_percent,
            "arr": totals_percentage.arr_percent,
        },
        "display": table.view(),
    }


def run_report_pipeline(
    paths: ReportPaths | None = None,
    vocabulary: BranchVocabulary | None = None,
    report_date: date | None = None,
) -> ReportRunResult:
    pipeline_start = perf_counter()
    stage_start = pipeline_start
    stage_timings: list[tuple[str, float]] = []

    def _mark(stage_name: str) -> None:
        nonlocal stage_start
        now = perf_counter()
        stage_timings.append((stage_name, now - stage_start))
        stage_start = now

    paths = paths or ReportPaths.under(PROJECT_ROOT)
    vocabulary = vocabulary or default_vocabulary()

    table = ReportTable.from_vocabulary(vocabulary)
    if paths.rows_path.exists():
        for row in load_rows(paths.rows_path):
            table.apply_row(_canonical_row(row, vocabulary))
    _mark("load_rows")

    rejected = apply_messages(table, load_messages(paths.messages_path), vocabulary)
    _mark("apply_messages")

    responses = [(path.name, text) for path, text in load_response_texts(paths.responses_dir)]
    pending, rejected_responses = apply_extractions(table, responses, vocabulary)
    rejected.extend(rejected_responses)
    _mark("apply_extractions")

    summary = build_report_summary(table, report_date=format_report_date(report_date))
    summary["pending_extractions"] = pending
    summary["rejected_inputs"] = rejected
    save_report_json(paths.output_json_path, summary)
    _mark("save_json")

    excel_saved, excel_error_message = save_report_workbook(
        paths.output_excel_path,
        {
            "report": build_report_frame(table.rows),
            "values": build_values_frame(table.rows),
        },
    )
    _mark("save_excel")
    total_elapsed = perf_counter() - pipeline_start

    print(
        "Report prepared: "
        f"rows={len(table)}, "
        f"pending_extractions={len(pending)}, "
        f"rejected_inputs={len(rejected)}"
    )
    stage_text = ", ".join([f"{name}={seconds:.3f}s" for name, seconds in stage_timings])
    print(f"Stage Timing: {stage_text}")
    print(f"Total Elapsed: {total_elapsed:.3f}s")
    print(f"Saved JSON: {paths.output_json_path}")
    if excel_saved:
        print(f"Saved Excel: {paths.output_excel_path}")
    else:
        print(f"Excel save skipped (file may be open/locked): {excel_error_message}")

    return ReportRunResult(
        table=table,
        summary=summary,
        excel_saved=excel_saved,
        excel_error_message=excel_error_message,
        pending_extractions=pending,
        rejected_inputs=rejected,
    )
