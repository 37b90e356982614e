"""Branch collection report package."""

from .application import ReportTable, review_extraction, run_report_pipeline
from .application.reporting.metrics import compute_row_percentage, compute_totals, compute_totals_percentage
from .domain import BranchVocabulary, ReportRow, match_branch

__all__ = [
    "BranchVocabulary",
    "ReportRow",
    "ReportTable",
    "compute_row_percentage",
    "compute_totals",
    "compute_totals_percentage",
    "match_branch",
    "review_extraction",
    "run_report_pipeline",
]
