"""Application layer package."""

from .extraction_service import ExtractionReview, parse_vision_response, review_extraction
from .message_parser import message_row, parse_message, parse_message_row
from .report_service import ReportPaths, ReportRunResult, run_report_pipeline
from .table_state import ReportTable

__all__ = [
    "ExtractionReview",
    "ReportPaths",
    "ReportRunResult",
    "ReportTable",
    "message_row",
    "parse_message",
    "parse_message_row",
    "parse_vision_response",
    "review_extraction",
    "run_report_pipeline",
]
