"""Infrastructure layer package."""

from .excel_repository import load_messages, load_response_texts, load_rows, save_report_workbook
from .report_exporter import save_report_json

__all__ = ["load_rows", "load_messages", "load_response_texts", "save_report_workbook", "save_report_json"]
