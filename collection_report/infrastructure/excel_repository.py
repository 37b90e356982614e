"""Infrastructure adapter for row input files and workbook output."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List, Sequence

import polars as pl

from collection_report.domain.models import ReportRow

PREFERRED_SHEET = "rows"


def _import_openpyxl() -> tuple[Any, Any]:
    try:
        from openpyxl import Workbook, load_workbook
    except Exception as exc:  # pragma: no cover
        raise RuntimeError("openpyxl is required for Excel fallback I/O.") from exc
    return Workbook, load_workbook


def _normalize_headers(raw_headers: Sequence[Any]) -> list[str]:
    headers: list[str] = []
    seen: dict[str, int] = {}
    for idx, value in enumerate(raw_headers):
        base = str(value).strip() if value not in (None, "") else f"column_{idx + 1}"
        count = seen.get(base, 0)
        name = base if count == 0 else f"{base}_{count + 1}"
        seen[base] = count + 1
        headers.append(name)
    return headers


def _read_with_polars(path: Path, preferred_sheet: str) -> pl.DataFrame:
    if not hasattr(pl, "read_excel"):
        raise RuntimeError("polars.read_excel is not available in this environment.")
    try:
        frame = pl.read_excel(path, sheet_name=preferred_sheet)
    except Exception:
        frame = pl.read_excel(path)
    if isinstance(frame, dict):
        first_key = next(iter(frame.keys()), None)
        return frame[first_key] if first_key is not None else pl.DataFrame()
    return frame


def _read_with_openpyxl(path: Path, preferred_sheet: str) -> pl.DataFrame:
    _, load_workbook = _import_openpyxl()
    workbook = load_workbook(path, read_only=True, data_only=True)
    sheet_name = preferred_sheet if preferred_sheet in workbook.sheetnames else workbook.sheetnames[0]

    worksheet = workbook[sheet_name]
    row_iter = worksheet.iter_rows(values_only=True)
    header_row = next(row_iter, None)
    if header_row is None:
        workbook.close()
        return pl.DataFrame()

    headers = _normalize_headers(header_row)
    records: list[dict[str, Any]] = []
    for values in row_iter:
        if values is None or all(value is None for value in values):
            continue
        row_data: dict[str, Any] = {}
        for idx, name in enumerate(headers):
            value = values[idx] if idx < len(values) else None
            row_data[name] = None if value is None else str(value)
        records.append(row_data)

    workbook.close()
    if not records:
        return pl.DataFrame({name: [] for name in headers})
    return pl.DataFrame(records, schema={name: pl.Utf8 for name in headers})


def _records_from_frame(frame: pl.DataFrame) -> List[Dict[str, Any]]:
    text_frame = frame.select([pl.col(name).cast(pl.Utf8, strict=False) for name in frame.columns])
    return text_frame.to_dicts()


def _rows_from_records(records: Sequence[Any]) -> List[ReportRow]:
    rows: List[ReportRow] = []
    for record in records:
        if not isinstance(record, dict):
            continue
        row = ReportRow.from_record(record)
        if not row.branch or row.branch.upper() == "TOTAL":
            continue
        rows.append(row)
    return rows


def load_rows(path: str | Path, preferred_sheet: str = PREFERRED_SHEET) -> List[ReportRow]:
    """Read committed rows from a ``.json`` list of records or an Excel sheet."""
    input_path = Path(path)
    if not input_path.exists():
        raise FileNotFoundError(f"Input rows file not found: {input_path}")

    if input_path.suffix.lower() == ".json":
        payload = json.loads(input_path.read_text(encoding="utf-8"))
        if isinstance(payload, dict):
            payload = payload.get("rows", [])
        if not isinstance(payload, list):
            raise ValueError(f"Expected a list of row records in {input_path}")
        return _rows_from_records(payload)

    try:
        frame = _read_with_polars(input_path, preferred_sheet)
    except Exception:
        frame = _read_with_openpyxl(input_path, preferred_sheet)
    return _rows_from_records(_records_from_frame(frame))


def _excel_cell_value(value: Any) -> Any:
    if isinstance(value, float) and (value != value or value in (float("inf"), float("-inf"))):
        return None
    return value


def _write_with_openpyxl(path: Path, sheets: Dict[str, pl.DataFrame]) -> None:
    Workbook, _ = _import_openpyxl()
    workbook = Workbook()
    default_sheet = workbook.active
    workbook.remove(default_sheet)

    for sheet_name, frame in sheets.items():
        worksheet = workbook.create_sheet(title=str(sheet_name)[:31])
        worksheet.append(frame.columns)
        for row in frame.iter_rows(named=False):
            worksheet.append([_excel_cell_value(value) for value in row])

    path.parent.mkdir(parents=True, exist_ok=True)
    workbook.save(path)


def write_report_workbook(path: str | Path, sheets: Dict[str, pl.DataFrame]) -> None:
    """Write one worksheet per frame, in insertion order."""
    _write_with_openpyxl(Path(path), sheets)


def save_report_workbook(path: Path, sheets: Dict[str, pl.DataFrame]) -> tuple[bool, str]:
    try:
        write_report_workbook(path, sheets)
    except PermissionError as exc:
        return False, str(exc)
    return True, ""


def load_messages(path: Path) -> list[str]:
    """One free-text message per non-blank line; a missing file yields no messages."""
    if not path.exists():
        return []
    lines = path.read_text(encoding="utf-8").splitlines()
    return [line.strip() for line in lines if line.strip()]


def load_response_texts(directory: Path) -> list[tuple[Path, str]]:
    """Saved vision responses (``*.json`` / ``*.txt``) sorted by file name."""
    if not directory.exists():
        return []
    paths = sorted(path for path in directory.iterdir() if path.suffix.lower() in (".json", ".txt"))
    return [(path, path.read_text(encoding="utf-8")) for path in paths]
