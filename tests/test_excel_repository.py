import json

import polars as pl
import pytest
from openpyxl import Workbook, load_workbook

from collection_report.infrastructure.excel_repository import (
    load_messages,
    load_response_texts,
    load_rows,
    save_report_workbook,
)
from collection_report.infrastructure.report_exporter import save_report_json


def test_load_rows_from_json(tmp_path):
    path = tmp_path / "rows.json"
    path.write_text(
        json.dumps(
            {
                "rows": [
                    {"branch": "FAROOK", "totalRB": 1200, "rbColln": "300", "remarks": "x"},
                    {"branch": "", "bill": "4"},
                    {"branch": "TOTAL", "bill": "4"},
                ]
            }
        ),
        encoding="utf-8",
    )
    rows = load_rows(path)
    assert len(rows) == 1
    assert rows[0].total_rb == "1200"
    assert rows[0].rb_colln == "300"


def test_load_rows_from_workbook(tmp_path):
    path = tmp_path / "rows.xlsx"
    workbook = Workbook()
    sheet = workbook.active
    sheet.title = "rows"
    sheet.append(["Branch", "totalRB", "RB_COLLN", "bill"])
    sheet.append(["KALLAI", 500, 125, None])
    sheet.append([None, None, None, None])
    sheet.append(["MUKKAM", 80.5, None, 3])
    workbook.save(path)

    rows = load_rows(path)
    assert [row.branch for row in rows] == ["KALLAI", "MUKKAM"]
    assert rows[0].total_rb == "500"
    assert rows[0].rb_colln == "125"
    assert rows[0].bill == ""
    assert rows[1].total_rb == "80.5"
    assert rows[1].bill == "3"


def test_load_rows_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_rows(tmp_path / "missing.json")


def test_load_rows_rejects_non_list_json(tmp_path):
    path = tmp_path / "rows.json"
    path.write_text('"oops"', encoding="utf-8")
    with pytest.raises(ValueError):
        load_rows(path)


def test_save_report_workbook_multiple_sheets(tmp_path):
    path = tmp_path / "out" / "report.xlsx"
    saved, message = save_report_workbook(
        path,
        {
            "report": pl.DataFrame({"BRANCH": ["A", "TOTAL"], "RB %": ["", ""]}),
            "values": pl.DataFrame({"BRANCH": ["A", "TOTAL"], "TOTAL RB": [1.0, float("nan")]}),
        },
    )
    assert saved and message == ""
    workbook = load_workbook(path)
    assert workbook.sheetnames == ["report", "values"]
    assert workbook["values"]["B3"].value is None
    workbook.close()


def test_save_report_workbook_single_sheet(tmp_path):
    path = tmp_path / "single.xlsx"
    saved, _ = save_report_workbook(path, {"report": pl.DataFrame({"BRANCH": ["FAROOK"], "BILL": ["1,500"]})})
    assert saved
    workbook = load_workbook(path)
    assert workbook.sheetnames == ["report"]
    assert [cell.value for cell in workbook["report"][2]] == ["FAROOK", "1,500"]
    workbook.close()


def test_save_report_json(tmp_path):
    path = tmp_path / "nested" / "summary.json"
    save_report_json(path, {"region": "CALICUT REGION", "rows": []})
    assert json.loads(path.read_text(encoding="utf-8"))["region"] == "CALICUT REGION"


def test_load_messages_and_responses(tmp_path):
    assert load_messages(tmp_path / "none.txt") == []
    messages = tmp_path / "messages.txt"
    messages.write_text("Branch: A, Bill: 1\n\n  Branch: B  \n", encoding="utf-8")
    assert load_messages(messages) == ["Branch: A, Bill: 1", "Branch: B"]

    responses = tmp_path / "responses"
    assert load_response_texts(responses) == []
    responses.mkdir()
    (responses / "b.txt").write_text("two", encoding="utf-8")
    (responses / "a.json").write_text("one", encoding="utf-8")
    (responses / "skip.png").write_bytes(b"\x89PNG")
    assert [(path.name, text) for path, text in load_response_texts(responses)] == [("a.json", "one"), ("b.txt", "two")]
