"""
Tests for spreadsheet export.
"""

import io
import pytest
import pandas as pd
from datetime import date
from openpyxl import load_workbook

from sentinel.services import exporter
from sentinel.services.urgency import evaluate_all
from conftest import TODAY, make_order


@pytest.fixture
def records():
    return evaluate_all([
        make_order(95, po_number="PO-B", currency=""),
        make_order(5, po_number="PO-A", currency="EUR", delivery_date=None),
    ], TODAY)


def test_filename():
    assert exporter.export_filename(date(2024, 6, 3)) == "PO_Sentinel_Export_2024-06-03.xlsx"


def test_frame_columns_and_values(records):
    df = exporter.build_export_frame(records)

    assert list(df.columns) == [name for name, _ in exporter.EXPORT_COLUMNS]
    first = df.iloc[0]
    assert first["PO Number"] == "PO-B"
    assert first["Urgency"] == "Double Action"
    assert first["Status"] == "Overdue"
    assert first["Order Date"] == "2024-02-29"
    assert first["Currency"] == "USD"
    assert first["Age (Days)"] == 95
    assert df.iloc[1]["Due Date"] == ""
    assert df.iloc[1]["Currency"] == "EUR"


def test_xlsx_round_trip(records, tmp_path):
    path = tmp_path / "export.xlsx"
    exporter.write_xlsx(records, path)

    df = pd.read_excel(path, sheet_name=exporter.SHEET_NAME, engine="openpyxl")
    assert list(df["PO Number"]) == ["PO-B", "PO-A"]

    sheet = load_workbook(path)[exporter.SHEET_NAME]
    assert sheet.column_dimensions["A"].width == 15
    assert sheet.column_dimensions["M"].width == 40


def test_xlsx_bytes(records):
    data = exporter.to_xlsx_bytes(records)
    df = pd.read_excel(io.BytesIO(data), sheet_name=exporter.SHEET_NAME, engine="openpyxl")
    assert len(df) == 2


def test_csv(records):
    text = exporter.to_csv(records)
    assert text.splitlines()[0].startswith("PO Number,Urgency,Status")
    assert "PO-A" in text


def test_empty_view_is_an_error(tmp_path):
    with pytest.raises(exporter.ExportError):
        exporter.write_xlsx([], tmp_path / "empty.xlsx")
    with pytest.raises(exporter.ExportError):
        exporter.to_csv([])
