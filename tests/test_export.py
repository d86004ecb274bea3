import asyncio
from io import BytesIO
from pathlib import Path

import pytest
from openpyxl import load_workbook

import branch_ledger.export as export_mod
from branch_ledger import SerializationError, build_branch_report
from branch_ledger.export import (
    XLSX_MEDIA_TYPE,
    export_report,
    export_report_async,
    render_flat_passbook,
    render_workbook,
    suggested_filename,
    write_report,
)

RAW_ROWS: list[dict[str, object]] = [
    {"date": "2024-01-05", "credit": "100", "narration": "LN-1|r|Asha|Ujala|EMI"},
    {"date": "2024-01-05", "debit": "30", "narration": "Office tea"},
    {"date": "2024-01-06", "debit": "50", "type": "charge"},
]


def _mk_report(**overrides):
    return build_branch_report(RAW_ROWS, opening_balance=1000, **overrides)


def _load(content: bytes):
    return load_workbook(BytesIO(content))


def test_workbook_has_exactly_two_sheets_in_order():
    wb = _load(render_workbook(_mk_report()))
    assert wb.sheetnames == ["Passbook (Clustered)", "Cash In Hand"]
    assert wb.active.title == "Passbook (Clustered)"


def test_clustered_sheet_stores_live_formulas():
    wb = _load(render_workbook(_mk_report()))
    ws = wb["Passbook (Clustered)"]

    # title, 5 meta rows, blank, header, opening
    assert ws["A1"].value == "Passbook (Clustered)"
    assert ws["A8"].value == "Date"
    assert ws["C9"].value == "***Opening Balance***"
    assert ws["F9"].value == 1000
    assert ws["F10"].value == "=F9+D10-E10"
    assert ws["F12"].value == "=F11+D12-E12"
    assert ws["D13"].value == "=SUM(D10:D12)"
    assert ws["E13"].value == "=SUM(E10:E12)"
    assert ws["F13"].value == "=F12"
    assert ws["C13"].value == "***Closing Balance***"
    assert ws["D10"].value == 100
    assert ws["E10"].value == 0


def test_cash_in_hand_formulas_and_number_format():
    wb = _load(render_workbook(_mk_report(locale="en-US")))
    ws = wb["Cash In Hand"]

    # title, 5 meta rows, blank, "Daily", header, then data from row 10
    assert ws["A8"].value == "Daily"
    assert ws["A9"].value == "Period"
    assert ws["B10"].value == 1000
    assert ws["E10"].value == "=B10+C10-D10"
    assert ws["B11"].value == "=E10"
    assert ws["E12"].value == "=E11"
    assert ws["E10"].number_format == "#,##0.00"


def test_indian_locale_is_default_number_format():
    wb = _load(render_workbook(_mk_report()))
    fmt = wb["Passbook (Clustered)"]["F10"].number_format
    assert "##\\,##" in fmt


def test_header_row_styling():
    wb = _load(render_workbook(_mk_report()))
    cell = wb["Passbook (Clustered)"]["A8"]
    assert cell.font.bold
    assert cell.fill.fgColor.rgb == "FFD9D9D9"


def test_export_artifact_metadata():
    artifact = export_report(_mk_report(branch_id="BR 7"))
    assert artifact.media_type == XLSX_MEDIA_TYPE
    assert artifact.filename == "branch_passbook_BR_7_2024-01-05_to_2024-01-06.xlsx"
    assert artifact.content[:2] == b"PK"


def test_filename_uses_na_without_branch_or_dates():
    report = build_branch_report([], opening_balance=0)
    assert suggested_filename(report) == "branch_passbook_NA_NA_to_NA.xlsx"


def test_async_export_matches_sync():
    report = _mk_report()
    artifact = asyncio.run(export_report_async(report))
    assert artifact.filename == export_report(report).filename
    assert _load(artifact.content).sheetnames == ["Passbook (Clustered)", "Cash In Hand"]


def test_write_report_is_atomic(tmp_path: Path):
    target = tmp_path / "out" / "report.xlsx"
    assert write_report(_mk_report(), target) == target
    assert target.exists()
    assert not (tmp_path / "out" / "report.xlsx.tmp").exists()


def test_render_failure_leaves_no_file(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    def _boom(*_a, **_kw):
        raise ValueError("broken sheet")

    monkeypatch.setattr(export_mod, "build_cash_in_hand_sheet", _boom)
    target = tmp_path / "report.xlsx"
    with pytest.raises(SerializationError, match="report generation failed"):
        write_report(_mk_report(), target)
    assert list(tmp_path.iterdir()) == []


def test_write_failure_cleans_temp_file(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    def _fail_replace(src, dst):
        raise OSError("disk full")

    monkeypatch.setattr(export_mod.os, "replace", _fail_replace)
    target = tmp_path / "report.xlsx"
    with pytest.raises(SerializationError):
        write_report(_mk_report(), target)
    assert list(tmp_path.iterdir()) == []


def test_flat_passbook_workbook():
    wb = _load(render_flat_passbook(_mk_report(branch_name="Main")))
    assert wb.sheetnames == ["Branch Passbook"]
    ws = wb["Branch Passbook"]
    assert ws["A1"].value == "Cash/Bank Book"
    assert ws["A2"].value == "Branch Name: Main"
    assert ws["E2"].value == "Date: 2024-01-05 to 2024-01-06"
    assert ws["B3"].value == "Loan Account No"
    assert ws["H4"].value == 1000
    assert ws["H5"].value == "=H4+F5-G5"
    assert ws["H8"].value == "=H7"
