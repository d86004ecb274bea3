"""xlsx rendering of branch reports.

The workbook is produced in memory with ``openpyxl`` from the row layouts in
:mod:`branch_ledger.report`; no values are recomputed here. Monetary cells
carry the locale number format, and formula cells are written as strings
starting with ``=``, which openpyxl stores as live formulas.

File output is atomic: the workbook is written to ``<path>.tmp`` first and
then moved into place with ``os.replace``.
"""

from __future__ import annotations

import asyncio
import contextlib
import os
import re
from dataclasses import dataclass
from decimal import Decimal
from io import BytesIO
from pathlib import Path

from openpyxl import Workbook
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
from openpyxl.utils import get_column_letter
from openpyxl.worksheet.worksheet import Worksheet

from .errors import SerializationError
from .logging_setup import get_logger
from .models import BranchReport
from .report import (
    Formula,
    ReportSheet,
    RowKind,
    build_cash_in_hand_sheet,
    build_clustered_sheet,
    build_flat_passbook_sheet,
)

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

_logger = get_logger("branch_ledger.export")

_THIN = Side(style="thin")
_BORDER = Border(left=_THIN, right=_THIN, top=_THIN, bottom=_THIN)
_GREY = PatternFill("solid", fgColor="FFD9D9D9")
_WEEKEND = PatternFill("solid", fgColor="FFFFF2CC")
_SECTION = PatternFill("solid", fgColor="FFDDEBF7")


@dataclass(frozen=True, slots=True)
class ExportArtifact:
    """A rendered workbook ready to be returned to a caller."""

    content: bytes
    filename: str
    media_type: str = XLSX_MEDIA_TYPE


# ---------------------------------------------------------------------------
# Rendering
# ---------------------------------------------------------------------------


def _write_sheet(ws: Worksheet, sheet: ReportSheet) -> None:
    ws.title = sheet.name
    width = len(sheet.columns)
    for i, column in enumerate(sheet.columns, start=1):
        ws.column_dimensions[get_column_letter(i)].width = column.width

    for row in sheet.rows:
        r = row.number
        for c, value in enumerate(row.cells, start=1):
            cell = ws.cell(row=r, column=c)
            if isinstance(value, Formula):
                cell.value = str(value)
                cell.number_format = sheet.number_format
            elif isinstance(value, Decimal):
                # openpyxl writes floats; amounts are already quantized to cents
                cell.value = float(value)
                cell.number_format = sheet.number_format
            else:
                cell.value = value

            if row.kind in (RowKind.HEADER, RowKind.OPENING, RowKind.DATA, RowKind.WEEKEND, RowKind.TOTAL):
                cell.border = _BORDER
            if row.kind in (RowKind.HEADER, RowKind.OPENING, RowKind.TOTAL):
                cell.fill = _GREY
                cell.font = Font(bold=True)
            elif row.kind is RowKind.WEEKEND:
                cell.fill = _WEEKEND
            elif row.kind is RowKind.SECTION:
                cell.fill = _SECTION
                cell.font = Font(bold=True)

        if row.kind is RowKind.TITLE:
            ws.merge_cells(start_row=r, start_column=1, end_row=r, end_column=width)
            title = ws.cell(row=r, column=1)
            title.font = Font(bold=True, size=16)
            title.alignment = Alignment(horizontal="center")
        elif row.kind is RowKind.META:
            ws.cell(row=r, column=1).font = Font(bold=True)
        elif row.kind is RowKind.HEADER:
            for c in range(1, width + 1):
                ws.cell(row=r, column=c).alignment = Alignment(horizontal="center")

    header = next((g.header_row for g in sheet.groups), None)
    if header is not None:
        ws.freeze_panes = ws.cell(row=header + 1, column=1)


def _workbook_bytes(sheets: list[ReportSheet]) -> bytes:
    wb = Workbook()
    # replace the blank default sheet with the report sheets
    wb.remove(wb.worksheets[0])
    for sheet in sheets:
        _write_sheet(wb.create_sheet(), sheet)
    buf = BytesIO()
    wb.save(buf)
    return buf.getvalue()


def render_workbook(report: BranchReport) -> bytes:
    """Render the two-sheet report workbook to xlsx bytes.

    Sheets, in order: ``Passbook (Clustered)`` and ``Cash In Hand``. Raises
    :class:`SerializationError` if the workbook cannot be produced.
    """

    try:
        return _workbook_bytes([build_clustered_sheet(report), build_cash_in_hand_sheet(report)])
    except Exception as e:
        _logger.exception("export:render_failed branch=%s", report.config.branch_label or "-")
        raise SerializationError(f"report generation failed: {e}") from e


def render_flat_passbook(report: BranchReport) -> bytes:
    """Render the one-row-per-transaction ``Branch Passbook`` workbook."""

    try:
        return _workbook_bytes([build_flat_passbook_sheet(report)])
    except Exception as e:
        _logger.exception("export:render_failed sheet=passbook branch=%s", report.config.branch_label or "-")
        raise SerializationError(f"report generation failed: {e}") from e


# ---------------------------------------------------------------------------
# Artifacts and files
# ---------------------------------------------------------------------------

_UNSAFE = re.compile(r"[^A-Za-z0-9._-]+")


def suggested_filename(report: BranchReport, *, prefix: str = "branch_passbook") -> str:
    """``<prefix>_<branch>_<from>_to_<to>.xlsx`` with ``NA`` for unknown parts."""

    branch = _UNSAFE.sub("_", report.config.branch_id or report.config.branch_name).strip("_") or "NA"
    start = report.start.isoformat() if report.start else "NA"
    end = report.end.isoformat() if report.end else "NA"
    return f"{prefix}_{branch}_{start}_to_{end}.xlsx"


def export_report(report: BranchReport) -> ExportArtifact:
    content = render_workbook(report)
    artifact = ExportArtifact(content=content, filename=suggested_filename(report))
    _logger.info("export:rendered filename=%s bytes=%d", artifact.filename, len(content))
    return artifact


async def export_report_async(report: BranchReport) -> ExportArtifact:
    """Render off the event loop; the workbook build is CPU-bound."""

    return await asyncio.to_thread(export_report, report)


def _atomic_write(path: Path, content: bytes) -> Path:
    tmp = path.with_suffix(path.suffix + ".tmp")
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp.write_bytes(content)
        os.replace(tmp, path)
    except OSError as e:
        with contextlib.suppress(FileNotFoundError):
            tmp.unlink()
        _logger.exception("export:write_failed path=%s", path)
        raise SerializationError(f"failed to write {path}: {e}") from e
    return path


def write_report(report: BranchReport, path: str | os.PathLike[str]) -> Path:
    """Render the report workbook and write it atomically to ``path``."""

    target = _atomic_write(Path(path), render_workbook(report))
    _logger.info("export:written path=%s", target)
    return target


def write_flat_passbook(report: BranchReport, path: str | os.PathLike[str]) -> Path:
    target = _atomic_write(Path(path), render_flat_passbook(report))
    _logger.info("export:written path=%s sheet=passbook", target)
    return target


__all__ = [
    "XLSX_MEDIA_TYPE",
    "ExportArtifact",
    "render_workbook",
    "render_flat_passbook",
    "suggested_filename",
    "export_report",
    "export_report_async",
    "write_report",
    "write_flat_passbook",
]
