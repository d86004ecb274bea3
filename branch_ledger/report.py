"""Presentation projection of a :class:`BranchReport` into spreadsheet rows.

Sheets are built row by row through a :class:`RowLayout` cursor. The cursor
hands out the 1-based row number of every row it appends, and later formulas
(running balances, totals) reference those numbers. Balances and totals are
written as live formulas, never as baked constants, so a recalculating
spreadsheet keeps the ledger consistent after edits or row insertions.

Dates render as ``YYYY-MM-DD`` on the clustered passbook and as
``DD/MM/YYYY`` on the cash-in-hand sheet.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from enum import StrEnum

from openpyxl.utils import get_column_letter

from .models import ZERO, BranchReport, ClusterBucket, NormalizedTransaction, PeriodRow
from .remarks import parse_remark

CLUSTERED_SHEET_NAME = "Passbook (Clustered)"
CASH_IN_HAND_SHEET_NAME = "Cash In Hand"
FLAT_PASSBOOK_SHEET_NAME = "Branch Passbook"

OPENING_LABEL = "***Opening Balance***"
CLOSING_LABEL = "***Closing Balance***"


@dataclass(frozen=True, slots=True)
class Formula:
    """A spreadsheet formula (stored without the leading ``=``)."""

    expression: str

    def __str__(self) -> str:
        return f"={self.expression}"


type CellValue = str | int | Decimal | Formula | None


class RowKind(StrEnum):
    TITLE = "title"
    META = "meta"
    SECTION = "section"
    HEADER = "header"
    OPENING = "opening"
    DATA = "data"
    WEEKEND = "weekend"
    TOTAL = "total"
    BLANK = "blank"


@dataclass(frozen=True, slots=True)
class Column:
    header: str
    width: int


@dataclass(frozen=True, slots=True)
class SheetRow:
    number: int
    kind: RowKind
    cells: tuple[CellValue, ...]


@dataclass(frozen=True, slots=True)
class RowGroup:
    """Row numbers of one table (header, optional opening row, data, total)."""

    title: str
    header_row: int
    first_data_row: int | None
    last_data_row: int | None
    total_row: int
    opening_row: int | None = None


@dataclass(frozen=True, slots=True)
class ReportSheet:
    name: str
    columns: tuple[Column, ...]
    rows: tuple[SheetRow, ...]
    groups: tuple[RowGroup, ...]
    number_format: str

    def row(self, number: int) -> SheetRow:
        return self.rows[number - 1]

    def cell(self, column: str, number: int) -> CellValue:
        """Return the value at ``column`` (letter) and 1-based row ``number``."""

        index = next(
            i for i in range(len(self.columns)) if get_column_letter(i + 1) == column.upper()
        )
        return self.row(number).cells[index]


class RowLayout:
    """Append-only row cursor for one sheet."""

    def __init__(self, columns: Sequence[Column]) -> None:
        self._columns = tuple(columns)
        self._rows: list[SheetRow] = []
        self._groups: list[RowGroup] = []

    @property
    def next_row(self) -> int:
        return len(self._rows) + 1

    def add(self, kind: RowKind, cells: Sequence[CellValue] = ()) -> int:
        width = len(self._columns)
        if len(cells) > width:
            raise ValueError(f"row has {len(cells)} cells; sheet has {width} columns")
        padded = tuple(cells) + (None,) * (width - len(cells))
        number = self.next_row
        self._rows.append(SheetRow(number, kind, padded))
        return number

    def add_group(self, group: RowGroup) -> None:
        self._groups.append(group)

    def header(self) -> int:
        return self.add(RowKind.HEADER, [c.header for c in self._columns])

    def build(self, name: str, *, number_format: str) -> ReportSheet:
        return ReportSheet(
            name=name,
            columns=self._columns,
            rows=tuple(self._rows),
            groups=tuple(self._groups),
            number_format=number_format,
        )


# ---------------------------------------------------------------------------
# Formatting helpers
# ---------------------------------------------------------------------------


def _money(value: Decimal) -> Decimal:
    return value.quantize(Decimal("0.01"))


def _dmy(day: date) -> str:
    return day.strftime("%d/%m/%Y")


def daily_label(row: PeriodRow) -> str:
    return _dmy(row.start)


def weekly_label(row: PeriodRow) -> str:
    return f"{_dmy(row.start)} → {_dmy(row.end)}"


def monthly_label(row: PeriodRow) -> str:
    return row.start.strftime("%m/%Y")


def _meta_rows(layout: RowLayout, report: BranchReport) -> None:
    config = report.config
    opening_label = "Opening Balance"
    if report.opening.assumed_zero:
        opening_label += " (assumed zero)"
    layout.add(RowKind.META, ["Branch", config.branch_label or "-"])
    layout.add(RowKind.META, ["From", report.start.isoformat() if report.start else "-"])
    layout.add(RowKind.META, ["To", report.end.isoformat() if report.end else "-"])
    layout.add(RowKind.META, ["Week Start", config.week_start])
    layout.add(RowKind.META, [opening_label, _money(report.opening.amount)])


# ---------------------------------------------------------------------------
# Clustered passbook
# ---------------------------------------------------------------------------

CLUSTERED_COLUMNS: tuple[Column, ...] = (
    Column("Date", 14),
    Column("Category", 24),
    Column("Description", 34),
    Column("Credit", 14),
    Column("Debit", 14),
    Column("Balance", 16),
)


def build_clustered_sheet(report: BranchReport) -> ReportSheet:
    """Category buckets with a recursive ``F[r] = F[r-1] + D[r] - E[r]`` balance."""

    layout = RowLayout(CLUSTERED_COLUMNS)
    layout.add(RowKind.TITLE, [CLUSTERED_SHEET_NAME])
    _meta_rows(layout, report)
    layout.add(RowKind.BLANK)
    header_row = layout.header()
    opening_row = layout.add(
        RowKind.OPENING, [None, None, OPENING_LABEL, None, None, _money(report.opening.amount)]
    )

    buckets: Sequence[ClusterBucket] = report.buckets
    first = layout.next_row
    for bucket in buckets:
        r = layout.next_row
        layout.add(
            RowKind.DATA,
            [
                bucket.date.isoformat(),
                bucket.category.label,
                bucket.description,
                _money(bucket.credit),
                _money(bucket.debit),
                Formula(f"F{r - 1}+D{r}-E{r}"),
            ],
        )
    last = layout.next_row - 1

    if buckets:
        totals: list[CellValue] = [
            Formula(f"SUM(D{first}:D{last})"),
            Formula(f"SUM(E{first}:E{last})"),
            Formula(f"F{last}"),
        ]
    else:
        totals = [_money(ZERO), _money(ZERO), Formula(f"F{opening_row}")]
    total_row = layout.add(RowKind.TOTAL, [None, None, CLOSING_LABEL, *totals])

    layout.add_group(
        RowGroup(
            title=CLUSTERED_SHEET_NAME,
            header_row=header_row,
            first_data_row=first if buckets else None,
            last_data_row=last if buckets else None,
            total_row=total_row,
            opening_row=opening_row,
        )
    )
    return layout.build(CLUSTERED_SHEET_NAME, number_format=report.config.number_format)


# ---------------------------------------------------------------------------
# Cash in hand (daily / weekly / monthly)
# ---------------------------------------------------------------------------

CASH_IN_HAND_COLUMNS: tuple[Column, ...] = (
    Column("Period", 28),
    Column("Opening", 16),
    Column("Cash In", 16),
    Column("Cash Out", 16),
    Column("Closing", 16),
)


def _period_table(
    layout: RowLayout,
    title: str,
    rows: Sequence[PeriodRow],
    label: Callable[[PeriodRow], str],
    opening: Decimal,
) -> None:
    layout.add(RowKind.BLANK)
    layout.add(RowKind.SECTION, [title])
    header_row = layout.header()

    first = layout.next_row
    for i, row in enumerate(rows):
        r = layout.next_row
        kind = RowKind.WEEKEND if row.is_weekend else RowKind.DATA
        layout.add(
            kind,
            [
                label(row),
                _money(row.opening) if i == 0 else Formula(f"E{r - 1}"),
                _money(row.cash_in),
                _money(row.cash_out),
                Formula(f"B{r}+C{r}-D{r}"),
            ],
        )
    last = layout.next_row - 1

    if rows:
        totals: list[CellValue] = [
            Formula(f"B{first}"),
            Formula(f"SUM(C{first}:C{last})"),
            Formula(f"SUM(D{first}:D{last})"),
            Formula(f"E{last}"),
        ]
    else:
        totals = [_money(opening), _money(ZERO), _money(ZERO), _money(opening)]
    total_row = layout.add(RowKind.TOTAL, ["Total", *totals])

    layout.add_group(
        RowGroup(
            title=title,
            header_row=header_row,
            first_data_row=first if rows else None,
            last_data_row=last if rows else None,
            total_row=total_row,
        )
    )


def build_cash_in_hand_sheet(report: BranchReport) -> ReportSheet:
    """Daily, weekly and monthly balance tables stacked on one sheet."""

    layout = RowLayout(CASH_IN_HAND_COLUMNS)
    layout.add(RowKind.TITLE, [CASH_IN_HAND_SHEET_NAME])
    _meta_rows(layout, report)
    opening = report.opening.amount
    _period_table(layout, "Daily", report.daily, daily_label, opening)
    _period_table(layout, "Weekly", report.weekly, weekly_label, opening)
    _period_table(layout, "Monthly", report.monthly, monthly_label, opening)
    return layout.build(CASH_IN_HAND_SHEET_NAME, number_format=report.config.number_format)


# ---------------------------------------------------------------------------
# Flat passbook (one row per transaction)
# ---------------------------------------------------------------------------

FLAT_PASSBOOK_COLUMNS: tuple[Column, ...] = (
    Column("Date", 14),
    Column("Loan Account No", 18),
    Column("Member Name", 24),
    Column("Group Name", 18),
    Column("Description", 34),
    Column("Credit", 14),
    Column("Debit", 14),
    Column("Balance", 16),
)


def build_flat_passbook_sheet(report: BranchReport) -> ReportSheet:
    """Cash/Bank Book: every transaction with its narration fields."""

    layout = RowLayout(FLAT_PASSBOOK_COLUMNS)
    layout.add(RowKind.TITLE, ["Cash/Bank Book"])
    start = report.start.isoformat() if report.start else "-"
    end = report.end.isoformat() if report.end else "-"
    layout.add(
        RowKind.META,
        [f"Branch Name: {report.config.branch_label or '-'}", None, None, None, f"Date: {start} to {end}"],
    )
    header_row = layout.header()
    opening_row = layout.add(
        RowKind.OPENING, [None, None, OPENING_LABEL, None, None, None, None, _money(report.opening.amount)]
    )

    transactions: list[NormalizedTransaction] = sorted(report.transactions, key=lambda t: t.date)
    first = layout.next_row
    for tx in transactions:
        r = layout.next_row
        fields = parse_remark(tx.remark)
        layout.add(
            RowKind.DATA,
            [
                tx.date.isoformat(),
                fields.loan_account_no,
                fields.member_name,
                fields.group_name,
                fields.description,
                _money(tx.credit),
                _money(tx.debit),
                Formula(f"H{r - 1}+F{r}-G{r}"),
            ],
        )
    last = layout.next_row - 1

    if transactions:
        totals: list[CellValue] = [
            Formula(f"SUM(F{first}:F{last})"),
            Formula(f"SUM(G{first}:G{last})"),
            Formula(f"H{last}"),
        ]
    else:
        totals = [_money(ZERO), _money(ZERO), Formula(f"H{opening_row}")]
    total_row = layout.add(RowKind.TOTAL, [None, None, CLOSING_LABEL, None, None, *totals])

    layout.add_group(
        RowGroup(
            title=FLAT_PASSBOOK_SHEET_NAME,
            header_row=header_row,
            first_data_row=first if transactions else None,
            last_data_row=last if transactions else None,
            total_row=total_row,
            opening_row=opening_row,
        )
    )
    return layout.build(FLAT_PASSBOOK_SHEET_NAME, number_format=report.config.number_format)


def build_report_sheets(report: BranchReport) -> tuple[ReportSheet, ReportSheet]:
    """Return the clustered passbook and cash-in-hand sheets, in that order."""

    return build_clustered_sheet(report), build_cash_in_hand_sheet(report)


__all__ = [
    "CLUSTERED_SHEET_NAME",
    "CASH_IN_HAND_SHEET_NAME",
    "FLAT_PASSBOOK_SHEET_NAME",
    "Formula",
    "CellValue",
    "RowKind",
    "Column",
    "SheetRow",
    "RowGroup",
    "ReportSheet",
    "RowLayout",
    "build_clustered_sheet",
    "build_cash_in_hand_sheet",
    "build_flat_passbook_sheet",
    "build_report_sheets",
]
