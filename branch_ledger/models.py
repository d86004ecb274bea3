"""Data models and type aliases for ``branch_ledger``.

Every entity here is derived in memory from a list of raw transactions and is
recomputed on each report request. Instances are immutable once built; the
pipeline is a single pass from raw records to presentation rows.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from enum import StrEnum
from typing import Any

from .config import ReportConfig

# ---------------------------------------------------------------------------
# Raw input
# ---------------------------------------------------------------------------

# An opaque, mapping-like record as returned by the transaction provider. Field
# names vary by source table (loan ledger, expenses, other logs).
type RawTransaction = Mapping[str, Any]
"""A single upstream transaction row with arbitrary fields."""

type RawTransactions = Iterable[RawTransaction]

ZERO = Decimal("0")


# ---------------------------------------------------------------------------
# Normalized records and categories
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class NormalizedTransaction:
    """Canonical transaction record.

    ``date`` is always a valid calendar date; ``credit`` and ``debit`` are
    non-negative. ``txn_type`` and ``reference`` keep the raw classification
    hints so that categorization needs nothing but this record.
    """

    date: date
    credit: Decimal
    debit: Decimal
    remark: str = ""
    txn_type: str = ""
    reference: str = ""


class Category(StrEnum):
    """Semantic category of a transaction, derived by the classifier."""

    LOAN_DISBURSED = "LoanDisbursed"
    CHARGE_COLLECTED = "ChargeCollected"
    INSTALLMENT_COLLECTION = "InstallmentCollection"
    OTHER = "Other"

    @property
    def priority(self) -> int:
        return _CATEGORY_PRIORITY[self]

    @property
    def label(self) -> str:
        return _CATEGORY_LABELS[self]


_CATEGORY_PRIORITY: dict[Category, int] = {
    Category.LOAN_DISBURSED: 1,
    Category.CHARGE_COLLECTED: 2,
    Category.INSTALLMENT_COLLECTION: 3,
    Category.OTHER: 99,
}

_CATEGORY_LABELS: dict[Category, str] = {
    Category.LOAN_DISBURSED: "Loan Disbursed",
    Category.CHARGE_COLLECTED: "Charge Collected",
    Category.INSTALLMENT_COLLECTION: "Installment Collection",
    Category.OTHER: "Other",
}


@dataclass(frozen=True, slots=True)
class ClassifiedTransaction:
    """A normalized transaction paired with its category."""

    transaction: NormalizedTransaction
    category: Category


# ---------------------------------------------------------------------------
# Aggregates
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class ClusterBucket:
    """Aggregate of same-day, same-category transactions (``count >= 1``)."""

    date: date
    category: Category
    count: int
    credit: Decimal
    debit: Decimal

    @property
    def description(self) -> str:
        return f"{self.category.value} ({self.count} txns)"


@dataclass(frozen=True, slots=True)
class PeriodTotals:
    """Cash movement of one calendar period, before balances are applied.

    ``period_key`` is the ISO date for days, the ISO date of the first day for
    weeks, and ``YYYY-MM`` for months; keys sort in chronological order.
    """

    period_key: str
    start: date
    end: date
    cash_in: Decimal
    cash_out: Decimal


@dataclass(frozen=True, slots=True)
class PeriodRow:
    """One row of a daily/weekly/monthly balance summary.

    ``closing == opening + cash_in - cash_out`` holds exactly. ``is_weekend``
    is only set on daily rows and is display-only.
    """

    period_key: str
    start: date
    end: date
    opening: Decimal
    cash_in: Decimal
    cash_out: Decimal
    closing: Decimal
    is_weekend: bool | None = None


@dataclass(frozen=True, slots=True)
class OpeningBalance:
    """Opening balance for the report start date.

    ``assumed_zero`` is True when no usable figure was supplied and the report
    fell back to zero; a genuine zero balance keeps it False.
    """

    amount: Decimal
    assumed_zero: bool = False


# ---------------------------------------------------------------------------
# Pipeline result
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class BranchReport:
    """Everything derived for one report request.

    ``start``/``end`` are the configured date range, or the span of the
    transactions when no range was configured (``None`` when there are none).
    """

    config: ReportConfig
    opening: OpeningBalance
    transactions: tuple[NormalizedTransaction, ...]
    classified: tuple[ClassifiedTransaction, ...]
    buckets: tuple[ClusterBucket, ...]
    daily: tuple[PeriodRow, ...]
    weekly: tuple[PeriodRow, ...]
    monthly: tuple[PeriodRow, ...]
    start: date | None = None
    end: date | None = None

    @property
    def total_credit(self) -> Decimal:
        return sum((b.credit for b in self.buckets), ZERO)

    @property
    def total_debit(self) -> Decimal:
        return sum((b.debit for b in self.buckets), ZERO)

    @property
    def closing_balance(self) -> Decimal:
        return self.opening.amount + self.total_credit - self.total_debit


__all__ = [
    "BranchReport",
    "RawTransaction",
    "RawTransactions",
    "ZERO",
    "NormalizedTransaction",
    "Category",
    "ClassifiedTransaction",
    "ClusterBucket",
    "PeriodTotals",
    "PeriodRow",
    "OpeningBalance",
]
