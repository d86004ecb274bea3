"""Raw transaction → :class:`NormalizedTransaction` mapping.

Upstream rows come from several source tables (loan ledger, expenses, other
logs) and disagree on field names. Normalization is lenient by policy:

- the date is the first non-empty of the transaction-date, generic-date and
  creation-date fields, truncated to ``YYYY-MM-DD``; rows whose date is empty
  or not a real calendar date are dropped;
- credit/debit values that are missing or not numeric become ``0``;
- nothing in this module raises on a malformed record.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping, Sequence
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any

from .logging_setup import get_logger
from .models import ZERO, NormalizedTransaction, RawTransaction, RawTransactions

# Field aliases in priority order.
DATE_FIELDS: tuple[str, ...] = (
    "txn_date",
    "transaction_date",
    "date",
    "posting_date",
    "created_on",
    "created_at",
)
CREDIT_FIELDS: tuple[str, ...] = ("credit", "credit_amount", "deposit")
DEBIT_FIELDS: tuple[str, ...] = ("debit", "debit_amount", "withdrawal")
REMARK_FIELDS: tuple[str, ...] = ("remark", "narration", "description")
TYPE_FIELDS: tuple[str, ...] = ("txn_type", "type", "transaction_type")
REFERENCE_FIELDS: tuple[str, ...] = ("ref_table", "reference", "row_source", "source")

_CURRENCY_MARKS: tuple[str, ...] = ("₹", "$", "Rs.", "Rs", "INR")

_logger = get_logger("branch_ledger.normalizers")


# ---------------------------------------------------------------------------
# Helpers (field lookup, amount/date coercion)
# ---------------------------------------------------------------------------


def _first_non_empty(record: RawTransaction, keys: Sequence[str]) -> Any:
    for key in keys:
        value = record.get(key)
        if value is None:
            continue
        if isinstance(value, str) and not value.strip():
            continue
        return value
    return None


def _text(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def to_amount(value: Any) -> Decimal:
    """Coerce ``value`` into a non-negative ``Decimal``; never raises.

    Accepts numbers and numeric strings with thousands separators, currency
    marks and accounting parentheses. Anything else (including NaN/inf and
    booleans) becomes ``0``. The sign is dropped: the column a value sits in
    (credit or debit) carries the direction.
    """

    if value is None or isinstance(value, bool):
        return ZERO
    if isinstance(value, Decimal):
        d = value
    elif isinstance(value, int | float):
        try:
            d = Decimal(str(value))
        except InvalidOperation:
            return ZERO
    else:
        s = str(value).strip()
        for mark in _CURRENCY_MARKS:
            s = s.replace(mark, "")
        s = s.replace(",", "").strip()
        if s.startswith("(") and s.endswith(")"):
            s = s[1:-1].strip()
        if not s:
            return ZERO
        try:
            d = Decimal(s)
        except InvalidOperation:
            return ZERO
    if not d.is_finite():
        return ZERO
    return abs(d)


def to_calendar_date(value: Any) -> date | None:
    """Return the calendar date of ``value`` or ``None`` when unresolvable.

    Strings are truncated to their first 10 characters (``YYYY-MM-DD``) so
    timestamps such as ``2024-03-01T10:15:00+05:30`` resolve to their date.
    """

    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    s = str(value).strip()[:10]
    if not s:
        return None
    try:
        return date.fromisoformat(s)
    except ValueError:
        return None


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def normalize_transaction(record: RawTransaction) -> NormalizedTransaction | None:
    """Normalize one raw record; ``None`` means the record has no usable date."""

    if not isinstance(record, Mapping):
        return None
    tx_date = to_calendar_date(_first_non_empty(record, DATE_FIELDS))
    if tx_date is None:
        return None
    return NormalizedTransaction(
        date=tx_date,
        credit=to_amount(_first_non_empty(record, CREDIT_FIELDS)),
        debit=to_amount(_first_non_empty(record, DEBIT_FIELDS)),
        remark=_text(_first_non_empty(record, REMARK_FIELDS)),
        txn_type=_text(_first_non_empty(record, TYPE_FIELDS)),
        reference=_text(_first_non_empty(record, REFERENCE_FIELDS)),
    )


def iter_normalized(records: RawTransactions) -> Iterator[NormalizedTransaction]:
    for record in records:
        normalized = normalize_transaction(record)
        if normalized is not None:
            yield normalized


def normalize_transactions(records: RawTransactions) -> list[NormalizedTransaction]:
    """Normalize ``records`` preserving input order; undateable rows are dropped."""

    materialized = list(records or [])
    out = list(iter_normalized(materialized))
    dropped = len(materialized) - len(out)
    if dropped:
        _logger.debug("normalize:dropped_undated count=%d total=%d", dropped, len(materialized))
    return out


__all__ = [
    "DATE_FIELDS",
    "CREDIT_FIELDS",
    "DEBIT_FIELDS",
    "REMARK_FIELDS",
    "to_amount",
    "to_calendar_date",
    "normalize_transaction",
    "normalize_transactions",
]
