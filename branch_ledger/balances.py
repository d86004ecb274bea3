"""Running balances over ordered period totals.

The calculation is a strict left fold: the first row opens at the supplied
opening balance and every later row opens at the previous row's closing
balance. Rows are never reordered here; callers pass periods in ascending key
order (the clusterer always does).
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from .logging_setup import get_logger
from .models import ZERO, OpeningBalance, PeriodRow, PeriodTotals
from .normalizers import to_amount

_logger = get_logger("branch_ledger.balances")


def resolve_opening_balance(value: Any) -> OpeningBalance:
    """Turn an upstream opening-balance value into an :class:`OpeningBalance`.

    Missing, empty or non-numeric values fall back to zero and are tagged
    ``assumed_zero`` (and logged) so they stay distinguishable from a genuine
    zero balance. Negative balances, written with a leading ``-`` or in
    parentheses, are kept negative.
    """

    if isinstance(value, OpeningBalance):
        return value
    if value is None or (isinstance(value, str) and not value.strip()):
        _logger.warning("opening_balance:missing; assumed zero")
        return OpeningBalance(ZERO, assumed_zero=True)

    text = str(value).strip()
    # "-500" and accounting "(500)" are both negative
    negative = text.startswith("-") or (text.startswith("(") and text.endswith(")"))
    amount = to_amount(text.lstrip("-") if negative else value)
    if amount == ZERO and not _looks_like_zero(text):
        _logger.warning("opening_balance:unparseable value=%r; assumed zero", value)
        return OpeningBalance(ZERO, assumed_zero=True)
    return OpeningBalance(-amount if negative and amount else amount)


def _looks_like_zero(text: str) -> bool:
    digits = text.strip("()").lstrip("+-").replace(",", "").replace(".", "", 1)
    return digits.isdigit() and set(digits) == {"0"}


def compute_running_balances(
    totals: Iterable[PeriodTotals],
    opening_balance: OpeningBalance | Any,
    *,
    mark_weekends: bool = False,
) -> list[PeriodRow]:
    """Return one :class:`PeriodRow` per input period with balances applied.

    ``closing[i] = opening[i] + cash_in[i] - cash_out[i]`` and
    ``opening[i + 1] = closing[i]``. With ``mark_weekends`` each row also gets
    ``is_weekend`` from its start date; the flag never affects balances.
    """

    opening = resolve_opening_balance(opening_balance).amount
    rows: list[PeriodRow] = []
    for period in totals:
        closing = opening + period.cash_in - period.cash_out
        rows.append(
            PeriodRow(
                period_key=period.period_key,
                start=period.start,
                end=period.end,
                opening=opening,
                cash_in=period.cash_in,
                cash_out=period.cash_out,
                closing=closing,
                is_weekend=(period.start.weekday() >= 5) if mark_weekends else None,
            )
        )
        opening = closing
    return rows


__all__ = ["resolve_opening_balance", "compute_running_balances"]
