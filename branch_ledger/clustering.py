"""Grouping of transactions into category buckets and calendar periods.

Two independent operations:

- :func:`cluster_by_category` groups classified transactions by
  ``(date, category)`` and orders the buckets by date, then category priority.
- :func:`daily_totals` accumulates cash in/out per exact date; weekly and
  monthly totals are each derived from that same daily accumulator
  (:func:`weekly_totals`, :func:`monthly_totals`). The three granularities
  never share an opening balance; each gets its own running-balance pass.
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Callable, Iterable, Sequence
from datetime import date, timedelta
from decimal import Decimal
from typing import Literal

from .models import (
    ZERO,
    Category,
    ClassifiedTransaction,
    ClusterBucket,
    NormalizedTransaction,
    PeriodTotals,
)

type WeekStart = Literal["MON", "SUN"]


# ---------------------------------------------------------------------------
# Category clustering
# ---------------------------------------------------------------------------


def cluster_by_category(classified: Iterable[ClassifiedTransaction]) -> list[ClusterBucket]:
    """Return one bucket per ``(date, category)`` with summed credit/debit."""

    counts: dict[tuple[date, Category], int] = defaultdict(int)
    credits: dict[tuple[date, Category], Decimal] = defaultdict(lambda: ZERO)
    debits: dict[tuple[date, Category], Decimal] = defaultdict(lambda: ZERO)

    for item in classified:
        key = (item.transaction.date, item.category)
        counts[key] += 1
        credits[key] += item.transaction.credit
        debits[key] += item.transaction.debit

    buckets = [
        ClusterBucket(
            date=tx_date,
            category=category,
            count=count,
            credit=credits[(tx_date, category)],
            debit=debits[(tx_date, category)],
        )
        for (tx_date, category), count in counts.items()
    ]
    buckets.sort(key=lambda b: (b.date, b.category.priority))
    return buckets


# ---------------------------------------------------------------------------
# Calendar periods
# ---------------------------------------------------------------------------


def _iter_days(start: date, end: date) -> Iterable[date]:
    day = start
    while day <= end:
        yield day
        day += timedelta(days=1)


def daily_totals(
    transactions: Iterable[NormalizedTransaction],
    *,
    fill_range: tuple[date, date] | None = None,
) -> list[PeriodTotals]:
    """Accumulate cash in (credit) and cash out (debit) per calendar day.

    When ``fill_range`` is given, every day of the inclusive range appears,
    with zero totals on days without activity.
    """

    cash_in: dict[date, Decimal] = defaultdict(lambda: ZERO)
    cash_out: dict[date, Decimal] = defaultdict(lambda: ZERO)
    for tx in transactions:
        cash_in[tx.date] += tx.credit
        cash_out[tx.date] += tx.debit

    days = set(cash_in)
    if fill_range is not None:
        days.update(_iter_days(*fill_range))

    return [
        PeriodTotals(
            period_key=day.isoformat(),
            start=day,
            end=day,
            cash_in=cash_in.get(day, ZERO),
            cash_out=cash_out.get(day, ZERO),
        )
        for day in sorted(days)
    ]


def week_start_of(day: date, week_start: WeekStart = "MON") -> date:
    """Return the first day of the 7-day week containing ``day``."""

    # date.weekday(): Monday == 0 ... Sunday == 6
    if week_start == "SUN":
        return day - timedelta(days=(day.weekday() + 1) % 7)
    return day - timedelta(days=day.weekday())


def _regroup(
    daily: Sequence[PeriodTotals],
    key_of: Callable[[date], tuple[str, date, date]],
) -> list[PeriodTotals]:
    grouped: dict[str, list[PeriodTotals]] = defaultdict(list)
    bounds: dict[str, tuple[date, date]] = {}
    for row in daily:
        key, start, end = key_of(row.start)
        grouped[key].append(row)
        bounds[key] = (start, end)

    return [
        PeriodTotals(
            period_key=key,
            start=bounds[key][0],
            end=bounds[key][1],
            cash_in=sum((r.cash_in for r in grouped[key]), ZERO),
            cash_out=sum((r.cash_out for r in grouped[key]), ZERO),
        )
        for key in sorted(grouped)
    ]


def weekly_totals(daily: Sequence[PeriodTotals], week_start: WeekStart = "MON") -> list[PeriodTotals]:
    """Bucket daily totals into weeks spanning ``start .. start + 6``."""

    def _key(day: date) -> tuple[str, date, date]:
        first = week_start_of(day, week_start)
        return first.isoformat(), first, first + timedelta(days=6)

    return _regroup(daily, _key)


def _month_end(day: date) -> date:
    nxt = date(day.year + (day.month == 12), day.month % 12 + 1, 1)
    return nxt - timedelta(days=1)


def monthly_totals(daily: Sequence[PeriodTotals]) -> list[PeriodTotals]:
    """Bucket daily totals by ``YYYY-MM``."""

    def _key(day: date) -> tuple[str, date, date]:
        first = day.replace(day=1)
        return f"{day.year:04d}-{day.month:02d}", first, _month_end(day)

    return _regroup(daily, _key)


__all__ = [
    "WeekStart",
    "cluster_by_category",
    "daily_totals",
    "week_start_of",
    "weekly_totals",
    "monthly_totals",
]
