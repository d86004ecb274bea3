"""Public API and pipeline orchestration for ``branch_ledger``.

:func:`build_branch_report` runs the full derivation: normalize, filter to
the configured date range, classify, cluster, bucket by day/week/month and
apply running balances. Each granularity gets its own left fold seeded with
the same resolved opening balance. The exporters are re-exported here so
callers need a single import surface.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date
from typing import Any

from .balances import compute_running_balances, resolve_opening_balance
from .categorization import classify_transactions
from .clustering import cluster_by_category, daily_totals, monthly_totals, weekly_totals
from .config import ReportConfig
from .export import (  # noqa: F401  (re-export)
    ExportArtifact,
    export_report,
    export_report_async,
    render_flat_passbook,
    render_workbook,
    write_flat_passbook,
    write_report,
)
from .logging_setup import get_logger
from .models import BranchReport, NormalizedTransaction, RawTransaction
from .normalizers import normalize_transactions

_logger = get_logger("branch_ledger.api")


def _within_range(
    transactions: list[NormalizedTransaction], config: ReportConfig
) -> list[NormalizedTransaction]:
    if config.date_range is None:
        return transactions
    kept = [tx for tx in transactions if config.date_range.contains(tx.date)]
    if len(kept) != len(transactions):
        _logger.debug(
            "pipeline:out_of_range dropped=%d range=%s..%s",
            len(transactions) - len(kept),
            config.date_range.start,
            config.date_range.end,
        )
    return kept


def _report_span(
    transactions: list[NormalizedTransaction], config: ReportConfig
) -> tuple[date, date] | None:
    if config.date_range is not None:
        return config.date_range.start, config.date_range.end
    if not transactions:
        return None
    days = [tx.date for tx in transactions]
    return min(days), max(days)


def build_branch_report(
    raw_transactions: Iterable[RawTransaction],
    config: ReportConfig | None = None,
    **overrides: Any,
) -> BranchReport:
    """Derive a :class:`BranchReport` from raw upstream transactions.

    ``config`` defaults to :class:`ReportConfig` built from ``overrides``
    (e.g. ``week_start="SUN", opening_balance=1000``); passing both validates
    the overrides on top of ``config``. Undated records are dropped, and a
    missing opening balance falls back to zero (flagged on the report).
    """

    if config is None:
        config = ReportConfig.model_validate(overrides)
    elif overrides:
        config = ReportConfig.model_validate({**config.model_dump(), **overrides})

    transactions = _within_range(normalize_transactions(raw_transactions), config)
    span = _report_span(transactions, config)
    opening = resolve_opening_balance(config.opening_balance)

    classified = classify_transactions(transactions)
    buckets = cluster_by_category(classified)

    days = daily_totals(transactions, fill_range=span if config.include_empty_days else None)
    weeks = weekly_totals(days, config.week_start)
    months = monthly_totals(days)

    report = BranchReport(
        config=config,
        opening=opening,
        transactions=tuple(transactions),
        classified=tuple(classified),
        buckets=tuple(buckets),
        daily=tuple(compute_running_balances(days, opening, mark_weekends=True)),
        weekly=tuple(compute_running_balances(weeks, opening)),
        monthly=tuple(compute_running_balances(months, opening)),
        start=span[0] if span else None,
        end=span[1] if span else None,
    )
    _logger.info(
        "pipeline:built branch=%s transactions=%d buckets=%d days=%d weeks=%d months=%d closing=%s",
        config.branch_label or "-",
        len(transactions),
        len(buckets),
        len(report.daily),
        len(report.weekly),
        len(report.monthly),
        report.closing_balance,
    )
    return report


__all__ = [
    "build_branch_report",
    "ExportArtifact",
    "export_report",
    "export_report_async",
    "render_flat_passbook",
    "render_workbook",
    "write_flat_passbook",
    "write_report",
]
