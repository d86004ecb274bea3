"""Public interface for the ``branch_ledger`` package.

This module exposes the package's API functions and public models/types as the
stable import surface. There is no runtime logic here, only symbol re-exports.
"""

from .api import (
    build_branch_report,
    export_report,
    export_report_async,
    render_flat_passbook,
    render_workbook,
    write_flat_passbook,
    write_report,
)
from .balances import compute_running_balances, resolve_opening_balance
from .categorization import CLASSIFICATION_RULES, classify, classify_transactions
from .clustering import cluster_by_category, daily_totals, monthly_totals, weekly_totals
from .config import DateRange, ReportConfig
from .errors import BranchLedgerError, SerializationError
from .export import ExportArtifact
from .models import (
    BranchReport,
    Category,
    ClassifiedTransaction,
    ClusterBucket,
    NormalizedTransaction,
    OpeningBalance,
    PeriodRow,
    PeriodTotals,
    RawTransaction,
)
from .normalizers import normalize_transaction, normalize_transactions
from .remarks import NarrationFields, ParsedRemark, format_remark, parse_remark

__all__ = [
    # API
    "build_branch_report",
    "export_report",
    "export_report_async",
    "render_workbook",
    "render_flat_passbook",
    "write_report",
    "write_flat_passbook",
    # Pipeline stages
    "normalize_transaction",
    "normalize_transactions",
    "classify",
    "classify_transactions",
    "CLASSIFICATION_RULES",
    "parse_remark",
    "format_remark",
    "cluster_by_category",
    "daily_totals",
    "weekly_totals",
    "monthly_totals",
    "resolve_opening_balance",
    "compute_running_balances",
    # Configuration / errors
    "ReportConfig",
    "DateRange",
    "BranchLedgerError",
    "SerializationError",
    # Models / types
    "RawTransaction",
    "NormalizedTransaction",
    "Category",
    "ClassifiedTransaction",
    "ClusterBucket",
    "PeriodTotals",
    "PeriodRow",
    "OpeningBalance",
    "NarrationFields",
    "ParsedRemark",
    "BranchReport",
    "ExportArtifact",
]
