"""CLI for the ``branch_ledger`` package.

This module exposes callable command handlers (``cmd_summary``,
``cmd_export``, ``cmd_passbook``) and a Typer-based console interface.
Environment variables (``BRANCH_LEDGER_WEEK_START``, ``BRANCH_LEDGER_LOCALE``,
``BRANCH_LEDGER_LOG_LEVEL``) are loaded from a local ``.env`` using
``python-dotenv`` before delegating to command logic. Business logic lives in
``branch_ledger.api`` and related modules.
"""

from __future__ import annotations

import json
import os
import sys
from pathlib import Path
from typing import Any

import typer
from dotenv import load_dotenv
from pydantic import ValidationError
from typer.models import OptionInfo

from .config import ReportConfig
from .errors import SerializationError
from .logging_setup import configure_logging
from .models import BranchReport, PeriodRow

# ---- Small module-level helpers used by CLI commands -------------------------


def _load_input(path: Path) -> tuple[list[Any], Any]:
    """Read raw transactions (and an optional opening balance) from JSON.

    The file holds either a list of transaction objects or an object with a
    ``transactions`` list and an optional ``opening_balance``.
    """

    with open(path, encoding="utf-8") as f:
        data = json.load(f)
    if isinstance(data, list):
        return data, None
    if isinstance(data, dict) and isinstance(data.get("transactions"), list):
        return data["transactions"], data.get("opening_balance")
    raise ValueError("expected a JSON list of transactions or an object with 'transactions'")


def _build_config(
    *,
    opening_balance: str | None,
    file_opening_balance: Any,
    date_from: str | None,
    date_to: str | None,
    week_start: str | None,
    branch_name: str,
    branch_id: str,
    include_empty_days: bool,
    locale: str | None,
) -> ReportConfig:
    payload: dict[str, Any] = {
        "week_start": week_start or os.getenv("BRANCH_LEDGER_WEEK_START") or "MON",
        "locale": locale or os.getenv("BRANCH_LEDGER_LOCALE") or "en-IN",
        "opening_balance": opening_balance if opening_balance is not None else file_opening_balance,
        "include_empty_days": include_empty_days,
        "branch_name": branch_name,
        "branch_id": branch_id,
    }
    if date_from or date_to:
        if not (date_from and date_to):
            raise ValueError("--from and --to must be given together")
        payload["date_range"] = {"from": date_from, "to": date_to}
    return ReportConfig.model_validate(payload)


def _prepare(input_path: Path, **options: Any) -> BranchReport | int:
    """Load input and build the report, or print an error and return ``1``."""

    from .api import build_branch_report

    try:
        raw, file_opening = _load_input(input_path)
    except FileNotFoundError:
        print(f"Error: File not found: {input_path}", file=sys.stderr)
        return 1
    except PermissionError:
        print(f"Error: Permission denied: {input_path}", file=sys.stderr)
        return 1
    except json.JSONDecodeError as e:
        print(f"Error: Failed to parse JSON: {e}", file=sys.stderr)
        return 1
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    try:
        config = _build_config(file_opening_balance=file_opening, **options)
    except ValidationError as e:
        print(f"Error: invalid options: {e}", file=sys.stderr)
        return 1
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    return build_branch_report(raw, config)


def _format_row(section: str, row: PeriodRow) -> str:
    cells = [section, row.period_key, row.opening, row.cash_in, row.cash_out, row.closing]
    if row.is_weekend:
        cells.append("weekend")
    return "\t".join(str(c) for c in cells)


# ---- Command handlers ---------------------------------------------------------


def cmd_summary(input_path: Path, **options: Any) -> int:
    """Print daily, weekly and monthly balance rows as tab-separated lines."""

    report = _prepare(input_path, **options)
    if isinstance(report, int):
        return report

    if report.opening.assumed_zero:
        print("# opening balance missing; assumed zero")
    for section, rows in (("daily", report.daily), ("weekly", report.weekly), ("monthly", report.monthly)):
        for row in rows:
            print(_format_row(section, row))
    print(f"closing\t{report.closing_balance}")
    return 0


def cmd_export(input_path: Path, output: Path | None, **options: Any) -> int:
    """Write the two-sheet clustered/cash-in-hand workbook."""

    from .export import suggested_filename, write_report

    report = _prepare(input_path, **options)
    if isinstance(report, int):
        return report

    target = output or Path.cwd() / suggested_filename(report)
    try:
        write_report(report, target)
    except SerializationError as e:
        print(f"Error: report generation failed: {e}", file=sys.stderr)
        return 1
    print(target)
    return 0


def cmd_passbook(input_path: Path, output: Path | None, **options: Any) -> int:
    """Write the flat Cash/Bank Book workbook (one row per transaction)."""

    from .export import suggested_filename, write_flat_passbook

    report = _prepare(input_path, **options)
    if isinstance(report, int):
        return report

    target = output or Path.cwd() / suggested_filename(report, prefix="branch_cashbook")
    try:
        write_flat_passbook(report, target)
    except SerializationError as e:
        print(f"Error: report generation failed: {e}", file=sys.stderr)
        return 1
    print(target)
    return 0


# ---- Typer-based console interface -------------------------------------------


app = typer.Typer(
    no_args_is_help=True,
    add_completion=False,
    help=(
        "Branch ledger reconciliation: running balances, clustered passbook and "
        "cash-in-hand xlsx export. Loads BRANCH_LEDGER_* settings from a local .env."
    ),
)


# Module-level option objects to satisfy ruff B008 (no calls in parameter
# defaults). Typer will inspect these when used as default values below.
INPUT_OPTION: OptionInfo = typer.Option(
    ...,
    "--input",
    "-i",
    help="JSON file: a list of raw transactions or {transactions, opening_balance}.",
    dir_okay=False,
    file_okay=True,
    exists=False,  # the handler reports missing files
)
OUTPUT_OPTION: OptionInfo = typer.Option(
    None, "--output", "-o", help="Output .xlsx path (defaults to a name derived from the report)."
)
OPENING_OPTION: OptionInfo = typer.Option(
    None, "--opening-balance", help="Opening balance; overrides the input file's value."
)
FROM_OPTION: OptionInfo = typer.Option(None, "--from", help="Range start, YYYY-MM-DD.")
TO_OPTION: OptionInfo = typer.Option(None, "--to", help="Range end, YYYY-MM-DD.")
WEEK_START_OPTION: OptionInfo = typer.Option(
    None, "--week-start", help="MON or SUN (env BRANCH_LEDGER_WEEK_START, default MON)."
)
BRANCH_NAME_OPTION: OptionInfo = typer.Option("", "--branch-name", help="Branch name for meta rows.")
BRANCH_ID_OPTION: OptionInfo = typer.Option("", "--branch-id", help="Branch id for meta rows and filename.")
EMPTY_DAYS_OPTION: OptionInfo = typer.Option(
    False, "--include-empty-days", help="Emit zero rows for days without transactions."
)
LOCALE_OPTION: OptionInfo = typer.Option(
    None, "--locale", help="en-IN or en-US number format (env BRANCH_LEDGER_LOCALE, default en-IN)."
)


@app.command("summary")
def summary_cmd(
    input_path: Path = INPUT_OPTION,
    opening_balance: str | None = OPENING_OPTION,
    date_from: str | None = FROM_OPTION,
    date_to: str | None = TO_OPTION,
    week_start: str | None = WEEK_START_OPTION,
    branch_name: str = BRANCH_NAME_OPTION,
    branch_id: str = BRANCH_ID_OPTION,
    include_empty_days: bool = EMPTY_DAYS_OPTION,
    locale: str | None = LOCALE_OPTION,
) -> None:
    """Print daily/weekly/monthly running balances."""

    code = cmd_summary(
        input_path,
        opening_balance=opening_balance,
        date_from=date_from,
        date_to=date_to,
        week_start=week_start,
        branch_name=branch_name,
        branch_id=branch_id,
        include_empty_days=include_empty_days,
        locale=locale,
    )
    raise typer.Exit(code)


@app.command("export")
def export_cmd(
    input_path: Path = INPUT_OPTION,
    output: Path | None = OUTPUT_OPTION,
    opening_balance: str | None = OPENING_OPTION,
    date_from: str | None = FROM_OPTION,
    date_to: str | None = TO_OPTION,
    week_start: str | None = WEEK_START_OPTION,
    branch_name: str = BRANCH_NAME_OPTION,
    branch_id: str = BRANCH_ID_OPTION,
    include_empty_days: bool = EMPTY_DAYS_OPTION,
    locale: str | None = LOCALE_OPTION,
) -> None:
    """Export the Passbook (Clustered) and Cash In Hand workbook."""

    code = cmd_export(
        input_path,
        output,
        opening_balance=opening_balance,
        date_from=date_from,
        date_to=date_to,
        week_start=week_start,
        branch_name=branch_name,
        branch_id=branch_id,
        include_empty_days=include_empty_days,
        locale=locale,
    )
    raise typer.Exit(code)


@app.command("passbook")
def passbook_cmd(
    input_path: Path = INPUT_OPTION,
    output: Path | None = OUTPUT_OPTION,
    opening_balance: str | None = OPENING_OPTION,
    date_from: str | None = FROM_OPTION,
    date_to: str | None = TO_OPTION,
    week_start: str | None = WEEK_START_OPTION,
    branch_name: str = BRANCH_NAME_OPTION,
    branch_id: str = BRANCH_ID_OPTION,
    include_empty_days: bool = EMPTY_DAYS_OPTION,
    locale: str | None = LOCALE_OPTION,
) -> None:
    """Export the flat Cash/Bank Book workbook."""

    code = cmd_passbook(
        input_path,
        output,
        opening_balance=opening_balance,
        date_from=date_from,
        date_to=date_to,
        week_start=week_start,
        branch_name=branch_name,
        branch_id=branch_id,
        include_empty_days=include_empty_days,
        locale=locale,
    )
    raise typer.Exit(code)


@app.callback(invoke_without_command=True)
def _root(ctx: typer.Context) -> None:
    """Root command.

    Loads ``.env`` from the current working directory (without overriding any
    already-set environment variables) and configures package logging.
    """

    load_dotenv(dotenv_path=Path.cwd() / ".env", override=False)

    # Central logging setup so child loggers inherit configuration
    configure_logging()

    if ctx.invoked_subcommand is None:
        typer.echo("No subcommand provided. Use --help to see available commands.")
        raise typer.Exit(1)


if __name__ == "__main__":  # pragma: no cover
    app()
