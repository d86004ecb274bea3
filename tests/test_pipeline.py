import logging
from datetime import date
from decimal import Decimal

import pytest
from pydantic import ValidationError

from branch_ledger import Category, ReportConfig, build_branch_report
from branch_ledger.config import NUMBER_FORMATS

RAW_ROWS: list[dict[str, object]] = [
    {"txn_date": "2024-01-05", "credit": "1000", "narration": "LN-1|d-1|Asha|Ujala|Loan disbursement", "debit": 0},
    {"txn_date": "2024-01-05", "credit": "0", "debit": "5000", "narration": "LN-1|d-1|Asha|Ujala|Loan disbursed"},
    {"txn_date": "2024-01-06", "credit": "250", "type": "installment", "narration": "LN-1||Asha|Ujala|EMI 1"},
    {"txn_date": "2024-01-06", "credit": "50", "ref_table": "loan_charges"},
    {"date": "2024-02-01", "credit": "300", "narration": "Repayment"},
    {"created_on": "2024-02-03T11:00:00", "debit": "40", "narration": "Stationery"},
]


def test_scenario_single_day_all_granularities_agree():
    report = build_branch_report(
        [{"date": "2024-01-01", "credit": 500, "debit": 200}], opening_balance=1000
    )
    for rows in (report.daily, report.weekly, report.monthly):
        assert len(rows) == 1
        assert rows[0].opening == Decimal("1000")
        assert rows[0].closing == Decimal("1300")


def test_undated_record_does_not_affect_anything():
    base = build_branch_report(RAW_ROWS, opening_balance=100)
    noisy = build_branch_report(
        [*RAW_ROWS, {"credit": "99999", "narration": "note without date"}, {"date": "", "debit": 7}],
        opening_balance=100,
    )
    assert noisy.buckets == base.buckets
    assert noisy.daily == base.daily
    assert noisy.weekly == base.weekly
    assert noisy.monthly == base.monthly


def test_all_granularities_reach_the_same_closing():
    report = build_branch_report(RAW_ROWS, opening_balance="2,000")
    expected = Decimal("2000") + Decimal("1600") - Decimal("5040")
    assert report.closing_balance == expected
    assert report.daily[-1].closing == expected
    assert report.weekly[-1].closing == expected
    assert report.monthly[-1].closing == expected
    assert [m.period_key for m in report.monthly] == ["2024-01", "2024-02"]


def test_buckets_and_categories():
    report = build_branch_report(RAW_ROWS, opening_balance=0)
    keys = [(b.date.isoformat(), b.category) for b in report.buckets]
    assert keys == [
        ("2024-01-05", Category.LOAN_DISBURSED),
        ("2024-01-06", Category.CHARGE_COLLECTED),
        ("2024-01-06", Category.INSTALLMENT_COLLECTION),
        ("2024-02-01", Category.INSTALLMENT_COLLECTION),
        ("2024-02-03", Category.OTHER),
    ]
    assert report.buckets[0].count == 2
    assert len(set(keys)) == len(keys)


def test_rebuild_is_idempotent():
    a = build_branch_report(RAW_ROWS, opening_balance=10, week_start="SUN")
    b = build_branch_report(list(reversed(RAW_ROWS)), opening_balance=10, week_start="SUN")
    assert a.buckets == b.buckets
    assert a.daily == b.daily
    assert a.weekly == b.weekly


def test_weekend_days_marked_on_daily_rows_only():
    report = build_branch_report(RAW_ROWS, opening_balance=0)
    flags = {r.period_key: r.is_weekend for r in report.daily}
    assert flags["2024-01-05"] is False  # Friday
    assert flags["2024-01-06"] is True  # Saturday
    assert all(r.is_weekend is None for r in report.weekly)


def test_date_range_filters_and_fills_empty_days():
    report = build_branch_report(
        RAW_ROWS,
        opening_balance=0,
        date_range={"from": "2024-01-04", "to": "2024-01-08"},
        include_empty_days=True,
    )
    assert [r.period_key for r in report.daily] == [
        "2024-01-04",
        "2024-01-05",
        "2024-01-06",
        "2024-01-07",
        "2024-01-08",
    ]
    assert (report.start, report.end) == (date(2024, 1, 4), date(2024, 1, 8))
    assert all(b.date.month == 1 for b in report.buckets)
    assert report.daily[0].closing == Decimal("0")


def test_missing_opening_balance_is_flagged(caplog):
    with caplog.at_level(logging.WARNING, logger="branch_ledger"):
        report = build_branch_report(RAW_ROWS)
    assert report.opening.assumed_zero
    assert report.daily[0].opening == Decimal("0")
    assert any("assumed zero" in r.getMessage() for r in caplog.records)


def test_empty_input_produces_empty_report():
    report = build_branch_report([], opening_balance=500)
    assert report.buckets == () and report.daily == ()
    assert report.start is None
    assert report.closing_balance == Decimal("500")


def test_config_validation():
    assert ReportConfig(week_start="sunday").week_start == "SUN"
    with pytest.raises(ValidationError):
        ReportConfig(week_start="TUE")
    with pytest.raises(ValidationError):
        ReportConfig(date_range={"from": "2024-02-01", "to": "2024-01-01"})
    with pytest.raises(ValidationError):
        ReportConfig(unknown_field=1)


def test_long_date_range_is_clamped(caplog):
    with caplog.at_level(logging.WARNING, logger="branch_ledger"):
        cfg = ReportConfig(date_range={"from": "2024-01-01", "to": "2026-01-01"})
    assert cfg.date_range is not None
    assert cfg.date_range.end == date(2024, 12, 31)
    assert any("clamped" in r.getMessage() for r in caplog.records)


def test_overrides_apply_on_top_of_config():
    cfg = ReportConfig(branch_name="Main", opening_balance=5)
    report = build_branch_report(RAW_ROWS, cfg, week_start="SUN")
    assert report.config.branch_name == "Main"
    assert report.config.week_start == "SUN"
    assert report.opening.amount == Decimal("5")


def test_week_start_accepts_only_known_aliases():
    assert ReportConfig(week_start="Monday").week_start == "MON"
    assert ReportConfig(week_start=" sun ").week_start == "SUN"
    for bad in ("MONKEY", "Sundae", "M"):
        with pytest.raises(ValidationError):
            ReportConfig(week_start=bad)


def test_indian_number_format_sections():
    # Two positive conditional sections (crore, lakh) and a plain default.
    sections = NUMBER_FORMATS["en-IN"].split(";")
    assert [s.split("]")[0] for s in sections[:2]] == ["[>=10000000", "[>=100000"]
    assert sections[2] == "##,##0.00"
    assert ReportConfig().number_format == NUMBER_FORMATS["en-IN"]
    assert ReportConfig(locale="en-US").number_format == "#,##0.00"
