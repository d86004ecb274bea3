from datetime import date
from decimal import Decimal

from branch_ledger import Category, NormalizedTransaction, classify, classify_transactions
from branch_ledger.categorization import CLASSIFICATION_RULES, ClassificationRule


def _mk_tx(remark: str = "", txn_type: str = "", reference: str = "") -> NormalizedTransaction:
    return NormalizedTransaction(
        date=date(2024, 1, 1),
        credit=Decimal("0"),
        debit=Decimal("0"),
        remark=remark,
        txn_type=txn_type,
        reference=reference,
    )


def test_disbursement_wins_over_processing_fee():
    assert classify(_mk_tx(remark="Loan disbursement incl. processing fee")) is Category.LOAN_DISBURSED


def test_charge_detection_sources():
    assert classify(_mk_tx(txn_type="Charge")) is Category.CHARGE_COLLECTED
    assert classify(_mk_tx(reference="loan_charges")) is Category.CHARGE_COLLECTED
    assert classify(_mk_tx(remark="Processing Fee for LN-9")) is Category.CHARGE_COLLECTED
    assert classify(_mk_tx(remark="Group INSURANCE premium")) is Category.CHARGE_COLLECTED


def test_installment_keywords_are_case_insensitive():
    assert classify(_mk_tx(remark="Weekly Installment")) is Category.INSTALLMENT_COLLECTION
    assert classify(_mk_tx(txn_type="EMI")) is Category.INSTALLMENT_COLLECTION
    assert classify(_mk_tx(reference="repayments")) is Category.INSTALLMENT_COLLECTION


def test_charge_checked_before_installment():
    assert classify(_mk_tx(remark="late charge on installment")) is Category.CHARGE_COLLECTED


def test_unmatched_is_other():
    assert classify(_mk_tx(remark="Office rent")) is Category.OTHER
    assert classify(_mk_tx()) is Category.OTHER


def test_custom_rules_are_evaluated_top_down():
    rules = (
        ClassificationRule("rent", lambda tx: "rent" in tx.remark.lower(), Category.CHARGE_COLLECTED),
        *CLASSIFICATION_RULES,
    )
    txs = [_mk_tx(remark="Office rent"), _mk_tx(remark="disbursed")]
    out = classify_transactions(txs, rules=rules)
    assert [c.category for c in out] == [Category.CHARGE_COLLECTED, Category.LOAN_DISBURSED]
    assert out[0].transaction is txs[0]


def test_category_priority_and_labels():
    assert [c.priority for c in Category] == [1, 2, 3, 99]
    assert Category.INSTALLMENT_COLLECTION.label == "Installment Collection"
    assert Category.LOAN_DISBURSED == "LoanDisbursed"
