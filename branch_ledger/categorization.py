"""Transaction classification.

Categories are assigned by an ordered decision table of ``(predicate,
category)`` rules evaluated top-down; the first matching rule wins and the
last rule always matches, so :func:`classify` is total.

Disbursement is tested before charges: a narration such as
``"Loan disbursement incl. processing fee"`` is a disbursement.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from typing import NamedTuple

from .models import Category, ClassifiedTransaction, NormalizedTransaction

type Predicate = Callable[[NormalizedTransaction], bool]


class ClassificationRule(NamedTuple):
    name: str
    predicate: Predicate
    category: Category


def _fields(tx: NormalizedTransaction) -> tuple[str, str, str]:
    return tx.txn_type.lower(), tx.remark.lower(), tx.reference.lower()


def _any_field_contains(*needles: str) -> Predicate:
    def _match(tx: NormalizedTransaction) -> bool:
        return any(n in f for f in _fields(tx) for n in needles)

    return _match


def _is_charge(tx: NormalizedTransaction) -> bool:
    txn_type, narration, reference = _fields(tx)
    if "charge" in txn_type or "charge" in narration:
        return True
    if "charge" in reference:
        return True
    return "processing fee" in narration or "insurance" in narration


CLASSIFICATION_RULES: tuple[ClassificationRule, ...] = (
    ClassificationRule("disbursement", _any_field_contains("disburs"), Category.LOAN_DISBURSED),
    ClassificationRule("charge", _is_charge, Category.CHARGE_COLLECTED),
    ClassificationRule(
        "installment",
        _any_field_contains("install", "emi", "repay"),
        Category.INSTALLMENT_COLLECTION,
    ),
    ClassificationRule("fallback", lambda _tx: True, Category.OTHER),
)


def classify(
    tx: NormalizedTransaction,
    *,
    rules: Iterable[ClassificationRule] = CLASSIFICATION_RULES,
) -> Category:
    """Return the category of the first rule matching ``tx`` (``Other`` if none)."""

    for rule in rules:
        if rule.predicate(tx):
            return rule.category
    return Category.OTHER


def classify_transactions(
    transactions: Iterable[NormalizedTransaction],
    *,
    rules: Iterable[ClassificationRule] = CLASSIFICATION_RULES,
) -> list[ClassifiedTransaction]:
    rule_list = tuple(rules)
    return [ClassifiedTransaction(tx, classify(tx, rules=rule_list)) for tx in transactions]


__all__ = [
    "ClassificationRule",
    "CLASSIFICATION_RULES",
    "classify",
    "classify_transactions",
]
