"""Narration (remark) fields.

Upstream narrations encode structured fields by position in a pipe-delimited
string::

    <loan account no> | <reference> | <member> | <group> | <description...>

:class:`NarrationFields` is the typed record for that convention and
:func:`format_remark` is the producing side. :func:`parse_remark` is kept for
narrations that only exist as strings. Empty segments still occupy their slot,
so ``"LN-001||John|GroupA|First installment"`` puts ``John`` in the member
slot, and a bare ``"LN-009"`` is a loan account number. Out-of-range slots read
as ``""``; parsing never raises.
"""

from __future__ import annotations

from dataclasses import dataclass

_SEP = "|"


@dataclass(frozen=True, slots=True)
class NarrationFields:
    loan_account_no: str = ""
    member_name: str = ""
    group_name: str = ""
    description: str = ""
    reference: str = ""

    def to_remark(self) -> str:
        return format_remark(
            loan_account_no=self.loan_account_no,
            reference=self.reference,
            member_name=self.member_name,
            group_name=self.group_name,
            description=self.description,
        )


# The parsed view of a remark string shares the record type.
ParsedRemark = NarrationFields


def _clean(value: str) -> str:
    # A literal separator inside a field would shift every later slot.
    return " ".join(value.replace(_SEP, " ").split())


def format_remark(
    *,
    loan_account_no: str = "",
    reference: str = "",
    member_name: str = "",
    group_name: str = "",
    description: str = "",
) -> str:
    parts = [loan_account_no, reference, member_name, group_name, description]
    return _SEP.join(_clean(p or "") for p in parts)


def _slot(parts: list[str], i: int) -> str:
    return parts[i] if i < len(parts) else ""


def parse_remark(remark: str | None) -> ParsedRemark:
    """Split a pipe-delimited remark into its positional fields.

    Slot 0 is always the loan account number, so a remark without any
    separator fills only that slot. Trailing segments from slot 4 on are
    joined with ``|`` after empty ones are dropped.
    """

    text = (remark or "").strip()
    if not text:
        return ParsedRemark()
    parts = [p.strip() for p in text.split(_SEP)]
    tail = [p for p in parts[4:] if p]
    return ParsedRemark(
        loan_account_no=_slot(parts, 0),
        reference=_slot(parts, 1),
        member_name=_slot(parts, 2),
        group_name=_slot(parts, 3),
        description=_SEP.join(tail),
    )


__all__ = ["NarrationFields", "ParsedRemark", "format_remark", "parse_remark"]
