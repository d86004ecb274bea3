"""Exception types raised by ``branch_ledger``.

Normalization, classification, clustering and balance computation are total
and never raise on bad input records. The only failure surface is the export
boundary, which raises :class:`SerializationError`.
"""

from __future__ import annotations


class BranchLedgerError(Exception):
    """Base class for package errors."""


class SerializationError(BranchLedgerError, RuntimeError):
    """Producing or writing the report artifact failed; nothing was written."""


__all__ = ["BranchLedgerError", "SerializationError"]
