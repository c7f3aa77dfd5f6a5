"""Persistence adapters."""

from nolook.repositories.note_ledger import NoteLedger, SqlNoteLedger

__all__ = ["NoteLedger", "SqlNoteLedger"]
