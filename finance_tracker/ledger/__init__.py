"""Ledger business layer."""

from finance_tracker.ledger.service import LedgerService

__all__ = ["LedgerService"]
