"""
In-Memory Ledger Storage

Backs the HTTP service. Records live in process memory and are lost on
restart. A single instance is created per process and injected into the
service; reset() gives tests and admin tooling a clean slate.
"""

from typing import Optional
from uuid import uuid4

from finance_tracker.audit.logger import AuditLogger
from finance_tracker.services.storage.base import KeyedLedgerStorage


class InMemoryLedgerStorage(KeyedLedgerStorage):
    """
    Process-memory implementation of ledger storage.

    Seeds the default user and categories on every (re)initialization.
    Ids are random UUID4 strings.
    """

    backend_name = "memory"

    def __init__(self, audit_logger: Optional[AuditLogger] = None):
        super().__init__(audit_logger)

    async def _load(self) -> bool:
        self._seed_defaults()
        return True

    async def _persist(self, kind: str) -> None:
        # Nothing to flush
        return None

    def _new_id(self, kind: str) -> str:
        return str(uuid4())
