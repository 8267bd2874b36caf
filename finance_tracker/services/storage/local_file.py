"""
Local File Ledger Storage (offline mirror)

DESIGN DECISION: The offline mirror keeps the whole ledger in one JSON
document on the device:
1. No database or server needed on a phone
2. The file is human-readable if something needs inspecting
3. Writes are whole-document replacements through a temp file, so a crash
   mid-write leaves the previous version intact

TRADEOFFS:
- Every mutation rewrites the file (fine for a personal ledger)
- Ids come from a timestamp-plus-random scheme and are never reconciled
  with the server's UUIDs; a device uses one store for its whole session
"""

import json
import secrets
import string
import time
from pathlib import Path
from typing import Any, Optional

from pydantic import ValidationError

from finance_tracker.audit.logger import AuditLogger
from finance_tracker.config import get_settings
from finance_tracker.services.storage.base import COLLECTIONS, KeyedLedgerStorage
from finance_tracker.services.storage.interface import StorageError


ID_PREFIXES = {
    "users": "user",
    "categories": "cat",
    "transactions": "tx",
    "budgets": "budget",
    "goals": "goal",
}

_ID_ALPHABET = string.ascii_lowercase + string.digits
_ID_SUFFIX_LENGTH = 9

INITIALIZED_KEY = "initialized"


class LocalFileLedgerStorage(KeyedLedgerStorage):
    """
    Device-local implementation of ledger storage.

    The default categories are seeded exactly once: the document carries an
    "initialized" flag, and a store that finds it set never seeds again,
    even if the user has since deleted every category.
    """

    backend_name = "local_file"

    def __init__(
        self,
        path: Optional[Path] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        super().__init__(audit_logger)
        self._path = Path(path) if path else get_settings().offline.data_path

    @property
    def path(self) -> Path:
        return self._path

    def _new_id(self, kind: str) -> str:
        suffix = "".join(secrets.choice(_ID_ALPHABET) for _ in range(_ID_SUFFIX_LENGTH))
        return f"{ID_PREFIXES[kind]}-{int(time.time() * 1000)}-{suffix}"

    async def _load(self) -> bool:
        document = self._read_document()

        for kind, model_cls in COLLECTIONS.items():
            try:
                records = [model_cls.model_validate(raw) for raw in document.get(kind, [])]
            except ValidationError as e:
                raise StorageError(f"Malformed {kind} in offline ledger {self._path}: {e}")
            self._collections[kind] = {record.id: record for record in records}

        if document.get(INITIALIZED_KEY):
            return False

        self._seed_defaults()
        self._write_document()
        return True

    async def _persist(self, kind: str) -> None:
        self._write_document()

    async def _clear(self) -> None:
        try:
            self._path.unlink(missing_ok=True)
        except OSError as e:
            raise StorageError(f"Failed to remove offline ledger {self._path}: {e}")

    def _read_document(self) -> dict[str, Any]:
        if not self._path.exists():
            return {}
        try:
            with self._path.open("r", encoding="utf-8") as handle:
                document = json.load(handle)
        except (json.JSONDecodeError, OSError) as e:
            raise StorageError(f"Failed to read offline ledger {self._path}: {e}")
        if not isinstance(document, dict):
            raise StorageError(f"Offline ledger {self._path} is not a JSON object")
        return document

    def _write_document(self) -> None:
        payload: dict[str, Any] = {INITIALIZED_KEY: True}
        for kind, records in self._collections.items():
            payload[kind] = [
                record.model_dump(mode="json", by_alias=True)
                for record in records.values()
            ]

        temp_path = self._path.with_name(self._path.name + ".tmp")
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            with temp_path.open("w", encoding="utf-8") as handle:
                json.dump(payload, handle, indent=2)
            temp_path.replace(self._path)
        except OSError as e:
            raise StorageError(f"Failed to write offline ledger {self._path}: {e}")
