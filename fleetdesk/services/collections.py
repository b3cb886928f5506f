# fleetdesk/services/collections.py
"""
Owned in-memory record collections.

Each collection is loaded from a DataGateway and changed only after the
gateway confirms a write: issue the call, then apply the returned record on
success or leave the list untouched on failure. Gateway failures come back
as displayable strings instead of propagating.

A disposed collection drops any result that arrives afterwards.
"""
from __future__ import annotations

from typing import Any, Callable, Generic, Mapping, Optional, TypeVar

from fleetdesk.services.gateway import CARS, TRANSACTIONS, DataGateway, GatewayError
from fleetdesk.services.image_store import ImageRejected
from fleetdesk.services.records import CarRecord, TransactionRecord

R = TypeVar("R")


class RecordCollection(Generic[R]):
    table: str = ""
    label: str = "record"

    def __init__(self, gateway: DataGateway, records: Optional[list[R]] = None):
        self.gateway = gateway
        self.records: list[R] = list(records or [])
        self.error: Optional[str] = None
        # Exception behind the most recent failed call, for callers that map it to a status
        self.last_failure: Optional[Exception] = None
        self.loading = False
        self.disposed = False

    def __len__(self) -> int:
        return len(self.records)

    def __iter__(self):
        return iter(self.records)

    def find(self, record_id: str) -> Optional[R]:
        return next((r for r in self.records if r.id == record_id), None)

    def ids(self) -> set[str]:
        return {r.id for r in self.records}

    def dispose(self) -> None:
        self.disposed = True

    def _failed(self, exc: Exception, fallback: str) -> str:
        self.last_failure = exc
        return str(exc) or fallback

    def _apply(self, change: Callable[[list[R]], list[R]]) -> None:
        if not self.disposed:
            self.records = change(self.records)

    # -----------------------------------------------------
    # Phase 1: call the gateway; phase 2: apply on success
    # -----------------------------------------------------
    def refresh(self) -> Optional[str]:
        self.loading = True
        try:
            fetched = self.gateway.list(self.table)
        except GatewayError as exc:
            message = self._failed(exc, f"Failed to fetch {self.table}")
            if not self.disposed:
                self.error = message
            return message
        finally:
            self.loading = False

        self._apply(lambda _old: list(fetched))
        if not self.disposed:
            self.error = None
        return None

    def add(self, values: Mapping[str, Any]) -> tuple[Optional[R], Optional[str]]:
        try:
            created = self.gateway.insert(self.table, values)
        except GatewayError as exc:
            return None, self._failed(exc, f"Failed to add {self.label}")

        # Newest first, same as list()
        self._apply(lambda old: [created] + old)
        return created, None

    def update(self, record_id: str, values: Mapping[str, Any]) -> tuple[Optional[R], Optional[str]]:
        try:
            updated = self.gateway.update(self.table, record_id, values)
        except GatewayError as exc:
            return None, self._failed(exc, f"Failed to update {self.label}")

        self._apply(lambda old: [updated if r.id == record_id else r for r in old])
        return updated, None

    def remove(self, record_id: str) -> Optional[str]:
        try:
            self.gateway.delete(self.table, record_id)
        except GatewayError as exc:
            return self._failed(exc, f"Failed to delete {self.label}")

        self._apply(lambda old: [r for r in old if r.id != record_id])
        return None


class CarCollection(RecordCollection[CarRecord]):
    table = CARS
    label = "car"

    def upload_image(self, data: bytes, filename: str, content_type: str) -> tuple[Optional[str], Optional[str]]:
        try:
            return self.gateway.upload_file(data, filename, content_type), None
        except (ImageRejected, GatewayError) as exc:
            return None, self._failed(exc, "Failed to upload image")


class TransactionCollection(RecordCollection[TransactionRecord]):
    table = TRANSACTIONS
    label = "transaction"
