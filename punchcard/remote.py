"""
Remote customer store.

The remote side is a `customers` table keyed by phone. SyncClient only talks
to it through the RemoteStore protocol; SupabaseRemoteStore is the production
implementation.
"""

import logging
from typing import Iterable, Optional, Protocol

from supabase import Client, create_client

from .errors import RemoteUnavailableError
from .models import CustomerRecord

logger = logging.getLogger(__name__)

CUSTOMERS_TABLE = "customers"


class RemoteStore(Protocol):
    def probe(self) -> None:
        """Cheap read proving the store is reachable. Raises RemoteUnavailableError."""
        ...

    def fetch(self, phone: str) -> Optional[CustomerRecord]:
        ...

    def upsert(self, record: CustomerRecord) -> None:
        ...

    def existing_phones(self, phones: Iterable[str]) -> set[str]:
        ...


class SupabaseRemoteStore:
    def __init__(self, url: str, key: str, table: str = CUSTOMERS_TABLE, client: Optional[Client] = None):
        self.table = table
        self.client = client or create_client(url, key)

    def probe(self) -> None:
        try:
            self.client.table(self.table).select("phone").limit(1).execute()
        except Exception as e:
            raise RemoteUnavailableError(f"Probe of {self.table} failed: {e}") from e

    def fetch(self, phone: str) -> Optional[CustomerRecord]:
        try:
            response = (
                self.client.table(self.table)
                .select("*")
                .eq("phone", phone)
                .limit(1)
                .execute()
            )
        except Exception as e:
            raise RemoteUnavailableError(f"Fetch of {phone} failed: {e}") from e
        rows = response.data or []
        if not rows:
            return None
        return CustomerRecord.model_validate(rows[0])

    def upsert(self, record: CustomerRecord) -> None:
        try:
            (
                self.client.table(self.table)
                .upsert(record.to_document(), on_conflict="phone")
                .execute()
            )
        except Exception as e:
            raise RemoteUnavailableError(f"Upsert of {record.phone} failed: {e}") from e

    def existing_phones(self, phones: Iterable[str]) -> set[str]:
        phones = list(phones)
        if not phones:
            return set()
        try:
            response = (
                self.client.table(self.table)
                .select("phone")
                .in_("phone", phones)
                .execute()
            )
        except Exception as e:
            raise RemoteUnavailableError(f"Existence check failed: {e}") from e
        return {row["phone"] for row in response.data or []}
