"""Supabase key-value store for ledger state."""

from dataclasses import dataclass
from datetime import UTC, datetime

from supabase import Client

from nutrition_ledger.services.ledger import StateStore


@dataclass
class SupabaseStateStore(StateStore):
    """Stores ledger blobs in a ``ledger_state(key, value)`` table."""

    client: Client
    table: str = "ledger_state"

    def get(self, key: str) -> str | None:
        """Return the stored value for a key."""
        response = (
            self.client.table(self.table)
            .select("value")
            .eq("key", key)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return response.data[0].get("value")

    def set(self, key: str, value: str) -> None:
        """Insert or replace the value for a key."""
        self.client.table(self.table).upsert(
            {
                "key": key,
                "value": value,
                "updated_at": datetime.now(tz=UTC).isoformat(),
            },
            on_conflict="key",
        ).execute()

    def remove(self, key: str) -> None:
        """Delete a key."""
        self.client.table(self.table).delete().eq("key", key).execute()
