"""
In-memory contact repository.

Implements the same storage contract as `ContactRepository` over a dict,
including the unique email/phone guarantee the database enforces with
constraints. Writes are serialised with an asyncio lock.
"""

import asyncio
from typing import Any, Sequence

from contactbook.contacts.models import Contact, utcnow
from contactbook.contacts.repository import LOOKUP_FIELDS, UNIQUE_FIELDS
from contactbook.shared.exceptions import ContactNotFoundError, UniquenessViolationError


class InMemoryContactRepository:
    """Dict-backed contact store."""

    def __init__(self) -> None:
        self._records: dict[int, Contact] = {}
        self._next_id = 1
        self._lock = asyncio.Lock()

    def _ensure_unique(self, values: dict[str, Any], exclude_id: int | None = None) -> None:
        for name in UNIQUE_FIELDS:
            if name not in values:
                continue
            for record in self._records.values():
                if record.id != exclude_id and getattr(record, name) == values[name]:
                    raise UniquenessViolationError(name)

    async def get(self, contact_id: int) -> Contact | None:
        return self._records.get(contact_id)

    async def get_all(self) -> Sequence[Contact]:
        # dicts keep insertion order
        return list(self._records.values())

    async def find_by_field(self, name: str, value: Any) -> Contact | None:
        if name not in LOOKUP_FIELDS:
            raise ValueError(f"Unsupported lookup field: {name}")
        for record in self._records.values():
            if getattr(record, name) == value:
                return record
        return None

    async def insert(self, contact: Contact) -> Contact:
        async with self._lock:
            self._ensure_unique({name: getattr(contact, name) for name in UNIQUE_FIELDS})

            now = utcnow()
            contact.id = self._next_id
            if contact.verified is None:
                contact.verified = False
            contact.created_at = now
            contact.updated_at = now

            self._records[contact.id] = contact
            self._next_id += 1
            return contact

    async def replace(self, contact_id: int, values: dict[str, Any]) -> Contact:
        async with self._lock:
            contact = self._records.get(contact_id)
            if contact is None:
                raise ContactNotFoundError(contact_id)

            self._ensure_unique(values, exclude_id=contact_id)

            changed = False
            for name, value in values.items():
                if getattr(contact, name) != value:
                    setattr(contact, name, value)
                    changed = True
            # rewriting current values keeps updated_at
            if changed:
                contact.updated_at = utcnow()
            return contact

    async def remove(self, contact_id: int) -> bool:
        async with self._lock:
            return self._records.pop(contact_id, None) is not None

    async def commit(self) -> None:
        """Writes apply immediately; nothing to flush."""

    async def rollback(self) -> None:
        """Writes are all-or-nothing already; nothing to undo."""
