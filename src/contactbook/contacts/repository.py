"""
Contact repository for database operations.
"""

from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any, Protocol, Sequence

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError, InterfaceError, OperationalError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.exc import StaleDataError

from contactbook.contacts.models import Contact
from contactbook.shared.exceptions import (
    ContactNotFoundError,
    StoreUnavailableError,
    UniquenessViolationError,
)

# Columns that support exact-match lookups
LOOKUP_FIELDS = frozenset({"id", "email", "phone"})
UNIQUE_FIELDS = ("email", "phone")


class ContactRepositoryProtocol(Protocol):
    """Storage primitive the contact service is written against."""

    async def get(self, contact_id: int) -> Contact | None:
        """Get a contact by id."""
        ...

    async def get_all(self) -> Sequence[Contact]:
        """Get every contact in insertion order."""
        ...

    async def find_by_field(self, name: str, value: Any) -> Contact | None:
        """Get the contact whose `name` column equals `value` exactly."""
        ...

    async def insert(self, contact: Contact) -> Contact:
        """Store a new contact and assign its id."""
        ...

    async def replace(self, contact_id: int, values: dict[str, Any]) -> Contact:
        """Write new field values onto a stored contact."""
        ...

    async def remove(self, contact_id: int) -> bool:
        """Delete a contact; False when it did not exist."""
        ...

    async def commit(self) -> None:
        ...

    async def rollback(self) -> None:
        ...


def _check_lookup_field(name: str) -> None:
    if name not in LOOKUP_FIELDS:
        raise ValueError(f"Unsupported lookup field: {name}")


def uniqueness_field(exc: IntegrityError) -> str | None:
    """Which unique column an integrity error was raised for, if any.

    SQLite reports ``UNIQUE constraint failed: contacts.email``, PostgreSQL
    names the ``uq_contacts_email`` constraint; both mention the column.
    """
    message = str(exc.orig).lower()
    for name in UNIQUE_FIELDS:
        if name in message:
            return name
    return None


class ContactRepository:
    """Repository for contact database operations."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository with database session.

        Args:
            session: Async database session.
        """
        self._session = session

    @contextmanager
    def _storage_errors(self) -> Iterator[None]:
        """Translate driver failures into domain errors."""
        try:
            yield
        except IntegrityError as exc:
            field = uniqueness_field(exc)
            if field is None:
                raise
            raise UniquenessViolationError(field) from exc
        except (OperationalError, InterfaceError) as exc:
            raise StoreUnavailableError(details={"error": str(exc.orig)}) from exc

    async def get(self, contact_id: int) -> Contact | None:
        """Get a contact by id.

        Args:
            contact_id: Contact id.

        Returns:
            Contact if found, None otherwise.
        """
        stmt = select(Contact).where(Contact.id == contact_id)
        with self._storage_errors():
            result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_all(self) -> Sequence[Contact]:
        """Get all contacts ordered by id (insertion order)."""
        stmt = select(Contact).order_by(Contact.id)
        with self._storage_errors():
            result = await self._session.execute(stmt)
        return result.scalars().all()

    async def find_by_field(self, name: str, value: Any) -> Contact | None:
        """Get a contact by exact match on one column.

        Args:
            name: Column name; one of `LOOKUP_FIELDS`.
            value: Value to match (case-sensitive).

        Returns:
            First matching contact, None if there is none.
        """
        _check_lookup_field(name)
        stmt = select(Contact).where(getattr(Contact, name) == value).limit(1)
        with self._storage_errors():
            result = await self._session.execute(stmt)
        return result.scalars().first()

    async def insert(self, contact: Contact) -> Contact:
        """Create a single contact.

        Args:
            contact: Contact to create.

        Returns:
            Created contact with ID.

        Raises:
            UniquenessViolationError: If the email or phone is already stored.
        """
        self._session.add(contact)
        with self._storage_errors():
            await self._session.flush()
            await self._session.refresh(contact)
        return contact

    async def replace(self, contact_id: int, values: dict[str, Any]) -> Contact:
        """Apply new field values to a stored contact.

        Args:
            contact_id: Contact id.
            values: Attribute name to new value.

        Returns:
            Updated contact.

        Raises:
            ContactNotFoundError: If the contact is gone.
            UniquenessViolationError: If the email or phone is already stored.
        """
        contact = await self.get(contact_id)
        if contact is None:
            raise ContactNotFoundError(contact_id)

        for name, value in values.items():
            setattr(contact, name, value)

        try:
            with self._storage_errors():
                await self._session.flush()
                await self._session.refresh(contact)
        except StaleDataError as exc:
            # Row deleted between the read and the write
            raise ContactNotFoundError(contact_id) from exc
        return contact

    async def remove(self, contact_id: int) -> bool:
        """Delete a contact.

        Args:
            contact_id: Contact id.

        Returns:
            True if deleted, False if not found.
        """
        stmt = delete(Contact).where(Contact.id == contact_id)
        with self._storage_errors():
            result = await self._session.execute(stmt)
        return result.rowcount > 0

    async def commit(self) -> None:
        with self._storage_errors():
            await self._session.commit()

    async def rollback(self) -> None:
        await self._session.rollback()
