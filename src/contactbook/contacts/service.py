"""
Contact service for business logic.

Create, list, update and delete over a contact repository: field rules are
checked first, then email/phone uniqueness against the other stored
records, then the write.
"""

from collections.abc import Mapping
from typing import Any

from contactbook.contacts.models import Contact
from contactbook.contacts.repository import UNIQUE_FIELDS, ContactRepositoryProtocol
from contactbook.contacts.validation import ValidatedFields, validate_contact_fields
from contactbook.shared.exceptions import (
    ContactNotFoundError,
    ContactValidationError,
    UniquenessViolationError,
)
from contactbook.shared.logging import get_logger

logger = get_logger(__name__)


class ContactService:
    """Service for contact management operations."""

    def __init__(self, repository: ContactRepositoryProtocol) -> None:
        """Initialize contact service.

        Args:
            repository: Storage the service reads and writes through.
        """
        self._repository = repository

    def _validate(
        self,
        fields: Mapping[str, Any],
        *,
        partial: bool,
        operation: str,
    ) -> ValidatedFields:
        try:
            return validate_contact_fields(fields, partial=partial)
        except ContactValidationError as exc:
            logger.info(
                "Contact rejected by validation",
                extra={"operation": operation, "fields": exc.fields},
            )
            raise

    async def _ensure_unique(
        self,
        values: Mapping[str, Any],
        exclude_id: int | None = None,
    ) -> None:
        """Reject values another stored contact already holds.

        Raises:
            UniquenessViolationError: On the first colliding field, email before phone.
        """
        for name in UNIQUE_FIELDS:
            if name not in values:
                continue
            existing = await self._repository.find_by_field(name, values[name])
            if existing is not None and existing.id != exclude_id:
                raise UniquenessViolationError(name)

    async def create_contact(self, fields: Mapping[str, Any]) -> Contact:
        """Create a contact from a complete field set.

        Args:
            fields: Field values keyed by attribute or wire name.

        Returns:
            The stored contact with its generated id.

        Raises:
            ContactValidationError: If any field rule is broken.
            UniquenessViolationError: If the email or phone is already registered.
        """
        values = self._validate(fields, partial=False, operation="create").as_dict()
        values.setdefault("verified", False)

        try:
            await self._ensure_unique(values)
            contact = await self._repository.insert(Contact(**values))
            await self._repository.commit()
        except UniquenessViolationError as exc:
            await self._repository.rollback()
            logger.info(
                "Contact create rejected",
                extra={"operation": "create", "duplicate_field": exc.field},
            )
            raise
        except Exception:
            await self._repository.rollback()
            raise

        logger.info("Created contact", extra={"contact_id": contact.id})
        return contact

    async def list_contacts(self) -> list[Contact]:
        """Get every stored contact in insertion order."""
        return list(await self._repository.get_all())

    async def update_contact(self, contact_id: int, patch: Mapping[str, Any]) -> Contact:
        """Apply a partial field set to a stored contact.

        Only supplied fields are checked and written. An empty patch returns
        the stored record untouched.

        Args:
            contact_id: Contact id.
            patch: Supplied field values keyed by attribute or wire name.

        Returns:
            The updated contact.

        Raises:
            ContactValidationError: If a supplied field breaks its rule.
            ContactNotFoundError: If no contact has this id.
            UniquenessViolationError: If another contact holds the new email or phone.
        """
        changes = self._validate(patch, partial=True, operation="update").as_dict()

        contact = await self._repository.get(contact_id)
        if contact is None:
            raise ContactNotFoundError(contact_id)

        if not changes:
            return contact

        try:
            await self._ensure_unique(changes, exclude_id=contact_id)
            contact = await self._repository.replace(contact_id, changes)
            await self._repository.commit()
        except UniquenessViolationError as exc:
            await self._repository.rollback()
            logger.info(
                "Contact update rejected",
                extra={
                    "operation": "update",
                    "contact_id": contact_id,
                    "duplicate_field": exc.field,
                },
            )
            raise
        except Exception:
            await self._repository.rollback()
            raise

        logger.info(
            "Updated contact",
            extra={"contact_id": contact_id, "changed_fields": sorted(changes)},
        )
        return contact

    async def delete_contact(self, contact_id: int) -> None:
        """Delete a contact permanently.

        Raises:
            ContactNotFoundError: If no contact has this id.
        """
        try:
            deleted = await self._repository.remove(contact_id)
            if not deleted:
                raise ContactNotFoundError(contact_id)
            await self._repository.commit()
        except Exception:
            await self._repository.rollback()
            raise

        logger.info("Deleted contact", extra={"contact_id": contact_id})
