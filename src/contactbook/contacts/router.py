"""
Contact API router.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from contactbook.contacts.repository import ContactRepository
from contactbook.contacts.schemas import (
    ContactCreate,
    ContactResponse,
    ContactUpdate,
    MessageResponse,
)
from contactbook.contacts.service import ContactService
from contactbook.shared.database import get_db_session
from contactbook.shared.exceptions import ContactNotFoundError

router = APIRouter(prefix="/api/contacts", tags=["contacts"])


def get_contact_id(contact_id: str) -> int:
    """Path id dependency; an id that is not an integer names no contact."""
    try:
        return int(contact_id)
    except ValueError:
        raise ContactNotFoundError(contact_id) from None


def get_contact_service(
    session: Annotated[AsyncSession, Depends(get_db_session)],
) -> ContactService:
    """Dependency for contact service."""
    return ContactService(repository=ContactRepository(session))


@router.post(
    "",
    response_model=ContactResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create contact",
    description="Create a contact. Email and phone must not be registered yet.",
)
async def create_contact(
    payload: ContactCreate,
    service: Annotated[ContactService, Depends(get_contact_service)],
) -> ContactResponse:
    contact = await service.create_contact(payload.supplied())
    return ContactResponse.model_validate(contact)


@router.get(
    "",
    response_model=list[ContactResponse],
    summary="List contacts",
    description="Get every contact in creation order.",
)
async def list_contacts(
    service: Annotated[ContactService, Depends(get_contact_service)],
) -> list[ContactResponse]:
    contacts = await service.list_contacts()
    return [ContactResponse.model_validate(c) for c in contacts]


@router.put(
    "/{contact_id}",
    response_model=ContactResponse,
    summary="Update contact",
    description="Update the supplied fields of a contact; omitted fields are left unchanged.",
)
async def update_contact(
    contact_id: Annotated[int, Depends(get_contact_id)],
    payload: ContactUpdate,
    service: Annotated[ContactService, Depends(get_contact_service)],
) -> ContactResponse:
    contact = await service.update_contact(contact_id, payload.supplied())
    return ContactResponse.model_validate(contact)


@router.delete(
    "/{contact_id}",
    response_model=MessageResponse,
    summary="Delete contact",
    description="Delete a contact permanently.",
)
async def delete_contact(
    contact_id: Annotated[int, Depends(get_contact_id)],
    service: Annotated[ContactService, Depends(get_contact_service)],
) -> MessageResponse:
    await service.delete_contact(contact_id)
    return MessageResponse(message="Contact deleted")
