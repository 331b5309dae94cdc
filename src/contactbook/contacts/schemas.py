"""
Pydantic schemas for the contact API.

Request bodies use camelCase keys (``firstName``); attribute names are also
accepted. Field rules are enforced by `contactbook.contacts.validation`, so
every request field is optional here and only its JSON type is checked.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ContactFields(BaseModel):
    """Writable contact fields as submitted by a client."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    first_name: str | None = Field(
        default=None,
        description="Letters and spaces only",
    )
    last_name: str | None = Field(
        default=None,
        description="Letters and spaces only",
    )
    email: str | None = Field(
        default=None,
        description="Email address, unique across contacts",
    )
    phone: str | None = Field(
        default=None,
        description="9-15 digits, may include '-' or '+', unique across contacts",
    )
    additional_info: str | None = Field(
        default=None,
        description="Free text, at most 5000 characters",
    )
    verified: bool | None = Field(
        default=None,
        description="Defaults to false on create",
    )

    def supplied(self) -> dict[str, object]:
        """Fields the client actually sent, keyed by attribute name.

        A field sent as null or "" is kept; a field left out is not.
        """
        return self.model_dump(exclude_unset=True)


class ContactCreate(ContactFields):
    """Schema for creating a contact."""

    pass


class ContactUpdate(ContactFields):
    """Schema for updating a contact (omit a field to leave it unchanged)."""

    pass


class ContactResponse(BaseModel):
    """Schema for contact response."""

    model_config = ConfigDict(
        from_attributes=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    id: int
    first_name: str
    last_name: str
    email: str
    phone: str
    additional_info: str | None
    verified: bool
    created_at: datetime
    updated_at: datetime


class MessageResponse(BaseModel):
    """Plain confirmation message."""

    message: str
