from contactbook.contacts.models import Contact
from contactbook.contacts.service import ContactService

__all__ = ["Contact", "ContactService"]
