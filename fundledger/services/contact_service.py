"""Contacts (donors, vendors, partner organizations) transactions are attributed to."""

import logging

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from fundledger.models.contact import Contact
from fundledger.services.audit_service import AuditService
from fundledger.services.errors import NotFoundError, ValidationFailure

logger = logging.getLogger(__name__)

CONTACT_NAME_FIELDS = ("first_name", "last_name", "organization_name")


def _clean(value: str | None) -> str | None:
    value = (value or "").strip()
    return value or None


class ContactService:
    """Create and list an organization's contacts."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create_contact(
        self,
        org_id: int,
        first_name: str | None = None,
        last_name: str | None = None,
        organization_name: str | None = None,
        email: str | None = None,
        actor_id: int | None = None,
    ) -> Contact:
        """Create a contact.

        A contact needs a person's name or an organization name. E-mail
        addresses are unique within the organization (case-insensitive).

        Raises:
            ValidationFailure: No name given, or the e-mail is taken
        """
        fields = {
            "first_name": _clean(first_name),
            "last_name": _clean(last_name),
            "organization_name": _clean(organization_name),
            "email": _clean(email),
        }
        field_errors: dict[str, str] = {}
        if not any(fields[name] for name in CONTACT_NAME_FIELDS):
            field_errors["first_name"] = "A name or organization name is required."

        try:
            if fields["email"]:
                fields["email"] = fields["email"].lower()
                stmt = select(Contact).where(
                    Contact.org_id == org_id, func.lower(Contact.email) == fields["email"]
                )
                existing = (await self.session.execute(stmt)).scalars().first()
                if existing is not None:
                    field_errors["email"] = (
                        f"A contact with this email already exists - {existing.display_name}"
                    )
            if field_errors:
                raise ValidationFailure(field_errors)

            contact = Contact(org_id=org_id, **fields)
            self.session.add(contact)
            await self.session.flush()
            AuditService.log(
                self.session,
                org_id,
                "contact",
                contact.id,
                "create",
                actor_id=actor_id,
                changes={name: value for name, value in fields.items() if value},
            )
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise

        logger.info(f"Contact {contact.id} created in org {org_id}")
        return contact

    async def get_contact(self, org_id: int, contact_id: int) -> Contact:
        """Raises NotFoundError unless the contact belongs to the organization."""
        stmt = select(Contact).where(Contact.id == contact_id, Contact.org_id == org_id)
        contact = (await self.session.execute(stmt)).scalar_one_or_none()
        if contact is None:
            raise NotFoundError("Contact", contact_id)
        return contact

    async def list_contacts(self, org_id: int) -> list[Contact]:
        """Contacts ordered by last name, first name, then organization name."""
        stmt = (
            select(Contact)
            .where(Contact.org_id == org_id)
            .order_by(
                Contact.last_name,
                Contact.first_name,
                Contact.organization_name,
                Contact.id,
            )
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())


__all__ = ["CONTACT_NAME_FIELDS", "ContactService"]
