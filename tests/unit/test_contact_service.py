"""Unit tests for contacts."""

import pytest
from sqlalchemy import select

from fundledger.models.audit_log import AuditLog
from fundledger.services.contact_service import ContactService
from fundledger.services.errors import NotFoundError, ValidationFailure


class TestCreateContact:
    """Tests for ContactService.create_contact."""

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_person_contact_trimmed_and_email_lowercased(self, session, ledger):
        contact = await ContactService(session).create_contact(
            ledger.org_id,
            first_name=" Ruth ",
            last_name="Okafor",
            email="Ruth.Okafor@Example.org",
            actor_id=ledger.admin_id,
        )

        assert contact.first_name == "Ruth"
        assert contact.email == "ruth.okafor@example.org"
        assert contact.display_name == "Ruth Okafor"

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_organization_only_contact(self, session, ledger):
        contact = await ContactService(session).create_contact(
            ledger.org_id, organization_name="Corner Grocery"
        )

        assert contact.display_name == "Corner Grocery"
        assert contact.first_name is None

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_name_required(self, session, ledger):
        with pytest.raises(ValidationFailure) as exc_info:
            await ContactService(session).create_contact(
                ledger.org_id, first_name="  ", email="nobody@example.org"
            )

        assert exc_info.value.field_errors == {
            "first_name": "A name or organization name is required."
        }

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_email_unique_within_org(self, session, ledger):
        service = ContactService(session)
        await service.create_contact(
            ledger.org_id, first_name="Ruth", last_name="Okafor", email="ruth@example.org"
        )

        with pytest.raises(ValidationFailure) as exc_info:
            await service.create_contact(
                ledger.org_id, first_name="R.", email="RUTH@example.org"
            )

        assert exc_info.value.field_errors == {
            "email": "A contact with this email already exists - Ruth Okafor"
        }

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_same_email_allowed_in_other_org(self, session, ledger):
        service = ContactService(session)
        await service.create_contact(ledger.org_id, first_name="Ruth", email="ruth@example.org")

        contact = await service.create_contact(
            ledger.other_org_id, first_name="Ruth", email="ruth@example.org"
        )

        assert contact.org_id == ledger.other_org_id

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_creation_is_audited(self, session, ledger):
        contact = await ContactService(session).create_contact(
            ledger.org_id, organization_name="Hardware Depot", actor_id=ledger.admin_id
        )

        entry = (
            await session.execute(select(AuditLog).where(AuditLog.entity_type == "contact"))
        ).scalar_one()
        assert entry.entity_id == contact.id
        assert entry.actor_id == ledger.admin_id
        assert entry.changes == {"organization_name": "Hardware Depot"}


class TestListContacts:
    """Tests for listing and lookup."""

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_list_is_org_scoped_and_ordered(self, session, ledger):
        service = ContactService(session)
        await service.create_contact(ledger.org_id, first_name="Zoe", last_name="Young")
        await service.create_contact(ledger.org_id, first_name="Abe", last_name="Adams")
        await service.create_contact(ledger.other_org_id, first_name="Harbor", last_name="Only")

        contacts = await service.list_contacts(ledger.org_id)

        assert [c.display_name for c in contacts] == ["Abe Adams", "Zoe Young"]

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_get_contact_from_other_org_not_found(self, session, ledger):
        service = ContactService(session)
        contact = await service.create_contact(ledger.other_org_id, first_name="Harbor")

        with pytest.raises(NotFoundError):
            await service.get_contact(ledger.org_id, contact.id)
