"""Contact endpoints."""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from fundledger.api.dependencies import get_current_member, server_error
from fundledger.api.schemas import ContactCreatePayload, ContactResponse
from fundledger.services import get_async_session
from fundledger.services.auth_service import AuthorizedMember
from fundledger.services.contact_service import ContactService
from fundledger.services.errors import AppError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/contacts", tags=["contacts"])


@router.get("", response_model=list[ContactResponse])
async def list_contacts(
    member: AuthorizedMember = Depends(get_current_member),  # noqa: B008
    session: AsyncSession = Depends(get_async_session),  # noqa: B008
) -> list[ContactResponse]:
    try:
        contacts = await ContactService(session).list_contacts(member.org_id)
        return [ContactResponse.model_validate(contact) for contact in contacts]
    except Exception as e:
        raise await server_error(session, "GET /api/contacts", e) from e


@router.post("", response_model=ContactResponse, status_code=201)
async def create_contact(
    payload: ContactCreatePayload,
    member: AuthorizedMember = Depends(get_current_member),  # noqa: B008
    session: AsyncSession = Depends(get_async_session),  # noqa: B008
) -> ContactResponse:
    try:
        contact = await ContactService(session).create_contact(
            member.org_id,
            first_name=payload.first_name,
            last_name=payload.last_name,
            organization_name=payload.organization_name,
            email=payload.email,
            actor_id=member.user_id,
        )
        return ContactResponse.model_validate(contact)
    except AppError:
        raise
    except Exception as e:
        raise await server_error(session, "POST /api/contacts", e) from e
