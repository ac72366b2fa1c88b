"""Reference data endpoint."""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from fundledger.api.dependencies import get_current_member, server_error
from fundledger.api.schemas import ItemTypeRow, ReferenceDataResponse, ReferenceRow
from fundledger.services import get_async_session
from fundledger.services.auth_service import AuthorizedMember
from fundledger.services.reference_service import ReferenceDataService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/reference", tags=["reference"])


@router.get("", response_model=ReferenceDataResponse)
async def get_reference_data(
    member: AuthorizedMember = Depends(get_current_member),  # noqa: B008
    session: AsyncSession = Depends(get_async_session),  # noqa: B008
) -> ReferenceDataResponse:
    """Item types, methods, categories and account types visible to the caller's org."""
    try:
        service = ReferenceDataService(session)
        return ReferenceDataResponse(
            item_types=[
                ItemTypeRow.model_validate(row)
                for row in await service.get_item_types(member.org_id)
            ],
            item_methods=[
                ReferenceRow.model_validate(row)
                for row in await service.get_item_methods(member.org_id)
            ],
            categories=[
                ReferenceRow.model_validate(row)
                for row in await service.get_categories(member.org_id)
            ],
            account_types=[
                ReferenceRow.model_validate(row)
                for row in await service.get_account_types(member.org_id)
            ],
        )
    except Exception as e:
        raise await server_error(session, "/api/reference", e) from e
