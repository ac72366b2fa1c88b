"""Transaction category settings (admin only)."""

import logging

from fastapi import APIRouter, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession

from fundledger.api.dependencies import get_current_admin, server_error
from fundledger.api.schemas import CategoryPayload, CategoryRow
from fundledger.services import get_async_session
from fundledger.services.auth_service import AuthorizedMember
from fundledger.services.category_service import CategoryService
from fundledger.services.errors import AppError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/categories", tags=["categories"])


@router.get("", response_model=list[CategoryRow])
async def list_categories(
    member: AuthorizedMember = Depends(get_current_admin),  # noqa: B008
    session: AsyncSession = Depends(get_async_session),  # noqa: B008
) -> list[CategoryRow]:
    """Org and default categories with usage counts, most used first."""
    try:
        rows = await CategoryService(session).list_categories(member.org_id)
        return [
            CategoryRow(
                id=category.id,
                name=category.name,
                org_id=category.org_id,
                transaction_count=count,
            )
            for category, count in rows
        ]
    except Exception as e:
        raise await server_error(session, "GET /api/categories", e) from e


@router.post("", response_model=CategoryRow, status_code=201)
async def create_category(
    payload: CategoryPayload,
    member: AuthorizedMember = Depends(get_current_admin),  # noqa: B008
    session: AsyncSession = Depends(get_async_session),  # noqa: B008
) -> CategoryRow:
    try:
        category = await CategoryService(session).create_category(
            member.org_id, payload.name, actor_id=member.user_id
        )
        return CategoryRow.model_validate(category)
    except AppError:
        raise
    except Exception as e:
        raise await server_error(session, "POST /api/categories", e) from e


@router.put("/{category_id}", response_model=CategoryRow)
async def rename_category(
    category_id: int,
    payload: CategoryPayload,
    member: AuthorizedMember = Depends(get_current_admin),  # noqa: B008
    session: AsyncSession = Depends(get_async_session),  # noqa: B008
) -> CategoryRow:
    try:
        service = CategoryService(session)
        category = await service.rename_category(
            member.org_id, category_id, payload.name, actor_id=member.user_id
        )
        response = CategoryRow.model_validate(category)
        response.transaction_count = await service.count_transactions(category_id)
        return response
    except AppError:
        raise
    except Exception as e:
        raise await server_error(session, f"PUT /api/categories/{category_id}", e) from e


@router.delete("/{category_id}", status_code=204)
async def delete_category(
    category_id: int,
    member: AuthorizedMember = Depends(get_current_admin),  # noqa: B008
    session: AsyncSession = Depends(get_async_session),  # noqa: B008
) -> Response:
    try:
        await CategoryService(session).delete_category(
            member.org_id, category_id, actor_id=member.user_id
        )
        return Response(status_code=204)
    except AppError:
        raise
    except Exception as e:
        raise await server_error(session, f"DELETE /api/categories/{category_id}", e) from e
