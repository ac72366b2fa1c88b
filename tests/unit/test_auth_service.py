"""Tests for identity resolution and role checks."""

from datetime import date

import pytest
from sqlalchemy import select

from fundledger.models.reimbursement_request import ReimbursementRequest
from fundledger.models.user import User
from fundledger.services.auth_service import (
    authorize_request_access,
    get_authorized_member,
    parse_identity_header,
    require_admin,
)
from fundledger.services.errors import ForbiddenError, UnauthorizedError


class TestParseIdentityHeader:
    """Tests for parse_identity_header."""

    @pytest.mark.unit
    def test_parses_integer(self):
        assert parse_identity_header(" 42 ", "X-User-Id") == 42

    @pytest.mark.unit
    @pytest.mark.parametrize("value", [None, "", "abc"])
    def test_missing_or_invalid_header(self, value):
        with pytest.raises(UnauthorizedError) as exc_info:
            parse_identity_header(value, "X-User-Id")

        assert exc_info.value.http_status == 401


class TestAuthorizedMember:
    """Tests for membership resolution and role checks."""

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_admin_member_resolved(self, session, ledger):
        member = await get_authorized_member(session, ledger.admin_id, ledger.org_id)

        assert member.user_id == ledger.admin_id
        assert member.org_id == ledger.org_id
        assert member.is_admin
        assert require_admin(member) is member

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_member_is_not_admin(self, session, ledger):
        member = await get_authorized_member(session, ledger.member_id, ledger.org_id)

        with pytest.raises(ForbiddenError):
            require_admin(member)

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_no_membership_in_other_org(self, session, ledger):
        with pytest.raises(UnauthorizedError, match="NOT_AUTHORIZED"):
            await get_authorized_member(session, ledger.admin_id, ledger.other_org_id)

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_inactive_user_rejected(self, session, ledger):
        user = (
            await session.execute(select(User).where(User.id == ledger.member_id))
        ).scalar_one()
        user.is_active = False
        await session.commit()

        with pytest.raises(UnauthorizedError):
            await get_authorized_member(session, ledger.member_id, ledger.org_id)

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_request_access_for_owner_and_admin_only(self, session, ledger):
        request = ReimbursementRequest(
            org_id=ledger.org_id,
            user_id=ledger.admin_id,
            account_id=ledger.operating_id,
            amount_in_cents=100,
            expense_date=date(2026, 5, 1),
        )
        admin = await get_authorized_member(session, ledger.admin_id, ledger.org_id)
        member = await get_authorized_member(session, ledger.member_id, ledger.org_id)

        authorize_request_access(admin, request)
        with pytest.raises(ForbiddenError):
            authorize_request_access(member, request)

        request.user_id = ledger.member_id
        authorize_request_access(member, request)
