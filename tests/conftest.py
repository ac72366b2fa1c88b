"""Pytest configuration: fresh in-memory database per test."""

import os

# Set test environment BEFORE any imports from fundledger so the module-level
# engine and settings never point at a real database or send real e-mail
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["NOTIFICATIONS_ENABLED"] = "false"

from dataclasses import dataclass  # noqa: E402
from datetime import date  # noqa: E402
from unittest.mock import AsyncMock, MagicMock  # noqa: E402

import pytest  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker  # noqa: E402

from fundledger.constants import (  # noqa: E402
    AccountTypeId,
    TransactionCategoryId,
    TransactionItemMethodId,
    TransactionItemTypeId,
)
from fundledger.models import Base  # noqa: E402
from fundledger.models.account import Account  # noqa: E402
from fundledger.models.organization import Organization  # noqa: E402
from fundledger.models.user import Membership, MembershipRole, User  # noqa: E402
from fundledger.services import create_database_engine  # noqa: E402
from fundledger.services.notification_service import NotificationService  # noqa: E402
from fundledger.services.reference_seeding import seed_reference_data  # noqa: E402
from fundledger.services.transaction_service import (  # noqa: E402
    TransactionItemInput,
    TransactionService,
)


@dataclass
class Ledger:
    """Ids of the rows every test starts with.

    Plain ints so they stay usable after a rollback expires ORM objects.
    """

    org_id: int
    admin_id: int
    member_id: int
    operating_id: int
    benevolence_id: int
    other_org_id: int
    other_org_account_id: int


async def create_ledger(session) -> Ledger:
    """One organization with an admin, a member and two accounts, plus a second org."""
    org = Organization(name="Grace Fellowship", subdomain="grace")
    other_org = Organization(name="Harbor Mission", subdomain="harbor")
    admin = User(email="treasurer@grace.org", first_name="Ruth", last_name="Okafor")
    member = User(email="volunteer@grace.org", first_name="Sam", last_name="Lee")
    session.add_all([org, other_org, admin, member])
    await session.flush()

    session.add_all(
        [
            Membership(user_id=admin.id, org_id=org.id, role=MembershipRole.ADMIN),
            Membership(user_id=member.id, org_id=org.id, role=MembershipRole.MEMBER),
        ]
    )
    operating = Account(
        org_id=org.id,
        code="1000",
        description="General Operating",
        type_id=AccountTypeId.OPERATING,
    )
    benevolence = Account(
        org_id=org.id,
        code="2000",
        description="Benevolence Fund",
        type_id=AccountTypeId.BENEVOLENCE,
    )
    foreign = Account(
        org_id=other_org.id,
        code="1000",
        description="Harbor Operating",
        type_id=AccountTypeId.OPERATING,
    )
    session.add_all([operating, benevolence, foreign])
    await session.commit()

    return Ledger(
        org_id=org.id,
        admin_id=admin.id,
        member_id=member.id,
        operating_id=operating.id,
        benevolence_id=benevolence.id,
        other_org_id=other_org.id,
        other_org_account_id=foreign.id,
    )


async def _create_schema(engine) -> None:
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


@pytest.fixture
async def engine():
    """In-memory SQLite engine with all tables created."""
    engine = create_database_engine("sqlite+aiosqlite:///:memory:")
    await _create_schema(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def session(session_factory):
    """Session over a database holding the global reference rows."""
    async with session_factory() as session:
        await seed_reference_data(session)
        yield session


@pytest.fixture
async def ledger(session) -> Ledger:
    return await create_ledger(session)


@pytest.fixture
async def file_session_factory(tmp_path):
    """Session factory over a SQLite file, one connection per session.

    Used where separate sessions must behave like separate requests.
    """
    engine = create_database_engine(f"sqlite+aiosqlite:///{tmp_path / 'ledger.db'}")
    await _create_schema(engine)
    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    await engine.dispose()


@pytest.fixture
async def file_ledger(file_session_factory) -> Ledger:
    async with file_session_factory() as session:
        await seed_reference_data(session)
        return await create_ledger(session)

@pytest.fixture
def fund(session, ledger):
    """Post a donation of ``cents`` to an account; returns the transaction id."""

    async def _fund(account_id: int, cents: int) -> int:
        result = await TransactionService(session).create_transaction(
            ledger.org_id,
            account_id,
            date(2026, 1, 15),
            [
                TransactionItemInput(
                    type_id=TransactionItemTypeId.DONATION,
                    method_id=TransactionItemMethodId.CHECK,
                    amount_in_cents=cents,
                )
            ],
            category_id=TransactionCategoryId.DONATIONS,
            actor_id=ledger.admin_id,
        )
        return result.transactions[0].id

    return _fund


@pytest.fixture
def notifier():
    """Notification sender that records calls instead of e-mailing."""
    mock = MagicMock(spec=NotificationService)
    mock.send_status_change_notification = AsyncMock(return_value=True)
    return mock
