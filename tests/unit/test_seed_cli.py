"""Tests for the seed command."""

import pytest
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from fundledger import services
from fundledger.cli.seed import main
from fundledger.models.organization import Organization
from fundledger.models.transaction_item_type import TransactionItemType
from fundledger.services import create_database_engine


@pytest.fixture
def file_database(tmp_path, monkeypatch):
    """Point the CLI at a throwaway SQLite file."""
    url = f"sqlite+aiosqlite:///{tmp_path / 'seed.db'}"
    engine = create_database_engine(url)
    monkeypatch.setattr(services, "async_engine", engine)
    monkeypatch.setattr(
        services,
        "AsyncSessionLocal",
        async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False),
    )
    return url


@pytest.mark.unit
@pytest.mark.asyncio
async def test_seed_creates_schema_reference_rows_and_org(file_database):
    exit_code = await main(
        ["--org-name", "Grace Fellowship", "--subdomain", "grace", "--admin-email", "t@grace.org"]
    )

    assert exit_code == 0
    engine = create_async_engine(file_database)
    async with async_sessionmaker(engine)() as session:
        types = (
            await session.execute(select(func.count()).select_from(TransactionItemType))
        ).scalar_one()
        subdomains = (await session.execute(select(Organization.subdomain))).scalars().all()
    await engine.dispose()

    assert types == 8
    assert subdomains == ["grace"]


@pytest.mark.unit
@pytest.mark.asyncio
async def test_org_name_requires_subdomain_and_admin(file_database):
    assert await main(["--org-name", "Grace Fellowship"]) == 1


@pytest.mark.unit
@pytest.mark.asyncio
async def test_missing_schema_reported_as_failure(file_database):
    assert await main(["--skip-create-tables"]) == 1
