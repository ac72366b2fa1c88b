"""CLI entry point for seeding the database.

Creates missing tables (use Alembic for managed schemas), the global
reference rows every organization shares and, optionally, a first
organization with an admin user.

Usage:
    python -m fundledger.cli.seed
    python -m fundledger.cli.seed --org-name "Grace Church" --subdomain grace \\
        --admin-email treasurer@grace.org

Exit Codes:
    0 - Success
    1 - Failure: error encountered; nothing committed by the failing step
"""

import argparse
import asyncio
import logging
import sys

from dotenv import load_dotenv

from fundledger.config import get_settings
from fundledger.services.logging import configure_logging


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Seed fund ledger reference data")
    parser.add_argument("--org-name", help="Create an organization with this name")
    parser.add_argument("--subdomain", help="Subdomain of the new organization")
    parser.add_argument("--admin-email", help="E-mail of the organization's first admin")
    parser.add_argument("--admin-first-name", default=None)
    parser.add_argument("--admin-last-name", default=None)
    parser.add_argument(
        "--skip-create-tables",
        action="store_true",
        help="Assume the schema already exists (e.g. after alembic upgrade)",
    )
    return parser


async def main(argv: list[str] | None = None) -> int:
    """Seed the database.

    Returns:
        Exit code: 0 for success, 1 for failure
    """
    load_dotenv()
    configure_logging(get_settings().log_level)
    logger = logging.getLogger("fundledger.cli.seed")
    args = build_parser().parse_args(argv)

    if args.org_name and not (args.subdomain and args.admin_email):
        logger.error("--org-name requires --subdomain and --admin-email")
        return 1

    try:
        from fundledger.models import Base
        from fundledger.services import AsyncSessionLocal, async_engine
        from fundledger.services.reference_seeding import (
            seed_organization,
            seed_reference_data,
        )

        if not args.skip_create_tables:
            async with async_engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
            logger.info("Schema ensured")

        async with AsyncSessionLocal() as session:
            summary = await seed_reference_data(session)
            logger.info(f"Created {summary.total} reference rows")

            if args.org_name:
                organization = await seed_organization(
                    session,
                    name=args.org_name,
                    subdomain=args.subdomain,
                    admin_email=args.admin_email,
                    admin_first_name=args.admin_first_name,
                    admin_last_name=args.admin_last_name,
                )
                logger.info(f"Organization id: {organization.id}")

        await async_engine.dispose()
        return 0

    except KeyboardInterrupt:
        logger.warning("Seed interrupted by user")
        return 1
    except Exception as e:
        logger.error(f"Seed failed: {e}", exc_info=True)
        return 1


if __name__ == "__main__":
    exit_code = asyncio.run(main())
    sys.exit(exit_code)
