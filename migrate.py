#!/usr/bin/env python3
"""
Database management script.
Creates, drops, resets and seeds the database schema from the command line.
"""

import asyncio
import argparse
import logging
import sys
from decimal import Decimal
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker

from siedlisko.config import settings
from siedlisko.database import engine, AsyncSessionLocal, create_tables, drop_tables, transaction
from siedlisko.models.listing import AdvertiserType, ListingFeature, ListingStatus, PropertyType, Province
from siedlisko.models.user import UserRole
from siedlisko.repositories.listing import ListingRepository
from siedlisko.repositories.user import UserRepository
from siedlisko.utils.auth import hash_password

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

DEMO_EMAIL = "demo@siedlisko.pl"
DEMO_PASSWORD = "demo12345"


class MigrationManager:
    """Manages the database schema and demo data."""

    def __init__(
        self,
        target_engine: Optional[AsyncEngine] = None,
        session_factory: Optional[async_sessionmaker] = None
    ):
        self.engine = target_engine or engine
        self.session_factory = session_factory or AsyncSessionLocal

    async def create(self) -> None:
        """Create all tables that do not exist yet."""
        logger.info("Creating database tables")
        await create_tables(self.engine)

    async def drop(self) -> None:
        """Drop all tables (development and testing only)."""
        logger.warning("Dropping all database tables")
        await drop_tables(self.engine)

    async def seed(self) -> bool:
        """
        Seed the database with a demo user owning one draft listing.

        Returns:
            True if data was created, False if the demo user already existed
        """
        logger.info("Seeding database with demo data")

        async with self.session_factory() as session:
            user_repo = UserRepository(session)
            listing_repo = ListingRepository(session)

            if await user_repo.email_exists(DEMO_EMAIL):
                logger.info("Demo user already exists, skipping seed")
                return False

            async with transaction(session):
                user = await user_repo.create_user(
                    email=DEMO_EMAIL,
                    hashed_password=hash_password(DEMO_PASSWORD),
                    name="Demo Użytkownik",
                    role=UserRole.USER,
                )
                await listing_repo.create({
                    "owner_id": user.id,
                    "status": ListingStatus.DRAFT,
                    "title": "Siedlisko pod lasem na Warmii",
                    "description": (
                        "Stary dom z gankiem, stodoła i sad na skraju lasu. "
                        "Do najbliższych sąsiadów kilkaset metrów, droga dojazdowa utwardzona."
                    ),
                    "price": Decimal("450000.00"),
                    "city": "Olsztynek",
                    "province": Province.WARMINSKO_MAZURSKIE,
                    "property_type": PropertyType.SIEDLISKO,
                    "advertiser_type": AdvertiserType.PRYWATNY,
                    "plot_size": 12000,
                    "house_size": 110,
                    "features": [ListingFeature.PRZY_LESIE.value, ListingFeature.BEZ_SASIADOW_300M.value],
                    "contact_name": "Demo Użytkownik",
                    "contact_phone": "+48 600 100 200",
                    "negotiable": True,
                })

        logger.info("Database seeded successfully")
        logger.info(f"  Email: {DEMO_EMAIL}")
        logger.info(f"  Password: {DEMO_PASSWORD}")
        return True

    async def reset(self) -> None:
        """Drop, recreate and seed the database."""
        logger.warning("Resetting database - all data will be lost!")

        if not settings.is_development and not settings.is_testing:
            raise RuntimeError("Database reset is only allowed in development or test mode")

        await self.drop()
        await self.create()
        await self.seed()

        logger.info("Database reset completed")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Siedlisko database management")
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    subparsers.add_parser("create", help="Create database tables")
    subparsers.add_parser("drop", help="Drop database tables (development only)")

    reset_parser = subparsers.add_parser("reset", help="Drop, recreate and seed the database (development only)")
    reset_parser.add_argument("--confirm", action="store_true", help="Confirm database reset")

    subparsers.add_parser("seed", help="Create a demo user with a draft listing")
    return parser


async def run(args: argparse.Namespace, manager: Optional[MigrationManager] = None) -> int:
    manager = manager or MigrationManager()

    if args.command == "create":
        await manager.create()
    elif args.command == "drop":
        await manager.drop()
    elif args.command == "reset":
        if not args.confirm:
            logger.error("Database reset requires --confirm flag")
            return 1
        await manager.reset()
    elif args.command == "seed":
        await manager.seed()
    else:
        return 1

    return 0


def main(argv=None) -> int:
    """Main CLI interface for database management."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    try:
        return asyncio.run(run(args))
    except Exception as e:
        logger.error(f"Command '{args.command}' failed: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
