"""
Tests for the database management script.
"""

import argparse
import pytest
from sqlalchemy import func, select

from migrate import DEMO_EMAIL, MigrationManager, build_parser, run
from siedlisko.models.listing import Listing, ListingStatus
from siedlisko.models.user import User


@pytest.fixture
def manager(test_engine, session_factory) -> MigrationManager:
    return MigrationManager(target_engine=test_engine, session_factory=session_factory)


class TestMigrationManager:
    """Schema and seed commands."""

    @pytest.mark.asyncio
    async def test_seed_creates_demo_draft(self, manager: MigrationManager, db_session):
        assert await manager.seed() is True

        user = (await db_session.execute(select(User).where(User.email == DEMO_EMAIL))).scalar_one()
        listing = (await db_session.execute(select(Listing).where(Listing.owner_id == user.id))).scalar_one()
        assert listing.status == ListingStatus.DRAFT

    @pytest.mark.asyncio
    async def test_seed_is_idempotent(self, manager: MigrationManager, db_session):
        await manager.seed()
        assert await manager.seed() is False

        count = (await db_session.execute(select(func.count()).select_from(User))).scalar()
        assert count == 1

    @pytest.mark.asyncio
    async def test_reset_recreates_schema(self, manager: MigrationManager, db_session, test_user):
        await manager.reset()

        emails = (await db_session.execute(select(User.email))).scalars().all()
        assert emails == [DEMO_EMAIL]


class TestCommandLine:
    """Argument handling."""

    def test_parser_commands(self):
        parser = build_parser()
        assert parser.parse_args(["reset", "--confirm"]).confirm is True
        assert parser.parse_args(["seed"]).command == "seed"

    @pytest.mark.asyncio
    async def test_reset_requires_confirmation(self, manager: MigrationManager):
        assert await run(argparse.Namespace(command="reset", confirm=False), manager) == 1

    @pytest.mark.asyncio
    async def test_create_command(self, manager: MigrationManager):
        assert await run(argparse.Namespace(command="create"), manager) == 0
