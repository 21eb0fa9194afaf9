"""Shared pytest fixtures for the pactbroker test suite.

Provides:
- db_engine: in-memory SQLite async engine with all tables
- db_session: SAVEPOINT-isolated async session (nothing leaks between tests)
- registry: creates pacticipants, versions and tags the way the version
  registration collaborator would
- publish: publishes a pact for consumer version / provider names
"""

import json

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.pool import StaticPool

from pactbroker.db.session import Base
from pactbroker.db.tables import PacticipantRow, VersionRow
from pactbroker.models.common import new_uuid7
from pactbroker.pacts.resolver import PactPublicationResolver
from pactbroker.repositories.pacticipants import (
    PacticipantRepository,
    TagRepository,
    VersionRepository,
)
import pactbroker.db.tables  # noqa: F401 (registers ORM models on Base.metadata)


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
async def db_engine():
    """Create an in-memory SQLite async engine with all tables."""
    eng = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
    )
    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield eng
    await eng.dispose()


@pytest.fixture
async def db_session(db_engine):
    """Provide a SAVEPOINT-isolated session.

    The outer transaction is never committed; it rolls back at teardown.
    The session joins it through a SAVEPOINT, so a commit() in code under
    test only releases that savepoint.
    """
    async with db_engine.connect() as conn:
        trans = await conn.begin()
        session = AsyncSession(
            bind=conn,
            expire_on_commit=False,
            join_transaction_mode="create_savepoint",
        )

        yield session

        await session.close()
        await trans.rollback()


class Registry:
    """Creates pacticipants and versions on demand, by name."""

    def __init__(self, session: AsyncSession) -> None:
        self._pacticipants = PacticipantRepository(session)
        self._versions = VersionRepository(session)
        self._tags = TagRepository(session)

    async def pacticipant(self, name: str) -> PacticipantRow:
        row = await self._pacticipants.find_by_name(name)
        if row is None:
            row = await self._pacticipants.create(pacticipant_id=new_uuid7(), name=name)
        return row

    async def version(self, pacticipant_name: str, number: str,
                      tags: tuple[str, ...] = ()) -> VersionRow:
        pacticipant = await self.pacticipant(pacticipant_name)
        row = await self._versions.find_by_number(pacticipant.pacticipant_id, number)
        if row is None:
            row = await self._versions.create(
                version_id=new_uuid7(),
                pacticipant_id=pacticipant.pacticipant_id,
                number=number,
            )
        for tag in tags:
            await self._tags.add(version_id=row.version_id, name=tag)
        return row


@pytest.fixture
def registry(db_session: AsyncSession) -> Registry:
    return Registry(db_session)


@pytest.fixture
def resolver(db_session: AsyncSession) -> PactPublicationResolver:
    return PactPublicationResolver(db_session)


def _pact_json(**extra) -> str:
    body = {
        "consumer": {"name": "Foo"},
        "provider": {"name": "Bar"},
        "interactions": [
            {
                "description": "a request for something",
                "request": {"method": "GET", "path": "/things"},
                "response": {"status": 200},
            }
        ],
    }
    body.update(extra)
    return json.dumps(body)


@pytest.fixture
def pact_json():
    """Builds a minimal pact body; keyword arguments become extra top-level keys."""
    return _pact_json


@pytest.fixture
def publish(registry: Registry, resolver: PactPublicationResolver):
    """Publish (or update) a pact for a consumer version and provider by name."""

    async def _publish(consumer: str, provider: str, number: str, content: str,
                       tags: tuple[str, ...] = ()):
        version = await registry.version(consumer, number, tags)
        provider_row = await registry.pacticipant(provider)
        return await resolver.create_or_update(
            consumer_version_id=version.version_id,
            provider_id=provider_row.pacticipant_id,
            consumer_id=version.pacticipant_id,
            json_content=content,
        )

    return _publish
