"""Content-addressed pact version store.

One PactVersionRow per (consumer, provider, sha). The unique constraint
on pact_versions is what guarantees it; this module only turns the
constraint violation from a concurrent duplicate insert into a re-read of
the row the other writer created.

Repositories call add()/flush() only, never commit().
"""

import logging
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from pactbroker.db.tables import PactVersionRow
from pactbroker.models.common import new_uuid7, utc_now
from pactbroker.pacts.hashing import content_sha

logger = logging.getLogger(__name__)


class PactVersionStore:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def find_or_create(self, consumer_id: UUID, provider_id: UUID,
                             json_content: str) -> PactVersionRow:
        """Return the pact version for this content, creating it on first sight.

        Existing rows are returned unchanged, nothing is written. When a
        concurrent writer inserts the same content first, the insert is
        rolled back to a savepoint and the winner's row is returned.
        """
        sha = content_sha(json_content)
        existing = await self.find(consumer_id, provider_id, sha)
        if existing is not None:
            return existing
        return await self._create(consumer_id, provider_id, sha, json_content)

    async def find(self, consumer_id: UUID, provider_id: UUID,
                   sha: str) -> PactVersionRow | None:
        result = await self._session.execute(
            select(PactVersionRow).where(
                PactVersionRow.consumer_id == consumer_id,
                PactVersionRow.provider_id == provider_id,
                PactVersionRow.sha == sha,
            )
        )
        return result.scalar_one_or_none()

    async def get(self, pact_version_id: UUID) -> PactVersionRow | None:
        return await self._session.get(PactVersionRow, pact_version_id)

    async def _create(self, consumer_id: UUID, provider_id: UUID,
                      sha: str, json_content: str) -> PactVersionRow:
        logger.debug("Creating new PactVersion for sha %s", sha)
        row = PactVersionRow(
            pact_version_id=new_uuid7(),
            consumer_id=consumer_id,
            provider_id=provider_id,
            sha=sha,
            content=json_content,
            created_at=utc_now(),
        )
        try:
            async with self._session.begin_nested():
                self._session.add(row)
                await self._session.flush()
        except IntegrityError:
            winner = await self.find(consumer_id, provider_id, sha)
            if winner is None:
                # Not the dedup race, some other constraint failed.
                raise
            logger.info("PactVersion for sha %s created concurrently, reusing it", sha)
            return winner
        return row
