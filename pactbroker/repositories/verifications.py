"""Verification repository.

Verification results are computed by provider builds elsewhere; this
repository only records them and looks them up by pact version.
"""

from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import aliased

from pactbroker.db.tables import (
    PacticipantRow,
    PactVersionRow,
    VerificationRow,
)
from pactbroker.models.common import utc_now
from pactbroker.models.pact import Verification

_Consumer = aliased(PacticipantRow, name="consumers")
_Provider = aliased(PacticipantRow, name="providers")


class VerificationRepository:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(self, *, verification_id: UUID, pact_version_id: UUID,
                     success: bool, provider_version: str,
                     build_url: str | None = None) -> VerificationRow:
        """Record a verification; ``number`` counts up per pact version."""
        row = VerificationRow(
            verification_id=verification_id,
            pact_version_id=pact_version_id,
            number=await self._next_number(pact_version_id),
            success=success,
            provider_version=provider_version,
            build_url=build_url,
            created_at=utc_now(),
        )
        self._session.add(row)
        await self._session.flush()
        return row

    async def find_latest_for_pact_version(self, pact_version_id: UUID) -> Verification | None:
        return await self._first(
            self._statement().where(VerificationRow.pact_version_id == pact_version_id)
        )

    async def find_latest_verification_for(self, consumer_name: str,
                                           provider_name: str) -> Verification | None:
        """Latest verification of any pact version between the pair."""
        return await self._first(
            self._statement().where(
                _Consumer.name == consumer_name,
                _Provider.name == provider_name,
            )
        )

    def _statement(self):
        return (
            select(VerificationRow, PactVersionRow.sha, _Provider.name)
            .join(PactVersionRow,
                  PactVersionRow.pact_version_id == VerificationRow.pact_version_id)
            .join(_Consumer, _Consumer.pacticipant_id == PactVersionRow.consumer_id)
            .join(_Provider, _Provider.pacticipant_id == PactVersionRow.provider_id)
            .order_by(VerificationRow.created_at.desc(), VerificationRow.verification_id.desc())
        )

    async def _first(self, stmt) -> Verification | None:
        result = await self._session.execute(stmt.limit(1))
        row = result.first()
        if row is None:
            return None
        verification, sha, provider_name = row
        return Verification(
            verification_id=verification.verification_id,
            pact_version_sha=sha,
            provider_name=provider_name,
            provider_version=verification.provider_version,
            number=verification.number,
            success=verification.success,
            build_url=verification.build_url,
            created_at=verification.created_at,
        )

    async def _next_number(self, pact_version_id: UUID) -> int:
        result = await self._session.execute(
            select(func.max(VerificationRow.number))
            .where(VerificationRow.pact_version_id == pact_version_id)
        )
        return (result.scalar_one() or 0) + 1
