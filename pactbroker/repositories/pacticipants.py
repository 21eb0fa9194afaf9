"""Pacticipant, version and tag repositories.

Version ``order`` is assigned here, once, as one more than the highest
order the pacticipant already has. The (pacticipant_id, order) unique
constraint backs it.
"""

from uuid import UUID

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from pactbroker.db.tables import PacticipantRow, PactPublicationRow, TagRow, VersionRow
from pactbroker.models.common import utc_now


class PacticipantRepository:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(self, *, pacticipant_id: UUID, name: str) -> PacticipantRow:
        row = PacticipantRow(pacticipant_id=pacticipant_id, name=name, created_at=utc_now())
        self._session.add(row)
        await self._session.flush()
        return row

    async def get(self, pacticipant_id: UUID) -> PacticipantRow | None:
        return await self._session.get(PacticipantRow, pacticipant_id)

    async def find_by_name(self, name: str, *, ignore_case: bool = False) -> PacticipantRow | None:
        """Exact match by default. With ignore_case, the first match by name wins."""
        if ignore_case:
            stmt = (
                select(PacticipantRow)
                .where(func.lower(PacticipantRow.name) == name.lower())
                .order_by(PacticipantRow.name)
                .limit(1)
            )
        else:
            stmt = select(PacticipantRow).where(PacticipantRow.name == name)
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

    async def list_all(self) -> list[PacticipantRow]:
        result = await self._session.execute(
            select(PacticipantRow).order_by(func.lower(PacticipantRow.name))
        )
        return list(result.scalars().all())


class VersionRepository:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(self, *, version_id: UUID, pacticipant_id: UUID,
                     number: str) -> VersionRow:
        row = VersionRow(
            version_id=version_id,
            pacticipant_id=pacticipant_id,
            number=number,
            order=await self._next_order(pacticipant_id),
            created_at=utc_now(),
        )
        self._session.add(row)
        await self._session.flush()
        await self._session.refresh(row)
        return row

    async def get(self, version_id: UUID) -> VersionRow | None:
        return await self._session.get(VersionRow, version_id)

    async def find_by_number(self, pacticipant_id: UUID, number: str) -> VersionRow | None:
        result = await self._session.execute(
            select(VersionRow).where(
                VersionRow.pacticipant_id == pacticipant_id,
                VersionRow.number == number,
            )
        )
        return result.scalar_one_or_none()

    async def list_for_pacticipant(self, pacticipant_id: UUID) -> list[VersionRow]:
        result = await self._session.execute(
            select(VersionRow)
            .where(VersionRow.pacticipant_id == pacticipant_id)
            .order_by(VersionRow.order.asc())
        )
        return list(result.scalars().all())

    async def delete(self, version_id: UUID) -> None:
        """Delete a version together with its tags and pact publications."""
        for stmt in (
            delete(PactPublicationRow).where(PactPublicationRow.consumer_version_id == version_id),
            delete(TagRow).where(TagRow.version_id == version_id),
            delete(VersionRow).where(VersionRow.version_id == version_id),
        ):
            await self._session.execute(stmt)

    async def _next_order(self, pacticipant_id: UUID) -> int:
        result = await self._session.execute(
            select(func.max(VersionRow.order)).where(VersionRow.pacticipant_id == pacticipant_id)
        )
        return (result.scalar_one() or 0) + 1


class TagRepository:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def add(self, *, version_id: UUID, name: str) -> TagRow:
        """Tag a version. Re-tagging with the same name is a no-op."""
        existing = await self._session.get(TagRow, (version_id, name))
        if existing is not None:
            return existing
        row = TagRow(version_id=version_id, name=name, created_at=utc_now())
        self._session.add(row)
        await self._session.flush()
        return row

    async def names_for_version(self, version_id: UUID) -> list[str]:
        result = await self._session.execute(
            select(TagRow.name).where(TagRow.version_id == version_id).order_by(TagRow.name)
        )
        return list(result.scalars().all())
