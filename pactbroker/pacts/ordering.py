"""Order-based queries over pact publications.

``VersionOrdering`` is an immutable query builder: every scoping method
returns a new builder, and the terminal methods (``latest``, ``earliest``,
``all``, ``first``, ``count``) run the query on the session.

By default only the latest revision of each (consumer version, provider)
publication is visible. Scoping by pact version sha, or calling
``all_revisions()``, widens the view to every revision.

Comparisons use ``VersionRow.order`` exclusively. Version numbers are
matched as exact strings and never parsed.
"""

from collections.abc import Sequence
from typing import Any
from uuid import UUID

from sqlalchemy import and_, exists, func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import aliased

from pactbroker.db.tables import (
    PacticipantRow,
    PactPublicationRow,
    PactVersionRow,
    TagRow,
    VersionRow,
)
from pactbroker.models.pact import Pact, Pacticipant, Version

_Consumer = aliased(PacticipantRow, name="consumers")
_Provider = aliased(PacticipantRow, name="providers")

_NEWEST_FIRST = (VersionRow.order.desc(), PactPublicationRow.revision_number.desc())
_OLDEST_FIRST = (VersionRow.order.asc(), PactPublicationRow.revision_number.desc())
_BY_NAMES_IGNORE_CASE = (
    func.lower(_Consumer.name),
    func.lower(_Provider.name),
    VersionRow.order.desc(),
)


def _latest_revisions():
    """Highest revision number per (consumer version, provider)."""
    return (
        select(
            PactPublicationRow.consumer_version_id,
            PactPublicationRow.provider_id,
            func.max(PactPublicationRow.revision_number).label("revision_number"),
        )
        .group_by(PactPublicationRow.consumer_version_id, PactPublicationRow.provider_id)
        .subquery("latest_revisions")
    )


class VersionOrdering:
    """Scoped, ordered view of pact publications."""

    def __init__(self, session: AsyncSession, *, clauses: tuple = (),
                 all_revisions: bool = False, with_content: bool = True,
                 order_by: tuple = _OLDEST_FIRST, one_per_pair: bool = False) -> None:
        self._session = session
        self._clauses = clauses
        self._all_revisions = all_revisions
        self._with_content = with_content
        self._order_by = order_by
        self._one_per_pair = one_per_pair

    def _with(self, **changes: Any) -> "VersionOrdering":
        params = {
            "clauses": self._clauses,
            "all_revisions": self._all_revisions,
            "with_content": self._with_content,
            "order_by": self._order_by,
            "one_per_pair": self._one_per_pair,
        }
        params.update(changes)
        return VersionOrdering(self._session, **params)

    def _where(self, *clauses: Any) -> "VersionOrdering":
        return self._with(clauses=self._clauses + clauses)

    # --- Scoping ---

    def consumer(self, name: str) -> "VersionOrdering":
        return self._where(_Consumer.name == name)

    def provider(self, name: str) -> "VersionOrdering":
        return self._where(_Provider.name == name)

    def by_tag(self, tag_name: str) -> "VersionOrdering":
        return self._where(
            exists().where(
                TagRow.version_id == VersionRow.version_id,
                TagRow.name == tag_name,
            )
        )

    def by_consumer_version_number(self, number: str) -> "VersionOrdering":
        return self._where(VersionRow.number == number)

    def by_consumer_version_id(self, version_id: UUID) -> "VersionOrdering":
        return self._where(PactPublicationRow.consumer_version_id == version_id)

    def by_provider_id(self, provider_id: UUID) -> "VersionOrdering":
        return self._where(PactPublicationRow.provider_id == provider_id)

    def by_publication_id(self, publication_id: UUID) -> "VersionOrdering":
        return self._where(
            PactPublicationRow.publication_id == publication_id
        )._with(all_revisions=True)

    def by_pact_version_sha(self, sha: str) -> "VersionOrdering":
        """Match a specific content sha across every revision."""
        return self._where(PactVersionRow.sha == sha)._with(all_revisions=True)

    def excluding_pact_version_sha(self, sha: str) -> "VersionOrdering":
        return self._where(PactVersionRow.sha != sha)

    def before(self, order: int) -> "VersionOrdering":
        return self._where(VersionRow.order < order)

    def after(self, order: int) -> "VersionOrdering":
        return self._where(VersionRow.order > order)

    def all_revisions(self) -> "VersionOrdering":
        return self._with(all_revisions=True)

    def without_content(self) -> "VersionOrdering":
        return self._with(with_content=False)

    def newest_first(self) -> "VersionOrdering":
        return self._with(order_by=_NEWEST_FIRST)

    def ordered_by_names(self) -> "VersionOrdering":
        """Consumer name then provider name, ignoring case."""
        return self._with(order_by=_BY_NAMES_IGNORE_CASE)

    # --- Terminal queries ---

    async def latest(self) -> Pact | None:
        """Highest consumer version order, ties broken by highest revision."""
        return await self._with(order_by=_NEWEST_FIRST).first()

    async def earliest(self) -> Pact | None:
        """Lowest consumer version order (latest revision at that version)."""
        return await self._with(order_by=_OLDEST_FIRST).first()

    async def first(self) -> Pact | None:
        pacts = await self._fetch(limit=1)
        return pacts[0] if pacts else None

    async def all(self) -> list[Pact]:
        return await self._fetch()

    async def latest_per_pair(self) -> list[Pact]:
        """The latest pact for each consumer/provider pair in scope.

        The newest consumer version order per pair is picked in SQL, so
        history length does not change how many rows are loaded. Keeps the
        ordering selected on the builder (see ``ordered_by_names``).
        """
        return await self._with(one_per_pair=True).all()

    def publication_ids(self):
        """Subquery of the publication ids in scope."""
        return self._statement(columns=(PactPublicationRow.publication_id,)).subquery()

    async def count(self) -> int:
        stmt = select(func.count()).select_from(self.publication_ids())
        result = await self._session.execute(stmt)
        return result.scalar_one()

    # --- Internals ---

    def _columns(self) -> tuple:
        columns = (PactPublicationRow, VersionRow, _Consumer, _Provider, PactVersionRow.sha)
        if self._with_content:
            columns += (PactVersionRow.content,)
        return columns

    def _statement(self, columns: Sequence[Any] | None = None):
        stmt = (
            select(*(columns or self._columns()))
            .select_from(PactPublicationRow)
            .join(VersionRow, VersionRow.version_id == PactPublicationRow.consumer_version_id)
            .join(_Consumer, _Consumer.pacticipant_id == VersionRow.pacticipant_id)
            .join(_Provider, _Provider.pacticipant_id == PactPublicationRow.provider_id)
            .join(PactVersionRow,
                  PactVersionRow.pact_version_id == PactPublicationRow.pact_version_id)
        )
        if not self._all_revisions:
            latest = _latest_revisions()
            stmt = stmt.join(latest, and_(
                latest.c.consumer_version_id == PactPublicationRow.consumer_version_id,
                latest.c.provider_id == PactPublicationRow.provider_id,
                latest.c.revision_number == PactPublicationRow.revision_number,
            ))
        if self._one_per_pair:
            newest = self._newest_order_per_pair()
            stmt = stmt.join(newest, and_(
                newest.c.consumer_id == VersionRow.pacticipant_id,
                newest.c.provider_id == PactPublicationRow.provider_id,
                newest.c.max_order == VersionRow.order,
            ))
        if self._clauses:
            stmt = stmt.where(*self._clauses)
        return stmt

    def _newest_order_per_pair(self):
        """Highest consumer version order per (consumer, provider) within the scope."""
        return (
            self._with(one_per_pair=False)
            ._statement(columns=(
                VersionRow.pacticipant_id.label("consumer_id"),
                PactPublicationRow.provider_id.label("provider_id"),
                func.max(VersionRow.order).label("max_order"),
            ))
            .group_by(VersionRow.pacticipant_id, PactPublicationRow.provider_id)
            .subquery("newest_per_pair")
        )

    async def _fetch(self, limit: int | None = None) -> list[Pact]:
        stmt = self._statement().order_by(*self._order_by)
        if limit is not None:
            stmt = stmt.limit(limit)
        result = await self._session.execute(stmt)
        rows = result.all()
        tags = await self._tags_for({row[1].version_id for row in rows})
        return [self._to_domain(row, tags) for row in rows]

    async def _tags_for(self, version_ids: set[UUID]) -> dict[UUID, tuple[str, ...]]:
        if not version_ids:
            return {}
        result = await self._session.execute(
            select(TagRow.version_id, TagRow.name)
            .where(TagRow.version_id.in_(version_ids))
            .order_by(TagRow.name)
        )
        tags: dict[UUID, list[str]] = {}
        for version_id, name in result.all():
            tags.setdefault(version_id, []).append(name)
        return {version_id: tuple(names) for version_id, names in tags.items()}

    def _to_domain(self, row: Any, tags: dict[UUID, tuple[str, ...]]) -> Pact:
        publication, version, consumer_row, provider_row, sha = row[:5]
        consumer = Pacticipant(pacticipant_id=consumer_row.pacticipant_id, name=consumer_row.name)
        return Pact(
            publication_id=publication.publication_id,
            consumer=consumer,
            provider=Pacticipant(pacticipant_id=provider_row.pacticipant_id,
                                 name=provider_row.name),
            consumer_version=Version(
                version_id=version.version_id,
                number=version.number,
                order=version.order,
                pacticipant=consumer,
                tags=tags.get(version.version_id, ()),
            ),
            revision_number=publication.revision_number,
            pact_version_sha=sha,
            json_content=row[5] if self._with_content else None,
            created_at=publication.created_at,
        )
