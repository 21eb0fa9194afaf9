"""Pact publication resolver.

Publishes and updates pacts, and answers latest / previous / next /
previous-distinct queries by composing ``VersionOrdering``,
``PactVersionStore`` and the structural differ.

Publications are an append-only log: an update with new content appends
a revision, an update with unchanged content returns the existing
publication. Nothing is ever updated in place.

Lookups that find nothing return None. The resolver only calls
add()/flush() on the session; the caller owns the transaction.
"""

import logging
from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from pactbroker.db.tables import PactPublicationRow, VersionRow
from pactbroker.models.common import new_uuid7, utc_now
from pactbroker.models.pact import Pact
from pactbroker.pacts.differ import differs
from pactbroker.pacts.ordering import VersionOrdering
from pactbroker.pacts.store import PactVersionStore

logger = logging.getLogger(__name__)


class PactPublicationResolver:
    """Orchestrates pact publication and version resolution."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session
        self._store = PactVersionStore(session)

    def ordering(self) -> VersionOrdering:
        return VersionOrdering(self._session)

    def _between(self, consumer_name: str, provider_name: str) -> VersionOrdering:
        return self.ordering().consumer(consumer_name).provider(provider_name)

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    async def publish(self, *, consumer_version_id: UUID, provider_id: UUID,
                      consumer_id: UUID, json_content: str) -> Pact:
        """Create revision 1 of a pact for a consumer version and provider."""
        pact_version = await self._store.find_or_create(consumer_id, provider_id, json_content)
        publication = await self._append(
            consumer_version_id=consumer_version_id,
            provider_id=provider_id,
            revision_number=1,
            pact_version_id=pact_version.pact_version_id,
        )
        return await self._hydrate(publication.publication_id)

    async def update(self, publication_id: UUID, json_content: str) -> Pact:
        """Append a revision if the content changed, else return the latest pact.

        The new content is compared with the latest revision for the consumer
        version and provider, whichever revision id was passed in.

        Raises:
            KeyError: If the publication does not exist.
        """
        existing = await self._session.get(PactPublicationRow, publication_id)
        if existing is None:
            msg = f"PactPublication {publication_id} not found."
            raise KeyError(msg)
        consumer_version = await self._session.get(VersionRow, existing.consumer_version_id)

        pact_version = await self._store.find_or_create(
            consumer_version.pacticipant_id, existing.provider_id, json_content,
        )
        latest = await self._latest_revision(existing.consumer_version_id, existing.provider_id)
        if pact_version.pact_version_id == latest.pact_version_id:
            return await self._hydrate(latest.publication_id)

        publication = await self._append(
            consumer_version_id=existing.consumer_version_id,
            provider_id=existing.provider_id,
            revision_number=latest.revision_number + 1,
            pact_version_id=pact_version.pact_version_id,
        )
        logger.debug(
            "Appended revision %d for consumer version %s and provider %s",
            publication.revision_number, existing.consumer_version_id, existing.provider_id,
        )
        return await self._hydrate(publication.publication_id)

    async def create_or_update(self, *, consumer_version_id: UUID, provider_id: UUID,
                               consumer_id: UUID, json_content: str) -> Pact:
        """Publish, or update the latest revision if one already exists."""
        existing = await self.find_by_version_and_provider(consumer_version_id, provider_id)
        if existing is None:
            return await self.publish(
                consumer_version_id=consumer_version_id,
                provider_id=provider_id,
                consumer_id=consumer_id,
                json_content=json_content,
            )
        return await self.update(existing.publication_id, json_content)

    async def delete(self, consumer_name: str, provider_name: str,
                     consumer_version_number: str) -> int:
        """Delete every revision published for that consumer version and provider.

        Pact version rows are left in place. Returns the number of
        publications removed.
        """
        in_scope = (
            self._between(consumer_name, provider_name)
            .by_consumer_version_number(consumer_version_number)
            .all_revisions()
            .publication_ids()
        )
        result = await self._session.execute(
            delete(PactPublicationRow).where(
                PactPublicationRow.publication_id.in_(select(in_scope.c.publication_id))
            ).execution_options(synchronize_session=False)
        )
        logger.debug(
            "Deleted %d publication(s) for %s/%s version %s",
            result.rowcount, consumer_name, provider_name, consumer_version_number,
        )
        return result.rowcount

    async def delete_by_version_id(self, version_id: UUID) -> int:
        result = await self._session.execute(
            delete(PactPublicationRow).where(PactPublicationRow.consumer_version_id == version_id)
        )
        return result.rowcount

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    async def find_latest_pact(self, consumer_name: str, provider_name: str,
                               tag: str | None = None) -> Pact | None:
        query = self._between(consumer_name, provider_name)
        if tag is not None:
            query = query.by_tag(tag)
        return await query.latest()

    async def find_pact(self, consumer_name: str, consumer_version_number: str | None,
                        provider_name: str, pact_version_sha: str | None = None) -> Pact | None:
        """Direct lookup. With a sha, every revision is searched."""
        query = self._between(consumer_name, provider_name)
        if pact_version_sha is not None:
            query = query.by_pact_version_sha(pact_version_sha)
        if consumer_version_number is not None:
            query = query.by_consumer_version_number(consumer_version_number)
        return await query.latest()

    async def find_previous_pact(self, pact: Pact) -> Pact | None:
        return await (
            self._between(pact.consumer.name, pact.provider.name)
            .before(pact.order)
            .latest()
        )

    async def find_next_pact(self, pact: Pact) -> Pact | None:
        return await (
            self._between(pact.consumer.name, pact.provider.name)
            .after(pact.order)
            .earliest()
        )

    async def find_previous_distinct_pact(self, pact: Pact) -> Pact | None:
        """Nearest earlier pact whose content is structurally different.

        Earlier pacts with the same sha are skipped by the query. Each
        candidate is then confirmed with the differ, so a reformatted but
        equivalent body is skipped too. The walk is capped at the number of
        consumer versions with a pact for this pair.

        Raises:
            RuntimeError: If the walk exceeds the number of versions.
        """
        if pact.json_content is None:
            pact = await self._hydrate(pact.publication_id)
        scope = self._between(pact.consumer.name, pact.provider.name)
        limit = await scope.count()
        current = pact
        for _ in range(limit):
            previous = await (
                scope.before(current.order)
                .excluding_pact_version_sha(current.pact_version_sha)
                .latest()
            )
            if previous is None:
                return None
            # A differing sha should mean differing content; confirm anyway.
            if differs(current.json_content, previous.json_content):
                return previous
            current = previous
        msg = (
            f"Previous distinct pact walk for {pact.consumer.name}/{pact.provider.name} "
            f"exceeded {limit} version(s) from order {pact.order}."
        )
        raise RuntimeError(msg)

    async def find_all_pact_versions_between(self, consumer_name: str,
                                             provider_name: str) -> list[Pact]:
        """Latest revision per consumer version, newest order first."""
        return await (
            self._between(consumer_name, provider_name)
            .without_content()
            .newest_first()
            .all()
        )

    async def find_latest_pact_versions_for_provider(self, provider_name: str,
                                                     tag: str | None = None) -> list[Pact]:
        query = self.ordering().provider(provider_name).without_content().ordered_by_names()
        if tag is not None:
            query = query.by_tag(tag)
        return await query.latest_per_pair()

    async def find_by_consumer_version(self, consumer_name: str,
                                       consumer_version_number: str) -> list[Pact]:
        return await (
            self.ordering()
            .consumer(consumer_name)
            .by_consumer_version_number(consumer_version_number)
            .all()
        )

    async def find_by_version_and_provider(self, version_id: UUID,
                                           provider_id: UUID) -> Pact | None:
        return await (
            self.ordering()
            .by_consumer_version_id(version_id)
            .by_provider_id(provider_id)
            .first()
        )

    async def find_latest_pacts(self) -> list[Pact]:
        """Latest pact for every consumer/provider pair, by names ignoring case."""
        return await self.ordering().without_content().ordered_by_names().latest_per_pair()

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    async def _append(self, *, consumer_version_id: UUID, provider_id: UUID,
                      revision_number: int, pact_version_id: UUID) -> PactPublicationRow:
        row = PactPublicationRow(
            publication_id=new_uuid7(),
            consumer_version_id=consumer_version_id,
            provider_id=provider_id,
            revision_number=revision_number,
            pact_version_id=pact_version_id,
            created_at=utc_now(),
        )
        self._session.add(row)
        await self._session.flush()
        return row

    async def _hydrate(self, publication_id: UUID) -> Pact:
        return await self.ordering().by_publication_id(publication_id).first()

    async def _latest_revision(self, consumer_version_id: UUID,
                               provider_id: UUID) -> PactPublicationRow:
        result = await self._session.execute(
            select(PactPublicationRow)
            .where(
                PactPublicationRow.consumer_version_id == consumer_version_id,
                PactPublicationRow.provider_id == provider_id,
            )
            .order_by(PactPublicationRow.revision_number.desc())
            .limit(1)
        )
        return result.scalar_one()
