"""Builds consumer/provider relationships for index-style listings."""

from sqlalchemy.ext.asyncio import AsyncSession

from pactbroker.models.relationship import Relationship
from pactbroker.pacts.resolver import PactPublicationResolver
from pactbroker.repositories.verifications import VerificationRepository


class RelationshipService:
    """Pairs every latest pact with the latest verification for its pair."""

    def __init__(self, session: AsyncSession) -> None:
        self._resolver = PactPublicationResolver(session)
        self._verifications = VerificationRepository(session)

    async def find_relationships(self) -> list[Relationship]:
        relationships = []
        for pact in await self._resolver.find_latest_pacts():
            verification = await self._verifications.find_latest_verification_for(
                pact.consumer.name, pact.provider.name,
            )
            relationships.append(Relationship(
                consumer=pact.consumer,
                provider=pact.provider,
                latest_pact=pact,
                latest_verification=verification,
            ))
        return relationships
