"""Tests for the verification repository."""

import pytest

from pactbroker.models.common import new_uuid7
from pactbroker.pacts.store import PactVersionStore
from pactbroker.repositories.verifications import VerificationRepository


@pytest.fixture
def pact_version_id(db_session, registry):
    async def _pact_version_id(consumer: str, provider: str, content: str):
        consumer_row = await registry.pacticipant(consumer)
        provider_row = await registry.pacticipant(provider)
        row = await PactVersionStore(db_session).find_or_create(
            consumer_row.pacticipant_id, provider_row.pacticipant_id, content,
        )
        return row.pact_version_id
    return _pact_version_id


class TestVerificationRepository:
    @pytest.mark.anyio
    async def test_numbers_count_up_per_pact_version(self, db_session, pact_version_id,
                                                     pact_json) -> None:
        repo = VerificationRepository(db_session)
        pvid = await pact_version_id("Foo", "Bar", pact_json())
        first = await repo.create(verification_id=new_uuid7(), pact_version_id=pvid,
                                  success=False, provider_version="1.0.0")
        second = await repo.create(verification_id=new_uuid7(), pact_version_id=pvid,
                                   success=True, provider_version="1.0.1")
        assert (first.number, second.number) == (1, 2)

    @pytest.mark.anyio
    async def test_latest_for_pact_version(self, db_session, pact_version_id, pact_json) -> None:
        repo = VerificationRepository(db_session)
        pvid = await pact_version_id("Foo", "Bar", pact_json())
        assert await repo.find_latest_for_pact_version(pvid) is None
        await repo.create(verification_id=new_uuid7(), pact_version_id=pvid,
                          success=False, provider_version="1.0.0")
        await repo.create(verification_id=new_uuid7(), pact_version_id=pvid,
                          success=True, provider_version="1.0.1", build_url="http://ci/1")
        latest = await repo.find_latest_for_pact_version(pvid)
        assert latest.success is True
        assert latest.provider_version == "1.0.1"
        assert latest.provider_name == "Bar"
        assert latest.build_url == "http://ci/1"

    @pytest.mark.anyio
    async def test_latest_for_pair_spans_pact_versions(self, db_session, pact_version_id,
                                                       pact_json) -> None:
        repo = VerificationRepository(db_session)
        old = await pact_version_id("Foo", "Bar", pact_json(v=1))
        new = await pact_version_id("Foo", "Bar", pact_json(v=2))
        other = await pact_version_id("Foo", "Baz", pact_json(v=3))
        await repo.create(verification_id=new_uuid7(), pact_version_id=old,
                          success=True, provider_version="1")
        await repo.create(verification_id=new_uuid7(), pact_version_id=new,
                          success=False, provider_version="2")
        await repo.create(verification_id=new_uuid7(), pact_version_id=other,
                          success=True, provider_version="3")

        latest = await repo.find_latest_verification_for("Foo", "Bar")
        assert latest.provider_version == "2"
        assert latest.success is False
        assert await repo.find_latest_verification_for("Bar", "Foo") is None
