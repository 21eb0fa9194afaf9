"""Pact domain values: Pacticipant, Version, Pact, Verification.

These are what the resolver hands to callers. They carry the stable
identifying fields (names verbatim, version number, order, revision
number, sha) a renderer needs to build navigation paths; escaping those
names is the renderer's job.
"""

import json
from typing import Any

from pydantic import Field

from pactbroker.models.common import PactBrokerBase, PactSha, UTCTimestamp, UUIDv7


class Pacticipant(PactBrokerBase, frozen=True):
    """A named consumer or provider."""

    pacticipant_id: UUIDv7
    name: str = Field(..., min_length=1, max_length=255)


class Version(PactBrokerBase, frozen=True):
    """A pacticipant version.

    ``order`` drives every before/after/latest/earliest comparison; the
    free-form ``number`` is never parsed.
    """

    version_id: UUIDv7
    number: str = Field(..., min_length=1, max_length=255)
    order: int = Field(..., ge=0)
    pacticipant: Pacticipant
    tags: tuple[str, ...] = ()


class Pact(PactBrokerBase, frozen=True):
    """A hydrated pact publication.

    ``json_content`` is None when the pact was loaded for a listing that
    does not need the body.
    """

    publication_id: UUIDv7
    consumer: Pacticipant
    provider: Pacticipant
    consumer_version: Version
    revision_number: int = Field(..., ge=1)
    pact_version_sha: PactSha
    json_content: str | None = None
    created_at: UTCTimestamp

    @property
    def consumer_version_number(self) -> str:
        return self.consumer_version.number

    @property
    def order(self) -> int:
        return self.consumer_version.order

    @property
    def content_hash(self) -> Any:
        """Parsed pact JSON.

        Raises:
            ValueError: If the content was not loaded or is not valid JSON.
        """
        if self.json_content is None:
            msg = f"Pact {self.publication_id} was loaded without content."
            raise ValueError(msg)
        try:
            return json.loads(self.json_content)
        except json.JSONDecodeError as exc:
            msg = f"Pact {self.publication_id} content is not valid JSON: {exc}"
            raise ValueError(msg) from exc


class Verification(PactBrokerBase, frozen=True):
    """A provider verification of a specific pact version."""

    verification_id: UUIDv7
    pact_version_sha: PactSha
    provider_name: str
    provider_version: str
    number: int = Field(..., ge=1)
    success: bool
    build_url: str | None = None
    created_at: UTCTimestamp
