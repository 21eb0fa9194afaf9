"""Consumer/provider relationship and the narrow values derived from it."""

from dataclasses import dataclass

from pactbroker.models.common import PactBrokerBase
from pactbroker.models.pact import Pact, Pacticipant, Verification


@dataclass(frozen=True)
class PairNames:
    """Just the two names a relationship is sorted by."""

    consumer_name: str
    provider_name: str


@dataclass(frozen=True)
class VerificationFacts:
    """Inputs to verification-status classification."""

    ever_verified: bool
    pact_changed: bool
    verification_successful: bool
    provider_name: str
    provider_version: str | None


class Relationship(PactBrokerBase, frozen=True):
    """A consumer/provider pair with its latest pact and latest verification."""

    consumer: Pacticipant
    provider: Pacticipant
    latest_pact: Pact | None = None
    latest_verification: Verification | None = None

    @property
    def consumer_name(self) -> str:
        return self.consumer.name

    @property
    def provider_name(self) -> str:
        return self.provider.name

    @property
    def ever_verified(self) -> bool:
        return self.latest_verification is not None

    @property
    def pact_changed_since_last_verification(self) -> bool:
        if self.latest_verification is None or self.latest_pact is None:
            return False
        return self.latest_verification.pact_version_sha != self.latest_pact.pact_version_sha

    @property
    def latest_verification_successful(self) -> bool:
        return self.latest_verification is not None and self.latest_verification.success

    @property
    def latest_verification_provider_version(self) -> str | None:
        if self.latest_verification is None:
            return None
        return self.latest_verification.provider_version

    def pair_names(self) -> PairNames:
        return PairNames(self.consumer_name, self.provider_name)

    def verification_facts(self) -> VerificationFacts:
        return VerificationFacts(
            ever_verified=self.ever_verified,
            pact_changed=self.pact_changed_since_last_verification,
            verification_successful=self.latest_verification_successful,
            provider_name=self.provider_name,
            provider_version=self.latest_verification_provider_version,
        )
