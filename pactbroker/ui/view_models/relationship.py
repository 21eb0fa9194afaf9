"""Relationship view model: verification status and index ordering.

Status classification is evaluated in a fixed order:
never verified, then changed since verification, then failed, then
success. Sorting is by consumer name then provider name, both ignoring
case; pairs that compare equal keep their input order under ``sorted``.
"""

from dataclasses import dataclass
from enum import StrEnum
from functools import total_ordering
from urllib.parse import quote

from pactbroker.models.pact import Pact
from pactbroker.models.relationship import PairNames, Relationship, VerificationFacts


class VerificationStatus(StrEnum):
    """CSS-style status classes."""

    NONE = ""
    WARNING = "warning"
    DANGER = "danger"
    SUCCESS = "success"


@dataclass(frozen=True)
class VerificationSummary:
    status: VerificationStatus
    tooltip: str | None
    warning: bool


def classify_verification(facts: VerificationFacts) -> VerificationSummary:
    if not facts.ever_verified:
        return VerificationSummary(VerificationStatus.NONE, None, False)
    verified_by = f"{facts.provider_name} (v{facts.provider_version})"
    if facts.pact_changed:
        return VerificationSummary(
            VerificationStatus.WARNING,
            f"Pact has changed since last successful verification by {verified_by}",
            True,
        )
    if not facts.verification_successful:
        return VerificationSummary(
            VerificationStatus.DANGER,
            f"Verification by {verified_by} failed",
            False,
        )
    return VerificationSummary(
        VerificationStatus.SUCCESS,
        f"Successfully verified by {verified_by}",
        False,
    )


def _escape(name: str) -> str:
    return quote(name, safe="")


@total_ordering
class RelationshipViewModel:
    """Display wrapper around a ``Relationship``.

    Accepts either a full ``Relationship`` or the narrow ``PairNames`` /
    ``VerificationFacts`` values when only sorting or status is needed.
    """

    def __init__(self, relationship: Relationship | None = None, *,
                 names: PairNames | None = None,
                 facts: VerificationFacts | None = None) -> None:
        if relationship is not None:
            names = names or relationship.pair_names()
            facts = facts or relationship.verification_facts()
        if names is None:
            msg = "RelationshipViewModel needs a relationship or pair names."
            raise ValueError(msg)
        self._relationship = relationship
        self._names = names
        self._facts = facts

    @property
    def consumer_name(self) -> str:
        return self._names.consumer_name

    @property
    def provider_name(self) -> str:
        return self._names.provider_name

    @property
    def latest_pact_url(self) -> str:
        return (
            f"/pacts/provider/{_escape(self.provider_name)}"
            f"/consumer/{_escape(self.consumer_name)}/latest"
        )

    @property
    def consumer_group_url(self) -> str:
        return f"/groups/{_escape(self.consumer_name)}"

    @property
    def provider_group_url(self) -> str:
        return f"/groups/{_escape(self.provider_name)}"

    @property
    def latest_pact(self) -> Pact | None:
        return self._relationship.latest_pact if self._relationship else None

    def _summary(self) -> VerificationSummary:
        if self._facts is None:
            return VerificationSummary(VerificationStatus.NONE, None, False)
        return classify_verification(self._facts)

    @property
    def verification_status(self) -> str:
        return self._summary().status.value

    @property
    def verification_tooltip(self) -> str | None:
        return self._summary().tooltip

    @property
    def warning(self) -> bool:
        return self._summary().warning

    def _sort_key(self) -> tuple[str, str]:
        return (self.consumer_name.lower(), self.provider_name.lower())

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, RelationshipViewModel):
            return NotImplemented
        return self._sort_key() == other._sort_key()

    def __lt__(self, other: "RelationshipViewModel") -> bool:
        if not isinstance(other, RelationshipViewModel):
            return NotImplemented
        return self._sort_key() < other._sort_key()

    def __hash__(self) -> int:
        return hash(self._sort_key())

    def __repr__(self) -> str:
        return f"RelationshipViewModel({self.consumer_name!r}, {self.provider_name!r})"
