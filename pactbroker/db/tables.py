"""SQLAlchemy ORM table models for the pact store.

Categories:
- REGISTRY: Pacticipant, Version, Tag (written by version registration)
- IMMUTABLE: PactVersion (content-addressed), PactPublication (append-only
             revisions), Verification (recorded once, never updated)

Uniqueness that the engine relies on is declared here, not enforced in
application code:
- pact_versions (consumer_id, provider_id, sha)
- pact_publications (consumer_version_id, provider_id, revision_number)
- versions (pacticipant_id, order) and (pacticipant_id, number)
"""

from datetime import datetime
from uuid import UUID

from sqlalchemy import (
    Boolean,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column

from pactbroker.db.session import Base


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------


class PacticipantRow(Base):
    """A named consumer or provider. Names are stored case-sensitively."""

    __tablename__ = "pacticipants"

    pacticipant_id: Mapped[UUID] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)


class VersionRow(Base):
    """A pacticipant version. ``order`` is assigned once and never changes."""

    __tablename__ = "versions"

    version_id: Mapped[UUID] = mapped_column(primary_key=True)
    pacticipant_id: Mapped[UUID] = mapped_column(
        ForeignKey("pacticipants.pacticipant_id", ondelete="CASCADE"), nullable=False
    )
    number: Mapped[str] = mapped_column(String(255), nullable=False)
    order: Mapped[int] = mapped_column("order", Integer, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    __table_args__ = (
        UniqueConstraint("pacticipant_id", "number", name="uq_version_pacticipant_number"),
        UniqueConstraint("pacticipant_id", "order", name="uq_version_pacticipant_order"),
    )


class TagRow(Base):
    __tablename__ = "tags"

    version_id: Mapped[UUID] = mapped_column(
        ForeignKey("versions.version_id", ondelete="CASCADE"), primary_key=True
    )
    name: Mapped[str] = mapped_column(String(255), primary_key=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)


# ---------------------------------------------------------------------------
# Pacts (IMMUTABLE)
# ---------------------------------------------------------------------------


class PactVersionRow(Base):
    """Immutable pact content, addressed by SHA-1 of the raw JSON body."""

    __tablename__ = "pact_versions"

    pact_version_id: Mapped[UUID] = mapped_column(primary_key=True)
    consumer_id: Mapped[UUID] = mapped_column(
        ForeignKey("pacticipants.pacticipant_id", ondelete="CASCADE"), nullable=False
    )
    provider_id: Mapped[UUID] = mapped_column(
        ForeignKey("pacticipants.pacticipant_id", ondelete="CASCADE"), nullable=False
    )
    sha: Mapped[str] = mapped_column(String(40), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    __table_args__ = (
        UniqueConstraint("consumer_id", "provider_id", "sha", name="uq_pact_version_sha"),
    )


class PactPublicationRow(Base):
    """Append-only publication log.

    The latest publication for a (consumer_version_id, provider_id) pair is
    the one with the highest revision_number.
    """

    __tablename__ = "pact_publications"

    publication_id: Mapped[UUID] = mapped_column(primary_key=True)
    consumer_version_id: Mapped[UUID] = mapped_column(
        ForeignKey("versions.version_id", ondelete="CASCADE"), nullable=False
    )
    provider_id: Mapped[UUID] = mapped_column(
        ForeignKey("pacticipants.pacticipant_id", ondelete="CASCADE"), nullable=False
    )
    revision_number: Mapped[int] = mapped_column(Integer, nullable=False)
    pact_version_id: Mapped[UUID] = mapped_column(
        ForeignKey("pact_versions.pact_version_id"), nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    __table_args__ = (
        UniqueConstraint(
            "consumer_version_id", "provider_id", "revision_number",
            name="uq_pact_publication_revision",
        ),
        Index("idx_pact_publication_pact_version", "pact_version_id"),
    )


class VerificationRow(Base):
    """Provider verification result, produced elsewhere and recorded here."""

    __tablename__ = "verifications"

    verification_id: Mapped[UUID] = mapped_column(primary_key=True)
    pact_version_id: Mapped[UUID] = mapped_column(
        ForeignKey("pact_versions.pact_version_id", ondelete="CASCADE"), nullable=False
    )
    number: Mapped[int] = mapped_column(Integer, nullable=False)
    success: Mapped[bool] = mapped_column(Boolean, nullable=False)
    provider_version: Mapped[str] = mapped_column(String(255), nullable=False)
    build_url: Mapped[str | None] = mapped_column(String(1000), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    __table_args__ = (
        UniqueConstraint("pact_version_id", "number", name="uq_verification_number"),
    )
