"""Initial schema: pacticipants, versions, tags, pact versions, publications, verifications.

Revision ID: 001
Revises:
Create Date: 2026-10-18
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import UUID

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # -- Registry --
    op.create_table(
        "pacticipants",
        sa.Column("pacticipant_id", UUID(as_uuid=True), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False, unique=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )

    op.create_table(
        "versions",
        sa.Column("version_id", UUID(as_uuid=True), primary_key=True),
        sa.Column("pacticipant_id", UUID(as_uuid=True),
                  sa.ForeignKey("pacticipants.pacticipant_id", ondelete="CASCADE"),
                  nullable=False),
        sa.Column("number", sa.String(255), nullable=False),
        sa.Column("order", sa.Integer, nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint("pacticipant_id", "number", name="uq_version_pacticipant_number"),
        sa.UniqueConstraint("pacticipant_id", "order", name="uq_version_pacticipant_order"),
    )

    op.create_table(
        "tags",
        sa.Column("version_id", UUID(as_uuid=True),
                  sa.ForeignKey("versions.version_id", ondelete="CASCADE"), primary_key=True),
        sa.Column("name", sa.String(255), primary_key=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )

    # -- Pacts (IMMUTABLE) --
    op.create_table(
        "pact_versions",
        sa.Column("pact_version_id", UUID(as_uuid=True), primary_key=True),
        sa.Column("consumer_id", UUID(as_uuid=True),
                  sa.ForeignKey("pacticipants.pacticipant_id", ondelete="CASCADE"),
                  nullable=False),
        sa.Column("provider_id", UUID(as_uuid=True),
                  sa.ForeignKey("pacticipants.pacticipant_id", ondelete="CASCADE"),
                  nullable=False),
        sa.Column("sha", sa.String(40), nullable=False),
        sa.Column("content", sa.Text, nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint("consumer_id", "provider_id", "sha", name="uq_pact_version_sha"),
    )

    op.create_table(
        "pact_publications",
        sa.Column("publication_id", UUID(as_uuid=True), primary_key=True),
        sa.Column("consumer_version_id", UUID(as_uuid=True),
                  sa.ForeignKey("versions.version_id", ondelete="CASCADE"), nullable=False),
        sa.Column("provider_id", UUID(as_uuid=True),
                  sa.ForeignKey("pacticipants.pacticipant_id", ondelete="CASCADE"),
                  nullable=False),
        sa.Column("revision_number", sa.Integer, nullable=False),
        sa.Column("pact_version_id", UUID(as_uuid=True),
                  sa.ForeignKey("pact_versions.pact_version_id"), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint("consumer_version_id", "provider_id", "revision_number",
                            name="uq_pact_publication_revision"),
    )
    op.create_index("idx_pact_publication_pact_version", "pact_publications",
                    ["pact_version_id"])

    op.create_table(
        "verifications",
        sa.Column("verification_id", UUID(as_uuid=True), primary_key=True),
        sa.Column("pact_version_id", UUID(as_uuid=True),
                  sa.ForeignKey("pact_versions.pact_version_id", ondelete="CASCADE"),
                  nullable=False),
        sa.Column("number", sa.Integer, nullable=False),
        sa.Column("success", sa.Boolean, nullable=False),
        sa.Column("provider_version", sa.String(255), nullable=False),
        sa.Column("build_url", sa.String(1000), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint("pact_version_id", "number", name="uq_verification_number"),
    )


def downgrade() -> None:
    op.drop_table("verifications")
    op.drop_index("idx_pact_publication_pact_version", table_name="pact_publications")
    op.drop_table("pact_publications")
    op.drop_table("pact_versions")
    op.drop_table("tags")
    op.drop_table("versions")
    op.drop_table("pacticipants")
