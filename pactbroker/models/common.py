"""Shared types and base model used across pactbroker domain models."""

from datetime import datetime, timezone
from typing import Annotated
from uuid import UUID

from pydantic import BaseModel, Field
from uuid_extensions import uuid7


def utc_now() -> datetime:
    """Return the current UTC timestamp (timezone-aware)."""
    return datetime.now(tz=timezone.utc)


def new_uuid7() -> UUID:
    """Generate a new time-sortable UUID v7."""
    return uuid7()


# --- Reusable annotated types ---

UUIDv7 = Annotated[UUID, Field(description="Time-sortable UUID v7.")]
UTCTimestamp = Annotated[
    datetime, Field(description="UTC timezone-aware timestamp.")
]
PactSha = Annotated[
    str,
    Field(pattern=r"^[a-f0-9]{40}$", description="SHA-1 hex digest of the pact content."),
]


# --- Base model ---


class PactBrokerBase(BaseModel):
    """Base model with common configuration for all pactbroker Pydantic models."""

    model_config = {
        "populate_by_name": True,
        "protected_namespaces": (),
    }
