"""Participant domain model."""

from datetime import datetime, timezone

from pydantic import BaseModel, Field


class User(BaseModel):
    """Anonymous study participant.

    Identified only by a client-generated opaque token. Created once on
    first visit, never updated or deleted.
    """

    id: str = Field(min_length=1)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    model_config = {"from_attributes": True}
