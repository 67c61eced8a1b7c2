from datetime import datetime
from uuid import UUID

from pydantic import AliasChoices, BaseModel, Field

from synopsis.core.db import MongoModel
from synopsis.utils import now


class Summary(MongoModel):
    """A note together with its generated summary.

    Indexed on created_at and on slug (unique among string values).
    """

    note: str
    summary: str
    tags: list[str] = Field(default_factory=list)
    starred: bool = False
    slug: str | None = None  # Public share identifier, replaced on every share
    created_at: datetime = Field(
        default_factory=now,
        validation_alias=AliasChoices("created_at", "createdAt"),
        serialization_alias="createdAt",
    )
    owner_id: UUID = Field(
        ..., validation_alias=AliasChoices("owner_id", "ownerId"), serialization_alias="ownerId"
    )


class SummaryUpdate(BaseModel):
    """Partial update; fields left as None are not touched."""

    note: str | None = None
    summary: str | None = None
    tags: list[str] | None = None
    starred: bool | None = None


class SharedSummary(BaseModel):
    """Public projection of a shared summary. Never carries id, owner or slug."""

    note: str
    summary: str
    tags: list[str]
    created_at: datetime = Field(
        ..., validation_alias=AliasChoices("created_at", "createdAt"), serialization_alias="createdAt"
    )

    @classmethod
    def from_domain(cls, summary: Summary) -> "SharedSummary":
        return cls(note=summary.note, summary=summary.summary, tags=summary.tags, created_at=summary.created_at)
