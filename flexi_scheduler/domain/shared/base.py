"""Base classes for domain entities and value objects."""

from datetime import datetime, timezone
from typing import Any
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def new_id() -> str:
    return str(uuid4())


class ValueObject(BaseModel):
    """Base class for value objects (immutable, defined by their values)."""

    model_config = ConfigDict(frozen=True)


class Entity(BaseModel):
    """Base class for entities (have identity, can change over time).

    Entities are treated as immutable snapshots of a catalog row: a change
    produces a new instance through ``evolve`` rather than mutating in place.
    """

    model_config = ConfigDict(frozen=True, use_enum_values=False)

    id: str = Field(default_factory=new_id, min_length=1)
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime | None = None

    def __eq__(self, other: Any) -> bool:
        """Entities are equal if they have the same ID and type."""
        if not isinstance(other, self.__class__):
            return False
        return self.id == other.id

    def __hash__(self) -> int:
        """Hash based on entity ID."""
        return hash((self.__class__.__name__, self.id))

    def evolve(self, **changes: Any):
        """Return a validated copy with ``changes`` applied and ``updated_at`` bumped."""
        data = self.model_dump()
        data.update(changes)
        data["updated_at"] = utcnow()
        return self.__class__.model_validate(data)


class DomainService:
    """Base class for domain services (business logic that doesn't belong to a single entity)."""

    pass
