"""Item, membership and context-child records."""

from datetime import datetime, timezone
from typing import Union

from pydantic import BaseModel, Field, field_validator


Rank = Union[int, float]


def timestamp() -> datetime:
    """Current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


class ContextMembership(BaseModel):
    """One context path an item belongs under, plus its sibling rank there."""

    context: tuple[str, ...] = Field(
        ...,
        description="Path from the root to the parent context, excluding the item itself"
    )

    rank: Rank = Field(
        default=0,
        description="Sibling order key within the context"
    )

    @field_validator("context", mode="before")
    @classmethod
    def coerce_context(cls, v):
        """Accept any sequence of values (lists come back from JSON)."""
        if isinstance(v, str):
            raise ValueError("context must be a sequence of item values, not a string")
        return tuple(v)

    model_config = {"frozen": True}


class Item(BaseModel):
    """A thought in the graph. Its value is its identity."""

    value: str = Field(..., description="Text of the item, doubling as its key")

    member_of: tuple[ContextMembership, ...] = Field(
        default=(),
        alias="memberOf",
        description="Every context this item belongs to, one entry per distinct path"
    )

    created: datetime = Field(default_factory=timestamp)

    last_updated: datetime = Field(default_factory=timestamp, alias="lastUpdated")

    def membership_for(self, context: tuple[str, ...]) -> ContextMembership | None:
        """Return the membership registered for an exact context path."""
        for membership in self.member_of:
            if membership.context == tuple(context):
                return membership
        return None

    model_config = {"frozen": True, "populate_by_name": True}


class ContextChild(BaseModel):
    """Entry of the context children index: one child of an encoded context."""

    key: str = Field(..., description="Value of the child item")

    rank: Rank = Field(default=0, description="Sibling order key")

    created: datetime = Field(default_factory=timestamp)

    last_updated: datetime = Field(default_factory=timestamp, alias="lastUpdated")

    model_config = {"frozen": True, "populate_by_name": True}
