"""The single write path: submit an item and keep both indices in step.

submit_item() computes a complete new state from the old one and only then
hands it back, so a failure leaves the caller's state untouched. External
persistence is not performed here; the affected records are returned as
SyncRequests for the caller to dispatch once the new state is in place.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from multicontext.graph.context_index import ContextChildrenIndex
from multicontext.graph.item_store import ItemStore
from multicontext.graph.path_codec import encode
from multicontext.graph.queries import signifier
from multicontext.graph.rank import RankAllocator, next_rank
from multicontext.models.item import ContextChild, ContextMembership, Item, Rank, timestamp
from multicontext.models.state import GraphState
from multicontext.services.exceptions import NotFoundError
from multicontext.utils.logging import get_logger


logger = get_logger(__name__)


class SubmitRequest(BaseModel):
    """Arguments of a submit."""

    value: str = Field(..., description="Item value to create or update (empty is allowed)")

    context: tuple[str, ...] = Field(
        default=(),
        description="Context to add the item under; empty for a floating thought"
    )

    add_as_context: bool = Field(
        default=False,
        description="Add value as a new context of signifier(context) instead"
    )

    rank: Rank = Field(default=0, description="Sibling rank under context")

    @field_validator("context", mode="before")
    @classmethod
    def coerce_context(cls, v):
        if isinstance(v, str):
            raise ValueError("context must be a sequence of item values, not a string")
        return tuple(v)

    model_config = {"frozen": True}


@dataclass(frozen=True)
class SyncRequest:
    """Payload for the persistence collaborator.

    Attributes:
        item: Post-mutation record of the affected item
        context_children_updates: Encoded context path -> full updated child list
    """

    item: Item
    context_children_updates: dict[str, tuple[ContextChild, ...]] = field(default_factory=dict)


@dataclass(frozen=True)
class SubmitResult:
    """New state plus the sync requests to dispatch after committing it."""

    state: GraphState
    sync_requests: tuple[SyncRequest, ...]


def _with_membership(item: Item, membership: ContextMembership, now: datetime) -> Item:
    """Add a membership, replacing the one already held for the same context."""
    member_of = tuple(m for m in item.member_of if m.context != membership.context)
    return item.model_copy(update={"member_of": member_of + (membership,), "last_updated": now})


def _register_child(
    index: ContextChildrenIndex,
    context: tuple[str, ...],
    key: str,
    rank: Rank,
    now: datetime,
) -> tuple[ContextChildrenIndex, dict[str, tuple[ContextChild, ...]]]:
    previous = next((c for c in index.children_of(context) if c.key == key), None)
    child = ContextChild(
        key=key,
        rank=rank,
        created=previous.created if previous else now,
        last_updated=now,
    )
    index = index.upsert_child(context, child)
    encoded = encode(context)
    return index, {encoded: index.entry(encoded)}


def submit_item(
    state: GraphState,
    request: SubmitRequest,
    *,
    now: Optional[datetime] = None,
    allocator: Optional[RankAllocator] = None,
) -> SubmitResult:
    """Create or update an item and both indices in one step.

    Two cases:

    * add_as_context false: value is upserted; for a non-empty context it
      gets the membership {context, rank} (replacing any it already had for
      that context) and is registered as a child of encode(context).
    * add_as_context true: the existing item signifier(context) gains the
      membership {(value,), allocated rank} and is registered as a child of
      encode((value,)); value itself is upserted.

    Args:
        state: State to start from (not modified)
        request: What to submit
        now: Timestamp to stamp records with (defaults to current time)
        allocator: Rank allocator for add_as_context (defaults to next_rank)

    Returns:
        SubmitResult with the new state (revision + 1) and its sync requests

    Raises:
        NotFoundError: If add_as_context is set and signifier(context) does not exist
    """
    now = now or timestamp()
    value = request.value
    context = request.context

    items: ItemStore = state.items
    index: ContextChildrenIndex = state.context_children

    # Validate before computing anything
    target: Optional[Item] = None
    if request.add_as_context:
        if not context or not items.exists(signifier(context)):
            raise NotFoundError(context[-1] if context else None, context)
        target = items.get(signifier(context))

    items = items.upsert(value, now=now, last_updated=now)
    item = items.get(value)
    updates: dict[str, tuple[ContextChild, ...]] = {}
    sync_requests: list[SyncRequest] = []

    if target is not None:
        new_context = (value,)
        if allocator is not None:
            rank = allocator.allocate(new_context, items, index)
        else:
            rank = next_rank(new_context, items, index)
        index, updates = _register_child(index, new_context, target.value, rank, now)
        target = _with_membership(target, ContextMembership(context=new_context, rank=rank), now)
        items = items.with_item(target)
        # Re-read in case value and the target are the same item
        item = items.get(value)
        sync_requests.append(SyncRequest(item=item, context_children_updates=updates))
        sync_requests.append(SyncRequest(item=target))
    else:
        if context:
            item = _with_membership(item, ContextMembership(context=context, rank=request.rank), now)
            items = items.with_item(item)
            index, updates = _register_child(index, context, value, request.rank, now)
        sync_requests.append(SyncRequest(item=item, context_children_updates=updates))

    new_state = GraphState(items=items, context_children=index, revision=state.revision + 1)

    logger.info(
        "item_submitted",
        value=value,
        context=list(context),
        add_as_context=request.add_as_context,
        revision=new_state.revision,
    )
    logger.debug("context_children_updated", keys=list(updates.keys()))

    return SubmitResult(state=new_state, sync_requests=tuple(sync_requests))
