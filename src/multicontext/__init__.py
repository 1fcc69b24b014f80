"""multicontext - data engine for a multicontext outliner.

An item may belong to several parent contexts at once, so the outline is a
graph rather than a tree. The engine keeps two indices in step:

- the item store (value -> Item, with every context membership)
- the context children index (encoded path -> rank-ordered children)

Example:
    >>> from multicontext import GraphState, SubmitRequest, submit_item, children_of
    >>> result = submit_item(GraphState.empty(), SubmitRequest(value="Cat", context=["Animal"]))
    >>> [child.key for child in children_of(result.state, ["Animal"])]
    ['Cat']
"""

from multicontext.graph.path_codec import decode, encode
from multicontext.graph.rank import RankAllocator, next_rank
from multicontext.graph.item_store import ItemStore
from multicontext.graph.context_index import ContextChildrenIndex, rebuild_context_index
from multicontext.graph.queries import (
    children_of,
    derived_children_of,
    is_leaf,
    parents_of,
    signifier,
)
from multicontext.graph.redirect import ContextView, RedirectPolicy, resolve_view
from multicontext.graph.mutations import SubmitRequest, SubmitResult, SyncRequest, submit_item
from multicontext.graph.invariants import check_consistency
from multicontext.models.item import ContextChild, ContextMembership, Item
from multicontext.models.state import GraphState
from multicontext.services.exceptions import (
    EmptyContextError,
    InvariantViolationError,
    NotFoundError,
)

__version__ = "0.1.0"

__all__ = [
    "ContextChild",
    "ContextChildrenIndex",
    "ContextMembership",
    "ContextView",
    "EmptyContextError",
    "GraphState",
    "InvariantViolationError",
    "Item",
    "ItemStore",
    "NotFoundError",
    "RankAllocator",
    "RedirectPolicy",
    "SubmitRequest",
    "SubmitResult",
    "SyncRequest",
    "check_consistency",
    "children_of",
    "decode",
    "derived_children_of",
    "encode",
    "is_leaf",
    "next_rank",
    "parents_of",
    "rebuild_context_index",
    "resolve_view",
    "signifier",
    "submit_item",
]
