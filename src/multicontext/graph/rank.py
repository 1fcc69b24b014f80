"""Rank allocation for new children of a context.

Ranks are integers that grow by one past the largest rank in use, so a new
sibling is always appended after the existing ones and nothing has to be
renumbered.
"""

from typing import Optional, Sequence

from multicontext.graph.context_index import ContextChildrenIndex
from multicontext.graph.item_store import ItemStore
from multicontext.graph.path_codec import encode
from multicontext.models.item import Rank
from multicontext.utils.logging import get_logger


logger = get_logger(__name__)


def max_rank(
    context: Sequence[str],
    items: ItemStore,
    context_children: ContextChildrenIndex,
) -> Optional[Rank]:
    """Largest rank currently used under a context, or None when it is empty.

    Both indices are consulted so a rank stays unique even if one of them
    lags behind (e.g. a store loaded without its children file).
    """
    context = tuple(context)
    ranks = [child.rank for child in context_children.children_of(context)]
    for value in items:
        membership = items.get(value).membership_for(context)
        if membership is not None:
            ranks.append(membership.rank)
    return max(ranks) if ranks else None


def next_rank(
    context: Sequence[str],
    items: ItemStore,
    context_children: ContextChildrenIndex,
) -> int:
    """Rank that sorts after every existing sibling in a context.

    Args:
        context: Path the new child will be inserted under
        items: Item store
        context_children: Context children index

    Returns:
        0 for an empty context, otherwise one past the current maximum
    """
    current = max_rank(context, items, context_children)
    if current is None:
        return 0
    return int(current) + 1


class RankAllocator:
    """Allocates ranks, remembering what it already handed out.

    next_rank() alone returns the same value twice if nothing is inserted
    between two calls. The allocator keeps a high-water mark per encoded
    context so consecutive allocations are strictly increasing.
    """

    def __init__(self) -> None:
        self._issued: dict[str, int] = {}

    def allocate(
        self,
        context: Sequence[str],
        items: ItemStore,
        context_children: ContextChildrenIndex,
    ) -> int:
        encoded = encode(context)
        rank = next_rank(context, items, context_children)
        issued = self._issued.get(encoded)
        if issued is not None and rank <= issued:
            rank = issued + 1
        self._issued[encoded] = rank
        logger.debug("rank_allocated", context=list(context), rank=rank)
        return rank

    def last_issued(self, context: Sequence[str]) -> Optional[int]:
        return self._issued.get(encode(context))
