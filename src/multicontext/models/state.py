"""GraphState: the value threaded through every mutation."""

from dataclasses import dataclass, field, replace
from typing import Iterable

from multicontext.graph.context_index import ContextChildrenIndex, rebuild_context_index
from multicontext.graph.item_store import ItemStore
from multicontext.models.item import Item


@dataclass(frozen=True)
class GraphState:
    """Item store and context children index, plus a revision counter.

    Attributes:
        items: Forward index (value -> Item)
        context_children: Reverse index (encoded path -> ordered children)
        revision: Incremented by every successful mutation so observers
                  can tell a re-read is needed
    """

    items: ItemStore = field(default_factory=ItemStore)
    context_children: ContextChildrenIndex = field(default_factory=ContextChildrenIndex)
    revision: int = 0

    @classmethod
    def empty(cls) -> "GraphState":
        return cls()

    @classmethod
    def from_items(cls, items: Iterable[Item], revision: int = 0) -> "GraphState":
        """Build a state from item records, deriving the reverse index."""
        store = ItemStore.from_items(items)
        return cls(
            items=store,
            context_children=rebuild_context_index(store.records()),
            revision=revision,
        )

    def evolve(self, **changes) -> "GraphState":
        return replace(self, **changes)
