"""OutlineSession: owns the graph state between mutations.

The session is the orchestration layer: it threads the state value through
submit_item(), swaps in the result under a lock, queues the sync requests
and drains them to the persistence collaborator once the new state is
visible.
"""

import threading
from typing import Optional, Sequence

from multicontext.graph import queries
from multicontext.graph.invariants import check_consistency
from multicontext.graph.mutations import SubmitRequest, SubmitResult, submit_item
from multicontext.graph.rank import RankAllocator
from multicontext.graph.redirect import ContextView, resolve_view
from multicontext.models.config import Config
from multicontext.models.item import ContextChild, ContextMembership, Rank
from multicontext.models.state import GraphState
from multicontext.services.sync import SyncQueue, SyncTarget
from multicontext.utils.logging import get_logger


logger = get_logger(__name__)


class OutlineSession:
    """Single-writer holder of a GraphState.

    Example:
        >>> session = OutlineSession()
        >>> session.submit("Cat", context=["Animal"], rank=0)
        >>> [c.key for c in session.children(["Animal"])]
        ['Cat']
    """

    def __init__(
        self,
        state: Optional[GraphState] = None,
        target: Optional[SyncTarget] = None,
        config: Optional[Config] = None,
    ):
        """
        Args:
            state: Initial state (empty if None)
            target: Persistence collaborator for drained sync requests
            config: Configuration (defaults if None)
        """
        self._state = state or GraphState.empty()
        self.target = target
        self.config = config or Config()
        self.queue = SyncQueue()
        self.allocator = RankAllocator()
        self._lock = threading.Lock()

    @property
    def state(self) -> GraphState:
        return self._state

    @property
    def revision(self) -> int:
        return self._state.revision

    @property
    def root(self) -> str:
        return self.config.outline.root_value

    def submit(
        self,
        value: str,
        context: Sequence[str] = (),
        add_as_context: bool = False,
        rank: Optional[Rank] = None,
    ) -> SubmitResult:
        """Submit an item and commit the new state.

        Args:
            value: Item value
            context: Context path to add it under
            add_as_context: Add value as a new context of signifier(context)
            rank: Sibling rank; allocated at the end of the context when None

        Returns:
            The SubmitResult that was committed

        Raises:
            NotFoundError: If add_as_context references a missing item
            InvariantViolationError: If verify_invariants is on and the indices disagree
        """
        with self._lock:
            state = self._state
            if rank is None:
                rank = (
                    self.allocator.allocate(context, state.items, state.context_children)
                    if context and not add_as_context
                    else 0
                )
            request = SubmitRequest(
                value=value, context=tuple(context), add_as_context=add_as_context, rank=rank
            )
            result = submit_item(state, request, allocator=self.allocator)
            if self.config.outline.verify_invariants:
                check_consistency(result.state)
            self._state = result.state
            self.queue.enqueue(result.sync_requests)

        if self.config.sync.auto_drain:
            self.drain()
        return result

    def drain(self) -> int:
        """Dispatch queued sync requests to the target.

        Returns:
            Number of requests dispatched successfully
        """
        return self.queue.drain(self.target)

    def children(self, path: Sequence[str]) -> tuple[ContextChild, ...]:
        return queries.children_of(self._state, path)

    def parents(self, path: Sequence[str]) -> tuple[ContextMembership, ...]:
        return queries.parents_of(self._state, path)

    def derived_children(self, path: Sequence[str]) -> list[tuple[str, ...]]:
        return queries.derived_children_of(self._state, path, self.root)

    def is_leaf(self, path: Sequence[str]) -> bool:
        return queries.is_leaf(self._state, path)

    def view(self, focus: Sequence[str], from_path: Optional[Sequence[str]] = None) -> ContextView:
        """Resolve a focus path under the configured redirect policy."""
        return resolve_view(
            self._state,
            focus,
            from_path,
            policy=self.config.outline.redirect_policy,
            root=self.root,
        )
