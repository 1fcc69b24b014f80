"""Post-commit queue for the persistence collaborator.

The mutation protocol never calls persistence itself. Sync requests are
queued once the new state is committed and dispatched by drain(), after
the caller has had a chance to observe the new state. Requests reach the
target one at a time in the order they were queued, even when several
threads drain at once. Dispatch is fire-and-forget: a failure is logged
and dropped. It is not retried and does not roll back the in-memory graph.
"""

import threading
from collections import deque
from typing import Iterable, Mapping, Protocol, Sequence

from multicontext.graph.mutations import SyncRequest
from multicontext.models.item import ContextChild, Item
from multicontext.utils.logging import get_logger


logger = get_logger(__name__)


class SyncTarget(Protocol):
    """Anything that can durably store an item and its changed child lists."""

    def sync_item(
        self,
        item: Item,
        context_children_updates: Mapping[str, Sequence[ContextChild]],
    ) -> None:
        ...


class SyncQueue:
    """FIFO of sync requests waiting to be dispatched."""

    def __init__(self) -> None:
        self._pending: deque[SyncRequest] = deque()
        self._dispatch_lock = threading.Lock()

    def enqueue(self, requests: Iterable[SyncRequest]) -> None:
        self._pending.extend(requests)

    @property
    def pending(self) -> list[SyncRequest]:
        return list(self._pending)

    def __len__(self) -> int:
        return len(self._pending)

    def drain(self, target: SyncTarget | None) -> int:
        """Dispatch every queued request to the target.

        Args:
            target: Persistence collaborator; None discards the queue

        Returns:
            Number of requests dispatched successfully
        """
        dispatched = 0
        # Held across pop and dispatch so an older payload never lands last
        with self._dispatch_lock:
            while True:
                try:
                    request = self._pending.popleft()
                except IndexError:
                    break
                if target is None:
                    continue
                try:
                    target.sync_item(request.item, request.context_children_updates)
                except Exception as e:
                    logger.error(
                        "sync_failed",
                        value=request.item.value,
                        contexts=list(request.context_children_updates.keys()),
                        error=str(e),
                    )
                    continue
                dispatched += 1
                logger.debug(
                    "sync_dispatched",
                    value=request.item.value,
                    contexts=list(request.context_children_updates.keys()),
                )
        return dispatched
