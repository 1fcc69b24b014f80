"""Reverse index: encoded context path -> ordered children.

The index is a derived, cached inverse of the memberships stored on items.
It is only ever written through the mutation protocol (or rebuilt wholesale
from an item store), never edited on its own.
"""

from typing import Iterable, Mapping, Optional, Sequence

from multicontext.graph.path_codec import encode
from multicontext.models.item import ContextChild, Item


def _rank_sorted(children: Iterable[ContextChild]) -> tuple[ContextChild, ...]:
    # sorted() is stable, so equal ranks keep insertion order
    return tuple(sorted(children, key=lambda child: child.rank))


class ContextChildrenIndex:
    """Copy-on-write map from encoded context path to rank-ordered children."""

    def __init__(self, entries: Optional[Mapping[str, Iterable[ContextChild]]] = None):
        self._entries: dict[str, tuple[ContextChild, ...]] = {
            key: _rank_sorted(children) for key, children in (entries or {}).items()
        }

    def children_of(self, path: Sequence[str]) -> tuple[ContextChild, ...]:
        """Children registered under a path, ordered by rank (empty if none)."""
        return self.entry(encode(path))

    def entry(self, encoded: str) -> tuple[ContextChild, ...]:
        """Children registered under an already-encoded key."""
        return self._entries.get(encoded, ())

    def upsert_child(self, path: Sequence[str], child: ContextChild) -> "ContextChildrenIndex":
        """Register a child under a path.

        Any existing entry with the same key is replaced, so an item appears
        at most once per context; the new entry is placed by rank.

        Returns:
            New index containing the updated entry
        """
        encoded = encode(path)
        children = [c for c in self.entry(encoded) if c.key != child.key]
        children.append(child)
        return self.with_entries({encoded: children})

    def with_entries(self, updates: Mapping[str, Iterable[ContextChild]]) -> "ContextChildrenIndex":
        """Return a new index with whole entries replaced."""
        entries = dict(self._entries)
        for key, children in updates.items():
            entries[key] = _rank_sorted(children)
        return ContextChildrenIndex(entries)

    def keys(self) -> list[str]:
        return list(self._entries.keys())

    def items(self) -> list[tuple[str, tuple[ContextChild, ...]]]:
        return list(self._entries.items())

    def __contains__(self, encoded: object) -> bool:
        return encoded in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ContextChildrenIndex):
            return NotImplemented
        return self._entries == other._entries

    def __repr__(self) -> str:
        return f"ContextChildrenIndex({len(self._entries)} contexts)"


def rebuild_context_index(items: Iterable[Item]) -> ContextChildrenIndex:
    """Derive the whole reverse index from item memberships.

    Used when a store persisted only its items, and by the consistency
    checker to compare against the incrementally maintained index.
    """
    entries: dict[str, list[ContextChild]] = {}
    for item in items:
        for membership in item.member_of:
            entries.setdefault(encode(membership.context), []).append(
                ContextChild(
                    key=item.value,
                    rank=membership.rank,
                    created=item.created,
                    last_updated=item.last_updated,
                )
            )
    return ContextChildrenIndex(entries)
