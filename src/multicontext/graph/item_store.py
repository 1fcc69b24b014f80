"""Forward index: item value -> Item record."""

from datetime import datetime
from typing import Any, Iterable, Iterator, Mapping, Optional

from multicontext.models.item import Item, timestamp


class ItemStore:
    """Copy-on-write map from item value to its record.

    Every write returns a new store; the receiver is never modified, so a
    state holding a store can be shared freely. No index maintenance happens
    here.

    Example:
        >>> store = ItemStore().upsert("Cat")
        >>> store.exists("Cat")
        True
    """

    def __init__(self, items: Optional[Mapping[str, Item]] = None):
        self._items: dict[str, Item] = dict(items or {})

    @classmethod
    def from_items(cls, items: Iterable[Item]) -> "ItemStore":
        return cls({item.value: item for item in items})

    def get(self, value: str) -> Optional[Item]:
        """Return the record for a value, or None."""
        return self._items.get(value)

    def exists(self, value: str) -> bool:
        """Report whether a defined record exists for a value."""
        return self._items.get(value) is not None

    def upsert(self, value: str, now: Optional[datetime] = None, **patch: Any) -> "ItemStore":
        """Merge fields into an item, creating it when missing.

        New items start with no memberships and ``created`` set to now.

        Args:
            value: Item value (identity)
            now: Timestamp for a newly created item (defaults to current time)
            **patch: Item fields to overwrite (e.g. member_of, last_updated)

        Returns:
            New store containing the updated record
        """
        existing = self._items.get(value)
        if existing is None:
            created = now or timestamp()
            fields = {"member_of": (), "created": created, "last_updated": created}
            fields.update(patch)
            item = Item(value=value, **fields)
        else:
            item = existing.model_copy(update=patch)
        return self.with_item(item)

    def with_item(self, item: Item) -> "ItemStore":
        """Return a new store with one record replaced."""
        items = dict(self._items)
        items[item.value] = item
        return ItemStore(items)

    def values(self) -> list[str]:
        return list(self._items.keys())

    def records(self) -> list[Item]:
        return list(self._items.values())

    def as_dict(self) -> dict[str, Item]:
        return dict(self._items)

    def __contains__(self, value: object) -> bool:
        return value in self._items

    def __iter__(self) -> Iterator[str]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ItemStore):
            return NotImplemented
        return self._items == other._items

    def __repr__(self) -> str:
        return f"ItemStore({len(self._items)} items)"
