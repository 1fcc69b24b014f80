"""JSON-file persistence for the item store and context children index.

Two files live in the data directory:

    items.json             {"Cat": {"value": "Cat", "memberOf": [...], ...}, ...}
    context_children.json  {"/Animal": [{"key": "Cat", "rank": 0, ...}], ...}

JsonGraphStore is a SyncTarget: the session drains its queued sync
requests into it after each submit.
"""

import json
import os
import threading
from pathlib import Path
from typing import Any, Mapping, Sequence

import yaml
from pydantic import ValidationError

from multicontext.graph.context_index import ContextChildrenIndex
from multicontext.graph.item_store import ItemStore
from multicontext.graph.path_codec import encode
from multicontext.models.item import ContextChild, ContextMembership, Item, timestamp
from multicontext.models.state import GraphState
from multicontext.services.exceptions import StoreCorruptedError
from multicontext.utils.logging import get_logger


logger = get_logger(__name__)

ITEMS_FILE = "items.json"
CONTEXT_CHILDREN_FILE = "context_children.json"


def _write_json_atomic(path: Path, data: Any) -> None:
    """Write JSON through a temp file and rename it over the target.

    Raises:
        OSError: If the file cannot be written
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    # Same directory as the target so the rename stays on one filesystem
    temp_path = path.parent / f".{path.name}.tmp.{os.getpid()}"
    try:
        content = json.dumps(data, indent=2, sort_keys=True, ensure_ascii=False)
        with open(temp_path, "w", encoding="utf-8") as f:
            f.write(content)
            f.flush()
            os.fsync(f.fileno())
        temp_path.replace(path)
    except Exception as e:
        if temp_path.exists():
            temp_path.unlink()
        raise OSError(f"Failed to save {path.name}: {e}") from e


def _read_json(path: Path) -> dict:
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise StoreCorruptedError(str(path), f"Malformed store file ({e})") from e
    if not isinstance(data, dict):
        raise StoreCorruptedError(str(path), "Store file must contain a JSON object")
    return data


class JsonGraphStore:
    """Durable copy of the graph as two JSON maps.

    Attributes:
        data_dir: Directory holding items.json and context_children.json
    """

    def __init__(self, data_dir: Path):
        self.data_dir = Path(data_dir).expanduser()
        self._items: dict[str, dict] = {}
        self._context_children: dict[str, list[dict]] = {}
        self._loaded = False
        self._lock = threading.Lock()

    @property
    def items_path(self) -> Path:
        return self.data_dir / ITEMS_FILE

    @property
    def context_children_path(self) -> Path:
        return self.data_dir / CONTEXT_CHILDREN_FILE

    def load(self) -> GraphState:
        """Load the stored graph.

        Returns:
            GraphState (empty if nothing has been stored yet). When only
            items.json exists, the children index is rebuilt from memberships.

        Raises:
            StoreCorruptedError: If a file is malformed or fails validation
        """
        self._items = _read_json(self.items_path) if self.items_path.exists() else {}
        self._context_children = (
            _read_json(self.context_children_path)
            if self.context_children_path.exists()
            else {}
        )
        self._loaded = True

        for key, children in self._context_children.items():
            if not isinstance(children, list):
                raise StoreCorruptedError(
                    str(self.context_children_path), f"Children of {key!r} must be a list"
                )

        try:
            records = [Item.model_validate(data) for data in self._items.values()]
            if not self.context_children_path.exists():
                state = GraphState.from_items(records)
            else:
                index = ContextChildrenIndex({
                    key: [ContextChild.model_validate(c) for c in children]
                    for key, children in self._context_children.items()
                })
                state = GraphState(items=ItemStore.from_items(records), context_children=index)
        except ValidationError as e:
            raise StoreCorruptedError(str(self.data_dir), f"Invalid record ({e})") from e

        logger.info(
            "store_loaded",
            data_dir=str(self.data_dir),
            items=len(state.items),
            contexts=len(state.context_children),
        )
        return state

    def save(self, state: GraphState) -> None:
        """Write a whole state, replacing what is stored."""
        with self._lock:
            self._items = {
                value: item.model_dump(mode="json", by_alias=True)
                for value, item in state.items.as_dict().items()
            }
            self._context_children = {
                key: [c.model_dump(mode="json", by_alias=True) for c in children]
                for key, children in state.context_children.items()
            }
            self._loaded = True
            self._flush()
        logger.info("store_saved", data_dir=str(self.data_dir), items=len(self._items))

    def sync_item(
        self,
        item: Item,
        context_children_updates: Mapping[str, Sequence[ContextChild]],
    ) -> None:
        """Persist one item and the child lists that changed with it."""
        with self._lock:
            if not self._loaded:
                self.load()
            self._items[item.value] = item.model_dump(mode="json", by_alias=True)
            for key, children in context_children_updates.items():
                self._context_children[key] = [
                    c.model_dump(mode="json", by_alias=True) for c in children
                ]
            self._flush()

    def _flush(self) -> None:
        _write_json_atomic(self.items_path, self._items)
        _write_json_atomic(self.context_children_path, self._context_children)


def load_seed(path: Path) -> GraphState:
    """Build a state from a seed file mapping each value to its contexts.

    The file is YAML (JSON also parses as YAML)::

        Cat:
          - [Animal]
          - [Pet]
        Animal:
          - [root]

    Values listed only as contexts are created without memberships. Within
    each context, ranks follow the order entries appear in the file.

    Raises:
        StoreCorruptedError: If the file is not a mapping of value -> list of paths
    """
    path = Path(path)
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise StoreCorruptedError(str(path), f"Malformed seed file ({e})") from e
    if not isinstance(data, dict):
        raise StoreCorruptedError(str(path), "Seed file must map values to context lists")

    now = timestamp()
    next_ranks: dict[str, int] = {}
    memberships: dict[str, list[ContextMembership]] = {}

    for value, contexts in data.items():
        value = str(value)
        memberships.setdefault(value, [])
        if contexts is None:
            continue
        if not isinstance(contexts, list):
            raise StoreCorruptedError(str(path), f"Contexts of {value!r} must be a list")
        for context in contexts:
            if not isinstance(context, list):
                raise StoreCorruptedError(str(path), f"Context of {value!r} must be a list")
            context = tuple(str(v) for v in context)
            if any(m.context == context for m in memberships[value]):
                continue
            key = encode(context)
            rank = next_ranks.get(key, 0)
            next_ranks[key] = rank + 1
            memberships[value].append(ContextMembership(context=context, rank=rank))
            for context_value in context:
                memberships.setdefault(context_value, [])

    records = [
        Item(value=value, member_of=tuple(members), created=now, last_updated=now)
        for value, members in memberships.items()
    ]
    logger.info("seed_loaded", path=str(path), items=len(records))
    return GraphState.from_items(records)
