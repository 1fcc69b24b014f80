"""Read-only queries over the membership graph.

These answer "what does this path look like": its parents, its direct
children, the derived children it picks up from its other contexts, and
whether it is a leaf. None of them modify the state.
"""

import unicodedata
from typing import Iterable, Sequence

from multicontext.models.item import ContextChild, ContextMembership
from multicontext.models.state import GraphState
from multicontext.services.exceptions import NotFoundError


ROOT = "root"

Path = tuple[str, ...]


def signifier(path: Sequence[str]) -> str:
    """The item a path denotes: its last element."""
    if not path:
        raise NotFoundError(None, path)
    return path[-1]


def intersections(path: Sequence[str]) -> Path:
    """The path without its signifier."""
    return tuple(path[:-1])


def has_intersections(path: Sequence[str]) -> bool:
    return len(path) > 1


def is_root(path: Sequence[str], root: str = ROOT) -> bool:
    return len(path) > 0 and path[0] == root


def subset(path: Sequence[str], value: str) -> Path:
    """Prefix of a path up to and including the first occurrence of value."""
    return tuple(path[: list(path).index(value) + 1])


def exists(state: GraphState, path: Sequence[str]) -> bool:
    """True if the signifier of a path has a record."""
    return len(path) > 0 and state.items.exists(signifier(path))


def parents_of(state: GraphState, path: Sequence[str]) -> tuple[ContextMembership, ...]:
    """Memberships of the item a path denotes.

    Raises:
        NotFoundError: If the signifier is not in the item store
    """
    item = state.items.get(signifier(path))
    if item is None:
        raise NotFoundError(signifier(path), path)
    return item.member_of


def children_of(state: GraphState, path: Sequence[str]) -> tuple[ContextChild, ...]:
    """Direct children of a path from the reverse index, in rank order."""
    return state.context_children.children_of(tuple(path))


def child_values(state: GraphState, path: Sequence[str]) -> list[str]:
    return [child.key for child in children_of(state, path)]


def has_children(state: GraphState, path: Sequence[str]) -> bool:
    return len(children_of(state, path)) > 0


def scan_children_of(state: GraphState, path: Sequence[str]) -> list[str]:
    """Values whose memberships contain exactly this path.

    Reads only the item store, so it gives the same answer as children_of()
    without relying on the reverse index.
    """
    path = tuple(path)
    return [
        item.value
        for item in state.items.records()
        if any(membership.context == path for membership in item.member_of)
    ]


def derived_children_of(state: GraphState, path: Sequence[str], root: str = ROOT) -> list[Path]:
    """The signifier as seen from each of its other non-root parent contexts.

    For every parent context P of signifier(path) that does not start at the
    root, returns P + (signifier,). This lets one item act as a heading in
    several unrelated trees at once. The context the path itself is viewed
    from (its intersections) is left out; pass the bare signifier path to
    get every context.

    Raises:
        NotFoundError: If the signifier is not in the item store
    """
    value = signifier(path)
    here = intersections(path)
    return [
        membership.context + (value,)
        for membership in parents_of(state, path)
        if not is_root(membership.context, root) and membership.context != here
    ]


def has_derived_children(state: GraphState, path: Sequence[str]) -> bool:
    return len(parents_of(state, path)) > 1


def is_leaf(state: GraphState, path: Sequence[str]) -> bool:
    """True if a path has no children, no derived children, and no children
    when its signifier is viewed as a top-level context.

    The last check matters for items whose only children would be reached
    through a redirect to the bare signifier.
    """
    return (
        not has_children(state, path)
        and not has_derived_children(state, path)
        and not has_children(state, (signifier(path),))
    )


def display_sort_key(text: str) -> str:
    """Case-folded display text with leading decorative glyphs removed.

    Symbols (including emoji), joiners, variation selectors and whitespace
    at the start of the text are ignored, so "🐈 cat" sorts next to "Cat".
    """
    text = str(text)
    start = 0
    while start < len(text):
        category = unicodedata.category(text[start])
        if category[0] in ("S", "Z") or category in ("Cf", "Mn", "Me", "Cc"):
            start += 1
        else:
            break
    return text[start:].strip().casefold()


def sort_by_display(values: Iterable[str]) -> list[str]:
    return sorted(values, key=display_sort_key)


def sort_paths_by_display(paths: Iterable[Sequence[str]]) -> list[Path]:
    return sorted((tuple(p) for p in paths), key=lambda p: [display_sort_key(v) for v in p])


def sort_to_front(path: Sequence[str], paths: Sequence[Sequence[str]]) -> list[Path]:
    """Move one path to the front of a list, keeping the others in order.

    Raises:
        NotFoundError: If the path is not in the list
    """
    path = tuple(path)
    candidates = [tuple(p) for p in paths]
    if path not in candidates:
        raise NotFoundError(signifier(path) if path else None, path)
    i = candidates.index(path)
    return [path] + candidates[:i] + candidates[i + 1:]
