"""Consistency checks between the item store and the context children index."""

from collections import Counter

from multicontext.graph.path_codec import encode
from multicontext.models.state import GraphState
from multicontext.services.exceptions import InvariantViolationError


def find_inconsistencies(state: GraphState) -> list[str]:
    """List every disagreement between the two indices.

    Checks that
    - each item holds at most one membership per context path,
    - each membership {C, R} of item I has exactly one child {I, R} under encode(C),
    - each child {I, R} under a key is backed by a membership of I for that path.
    """
    problems: list[str] = []

    for item in state.items.records():
        counts = Counter(m.context for m in item.member_of)
        for context, count in counts.items():
            if count > 1:
                problems.append(f"{item.value!r} has {count} memberships for {list(context)}")

        for membership in item.member_of:
            key = encode(membership.context)
            matches = [
                c for c in state.context_children.entry(key)
                if c.key == item.value and c.rank == membership.rank
            ]
            if len(matches) != 1:
                problems.append(
                    f"{item.value!r} in {list(membership.context)} rank {membership.rank}: "
                    f"{len(matches)} matching children under {key!r}"
                )

    for key, children in state.context_children.items():
        keys = Counter(c.key for c in children)
        for value, count in keys.items():
            if count > 1:
                problems.append(f"{value!r} listed {count} times under {key!r}")

        for child in children:
            item = state.items.get(child.key)
            if item is None:
                problems.append(f"child {child.key!r} under {key!r} has no item record")
                continue
            backed = any(
                encode(m.context) == key and m.rank == child.rank for m in item.member_of
            )
            if not backed:
                problems.append(
                    f"child {child.key!r} rank {child.rank} under {key!r} has no matching membership"
                )

    return problems


def check_consistency(state: GraphState) -> None:
    """Raise InvariantViolationError if the two indices disagree."""
    problems = find_inconsistencies(state)
    if problems:
        raise InvariantViolationError(problems)
