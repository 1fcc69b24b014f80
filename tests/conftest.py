"""Shared test fixtures for all test modules."""

from datetime import datetime, timezone

import pytest

from multicontext.graph.mutations import SubmitRequest, submit_item
from multicontext.models.state import GraphState


@pytest.fixture
def fixed_now():
    """A fixed timestamp so records can be compared exactly."""
    return datetime(2025, 1, 15, 12, 0, tzinfo=timezone.utc)


def submit(state, value, context=(), rank=0, add_as_context=False, now=None):
    """Submit one item and return the new state."""
    request = SubmitRequest(value=value, context=context, rank=rank, add_as_context=add_as_context)
    return submit_item(state, request, now=now).state


@pytest.fixture
def animal_state():
    """
    Small graph used across query tests:

        root -> Animal -> Cat, Dog
        Pet  -> Cat
        Cat  -> Whiskers (under Animal/Cat)
    """
    state = GraphState.empty()
    state = submit(state, "root")
    state = submit(state, "Animal", ["root"], rank=0)
    state = submit(state, "Pet", ["root"], rank=1)
    state = submit(state, "Cat", ["Animal"], rank=0)
    state = submit(state, "Dog", ["Animal"], rank=1)
    state = submit(state, "Cat", ["Pet"], rank=0)
    state = submit(state, "Whiskers", ["Animal", "Cat"], rank=0)
    return state


@pytest.fixture(name="submit")
def submit_fixture():
    """The submit() helper, for tests that build their own graphs."""
    return submit
