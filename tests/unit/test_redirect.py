"""Unit tests for subheading selection and the empty-context redirect."""

import pytest

from multicontext.graph.redirect import (
    RedirectPolicy,
    is_empty_subheadings,
    resolve_view,
    subheadings_for,
)
from multicontext.services.exceptions import EmptyContextError, NotFoundError


class TestSubheadingsFor:
    """Tests for subheadings_for()."""

    def test_focus_with_children_is_its_own_subheading(self, animal_state):
        """Test direct children short-circuit derived contexts."""
        assert subheadings_for(animal_state, ["Animal"]) == [("Animal",)]
        assert subheadings_for(animal_state, ["Animal", "Cat"]) == [("Animal", "Cat")]

    def test_derived_subheadings_sorted_by_display(self, animal_state):
        """Test every context of the signifier is listed, sorted."""
        assert subheadings_for(animal_state, ["Pet", "Cat"]) == [("Animal", "Cat"), ("Pet", "Cat")]

    def test_breadcrumb_moves_to_front(self, animal_state):
        """Test from_path + focus is listed first."""
        result = subheadings_for(animal_state, ["Cat"], from_path=["Pet"])
        assert result == [("Pet", "Cat"), ("Animal", "Cat")]

    def test_unknown_breadcrumb_raises(self, animal_state):
        """Test a breadcrumb that is not a context of the focus raises."""
        with pytest.raises(NotFoundError):
            subheadings_for(animal_state, ["Cat"], from_path=["Plant"])


class TestResolveView:
    """Tests for resolve_view() under each policy."""

    def test_populated_focus_is_not_redirected(self, animal_state):
        """Test a focus with children renders directly."""
        view = resolve_view(animal_state, ["Animal"])
        assert view.direct
        assert view.subheadings == (("Animal",),)
        assert view.redirect_to is None

    def test_single_empty_subheading_redirects(self, animal_state):
        """Test the default policy redirects to the bare signifier."""
        view = resolve_view(animal_state, ["Animal", "Dog"])
        assert not view.direct
        assert view.subheadings == (("Animal", "Dog"),)
        assert view.redirect_to == ("Dog",)

    def test_empty_subheading_detection_is_exposed(self, animal_state):
        """Test callers can detect the dead end themselves."""
        subheadings = subheadings_for(animal_state, ["Animal", "Dog"])
        assert is_empty_subheadings(animal_state, ["Animal", "Dog"], subheadings)

    def test_ignore_policy_keeps_empty_branch(self, animal_state):
        """Test the ignore policy returns the empty subheading as-is."""
        view = resolve_view(animal_state, ["Animal", "Dog"], policy=RedirectPolicy.IGNORE)
        assert view.redirect_to is None
        assert view.subheadings == (("Animal", "Dog"),)

    def test_error_policy_raises(self, animal_state):
        """Test the error policy raises with the redirect target attached."""
        with pytest.raises(EmptyContextError) as exc_info:
            resolve_view(animal_state, ["Animal", "Dog"], policy="error")
        assert exc_info.value.redirect_to == ("Dog",)

    def test_top_level_focus_never_redirects(self, animal_state):
        """Test a path without intersections is never treated as a dead end."""
        view = resolve_view(animal_state, ["Dog"])
        assert view.redirect_to is None

    def test_multiple_contexts_are_not_a_dead_end(self, animal_state):
        """Test a focus with several derived subheadings renders them."""
        view = resolve_view(animal_state, ["Pet", "Cat"])
        assert view.redirect_to is None
        assert len(view.subheadings) == 2

    def test_view_does_not_touch_state(self, animal_state):
        """Test resolving a redirect leaves the indices alone."""
        revision = animal_state.revision
        resolve_view(animal_state, ["Animal", "Dog"])
        assert animal_state.revision == revision
        assert animal_state.context_children.children_of(["Dog"]) == ()
