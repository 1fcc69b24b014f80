"""Unit tests for graph queries."""

import pytest

from multicontext.graph import queries
from multicontext.services.exceptions import NotFoundError


class TestPathHelpers:
    """Tests for signifier, intersections and friends."""

    def test_signifier_is_last_element(self):
        """Test signifier() returns the item the path denotes."""
        assert queries.signifier(["Animal", "Cat"]) == "Cat"

    def test_signifier_of_empty_path_raises(self):
        """Test an empty path denotes nothing."""
        with pytest.raises(NotFoundError):
            queries.signifier([])

    def test_intersections(self):
        """Test intersections() drops the signifier."""
        assert queries.intersections(["Animal", "Cat"]) == ("Animal",)
        assert queries.has_intersections(["Animal", "Cat"])
        assert not queries.has_intersections(["Cat"])

    def test_is_root(self):
        """Test root detection uses the first element."""
        assert queries.is_root(["root", "Animal"])
        assert not queries.is_root(["Animal"])
        assert not queries.is_root([])
        assert queries.is_root(["home"], root="home")

    def test_subset(self):
        """Test subset() returns the prefix up to a value."""
        assert queries.subset(["a", "b", "c"], "b") == ("a", "b")


class TestParentsOf:
    """Tests for parents_of()."""

    def test_parents_of_returns_memberships(self, animal_state):
        """Test the memberships of the signifier are returned."""
        contexts = [m.context for m in queries.parents_of(animal_state, ["Animal", "Cat"])]
        assert contexts == [("Animal",), ("Pet",)]

    def test_parents_of_missing_item_raises(self, animal_state):
        """Test a missing signifier raises NotFoundError (a KeyError)."""
        with pytest.raises(NotFoundError, match='Unknown key: "Unicorn"'):
            queries.parents_of(animal_state, ["Animal", "Unicorn"])
        with pytest.raises(KeyError):
            queries.parents_of(animal_state, ["Unicorn"])


class TestChildrenOf:
    """Tests for children_of() and scan_children_of()."""

    def test_children_in_rank_order(self, animal_state):
        """Test direct children come back ordered by rank."""
        children = queries.children_of(animal_state, ["Animal"])
        assert [(c.key, c.rank) for c in children] == [("Cat", 0), ("Dog", 1)]

    def test_children_of_nested_path(self, animal_state):
        """Test children registered under a multi-element path."""
        assert queries.child_values(animal_state, ["Animal", "Cat"]) == ["Whiskers"]

    def test_children_are_path_specific(self, animal_state):
        """Test children under Animal/Cat are not children of Pet/Cat or Cat."""
        assert queries.children_of(animal_state, ["Pet", "Cat"]) == ()
        assert queries.children_of(animal_state, ["Cat"]) == ()

    def test_scan_agrees_with_index(self, animal_state):
        """Test the item-store scan finds the same children as the index."""
        for path in (["Animal"], ["Pet"], ["root"], ["Animal", "Cat"]):
            assert sorted(queries.scan_children_of(animal_state, path)) == sorted(
                queries.child_values(animal_state, path)
            )

    def test_has_children(self, animal_state):
        """Test has_children() on populated and empty paths."""
        assert queries.has_children(animal_state, ["Animal"])
        assert not queries.has_children(animal_state, ["Animal", "Dog"])


class TestDerivedChildrenOf:
    """Tests for derived_children_of()."""

    def test_other_contexts_are_derived(self, animal_state):
        """Test Pet/Cat is derived from Animal/Cat, but Animal/Cat itself is not."""
        derived = queries.derived_children_of(animal_state, ["Animal", "Cat"])
        assert ("Pet", "Cat") in derived
        assert ("Animal", "Cat") not in derived

    def test_bare_signifier_derives_every_context(self, animal_state):
        """Test one entry per non-root parent context, each ending in the signifier."""
        derived = queries.derived_children_of(animal_state, ["Cat"])
        parents = queries.parents_of(animal_state, ["Cat"])

        assert derived == [m.context + ("Cat",) for m in parents]
        assert len(derived) == 2

    def test_root_contexts_are_skipped(self, animal_state):
        """Test contexts starting at the root are not derived."""
        assert queries.derived_children_of(animal_state, ["Animal"]) == []

    def test_custom_root_value(self, animal_state):
        """Test the root value is configurable."""
        derived = queries.derived_children_of(animal_state, ["Animal"], root="home")
        assert derived == [("root", "Animal")]

    def test_has_derived_children(self, animal_state):
        """Test an item with several contexts has derived children."""
        assert queries.has_derived_children(animal_state, ["Cat"])
        assert not queries.has_derived_children(animal_state, ["Dog"])


class TestIsLeaf:
    """Tests for is_leaf()."""

    def test_item_without_children_is_leaf(self, animal_state):
        """Test an item with no children anywhere is a leaf."""
        assert queries.is_leaf(animal_state, ["Animal", "Dog"])
        assert queries.is_leaf(animal_state, ["Animal", "Cat", "Whiskers"])

    def test_item_with_children_is_not_leaf(self, animal_state):
        """Test direct children make a path non-leaf."""
        assert not queries.is_leaf(animal_state, ["Animal", "Cat"])

    def test_item_with_other_contexts_is_not_leaf(self, animal_state):
        """Test derived children make a path non-leaf."""
        assert not queries.is_leaf(animal_state, ["Pet", "Cat"])

    def test_adding_child_flips_leaf(self, animal_state, submit):
        """Test a child under the path itself flips is_leaf to False."""
        state = submit(animal_state, "Rex", ["Animal", "Dog"], rank=0)
        assert not queries.is_leaf(state, ["Animal", "Dog"])

    def test_children_of_bare_signifier_flip_leaf(self, animal_state, submit):
        """Test children reachable only through the bare signifier count too."""
        state = submit(animal_state, "Fido", ["Dog"], rank=0)
        assert queries.children_of(state, ["Animal", "Dog"]) == ()
        assert not queries.is_leaf(state, ["Animal", "Dog"])


class TestDisplaySorting:
    """Tests for presentation ordering."""

    def test_sort_key_strips_decorations(self):
        """Test case, whitespace and leading emoji are ignored."""
        assert queries.display_sort_key("🐈 Cat") == "cat"
        assert queries.display_sort_key("  Cat ") == "cat"
        assert queries.display_sort_key("❤️ Love") == "love"

    def test_sort_by_display(self):
        """Test values sort by their display key."""
        assert queries.sort_by_display(["dog", "🐈 Cat", "  ant"]) == ["  ant", "🐈 Cat", "dog"]

    def test_sort_paths_by_display(self):
        """Test paths sort element by element."""
        paths = [("Pet", "Cat"), ("animal", "Cat")]
        assert queries.sort_paths_by_display(paths) == [("animal", "Cat"), ("Pet", "Cat")]

    def test_sort_to_front(self):
        """Test a path moves to the front and the rest keep their order."""
        paths = [("a", "x"), ("b", "x"), ("c", "x")]
        assert queries.sort_to_front(("b", "x"), paths) == [("b", "x"), ("a", "x"), ("c", "x")]

    def test_sort_to_front_missing_raises(self):
        """Test moving an absent path raises NotFoundError."""
        with pytest.raises(NotFoundError):
            queries.sort_to_front(("z", "x"), [("a", "x")])
