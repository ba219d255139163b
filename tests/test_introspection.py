"""Tests for instance_of, type_of and ancestry queries."""

import pytest

from traitkit.registry import Registry


@pytest.fixture
def registry():
    """Create a registry with a small hierarchy."""
    registry = Registry()
    registry.declare_class("Base")
    registry.declare_trait("Inner")
    registry.declare_trait("TraitX", extends=["Inner"])
    registry.declare_trait("TraitY")
    registry.declare_class("Derived", "Base", extends=["TraitX", "TraitY"])
    registry.declare_class("Unrelated")
    return registry


class TestInstanceOf:
    """Tests for instance_of."""

    def test_own_class(self, registry):
        obj = registry.instantiate("Derived")
        assert registry.instance_of(obj, "Derived") is True

    def test_super_class(self, registry):
        obj = registry.instantiate("Derived")
        assert registry.instance_of(obj, "Base") is True

    def test_traits(self, registry):
        """Test that mixed-in traits, direct or nested, count as ancestry."""
        obj = registry.instantiate("Derived")
        assert registry.instance_of(obj, "TraitY") is True
        assert registry.instance_of(obj, "Inner") is True

    def test_unrelated(self, registry):
        obj = registry.instantiate("Derived")
        assert registry.instance_of(obj, "Unrelated") is False
        assert registry.instance_of(registry.instantiate("Base"), "Derived") is False

    def test_handle_target(self, registry):
        obj = registry.instantiate("Derived")
        assert registry.instance_of(obj, registry.lookup("Base")) is True

    def test_untagged_values(self, registry):
        assert registry.instance_of({"name": "Base"}, "Base") is False
        assert registry.instance_of(None, "Base") is False

    def test_cycle_does_not_loop(self, registry):
        registry.record("TraitY").supers.append("Derived")
        obj = registry.instantiate("Base")
        registry.record("Base").supers.append("TraitY")
        assert registry.instance_of(obj, "Unrelated") is False


class TestTypeQueries:
    """Tests for type_of, is_valid and ancestry listings."""

    def test_type_of(self, registry):
        assert registry.type_of(registry.instantiate("Derived")) == "Derived"
        assert registry.type_of("Derived") is None

    def test_is_valid_other_values(self, registry):
        assert registry.is_valid(object()) is False

    def test_is_subclass_of(self, registry):
        assert registry.is_subclass_of("Derived", "Inner") is True
        assert registry.is_subclass_of("Base", "Derived") is False

    def test_ancestors(self, registry):
        """Test that ancestors are listed depth-first in extension order."""
        assert registry.ancestors("Derived") == ["Base", "TraitX", "Inner", "TraitY"]
        assert registry.ancestors("Base") == []

    def test_subclasses_of(self, registry):
        assert registry.subclasses_of("Inner") == ["TraitX"]
        assert registry.subclasses_of("Missing") == []
