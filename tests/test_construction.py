"""Tests for construction chains and instantiation."""

import pytest

from traitkit.chains import construction_chain
from traitkit.errors import CircularInheritanceError, UnknownClassError
from traitkit.instance import Instance
from traitkit.registry import Registry
from traitkit.types import NO_CHAIN


@pytest.fixture
def registry():
    """Create a fresh registry."""
    return Registry()


def logging_constructor(log, label):
    """Build a zero-argument constructor that appends ``label`` to ``log``."""

    def init(self):
        log.append(label)

    return init


@pytest.fixture
def log():
    return []


@pytest.fixture
def hierarchy(registry, log):
    """Base class, two traits and a class combining them."""
    registry.declare_class("Base").init(logging_constructor(log, "Base"))
    registry.declare_trait("TraitX").init(logging_constructor(log, "X"))
    registry.declare_trait("TraitY").init(logging_constructor(log, "Y"))
    derived = registry.declare_class("Derived", "Base", extends=["TraitX", "TraitY"])
    derived.init(logging_constructor(log, "Derived"))
    return registry


class TestConstructionOrder:
    """Tests for the order constructors run in."""

    def test_base_traits_then_self(self, hierarchy, log):
        """Test that the super runs first, then traits in order, then the class."""
        obj = hierarchy.instantiate("Derived")
        assert isinstance(obj, Instance)
        assert log == ["Base", "X", "Y", "Derived"]

    def test_no_supers(self, registry, log):
        registry.declare_class("Solo").init(logging_constructor(log, "Solo"))
        registry.instantiate("Solo")
        assert log == ["Solo"]

    def test_trait_supers_are_flattened(self, registry, log):
        """Test that a trait's own traits run before it, depth-first."""
        registry.declare_class("Base").init(logging_constructor(log, "Base"))
        registry.declare_trait("Inner").init(logging_constructor(log, "Inner"))
        registry.declare_trait("Outer", extends=["Inner"]).init(logging_constructor(log, "Outer"))
        registry.declare_trait("Other").init(logging_constructor(log, "Other"))
        registry.declare_class("Derived", "Base", extends=["Outer", "Other"])
        registry.instantiate("Derived")
        assert log == ["Base", "Inner", "Outer", "Other"]

    def test_shared_trait_runs_once(self, registry, log):
        registry.declare_trait("Shared").init(logging_constructor(log, "Shared"))
        registry.declare_class("Base", extends=["Shared"]).init(logging_constructor(log, "Base"))
        registry.declare_trait("Extra", extends=["Shared"])
        registry.declare_class("Derived", "Base", extends=["Extra"])
        registry.instantiate("Derived")
        assert log == ["Shared", "Base"]

    def test_multi_level_classes(self, registry, log):
        registry.declare_class("A").init(logging_constructor(log, "A"))
        registry.declare_class("B", "A").init(logging_constructor(log, "B"))
        registry.declare_class("C", "B").init(logging_constructor(log, "C"))
        registry.instantiate("C")
        assert log == ["A", "B", "C"]

    def test_unknown_class(self, registry):
        with pytest.raises(UnknownClassError):
            registry.instantiate("Missing")

    def test_instantiate_by_handle(self, registry):
        point = registry.declare_class("Point")
        obj = registry.instantiate(point)
        assert obj.__class_name__ == "Point"


class TestConstructorArguments:
    """Tests for passing construction arguments."""

    def test_arguments_reach_constructor(self, registry):
        point = registry.declare_class("Point")

        @point.init(takes_arguments=True)
        def init(self, x, y=0):
            self.x = x
            self.y = y

        obj = registry.instantiate("Point", 3, y=4)
        assert (obj.x, obj.y) == (3, 4)

    def test_zero_argument_constructors_ignore_arguments(self, registry, log):
        """Test that trait constructors receive only the instance."""
        registry.declare_trait("Tracked").init(logging_constructor(log, "Tracked"))
        point = registry.declare_class("Point", extends=["Tracked"])

        @point.init(takes_arguments=True)
        def init(self, x):
            log.append(x)

        registry.instantiate("Point", 7)
        assert log == ["Tracked", 7]

    def test_zero_argument_super_with_parameterized_subclass(self, registry, log):
        registry.declare_class("Base").init(logging_constructor(log, "Base"))
        derived = registry.declare_class("Derived", "Base")
        derived.init(lambda self, value: log.append(value), takes_arguments=True)
        registry.instantiate("Derived", "v")
        assert log == ["Base", "v"]


class TestSuperInit:
    """Tests for super constructor wrappers."""

    @pytest.fixture
    def base(self, registry):
        base = registry.declare_class("Base")

        @base.init(takes_arguments=True)
        def init(self, value):
            self.calls = getattr(self, "calls", 0) + 1
            self.value = value

        return base

    def test_wrapper_transforms_arguments(self, registry, base):
        """Test that the wrapper chooses the super's arguments."""

        def super_init(self, run_super, value, scale):
            run_super(value * scale)

        derived = registry.declare_class("Derived", "Base", super_init=super_init)

        @derived.init(takes_arguments=True)
        def init(self, value, scale):
            self.scale = scale

        obj = registry.instantiate("Derived", 2, 10)
        assert obj.value == 20
        assert obj.scale == 10

    def test_super_runs_once(self, registry, base):
        """Test that only the first run_super call executes."""

        def super_init(self, run_super, value):
            run_super(value)
            run_super(value + 1)

        registry.declare_class("Derived", "Base", super_init=super_init)
        obj = registry.instantiate("Derived", 5)
        assert obj.calls == 1
        assert obj.value == 5

    def test_wrapper_may_skip_super(self, registry, base):
        registry.declare_class("Derived", "Base", super_init=lambda self, run_super, *args: None)
        obj = registry.instantiate("Derived", 5)
        with pytest.raises(AttributeError):
            obj.value

    def test_wrapper_runs_super_chain_once_per_instance(self, registry, base):
        registry.declare_class("Derived", "Base", super_init=lambda self, run_super, v: run_super(v))
        first = registry.instantiate("Derived", 1)
        second = registry.instantiate("Derived", 2)
        assert (first.calls, first.value) == (1, 1)
        assert (second.calls, second.value) == (1, 2)

    def test_wrapper_covers_super_traits(self, registry, log):
        """Test that traits already run by the super's chain are skipped."""
        registry.declare_trait("Shared").init(logging_constructor(log, "Shared"))
        base = registry.declare_class("Base", extends=["Shared"])
        base.init(lambda self, tag: log.append(f"Base:{tag}"), takes_arguments=True)

        def super_init(self, run_super, tag):
            log.append("before")
            run_super(tag.upper())
            log.append("after")

        registry.declare_class("Derived", "Base", extends=["Shared"], super_init=super_init)
        registry.instantiate("Derived", "x")
        assert log == ["before", "Shared", "Base:X", "after"]

    def test_wrapper_for_leading_class_in_extends(self, registry, base):
        """Test that a class given first in extends gets the wrapper too."""
        registry.declare_class(
            "Derived", extends=["Base"], super_init=lambda self, run_super, v: run_super(v * 10)
        )
        assert registry.record("Derived").supers == ["Base"]
        obj = registry.instantiate("Derived", 2)
        assert obj.value == 20


class TestChainCache:
    """Tests for chain caching and invalidation."""

    def test_chain_is_cached(self, hierarchy):
        first = construction_chain(hierarchy, "Derived")
        assert hierarchy.record("Derived").construction_chain is first
        assert construction_chain(hierarchy, "Derived") is first
        assert len(first) == 4

    def test_empty_chain_sentinel(self, registry):
        registry.declare_class("Plain")
        registry.instantiate("Plain")
        assert registry.record("Plain").construction_chain is NO_CHAIN

    def test_extend_invalidates_chain(self, hierarchy, log):
        hierarchy.instantiate("Derived")
        hierarchy.declare_trait("TraitZ").init(logging_constructor(log, "Z"))
        hierarchy.extend("Derived", "TraitZ")
        assert hierarchy.record("Derived").construction_chain is None
        log.clear()
        hierarchy.instantiate("Derived")
        assert log == ["Base", "X", "Y", "Z", "Derived"]

    def test_extending_super_invalidates_subclasses(self, hierarchy, log):
        """Test that ancestry changes propagate to recorded subclasses."""
        hierarchy.instantiate("Derived")
        hierarchy.declare_trait("TraitZ").init(logging_constructor(log, "Z"))
        hierarchy.extend("Base", "TraitZ")
        assert hierarchy.record("Derived").construction_chain is None
        log.clear()
        hierarchy.instantiate("Derived")
        assert log == ["Z", "Base", "X", "Y", "Derived"]

    def test_constructor_change_invalidates_chain(self, registry, log):
        base = registry.declare_class("Base")
        registry.declare_class("Derived", "Base")
        registry.instantiate("Derived")
        base.init(logging_constructor(log, "Base"))
        registry.instantiate("Derived")
        assert log == ["Base"]

    def test_constructor_assignment_invalidates_chain(self, registry, log):
        """Test that assigning the attribute directly also drops cached chains."""
        base = registry.declare_class("Base")
        registry.declare_class("Derived", "Base")
        registry.instantiate("Base")
        registry.instantiate("Derived")
        base.constructor = logging_constructor(log, "Base")
        registry.instantiate("Base")
        registry.instantiate("Derived")
        assert log == ["Base", "Base"]

    def test_circular_graph_detected(self, registry):
        """Test that a cycle forced into the graph is reported on build."""
        registry.declare_trait("A")
        registry.declare_trait("B")
        registry.record("A").supers.append("B")
        registry.record("B").supers.append("A")
        with pytest.raises(CircularInheritanceError):
            registry.instantiate("A")
