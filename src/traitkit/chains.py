"""Construction and destruction chain builders.

A chain is the ordered tuple of callables run when an instance of a class
is created or deleted. Chains are computed once per class and cached on the
class's registry record until its ancestry changes.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Callable

from traitkit.errors import CircularInheritanceError, MultipleClassSupersError
from traitkit.types import NO_CHAIN, ClassDefinition

if TYPE_CHECKING:
    from traitkit.registry import Registry

logger = logging.getLogger(__name__)


def _circular(name: str) -> CircularInheritanceError:
    return CircularInheritanceError(
        f"Circular inheritance detected at '{name}'; check its extends configuration",
        name=name,
    )


def collect_ancestors(
    registry: Registry, class_name: str, visiting: set[str] | None = None
) -> set[str]:
    """Collect the full set of ancestor names of ``class_name``.

    Raises CircularInheritanceError if ``class_name`` is reached again
    while its own supers are being collected.
    """
    if visiting is None:
        visiting = set()
    if class_name in visiting:
        raise _circular(class_name)
    visiting.add(class_name)

    result: set[str] = set()
    record = registry.find_record(class_name)
    if record is not None:
        for super_name in record.supers:
            result |= collect_ancestors(registry, super_name, visiting)
            result.add(super_name)

    visiting.discard(class_name)
    return result


def bind_constructor(definition: ClassDefinition) -> Callable[..., Any]:
    """Return the chain entry for a definition's constructor.

    Constructors that do not take arguments only receive the instance.
    """
    ctor = definition.constructor
    if definition.constructor_takes_arguments:
        return ctor

    def call_without_arguments(instance: Any, *args: Any, **kwargs: Any) -> None:
        ctor(instance)

    call_without_arguments.__name__ = getattr(ctor, "__name__", "constructor")
    call_without_arguments.__wrapped__ = ctor  # type: ignore[attr-defined]
    return call_without_arguments


def _collect_constructors(
    registry: Registry,
    class_name: str,
    chain: list[Callable[..., Any]],
    visited: set[str],
    building: set[str],
) -> None:
    if class_name in building:
        raise _circular(class_name)
    if class_name in visited:
        return
    building.add(class_name)
    visited.add(class_name)

    definition = registry.lookup(class_name)
    record = registry.record(class_name)

    for index, super_name in enumerate(record.supers):
        super_record = registry.record(super_name)
        if index == 0 and super_record.is_class and record.super_init is not None:
            # The wrapper runs the super's own chain; skip everything it covers
            chain.append(record.super_init)
            visited.update(collect_ancestors(registry, super_name))
            visited.add(super_name)
            continue
        if index > 0 and super_record.is_class:
            raise MultipleClassSupersError(
                f"Class '{super_name}' can only be mixed into '{class_name}' as a trait",
                name=class_name,
            )
        _collect_constructors(registry, super_name, chain, visited, building)

    if definition is not None and definition.constructor is not None:
        chain.append(bind_constructor(definition))
    building.discard(class_name)


def construction_chain(registry: Registry, class_name: str) -> tuple[Callable[..., Any], ...]:
    """Return the cached construction chain of a class, building it if needed."""
    record = registry.record(class_name)
    if record.construction_chain is not None:
        return record.construction_chain

    chain: list[Callable[..., Any]] = []
    _collect_constructors(registry, class_name, chain, set(), set())
    record.construction_chain = tuple(chain) if chain else NO_CHAIN
    logger.debug("Built construction chain for '%s' (%d call(s))", class_name, len(chain))
    return record.construction_chain


def _collect_destructors(
    registry: Registry,
    class_name: str,
    chain: list[Callable[[Any], Any]],
    visited: set[str],
) -> None:
    if class_name in visited:
        return
    visited.add(class_name)

    definition = registry.lookup(class_name)
    if definition is None:
        return
    if definition.destructor is not None:
        chain.append(definition.destructor)

    # Most recently extended super first
    for super_name in reversed(registry.record(class_name).supers):
        _collect_destructors(registry, super_name, chain, visited)


def destruction_chain(registry: Registry, class_name: str) -> tuple[Callable[[Any], Any], ...]:
    """Return the cached destruction chain of a class, building it if needed.

    Order: the class's own destructor, then each super in reverse extension
    order, depth-first, every name at most once.
    """
    record = registry.record(class_name)
    if record.destruction_chain is not None:
        return record.destruction_chain

    chain: list[Callable[[Any], Any]] = []
    _collect_destructors(registry, class_name, chain, set())
    record.destruction_chain = tuple(chain) if chain else NO_CHAIN
    logger.debug("Built destruction chain for '%s' (%d call(s))", class_name, len(chain))
    return record.destruction_chain
