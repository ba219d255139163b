"""Process-wide default registry and module-level shortcuts to it.

Every function here delegates to the registry returned by
``get_registry()``. ``reset()`` replaces it with a fresh one.
"""

from __future__ import annotations

from typing import Any, Callable, Iterable

from traitkit.errors import ErrorHandler
from traitkit.instance import Instance
from traitkit.registry import Registry
from traitkit.types import ClassDefinition, Reference

_registry = Registry()


def get_registry() -> Registry:
    """Return the process-wide registry."""
    return _registry


def reset(error_handler: ErrorHandler | None = None, redeclare: bool = True) -> Registry:
    """Replace the process-wide registry with an empty one and return it."""
    global _registry
    _registry = Registry(error_handler=error_handler, redeclare=redeclare)
    return _registry


def declare_class(
    name: str,
    base: Reference | None = None,
    *,
    accessors: bool = False,
    extends: Iterable[Reference] = (),
    super_init: Callable[..., Any] | None = None,
) -> ClassDefinition:
    return _registry.declare_class(
        name, base, accessors=accessors, extends=extends, super_init=super_init
    )


def declare_trait(
    name: str, *, accessors: bool = False, extends: Iterable[Reference] = ()
) -> ClassDefinition:
    return _registry.declare_trait(name, accessors=accessors, extends=extends)


def extend(target: Reference, source: Reference) -> None:
    _registry.extend(target, source)


def instantiate(ref: Reference, *args: Any, **kwargs: Any) -> Instance:
    return _registry.instantiate(ref, *args, **kwargs)


def delete(value: Any) -> None:
    _registry.delete(value)


def instance_of(value: Any, ref: Reference) -> bool:
    return _registry.instance_of(value, ref)


def is_valid(value: Any) -> bool:
    return _registry.is_valid(value)


def type_of(value: Any) -> str | None:
    return _registry.type_of(value)


def lookup(ref: Reference) -> ClassDefinition | None:
    return _registry.lookup(ref)


def set_error_handler(handler: ErrorHandler | None) -> None:
    _registry.set_error_handler(handler)


def refresh_inheritance(ref: Reference) -> None:
    _registry.refresh_inheritance(ref)
