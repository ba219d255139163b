"""Ancestry queries over the registry's extension graph."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from traitkit.registry import Registry


def is_subclass_of(
    registry: Registry,
    class_name: str,
    target_name: str,
    visited: set[str] | None = None,
) -> bool:
    """Check whether ``class_name`` is ``target_name`` or extends it.

    Depth-first over supers (classes and traits). The visited set keeps
    the search finite even if a cycle slipped into the graph.
    """
    if visited is None:
        visited = set()
    if class_name == target_name:
        return True
    if class_name in visited:
        return False
    visited.add(class_name)

    record = registry.find_record(class_name)
    if record is None:
        return False

    for super_name in record.supers:
        if is_subclass_of(registry, super_name, target_name, visited):
            return True
    return False


def ancestors(registry: Registry, class_name: str) -> list[str]:
    """List every ancestor of ``class_name`` in depth-first extension order.

    Each name appears once; the class itself is not included.
    """
    result: list[str] = []
    seen: set[str] = {class_name}

    def visit(name: str) -> None:
        record = registry.find_record(name)
        if record is None:
            return
        for super_name in record.supers:
            if super_name in seen:
                continue
            seen.add(super_name)
            result.append(super_name)
            visit(super_name)

    visit(class_name)
    return result
