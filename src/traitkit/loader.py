"""Apply parsed declarations to a registry."""

from __future__ import annotations

import logging
from pathlib import Path

from traitkit.parsing import DeclarationParser, DeclarationSpec
from traitkit.registry import Registry
from traitkit.types import ClassDefinition, ClassKind

logger = logging.getLogger(__name__)


def load_declarations(registry: Registry, text: str) -> list[ClassDefinition]:
    """Parse declaration text and apply it to ``registry``.

    Declarations are applied in source order, so supers must come before
    the classes that extend them. Names that already exist are treated as a
    reload: missing mixins are added, fields are updated and new fields are
    pushed to known subclasses.

    Returns:
        The definitions declared or updated, in source order.
    """
    specs = DeclarationParser().parse(text)
    definitions: list[ClassDefinition] = []
    for spec in specs:
        definition = _apply(registry, spec)
        if definition is None:
            # The registry's error handler chose to continue
            continue
        definitions.append(definition)
    return definitions


def load_file(registry: Registry, path: Path | str) -> list[ClassDefinition]:
    """Load declarations from a file. See load_declarations."""
    if isinstance(path, str):
        path = Path(path)
    logger.debug("Loading declarations from %s", path)
    return load_declarations(registry, path.read_text(encoding="utf-8"))


def _apply(registry: Registry, spec: DeclarationSpec) -> ClassDefinition | None:
    existing = registry.lookup(spec.name)

    if spec.kind is ClassKind.CLASS:
        definition = registry.declare_class(
            spec.name,
            spec.base,
            accessors=spec.accessors,
            extends=[] if existing is not None else spec.mixins,
        )
    else:
        definition = registry.declare_trait(
            spec.name,
            accessors=spec.accessors,
            extends=[] if existing is not None else spec.mixins,
        )
    if definition is None:
        return None

    if existing is not None:
        supers = registry.record(spec.name).supers
        for mixin in spec.mixins:
            if mixin not in supers:
                registry.extend(spec.name, mixin)
        if spec.accessors:
            definition.enable_accessors()

    for field_spec in spec.fields:
        registry.define_field(spec.name, field_spec.name, field_spec.value)

    if existing is not None:
        registry.refresh_inheritance(spec.name)
        logger.debug("Reloaded %s '%s'", spec.kind.value, spec.name)
    return definition
