"""Registry of declared classes and traits."""

from __future__ import annotations

import functools
import logging
from typing import Any, Callable, Iterable, TypeVar

from traitkit.chains import construction_chain, destruction_chain
from traitkit.errors import (
    CircularInheritanceError,
    DeleteUndeclaredError,
    DuplicateDeclarationError,
    DuplicateSuperError,
    ErrorHandler,
    MissingSuperInitDeclarationError,
    MultipleClassSupersError,
    ObjectModelError,
    SelfInheritanceError,
    SuperIsTraitError,
    TraitConstructorHasParamsError,
    TraitExtendsClassError,
    UnknownClassError,
    UnknownSuperError,
    raise_error,
)
from traitkit.instance import Instance, class_name_of
from traitkit.introspection import ancestors, is_subclass_of
from traitkit.types import (
    ClassDefinition,
    ClassKind,
    Reference,
    RegistryRecord,
    is_reserved,
    resolve_name,
)

logger = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., Any])


def reported(method: F) -> F:
    """Route object-model errors raised by ``method`` through the error handler.

    The handler sees each error once. If it returns instead of raising,
    the operation returns None.
    """

    @functools.wraps(method)
    def wrapper(self: Registry, *args: Any, **kwargs: Any) -> Any:
        try:
            return method(self, *args, **kwargs)
        except ObjectModelError as error:
            if error.reported:
                raise
            error.reported = True
            self._error_handler(error)
            return None

    return wrapper  # type: ignore[return-value]


class Registry:
    """Store of class/trait definitions and their inheritance metadata.

    Each registry is independent; a process-wide default lives in
    ``traitkit.control``.
    """

    def __init__(
        self,
        error_handler: ErrorHandler | None = None,
        redeclare: bool = True,
    ) -> None:
        """Initialize an empty registry.

        Args:
            error_handler: Receives every object-model error. Defaults to
                raising it.
            redeclare: If True, declaring a known name again returns the
                existing definition (reload-safe). If False, it is an error.
        """
        self._definitions: dict[str, ClassDefinition] = {}
        self._records: dict[str, RegistryRecord] = {}
        self._error_handler: ErrorHandler = error_handler or raise_error
        self.redeclare = redeclare

    # -- store -------------------------------------------------------------

    def set_error_handler(self, handler: ErrorHandler | None) -> None:
        """Replace the error handler. None restores the default."""
        self._error_handler = handler or raise_error

    def record(self, name: str) -> RegistryRecord:
        """Get the metadata record for a name, creating it if needed."""
        record = self._records.get(name)
        if record is None:
            record = RegistryRecord(name=name)
            self._records[name] = record
        return record

    def find_record(self, name: str) -> RegistryRecord | None:
        """Get the metadata record for a name without creating it."""
        return self._records.get(name)

    def lookup(self, ref: Reference) -> ClassDefinition | None:
        """Get a definition by name, or None if it is not declared."""
        if not isinstance(ref, (str, ClassDefinition)):
            return None
        return self._definitions.get(resolve_name(ref))

    @reported
    def get_or_raise(self, ref: Reference) -> ClassDefinition:
        """Get a definition by name, failing with UnknownClass if missing."""
        return self._require(resolve_name(ref))

    def kind_of(self, ref: Reference) -> ClassKind | None:
        """Return whether a name is a class or a trait (None if undeclared)."""
        name = resolve_name(ref)
        if name not in self._definitions:
            return None
        return self._records[name].kind

    def list_names(self) -> list[str]:
        """List all declared names in declaration order."""
        return list(self._definitions.keys())

    def __contains__(self, ref: object) -> bool:
        if not isinstance(ref, (str, ClassDefinition)):
            return False
        return resolve_name(ref) in self._definitions

    def __len__(self) -> int:
        return len(self._definitions)

    def _require(self, name: str) -> ClassDefinition:
        definition = self._definitions.get(name)
        if definition is None:
            raise UnknownClassError(f"Class '{name}' not found", name=name)
        return definition

    # -- declaration -------------------------------------------------------

    @reported
    def declare_class(
        self,
        name: str,
        base: Reference | None = None,
        *,
        accessors: bool = False,
        extends: Iterable[Reference] = (),
        super_init: Callable[..., Any] | None = None,
    ) -> ClassDefinition:
        """Declare a class.

        Args:
            name: Unique name shared with traits.
            base: Primary super class (name or definition).
            accessors: Route attribute access through getters/setters.
            extends: Traits mixed in after the primary super, in order. If
                ``base`` is omitted, a leading class entry becomes the
                primary super.
            super_init: ``super_init(instance, run_super, *args, **kwargs)``
                decides if, when and with which arguments the super class's
                constructors run. Required when the super's constructor
                takes arguments.

        Returns:
            The new definition, or the existing one when redeclaring.
        """
        return self._declare(name, ClassKind.CLASS, base, accessors, extends, super_init)

    @reported
    def declare_trait(
        self,
        name: str,
        *,
        accessors: bool = False,
        extends: Iterable[Reference] = (),
    ) -> ClassDefinition:
        """Declare a trait. Traits may only extend other traits."""
        return self._declare(name, ClassKind.TRAIT, None, accessors, extends, None)

    def _declare(
        self,
        name: str,
        kind: ClassKind,
        super_ref: Reference | None,
        accessors: bool,
        extends: Iterable[Reference],
        super_init: Callable[..., Any] | None,
    ) -> ClassDefinition:
        existing = self._definitions.get(name)
        if existing is not None:
            existing_kind = self._records[name].kind
            if existing_kind is not kind:
                raise DuplicateDeclarationError(
                    f"'{name}' is already declared as a {existing_kind.value}",
                    name=name,
                )
            if not self.redeclare:
                raise DuplicateDeclarationError(
                    f"{kind.value.capitalize()} '{name}' is already declared", name=name
                )
            return existing

        super_name = resolve_name(super_ref) if super_ref is not None else None
        extends_names = [resolve_name(ref) for ref in extends]

        # A leading class in extends is the primary super
        if super_name is None and kind is ClassKind.CLASS and extends_names:
            first = self._records.get(extends_names[0])
            if first is not None and first.is_class:
                super_name = extends_names.pop(0)

        # Validate everything before registering anything
        supers: list[str] = []
        if super_name is not None:
            self._check_primary_super(name, super_name, super_init)
            supers.append(super_name)
        elif super_init is not None:
            raise UnknownSuperError(
                f"Class '{name}' declares super_init but has no super class", name=name
            )
        for extend_name in extends_names:
            self._check_extension(name, kind, supers, extend_name)
            supers.append(extend_name)

        definition = ClassDefinition(name=name)
        if accessors:
            definition.enable_accessors()
        definition.on_change = functools.partial(self.invalidate, name)
        definition.on_define = functools.partial(self._mark_local, name)
        self._definitions[name] = definition

        record = self.record(name)
        record.kind = kind
        if super_name is not None and super_init is not None:
            record.super_constructor_wrapper = super_init
            record.super_init = self._wrap_super_init(super_name, super_init)

        for super_ref_name in supers:
            self._link(name, super_ref_name)

        logger.debug("Declared %s '%s' (supers: %s)", kind.value, name, supers)
        return definition

    def _check_primary_super(
        self, name: str, super_name: str, super_init: Callable[..., Any] | None
    ) -> None:
        if super_name == name:
            raise SelfInheritanceError(f"Class '{name}' cannot inherit from itself", name=name)
        super_def = self._definitions.get(super_name)
        if super_def is None:
            raise UnknownSuperError(f"Super class '{super_name}' not found", name=name)
        if self._records[super_name].is_trait:
            raise SuperIsTraitError(
                f"'{super_name}' is a trait; mix it into '{name}' with extends instead",
                name=name,
            )
        if super_def.constructor_takes_arguments and super_init is None:
            raise MissingSuperInitDeclarationError(
                f"Super class '{super_name}' has a constructor with parameters, "
                f"but '{name}' declares no super_init",
                name=name,
            )

    def _check_extension(
        self, target: str, target_kind: ClassKind | None, supers: list[str], source: str
    ) -> None:
        source_def = self._definitions.get(source)
        if source_def is None:
            raise UnknownSuperError(f"Extended class '{source}' not found", name=target)
        if source == target:
            raise SelfInheritanceError(f"'{target}' cannot extend itself", name=target)
        if source in supers:
            raise DuplicateSuperError(
                f"'{target}' already extends '{source}'", name=target
            )
        source_record = self._records[source]
        if source_record.is_class:
            if supers:
                raise MultipleClassSupersError(
                    f"'{target}' already has super '{supers[0]}' and cannot also "
                    f"inherit class '{source}'; declare '{source}' as a trait to mix it in",
                    name=target,
                )
            if target_kind is ClassKind.TRAIT:
                raise TraitExtendsClassError(
                    f"Trait '{target}' cannot extend class '{source}'", name=target
                )
            if source_def.constructor_takes_arguments:
                raise MissingSuperInitDeclarationError(
                    f"Super class '{source}' has a constructor with parameters; "
                    f"declare '{target}' with it as base and a super_init",
                    name=target,
                )
        elif source_def.constructor is not None and source_def.constructor_takes_arguments:
            raise TraitConstructorHasParamsError(
                f"Constructor of trait '{source}' must not take arguments; "
                "mixed-in traits receive no construction arguments",
                name=target,
            )
        if is_subclass_of(self, source, target):
            raise CircularInheritanceError(
                f"'{source}' already inherits from '{target}'", name=target
            )

    def _wrap_super_init(
        self, super_name: str, wrapper: Callable[..., Any]
    ) -> Callable[..., Any]:
        """Wrap a user super_init so the super's chain runs at most once."""

        def super_init(instance: Instance, *args: Any, **kwargs: Any) -> None:
            called = False

            def run_super(*super_args: Any, **super_kwargs: Any) -> None:
                nonlocal called
                if called:
                    return
                called = True
                self._construct(instance, super_name, super_args, super_kwargs)

            wrapper(instance, run_super, *args, **kwargs)

        return super_init

    # -- mixin resolution --------------------------------------------------

    @reported
    def extend(self, target: Reference, source: Reference) -> None:
        """Mix ``source`` into ``target``.

        Inherited fields and accessors are copied into the target unless the
        target defines them locally; among inherited values the most
        recently extended source wins.
        """
        target_name = resolve_name(target)
        source_name = resolve_name(source)
        self._require(target_name)
        record = self._records[target_name]
        self._check_extension(target_name, record.kind, record.supers, source_name)
        self._link(target_name, source_name)
        logger.debug("Extended '%s' with '%s'", target_name, source_name)

    def _link(self, target: str, source: str) -> None:
        record = self.record(target)
        record.supers.append(source)
        self.record(source).subclasses[target] = None
        self._copy_inherited_members(
            self._definitions[target], record, self._definitions[source]
        )
        self.invalidate(target)

    @staticmethod
    def _copy_inherited_members(
        child: ClassDefinition, child_record: RegistryRecord, parent: ClassDefinition
    ) -> None:
        shadowed = child_record.shadowed_keys

        for key, value in parent.fields.items():
            if is_reserved(key):
                continue
            if key not in child.fields or key in shadowed:
                shadowed.add(key)
                child.fields[key] = value

        if parent.getters is None:
            return
        child.enable_accessors()
        for source_map, target_map in (
            (parent.getters, child.getters),
            (parent.setters, child.setters),
        ):
            for key, func in source_map.items():
                if key not in target_map or key in shadowed:
                    shadowed.add(key)
                    target_map[key] = func

    def invalidate(self, ref: Reference) -> None:
        """Clear cached chains of a name and, transitively, its subclasses."""
        pending = [resolve_name(ref)]
        visited: set[str] = set()
        while pending:
            name = pending.pop()
            if name in visited:
                continue
            visited.add(name)
            record = self._records.get(name)
            if record is None:
                continue
            record.invalidate()
            pending.extend(record.subclasses)
        logger.debug("Invalidated chains of %s", sorted(visited))

    @reported
    def define_field(self, ref: Reference, key: str, value: Any) -> None:
        """Set a field as locally defined, so later mixins never overwrite it."""
        self._require(resolve_name(ref))[key] = value

    def _mark_local(self, name: str, key: str) -> None:
        record = self._records.get(name)
        if record is not None:
            record.shadowed_keys.discard(key)

    @reported
    def refresh_inheritance(self, ref: Reference) -> None:
        """Copy fields added to a class after the fact into its known subclasses.

        Only keys missing in a subclass are copied; no constructor runs.
        Must not be called while the set of subclasses may change.
        """
        name = resolve_name(ref)
        parent = self._require(name)
        self._refresh_subclasses(name, parent, {name})
        self.invalidate(name)
        logger.debug("Refreshed inheritance from '%s'", name)

    def _refresh_subclasses(
        self, name: str, parent: ClassDefinition, visited: set[str]
    ) -> None:
        for child_name in list(self._records[name].subclasses):
            if child_name in visited:
                continue
            visited.add(child_name)
            child = self._definitions.get(child_name)
            if child is None:
                continue
            self._copy_missing_members(child, self._records[child_name], parent)
            self._refresh_subclasses(child_name, child, visited)

    @staticmethod
    def _copy_missing_members(
        child: ClassDefinition, child_record: RegistryRecord, parent: ClassDefinition
    ) -> None:
        for key, value in parent.fields.items():
            if not is_reserved(key) and key not in child.fields:
                child_record.shadowed_keys.add(key)
                child.fields[key] = value

        if parent.getters is None:
            return
        child.enable_accessors()
        for source_map, target_map in (
            (parent.getters, child.getters),
            (parent.setters, child.setters),
        ):
            for key, func in source_map.items():
                if key not in target_map:
                    child_record.shadowed_keys.add(key)
                    target_map[key] = func

    # -- lifecycle ---------------------------------------------------------

    @reported
    def instantiate(self, ref: Reference, *args: Any, **kwargs: Any) -> Instance:
        """Create an instance and run its construction chain with the arguments."""
        name = resolve_name(ref)
        definition = self._require(name)
        chain = construction_chain(self, name)
        instance = Instance(definition)
        for call in chain:
            call(instance, *args, **kwargs)
        return instance

    def _construct(
        self, instance: Instance, name: str, args: tuple[Any, ...], kwargs: dict[str, Any]
    ) -> None:
        for call in construction_chain(self, name):
            call(instance, *args, **kwargs)

    @reported
    def delete(self, value: Any) -> None:
        """Run the destructors of an instance. Deleting twice is a no-op."""
        if not isinstance(value, Instance):
            raise DeleteUndeclaredError(f"Cannot delete undeclared object: {value!r}")
        if value.__deleted__:
            return
        value.__deleted__ = True

        name = value.__class_name__
        if name not in self._definitions:
            return
        for call in destruction_chain(self, name):
            call(value)

    # -- introspection -----------------------------------------------------

    def instance_of(self, value: Any, ref: Reference) -> bool:
        """Check whether ``value`` is an instance of ``ref`` or of a subclass."""
        name = class_name_of(value)
        if name is None:
            return False
        return is_subclass_of(self, name, resolve_name(ref))

    def is_subclass_of(self, ref: Reference, target: Reference) -> bool:
        """Check whether a declared name is ``target`` or inherits from it."""
        return is_subclass_of(self, resolve_name(ref), resolve_name(target))

    def is_valid(self, value: Any) -> bool:
        """Check whether ``value`` is an instance that has not been deleted."""
        return isinstance(value, Instance) and not value.__deleted__

    def type_of(self, value: Any) -> str | None:
        """Return the class name of an instance, or None for other values."""
        return class_name_of(value)

    def ancestors(self, ref: Reference) -> list[str]:
        """List all ancestors of a name in depth-first extension order."""
        return ancestors(self, resolve_name(ref))

    def subclasses_of(self, ref: Reference) -> list[str]:
        """List the names that directly extend ``ref``."""
        record = self._records.get(resolve_name(ref))
        if record is None:
            return []
        return list(record.subclasses)
