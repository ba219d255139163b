"""Class and trait definitions for the traitkit object model."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Iterator, Union


class ClassKind(Enum):
    """Kinds of declarations sharing the registry namespace."""

    CLASS = "class"
    TRAIT = "trait"


# Cached chain value meaning "computed, nothing to run"
NO_CHAIN: tuple[Callable[..., Any], ...] = ()

# Prefix reserved for internal machinery; such keys are never inherited
RESERVED_PREFIX = "__"

# Definition attributes that feed the construction and destruction chains
_CHAIN_ATTRIBUTES = frozenset({"constructor", "constructor_takes_arguments", "destructor"})


def is_reserved(key: str) -> bool:
    """Check if a member key uses the reserved double-underscore prefix."""
    return key.startswith(RESERVED_PREFIX)


@dataclass(eq=False)
class ClassDefinition:
    """Member table of a declared class or trait.

    Ordinary members live in ``fields``. Function values act as methods
    when read through an instance. The constructor and destructor are kept
    apart from the fields so they are never copied by a mixin.

    Accessor mode is off while ``getters`` and ``setters`` are ``None``.
    """

    name: str
    fields: dict[str, Any] = field(default_factory=dict)
    constructor: Callable[..., Any] | None = None
    constructor_takes_arguments: bool = False
    destructor: Callable[[Any], Any] | None = None
    getters: dict[str, Callable[[Any], Any]] | None = None
    setters: dict[str, Callable[[Any, Any], Any]] | None = None
    # Called when the constructor or destructor changes (set by the registry)
    on_change: Callable[[], None] | None = field(default=None, repr=False)
    # Called with the key when a field is set locally (set by the registry)
    on_define: Callable[[str], None] | None = field(default=None, repr=False)

    def __setattr__(self, key: str, value: Any) -> None:
        object.__setattr__(self, key, value)
        if key in _CHAIN_ATTRIBUTES:
            self._changed()

    @property
    def accessors_enabled(self) -> bool:
        """Return whether attribute access is routed through getters/setters."""
        return self.getters is not None

    def enable_accessors(self) -> None:
        """Switch this definition to getter/setter dispatch. Idempotent."""
        if self.getters is not None:
            return
        self.getters = {}
        self.setters = {}

    def get(self, key: str, default: Any = None) -> Any:
        """Get a plain field value."""
        return self.fields.get(key, default)

    def __getitem__(self, key: str) -> Any:
        return self.fields[key]

    def __setitem__(self, key: str, value: Any) -> None:
        """Set a field locally, so later mixins never overwrite it."""
        self.fields[key] = value
        if self.on_define is not None:
            self.on_define(key)

    def __contains__(self, key: object) -> bool:
        return key in self.fields

    def __iter__(self) -> Iterator[str]:
        return iter(self.fields)

    def method(self, func: Callable[..., Any]) -> Callable[..., Any]:
        """Decorator registering ``func`` as a method under its own name."""
        self.fields[func.__name__] = func
        return func

    def init(
        self,
        func: Callable[..., Any] | None = None,
        *,
        takes_arguments: bool = False,
    ) -> Any:
        """Decorator setting the constructor.

        Usable bare (``@Point.init``) or with the flag
        (``@Point.init(takes_arguments=True)``). A constructor that takes
        no arguments is called with the instance only.
        """

        def decorate(ctor: Callable[..., Any]) -> Callable[..., Any]:
            self.constructor = ctor
            self.constructor_takes_arguments = takes_arguments
            return ctor

        if func is not None:
            return decorate(func)
        return decorate

    def on_delete(self, func: Callable[[Any], Any]) -> Callable[[Any], Any]:
        """Decorator setting the destructor."""
        self.destructor = func
        return func

    def getter(self, key: str) -> Callable[[Callable[[Any], Any]], Callable[[Any], Any]]:
        """Decorator registering a getter for ``key``. Enables accessor mode."""

        def decorate(func: Callable[[Any], Any]) -> Callable[[Any], Any]:
            self.enable_accessors()
            self.getters[key] = func  # type: ignore[index]
            return func

        return decorate

    def setter(
        self, key: str
    ) -> Callable[[Callable[[Any, Any], Any]], Callable[[Any, Any], Any]]:
        """Decorator registering a setter for ``key``. Enables accessor mode."""

        def decorate(func: Callable[[Any, Any], Any]) -> Callable[[Any, Any], Any]:
            self.enable_accessors()
            self.setters[key] = func  # type: ignore[index]
            return func

        return decorate

    def _changed(self) -> None:
        # Unset while the dataclass __init__ is still assigning fields
        on_change = getattr(self, "on_change", None)
        if on_change is not None:
            on_change()


@dataclass(eq=False)
class RegistryRecord:
    """Metadata kept per declared name.

    Chains are ``None`` until computed and ``NO_CHAIN`` when computed empty.
    """

    name: str
    kind: ClassKind | None = None
    supers: list[str] = field(default_factory=list)
    shadowed_keys: set[str] = field(default_factory=set)
    subclasses: dict[str, None] = field(default_factory=dict)
    construction_chain: tuple[Callable[..., Any], ...] | None = None
    destruction_chain: tuple[Callable[[Any], Any], ...] | None = None
    super_constructor_wrapper: Callable[..., Any] | None = None
    super_init: Callable[..., Any] | None = None

    @property
    def is_trait(self) -> bool:
        return self.kind is ClassKind.TRAIT

    @property
    def is_class(self) -> bool:
        return self.kind is ClassKind.CLASS

    def invalidate(self) -> None:
        """Clear both cached chains."""
        self.construction_chain = None
        self.destruction_chain = None


Reference = Union[str, ClassDefinition]


def resolve_name(ref: Reference) -> str:
    """Normalize a name-or-definition reference to a name."""
    if isinstance(ref, ClassDefinition):
        return ref.name
    if isinstance(ref, str):
        return ref
    raise TypeError(f"Expected a class name or definition, got {type(ref).__name__}")
