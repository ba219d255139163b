"""traitkit - classes and traits composed at runtime through a registry."""

from traitkit.control import (
    declare_class,
    declare_trait,
    delete,
    extend,
    get_registry,
    instance_of,
    instantiate,
    is_valid,
    lookup,
    refresh_inheritance,
    reset,
    set_error_handler,
    type_of,
)
from traitkit.errors import ErrorKind, ObjectModelError
from traitkit.instance import Instance
from traitkit.loader import load_declarations, load_file
from traitkit.parsing import DeclarationParser
from traitkit.registry import Registry
from traitkit.types import (
    ClassDefinition,
    ClassKind,
    Reference,
    RegistryRecord,
)

__all__ = [
    # Registry
    "Registry",
    "ClassDefinition",
    "ClassKind",
    "Reference",
    "RegistryRecord",
    "Instance",
    # Errors
    "ErrorKind",
    "ObjectModelError",
    # Default registry
    "declare_class",
    "declare_trait",
    "extend",
    "instantiate",
    "delete",
    "instance_of",
    "is_valid",
    "type_of",
    "lookup",
    "set_error_handler",
    "refresh_inheritance",
    "get_registry",
    "reset",
    # Declaration files
    "DeclarationParser",
    "load_declarations",
    "load_file",
]

__version__ = "0.1.0"
