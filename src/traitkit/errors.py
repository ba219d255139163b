"""Errors raised by the object model and the handler they are routed through."""

from __future__ import annotations

from enum import Enum
from typing import Callable


class ErrorKind(Enum):
    """Kinds of object-model errors."""

    UNKNOWN_SUPER = "UnknownSuper"
    SUPER_IS_TRAIT = "SuperIsTrait"
    SELF_INHERITANCE = "SelfInheritance"
    DUPLICATE_SUPER = "DuplicateSuper"
    MULTIPLE_CLASS_SUPERS = "MultipleClassSupers"
    TRAIT_CONSTRUCTOR_HAS_PARAMS = "TraitConstructorHasParams"
    TRAIT_EXTENDS_CLASS = "TraitExtendsClass"
    MISSING_SUPER_INIT_DECLARATION = "MissingSuperInitDeclaration"
    CIRCULAR_INHERITANCE = "CircularInheritance"
    UNKNOWN_CLASS = "UnknownClass"
    DELETE_UNDECLARED = "DeleteUndeclared"
    DUPLICATE_DECLARATION = "DuplicateDeclaration"


class ObjectModelError(Exception):
    """Base class for all declaration, extension and instantiation errors.

    All of these are programmer errors: nothing is retried and the registry
    is left as it was before the failing call.
    """

    kind: ErrorKind

    def __init__(self, message: str, name: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.name = name
        # Set once the error has gone through an error handler
        self.reported = False

    def __str__(self) -> str:
        return self.message


class UnknownSuperError(ObjectModelError):
    kind = ErrorKind.UNKNOWN_SUPER


class SuperIsTraitError(ObjectModelError):
    kind = ErrorKind.SUPER_IS_TRAIT


class SelfInheritanceError(ObjectModelError):
    kind = ErrorKind.SELF_INHERITANCE


class DuplicateSuperError(ObjectModelError):
    kind = ErrorKind.DUPLICATE_SUPER


class MultipleClassSupersError(ObjectModelError):
    kind = ErrorKind.MULTIPLE_CLASS_SUPERS


class TraitConstructorHasParamsError(ObjectModelError):
    kind = ErrorKind.TRAIT_CONSTRUCTOR_HAS_PARAMS


class TraitExtendsClassError(ObjectModelError):
    kind = ErrorKind.TRAIT_EXTENDS_CLASS


class MissingSuperInitDeclarationError(ObjectModelError):
    kind = ErrorKind.MISSING_SUPER_INIT_DECLARATION


class CircularInheritanceError(ObjectModelError):
    kind = ErrorKind.CIRCULAR_INHERITANCE


class UnknownClassError(ObjectModelError):
    kind = ErrorKind.UNKNOWN_CLASS


class DeleteUndeclaredError(ObjectModelError):
    kind = ErrorKind.DELETE_UNDECLARED


class DuplicateDeclarationError(ObjectModelError):
    kind = ErrorKind.DUPLICATE_DECLARATION


ErrorHandler = Callable[[ObjectModelError], None]


def raise_error(error: ObjectModelError) -> None:
    """Default error handler: raise the error to the caller."""
    raise error
