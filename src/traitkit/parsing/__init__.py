"""Parsing module for the class declaration DSL."""

from traitkit.parsing.declaration_lexer import DeclarationLexer
from traitkit.parsing.declaration_parser import (
    DeclarationParser,
    DeclarationSpec,
    FieldSpec,
)

__all__ = [
    "DeclarationLexer",
    "DeclarationParser",
    "DeclarationSpec",
    "FieldSpec",
]
