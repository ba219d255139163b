"""Parser for the class declaration DSL."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import ply.yacc as yacc

from traitkit.parsing.declaration_lexer import DeclarationLexer
from traitkit.types import ClassKind


@dataclass
class FieldSpec:
    """A field with its literal default value."""

    name: str
    value: Any


@dataclass
class DeclarationSpec:
    """A class or trait declaration before it is applied to a registry."""

    kind: ClassKind
    name: str
    base: str | None = None
    mixins: list[str] = field(default_factory=list)
    fields: list[FieldSpec] = field(default_factory=list)
    accessors: bool = False
    lineno: int = 0


class DeclarationParser:
    """Parser for the class declaration DSL.

    Example:
        class Base { value = 1, label = "base" }
        trait Loud { volume = 11 }
        accessors class Derived extends Base with Loud { ratio = 0.5 }
    """

    tokens = DeclarationLexer.tokens

    def __init__(self) -> None:
        self.lexer = DeclarationLexer()
        self.lexer.build()
        self.parser: yacc.LRParser = None  # type: ignore

    def p_declarations(self, p: yacc.YaccProduction) -> None:
        """declarations : declaration_list"""
        p[0] = p[1]

    def p_declarations_empty(self, p: yacc.YaccProduction) -> None:
        """declarations : empty"""
        p[0] = []

    def p_declaration_list_single(self, p: yacc.YaccProduction) -> None:
        """declaration_list : declaration"""
        p[0] = [p[1]]

    def p_declaration_list_multiple(self, p: yacc.YaccProduction) -> None:
        """declaration_list : declaration_list declaration"""
        p[0] = p[1]
        p[0].append(p[2])

    def p_declaration_class(self, p: yacc.YaccProduction) -> None:
        """declaration : modifier_opt CLASS IDENTIFIER base_opt mixins_opt body"""
        p[0] = DeclarationSpec(
            kind=ClassKind.CLASS,
            name=p[3],
            base=p[4],
            mixins=p[5],
            fields=p[6],
            accessors=p[1],
            lineno=p.lineno(2),
        )

    def p_declaration_trait(self, p: yacc.YaccProduction) -> None:
        """declaration : modifier_opt TRAIT IDENTIFIER mixins_opt body"""
        p[0] = DeclarationSpec(
            kind=ClassKind.TRAIT,
            name=p[3],
            mixins=p[4],
            fields=p[5],
            accessors=p[1],
            lineno=p.lineno(2),
        )

    def p_modifier_accessors(self, p: yacc.YaccProduction) -> None:
        """modifier_opt : ACCESSORS"""
        p[0] = True

    def p_modifier_none(self, p: yacc.YaccProduction) -> None:
        """modifier_opt : empty"""
        p[0] = False

    def p_base(self, p: yacc.YaccProduction) -> None:
        """base_opt : EXTENDS IDENTIFIER"""
        p[0] = p[2]

    def p_base_none(self, p: yacc.YaccProduction) -> None:
        """base_opt : empty"""
        p[0] = None

    def p_mixins(self, p: yacc.YaccProduction) -> None:
        """mixins_opt : WITH name_list"""
        p[0] = p[2]

    def p_mixins_none(self, p: yacc.YaccProduction) -> None:
        """mixins_opt : empty"""
        p[0] = []

    def p_name_list_single(self, p: yacc.YaccProduction) -> None:
        """name_list : IDENTIFIER"""
        p[0] = [p[1]]

    def p_name_list_multiple(self, p: yacc.YaccProduction) -> None:
        """name_list : name_list COMMA IDENTIFIER"""
        p[0] = p[1] + [p[3]]

    def p_body(self, p: yacc.YaccProduction) -> None:
        """body : LBRACE field_list RBRACE
                | LBRACE field_list COMMA RBRACE"""
        p[0] = p[2]

    def p_body_empty(self, p: yacc.YaccProduction) -> None:
        """body : LBRACE RBRACE"""
        p[0] = []

    def p_field_list_single(self, p: yacc.YaccProduction) -> None:
        """field_list : field"""
        p[0] = [p[1]]

    def p_field_list_multiple(self, p: yacc.YaccProduction) -> None:
        """field_list : field_list field
                      | field_list COMMA field"""
        p[0] = p[1] + [p[len(p) - 1]]

    def p_field(self, p: yacc.YaccProduction) -> None:
        """field : IDENTIFIER EQUALS literal"""
        p[0] = FieldSpec(name=p[1], value=p[3])

    def p_literal_value(self, p: yacc.YaccProduction) -> None:
        """literal : INTEGER
                   | FLOAT
                   | STRING"""
        p[0] = p[1]

    def p_literal_true(self, p: yacc.YaccProduction) -> None:
        """literal : TRUE"""
        p[0] = True

    def p_literal_false(self, p: yacc.YaccProduction) -> None:
        """literal : FALSE"""
        p[0] = False

    def p_literal_none(self, p: yacc.YaccProduction) -> None:
        """literal : NONE"""
        p[0] = None

    def p_empty(self, p: yacc.YaccProduction) -> None:
        """empty :"""
        p[0] = None

    def p_error(self, p: yacc.YaccProduction) -> None:
        if p:
            raise SyntaxError(f"Syntax error at '{p.value}' (line {p.lineno})")
        else:
            raise SyntaxError("Syntax error at end of input")

    def build(self, **kwargs: Any) -> None:
        """Build the parser."""
        self.parser = yacc.yacc(module=self, **kwargs)

    def parse(self, data: str) -> list[DeclarationSpec]:
        """Parse declarations and return them in source order."""
        if self.parser is None:
            self.build(debug=False, write_tables=False)

        self.lexer.lexer.lineno = 1
        specs = self.parser.parse(data, lexer=self.lexer.lexer)
        if specs is None:
            specs = []
        return specs
