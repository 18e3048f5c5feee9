"""Lark parser for the TypeScript-like surface syntax.

Covers every variant's syntax in one grammar; a checker rejects the forms its
variant does not support. Statements fold into nested terms:

    const x = 1; x + 1;                      Const("x", 1, x + 1)
    1; 2; true;                              Seq(1, Seq(2, true))
    function f(n: number): number { ... } r  RecFunc("f", ..., r)
    type T = { next: () => T }; ...          T resolves to μT.{ next: () => T }

A program that ends with a declaration evaluates to the declared name.
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from typing import Optional

from lark import Lark, Token, Transformer, v_args
from lark.exceptions import UnexpectedCharacters, UnexpectedInput, UnexpectedToken, VisitError

from tinytype.core.ast import (
    Add,
    BoolLit,
    Call,
    Const,
    Func,
    If,
    NumLit,
    ObjectGet,
    ObjectNew,
    PropTerm,
    RecFunc,
    Seq,
    Term,
    Var,
)
from tinytype.core.types import (
    BOOLEAN,
    NUMBER,
    Field,
    Type,
    TypeFunc,
    TypeObject,
    TypeRec,
    TypeVar,
)
from tinytype.utils.location import Location


class ParseError(Exception):
    """Error during parsing."""

    def __init__(self, message: str, location: Optional[Location] = None):
        self.message = message
        self.location = location
        if location is not None:
            super().__init__(f"{location}: {message}")
        else:
            super().__init__(message)


GRAMMAR = r"""
    program: _item* expr?

    type_program: type_decl* type

    _item: expr_stmt
         | const_decl
         | func_decl
         | type_decl

    expr_stmt: expr ";"
    const_decl: "const" NAME (":" type)? "=" expr ";"
    func_decl: "function" NAME "(" params? ")" ":" type "{" func_body "}"
    func_body: _item* "return" expr ";"?
    type_decl: "type" NAME "=" type ";"

    ?expr: arrow
         | cond

    arrow: "(" params? ")" (":" type)? "=>" expr

    ?cond: add "?" expr ":" expr -> if_expr
         | add

    ?add: add "+" postfix
        | postfix

    ?postfix: postfix "(" args? ")" -> call
            | postfix "." NAME -> get
            | atom

    ?atom: NUM -> number
         | "true" -> true
         | "false" -> false
         | NAME -> var
         | "(" expr ")"
         | object

    object: "{" "}"
          | "{" prop ("," prop)* ","? "}"
    prop: NAME ":" expr

    args: expr ("," expr)*
    params: param ("," param)*
    param: NAME ":" type

    ?type: func_type
         | object_type
         | "number" -> number_type
         | "boolean" -> boolean_type
         | NAME -> type_ref
         | "(" type ")"

    func_type: "(" params? ")" "=>" type
    object_type: "{" "}"
               | "{" prop_type (_sep prop_type)* _sep? "}"
    prop_type: NAME ":" type
    _sep: ";" | ","

    NAME: /[A-Za-z_$][A-Za-z0-9_$]*/
    NUM: /\d+(\.\d+)?/
    COMMENT: /\/\/[^\n]*/

    %import common.WS
    %ignore WS
    %ignore COMMENT
"""


# Statement markers, folded into terms by ``program`` and ``func_body``.


@dataclass(frozen=True)
class _ExprStmt:
    term: Term


@dataclass(frozen=True)
class _ConstStmt:
    name: str
    init: Term
    location: Optional[Location]


@dataclass(frozen=True)
class _FuncStmt:
    name: str
    params: tuple[Field, ...]
    ret_type: Type
    body: Term
    location: Optional[Location]


@dataclass(frozen=True)
class _TypeStmt:
    name: str
    location: Optional[Location]


_Stmt = _ExprStmt | _ConstStmt | _FuncStmt | _TypeStmt


class ProgramTransformer(Transformer):
    """Transform the Lark parse tree into terms and types.

    Type aliases are resolved while transforming: the tree is visited
    bottom-up, left to right, so an alias is registered before any later
    statement's annotations are built. Not reusable across parses.
    """

    def __init__(self, file: Optional[str] = None):
        super().__init__()
        self.file = file
        self.aliases: dict[str, Type] = {}

    def _loc(self, meta) -> Optional[Location]:
        if meta.empty:
            return None
        return Location(line=meta.line, column=meta.column, file=self.file)

    def _token_loc(self, token: Token) -> Location:
        return Location(line=token.line, column=token.column, file=self.file)

    def _closed(self, ty: Type, location: Optional[Location]) -> Type:
        free = ty.free_vars()
        if free:
            raise ParseError(f"Unknown type name: {', '.join(sorted(free))}", location)
        return ty

    def _fold(self, stmts: list[_Stmt], final: Optional[Term], location: Optional[Location]) -> Term:
        if final is None:
            if not stmts:
                raise ParseError("Empty program", location)
            match stmts[-1]:
                case _ExprStmt(term):
                    final = term
                    stmts = stmts[:-1]
                case _ConstStmt(name, _, loc) | _FuncStmt(name, _, _, _, loc):
                    final = Var(name, location=loc)
                case _TypeStmt(_, loc):
                    raise ParseError("Expected an expression after type declaration", loc)

        result = final
        for stmt in reversed(stmts):
            match stmt:
                case _ExprStmt(term):
                    result = Seq(term, result, location=term.location)
                case _ConstStmt(name, init, loc):
                    result = Const(name, init, result, location=loc)
                case _FuncStmt(name, params, ret_type, body, loc):
                    result = RecFunc(name, params, ret_type, body, result, location=loc)
                case _TypeStmt():
                    pass
        return result

    # Statements

    @v_args(meta=True)
    def program(self, meta, children):
        stmts = list(children)
        final = stmts.pop() if stmts and isinstance(stmts[-1], Term) else None
        return self._fold(stmts, final, self._loc(meta))

    @v_args(meta=True)
    def func_body(self, meta, children):
        stmts = list(children)
        final = stmts.pop()
        return self._fold(stmts, final, self._loc(meta))

    def expr_stmt(self, children):
        return _ExprStmt(children[0])

    @v_args(meta=True)
    def const_decl(self, meta, children):
        # A `const x: T = ...` annotation is accepted and ignored; the
        # binding takes the initializer's type.
        name, init = children[0], children[-1]
        return _ConstStmt(str(name), init, self._loc(meta))

    @v_args(meta=True)
    def func_decl(self, meta, children):
        location = self._loc(meta)
        name = str(children[0])
        params = children[1] if len(children) == 4 else ()
        ret_type, body = children[-2], children[-1]
        for param in params:
            self._closed(param.type, location)
        self._closed(ret_type, location)
        return _FuncStmt(name, params, ret_type, body, location)

    @v_args(meta=True)
    def type_decl(self, meta, children):
        location = self._loc(meta)
        name_token, body = children
        name = str(name_token)
        if body == TypeVar(name):
            raise ParseError(f"Type alias {name} refers only to itself", location)
        free = body.free_vars()
        unknown = free - {name}
        if unknown:
            raise ParseError(f"Unknown type name: {', '.join(sorted(unknown))}", location)
        self.aliases[name] = TypeRec(name, body) if name in free else body
        return _TypeStmt(name, location)

    @v_args(meta=True)
    def type_program(self, meta, children):
        return self._closed(children[-1], self._loc(meta))

    # Expressions

    @v_args(meta=True)
    def arrow(self, meta, children):
        location = self._loc(meta)
        body = children[-1]
        params: tuple[Field, ...] = ()
        ret_type: Optional[Type] = None
        for child in children[:-1]:
            if isinstance(child, tuple):
                params = child
            else:
                ret_type = child
        for param in params:
            self._closed(param.type, location)
        if ret_type is not None:
            self._closed(ret_type, location)
        return Func(params, body, ret_type, location=location)

    @v_args(meta=True)
    def if_expr(self, meta, children):
        cond, thn, els = children
        return If(cond, thn, els, location=self._loc(meta))

    @v_args(meta=True)
    def add(self, meta, children):
        left, right = children
        return Add(left, right, location=self._loc(meta))

    @v_args(meta=True)
    def call(self, meta, children):
        args = children[1] if len(children) > 1 else ()
        return Call(children[0], args, location=self._loc(meta))

    @v_args(meta=True)
    def get(self, meta, children):
        obj, name = children
        return ObjectGet(obj, str(name), location=self._loc(meta))

    def number(self, children):
        (token,) = children
        text = str(token)
        value = float(text) if "." in text else int(text)
        return NumLit(value, location=self._token_loc(token))

    @v_args(meta=True)
    def true(self, meta, children):
        return BoolLit(True, location=self._loc(meta))

    @v_args(meta=True)
    def false(self, meta, children):
        return BoolLit(False, location=self._loc(meta))

    def var(self, children):
        (token,) = children
        return Var(str(token), location=self._token_loc(token))

    @v_args(meta=True)
    def object(self, meta, children):
        return ObjectNew(tuple(children), location=self._loc(meta))

    def prop(self, children):
        name, term = children
        return PropTerm(str(name), term)

    def args(self, children):
        return tuple(children)

    def params(self, children):
        return tuple(children)

    def param(self, children):
        name, ty = children
        return Field(str(name), ty)

    # Types

    def func_type(self, children):
        params = children[0] if len(children) == 2 else ()
        return TypeFunc(params, children[-1])

    @v_args(meta=True)
    def object_type(self, meta, children):
        names = [prop.name for prop in children]
        duplicates = sorted({n for n in names if names.count(n) > 1})
        if duplicates:
            raise ParseError(f"Duplicate property in object type: {', '.join(duplicates)}", self._loc(meta))
        return TypeObject(tuple(children))

    def prop_type(self, children):
        name, ty = children
        return Field(str(name), ty)

    def number_type(self, children):
        return NUMBER

    def boolean_type(self, children):
        return BOOLEAN

    def type_ref(self, children):
        (token,) = children
        name = str(token)
        # Unknown names stay as type variables; a type alias body binds its
        # own name, anything else left free is reported by the consumer.
        return self.aliases.get(name, TypeVar(name))


class Parser:
    """Parser for the surface syntax using Lark (LALR)."""

    def __init__(self):
        self.parser = Lark(
            GRAMMAR,
            parser="lalr",
            start=["program", "type_program"],
            propagate_positions=True,
        )

    def parse(self, text: str, file: Optional[str] = None) -> Term:
        """Parse a program into a term."""
        return self._run(text, "program", file)

    def parse_type(self, text: str, file: Optional[str] = None) -> Type:
        """Parse a type, optionally preceded by type alias declarations.

        Example: "type L = { next: () => L }; L"
        """
        return self._run(text, "type_program", file)

    def _run(self, text: str, start: str, file: Optional[str]):
        try:
            tree = self.parser.parse(text, start=start)
        except UnexpectedToken as e:
            loc = Location(line=e.line, column=e.column, file=file)
            if e.token.type == "$END":
                raise ParseError("Unexpected end of input", loc) from e
            expected = sorted(str(tok) for tok in e.expected)
            msg = f"Unexpected token {e.token.value!r}"
            if expected:
                msg += f". Expected: {', '.join(expected)}"
            raise ParseError(msg, loc) from e
        except UnexpectedCharacters as e:
            loc = Location(line=e.line, column=e.column, file=file)
            raise ParseError(f"Unexpected character: {e.char!r}", loc) from e
        except UnexpectedInput as e:
            raise ParseError(f"Parse error: {e}") from e

        try:
            return ProgramTransformer(file).transform(tree)
        except VisitError as e:
            if isinstance(e.orig_exc, ParseError):
                raise e.orig_exc from e
            raise


@lru_cache(maxsize=1)
def _default_parser() -> Parser:
    return Parser()


def parse(text: str, file: Optional[str] = None) -> Term:
    """Parse a program with the shared parser."""
    return _default_parser().parse(text, file)


def parse_type(text: str, file: Optional[str] = None) -> Type:
    """Parse a type with the shared parser."""
    return _default_parser().parse_type(text, file)
