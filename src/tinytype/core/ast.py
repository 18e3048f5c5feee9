"""Term AST shared by every checker variant.

Terms are built once by the parser and never mutated. Every node carries an
optional source location that is ignored by equality.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from tinytype.core.types import Field, Type
from tinytype.utils.location import Location


class Term:
    """Base class for terms."""

    location: Optional[Location]


def _params_str(params: tuple[Field, ...]) -> str:
    return ", ".join(str(p) for p in params)


@dataclass(frozen=True)
class BoolLit(Term):
    """Boolean literal: true / false."""

    value: bool
    location: Optional[Location] = field(default=None, compare=False, repr=False)

    def __str__(self) -> str:
        return "true" if self.value else "false"


@dataclass(frozen=True)
class NumLit(Term):
    """Number literal: 42"""

    value: int | float
    location: Optional[Location] = field(default=None, compare=False, repr=False)

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class Add(Term):
    """Addition: left + right."""

    left: Term
    right: Term
    location: Optional[Location] = field(default=None, compare=False, repr=False)

    def __str__(self) -> str:
        return f"({self.left} + {self.right})"


@dataclass(frozen=True)
class If(Term):
    """Conditional expression: cond ? thn : els."""

    cond: Term
    thn: Term
    els: Term
    location: Optional[Location] = field(default=None, compare=False, repr=False)

    def __str__(self) -> str:
        return f"({self.cond} ? {self.thn} : {self.els})"


@dataclass(frozen=True)
class Var(Term):
    """Variable reference by name."""

    name: str
    location: Optional[Location] = field(default=None, compare=False, repr=False)

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class Func(Term):
    """Arrow function: (x: σ, ...) => body

    ret_type is the optional return annotation: (x: σ): τ => body
    """

    params: tuple[Field, ...]
    body: Term
    ret_type: Optional[Type] = None
    location: Optional[Location] = field(default=None, compare=False, repr=False)

    def __str__(self) -> str:
        annotation = f": {self.ret_type}" if self.ret_type is not None else ""
        return f"(({_params_str(self.params)}){annotation} => {self.body})"


@dataclass(frozen=True)
class Call(Term):
    """Function call: func(arg, ...)."""

    func: Term
    args: tuple[Term, ...]
    location: Optional[Location] = field(default=None, compare=False, repr=False)

    def __str__(self) -> str:
        args = ", ".join(str(arg) for arg in self.args)
        return f"{self.func}({args})"


@dataclass(frozen=True)
class Seq(Term):
    """Sequencing: body; rest. The value of body is discarded."""

    body: Term
    rest: Term
    location: Optional[Location] = field(default=None, compare=False, repr=False)

    def __str__(self) -> str:
        return f"{self.body}; {self.rest}"


@dataclass(frozen=True)
class Const(Term):
    """Let binding: const name = init; rest"""

    name: str
    init: Term
    rest: Term
    location: Optional[Location] = field(default=None, compare=False, repr=False)

    def __str__(self) -> str:
        return f"const {self.name} = {self.init}; {self.rest}"


@dataclass(frozen=True)
class PropTerm:
    """One `name: term` entry of an object literal."""

    name: str
    term: Term

    def __str__(self) -> str:
        return f"{self.name}: {self.term}"


@dataclass(frozen=True)
class ObjectNew(Term):
    """Object literal: { a: t, b: u }."""

    props: tuple[PropTerm, ...]
    location: Optional[Location] = field(default=None, compare=False, repr=False)

    def __str__(self) -> str:
        if not self.props:
            return "{}"
        props = ", ".join(str(p) for p in self.props)
        return f"{{ {props} }}"


@dataclass(frozen=True)
class ObjectGet(Term):
    """Property access: obj.prop_name."""

    obj: Term
    prop_name: str
    location: Optional[Location] = field(default=None, compare=False, repr=False)

    def __str__(self) -> str:
        return f"{self.obj}.{self.prop_name}"


@dataclass(frozen=True)
class RecFunc(Term):
    """Recursive function declaration followed by the rest of the program.

        function func_name(x: σ, ...): ret_type { return body; } rest

    func_name is in scope inside body and inside rest.
    """

    func_name: str
    params: tuple[Field, ...]
    ret_type: Type
    body: Term
    rest: Term
    location: Optional[Location] = field(default=None, compare=False, repr=False)

    def __str__(self) -> str:
        return (
            f"function {self.func_name}({_params_str(self.params)}): {self.ret_type} "
            f"{{ return {self.body}; }} {self.rest}"
        )
