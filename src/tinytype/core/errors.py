"""Error types for the type checkers."""

from typing import Optional

from tinytype.core.ast import Term
from tinytype.core.types import Type
from tinytype.utils.location import Location


class TypeError(Exception):
    """Base class for type errors.

    Carries the offending term, when known, so callers can map the error back
    to a source span.
    """

    location: Location | None

    def __init__(self, message: str, term: Optional[Term] = None):
        self.message = message
        self.term = term
        self.location = term.location if term is not None else None
        if self.location is not None:
            super().__init__(f"{self.location}: {message}")
        else:
            super().__init__(message)


class UndefinedVariable(TypeError):
    """Variable not found in the type environment."""

    def __init__(self, name: str, term: Optional[Term] = None):
        self.name = name
        super().__init__(f"undefined variable: {name}", term)


class NumberExpected(TypeError):
    """Operand of `+` is not a number."""

    def __init__(self, actual: Type, term: Optional[Term] = None):
        self.actual = actual
        super().__init__("number expected", term)


class BooleanExpected(TypeError):
    """Condition of a conditional expression is not a boolean."""

    def __init__(self, actual: Type, term: Optional[Term] = None):
        self.actual = actual
        super().__init__("boolean expected", term)


class BranchTypeMismatch(TypeError):
    """Branches of a conditional expression have incompatible types."""

    def __init__(self, then_type: Type, else_type: Type, term: Optional[Term] = None):
        self.then_type = then_type
        self.else_type = else_type
        super().__init__("then and else have different types", term)


class FunctionExpected(TypeError):
    """Callee of a call is not a function."""

    def __init__(self, actual: Type, term: Optional[Term] = None):
        self.actual = actual
        super().__init__("function expected", term)


class ArgumentLengthMismatch(TypeError):
    """Call passes a different number of arguments than the function declares."""

    def __init__(self, expected: int, actual: int, term: Optional[Term] = None):
        self.expected = expected
        self.actual = actual
        super().__init__("argument length mismatch", term)


class ArgumentTypeMismatch(TypeError):
    """Argument type is not compatible with the declared parameter type."""

    def __init__(self, expected: Type, actual: Type, term: Optional[Term] = None):
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"argument type mismatch: expected {expected}, but got {actual}", term
        )


class ObjectExpected(TypeError):
    """Property access on a value that is not an object."""

    def __init__(self, actual: Type, term: Optional[Term] = None):
        self.actual = actual
        super().__init__("object type expected", term)


class UnknownProperty(TypeError):
    """Property access names a property the object type does not have."""

    def __init__(self, name: str, term: Optional[Term] = None):
        self.name = name
        super().__init__(f"unknown property name: {name}", term)


class ReturnTypeMismatch(TypeError):
    """Function body type is not compatible with the declared return type."""

    def __init__(self, expected: Type, actual: Type, term: Optional[Term] = None):
        self.expected = expected
        self.actual = actual
        super().__init__("return type mismatch", term)


class UnboundTypeVariable(TypeError):
    """Type annotation mentions a type variable no TypeRec binds."""

    def __init__(self, ty: Type, names: set[str], term: Optional[Term] = None):
        self.type = ty
        self.names = names
        super().__init__(f"unbound type variables {', '.join(sorted(names))} in {ty}", term)


class UnsupportedSyntax(TypeError):
    """Term form not part of the selected language variant."""

    def __init__(self, term: Term):
        super().__init__(f"not supported by this language variant: {type(term).__name__}", term)


class UnsupportedType(TypeError):
    """Type annotation uses a form the selected language variant does not have."""

    def __init__(self, ty: Type, term: Optional[Term] = None):
        self.type = ty
        super().__init__(f"type not supported by this language variant: {ty}", term)
