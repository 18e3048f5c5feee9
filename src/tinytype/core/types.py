"""Type representations for the tiny TypeScript-like languages."""

from __future__ import annotations

from dataclasses import dataclass


class Type:
    """Base class for types."""

    def free_vars(self) -> set[str]:
        """Return set of type variable names not bound by an enclosing TypeRec."""
        raise NotImplementedError


@dataclass(frozen=True)
class TypeNumber(Type):
    """The number type."""

    def __str__(self) -> str:
        return "number"

    def free_vars(self) -> set[str]:
        return set()


@dataclass(frozen=True)
class TypeBoolean(Type):
    """The boolean type."""

    def __str__(self) -> str:
        return "boolean"

    def free_vars(self) -> set[str]:
        return set()


@dataclass(frozen=True)
class Field:
    """A named slot: function parameter or object property.

    For parameters the name is documentation only; type equality and
    subtyping never look at it.
    """

    name: str
    type: Type

    def __str__(self) -> str:
        return f"{self.name}: {self.type}"


@dataclass(frozen=True)
class TypeFunc(Type):
    """Function type: (x: σ, ...) => τ."""

    params: tuple[Field, ...]
    ret: Type

    def __str__(self) -> str:
        params = ", ".join(str(p) for p in self.params)
        return f"({params}) => {self.ret}"

    def free_vars(self) -> set[str]:
        result = self.ret.free_vars()
        for param in self.params:
            result |= param.type.free_vars()
        return result


@dataclass(frozen=True)
class TypeObject(Type):
    """Record type: { a: σ; b: τ }.

    Property names are unique in well-formed values; when they are not,
    lookups take the first match.
    """

    props: tuple[Field, ...]

    def __str__(self) -> str:
        if not self.props:
            return "{}"
        props = "; ".join(str(p) for p in self.props)
        return f"{{ {props} }}"

    def free_vars(self) -> set[str]:
        result: set[str] = set()
        for prop in self.props:
            result |= prop.type.free_vars()
        return result

    def get(self, name: str) -> Type | None:
        """Return the type of the first property called ``name``."""
        for prop in self.props:
            if prop.name == name:
                return prop.type
        return None


@dataclass(frozen=True)
class TypeVar(Type):
    """Reference to the binder of an enclosing TypeRec."""

    name: str

    def __str__(self) -> str:
        return self.name

    def free_vars(self) -> set[str]:
        return {self.name}


@dataclass(frozen=True)
class TypeRec(Type):
    """Equirecursive type: μX.τ.

    Denotes the infinite tree obtained by replacing every free ``X`` in
    ``body`` with the TypeRec itself.
    """

    name: str
    body: Type

    def __str__(self) -> str:
        return f"μ{self.name}.{self.body}"

    def free_vars(self) -> set[str]:
        return self.body.free_vars() - {self.name}


NUMBER = TypeNumber()
BOOLEAN = TypeBoolean()
