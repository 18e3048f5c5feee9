"""Type environments."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Optional

from tinytype.core.ast import Term
from tinytype.core.errors import UndefinedVariable
from tinytype.core.types import Field, Type


class TypeEnv:
    """Typing environment Γ mapping variable names to types.

    Extension is copy-on-write: ``extend`` returns a new environment and never
    touches the receiver, so one environment can be shared by sibling subtrees
    (both branches of a conditional, every argument of a call).
    """

    def __init__(self, bindings: dict[str, Type] | None = None):
        self._bindings = dict(bindings) if bindings is not None else {}

    @staticmethod
    def empty() -> "TypeEnv":
        """Create an empty environment."""
        return TypeEnv()

    def lookup(self, name: str, term: Optional[Term] = None) -> Type:
        """Look up the type bound to ``name``.

        Args:
            name: Variable name
            term: Referencing term, attached to the error for positional context

        Returns:
            The bound type

        Raises:
            UndefinedVariable: If ``name`` is not bound
        """
        try:
            return self._bindings[name]
        except KeyError as e:
            raise UndefinedVariable(name, term) from e

    def extend(self, name: str, ty: Type) -> "TypeEnv":
        """Return a new environment with ``name`` bound to ``ty``."""
        bindings = dict(self._bindings)
        bindings[name] = ty
        return TypeEnv(bindings)

    def extend_many(self, fields: Iterable[Field]) -> "TypeEnv":
        """Return a new environment with every field bound; later names win."""
        bindings = dict(self._bindings)
        for f in fields:
            bindings[f.name] = f.type
        return TypeEnv(bindings)

    def define(self, name: str, ty: Type) -> None:
        """Bind ``name`` in place.

        Only the ``leaky_scopes`` checker mode calls this; it reproduces the
        variable-capture bug of checkers that forget to copy the environment.
        """
        self._bindings[name] = ty

    def __contains__(self, name: object) -> bool:
        return name in self._bindings

    def __len__(self) -> int:
        return len(self._bindings)

    def __str__(self) -> str:
        bindings = ", ".join(f"{k}: {v}" for k, v in self._bindings.items())
        return f"TypeEnv({bindings})"
