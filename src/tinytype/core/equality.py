"""Structural type equality with equirecursive types.

Two types are equal when they denote the same (possibly infinite) tree once
every TypeRec is unfolded. Equality is decided co-inductively: when a pair of
types is compared a second time while it is still being compared, the pair is
assumed equal. The pairs under comparison are kept in ``seen``, which is
threaded through the recursion and starts empty at every top-level call.
"""

from __future__ import annotations

from loguru import logger

from tinytype.core.types import (
    Field,
    Type,
    TypeBoolean,
    TypeFunc,
    TypeNumber,
    TypeObject,
    TypeRec,
    TypeVar,
)

SeenPairs = tuple[tuple[Type, Type], ...]


def expand_type(ty: Type, var_name: str, replacement: Type) -> Type:
    """Replace every free ``var_name`` in ``ty`` with ``replacement``.

    Args:
        ty: Type to rewrite
        var_name: Name of the type variable to replace
        replacement: Type put in its place, normally the TypeRec binding it

    Returns:
        The rewritten type. A TypeRec binding ``var_name`` again shadows it
        and is returned unchanged.
    """
    match ty:
        case TypeNumber() | TypeBoolean():
            return ty
        case TypeFunc(params, ret):
            return TypeFunc(
                tuple(Field(p.name, expand_type(p.type, var_name, replacement)) for p in params),
                expand_type(ret, var_name, replacement),
            )
        case TypeObject(props):
            return TypeObject(
                tuple(Field(p.name, expand_type(p.type, var_name, replacement)) for p in props)
            )
        case TypeVar(name):
            return replacement if name == var_name else ty
        case TypeRec(name, body):
            if name == var_name:
                return ty
            return TypeRec(name, expand_type(body, var_name, replacement))
        case _:
            raise ValueError(f"Unknown type: {ty!r}")


def unfold(ty: TypeRec) -> Type:
    """One unfolding step: μX.τ becomes τ[X := μX.τ]."""
    return expand_type(ty.body, ty.name, ty)


def _check_contractive(ty: TypeRec) -> None:
    names = set()
    current: Type = ty
    while isinstance(current, TypeRec):
        names.add(current.name)
        current = current.body
    if isinstance(current, TypeVar) and current.name in names:
        raise ValueError(f"Non-contractive recursive type: {ty}")


def simplify_type(ty: Type) -> Type:
    """Unfold outer TypeRec binders until the outermost tag is not Rec.

    Raises:
        ValueError: If the type is a non-contractive binder such as μX.X
    """
    while isinstance(ty, TypeRec):
        _check_contractive(ty)
        ty = unfold(ty)
    return ty


def _names(props: tuple[Field, ...]) -> list[str]:
    return list(dict.fromkeys(p.name for p in props))


def _same_keys(props1: tuple[Field, ...], props2: tuple[Field, ...]) -> bool:
    return len(props1) == len(props2) and set(_names(props1)) == set(_names(props2))


def alpha_equal(t1: Type, t2: Type, renaming: dict[str, str] | None = None) -> bool:
    """Syntactic equality up to renaming of TypeRec binders, without unfolding.

    This is the cheap check used to recognise a pair that is already in
    ``seen``. ``renaming`` maps binder names of ``t1`` to those of ``t2``.
    """
    if renaming is None:
        renaming = {}
    match t2:
        case TypeNumber():
            return isinstance(t1, TypeNumber)
        case TypeBoolean():
            return isinstance(t1, TypeBoolean)
        case TypeFunc(params2, ret2):
            if not isinstance(t1, TypeFunc) or len(t1.params) != len(params2):
                return False
            for p1, p2 in zip(t1.params, params2):
                if not alpha_equal(p1.type, p2.type, renaming):
                    return False
            return alpha_equal(t1.ret, ret2, renaming)
        case TypeObject(props2):
            if not isinstance(t1, TypeObject) or not _same_keys(t1.props, props2):
                return False
            return all(
                alpha_equal(t1.get(name), t2.get(name), renaming) for name in _names(t1.props)
            )
        case TypeVar(name2):
            if not isinstance(t1, TypeVar):
                return False
            return renaming.get(t1.name, t1.name) == name2
        case TypeRec(name2, body2):
            if not isinstance(t1, TypeRec):
                return False
            return alpha_equal(t1.body, body2, {**renaming, t1.name: name2})
        case _:
            raise ValueError(f"Unknown type: {t2!r}")


def _assumed(t1: Type, t2: Type, seen: SeenPairs) -> bool:
    return any(alpha_equal(t1, s1) and alpha_equal(t2, s2) for s1, s2 in seen)


def type_equal(t1: Type, t2: Type) -> bool:
    """Decide whether two types denote the same tree.

    Reflexive and symmetric over well-formed types, and terminating for any
    finite description: each TypeRec pair is unfolded at most once along a
    path before the ``seen`` check answers for it.
    """
    return _equal(t1, t2, ())


def _equal(t1: Type, t2: Type, seen: SeenPairs) -> bool:
    if t1 == t2:
        return True
    if _assumed(t1, t2, seen):
        return True

    if isinstance(t1, TypeRec):
        logger.trace("equal.unfold side=left type={}", t1)
        return _equal(unfold(t1), t2, seen + ((t1, t2),))
    if isinstance(t2, TypeRec):
        logger.trace("equal.unfold side=right type={}", t2)
        return _equal(t1, unfold(t2), seen + ((t1, t2),))
    if isinstance(t1, TypeVar):
        raise ValueError(f"Unbound type variable: {t1.name}")

    match t2:
        case TypeNumber():
            return isinstance(t1, TypeNumber)
        case TypeBoolean():
            return isinstance(t1, TypeBoolean)
        case TypeFunc(params2, ret2):
            # Parameter names are not compared
            if not isinstance(t1, TypeFunc) or len(t1.params) != len(params2):
                return False
            for p1, p2 in zip(t1.params, params2):
                if not _equal(p1.type, p2.type, seen):
                    return False
            return _equal(t1.ret, ret2, seen)
        case TypeObject(props2):
            # Same key set; a duplicated name is read through its first occurrence
            if not isinstance(t1, TypeObject) or not _same_keys(t1.props, props2):
                return False
            for name in _names(t1.props):
                if not _equal(t1.get(name), t2.get(name), seen):
                    return False
            return True
        case TypeVar(name):
            raise ValueError(f"Unbound type variable: {name}")
        case _:
            raise ValueError(f"Unknown type: {t2!r}")
