"""Structural subtyping with equirecursive types."""

from __future__ import annotations

from loguru import logger

from tinytype.core.equality import SeenPairs, alpha_equal, unfold
from tinytype.core.types import (
    Type,
    TypeBoolean,
    TypeFunc,
    TypeNumber,
    TypeObject,
    TypeRec,
    TypeVar,
)


def is_subtype(sub: Type, sup: Type) -> bool:
    """Decide whether a ``sub`` value can be used wherever ``sup`` is expected.

    Rules, by the shape of ``sup``:

    - number, boolean: ``sub`` has the same shape.
    - functions: same arity, covariant return type, contravariant parameters.
    - objects: every property of ``sup`` exists in ``sub`` (width) with a
      subtype of its type (depth). Extra properties on ``sub`` are ignored.

    TypeRec on either side is unfolded first. Pairs already under comparison
    are assumed to hold, which makes the check terminate on recursive types.
    """
    return _subtype(sub, sup, ())


def _subtype(t1: Type, t2: Type, seen: SeenPairs) -> bool:
    if t1 == t2:
        return True
    if any(alpha_equal(t1, s1) and alpha_equal(t2, s2) for s1, s2 in seen):
        return True

    if isinstance(t1, TypeRec):
        logger.trace("subtype.unfold side=sub type={}", t1)
        return _subtype(unfold(t1), t2, seen + ((t1, t2),))
    if isinstance(t2, TypeRec):
        logger.trace("subtype.unfold side=sup type={}", t2)
        return _subtype(t1, unfold(t2), seen + ((t1, t2),))
    if isinstance(t1, TypeVar):
        raise ValueError(f"Unbound type variable: {t1.name}")

    match t2:
        case TypeNumber():
            return isinstance(t1, TypeNumber)
        case TypeBoolean():
            return isinstance(t1, TypeBoolean)
        case TypeFunc(params2, ret2):
            if not isinstance(t1, TypeFunc) or len(t1.params) != len(params2):
                return False
            if not _subtype(t1.ret, ret2, seen):
                return False
            # Parameters are contravariant
            for p1, p2 in zip(t1.params, params2):
                if not _subtype(p2.type, p1.type, seen):
                    return False
            return True
        case TypeObject(props2):
            if not isinstance(t1, TypeObject):
                return False
            for prop2 in props2:
                prop1_type = t1.get(prop2.name)
                if prop1_type is None:
                    return False
                if not _subtype(prop1_type, prop2.type, seen):
                    return False
            return True
        case TypeVar(name):
            raise ValueError(f"Unbound type variable: {name}")
        case _:
            return False
