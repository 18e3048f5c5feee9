"""Type checker shared by every language variant.

One structural recursion over terms covers all variants; a variant is a set
of ``Features`` that decides which term and type forms are accepted and which
relation (equality or subtyping) is used where two types meet.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Optional

from loguru import logger

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
    RecFunc,
    Seq,
    Term,
    Var,
)
from tinytype.core.context import TypeEnv
from tinytype.core.equality import simplify_type, type_equal
from tinytype.core.errors import (
    ArgumentLengthMismatch,
    ArgumentTypeMismatch,
    BooleanExpected,
    BranchTypeMismatch,
    FunctionExpected,
    NumberExpected,
    ObjectExpected,
    ReturnTypeMismatch,
    UnboundTypeVariable,
    UnknownProperty,
    UnsupportedSyntax,
    UnsupportedType,
)
from tinytype.core.subtype import is_subtype
from tinytype.core.types import (
    BOOLEAN,
    NUMBER,
    Field,
    Type,
    TypeBoolean,
    TypeFunc,
    TypeNumber,
    TypeObject,
    TypeRec,
    TypeVar,
)


@dataclass(frozen=True)
class Features:
    """Language features a checker accepts.

    check_conditions and leaky_scopes switch between the sound checker and
    the unsound behaviour of two classic mistakes: not checking that a
    condition is boolean, and binding function parameters into the caller's
    environment instead of a copy.
    """

    functions: bool = True
    objects: bool = False
    recursive_functions: bool = False
    recursive_types: bool = False
    subtyping: bool = False
    check_conditions: bool = True
    leaky_scopes: bool = False


class Variant(str, Enum):
    """Language variants, from plain arithmetic to subtyping."""

    ARITH = "arith"
    BASIC = "basic"
    OBJ = "obj"
    RECFUNC = "recfunc"
    REC = "rec"
    SUB = "sub"

    def features(self, **overrides: Any) -> Features:
        """Return the preset for this variant with ``overrides`` applied."""
        return replace(_PRESETS[self], **overrides)


_PRESETS: dict[Variant, Features] = {
    Variant.ARITH: Features(functions=False),
    Variant.BASIC: Features(),
    Variant.OBJ: Features(objects=True),
    Variant.RECFUNC: Features(recursive_functions=True),
    Variant.REC: Features(objects=True, recursive_functions=True, recursive_types=True),
    Variant.SUB: Features(objects=True, subtyping=True),
}


class TypeChecker:
    """Type checker for one language variant."""

    def __init__(self, features: Features | None = None):
        self.features = features if features is not None else Variant.REC.features()

    @classmethod
    def for_variant(cls, variant: Variant | str, **overrides: Any) -> "TypeChecker":
        """Create a checker from a variant preset.

        Example: TypeChecker.for_variant("basic", leaky_scopes=True)
        """
        return cls(Variant(variant).features(**overrides))

    def check(self, term: Term, env: TypeEnv | None = None) -> Type:
        """Type check a whole program.

        Args:
            term: Root of the program
            env: Initial environment, empty by default

        Returns:
            The program's type

        Raises:
            TypeError: The first violation found, in traversal order
        """
        env = env if env is not None else TypeEnv.empty()
        logger.debug("check.start features={}", self.features)
        try:
            ty = self.infer(env, term)
        except Exception as e:
            logger.debug("check.error error={}", e)
            raise
        logger.debug("check.done type={}", ty)
        return ty

    def infer(self, env: TypeEnv, term: Term) -> Type:
        """Compute the type of ``term`` in ``env``.

        Raises:
            TypeError: If the term is ill-typed or outside the variant
        """
        match term:
            case BoolLit():
                return BOOLEAN

            case NumLit():
                return NUMBER

            case Add(left, right):
                # Left to right; a bad left operand is reported first
                left_type = simplify_type(self.infer(env, left))
                if not isinstance(left_type, TypeNumber):
                    raise NumberExpected(left_type, term)
                right_type = simplify_type(self.infer(env, right))
                if not isinstance(right_type, TypeNumber):
                    raise NumberExpected(right_type, term)
                return NUMBER

            case If(cond, thn, els):
                cond_type = simplify_type(self.infer(env, cond))
                if self.features.check_conditions and not isinstance(cond_type, TypeBoolean):
                    raise BooleanExpected(cond_type, cond)
                then_type = self.infer(env, thn)
                else_type = self.infer(env, els)
                return self._join(then_type, else_type, term)

            case Var(name):
                self._require(self.features.functions, term)
                return env.lookup(name, term)

            case Func(params, body, ret_type):
                self._require(self.features.functions, term)
                self._validate_params(params, term)
                if ret_type is not None:
                    self._validate_type(ret_type, term)
                if self.features.leaky_scopes:
                    for param in params:
                        env.define(param.name, param.type)
                    body_env = env
                else:
                    body_env = env.extend_many(params)
                body_type = self.infer(body_env, body)
                if ret_type is not None and not self._compatible(body_type, ret_type):
                    raise ReturnTypeMismatch(ret_type, body_type, term)
                return TypeFunc(params, body_type)

            case Call(func, args):
                self._require(self.features.functions, term)
                func_type = simplify_type(self.infer(env, func))
                if not isinstance(func_type, TypeFunc):
                    raise FunctionExpected(func_type, func)
                if len(func_type.params) != len(args):
                    raise ArgumentLengthMismatch(len(func_type.params), len(args), term)
                for arg, param in zip(args, func_type.params):
                    arg_type = self.infer(env, arg)
                    if not self._compatible(arg_type, param.type):
                        raise ArgumentTypeMismatch(param.type, arg_type, term)
                # The declared return type, never re-derived from the arguments
                return func_type.ret

            case Seq(body, rest):
                self._require(self.features.functions, term)
                self.infer(env, body)
                return self.infer(env, rest)

            case Const(name, init, rest):
                self._require(self.features.functions, term)
                init_type = self._infer_const_init(env, name, init, term)
                return self.infer(env.extend(name, init_type), rest)

            case ObjectNew(props):
                self._require(self.features.objects, term)
                return TypeObject(tuple(Field(p.name, self.infer(env, p.term)) for p in props))

            case ObjectGet(obj, prop_name):
                self._require(self.features.objects, term)
                obj_type = simplify_type(self.infer(env, obj))
                if not isinstance(obj_type, TypeObject):
                    raise ObjectExpected(obj_type, obj)
                prop_type = obj_type.get(prop_name)
                if prop_type is None:
                    raise UnknownProperty(prop_name, term)
                return prop_type

            case RecFunc(func_name, params, ret_type, body, rest):
                self._require(self.features.recursive_functions, term)
                self._validate_params(params, term)
                self._validate_type(ret_type, term)
                func_type = TypeFunc(params, ret_type)
                # Bound before the body is checked so the function can call itself
                body_env = env.extend(func_name, func_type).extend_many(params)
                body_type = self.infer(body_env, body)
                if not self._compatible(body_type, ret_type):
                    raise ReturnTypeMismatch(ret_type, body_type, term)
                return self.infer(env.extend(func_name, func_type), rest)

            case _:
                raise UnsupportedSyntax(term)

    def _infer_const_init(self, env: TypeEnv, name: str, init: Term, term: Const) -> Type:
        """Type of a const initializer.

        An arrow function with a return annotation may refer to the constant
        it initializes when recursive functions are enabled.
        """
        if not (
            self.features.recursive_functions
            and isinstance(init, Func)
            and init.ret_type is not None
        ):
            return self.infer(env, init)

        declared = TypeFunc(init.params, init.ret_type)
        init_type = self.infer(env.extend(name, declared), init)
        if not self._compatible(init_type, declared):
            raise ReturnTypeMismatch(declared, init_type, term)
        return init_type

    def _join(self, then_type: Type, else_type: Type, term: Term) -> Type:
        """Result type of a conditional from the types of its branches."""
        if self.features.subtyping:
            if is_subtype(then_type, else_type):
                return else_type
            if is_subtype(else_type, then_type):
                return then_type
            raise BranchTypeMismatch(then_type, else_type, term)
        if not type_equal(then_type, else_type):
            raise BranchTypeMismatch(then_type, else_type, term)
        return then_type

    def _compatible(self, actual: Type, expected: Type) -> bool:
        if self.features.subtyping:
            return is_subtype(actual, expected)
        return type_equal(actual, expected)

    def _require(self, enabled: bool, term: Term) -> None:
        if not enabled:
            raise UnsupportedSyntax(term)

    def _validate_params(self, params: tuple[Field, ...], term: Term) -> None:
        for param in params:
            self._validate_type(param.type, term)

    def _validate_type(self, ty: Type, term: Term) -> None:
        """Reject annotations the variant cannot express."""
        free = ty.free_vars()
        if free:
            raise UnboundTypeVariable(ty, free, term)
        self._validate_shape(ty, ty, term)

    def _validate_shape(self, ty: Type, annotation: Type, term: Term) -> None:
        match ty:
            case TypeNumber() | TypeBoolean():
                return
            case TypeFunc(params, ret):
                if not self.features.functions:
                    raise UnsupportedType(annotation, term)
                for param in params:
                    self._validate_shape(param.type, annotation, term)
                self._validate_shape(ret, annotation, term)
            case TypeObject(props):
                if not self.features.objects:
                    raise UnsupportedType(annotation, term)
                for prop in props:
                    self._validate_shape(prop.type, annotation, term)
            case TypeRec(_, body):
                if not self.features.recursive_types:
                    raise UnsupportedType(annotation, term)
                self._validate_shape(body, annotation, term)
            case TypeVar():
                if not self.features.recursive_types:
                    raise UnsupportedType(annotation, term)


def typecheck(
    term: Term,
    env: Optional[TypeEnv] = None,
    variant: Variant | str = Variant.REC,
    **overrides: Any,
) -> Type:
    """Type check ``term`` with a variant preset.

    Example:
        typecheck(parse("true ? 1 : 2"), variant="arith")  # TypeNumber()
    """
    return TypeChecker.for_variant(variant, **overrides).check(term, env)
