"""Core language: AST, types, equality, subtyping and the type checker."""

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
from tinytype.core.checker import Features, TypeChecker, Variant, typecheck
from tinytype.core.context import TypeEnv
from tinytype.core.equality import alpha_equal, expand_type, simplify_type, type_equal
from tinytype.core.errors import (
    ArgumentLengthMismatch,
    ArgumentTypeMismatch,
    BooleanExpected,
    BranchTypeMismatch,
    FunctionExpected,
    NumberExpected,
    ObjectExpected,
    ReturnTypeMismatch,
    TypeError,
    UnboundTypeVariable,
    UndefinedVariable,
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

__all__ = [
    # AST
    "Term",
    "BoolLit",
    "NumLit",
    "Add",
    "If",
    "Var",
    "Func",
    "Call",
    "Seq",
    "Const",
    "PropTerm",
    "ObjectNew",
    "ObjectGet",
    "RecFunc",
    # Types
    "Type",
    "TypeNumber",
    "TypeBoolean",
    "TypeFunc",
    "TypeObject",
    "TypeVar",
    "TypeRec",
    "Field",
    "NUMBER",
    "BOOLEAN",
    # Environment
    "TypeEnv",
    # Equality and subtyping
    "expand_type",
    "simplify_type",
    "alpha_equal",
    "type_equal",
    "is_subtype",
    # Errors
    "TypeError",
    "UndefinedVariable",
    "NumberExpected",
    "BooleanExpected",
    "BranchTypeMismatch",
    "FunctionExpected",
    "ArgumentLengthMismatch",
    "ArgumentTypeMismatch",
    "ObjectExpected",
    "UnknownProperty",
    "ReturnTypeMismatch",
    "UnboundTypeVariable",
    "UnsupportedSyntax",
    "UnsupportedType",
    # Type Checker
    "Features",
    "Variant",
    "TypeChecker",
    "typecheck",
]
