"""Tests for the type checker on hand-built terms."""

import pytest

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
    Var,
)
from tinytype.core.checker import Features, TypeChecker, Variant, typecheck
from tinytype.core.context import TypeEnv
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
    UndefinedVariable,
    UnknownProperty,
    UnsupportedSyntax,
    UnsupportedType,
)
from tinytype.core.types import (
    BOOLEAN,
    NUMBER,
    Field,
    TypeFunc,
    TypeObject,
    TypeRec,
    TypeVar,
)

X_NUM = (Field("x", NUMBER),)


# =============================================================================
# Variants
# =============================================================================


class TestVariants:
    """Tests for variant presets."""

    def test_default_is_rec(self):
        features = TypeChecker().features
        assert features.objects and features.recursive_functions and features.recursive_types
        assert not features.subtyping

    def test_presets(self):
        assert not Variant.ARITH.features().functions
        assert Variant.BASIC.features() == Features()
        assert Variant.OBJ.features().objects
        assert Variant.RECFUNC.features().recursive_functions
        assert not Variant.RECFUNC.features().objects
        assert Variant.SUB.features().subtyping

    def test_overrides(self):
        features = Variant.BASIC.features(leaky_scopes=True)
        assert features.leaky_scopes
        assert not Variant.BASIC.features().leaky_scopes

    def test_for_variant_accepts_names(self):
        checker = TypeChecker.for_variant("sub", check_conditions=False)
        assert checker.features.subtyping
        assert not checker.features.check_conditions


# =============================================================================
# Arithmetic and conditionals
# =============================================================================


class TestArith:
    """Tests for literals, addition and conditionals."""

    def test_literals(self):
        checker = TypeChecker.for_variant("arith")
        assert checker.check(NumLit(1)) == NUMBER
        assert checker.check(BoolLit(True)) == BOOLEAN

    def test_add(self):
        assert typecheck(Add(NumLit(1), NumLit(2)), variant="arith") == NUMBER

    def test_add_left_reported_first(self):
        term = Add(BoolLit(True), BoolLit(False))
        with pytest.raises(NumberExpected) as exc_info:
            typecheck(term, variant="arith")
        assert exc_info.value.term is term
        assert exc_info.value.actual == BOOLEAN

    def test_if(self):
        term = If(BoolLit(True), NumLit(1), NumLit(2))
        assert typecheck(term, variant="arith") == NUMBER

    def test_if_condition_not_boolean(self):
        cond = NumLit(1)
        with pytest.raises(BooleanExpected) as exc_info:
            typecheck(If(cond, NumLit(1), NumLit(2)), variant="arith")
        assert exc_info.value.term is cond

    def test_unchecked_conditions(self):
        """With condition checking off any condition type is accepted."""
        term = If(NumLit(1), NumLit(1), NumLit(2))
        assert typecheck(term, variant="arith", check_conditions=False) == NUMBER

    def test_branch_mismatch(self):
        term = If(BoolLit(True), NumLit(1), BoolLit(True))
        with pytest.raises(BranchTypeMismatch) as exc_info:
            typecheck(term, variant="arith")
        assert exc_info.value.then_type == NUMBER
        assert exc_info.value.else_type == BOOLEAN

    def test_arith_rejects_variables(self):
        with pytest.raises(UnsupportedSyntax):
            typecheck(Var("x"), variant="arith")

    def test_arith_rejects_functions(self):
        with pytest.raises(UnsupportedSyntax):
            typecheck(Func(X_NUM, Var("x")), variant="arith")


# =============================================================================
# Functions, sequences and constants
# =============================================================================


class TestFunctions:
    """Tests for functions and calls."""

    def test_identity(self):
        assert typecheck(Func(X_NUM, Var("x")), variant="basic") == TypeFunc(X_NUM, NUMBER)

    def test_call(self):
        term = Call(Func(X_NUM, Var("x")), (NumLit(1),))
        assert typecheck(term, variant="basic") == NUMBER

    def test_call_returns_declared_return(self):
        """The result is the function type's return type."""
        env = TypeEnv.empty().extend("f", TypeFunc(X_NUM, BOOLEAN))
        assert TypeChecker.for_variant("basic").check(Call(Var("f"), (NumLit(1),)), env) == BOOLEAN

    def test_function_expected(self):
        callee = NumLit(1)
        with pytest.raises(FunctionExpected) as exc_info:
            typecheck(Call(callee, ()), variant="basic")
        assert exc_info.value.term is callee

    def test_argument_length(self):
        term = Call(Func(X_NUM, Var("x")), (NumLit(1), NumLit(2)))
        with pytest.raises(ArgumentLengthMismatch) as exc_info:
            typecheck(term, variant="basic")
        assert (exc_info.value.expected, exc_info.value.actual) == (1, 2)
        assert exc_info.value.term is term

    def test_argument_type(self):
        term = Call(Func(X_NUM, Var("x")), (BoolLit(True),))
        with pytest.raises(ArgumentTypeMismatch) as exc_info:
            typecheck(term, variant="basic")
        assert str(exc_info.value) == "argument type mismatch: expected number, but got boolean"

    def test_params_scoped_to_body(self):
        """((x: number) => x)(x) does not see the parameter from outside."""
        term = Call(Func(X_NUM, Var("x")), (Var("x"),))
        with pytest.raises(UndefinedVariable):
            typecheck(term, variant="basic")

    def test_leaky_scopes(self):
        """With leaky scopes the parameter escapes into the caller's scope."""
        term = Call(Func(X_NUM, Var("x")), (Var("x"),))
        assert typecheck(term, variant="basic", leaky_scopes=True) == NUMBER

    def test_return_annotation(self):
        term = Func(X_NUM, Var("x"), NUMBER)
        assert typecheck(term, variant="basic") == TypeFunc(X_NUM, NUMBER)

    def test_return_annotation_mismatch(self):
        with pytest.raises(ReturnTypeMismatch):
            typecheck(Func(X_NUM, Var("x"), BOOLEAN), variant="basic")

    def test_seq(self):
        assert typecheck(Seq(NumLit(1), BoolLit(True)), variant="basic") == BOOLEAN

    def test_seq_checks_discarded_part(self):
        with pytest.raises(NumberExpected):
            typecheck(Seq(Add(NumLit(1), BoolLit(True)), NumLit(2)), variant="basic")

    def test_const(self):
        term = Const("x", NumLit(1), Add(Var("x"), NumLit(2)))
        assert typecheck(term, variant="basic") == NUMBER

    def test_const_scope(self):
        """The binding is visible in the rest only."""
        term = Seq(Const("x", NumLit(1), Var("x")), Var("x"))
        with pytest.raises(UndefinedVariable):
            typecheck(term, variant="basic")

    def test_env_not_mutated(self):
        env = TypeEnv.empty()
        TypeChecker.for_variant("basic").check(Const("x", NumLit(1), Var("x")), env)
        assert "x" not in env

    def test_basic_rejects_object_types(self):
        param = (Field("p", TypeObject((Field("a", NUMBER),))),)
        with pytest.raises(UnsupportedType):
            typecheck(Func(param, NumLit(1)), variant="basic")


# =============================================================================
# Objects
# =============================================================================


class TestObjects:
    """Tests for object literals and property access."""

    def test_new(self):
        term = ObjectNew((PropTerm("x", NumLit(1)), PropTerm("y", BoolLit(True))))
        expected = TypeObject((Field("x", NUMBER), Field("y", BOOLEAN)))
        assert typecheck(term, variant="obj") == expected

    def test_get(self):
        term = ObjectGet(ObjectNew((PropTerm("x", NumLit(1)),)), "x")
        assert typecheck(term, variant="obj") == NUMBER

    def test_unknown_property(self):
        term = ObjectGet(ObjectNew((PropTerm("x", NumLit(1)),)), "z")
        with pytest.raises(UnknownProperty) as exc_info:
            typecheck(term, variant="obj")
        assert exc_info.value.name == "z"

    def test_object_expected(self):
        target = NumLit(1)
        with pytest.raises(ObjectExpected) as exc_info:
            typecheck(ObjectGet(target, "x"), variant="obj")
        assert exc_info.value.term is target

    def test_basic_rejects_objects(self):
        with pytest.raises(UnsupportedSyntax):
            typecheck(ObjectNew(()), variant="basic")

    def test_exact_match_without_subtyping(self):
        param = (Field("p", TypeObject((Field("a", NUMBER),))),)
        arg = ObjectNew((PropTerm("a", NumLit(1)), PropTerm("b", NumLit(2))))
        with pytest.raises(ArgumentTypeMismatch):
            typecheck(Call(Func(param, NumLit(1)), (arg,)), variant="obj")

    def test_width_with_subtyping(self):
        param = (Field("p", TypeObject((Field("a", NUMBER),))),)
        arg = ObjectNew((PropTerm("a", NumLit(1)), PropTerm("b", NumLit(2))))
        assert typecheck(Call(Func(param, NumLit(1)), (arg,)), variant="sub") == NUMBER


# =============================================================================
# Recursion
# =============================================================================


class TestRecursion:
    """Tests for recursive functions and recursive types."""

    def test_recfunc_calls_itself(self):
        body = Call(Var("f"), (Var("x"),))
        term = RecFunc("f", X_NUM, NUMBER, body, Call(Var("f"), (NumLit(1),)))
        assert typecheck(term, variant="recfunc") == NUMBER

    def test_recfunc_return_mismatch(self):
        term = RecFunc("f", X_NUM, NUMBER, BoolLit(True), Var("f"))
        with pytest.raises(ReturnTypeMismatch):
            typecheck(term, variant="recfunc")

    def test_recfunc_not_in_basic(self):
        term = RecFunc("f", X_NUM, NUMBER, Var("x"), Var("f"))
        with pytest.raises(UnsupportedSyntax):
            typecheck(term, variant="basic")

    def test_recfunc_params_not_in_rest(self):
        term = RecFunc("f", X_NUM, NUMBER, Var("x"), Var("x"))
        with pytest.raises(UndefinedVariable):
            typecheck(term, variant="recfunc")

    def test_annotated_const_refers_to_itself(self):
        init = Func(X_NUM, Call(Var("f"), (Var("x"),)), NUMBER)
        term = Const("f", init, Call(Var("f"), (NumLit(1),)))
        assert typecheck(term, variant="recfunc") == NUMBER
        with pytest.raises(UndefinedVariable):
            typecheck(term, variant="basic")

    def test_rec_annotation_accepted(self):
        stream = TypeRec("S", TypeObject((Field("next", TypeFunc((), TypeVar("S"))),)))
        param = (Field("s", stream),)
        # s.next() is a stream again
        body = Call(ObjectGet(Var("s"), "next"), ())
        assert typecheck(Func(param, body), variant="rec") == TypeFunc(param, stream)

    def test_rec_annotation_rejected_without_recursive_types(self):
        stream = TypeRec("S", TypeObject((Field("next", TypeFunc((), TypeVar("S"))),)))
        with pytest.raises(UnsupportedType):
            typecheck(Func((Field("s", stream),), NumLit(1)), variant="obj")

    def test_unbound_type_variable(self):
        with pytest.raises(UnboundTypeVariable) as exc_info:
            typecheck(Func((Field("s", TypeVar("S")),), NumLit(1)), variant="rec")
        assert exc_info.value.names == {"S"}


# =============================================================================
# Subtyping
# =============================================================================


class TestSubtypingJoin:
    """Tests for conditionals under subtyping."""

    FOO = TypeObject((Field("foo", NUMBER),))

    def _obj(self, **props):
        return ObjectNew(tuple(PropTerm(k, NumLit(v)) for k, v in props.items()))

    def test_then_below_else(self):
        term = If(BoolLit(True), self._obj(foo=1, bar=2), self._obj(foo=3))
        assert typecheck(term, variant="sub") == self.FOO

    def test_else_below_then(self):
        term = If(BoolLit(True), self._obj(foo=1), self._obj(foo=3, bar=2))
        assert typecheck(term, variant="sub") == self.FOO

    def test_incomparable(self):
        term = If(BoolLit(True), self._obj(foo=1), self._obj(bar=2))
        with pytest.raises(BranchTypeMismatch):
            typecheck(term, variant="sub")

    def test_equality_without_subtyping(self):
        term = If(BoolLit(True), self._obj(foo=1, bar=2), self._obj(foo=3))
        with pytest.raises(BranchTypeMismatch):
            typecheck(term, variant="obj")
