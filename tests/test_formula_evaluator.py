import math

import pytest
from mpmath import mp

from calculator_errors import (
    CalculatorError,
    DivideByZeroError,
    ErrorKind,
    InvalidDomainError,
    MalformedExpressionError,
)
from calculator_inputs import (
    LEFT_PAREN,
    RIGHT_PAREN,
    AngleUnit,
    BinaryOperator,
    Token,
    UnaryOperator,
)
from formula_evaluator import FormulaEvaluator, PythonMathProvider, real_power

ADD = Token.binary(BinaryOperator.ADD)
SUB = Token.binary(BinaryOperator.SUBTRACT)
MUL = Token.binary(BinaryOperator.MULTIPLY)
DIV = Token.binary(BinaryOperator.DIVIDE)
POW = Token.binary(BinaryOperator.POWER)
ROOT = Token.binary(BinaryOperator.ROOT)


def n(value):
    return Token.number(value)


# ── Shunting-yard ────────────────────────────────────────────────

def test_postfix_respects_precedence():
    postfix = FormulaEvaluator.to_postfix([n(2), ADD, n(3), MUL, n(4)])
    assert postfix == [n(2), n(3), n(4), MUL, ADD]


def test_postfix_left_associative_subtraction():
    postfix = FormulaEvaluator.to_postfix([n(10), SUB, n(4), SUB, n(3)])
    assert postfix == [n(10), n(4), SUB, n(3), SUB]


def test_postfix_right_associative_power():
    postfix = FormulaEvaluator.to_postfix([n(2), POW, n(3), POW, n(2)])
    assert postfix == [n(2), n(3), n(2), POW, POW]


def test_postfix_unary_on_group():
    square = Token.unary(UnaryOperator.SQUARE)
    postfix = FormulaEvaluator.to_postfix(
        [n(2), MUL, LEFT_PAREN, n(1), ADD, n(2), RIGHT_PAREN, square]
    )
    assert postfix == [n(2), n(1), n(2), ADD, square, MUL]


def test_evaluate(evaluator):
    tokens = [LEFT_PAREN, n(2), ADD, n(3), RIGHT_PAREN, MUL, n(4)]
    assert evaluator.evaluate(tokens) == 20


def test_power_and_root(evaluator):
    assert evaluator.evaluate([n(2), POW, n(3), POW, n(2)]) == 512
    assert evaluator.evaluate([n(3), ROOT, n(27)]) == pytest.approx(3)
    assert evaluator.evaluate([n(2), MUL, n(2), POW, n(3)]) == 16


@pytest.mark.parametrize("tokens", [
    [LEFT_PAREN, n(1), ADD, n(2)],
    [n(1), ADD, n(2), RIGHT_PAREN],
    [n(1), ADD],
    [ADD],
    [n(1), n(2)],
    [],
    [Token.unary(UnaryOperator.SQRT)],
])
def test_malformed_expressions(evaluator, tokens):
    with pytest.raises(MalformedExpressionError) as info:
        evaluator.evaluate(tokens)
    assert info.value.kind is ErrorKind.MALFORMED_EXPRESSION


def test_errors_share_a_base_class(evaluator):
    with pytest.raises(CalculatorError):
        evaluator.evaluate([n(1), DIV, n(0)])
    with pytest.raises(ZeroDivisionError):
        evaluator.evaluate([n(1), DIV, n(0)])


# ── Operadores binarios ──────────────────────────────────────────

def test_divide_by_near_zero(provider):
    with pytest.raises(DivideByZeroError):
        provider.apply_binary(BinaryOperator.DIVIDE, 1.0, 1e-17)
    assert provider.apply_binary(BinaryOperator.DIVIDE, 1.0, 1e-10) == pytest.approx(1e10)


def test_root_domain(provider):
    with pytest.raises(DivideByZeroError):
        provider.apply_binary(BinaryOperator.ROOT, 0.0, 8.0)
    with pytest.raises(InvalidDomainError):
        provider.apply_binary(BinaryOperator.ROOT, 2.0, -4.0)
    assert math.isnan(provider.apply_binary(BinaryOperator.ROOT, 3.0, -8.0))


def test_real_power_follows_ieee():
    assert real_power(10.0, 400.0) == math.inf
    assert real_power(-10.0, 401.0) == -math.inf
    assert real_power(0.0, -1.0) == math.inf
    assert math.isnan(real_power(-8.0, 0.5))
    assert real_power(2.0, 10.0) == 1024


# ── Operadores unarios ───────────────────────────────────────────

@pytest.mark.parametrize("op, value", [
    (UnaryOperator.SQRT, -1.0),
    (UnaryOperator.LN, 0.0),
    (UnaryOperator.LN, -2.0),
    (UnaryOperator.LOG10, 0.0),
    (UnaryOperator.ASIN, 1.5),
    (UnaryOperator.ACOS, -1.5),
    (UnaryOperator.ACOSH, 0.5),
    (UnaryOperator.ATANH, 1.0),
    (UnaryOperator.ATANH, -1.0),
    (UnaryOperator.FACTORIAL, -1.0),
    (UnaryOperator.FACTORIAL, 2.5),
    (UnaryOperator.FACTORIAL, 171.0),
    (UnaryOperator.SIN, math.inf),
])
def test_unary_domain_errors(provider, op, value):
    with pytest.raises(InvalidDomainError):
        provider.apply_unary(op, value)


def test_reciprocal_of_zero(provider):
    with pytest.raises(DivideByZeroError):
        provider.apply_unary(UnaryOperator.RECIPROCAL, 0.0)


def test_overflow_gives_infinity(provider):
    assert provider.apply_unary(UnaryOperator.EXP, 1000.0) == math.inf
    assert provider.apply_unary(UnaryOperator.SINH, -1000.0) == -math.inf
    assert provider.apply_unary(UnaryOperator.COSH, -1000.0) == math.inf
    assert provider.apply_unary(UnaryOperator.TEN_POWER, 400.0) == math.inf


@pytest.mark.parametrize("op, value, expected", [
    (UnaryOperator.SQUARE, 7.0, 49.0),
    (UnaryOperator.CUBE, -2.0, -8.0),
    (UnaryOperator.CBRT, -27.0, -3.0),
    (UnaryOperator.FACTORIAL, 0.0, 1.0),
    (UnaryOperator.FACTORIAL, 5.0, 120.0),
    (UnaryOperator.TEN_POWER, 3.0, 1000.0),
    (UnaryOperator.TWO_POWER, 10.0, 1024.0),
    (UnaryOperator.LOG10, 1000.0, 3.0),
    (UnaryOperator.NEGATE, 4.0, -4.0),
    (UnaryOperator.PERCENT, 50.0, 0.5),
    (UnaryOperator.RECIPROCAL, 4.0, 0.25),
])
def test_unary_values(provider, op, value, expected):
    assert provider.apply_unary(op, value) == pytest.approx(expected)


def test_degrees_mode():
    provider = PythonMathProvider(AngleUnit.DEGREES)
    assert provider.apply_unary(UnaryOperator.SIN, 30.0) == pytest.approx(0.5)
    assert provider.apply_unary(UnaryOperator.COS, 180.0) == pytest.approx(-1.0)
    assert provider.apply_unary(UnaryOperator.ACOS, 0.0) == pytest.approx(90.0)
    assert provider.apply_unary(UnaryOperator.ATAN, 1.0) == pytest.approx(45.0)


def test_angle_unit_switch_affects_next_call(provider):
    assert provider.apply_unary(UnaryOperator.SIN, 90.0) == pytest.approx(math.sin(90.0))
    provider.angle_unit = AngleUnit.DEGREES
    assert provider.apply_unary(UnaryOperator.SIN, 90.0) == pytest.approx(1.0)


def test_invalid_angle_unit(provider):
    with pytest.raises(ValueError):
        provider.angle_unit = "Deg"


# ── Oráculo de alta precisión ────────────────────────────────────

@pytest.mark.parametrize("op, reference, value", [
    (UnaryOperator.SIN, mp.sin, 0.7),
    (UnaryOperator.COS, mp.cos, 2.5),
    (UnaryOperator.TAN, mp.tan, -1.2),
    (UnaryOperator.ASIN, mp.asin, 0.3),
    (UnaryOperator.ACOS, mp.acos, -0.9),
    (UnaryOperator.ATAN, mp.atan, 12.0),
    (UnaryOperator.SINH, mp.sinh, 3.3),
    (UnaryOperator.COSH, mp.cosh, -2.0),
    (UnaryOperator.TANH, mp.tanh, 0.4),
    (UnaryOperator.ASINH, mp.asinh, 5.0),
    (UnaryOperator.ACOSH, mp.acosh, 7.5),
    (UnaryOperator.ATANH, mp.atanh, -0.6),
    (UnaryOperator.EXP, mp.exp, 4.2),
    (UnaryOperator.LN, mp.log, 123.0),
    (UnaryOperator.SQRT, mp.sqrt, 2.0),
    (UnaryOperator.CBRT, mp.cbrt, 10.0),
])
def test_matches_mpmath(provider, op, reference, value):
    with mp.workdps(40):
        expected = float(reference(mp.mpf(value)))
    assert provider.apply_unary(op, value) == pytest.approx(expected, rel=1e-13)


def test_operator_table_is_built_once_per_angle_unit(provider):
    table = provider.namespace
    provider.apply_unary(UnaryOperator.SIN, 1.0)
    provider.apply_unary(UnaryOperator.SQUARE, 3.0)
    assert provider.namespace is table

    provider.angle_unit = AngleUnit.DEGREES
    assert provider.namespace is not table
    assert provider.apply_unary(UnaryOperator.SIN, 90.0) == pytest.approx(1.0)
