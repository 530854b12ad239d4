"""Aritmética y evaluación de expresiones para la calculadora científica."""

import math
import sys

from calculator_errors import (
    DivideByZeroError,
    InvalidDomainError,
    MalformedExpressionError,
)
from calculator_inputs import (
    AngleUnit,
    BinaryOperator,
    Token,
    TokenKind,
    UnaryOperator,
)

EPSILON = sys.float_info.epsilon
MAX_FACTORIAL = 170

# Precedencia sintética de los operadores unarios: por encima de yˣ y x√y
UNARY_PRECEDENCE = 4


class PythonMathProvider:
    """Implementa los operadores sobre ``float`` con sus reglas de dominio."""

    def __init__(self, angle_unit: AngleUnit = AngleUnit.RADIANS):
        self.angle_unit = angle_unit

    @property
    def angle_unit(self) -> AngleUnit:
        return self._angle_unit

    @angle_unit.setter
    def angle_unit(self, unit: AngleUnit):
        if not isinstance(unit, AngleUnit):
            raise ValueError("La unidad debe ser AngleUnit.RADIANS o AngleUnit.DEGREES")
        self._angle_unit = unit
        # La tabla captura la unidad; se reconstruye solo al cambiarla
        self._namespace = self.build_namespace()

    @property
    def namespace(self) -> dict:
        return self._namespace

    # ── Binarios ─────────────────────────────────────────────────

    def apply_binary(self, op: BinaryOperator, lhs: float, rhs: float) -> float:
        if op is BinaryOperator.ADD:
            return lhs + rhs
        if op is BinaryOperator.SUBTRACT:
            return lhs - rhs
        if op is BinaryOperator.MULTIPLY:
            return lhs * rhs
        if op is BinaryOperator.DIVIDE:
            if abs(rhs) <= EPSILON:
                raise DivideByZeroError("División por cero")
            return lhs / rhs
        if op is BinaryOperator.POWER:
            return real_power(lhs, rhs)
        if op is BinaryOperator.ROOT:
            # lhs es el índice, rhs el radicando
            if abs(lhs) <= EPSILON:
                raise DivideByZeroError("Raíz de índice cero")
            if rhs < 0 and math.isfinite(lhs) and math.fmod(lhs, 2) == 0:
                raise InvalidDomainError("Raíz par de un número negativo")
            return real_power(rhs, 1 / lhs)
        raise ValueError(f"Operador binario desconocido: {op!r}")

    # ── Unarios ──────────────────────────────────────────────────

    def apply_unary(self, op: UnaryOperator, value: float) -> float:
        fn = self._namespace.get(op)
        if fn is None:
            raise ValueError(f"Operador unario desconocido: {op!r}")
        try:
            return fn(value)
        except ValueError as exc:
            if isinstance(exc, InvalidDomainError):
                raise
            # math rechaza argumentos no finitos (sin(inf), ...)
            raise InvalidDomainError(f"{op.value}: {exc}") from exc

    def build_namespace(self) -> dict:
        unit = self._angle_unit

        def _trig(fn):
            def w(x):
                return fn(math.radians(x) if unit is AngleUnit.DEGREES else x)

            return w

        def _inv_trig(fn):
            def w(x):
                if x < -1 or x > 1:
                    raise InvalidDomainError(f"{fn.__name__} fuera de [-1, 1]")
                r = fn(x)
                return math.degrees(r) if unit is AngleUnit.DEGREES else r

            return w

        return {
            UnaryOperator.RECIPROCAL: _reciprocal,
            UnaryOperator.SQUARE: lambda x: x * x,
            UnaryOperator.CUBE: lambda x: x * x * x,
            UnaryOperator.SQRT: _sqrt,
            UnaryOperator.CBRT: lambda x: math.copysign(real_power(abs(x), 1 / 3), x),
            UnaryOperator.FACTORIAL: _factorial,
            UnaryOperator.TEN_POWER: lambda x: real_power(10.0, x),
            UnaryOperator.EXP: lambda x: _overflow_to_inf(math.exp, x),
            UnaryOperator.LN: _positive_only(math.log),
            UnaryOperator.LOG10: _positive_only(math.log10),
            UnaryOperator.SIN: _trig(math.sin),
            UnaryOperator.COS: _trig(math.cos),
            UnaryOperator.TAN: _trig(math.tan),
            UnaryOperator.ASIN: _inv_trig(math.asin),
            UnaryOperator.ACOS: _inv_trig(math.acos),
            UnaryOperator.ATAN: lambda x: (
                math.degrees(math.atan(x)) if unit is AngleUnit.DEGREES else math.atan(x)
            ),
            UnaryOperator.SINH: lambda x: _overflow_to_inf(math.sinh, x, sign=x),
            UnaryOperator.COSH: lambda x: _overflow_to_inf(math.cosh, x),
            UnaryOperator.TANH: math.tanh,
            UnaryOperator.ASINH: math.asinh,
            UnaryOperator.ACOSH: _acosh,
            UnaryOperator.ATANH: _atanh,
            UnaryOperator.TWO_POWER: lambda x: real_power(2.0, x),
            UnaryOperator.NEGATE: lambda x: -x,
            UnaryOperator.PERCENT: lambda x: x / 100,
        }


def real_power(base: float, exponent: float) -> float:
    """Potencia real con resultados IEEE 754 en lugar de excepciones.

    ``math.pow`` lanza ``OverflowError`` donde IEEE devuelve infinito y
    ``ValueError`` donde devuelve NaN (base negativa, exponente
    fraccionario) o infinito (cero elevado a negativo).
    """
    try:
        return math.pow(base, exponent)
    except OverflowError:
        if base < 0 and _is_odd_integer(exponent):
            return -math.inf
        return math.inf
    except ValueError:
        if base == 0:
            return math.inf
        return math.nan


def _is_odd_integer(x: float) -> bool:
    return math.isfinite(x) and x == math.floor(x) and math.fmod(x, 2) != 0


def _overflow_to_inf(fn, x: float, sign: float = 1.0) -> float:
    try:
        return fn(x)
    except OverflowError:
        return math.copysign(math.inf, sign)


def _reciprocal(x: float) -> float:
    if abs(x) <= EPSILON:
        raise DivideByZeroError("Recíproco de cero")
    return 1 / x


def _sqrt(x: float) -> float:
    if x < 0:
        raise InvalidDomainError("Raíz cuadrada de un número negativo")
    return math.sqrt(x)


def _factorial(x: float) -> float:
    if not math.isfinite(x) or x < 0 or x != math.floor(x):
        raise InvalidDomainError("factorial requiere entero no negativo")
    if x > MAX_FACTORIAL:
        raise InvalidDomainError(f"factorial desborda por encima de {MAX_FACTORIAL}")
    return float(math.factorial(int(x)))


def _positive_only(fn):
    def w(x):
        if x <= 0:
            raise InvalidDomainError(f"{fn.__name__} requiere argumento positivo")
        return fn(x)

    return w


def _acosh(x: float) -> float:
    if x < 1:
        raise InvalidDomainError("acosh requiere argumento >= 1")
    return math.acosh(x)


def _atanh(x: float) -> float:
    if abs(x) >= 1:
        raise InvalidDomainError("atanh requiere |x| < 1")
    return math.atanh(x)


class FormulaEvaluator:
    """Convierte tokens infijos a postfijo y los evalúa con una pila."""

    def __init__(self, provider: PythonMathProvider):
        self._provider = provider

    def evaluate(self, tokens) -> float:
        """Evalúa la expresión y devuelve su valor.

        Raises:
            MalformedExpressionError: paréntesis o aridad incorrectos.
            DivideByZeroError: división, raíz o recíproco de cero.
            InvalidDomainError: argumento fuera del dominio.
        """
        return self.evaluate_postfix(self.to_postfix(tokens))

    @staticmethod
    def to_postfix(tokens) -> list:
        """Shunting-yard.

        Los unarios son postfijos: se aplican al operando o grupo que los
        precede y se desapilan ante cualquier operador que llegue después.
        """
        output = []
        operators = []

        for token in tokens:
            kind = token.kind
            if kind is TokenKind.NUMBER:
                output.append(token)
            elif kind is TokenKind.UNARY:
                while operators and _pops_before_unary(operators[-1]):
                    output.append(operators.pop())
                operators.append(token)
            elif kind is TokenKind.BINARY:
                op = token.value
                while operators and _pops_before_binary(operators[-1], op):
                    output.append(operators.pop())
                operators.append(token)
            elif kind is TokenKind.LEFT_PAREN:
                operators.append(token)
            elif kind is TokenKind.RIGHT_PAREN:
                while operators and operators[-1].kind is not TokenKind.LEFT_PAREN:
                    output.append(operators.pop())
                if not operators:
                    raise MalformedExpressionError("')' sin '(' correspondiente")
                operators.pop()
            else:
                raise MalformedExpressionError(f"Token desconocido: {token!r}")

        while operators:
            top = operators.pop()
            if top.kind is TokenKind.LEFT_PAREN:
                raise MalformedExpressionError("'(' sin cerrar")
            output.append(top)

        return output

    def evaluate_postfix(self, postfix) -> float:
        stack: list[float] = []

        for token in postfix:
            kind = token.kind
            if kind is TokenKind.NUMBER:
                stack.append(token.value)
            elif kind is TokenKind.BINARY:
                if len(stack) < 2:
                    raise MalformedExpressionError(f"Faltan operandos para {token.value.value}")
                rhs = stack.pop()
                lhs = stack.pop()
                stack.append(self._provider.apply_binary(token.value, lhs, rhs))
            elif kind is TokenKind.UNARY:
                if not stack:
                    raise MalformedExpressionError(f"Falta operando para {token.value.value}")
                stack.append(self._provider.apply_unary(token.value, stack.pop()))
            else:
                raise MalformedExpressionError("Paréntesis en la forma postfija")

        if len(stack) != 1:
            raise MalformedExpressionError("La expresión no se reduce a un único valor")
        return stack[0]


def _pops_before_unary(top: Token) -> bool:
    if top.kind is TokenKind.UNARY:
        return True
    return top.kind is TokenKind.BINARY and top.value.precedence >= UNARY_PRECEDENCE


def _pops_before_binary(top: Token, op: BinaryOperator) -> bool:
    if top.kind is TokenKind.UNARY:
        return True
    if top.kind is not TokenKind.BINARY:
        return False
    if op.is_right_associative:
        return top.value.precedence > op.precedence
    return top.value.precedence >= op.precedence
