"""Alfabeto de entrada del motor: operadores, tokens y eventos de tecla.

Los valores de los ``Enum`` son las etiquetas de las teclas, de modo que
``BinaryOperator("×")`` o ``UnaryOperator("sin⁻¹")`` resuelven directamente
una etiqueta de la interfaz.
"""

from enum import Enum
from typing import NamedTuple


class AngleUnit(Enum):
    RADIANS = "Rad"
    DEGREES = "Deg"

    def toggled(self) -> "AngleUnit":
        if self is AngleUnit.RADIANS:
            return AngleUnit.DEGREES
        return AngleUnit.RADIANS


class BinaryOperator(Enum):
    ADD = "+"
    SUBTRACT = "-"
    MULTIPLY = "×"
    DIVIDE = "÷"
    POWER = "yˣ"
    ROOT = "x√y"

    @property
    def precedence(self) -> int:
        if self in (BinaryOperator.ADD, BinaryOperator.SUBTRACT):
            return 1
        if self in (BinaryOperator.MULTIPLY, BinaryOperator.DIVIDE):
            return 2
        return 3

    @property
    def is_right_associative(self) -> bool:
        return self in (BinaryOperator.POWER, BinaryOperator.ROOT)


class UnaryOperator(Enum):
    RECIPROCAL = "1/x"
    SQUARE = "x²"
    CUBE = "x³"
    SQRT = "√"
    CBRT = "∛x"
    FACTORIAL = "x!"
    TEN_POWER = "10ˣ"
    EXP = "eˣ"
    LN = "ln"
    LOG10 = "log"

    SIN = "sin"
    COS = "cos"
    TAN = "tan"
    ASIN = "sin⁻¹"
    ACOS = "cos⁻¹"
    ATAN = "tan⁻¹"

    SINH = "sinh"
    COSH = "cosh"
    TANH = "tanh"
    ASINH = "sinh⁻¹"
    ACOSH = "cosh⁻¹"
    ATANH = "tanh⁻¹"

    TWO_POWER = "2ˣ"
    NEGATE = "+/-"
    PERCENT = "%"


# ── Tokens de expresión (modo científico) ────────────────────────

class TokenKind(Enum):
    NUMBER = "number"
    BINARY = "binary"
    UNARY = "unary"
    LEFT_PAREN = "("
    RIGHT_PAREN = ")"


class Token(NamedTuple):
    """Unidad léxica de una expresión; ``value`` depende de ``kind``."""

    kind: TokenKind
    value: object = None

    @classmethod
    def number(cls, value: float) -> "Token":
        return cls(TokenKind.NUMBER, float(value))

    @classmethod
    def binary(cls, op: BinaryOperator) -> "Token":
        return cls(TokenKind.BINARY, op)

    @classmethod
    def unary(cls, op: UnaryOperator) -> "Token":
        return cls(TokenKind.UNARY, op)

    def __repr__(self):
        if self.kind is TokenKind.NUMBER:
            return f"Number({self.value!r})"
        if self.kind in (TokenKind.BINARY, TokenKind.UNARY):
            return f"{self.kind.name.title()}({self.value.value})"
        return self.kind.value


LEFT_PAREN = Token(TokenKind.LEFT_PAREN)
RIGHT_PAREN = Token(TokenKind.RIGHT_PAREN)


# ── Eventos de entrada ───────────────────────────────────────────

class InputKind(Enum):
    DIGIT = "digit"
    DECIMAL_POINT = "decimal_point"
    TOGGLE_SIGN = "toggle_sign"
    PERCENT = "percent"
    BINARY = "binary"
    UNARY = "unary"
    EQUALS = "equals"

    CLEAR_ENTRY = "clear_entry"
    ALL_CLEAR = "all_clear"

    MEMORY_CLEAR = "memory_clear"
    MEMORY_ADD = "memory_add"
    MEMORY_SUBTRACT = "memory_subtract"
    MEMORY_RECALL = "memory_recall"

    LEFT_PAREN = "left_paren"
    RIGHT_PAREN = "right_paren"
    CONSTANT_PI = "constant_pi"
    RANDOM = "random"
    EE = "ee"

    TOGGLE_SECOND = "toggle_second"
    TOGGLE_ANGLE_UNIT = "toggle_angle_unit"
    SET_ANGLE_UNIT = "set_angle_unit"


# Tipos que llevan dato asociado
_PAYLOAD_TYPES = {
    InputKind.DIGIT: int,
    InputKind.BINARY: BinaryOperator,
    InputKind.UNARY: UnaryOperator,
    InputKind.SET_ANGLE_UNIT: AngleUnit,
}


class CalculatorInput(NamedTuple):
    """Evento discreto que recibe ``CalculatorEngine.apply``."""

    kind: InputKind
    value: object = None

    @classmethod
    def digit(cls, digit: int) -> "CalculatorInput":
        return cls(InputKind.DIGIT, digit)

    @classmethod
    def binary(cls, op: BinaryOperator) -> "CalculatorInput":
        return cls(InputKind.BINARY, op)

    @classmethod
    def unary(cls, op: UnaryOperator) -> "CalculatorInput":
        return cls(InputKind.UNARY, op)

    @classmethod
    def set_angle_unit(cls, unit: AngleUnit) -> "CalculatorInput":
        return cls(InputKind.SET_ANGLE_UNIT, unit)

    @classmethod
    def coerce(cls, key) -> "CalculatorInput":
        """Acepta un ``CalculatorInput`` o un ``InputKind`` sin dato."""
        if isinstance(key, InputKind):
            key = cls(key)
        if not isinstance(key, CalculatorInput):
            raise TypeError(f"Entrada no soportada: {key!r}")

        expected = _PAYLOAD_TYPES.get(key.kind)
        if expected is not None and (
            not isinstance(key.value, expected) or isinstance(key.value, bool)
        ):
            raise TypeError(f"{key.kind.value} requiere {expected.__name__}")
        return key


DECIMAL_POINT = CalculatorInput(InputKind.DECIMAL_POINT)
TOGGLE_SIGN = CalculatorInput(InputKind.TOGGLE_SIGN)
PERCENT = CalculatorInput(InputKind.PERCENT)
EQUALS = CalculatorInput(InputKind.EQUALS)
CLEAR_ENTRY = CalculatorInput(InputKind.CLEAR_ENTRY)
ALL_CLEAR = CalculatorInput(InputKind.ALL_CLEAR)
MEMORY_CLEAR = CalculatorInput(InputKind.MEMORY_CLEAR)
MEMORY_ADD = CalculatorInput(InputKind.MEMORY_ADD)
MEMORY_SUBTRACT = CalculatorInput(InputKind.MEMORY_SUBTRACT)
MEMORY_RECALL = CalculatorInput(InputKind.MEMORY_RECALL)
OPEN_PAREN = CalculatorInput(InputKind.LEFT_PAREN)
CLOSE_PAREN = CalculatorInput(InputKind.RIGHT_PAREN)
CONSTANT_PI = CalculatorInput(InputKind.CONSTANT_PI)
RANDOM = CalculatorInput(InputKind.RANDOM)
EE = CalculatorInput(InputKind.EE)
TOGGLE_SECOND = CalculatorInput(InputKind.TOGGLE_SECOND)
TOGGLE_ANGLE_UNIT = CalculatorInput(InputKind.TOGGLE_ANGLE_UNIT)
