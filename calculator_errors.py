"""Errores aritméticos y estructurales del motor de la calculadora.

Todos derivan de ``CalculatorError`` y llevan un ``ErrorKind``. El
controlador es el único que los captura: cualquiera de ellos se convierte
en el estado de error enclavado y la pantalla muestra ``Error``.
"""

from enum import Enum


class ErrorKind(Enum):
    DIVIDE_BY_ZERO = "divide-by-zero"
    INVALID_DOMAIN = "invalid-domain"
    MALFORMED_EXPRESSION = "malformed-expression"


class CalculatorError(Exception):
    """Fallo de una operación; ``kind`` indica la categoría."""

    kind: ErrorKind


class DivideByZeroError(CalculatorError, ZeroDivisionError):
    kind = ErrorKind.DIVIDE_BY_ZERO


class InvalidDomainError(CalculatorError, ValueError):
    kind = ErrorKind.INVALID_DOMAIN


class MalformedExpressionError(CalculatorError, ValueError):
    kind = ErrorKind.MALFORMED_EXPRESSION
