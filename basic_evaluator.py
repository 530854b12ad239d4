"""Evaluador del modo básico: acumulador con un único operador pendiente."""

from typing import Optional

from calculator_inputs import BinaryOperator
from formula_evaluator import PythonMathProvider


class BasicModeEvaluator:
    """Cadena estrictamente de izquierda a derecha, como una calculadora simple.

    ``3 + 4 × 5`` da 35: el ``+`` pendiente se pliega al pulsar ``×``.
    Pulsar ``=`` repetidamente repite la última operación con el último
    operando derecho.
    """

    def __init__(self, provider: PythonMathProvider):
        self._provider = provider
        self.accumulator: Optional[float] = None
        self.pending_operator: Optional[BinaryOperator] = None
        self.repeat_operand: Optional[float] = None
        self.repeat_operator: Optional[BinaryOperator] = None

    def reset(self):
        self.accumulator = None
        self.pending_operator = None
        self.repeat_operand = None
        self.repeat_operator = None

    def forget_result(self):
        """Descarta el resultado anterior al empezar un número tras ``=``."""
        self.accumulator = None
        self.repeat_operand = None
        self.repeat_operator = None

    @property
    def has_pending_operator(self) -> bool:
        return self.pending_operator is not None

    def select_operator(self, op: BinaryOperator, operand: float, operand_entered: bool) -> float:
        """Registra ``op`` como pendiente y devuelve el acumulador a mostrar.

        Si ya había un operador pendiente y se tecleó un operando nuevo,
        se pliega antes de sustituirlo.
        """
        if self.accumulator is None:
            self.accumulator = operand
        elif self.pending_operator is not None and operand_entered:
            self.accumulator = self._provider.apply_binary(
                self.pending_operator, self.accumulator, operand
            )

        self.pending_operator = op
        self.repeat_operand = None
        self.repeat_operator = None
        return self.accumulator

    def equals(self, current: float, entered: Optional[float]) -> Optional[float]:
        """Resuelve ``=``; ``entered`` es el operando tecleado, si lo hay.

        Devuelve ``None`` cuando no hay nada que calcular.
        """
        if self.pending_operator is not None:
            lhs = self.accumulator if self.accumulator is not None else current
            if entered is not None:
                rhs = entered
                self.repeat_operand = rhs
            elif self.repeat_operand is not None:
                rhs = self.repeat_operand
            else:
                # "5 + =" opera el acumulador consigo mismo
                rhs = lhs
                self.repeat_operand = rhs

            result = self._provider.apply_binary(self.pending_operator, lhs, rhs)
            self.accumulator = result
            self.repeat_operator = self.pending_operator
            self.pending_operator = None
            return result

        if self.repeat_operator is not None and self.repeat_operand is not None:
            result = self._provider.apply_binary(self.repeat_operator, current, self.repeat_operand)
            self.accumulator = result
            return result

        return None

    def percent_of_base(self, value: float) -> Optional[float]:
        """``accumulator × value / 100`` dentro de una operación activa."""
        if self.accumulator is None or self.pending_operator is None:
            return None
        return self.accumulator * value / 100
