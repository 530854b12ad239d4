"""
Motor de la calculadora: estado, modos y despacho de teclas.

Este módulo provee la clase CalculatorEngine, una máquina de estados que
interpreta pulsaciones discretas y mantiene el texto de la pantalla. Tiene
dos estrategias de evaluación intercambiables en cualquier momento sin
perder el valor mostrado:

    - modo básico: acumulador de izquierda a derecha (BasicModeEvaluator)
    - modo científico: expresión infija con precedencia (FormulaEvaluator)

Contrato de interfaz:
    - apply(key) -> None
    - set_scientific_mode(enabled: bool) -> None
    - state: CalculatorState de solo lectura
"""

import logging
import math
import random
from dataclasses import dataclass

from basic_evaluator import BasicModeEvaluator
from calculator_errors import CalculatorError
from calculator_inputs import (
    LEFT_PAREN,
    RIGHT_PAREN,
    AngleUnit,
    BinaryOperator,
    CalculatorInput,
    InputKind,
    Token,
    TokenKind,
    UnaryOperator,
)
from formula_evaluator import FormulaEvaluator, PythonMathProvider
from number_formatting import (
    format_display,
    format_entry,
    normalized_zero,
    raw_number,
)

logger = logging.getLogger(__name__)

ERROR_TEXT = "Error"

# Entradas aceptadas con el error enclavado (además de AC)
_ERROR_RECOVERY_INPUTS = frozenset({
    InputKind.CLEAR_ENTRY,
    InputKind.DIGIT,
    InputKind.DECIMAL_POINT,
    InputKind.CONSTANT_PI,
    InputKind.RANDOM,
    InputKind.MEMORY_RECALL,
})


@dataclass(frozen=True)
class CalculatorState:
    """Vista pública del motor tras la última pulsación."""

    display_text: str = "0"
    memory_value: float = 0.0
    has_memory_value: bool = False
    angle_unit: AngleUnit = AngleUnit.RADIANS
    is_second_active: bool = False
    is_scientific_mode: bool = False
    scientific_tokens: tuple = ()
    can_use_clear_entry: bool = False


class CalculatorEngine:
    """Procesa entradas de teclado y mantiene el texto de la pantalla."""

    def __init__(self, angle_unit: AngleUnit = AngleUnit.RADIANS, scientific: bool = False,
                 random_source=random.random):
        self._provider = PythonMathProvider(angle_unit)
        self._evaluator = FormulaEvaluator(self._provider)
        self._basic = BasicModeEvaluator(self._provider)
        self._random_source = random_source

        self._memory_value = 0.0
        self._has_memory = False
        self._second_active = False
        self._scientific = False

        self._entry_text = "0"
        # Valor exacto detrás de una entrada sembrada (π, memoria, resultados)
        self._entry_value = None
        self._entering = False
        self._just_evaluated = False
        self._error = False
        self._current_value = 0.0

        self._tokens: list[Token] = []
        self._open_parens = 0

        self._state = CalculatorState()
        self._refresh_display()
        if scientific:
            self.set_scientific_mode(True)

    # ── Vista pública ────────────────────────────────────────────

    @property
    def state(self) -> CalculatorState:
        return self._state

    @property
    def display_text(self) -> str:
        return self._state.display_text

    @property
    def angle_unit(self) -> AngleUnit:
        return self._provider.angle_unit

    @angle_unit.setter
    def angle_unit(self, unit: AngleUnit):
        self._provider.angle_unit = unit
        self._refresh_display()

    # ── Cambio de modo ───────────────────────────────────────────

    def set_scientific_mode(self, enabled: bool):
        enabled = bool(enabled)
        if enabled == self._scientific:
            return

        self._scientific = enabled
        self._open_parens = 0
        self._basic.reset()
        if enabled:
            self._tokens = [Token.number(self._current_value)]
        else:
            self._tokens = []
            self._set_entry(self._current_value, keep_as_entry=False)
        self._entering = False
        self._just_evaluated = True

        logger.debug("Modo %s con valor %r", "científico" if enabled else "básico",
                     self._current_value)
        self._refresh_display()

    # ── Despacho ─────────────────────────────────────────────────

    def apply(self, key):
        """Aplica una entrada (``CalculatorInput`` o ``InputKind`` sin dato)."""
        key = CalculatorInput.coerce(key)
        kind = key.kind

        if self._error:
            if kind is InputKind.ALL_CLEAR:
                self._reset_all()
                return
            if kind not in _ERROR_RECOVERY_INPUTS:
                return
            self._clear_error_to_zero()
            if kind is InputKind.CLEAR_ENTRY:
                self._refresh_display()
                return

        if kind is InputKind.DIGIT:
            self._handle_digit(key.value)
        elif kind is InputKind.DECIMAL_POINT:
            self._handle_decimal_point()
        elif kind is InputKind.TOGGLE_SIGN:
            self._handle_sign_toggle()
        elif kind is InputKind.PERCENT:
            self._handle_percent()
        elif kind is InputKind.BINARY:
            self._handle_binary(key.value)
        elif kind is InputKind.UNARY:
            self._handle_unary(key.value)
        elif kind is InputKind.EQUALS:
            self._handle_equals()

        elif kind is InputKind.CLEAR_ENTRY:
            self._handle_clear_entry()
        elif kind is InputKind.ALL_CLEAR:
            self._reset_all()
            return

        elif kind is InputKind.MEMORY_CLEAR:
            self._memory_value = 0.0
            self._has_memory = False
        elif kind is InputKind.MEMORY_ADD:
            self._memory_value += self._resolved_current_value()
            self._has_memory = True
        elif kind is InputKind.MEMORY_SUBTRACT:
            self._memory_value -= self._resolved_current_value()
            self._has_memory = True
        elif kind is InputKind.MEMORY_RECALL:
            if self._has_memory:
                self._load_value(self._memory_value)

        elif kind is InputKind.LEFT_PAREN:
            self._handle_left_paren()
        elif kind is InputKind.RIGHT_PAREN:
            self._handle_right_paren()
        elif kind is InputKind.CONSTANT_PI:
            self._load_value(math.pi)
        elif kind is InputKind.RANDOM:
            self._load_value(self._random_source())
        elif kind is InputKind.EE:
            self._handle_ee()

        elif kind is InputKind.TOGGLE_SECOND:
            self._second_active = not self._second_active
        elif kind is InputKind.TOGGLE_ANGLE_UNIT:
            self._provider.angle_unit = self._provider.angle_unit.toggled()
        elif kind is InputKind.SET_ANGLE_UNIT:
            self._provider.angle_unit = key.value

        self._refresh_display()

    # ── Entrada de números ───────────────────────────────────────

    def _handle_digit(self, digit: int):
        if not 0 <= digit <= 9:
            return

        self._forget_basic_result_if_fresh()

        if not self._entering or self._just_evaluated or self._entry_is_non_finite():
            self._start_entry(str(digit))
            return

        text = self._entry_text
        self._entry_value = None
        if "e" in text.lower():
            self._entry_text = text + str(digit)
        elif text == "0":
            self._entry_text = str(digit)
        elif text == "-0":
            self._entry_text = f"-{digit}"
        else:
            self._entry_text = text + str(digit)

    def _handle_decimal_point(self):
        self._forget_basic_result_if_fresh()

        if not self._entering or self._just_evaluated or self._entry_is_non_finite():
            self._start_entry("0.")
            return

        text = self._entry_text
        if "e" in text.lower() or "." in text:
            return
        self._entry_text = text + "."
        self._entry_value = None

    def _handle_ee(self):
        if not self._scientific or not math.isfinite(self._resolved_current_value()):
            return

        if not self._entering:
            self._entry_text = raw_number(self._resolved_current_value())
            self._entering = True

        if "e" not in self._entry_text.lower():
            self._entry_text += "e"
        self._entry_value = None
        self._just_evaluated = False

    def _handle_sign_toggle(self):
        if self._entering:
            self._toggle_entry_sign()
            return

        keep_as_entry = not self._scientific and self._basic.has_pending_operator
        self._apply_unary_to_current(UnaryOperator.NEGATE, keep_as_entry)

    def _toggle_entry_sign(self):
        text = self._entry_text
        e_index = text.lower().find("e")
        if e_index >= 0:
            # Con exponente se invierte el signo del exponente
            head, tail = text[:e_index + 1], text[e_index + 1:]
            if tail.startswith("+"):
                tail = "-" + tail[1:]
            elif tail.startswith("-"):
                tail = "+" + tail[1:]
            else:
                tail = "-" + tail
            self._entry_text = head + tail
            self._entry_value = None
            return

        if text.startswith("-"):
            self._entry_text = text[1:] or "0"
        else:
            self._entry_text = "-" + text
        if self._entry_value is not None:
            self._entry_value = -self._entry_value

    def _entry_is_non_finite(self) -> bool:
        """``inf``/``nan`` cargados de memoria no admiten más dígitos."""
        return self._entry_value is not None and not math.isfinite(self._entry_value)

    def _start_entry(self, text: str):
        self._entry_text = text
        self._entry_value = None
        self._entering = True
        self._just_evaluated = False

    def _load_value(self, value: float):
        """Carga una constante o la memoria como entrada editable."""
        self._forget_basic_result_if_fresh()
        self._set_entry(value, keep_as_entry=True)
        self._just_evaluated = False
        if self._scientific and self._last_token_is(TokenKind.NUMBER):
            self._tokens.pop()

    def _forget_basic_result_if_fresh(self):
        if self._just_evaluated and not self._scientific and not self._basic.has_pending_operator:
            self._basic.forget_result()

    # ── Operadores ───────────────────────────────────────────────

    def _handle_percent(self):
        if not self._scientific:
            value = self._basic.percent_of_base(self._resolved_current_value())
            if value is not None:
                self._set_entry(value, keep_as_entry=True)
                return
        self._apply_unary_to_current(UnaryOperator.PERCENT, keep_as_entry=True)

    def _handle_binary(self, op: BinaryOperator):
        if self._scientific:
            self._handle_scientific_binary(op)
            return

        try:
            accumulator = self._basic.select_operator(
                op, self._resolved_current_value(), self._entering
            )
        except CalculatorError as exc:
            self._set_error(exc)
            return

        self._entering = False
        self._just_evaluated = False
        self._set_entry(accumulator, keep_as_entry=False)

    def _handle_unary(self, op: UnaryOperator):
        keep_as_entry = self._scientific or self._basic.has_pending_operator
        self._apply_unary_to_current(op, keep_as_entry)

    def _apply_unary_to_current(self, op: UnaryOperator, keep_as_entry: bool):
        if self._scientific and not self._entering and self._closed_group_start() is not None:
            self._apply_unary_to_group(op)
            return

        try:
            result = self._provider.apply_unary(op, self._resolved_current_value())
        except CalculatorError as exc:
            self._set_error(exc)
            return

        if self._scientific and not self._entering:
            self._replace_last_number(result)
            self._set_entry(result, keep_as_entry=False)
        else:
            self._set_entry(result, keep_as_entry=keep_as_entry)

        if keep_as_entry:
            self._entering = True
            self._just_evaluated = False
        else:
            self._entering = False
            self._just_evaluated = True

    def _apply_unary_to_group(self, op: UnaryOperator):
        """Aplica ``op`` como token postfijo al grupo ``( … )`` recién cerrado."""
        start = self._closed_group_start()
        token = Token.unary(op)
        try:
            value = self._evaluator.evaluate(self._tokens[start:] + [token])
        except CalculatorError as exc:
            self._set_error(exc)
            return

        self._tokens.append(token)
        self._set_entry(value, keep_as_entry=False)
        self._entering = False
        self._just_evaluated = False

    def _handle_equals(self):
        if self._scientific:
            self._handle_scientific_equals()
            return

        entered = self._parsed_entry_value() if self._entering else None
        try:
            result = self._basic.equals(self._resolved_current_value(), entered)
        except CalculatorError as exc:
            self._set_error(exc)
            return

        if result is not None:
            self._set_entry(result, keep_as_entry=False)
        else:
            self._current_value = normalized_zero(self._resolved_current_value())
        self._entering = False
        self._just_evaluated = True

    # ── Modo científico ──────────────────────────────────────────

    def _handle_scientific_binary(self, op: BinaryOperator):
        if self._entering:
            self._commit_entry()

        if not self._tokens:
            self._tokens = [Token.number(self._current_value)]

        if self._last_token_is(TokenKind.BINARY):
            self._tokens.pop()

        self._tokens.append(Token.binary(op))
        self._just_evaluated = False

    def _handle_left_paren(self):
        if not self._scientific:
            return

        # El cero inicial no multiplica al grupo nuevo
        if not self._entering and self._tokens == [Token.number(0.0)]:
            self._tokens.clear()

        if self._entering:
            self._commit_entry()

        if self._last_token_is(TokenKind.NUMBER, TokenKind.RIGHT_PAREN, TokenKind.UNARY):
            self._tokens.append(Token.binary(BinaryOperator.MULTIPLY))

        self._tokens.append(LEFT_PAREN)
        self._open_parens += 1
        self._entering = False
        self._just_evaluated = False

    def _handle_right_paren(self):
        if not self._scientific or self._open_parens <= 0:
            return

        if self._entering:
            self._commit_entry()

        if self._last_token_is(TokenKind.LEFT_PAREN, TokenKind.BINARY):
            return

        self._tokens.append(RIGHT_PAREN)
        self._open_parens -= 1
        self._entering = False
        self._just_evaluated = False

    def _handle_scientific_equals(self):
        if self._entering:
            self._commit_entry()

        if self._last_token_is(TokenKind.BINARY):
            self._tokens.pop()

        self._tokens.extend([RIGHT_PAREN] * self._open_parens)
        self._open_parens = 0

        if not self._tokens:
            self._tokens = [Token.number(self._resolved_current_value())]

        if self._last_token_is(TokenKind.BINARY):
            self._tokens.pop()

        try:
            result = self._evaluator.evaluate(self._tokens)
        except CalculatorError as exc:
            self._set_error(exc)
            return

        self._set_entry(result, keep_as_entry=False)
        self._tokens = [Token.number(self._current_value)]
        self._entering = False
        self._just_evaluated = True

    def _commit_entry(self):
        value = self._parsed_entry_value()
        if self._last_token_is(TokenKind.NUMBER):
            # El número tecleado sustituye al resultado anterior
            self._tokens.pop()
        elif self._last_token_is(TokenKind.RIGHT_PAREN, TokenKind.UNARY):
            self._tokens.append(Token.binary(BinaryOperator.MULTIPLY))
        self._tokens.append(Token.number(value))
        self._entering = False
        self._current_value = value

    def _replace_last_number(self, value: float):
        if self._last_token_is(TokenKind.NUMBER):
            self._tokens.pop()
        self._tokens.append(Token.number(normalized_zero(value)))

    def _last_token_is(self, *kinds: TokenKind) -> bool:
        return bool(self._tokens) and self._tokens[-1].kind in kinds

    def _closed_group_start(self):
        """Índice del ``(`` del grupo que cierra la lista, o ``None``."""
        i = len(self._tokens) - 1
        while i >= 0 and self._tokens[i].kind is TokenKind.UNARY:
            i -= 1
        if i < 0 or self._tokens[i].kind is not TokenKind.RIGHT_PAREN:
            return None

        depth = 0
        for j in range(i, -1, -1):
            kind = self._tokens[j].kind
            if kind is TokenKind.RIGHT_PAREN:
                depth += 1
            elif kind is TokenKind.LEFT_PAREN:
                depth -= 1
                if depth == 0:
                    return j
        return None

    # ── Borrado y errores ────────────────────────────────────────

    def _handle_clear_entry(self):
        self._entry_text = "0"
        self._entry_value = None
        self._entering = False
        self._just_evaluated = False
        self._current_value = 0.0

        if self._scientific and self._last_token_is(TokenKind.NUMBER):
            self._tokens.pop()

    def _set_error(self, exc: CalculatorError):
        logger.debug("Error enclavado (%s): %s", exc.kind.value, exc)
        self._error = True
        self._entering = False
        self._just_evaluated = False
        self._entry_value = None
        self._basic.reset()
        self._tokens = []
        self._open_parens = 0

    def _clear_error_to_zero(self):
        self._error = False
        self._entry_text = "0"
        self._entry_value = None
        self._current_value = 0.0
        self._entering = False
        self._just_evaluated = False

        if self._scientific:
            self._tokens = [Token.number(0.0)]
            self._open_parens = 0

    def _reset_all(self):
        """AC: conserva memoria, unidad angular, 2nd y modo."""
        self._entry_text = "0"
        self._entry_value = None
        self._entering = False
        self._just_evaluated = False
        self._error = False
        self._current_value = 0.0

        self._basic.reset()
        self._tokens = [Token.number(0.0)] if self._scientific else []
        self._open_parens = 0
        self._refresh_display()

    # ── Valor actual y pantalla ──────────────────────────────────

    def _set_entry(self, value: float, keep_as_entry: bool):
        self._current_value = normalized_zero(value)
        self._entry_text = raw_number(self._current_value)
        self._entry_value = self._current_value
        if keep_as_entry:
            self._entering = True

    def _resolved_current_value(self) -> float:
        if self._entering:
            return self._parsed_entry_value()
        return self._current_value

    def _parsed_entry_value(self) -> float:
        if self._entry_value is not None:
            return self._entry_value

        candidate = self._entry_text
        if candidate in ("", "-", "+"):
            return self._current_value

        if candidate.endswith("."):
            candidate = candidate[:-1]
        if candidate in ("", "-", "+"):
            return 0.0

        if candidate.lower().endswith(("e", "e+", "e-")):
            candidate += "0"

        try:
            return float(candidate)
        except ValueError:
            return self._current_value

    def _refresh_display(self):
        can_clear = (
            self._entering
            or self._error
            or self._entry_text != "0"
            or self._basic.has_pending_operator
        )

        if self._error:
            display = ERROR_TEXT
        elif self._entering:
            self._current_value = self._parsed_entry_value()
            if math.isfinite(self._current_value):
                display = format_entry(self._entry_text)
            else:
                display = format_display(self._current_value)
        else:
            display = format_display(self._current_value)

        self._state = CalculatorState(
            display_text=display,
            memory_value=self._memory_value,
            has_memory_value=self._has_memory,
            angle_unit=self._provider.angle_unit,
            is_second_active=self._second_active,
            is_scientific_mode=self._scientific,
            scientific_tokens=tuple(self._tokens),
            can_use_clear_entry=can_clear,
        )
