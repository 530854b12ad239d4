"""Capa de teclas: traduce etiquetas de botones a entradas del motor.

Resuelve los significados secundarios ("2nd"), la tecla dinámica AC/C y
la tecla de unidad angular, igual que lo haría la interfaz.
"""

from calculator_engine import CalculatorEngine
from calculator_inputs import (
    ALL_CLEAR,
    CLEAR_ENTRY,
    CLOSE_PAREN,
    CONSTANT_PI,
    DECIMAL_POINT,
    EE,
    EQUALS,
    MEMORY_ADD,
    MEMORY_CLEAR,
    MEMORY_RECALL,
    MEMORY_SUBTRACT,
    OPEN_PAREN,
    PERCENT,
    RANDOM,
    TOGGLE_ANGLE_UNIT,
    TOGGLE_SECOND,
    TOGGLE_SIGN,
    AngleUnit,
    BinaryOperator,
    CalculatorInput,
    UnaryOperator,
)

_DIGITS = "0123456789"

CLEAR_KEY = "AC"
ANGLE_KEY = "Rad/Deg"

# ── Definiciones de teclas con significado secundario ───────────
#  texto_normal -> texto_2nd

SECONDARY_KEYS = {
    "x²": "√",
    "x³": "∛x",
    "yˣ": "x√y",
    "√": "x²",
    "x√y": "yˣ",
    "log": "10ˣ",
    "sin": "sin⁻¹",
    "cos": "cos⁻¹",
    "tan": "tan⁻¹",
    "ln": "eˣ",
    "sinh": "sinh⁻¹",
    "cosh": "cosh⁻¹",
    "tanh": "tanh⁻¹",
    "eˣ": "ln",
}

_FIXED_KEYS = {
    ".": DECIMAL_POINT,
    "+/-": TOGGLE_SIGN,
    "%": PERCENT,
    "=": EQUALS,
    "CE": CLEAR_ENTRY,
    "Esc": ALL_CLEAR,
    "mc": MEMORY_CLEAR,
    "m+": MEMORY_ADD,
    "m-": MEMORY_SUBTRACT,
    "mr": MEMORY_RECALL,
    "(": OPEN_PAREN,
    ")": CLOSE_PAREN,
    "π": CONSTANT_PI,
    "pi": CONSTANT_PI,
    "Rand": RANDOM,
    "EE": EE,
    "2nd": TOGGLE_SECOND,
    ANGLE_KEY: TOGGLE_ANGLE_UNIT,
    "Rad": CalculatorInput.set_angle_unit(AngleUnit.RADIANS),
    "Deg": CalculatorInput.set_angle_unit(AngleUnit.DEGREES),
}

# Alias ASCII para escribir secuencias desde el teclado
_ALIASES = {
    "*": "×",
    "/": "÷",
    "−": "-",
    "^": "yˣ",
    "!": "x!",
}


def resolve_key(label: str) -> CalculatorInput:
    """Devuelve la entrada de una etiqueta (sin tener en cuenta "2nd")."""
    label = _ALIASES.get(label, label)

    if len(label) == 1 and label in _DIGITS:
        return CalculatorInput.digit(int(label))
    if label in _FIXED_KEYS:
        return _FIXED_KEYS[label]

    try:
        return CalculatorInput.binary(BinaryOperator(label))
    except ValueError:
        pass
    try:
        return CalculatorInput.unary(UnaryOperator(label))
    except ValueError:
        raise ValueError(f"Tecla desconocida: {label!r}") from None


def split_keys(sequence: str) -> list[str]:
    """Separa una secuencia como ``"12.5 + 3 ="`` en etiquetas.

    Los grupos de dígitos se parten en pulsaciones individuales.
    """
    labels = []
    for word in sequence.split():
        if word not in _FIXED_KEYS and all(c in _DIGITS or c == "." for c in word):
            labels.extend(word)
        else:
            labels.append(word)
    return labels


class Keypad:
    """Envía pulsaciones al motor como lo haría la interfaz."""

    def __init__(self, engine: CalculatorEngine = None):
        self.engine = engine if engine is not None else CalculatorEngine()

    @property
    def clear_title(self) -> str:
        return "C" if self.engine.state.can_use_clear_entry else "AC"

    @property
    def angle_toggle_title(self) -> str:
        """Unidad a la que cambia la tecla angular."""
        return self.engine.state.angle_unit.toggled().value

    def key_title(self, label: str) -> str:
        if label == CLEAR_KEY:
            return self.clear_title
        if label == ANGLE_KEY:
            return self.angle_toggle_title
        if self.engine.state.is_second_active:
            return SECONDARY_KEYS.get(label, label)
        return label

    def press(self, label: str) -> str:
        """Pulsa una tecla y devuelve el texto de la pantalla."""
        if label == CLEAR_KEY:
            key = CLEAR_ENTRY if self.engine.state.can_use_clear_entry else ALL_CLEAR
        elif label == ANGLE_KEY:
            key = TOGGLE_ANGLE_UNIT
        else:
            key = resolve_key(self.key_title(label))
        self.engine.apply(key)
        return self.engine.display_text

    def press_sequence(self, sequence: str) -> str:
        for label in split_keys(sequence):
            self.press(label)
        return self.engine.display_text
