"""Formato de números para la pantalla de la calculadora.

Tres formas de texto:

    - ``format_display``: valor confirmado, con separador de miles y
      notación científica para magnitudes extremas.
    - ``format_entry``: número que se está tecleando, tal como se escribió
      pero con los miles agrupados.
    - ``raw_number``: texto sin agrupar con el que se vuelve a sembrar la
      entrada a partir de un valor calculado.
"""

import math

ZERO_THRESHOLD = 1e-14

DISPLAY_FRACTION_DIGITS = 10
DISPLAY_SCI_UPPER = 1e12
DISPLAY_SCI_LOWER = 1e-10

RAW_FRACTION_DIGITS = 12
RAW_SCI_UPPER = 1e14
RAW_SCI_LOWER = 1e-12


def normalized_zero(value: float) -> float:
    """Colapsa a 0 el ruido residual y el cero negativo."""
    if abs(value) <= ZERO_THRESHOLD:
        return 0.0
    return value


def format_display(value: float) -> str:
    if not math.isfinite(value):
        return _format_non_finite(value)

    value = normalized_zero(value)
    if value == 0:
        return "0"

    magnitude = abs(value)
    if magnitude >= DISPLAY_SCI_UPPER or magnitude < DISPLAY_SCI_LOWER:
        return _scientific(value, DISPLAY_FRACTION_DIGITS)

    return _strip_fraction(f"{value:,.{DISPLAY_FRACTION_DIGITS}f}")


def raw_number(value: float) -> str:
    if not math.isfinite(value):
        return repr(value)

    value = normalized_zero(value)
    if value == 0:
        return "0"

    magnitude = abs(value)
    if magnitude >= RAW_SCI_UPPER or magnitude < RAW_SCI_LOWER:
        return _scientific(value, RAW_FRACTION_DIGITS)

    return _strip_fraction(f"{value:.{RAW_FRACTION_DIGITS}f}")


def format_entry(raw: str) -> str:
    """Agrupa la parte entera de la entrada en curso.

    Con marcador de exponente el texto se deja tal cual; un punto final
    solitario se conserva.
    """
    if "e" in raw.lower():
        return raw

    sign = ""
    body = raw
    if body.startswith("-"):
        sign = "-"
        body = body[1:]
    elif body.startswith("+"):
        body = body[1:]

    integer_part, dot, fraction_part = body.partition(".")
    return sign + group_thousands(integer_part) + dot + fraction_part


def group_thousands(digits: str) -> str:
    if not digits:
        return "0"
    head = len(digits) % 3 or 3
    groups = [digits[:head]]
    groups.extend(digits[i:i + 3] for i in range(head, len(digits), 3))
    return ",".join(groups)


def parse_display(text: str) -> float:
    """Convierte un texto de pantalla de vuelta a ``float``."""
    cleaned = text.replace(",", "")
    if cleaned == "∞":
        return math.inf
    if cleaned == "-∞":
        return -math.inf
    return float(cleaned)


# ── Auxiliares ───────────────────────────────────────────────────

def _scientific(value: float, fraction_digits: int) -> str:
    mantissa, _, exponent = f"{value:.{fraction_digits}e}".partition("e")
    return f"{_strip_fraction(mantissa)}e{int(exponent)}"


def _strip_fraction(text: str) -> str:
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text


def _format_non_finite(value: float) -> str:
    if math.isnan(value):
        return "NaN"
    return "∞" if value > 0 else "-∞"
