"""Punto de entrada de la calculadora: lee teclas y muestra la pantalla."""

import logging
import sys

from calculator_engine import CalculatorEngine
from calculator_inputs import AngleUnit
from keypad import Keypad


START_SCIENTIFIC = False
START_ANGLE_UNIT = AngleUnit.RADIANS

PROMPT = "> "
HELP_TEXT = (
    "Teclas separadas por espacios, p. ej.: 12 + 3 × 4 =\n"
    "  :sci / :basic   cambia de modo\n"
    "  :q              sale"
)


def _status_line(keypad: Keypad) -> str:
    state = keypad.engine.state
    flags = [
        "SCI" if state.is_scientific_mode else "BAS",
        state.angle_unit.value,
        keypad.clear_title,
    ]
    if state.is_second_active:
        flags.append("2nd")
    if state.has_memory_value:
        flags.append("M")
    return f"{state.display_text:>24}   [{' '.join(flags)}]"


def run(lines, out=sys.stdout):
    engine = CalculatorEngine(angle_unit=START_ANGLE_UNIT, scientific=START_SCIENTIFIC)
    keypad = Keypad(engine)

    for line in lines:
        command = line.strip()
        if not command:
            continue
        if command in (":q", ":quit"):
            break
        if command == ":help":
            print(HELP_TEXT, file=out)
            continue
        if command in (":sci", ":basic"):
            engine.set_scientific_mode(command == ":sci")
        else:
            try:
                keypad.press_sequence(command)
            except ValueError as exc:
                print(exc, file=out)
                continue
        print(_status_line(keypad), file=out)


def _read_lines():
    while True:
        try:
            yield input(PROMPT)
        except EOFError:
            return


def main():
    if "--verbose" in sys.argv:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")
    print(HELP_TEXT)
    run(_read_lines())


if __name__ == "__main__":
    main()
