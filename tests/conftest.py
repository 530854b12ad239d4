import pytest

from calculator_engine import CalculatorEngine
from calculator_inputs import AngleUnit
from formula_evaluator import FormulaEvaluator, PythonMathProvider
from keypad import Keypad


@pytest.fixture
def engine():
    return CalculatorEngine()


@pytest.fixture
def sci_engine():
    return CalculatorEngine(scientific=True)


@pytest.fixture
def provider():
    return PythonMathProvider(AngleUnit.RADIANS)


@pytest.fixture
def evaluator(provider):
    return FormulaEvaluator(provider)


@pytest.fixture
def press():
    """Pulsa una secuencia de etiquetas y devuelve la pantalla."""

    def _press(engine, sequence):
        return Keypad(engine).press_sequence(sequence)

    return _press
