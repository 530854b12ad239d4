from calculator_engine import CalculatorEngine
from calculator_inputs import AngleUnit
from keypad import Keypad
from number_formatting import parse_display
import sys


def _walk(sequence: str, *, scientific: bool = False, degrees: bool = False):
	engine = CalculatorEngine(
		angle_unit=AngleUnit.DEGREES if degrees else AngleUnit.RADIANS,
		scientific=scientific,
	)
	keypad = Keypad(engine)
	states = []

	for label in sequence.split():
		before = engine.display_text
		keypad.press_sequence(label)
		after = engine.display_text
		if after != before:
			states.append(after)

	return engine, states


def _display(sequence: str, **kw) -> str:
	engine, _ = _walk(sequence, **kw)
	return engine.display_text


def inspect_key_states(
	sequence: str,
	*,
	scientific: bool = False,
	degrees: bool = False,
) -> None:
	"""Imprime la pantalla tras cada tecla que la modifica."""
	engine, states = _walk(sequence, scientific=scientific, degrees=degrees)
	state = engine.state

	print("Key inspection")
	print(f"keys:           {sequence}")
	print(f"mode:           {'scientific' if scientific else 'basic'}")
	print(f"angle unit:     {state.angle_unit.value}")
	print(f"total states:   {len(states)}")

	if not states:
		print("states:         (no changes)")
	else:
		print("states:")
		for i, text in enumerate(states, start=1):
			print(f"  {i}. {text}")

	print(f"tokens:         {list(state.scientific_tokens)}")
	print(f"final text:     {state.display_text}")


def run_regressions() -> None:
	checks: list[tuple[str, bool]] = []
	expected_actual: list[tuple[str, str, str]] = []

	chained = _display("3 + 4 × 5 =")
	expected_actual.append(("basic 3 + 4 × 5 =", "35", chained))
	checks.append(("basic mode folds strictly left to right", chained == "35"))

	_, states_repeat = _walk("2 + 3 = =")
	checks.append((
		"repeated equals repeats the last operation",
		states_repeat[-2:] == ["5", "8"],
	))

	memory = _display("9 m+ Esc mr")
	checks.append(("memory survives all clear", memory == "9"))
	checks.append(("memory subtract clears to zero", _display("9 m+ Esc mr m- mr") == "0"))

	precedence = _display("( 2 + 3 ) × 4 =", scientific=True)
	expected_actual.append(("scientific ( 2 + 3 ) × 4 =", "20", precedence))
	checks.append(("scientific parentheses bind first", precedence == "20"))
	checks.append((
		"scientific multiplication before addition",
		_display("2 + 3 × 4 =", scientific=True) == "14",
	))
	checks.append((
		"power is right associative",
		_display("2 yˣ 3 yˣ 2 =", scientific=True) == "512",
	))

	_, states_power = _walk("2 yˣ 5 = 3 x√y 8 =", scientific=True)
	checks.append(("power then root pair", states_power[-1] == "2" and "32" in states_power))

	sin_deg = parse_display(_display("90 sin", scientific=True, degrees=True))
	checks.append(("sin 90° is one", abs(sin_deg - 1.0) <= 1e-9))
	checks.append(("sin π rad is zero", _display("π sin", scientific=True) == "0"))

	checks.append(("divide by zero latches error", _display("1 ÷ 0 =") == "Error"))
	checks.append(("all clear recovers from error", _display("1 ÷ 0 = AC") == "0"))
	checks.append(("operators ignored while in error", _display("1 ÷ 0 = + sin =") == "Error"))

	switching, _ = _walk("1 2 3")
	switching.set_scientific_mode(True)
	kept = switching.display_text
	Keypad(switching).press_sequence("+ 1 =")
	added = switching.display_text
	switching.set_scientific_mode(False)
	checks.append((
		"mode switches keep the displayed value",
		(kept, added, switching.display_text) == ("123", "124", "124"),
	))

	grouped = _display("1234567.5")
	expected_actual.append(("live grouping while typing", "1,234,567.5", grouped))
	checks.append(("entry keeps a trailing dot", _display("12 .") == "12."))
	checks.append(("EE entry", _display("1 EE 3 =", scientific=True) == "1,000"))
	checks.append(("large results switch to scientific notation", _display("1000000 × 1000000 =") == "1e12"))

	factorial_limit = _display("171 x!", scientific=True)
	checks.append(("factorial overflow guard", factorial_limit == "Error"))

	failed = [name for name, ok in checks if not ok]
	for name, ok in checks:
		print(f"{name}: {'OK' if ok else 'FAIL'}")

	print("\nExpected vs Actual:")
	for label, expected, actual in expected_actual:
		status = "OK" if expected == actual else "FAIL"
		print(f"- {label}: {status}")
		print(f"  expected: {expected}")
		print(f"  actual:   {actual}")
		if expected != actual:
			failed.append(label)

	if failed:
		print("\nFAILED CHECKS:")
		for name in failed:
			print(f"- {name}")
		raise SystemExit(1)

	print("\nAll regression checks passed.")


if __name__ == "__main__":
	# Uso rápido:
	#   python regression_engine_checks.py
	#   python regression_engine_checks.py --inspect "( 2 + 3 ) × 4 =" --sci
	#   python regression_engine_checks.py --inspect "90 sin" --sci --deg
	if "--inspect" in sys.argv:
		try:
			sequence = sys.argv[sys.argv.index("--inspect") + 1]
		except (ValueError, IndexError):
			raise SystemExit("Missing key sequence after --inspect")

		inspect_key_states(
			sequence,
			scientific="--sci" in sys.argv,
			degrees="--deg" in sys.argv,
		)
	else:
		run_regressions()
