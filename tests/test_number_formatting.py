import math

import pytest

from number_formatting import (
    format_display,
    format_entry,
    group_thousands,
    normalized_zero,
    parse_display,
    raw_number,
)


@pytest.mark.parametrize("value, expected", [
    (0.0, "0"),
    (-0.0, "0"),
    (1e-15, "0"),
    (-1e-15, "0"),
    (42.0, "42"),
    (-1234.5, "-1,234.5"),
    (1234567.5, "1,234,567.5"),
    (0.1 + 0.2, "0.3"),
    (1 / 3, "0.3333333333"),
    (999999999999.0, "999,999,999,999"),
    (1e12, "1e12"),
    (1.5e12, "1.5e12"),
    (-2.5e15, "-2.5e15"),
    (1e-10, "0.0000000001"),
    (1e-11, "1e-11"),
    (1.25e-13, "1.25e-13"),
])
def test_format_display(value, expected):
    assert format_display(value) == expected


@pytest.mark.parametrize("value, expected", [
    (math.inf, "∞"),
    (-math.inf, "-∞"),
    (math.nan, "NaN"),
])
def test_format_display_non_finite(value, expected):
    assert format_display(value) == expected


def test_normalized_zero():
    assert normalized_zero(1e-14) == 0
    assert math.copysign(1.0, normalized_zero(-0.0)) == 1.0
    assert normalized_zero(2e-14) == 2e-14


@pytest.mark.parametrize("value, expected", [
    (0.0, "0"),
    (1234567.0, "1234567"),
    (math.pi, "3.14159265359"),
    (0.5, "0.5"),
    (-7.25, "-7.25"),
    (99999999999999.0, "99999999999999"),
    (1e14, "1e14"),
    (1e-12, "0.000000000001"),
    (5e-13, "5e-13"),
])
def test_raw_number(value, expected):
    assert raw_number(value) == expected


@pytest.mark.parametrize("raw, expected", [
    ("0", "0"),
    ("12", "12"),
    ("12.", "12."),
    ("1234567.5", "1,234,567.5"),
    ("-1234", "-1,234"),
    ("-0", "-0"),
    ("0.000", "0.000"),
    ("1e", "1e"),
    ("12345e-", "12345e-"),
    ("5e+2", "5e+2"),
])
def test_format_entry(raw, expected):
    assert format_entry(raw) == expected


@pytest.mark.parametrize("digits, expected", [
    ("", "0"),
    ("1", "1"),
    ("123", "123"),
    ("1234", "1,234"),
    ("123456", "123,456"),
    ("1234567", "1,234,567"),
])
def test_group_thousands(digits, expected):
    assert group_thousands(digits) == expected


def test_parse_display():
    assert parse_display("1,234,567.5") == 1234567.5
    assert parse_display("1.5e12") == 1.5e12
    assert parse_display("∞") == math.inf
    assert parse_display("-∞") == -math.inf
    assert math.isnan(parse_display("NaN"))
    with pytest.raises(ValueError):
        parse_display("Error")
