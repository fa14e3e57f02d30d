"""Tests for decimal / fractional odds conversion."""

import math

import pytest

from ledger.core.odds import (
    MAX_DENOMINATOR,
    OddsFormat,
    format_decimal_odds,
    format_odds_for_display,
    normalize_odds_precision,
    parse_odds_value,
    parse_user_odds,
    to_decimal,
    to_fractional,
)


# ---------------------------------------------------------------------------
# to_fractional / to_decimal
# ---------------------------------------------------------------------------

@pytest.mark.parametrize("decimal_odds", [
    1.0, 1.01, 1.2, 1.33333, 1.5, 1.91, 2.0, 2.37, 2.5, 3.14159, 4.33, 6.5, 11.0, 26.0, 101.0,
])
def test_fraction_round_trip_within_tolerance(decimal_odds):
    assert to_decimal(to_fractional(decimal_odds)) == pytest.approx(decimal_odds, abs=1 / 100)


@pytest.mark.parametrize("decimal_odds, expected", [
    (1.0,     "0/1"),
    (2.0,     "1/1"),
    (2.5,     "3/2"),
    (1.5,     "1/2"),
    (11.0,    "10/1"),
    (1.33333, "1/3"),
    (2.75,    "7/4"),
])
def test_to_fractional_known_values(decimal_odds, expected):
    assert to_fractional(decimal_odds) == expected


@pytest.mark.parametrize("bad", [0.5, -3.0, float("nan"), float("inf")])
def test_to_fractional_degenerate(bad):
    assert to_fractional(bad) == "0/1"


def test_to_fractional_denominator_bounded():
    _, denominator = to_fractional(1.0 + math.pi).split("/")
    assert 1 <= int(denominator) <= MAX_DENOMINATOR


@pytest.mark.parametrize("text, expected", [
    ("3/2",      2.5),
    ("0/5",      1.0),
    (" 6 / 4 ",  2.5),
    ("100/1",    101.0),
])
def test_to_decimal_valid(text, expected):
    assert to_decimal(text) == pytest.approx(expected)


@pytest.mark.parametrize("text", ["5/0", "evens", "", None, "-3/2", "1.5/2", "3/2/1", "3"])
def test_to_decimal_invalid(text):
    assert to_decimal(text) is None


# ---------------------------------------------------------------------------
# parse_user_odds
# ---------------------------------------------------------------------------

@pytest.mark.parametrize("text, expected", [
    ("2.5",      2.5),
    ("2",        2.0),
    (" 1.33333 ", 1.33333),
])
def test_parse_user_odds_decimal(text, expected):
    assert parse_user_odds(text, OddsFormat.DECIMAL) == pytest.approx(expected)


@pytest.mark.parametrize("text", ["1.333333", "-2.5", "2,5", "1e3", "abc", "", None, "3/2"])
def test_parse_user_odds_decimal_rejects(text):
    assert parse_user_odds(text, OddsFormat.DECIMAL) is None


def test_parse_user_odds_fractional():
    assert parse_user_odds("6/4", "fractional") == pytest.approx(2.5)
    assert parse_user_odds("2.5", "fractional") is None


# ---------------------------------------------------------------------------
# parse_odds_value (API / CSV boundary)
# ---------------------------------------------------------------------------

@pytest.mark.parametrize("value, expected", [
    (2.5,     2.5),
    (3,       3.0),
    ("2.50",  2.5),
    ("11/4",  3.75),
    ("0.5",   0.5),   # parsed; the normalizer rejects it as below evens
])
def test_parse_odds_value(value, expected):
    assert parse_odds_value(value) == pytest.approx(expected)


@pytest.mark.parametrize("value", [None, True, "", "evens", float("nan"), "inf"])
def test_parse_odds_value_unusable(value):
    assert parse_odds_value(value) is None


# ---------------------------------------------------------------------------
# Formatting and precision
# ---------------------------------------------------------------------------

@pytest.mark.parametrize("value, expected", [
    (2.5,       "2.5"),
    (2.0,       "2"),
    (10.0,      "10"),
    (1.333333,  "1.33333"),
    (float("nan"), "0"),
    (float("inf"), "0"),
])
def test_format_decimal_odds(value, expected):
    assert format_decimal_odds(value) == expected


def test_format_odds_for_display_dispatch():
    assert format_odds_for_display(2.5, OddsFormat.FRACTIONAL) == "3/2"
    assert format_odds_for_display(2.5, "decimal") == "2.5"


def test_normalize_odds_precision():
    assert normalize_odds_precision(1.3333349) == pytest.approx(1.33333)
    assert normalize_odds_precision(2.000006) == pytest.approx(2.00001)
    assert normalize_odds_precision(float("nan")) is None
