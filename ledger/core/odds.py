"""Decimal ⇄ fractional odds conversion — the single source of truth.

Every function here is **pure**: no I/O, no logging, no side effects.
Import from this module; never reimplement odds parsing in services, the API
layer or the dashboard.

Conventions
-----------
* **Decimal odds** are the canonical storage form: the total payout per unit
  staked, stake included.  ``2.5`` means a 10.00 stake returns 25.00.
* **Fractional odds** are the UK bookmaker notation ``"N/D"``: net profit
  ``N`` per ``D`` staked.  ``"3/2"`` ⇔ ``2.5`` decimal.
* Unparseable input yields ``None``, never an exception.  Callers decide
  whether ``None`` is fatal (it is for a bet's odds).

Design decisions
----------------
* :func:`to_fractional` is a brute-force best-rational-approximation scan over
  denominators ``1..100``.  It does not reconstruct exact fractions: high
  precision or irrational decimals map to the closest "bookmaker-style"
  fraction.  The bound of 100 keeps fractions realistic (``"1/100"`` is the
  shortest price any UK book will display).
* Display never emits ``"nan"`` or ``"inf"``; non-finite values render as
  ``"0"``.

Run tests with::

    pytest tests/test_odds.py -v
"""

from __future__ import annotations

import math
import re
from enum import Enum
from typing import Final, Optional, Tuple, Union

# ---------------------------------------------------------------------------
# Module-level constants
# ---------------------------------------------------------------------------

#: Maximum fractional digits kept for decimal odds (display and storage).
MAX_DECIMAL_PLACES: Final[int] = 5

#: Multiplier used by :func:`normalize_odds_precision`.
DECIMAL_PRECISION_FACTOR: Final[int] = 10 ** MAX_DECIMAL_PLACES

#: Upper bound of the denominator scan in :func:`to_fractional`.
MAX_DENOMINATOR: Final[int] = 100

#: Early exit for the denominator scan once a fraction is effectively exact.
_EXACT_FRACTION_TOL: Final[float] = 1e-8

_FRACTION_RE: Final = re.compile(r"^(\d+)\s*/\s*(\d+)$")
_DECIMAL_INPUT_RE: Final = re.compile(r"^\d+(?:\.\d{1,5})?$")
_TRAILING_ZEROS_RE: Final = re.compile(r"\.?0+$")


class OddsFormat(str, Enum):
    DECIMAL = "decimal"
    FRACTIONAL = "fractional"


# ---------------------------------------------------------------------------
# Decimal → fractional
# ---------------------------------------------------------------------------


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _best_fraction(value: float) -> Tuple[int, int]:
    """Closest ``numerator/denominator`` to ``value`` with denominator ≤ 100.

    Ties keep the first (smallest) denominator found.  The result is reduced
    by the greatest common divisor.
    """
    if not math.isfinite(value) or value <= 0:
        return 0, 1

    best_numerator = 0
    best_denominator = 1
    smallest_error = math.inf

    for denominator in range(1, MAX_DENOMINATOR + 1):
        numerator = _round_half_up(value * denominator)
        error = abs(value - numerator / denominator)
        if error < smallest_error:
            smallest_error = error
            best_numerator = numerator
            best_denominator = denominator
            if error < _EXACT_FRACTION_TOL:
                break

    divisor = math.gcd(best_numerator, best_denominator) or 1
    return best_numerator // divisor, best_denominator // divisor


def to_fractional(decimal_odds: float) -> str:
    """Convert decimal odds to the nearest fractional string.

    Examples::

        to_fractional(2.5)    → "3/2"
        to_fractional(1.0)    → "0/1"     (degenerate: no profit)
        to_fractional(1.33333)→ "1/3"     closest fraction, not exact

    Args:
        decimal_odds: Decimal odds.  Values ``<= 1`` or non-finite values
            return the degenerate fraction ``"0/1"``.

    Returns:
        ``"N/D"`` with ``N >= 0`` and ``1 <= D <= 100``.
    """
    if not math.isfinite(decimal_odds) or decimal_odds <= 1:
        return "0/1"
    numerator, denominator = _best_fraction(decimal_odds - 1.0)
    return f"{numerator}/{denominator}"


# ---------------------------------------------------------------------------
# Fractional → decimal
# ---------------------------------------------------------------------------


def to_decimal(fractional_odds: Optional[str]) -> Optional[float]:
    """Parse strict ``"N/D"`` fractional odds into decimal odds.

    Whitespace is allowed around the slash and at the ends only.  Signs,
    decimals inside the fraction, and zero denominators yield ``None``.

    Examples::

        to_decimal("3/2")   → 2.5
        to_decimal("0/5")   → 1.0
        to_decimal("5/0")   → None
        to_decimal("evens") → None
    """
    match = _FRACTION_RE.match(str(fractional_odds or "").strip())
    if not match:
        return None

    numerator = int(match.group(1))
    denominator = int(match.group(2))
    if denominator <= 0:
        return None
    return numerator / denominator + 1.0


# ---------------------------------------------------------------------------
# User input parsing
# ---------------------------------------------------------------------------


def parse_user_odds(text: Optional[str], odds_format: Union[OddsFormat, str]) -> Optional[float]:
    """Parse odds typed into the bet form.

    Fractional mode delegates to :func:`to_decimal`.  Decimal mode accepts
    only ``digits(.digits{1,5})?``: no signs, commas, exponents or more than
    five fractional digits.
    """
    if OddsFormat(odds_format) is OddsFormat.FRACTIONAL:
        return to_decimal(text)

    normalized = str(text or "").strip()
    if not _DECIMAL_INPUT_RE.match(normalized):
        return None
    parsed = float(normalized)
    return parsed if math.isfinite(parsed) else None


def parse_odds_value(value: Union[str, float, int, None]) -> Optional[float]:
    """Lenient odds parser for API payloads and CSV cells.

    Accepts a finite number, decimal text (``"2.5"``) or strict fractional
    text (``"3/2"``).  Anything else, including booleans, yields ``None``.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value) if math.isfinite(value) else None

    text = str(value).strip()
    if not text:
        return None
    try:
        parsed = float(text)
    except ValueError:
        return to_decimal(text)
    return parsed if math.isfinite(parsed) else None


# ---------------------------------------------------------------------------
# Formatting and precision
# ---------------------------------------------------------------------------


def format_decimal_odds(decimal_odds: float) -> str:
    """Render decimal odds with at most 5 fractional digits, zeros stripped.

    ``2.5 → "2.5"``, ``2.0 → "2"``, ``1.333333 → "1.33333"``,
    ``nan → "0"``.
    """
    if decimal_odds is None or not math.isfinite(decimal_odds):
        return "0"
    return _TRAILING_ZEROS_RE.sub("", f"{decimal_odds:.{MAX_DECIMAL_PLACES}f}") or "0"


def format_odds_for_display(decimal_odds: float, odds_format: Union[OddsFormat, str]) -> str:
    if OddsFormat(odds_format) is OddsFormat.FRACTIONAL:
        return to_fractional(decimal_odds)
    return format_decimal_odds(decimal_odds)


def normalize_odds_precision(value: float) -> Optional[float]:
    """Round decimal odds to the nearest 1e-5 for storage and equality checks."""
    if value is None or not math.isfinite(value):
        return None
    return _round_half_up(value * DECIMAL_PRECISION_FACTOR) / DECIMAL_PRECISION_FACTOR
