"""Bet field normalization — raw text and numbers in, canonical values out.

Everything here is pure and total: every function accepts arbitrary raw input
(CSV cells, JSON body fields, ``None``) and never raises for bad data.

Two tiers of fields
-------------------
* **Hard-fail** fields (bookmaker, stake, odds, fixture, selection, date):
  a guess would corrupt financial figures, so unusable input is
  :class:`~ledger.core.validation.Rejected` and the caller skips the record.
* **Soft-default** fields (stake type, result, bet type, market):
  unusable input is :class:`~ledger.core.validation.Defaulted` to a
  conservative value (``NORMAL``, ``OPEN``, ``Player Prop``, ``None``) and
  processing continues.

Keyword inference
-----------------
Bet-type and player-prop-market inference are ordered ``(predicate, result)``
tables evaluated top to bottom; the first matching predicate wins.  The order
is the tie-break rule, so "Kane shots on target" resolves to an SOT market
even though it also mentions "shots".
"""

from __future__ import annotations

import math
import re
from datetime import date, datetime, timezone
from typing import Any, Callable, Final, Optional, Tuple

from ledger.core.odds import normalize_odds_precision, parse_odds_value
from ledger.core.taxonomy import (
    BetResult,
    BetType,
    Bookmaker,
    PlayerPropMarket,
    StakeType,
)
from ledger.core.validation import Accepted, Defaulted, FieldResult, Rejected

Predicate = Callable[[str], bool]

_CURRENCY_RE: Final = re.compile(r"[£$€,\s]")
_UNDER_RE: Final = re.compile(r"\bunder\b|\bu\s*\d")
_AGS_RE: Final = re.compile(r"\bags\b|anytime\s+goal\s*scorer|anytime\s+scorer")

#: Day-first formats seen in UK bookmaker exports, tried after ISO-8601.
_DATE_FORMATS: Final[Tuple[str, ...]] = (
    "%d/%m/%Y",
    "%d/%m/%y",
    "%d-%m-%Y",
    "%d %b %Y",
    "%d %B %Y",
)

_BOOKMAKERS_BY_KEY: Final = {b.value.upper(): b for b in Bookmaker}

_RESULT_SYNONYMS: Final = {
    "WIN": BetResult.WON,
    "WON": BetResult.WON,
    "LOSS": BetResult.LOST,
    "LOST": BetResult.LOST,
    "VOID": BetResult.VOID,
    "CASHED_OUT": BetResult.VOID,
    "CASHEDOUT": BetResult.VOID,
    "OPEN": BetResult.OPEN,
}


def _text(value: Any) -> str:
    return "" if value is None else str(value).strip()


# ---------------------------------------------------------------------------
# Enumerated fields
# ---------------------------------------------------------------------------


def normalize_bookmaker(raw: Any) -> Optional[Bookmaker]:
    """Exact, case-insensitive match against the closed bookmaker set.

    Only surrounding whitespace is ignored: ``"BET365" → Bet365`` and
    ``"paddypower" → PaddyPower`` but ``"bet 365" → None``.
    """
    return _BOOKMAKERS_BY_KEY.get(_text(raw).upper())


def normalize_stake_type(raw: Any) -> StakeType:
    """``FREE`` only for an explicit ``"free"``; anything else is ``NORMAL``."""
    return StakeType.FREE if _text(raw).upper() == "FREE" else StakeType.NORMAL


def normalize_result(raw: Any) -> BetResult:
    """Map settlement labels; unknown or empty input is ``OPEN``.

    ``win|won → WON``, ``loss|lost → LOST``,
    ``void|cashed out|cashed_out → VOID``.
    """
    key = re.sub(r"\s+", "_", _text(raw).upper())
    return _RESULT_SYNONYMS.get(key, BetResult.OPEN)


def canonical_selection(raw: Any) -> str:
    """Trimmed selection text; the shorthand ``"bb"`` becomes ``"Bet Builder"``."""
    selection = _text(raw)
    if selection.lower() == "bb":
        return BetType.BET_BUILDER.value
    return selection


# ---------------------------------------------------------------------------
# Bet type inference (creation time)
# ---------------------------------------------------------------------------


def _mentions_accumulator(v: str) -> bool:
    return "acca" in v or "accumulator" in v or " x " in v or " + " in v


def _mentions_builder(v: str) -> bool:
    return v == "bb" or "bet builder" in v or "builder" in v


def _is_superboost(v: str) -> bool:
    return v == "superboost"


#: Evaluated in order; no match falls back to ``Player Prop``.
BET_TYPE_RULES: Final[Tuple[Tuple[Predicate, BetType], ...]] = (
    (_mentions_accumulator, BetType.ACCUMULATOR),
    (_mentions_builder, BetType.BET_BUILDER),
    (_is_superboost, BetType.SUPERBOOST),
)


def infer_bet_type(selection: Any) -> BetType:
    """Infer the bet type from free-text selection.

    Creation-time inference only distinguishes Accumulator, Bet Builder and
    Superboost; everything else is treated as a Player Prop.
    """
    v = _text(selection).lower()
    for predicate, bet_type in BET_TYPE_RULES:
        if predicate(v):
            return bet_type
    return BetType.PLAYER_PROP


# ---------------------------------------------------------------------------
# Player prop market inference
# ---------------------------------------------------------------------------


def _is_under(v: str) -> bool:
    return _UNDER_RE.search(v) is not None


def _mentions_sot(v: str) -> bool:
    return "sot" in v or "shots on target" in v


def _mentions_shots(v: str) -> bool:
    return "shots" in v


#: Evaluated in order; first match wins.
PLAYER_PROP_MARKET_RULES: Final[Tuple[Tuple[Predicate, PlayerPropMarket], ...]] = (
    (lambda v: _mentions_sot(v) and _is_under(v), PlayerPropMarket.SOT_UNDER),
    (_mentions_sot, PlayerPropMarket.SOT_OVER),
    (lambda v: _mentions_shots(v) and _is_under(v), PlayerPropMarket.SHOTS_UNDER),
    (_mentions_shots, PlayerPropMarket.SHOTS_OVER),
    (lambda v: "fouls committed" in v, PlayerPropMarket.FOULS_COMMITTED_OVER),
    (lambda v: "fouls won" in v, PlayerPropMarket.FOULS_WON_OVER),
    (lambda v: "foul" in v, PlayerPropMarket.FOULS_COMMITTED_OVER),
    (lambda v: "tackles" in v, PlayerPropMarket.TACKLES_OVER),
    (lambda v: "carded" in v, PlayerPropMarket.TO_BE_CARDED),
    (lambda v: _AGS_RE.search(v) is not None, PlayerPropMarket.AGS),
)


def infer_player_prop_market(selection: Any) -> Optional[PlayerPropMarket]:
    """Infer the player-prop market from selection text.

    Returns ``None`` when nothing matches; callers treat that as
    "uncategorized", not as an error.

    Examples::

        infer_player_prop_market("Messi AGS")             → AGS
        infer_player_prop_market("Saka U1.5 SOT")         → SOT Under
        infer_player_prop_market("Rice 2+ tackles")       → Tackles Over
        infer_player_prop_market("random text")           → None
    """
    v = _text(selection).lower()
    if not v:
        return None
    for predicate, market in PLAYER_PROP_MARKET_RULES:
        if predicate(v):
            return market
    return None


# ---------------------------------------------------------------------------
# Numbers and dates
# ---------------------------------------------------------------------------


def clean_number(raw: Any) -> Optional[float]:
    """Parse a currency-formatted amount: ``"£1,250.50" → 1250.5``.

    Returns ``None`` unless the residual text is a finite number.
    """
    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, (int, float)):
        return float(raw) if math.isfinite(raw) else None

    residual = _CURRENCY_RE.sub("", str(raw))
    if not residual:
        return None
    try:
        parsed = float(residual)
    except ValueError:
        return None
    return parsed if math.isfinite(parsed) else None


def parse_placed_at(raw: Any) -> Optional[date]:
    """Parse a placement date and drop the time of day.

    Timezone-aware datetimes are converted to UTC first, so the stored date is
    the UTC calendar day.  Naive values are taken as UTC.
    """
    if isinstance(raw, datetime):
        parsed = raw
    elif isinstance(raw, date):
        return raw
    else:
        text = _text(raw)
        if not text:
            return None
        parsed = None
        try:
            parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
        except ValueError:
            for fmt in _DATE_FORMATS:
                try:
                    parsed = datetime.strptime(text, fmt)
                    break
                except ValueError:
                    continue
        if parsed is None:
            return None

    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc)
    return parsed.date()


# ---------------------------------------------------------------------------
# Field validators
# ---------------------------------------------------------------------------


def check_bookmaker(raw: Any, label: str = "bookmaker") -> FieldResult:
    bookmaker = normalize_bookmaker(raw)
    if bookmaker is None:
        return Rejected(f"unsupported {label} '{_text(raw)}'")
    return Accepted(bookmaker)


def check_stake(raw: Any, label: str = "stake") -> FieldResult:
    stake = clean_number(raw)
    if stake is None or stake <= 0:
        return Rejected(f"invalid {label} '{_text(raw)}'")
    return Accepted(stake)


def check_odds(raw: Any, label: str = "odds") -> FieldResult:
    """Decimal or fractional odds, stored at 5dp; below evens is rejected."""
    odds = parse_odds_value(raw)
    if odds is None or odds < 1:
        return Rejected(f"invalid {label} '{_text(raw)}'")
    return Accepted(normalize_odds_precision(odds))


def check_required_text(raw: Any, label: str) -> FieldResult:
    text = _text(raw)
    if not text:
        return Rejected(f"empty {label}")
    return Accepted(text)


def check_placed_at(raw: Any, label: str = "placedAt") -> FieldResult:
    placed_at = parse_placed_at(raw)
    if placed_at is None:
        return Rejected(f"invalid {label} '{_text(raw)}'")
    return Accepted(placed_at)


def check_stake_type(raw: Any) -> FieldResult:
    if _text(raw).upper() in (StakeType.FREE.value, StakeType.NORMAL.value):
        return Accepted(normalize_stake_type(raw))
    return Defaulted(StakeType.NORMAL, raw)


def check_result(raw: Any) -> FieldResult:
    result = normalize_result(raw)
    if result is BetResult.OPEN and _text(raw).upper() != BetResult.OPEN.value:
        return Defaulted(result, raw)
    return Accepted(result)


def check_cash_out_value(raw: Any, result: BetResult) -> FieldResult:
    """Cash-out value is only kept for VOID bets and must not be negative."""
    supplied = _text(raw) != ""
    if result is not BetResult.VOID:
        return Defaulted(None, raw) if supplied else Accepted(None)

    amount = clean_number(raw)
    if amount is None or amount < 0:
        return Defaulted(None, raw) if supplied else Accepted(None)
    return Accepted(amount)
