"""Reclassification rules for bets that are already persisted.

When the canonicalization policy changes (a new bet-type taxonomy, a new
selection format) existing rows are brought in line by these rules.  They
operate on a :class:`Classification` snapshot — the three text fields the
policy owns — and return a new snapshot; the caller diffs and persists.

Two rules exist:

* :func:`retrofit_bet_type` — map legacy bet-type labels onto the six
  canonical types and apply each type's selection/market side effects.
* :func:`repair_legacy_selection` — fix known legacy player-prop text such as
  ``"Sael Kumbedi O0.5 fouls won"`` → ``"Sael Kumbedi Fouls Won Over 0.5"``.

:func:`reclassify` composes both.  Every rule is idempotent:
``reclassify(reclassify(c)) == reclassify(c)``; re-running a repair batch
converges and never oscillates.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, replace
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Final, Optional

from ledger.core.normalizer import infer_player_prop_market
from ledger.core.taxonomy import (
    SINGLE_SELECTION_TYPES,
    BetType,
    PlayerPropMarket,
)

#: ``"<player> <O|U><line> <market text>"`` as written by the old importer.
_LEGACY_PROP_RE: Final = re.compile(r"^(.*?)\s+([OU])\s*(\d+(?:\.\d+)?)\s+(.+)$", re.IGNORECASE)
_RESULT_PREFIX_RE: Final = re.compile(r"^(?:ft\s*)?result\b\s*[:-]?\s*", re.IGNORECASE)
_TO_WIN_RE: Final = re.compile(r"^(.*)\s+to\s+win$", re.IGNORECASE)
_TRAILING_WIN_RE: Final = re.compile(r"^(.*)\s+(win|won)$", re.IGNORECASE)
_WIN_WORD_RE: Final = re.compile(r"\b(win|won)\b")

_BET_TYPE_SYNONYMS: Final = {
    "accumulator": BetType.ACCUMULATOR,
    "acca": BetType.ACCUMULATOR,
    "bet builder": BetType.BET_BUILDER,
    "bb": BetType.BET_BUILDER,
    "builder": BetType.BET_BUILDER,
    "player prop": BetType.PLAYER_PROP,
    "playerprop": BetType.PLAYER_PROP,
    "superboost": BetType.SUPERBOOST,
    "super boost": BetType.SUPERBOOST,
    "sb": BetType.SUPERBOOST,
    "ft result": BetType.FT_RESULT,
    "full time result": BetType.FT_RESULT,
    "full-time result": BetType.FT_RESULT,
    "match result": BetType.FT_RESULT,
    "1x2": BetType.FT_RESULT,
    "other": BetType.OTHER,
}

_MARKETS_BY_KEY: Final = {m.value.lower(): m for m in PlayerPropMarket}


@dataclass(frozen=True)
class Classification:
    """The policy-owned fields of a stored bet, as plain strings."""

    bet_type: str = ""
    selection: str = ""
    player_prop_market: Optional[str] = None


def _clean(value: Optional[str]) -> str:
    return (value or "").strip()


def _title_case(value: str) -> str:
    return " ".join(w.capitalize() for w in value.split(" ") if w)


def _format_line(digits: str) -> str:
    """``"0.25" → "0.3"``: one decimal place, halves rounded up."""
    try:
        return str(Decimal(digits).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))
    except InvalidOperation:
        return digits


# ---------------------------------------------------------------------------
# Lookup tables
# ---------------------------------------------------------------------------


def canonicalize_bet_type(raw: Optional[str]) -> Optional[BetType]:
    """Exact-match synonym table; ``None`` for anything outside it."""
    return _BET_TYPE_SYNONYMS.get(_clean(raw).lower())


def canonical_market_name(raw: Optional[str]) -> Optional[PlayerPropMarket]:
    """Map a stored market label onto the closed market set, or ``None``."""
    value = _clean(raw).lower()
    if not value:
        return None
    if "fouls won" in value:
        return PlayerPropMarket.FOULS_WON_OVER
    if "fouls committed" in value or value in ("fouls", "foul"):
        return PlayerPropMarket.FOULS_COMMITTED_OVER
    return _MARKETS_BY_KEY.get(value)


def infer_bet_type_from_selection(selection: Optional[str]) -> Optional[BetType]:
    """Repair-time inference, aware of FT Result phrasing."""
    s = _clean(selection).lower()
    if not s:
        return None
    if s == "accumulator" or " acca" in s:
        return BetType.ACCUMULATOR
    if s in ("bb", "bet builder"):
        return BetType.BET_BUILDER
    if "superboost" in s or "super boost" in s:
        return BetType.SUPERBOOST
    if s.endswith(" to win") or _WIN_WORD_RE.search(s):
        return BetType.FT_RESULT
    return None


def normalize_ft_result_selection(selection: Optional[str]) -> str:
    """``"FT Result: arsenal won" → "Arsenal to Win"``.

    Leading ``FT Result:``/``Result:`` labels are dropped, however many are
    stacked, and an existing "to win"/"win"/"won" suffix is not duplicated.
    """
    raw = _clean(selection)
    while True:
        stripped = _RESULT_PREFIX_RE.sub("", raw, count=1).strip()
        if stripped == raw:
            break
        raw = stripped
    if not raw:
        return ""

    match = _TO_WIN_RE.match(raw) or _TRAILING_WIN_RE.match(raw)
    if match:
        raw = match.group(1).strip()
    return f"{_title_case(raw)} to Win"


# ---------------------------------------------------------------------------
# Rules
# ---------------------------------------------------------------------------


def retrofit_bet_type(bet: Classification) -> Classification:
    """Move a bet onto the six-type taxonomy.

    * A label in the synonym table maps to its canonical type.
    * An unknown, non-empty label becomes ``Other`` and the label is kept as
      the selection when the selection carries no information.
    * A missing label is inferred from the selection, else ``Player Prop``.
    """
    raw_bet_type = _clean(bet.bet_type)
    raw_selection = _clean(bet.selection)
    canonical = canonicalize_bet_type(raw_bet_type)

    if canonical is not None:
        target = canonical
    elif raw_bet_type:
        target = BetType.OTHER
    else:
        target = infer_bet_type_from_selection(raw_selection) or BetType.PLAYER_PROP

    if target is BetType.PLAYER_PROP:
        return replace(bet, bet_type=target.value)

    selection = bet.selection
    if target in SINGLE_SELECTION_TYPES:
        selection = target.value
    elif target is BetType.FT_RESULT:
        selection = normalize_ft_result_selection(raw_selection) or bet.selection
    elif target is BetType.OTHER and canonical is None:
        if raw_selection.lower() in ("", "other"):
            selection = raw_bet_type

    return Classification(bet_type=target.value, selection=selection, player_prop_market=None)


def _fouls_committed(selection: str) -> Optional[PlayerPropMarket]:
    lowered = _clean(selection).lower()
    if "foul" in lowered and "fouls won" not in lowered:
        return PlayerPropMarket.FOULS_COMMITTED_OVER
    return None


def repair_legacy_selection(bet: Classification) -> Classification:
    """Fix legacy shorthand selections and player-prop markets.

    * ``"bb"`` selections become Bet Builder bets.
    * Player props mentioning fouls (but not "fouls won") get the Fouls
      Committed market.
    * ``"<player> <O|U><line> <market>"`` is rewritten to
      ``"<player> <Market> <line>"`` with the line to one decimal place; an
      already-set canonical market wins over the market text.  When neither
      resolves, the legacy text is left alone and no market is guessed.
    * Any other player prop left without a market is re-inferred from its
      selection.

    The rewritten text never matches the legacy pattern again, and the fouls
    check is repeated on it, so a second pass changes nothing.
    """
    selection = bet.selection
    bet_type = bet.bet_type

    if _clean(selection).lower() == "bb":
        return Classification(
            bet_type=BetType.BET_BUILDER.value,
            selection=BetType.BET_BUILDER.value,
            player_prop_market=None,
        )

    if bet_type != BetType.PLAYER_PROP.value:
        return bet

    current = _fouls_committed(selection) or canonical_market_name(bet.player_prop_market)
    legacy = _LEGACY_PROP_RE.match(_clean(selection))
    if legacy:
        player = legacy.group(1).strip()
        side = legacy.group(2).upper()
        market_text = f"{legacy.group(4).strip()} {'under' if side == 'U' else 'over'}"
        current = current or infer_player_prop_market(market_text)
        if current is not None:
            selection = " ".join(p for p in (player, current.value, _format_line(legacy.group(3))) if p)
    elif current is None:
        current = infer_player_prop_market(selection)

    current = _fouls_committed(selection) or current

    return Classification(
        bet_type=bet_type,
        selection=selection,
        player_prop_market=current.value if current is not None else None,
    )


def reclassify(bet: Classification) -> Classification:
    """Apply every repair rule; idempotent."""
    return repair_legacy_selection(retrofit_bet_type(bet))
