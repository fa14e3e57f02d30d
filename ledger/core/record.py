"""The canonical bet record and the rules every mutation must respect.

A :class:`BetRecord` only ever comes out of :func:`build_bet_record` or
:func:`merge_bet_update`, both of which run every raw field through the
normalizer.  Derived values (``potential_return``, ``profit``) are properties,
so they cannot drift from the fields they are computed from and are never
taken from client input.

Invariants (checked by :func:`invariant_violations`):

* ``fixture`` and ``selection`` are non-empty
* ``stake > 0`` and ``odds >= 1``
* ``player_prop_market`` is set only on ``Player Prop`` bets
* ``cash_out_value`` is ``None`` unless ``result == VOID``
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, List, Mapping, Optional

from ledger.core.normalizer import (
    canonical_selection,
    check_bookmaker,
    check_cash_out_value,
    check_odds,
    check_placed_at,
    check_required_text,
    check_result,
    check_stake,
    check_stake_type,
    infer_bet_type,
    infer_player_prop_market,
)
from ledger.core.profit import calculate_profit, potential_return
from ledger.core.repair import (
    Classification,
    canonical_market_name,
    canonicalize_bet_type,
    retrofit_bet_type,
)
from ledger.core.taxonomy import (
    BetResult,
    BetType,
    Bookmaker,
    PlayerPropMarket,
    StakeType,
)
from ledger.core.validation import (
    Accepted,
    Defaulted,
    FieldError,
    FieldResult,
    Rejected,
)

#: Raw payload keys understood by :func:`build_bet_record`.
FIELD_KEYS = (
    "fixture",
    "selection",
    "bookmaker",
    "stakeType",
    "betType",
    "playerPropMarket",
    "stake",
    "odds",
    "result",
    "cashOutValue",
    "placedAt",
)


@dataclass
class BetRecord:
    fixture: str
    selection: str
    bookmaker: Bookmaker
    stake_type: StakeType
    bet_type: BetType
    player_prop_market: Optional[PlayerPropMarket]
    stake: float
    odds: float
    result: BetResult
    cash_out_value: Optional[float]
    placed_at: date

    @property
    def potential_return(self) -> float:
        return potential_return(self.stake, self.odds)

    @property
    def profit(self) -> Optional[float]:
        return calculate_profit(
            self.stake, self.odds, self.result, self.stake_type, self.cash_out_value
        )

    def to_raw(self) -> Dict[str, Any]:
        """Payload-shaped copy, suitable for feeding back into the builder."""
        return {
            "fixture": self.fixture,
            "selection": self.selection,
            "bookmaker": self.bookmaker.value,
            "stakeType": self.stake_type.value,
            "betType": self.bet_type.value,
            "playerPropMarket": self.player_prop_market.value if self.player_prop_market else None,
            "stake": self.stake,
            "odds": self.odds,
            "result": self.result.value,
            "cashOutValue": self.cash_out_value,
            "placedAt": self.placed_at.isoformat(),
        }

    def to_columns(self) -> Dict[str, Any]:
        """Column values for the ``bets`` table, derived values included."""
        return {
            "fixture": self.fixture,
            "selection": self.selection,
            "bookmaker": self.bookmaker.value,
            "stake_type": self.stake_type.value,
            "bet_type": self.bet_type.value,
            "player_prop_market": self.player_prop_market.value if self.player_prop_market else None,
            "stake": self.stake,
            "odds": self.odds,
            "potential_return": self.potential_return,
            "result": self.result.value,
            "cash_out_value": self.cash_out_value,
            "profit": self.profit,
            "placed_at": self.placed_at,
        }


@dataclass
class BuildResult:
    """Outcome of normalizing one raw bet.

    ``record`` is ``None`` whenever ``errors`` is non-empty.  ``defaulted``
    maps field names to the soft defaults that were substituted.
    """

    record: Optional[BetRecord] = None
    errors: List[FieldError] = field(default_factory=list)
    defaulted: Dict[str, Defaulted] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.record is not None

    @property
    def uncategorized(self) -> bool:
        """A player prop whose market could not be resolved."""
        return (
            self.record is not None
            and self.record.bet_type is BetType.PLAYER_PROP
            and self.record.player_prop_market is None
        )


# ---------------------------------------------------------------------------
# Soft fields that depend on other fields
# ---------------------------------------------------------------------------


def check_bet_type(raw: Any, selection: str) -> FieldResult:
    """Explicit labels go through the synonym table; otherwise infer."""
    bet_type = canonicalize_bet_type(None if raw is None else str(raw))
    if bet_type is not None:
        return Accepted(bet_type)
    return Defaulted(infer_bet_type(selection), raw)


def check_player_prop_market(raw: Any, bet_type: BetType, selection: str) -> FieldResult:
    supplied = raw is not None and str(raw).strip() != ""
    if bet_type is not BetType.PLAYER_PROP:
        return Defaulted(None, raw) if supplied else Accepted(None)

    market = canonical_market_name(str(raw)) if supplied else None
    if market is not None:
        return Accepted(market)
    return Defaulted(infer_player_prop_market(selection), raw)


# ---------------------------------------------------------------------------
# Build / merge
# ---------------------------------------------------------------------------


def build_bet_record(
    raw: Mapping[str, Any],
    labels: Optional[Mapping[str, str]] = None,
) -> BuildResult:
    """Normalize a raw payload into a :class:`BetRecord`.

    Every hard-fail field is checked, so one call reports all of a record's
    problems.  ``labels`` renames fields in error messages (the CSV importer
    uses its column headers).
    """
    labels = labels or {}
    outcome = BuildResult()

    def label(key: str) -> str:
        return labels.get(key, key)

    hard: Dict[str, FieldResult] = {
        "placedAt": check_placed_at(raw.get("placedAt"), label("placedAt")),
        "bookmaker": check_bookmaker(raw.get("bookmaker"), label("bookmaker")),
        "fixture": check_required_text(raw.get("fixture"), label("fixture")),
        "selection": check_required_text(raw.get("selection"), label("selection")),
        "stake": check_stake(raw.get("stake"), label("stake")),
        "odds": check_odds(raw.get("odds"), label("odds")),
    }
    for key, checked in hard.items():
        if isinstance(checked, Rejected):
            outcome.errors.append(FieldError(field=key, message=checked.reason))
    if outcome.errors:
        return outcome

    selection = canonical_selection(hard["selection"].value)
    stake_type = check_stake_type(raw.get("stakeType"))
    result = check_result(raw.get("result"))
    cash_out = check_cash_out_value(raw.get("cashOutValue"), result.value)
    bet_type = check_bet_type(raw.get("betType"), selection)
    market = check_player_prop_market(raw.get("playerPropMarket"), bet_type.value, selection)

    soft = {
        "stakeType": stake_type,
        "result": result,
        "cashOutValue": cash_out,
        "betType": bet_type,
        "playerPropMarket": market,
    }
    outcome.defaulted = {k: v for k, v in soft.items() if isinstance(v, Defaulted)}

    outcome.record = BetRecord(
        fixture=hard["fixture"].value,
        selection=selection,
        bookmaker=hard["bookmaker"].value,
        stake_type=stake_type.value,
        bet_type=bet_type.value,
        player_prop_market=market.value,
        stake=hard["stake"].value,
        odds=hard["odds"].value,
        result=result.value,
        cash_out_value=cash_out.value,
        placed_at=hard["placedAt"].value,
    )
    return outcome


def merge_bet_update(
    existing: BetRecord | Mapping[str, Any],
    changes: Mapping[str, Any],
) -> BuildResult:
    """Overlay a partial update on an existing bet and re-normalize.

    ``existing`` is a record or a raw payload-shaped mapping (stored rows may
    predate the current taxonomy).  ``potentialReturn`` and ``profit`` in
    ``changes`` are ignored; both are re-derived.  The existing cash-out value
    survives only while the merged result is VOID.

    A stored bet type outside the taxonomy (``"Double"``) is moved onto it the
    way the repair jobs would, unless the update sets a new bet type.
    """
    merged = dict(existing.to_raw() if isinstance(existing, BetRecord) else existing)
    stored_type = merged.get("betType")
    if "betType" not in changes and stored_type and canonicalize_bet_type(str(stored_type)) is None:
        retrofitted = retrofit_bet_type(
            Classification(
                bet_type=str(stored_type),
                selection=str(merged.get("selection") or ""),
                player_prop_market=merged.get("playerPropMarket"),
            )
        )
        merged.update(
            betType=retrofitted.bet_type,
            selection=retrofitted.selection,
            playerPropMarket=retrofitted.player_prop_market,
        )
    merged.update({k: v for k, v in changes.items() if k in FIELD_KEYS})
    return build_bet_record(merged)


def invariant_violations(record: BetRecord) -> List[str]:
    violations: List[str] = []
    if not record.fixture.strip():
        violations.append("fixture is empty")
    if not record.selection.strip():
        violations.append("selection is empty")
    if not record.stake > 0:
        violations.append(f"stake {record.stake!r} is not positive")
    if not record.odds >= 1:
        violations.append(f"odds {record.odds!r} are below evens")
    if record.player_prop_market is not None and record.bet_type is not BetType.PLAYER_PROP:
        violations.append(f"market {record.player_prop_market.value} on a {record.bet_type.value} bet")
    if record.cash_out_value is not None and record.result is not BetResult.VOID:
        violations.append(f"cash-out value on a {record.result.value} bet")
    return violations
