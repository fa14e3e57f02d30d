"""
Bet record lifecycle against the database.

Every write goes through ``ledger.core.record``: raw payload → normalized
BetRecord → row.  Derived columns (potential_return, profit) are always
recomputed here and never copied from client input.

Functions return the BuildResult alongside the row so callers can report
hard-fail field errors without exceptions.
"""

import logging
import math
from typing import Any, Dict, List, Mapping, Optional, Tuple

from sqlalchemy import or_
from sqlalchemy.orm import Session

from ledger.core.record import BetRecord, BuildResult, build_bet_record, invariant_violations, merge_bet_update
from ledger.models import Bet

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Row <-> record helpers (pure — no DB)
# ---------------------------------------------------------------------------

def _apply_record(bet: Bet, record: BetRecord) -> None:
    violations = invariant_violations(record)
    if violations:
        # Builder output always satisfies the invariants; anything else is a bug
        raise ValueError(f"Refusing to persist invalid bet: {'; '.join(violations)}")
    for column, value in record.to_columns().items():
        setattr(bet, column, value)


def _log_defaults(outcome: BuildResult, context: str) -> None:
    for field_name, defaulted in outcome.defaulted.items():
        logger.debug(
            "%s: %s %r defaulted to %r", context, field_name, defaulted.raw, defaulted.value,
        )
    if outcome.uncategorized:
        logger.info("%s: player prop without market: %r", context, outcome.record.selection)


def serialize_bet(bet: Bet) -> Dict[str, Any]:
    """JSON shape shared by the API and the dashboard."""
    return {
        "id": bet.id,
        "fixture": bet.fixture,
        "selection": bet.selection,
        "bookmaker": bet.bookmaker,
        "stakeType": bet.stake_type,
        "betType": bet.bet_type,
        "playerPropMarket": bet.player_prop_market,
        "stake": bet.stake,
        "odds": bet.odds,
        "potentialReturn": bet.potential_return,
        "result": bet.result,
        "cashOutValue": bet.cash_out_value,
        "profit": bet.profit,
        "placedAt": bet.placed_at.isoformat() if bet.placed_at else None,
    }


# ---------------------------------------------------------------------------
# Mutations
# ---------------------------------------------------------------------------

def create_bet(db: Session, owner: str, payload: Mapping[str, Any]) -> Tuple[Optional[Bet], BuildResult]:
    """Normalize and insert a bet.  Nothing is written on a hard-fail."""
    outcome = build_bet_record(payload)
    if not outcome.ok:
        return None, outcome

    bet = Bet(owner=owner)
    _apply_record(bet, outcome.record)
    db.add(bet)
    db.commit()
    db.refresh(bet)

    _log_defaults(outcome, f"bet {bet.id}")
    logger.info(
        "Bet created: %d %s @ %.2f (%s) by %s",
        bet.id, bet.selection, bet.odds, bet.bookmaker, owner,
    )
    return bet, outcome


def update_bet(db: Session, bet: Bet, changes: Mapping[str, Any]) -> BuildResult:
    """Merge a partial update into ``bet`` and re-derive every computed value."""
    outcome = merge_bet_update(bet.to_raw(), changes)
    if not outcome.ok:
        return outcome

    _apply_record(bet, outcome.record)
    db.commit()
    db.refresh(bet)

    _log_defaults(outcome, f"bet {bet.id}")
    logger.info("Bet %d updated: %s, profit %s", bet.id, bet.result, bet.profit)
    return outcome


def delete_bet(db: Session, bet: Bet) -> None:
    bet_id = bet.id
    db.delete(bet)
    db.commit()
    logger.info("Bet %d deleted", bet_id)


# ---------------------------------------------------------------------------
# Queries
# ---------------------------------------------------------------------------

def get_bet(db: Session, owner: str, bet_id: int) -> Optional[Bet]:
    return db.query(Bet).filter(Bet.id == bet_id, Bet.owner == owner).first()


def list_bets(
    db: Session,
    owner: str,
    search: Optional[str] = None,
    bookmaker: Optional[str] = None,
    result: Optional[str] = None,
    bet_type: Optional[str] = None,
    page: int = 1,
    page_size: int = 25,
) -> Dict[str, Any]:
    """Filtered, newest-first page of an owner's bets."""
    query = db.query(Bet).filter(Bet.owner == owner)

    if search:
        pattern = f"%{search.strip()}%"
        query = query.filter(or_(Bet.fixture.ilike(pattern), Bet.selection.ilike(pattern)))
    if bookmaker:
        query = query.filter(Bet.bookmaker == bookmaker)
    if result:
        query = query.filter(Bet.result == result)
    if bet_type:
        query = query.filter(Bet.bet_type == bet_type)

    total = query.count()
    bets: List[Bet] = (
        query.order_by(Bet.placed_at.desc(), Bet.id.desc())
        .offset((page - 1) * page_size)
        .limit(page_size)
        .all()
    )

    return {
        "total": total,
        "page": page,
        "page_size": page_size,
        "pages": math.ceil(total / page_size) if total else 0,
        "bets": [serialize_bet(b) for b in bets],
    }


def list_owners(db: Session) -> List[str]:
    return [row[0] for row in db.query(Bet.owner).distinct().order_by(Bet.owner).all()]
