"""
Batch repair of persisted bets.

Runs the reclassification rules from ``ledger.core.repair`` over every bet of
an owner.  Records are processed independently: a failure on one bet is
logged and reported, earlier updates stay in place and later bets are still
processed.  Without ``apply`` the runners only count what would change.

Re-running either job is safe; the rules are idempotent, so a second run
reports zero rows needing update.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Dict, List

from sqlalchemy.orm import Session

from ledger.core.repair import Classification, repair_legacy_selection, retrofit_bet_type
from ledger.core.taxonomy import BetType, PlayerPropMarket
from ledger.models import Bet

logger = logging.getLogger(__name__)

Rule = Callable[[Classification], Classification]


@dataclass
class RepairSummary:
    job: str
    owner: str
    applied: bool
    scanned: int = 0
    changed: int = 0
    counts: Dict[str, int] = field(default_factory=dict)
    errors: List[str] = field(default_factory=list)

    def bump(self, key: str) -> None:
        self.counts[key] = self.counts.get(key, 0) + 1

    def to_dict(self) -> Dict:
        return {
            "job": self.job,
            "owner": self.owner,
            "applied": self.applied,
            "scanned": self.scanned,
            "changed": self.changed,
            **self.counts,
            "errors": self.errors,
            "timestamp": datetime.utcnow().isoformat(),
        }


def _classification(bet: Bet) -> Classification:
    return Classification(
        bet_type=bet.bet_type or "",
        selection=bet.selection or "",
        player_prop_market=bet.player_prop_market,
    )


def _run(
    db: Session,
    owner: str,
    job: str,
    rule: Rule,
    count: Callable[[Bet, Classification, Classification, RepairSummary], None],
    apply: bool,
) -> RepairSummary:
    summary = RepairSummary(job=job, owner=owner, applied=apply)
    bets = db.query(Bet).filter(Bet.owner == owner).order_by(Bet.placed_at.asc(), Bet.id.asc()).all()
    logger.info("Starting %s for %s: %d bets", job, owner, len(bets))

    for bet in bets:
        summary.scanned += 1
        try:
            before = _classification(bet)
            after = rule(before)
            if after == before:
                continue

            summary.changed += 1
            count(bet, before, after, summary)
            if apply:
                bet.bet_type = after.bet_type
                bet.selection = after.selection
                bet.player_prop_market = after.player_prop_market
                db.commit()
                logger.debug("Bet %d: %r -> %r", bet.id, before, after)
        except Exception as exc:
            db.rollback()
            summary.errors.append(f"Bet {bet.id}: {exc}")
            logger.error("Error repairing bet %d: %s", bet.id, exc)

    logger.info("%s done: %s", job, summary.to_dict())
    return summary


# ---------------------------------------------------------------------------
# Job 1: bet-type retrofit
# ---------------------------------------------------------------------------

def _count_retrofit(bet: Bet, before: Classification, after: Classification, s: RepairSummary) -> None:
    if after.bet_type != before.bet_type:
        s.bump("bet_type_changes")
    if after.selection != before.selection:
        s.bump("selection_changes")
    if before.player_prop_market is not None and after.player_prop_market is None:
        s.bump("markets_cleared")


def run_retrofit(db: Session, owner: str, apply: bool = False) -> RepairSummary:
    """Move an owner's bets onto the six-type bet taxonomy."""
    return _run(db, owner, "bet_type_retrofit", retrofit_bet_type, _count_retrofit, apply)


# ---------------------------------------------------------------------------
# Job 2: legacy selection repair
# ---------------------------------------------------------------------------

def _count_legacy(bet: Bet, before: Classification, after: Classification, s: RepairSummary) -> None:
    lowered = before.selection.strip().lower()
    if lowered == "bb":
        s.bump("bb_rows")
    elif (
        after.player_prop_market == PlayerPropMarket.FOULS_COMMITTED_OVER.value
        and before.player_prop_market != after.player_prop_market
    ):
        s.bump("fouls_committed_markets")
    if after.selection != before.selection and after.bet_type == BetType.PLAYER_PROP.value:
        s.bump("legacy_selections")
    if before.player_prop_market is None and after.player_prop_market is not None:
        s.bump("markets_backfilled")


def run_legacy_repair(db: Session, owner: str, apply: bool = False) -> RepairSummary:
    """Fix legacy player-prop selection text and markets for an owner."""
    return _run(db, owner, "legacy_selection_repair", repair_legacy_selection, _count_legacy, apply)
