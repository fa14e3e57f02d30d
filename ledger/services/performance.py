"""
Profit / loss analytics.

All public functions receive a SQLAlchemy Session and return plain dicts
so they can be called from FastAPI endpoints or scripts without importing
any web-layer code.

Bets whose profit is NULL (open bets, cash-outs with an unknown amount) are
counted but never added to profit totals: an undetermined result is not a
break-even result.
"""

import logging
from typing import Dict, List, Optional

from sqlalchemy.orm import Session

from ledger.core.profit import total_profit
from ledger.models import Bet

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

def _safe_roi(profit: Optional[float], risked: float) -> Optional[float]:
    if profit is None:
        return None
    return round(profit / risked, 4) if risked > 0 else 0.0


def _win_rate(wins: int, total: int) -> float:
    return round(wins / total, 4) if total > 0 else 0.0


def _round(value: Optional[float]) -> Optional[float]:
    return round(value, 2) if value is not None else None


def _max_drawdown(bets: List[Bet]) -> float:
    """Largest peak-to-trough fall of cumulative determined profit."""
    running = peak = max_dd = 0.0
    for b in bets:
        if b.profit is None:
            continue
        running += b.profit
        peak = max(peak, running)
        max_dd = max(max_dd, peak - running)
    return round(max_dd, 2)


def _summarize(bets: List[Bet]) -> Dict:
    """Aggregate a group of bets.  Pure — works on any objects with Bet attributes."""
    determined = [b for b in bets if b.profit is not None]
    wins = sum(1 for b in bets if b.result == "WON")
    losses = sum(1 for b in bets if b.result == "LOST")
    profit = total_profit(b.profit for b in determined)
    # Free stakes put no cash at risk, so they don't count towards ROI
    risked = sum(b.stake or 0.0 for b in determined if b.stake_type != "FREE")

    return {
        "bets": len(bets),
        "open": sum(1 for b in bets if b.result == "OPEN"),
        "undetermined": len(bets) - len(determined),
        "wins": wins,
        "losses": losses,
        "win_rate": _win_rate(wins, wins + losses),
        "total_staked": _round(sum(b.stake or 0.0 for b in bets)),
        "total_profit": _round(profit),
        "roi": _safe_roi(profit, risked),
    }


# ---------------------------------------------------------------------------
# calculate_summary_stats
# ---------------------------------------------------------------------------

def calculate_summary_stats(db: Session, owner: str) -> Dict:
    """
    Ledger summary for one owner:
      - overall metrics (win rate, profit, ROI, drawdown)
      - by_bookmaker breakdown
      - by_bet_type breakdown
    """
    bets = (
        db.query(Bet)
        .filter(Bet.owner == owner)
        .order_by(Bet.placed_at.asc(), Bet.id.asc())
        .all()
    )

    if not bets:
        return {"message": "No bets recorded yet", "total_bets": 0}

    overall = _summarize(bets)
    overall["max_drawdown"] = _max_drawdown(bets)

    by_bookmaker: Dict[str, list] = {}
    by_type: Dict[str, list] = {}
    for b in bets:
        by_bookmaker.setdefault(b.bookmaker, []).append(b)
        by_type.setdefault(b.bet_type or "unknown", []).append(b)

    logger.debug("Summary for %s: %d bets, profit %s", owner, len(bets), overall["total_profit"])

    return {
        "total_bets": len(bets),
        "overall": overall,
        "by_bookmaker": {k: _summarize(v) for k, v in sorted(by_bookmaker.items())},
        "by_bet_type": {k: _summarize(v) for k, v in sorted(by_type.items())},
    }


# ---------------------------------------------------------------------------
# calculate_history
# ---------------------------------------------------------------------------

def calculate_history(db: Session, owner: str) -> Dict:
    """Cumulative P&L series over determined bets, oldest first."""
    bets = (
        db.query(Bet)
        .filter(Bet.owner == owner, Bet.profit.isnot(None))
        .order_by(Bet.placed_at.asc(), Bet.id.asc())
        .all()
    )

    cumulative = 0.0
    data_points = []
    for i, b in enumerate(bets, start=1):
        cumulative += b.profit
        data_points.append(
            {
                "bet_number": i,
                "date": b.placed_at.isoformat(),
                "bet_id": b.id,
                "bookmaker": b.bookmaker,
                "bet_type": b.bet_type,
                "profit": round(b.profit, 2),
                "cumulative_profit": round(cumulative, 2),
            }
        )

    return {"data_points": data_points}
