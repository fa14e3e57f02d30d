"""Profit / loss for a single bet.

``None`` is a real answer here, not a failure: an OPEN bet, or a VOID bet
whose cash-out amount is unknown, has *undetermined* profit.  That is not the
same as breaking even, so aggregate views must skip ``None`` instead of
adding zero.  :func:`total_profit` does exactly that.
"""

from __future__ import annotations

from typing import Iterable, Optional

from ledger.core.taxonomy import BetResult, StakeType


def calculate_profit(
    stake: float,
    odds: Optional[float],
    result: BetResult | str,
    stake_type: StakeType | str,
    cash_out_value: Optional[float] = None,
) -> Optional[float]:
    """Net profit of a bet under its settlement result.

    Rules, in priority order:

    * ``WON``  → ``stake * odds - stake`` (``None`` if odds are unknown)
    * ``LOST`` → ``0`` for a FREE stake, else ``-stake``
    * ``VOID`` → ``cash_out_value - stake``, or ``None`` when the cash-out
      amount is unknown
    * ``OPEN`` → ``None``

    Examples::

        calculate_profit(10, 2.5, "WON", "NORMAL")      → 15.0
        calculate_profit(10, 2.5, "LOST", "FREE")       → 0
        calculate_profit(10, 2.5, "VOID", "NORMAL", 7)  → -3
    """
    if stake is None:
        return None

    result = BetResult(result)
    if result is BetResult.WON:
        if odds is None:
            return None
        return stake * odds - stake

    if result is BetResult.LOST:
        return 0 if StakeType(stake_type) is StakeType.FREE else -stake

    if result is BetResult.VOID:
        if cash_out_value is None:
            return None
        return cash_out_value - stake

    return None


def potential_return(stake: float, odds: float) -> float:
    """Total payout on a win, stake included."""
    return stake * odds


def total_profit(profits: Iterable[Optional[float]]) -> Optional[float]:
    """Sum determined profits; ``None`` when no profit is determined at all."""
    determined = [p for p in profits if p is not None]
    if not determined:
        return None
    return sum(determined)
