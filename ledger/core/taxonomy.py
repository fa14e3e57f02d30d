"""Closed reference sets for the bet ledger.

Every enumerable value the ledger stores lives here.  The enums subclass
``str`` so members compare equal to, and serialize as, the literal values
persisted in the database and shown in the UI::

    Bookmaker.BET365 == "Bet365"        → True
    BetType("Player Prop")              → BetType.PLAYER_PROP

Unknown values are never coerced into a member here.  The normalizer decides
whether an unknown value is rejected (bookmaker) or defaulted (everything
else).
"""

from __future__ import annotations

from enum import Enum
from typing import Final, Tuple


class Bookmaker(str, Enum):
    BET365 = "Bet365"
    BETFAIR = "Betfair"
    BETUK = "BetUK"
    LADBROKES = "Ladbrokes"
    PADDYPOWER = "PaddyPower"
    SKYBET = "SkyBet"
    WILLIAMHILL = "WilliamHill"


class StakeType(str, Enum):
    NORMAL = "NORMAL"
    FREE = "FREE"       # promotional stake, nothing at risk on a loss


class BetResult(str, Enum):
    OPEN = "OPEN"
    WON = "WON"
    LOST = "LOST"
    VOID = "VOID"       # also used for cashed-out bets


class BetType(str, Enum):
    ACCUMULATOR = "Accumulator"
    BET_BUILDER = "Bet Builder"
    SUPERBOOST = "Superboost"
    PLAYER_PROP = "Player Prop"
    FT_RESULT = "FT Result"
    OTHER = "Other"


class PlayerPropMarket(str, Enum):
    SHOTS_OVER = "Shots Over"
    SHOTS_UNDER = "Shots Under"
    SOT_OVER = "SOT Over"
    SOT_UNDER = "SOT Under"
    FOULS_COMMITTED_OVER = "Fouls Committed Over"
    FOULS_WON_OVER = "Fouls Won Over"
    TACKLES_OVER = "Tackles Over"
    TO_BE_CARDED = "To Be Carded"
    AGS = "AGS"


#: Display-ordered value lists served by the reference-data endpoints.
BOOKMAKERS: Final[Tuple[str, ...]] = tuple(b.value for b in Bookmaker)
BET_TYPES: Final[Tuple[str, ...]] = tuple(t.value for t in BetType)
PLAYER_PROP_MARKETS: Final[Tuple[str, ...]] = tuple(m.value for m in PlayerPropMarket)

#: Bet types whose selection is always the type's own name.
SINGLE_SELECTION_TYPES: Final[Tuple[BetType, ...]] = (
    BetType.ACCUMULATOR,
    BetType.BET_BUILDER,
    BetType.SUPERBOOST,
)
